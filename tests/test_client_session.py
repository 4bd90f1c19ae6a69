"""
Tests for the client session controller
"""
import httpx
import pytest

from tracker.client.session import (
    INVALID_CREDENTIALS,
    MISSING_CREDENTIALS,
    USERNAME_TAKEN,
    LoggedIn,
    LoggedOut,
    SessionController,
    Tab,
    create_session_controller,
)
from tracker.client.storage import STORAGE_KEY_USER, MemoryStorage, get_user, set_user
from tracker.client.transport import RpcTransport
from tracker.core.config import settings
from tracker.schemas.error import DatabaseError, HashingError, OtherDatabaseError
from tracker.schemas.protocol import (
    AuthenticationResponse,
    Err,
    Ok,
    User,
    encode_message,
)
from tracker.schemas.test import CompletionCreate, TestCreate as NewTest


@pytest.fixture
def controller(transport, durable_storage, session_storage):
    return SessionController(transport, durable_storage, session_storage)


def mock_transport(handler) -> RpcTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RpcTransport(client=client, server_url='http://test/', timeout=1.0)


class CountingHandler:
    """Answers every request with a fixed response and counts the calls"""

    def __init__(self, response: httpx.Response = None):
        self.calls = 0
        self.response = response or httpx.Response(500)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.response


class TestLogin:
    """Logging in and creating accounts against the real app"""

    async def test_create_account_logs_in(self, controller, durable_storage, session_storage):
        await controller.create_account('Alice', 'secret123')

        assert isinstance(controller.state, LoggedIn)
        assert controller.user.username == 'alice'
        assert controller.error_message is None
        assert controller.tests_and_completions == []
        assert get_user(durable_storage) == controller.user
        assert session_storage.get_item(STORAGE_KEY_USER) is None

    async def test_remember_me_writes_both_stores(self, controller, durable_storage, session_storage):
        await controller.create_account('alice', 'secret123', remember_me=True)

        assert get_user(durable_storage) == controller.user
        assert get_user(session_storage) == controller.user

    async def test_wrong_password(self, controller, credentials):
        credentials.create_user('alice', 'secret123')

        await controller.log_in('alice', 'wrong')

        assert controller.state == LoggedOut(Tab.LOGIN)
        assert controller.error_message == INVALID_CREDENTIALS
        assert controller.alerts == []

    async def test_unknown_user(self, controller):
        await controller.log_in('nobody', 'secret123')

        assert isinstance(controller.state, LoggedOut)
        assert controller.error_message == INVALID_CREDENTIALS

    async def test_username_taken(self, controller, credentials):
        credentials.create_user('alice', 'secret123')

        await controller.create_account('ALICE', 'secret123')

        assert controller.state == LoggedOut(Tab.CREATE_ACCOUNT)
        assert controller.error_message == USERNAME_TAKEN

    async def test_login_loads_records(self, controller, credentials, records):
        user = credentials.create_user('alice', 'secret123')
        test = records.add_test(user.id, NewTest(subject='Maths', date_or_id='Mock Set 1'))
        records.add_completion(test.id, CompletionCreate(achieved_mark=40, total_marks=50))

        await controller.log_in('alice', 'secret123')

        [entry] = controller.tests_and_completions
        assert entry.test.id == test.id
        assert [c.achieved_mark for c in entry.completions] == [40]

    @pytest.mark.parametrize('username, password', [('', 'secret123'), ('alice', ''), ('', '')])
    async def test_blank_fields_never_reach_the_server(
        self, username, password, durable_storage, session_storage
    ):
        handler = CountingHandler()
        controller = SessionController(mock_transport(handler), durable_storage, session_storage)

        await controller.log_in(username, password)

        assert handler.calls == 0
        assert controller.error_message == MISSING_CREDENTIALS
        assert isinstance(controller.state, LoggedOut)

    async def test_select_tab_clears_error(self, controller):
        await controller.log_in('', '')

        controller.select_tab(Tab.CREATE_ACCOUNT)

        assert controller.state == LoggedOut(Tab.CREATE_ACCOUNT)
        assert controller.error_message is None


class TestStartup:
    """Resuming a stored session"""

    async def test_no_stored_user_stays_logged_out(self, controller):
        await controller.startup()

        assert controller.state == LoggedOut()

    async def test_restores_from_durable_storage(self, controller, credentials, records, durable_storage):
        user = credentials.create_user('alice', 'secret123')
        records.add_test(user.id, NewTest(subject='Maths', date_or_id='Mock Set 1'))
        set_user(durable_storage, user)

        await controller.startup()

        assert controller.state == LoggedIn(user)
        assert len(controller.tests_and_completions) == 1

    async def test_falls_back_to_session_storage(self, controller, credentials, session_storage):
        user = credentials.create_user('alice', 'secret123')
        set_user(session_storage, user)

        await controller.startup()

        assert controller.state == LoggedIn(user)
        assert controller.tests_and_completions == []

    async def test_corrupt_stored_user_is_ignored(self, controller, durable_storage):
        durable_storage.set_item(STORAGE_KEY_USER, '{"id": 1')

        await controller.startup()

        assert isinstance(controller.state, LoggedOut)


class TestFailures:
    """Errors that end in an alert"""

    async def test_transport_error_alerts(self, durable_storage, session_storage):
        def handler(request):
            raise httpx.ConnectTimeout('timed out', request=request)

        alerts = []
        controller = SessionController(
            mock_transport(handler), durable_storage, session_storage, alert=alerts.append
        )

        await controller.log_in('alice', 'secret123')

        assert isinstance(controller.state, LoggedOut)
        assert len(alerts) == 1
        assert alerts[0].startswith('Error:')
        assert controller.alerts == alerts

    async def test_server_error_status_alerts(self, durable_storage, session_storage):
        controller = SessionController(
            mock_transport(CountingHandler(httpx.Response(500))), durable_storage, session_storage
        )

        await controller.log_in('alice', 'secret123')

        assert isinstance(controller.state, LoggedOut)
        assert len(controller.alerts) == 1

    async def test_undecodable_response_alerts(self, durable_storage, session_storage):
        controller = SessionController(
            mock_transport(CountingHandler(httpx.Response(200, text='garbage'))),
            durable_storage,
            session_storage,
        )

        await controller.log_in('alice', 'secret123')

        assert len(controller.alerts) == 1

    async def test_other_business_error_alerts(self, durable_storage, session_storage):
        error = DatabaseError(error=OtherDatabaseError(message='connection refused'))
        body = encode_message(AuthenticationResponse(result=Err(err=error)))
        controller = SessionController(
            mock_transport(CountingHandler(httpx.Response(200, text=body))),
            durable_storage,
            session_storage,
        )

        await controller.log_in('alice', 'secret123')

        assert isinstance(controller.state, LoggedOut)
        assert controller.error_message is None
        assert 'connection refused' in controller.alerts[0]

    async def test_hashing_error_alerts(self, durable_storage, session_storage):
        body = encode_message(AuthenticationResponse(result=Err(err=HashingError(message='bad salt'))))
        controller = SessionController(
            mock_transport(CountingHandler(httpx.Response(200, text=body))),
            durable_storage,
            session_storage,
        )

        await controller.create_account('alice', 'secret123')

        assert 'bad salt' in controller.alerts[0]

    async def test_unexpected_response_variant_alerts(self, durable_storage, session_storage):
        user = User(id='user_abc', username='alice')
        body = encode_message(AuthenticationResponse(result=Ok[User](ok=user)))
        set_user(durable_storage, user)
        controller = SessionController(
            mock_transport(CountingHandler(httpx.Response(200, text=body))),
            durable_storage,
            session_storage,
        )

        await controller.startup()

        assert controller.state == LoggedIn(user)
        assert controller.tests_and_completions == []
        assert 'unexpected response' in controller.alerts[0]


class TestLogout:
    """Tests for logout"""

    async def test_logout_clears_storage(self, controller, durable_storage, session_storage):
        await controller.create_account('alice', 'secret123', remember_me=True)

        controller.logout()

        assert controller.state == LoggedOut()
        assert controller.tests_and_completions == []
        assert durable_storage.get_item(STORAGE_KEY_USER) is None
        assert session_storage.get_item(STORAGE_KEY_USER) is None

    async def test_refresh_requires_login(self, controller):
        with pytest.raises(RuntimeError):
            await controller.refresh_tests_and_completions()


async def test_default_controller_uses_configured_storage(monkeypatch, tmp_path):
    path = str(tmp_path / 'storage.json')
    monkeypatch.setattr(settings, 'CLIENT_STORAGE_PATH', path)

    controller = create_session_controller()
    try:
        assert controller.durable_storage.path == path
        assert isinstance(controller.session_storage, MemoryStorage)
        assert controller.transport.server_url == settings.SERVER_URL
    finally:
        await controller.transport.aclose()
