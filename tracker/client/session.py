"""
The client's session state machine.

The controller is either logged out, showing the login or create-account tab,
or logged in as a user whose tests and completions it keeps loaded. The
logged-in user is mirrored into key-value storage so a later start can resume
the session.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Union

from tracker.client.storage import (
    STORAGE_KEY_USER,
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    get_user,
    set_user,
)
from tracker.client.transport import RpcTransport, TransportError
from tracker.core.config import settings
from tracker.schemas.error import DatabaseError, InvalidPassword, NotFound, UniqueViolation
from tracker.schemas.protocol import (
    Authenticate,
    AuthenticationResponse,
    CreateUser,
    Err,
    GetTestsAndCompletions,
    TestAndCompletions,
    TestsAndCompletionsForUser,
    User,
)

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "Please enter a username and password"
INVALID_CREDENTIALS = "Invalid username or password"
USERNAME_TAKEN = "Username already taken"


class Tab(str, Enum):
    """The tabs shown while logged out."""

    LOGIN = "Login"
    CREATE_ACCOUNT = "CreateAccount"


@dataclass
class LoggedOut:
    tab: Tab = Tab.LOGIN


@dataclass
class LoggedIn:
    user: User


SessionState = Union[LoggedOut, LoggedIn]


class SessionController:
    """Drives login, account creation and loading of the user's records."""

    def __init__(
        self,
        transport: RpcTransport,
        durable_storage: KeyValueStorage,
        session_storage: KeyValueStorage,
        alert: Optional[Callable[[str], None]] = None,
    ):
        self.transport = transport
        self.durable_storage = durable_storage
        self.session_storage = session_storage
        self._alert = alert
        self.state: SessionState = LoggedOut()
        self.tests_and_completions: List[TestAndCompletions] = []
        self.error_message: Optional[str] = None
        self.alerts: List[str] = []

    @property
    def user(self) -> Optional[User]:
        return self.state.user if isinstance(self.state, LoggedIn) else None

    def alert(self, message: str) -> None:
        """Tell the user about an error that has no dedicated message."""
        logger.error(message)
        self.alerts.append(message)
        if self._alert is not None:
            self._alert(message)

    async def startup(self) -> None:
        """Resume a stored session, if there is one."""
        user = get_user(self.durable_storage) or get_user(self.session_storage)
        if user is None:
            logger.info("No stored user, starting logged out")
            return
        logger.info(f"Resuming session for {user.username!r}")
        self.state = LoggedIn(user)
        await self.refresh_tests_and_completions()

    def select_tab(self, tab: Tab) -> None:
        if isinstance(self.state, LoggedOut):
            self.state = LoggedOut(tab)
            self.error_message = None

    async def submit(self, username: str, password: str, remember_me: bool = False) -> None:
        """
        Submit the form on the current tab.

        Logs in on the login tab and creates an account on the
        create-account tab. Blank fields are rejected without contacting the
        server.
        """
        if not isinstance(self.state, LoggedOut):
            raise RuntimeError("Already logged in")
        if not username or not password:
            self.error_message = MISSING_CREDENTIALS
            return

        if self.state.tab is Tab.CREATE_ACCOUNT:
            request = CreateUser(username=username, password=password)
        else:
            request = Authenticate(username=username, password=password)
        logger.debug(f"Trying to authenticate with {request.type}")

        try:
            response = await self.transport.send(request, AuthenticationResponse)
        except TransportError as e:
            self.alert(f"Error: {e}")
            return

        if isinstance(response.result, Err):
            self._handle_error(response.result)
            return
        await self._log_in(response.result.ok, remember_me)

    async def log_in(self, username: str, password: str, remember_me: bool = False) -> None:
        self.select_tab(Tab.LOGIN)
        await self.submit(username, password, remember_me)

    async def create_account(self, username: str, password: str, remember_me: bool = False) -> None:
        self.select_tab(Tab.CREATE_ACCOUNT)
        await self.submit(username, password, remember_me)

    async def _log_in(self, user: User, remember_me: bool) -> None:
        set_user(self.durable_storage, user)
        if remember_me:
            set_user(self.session_storage, user)

        self.state = LoggedIn(user)
        self.error_message = None
        self.tests_and_completions = []
        await self.refresh_tests_and_completions()

    async def refresh_tests_and_completions(self) -> None:
        """Reload the logged-in user's tests and completions from the server."""
        user = self.user
        if user is None:
            raise RuntimeError("Cannot refresh tests and completions until the user has logged in")

        try:
            response = await self.transport.send(
                GetTestsAndCompletions(user_id=user.id), TestsAndCompletionsForUser
            )
        except TransportError as e:
            self.alert(f"Error: {e}")
            return

        if isinstance(response.result, Err):
            self._handle_error(response.result)
            return
        self.tests_and_completions = response.result.ok
        logger.debug(f"Loaded {len(self.tests_and_completions)} tests")

    def logout(self) -> None:
        """Forget the user in both stores and return to the login tab."""
        self.durable_storage.remove_item(STORAGE_KEY_USER)
        self.session_storage.remove_item(STORAGE_KEY_USER)
        self.state = LoggedOut()
        self.tests_and_completions = []
        self.error_message = None

    def _handle_error(self, result: Err) -> None:
        error = result.err
        if isinstance(error, InvalidPassword) or (
            isinstance(error, DatabaseError) and isinstance(error.error, NotFound)
        ):
            logger.warning(INVALID_CREDENTIALS)
            self.error_message = INVALID_CREDENTIALS
        elif (
            isinstance(error, DatabaseError)
            and isinstance(error.error, UniqueViolation)
            and "username" in (error.error.details or "")
        ):
            logger.warning(USERNAME_TAKEN)
            self.error_message = USERNAME_TAKEN
        else:
            self.alert(f"Error: {error!r}")


def create_session_controller(alert: Optional[Callable[[str], None]] = None) -> SessionController:
    """Build a controller for the configured server, persisting to the configured file."""
    return SessionController(
        RpcTransport(),
        FileStorage(settings.CLIENT_STORAGE_PATH),
        MemoryStorage(),
        alert,
    )
