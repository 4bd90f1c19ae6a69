"""
Test Tracker - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Generator

import httpx
import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SERVER_URL'] = 'http://test/'

from tracker.client.storage import MemoryStorage
from tracker.client.transport import RpcTransport
from tracker.core.dependencies import get_db
from tracker.db.base import build_engine
from tracker.main import app
from tracker.models import Base
from tracker.services.credential_service import CredentialService
from tracker.services.record_service import RecordService

fake = Faker()


@pytest.fixture
def engine():
    """A fresh in-memory database for each test"""
    test_engine = build_engine('sqlite://', poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def credentials(db_session: Session) -> CredentialService:
    return CredentialService(db_session)


@pytest.fixture
def records(db_session: Session) -> RecordService:
    return RecordService(db_session)


@pytest.fixture
def override_db(session_factory):
    """Point the app's request sessions at the test database"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_db) -> Generator[TestClient, None, None]:
    yield TestClient(app)


@pytest.fixture
async def transport(override_db) -> AsyncGenerator[RpcTransport, None]:
    """An RPC transport talking to the app in-process"""
    http_client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url='http://test')
    async with RpcTransport(client=http_client, server_url='http://test/') as rpc:
        yield rpc


@pytest.fixture
def durable_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def session_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def username() -> str:
    return fake.unique.user_name()


@pytest.fixture
def password() -> str:
    return fake.password(length=12)
