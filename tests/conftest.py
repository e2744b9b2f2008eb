import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import create_app
from core.database import enable_sqlite_foreign_keys, get_db
from core.identity import IdentityResolver, SessionCache, create_access_token
from core.store import DocumentStore
from models.base import Base
from utils.channel_registry import ChannelRegistry
from utils.class_manager import ClassManager
from utils.ids import new_id
from utils.message_manager import MessageManager

TEST_SECRET = "test-secret"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return DocumentStore(db)


@pytest.fixture
def class_manager(store):
    return ClassManager(store)


@pytest.fixture
def channel_registry(store):
    return ChannelRegistry(store)


@pytest.fixture
def message_manager(store):
    return MessageManager(store)


@pytest.fixture
def instructor_id():
    return new_id()


@pytest.fixture
def student_id():
    return new_id()


@pytest.fixture
def other_id():
    return new_id()


@pytest.fixture
def algebra(class_manager, instructor_id):
    return class_manager.create_class(instructor_id, "Algebra I", "Linear equations and more")


@pytest.fixture
def client(session_factory):
    app = create_app(IdentityResolver(secret_key=TEST_SECRET, cache=SessionCache()))

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user_id, role="student"):
        token = create_access_token(user_id, role, secret_key=TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _headers
