import pytest
from fastapi.testclient import TestClient
from sortr.config import Settings
from sortr.main import create_app
from sortr.models.activity import Activity
from sortr.models.user import User
from sortr.security import create_access_token
from sortr.services.user_service import hash_password

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
ADMIN = {"username": "admin", "password": "admin123"}


@pytest.fixture(scope="function")
def settings(tmp_path):
    return Settings(
        SECRET_KEY=TEST_SECRET,
        APP_ENV="test",
        DATABASE_URL="sqlite://",
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )


@pytest.fixture(scope="function")
def app(settings, engine, session_factory):
    application = create_app(settings)
    # swap the app engine for the shared in-memory one the fixtures use
    application.state.engine.dispose()
    application.state.engine = engine
    application.state.session_factory = session_factory
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def anon_client(app):
    return TestClient(app)


@pytest.fixture(scope="function")
def client(anon_client):
    """Authenticated as the first registered user, who is an admin."""
    res = anon_client.post("/api/register", json=ADMIN)
    assert res.status_code == 201
    anon_client.headers["Authorization"] = f"Bearer {res.json()['token']}"
    return anon_client


@pytest.fixture(scope="function")
def make_user(session_factory, settings):
    """Insert a user directly and return (user_id, bearer headers)."""

    def factory(username: str, is_admin: bool = False, password: str = "secret123"):
        with session_factory() as db:
            user = User(username=username, hashed_password=hash_password(password), is_admin=is_admin)
            db.add(user)
            db.commit()
            db.refresh(user)
            token = create_access_token(settings, user)
            return user.id, {"Authorization": f"Bearer {token}"}

    return factory


@pytest.fixture(scope="function")
def activities(session_factory):
    """Callable returning all activity rows, oldest first."""

    def fetch():
        with session_factory() as db:
            rows = db.query(Activity).order_by(Activity.id).all()
            db.expunge_all()
            return rows

    return fetch
