import pytest
from fastapi.testclient import TestClient

from finfam_api import auth, models
from finfam_api.config import Settings
from finfam_api.database import Database
from finfam_api.main import create_app

TEST_ROUNDS = 4


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "session_secret": "test-session-secret",
        "jwt_secret": "test-jwt-secret",
        "node_env": "test",
        "bcrypt_rounds": TEST_ROUNDS,
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def app(settings, database):
    return create_app(settings, database)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    def _make_user(email="user@example.com", password="password1", name="Test User", role=models.ROLE_USER):
        user = models.User(
            name=name,
            email=email,
            password=auth.get_password_hash(password, rounds=TEST_ROUNDS),
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_family(db_session):
    def _make_family(admin, name="Test Family"):
        family = models.Family(name=name, admin_id=admin.id)
        db_session.add(family)
        db_session.commit()
        db_session.refresh(family)
        return family

    return _make_family


@pytest.fixture
def token_for(settings):
    def _token_for(user):
        return auth.create_access_token(user, settings)

    return _token_for


@pytest.fixture
def headers_for(token_for):
    def _headers_for(user):
        return {"Authorization": f"Bearer {token_for(user)}"}

    return _headers_for
