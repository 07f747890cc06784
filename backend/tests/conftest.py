import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine, select
from sqlmodel.pool import StaticPool

from transcriptor.auth import hash_password
from transcriptor.database import get_session
from transcriptor.main import app
from transcriptor.models.user import User


def _login(client: TestClient, username: str, password: str) -> str:
    response = client.post(
        "/login",
        json={"username": username, "password": password},
    )
    return response.json()["access_token"]


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        # Seed admin user
        admin = User(
            name="Admin",
            username="admin",
            password_hash=hash_password("admin"),
            role="admin",
        )
        session.add(admin)
        session.commit()
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(session: Session) -> User:
    return session.exec(select(User).where(User.username == "admin")).one()


@pytest.fixture
def officer(session: Session) -> User:
    user = User(
        name="Officer Olsen",
        username="officer",
        password_hash=hash_password("officerpass"),
        role="officer",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def deaf_user(session: Session) -> User:
    user = User(
        name="Dana",
        username="dana",
        password_hash=hash_password("danapass"),
        role="deaf",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin_token(client: TestClient) -> str:
    return _login(client, "admin", "admin")


@pytest.fixture
def officer_token(client: TestClient, officer: User) -> str:
    return _login(client, "officer", "officerpass")


@pytest.fixture
def deaf_token(client: TestClient, deaf_user: User) -> str:
    return _login(client, "dana", "danapass")
