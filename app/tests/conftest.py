import os
import tempfile
from datetime import timedelta

# Point the app at a throwaway database before anything imports it
_TEST_DB_DIR = tempfile.mkdtemp(prefix="event-booking-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-booking-api-suite")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from app.core.security import create_access_token, hash_password
from app.core.timeutils import utcnow
from app.database.db import Base, engine, get_db
from app.main import app
from app.models.events import Event
from app.models.users import User, UserRole

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    """Route the booking lock to an in-process Redis."""
    monkeypatch.setattr("app.services.bookings.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture
def no_booking_lock(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("app.services.bookings.booking_lock_enabled", lambda: False)


@pytest.fixture
def make_user(db_session: Session):
    counter = {"n": 0}
    hashes: dict[str, str] = {}

    def _make_user(name: str = "Test User", role: str = UserRole.USER.value, password: str = "secret123") -> User:
        counter["n"] += 1
        # bcrypt is slow on purpose; hash each distinct password once
        if password not in hashes:
            hashes[password] = hash_password(password)
        user = User(
            name=name,
            email=f"user{counter['n']}@example.com",
            password_hash=hashes[password],
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user) -> User:
    return make_user("Alice")


@pytest.fixture
def other_user(make_user) -> User:
    return make_user("Bob")


@pytest.fixture
def admin(make_user) -> User:
    return make_user("Admin", role=UserRole.ADMIN.value)


def auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user_id=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_event(db_session: Session):
    def _make_event(organizer: User, **overrides) -> Event:
        fields = {
            "title": "Test Event",
            "description": "A test event",
            "category": "conference",
            "location": "Main Hall",
            "date": utcnow() + timedelta(days=7),
            "time": "18:00",
            "duration": 90,
            "capacity": 10,
            "price": 0,
            "booked_count": 0,
        }
        fields.update(overrides)
        event = Event(organizer_id=organizer.id, **fields)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def headers_for():
    return auth_headers
