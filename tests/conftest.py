"""Pytest fixtures and configuration for Allfreedo tests."""

import os

# Keep the application engine off the on-disk default database.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import date, datetime
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from allfreedo.database.database import Base
from allfreedo.database.models import RoomieDB, RoomieRoomDB, RoomDB, UserDB
from allfreedo.database.repository import TaskRepository
from allfreedo.models.recurrence import RecurrenceRule
from allfreedo.models.user import User


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


def _make_user(user_id: str, email: str, name: str) -> User:
    now = datetime.utcnow()
    return User(id=user_id, email=email, name=name, created_at=now, updated_at=now)


@pytest.fixture(scope="function")
def db_session(test_user):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates the test user in the database.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Create test user (required for foreign key constraints)
    session.add(UserDB.from_pydantic(test_user))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def test_user_id():
    return "test-user-123"


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    return _make_user(test_user_id, "test@example.com", "Test User")


@pytest.fixture
def task_repository(db_session: Session):
    return TaskRepository(db_session)


@pytest.fixture
def make_roomie(db_session: Session):
    """Factory: create a user + roomie profile and return the roomie id."""
    counter = {"n": 0}

    def _make(name: str, user_id: str = None) -> int:
        counter["n"] += 1
        uid = user_id or f"user-{name.lower()}-{counter['n']}"
        if db_session.query(UserDB).filter(UserDB.id == uid).first() is None:
            db_session.add(UserDB.from_pydantic(_make_user(uid, f"{uid}@example.com", name)))
            # No relationship() links the two tables, so the user row must exist first.
            db_session.flush()
        roomie = RoomieDB(user_id=uid, name=name, created_at=datetime.utcnow())
        db_session.add(roomie)
        db_session.commit()
        return roomie.id

    return _make


@pytest.fixture
def make_room(db_session: Session):
    """Factory: create a room whose members join in the given order."""
    counter = {"n": 0}

    def _make(member_ids, name: str = "Flat") -> int:
        counter["n"] += 1
        now = datetime.utcnow()
        room = RoomDB(
            name=name,
            description="",
            access_code=f"CODE{counter['n']:02d}",
            created_at=now,
            created_by=member_ids[0] if member_ids else None,
        )
        db_session.add(room)
        db_session.flush()
        for offset, roomie_id in enumerate(member_ids):
            db_session.add(
                RoomieRoomDB(
                    room_id=room.id,
                    roomie_id=roomie_id,
                    joined_at=datetime(2025, 1, 1, 12, 0, offset),
                )
            )
        db_session.commit()
        return room.id

    return _make


@pytest.fixture
def sample_task_base():
    """Base task data for creating test tasks (room_id filled in by the test)."""
    return {
        "room_id": None,
        "name": "Take out trash",
        "description": "Bins go out Tuesday night",
        "weight": 2,
        "assigned_roomie_id": None,
        "scheduled_date": date(2025, 3, 4),
        "is_done": False,
        "done_date": None,
        "done_by": None,
        "task_template_id": None,
        "created_at": datetime.utcnow(),
    }


@pytest.fixture
def weekly_rule():
    return RecurrenceRule(frequency="weekly", interval=1, by_day=["monday", "friday"])


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication.

    ``client.auth_state["user"]`` is the user requests are authenticated as; tests
    switch users with ``act_as``.
    """
    from allfreedo.api.app import app
    from allfreedo.database.database import get_db
    from allfreedo.auth.dependencies import get_current_user

    state = {"user": test_user}

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_current_user():
        return state["user"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.state.room_cache.clear()

    with TestClient(app) as client:
        client.auth_state = state
        yield client

    app.dependency_overrides.clear()
    app.state.room_cache.clear()


@pytest.fixture
def act_as(test_client, db_session: Session):
    """Switch the authenticated user, creating it in the database if needed."""

    def _act_as(user_id: str, name: str = None) -> User:
        user_db = db_session.query(UserDB).filter(UserDB.id == user_id).first()
        if user_db is None:
            user_db = UserDB.from_pydantic(_make_user(user_id, f"{user_id}@example.com", name or user_id))
            db_session.add(user_db)
            db_session.commit()
        user = user_db.to_pydantic()
        test_client.auth_state["user"] = user
        return user

    return _act_as
