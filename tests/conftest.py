from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tracker.main import app
from tracker.models.entities import StoredTask, TaskInput
from tracker.storage.database import Base, get_db


@pytest.fixture
def now():
    """Fixed clock reading; anchor becomes 2026-10-19 09:00 UTC."""
    return datetime(2026, 10, 19, 15, 30, tzinfo=timezone.utc)


@pytest.fixture
def anchor():
    return datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def chain_tasks():
    """B depends on A."""
    return [
        TaskInput(title="A", estimated_hours=2),
        TaskInput(title="B", estimated_hours=3, dependencies=["A"]),
    ]


@pytest.fixture
def release_plan():
    """Small but realistic dependency graph with due dates."""
    return [
        TaskInput(title="Deploy", estimated_hours=1, dependencies=["Test", "Write docs"]),
        TaskInput(
            title="Test",
            estimated_hours=4,
            due_date=datetime(2026, 10, 22, tzinfo=timezone.utc),
            dependencies=["Build"],
        ),
        TaskInput(title="Build", estimated_hours=6, due_date=datetime(2026, 10, 21, tzinfo=timezone.utc)),
        TaskInput(title="Write docs", estimated_hours=3),
        TaskInput(title="Design", estimated_hours=5, due_date=datetime(2026, 10, 20, tzinfo=timezone.utc)),
    ]


@pytest.fixture
def stored_tasks():
    """Tasks as the project store returns them."""
    return [
        StoredTask(id=1, title="Draft outline", project_id=1),
        StoredTask(
            id=2,
            title="Book venue",
            project_id=1,
            due_date=datetime(2026, 10, 25, tzinfo=timezone.utc),
            estimated_hours=2,
        ),
        StoredTask(id=3, title="Send invites", project_id=1, estimated_hours=1, is_completed=True),
    ]


@pytest.fixture
def db_session():
    """In-memory SQLite database shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def register(client, name="Alice", email="alice@example.com", password="secret123"):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)


@pytest.fixture
def other_auth_headers(client):
    return register(client, name="Bob", email="bob@example.com")


@pytest.fixture
def project_id(client, auth_headers):
    response = client.post("/api/v1/projects", json={"title": "Launch"}, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()["id"]
