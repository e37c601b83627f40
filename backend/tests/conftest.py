import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskhub.core.security import create_access_token
from taskhub.db.models import Base, Priority, Project, Role, Task, TaskStatus, User
from taskhub.db.session import get_db
from taskhub.main import app
from taskhub.services.access import Caller


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    yield TestingSessionLocal
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db) -> dict:
    """Two managers, two users and one admin; m1 owns P1 with three tasks."""
    admin = User(email="admin@example.com", password_hash="pw", role=Role.ADMIN.value)
    m1 = User(email="m1@example.com", password_hash="pw", role=Role.MANAGER.value)
    m2 = User(email="m2@example.com", password_hash="pw", role=Role.MANAGER.value)
    e1 = User(email="e1@example.com", password_hash="pw", role=Role.USER.value)
    e2 = User(email="e2@example.com", password_hash="pw", role=Role.USER.value)
    db.add_all([admin, m1, m2, e1, e2])
    db.commit()

    p1 = Project(name="P1", description="first", owner_id=m1.id)
    db.add(p1)
    db.commit()

    t1 = Task(
        title="T1",
        status=TaskStatus.TODO.value,
        priority=Priority.HIGH.value,
        project_id=p1.id,
        assigned_user_id=e1.id,
    )
    t2 = Task(
        title="T2",
        status=TaskStatus.IN_PROGRESS.value,
        priority=Priority.LOW.value,
        project_id=p1.id,
        assigned_user_id=e2.id,
    )
    t3 = Task(
        title="T3",
        status=TaskStatus.TODO.value,
        priority=Priority.LOW.value,
        project_id=p1.id,
    )
    db.add_all([t1, t2, t3])
    db.commit()

    return {
        "admin": Caller.from_user(admin),
        "m1": Caller.from_user(m1),
        "m2": Caller.from_user(m2),
        "e1": Caller.from_user(e1),
        "e2": Caller.from_user(e2),
        "p1": p1.id,
        "t1": t1.id,
        "t2": t2.id,
        "t3": t3.id,
    }


@pytest.fixture
def auth_headers():
    def build(caller_or_email: Caller | str) -> dict:
        email = caller_or_email.email if isinstance(caller_or_email, Caller) else caller_or_email
        token = create_access_token(subject=email)
        return {"Authorization": f"Bearer {token}"}

    return build
