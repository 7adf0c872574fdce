from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from portal.backend.core.deps import get_db
from portal.backend.core.security import create_access_token, hash_password
from portal.backend.db.base_class import Base
from portal.backend.db.init_db import init_db
from portal.backend.db.session import make_engine, make_session_factory
from portal.backend.main import app
from portal.backend.models.assignment import Assignment
from portal.backend.models.auth_token import AuthToken
from portal.backend.models.submission import Submission
from portal.backend.models.user import User
from portal.client.api import ApiClient

PASSWORD = "password123"
HASHED_PASSWORD = hash_password(PASSWORD)

# one shared in-memory connection, reachable from the threadpool
engine = make_engine("sqlite://", poolclass=StaticPool)
TestingSessionLocal = make_session_factory(engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create the schema once and route the app to the test engine."""
    init_db(engine)
    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@dataclass
class Seed:
    teacher_id: str
    other_teacher_id: str
    student_id: str
    other_student_id: str
    teacher_token: str
    other_teacher_token: str
    student_token: str
    other_student_token: str


@pytest.fixture(autouse=True)
def seed():
    """Clean minimal dataset for each test: two teachers, two students."""
    db = TestingSessionLocal()
    try:
        # Clear tables (child -> parent)
        db.query(Submission).delete()
        db.query(AuthToken).delete()
        db.query(Assignment).delete()
        db.query(User).delete()
        db.commit()

        teacher = User(email="teacher1@example.com", name="Teacher One", role="teacher", hashed_password=HASHED_PASSWORD)
        other_teacher = User(email="teacher2@example.com", name="Teacher Two", role="teacher", hashed_password=HASHED_PASSWORD)
        student = User(email="student1@example.com", name="Student One", role="student", hashed_password=HASHED_PASSWORD)
        other_student = User(email="student2@example.com", name="Student Two", role="student", hashed_password=HASHED_PASSWORD)
        db.add_all([teacher, other_teacher, student, other_student])
        db.commit()

        yield Seed(
            teacher_id=teacher.id,
            other_teacher_id=other_teacher.id,
            student_id=student.id,
            other_student_id=other_student.id,
            teacher_token=create_access_token(db, teacher),
            other_teacher_token=create_access_token(db, other_teacher),
            student_token=create_access_token(db, student),
            other_student_token=create_access_token(db, other_student),
        )
    finally:
        db.close()


@pytest.fixture
def tomorrow():
    return datetime.now(timezone.utc) + timedelta(days=1)


@pytest.fixture
def force_due_date():
    """Rewrite an assignment's due date behind the API's back."""

    def _force(assignment_id: str, due_date: datetime) -> None:
        db = TestingSessionLocal()
        try:
            a = db.query(Assignment).filter(Assignment.id == assignment_id).first()
            assert a is not None
            a.due_date = due_date
            db.commit()
        finally:
            db.close()

    return _force


@pytest.fixture
async def make_api(anyio_backend):
    """Factory for clients wired straight into the app; all closed on teardown."""
    clients = []

    def _make(token=None) -> ApiClient:
        api = ApiClient(base_url="http://test", transport=httpx.ASGITransport(app=app))
        api.set_token(token)
        clients.append(api)
        return api

    yield _make
    for api in clients:
        await api.aclose()


@pytest.fixture
def teacher_api(make_api, seed):
    return make_api(seed.teacher_token)


@pytest.fixture
def student_api(make_api, seed):
    return make_api(seed.student_token)


@pytest.fixture()
def client():
    """Plain test client for exercising the backend's own rules."""
    return TestClient(app)
