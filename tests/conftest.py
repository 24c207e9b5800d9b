"""Shared fixtures: in-memory database, users and auth headers."""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizboard.core.database import Base, get_db
from quizboard.core.security import SecurityUtils
from quizboard.main import app
from quizboard.models import User, UserRole
from quizboard.services.quizzes import quiz_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _make_user(db, email, full_name, role, avatar_url=None):
    user = User(email=email, full_name=full_name, role=role, avatar_url=avatar_url)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin(db_session):
    return _make_user(db_session, "admin@example.com", "Ada Admin", UserRole.ADMIN)


@pytest.fixture()
def teacher(db_session):
    return _make_user(db_session, "teacher@example.com", "Tariq Teacher", UserRole.TEACHER)


@pytest.fixture()
def student(db_session):
    return _make_user(
        db_session, "sam@example.com", "Sam Student", UserRole.STUDENT, "https://cdn.example.com/sam.png"
    )


@pytest.fixture()
def other_student(db_session):
    return _make_user(db_session, "riya@example.com", "Riya Learner", UserRole.STUDENT)


def auth_headers(user):
    token = SecurityUtils.create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


SAMPLE_QUESTIONS = [
    {"question": "Capital of France?", "options": ["Paris", "London", "Berlin"], "correctAnswer": "Paris"},
    {"question": "2 + 2 = ?", "options": ["3", "4", "5"], "correctAnswer": "4"},
    {"question": "CPU stands for ______", "options": ["Central Processing Unit"],
     "correctAnswer": "Central Processing Unit"},
    {"question": "Largest planet?", "options": ["Earth", "Jupiter"], "correctAnswer": "Jupiter"},
]


@pytest.fixture()
def quiz(db_session, teacher):
    return quiz_service.create_quiz(
        db_session,
        created_by=teacher.id,
        title="General Knowledge",
        questions=SAMPLE_QUESTIONS,
        duration=10,
        description="Warm-up round",
    )
