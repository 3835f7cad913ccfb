"""
Shared fixtures: a throwaway database per test, seeded accounts and an app client.
"""
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Role
from core.database import Database
from models.course_models import CourseInput, LessonInput
from services.course_writer import CourseWriter
from services.user_service import UserService

PASSWORD = "password123"


@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "test.db")


@pytest.fixture
def user_service(db):
    # Lowest cost factor bcrypt accepts, keeps the suite fast
    return UserService(db, bcrypt_rounds=4)


@pytest.fixture
def instructor(user_service):
    return user_service.create_user("Ada Instructor", "ada@example.com", PASSWORD, Role.INSTRUCTOR)


@pytest.fixture
def other_instructor(user_service):
    return user_service.create_user("Grace Instructor", "grace@example.com", PASSWORD, Role.INSTRUCTOR)


@pytest.fixture
def student(user_service):
    return user_service.create_user("Sam Student", "sam@example.com", PASSWORD, Role.STUDENT)


@pytest.fixture
def writer(db):
    return CourseWriter(db)


def make_course(status="draft", lessons=None, **overrides) -> CourseInput:
    """A course that passes validation for either status."""
    if lessons is None:
        lessons = [
            LessonInput("Getting started", "15", "Install the tools", "https://videos.example.com/1"),
            LessonInput("First program", "30", "Write hello world", "https://videos.example.com/2"),
        ]
    fields = dict(
        title="Python Basics",
        category="1",
        difficulty="1",
        price="49.99",
        description="Learn Python from scratch",
        status=status,
        objectives=["Write scripts", "Use the REPL"],
        prerequisites=["A computer"],
        lessons=lessons,
    )
    fields.update(overrides)
    return CourseInput(**fields)


@pytest.fixture
def published_course(writer, instructor):
    return writer.create(instructor["id"], make_course(status="published"))


@pytest.fixture
def draft_course(writer, instructor):
    return writer.create(instructor["id"], make_course(title="Work in progress"))


@pytest.fixture
def client(db):
    return TestClient(create_app(database=db, validate_config=False))


def login(client, email, password=PASSWORD):
    response = client.post(
        "/signin",
        data={"email": email, "password": password},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return response


@pytest.fixture
def instructor_client(client, instructor):
    login(client, instructor["email"])
    return client


@pytest.fixture
def student_client(client, student):
    login(client, student["email"])
    return client
