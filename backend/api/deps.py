"""
Request-scoped dependencies: database, services and the caller's identity.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.templating import Jinja2Templates

from core.config import TEMPLATES_DIR, Role
from core.database import Database
from core.exceptions import NotAuthenticated, PermissionDenied
from services.course_reader import CourseReader
from services.course_writer import CourseWriter
from services.enrollment_service import EnrollmentService
from services.progress_service import ProgressService
from services.user_service import UserService

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


@dataclass
class CurrentUser:
    id: int
    role_id: int
    name: str = ""
    email: str = ""

    @property
    def role(self) -> str:
        return Role.NAMES.get(self.role_id, "unknown")


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_optional_user(request: Request) -> Optional[CurrentUser]:
    data = request.session.get("user")
    if not data:
        return None
    return CurrentUser(
        id=int(data["id"]),
        role_id=int(data["role_id"]),
        name=data.get("name", ""),
        email=data.get("email", ""),
    )


def get_current_user(user: Optional[CurrentUser] = Depends(get_optional_user)) -> CurrentUser:
    if user is None:
        raise NotAuthenticated()
    return user


def require_role(role_id: int):
    """Dependency that admits only callers with the given role."""
    def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role_id != role_id:
            raise PermissionDenied(f"Access denied. {Role.NAMES[role_id].capitalize()} access required.")
        return user
    return role_checker


require_instructor = require_role(Role.INSTRUCTOR)
require_student = require_role(Role.STUDENT)


def get_course_reader(db: Database = Depends(get_db)) -> CourseReader:
    return CourseReader(db)


def get_course_writer(db: Database = Depends(get_db)) -> CourseWriter:
    return CourseWriter(db)


def get_enrollment_service(db: Database = Depends(get_db)) -> EnrollmentService:
    return EnrollmentService(db)


def get_progress_service(db: Database = Depends(get_db)) -> ProgressService:
    return ProgressService(db)


def get_user_service(db: Database = Depends(get_db)) -> UserService:
    return UserService(db)
