"""
Student enrollment toggling: single-row inserts and deletes on the
enrollments join table.
"""
import logging
import sqlite3

from core.config import CourseStatus
from core.database import Database, utc_now
from core.exceptions import (
    AlreadyEnrolled,
    CourseNotPublished,
    NotEnrolled,
    NotFoundOrForbidden,
    StorageError,
)
from models.course_models import EnrollmentStatus

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Enroll, unenroll and look up enrollment state for a (student, course) pair."""

    def __init__(self, db: Database):
        self.db = db

    def enroll(self, student_id: int, course_id: int) -> EnrollmentStatus:
        """
        Enroll a student in a published course.

        Raises:
            NotFoundOrForbidden: course does not exist
            CourseNotPublished: course is still a draft
            AlreadyEnrolled: a row already exists for this pair
        """
        course = self.db.execute_one("SELECT status FROM courses WHERE id = ?", (course_id,))
        if not course:
            raise NotFoundOrForbidden("Course not found")
        if course["status"] != CourseStatus.PUBLISHED:
            raise CourseNotPublished()

        if self.get_status(student_id, course_id).enrolled:
            raise AlreadyEnrolled()

        enrolled_at = utc_now()
        try:
            self.db.execute_write(
                "INSERT INTO enrollments (student_id, course_id, enrolled_at) VALUES (?, ?, ?)",
                (student_id, course_id, enrolled_at),
            )
        except StorageError as e:
            # Lost a race with a concurrent enroll of the same pair
            if isinstance(e.__cause__, sqlite3.IntegrityError) and self.get_status(student_id, course_id).enrolled:
                raise AlreadyEnrolled() from e
            raise

        logger.info(f"Student {student_id} enrolled in course {course_id}")
        return EnrollmentStatus(enrolled=True, enrolled_at=enrolled_at)

    def unenroll(self, student_id: int, course_id: int) -> None:
        """
        Raises:
            NotEnrolled: no enrollment row for this pair
        """
        deleted = self.db.execute_update(
            "DELETE FROM enrollments WHERE student_id = ? AND course_id = ?",
            (student_id, course_id),
        )
        if deleted == 0:
            raise NotEnrolled()

        logger.info(f"Student {student_id} unenrolled from course {course_id}")

    def get_status(self, student_id: int, course_id: int) -> EnrollmentStatus:
        row = self.db.execute_one(
            "SELECT enrolled_at FROM enrollments WHERE student_id = ? AND course_id = ?",
            (student_id, course_id),
        )
        if not row:
            return EnrollmentStatus(enrolled=False)
        return EnrollmentStatus(enrolled=True, enrolled_at=row["enrolled_at"])
