"""
Lesson completion records for enrolled students.
"""
import logging

from core.database import Database, utc_now
from core.exceptions import NotEnrolled, NotFoundOrForbidden
from core.transaction import TransactionManager
from models.course_models import ProgressSnapshot, progress_percent

logger = logging.getLogger(__name__)


class ProgressService:
    """Marks lessons complete/incomplete and reports the resulting progress."""

    def __init__(self, db: Database):
        self.db = db
        self.tx = TransactionManager(db)

    def complete_lesson(self, student_id: int, course_id: int, lesson_id: int) -> ProgressSnapshot:
        return self._set_completed(student_id, course_id, lesson_id, True)

    def reset_lesson(self, student_id: int, course_id: int, lesson_id: int) -> ProgressSnapshot:
        return self._set_completed(student_id, course_id, lesson_id, False)

    def get_progress(self, student_id: int, course_id: int) -> ProgressSnapshot:
        with self.tx.transaction() as conn:
            return self._snapshot(conn, student_id, course_id)

    def _set_completed(self, student_id: int, course_id: int, lesson_id: int, completed: bool) -> ProgressSnapshot:
        """
        Raises:
            NotEnrolled: student is not enrolled in the course
            NotFoundOrForbidden: lesson does not belong to the course
        """
        with self.tx.transaction("IMMEDIATE") as conn:
            enrolled = conn.execute(
                "SELECT 1 FROM enrollments WHERE student_id = ? AND course_id = ?",
                (student_id, course_id),
            ).fetchone()
            if not enrolled:
                raise NotEnrolled()

            lesson = conn.execute(
                "SELECT id FROM course_lessons WHERE id = ? AND course_id = ?",
                (lesson_id, course_id),
            ).fetchone()
            if not lesson:
                raise NotFoundOrForbidden("Lesson not found")

            conn.execute(
                """
                INSERT INTO lesson_progress (student_id, course_id, lesson_id, completed, completed_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (student_id, lesson_id)
                DO UPDATE SET completed = excluded.completed, completed_at = excluded.completed_at
                """,
                (student_id, course_id, lesson_id, int(completed), utc_now() if completed else None),
            )
            snapshot = self._snapshot(conn, student_id, course_id)

        logger.debug(
            f"Student {student_id} lesson {lesson_id} completed={completed}: "
            f"{snapshot.completed_lessons}/{snapshot.total_lessons}"
        )
        return snapshot

    @staticmethod
    def _snapshot(conn, student_id: int, course_id: int) -> ProgressSnapshot:
        row = conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM course_lessons WHERE course_id = ?) AS total,
                (SELECT COUNT(*) FROM lesson_progress
                  WHERE course_id = ? AND student_id = ? AND completed = 1) AS completed
            """,
            (course_id, course_id, student_id),
        ).fetchone()
        return ProgressSnapshot(
            completed_lessons=row["completed"],
            total_lessons=row["total"],
            progress_percent=progress_percent(row["completed"], row["total"]),
        )
