"""
Write side of the course aggregate.

Every create/update runs as one transaction: upsert the course row,
delete all lessons, objectives and prerequisites, then insert the
submitted ones again in order.
"""
import logging
import re
import sqlite3
from typing import List, Any, Optional

from core.config import CourseStatus, REQUIRE_OBJECTIVES_TO_PUBLISH
from core.database import Database, utc_now
from core.exceptions import NotFoundOrForbidden, ValidationError
from core.transaction import TransactionManager
from models.course_models import CourseInput, CoursePatch, LessonInput
from services.course_reader import fetch_course_detail
from services.course_validator import parse_id, parse_number, parse_positive_int, validate_course

logger = logging.getLogger(__name__)

# Leading list markers: "-", "*", "+", bullets and dashes, repeated
_BULLET_RE = re.compile(r"^[\-\*\+\u2022\u25cf\u25e6\u2023\u2013\u2014]+\s*")

CHILD_TABLES = ("course_lessons", "course_objectives", "course_prerequisites")


# ---------------------------
# Normalization / coercion
# ---------------------------

def normalize_list_items(lines: List[str]) -> List[str]:
    """Trim each line, strip a leading bullet or dash, drop empties."""
    items = []
    for line in lines or []:
        if line is None:
            continue
        text = _BULLET_RE.sub("", str(line).strip()).strip()
        if text:
            items.append(text)
    return items


def coerce_price(value: Any) -> float:
    """Malformed or negative prices fall back to 0."""
    price = parse_number(value)
    if price is None or price < 0:
        return 0.0
    return round(price, 2)


def coerce_duration(value: Any) -> Optional[int]:
    """Malformed, out-of-range or under-a-minute durations are stored as NULL."""
    return parse_positive_int(value)


def coerce_id(value: Any) -> Optional[int]:
    return parse_id(value)


def number_lessons(lessons: List[LessonInput]) -> List[tuple]:
    """
    Lesson rows ready for insert, numbered 1..N in submitted order.
    Lessons without a title are dropped before numbering.
    """
    rows = []
    for lesson in lessons or []:
        title = (lesson.title or "").strip()
        if not title:
            continue
        rows.append((
            len(rows) + 1,
            title,
            coerce_duration(lesson.duration),
            (lesson.description or "").strip(),
            (lesson.video_url or "").strip(),
        ))
    return rows


def patch_from_input(course: CourseInput) -> CoursePatch:
    return CoursePatch(
        title=(course.title or "").strip(),
        category_id=coerce_id(course.category),
        difficulty_id=coerce_id(course.difficulty),
        price=coerce_price(course.price),
        description=(course.description or "").strip(),
        status=course.status if course.status in CourseStatus.ALL else CourseStatus.DRAFT,
    )


class CourseWriter:
    """Transactional create/update/delete of a course and its child collections."""

    def __init__(self, db: Database):
        self.db = db
        self.tx = TransactionManager(db)

    def create(self, instructor_id: int, course: CourseInput) -> int:
        """
        Insert a course owned by instructor_id together with its children.

        Returns:
            The new course id

        Raises:
            ValidationError: category or difficulty id has no lookup row
        """
        patch = patch_from_input(course)
        now = utc_now()

        with self.tx.transaction("IMMEDIATE") as conn:
            self._check_lookups(conn, patch)
            cursor = conn.execute(
                """
                INSERT INTO courses
                (title, instructor_id, category_id, difficulty_id, price, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    patch.title,
                    instructor_id,
                    patch.category_id,
                    patch.difficulty_id,
                    patch.price,
                    patch.description,
                    patch.status,
                    now,
                    now,
                ),
            )
            course_id = cursor.lastrowid
            self._replace_children(conn, course_id, course)

        logger.info(f"Course {course_id} created by instructor {instructor_id} ({patch.status})")
        return course_id

    def update(self, course_id: int, instructor_id: int, course: CourseInput) -> None:
        """
        Overwrite a course and fully replace its children.

        Raises:
            NotFoundOrForbidden: no course with this id owned by instructor_id
            ValidationError: category or difficulty id has no lookup row
        """
        patch = patch_from_input(course)

        with self.tx.transaction("IMMEDIATE") as conn:
            self._check_lookups(conn, patch)
            self._apply_patch(conn, course_id, instructor_id, patch)
            self._replace_children(conn, course_id, course)

        logger.info(f"Course {course_id} updated by instructor {instructor_id} ({patch.status})")

    def delete(self, course_id: int, instructor_id: int) -> None:
        """Delete an owned course; children, enrollments and progress cascade."""
        with self.tx.transaction("IMMEDIATE") as conn:
            cursor = conn.execute(
                "DELETE FROM courses WHERE id = ? AND instructor_id = ?",
                (course_id, instructor_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundOrForbidden()

        logger.info(f"Course {course_id} deleted by instructor {instructor_id}")

    def set_status(
        self,
        course_id: int,
        instructor_id: int,
        status: str,
        require_objectives: bool = REQUIRE_OBJECTIVES_TO_PUBLISH,
    ) -> None:
        """
        Move a course between draft and published.

        Publishing re-validates the stored aggregate; unpublishing does not.

        Raises:
            ValidationError: unknown status, or the stored course is not publishable
            NotFoundOrForbidden: course missing or owned by someone else
        """
        if status not in CourseStatus.ALL:
            raise ValidationError([f"Status must be one of: {', '.join(CourseStatus.ALL)}"])

        with self.tx.transaction("IMMEDIATE") as conn:
            if status == CourseStatus.PUBLISHED:
                detail = fetch_course_detail(conn, course_id)
                if detail is None or detail.instructor_id != instructor_id:
                    raise NotFoundOrForbidden()
                errors = validate_course(detail.to_input(), CourseStatus.PUBLISHED, require_objectives)
                if errors:
                    raise ValidationError(errors)

            self._apply_patch(conn, course_id, instructor_id, CoursePatch(status=status))

        logger.info(f"Course {course_id} status set to {status} by instructor {instructor_id}")

    # ---------------------------
    # Statements (run on an open transaction)
    # ---------------------------

    @staticmethod
    def _check_lookups(conn: sqlite3.Connection, patch: CoursePatch) -> None:
        """Reject category/difficulty ids that have no lookup row."""
        errors = []
        if patch.category_id is not None and not conn.execute(
            "SELECT 1 FROM categories WHERE id = ?", (patch.category_id,)
        ).fetchone():
            errors.append("Course category is invalid")
        if patch.difficulty_id is not None and not conn.execute(
            "SELECT 1 FROM difficulty_levels WHERE id = ?", (patch.difficulty_id,)
        ).fetchone():
            errors.append("Difficulty level is invalid")
        if errors:
            raise ValidationError(errors)

    @staticmethod
    def _apply_patch(conn: sqlite3.Connection, course_id: int, instructor_id: int, patch: CoursePatch) -> None:
        cursor = conn.execute(
            """
            UPDATE courses
            SET title = COALESCE(?, title),
                category_id = COALESCE(?, category_id),
                difficulty_id = COALESCE(?, difficulty_id),
                price = COALESCE(?, price),
                description = COALESCE(?, description),
                status = COALESCE(?, status),
                updated_at = ?
            WHERE id = ? AND instructor_id = ?
            """,
            (
                patch.title,
                patch.category_id,
                patch.difficulty_id,
                patch.price,
                patch.description,
                patch.status,
                utc_now(),
                course_id,
                instructor_id,
            ),
        )
        if cursor.rowcount == 0:
            raise NotFoundOrForbidden()

    @staticmethod
    def _replace_children(conn: sqlite3.Connection, course_id: int, course: CourseInput) -> None:
        for table in CHILD_TABLES:
            conn.execute(f"DELETE FROM {table} WHERE course_id = ?", (course_id,))

        conn.executemany(
            """
            INSERT INTO course_lessons (course_id, lesson_no, title, duration_mins, description, video_url)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [(course_id,) + row for row in number_lessons(course.lessons)],
        )
        conn.executemany(
            "INSERT INTO course_objectives (course_id, objective) VALUES (?, ?)",
            [(course_id, item) for item in normalize_list_items(course.objectives)],
        )
        conn.executemany(
            "INSERT INTO course_prerequisites (course_id, prerequisite) VALUES (?, ?)",
            [(course_id, item) for item in normalize_list_items(course.prerequisites)],
        )
