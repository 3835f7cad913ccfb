"""
Read side of the course aggregate: a course with its ordered lessons,
objectives and prerequisites, enrollment counts and per-student progress.

All reads of one aggregate happen inside a single transaction so a
concurrent writer's delete-then-insert is never observed half done.
"""
import logging
import sqlite3
from typing import Optional, List, Dict, Any, Tuple

from core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, CourseStatus
from core.database import Database
from core.exceptions import NotFoundOrForbidden
from core.transaction import TransactionManager
from models.course_models import (
    CourseSummary,
    CourseDetail,
    Lesson,
    Page,
    StudentCourse,
    progress_percent,
)

logger = logging.getLogger(__name__)

COURSE_SELECT = """
    SELECT
        c.*,
        u.name AS instructor_name,
        cat.name AS category_name,
        dl.name AS difficulty_name,
        (SELECT COUNT(*) FROM enrollments e WHERE e.course_id = c.id) AS enrollment_count,
        (SELECT COUNT(*) FROM course_lessons cl WHERE cl.course_id = c.id) AS lesson_count
    FROM courses c
    LEFT JOIN users u ON c.instructor_id = u.id
    LEFT JOIN categories cat ON c.category_id = cat.id
    LEFT JOIN difficulty_levels dl ON c.difficulty_id = dl.id
"""


def _summary_fields(row: sqlite3.Row) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "title": row["title"],
        "instructor_id": row["instructor_id"],
        "status": row["status"],
        "price": row["price"],
        "description": row["description"],
        "category_id": row["category_id"],
        "difficulty_id": row["difficulty_id"],
        "instructor_name": row["instructor_name"],
        "category_name": row["category_name"],
        "difficulty_name": row["difficulty_name"],
        "enrollment_count": row["enrollment_count"],
        "lesson_count": row["lesson_count"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }


def fetch_course_detail(
    conn: sqlite3.Connection,
    course_id: int,
    student_id: Optional[int] = None,
) -> Optional[CourseDetail]:
    """
    Assemble the aggregate on an open connection.

    Returns None when no course has this id. A course with empty child
    collections is returned as-is (valid for drafts).
    """
    row = conn.execute(COURSE_SELECT + " WHERE c.id = ?", (course_id,)).fetchone()
    if not row:
        return None

    detail = CourseDetail(**_summary_fields(row))

    lesson_rows = conn.execute(
        """
        SELECT cl.id, cl.lesson_no, cl.title, cl.duration_mins, cl.description, cl.video_url,
               COALESCE(lp.completed, 0) AS completed
        FROM course_lessons cl
        LEFT JOIN lesson_progress lp ON lp.lesson_id = cl.id AND lp.student_id = ?
        WHERE cl.course_id = ?
        ORDER BY cl.lesson_no
        """,
        (student_id, course_id),
    ).fetchall()
    detail.lessons = [
        Lesson(
            id=r["id"],
            lesson_no=r["lesson_no"],
            title=r["title"],
            duration_mins=r["duration_mins"],
            description=r["description"],
            video_url=r["video_url"],
            completed=bool(r["completed"]),
        )
        for r in lesson_rows
    ]

    detail.objectives = [
        r["objective"]
        for r in conn.execute(
            "SELECT objective FROM course_objectives WHERE course_id = ? ORDER BY id",
            (course_id,),
        )
    ]
    detail.prerequisites = [
        r["prerequisite"]
        for r in conn.execute(
            "SELECT prerequisite FROM course_prerequisites WHERE course_id = ? ORDER BY id",
            (course_id,),
        )
    ]

    if student_id is not None:
        completed = sum(1 for lesson in detail.lessons if lesson.completed)
        detail.completed_lessons = completed
        detail.progress_percent = progress_percent(completed, len(detail.lessons))
        detail.enrolled = conn.execute(
            "SELECT 1 FROM enrollments WHERE student_id = ? AND course_id = ?",
            (student_id, course_id),
        ).fetchone() is not None

    return detail


def normalize_paging(page: Any, page_size: Any) -> Tuple[int, int]:
    """Clamp page/page_size query values into a usable range."""
    try:
        page = max(1, int(page))
    except (TypeError, ValueError):
        page = 1
    try:
        page_size = int(page_size)
    except (TypeError, ValueError):
        page_size = DEFAULT_PAGE_SIZE
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page, min(page_size, MAX_PAGE_SIZE)


class CourseReader:
    """Builds course read models for templates and JSON responses."""

    def __init__(self, db: Database):
        self.db = db
        self.tx = TransactionManager(db)

    def get_course(self, course_id: int, student_id: Optional[int] = None) -> Optional[CourseDetail]:
        """Course aggregate, with progress fields when student_id is given."""
        with self.tx.transaction() as conn:
            return fetch_course_detail(conn, course_id, student_id)

    def get_owned_course(self, course_id: int, instructor_id: int) -> Optional[CourseDetail]:
        """Course aggregate, or None unless it belongs to this instructor."""
        detail = self.get_course(course_id)
        if detail is None or detail.instructor_id != instructor_id:
            return None
        return detail

    def _page(self, where: str, params: tuple, page: Any, page_size: Any) -> Page:
        page, page_size = normalize_paging(page, page_size)
        with self.tx.transaction() as conn:
            total = conn.execute(
                f"SELECT COUNT(*) AS count FROM courses c WHERE {where}", params
            ).fetchone()["count"]
            rows = conn.execute(
                COURSE_SELECT + f" WHERE {where} ORDER BY c.created_at DESC, c.id DESC LIMIT ? OFFSET ?",
                params + (page_size, (page - 1) * page_size),
            ).fetchall()
        items = [CourseSummary(**_summary_fields(r)) for r in rows]
        return Page(items=items, total=total, page=page, page_size=page_size)

    def list_instructor_courses(self, instructor_id: int, page: Any = 1, page_size: Any = None) -> Page:
        return self._page("c.instructor_id = ?", (instructor_id,), page, page_size)

    def list_published_courses(
        self,
        page: Any = 1,
        page_size: Any = None,
        category_id: Optional[int] = None,
    ) -> Page:
        """Catalog of courses open for enrollment, optionally filtered by category."""
        if category_id:
            return self._page(
                "c.status = ? AND c.category_id = ?",
                (CourseStatus.PUBLISHED, category_id),
                page,
                page_size,
            )
        return self._page("c.status = ?", (CourseStatus.PUBLISHED,), page, page_size)

    def list_student_courses(self, student_id: int) -> List[StudentCourse]:
        """Enrolled courses with derived progress, most recent enrollment first."""
        rows = self.db.execute(
            """
            SELECT
                c.id AS course_id,
                c.title,
                c.description,
                c.price,
                e.enrolled_at,
                (SELECT COUNT(*) FROM course_lessons cl WHERE cl.course_id = c.id) AS total_lessons,
                (SELECT COUNT(*) FROM lesson_progress lp
                  WHERE lp.course_id = c.id AND lp.student_id = e.student_id AND lp.completed = 1
                ) AS completed_lessons
            FROM enrollments e
            JOIN courses c ON e.course_id = c.id
            WHERE e.student_id = ?
            ORDER BY e.enrolled_at DESC, e.id DESC
            """,
            (student_id,),
        )
        return [
            StudentCourse(
                course_id=r["course_id"],
                title=r["title"],
                description=r["description"],
                price=r["price"],
                enrolled_at=r["enrolled_at"],
                total_lessons=r["total_lessons"],
                completed_lessons=r["completed_lessons"],
                progress_percent=progress_percent(r["completed_lessons"], r["total_lessons"]),
            )
            for r in rows
        ]

    def list_course_enrollments(self, course_id: int, instructor_id: int) -> List[Dict[str, Any]]:
        """Students enrolled in a course owned by this instructor."""
        owner = self.db.execute_one(
            "SELECT id FROM courses WHERE id = ? AND instructor_id = ?",
            (course_id, instructor_id),
        )
        if not owner:
            raise NotFoundOrForbidden()

        rows = self.db.execute(
            """
            SELECT e.id, e.enrolled_at, u.id AS student_id, u.name AS student_name, u.email AS student_email
            FROM enrollments e
            JOIN users u ON e.student_id = u.id
            WHERE e.course_id = ?
            ORDER BY e.enrolled_at DESC, e.id DESC
            """,
            (course_id,),
        )
        return [dict(r) for r in rows]

    def list_categories(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self.db.execute("SELECT id, name, description FROM categories ORDER BY name")]

    def list_difficulty_levels(self) -> List[Dict[str, Any]]:
        return [dict(r) for r in self.db.execute("SELECT id, name, description FROM difficulty_levels ORDER BY id")]
