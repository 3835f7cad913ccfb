"""
Tests for the transactional course writer.
"""
import sqlite3
from unittest.mock import patch

import pytest

from conftest import make_course
from core.exceptions import NotFoundOrForbidden, StorageError, ValidationError
from models.course_models import LessonInput
from services.course_reader import CourseReader
from services.course_writer import (
    CourseWriter,
    coerce_duration,
    coerce_id,
    coerce_price,
    normalize_list_items,
    number_lessons,
)


class TestNormalization:
    """Test list and value normalization helpers."""

    def test_bullets_and_blanks_are_stripped(self):
        lines = ["- first", "  * second  ", "• third", "", "   ", "-- fourth", "plain"]
        assert normalize_list_items(lines) == ["first", "second", "third", "fourth", "plain"]

    def test_coerce_price(self):
        assert coerce_price("19.999") == 20.0
        assert coerce_price("abc") == 0.0
        assert coerce_price("-3") == 0.0
        assert coerce_price("") == 0.0

    def test_coerce_duration(self):
        assert coerce_duration("45") == 45
        assert coerce_duration("0") is None
        assert coerce_duration("soon") is None
        assert coerce_duration("0.5") is None
        assert coerce_duration("1e20") is None

    def test_coerce_id(self):
        assert coerce_id("2") == 2
        assert coerce_id("2.5") is None
        assert coerce_id("x") is None
        assert coerce_id("1e20") is None

    def test_lessons_numbered_after_dropping_untitled(self):
        rows = number_lessons([
            LessonInput("A", "5", "", ""),
            LessonInput("  ", "5", "", ""),
            LessonInput("B", "", "", ""),
        ])
        assert [(r[0], r[1]) for r in rows] == [(1, "A"), (2, "B")]


class TestCreate:
    """Test course creation."""

    def test_create_persists_aggregate(self, db, writer, instructor):
        course_id = writer.create(instructor["id"], make_course(
            objectives=["- Write scripts", "", "* Use the REPL"],
        ))

        detail = CourseReader(db).get_course(course_id)
        assert detail.title == "Python Basics"
        assert detail.instructor_id == instructor["id"]
        assert detail.price == 49.99
        assert detail.status == "draft"
        assert [l.lesson_no for l in detail.lessons] == [1, 2]
        assert [l.title for l in detail.lessons] == ["Getting started", "First program"]
        assert detail.objectives == ["Write scripts", "Use the REPL"]
        assert detail.prerequisites == ["A computer"]

    def test_malformed_values_are_coerced(self, db, writer, instructor):
        course_id = writer.create(instructor["id"], make_course(
            price="free",
            category="nope",
            lessons=[LessonInput("Only", "a while", "", "")],
        ))

        detail = CourseReader(db).get_course(course_id)
        assert detail.price == 0.0
        assert detail.category_id is None
        assert detail.lessons[0].duration_mins is None

    def test_out_of_range_numbers_stored_as_null(self, db, writer, instructor):
        course = make_course(
            difficulty="1e20",
            lessons=[
                LessonInput("Half a minute", "0.5", "d", "https://v.example.com/1"),
                LessonInput("Forever", "1e20", "d", "https://v.example.com/2"),
            ],
        )
        course_id = writer.create(instructor["id"], course)

        detail = CourseReader(db).get_course(course_id)
        assert detail.difficulty_id is None
        assert [l.duration_mins for l in detail.lessons] == [None, None]

    def test_unknown_category_rejected(self, db, writer, instructor):
        with pytest.raises(ValidationError) as exc_info:
            writer.create(instructor["id"], make_course(category="999", difficulty="42"))

        assert exc_info.value.errors == ["Course category is invalid", "Difficulty level is invalid"]
        assert db.execute_one("SELECT COUNT(*) AS n FROM courses")["n"] == 0

    def test_failure_rolls_back_course_row(self, db, writer, instructor):
        with patch.object(CourseWriter, "_replace_children", side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(StorageError):
                writer.create(instructor["id"], make_course())

        assert db.execute_one("SELECT COUNT(*) AS n FROM courses")["n"] == 0


class TestUpdate:
    """Test full-replace updates."""

    def test_children_fully_replaced(self, db, writer, instructor, draft_course):
        writer.update(draft_course, instructor["id"], make_course(
            title="Renamed",
            objectives=["Only objective"],
            prerequisites=[],
            lessons=[LessonInput("Solo", "20", "d", "https://v.example.com/solo")],
        ))

        detail = CourseReader(db).get_course(draft_course)
        assert detail.title == "Renamed"
        assert detail.objectives == ["Only objective"]
        assert detail.prerequisites == []
        assert [(l.lesson_no, l.title) for l in detail.lessons] == [(1, "Solo")]
        assert db.execute_one(
            "SELECT COUNT(*) AS n FROM course_lessons WHERE course_id = ?", (draft_course,)
        )["n"] == 1

    def test_repeated_update_is_idempotent(self, db, writer, instructor, draft_course):
        def snapshot():
            d = CourseReader(db).get_course(draft_course)
            return (
                (d.title, d.category_id, d.difficulty_id, d.price, d.description, d.status),
                [(l.lesson_no, l.title, l.duration_mins, l.description, l.video_url) for l in d.lessons],
                d.objectives,
                d.prerequisites,
            )

        course = make_course(title="Same", objectives=["- One", "Two"], prerequisites=["Three"])
        writer.update(draft_course, instructor["id"], course)
        first = snapshot()
        writer.update(draft_course, instructor["id"], course)

        assert snapshot() == first
        assert first[1][0][:2] == (1, "Getting started")
        assert first[2] == ["One", "Two"]

    def test_other_instructor_cannot_update(self, db, writer, other_instructor, draft_course):
        with pytest.raises(NotFoundOrForbidden):
            writer.update(draft_course, other_instructor["id"], make_course(title="Hijacked", lessons=[]))

        detail = CourseReader(db).get_course(draft_course)
        assert detail.title == "Work in progress"
        assert len(detail.lessons) == 2

    def test_missing_course(self, writer, instructor):
        with pytest.raises(NotFoundOrForbidden):
            writer.update(9999, instructor["id"], make_course())

    def test_failed_child_insert_keeps_old_state(self, db, writer, instructor, draft_course):
        with patch.object(CourseWriter, "_replace_children", side_effect=sqlite3.IntegrityError("boom")):
            with pytest.raises(StorageError):
                writer.update(draft_course, instructor["id"], make_course(title="Half written"))

        assert CourseReader(db).get_course(draft_course).title == "Work in progress"


class TestDelete:
    """Test deletion and cascades."""

    def test_delete_cascades(self, db, writer, instructor, student, published_course):
        db.execute_write(
            "INSERT INTO enrollments (student_id, course_id, enrolled_at) VALUES (?, ?, ?)",
            (student["id"], published_course, "2024-01-01T00:00:00+00:00"),
        )
        writer.delete(published_course, instructor["id"])

        for table in ("course_lessons", "course_objectives", "course_prerequisites", "enrollments"):
            count = db.execute_one(f"SELECT COUNT(*) AS n FROM {table}")["n"]
            assert count == 0, table

    def test_delete_not_owned(self, db, writer, other_instructor, draft_course):
        with pytest.raises(NotFoundOrForbidden):
            writer.delete(draft_course, other_instructor["id"])

        detail = CourseReader(db).get_course(draft_course)
        assert detail is not None
        assert detail.title == "Work in progress"
        assert len(detail.lessons) == 2
        assert detail.objectives == ["Write scripts", "Use the REPL"]
        assert detail.prerequisites == ["A computer"]


class TestSetStatus:
    """Test publishing and unpublishing."""

    def test_publish_complete_course(self, db, writer, instructor, draft_course):
        writer.set_status(draft_course, instructor["id"], "published")
        assert CourseReader(db).get_course(draft_course).status == "published"

    def test_publish_without_lessons_rejected(self, db, writer, instructor):
        course_id = writer.create(instructor["id"], make_course(lessons=[]))

        with pytest.raises(ValidationError) as exc_info:
            writer.set_status(course_id, instructor["id"], "published")

        assert "required to publish" in exc_info.value.errors[0]
        assert CourseReader(db).get_course(course_id).status == "draft"

    def test_unpublish(self, db, writer, instructor, published_course):
        writer.set_status(published_course, instructor["id"], "draft")
        assert CourseReader(db).get_course(published_course).status == "draft"

    def test_unknown_status(self, writer, instructor, draft_course):
        with pytest.raises(ValidationError):
            writer.set_status(draft_course, instructor["id"], "archived")

    def test_not_owned(self, writer, other_instructor, draft_course):
        with pytest.raises(NotFoundOrForbidden):
            writer.set_status(draft_course, other_instructor["id"], "published")


class TestLessonOrdering:
    """Lesson numbers follow the submitted order on every write."""

    def test_empty_draft_has_no_children(self, db, writer, instructor):
        course_id = writer.create(instructor["id"], make_course(lessons=[], objectives=[], prerequisites=[]))

        for table in ("course_lessons", "course_objectives", "course_prerequisites"):
            count = db.execute_one(f"SELECT COUNT(*) AS n FROM {table} WHERE course_id = ?", (course_id,))["n"]
            assert count == 0, table

    def test_reordered_lessons_are_renumbered(self, db, writer, instructor):
        def lessons(*titles):
            return [LessonInput(t, "10", "d", "https://v.example.com") for t in titles]

        course_id = writer.create(instructor["id"], make_course(lessons=lessons("A", "B", "C")))
        writer.update(course_id, instructor["id"], make_course(lessons=lessons("B", "D")))

        detail = CourseReader(db).get_course(course_id)
        assert [(l.lesson_no, l.title) for l in detail.lessons] == [(1, "B"), (2, "D")]
