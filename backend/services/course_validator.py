"""
Required-field checks for course submissions.

Draft and published courses are held to different rules: a draft only
needs its course-level fields, a published course also needs at least
one complete lesson.
"""
from typing import Collection, List, Any, Optional

from core.config import CourseStatus
from models.course_models import CourseInput, LessonInput


def _blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def parse_number(value: Any) -> Optional[float]:
    """Parse a submitted numeric field, None if malformed or blank."""
    if _blank(value):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


# Largest value stored in an INTEGER column we accept from a form
MAX_INT = 2 ** 31 - 1


def parse_positive_int(value: Any) -> Optional[int]:
    """Whole part of a submitted number, None unless it lands in 1..MAX_INT."""
    number = parse_number(value)
    if number is None:
        return None
    whole = int(number)
    if 0 < whole <= MAX_INT:
        return whole
    return None


def parse_id(value: Any) -> Optional[int]:
    """A lookup id: a positive whole number in range, else None."""
    number = parse_number(value)
    if number is None or number != int(number):
        return None
    return parse_positive_int(number)


def is_complete_lesson(lesson: LessonInput) -> bool:
    """A lesson counts towards publishing only when every field is filled in."""
    return (
        not _blank(lesson.title)
        and parse_positive_int(lesson.duration) is not None
        and not _blank(lesson.description)
        and not _blank(lesson.video_url)
    )


def validate_course(
    course: CourseInput,
    status: Optional[str] = None,
    require_objectives: bool = False,
    category_ids: Optional[Collection[int]] = None,
    difficulty_ids: Optional[Collection[int]] = None,
) -> List[str]:
    """
    Validate a course submission against the rules for its target status.

    Args:
        course: Submitted course fields and child collections
        status: Target status; defaults to course.status
        require_objectives: Also demand objectives and prerequisites
            when publishing
        category_ids: Known category ids; checked when given
        difficulty_ids: Known difficulty level ids; checked when given

    Returns:
        Human-readable errors, empty when the submission is valid
    """
    status = status or course.status
    errors: List[str] = []

    if status not in CourseStatus.ALL:
        errors.append(f"Status must be one of: {', '.join(CourseStatus.ALL)}")

    if _blank(course.title):
        errors.append("Course title is required")
    if _blank(course.category):
        errors.append("Course category is required")
    elif category_ids is not None and parse_id(course.category) not in category_ids:
        errors.append("Course category is invalid")
    if _blank(course.difficulty):
        errors.append("Difficulty level is required")
    elif difficulty_ids is not None and parse_id(course.difficulty) not in difficulty_ids:
        errors.append("Difficulty level is invalid")
    if _blank(course.description):
        errors.append("Course description is required")

    if not _blank(course.price):
        price = parse_number(course.price)
        if price is None:
            errors.append("Price must be a valid number")
        elif price < 0:
            errors.append("Price cannot be negative")

    if status == CourseStatus.PUBLISHED:
        if not any(is_complete_lesson(lesson) for lesson in course.lessons):
            errors.append(
                "At least one lesson with a title, duration, description "
                "and video URL is required to publish"
            )
        if require_objectives:
            if not any(not _blank(line) for line in course.objectives):
                errors.append("At least one learning objective is required to publish")
            if not any(not _blank(line) for line in course.prerequisites):
                errors.append("At least one prerequisite is required to publish")

    return errors
