"""
Course-related API routes (read-only JSON catalog).
"""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.deps import CurrentUser, get_course_reader, get_optional_user
from api.models.responses import (
    CourseListResponse,
    CourseResponse,
    CourseSummaryResponse,
    LessonResponse,
    LookupItem,
)
from core.config import CourseStatus, Role
from services.course_reader import CourseReader

router = APIRouter()


@router.get("", response_model=CourseListResponse)
def list_courses(
    page: int = 1,
    page_size: Optional[int] = None,
    category: Optional[int] = None,
    reader: CourseReader = Depends(get_course_reader),
):
    """Published courses, newest first."""
    result = reader.list_published_courses(page, page_size, category)
    return CourseListResponse(
        **result.to_dict(),
        data=[CourseSummaryResponse(**asdict(c)) for c in result.items],
    )


@router.get("/categories", response_model=List[LookupItem])
def list_categories(reader: CourseReader = Depends(get_course_reader)):
    return [LookupItem(**row) for row in reader.list_categories()]


@router.get("/difficulty-levels", response_model=List[LookupItem])
def list_difficulty_levels(reader: CourseReader = Depends(get_course_reader)):
    return [LookupItem(**row) for row in reader.list_difficulty_levels()]


@router.get("/{course_id}", response_model=CourseResponse)
def get_course(
    course_id: int,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    reader: CourseReader = Depends(get_course_reader),
):
    """
    Get a course by ID.

    Drafts are visible to their owner and to students already enrolled.
    Signed-in students also get their progress.
    """
    student_id = user.id if user and user.role_id == Role.STUDENT else None
    course = reader.get_course(course_id, student_id=student_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")

    if course.status != CourseStatus.PUBLISHED:
        is_owner = user is not None and user.id == course.instructor_id
        if not (is_owner or course.enrolled):
            raise HTTPException(status_code=404, detail="Course not found")

    data = asdict(course)
    data["lessons"] = [LessonResponse(**lesson) for lesson in data["lessons"]]
    return CourseResponse(**data)
