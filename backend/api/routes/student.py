"""
Student portal: catalog, course page, enrollment and lesson progress.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.deps import (
    CurrentUser,
    get_course_reader,
    get_enrollment_service,
    get_progress_service,
    require_student,
    templates,
)
from api.errors import json_error, render_error
from api.models.responses import EnrollmentResponse, ApiResponse, ProgressResponse
from core.config import CourseStatus
from core.exceptions import LMSError
from services.course_reader import CourseReader
from services.enrollment_service import EnrollmentService
from services.progress_service import ProgressService

router = APIRouter()


@router.get("/dashboard")
def dashboard(
    request: Request,
    user: CurrentUser = Depends(require_student),
    reader: CourseReader = Depends(get_course_reader),
):
    return templates.TemplateResponse(
        request,
        "student/dashboard.html",
        {"user": user, "enrolled_courses": reader.list_student_courses(user.id)},
    )


@router.get("/courses")
def catalog(
    request: Request,
    page: int = 1,
    page_size: Optional[int] = None,
    category: Optional[int] = None,
    user: CurrentUser = Depends(require_student),
    reader: CourseReader = Depends(get_course_reader),
):
    return templates.TemplateResponse(
        request,
        "student/catalog.html",
        {
            "user": user,
            "courses": reader.list_published_courses(page, page_size, category),
            "categories": reader.list_categories(),
            "category": category,
        },
    )


@router.get("/course/{course_id}")
def course_detail(
    request: Request,
    course_id: int,
    user: CurrentUser = Depends(require_student),
    reader: CourseReader = Depends(get_course_reader),
):
    course = reader.get_course(course_id, student_id=user.id)
    # Unpublished courses stay visible only to students already enrolled
    if course is None or (course.status != CourseStatus.PUBLISHED and not course.enrolled):
        return render_error(request, "Course not found", 404)
    return templates.TemplateResponse(
        request,
        "student/course_detail.html",
        {"user": user, "course": course},
    )


@router.post("/course/{course_id}/enroll", response_model=EnrollmentResponse)
def enroll(
    course_id: int,
    user: CurrentUser = Depends(require_student),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
):
    try:
        status = enrollments.enroll(user.id, course_id)
    except LMSError as e:
        return json_error(e)
    return EnrollmentResponse(
        success=True,
        message="Enrolled successfully",
        enrolled=status.enrolled,
        enrolled_at=status.enrolled_at,
    )


@router.delete("/course/{course_id}/unenroll", response_model=ApiResponse)
def unenroll(
    course_id: int,
    user: CurrentUser = Depends(require_student),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
):
    try:
        enrollments.unenroll(user.id, course_id)
    except LMSError as e:
        return json_error(e)
    return ApiResponse(success=True, message="Unenrolled successfully")


@router.get("/course/{course_id}/enrollment", response_model=EnrollmentResponse)
def enrollment_status(
    course_id: int,
    user: CurrentUser = Depends(require_student),
    enrollments: EnrollmentService = Depends(get_enrollment_service),
):
    status = enrollments.get_status(user.id, course_id)
    return EnrollmentResponse(
        success=True,
        message="Enrolled" if status.enrolled else "Not enrolled",
        enrolled=status.enrolled,
        enrolled_at=status.enrolled_at,
    )


def _progress_response(snapshot, message: str) -> ProgressResponse:
    return ProgressResponse(
        success=True,
        message=message,
        completed_lessons=snapshot.completed_lessons,
        total_lessons=snapshot.total_lessons,
        progress_percent=snapshot.progress_percent,
    )


@router.post("/course/{course_id}/lessons/{lesson_id}/complete", response_model=ProgressResponse)
def complete_lesson(
    course_id: int,
    lesson_id: int,
    user: CurrentUser = Depends(require_student),
    progress: ProgressService = Depends(get_progress_service),
):
    try:
        snapshot = progress.complete_lesson(user.id, course_id, lesson_id)
    except LMSError as e:
        return json_error(e)
    return _progress_response(snapshot, "Lesson marked as completed")


@router.delete("/course/{course_id}/lessons/{lesson_id}/complete", response_model=ProgressResponse)
def reset_lesson(
    course_id: int,
    lesson_id: int,
    user: CurrentUser = Depends(require_student),
    progress: ProgressService = Depends(get_progress_service),
):
    try:
        snapshot = progress.reset_lesson(user.id, course_id, lesson_id)
    except LMSError as e:
        return json_error(e)
    return _progress_response(snapshot, "Lesson marked as not completed")
