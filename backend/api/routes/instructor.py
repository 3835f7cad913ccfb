"""
Instructor portal: course list and the course editor.
"""
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from api.deps import (
    CurrentUser,
    get_course_reader,
    get_course_writer,
    require_instructor,
    templates,
)
from api.errors import json_error, render_error
from api.models.requests import StatusChangeRequest, course_form
from api.models.responses import ApiResponse, EnrolledStudent, EnrollmentListResponse
from core.config import REQUIRE_OBJECTIVES_TO_PUBLISH
from core.exceptions import LMSError, NotFoundOrForbidden, ValidationError
from models.course_models import CourseInput
from services.course_reader import CourseReader
from services.course_validator import validate_course
from services.course_writer import CourseWriter

router = APIRouter()


def _render_form(
    request: Request,
    reader: CourseReader,
    user: CurrentUser,
    course: CourseInput,
    course_id: Optional[int] = None,
    errors: Optional[List[str]] = None,
    status_code: int = 200,
):
    """Course editor page; also used to echo a rejected submission back."""
    errors = errors or []
    return templates.TemplateResponse(
        request,
        "instructor/course_form.html",
        {
            "user": user,
            "course": course,
            "course_id": course_id,
            "action": f"/instructor/courses/{course_id}/edit" if course_id else "/instructor/courses",
            "categories": reader.list_categories(),
            "difficulty_levels": reader.list_difficulty_levels(),
            "errors": errors,
            "error": "; ".join(errors),
        },
        status_code=status_code,
    )


def _validate(reader: CourseReader, course: CourseInput) -> List[str]:
    return validate_course(
        course,
        require_objectives=REQUIRE_OBJECTIVES_TO_PUBLISH,
        category_ids={c["id"] for c in reader.list_categories()},
        difficulty_ids={d["id"] for d in reader.list_difficulty_levels()},
    )


@router.get("/courses")
def list_courses(
    request: Request,
    page: int = 1,
    page_size: Optional[int] = None,
    success: Optional[str] = None,
    user: CurrentUser = Depends(require_instructor),
    reader: CourseReader = Depends(get_course_reader),
):
    courses = reader.list_instructor_courses(user.id, page, page_size)
    return templates.TemplateResponse(
        request,
        "instructor/courses.html",
        {"user": user, "courses": courses, "success": success},
    )


@router.get("/courses/create")
def create_course_page(
    request: Request,
    user: CurrentUser = Depends(require_instructor),
    reader: CourseReader = Depends(get_course_reader),
):
    return _render_form(request, reader, user, CourseInput())


@router.post("/courses")
def create_course(
    request: Request,
    course: CourseInput = Depends(course_form),
    user: CurrentUser = Depends(require_instructor),
    reader: CourseReader = Depends(get_course_reader),
    writer: CourseWriter = Depends(get_course_writer),
):
    errors = _validate(reader, course)
    if errors:
        return _render_form(request, reader, user, course, errors=errors, status_code=400)

    try:
        writer.create(user.id, course)
    except ValidationError as e:
        return _render_form(request, reader, user, course, errors=e.errors, status_code=400)

    return RedirectResponse(
        f"/instructor/courses?success={quote('Course created successfully!')}",
        status_code=303,
    )


@router.get("/courses/{course_id}/edit")
def edit_course_page(
    request: Request,
    course_id: int,
    user: CurrentUser = Depends(require_instructor),
    reader: CourseReader = Depends(get_course_reader),
):
    detail = reader.get_owned_course(course_id, user.id)
    if detail is None:
        return render_error(request, NotFoundOrForbidden.default_message, 404)
    return _render_form(request, reader, user, detail.to_input(), course_id=course_id)


@router.post("/courses/{course_id}/edit")
def update_course(
    request: Request,
    course_id: int,
    course: CourseInput = Depends(course_form),
    user: CurrentUser = Depends(require_instructor),
    reader: CourseReader = Depends(get_course_reader),
    writer: CourseWriter = Depends(get_course_writer),
):
    # Someone else's course is not found, whatever was submitted
    if reader.get_owned_course(course_id, user.id) is None:
        return render_error(request, NotFoundOrForbidden.default_message, 404)

    errors = _validate(reader, course)
    if errors:
        return _render_form(request, reader, user, course, course_id=course_id, errors=errors, status_code=400)

    try:
        writer.update(course_id, user.id, course)
    except NotFoundOrForbidden as e:
        return render_error(request, e.message, 404)
    except ValidationError as e:
        return _render_form(request, reader, user, course, course_id=course_id, errors=e.errors, status_code=400)

    return RedirectResponse(
        f"/instructor/courses?success={quote('Course updated successfully!')}",
        status_code=303,
    )


@router.delete("/courses/{course_id}", response_model=ApiResponse)
def delete_course(
    course_id: int,
    user: CurrentUser = Depends(require_instructor),
    writer: CourseWriter = Depends(get_course_writer),
):
    try:
        writer.delete(course_id, user.id)
    except LMSError as e:
        return json_error(e)
    return ApiResponse(success=True, message="Course deleted successfully")


@router.post("/courses/{course_id}/status", response_model=ApiResponse)
def change_status(
    course_id: int,
    payload: StatusChangeRequest,
    user: CurrentUser = Depends(require_instructor),
    writer: CourseWriter = Depends(get_course_writer),
):
    try:
        writer.set_status(course_id, user.id, payload.status)
    except LMSError as e:
        return json_error(e)
    return ApiResponse(success=True, message=f"Course status set to {payload.status}")


@router.get("/courses/{course_id}/enrollments", response_model=EnrollmentListResponse)
def course_enrollments(
    course_id: int,
    user: CurrentUser = Depends(require_instructor),
    reader: CourseReader = Depends(get_course_reader),
):
    try:
        rows = reader.list_course_enrollments(course_id, user.id)
    except LMSError as e:
        return json_error(e)
    return EnrollmentListResponse(
        success=True,
        message="OK",
        count=len(rows),
        data=[EnrolledStudent(**row) for row in rows],
    )
