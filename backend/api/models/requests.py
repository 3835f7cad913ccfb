"""
Request parsing: pydantic models for JSON bodies and the course form reader.
"""
from itertools import zip_longest
from typing import List

from fastapi import Request
from pydantic import BaseModel, Field
from starlette.datastructures import FormData

from models.course_models import CourseInput, LessonInput


class StatusChangeRequest(BaseModel):
    """Request model for publishing/unpublishing a course."""
    status: str = Field(..., description="Target status: draft or published")


def _values(form: FormData, name: str) -> List[str]:
    """Repeated field values, accepting both `name` and `name[]`."""
    return [str(v) for v in form.getlist(f"{name}[]") + form.getlist(name)]


def _lines(form: FormData, name: str) -> List[str]:
    """Newline-delimited textarea or repeated inputs, one entry per line."""
    lines = []
    for value in _values(form, name):
        lines.extend(value.splitlines())
    return lines


def course_input_from_form(form: FormData) -> CourseInput:
    """Map the course editor's field names onto a CourseInput."""
    lessons = [
        LessonInput(title=title, duration=duration, description=description, video_url=video_url)
        for title, duration, description, video_url in zip_longest(
            _values(form, "lessonTitles"),
            _values(form, "lessonDurations"),
            _values(form, "lessonDescriptions"),
            _values(form, "lessonVideoUrls"),
            fillvalue="",
        )
    ]
    return CourseInput(
        title=str(form.get("courseTitle", "")),
        category=form.get("courseCategory", ""),
        difficulty=form.get("courseDifficulty", ""),
        price=form.get("coursePrice", ""),
        description=str(form.get("courseDescription", "")),
        status=str(form.get("courseStatus") or "draft"),
        objectives=_lines(form, "courseObjectives"),
        prerequisites=_lines(form, "coursePrerequisites"),
        lessons=lessons,
    )


async def course_form(request: Request) -> CourseInput:
    """Dependency: parse the submitted course editor form."""
    return course_input_from_form(await request.form())
