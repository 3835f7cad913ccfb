"""
Pydantic response models for API endpoints.
"""
from pydantic import BaseModel, Field
from typing import List, Optional


class ApiResponse(BaseModel):
    """Envelope used by every JSON endpoint."""
    success: bool
    message: str


class EnrollmentResponse(ApiResponse):
    enrolled: bool
    enrolled_at: Optional[str] = None


class ProgressResponse(ApiResponse):
    completed_lessons: int
    total_lessons: int
    progress_percent: float = Field(ge=0, le=100, description="Progress percentage")


class EnrolledStudent(BaseModel):
    id: int
    student_id: int
    student_name: str
    student_email: str
    enrolled_at: str


class EnrollmentListResponse(ApiResponse):
    count: int
    data: List[EnrolledStudent] = []


class LessonResponse(BaseModel):
    id: int
    lesson_no: int
    title: str
    duration_mins: Optional[int] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    completed: bool = False


class CourseSummaryResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    price: float
    status: str
    instructor_name: Optional[str] = None
    category_name: Optional[str] = None
    difficulty_name: Optional[str] = None
    enrollment_count: int = 0
    lesson_count: int = 0


class CourseResponse(CourseSummaryResponse):
    """Response model for course retrieval."""
    lessons: List[LessonResponse] = []
    objectives: List[str] = []
    prerequisites: List[str] = []
    enrolled: Optional[bool] = None
    completed_lessons: Optional[int] = None
    progress_percent: Optional[float] = None


class CourseListResponse(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int
    data: List[CourseSummaryResponse] = []


class LookupItem(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
