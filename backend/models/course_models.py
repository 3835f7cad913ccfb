"""
Data models for the course aggregate and its read models.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Any, Dict


@dataclass
class LessonInput:
    """One lesson row as submitted (raw, uncoerced values)."""
    title: str = ""
    duration: Any = None
    description: str = ""
    video_url: str = ""


@dataclass
class CourseInput:
    """
    A course submission: course-level fields plus its three ordered
    child collections. Values are kept as submitted so a rejected form
    can be echoed back unchanged.
    """
    title: str = ""
    category: Any = None
    difficulty: Any = None
    price: Any = None
    description: str = ""
    status: str = "draft"
    objectives: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)
    lessons: List[LessonInput] = field(default_factory=list)


@dataclass
class CoursePatch:
    """
    Course-row changes. A field left as None keeps the stored value;
    every field maps to one fixed column assignment.
    """
    title: Optional[str] = None
    category_id: Optional[int] = None
    difficulty_id: Optional[int] = None
    price: Optional[float] = None
    description: Optional[str] = None
    status: Optional[str] = None


@dataclass
class Lesson:
    id: int
    lesson_no: int
    title: str
    duration_mins: Optional[int] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    completed: bool = False


@dataclass
class CourseSummary:
    """Course row joined with lookup names, used by listings."""
    id: int
    title: str
    instructor_id: int
    status: str
    price: float
    description: Optional[str] = None
    category_id: Optional[int] = None
    difficulty_id: Optional[int] = None
    instructor_name: Optional[str] = None
    category_name: Optional[str] = None
    difficulty_name: Optional[str] = None
    enrollment_count: int = 0
    lesson_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class CourseDetail(CourseSummary):
    """The full aggregate plus per-student progress when requested."""
    lessons: List[Lesson] = field(default_factory=list)
    objectives: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)

    # Only populated when a student id is supplied
    completed_lessons: Optional[int] = None
    progress_percent: Optional[float] = None
    enrolled: Optional[bool] = None

    def to_input(self) -> CourseInput:
        """Rebuild a submission from stored state (edit form, publish checks)."""
        return CourseInput(
            title=self.title,
            category=self.category_id,
            difficulty=self.difficulty_id,
            price=self.price,
            description=self.description or "",
            status=self.status,
            objectives=list(self.objectives),
            prerequisites=list(self.prerequisites),
            lessons=[
                LessonInput(
                    title=lesson.title,
                    duration=lesson.duration_mins,
                    description=lesson.description or "",
                    video_url=lesson.video_url or "",
                )
                for lesson in self.lessons
            ],
        )


@dataclass
class StudentCourse:
    """An enrolled course as seen on the student dashboard."""
    course_id: int
    title: str
    description: Optional[str]
    price: float
    enrolled_at: str
    total_lessons: int = 0
    completed_lessons: int = 0
    progress_percent: float = 0.0


@dataclass
class EnrollmentStatus:
    enrolled: bool
    enrolled_at: Optional[str] = None


@dataclass
class ProgressSnapshot:
    completed_lessons: int
    total_lessons: int
    progress_percent: float


@dataclass
class Page:
    """One page of a listing."""
    items: List[Any]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return max(1, -(-self.total // self.page_size))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


def progress_percent(completed: int, total: int) -> float:
    """Completed share of lessons, one decimal place; 0 when there are no lessons."""
    if not total:
        return 0.0
    return round(completed / total * 100, 1)
