"""
Course Models - Generated outlines and their persisted project/outline records.

All models serialize with camelCase aliases so the JSON matches what the
editor front end reads and writes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


ProjectStatus = Literal["draft", "in_progress", "completed"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase input, emitting camelCase."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CourseActivity(CamelModel):
    """Exercise, quiz, discussion or assessment item."""
    type: str = ""
    title: str = ""
    description: str = ""


class CourseResource(CamelModel):
    """Supporting material (PDF, link, tool)."""
    type: str = ""
    title: str = ""
    description: Optional[str] = None


class CourseLesson(CamelModel):
    title: str = ""
    duration: str = ""
    description: str = ""
    activities: List[str] = Field(default_factory=list)
    format: List[str] = Field(default_factory=list)


class CourseOutlineModule(CamelModel):
    title: str = ""
    duration: str = ""
    description: str = ""
    learning_objectives: List[str] = Field(default_factory=list)
    lessons: List[CourseLesson] = Field(default_factory=list)
    activities: List[CourseActivity] = Field(default_factory=list)
    resources: List[CourseResource] = Field(default_factory=list)


class GeneratedCourseOutline(CamelModel):
    """Structured course skeleton returned by the outline generator."""
    title: str
    description: str = ""
    target_audience: str = ""
    total_duration: str = ""
    course_type: str = ""
    learning_objectives: List[str] = Field(default_factory=list)
    modules: List[CourseOutlineModule]
    assessments: List[CourseActivity] = Field(default_factory=list)
    resources: List[CourseResource] = Field(default_factory=list)

    @property
    def lesson_count(self) -> int:
        return sum(len(module.lessons) for module in self.modules)


class CourseGenerationRequest(CamelModel):
    """Input to outline generation."""
    description: str = Field(..., min_length=10)
    title: Optional[str] = None
    target_audience: Optional[str] = None
    duration: Optional[str] = None
    course_type: Optional[str] = None


class ProjectBase(CamelModel):
    """Project fields a caller may supply."""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: ProjectStatus = "draft"
    course_type: Optional[str] = None
    target_audience: Optional[str] = None
    duration: Optional[str] = None


class ProjectCreate(ProjectBase):
    user_id: str


class ProjectUpdate(CamelModel):
    """Partial project update - all fields optional."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    course_type: Optional[str] = None
    target_audience: Optional[str] = None
    duration: Optional[str] = None


class Project(ProjectCreate):
    id: int
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class CourseOutlineInput(CamelModel):
    """Outline a caller attaches to one of their projects."""
    title: str = Field(..., min_length=1)
    content: Dict[str, Any]
    version: int = 1


class CourseOutlineCreate(CamelModel):
    project_id: int
    title: str
    content: Dict[str, Any]
    version: int = 1
    is_active: bool = True


class CourseOutlineUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[Dict[str, Any]] = None
    version: Optional[int] = None
    is_active: Optional[bool] = None


class CourseOutlineRecord(CourseOutlineCreate):
    id: int
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class GeneratedOutlineResponse(GeneratedCourseOutline):
    """Outline plus the ids it was persisted under."""
    project_id: int
    outline_id: int


class SectionEnhancementRequest(CamelModel):
    """A piece of an outline to be expanded, with surrounding context."""
    section_content: str = Field(..., min_length=1)
    context: str = ""


class SectionEnhancementResponse(CamelModel):
    content: str
