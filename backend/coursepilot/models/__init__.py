"""Models module."""

from .course import (
    CourseActivity, CourseResource, CourseLesson, CourseOutlineModule,
    GeneratedCourseOutline, CourseGenerationRequest, GeneratedOutlineResponse,
    Project, ProjectBase, ProjectCreate, ProjectUpdate,
    CourseOutlineRecord, CourseOutlineInput, CourseOutlineCreate, CourseOutlineUpdate,
    SectionEnhancementRequest, SectionEnhancementResponse,
)
from .voice import (
    AudioMessage, TextMessage, ContextMessage, ClientMessage,
    ResponseMessage, TranscriptMessage, ReadyMessage, ErrorMessage,
)

__all__ = [
    'CourseActivity', 'CourseResource', 'CourseLesson', 'CourseOutlineModule',
    'GeneratedCourseOutline', 'CourseGenerationRequest', 'GeneratedOutlineResponse',
    'Project', 'ProjectBase', 'ProjectCreate', 'ProjectUpdate',
    'CourseOutlineRecord', 'CourseOutlineInput', 'CourseOutlineCreate', 'CourseOutlineUpdate',
    'SectionEnhancementRequest', 'SectionEnhancementResponse',
    'AudioMessage', 'TextMessage', 'ContextMessage', 'ClientMessage',
    'ResponseMessage', 'TranscriptMessage', 'ReadyMessage', 'ErrorMessage',
]
