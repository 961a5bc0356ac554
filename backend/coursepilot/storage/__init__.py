"""Storage module - provides interface and implementations for data persistence."""

from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage
from .course_storage import CourseStorage, init_course_storage, get_course_storage

__all__ = [
    'StorageInterface', 'StorageError', 'LocalStorage',
    'CourseStorage', 'init_course_storage', 'get_course_storage',
]
