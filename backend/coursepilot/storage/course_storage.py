"""
Course Storage - Persistent projects and course outlines on top of StorageInterface.

Each record is one JSON file:
    projects/<id>.json
    outlines/<id>.json
Integer ids come from a shared counters.json file.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models.course import (
    Project, ProjectCreate, ProjectUpdate,
    CourseOutlineRecord, CourseOutlineCreate, CourseOutlineUpdate,
)
from .interface import StorageInterface, StorageError
from .local_storage import LocalStorage

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class CourseStorage:
    """
    Manages projects and their versioned course outlines.
    """

    def __init__(self, storage: StorageInterface):
        """
        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.projects_dir = "projects"
        self.outlines_dir = "outlines"
        self._counters_path = "counters.json"
        self._lock = asyncio.Lock()

    # Internal helpers

    async def _next_id(self, kind: str) -> int:
        """Allocate the next sequential id for a record kind."""
        async with self._lock:
            content = await self.storage.load(self._counters_path)
            counters: Dict[str, int] = json.loads(content.decode('utf-8')) if content else {}
            counters[kind] = counters.get(kind, 0) + 1
            if not await self.storage.save(self._counters_path, json.dumps(counters, indent=2)):
                raise StorageError(f"Failed to allocate {kind} id")
            return counters[kind]

    async def _write(self, path: str, record: BaseModel) -> None:
        if not await self.storage.save(path, record.model_dump_json(by_alias=True, indent=2)):
            raise StorageError(f"Failed to write {path}")

    async def _read(self, path: str, model: Type[RecordT]) -> Optional[RecordT]:
        content = await self.storage.load(path)
        if content is None:
            return None
        try:
            return model.model_validate_json(content)
        except ValidationError as e:
            logger.error(f"Corrupt record {path}: {e}")
            return None

    async def _read_all(self, directory: str, model: Type[RecordT]) -> List[RecordT]:
        records = []
        for file_path in await self.storage.list(directory, pattern="*.json"):
            record = await self._read(file_path, model)
            if record is not None:
                records.append(record)
        return records

    def _project_path(self, project_id: int) -> str:
        return f"{self.projects_dir}/{project_id}.json"

    def _outline_path(self, outline_id: int) -> str:
        return f"{self.outlines_dir}/{outline_id}.json"

    # Projects

    async def create_project(self, project: ProjectCreate) -> Project:
        project_id = await self._next_id("project")
        record = Project(id=project_id, **project.model_dump())
        await self._write(self._project_path(project_id), record)
        logger.info(f"Created project {project_id} for user {record.user_id}")
        return record

    async def get_project(self, project_id: int) -> Optional[Project]:
        return await self._read(self._project_path(project_id), Project)

    async def get_user_projects(self, user_id: str) -> List[Project]:
        """Projects owned by a user, most recently updated first."""
        projects = [p for p in await self._read_all(self.projects_dir, Project) if p.user_id == user_id]
        return sorted(projects, key=lambda p: (p.updated_at, p.id), reverse=True)

    async def update_project(self, project_id: int, updates: ProjectUpdate) -> Optional[Project]:
        project = await self.get_project(project_id)
        if project is None:
            return None
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        updated = project.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
        await self._write(self._project_path(project_id), updated)
        return updated

    async def delete_project(self, project_id: int) -> bool:
        """Delete a project and every outline that belongs to it."""
        for outline in await self.get_project_outlines(project_id):
            await self.storage.delete(self._outline_path(outline.id))
        return await self.storage.delete(self._project_path(project_id))

    # Course outlines

    async def create_course_outline(self, outline: CourseOutlineCreate) -> CourseOutlineRecord:
        """Store a new outline; the project's earlier outlines become inactive."""
        for previous in await self.get_project_outlines(outline.project_id):
            if previous.is_active:
                await self._write(
                    self._outline_path(previous.id),
                    previous.model_copy(update={"is_active": False}),
                )

        outline_id = await self._next_id("outline")
        record = CourseOutlineRecord(id=outline_id, **outline.model_dump())
        await self._write(self._outline_path(outline_id), record)
        logger.info(f"Created course outline {outline_id} for project {outline.project_id}")
        return record

    async def get_course_outline(self, outline_id: int) -> Optional[CourseOutlineRecord]:
        return await self._read(self._outline_path(outline_id), CourseOutlineRecord)

    async def get_project_outlines(self, project_id: int) -> List[CourseOutlineRecord]:
        """Outlines of a project, newest first."""
        outlines = [
            o for o in await self._read_all(self.outlines_dir, CourseOutlineRecord)
            if o.project_id == project_id
        ]
        return sorted(outlines, key=lambda o: (o.created_at, o.id), reverse=True)

    async def update_course_outline(
        self, outline_id: int, updates: CourseOutlineUpdate
    ) -> Optional[CourseOutlineRecord]:
        outline = await self.get_course_outline(outline_id)
        if outline is None:
            return None
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        updated = outline.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
        await self._write(self._outline_path(outline_id), updated)
        return updated

    async def get_active_outline(self, project_id: int) -> Optional[CourseOutlineRecord]:
        for outline in await self.get_project_outlines(project_id):
            if outline.is_active:
                return outline
        return None


# Global course storage instance
_course_storage: Optional[CourseStorage] = None


def init_course_storage(storage: Optional[StorageInterface] = None) -> CourseStorage:
    """
    Initialize the global course storage instance.

    Args:
        storage: Optional StorageInterface implementation. If None, creates LocalStorage.
    """
    global _course_storage
    if storage is None:
        storage = LocalStorage()
    _course_storage = CourseStorage(storage)
    return _course_storage


def get_course_storage() -> CourseStorage:
    """
    Get the global course storage instance.

    Raises:
        RuntimeError: If course storage has not been initialized
    """
    if _course_storage is None:
        raise RuntimeError("Course storage not initialized. Call init_course_storage() first.")
    return _course_storage
