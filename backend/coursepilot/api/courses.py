"""
Course API endpoints - Outline generation and enhancement, projects and their outlines.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Request, status

from ..config import settings
from ..models.course import (
    CourseGenerationRequest, CourseOutlineCreate, CourseOutlineInput, CourseOutlineRecord,
    CourseOutlineUpdate, GeneratedOutlineResponse, Project, ProjectBase, ProjectCreate,
    ProjectUpdate, SectionEnhancementRequest, SectionEnhancementResponse,
)
from ..services.outline_generator import CourseOutlineGenerator, OutlineGenerationError
from ..storage import CourseStorage, StorageError, get_course_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["courses"])


def get_caller_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity from the X-User-Id header, or the anonymous placeholder."""
    return x_user_id or settings.anonymous_user_id


def get_outline_generator(request: Request) -> CourseOutlineGenerator:
    return request.app.state.outline_generator


async def _get_owned_project(storage: CourseStorage, project_id: int, user_id: str) -> Project:
    project = await storage.get_project(project_id)
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    if project.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return project


async def _get_owned_outline(storage: CourseStorage, outline_id: int, user_id: str) -> CourseOutlineRecord:
    outline = await storage.get_course_outline(outline_id)
    if outline is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course outline not found")
    project = await storage.get_project(outline.project_id)
    if project is None or project.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return outline


def _storage_failure(action: str, error: StorageError) -> HTTPException:
    logger.error(f"Failed to {action}: {error}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


# Generation

@router.post("/generate-outline", response_model=GeneratedOutlineResponse)
async def generate_outline(
    course_request: CourseGenerationRequest,
    user_id: str = Depends(get_caller_id),
    generator: CourseOutlineGenerator = Depends(get_outline_generator),
    storage: CourseStorage = Depends(get_course_storage),
):
    """
    Generate a course outline and save it as a new draft project.

    Returns:
        The outline plus the ids of the created project and outline record
    """
    try:
        outline = await generator.generate(course_request)
    except OutlineGenerationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    try:
        project = await storage.create_project(ProjectCreate(
            user_id=user_id,
            title=outline.title,
            description=outline.description,
            status="draft",
        ))
        saved_outline = await storage.create_course_outline(CourseOutlineCreate(
            project_id=project.id,
            title=outline.title,
            content=outline.model_dump(by_alias=True),
        ))
    except StorageError as e:
        raise _storage_failure("save course outline", e)

    return GeneratedOutlineResponse(
        **outline.model_dump(),
        project_id=project.id,
        outline_id=saved_outline.id,
    )


@router.post("/enhance-outline", response_model=SectionEnhancementResponse)
async def enhance_outline(
    enhancement: SectionEnhancementRequest,
    generator: CourseOutlineGenerator = Depends(get_outline_generator),
):
    """Expand one outline section with more detail and activities."""
    try:
        content = await generator.enhance_section(enhancement.section_content, enhancement.context)
    except OutlineGenerationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return SectionEnhancementResponse(content=content)


# Projects

@router.post("/projects", response_model=Project)
async def create_project(
    project: ProjectBase,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    try:
        return await storage.create_project(ProjectCreate(user_id=user_id, **project.model_dump()))
    except StorageError as e:
        raise _storage_failure("create project", e)


@router.get("/projects", response_model=List[Project])
async def list_projects(
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    return await storage.get_user_projects(user_id)


@router.get("/projects/{project_id}", response_model=Project)
async def get_project(
    project_id: int,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    return await _get_owned_project(storage, project_id, user_id)


@router.put("/projects/{project_id}", response_model=Project)
async def update_project(
    project_id: int,
    updates: ProjectUpdate,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    await _get_owned_project(storage, project_id, user_id)
    try:
        return await storage.update_project(project_id, updates)
    except StorageError as e:
        raise _storage_failure("update project", e)


@router.delete("/projects/{project_id}")
async def delete_project(
    project_id: int,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    """Delete a project together with all of its outlines."""
    await _get_owned_project(storage, project_id, user_id)
    if not await storage.delete_project(project_id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete project",
        )
    return {"message": "Project deleted successfully"}


# Course outlines

@router.post("/projects/{project_id}/outlines", response_model=CourseOutlineRecord)
async def create_project_outline(
    project_id: int,
    outline: CourseOutlineInput,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    """Attach a new outline to a project; it becomes the project's active outline."""
    await _get_owned_project(storage, project_id, user_id)
    try:
        return await storage.create_course_outline(CourseOutlineCreate(
            project_id=project_id,
            is_active=True,
            **outline.model_dump(),
        ))
    except StorageError as e:
        raise _storage_failure("create course outline", e)


@router.get("/projects/{project_id}/outlines", response_model=List[CourseOutlineRecord])
async def list_project_outlines(
    project_id: int,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    await _get_owned_project(storage, project_id, user_id)
    return await storage.get_project_outlines(project_id)


@router.get("/projects/{project_id}/outlines/active", response_model=CourseOutlineRecord)
async def get_active_outline(
    project_id: int,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    await _get_owned_project(storage, project_id, user_id)
    outline = await storage.get_active_outline(project_id)
    if outline is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active outline found")
    return outline


@router.put("/projects/{project_id}/outlines/{outline_id}", response_model=CourseOutlineRecord)
async def update_project_outline(
    project_id: int,
    outline_id: int,
    updates: CourseOutlineUpdate,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    """Edit an outline's title and content. Version and active flag are not editable here."""
    await _get_owned_project(storage, project_id, user_id)
    outline = await storage.get_course_outline(outline_id)
    if outline is None or outline.project_id != project_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course outline not found")

    edits = CourseOutlineUpdate(title=updates.title, content=updates.content)
    try:
        return await storage.update_course_outline(outline_id, edits)
    except StorageError as e:
        raise _storage_failure("update course outline", e)


@router.get("/course-outlines/{outline_id}", response_model=CourseOutlineRecord)
async def get_course_outline(
    outline_id: int,
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    return await _get_owned_outline(storage, outline_id, user_id)


@router.patch("/course-outlines/{outline_id}", response_model=CourseOutlineRecord)
async def replace_course_outline_content(
    outline_id: int,
    content: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_caller_id),
    storage: CourseStorage = Depends(get_course_storage),
):
    """
    Replace an outline's content with the posted outline JSON.

    The record title follows the outline's ``title`` when one is given.
    """
    outline = await _get_owned_outline(storage, outline_id, user_id)
    title = content.get("title")
    edits = CourseOutlineUpdate(
        title=title if isinstance(title, str) and title else outline.title,
        content=content,
    )
    try:
        return await storage.update_course_outline(outline_id, edits)
    except StorageError as e:
        raise _storage_failure("update course outline", e)
