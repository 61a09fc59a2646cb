import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from tracker.api.deps import get_current_user
from tracker.api.schemas import (
    ProjectCreateDTO,
    ProjectDetailsDTO,
    ProjectSummaryDTO,
    ScheduledTaskDTO,
    ScheduleRequestDTO,
    ScheduleResponse,
    TaskDTO,
    TaskWriteDTO,
)
from tracker.config.settings import get_settings
from tracker.engine.errors import SchedulingError
from tracker.engine.scheduler import build_schedule
from tracker.models.entities import StoredTask, User
from tracker.storage.database import get_db
from tracker.storage.repositories import ProjectRepository, TaskRepository

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)

_LATEST = datetime.max.replace(tzinfo=timezone.utc)


def _display_order(tasks: List[StoredTask]) -> List[StoredTask]:
    """Open tasks first, then by due date with undated tasks last."""
    return sorted(tasks, key=lambda t: (t.is_completed, t.due_date or _LATEST))


def _task_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


def _project_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")


# Projects

@router.get("/projects", response_model=List[ProjectSummaryDTO], tags=["projects"])
def list_projects(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    projects = ProjectRepository(db).list_for_user(user.id)
    return [ProjectSummaryDTO.from_domain(p) for p in projects]


@router.post(
    "/projects",
    response_model=ProjectSummaryDTO,
    status_code=status.HTTP_201_CREATED,
    tags=["projects"],
)
def create_project(
    req: ProjectCreateDTO,
    response: Response,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    project = ProjectRepository(db).create(user.id, req.title, req.description)
    logger.info(f"User {user.id} created project {project.id}")
    response.headers["Location"] = f"/api/v1/projects/{project.id}"
    return ProjectSummaryDTO.from_domain(project)


@router.get("/projects/{project_id}", response_model=ProjectDetailsDTO, tags=["projects"])
def get_project(project_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    project = ProjectRepository(db).get_by_id(project_id, user.id)
    if project is None:
        raise _project_not_found()

    tasks = _display_order(TaskRepository(db).list_for_project(project.id))
    return ProjectDetailsDTO(
        id=project.id,
        title=project.title,
        description=project.description,
        created_at=project.created_at,
        tasks=[TaskDTO.from_domain(t) for t in tasks],
    )


@router.delete("/projects/{project_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["projects"])
def delete_project(project_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    ProjectRepository(db).delete(project_id, user.id)


# Tasks

@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskDTO,
    status_code=status.HTTP_201_CREATED,
    tags=["tasks"],
)
def create_task(
    project_id: int,
    req: TaskWriteDTO,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = TaskRepository(db).create(project_id, user.id, req.title, req.due_date, req.estimated_hours)
    if task is None:
        raise _project_not_found()
    return TaskDTO.from_domain(task)


@router.put("/tasks/{task_id}", response_model=TaskDTO, tags=["tasks"])
def update_task(
    task_id: int,
    req: TaskWriteDTO,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = TaskRepository(db).update(task_id, user.id, req.title, req.due_date, req.estimated_hours)
    if task is None:
        raise _task_not_found()
    return TaskDTO.from_domain(task)


@router.patch("/tasks/{task_id}/toggle", response_model=TaskDTO, tags=["tasks"])
def toggle_task(task_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    task = TaskRepository(db).toggle_completion(task_id, user.id)
    if task is None:
        raise _task_not_found()
    return TaskDTO.from_domain(task)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["tasks"])
def delete_task(task_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not TaskRepository(db).delete(task_id, user.id):
        raise _task_not_found()


# Scheduling

@router.post(
    "/projects/{project_id}/schedule",
    response_model=ScheduleResponse,
    summary="Generate a dependency-aware schedule",
    tags=["scheduling"],
)
def generate_schedule(
    project_id: int,
    req: Optional[ScheduleRequestDTO] = Body(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Build a recommended order and serial timeline for a project.

    **Input:**
    - No body, or an empty `tasks` list: schedule the project's stored tasks
      (no dependencies, 4h default estimate)
    - `tasks`: explicit task list with `dependencies` naming other titles

    **Ordering:**
    Dependencies always come first. Among ready tasks the earliest due date
    wins, then the smaller estimate, then the title (case-insensitive).

    **Timeline:**
    One worker, starting today at 09:00 UTC, tasks back to back.

    **Error Handling:**
    - 400: empty task set, duplicate titles, unknown dependency, or a cycle
    - 404: project not found for this user
    - 422: malformed payload, including estimates above 200 hours
    """
    project = ProjectRepository(db).get_by_id(project_id, user.id)
    if project is None:
        raise _project_not_found()

    overrides = [t.to_domain() for t in req.tasks] if req and req.tasks else None
    stored = [] if overrides else TaskRepository(db).list_for_project(project.id)
    logger.info(
        f"Schedule request for project {project.id}: "
        f"{len(overrides) if overrides else len(stored)} tasks, override={overrides is not None}"
    )

    try:
        result = build_schedule(
            stored,
            overrides,
            day_start_hour=settings.schedule_day_start_hour,
            default_estimated_hours=settings.default_estimated_hours,
        )
    except SchedulingError as exc:
        logger.warning(f"Schedule rejected for project {project.id}: {exc}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    return ScheduleResponse(
        project_id=project.id,
        title=project.title,
        recommended_order=result.recommended_order,
        timeline=[ScheduledTaskDTO.from_domain(s) for s in result.timeline],
    )
