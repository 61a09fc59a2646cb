from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from tracker.models.entities import Project, ScheduledTask, StoredTask, TaskInput


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Auth

class RegisterDTO(CamelModel):
    name: str = Field(..., min_length=2, max_length=120)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        v = _strip(v)
        return v.lower() if isinstance(v, str) else v


class LoginDTO(CamelModel):
    email: str = Field(..., max_length=200)
    password: str = Field(..., min_length=1, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        v = _strip(v)
        return v.lower() if isinstance(v, str) else v


class AuthResultDTO(CamelModel):
    token: str
    name: str
    email: str


# Projects and tasks

class ProjectCreateDTO(CamelModel):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip(v)

    @field_validator("description", mode="before")
    @classmethod
    def blank_description_is_none(cls, v):
        v = _strip(v)
        return v or None


class TaskDTO(CamelModel):
    id: int
    title: str
    due_date: Optional[datetime] = None
    is_completed: bool
    project_id: int
    estimated_hours: Optional[int] = None

    @classmethod
    def from_domain(cls, t: StoredTask) -> "TaskDTO":
        return cls(
            id=t.id,
            title=t.title,
            due_date=t.due_date,
            is_completed=t.is_completed,
            project_id=t.project_id,
            estimated_hours=t.estimated_hours,
        )


class ProjectSummaryDTO(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, p: Project) -> "ProjectSummaryDTO":
        return cls(id=p.id, title=p.title, description=p.description, created_at=p.created_at)


class ProjectDetailsDTO(ProjectSummaryDTO):
    tasks: List[TaskDTO] = []


class TaskWriteDTO(CamelModel):
    """Body for both creating and replacing a stored task."""
    title: str = Field(..., min_length=1, max_length=200)
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = Field(None, ge=1, le=200)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip(v)


# Scheduling

class ScheduleTaskInputDTO(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    # Values below 1 are floored by the scheduler, not rejected
    estimated_hours: int = Field(1, le=200)
    due_date: Optional[datetime] = None
    dependencies: Optional[List[str]] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip(v)

    def to_domain(self) -> TaskInput:
        return TaskInput(
            title=self.title,
            estimated_hours=self.estimated_hours,
            due_date=self.due_date,
            dependencies=list(self.dependencies) if self.dependencies else None,
        )


class ScheduleRequestDTO(CamelModel):
    tasks: Optional[List[ScheduleTaskInputDTO]] = None


class ScheduledTaskDTO(CamelModel):
    title: str
    start_on: datetime
    finish_on: datetime
    estimated_hours: int
    due_date: Optional[datetime] = None
    dependencies: List[str] = []

    @classmethod
    def from_domain(cls, s: ScheduledTask) -> "ScheduledTaskDTO":
        return cls(
            title=s.title,
            start_on=s.start_on,
            finish_on=s.finish_on,
            estimated_hours=s.estimated_hours,
            due_date=s.due_date,
            dependencies=list(s.dependencies),
        )


class ScheduleResponse(CamelModel):
    project_id: int
    title: str
    recommended_order: List[str]
    timeline: List[ScheduledTaskDTO]
