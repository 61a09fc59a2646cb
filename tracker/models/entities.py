from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class User:
    id: int
    display_name: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class Project:
    id: int
    title: str
    description: Optional[str]
    created_at: datetime
    user_id: int


@dataclass(frozen=True)
class StoredTask:
    """A task as persisted in a project; carries no dependency data."""
    id: int
    title: str
    project_id: int
    due_date: Optional[datetime] = None
    estimated_hours: Optional[int] = None  # hours, may be unset
    is_completed: bool = False


@dataclass(frozen=True)
class TaskInput:
    """Caller-supplied task for a schedule run, before normalization."""
    title: str
    estimated_hours: int
    due_date: Optional[datetime] = None
    dependencies: Optional[List[str]] = None


@dataclass(frozen=True)
class TaskDefinition:
    title: str
    estimated_hours: int  # >= 1
    due_date: Optional[datetime] = None
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduledTask:
    title: str
    start_on: datetime
    finish_on: datetime
    estimated_hours: int
    due_date: Optional[datetime] = None
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleResult:
    recommended_order: List[str] = field(default_factory=list)
    timeline: List[ScheduledTask] = field(default_factory=list)
