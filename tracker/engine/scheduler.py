"""
Dependency-Aware Schedule Builder

Turns a project's task list into a recommended execution order and a serial
timeline for a single worker.

Pipeline:
1. Normalize caller overrides (or stored tasks) into TaskDefinitions
2. Topologically order them with Kahn's algorithm
3. Lay the ordered tasks end to end starting at today's anchor time

Time Complexity: O(N log N + E) typical, O(N^2 log N) worst case where:
    N = number of tasks
    E = number of dependency edges

The ready set is re-sorted on every pop so that tasks freed by the last pick
compete with everything already waiting. Per-project task counts are small;
swap in a heap keyed by the same tie-break tuple if that ever changes.
"""

import logging
from datetime import datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from tracker.engine.errors import CircularDependencyError, NoTasksError, TimelineOverflowError
from tracker.graph.dependency_graph import build_dependency_graph, build_lookup, title_key
from tracker.models.entities import (
    ScheduledTask,
    ScheduleResult,
    StoredTask,
    TaskDefinition,
    TaskInput,
)
from tracker.utils.clock import ensure_utc, utcnow

logger = logging.getLogger(__name__)

DAY_START_HOUR = 9
DEFAULT_ESTIMATED_HOURS = 4
# Missing due dates sort after every real one
NO_DUE_DATE = datetime.max.replace(tzinfo=timezone.utc)


def _dedupe_dependencies(names: Optional[Sequence[str]]) -> Tuple[str, ...]:
    seen = set()
    result: List[str] = []
    for name in names or []:
        name = (name or "").strip()
        if not name or title_key(name) in seen:
            continue
        seen.add(title_key(name))
        result.append(name)
    return tuple(result)


def normalize_tasks(
    source_tasks: Sequence[StoredTask],
    overrides: Optional[Sequence[TaskInput]] = None,
    default_estimated_hours: int = DEFAULT_ESTIMATED_HOURS,
) -> List[TaskDefinition]:
    """
    Build the task definitions for one run.

    A non-empty override list replaces the stored tasks entirely. Estimates
    are floored at 1 hour rather than rejected.
    """
    if overrides:
        return [
            TaskDefinition(
                title=t.title.strip(),
                estimated_hours=max(t.estimated_hours, 1),
                due_date=t.due_date,
                dependencies=_dedupe_dependencies(t.dependencies),
            )
            for t in overrides
        ]

    # Stored tasks carry no dependency data
    return [
        TaskDefinition(
            title=t.title,
            estimated_hours=max(
                t.estimated_hours if t.estimated_hours is not None else default_estimated_hours, 1
            ),
            due_date=t.due_date,
        )
        for t in source_tasks
    ]


def sequence_key(task: TaskDefinition) -> Tuple[datetime, int, str]:
    """Tie-break among ready tasks: due date, then estimate, then title."""
    due = ensure_utc(task.due_date) or NO_DUE_DATE
    return (due, task.estimated_hours, title_key(task.title))


def resolve_order(tasks: Sequence[TaskDefinition]) -> List[TaskDefinition]:
    """
    Order tasks so every dependency precedes its dependents.

    Raises:
        NoTasksError: empty task list
        DuplicateTitleError: two tasks share a case-insensitive title
        UnknownDependencyError: a dependency names no task in the run
        CircularDependencyError: some tasks never become ready
    """
    tasks = list(tasks)
    if not tasks:
        raise NoTasksError()

    lookup = build_lookup(tasks)
    indegree, adjacency = build_dependency_graph(tasks, lookup)

    ready = [t for t in tasks if indegree[title_key(t.title)] == 0]
    ordered: List[TaskDefinition] = []

    while ready:
        ready.sort(key=sequence_key)
        current = ready.pop(0)
        ordered.append(current)

        for dependent in adjacency[title_key(current.title)]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                ready.append(lookup[dependent])

    if len(ordered) != len(tasks):
        unresolved = [t.title for t in tasks if indegree[title_key(t.title)] > 0]
        raise CircularDependencyError(unresolved)

    return ordered


def anchor_time(now: Optional[datetime] = None, day_start_hour: int = DAY_START_HOUR) -> datetime:
    """Today's date in UTC at the configured start hour."""
    today = (ensure_utc(now) or utcnow()).date()
    return datetime.combine(today, time(hour=day_start_hour), tzinfo=timezone.utc)


def build_timeline(ordered: Sequence[TaskDefinition], start: datetime) -> List[ScheduledTask]:
    cursor = start
    timeline: List[ScheduledTask] = []
    for task in ordered:
        hours = max(task.estimated_hours, 1)
        try:
            finish = cursor + timedelta(hours=hours)
        except OverflowError:
            raise TimelineOverflowError(task.title)
        timeline.append(
            ScheduledTask(
                title=task.title,
                start_on=cursor,
                finish_on=finish,
                estimated_hours=hours,
                due_date=task.due_date,
                dependencies=task.dependencies,
            )
        )
        cursor = finish
    return timeline


def build_schedule(
    source_tasks: Sequence[StoredTask],
    overrides: Optional[Sequence[TaskInput]] = None,
    *,
    now: Optional[datetime] = None,
    day_start_hour: int = DAY_START_HOUR,
    default_estimated_hours: int = DEFAULT_ESTIMATED_HOURS,
) -> ScheduleResult:
    """
    Build a recommended order and timeline for a project's tasks.

    Args:
        source_tasks: Tasks currently stored for the project
        overrides: Optional caller-supplied tasks with dependencies; used
            instead of source_tasks when non-empty
        now: Clock reading used to anchor the timeline (defaults to UTC now)
        day_start_hour: Hour of day (UTC) the first task starts
        default_estimated_hours: Estimate for stored tasks that have none

    Returns:
        ScheduleResult whose timeline follows recommended_order
    """
    definitions = normalize_tasks(source_tasks, overrides, default_estimated_hours)
    logger.debug(
        f"Building schedule for {len(definitions)} tasks "
        f"({'override' if overrides else 'stored'} task list)"
    )
    ordered = resolve_order(definitions)
    timeline = build_timeline(ordered, anchor_time(now, day_start_hour))
    return ScheduleResult(
        recommended_order=[t.title for t in ordered],
        timeline=timeline,
    )
