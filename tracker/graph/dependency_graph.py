from typing import Dict, List, Tuple

from tracker.engine.errors import DuplicateTitleError, UnknownDependencyError
from tracker.models.entities import TaskDefinition


def title_key(title: str) -> str:
    """Canonical, case-insensitive key for a task title."""
    return title.lower()


def build_lookup(tasks: List[TaskDefinition]) -> Dict[str, TaskDefinition]:
    lookup: Dict[str, TaskDefinition] = {}
    for task in tasks:
        key = title_key(task.title)
        if key in lookup:
            raise DuplicateTitleError(task.title)
        lookup[key] = task
    return lookup


def build_dependency_graph(
    tasks: List[TaskDefinition], lookup: Dict[str, TaskDefinition]
) -> Tuple[Dict[str, int], Dict[str, List[str]]]:
    """Return (in-degree, dependency -> dependents), both keyed by title_key."""
    indegree: Dict[str, int] = {title_key(t.title): 0 for t in tasks}
    adjacency: Dict[str, List[str]] = {title_key(t.title): [] for t in tasks}
    for task in tasks:
        key = title_key(task.title)
        for dependency in task.dependencies:
            dep_key = title_key(dependency)
            if dep_key not in lookup:
                raise UnknownDependencyError(dependency, task.title)
            indegree[key] += 1
            adjacency[dep_key].append(key)
    return indegree, adjacency
