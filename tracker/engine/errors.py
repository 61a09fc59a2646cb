"""Validation failures raised while building a schedule.

All of these describe a malformed task set supplied by the caller; none of
them are transient and none are retried.
"""


class SchedulingError(Exception):
    """Base class for schedule validation failures."""


class NoTasksError(SchedulingError):
    def __init__(self):
        super().__init__("No tasks available to build a schedule.")


class DuplicateTitleError(SchedulingError):
    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Duplicate task title detected: {title}")


class UnknownDependencyError(SchedulingError):
    def __init__(self, dependency: str, task_title: str):
        self.dependency = dependency
        self.task_title = task_title
        super().__init__(f"Unknown dependency '{dependency}' referenced by task '{task_title}'.")


class CircularDependencyError(SchedulingError):
    def __init__(self, unresolved=None):
        # Titles that never reached in-degree zero
        self.unresolved = list(unresolved or [])
        message = "Circular dependency detected while building the schedule."
        if self.unresolved:
            message = f"{message[:-1]}: {', '.join(self.unresolved)}."
        super().__init__(message)


class TimelineOverflowError(SchedulingError):
    def __init__(self, task_title: str):
        self.task_title = task_title
        super().__init__(f"Task '{task_title}' runs past the last representable date.")
