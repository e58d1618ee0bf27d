"""
Task filtering and member lookup for dashboard views.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from sprint_tracker.data.schemas import SHARED_OWNER, Member, Task

ALL = "all"


@dataclass(frozen=True)
class TaskFilters:
    """
    Active filters of a task view. "all" disables a filter.

    Attributes:
        owner: Member id. Shared ("both") tasks match every owner.
        status: Case-insensitive substring of the task status.
        priority: Exact priority level.
        search: Case-insensitive substring of the task name ("" disables).
        hide_completed: Drop tasks flagged completed.
    """
    owner: str = ALL
    status: str = ALL
    priority: str = ALL
    search: str = ""
    hide_completed: bool = False


def _matches(task: Task, filters: TaskFilters) -> bool:
    if filters.hide_completed and task.completed:
        return False
    if filters.owner != ALL and task.owner not in (filters.owner, SHARED_OWNER):
        return False
    if filters.status != ALL and filters.status.lower() not in task.status.lower():
        return False
    if filters.priority != ALL and task.priority != filters.priority:
        return False
    if filters.search and filters.search.lower() not in task.name.lower():
        return False
    return True


def filter_tasks(tasks: Iterable[Task], filters: Optional[TaskFilters] = None) -> list[Task]:
    """
    Return the tasks matching every active filter, in input order.

    Usage example:
        >>> filter_tasks(dataset.tasks, TaskFilters(owner="avi", hide_completed=True))
    """
    if filters is None:
        return list(tasks)
    return [task for task in tasks if _matches(task, filters)]


def get_team_member(members: Iterable[Member], member_id: str) -> Optional[Member]:
    """Member with the given id, or None."""
    return next((member for member in members if member.id == member_id), None)
