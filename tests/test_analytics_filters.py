"""
Tests for task filtering and member lookup.
"""

import pytest

from sprint_tracker.analytics.filters import TaskFilters, filter_tasks, get_team_member
from sprint_tracker.data.schemas import Member, Task


@pytest.fixture
def tasks():
    return [
        Task(id="t-1", name="Build search API", owner="neha", status="in-progress", priority="urgent"),
        Task(id="t-2", name="Sprint planning", owner="both", status="completed", priority="normal", completed=True),
        Task(id="t-3", name="Regression suite", owner="sam", status="blocked", priority="low"),
        Task(id="t-4", name="Search docs", owner="avi", status="todo", priority="normal"),
    ]


def ids(tasks):
    return [task.id for task in tasks]


def test_no_filters_returns_everything(tasks):
    assert ids(filter_tasks(tasks)) == ["t-1", "t-2", "t-3", "t-4"]
    assert ids(filter_tasks(tasks, TaskFilters())) == ["t-1", "t-2", "t-3", "t-4"]


def test_owner_filter_includes_shared_tasks(tasks):
    assert ids(filter_tasks(tasks, TaskFilters(owner="neha"))) == ["t-1", "t-2"]


def test_status_filter_is_case_insensitive_substring(tasks):
    assert ids(filter_tasks(tasks, TaskFilters(status="PROGRESS"))) == ["t-1"]


def test_priority_filter(tasks):
    assert ids(filter_tasks(tasks, TaskFilters(priority="normal"))) == ["t-2", "t-4"]


def test_search_filter_matches_name(tasks):
    assert ids(filter_tasks(tasks, TaskFilters(search="search"))) == ["t-1", "t-4"]


def test_hide_completed(tasks):
    assert ids(filter_tasks(tasks, TaskFilters(hide_completed=True))) == ["t-1", "t-3", "t-4"]


def test_filters_combine(tasks):
    filters = TaskFilters(owner="avi", priority="normal", hide_completed=True)

    assert ids(filter_tasks(tasks, filters)) == ["t-4"]


def test_get_team_member():
    members = [Member(id="avi", name="Avi"), Member(id="neha", name="Neha")]

    assert get_team_member(members, "neha").name == "Neha"
    assert get_team_member(members, "ghost") is None
