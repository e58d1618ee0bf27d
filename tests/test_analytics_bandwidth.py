"""
Tests for sprint working-day and bandwidth metrics.

The reference sprint runs Mon 2025-01-06 .. Fri 2025-01-17: 10 working days.
"""

from datetime import date

import pytest

from sprint_tracker.analytics.bandwidth import (
    allocated_hours_by_member,
    calculate_sprint_bandwidth,
    count_working_days,
    next_available_day,
    remaining_sprint_bandwidth,
    sprint_time_state,
    team_remaining_bandwidth,
    team_sprint_capacity,
)
from sprint_tracker.data.schemas import Member, ProjectConfig, SprintDataset, Task


@pytest.fixture
def project():
    return ProjectConfig(name="Sprint 14", start_date="2025-01-06", end_date="2025-01-17")


@pytest.fixture
def dataset(project):
    return SprintDataset(
        project=project,
        team_members=(
            Member(id="avi", name="Avi", bandwidth_hours=40.0),
            Member(id="sam", name="Sam", bandwidth_hours=20.0),
        ),
        tasks=(
            Task(id="t-1", name="Busy week", owner="avi", start_date="2025-01-06", end_date="2025-01-10",
                 estimated_hours=40.0),
            Task(id="t-2", name="Small", owner="sam", estimated_hours=3.0),
            Task(id="t-3", name="Shared", owner="both", estimated_hours=2.0),
            Task(id="t-4", name="Loose", owner="", estimated_hours=1.5),
        ),
        loaded=True,
    )


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("2025-01-06", "2025-01-12", 5),   # Mon..Sun
        ("2025-01-06", "2025-01-17", 10),
        ("2025-01-11", "2025-01-12", 0),   # weekend only
        ("2025-01-08", "2025-01-08", 1),
        ("2025-01-17", "2025-01-06", 0),   # reversed
        ("", "2025-01-06", 0),
        ("garbage", "2025-01-06", 0),
        (date(2025, 1, 6), date(2025, 1, 7), 2),
    ],
)
def test_count_working_days(start, end, expected):
    assert count_working_days(start, end) == expected


def test_calculate_sprint_bandwidth():
    bandwidth = calculate_sprint_bandwidth(40, "2025-01-06", "2025-01-17")

    assert bandwidth.sprint_working_days == 10
    assert bandwidth.hours_per_day == 8.0
    assert bandwidth.total_sprint_hours == 80.0


def test_calculate_sprint_bandwidth_rounds_to_one_decimal():
    bandwidth = calculate_sprint_bandwidth(37, "2025-01-06", "2025-01-08")

    # 37 / 5 * 3 = 22.2
    assert bandwidth.total_sprint_hours == 22.2


def test_team_sprint_capacity(dataset):
    capacity = team_sprint_capacity(dataset)

    assert capacity.sprint_working_days == 10
    assert capacity.total_sprint_hours == 120.0
    assert [(c.id, c.total_sprint_hours) for c in capacity.member_capacities] == [
        ("avi", 80.0),
        ("sam", 40.0),
    ]


def test_sprint_time_state_active(project):
    state = sprint_time_state(project, date(2025, 1, 8))

    assert state.is_valid
    assert state.total_working_days == 10
    assert state.elapsed_working_days == 3
    assert state.remaining_working_days == 7
    assert state.current_day == 3
    assert state.progress_percent == 30
    assert not state.is_not_started
    assert not state.is_complete


def test_sprint_time_state_last_day(project):
    state = sprint_time_state(project, date(2025, 1, 17))

    assert state.elapsed_working_days == 10
    assert state.remaining_working_days == 0


def test_sprint_time_state_not_started(project):
    state = sprint_time_state(project, date(2025, 1, 1))

    assert state.is_not_started
    assert state.elapsed_working_days == 0
    assert state.remaining_working_days == 10
    assert state.progress_percent == 0


def test_sprint_time_state_complete(project):
    state = sprint_time_state(project, date(2025, 2, 1))

    assert state.is_complete
    assert state.elapsed_working_days == 10
    assert state.remaining_working_days == 0
    assert state.progress_percent == 100


def test_sprint_time_state_invalid_dates():
    state = sprint_time_state(ProjectConfig(name="x", start_date="", end_date=""), date(2025, 1, 8))

    assert not state.is_valid
    assert state.error == "Sprint dates not configured"
    assert state.total_working_days == 0


def test_sprint_time_state_uses_clock(project, frozen_clock):
    state = sprint_time_state(project, clock=frozen_clock)

    assert state.today == date(2025, 1, 8)


def test_remaining_bandwidth(dataset):
    today = date(2025, 1, 8)

    assert remaining_sprint_bandwidth(dataset.team_members[0], dataset.project, today) == 56.0
    assert remaining_sprint_bandwidth(dataset.team_members[1], dataset.project, today) == 28.0
    assert team_remaining_bandwidth(dataset, today) == 84.0


def test_allocated_hours_by_member(dataset):
    assert allocated_hours_by_member(dataset.tasks) == {
        "avi": 40.0,
        "sam": 3.0,
        "both": 2.0,
        "unassigned": 1.5,
    }


def test_allocated_hours_by_member_empty():
    assert allocated_hours_by_member([]) == {}


def test_next_available_day_skips_fully_booked_days(dataset):
    # avi is fully booked Mon 6 .. Fri 10 (40h over 5 days)
    result = next_available_day(dataset.team_members[0], dataset, date(2025, 1, 8))

    assert result == (date(2025, 1, 13), 8.0)


def test_next_available_day_free_member(dataset):
    # sam has 4h/day and no dated tasks; today is available
    assert next_available_day(dataset.team_members[1], dataset, date(2025, 1, 8)) == (date(2025, 1, 8), 4.0)


def test_next_available_day_none_when_threshold_unreachable(dataset):
    assert next_available_day(dataset.team_members[1], dataset, date(2025, 1, 8), min_free_hours=5) is None


def test_next_available_day_none_after_sprint(dataset):
    assert next_available_day(dataset.team_members[0], dataset, date(2025, 2, 1)) is None
