"""
Sprint working-day and bandwidth metrics.

**Conceptual**: Team members declare a weekly bandwidth (hours per week). A
sprint spans a number of working days (Mon-Fri, no holiday calendar), so each
member's sprint capacity is:

    hours_per_day       = weekly_hours / 5
    total_sprint_hours  = hours_per_day * sprint_working_days

Once a sprint is running, only the remaining working days still offer
capacity for new work, which is what the "remaining" helpers report.

**Functionally**: Dates are ISO "YYYY-MM-DD" strings (as stored on the records)
or datetime.date objects. Empty or unparseable dates count as zero working
days rather than raising; the dashboard shows "setup required" in that case.

Working days are counted with numpy's business-day calendar; per-day task
allocation uses pandas business-day ranges.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import numpy as np
import pandas as pd

from sprint_tracker.data.io import tasks_to_frame
from sprint_tracker.data.schemas import UNASSIGNED_OWNER, Member, ProjectConfig, SprintDataset, Task
from sprint_tracker.utils.time import Clock
from sprint_tracker.utils.time import today as clock_today

WORK_DAYS_PER_WEEK = 5


def _as_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def count_working_days(start, end) -> int:
    """
    Count Mon-Fri days between start and end, both inclusive.

    Returns 0 when either date is empty/invalid or end is before start.

    Usage example:
        >>> count_working_days("2025-01-06", "2025-01-12")  # Mon..Sun
        5
    """
    start_day, end_day = _as_date(start), _as_date(end)
    if start_day is None or end_day is None or end_day < start_day:
        return 0
    return int(np.busday_count(np.datetime64(start_day), np.datetime64(end_day + timedelta(days=1))))


@dataclass(frozen=True)
class SprintBandwidth:
    sprint_working_days: int
    hours_per_day: float
    total_sprint_hours: float


def calculate_sprint_bandwidth(weekly_hours: float, start, end) -> SprintBandwidth:
    """
    Sprint capacity for one weekly bandwidth over the sprint window.

    Args:
        weekly_hours: Available hours per week (e.g. 40).
        start: Sprint start date.
        end: Sprint end date.

    Returns:
        SprintBandwidth with total_sprint_hours rounded to 1 decimal.
    """
    working_days = count_working_days(start, end)
    hours_per_day = weekly_hours / WORK_DAYS_PER_WEEK
    return SprintBandwidth(
        sprint_working_days=working_days,
        hours_per_day=hours_per_day,
        total_sprint_hours=round(hours_per_day * working_days, 1),
    )


@dataclass(frozen=True)
class MemberCapacity:
    id: str
    name: str
    weekly_hours: float
    sprint_working_days: int
    hours_per_day: float
    total_sprint_hours: float


@dataclass(frozen=True)
class TeamCapacity:
    total_sprint_hours: float
    sprint_working_days: int
    member_capacities: tuple[MemberCapacity, ...] = ()


def team_sprint_capacity(dataset: SprintDataset) -> TeamCapacity:
    """Per-member and total sprint capacity of the dataset's team."""
    project = dataset.project
    capacities = []
    for member in dataset.team_members:
        bandwidth = calculate_sprint_bandwidth(member.bandwidth_hours, project.start_date, project.end_date)
        capacities.append(
            MemberCapacity(
                id=member.id,
                name=member.name,
                weekly_hours=member.bandwidth_hours,
                sprint_working_days=bandwidth.sprint_working_days,
                hours_per_day=bandwidth.hours_per_day,
                total_sprint_hours=bandwidth.total_sprint_hours,
            )
        )

    return TeamCapacity(
        total_sprint_hours=round(sum(c.total_sprint_hours for c in capacities), 1),
        sprint_working_days=count_working_days(project.start_date, project.end_date),
        member_capacities=tuple(capacities),
    )


@dataclass(frozen=True)
class SprintTimeState:
    """
    Where "today" falls inside the sprint, in working days.

    Attributes:
        is_valid: False when the sprint dates are missing or unparseable.
        error: Reason when is_valid is False.
        total_working_days: Working days in the whole sprint.
        elapsed_working_days: Working days from sprint start through today.
        remaining_working_days: Working days after today until sprint end.
        is_not_started: today is before the sprint start.
        is_complete: today is after the sprint end.
        today: The reference day.
        sprint_start: Parsed start date (None when invalid).
        sprint_end: Parsed end date (None when invalid).
        current_day: Working-day number of today within the sprint.
        progress_percent: elapsed / total as a whole percentage.
    """
    is_valid: bool
    error: Optional[str]
    total_working_days: int
    elapsed_working_days: int
    remaining_working_days: int
    is_not_started: bool
    is_complete: bool
    today: date
    sprint_start: Optional[date]
    sprint_end: Optional[date]
    current_day: int
    progress_percent: int


def sprint_time_state(
    project: ProjectConfig,
    today: date | None = None,
    clock: Clock | None = None,
) -> SprintTimeState:
    """
    Compute total, elapsed and remaining working days of the sprint.

    **Functionally**:
      - Before the sprint: nothing elapsed, everything remaining.
      - After the sprint: everything elapsed, nothing remaining.
      - During the sprint: elapsed counts start..today inclusive, remaining
        counts tomorrow..end, so today itself is "in progress".

    Args:
        project: Sprint config with start/end dates.
        today: Reference day (defaults to today per `clock`).
        clock: Time source used when `today` is None.
    """
    if today is None:
        today = clock_today(clock)

    start, end = _as_date(project.start_date), _as_date(project.end_date)
    if start is None or end is None:
        return SprintTimeState(
            is_valid=False,
            error="Sprint dates not configured",
            total_working_days=0,
            elapsed_working_days=0,
            remaining_working_days=0,
            is_not_started=False,
            is_complete=False,
            today=today,
            sprint_start=None,
            sprint_end=None,
            current_day=0,
            progress_percent=0,
        )

    total = count_working_days(start, end)
    is_not_started = today < start
    is_complete = today > end

    if is_not_started:
        elapsed, remaining = 0, total
    elif is_complete:
        elapsed, remaining = total, 0
    else:
        elapsed = count_working_days(start, today)
        remaining = count_working_days(today + timedelta(days=1), end)

    return SprintTimeState(
        is_valid=True,
        error=None,
        total_working_days=total,
        elapsed_working_days=elapsed,
        remaining_working_days=remaining,
        is_not_started=is_not_started,
        is_complete=is_complete,
        today=today,
        sprint_start=start,
        sprint_end=end,
        current_day=elapsed,
        progress_percent=round(elapsed / total * 100) if total > 0 else 0,
    )


def remaining_sprint_bandwidth(member: Member, project: ProjectConfig, today: date | None = None) -> float:
    """Hours this member still has available in the sprint (after today)."""
    state = sprint_time_state(project, today)
    hours_per_day = member.bandwidth_hours / WORK_DAYS_PER_WEEK
    return round(hours_per_day * state.remaining_working_days, 1)


def team_remaining_bandwidth(dataset: SprintDataset, today: date | None = None) -> float:
    return round(
        sum(remaining_sprint_bandwidth(m, dataset.project, today) for m in dataset.team_members), 1
    )


def allocated_hours_by_member(tasks: tuple[Task, ...] | list[Task]) -> dict[str, float]:
    """
    Sum estimated hours per task owner.

    Tasks with an empty owner are counted under "unassigned"; shared tasks stay
    under "both".
    """
    df = tasks_to_frame(tasks)
    if df.empty:
        return {}
    owners = df["owner"].replace("", UNASSIGNED_OWNER)
    totals = df["estimated_hours"].astype(float).groupby(owners).sum()
    return {owner: float(hours) for owner, hours in totals.items()}


def next_available_day(
    member: Member,
    dataset: SprintDataset,
    today: date | None = None,
    min_free_hours: float = 4,
) -> Optional[tuple[date, float]]:
    """
    First working day from today on where the member has enough free hours.

    **Functionally**: Each dated task owned by the member spreads its estimated
    hours evenly over its working days. Free hours on a day are the member's
    daily bandwidth minus that allocation (never below 0).

    Args:
        member: Team member to check.
        dataset: Snapshot providing the sprint window and tasks.
        today: Reference day (defaults to the real today).
        min_free_hours: Free hours a day must offer to count as available.

    Returns:
        (day, free_hours rounded to 1 decimal), or None if the sprint dates are
        not configured, the sprint is over, or no day in the sprint qualifies.
    """
    state = sprint_time_state(dataset.project, today)
    if not state.is_valid or state.is_complete:
        return None

    daily_allocation: dict[date, float] = {}
    for task in dataset.tasks:
        if task.owner != member.id or not task.start_date or not task.end_date:
            continue
        task_days = pd.bdate_range(task.start_date, task.end_date)
        if len(task_days) == 0:
            continue
        hours_per_task_day = task.estimated_hours / len(task_days)
        for day in task_days:
            daily_allocation[day.date()] = daily_allocation.get(day.date(), 0.0) + hours_per_task_day

    hours_per_day = member.bandwidth_hours / WORK_DAYS_PER_WEEK
    for day in pd.bdate_range(state.today, state.sprint_end):
        free_hours = max(0.0, hours_per_day - daily_allocation.get(day.date(), 0.0))
        if free_hours >= min_free_hours:
            return day.date(), round(free_hours, 1)

    return None
