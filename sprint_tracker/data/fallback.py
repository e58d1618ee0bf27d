"""
Built-in fallback dataset.

When a load cycle fails (a required sheet is missing, malformed, or fails
validation) the orchestrator swaps in this demo dataset so consumers never see
a partial or empty snapshot. The demo walks the reader through connecting
their own spreadsheet and spreads its tasks and milestones across the current
month, so timeline views have something sensible to draw.

The dataset is internally consistent: it passes validate_dataset with zero
errors (see tests/test_data_fallback.py).
"""

from datetime import date, timedelta
from typing import Optional

from sprint_tracker.data.schemas import (
    Member,
    Milestone,
    ProjectConfig,
    SprintDataset,
    Task,
)
from sprint_tracker.utils.time import Clock, month_bounds, today


FALLBACK_SOURCE = "fallback"


def _offset(start: date, days: int) -> str:
    return (start + timedelta(days=days)).isoformat()


def build_fallback_dataset(clock: Clock | None = None, error: Optional[str] = None) -> SprintDataset:
    """
    Build the demo dataset for the clock's current month.

    Args:
        clock: Time source for the sprint month (RealClock if None).
        error: Failure message to attach to the snapshot.

    Returns:
        SprintDataset with loaded=False and source="fallback".
    """
    month_start, month_end = month_bounds(today(clock))

    project = ProjectConfig(
        name="Demo Sprint (Setup Required)",
        start_date=month_start.isoformat(),
        end_date=month_end.isoformat(),
        prepared_by="System",
    )

    members = (
        Member(
            id="avi",
            name="Avi Gupta",
            role="Software Engineer",
            color_class="primary",
            capacity="100%",
            focus="Setup Google Sheets",
        ),
    )

    tasks = (
        Task(
            id="setup-1",
            name="Create Google Sheet with 4 tabs",
            owner="avi",
            bu="Setup",
            status="pending",
            priority="urgent",
            start_date=_offset(month_start, 0),
            end_date=_offset(month_start, 2),
            type="Configuration",
            notes="Create tabs: SPRINT_CONFIG, MEMBERS, TASKS, MILESTONES",
        ),
        Task(
            id="setup-2",
            name="Share Google Sheet publicly",
            owner="avi",
            bu="Setup",
            status="pending",
            priority="urgent",
            start_date=_offset(month_start, 3),
            end_date=_offset(month_start, 5),
            type="Configuration",
            notes="Share -> Anyone with link can VIEW",
        ),
        Task(
            id="setup-3",
            name="Set SPRINT_SHEET_ID in .env",
            owner="avi",
            bu="Setup",
            status="pending",
            priority="urgent",
            start_date=_offset(month_start, 6),
            end_date=_offset(month_start, 10),
            type="Configuration",
            notes="Copy the Sheet ID from the sheet URL",
        ),
        Task(
            id="demo-4",
            name="Example Task - Development Phase",
            jira_id="DEMO-101",
            jira_url="#",
            owner="neha",
            bu="Development",
            status="in-progress",
            priority="normal",
            start_date=_offset(month_start, 7),
            end_date=_offset(month_start, 14),
            type="Development",
            notes="Sample multi-day task spanning 2 weeks",
        ),
        Task(
            id="demo-5",
            name="Example Task - Review & Testing",
            jira_id="DEMO-102",
            jira_url="#",
            owner="both",
            bu="QA",
            status="pending",
            priority="normal",
            start_date=_offset(month_start, 15),
            end_date=_offset(month_start, 20),
            type="Testing",
            notes="Cross-team collaboration task",
        ),
    )

    milestones = (
        Milestone(id="setup-m1", date=_offset(month_start, 0), title="Sprint Kickoff", assignee="Team"),
        Milestone(id="demo-m2", date=_offset(month_start, 7), title="Mid-Sprint Review", assignee="PM"),
        Milestone(id="demo-m3", date=_offset(month_start, 14), title="Development Complete", assignee="Dev Team"),
        Milestone(id="demo-m4", date=_offset(month_start, 20), title="QA Sign-off", assignee="QA Team"),
        Milestone(id="demo-m5", date=month_end.isoformat(), title="Sprint End & Demo", assignee="All"),
    )

    return SprintDataset(
        project=project,
        team_members=members,
        tasks=tasks,
        milestones=milestones,
        loaded=False,
        error=error,
        source=FALLBACK_SOURCE,
    )
