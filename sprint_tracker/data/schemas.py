"""
Canonical record schemas and data contracts for sprint data.

**Conceptual**: This module defines the "data contracts" for the whole system.
Every record that leaves the normalizers (project config, member, task,
milestone) is one of the frozen dataclasses below, with values restricted to
the vocabularies declared here. Downstream consumers (renderers, exporters,
bandwidth analytics) can rely on these shapes without re-checking them.

**Schema philosophy**:
  - Records are immutable (frozen dataclasses, tuples for collections).
  - Enumerated fields (status, priority, color class) only ever hold one of the
    whitelisted lowercase values.
  - Dates are ISO calendar strings ("YYYY-MM-DD") or "" when absent.
  - Structural problems raise exceptions from the SprintDataError family;
    bad cell values never do (sanitizers substitute defaults instead).
"""

from dataclasses import dataclass
from typing import Optional


# Logical table names, in fetch order
SPRINT_CONFIG = "SPRINT_CONFIG"
MEMBERS = "MEMBERS"
TASKS = "TASKS"
MILESTONES = "MILESTONES"

ALL_TABLES = (SPRINT_CONFIG, MEMBERS, TASKS, MILESTONES)

# A load cycle aborts if any of these is missing; milestones degrade to empty
REQUIRED_TABLES = (SPRINT_CONFIG, MEMBERS, TASKS)

COLOR_CLASSES = ("primary", "success", "warning", "info", "danger")

TASK_STATUSES = ("in-progress", "todo", "completed", "blocked", "review", "pending")
MILESTONE_STATUSES = ("pending", "in-progress", "completed", "blocked")
PRIORITY_LEVELS = ("urgent", "normal", "low")

DEFAULT_TASK_STATUS = "todo"
DEFAULT_MILESTONE_STATUS = "pending"
DEFAULT_PRIORITY = "normal"

DEFAULT_BANDWIDTH_HOURS = 40.0
DEFAULT_ESTIMATED_HOURS = 8.0
DEFAULT_PREPARED_BY = "Unknown"
UNASSIGNED_OWNER = "unassigned"
SHARED_OWNER = "both"

MAX_TEXT_LENGTH = 500
MAX_ID_LENGTH = 50


class SprintDataError(Exception):
    """
    Base exception for sprint data loading errors.

    Callers can catch SprintDataError to handle every terminal failure of a
    load cycle, or catch a subclass for fine-grained handling.
    """
    pass


class MalformedInputError(SprintDataError):
    """
    Raised when a table's input is not a sequence of rows.

    Signals a structural fetch/format failure (not bad cell data). Fatal for
    required tables; the orchestrator reports it as
    "Invalid <TABLE> data structure".
    """
    pass


class TableFetchError(SprintDataError):
    """Raised when one or more required tables could not be retrieved."""

    def __init__(self, failures: dict[str, str]):
        self.failures = dict(failures)
        lines = [f"{table}: {reason}" for table, reason in self.failures.items()]
        super().__init__("Failed to load required sheets:\n" + "\n".join(lines))


class DataValidationError(SprintDataError):
    """
    Raised when the validator reports at least one hard error.

    The full ValidationReport is attached so callers can surface the warnings
    collected in the same pass.
    """

    def __init__(self, report: "ValidationReport"):
        self.report = report
        super().__init__("Data validation failed:\n" + "\n".join(report.errors))


@dataclass(frozen=True)
class ProjectConfig:
    """Sprint-level settings from the SPRINT_CONFIG key/value sheet."""
    name: str
    start_date: str
    end_date: str
    prepared_by: str = DEFAULT_PREPARED_BY

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "preparedBy": self.prepared_by,
        }


@dataclass(frozen=True)
class Member:
    """
    One team member (one MEMBERS row).

    Attributes:
        id: Lowercase slug, used as the task owner key.
        name: Display name (required).
        role: Free-text role.
        color_class: One of COLOR_CLASSES.
        capacity: Free-text capacity description (e.g. "100%").
        focus: Free-text focus area.
        bandwidth_hours: Weekly available hours (> 0).
    """
    id: str
    name: str
    role: str = "Team Member"
    color_class: str = "primary"
    capacity: str = "100%"
    focus: str = "Sprint work"
    bandwidth_hours: float = DEFAULT_BANDWIDTH_HOURS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "colorClass": self.color_class,
            "capacity": self.capacity,
            "focus": self.focus,
            "bandwidthHours": self.bandwidth_hours,
        }


@dataclass(frozen=True)
class Task:
    """
    One sprint task (one TASKS row).

    Invariant: when both dates are set, start_date <= end_date. Rows that break
    it never become Task objects.
    """
    id: str
    name: str
    owner: str = UNASSIGNED_OWNER
    status: str = DEFAULT_TASK_STATUS
    priority: str = DEFAULT_PRIORITY
    start_date: str = ""
    end_date: str = ""
    jira_id: str = ""
    jira_url: str = ""
    bu: str = ""
    type: str = ""
    blockers: str = ""
    notes: str = ""
    completed: bool = False
    estimated_hours: float = DEFAULT_ESTIMATED_HOURS

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "jiraId": self.jira_id,
            "jiraUrl": self.jira_url,
            "owner": self.owner,
            "bu": self.bu,
            "status": self.status,
            "priority": self.priority,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "type": self.type,
            "blockers": self.blockers,
            "notes": self.notes,
            "completed": self.completed,
            "estimatedHours": self.estimated_hours,
        }


@dataclass(frozen=True)
class Milestone:
    """One dated milestone (one MILESTONES row)."""
    id: str
    date: str
    title: str
    assignee: str = ""
    status: str = DEFAULT_MILESTONE_STATUS
    description: str = ""
    progress: float = 0.0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "title": self.title,
            "assignee": self.assignee,
            "status": self.status,
            "description": self.description,
            "progress": self.progress,
        }


@dataclass(frozen=True)
class ValidationReport:
    """
    Combined result of validating one load cycle.

    Errors are fatal to the cycle; warnings are informational. Both keep the
    order in which the validator met them.
    """
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def is_fatal(self) -> bool:
        """True when the dataset must be discarded in favour of the fallback."""
        return self.has_errors

    def to_dict(self) -> dict:
        return {"errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass(frozen=True)
class SprintDataset:
    """
    Immutable snapshot produced by one load cycle.

    Attributes:
        project: Sprint configuration.
        team_members: Normalized members, in sheet order.
        tasks: Normalized tasks, in sheet order.
        milestones: Normalized milestones, in sheet order (may be empty).
        loaded: True when the snapshot came from the sheet; False for fallback.
        error: Terminal failure message when the fallback was substituted.
        source: Where the data came from ("google-sheets", "local-csv", "fallback", ...).
    """
    project: ProjectConfig
    team_members: tuple[Member, ...] = ()
    tasks: tuple[Task, ...] = ()
    milestones: tuple[Milestone, ...] = ()
    loaded: bool = False
    error: Optional[str] = None
    source: str = "spreadsheet"

    def to_dict(self) -> dict:
        """Serialize with the camelCase keys consumed by the dashboard renderer."""
        return {
            "project": self.project.to_dict(),
            "teamMembers": [m.to_dict() for m in self.team_members],
            "tasks": [t.to_dict() for t in self.tasks],
            "milestones": [m.to_dict() for m in self.milestones],
            "loaded": self.loaded,
            "error": self.error,
            "source": self.source,
        }
