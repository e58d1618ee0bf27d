"""
Table normalizers: raw header-keyed rows -> typed sprint records.

**Conceptual**: Each of the four logical tables (SPRINT_CONFIG, MEMBERS, TASKS,
MILESTONES) has one normalizer. A normalizer:
  1. Checks that its input is structurally a sequence of rows
     (MalformedInputError otherwise; the only way a normalizer raises).
  2. Resolves each field through a declared, ordered tuple of header aliases.
  3. Runs the field's sanitizer (always succeeds, see sanitizers.py).
  4. Applies the table's business rules and final row filter.

**Header aliases**: people rename columns ("id", "Id", "ID", "start date",
"StartDate"...). Instead of ad-hoc `a or b or c` chains, every field declares
its accepted headers once (the *_ALIASES tuples below) and resolve_field()
looks them up in order, returning the first non-blank cell.

Normalizers share no state: the same rows (and clock) always produce equal
output, so the four tables can be normalized independently in any order.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from sprint_tracker.data.schemas import (
    DEFAULT_BANDWIDTH_HOURS,
    DEFAULT_ESTIMATED_HOURS,
    DEFAULT_PREPARED_BY,
    UNASSIGNED_OWNER,
    MalformedInputError,
    Member,
    Milestone,
    ProjectConfig,
    Task,
)
from sprint_tracker.data.sanitizers import (
    sanitize_boolean,
    sanitize_color_class,
    sanitize_date,
    sanitize_id,
    sanitize_milestone_status,
    sanitize_number,
    sanitize_priority,
    sanitize_task_status,
    sanitize_text,
    sanitize_url,
)
from sprint_tracker.utils.time import Clock, month_bounds, today

logger = logging.getLogger(__name__)


# Config keys (SPRINT_CONFIG is a key/value sheet)
CONFIG_NAME_KEYS = ("sprint_name", "name")
CONFIG_START_KEYS = ("start_date",)
CONFIG_END_KEYS = ("end_date",)
CONFIG_PREPARED_BY_KEYS = ("prepared_by", "preparedBy")

_KEY_PREFIX = "key "
_VALUE_PREFIX = "value "

# Shared
ID_ALIASES = ("id", "Id", "ID")

# MEMBERS
MEMBER_NAME_ALIASES = ("name", "Name", "NAME")
MEMBER_ROLE_ALIASES = ("role", "Role", "ROLE")
MEMBER_COLOR_ALIASES = ("color_class", "color class", "colorClass", "ColorClass")
MEMBER_CAPACITY_ALIASES = ("capacity", "Capacity")
MEMBER_FOCUS_ALIASES = ("focus", "Focus")
MEMBER_BANDWIDTH_ALIASES = ("bandwidth_hours", "bandwidth hours", "bandwidthHours", "BandwidthHours")

MEMBER_DEFAULT_ROLE = "Team Member"
MEMBER_DEFAULT_CAPACITY = "100%"
MEMBER_DEFAULT_FOCUS = "Sprint work"

# TASKS
TASK_NAME_ALIASES = ("title", "Title", "task", "Task", "name", "Name")
TASK_OWNER_ALIASES = ("owner", "Owner")
TASK_PRIORITY_ALIASES = ("priority", "Priority")
TASK_STATUS_ALIASES = ("status", "Status")
TASK_COMPLETED_ALIASES = ("completed", "Completed")
TASK_START_ALIASES = ("start_date", "start date", "StartDate", "startDate", "Start Date")
TASK_END_ALIASES = ("end_date", "end date", "EndDate", "endDate", "End Date")
TASK_HOURS_ALIASES = ("estimated_hours", "estimated hours", "estimatedHours", "EstimatedHours")
TASK_JIRA_ID_ALIASES = ("jira", "Jira", "jira_id", "jira id", "jiraId")
TASK_JIRA_URL_ALIASES = ("jira_url", "jira url", "jira_link", "jiraUrl")
TASK_BU_ALIASES = ("bu", "BU", "Bu")
TASK_TYPE_ALIASES = ("type", "Type")
TASK_BLOCKERS_ALIASES = ("blocker", "blockers", "Blocker", "Blockers")
TASK_NOTES_ALIASES = ("notes", "Notes")

# MILESTONES
MILESTONE_DATE_ALIASES = ("date", "Date")
MILESTONE_TITLE_ALIASES = ("title", "Title", "milestone", "Milestone")
MILESTONE_ASSIGNEE_ALIASES = ("owner", "Owner", "assignee", "Assignee")
MILESTONE_STATUS_ALIASES = ("status", "Status")
MILESTONE_DESCRIPTION_ALIASES = ("description", "Description")
MILESTONE_PROGRESS_ALIASES = ("progress", "Progress")


def resolve_field(row: Mapping[str, Any], aliases: Sequence[str], default: str = "") -> str:
    """
    Return the first non-blank cell among `aliases`, else `default`.

    Args:
        row: RawRow (header -> cell).
        aliases: Accepted header spellings, in priority order.
        default: Value when no alias holds a non-blank cell.

    Example:
        >>> resolve_field({"ID": "avi", "id": ""}, ID_ALIASES)
        'avi'
    """
    for alias in aliases:
        value = row.get(alias)
        if value is not None and str(value).strip():
            return str(value)
    return default


def _require_rows(rows: Any, table: str) -> Sequence[Mapping[str, Any]]:
    if not isinstance(rows, (list, tuple)):
        raise MalformedInputError(
            f"{table} data must be a list of rows, got {type(rows).__name__}"
        )
    for index, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise MalformedInputError(
                f"{table} row {index} must be a mapping of header to cell, "
                f"got {type(row).__name__}"
            )
    return rows


def _first_of(config: Mapping[str, str], keys: Sequence[str]) -> str:
    for key in keys:
        if config.get(key):
            return config[key]
    return ""


def _strip_prefix(text: str, prefix: str) -> str:
    if text.lower().startswith(prefix):
        return text[len(prefix):].strip()
    return text


def _header_pair(rows: Sequence[Mapping[str, Any]]) -> tuple[str, str] | None:
    """
    Recover the pair a CSV export folds into the header line.

    When the sheet's first row reads "key sprint_name | value Q1 Launch", that
    row becomes the header line. The value is the second header when it carries
    the "value " prefix; otherwise the export left it in the second cell of the
    first data row.
    """
    if not rows:
        return None
    headers = list(rows[0].keys())
    cells = list(rows[0].values())
    if len(headers) < 2 or not sanitize_text(headers[0]).lower().startswith(_KEY_PREFIX):
        return None
    key = _strip_prefix(sanitize_text(headers[0]), _KEY_PREFIX)
    second_header = sanitize_text(headers[1])
    if second_header.lower().startswith(_VALUE_PREFIX):
        value = _strip_prefix(second_header, _VALUE_PREFIX)
    else:
        value = _strip_prefix(sanitize_text(cells[1]), _VALUE_PREFIX)
    if not key or not value:
        return None
    return key, value


def _parse_config_pairs(rows: Sequence[Mapping[str, Any]]) -> dict[str, str]:
    """
    Fold a two-column key/value sheet into a dict.

    Columns are read positionally. A first cell like "key start_date" names the
    key "start_date" and its second cell may carry a "value " prefix; any other
    row is taken verbatim. A "key ..." column-0 header contributes the first
    pair (see _header_pair). Rows with an empty key or value are skipped and
    the last occurrence of a key wins.
    """
    config = {}
    header_pair = _header_pair(rows)
    if header_pair:
        config[header_pair[0]] = header_pair[1]

    for index, row in enumerate(rows):
        cells = list(row.values())
        if len(cells) < 2:
            logger.debug("SPRINT_CONFIG row %d skipped: fewer than two columns", index)
            continue

        key = sanitize_text(cells[0])
        value = sanitize_text(cells[1])

        if key.lower().startswith(_KEY_PREFIX):
            key = _strip_prefix(key, _KEY_PREFIX)
            value = _strip_prefix(value, _VALUE_PREFIX)

        if not key or not value:
            logger.debug("SPRINT_CONFIG row %d skipped: key=%r value=%r", index, key, value)
            continue
        config[key] = value
    return config


def normalize_sprint_config(rows: Any, clock: Clock | None = None) -> ProjectConfig:
    """
    Build the ProjectConfig from the SPRINT_CONFIG key/value sheet.

    **Defaults**:
      - start_date / end_date: first / last day of the clock's current month
        when the key is absent or not a valid date.
      - prepared_by: "Unknown".
      - name: left empty so the validator reports the missing sprint name.

    Args:
        rows: RawRows of the SPRINT_CONFIG table.
        clock: Time source for the current-month defaults (RealClock if None).

    Returns:
        ProjectConfig.

    Raises:
        MalformedInputError: If `rows` is not a list of mappings.

    Example:
        >>> rows = [{"key": "key start_date", "value": "value 2025-01-01"}]
        >>> normalize_sprint_config(rows).start_date
        '2025-01-01'
    """
    rows = _require_rows(rows, "SPRINT_CONFIG")
    config = _parse_config_pairs(rows)
    logger.debug("SPRINT_CONFIG keys: %s", sorted(config))

    month_start, month_end = month_bounds(today(clock))

    start_date = sanitize_date(_first_of(config, CONFIG_START_KEYS)) or month_start.isoformat()
    end_date = sanitize_date(_first_of(config, CONFIG_END_KEYS)) or month_end.isoformat()

    return ProjectConfig(
        name=sanitize_text(_first_of(config, CONFIG_NAME_KEYS)),
        start_date=start_date,
        end_date=end_date,
        prepared_by=sanitize_text(_first_of(config, CONFIG_PREPARED_BY_KEYS)) or DEFAULT_PREPARED_BY,
    )


def _positive_hours(value: Any, default: float) -> float:
    hours = sanitize_number(value, default)
    return hours if hours > 0 else default


def normalize_members(rows: Any) -> list[Member]:
    """
    Normalize MEMBERS rows into Member records.

    **Rules**:
      - Rows whose id and name cells are both blank are dropped (this is what
        keeps a fully empty first row from becoming a placeholder member).
      - A named row without an id gets the generated id "member-<index>".
      - Color falls back to a hash of the id when missing or not in the palette.
      - bandwidth_hours defaults to 40 (also for zero/negative values).
      - Final filter: non-empty id and non-empty name.

    Raises:
        MalformedInputError: If `rows` is not a list of mappings.
    """
    rows = _require_rows(rows, "MEMBERS")
    members = []

    for index, row in enumerate(rows):
        raw_id = resolve_field(row, ID_ALIASES)
        raw_name = resolve_field(row, MEMBER_NAME_ALIASES)
        if not raw_id.strip() and not raw_name.strip():
            continue

        member_id = sanitize_id(raw_id or f"member-{index}")
        members.append(Member(
            id=member_id,
            name=sanitize_text(raw_name),
            role=sanitize_text(resolve_field(row, MEMBER_ROLE_ALIASES, MEMBER_DEFAULT_ROLE)),
            color_class=sanitize_color_class(resolve_field(row, MEMBER_COLOR_ALIASES), member_id),
            capacity=sanitize_text(resolve_field(row, MEMBER_CAPACITY_ALIASES, MEMBER_DEFAULT_CAPACITY)),
            focus=sanitize_text(resolve_field(row, MEMBER_FOCUS_ALIASES, MEMBER_DEFAULT_FOCUS)),
            bandwidth_hours=_positive_hours(
                resolve_field(row, MEMBER_BANDWIDTH_ALIASES), DEFAULT_BANDWIDTH_HOURS
            ),
        ))

    return [member for member in members if member.id and member.name]


def is_valid_date_range(start_date: str, end_date: str) -> bool:
    """
    True when both ISO dates are set and start_date <= end_date.

    Compared as calendar dates, not strings.
    """
    if not start_date or not end_date:
        return False
    try:
        return date.fromisoformat(start_date) <= date.fromisoformat(end_date)
    except ValueError:
        return False


def _task_dates_acceptable(task: Task) -> bool:
    if not task.start_date and not task.end_date:
        return True
    return is_valid_date_range(task.start_date, task.end_date)


def normalize_tasks(rows: Any) -> list[Task]:
    """
    Normalize TASKS rows into Task records.

    **Rules**:
      - id defaults to "T-<n>" (1-based, slugged to "t-<n>").
      - owner is slugged and defaults to "unassigned".
      - priority / status are canonicalized through their alias tables.
      - estimated_hours defaults to 8 (also for zero/negative values).
      - Final filter: a name is required, and dates must be either both empty
        or an ordered start <= end pair.

    Raises:
        MalformedInputError: If `rows` is not a list of mappings.
    """
    rows = _require_rows(rows, "TASKS")
    tasks = []

    for index, row in enumerate(rows):
        tasks.append(Task(
            id=sanitize_id(resolve_field(row, ID_ALIASES, f"T-{index + 1}")),
            name=sanitize_text(resolve_field(row, TASK_NAME_ALIASES)),
            owner=sanitize_id(resolve_field(row, TASK_OWNER_ALIASES)) or UNASSIGNED_OWNER,
            status=sanitize_task_status(resolve_field(row, TASK_STATUS_ALIASES)),
            priority=sanitize_priority(resolve_field(row, TASK_PRIORITY_ALIASES)),
            start_date=sanitize_date(resolve_field(row, TASK_START_ALIASES)),
            end_date=sanitize_date(resolve_field(row, TASK_END_ALIASES)),
            jira_id=sanitize_text(resolve_field(row, TASK_JIRA_ID_ALIASES)),
            jira_url=sanitize_url(resolve_field(row, TASK_JIRA_URL_ALIASES)),
            bu=sanitize_text(resolve_field(row, TASK_BU_ALIASES)),
            type=sanitize_text(resolve_field(row, TASK_TYPE_ALIASES)),
            blockers=sanitize_text(resolve_field(row, TASK_BLOCKERS_ALIASES)),
            notes=sanitize_text(resolve_field(row, TASK_NOTES_ALIASES)),
            completed=sanitize_boolean(resolve_field(row, TASK_COMPLETED_ALIASES)),
            estimated_hours=_positive_hours(
                resolve_field(row, TASK_HOURS_ALIASES), DEFAULT_ESTIMATED_HOURS
            ),
        ))

    kept = [task for task in tasks if task.name and _task_dates_acceptable(task)]
    if len(kept) != len(tasks):
        logger.debug("TASKS: dropped %d rows (missing name or bad date range)", len(tasks) - len(kept))
    return kept


def normalize_milestones(rows: Any) -> list[Milestone]:
    """
    Normalize MILESTONES rows into Milestone records.

    **Rules**:
      - id defaults to "milestone-<index>" (0-based).
      - title defaults to "Milestone <n>" (1-based).
      - progress is clamped to [0, 100]; when blank it is 100 for completed
        milestones and 0 otherwise.
      - Final filter: date and title must be non-empty.

    Raises:
        MalformedInputError: If `rows` is not a list of mappings.
    """
    rows = _require_rows(rows, "MILESTONES")
    milestones = []

    for index, row in enumerate(rows):
        status = sanitize_milestone_status(resolve_field(row, MILESTONE_STATUS_ALIASES))
        default_progress = 100.0 if status == "completed" else 0.0
        progress = sanitize_number(resolve_field(row, MILESTONE_PROGRESS_ALIASES), default_progress)

        milestones.append(Milestone(
            id=sanitize_id(resolve_field(row, ID_ALIASES, f"milestone-{index}")),
            date=sanitize_date(resolve_field(row, MILESTONE_DATE_ALIASES)),
            title=sanitize_text(resolve_field(row, MILESTONE_TITLE_ALIASES, f"Milestone {index + 1}")),
            assignee=sanitize_text(resolve_field(row, MILESTONE_ASSIGNEE_ALIASES)),
            status=status,
            description=sanitize_text(resolve_field(row, MILESTONE_DESCRIPTION_ALIASES)),
            progress=min(100.0, max(0.0, float(progress))),
        ))

    return [milestone for milestone in milestones if milestone.date and milestone.title]
