"""
Cross-table validation of a normalized load cycle.

**Conceptual**: After all four tables are normalized, validate_dataset looks
at them together and sorts every problem into one of two buckets:
  - errors: the dataset is unusable and must be replaced by the fallback.
  - warnings: the dataset is usable, but an operator should know.

The validator is a pure function. It never raises and never logs; it returns a
ValidationReport and leaves the decision (fallback or not) to the orchestrator.
Messages are prefixed with the sheet they concern and appear in the order the
records were inspected.
"""

from typing import Optional, Sequence

from sprint_tracker.data.schemas import (
    Member,
    Milestone,
    ProjectConfig,
    Task,
    ValidationReport,
)


def validate_dataset(
    project: Optional[ProjectConfig],
    members: Sequence[Member],
    tasks: Sequence[Task],
    milestones: Sequence[Milestone],
) -> ValidationReport:
    """
    Validate the four normalized collections of one load cycle.

    **Errors** (fatal):
      - missing sprint name
      - missing start or end date
      - no team members
      - a member without a name
      - a task without a name

    **Warnings** (non-fatal):
      - a member without an id
      - no tasks
      - a task without an id or owner
      - a milestone without a date or title

    Args:
        project: Normalized sprint config (None counts as missing everything).
        members: Normalized members.
        tasks: Normalized tasks.
        milestones: Normalized milestones.

    Returns:
        ValidationReport with errors and warnings in inspection order.

    Example:
        >>> report = validate_dataset(config, [], [task], [])
        >>> report.is_fatal
        True
    """
    errors = []
    warnings = []

    if project is None or not project.name:
        errors.append("SPRINT_CONFIG: missing sprint_name")
    if project is None or not project.start_date or not project.end_date:
        errors.append("SPRINT_CONFIG: missing start_date or end_date")

    if not members:
        errors.append("MEMBERS: no team members found")
    for position, member in enumerate(members, start=1):
        if not member.id:
            warnings.append(f"MEMBERS: member {position} ({member.name or 'unnamed'}) missing id")
        if not member.name:
            errors.append(f"MEMBERS: member {position} ({member.id or 'no id'}) missing name")

    if not tasks:
        warnings.append("TASKS: no tasks found")
    for position, task in enumerate(tasks, start=1):
        label = task.name or task.id or "untitled"
        if not task.name:
            errors.append(f"TASKS: task {position} ({task.id or 'no id'}) missing name")
        if not task.id:
            warnings.append(f"TASKS: task {position} ({label}) missing id")
        if not task.owner:
            warnings.append(f"TASKS: task {position} ({label}) missing owner")

    for position, milestone in enumerate(milestones, start=1):
        if not milestone.date:
            warnings.append(f"MILESTONES: milestone {position} ({milestone.title or 'untitled'}) missing date")
        if not milestone.title:
            warnings.append(f"MILESTONES: milestone {position} missing title")

    return ValidationReport(errors=tuple(errors), warnings=tuple(warnings))
