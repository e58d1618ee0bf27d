"""
Dataset export: JSON snapshots and tabular CSV views.

**Conceptual**: This module is the only place a SprintDataset is written to
disk. Two formats are supported:
  - JSON: the full snapshot with the camelCase keys the dashboard renderer
    reads ("teamMembers", "startDate", ...). Default file name
    "sprint-tracker-YYYY-MM-DD.json".
  - CSV: one table per collection via pandas, snake_case columns in a stable
    order, for spreadsheets and ad-hoc analysis.

Writers create parent directories and wrap filesystem failures in OSError with
the target path in the message.
"""

import json
from dataclasses import asdict, fields
from datetime import date
from pathlib import Path

import pandas as pd

from sprint_tracker.data.schemas import Member, Milestone, SprintDataset, Task
from sprint_tracker.utils.time import Clock, today


TASK_COLUMNS = [f.name for f in fields(Task)]
MEMBER_COLUMNS = [f.name for f in fields(Member)]
MILESTONE_COLUMNS = [f.name for f in fields(Milestone)]


def default_export_filename(day: date) -> str:
    """Return "sprint-tracker-YYYY-MM-DD.json" for the given day."""
    return f"sprint-tracker-{day.isoformat()}.json"


def write_dataset_json(
    dataset: SprintDataset,
    path: Path | str,
    day: date | None = None,
    clock: Clock | None = None,
) -> Path:
    """
    Write a dataset snapshot as pretty-printed JSON.

    Args:
        dataset: Snapshot to export.
        path: Target file, or an existing directory (the default file name for
              `day` is used inside it).
        day: Date for the default file name (the clock's today if None).
        clock: Time source used when `day` is None (RealClock if None).

    Returns:
        Path of the written file.

    Raises:
        OSError: If the file can't be written.
    """
    path = Path(path)
    if path.is_dir():
        path = path / default_export_filename(day or today(clock))

    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        path.write_text(json.dumps(dataset.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    except Exception as e:
        raise OSError(
            f"Failed to write dataset JSON to {path}. Error: {e}"
        )
    return path


def read_dataset_json(path: Path | str) -> dict:
    """
    Read a JSON snapshot written by write_dataset_json.

    Returns the raw dict (camelCase keys); it is an export format, not an input
    to the load pipeline.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Dataset JSON not found: {path}. "
            f"Ensure the file exists and the path is correct."
        )
    return json.loads(path.read_text(encoding="utf-8"))


def tasks_to_frame(tasks: tuple[Task, ...] | list[Task]) -> pd.DataFrame:
    """
    Convert tasks to a DataFrame with one row per task.

    Columns follow the Task field order; an empty input yields an empty frame
    that still carries the columns.
    """
    return pd.DataFrame([asdict(task) for task in tasks], columns=TASK_COLUMNS)


def members_to_frame(members: tuple[Member, ...] | list[Member]) -> pd.DataFrame:
    """Convert members to a DataFrame with one row per member."""
    return pd.DataFrame([asdict(member) for member in members], columns=MEMBER_COLUMNS)


def milestones_to_frame(milestones: tuple[Milestone, ...] | list[Milestone]) -> pd.DataFrame:
    """Convert milestones to a DataFrame with one row per milestone."""
    return pd.DataFrame([asdict(milestone) for milestone in milestones], columns=MILESTONE_COLUMNS)


def _write_frame(df: pd.DataFrame, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        df.to_csv(path, index=False)
    except Exception as e:
        raise OSError(
            f"Failed to write CSV to {path}. Error: {e}"
        )
    return path


def write_tasks_csv(tasks: tuple[Task, ...] | list[Task], path: Path | str) -> Path:
    """Write tasks to CSV (snake_case columns, no index)."""
    return _write_frame(tasks_to_frame(tasks), path)


def write_dataset_csvs(dataset: SprintDataset, directory: Path | str) -> dict[str, Path]:
    """
    Write members, tasks and milestones as three CSV files in `directory`.

    Returns:
        Mapping of collection name -> written path
        ({"members": ..., "tasks": ..., "milestones": ...}).
    """
    directory = Path(directory)
    return {
        "members": _write_frame(members_to_frame(dataset.team_members), directory / "members.csv"),
        "tasks": _write_frame(tasks_to_frame(dataset.tasks), directory / "tasks.csv"),
        "milestones": _write_frame(milestones_to_frame(dataset.milestones), directory / "milestones.csv"),
    }
