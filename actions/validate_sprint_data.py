#!/usr/bin/env python3
"""
Check sprint sheet data for common authoring issues.

**Purpose**: Loads the sheet the same way the dashboard does, then reports the
validation errors/warnings plus a few extra "sheet hygiene" checks that are not
fatal for loading but usually point at typos:
  - task owners that don't match any member id
  - tasks without start or end date
  - an empty MILESTONES sheet

**Usage**:
    python actions/validate_sprint_data.py
    python actions/validate_sprint_data.py --source local --data-dir data/sample

**Example output**:
    Sprint Tracker Data Validator
    ================================
    ✓ Project: Sprint 14
    ✓ Dates: 2025-01-06 to 2025-01-17
    ✓ 3 team members loaded
    ✓ 6 tasks loaded
    ✓ 3 milestones loaded

    Validation Summary
    ====================
    All checks passed! Your data looks good.

**Exit codes**:
  - 0: No errors (warnings allowed)
  - 1: Validation errors or configuration error
  - 2: Fatal error
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path so we can import sprint_tracker modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from actions.load_sprint_data import build_source, configure_logging
from sprint_tracker.config.settings import get_settings
from sprint_tracker.data.schemas import SHARED_OWNER, UNASSIGNED_OWNER, SprintDataset
from sprint_tracker.orchestration.loader import SprintDataLoader
from sprint_tracker.venues.google_sheets_client import GoogleSheetsClient


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Validate sprint tracker sheet data")
    parser.add_argument(
        "--source",
        choices=["sheets", "local"],
        default="sheets",
        help="Where to load tables from (default: sheets)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory of <TABLE>.csv files for --source local",
    )
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    return parser.parse_args(argv)


def lint_dataset(dataset: SprintDataset) -> list[str]:
    """
    Non-fatal hygiene checks on a loaded dataset.

    Args:
        dataset: A successfully loaded snapshot.

    Returns:
        Warning messages, in task order, then the milestones check.
    """
    warnings = []
    member_ids = {member.id for member in dataset.team_members}

    for task in dataset.tasks:
        label = task.name or "Untitled"
        if not task.start_date:
            warnings.append(f'Task "{label}" missing start date')
        if not task.end_date:
            warnings.append(f'Task "{label}" missing end date')
        if task.owner not in (UNASSIGNED_OWNER, SHARED_OWNER) and task.owner not in member_ids:
            warnings.append(f'Task "{label}" owner "{task.owner}" not found in MEMBERS')

    if not dataset.milestones:
        warnings.append("No milestones found (optional)")

    return warnings


def main():
    try:
        args = parse_args()
        configure_logging(args.verbose)

        print("Sprint Tracker Data Validator")
        print("=" * 32)

        settings = get_settings()
        try:
            source = build_source(args.source, args.data_dir, settings)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        loader = SprintDataLoader(source)
        try:
            result = loader.load()
        finally:
            if isinstance(source, GoogleSheetsClient):
                source.close()

        dataset = result.dataset
        errors = list(result.report.errors)
        warnings = list(result.report.warnings)

        if result.succeeded:
            print(f"✓ Project: {dataset.project.name or 'Unnamed'}")
            print(f"✓ Dates: {dataset.project.start_date or 'N/A'} to {dataset.project.end_date or 'N/A'}")
            print(f"✓ {len(dataset.team_members)} team members loaded")
            print(f"✓ {len(dataset.tasks)} tasks loaded")
            print(f"✓ {len(dataset.milestones)} milestones loaded")
            warnings.extend(lint_dataset(dataset))

        print()
        print("Validation Summary")
        print("=" * 20)

        if not errors and not warnings:
            print("All checks passed! Your data looks good.")
        for error in errors:
            print(f"✗ {error}")
        for warning in warnings:
            print(f"⚠ {warning}")

        sys.exit(1 if errors else 0)

    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting...")
        sys.exit(130)

    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(2)


if __name__ == "__main__":
    main()
