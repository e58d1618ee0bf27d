#!/usr/bin/env python3
"""
Load sprint data from the shared sheet (or local CSVs) and export it.

**Purpose**: Runs one full load cycle (fetch -> parse -> normalize ->
validate) and prints what was loaded. Optionally writes the snapshot as JSON
and/or as CSV tables.

**Usage**:
    python actions/load_sprint_data.py
    python actions/load_sprint_data.py --source local --data-dir data/sample
    python actions/load_sprint_data.py --export-json data/exports/
    python actions/load_sprint_data.py --export-csv-dir data/exports/csv --verbose

**What this script does**:
  1. Parse command line arguments
  2. Load settings from environment (.env file)
  3. Build the table source (Google Sheets client or local CSV directory)
  4. Run one load cycle; on failure the fallback dataset is reported
  5. Print a summary and export if requested

**Requirements**:
  - For --source sheets: SPRINT_SHEET_ID set in .env and the sheet shared as
    "Anyone with the link can view"
  - For --source local: SPRINT_CONFIG.csv, MEMBERS.csv, TASKS.csv (and
    optionally MILESTONES.csv) in the data directory

**Example output**:
    $ python actions/load_sprint_data.py --source local --data-dir data/sample
    Loading sprint data from local-csv...
    ✓ Sprint: Sprint 14 (2025-01-06 to 2025-01-17)
    ✓ 3 team members, 6 tasks, 3 milestones
    Done!

**Exit codes**:
  - 0: Data loaded
  - 1: Configuration error, or the fallback dataset had to be used
  - 2: Fatal error
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path so we can import sprint_tracker modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sprint_tracker.config.settings import Settings, get_settings
from sprint_tracker.data.io import write_dataset_csvs, write_dataset_json
from sprint_tracker.orchestration.loader import LoadResult, SprintDataLoader
from sprint_tracker.utils.time import get_real_clock
from sprint_tracker.venues.base import SheetSource
from sprint_tracker.venues.google_sheets_client import GoogleSheetsClient
from sprint_tracker.venues.local_csv_source import LocalCsvSource

DEFAULT_DATA_DIR = "data/sample"


def parse_args(argv=None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: source, data_dir, export_json,
        export_csv_dir, verbose.
    """
    parser = argparse.ArgumentParser(
        description="Load sprint tracker data and optionally export it",
        epilog="""
Examples:
  # Load from the shared Google Sheet configured in .env
  python actions/load_sprint_data.py

  # Load from a directory of CSV files
  python actions/load_sprint_data.py --source local --data-dir data/sample

  # Export the snapshot (directory -> sprint-tracker-YYYY-MM-DD.json)
  python actions/load_sprint_data.py --export-json data/exports/
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

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
        help=f"Directory of <TABLE>.csv files for --source local "
             f"(default: SPRINT_LOCAL_DATA_DIR or {DEFAULT_DATA_DIR})",
    )

    parser.add_argument(
        "--export-json",
        type=str,
        default=None,
        help="Write the snapshot as JSON to this file or directory",
    )

    parser.add_argument(
        "--export-csv-dir",
        type=str,
        default=None,
        help="Write members.csv, tasks.csv and milestones.csv to this directory",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show debug logging",
    )

    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_source(source: str, data_dir: str | None, settings: Settings) -> SheetSource:
    """
    Create the table source selected on the command line.

    Raises:
        ValueError: If --source sheets is used without SPRINT_SHEET_ID.
    """
    if source == "local":
        directory = data_dir or settings.local_data_dir or DEFAULT_DATA_DIR
        return LocalCsvSource(directory)

    if settings.sheets is None:
        raise ValueError(
            "Sheet settings are required but not configured. "
            "Please set SPRINT_SHEET_ID in your .env file, or use --source local."
        )
    return GoogleSheetsClient(settings.sheets)


def print_summary(result: LoadResult) -> None:
    """Print a human-readable summary of one load cycle."""
    dataset = result.dataset
    project = dataset.project

    if result.succeeded:
        print(f"✓ Sprint: {project.name} ({project.start_date} to {project.end_date})")
        print(
            f"✓ {len(dataset.team_members)} team members, {len(dataset.tasks)} tasks, "
            f"{len(dataset.milestones)} milestones"
        )
    else:
        print(f"⚠ Load failed, showing fallback data: {dataset.error}")
        print(f"⚠ Sprint: {project.name}")

    for warning in result.report.warnings:
        print(f"  ⚠ {warning}")


def main():
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Data loaded
      - 1: Configuration error or fallback data used
      - 2: Fatal error
    """
    try:
        args = parse_args()
        configure_logging(args.verbose)

        print("Loading settings from environment...")
        settings = get_settings()

        try:
            source = build_source(args.source, args.data_dir, settings)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        print(f"Loading sprint data from {source.name}...")
        clock = get_real_clock()
        loader = SprintDataLoader(source, clock=clock)
        try:
            result = loader.load()
        finally:
            if isinstance(source, GoogleSheetsClient):
                source.close()

        print_summary(result)

        if args.export_json:
            path = write_dataset_json(result.dataset, args.export_json, clock=clock)
            print(f"✓ Saved JSON to {path}")

        if args.export_csv_dir:
            paths = write_dataset_csvs(result.dataset, args.export_csv_dir)
            for name, path in paths.items():
                print(f"✓ Saved {name} to {path}")

        print("Done!")
        sys.exit(0 if result.succeeded else 1)

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
