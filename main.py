"""
sprint_tracker – Main entry point.

Minimal bootstrap script: reports the installed version and which table
source the current environment is configured for. Use the scripts in
actions/ to load, validate and export data.
"""

from sprint_tracker import __version__
from sprint_tracker.config.settings import get_settings


def main() -> None:
    """Print the version and the configured data source."""
    settings = get_settings()
    print(f"sprint_tracker {__version__}")
    if settings.sheets is not None:
        print(f"Google Sheet: {settings.sheets.sheet_id}")
    elif settings.local_data_dir is not None:
        print(f"Local CSV directory: {settings.local_data_dir}")
    else:
        print("No data source configured (set SPRINT_SHEET_ID or SPRINT_LOCAL_DATA_DIR)")


if __name__ == "__main__":
    main()
