"""
Table source backed by a directory of CSV files.

Reads <directory>/<TABLE>.csv (SPRINT_CONFIG.csv, MEMBERS.csv, TASKS.csv,
MILESTONES.csv). Useful offline, for fixtures, and for sheets exported by hand
via File -> Download -> CSV.
"""

from pathlib import Path

from sprint_tracker.venues.google_sheets_client import SheetClientError, SheetNotFoundError


class LocalCsvSource:
    """SheetSource reading one UTF-8 CSV file per logical table."""

    name = "local-csv"

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, table: str) -> Path:
        return self.directory / f"{table}.csv"

    def fetch_table(self, table: str) -> str:
        """
        Return the text of <directory>/<table>.csv.

        Raises:
            SheetNotFoundError: If the file doesn't exist.
            SheetClientError: If the file can't be read or decoded.
        """
        path = self.path_for(table)
        if not path.exists():
            raise SheetNotFoundError(
                f"CSV for {table} not found: {path}. "
                f"Ensure the file exists and the path is correct."
            )
        try:
            # utf-8-sig drops the BOM spreadsheet exports often prepend
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise SheetClientError(f"Failed to read {path}: {e}") from e
