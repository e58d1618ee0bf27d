"""
HTTP client for the public Google Sheets CSV export.

**Conceptual**: A sheet shared as "Anyone with the link can view" exposes each
tab as CSV through the gviz endpoint:

    {base_url}/{sheet_id}/gviz/tq?tqx=out:csv&gid={gid}&_t={epoch_ms}

This module is a thin client around that endpoint: it builds the URL, sends
a no-cache GET with a timeout, maps HTTP failures to descriptive exceptions
and returns the response body. It does NOT parse CSV (that's csv_parser.py)
and it does not retry or go through proxies. A failed table fetch is
reported to the orchestrator, which decides whether the cycle can continue.
"""

import logging
import time

import requests

from sprint_tracker.config.settings import SheetSettings
from sprint_tracker.data.schemas import SprintDataError

logger = logging.getLogger(__name__)


class SheetClientError(SprintDataError):
    """Base exception for spreadsheet fetch errors."""
    pass


class SheetAccessError(SheetClientError):
    """
    Raised on 401/403: the sheet is not shared publicly.

    **Recovery**: Share -> "Anyone with the link" -> Viewer.
    """
    pass


class SheetNotFoundError(SheetClientError):
    """Raised on 404: wrong sheet id or gid."""
    pass


class SheetServerError(SheetClientError):
    """Raised on 5xx responses from the spreadsheet service."""
    pass


class SheetTimeoutError(SheetClientError):
    """Raised when a table fetch exceeds the configured timeout."""
    pass


class GoogleSheetsClient:
    """
    Thin HTTP client returning the CSV text of one sheet tab per call.

    Implements the SheetSource protocol.

    **Example usage**:
        >>> from sprint_tracker.config.settings import SheetSettings
        >>> client = GoogleSheetsClient(SheetSettings.from_env())
        >>> csv_text = client.fetch_table("TASKS")
    """

    name = "google-sheets"

    def __init__(self, settings: SheetSettings):
        """
        Initialize the client with sheet settings.

        Args:
            settings: Sheet id, per-table gids, base URL and timeout.
        """
        self.settings = settings
        self.session = requests.Session()

        self.session.headers.update({
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "Pragma": "no-cache",
            "Accept": "text/csv",
            "User-Agent": "sprint_tracker/1.0",
        })

    def build_url(self, gid: str, timestamp_ms: int | None = None) -> str:
        """
        Build the gviz CSV export URL for one tab.

        The "_t" parameter busts intermediary caches so edits show up on the
        next refresh.
        """
        if timestamp_ms is None:
            timestamp_ms = int(time.time() * 1000)
        return (
            f"{self.settings.base_url}/{self.settings.sheet_id}"
            f"/gviz/tq?tqx=out:csv&gid={gid}&_t={timestamp_ms}"
        )

    def fetch_table(self, table: str) -> str:
        """
        Fetch one logical table as CSV text.

        Args:
            table: Logical table name ("SPRINT_CONFIG", "MEMBERS", "TASKS", "MILESTONES").

        Returns:
            CSV text of the tab.

        Raises:
            ValueError: If `table` has no configured gid.
            SheetAccessError: 401/403 (sheet not shared publicly).
            SheetNotFoundError: 404 (wrong sheet id or gid).
            SheetServerError: 5xx.
            SheetTimeoutError: Request exceeded timeout_seconds.
            SheetClientError: Any other HTTP or connection failure.
        """
        gid = self.settings.gids.get(table)
        if not gid:
            raise ValueError(f"No gid configured for table '{table}'")

        url = self.build_url(gid)
        logger.debug("Fetching %s (gid=%s) from %s", table, gid, url)

        try:
            response = self.session.get(url, timeout=self.settings.timeout_seconds)
        except requests.Timeout as e:
            raise SheetTimeoutError(
                f"Fetching {table} timed out after {self.settings.timeout_seconds}s."
            ) from e
        except requests.ConnectionError as e:
            raise SheetClientError(
                f"Failed to connect to {self.settings.base_url} while fetching {table}. "
                f"Check network connection and base URL."
            ) from e
        except requests.RequestException as e:
            raise SheetClientError(
                f"HTTP request for {table} failed: {e}"
            ) from e

        if response.status_code in (401, 403):
            raise SheetAccessError(
                f"Failed to fetch {table}: {response.status_code}. "
                f"Make sure the sheet is shared publicly (Anyone with link can view)."
            )

        if response.status_code == 404:
            raise SheetNotFoundError(
                f"Failed to fetch {table}: 404. Check SPRINT_SHEET_ID and the gid ({gid})."
            )

        if response.status_code >= 500:
            raise SheetServerError(
                f"Spreadsheet server error while fetching {table} "
                f"(status {response.status_code})."
            )

        if response.status_code >= 400:
            raise SheetClientError(
                f"Failed to fetch {table}: {response.status_code}."
            )

        text = response.text
        logger.debug("Fetched %s: %d chars", table, len(text))
        return text

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
