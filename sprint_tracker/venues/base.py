"""
Base abstraction for table sources.

**Conceptual**: The load pipeline needs the raw CSV text of four logical
tables and nothing else. SheetSource is the structural protocol every source
implements; the orchestrator depends only on it, so a test can hand in a
three-line fake and the production code can hand in an HTTP client.

**Contract** for implementations of fetch_table():
  1. Return the full CSV text of the table (UTF-8 decoded, "\\n" line breaks).
  2. Raise an exception (preferably a SheetClientError subclass) when the table
     can't be retrieved. Never return None or partial text.
  3. Be safe to call concurrently for different tables; the orchestrator
     fetches all four tables at once.
"""

from typing import Protocol


class SheetSource(Protocol):
    """
    Protocol for fetching the raw CSV text of one logical table.

    **Example usage**:
        >>> from sprint_tracker.venues.local_csv_source import LocalCsvSource
        >>> source = LocalCsvSource("data/sample")
        >>> text = source.fetch_table("MEMBERS")
        >>> text.splitlines()[0]
        'id,name,role,color_class,capacity,focus,bandwidth_hours'
    """

    name: str

    def fetch_table(self, table: str) -> str:
        """
        Return the CSV text of `table` (e.g. "SPRINT_CONFIG", "MEMBERS").

        Raises:
            SheetClientError: If the table can't be retrieved.
        """
        ...
