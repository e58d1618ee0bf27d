"""
Load-cycle orchestration: fetch -> parse -> normalize -> validate -> swap.

**Conceptual**: One load cycle turns the raw CSV text of the four logical
tables into a SprintDataset snapshot:

    SheetSource --(4 concurrent fetches)--> raw text per table
        -> parse_csv -> normalize_<table> (independent, stateless)
        -> validate_dataset (once, over all four results)
        -> SprintDataset (or the fallback dataset on any terminal failure)

**Failure semantics**:
  - SPRINT_CONFIG, MEMBERS and TASKS are required. If any of them can't be
    fetched or is structurally malformed, the whole cycle fails.
  - MILESTONES is optional. A failed fetch or malformed table degrades to an
    empty milestone collection and a logged warning.
  - A ValidationReport with at least one error fails the cycle.
  - A failed cycle never leaves consumers without data: the built-in fallback
    dataset is swapped in, carrying the failure message.

**Snapshots**: SprintDataLoader holds the current snapshot and replaces it
with a single reference swap under a lock. Readers get either the previous or
the new snapshot, never a mix. Snapshots themselves are immutable.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from sprint_tracker.data.csv_parser import parse_csv
from sprint_tracker.data.fallback import build_fallback_dataset
from sprint_tracker.data.normalizers import (
    normalize_members,
    normalize_milestones,
    normalize_sprint_config,
    normalize_tasks,
)
from sprint_tracker.data.schemas import (
    ALL_TABLES,
    MEMBERS,
    MILESTONES,
    REQUIRED_TABLES,
    SPRINT_CONFIG,
    TASKS,
    DataValidationError,
    MalformedInputError,
    SprintDataError,
    SprintDataset,
    TableFetchError,
    ValidationReport,
)
from sprint_tracker.data.validation import validate_dataset
from sprint_tracker.utils.time import Clock
from sprint_tracker.venues.base import SheetSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableResult:
    """Outcome of fetching one table: CSV text, or the failure message."""
    table: str
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


@dataclass(frozen=True)
class LoadResult:
    """
    Value returned by one load cycle.

    Attributes:
        dataset: The snapshot consumers should use (real or fallback).
        report: Validation report of the cycle. For cycles that failed before
                validation (fetch or structure errors) it holds that single
                failure message as its only error.
    """
    dataset: SprintDataset
    report: ValidationReport

    @property
    def succeeded(self) -> bool:
        return self.dataset.loaded


class DatasetObserver(Protocol):
    """
    Collaborator notified after every snapshot swap.

    Renderers, exporters or notification layers implement this and are passed
    to SprintDataLoader explicitly.
    """

    def on_dataset(self, dataset: SprintDataset, report: ValidationReport) -> None:
        ...


def _normalize_table(table: str, raw: Any, normalizer: Callable[[Any], Any]):
    rows = parse_csv(raw) if isinstance(raw, str) else raw
    try:
        return normalizer(rows)
    except MalformedInputError as e:
        logger.error("Error normalizing %s: %s", table, e)
        raise MalformedInputError(f"Invalid {table} data structure") from e


def build_dataset(
    tables: Mapping[str, Any],
    clock: Clock | None = None,
    source: str = "spreadsheet",
) -> tuple[SprintDataset, ValidationReport]:
    """
    Normalize and validate one set of tables into a dataset snapshot.

    **Functionally**:
      - Each table value is either CSV text (parsed with parse_csv) or an
        already-parsed list of RawRows.
      - Missing required tables raise TableFetchError; structurally broken
        required tables raise MalformedInputError("Invalid <TABLE> data structure").
      - MILESTONES may be absent or malformed; it then becomes empty.
      - Validation runs once, after all four normalizations.

    Args:
        tables: Table name -> CSV text or list of RawRows.
        clock: Time source for current-month config defaults.
        source: Label stored on the snapshot.

    Returns:
        (dataset, report) with dataset.loaded True.

    Raises:
        TableFetchError: A required table is missing from `tables`.
        MalformedInputError: A required table is structurally malformed.
        DataValidationError: The report contains at least one error.
    """
    missing = {table: "table not provided" for table in REQUIRED_TABLES if tables.get(table) is None}
    if missing:
        raise TableFetchError(missing)

    project = _normalize_table(
        SPRINT_CONFIG, tables[SPRINT_CONFIG], lambda rows: normalize_sprint_config(rows, clock)
    )
    members = _normalize_table(MEMBERS, tables[MEMBERS], normalize_members)
    tasks = _normalize_table(TASKS, tables[TASKS], normalize_tasks)

    milestones = []
    if tables.get(MILESTONES) is not None:
        try:
            milestones = _normalize_table(MILESTONES, tables[MILESTONES], normalize_milestones)
        except MalformedInputError as e:
            logger.warning("MILESTONES is optional, continuing without it: %s", e)

    report = validate_dataset(project, members, tasks, milestones)
    for warning in report.warnings:
        logger.warning(warning)
    if report.has_errors:
        raise DataValidationError(report)

    dataset = SprintDataset(
        project=project,
        team_members=tuple(members),
        tasks=tuple(tasks),
        milestones=tuple(milestones),
        loaded=True,
        error=None,
        source=source,
    )
    return dataset, report


def run_load_cycle(
    tables: Mapping[str, Any],
    clock: Clock | None = None,
    source: str = "spreadsheet",
) -> LoadResult:
    """
    Run build_dataset and substitute the fallback dataset on failure.

    Never raises for data problems: every SprintDataError becomes a fallback
    LoadResult whose dataset.error carries the message.
    """
    try:
        dataset, report = build_dataset(tables, clock=clock, source=source)
    except DataValidationError as e:
        logger.error("Error loading data, using fallback dataset: %s", e)
        return LoadResult(build_fallback_dataset(clock, error=str(e)), e.report)
    except SprintDataError as e:
        logger.error("Error loading data, using fallback dataset: %s", e)
        return LoadResult(build_fallback_dataset(clock, error=str(e)), ValidationReport(errors=(str(e),)))

    logger.info(
        "Loaded %s: %d members, %d tasks, %d milestones",
        source, len(dataset.team_members), len(dataset.tasks), len(dataset.milestones),
    )
    return LoadResult(dataset, report)


class SprintDataLoader:
    """
    Owns the current dataset snapshot and runs load cycles against a source.

    **Example usage**:
        >>> from sprint_tracker.venues.local_csv_source import LocalCsvSource
        >>> loader = SprintDataLoader(LocalCsvSource("data/sample"))
        >>> result = loader.load()
        >>> result.succeeded
        True
        >>> len(loader.current.tasks)
        6
    """

    def __init__(
        self,
        source: Optional[SheetSource] = None,
        clock: Clock | None = None,
        observers: Sequence[DatasetObserver] = (),
    ):
        """
        Args:
            source: Where refresh()/load() fetch tables from. Optional when
                    every load() call passes tables explicitly.
            clock: Time source for config defaults and the fallback month.
            observers: Collaborators notified after every snapshot swap.
        """
        self.source = source
        self.clock = clock
        self.observers = tuple(observers)
        self._lock = threading.Lock()
        self._result = LoadResult(build_fallback_dataset(clock), ValidationReport())

    @property
    def snapshot(self) -> LoadResult:
        """
        The dataset and report of the latest cycle, read together.

        Use this instead of reading current and last_report separately when both
        must come from the same cycle.
        """
        with self._lock:
            return self._result

    @property
    def current(self) -> SprintDataset:
        """The current snapshot (fallback data until the first load)."""
        return self.snapshot.dataset

    @property
    def last_report(self) -> ValidationReport:
        return self.snapshot.report

    def fetch_tables(self) -> dict[str, TableResult]:
        """
        Fetch all four tables concurrently, collecting every outcome.

        A failing fetch does not cancel the others; each table ends up with
        either its text or its error message.

        Raises:
            ValueError: If the loader has no source.
        """
        if self.source is None:
            raise ValueError("SprintDataLoader has no SheetSource; pass tables to load() instead")

        results = {}
        with ThreadPoolExecutor(max_workers=len(ALL_TABLES)) as executor:
            futures = {table: executor.submit(self.source.fetch_table, table) for table in ALL_TABLES}
            for table, future in futures.items():
                try:
                    results[table] = TableResult(table, text=future.result())
                except Exception as e:
                    # all-settled: record the failure, keep the other tables
                    logger.error("Failed to load %s: %s", table, e)
                    results[table] = TableResult(table, error=str(e))
        return results

    def load(self, tables: Optional[Mapping[str, Any]] = None) -> LoadResult:
        """
        Run one load cycle and swap in its snapshot.

        Args:
            tables: Table name -> CSV text or RawRows. When None, tables are
                    fetched from the configured source.

        Returns:
            LoadResult of the cycle (also available via current/last_report).
        """
        source_name = "spreadsheet"
        if tables is None:
            results = self.fetch_tables()
            source_name = self.source.name

            failures = {table: results[table].error for table in REQUIRED_TABLES if not results[table].ok}
            if failures:
                error = TableFetchError(failures)
                logger.error("Error loading data, using fallback dataset: %s", error)
                result = LoadResult(
                    build_fallback_dataset(self.clock, error=str(error)),
                    ValidationReport(errors=(str(error),)),
                )
                self._swap(result)
                return result

            if not results[MILESTONES].ok:
                logger.warning("MILESTONES unavailable (optional): %s", results[MILESTONES].error)
            tables = {table: result.text for table, result in results.items()}

        result = run_load_cycle(tables, clock=self.clock, source=source_name)
        self._swap(result)
        return result

    def refresh(self) -> LoadResult:
        """Re-fetch every table from the source and reload."""
        return self.load()

    def _swap(self, result: LoadResult) -> None:
        with self._lock:
            self._result = result
        for observer in self.observers:
            observer.on_dataset(result.dataset, result.report)
