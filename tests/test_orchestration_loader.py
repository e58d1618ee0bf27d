"""
Tests for the load-cycle orchestrator.

**Purpose**: Verify the full fetch -> parse -> normalize -> validate -> swap
cycle, including every path that substitutes the fallback dataset.

**Testing philosophy**: No network. Tables come either from the sample CSV
directory or from an in-memory FakeSource that can be told to fail per table.
"""

import threading

import pytest

from sprint_tracker.data.fallback import FALLBACK_SOURCE
from sprint_tracker.data.schemas import (
    MEMBERS,
    MILESTONES,
    SPRINT_CONFIG,
    TASKS,
    DataValidationError,
    MalformedInputError,
    SprintDataset,
    TableFetchError,
    ValidationReport,
)
from sprint_tracker.orchestration.loader import (
    LoadResult,
    SprintDataLoader,
    build_dataset,
    run_load_cycle,
)
from sprint_tracker.venues.google_sheets_client import SheetAccessError
from sprint_tracker.venues.local_csv_source import LocalCsvSource


class FakeSource:
    """In-memory SheetSource; tables mapped to an Exception raise it on fetch."""

    name = "fake"

    def __init__(self, tables):
        self.tables = tables
        self.calls = []
        self._lock = threading.Lock()

    def fetch_table(self, table):
        with self._lock:
            self.calls.append(table)
        value = self.tables[table]
        if isinstance(value, Exception):
            raise value
        return value


class RecordingObserver:
    def __init__(self):
        self.seen = []

    def on_dataset(self, dataset: SprintDataset, report: ValidationReport) -> None:
        self.seen.append((dataset, report))


# ---------------------------------------------------------------------------
# build_dataset / run_load_cycle
# ---------------------------------------------------------------------------

def test_build_dataset_end_to_end(sample_tables, frozen_clock):
    dataset, report = build_dataset(sample_tables, clock=frozen_clock, source="local-csv")

    assert report.errors == ()
    assert report.warnings == ()
    assert dataset.loaded is True
    assert dataset.error is None
    assert dataset.source == "local-csv"
    assert dataset.project.name == "Sprint 14"
    assert len(dataset.team_members) == 3
    assert len(dataset.tasks) == 6
    assert len(dataset.milestones) == 3


def test_build_dataset_sample_values(sample_tables, frozen_clock):
    dataset, _ = build_dataset(sample_tables, clock=frozen_clock)

    tasks = {task.id: task for task in dataset.tasks}
    assert tasks["t-101"].status == "in-progress"
    assert tasks["t-103"].name == "Pagination, sorting and filters"
    assert tasks["t-105"].status == "completed"
    assert tasks["t-105"].completed is True
    assert tasks["t-106"].owner == "unassigned"
    assert dataset.milestones[1].status == "in-progress"


def test_build_dataset_accepts_parsed_rows(frozen_clock):
    tables = {
        SPRINT_CONFIG: [{"k": "sprint_name", "v": "S"}],
        MEMBERS: [{"id": "avi", "name": "Avi"}],
        TASKS: [{"title": "Task"}],
    }

    dataset, report = build_dataset(tables, clock=frozen_clock)

    assert dataset.project.start_date == "2025-01-01"
    assert dataset.milestones == ()
    assert not report.has_errors


def test_build_dataset_missing_milestones_is_ok(sample_tables, frozen_clock):
    del sample_tables[MILESTONES]

    dataset, _ = build_dataset(sample_tables, clock=frozen_clock)

    assert dataset.milestones == ()
    assert len(dataset.tasks) == 6


def test_build_dataset_malformed_milestones_degrades_to_empty(sample_tables, frozen_clock):
    sample_tables[MILESTONES] = 42

    dataset, _ = build_dataset(sample_tables, clock=frozen_clock)

    assert dataset.milestones == ()


def test_build_dataset_malformed_required_table(sample_tables, frozen_clock):
    sample_tables[MEMBERS] = {"not": "rows"}

    with pytest.raises(MalformedInputError, match="Invalid MEMBERS data structure"):
        build_dataset(sample_tables, clock=frozen_clock)


def test_build_dataset_missing_required_table(sample_tables, frozen_clock):
    del sample_tables[TASKS]

    with pytest.raises(TableFetchError) as exc_info:
        build_dataset(sample_tables, clock=frozen_clock)

    assert list(exc_info.value.failures) == [TASKS]


def test_build_dataset_zero_members_fails_validation(sample_tables, frozen_clock):
    sample_tables[MEMBERS] = "id,name\n"

    with pytest.raises(DataValidationError) as exc_info:
        build_dataset(sample_tables, clock=frozen_clock)

    assert "MEMBERS: no team members found" in exc_info.value.report.errors


def test_run_load_cycle_success(sample_tables, frozen_clock):
    result = run_load_cycle(sample_tables, clock=frozen_clock)

    assert isinstance(result, LoadResult)
    assert result.succeeded
    assert result.dataset.loaded is True


def test_run_load_cycle_validation_failure_returns_fallback(sample_tables, frozen_clock):
    sample_tables[MEMBERS] = "id,name\n"

    result = run_load_cycle(sample_tables, clock=frozen_clock)

    assert not result.succeeded
    assert result.dataset.source == FALLBACK_SOURCE
    assert "no team members" in result.dataset.error
    assert result.report.is_fatal


def test_run_load_cycle_structural_failure_returns_fallback(sample_tables, frozen_clock):
    sample_tables[SPRINT_CONFIG] = 3.14

    result = run_load_cycle(sample_tables, clock=frozen_clock)

    assert not result.succeeded
    assert result.dataset.error == "Invalid SPRINT_CONFIG data structure"
    assert result.report.errors == ("Invalid SPRINT_CONFIG data structure",)


# ---------------------------------------------------------------------------
# SprintDataLoader
# ---------------------------------------------------------------------------

def test_loader_starts_with_fallback(frozen_clock):
    loader = SprintDataLoader(clock=frozen_clock)

    assert loader.current.loaded is False
    assert loader.current.source == FALLBACK_SOURCE
    assert loader.last_report == ValidationReport()


def test_loader_loads_from_source(sample_tables, frozen_clock):
    source = FakeSource(sample_tables)
    loader = SprintDataLoader(source, clock=frozen_clock)

    result = loader.load()

    assert result.succeeded
    assert sorted(source.calls) == sorted([SPRINT_CONFIG, MEMBERS, TASKS, MILESTONES])
    assert loader.current is result.dataset
    assert loader.current.source == "fake"
    assert loader.last_report is result.report


def test_loader_loads_from_local_csv_directory(sample_data_dir, frozen_clock):
    loader = SprintDataLoader(LocalCsvSource(sample_data_dir), clock=frozen_clock)

    result = loader.refresh()

    assert result.succeeded
    assert loader.current.source == "local-csv"
    assert len(loader.current.tasks) == 6


def test_loader_required_fetch_failure_uses_fallback(sample_tables, frozen_clock):
    sample_tables[TASKS] = SheetAccessError("Failed to fetch TASKS: 403")
    sample_tables[MEMBERS] = SheetAccessError("Failed to fetch MEMBERS: 403")
    loader = SprintDataLoader(FakeSource(sample_tables), clock=frozen_clock)

    result = loader.load()

    assert not result.succeeded
    assert loader.current.source == FALLBACK_SOURCE
    assert loader.current.error.startswith("Failed to load required sheets:")
    assert "MEMBERS: Failed to fetch MEMBERS: 403" in loader.current.error
    assert "TASKS: Failed to fetch TASKS: 403" in loader.current.error


def test_loader_milestones_fetch_failure_is_not_fatal(sample_tables, frozen_clock):
    sample_tables[MILESTONES] = SheetAccessError("Failed to fetch MILESTONES: 404")
    loader = SprintDataLoader(FakeSource(sample_tables), clock=frozen_clock)

    result = loader.load()

    assert result.succeeded
    assert result.dataset.milestones == ()


def test_fetch_tables_collects_every_outcome(sample_tables):
    sample_tables[MEMBERS] = RuntimeError("boom")
    loader = SprintDataLoader(FakeSource(sample_tables))

    results = loader.fetch_tables()

    assert set(results) == {SPRINT_CONFIG, MEMBERS, TASKS, MILESTONES}
    assert not results[MEMBERS].ok
    assert results[MEMBERS].error == "boom"
    assert results[TASKS].ok


def test_fetch_tables_requires_source():
    with pytest.raises(ValueError):
        SprintDataLoader().fetch_tables()


def test_loader_with_explicit_tables(sample_tables, frozen_clock):
    loader = SprintDataLoader(clock=frozen_clock)

    result = loader.load(sample_tables)

    assert result.succeeded
    assert loader.current.source == "spreadsheet"


def test_loader_failed_cycle_replaces_previous_snapshot(sample_tables, frozen_clock):
    loader = SprintDataLoader(clock=frozen_clock)
    loader.load(sample_tables)

    broken = dict(sample_tables, **{MEMBERS: "id,name\n"})
    result = loader.load(broken)

    assert not result.succeeded
    assert loader.current.loaded is False
    assert loader.last_report.is_fatal


def test_loader_snapshot_pairs_dataset_with_its_report(sample_tables, frozen_clock):
    loader = SprintDataLoader(clock=frozen_clock)
    assert loader.snapshot.dataset is loader.current
    assert loader.snapshot.report == ValidationReport()

    good = loader.load(sample_tables)
    assert loader.snapshot is good

    bad = loader.load(dict(sample_tables, **{MEMBERS: "id,name\n"}))
    snapshot = loader.snapshot

    assert snapshot is bad
    assert snapshot.dataset.loaded is False
    assert snapshot.report.is_fatal


def test_loader_notifies_observers(sample_tables, frozen_clock):
    observer = RecordingObserver()
    loader = SprintDataLoader(clock=frozen_clock, observers=[observer])

    first = loader.load(sample_tables)
    second = loader.load({SPRINT_CONFIG: "k,v\n", MEMBERS: "id,name\n", TASKS: "title\n"})

    assert observer.seen == [
        (first.dataset, first.report),
        (second.dataset, second.report),
    ]
    assert observer.seen[1][0].loaded is False


def test_dataset_snapshots_are_immutable(sample_tables, frozen_clock):
    result = SprintDataLoader(clock=frozen_clock).load(sample_tables)

    with pytest.raises(AttributeError):
        result.dataset.loaded = False
    assert isinstance(result.dataset.tasks, tuple)
