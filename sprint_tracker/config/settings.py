"""
Configuration settings for the sprint tracker.

**Conceptual**: This module provides strongly-typed configuration objects that
load from environment variables (via .env files). Settings are validated when
constructed, so a missing sheet id fails at startup with a clear message
instead of surfacing later as an opaque HTTP 404.

**Environment variables**:
  - SPRINT_SHEET_ID: id of the shared spreadsheet (from its URL).
  - SPRINT_GID_SPRINT_CONFIG / SPRINT_GID_MEMBERS / SPRINT_GID_TASKS /
    SPRINT_GID_MILESTONES: tab ids (the "#gid=..." part of each tab's URL).
  - SPRINT_SHEETS_BASE_URL: spreadsheet export base URL.
  - SPRINT_TIMEOUT_SECONDS: HTTP timeout per table fetch.
  - SPRINT_LOCAL_DATA_DIR: directory of <TABLE>.csv files for offline loads.

This module uses python-dotenv to load .env files and dataclasses for type safety.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from sprint_tracker.data.schemas import ALL_TABLES, MEMBERS, MILESTONES, SPRINT_CONFIG, TASKS

# Load .env from project root (dev/local environments)
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


DEFAULT_SHEETS_BASE_URL = "https://docs.google.com/spreadsheets/d"

# Tab ids of the reference tracker sheet
DEFAULT_GIDS = {
    SPRINT_CONFIG: "0",
    MEMBERS: "2073523473",
    TASKS: "1579655569",
    MILESTONES: "1458173099",
}


@dataclass(frozen=True)
class SheetSettings:
    """
    Configuration for the shared spreadsheet source.

    The sheet must be shared as "Anyone with the link can view"; no credentials
    are involved, only the sheet id and the per-tab gids.

    Attributes:
        sheet_id: Spreadsheet id. REQUIRED - raises ValueError if empty.
        gids: Table name -> tab gid. Must cover all four tables.
        base_url: Export base URL (default: https://docs.google.com/spreadsheets/d).
        timeout_seconds: HTTP timeout per request in seconds (default 30).
    """
    sheet_id: str
    gids: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_GIDS))
    base_url: str = DEFAULT_SHEETS_BASE_URL
    timeout_seconds: int = 30

    def __post_init__(self):
        """Validate settings after initialization."""
        if not self.sheet_id:
            raise ValueError(
                "SPRINT_SHEET_ID is required but not set. "
                "Please set it in your .env file or environment variables. "
                "Copy it from the sheet URL: docs.google.com/spreadsheets/d/<SHEET_ID>/edit"
            )
        missing = [table for table in ALL_TABLES if not self.gids.get(table)]
        if missing:
            raise ValueError(f"Missing gid for tables: {missing}")
        if self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got: {self.timeout_seconds}"
            )

    @classmethod
    def from_env(cls) -> "SheetSettings":
        """
        Load sheet settings from environment variables.

        Returns:
            SheetSettings with values loaded from environment.

        Raises:
            ValueError: If SPRINT_SHEET_ID is missing or SPRINT_TIMEOUT_SECONDS
                        is not an integer.

        Usage example:
            >>> # In .env file:
            >>> # SPRINT_SHEET_ID=1_ZHZV-9X_CZ4GhrFUaon1Xv-f4JHnd1_NfSKLuclBQc
            >>> settings = SheetSettings.from_env()
            >>> settings.gids["MEMBERS"]
            '2073523473'
        """
        sheet_id = os.getenv("SPRINT_SHEET_ID", "")
        base_url = os.getenv("SPRINT_SHEETS_BASE_URL", DEFAULT_SHEETS_BASE_URL)
        timeout_str = os.getenv("SPRINT_TIMEOUT_SECONDS", "30")

        try:
            timeout_seconds = int(timeout_str)
        except ValueError:
            raise ValueError(
                f"SPRINT_TIMEOUT_SECONDS must be an integer, got: {timeout_str}"
            )

        gids = {
            table: os.getenv(f"SPRINT_GID_{table}", default_gid)
            for table, default_gid in DEFAULT_GIDS.items()
        }

        return cls(
            sheet_id=sheet_id,
            gids=gids,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
        )


@dataclass(frozen=True)
class Settings:
    """
    Top-level settings for the sprint tracker.

    Attributes:
        sheets: Spreadsheet source settings. None when SPRINT_SHEET_ID is not
                configured (local CSV loads still work).
        local_data_dir: Directory holding SPRINT_CONFIG.csv, MEMBERS.csv, ...
                        for offline loads. None when not configured.
    """
    sheets: Optional[SheetSettings] = None
    local_data_dir: Optional[Path] = None

    @classmethod
    def from_env(cls, require_sheets: bool = False) -> "Settings":
        """
        Load global settings from environment variables.

        Args:
            require_sheets: If True, raise when the sheet settings can't be
                            loaded. If False (default), they are optional.

        Raises:
            ValueError: If require_sheets=True and SPRINT_SHEET_ID is missing.
        """
        sheet_settings = None
        try:
            sheet_settings = SheetSettings.from_env()
        except ValueError as e:
            if require_sheets:
                raise ValueError(
                    f"Sheet settings are required but could not be loaded: {e}"
                )

        local_dir = os.getenv("SPRINT_LOCAL_DATA_DIR", "")

        return cls(
            sheets=sheet_settings,
            local_data_dir=Path(local_dir) if local_dir else None,
        )


_default_settings: Optional[Settings] = None


def get_settings(require_sheets: bool = False) -> Settings:
    """
    Get the global settings singleton (loaded from environment on first call).

    Args:
        require_sheets: If True, raise when the sheet source is not configured.

    Raises:
        ValueError: If require_sheets=True and SPRINT_SHEET_ID is not set.
    """
    global _default_settings

    if _default_settings is None:
        _default_settings = Settings.from_env(require_sheets=require_sheets)

    if require_sheets and _default_settings.sheets is None:
        raise ValueError(
            "Sheet settings are required but not configured. "
            "Please set SPRINT_SHEET_ID in your .env file."
        )

    return _default_settings


def reset_settings():
    """Reset the global settings singleton (for testing)."""
    global _default_settings
    _default_settings = None
