"""
sprint_tracker – spreadsheet-backed sprint data core.

Turns the CSV exports of a shared sprint spreadsheet (SPRINT_CONFIG, MEMBERS,
TASKS, MILESTONES) into an immutable, validated dataset snapshot.
"""

__version__ = "1.0.0"
