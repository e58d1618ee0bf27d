"""
Generic utility functions shared across modules.

Includes the clock abstraction used for "today" and current-month defaults.
"""
