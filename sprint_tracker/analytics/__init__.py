"""
Sprint analytics computed from a loaded dataset: working days, bandwidth,
allocation and task filtering.
"""
