"""
Orchestration of load cycles: concurrent table fetch, normalization,
validation and snapshot swap with fallback substitution.
"""
