"""
Sprint data parsing, normalization, validation and export.

Turns raw CSV text into typed, validated records under strict data contracts,
and writes dataset snapshots back out as JSON or CSV.
"""
