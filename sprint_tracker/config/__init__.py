"""
Configuration loading and validation.

Provides strongly typed settings objects for the spreadsheet source and local
data paths, loaded from environment variables with upfront validation.
"""
