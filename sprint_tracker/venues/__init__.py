"""
Table sources (venues) that deliver raw CSV text to the load pipeline.

The core never fetches anything itself; it is handed a SheetSource. Two
sources ship here: the public Google Sheets CSV export and a local directory
of CSV files.
"""
