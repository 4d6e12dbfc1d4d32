"""Spreadsheet ingestion and normalization for HR analytics exports."""

__version__ = "0.1.0"
