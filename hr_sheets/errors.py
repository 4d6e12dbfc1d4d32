"""Whole-file ingestion failures."""

from __future__ import annotations


class IngestError(ValueError):
    """
    Raised when an upload cannot produce any usable records.

    The message is user-facing: it names the likely cause ("No rows found in
    the file.", "Check headers.") rather than the internal failure.
    """
