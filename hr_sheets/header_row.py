"""
header_row.py — find the real header row beneath banner and title rows

Exports often carry a report title, a date range or a logo row above the
column titles. The locator scores each of the first HEADER_SCAN_LIMIT rows by
how many token groups (synonym sets for one logical column) it matches and
picks the best one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from hr_sheets.normalize import clean_text, is_blank, normalize_header

HEADER_SCAN_LIMIT = 30
DEFAULT_MIN_SCORE = 3

TokenGroups = Sequence[Sequence[str]]


@dataclass(frozen=True)
class HeaderLocation:
    index: int
    score: int
    fallback: bool


def row_is_blank(row: Sequence[Any]) -> bool:
    return all(is_blank(cell) for cell in row)


def score_row(row: Sequence[Any], token_groups: TokenGroups) -> int:
    """Count token groups with at least one exact normalized cell match."""
    cells = {normalize_header(cell) for cell in row}
    cells.discard("")
    score = 0
    for group in token_groups:
        if any(normalize_header(token) in cells for token in group):
            score += 1
    return score


def locate_header_row(
    rows: Sequence[Sequence[Any]],
    token_groups: TokenGroups,
    min_score: int = DEFAULT_MIN_SCORE,
    scan_limit: int = HEADER_SCAN_LIMIT,
) -> HeaderLocation:
    """
    Return the index of the best-scoring header row.

    Blank rows are skipped and the earliest row wins a tie. When the best
    score is below min_score the first non-blank row is used instead.
    """
    best_index = -1
    best_score = -1
    for index, row in enumerate(rows[:scan_limit]):
        if row_is_blank(row):
            continue
        score = score_row(row, token_groups)
        if score > best_score:
            best_index = index
            best_score = score

    if best_index >= 0 and best_score >= min_score:
        return HeaderLocation(best_index, best_score, False)

    first_used = next((i for i, row in enumerate(rows) if not row_is_blank(row)), 0)
    return HeaderLocation(first_used, max(best_score, 0), True)


def unique_headers(cells: Sequence[Any]) -> list[str]:
    """Stringify header cells: blanks become colN, repeats get _2, _3 suffixes."""
    headers: list[str] = []
    seen: dict[str, int] = {}
    for position, cell in enumerate(cells, start=1):
        base = clean_text(cell) or f"col{position}"
        count = seen.get(base, 0)
        seen[base] = count + 1
        headers.append(f"{base}_{count + 1}" if count else base)
    return headers


def build_records(rows: Sequence[Sequence[Any]], header_index: int) -> list[dict[str, Any]]:
    """Turn the rows below header_index into header-keyed dicts, skipping blank rows."""
    if header_index >= len(rows):
        return []
    headers = unique_headers(rows[header_index])
    records: list[dict[str, Any]] = []
    for row in rows[header_index + 1 :]:
        if row_is_blank(row):
            continue
        padded = list(row[: len(headers)]) + [None] * max(0, len(headers) - len(row))
        records.append(dict(zip(headers, padded)))
    return records


def sheet_records(
    rows: Sequence[Sequence[Any]],
    token_groups: TokenGroups,
    min_score: int = DEFAULT_MIN_SCORE,
) -> tuple[list[dict[str, Any]], HeaderLocation]:
    location = locate_header_row(rows, token_groups, min_score=min_score)
    return build_records(rows, location.index), location
