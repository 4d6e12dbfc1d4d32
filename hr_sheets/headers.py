"""Map logical fields to the best-matching observed column header."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from hr_sheets.normalize import normalize_header

FieldCandidates = Mapping[str, Sequence[str]]


@dataclass(frozen=True)
class FieldMap:
    """Resolved field -> header assignments for one sheet."""

    columns: dict[str, str | None]

    def header(self, field: str) -> str | None:
        return self.columns.get(field)

    def resolved(self) -> dict[str, str]:
        return {field: header for field, header in self.columns.items() if header is not None}

    def missing(self) -> list[str]:
        return [field for field, header in self.columns.items() if header is None]

    def drop_if_shared(self, field: str, owner: str) -> FieldMap:
        """Unassign ``field`` when it resolved to the header already claimed by ``owner``."""
        header = self.columns.get(field)
        if header is None or header != self.columns.get(owner):
            return self
        return FieldMap({**self.columns, field: None})

    def extract(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Project a header-keyed record onto the fixed set of logical fields."""
        return {
            field: record.get(header) if header is not None else None
            for field, header in self.columns.items()
        }


class HeaderResolver:
    """
    Resolve candidate tokens against a sheet's observed headers.

    Headers and candidates are compared in normalized form (lowercase,
    alphanumerics only). An exact match wins, tried in candidate order;
    otherwise the first observed header containing any candidate wins.
    When two headers normalize to the same key the first one is kept.
    """

    def __init__(self, headers: Iterable[Any]) -> None:
        self._by_key: dict[str, Any] = {}
        for header in headers:
            key = normalize_header(header)
            if key and key not in self._by_key:
                self._by_key[key] = header

    @property
    def keys(self) -> list[str]:
        return list(self._by_key)

    def resolve(self, candidates: Sequence[str]) -> Any | None:
        tokens = [normalize_header(candidate) for candidate in candidates]
        tokens = [token for token in tokens if token]
        for token in tokens:
            if token in self._by_key:
                return self._by_key[token]
        for key, header in self._by_key.items():
            if any(token in key for token in tokens):
                return header
        return None

    def resolve_fields(self, fields: FieldCandidates) -> FieldMap:
        return FieldMap({field: self.resolve(candidates) for field, candidates in fields.items()})


def resolve_fields(headers: Iterable[Any], fields: FieldCandidates) -> FieldMap:
    return HeaderResolver(headers).resolve_fields(fields)


def record_headers(records: Sequence[Mapping[str, Any]]) -> list[Any]:
    """Headers in first-seen order across a sheet's records."""
    seen: dict[Any, None] = {}
    for record in records:
        for header in record:
            seen.setdefault(header, None)
    return list(seen)
