"""
app/domain/imports.py

Domain models used by the report import flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from app.domain.reconciliation import Snapshot

RowT = TypeVar("RowT")


@dataclass(frozen=True)
class ReportParseResult(Generic[RowT]):
    """
    Rows extracted from one report plus the diagnostics a caller needs to
    tell "no file" apart from "file in an unexpected format".
    """

    rows: tuple[RowT, ...] = ()
    provided: bool = False
    rows_with_coercion_warnings: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def format_mismatch(self) -> bool:
        return self.provided and not self.rows


@dataclass(frozen=True)
class ImportSummary:
    """
    End-of-run import summary.
    """

    snapshot: Snapshot
    content: ReportParseResult
    spend: ReportParseResult
    warnings: list[str] = field(default_factory=list)
