"""
Financial row extraction.

Takes header-keyed rows from a Spanish accounting export and keeps the ones
that are real line items:

- business-unit columns are found once per file by matching header keys
  against the configured vocabulary
- every row goes through the same ordered rules and ends up either included
  (as a ``FinancialRecord``) or excluded with a reason
- the row outcomes are folded into the final result; nothing is shared
  between calls
"""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from functools import reduce
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .config import ExtractorConfig
from .errors import EmptyInputError, NoValidRecordsError
from .ingest import EMPTY_INPUT_MESSAGE, read_table
from .logging_setup import get_logger
from .models import (
    FinancialRecord,
    HeaderMatch,
    ParseReport,
    ParseResult,
    RawRecord,
    ReportItem,
    ReportSummary,
)
from .rules import (
    CREDIT_NOTE_MARKERS,
    CREDIT_NOTE_PREFIX,
    DEGENERATE_CATEGORIES,
    HIDDEN_CATEGORIES,
    NO_DESCRIPTION,
    SUMMARY_PREFIXES,
    UNATTRIBUTED,
    UNCLASSIFIED,
)
from .text import normalize_key, repair_text

logger = get_logger("insightdeck.extract")

_PARENS_RE = re.compile(r"^\(.*\)$", re.DOTALL)
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER_RE = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


class Exclusion(str, Enum):
    EMPTY_CONCEPT = "empty_concept"
    SUMMARY_ROW = "summary_row"
    ZERO_VALUE_NOISE = "zero_value_noise"


class RowOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    record: Optional[FinancialRecord] = None
    reason: Optional[Exclusion] = None

    @property
    def included(self) -> bool:
        return self.record is not None


class ExtractionContext(BaseModel):
    """Per-file facts fixed before the first row is looked at."""

    model_config = ConfigDict(frozen=True)

    config: ExtractorConfig
    units: Tuple[HeaderMatch, ...]
    total_header: Optional[str] = None
    keep_source_rows: bool = True


class _Accumulator(BaseModel):
    records: List[FinancialRecord] = Field(default_factory=list)
    categories: Set[str] = Field(default_factory=set)
    excluded: Dict[str, int] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def clean_currency(raw: Any) -> float:
    """
    Parse an accounting amount; anything unreadable counts as zero.

    "(1,234.50)" -> -1234.5, "$ 500" -> 500.0, "", "-", "abc" -> 0.0
    """
    if isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return float(raw)
    if not raw:
        return 0.0

    s = str(raw).strip()
    negative = _PARENS_RE.match(s) is not None

    cleaned = _NON_NUMERIC_RE.sub("", s)
    if not cleaned or cleaned == "-":
        return 0.0

    m = _LEADING_NUMBER_RE.match(cleaned)
    if m is None:
        return 0.0
    num = float(m.group())
    return -abs(num) if negative else num


def get_field(row: Mapping[str, Any], candidates: Iterable[str]) -> Any:
    """Value of the first row header matching any candidate key, else ""."""
    wanted = {normalize_key(c) for c in candidates}
    for key, value in row.items():
        if normalize_key(key) in wanted:
            return value
    return ""


# ---------------------------------------------------------------------------
# Header reconciliation
# ---------------------------------------------------------------------------


def match_business_units(
    headers: Sequence[str], vocabulary: Sequence[str]
) -> List[HeaderMatch]:
    """
    Pair vocabulary entries with the file's headers, in vocabulary order.

    When several headers share a key the first one in file order is used.
    A header is activated once even if two vocabulary entries reach it.
    """
    keyed = [(h, normalize_key(h)) for h in headers]
    matches: List[HeaderMatch] = []
    taken: Set[str] = set()

    for unit in vocabulary:
        key = normalize_key(unit)
        if not key:
            continue
        found = next((h for h, k in keyed if k == key), None)
        if found is None or found in taken:
            continue
        taken.add(found)
        matches.append(HeaderMatch(unit=unit, header=found))
    return matches


def _shadowed_headers(headers: Sequence[str], matches: Sequence[HeaderMatch]) -> List[str]:
    active = {m.header for m in matches}
    active_keys = {normalize_key(h) for h in active}
    return [h for h in headers if h not in active and normalize_key(h) in active_keys]


def find_total_header(headers: Sequence[str], total_field: str) -> Optional[str]:
    key = normalize_key(total_field)
    return next((h for h in headers if normalize_key(h) == key), None)


# ---------------------------------------------------------------------------
# Row rules
# ---------------------------------------------------------------------------


def is_placeholder_concept(concept: str) -> bool:
    return not concept or concept in NO_DESCRIPTION


def is_summary_row(concept: str) -> bool:
    return concept.lower().startswith(SUMMARY_PREFIXES)


def is_credit_note_exception(concept: str) -> bool:
    # Kept literal: "nota ..." rows that do NOT mention credito are exempt.
    lower = unicodedata.normalize("NFC", concept.lower())
    return lower.startswith(CREDIT_NOTE_PREFIX) and not any(
        marker in lower for marker in CREDIT_NOTE_MARKERS
    )


def normalize_category(category: str) -> str:
    return UNCLASSIFIED if category in DEGENERATE_CATEGORIES else category


def is_zero_value_noise(category: str, row_total: float, credit_note: bool) -> bool:
    return category == UNCLASSIFIED and row_total == 0 and not credit_note


def attribute_segment(
    row: Mapping[str, Any],
    units: Sequence[HeaderMatch],
    fallback_unit: str,
) -> Tuple[Dict[str, float], float, str]:
    """
    Per-unit amounts, their signed sum, and the owning segment.

    The owner is the unit with the largest absolute amount; ties go to the
    earlier unit.
    """
    per_unit: Dict[str, float] = {}
    row_total = 0.0
    max_val = 0.0
    segment = UNATTRIBUTED

    for match in units:
        val = clean_currency(row.get(match.header))
        per_unit[match.header] = val
        row_total += val
        if abs(val) > abs(max_val):
            max_val = val
            segment = match.header

    if segment == UNATTRIBUTED and row_total != 0:
        segment = fallback_unit

    return per_unit, row_total, segment


def evaluate_row(index: int, row: Mapping[str, Any], context: ExtractionContext) -> RowOutcome:
    """Run the ordered rules on one row; never raises for bad cell data."""
    cfg = context.config

    concept = repair_text(get_field(row, cfg.concept_fields) or "")
    category = repair_text(get_field(row, cfg.category_fields) or UNATTRIBUTED)
    impact_kind = repair_text(get_field(row, cfg.impact_fields) or "")

    if is_placeholder_concept(concept):
        return RowOutcome(index=index, reason=Exclusion.EMPTY_CONCEPT)

    if is_summary_row(concept):
        return RowOutcome(index=index, reason=Exclusion.SUMMARY_ROW)

    credit_note = is_credit_note_exception(concept)
    category = normalize_category(category)

    per_unit, row_total, segment = attribute_segment(row, context.units, cfg.fallback_unit)

    if is_zero_value_noise(category, row_total, credit_note):
        return RowOutcome(index=index, reason=Exclusion.ZERO_VALUE_NOISE)

    if context.total_header is not None:
        total = clean_currency(row.get(context.total_header))
    else:
        total = row_total

    record = FinancialRecord(
        id=f"row-{index}",
        concept=concept,
        category=category,
        segment=segment,
        impact_kind=impact_kind,
        total=total,
        per_unit_amounts=per_unit,
        source_row=dict(row) if context.keep_source_rows else None,
    )
    return RowOutcome(index=index, record=record)


def _fold(acc: _Accumulator, outcome: RowOutcome) -> _Accumulator:
    if outcome.record is not None:
        acc.records.append(outcome.record)
        acc.categories.add(outcome.record.category)
    else:
        reason = outcome.reason.value if outcome.reason else "unknown"
        acc.excluded[reason] = acc.excluded.get(reason, 0) + 1
        logger.debug("row %d excluded: %s", outcome.index, reason)
    return acc


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def visible_categories(categories: Iterable[str]) -> List[str]:
    return [c for c in sorted(set(categories)) if c not in HIDDEN_CATEGORIES]


def extract_records(
    headers: Sequence[str],
    rows: Sequence[RawRecord],
    config: Optional[ExtractorConfig] = None,
    *,
    keep_source_rows: bool = True,
    normalizations: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[ReportItem]] = None,
) -> ParseResult:
    """
    Build the validated record set from parsed rows.

    Raises ``EmptyInputError`` when there are no rows and
    ``NoValidRecordsError`` when every row is excluded.
    """
    cfg = config or ExtractorConfig()
    warnings = list(warnings or [])

    if not rows:
        raise EmptyInputError(EMPTY_INPUT_MESSAGE)

    if not headers:
        headers = list(rows[0].keys())

    matches = match_business_units(headers, cfg.business_units)
    if not matches:
        logger.warning("no business-unit columns detected; headers: %s", list(headers))
        warnings.append(ReportItem(
            issue="no_business_units",
            value=", ".join(headers),
            action="segments_unattributed",
        ))
    for header in _shadowed_headers(headers, matches):
        logger.warning("ignoring duplicate business-unit column %r", header)
        warnings.append(ReportItem(
            row=1,
            column=header,
            issue="duplicate_business_unit",
            value=header,
            action="ignored",
        ))

    context = ExtractionContext(
        config=cfg,
        units=tuple(matches),
        total_header=find_total_header(headers, cfg.total_field),
        keep_source_rows=keep_source_rows,
    )

    outcomes = (evaluate_row(i, row, context) for i, row in enumerate(rows))
    acc = reduce(_fold, outcomes, _Accumulator())

    if not acc.records:
        units_hint = ", ".join(cfg.business_units[:3])
        raise NoValidRecordsError(
            "No valid records found. Check that the CSV has the expected "
            f"business-unit columns ({units_hint}, etc.)."
        )

    logger.info(
        "extracted %d of %d rows across %d business units",
        len(acc.records), len(rows), len(matches),
    )

    report = ParseReport(
        summary=ReportSummary(
            rows=len(rows),
            records=len(acc.records),
            excluded=acc.excluded,
            warnings=len(warnings),
        ),
        normalizations=normalizations or {},
        warnings=warnings,
    )
    return ParseResult(
        records=acc.records,
        active_business_units=[m.header for m in matches],
        categories=visible_categories(acc.categories),
        report=report,
    )


def parse_csv_bytes(
    raw: bytes,
    config: Optional[ExtractorConfig] = None,
    *,
    keep_source_rows: bool = True,
) -> ParseResult:
    """Read an uploaded report and extract its financial records."""
    table = read_table(raw)
    return extract_records(
        table.headers,
        table.rows,
        config,
        keep_source_rows=keep_source_rows,
        normalizations=table.normalizations,
        warnings=table.warnings,
    )
