"""Dashboard figures computed from extracted records."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from .models import CategoryCount, FinancialRecord, Summary
from .rules import SEGMENT_EPSILON


def filter_records(
    records: Iterable[FinancialRecord],
    segment: Optional[str] = None,
    category: Optional[str] = None,
) -> List[FinancialRecord]:
    """
    Keep records matching the selected segment and category.

    ``None`` selects everything. A record belongs to a segment when it has a
    non-negligible amount in that unit's column, whatever its owning segment.
    """
    out = []
    for r in records:
        if category is not None and r.category != category:
            continue
        if segment is not None and abs(r.per_unit_amounts.get(segment, 0.0)) <= SEGMENT_EPSILON:
            continue
        out.append(r)
    return out


def summarize(
    records: Sequence[FinancialRecord],
    business_units: Sequence[str],
    segment: Optional[str] = None,
    category: Optional[str] = None,
) -> Summary:
    """
    Totals for the filtered view.

    Negative amounts are income, the rest expense. With a segment selected
    only that unit's column is counted.
    """
    rows = filter_records(records, segment=segment, category=category)

    total = 0.0
    income = 0.0
    expense = 0.0
    if segment is None:
        unit_totals: Dict[str, float] = {u: 0.0 for u in business_units}
    else:
        unit_totals = {segment: 0.0}
    counts: Dict[str, int] = {}

    for r in rows:
        val = r.total if segment is None else r.per_unit_amounts.get(segment, 0.0)
        total += val
        if val < 0:
            income += val
        else:
            expense += val

        if segment is None:
            for unit in business_units:
                unit_totals[unit] += r.per_unit_amounts.get(unit, 0.0)
        else:
            unit_totals[segment] += val

        counts[r.category] = counts.get(r.category, 0) + 1

    category_counts = [
        CategoryCount(name=name, value=value)
        for name, value in sorted(counts.items(), key=lambda kv: -kv[1])
    ]

    return Summary(
        segment=segment,
        category=category,
        total=total,
        income=income,
        expense=expense,
        count=len(rows),
        unit_totals=unit_totals,
        category_counts=category_counts,
    )


def format_currency(value: float) -> str:
    # es-MX pesos, whole units, reported in millions (MDP)
    q = Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    return f"{sign}${abs(q):,} MDP"


def format_short_number(value: float) -> str:
    if abs(value) >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if abs(value) >= 1000:
        return f"{value / 1000:.0f}k"
    if float(value).is_integer():
        return str(int(value))
    return str(value)
