from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CellValue = Union[str, int, float, None]
RawRecord = Dict[str, CellValue]


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class RawTable(BaseModel):
    """Rows as handed over by the CSV reader: header -> cell, file order."""

    headers: List[str]
    rows: List[RawRecord]
    normalizations: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)


class HeaderMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    unit: str
    header: str


class FinancialRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    concept: str
    category: str
    segment: str
    impact_kind: str = ""
    total: float
    per_unit_amounts: Dict[str, float] = Field(default_factory=dict)
    source_row: Optional[RawRecord] = None


class ReportSummary(BaseModel):
    rows: Optional[int] = Field(default=None, examples=[None])
    records: int = 0
    excluded: Dict[str, int] = Field(default_factory=dict)
    warnings: int = 0


class ParseReport(BaseModel):
    summary: ReportSummary
    normalizations: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)


class ParseResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: List[FinancialRecord]
    active_business_units: List[str]
    categories: List[str]
    report: ParseReport


class CategoryCount(BaseModel):
    name: str
    value: int


class Summary(BaseModel):
    segment: Optional[str] = None
    category: Optional[str] = None
    total: float = 0.0
    income: float = 0.0
    expense: float = 0.0
    count: int = 0
    unit_totals: Dict[str, float] = Field(default_factory=dict)
    category_counts: List[CategoryCount] = Field(default_factory=list)


class SummaryResponse(BaseModel):
    summary: Summary
    formatted_total: str
    formatted_unit_totals: Dict[str, str] = Field(default_factory=dict)
    active_business_units: List[str]
    categories: List[str]


class HealthResponse(BaseModel):
    ok: bool = True
