from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .rules import DEFAULT_PRODUCT, DEFAULT_SOURCE


class ColumnMapping(BaseModel):
    """Column index per semantic field; None means the header has no match."""

    model_config = ConfigDict(frozen=True)

    date: Optional[int] = None
    product: Optional[int] = None
    quantity: Optional[int] = None
    revenue: Optional[int] = None
    source: Optional[int] = None
    cost: Optional[int] = None


class SaleRecord(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    date: str = ""
    product: str = DEFAULT_PRODUCT
    quantity_sold: int = Field(default=0, ge=0)
    revenue: float = 0.0
    source: str = DEFAULT_SOURCE
    acquisition_cost: float = 0.0


class ReportSummary(BaseModel):
    rows: Optional[int] = Field(default=None, examples=[None])
    records: int = 0
    dropped: int = 0
    warnings: int = 0
    delimiter: Optional[str] = None
    encoding: Optional[str] = None
    filter_policy: str


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class NormalizationReport(BaseModel):
    summary: ReportSummary
    columns: Dict[str, Optional[int]] = Field(default_factory=dict)
    warnings: List[ReportItem] = Field(default_factory=list)


class NormalizeResponse(BaseModel):
    records: List[SaleRecord]
    report: NormalizationReport


class MonthHighlight(BaseModel):
    month: str = "N/A"
    value: float = 0.0
    count: int = 0


class NamedValue(BaseModel):
    name: str = "N/A"
    value: float = 0.0


class NamedCount(BaseModel):
    name: str = "N/A"
    count: int = 0


class SourceBreakdown(BaseModel):
    name: str
    value: float
    sales: int


class ProductTotals(BaseModel):
    revenue: float = 0.0
    sales: int = 0
    ticket: float = 0.0


class DashboardStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_sales: int = 0
    total_revenue: float = 0.0
    total_acquisition_cost: float = 0.0
    average_ticket: float = 0.0
    top_product_share: float = 0.0
    best_month: MonthHighlight = Field(default_factory=MonthHighlight)
    best_product: NamedValue = Field(default_factory=NamedValue)
    best_product_qty: NamedCount = Field(default_factory=NamedCount)
    best_source: NamedValue = Field(default_factory=NamedValue)
    by_source: List[SourceBreakdown] = Field(default_factory=list)
    by_product: List[NamedValue] = Field(default_factory=list)
    by_month: List[NamedValue] = Field(default_factory=list)
    records: int = 0


class StatsResponse(BaseModel):
    stats: DashboardStats
    products: List[str] = Field(default_factory=list)
    months: List[str] = Field(default_factory=list)
    comparison: Optional[Dict[str, ProductTotals]] = None
    report: NormalizationReport


class HealthResponse(BaseModel):
    ok: bool = True


def dump_records(records: List[SaleRecord]) -> List[Dict[str, Any]]:
    return [r.model_dump(by_alias=True) for r in records]
