"""
Dashboard aggregates over normalized sale records.

Everything here is derived for display only; records are never modified.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from .formatters import month_name, parse_date, short_month_name
from .models import (
    DashboardStats,
    MonthHighlight,
    NamedCount,
    NamedValue,
    ProductTotals,
    SaleRecord,
    SourceBreakdown,
)
from .rules import DEFAULT_PRODUCT

ALL = "All"
UNKNOWN_SOURCE = "Desconhecido"


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def month_key(raw: str) -> Optional[str]:
    parsed = parse_date(raw)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def _is_all(value: Optional[str]) -> bool:
    return value is None or value == ALL


def filter_records(
    records: Iterable[SaleRecord],
    product: Optional[str] = None,
    month: Optional[str] = None,
) -> List[SaleRecord]:
    """Undated records ignore the month filter; unparsable dates never match one."""
    result = []
    for record in records:
        matches_product = _is_all(product) or record.product == product
        if not record.date:
            if matches_product:
                result.append(record)
            continue
        matches_month = _is_all(month) or month_key(record.date) == month
        if matches_product and matches_month:
            result.append(record)
    return result


def available_products(records: Iterable[SaleRecord]) -> List[str]:
    return sorted({r.product for r in records if r.product})


def available_months(records: Iterable[SaleRecord]) -> List[str]:
    """Newest first."""
    keys = {month_key(r.date) for r in records if r.date}
    return sorted((k for k in keys if k), reverse=True)


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------

def revenue_by_source(records: Sequence[SaleRecord], limit: int = 10) -> List[SourceBreakdown]:
    revenue: Dict[str, float] = defaultdict(float)
    sales: Dict[str, int] = defaultdict(int)
    for record in records:
        label = (record.source or UNKNOWN_SOURCE).strip()
        revenue[label] += record.revenue
        sales[label] += record.quantity_sold
    ranked = sorted(revenue.items(), key=lambda item: item[1], reverse=True)
    return [SourceBreakdown(name=name, value=value, sales=sales[name]) for name, value in ranked[:limit]]


def revenue_by_month(records: Sequence[SaleRecord]) -> List[NamedValue]:
    """Revenue per short month label in first-seen order; undated records are skipped."""
    revenue: Dict[str, float] = {}
    for record in records:
        if parse_date(record.date) is None:
            continue
        label = short_month_name(record.date)
        revenue[label] = revenue.get(label, 0.0) + record.revenue
    return [NamedValue(name=name, value=value) for name, value in revenue.items()]


def revenue_by_product(records: Sequence[SaleRecord]) -> List[NamedValue]:
    revenue: Dict[str, float] = defaultdict(float)
    for record in records:
        revenue[(record.product or DEFAULT_PRODUCT).strip()] += record.revenue
    ranked = sorted(revenue.items(), key=lambda item: item[1], reverse=True)
    return [NamedValue(name=name, value=value) for name, value in ranked]


def product_totals(records: Sequence[SaleRecord]) -> ProductTotals:
    revenue = sum(r.revenue for r in records)
    sales = sum(r.quantity_sold for r in records)
    return ProductTotals(revenue=revenue, sales=sales, ticket=revenue / sales if sales > 0 else 0.0)


def compare_products(
    records: Sequence[SaleRecord],
    product_a: str,
    product_b: str,
    month: Optional[str] = None,
) -> Dict[str, ProductTotals]:
    return {
        "productA": product_totals(filter_records(records, product=product_a, month=month)),
        "productB": product_totals(filter_records(records, product=product_b, month=month)),
    }


def _best(totals: Dict[str, float]) -> Optional[str]:
    # max() keeps the first key on ties, i.e. the first one seen in the data
    if not totals:
        return None
    return max(totals, key=lambda key: totals[key])


def compute_stats(records: Sequence[SaleRecord]) -> DashboardStats:
    total_sales = sum(r.quantity_sold for r in records)
    total_revenue = sum(r.revenue for r in records)

    month_revenue: Dict[str, float] = defaultdict(float)
    month_count: Dict[str, int] = defaultdict(int)
    product_revenue: Dict[str, float] = defaultdict(float)
    product_qty: Dict[str, int] = defaultdict(int)
    source_revenue: Dict[str, float] = defaultdict(float)

    for record in records:
        label = month_name(record.date)
        month_revenue[label] += record.revenue
        month_count[label] += record.quantity_sold
        if record.product:
            product_revenue[record.product] += record.revenue
            product_qty[record.product] += record.quantity_sold
        if record.source:
            source_revenue[record.source] += record.revenue

    stats = DashboardStats(
        total_sales=total_sales,
        total_revenue=total_revenue,
        total_acquisition_cost=sum(r.acquisition_cost for r in records),
        average_ticket=total_revenue / total_sales if total_sales > 0 else 0.0,
        by_source=revenue_by_source(records),
        by_product=revenue_by_product(records),
        by_month=revenue_by_month(records),
        records=len(records),
    )

    best_month = _best(month_revenue)
    if best_month is not None:
        stats.best_month = MonthHighlight(
            month=best_month, value=month_revenue[best_month], count=month_count[best_month],
        )
    best_product = _best(product_revenue)
    if best_product is not None:
        stats.best_product = NamedValue(name=best_product, value=product_revenue[best_product])
        stats.top_product_share = product_revenue[best_product] / (total_revenue or 1) * 100
    best_qty = _best(product_qty)
    if best_qty is not None:
        stats.best_product_qty = NamedCount(name=best_qty, count=product_qty[best_qty])
    best_source = _best(source_revenue)
    if best_source is not None:
        stats.best_source = NamedValue(name=best_source, value=source_revenue[best_source])

    return stats
