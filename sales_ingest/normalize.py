"""
Raw rows to sale records.

Responsibilities:
- encoding detection for uploaded bytes
- locale tolerant numeric parsing (1.234,56 and 1234.56)
- sentinel defaults for blank text fields
- row filtering by the configured policy
- report envelope for the API
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from charset_normalizer import from_bytes

from .models import ColumnMapping, SaleRecord, dump_records
from .rules import (
    DEFAULT_PRODUCT,
    DEFAULT_SOURCE,
    FILTER_ACTIVITY,
    FILTER_NAMED_PRODUCT,
    FILTER_POLICIES,
)
from .schema_resolver import missing_fields, resolve_columns
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

_NOT_DECIMAL = re.compile(r"[^\d.\-]")
_NOT_DIGIT = re.compile(r"\D")


@dataclass(frozen=True)
class ParseResult:
    records: List[SaleRecord] = field(default_factory=list)
    delimiter: Optional[str] = None
    mapping: Optional[ColumnMapping] = None
    rows: int = 0
    dropped: int = 0


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def field_value(row: Sequence[str], index: Optional[int]) -> str:
    if index is None or index < 0 or index >= len(row):
        return ""
    return row[index]


def parse_decimal(raw: str) -> float:
    """
    Parse a money-like value written in either convention.

    "1.234,56" -> 1234.56
    "1234.56"  -> 1234.56
    "R$ 50,00" -> 50.0
    ""         -> 0.0

    When both separators appear the last one is the decimal mark. A single
    kind of separator repeated is a thousands separator.
    """
    s = (raw or "").strip()
    has_comma = "," in s
    has_dot = "." in s

    if has_comma and has_dot:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif has_comma:
        s = s.replace(",", "") if s.count(",") > 1 else s.replace(",", ".")
    elif has_dot and s.count(".") > 1:
        s = s.replace(".", "")

    s = _NOT_DECIMAL.sub("", s)
    if not s:
        return 0.0
    try:
        value = float(s)
    except ValueError:
        return 0.0
    # float() overflows to inf instead of raising
    return value if math.isfinite(value) else 0.0


def parse_quantity(raw: str) -> int:
    digits = _NOT_DIGIT.sub("", raw or "")
    if not digits:
        return 0
    try:
        return int(digits)
    except ValueError:
        return 0


def text_or_default(raw: str, default: str) -> str:
    value = (raw or "").strip()
    return value or default


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def resolve_policy(policy: Optional[str]) -> str:
    if policy is None:
        return FILTER_ACTIVITY
    if policy not in FILTER_POLICIES:
        raise ValueError(
            f"Unknown filter policy '{policy}'. "
            f"Valid policies: {', '.join(FILTER_POLICIES)}"
        )
    return policy


def build_record(row: Sequence[str], mapping: ColumnMapping) -> SaleRecord:
    return SaleRecord(
        date=field_value(row, mapping.date).strip(),
        product=text_or_default(field_value(row, mapping.product), DEFAULT_PRODUCT),
        quantity_sold=parse_quantity(field_value(row, mapping.quantity)),
        revenue=parse_decimal(field_value(row, mapping.revenue)),
        source=text_or_default(field_value(row, mapping.source), DEFAULT_SOURCE),
        acquisition_cost=parse_decimal(field_value(row, mapping.cost)),
    )


def keep_record(record: SaleRecord, policy: str = FILTER_ACTIVITY) -> bool:
    if policy == FILTER_NAMED_PRODUCT:
        return record.product != DEFAULT_PRODUCT or record.revenue > 0
    return record.revenue > 0 or record.quantity_sold > 0


def normalize_rows(
    mapping: ColumnMapping,
    rows: Sequence[Sequence[str]],
    policy: str = FILTER_ACTIVITY,
) -> List[SaleRecord]:
    records = (build_record(row, mapping) for row in rows)
    return [r for r in records if keep_record(r, policy)]


def normalize_sales_text(text: str, policy: Optional[str] = None) -> ParseResult:
    """Tokenize, resolve the header once, then normalize every data row."""
    policy = resolve_policy(policy)
    tokenized = tokenize(text)
    if not tokenized.rows:
        return ParseResult()

    header, data_rows = tokenized.rows[0], tokenized.rows[1:]
    mapping = resolve_columns(header)
    records = normalize_rows(mapping, data_rows, policy)
    dropped = len(data_rows) - len(records)

    logger.debug("columns resolved: %s", mapping.model_dump())
    logger.info(
        "parsed %d record(s) from %d row(s), %d dropped (policy=%s)",
        len(records), len(data_rows), dropped, policy,
    )
    return ParseResult(
        records=records,
        delimiter=tokenized.delimiter,
        mapping=mapping,
        rows=len(data_rows),
        dropped=dropped,
    )


def parse_sales_csv(text: str, policy: Optional[str] = None) -> List[SaleRecord]:
    return normalize_sales_text(text, policy).records


# ---------------------------------------------------------------------------
# Bytes and report envelope
# ---------------------------------------------------------------------------

def decode_bytes(raw: bytes) -> Tuple[str, str]:
    """
    Decode uploaded or fetched bytes to text.

    Rules:
    - Detect encoding best-effort via charset-normalizer.
    - UTF-8 input with a BOM is decoded with utf-8-sig.
    - If decode fails, fall back to UTF-8, then to replacement characters.
    """
    detected = None
    match = from_bytes(raw).best()
    if match is not None:
        detected = match.encoding

    decode_used = detected or "utf-8"
    if raw.startswith(b"\xef\xbb\xbf") and (decode_used.lower().replace("-", "_") in ("utf_8", "utf8")):
        decode_used = "utf-8-sig"

    try:
        return raw.decode(decode_used), decode_used
    except (UnicodeDecodeError, LookupError):
        logger.warning("decode with %s failed, retrying as utf-8", decode_used)

    try:
        return raw.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        return raw.decode("utf-8", errors="replace"), "utf-8"


def build_report(result: ParseResult, policy: str, encoding: Optional[str] = None) -> Dict[str, Any]:
    warnings: list[dict] = []
    mapping = result.mapping

    if mapping is None:
        warnings.append({
            "row": None,
            "column": None,
            "issue": "not_enough_lines",
            "value": None,
            "action": "no_records",
        })
    else:
        for name in missing_fields(mapping):
            warnings.append({
                "row": 1,
                "column": name,
                "issue": "column_not_found",
                "value": None,
                "action": "defaulted",
            })
        if not result.records:
            warnings.append({
                "row": None,
                "column": None,
                "issue": "no_usable_records",
                "value": str(result.rows),
                "action": "no_records",
            })

    return {
        "summary": {
            "rows": result.rows,
            "records": len(result.records),
            "dropped": result.dropped,
            "warnings": len(warnings),
            "delimiter": result.delimiter,
            "encoding": encoding,
            "filter_policy": policy,
        },
        "columns": mapping.model_dump() if mapping is not None else {},
        "warnings": warnings,
    }


def normalize_sales_result(result: ParseResult, policy: str, encoding: Optional[str] = None) -> Dict[str, Any]:
    return {
        "records": dump_records(result.records),
        "report": build_report(result, policy, encoding),
    }


def normalize_sales_bytes(raw: bytes, policy: Optional[str] = None) -> Dict[str, Any]:
    """Returns a dict matching the API's response envelope."""
    policy = resolve_policy(policy)
    text, encoding = decode_bytes(raw)
    return normalize_sales_result(normalize_sales_text(text, policy), policy, encoding)
