from __future__ import annotations

import logging
from typing import List, Optional

import requests

from .models import SaleRecord
from .normalize import ParseResult, decode_bytes, normalize_sales_text

logger = logging.getLogger(__name__)

GOOGLE_SHEETS_EXPORT = "https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv"


def export_url(sheet_id: str) -> str:
    if not sheet_id:
        raise ValueError("Google Sheets source must provide sheet_id")
    return GOOGLE_SHEETS_EXPORT.format(sheet_id=sheet_id)


def source_url(url: Optional[str], sheet_id: Optional[str]) -> Optional[str]:
    """Configured URL, or the export URL for a bare sheet id, or None."""
    if url:
        return url
    if sheet_id:
        return export_url(sheet_id)
    return None


def fetch_csv_text(url: str, timeout: float = 10) -> str:
    logger.info("fetching sales data from %s", url)
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    text, encoding = decode_bytes(response.content)
    logger.debug("fetched %d bytes (%s)", len(response.content), encoding)
    return text


def fetch_sales_result(url: str, timeout: float = 10, policy: Optional[str] = None) -> ParseResult:
    """Fetch and parse; a failed request degrades to an empty result."""
    try:
        text = fetch_csv_text(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("error fetching sales data: %s", exc)
        return ParseResult()
    return normalize_sales_text(text, policy)


def fetch_sales_records(url: str, timeout: float = 10, policy: Optional[str] = None) -> List[SaleRecord]:
    return fetch_sales_result(url, timeout=timeout, policy=policy).records
