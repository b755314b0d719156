from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException, Query

from . import config
from .logging_setup import setup_logging
from .models import NormalizeResponse, HealthResponse, StatsResponse
from .normalize import (
    decode_bytes,
    normalize_sales_bytes,
    normalize_sales_result,
    normalize_sales_text,
    build_report,
    resolve_policy,
)
from .rules import ACCEPTED_UPLOAD_SUFFIXES
from .sources import fetch_sales_result, source_url
from .stats import available_months, available_products, compare_products, compute_stats, filter_records

setup_logging(config.SALES_LOG_LEVEL)

app = FastAPI(
    title="sales-ingest",
    description="Sales spreadsheet ingestion and normalization for dashboards",
    version="0.1.0",
)


def _policy(filter_policy: Optional[str]) -> str:
    try:
        return resolve_policy(filter_policy or config.SALES_ROW_FILTER)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


async def _read_upload(file: UploadFile) -> bytes:
    if not (file.filename or "").lower().endswith(ACCEPTED_UPLOAD_SUFFIXES):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")
    return await file.read()


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/normalize", response_model=NormalizeResponse)
async def normalize_upload(
    file: UploadFile = File(...),
    filter_policy: Optional[str] = Query(default=None),
):
    policy = _policy(filter_policy)
    raw = await _read_upload(file)
    return normalize_sales_bytes(raw, policy)


@app.get("/sales", response_model=NormalizeResponse)
def remote_sales(filter_policy: Optional[str] = Query(default=None)):
    policy = _policy(filter_policy)
    url = source_url(config.SALES_SHEET_URL, config.SALES_SHEET_ID)
    if url is None:
        raise HTTPException(status_code=503, detail="No remote spreadsheet configured")
    result = fetch_sales_result(url, timeout=config.SALES_FETCH_TIMEOUT, policy=policy)
    return normalize_sales_result(result, policy)


@app.post("/stats", response_model=StatsResponse)
async def upload_stats(
    file: UploadFile = File(...),
    product: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None),
    compare_a: Optional[str] = Query(default=None),
    compare_b: Optional[str] = Query(default=None),
    filter_policy: Optional[str] = Query(default=None),
):
    policy = _policy(filter_policy)
    raw = await _read_upload(file)
    text, encoding = decode_bytes(raw)
    result = normalize_sales_text(text, policy)
    records = result.records

    comparison = None
    if compare_a and compare_b:
        comparison = compare_products(records, compare_a, compare_b, month=month)

    return {
        "stats": compute_stats(filter_records(records, product=product, month=month)).model_dump(by_alias=True),
        "products": available_products(records),
        "months": available_months(records),
        "comparison": comparison,
        "report": build_report(result, policy, encoding),
    }
