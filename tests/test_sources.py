import pytest
import requests
from fastapi.testclient import TestClient

from sales_ingest import config, sources
from sales_ingest.main import app

client = TestClient(app)

SHEET_CSV = (
    "\ufeffData,Produto,Quantidade,Receita,Origem,Custo\r\n"
    "2024-01-05,Curso A,3,150.00,Instagram,12.50\r\n"
    "2024-01-06,Curso B,0,0,Facebook,0\r\n"
)


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture()
def fake_get(monkeypatch):
    calls = []

    def install(response=None, exc=None):
        def fake(url, timeout=None):
            calls.append((url, timeout))
            if exc is not None:
                raise exc
            return response
        monkeypatch.setattr(requests, "get", fake)
        return calls

    return install


def test_export_url():
    assert sources.export_url("abc123") == (
        "https://docs.google.com/spreadsheets/d/abc123/export?format=csv"
    )
    with pytest.raises(ValueError):
        sources.export_url("")


def test_source_url_prefers_full_url():
    assert sources.source_url("https://example.com/x.csv", "abc") == "https://example.com/x.csv"
    assert sources.source_url(None, "abc").endswith("/abc/export?format=csv")
    assert sources.source_url(None, None) is None


def test_fetch_sales_records(fake_get):
    calls = fake_get(FakeResponse(SHEET_CSV.encode("utf-8")))
    records = sources.fetch_sales_records("https://example.com/x.csv", timeout=3)

    assert calls == [("https://example.com/x.csv", 3)]
    assert len(records) == 1
    assert records[0].acquisition_cost == 12.5
    assert records[0].revenue == 150.0


def test_fetch_http_error_degrades_to_empty(fake_get):
    fake_get(FakeResponse(b"", status_code=500))
    assert sources.fetch_sales_records("https://example.com/x.csv") == []


def test_fetch_connection_error_degrades_to_empty(fake_get):
    fake_get(exc=requests.ConnectionError("offline"))
    assert sources.fetch_sales_records("https://example.com/x.csv") == []


def test_sales_endpoint(fake_get, monkeypatch):
    monkeypatch.setattr(config, "SALES_SHEET_URL", None)
    monkeypatch.setattr(config, "SALES_SHEET_ID", "abc123")
    calls = fake_get(FakeResponse(SHEET_CSV.encode("utf-8")))

    r = client.get("/sales")
    assert r.status_code == 200
    assert calls[0][0] == "https://docs.google.com/spreadsheets/d/abc123/export?format=csv"

    data = r.json()
    assert [rec["product"] for rec in data["records"]] == ["Curso A"]
    assert data["report"]["summary"]["delimiter"] == ","


def test_sales_endpoint_without_source(monkeypatch):
    monkeypatch.setattr(config, "SALES_SHEET_URL", None)
    monkeypatch.setattr(config, "SALES_SHEET_ID", None)
    r = client.get("/sales")
    assert r.status_code == 503


def test_sales_endpoint_fetch_failure(fake_get, monkeypatch):
    monkeypatch.setattr(config, "SALES_SHEET_URL", "https://example.com/x.csv")
    fake_get(exc=requests.Timeout("slow"))

    r = client.get("/sales")
    assert r.status_code == 200
    assert r.json()["records"] == []
