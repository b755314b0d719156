from fastapi.testclient import TestClient
from sales_ingest.main import app

client = TestClient(app)

SAMPLE = (
    "Data;Produto;Quantidade;Receita;Origem\n"
    "2024-01-05;Curso A;3;150,00;Instagram\n"
    "2024-01-06;;0;0;Facebook\n"
)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_normalize_upload_end_to_end():
    files = {"file": ("vendas.csv", SAMPLE.encode("utf-8"), "text/csv")}
    r = client.post("/normalize", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["records"] == [{
        "date": "2024-01-05",
        "product": "Curso A",
        "quantitySold": 3,
        "revenue": 150.0,
        "source": "Instagram",
        "acquisitionCost": 0.0,
    }]
    summary = data["report"]["summary"]
    assert summary["rows"] == 2
    assert summary["records"] == 1
    assert summary["dropped"] == 1
    assert summary["delimiter"] == ";"
    assert summary["filter_policy"] == "activity"
    assert data["report"]["columns"]["cost"] is None
    assert {"column": "cost", "issue": "column_not_found"}.items() <= data["report"]["warnings"][0].items()


def test_normalize_latin1_upload_keeps_accents():
    # Include a Latin-1 character to force non-ASCII handling
    raw = "Data,Produto,Receita\n2024-02-01,Curso de Café,99.90\n".encode("latin-1")

    files = {"file": ("vendas.csv", raw, "text/csv")}
    r = client.post("/normalize", files=files)
    assert r.status_code == 200

    records = r.json()["records"]
    assert len(records) == 1
    assert records[0]["product"] == "Curso de Café"
    assert records[0]["revenue"] == 99.9


def test_normalize_rejects_non_csv():
    files = {"file": ("vendas.xlsx", b"PK\x03\x04", "application/octet-stream")}
    r = client.post("/normalize", files=files)
    assert r.status_code == 422


def test_normalize_empty_upload_is_not_an_error():
    files = {"file": ("vazio.csv", b"", "text/csv")}
    r = client.post("/normalize", files=files)
    assert r.status_code == 200

    data = r.json()
    assert data["records"] == []
    assert data["report"]["warnings"][0]["issue"] == "not_enough_lines"


def test_normalize_unknown_filter_policy():
    files = {"file": ("vendas.csv", SAMPLE.encode("utf-8"), "text/csv")}
    r = client.post("/normalize", params={"filter_policy": "bogus"}, files=files)
    assert r.status_code == 422


def test_normalize_named_product_policy():
    csv_text = (
        "Data,Produto,Quantidade,Receita\n"
        "2024-01-05,Curso A,0,0\n"
        "2024-01-06,,5,0\n"
    )
    files = {"file": ("vendas.csv", csv_text.encode("utf-8"), "text/csv")}
    r = client.post("/normalize", params={"filter_policy": "named_product"}, files=files)
    assert r.status_code == 200

    products = [rec["product"] for rec in r.json()["records"]]
    assert products == ["Curso A"]


def test_normalize_overflowing_revenue_is_zero_not_null():
    csv_text = "Data,Produto,Quantidade,Receita\n2024-01-05,Curso A,1," + "9" * 400 + "\n"
    files = {"file": ("vendas.csv", csv_text.encode("utf-8"), "text/csv")}
    r = client.post("/normalize", files=files)
    assert r.status_code == 200
    assert r.json()["records"][0]["revenue"] == 0.0
