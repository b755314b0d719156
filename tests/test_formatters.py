from datetime import date

from sales_ingest.formatters import format_currency, format_number, month_name, parse_date, short_month_name


def test_format_currency():
    assert format_currency(1234.5) == "R$ 1.234,50"
    assert format_currency(0) == "R$ 0,00"
    assert format_currency(-3) == "-R$ 3,00"


def test_format_number():
    assert format_number(1234) == "1.234"
    assert format_number(1234.5) == "1.234,5"
    assert format_number(0) == "0"


def test_parse_date():
    assert parse_date("2024-03-09") == date(2024, 3, 9)
    assert parse_date("09/03/2024") == date(2024, 3, 9)
    assert parse_date("31/02/2024") is None
    assert parse_date("março") is None


def test_month_name():
    assert month_name("2024-03-09") == "março de 2024"
    assert month_name("") == "Desconhecido"


def test_short_month_name():
    assert short_month_name("2024-03-09") == "mar."
    assert short_month_name("15/12/2023") == "dez."
    assert short_month_name("ontem") == "N/A"
