"""pt-BR display helpers for dashboard values."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

MONTHS_PT = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)

MONTHS_PT_SHORT = (
    "jan.", "fev.", "mar.", "abr.", "mai.", "jun.",
    "jul.", "ago.", "set.", "out.", "nov.", "dez.",
)

UNKNOWN_MONTH = "Desconhecido"
NO_MONTH = "N/A"

_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})")
_BR_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})")


def _swap_separators(text: str) -> str:
    return text.translate(str.maketrans({",": ".", ".": ","}))


def format_currency(value: float) -> str:
    """1234.5 -> "R$ 1.234,50", -3 -> "-R$ 3,00"."""
    sign = "-" if value < 0 else ""
    return f"{sign}R$ {_swap_separators(f'{abs(value):,.2f}')}"


def format_number(value: float) -> str:
    """1234 -> "1.234", 1234.5 -> "1.234,5" (at most three decimals)."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return _swap_separators(text)


def parse_date(raw: str) -> Optional[date]:
    """ISO (YYYY-MM-DD, time suffix ignored) or DD/MM/YYYY, else None."""
    text = (raw or "").strip()
    m = _ISO_DATE.match(text)
    if m:
        year, month, day = m.groups()
    else:
        m = _BR_DATE.match(text)
        if not m:
            return None
        day, month, year = m.groups()
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def month_name(raw: str) -> str:
    parsed = parse_date(raw)
    if parsed is None:
        return UNKNOWN_MONTH
    return f"{MONTHS_PT[parsed.month - 1]} de {parsed.year}"


def short_month_name(raw: str) -> str:
    """Short label, 2024-03-09 -> "mar.", unparsable -> N/A."""
    parsed = parse_date(raw)
    if parsed is None:
        return NO_MONTH
    return MONTHS_PT_SHORT[parsed.month - 1]
