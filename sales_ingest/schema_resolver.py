from __future__ import annotations

import re
import unicodedata
from typing import List, Optional, Sequence

from .models import ColumnMapping
from .rules import FIELD_KEYWORDS

_NON_KEY_CHARS = re.compile(r"[^a-z0-9_]")


def normalize_header(cell: str) -> str:
    """
    Matching key for a header cell.

    "Receita (R$)" -> "receita__r__", "Preço Médio" -> "preco_medio"
    """
    decomposed = unicodedata.normalize("NFD", cell.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_KEY_CHARS.sub("_", stripped)


def _first_match(keys: Sequence[str], candidates: Sequence[str]) -> Optional[int]:
    for index, key in enumerate(keys):
        if any(candidate in key for candidate in candidates):
            return index
    return None


def resolve_columns(header: Sequence[str]) -> ColumnMapping:
    # Fields are resolved independently; one column may serve several.
    keys = [normalize_header(cell) for cell in header]
    return ColumnMapping(**{
        name: _first_match(keys, candidates)
        for name, candidates in FIELD_KEYWORDS.items()
    })


def missing_fields(mapping: ColumnMapping) -> List[str]:
    return [name for name in FIELD_KEYWORDS if getattr(mapping, name) is None]
