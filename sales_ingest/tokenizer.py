"""
Text to raw rows.

Responsibilities:
- BOM stripping
- line splitting (LF or CRLF), blank lines dropped
- delimiter detection on the header line (comma or semicolon)
- quote-aware field splitting with "" escaping
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List

from .rules import BOM, COMMA, QUOTE, SEMICOLON

logger = logging.getLogger(__name__)

_NEWLINE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class Tokenized:
    delimiter: str = COMMA
    rows: List[List[str]] = field(default_factory=list)


def strip_bom(text: str) -> str:
    if text.startswith(BOM):
        return text[len(BOM):]
    return text


def split_lines(text: str) -> List[str]:
    return [line for line in _NEWLINE.split(text) if line.strip() != ""]


def detect_delimiter(header_line: str) -> str:
    """Semicolon only when it strictly outnumbers commas in the header."""
    if header_line.count(SEMICOLON) > header_line.count(COMMA):
        return SEMICOLON
    return COMMA


def split_line(line: str, delimiter: str) -> List[str]:
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        char = line[i]
        if char == QUOTE and i + 1 < n and line[i + 1] == QUOTE:
            current.append(QUOTE)
            i += 2
            continue
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields


def tokenize(text: str) -> Tokenized:
    """
    Split a complete tabular text into raw rows.

    The delimiter is detected once from the first non-blank line and used
    for every row. Fewer than two non-blank lines means there is no data to
    process and no rows are returned.
    """
    lines = split_lines(strip_bom(text or ""))
    if len(lines) < 2:
        logger.debug("tokenize: %d non-blank line(s), nothing to process", len(lines))
        return Tokenized()

    delimiter = detect_delimiter(lines[0])
    logger.debug("tokenize: delimiter=%r lines=%d", delimiter, len(lines))
    return Tokenized(delimiter=delimiter, rows=[split_line(line, delimiter) for line in lines])
