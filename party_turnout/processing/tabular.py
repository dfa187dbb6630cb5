"""
tabular.py - Delimited Text Parser

Turns raw turnout exports into header-addressed rows. Exports arrive as
either comma- or tab-separated text, sometimes with quoted cells, sometimes
with ragged rows, so the parser is forgiving:

- delimiter is detected from the header line (tab wins if present)
- one layer of surrounding double quotes is stripped from every cell
- blank lines are dropped anywhere in the file
- short rows are padded with empty strings
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger

Row = Dict[str, str]

TAB = "\t"
COMMA = ","

_LINE_BREAK = re.compile(r"\r?\n")


@dataclass
class ParsedTable:
    """Result of parsing a delimited text export."""

    headers: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    delimiter: str = COMMA


def strip_outer_quotes(value: Optional[str]) -> str:
    """Trim a cell and remove one layer of symmetric double quotes."""
    text = "" if value is None else str(value).strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1]
    return text


def detect_delimiter(header_line: str) -> str:
    """Tab if the header line contains one, comma otherwise."""
    return TAB if TAB in header_line else COMMA


def split_cells(line: str, delimiter: str) -> List[str]:
    # No quote-aware splitting: a quoted cell containing the delimiter is split.
    return [strip_outer_quotes(cell) for cell in line.split(delimiter)]


def parse_delimited(text: str) -> ParsedTable:
    """Parse comma- or tab-delimited text into a header list and rows.

    Args:
        text: Raw file contents. The first non-blank line holds the headers.

    Returns:
        ParsedTable with headers in file order, one dict per record and the
        detected delimiter. Empty input yields an empty table.
    """
    lines = [line for line in _LINE_BREAK.split(text or "") if line.strip()]
    if not lines:
        logger.warning("⚠️ Delimited text is empty - no headers or rows parsed")
        return ParsedTable()

    delimiter = detect_delimiter(lines[0])
    headers = split_cells(lines[0], delimiter)

    rows: List[Row] = []
    for line in lines[1:]:
        cells = split_cells(line, delimiter)
        row: Row = {}
        for idx, header in enumerate(headers):
            row[header] = cells[idx] if idx < len(cells) else ""
        rows.append(row)

    logger.debug(f"  📄 Parsed {len(rows):,} rows with {len(headers)} columns (delimiter={delimiter!r})")
    return ParsedTable(headers=headers, rows=rows, delimiter=delimiter)
