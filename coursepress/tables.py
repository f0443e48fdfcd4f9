from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from coursepress.config import StructuringConfig
from coursepress.logger import get_logger
from coursepress.models import Table
from coursepress.utils import contains_any

LOG = get_logger(__name__)

TAB = "\t"
PIPE = "|"

# a full stop only counts when it ends a word, so "10.5" stays numeric
SENTENCE_PUNCT_RX = re.compile(r"[。！？!?；;，,]|\.(?=\s|$)")
SEPARATOR_CHARS_RX = re.compile(r"^[-=]+$")


@dataclass(frozen=True)
class TableMatch:
    table: Table
    consumed: int


def split_tab_row(line: str) -> List[str]:
    # only interior tabs delimit cells
    return [c.strip() for c in line.strip().split(TAB)]


def split_pipe_row(line: str) -> List[str]:
    """Split on pipes, dropping the empty cells made by edge delimiters."""
    cells = [c.strip() for c in line.strip().split(PIPE)]
    if cells and cells[0] == "":
        cells = cells[1:]
    if cells and cells[-1] == "":
        cells = cells[:-1]
    return cells


def is_separator_row(line: Optional[str]) -> bool:
    """``|---|:---:|`` or ``=====``: only dashes/equals besides pipes, colons and spaces."""
    if not line:
        return False
    core = re.sub(r"[|:\s]", "", line)
    return bool(core) and bool(SEPARATOR_CHARS_RX.match(core))


def looks_like_header(cells: Sequence[str], config: StructuringConfig) -> bool:
    """Short punctuation-free cells, or any cell naming a header keyword."""
    if not cells:
        return False
    if any(contains_any(c, config.header_keywords) for c in cells):
        return True
    return all(
        len(c) <= config.header_cell_max_length and not SENTENCE_PUNCT_RX.search(c)
        for c in cells
    )


def align_rows(rows: Sequence[Sequence[str]], width: int) -> List[List[str]]:
    """Pad or truncate every row to ``width`` and drop rows left entirely empty."""
    aligned: List[List[str]] = []
    for row in rows:
        cells = list(row[:width]) + [""] * max(0, width - len(row))
        if any(c for c in cells):
            aligned.append(cells)
    return aligned


def synthetic_headers(width: int, config: StructuringConfig) -> List[str]:
    return [config.synthetic_column_label.format(n=i) for i in range(1, width + 1)]


def collect_tab_table(
    lines: Sequence[str], start: int, config: StructuringConfig
) -> Optional[TableMatch]:
    """Greedily gather tab-delimited rows from ``start``.

    Interior blank lines are tolerated; trailing blanks are not consumed.
    Returns None unless at least two rows were gathered and one data row
    survives alignment.
    """
    collected: List[str] = []
    last = start
    j = start
    while j < len(lines):
        row = lines[j].strip()
        if not row:
            j += 1
            continue
        if TAB not in row:
            break
        collected.append(row)
        last = j
        j += 1

    if len(collected) < 2:
        return None

    rows = [split_tab_row(r) for r in collected]
    if looks_like_header(rows[0], config):
        headers = rows[0]
        body = align_rows(rows[1:], len(headers))
        has_real_header = True
    else:
        width = max(len(r) for r in rows)
        headers = synthetic_headers(width, config)
        body = align_rows(rows, width)
        has_real_header = False

    if not body:
        LOG.debug("Tab table candidate at line %d has no data rows; skipped", start)
        return None

    consumed = last - start + 1
    LOG.debug(
        "Tab table at line %d: %d columns, %d rows, header=%s, consumed=%d",
        start, len(headers), len(body), has_real_header, consumed,
    )
    return TableMatch(
        table=Table(headers=headers, rows=body, has_real_header=has_real_header),
        consumed=consumed,
    )


def collect_pipe_table(lines: Sequence[str], start: int) -> Optional[TableMatch]:
    """Gather a pipe table whose header at ``start`` is followed by a separator row."""
    if start + 1 >= len(lines):
        return None
    if PIPE not in lines[start] or not is_separator_row(lines[start + 1]):
        return None

    headers = split_pipe_row(lines[start])
    j = start + 2
    body: List[List[str]] = []
    while j < len(lines) and PIPE in lines[j]:
        if not is_separator_row(lines[j]):
            body.append(split_pipe_row(lines[j]))
        j += 1

    rows = align_rows(body, len(headers))
    if not any(headers) or not rows:
        LOG.debug("Pipe table candidate at line %d has no data rows; skipped", start)
        return None

    LOG.debug("Pipe table at line %d: %d columns, %d rows", start, len(headers), len(rows))
    return TableMatch(
        table=Table(headers=headers, rows=rows, has_real_header=True),
        consumed=j - start,
    )
