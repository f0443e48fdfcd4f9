from __future__ import annotations

import json
import os
from collections import Counter
from typing import Dict, List

import pandas as pd
from rich.console import Console
from rich.table import Table as RichTable

from coursepress.logger import get_logger
from coursepress.models import (
    UNKNOWN_PAGE,
    Image,
    StructuredDocument,
    StructureReport,
    Table,
    block_text,
)
from coursepress.pagination import page_count

LOG = get_logger(__name__)


class SummaryCalculator:
    """
    Summarize a structured (and ideally paginated) document.

    The report counts blocks per kind, the estimated page total and how many
    TOC entries resolved to a page number.
    """

    def __init__(self, preview_length: int = 60) -> None:
        self.preview_length = int(preview_length)

    def __str__(self) -> str:
        return f"SummaryCalculator(preview_length={self.preview_length})"

    def _preview(self, text: str) -> str:
        if len(text) <= self.preview_length:
            return text
        return text[: self.preview_length - 3] + "..."

    def compute(self, document: StructuredDocument) -> StructureReport:
        counts = Counter(block.type for block in document.content)
        unknown = [e.text for e in document.toc if not isinstance(e.page_number, int)]
        report = StructureReport(
            title=document.title,
            block_count=len(document.content),
            counts_by_type=dict(sorted(counts.items())),
            page_count=page_count(document),
            toc_count=len(document.toc),
            toc_resolved=len(document.toc) - len(unknown),
            toc_unknown=unknown,
            auto_images=sum(1 for b in document.content if isinstance(b, Image) and b.auto),
        )
        LOG.info(
            "Summary computed: blocks=%d pages=%d toc=%d unresolved=%d",
            report.block_count,
            report.page_count,
            report.toc_count,
            len(report.toc_unknown),
        )
        return report

    def frames(self, document: StructuredDocument, report: StructureReport) -> Dict[str, pd.DataFrame]:
        """Sheets for the Excel export: Overview, Blocks and TOC."""
        overview_rows = [
            ("Title", report.title),
            ("Blocks", report.block_count),
            ("Estimated pages", report.page_count),
            ("TOC entries", report.toc_count),
            ("TOC entries with page", report.toc_resolved),
            ("TOC entries unknown", len(report.toc_unknown)),
            ("Auto image suggestions", report.auto_images),
        ]
        overview_rows.extend((f"Blocks: {kind}", n) for kind, n in report.counts_by_type.items())

        block_rows: List[Dict[str, object]] = []
        for idx, block in enumerate(document.content, start=1):
            if isinstance(block, Table):
                text = " | ".join(block.headers) + f" ({len(block.rows)} rows)"
            else:
                text = block_text(block) or ""
            block_rows.append(
                {"#": idx, "type": block.type, "page": block.page_number, "text": self._preview(text)}
            )

        toc_rows = [
            {
                "level": e.level,
                "text": e.text,
                "page": e.page_number if e.page_number is not None else UNKNOWN_PAGE,
            }
            for e in document.toc
        ]

        return {
            "Overview": pd.DataFrame(overview_rows, columns=["Metric", "Value"]),
            "Blocks": pd.DataFrame(block_rows, columns=["#", "type", "page", "text"]),
            "TOC": pd.DataFrame(toc_rows, columns=["level", "text", "page"]),
        }

    def print_table(self, report: StructureReport, console: Console) -> None:
        table = RichTable(title=f"Structure Summary: {report.title}")
        table.add_column("Metric")
        table.add_column("Value")
        table.add_row("Blocks", str(report.block_count))
        for kind, n in report.counts_by_type.items():
            table.add_row(f"  {kind}", str(n))
        table.add_row("Estimated pages", str(report.page_count))
        table.add_row("TOC entries", str(report.toc_count))
        table.add_row("TOC entries with page", str(report.toc_resolved))
        table.add_row("Auto image suggestions", str(report.auto_images))
        console.print(table)

    def write(self, out_path: str, report: StructureReport) -> None:
        """Write the report JSON to disk (pretty-printed, UTF-8)."""
        os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(report.model_dump(), f, indent=2, ensure_ascii=False)
        LOG.info("Wrote summary to %s", out_path)


_calculator = SummaryCalculator()


def compute_summary(document: StructuredDocument) -> StructureReport:
    return _calculator.compute(document)


def summary_frames(document: StructuredDocument, report: StructureReport) -> Dict[str, pd.DataFrame]:
    return _calculator.frames(document, report)


def write_summary(out_path: str, report: StructureReport) -> None:
    _calculator.write(out_path, report)
