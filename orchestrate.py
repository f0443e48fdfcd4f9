from __future__ import annotations

import argparse
import logging
import os
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from coursepress.config import PaginationConfig, StructuringConfig, load_config
from coursepress.enrichment import Enricher, EnrichmentGateway
from coursepress.exporters.excel_writer import AbstractWriter, ExcelWriter
from coursepress.logger import get_logger
from coursepress.models import StructuredDocument
from coursepress.pagination import PageEstimator
from coursepress.reports.summary import SummaryCalculator
from coursepress.run import write_document
from coursepress.structure import StructuringEngine
from coursepress.utils import read_text_lines

LOG = get_logger(__name__)


class Orchestrator:
    """Runs input → enrichment → structuring → pagination → reports in one go."""

    def __init__(
        self,
        structuring: Optional[StructuringConfig] = None,
        pagination: Optional[PaginationConfig] = None,
        enricher: Optional[Enricher] = None,
        read_lines_fn: Callable[[str], List[str]] = read_text_lines,
        excel_writer: Optional[AbstractWriter] = None,
    ) -> None:
        self.structuring = structuring or StructuringConfig()
        self.gateway = EnrichmentGateway(enricher, fixture_marker=self.structuring.fixture_marker)
        self.engine = StructuringEngine(config=self.structuring)
        self.estimator = PageEstimator(config=pagination)
        self.read_lines = read_lines_fn
        self.calculator = SummaryCalculator()
        self.excel_writer = excel_writer or ExcelWriter()

    def build(self, text: str) -> StructuredDocument:
        enriched = self.gateway.enrich(text)
        if enriched.truncated:
            LOG.warning("Structuring possibly truncated enrichment output")
        document = self.engine.structure(enriched.text)
        LOG.info("Structured %d blocks, %d TOC entries", len(document.content), len(document.toc))
        return self.estimator.estimate(document)

    def write_reports(self, document: StructuredDocument, outdir: Path) -> Tuple[Path, Path]:
        report = self.calculator.compute(document)
        summary_path = outdir / "summary.json"
        self.calculator.write(str(summary_path), report)

        xls_path = outdir / "StructureReport.xlsx"
        sheets = self.calculator.frames(document, report)
        try:
            self.excel_writer.write(xls_path, sheets)
        except PermissionError:
            alt = outdir / f"StructureReport_{time.strftime('%Y%m%d_%H%M%S')}.xlsx"
            LOG.warning("Could not write %s (maybe file open). Writing to %s", xls_path, alt)
            self.excel_writer.write(alt, sheets)
            xls_path = alt
        return summary_path, xls_path

    def run_all(self, input_path: str, outdir: str) -> Tuple[str, str, str]:
        outdir_path = Path(outdir)
        outdir_path.mkdir(parents=True, exist_ok=True)

        lines = self.read_lines(input_path)
        LOG.info("[1/3] Read %d lines from %s", len(lines), input_path)

        document = self.build("\n".join(lines))
        doc_path = outdir_path / "structured.json"
        write_document(document, str(doc_path))
        LOG.info("[2/3] Structured document -> %s", doc_path)

        summary_path, xls_path = self.write_reports(document, outdir_path)
        LOG.info("[3/3] Reports -> %s, %s", summary_path, xls_path)
        return str(doc_path), str(summary_path), str(xls_path)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    ap = argparse.ArgumentParser(
        description="Courseware orchestrator (structure + pagination + reports)"
    )
    ap.add_argument("--input", required=True, help="Source .txt, .md or .pdf file")
    ap.add_argument("--outdir", default=os.path.join("data", "output"))
    ap.add_argument("--config", default=None, help="Optional JSON config file")
    args = ap.parse_args(argv)

    try:
        structuring, pagination = load_config(args.config)
        Orchestrator(structuring=structuring, pagination=pagination).run_all(
            input_path=args.input, outdir=args.outdir
        )
        return 0
    except Exception:
        LOG.exception("Orchestration failed")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
