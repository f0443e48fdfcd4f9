from __future__ import annotations

from abc import ABC, abstractmethod
import argparse
import json
import os
from pathlib import Path
from typing import Any, Callable, List, Optional

from pydantic import ValidationError
from rich.console import Console

from coursepress.config import load_config
from coursepress.exporters.excel_writer import ExcelWriter
from coursepress.logger import configure_file_logging, get_logger
from coursepress.models import StructuredDocument
from coursepress.pagination import PageEstimator
from coursepress.reports.summary import SummaryCalculator
from coursepress.structure import StructuringEngine
from coursepress.utils import read_text_lines

console = Console()
LOG = get_logger(__name__)


def load_document(path: str) -> StructuredDocument:
    """Load a StructuredDocument from its JSON output form."""
    with open(path, "r", encoding="utf-8") as fh:
        return StructuredDocument.from_dict(json.load(fh))


def write_document(document: StructuredDocument, out_path: str) -> int:
    """Write a StructuredDocument as JSON and return the number of blocks written."""
    out_file = Path(out_path)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    with out_file.open("w", encoding="utf-8") as fh:
        json.dump(document.to_dict(), fh, ensure_ascii=False, indent=2)
    LOG.info("Wrote %d blocks and %d TOC entries to %s", len(document.content), len(document.toc), out_path)
    return len(document.content)


class AbstractCommand(ABC):
    """Abstract command contract for CLI commands."""

    @abstractmethod
    def run(self, args: argparse.Namespace) -> None:
        raise NotImplementedError


class StructureCommand(AbstractCommand):
    def __init__(
        self,
        read_lines_fn: Callable[[str], List[str]] = read_text_lines,
        load_config_fn: Callable[..., Any] = load_config,
        write_fn: Callable[..., int] = write_document,
        console_obj: Console = console,
        logger=LOG,
    ) -> None:
        self.read_lines = read_lines_fn
        self.load_config = load_config_fn
        self.write = write_fn
        self.console = console_obj
        self.log = logger

    def __str__(self) -> str:
        return "StructureCommand()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, StructureCommand)

    def run(self, args: argparse.Namespace) -> None:
        try:
            structuring, pagination = self.load_config(getattr(args, "config", None))
        except (OSError, ValueError, ValidationError) as exc:
            self.console.print(f"[red]Invalid configuration: {exc}")
            self.log.error("Could not load config %s: %s", args.config, exc)
            raise SystemExit(2)

        try:
            lines = self.read_lines(args.input)
        except (OSError, ValueError) as exc:
            self.console.print(f"[red]Cannot read {args.input}: {exc}")
            self.log.error("Could not read input %s: %s", args.input, exc)
            raise SystemExit(2)

        document = StructuringEngine(config=structuring).structure("\n".join(lines))
        if getattr(args, "paginate", False):
            document = PageEstimator(config=pagination).estimate(document)

        count = self.write(document, args.out)
        self.console.print(
            f"[green]Structured {len(lines)} lines into {count} blocks "
            f"({len(document.toc)} TOC entries) →\n{os.path.abspath(args.out)}"
        )
        self.log.info("Structured %s -> %s", args.input, args.out)


class PaginateCommand(AbstractCommand):
    def __init__(
        self,
        load_document_fn: Callable[[str], StructuredDocument] = load_document,
        load_config_fn: Callable[..., Any] = load_config,
        write_fn: Callable[..., int] = write_document,
        console_obj: Console = console,
        logger=LOG,
    ) -> None:
        self.load_document = load_document_fn
        self.load_config = load_config_fn
        self.write = write_fn
        self.console = console_obj
        self.log = logger

    def __str__(self) -> str:
        return "PaginateCommand()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PaginateCommand)

    def run(self, args: argparse.Namespace) -> None:
        try:
            _, pagination = self.load_config(getattr(args, "config", None))
            document = self.load_document(args.document)
        except (OSError, ValueError, ValidationError) as exc:
            self.console.print(f"[red]Cannot paginate {args.document}: {exc}")
            self.log.error("Could not load %s: %s", args.document, exc)
            raise SystemExit(2)

        paginated = PageEstimator(config=pagination).estimate(document)
        out = args.out or args.document
        self.write(paginated, out)
        pages = max((b.page_number or 0 for b in paginated.content), default=0)
        self.console.print(f"[green]Estimated {pages} pages →\n{os.path.abspath(out)}")
        self.log.info("Paginated %s -> %s (%d pages)", args.document, out, pages)


class ReportCommand(AbstractCommand):
    def __init__(
        self,
        load_document_fn: Callable[[str], StructuredDocument] = load_document,
        calculator: Optional[SummaryCalculator] = None,
        writer: Optional[ExcelWriter] = None,
        console_obj: Console = console,
        logger=LOG,
    ) -> None:
        self.load_document = load_document_fn
        self.calculator = calculator or SummaryCalculator()
        self.writer = writer or ExcelWriter()
        self.console = console_obj
        self.log = logger

    def __str__(self) -> str:
        return f"ReportCommand(calculator={self.calculator}, writer={self.writer})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ReportCommand)

    def run(self, args: argparse.Namespace) -> None:
        try:
            document = self.load_document(args.document)
        except (OSError, ValueError, ValidationError) as exc:
            self.console.print(f"[red]Cannot read {args.document}: {exc}")
            self.log.error("Could not load %s: %s", args.document, exc)
            raise SystemExit(2)

        report = self.calculator.compute(document)
        self.calculator.print_table(report, self.console)

        if getattr(args, "json", None):
            self.calculator.write(args.json, report)
        if getattr(args, "xlsx", None):
            path = self.writer.write(args.xlsx, self.calculator.frames(document, report))
            self.console.print(f"[green]Wrote Excel report →\n{os.path.abspath(path)}")


def cmd_structure(args: argparse.Namespace) -> None:
    StructureCommand().run(args)


def cmd_paginate(args: argparse.Namespace) -> None:
    PaginateCommand().run(args)


def cmd_report(args: argparse.Namespace) -> None:
    ReportCommand().run(args)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="coursepress",
        description="Structure plain courseware text and estimate its page numbers",
    )
    ap.add_argument("--log-dir", default=None, help="Also write DEBUG logs to this directory")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("structure", help="Classify a text/markdown/PDF file into a structured document")
    p.add_argument("input", help="Source file (.txt, .md or .pdf)")
    p.add_argument("--out", required=True, help="Output JSON path")
    p.add_argument("--config", default=None, help="JSON config with 'structuring'/'pagination' objects")
    p.add_argument("--paginate", action="store_true", help="Also run the page estimator")
    p.set_defaults(func=cmd_structure)

    p = sub.add_parser("paginate", help="Estimate page numbers for a structured JSON document")
    p.add_argument("document", help="Structured document JSON")
    p.add_argument("--out", default=None, help="Output JSON path (defaults to overwriting the input)")
    p.add_argument("--config", default=None)
    p.set_defaults(func=cmd_paginate)

    p = sub.add_parser("report", help="Summarize a structured JSON document")
    p.add_argument("document", help="Structured document JSON")
    p.add_argument("--json", default=None, help="Write the summary JSON here")
    p.add_argument("--xlsx", default=None, help="Write an Excel report here")
    p.set_defaults(func=cmd_report)
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_dir:
        configure_file_logging(args.log_dir, __name__, "coursepress.structure", "coursepress.pagination")
    args.func(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
