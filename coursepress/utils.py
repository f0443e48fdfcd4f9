from __future__ import annotations

"""
utils.py

Text normalization helpers shared by the classifier and engine, plus the
input adapter that turns a source file into a plain line stream.

- Lazy-import pdfplumber so the structuring core never depends on it.
- Line normalization keeps interior tab characters: they delimit table cells.
"""

from abc import ABC, abstractmethod
import importlib
import re
from pathlib import Path
from typing import Any, Dict, Generator, Iterable, List, Optional

from coursepress.logger import get_logger

LOG = get_logger(__name__)

TEXT_SUFFIXES = (".txt", ".md", ".text")


class AbstractTextUtils(ABC):
    """Abstract contract for text utilities."""

    LIGATURES: Dict[str, str]

    @abstractmethod
    def normalize_line(self, s: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def normalize_block_text(self, s: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def has_dot_leader_page(self, s: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def contains_keyword(self, text: str, keyword: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def read_text_lines(self, path: str) -> List[str]:
        raise NotImplementedError


class TextUtils(AbstractTextUtils):
    """Line normalization, dot-leader handling and file-to-lines extraction."""

    LIGATURES = {
        "ﬁ": "fi",
        "ﬂ": "fl",
        "ﬀ": "ff",
        "ﬃ": "ffi",
        "ﬄ": "ffl",
    }

    NBSP_RX = re.compile(r"[\u00A0\u202F\u3000]")
    ZERO_WIDTH_RX = re.compile(r"[\u200B\u200C\u200D\uFEFF]")
    DOT_LEADER_PAGE_RX = re.compile(r"(?:[.\u00B7\u2024\u2025\u2026\uFF0E\u30FB]\s*){3,}\s*\d{1,4}\s*$")

    HEADING_DECORATION_RX = re.compile(r"^[#=★☆■□◆◇▶►▸◎※]+\s*")
    BOLD_PAIR_RX = re.compile(r"(\*\*|__)(.+?)\1")

    def __str__(self) -> str:
        return "TextUtils()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TextUtils)

    def normalize_line(self, s: str) -> str:
        """Trim a raw line; non-breaking and zero-width spaces are folded first."""
        if not s:
            return ""
        s = self.ZERO_WIDTH_RX.sub("", s)
        s = self.NBSP_RX.sub(" ", s)
        for k, v in self.LIGATURES.items():
            s = s.replace(k, v)
        return s.strip()

    def normalize_block_text(self, s: str) -> str:
        """Strip leading heading decoration and collapse paired bold markers."""
        t = self.HEADING_DECORATION_RX.sub("", s or "")
        t = self.BOLD_PAIR_RX.sub(r"\2", t)
        return t.strip()

    def has_dot_leader_page(self, s: str) -> bool:
        """True for rendered TOC rows such as ``Introduction......1``."""
        return bool(self.DOT_LEADER_PAGE_RX.search(s or ""))

    def contains_keyword(self, text: str, keyword: str) -> bool:
        """Whole-word match for Latin keywords, substring match otherwise."""
        if not text or not keyword:
            return False
        kw = keyword.lower()
        if kw.isascii():
            return re.search(rf"(?<![a-z0-9]){re.escape(kw)}(?![a-z0-9])", text.lower()) is not None
        return kw in text

    def _iter_pdf_lines(self, path: str) -> Generator[str, None, None]:
        pdfplumber = _lazy_import("pdfplumber")
        if pdfplumber is None:
            LOG.warning("pdfplumber not installed; PDF input unavailable")
            return
            yield

        try:
            with pdfplumber.open(path) as pdf:
                for page in pdf.pages:
                    txt = page.extract_text() or ""
                    for line in txt.splitlines():
                        yield line
                    # page boundaries act as soft block separators
                    yield ""
        except Exception as exc:
            LOG.exception("Error iterating lines for %s: %s", path, exc)

    def read_text_lines(self, path: str) -> List[str]:
        """Read a source file into a list of raw lines.

        Plain text and markdown files are read as UTF-8; PDFs go through
        pdfplumber. Any other suffix raises ValueError.
        """
        p = Path(path)
        suffix = p.suffix.lower()
        if suffix in TEXT_SUFFIXES:
            lines = p.read_text(encoding="utf-8").splitlines()
        elif suffix == ".pdf":
            lines = list(self._iter_pdf_lines(str(p)))
        else:
            raise ValueError(f"Unsupported input type {suffix!r}; expected .txt, .md or .pdf")
        LOG.debug("Read %d lines from %s", len(lines), path)
        return lines


_utils: AbstractTextUtils = TextUtils()


def _lazy_import(name: str) -> Optional[Any]:
    """Attempt to import a module by name and return it, or None if unavailable."""
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        LOG.debug("Lazy import failed for %s: %s", name, exc)
        return None


def normalize_line(s: str) -> str:
    return _utils.normalize_line(s)


def normalize_block_text(s: str) -> str:
    return _utils.normalize_block_text(s)


def has_dot_leader_page(s: str) -> bool:
    return _utils.has_dot_leader_page(s)


def contains_keyword(text: str, keyword: str) -> bool:
    return _utils.contains_keyword(text, keyword)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(_utils.contains_keyword(text, kw) for kw in keywords)


def read_text_lines(path: str) -> List[str]:
    return _utils.read_text_lines(path)
