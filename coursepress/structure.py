from __future__ import annotations

import zlib
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import List, Optional, Sequence, Set, Tuple

from coursepress.classifier import (
    RULES,
    Classification,
    LineContext,
    ParseState,
    Rule,
    classify_line,
    suggest_image,
)
from coursepress.config import StructuringConfig
from coursepress.fixtures import DEMO_DOCUMENT, is_fixture_text
from coursepress.logger import get_logger
from coursepress.models import ContentBlock, Paragraph, StructuredDocument, TocEntry
from coursepress.utils import normalize_line

LOG = get_logger(__name__)


class AbstractStructuringEngine(ABC):
    """Contract for turning a plain line stream into a StructuredDocument."""

    @abstractmethod
    def structure(self, text: str) -> StructuredDocument:
        raise NotImplementedError


class StructuringEngine(AbstractStructuringEngine):
    """Single left-to-right pass over the input lines.

    The engine holds configuration only; every call builds its own
    ParseState, content list and TOC, so instances are safe to reuse.

    Parameters
    ----------
    config : StructuringConfig
        Vocabularies and thresholds used by the classifier.
    rules : sequence of (name, rule)
        Classification rules in precedence order.
    fixture : StructuredDocument or None
        Document returned for inputs ending in ``config.fixture_marker``.
        ``None`` disables the fixture path.
    id_stamp : int or None
        Stamp used in synthesized image ids. Defaults to a checksum of the
        input so identical input yields identical ids.
    """

    def __init__(
        self,
        config: Optional[StructuringConfig] = None,
        rules: Sequence[Tuple[str, Rule]] = RULES,
        fixture: Optional[StructuredDocument] = DEMO_DOCUMENT,
        id_stamp: Optional[int] = None,
    ) -> None:
        self.config = config or StructuringConfig()
        self.rules = tuple(rules)
        self.fixture = fixture
        self.id_stamp = id_stamp

    def __str__(self) -> str:
        return f"StructuringEngine(rules={len(self.rules)}, fixture={self.fixture is not None})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructuringEngine):
            return NotImplemented
        return (
            self.config == other.config
            and self.rules == other.rules
            and self.fixture == other.fixture
            and self.id_stamp == other.id_stamp
        )

    def _is_fixture(self, text: str) -> bool:
        return self.fixture is not None and is_fixture_text(text, self.config.fixture_marker)

    def _count_line(self, state: ParseState) -> ParseState:
        lines_on_page = state.lines_on_current_page + 1
        if lines_on_page > self.config.lines_per_page:
            return replace(state, page_counter=state.page_counter + 1, lines_on_current_page=0)
        return replace(state, lines_on_current_page=lines_on_page)

    def _merge_toc(self, toc: List[TocEntry], seen: Set[str], result: Classification) -> None:
        for entry in result.toc:
            if entry.text in seen:
                LOG.debug("Duplicate TOC text skipped: %r", entry.text)
                continue
            seen.add(entry.text)
            toc.append(entry)

    def structure(self, text: str) -> StructuredDocument:
        """Classify every line of ``text`` and return a fresh StructuredDocument."""
        if not isinstance(text, str):
            raise TypeError(f"structure() expects str, got {type(text).__name__}")

        if self._is_fixture(text):
            LOG.info("Fixture marker found; returning bundled document")
            return self.fixture.model_copy(deep=True)

        lines = [normalize_line(line) for line in text.splitlines()]
        title = next((line for line in lines if line), self.config.placeholder_title)
        stamp = self.id_stamp if self.id_stamp is not None else zlib.crc32(text.encode("utf-8"))

        state = ParseState()
        content: List[ContentBlock] = []
        toc: List[TocEntry] = []
        seen: Set[str] = set()

        i = 0
        while i < len(lines):
            if not lines[i]:
                i += 1
                continue

            state = replace(self._count_line(state), scan_cursor=i)
            ctx = LineContext(lines=lines, index=i, state=state, id_stamp=stamp)
            result = classify_line(ctx, self.config, self.rules)
            state = result.state

            content.extend(result.blocks)
            self._merge_toc(toc, seen, result)

            if any(isinstance(b, Paragraph) for b in result.blocks):
                suggestion = suggest_image(lines[i], ctx, self.config)
                if suggestion is not None:
                    content.append(suggestion)
            if result.blocks and not state.has_content:
                state = replace(state, has_content=True)

            for line in lines[i + 1:i + result.consumed]:
                if line:
                    state = self._count_line(state)
            i += max(1, result.consumed)

        LOG.debug(
            "Structured %d lines into %d blocks, %d TOC entries, ~%d pages",
            len(lines), len(content), len(toc), state.page_counter,
        )
        return StructuredDocument(title=title, content=content, toc=toc)


_engine: AbstractStructuringEngine = StructuringEngine()


def structure_text(text: str, config: Optional[StructuringConfig] = None) -> StructuredDocument:
    """Structure ``text`` with the default engine, or a one-off engine for ``config``."""
    engine = _engine if config is None else StructuringEngine(config=config)
    return engine.structure(text)
