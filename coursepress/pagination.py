from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union

from coursepress.config import PaginationConfig
from coursepress.logger import get_logger
from coursepress.models import (
    UNKNOWN_PAGE,
    Chapter,
    ContentBlock,
    Section,
    StructuredDocument,
    Table,
    TocEntry,
    block_text,
)

LOG = get_logger(__name__)

TOC_LEVEL_KINDS = {1: Chapter, 2: Section}


class AbstractPageEstimator(ABC):
    """Contract for page-number estimators."""

    @abstractmethod
    def estimate(self, document: StructuredDocument) -> StructuredDocument:
        raise NotImplementedError


class PageEstimator(AbstractPageEstimator):
    """Fixed-height virtual page simulation.

    Page numbers are a navigation hint only: real pagination depends on the
    renderer. The input document is never modified; a stamped copy is returned.
    """

    def __init__(self, config: Optional[PaginationConfig] = None) -> None:
        self.config = config or PaginationConfig()

    def __str__(self) -> str:
        return f"PageEstimator(printable_height={self.config.printable_height})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PageEstimator):
            return NotImplemented
        return self.config == other.config

    def block_height(self, block: ContentBlock) -> int:
        height = self.config.height_for(block.type)
        if isinstance(block, Table):
            height += self.config.table_row_height * len(block.rows)
        return height

    def assign_pages(self, content: List[ContentBlock]) -> List[int]:
        """Return the page each block lands on, in order."""
        printable = self.config.printable_height
        pages: List[int] = []
        page = 1
        used = 0
        for idx, block in enumerate(content):
            height = self.block_height(block)
            if isinstance(block, Chapter) and idx > 0:
                page += 1
                used = height
                LOG.debug("Forced break before chapter %r -> page %d", block.text, page)
            elif used > 0 and used + height > printable:
                page += 1
                used = height
                LOG.debug("Overflow break before block %d (%s) -> page %d", idx, block.type, page)
            else:
                used += height
            pages.append(page)
        return pages

    def reconcile_toc(
        self, toc: List[TocEntry], content: List[ContentBlock]
    ) -> List[TocEntry]:
        """Copy each entry's page from the first block with exactly matching text."""
        by_kind: Dict[type, Dict[str, int]] = {kind: {} for kind in TOC_LEVEL_KINDS.values()}
        any_text: Dict[str, int] = {}
        for block in content:
            text = block_text(block)
            if text is None or block.page_number is None:
                continue
            any_text.setdefault(text, block.page_number)
            if type(block) in by_kind:
                by_kind[type(block)].setdefault(text, block.page_number)

        reconciled: List[TocEntry] = []
        for entry in toc:
            kind = TOC_LEVEL_KINDS.get(entry.level)
            page: Union[int, str, None] = None
            if kind is not None:
                page = by_kind[kind].get(entry.text)
            if page is None:
                page = any_text.get(entry.text, UNKNOWN_PAGE)
            if page == UNKNOWN_PAGE:
                LOG.debug("No block matches TOC entry %r", entry.text)
            reconciled.append(entry.model_copy(update={"page_number": page}))
        return reconciled

    def estimate(self, document: StructuredDocument) -> StructuredDocument:
        pages = self.assign_pages(document.content)
        content = [
            block.model_copy(update={"page_number": page}, deep=True)
            for block, page in zip(document.content, pages)
        ]
        toc = self.reconcile_toc(document.toc, content)
        LOG.debug("Estimated %d pages for %d blocks", pages[-1] if pages else 0, len(content))
        return StructuredDocument(title=document.title, content=content, toc=toc)


_estimator: AbstractPageEstimator = PageEstimator()


def estimate_pages(
    document: StructuredDocument, config: Optional[PaginationConfig] = None
) -> StructuredDocument:
    estimator = _estimator if config is None else PageEstimator(config=config)
    return estimator.estimate(document)


def page_count(document: StructuredDocument) -> int:
    """Highest stamped page number, or 0 for an unstamped or empty document."""
    return max((b.page_number or 0 for b in document.content), default=0)
