from __future__ import annotations

from typing import Callable, Optional

from pydantic import BaseModel

from coursepress.fixtures import is_fixture_text
from coursepress.logger import get_logger

LOG = get_logger(__name__)

Enricher = Callable[[str], str]

# characters a complete enrichment response is expected to end with
COMPLETE_ENDINGS = (".", "!", "?", "]", "}", '"', "”", "。", "！", "？", "」")


class EnrichmentResult(BaseModel):
    text: str
    enriched: bool = False
    truncated: bool = False


class EnrichmentGateway:
    """Hands the structuring core the best text available.

    The enricher is any callable that annotates plain text (a remote service
    client in production). It owns its own retry and backoff; whatever it
    raises here is logged and the original text is used instead.
    """

    def __init__(
        self,
        enricher: Optional[Enricher] = None,
        bypass_length: Optional[int] = 100,
        fixture_marker: str = "[DEMO_MARK]",
    ) -> None:
        self.enricher = enricher
        self.bypass_length = bypass_length
        self.fixture_marker = fixture_marker

    def __str__(self) -> str:
        return f"EnrichmentGateway(enricher={self.enricher is not None}, bypass_length={self.bypass_length})"

    def _bypass(self, text: str) -> bool:
        if self.enricher is None or is_fixture_text(text, self.fixture_marker):
            return True
        return self.bypass_length is not None and len(text) > self.bypass_length

    def enrich(self, text: str) -> EnrichmentResult:
        if self._bypass(text):
            LOG.debug("Enrichment bypassed for %d characters of input", len(text))
            return EnrichmentResult(text=text)

        try:
            annotated = self.enricher(text)
        except Exception as exc:
            LOG.warning("Enrichment failed, structuring original text: %s", exc)
            return EnrichmentResult(text=text)

        if not isinstance(annotated, str) or not annotated.strip():
            LOG.warning("Enrichment returned no usable text, structuring original text")
            return EnrichmentResult(text=text)

        trimmed = annotated.strip()
        truncated = not trimmed.endswith(COMPLETE_ENDINGS)
        if truncated:
            LOG.info("Enriched text looks truncated (ends with %r)", trimmed[-1])
        return EnrichmentResult(text=trimmed, enriched=True, truncated=truncated)


def enrich_or_fallback(
    text: str, enricher: Optional[Enricher] = None, bypass_length: Optional[int] = 100
) -> str:
    """Return enriched text, or ``text`` itself when enrichment is skipped or fails."""
    return EnrichmentGateway(enricher, bypass_length=bypass_length).enrich(text).text
