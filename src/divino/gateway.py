"""Single boundary to the generative model, with degraded-mode fallbacks."""

from __future__ import annotations

import logging

from divino.exceptions import QuotaExceeded, RequestFailed
from divino.normalization.engine import IdIssuer
from divino.providers.base import BaseProvider, ImageInput, ScanMode
from divino.samples import sample_wines
from divino.schema import WineRecord

logger = logging.getLogger(__name__)

CHAT_APOLOGY = "Mi dispiace, al momento non riesco a rispondere. Riprova tra qualche istante."


class WineGateway:
    """Wraps a provider and applies the fallback policy for each operation.

    Text search and similar-wine lookups fall back to the sample catalogue when
    the model quota is exhausted. Chat degrades to an apology and image
    generation to None. Everything else propagates as RequestFailed.
    """

    def __init__(self, provider: BaseProvider, *, ids: IdIssuer | None = None):
        self.provider = provider
        self.ids = ids or getattr(provider, "ids", None) or IdIssuer()

    def identify_from_image(self, image: ImageInput, mode: ScanMode | str) -> list[WineRecord]:
        return self._call(self.provider.identify_from_image, image, ScanMode(mode))

    def identify_from_text(self, query: str) -> list[WineRecord]:
        try:
            return self._call(self.provider.identify_from_text, query)
        except QuotaExceeded:
            logger.warning("model quota exceeded, serving sample wines for search %r", query)
            return sample_wines(ids=self.ids)

    def find_similar(self, reference: WineRecord) -> list[WineRecord]:
        self.ids.reserve(reference.id)
        try:
            wines = self._call(self.provider.find_similar, reference)
        except QuotaExceeded:
            logger.warning("model quota exceeded, serving sample wines similar to %s", reference.id)
            return sample_wines(ids=self.ids, exclude_name=reference.name)
        return [
            wine.model_copy(update={"id": self.ids.issue()}) if wine.id == reference.id else wine
            for wine in wines
        ]

    def generate_bottle_image(self, record: WineRecord) -> str | None:
        try:
            return self.provider.generate_bottle_image(record)
        except QuotaExceeded as e:
            logger.warning("image generation quota exceeded for %s: %s", record.id, e)
        except Exception:
            logger.exception("image generation failed for %s", record.id)
        return None

    def ask(self, record: WineRecord, question: str) -> str:
        try:
            return self._call(self.provider.ask, record, question)
        except RequestFailed as e:
            logger.warning("chat failed for %s: %s", record.id, e)
            return CHAT_APOLOGY

    @staticmethod
    def _call(operation, *args):
        try:
            return operation(*args)
        except RequestFailed:
            raise
        except Exception as e:
            logger.exception("provider call %s failed", getattr(operation, "__name__", operation))
            raise RequestFailed(f"Provider call failed: {e}") from e
