"""Offline provider backed by the built-in sample catalogue."""

from divino.exceptions import RequestFailed
from divino.normalization.engine import IdIssuer
from divino.providers.base import BaseProvider, ImageInput, ScanMode
from divino.samples import sample_wines
from divino.schema import WineRecord


class SampleProvider(BaseProvider):
    """Serves the sample catalogue. Useful without an API key and in demos."""

    def __init__(self, ids: IdIssuer | None = None):
        self.ids = ids or IdIssuer()

    def identify_from_image(self, image: ImageInput, mode: ScanMode) -> list[WineRecord]:
        wines = sample_wines(ids=self.ids)
        return wines[:1] if ScanMode(mode) is ScanMode.BOTTLE else wines

    def identify_from_text(self, query: str) -> list[WineRecord]:
        tokens = [token for token in query.lower().split() if token]
        wines = sample_wines(ids=self.ids)
        return [
            wine
            for wine in wines
            if tokens and all(token in f"{wine.name} {wine.producer} {wine.region}".lower() for token in tokens)
        ]

    def find_similar(self, reference: WineRecord) -> list[WineRecord]:
        self.ids.reserve(reference.id)
        return sample_wines(ids=self.ids, exclude_name=reference.name)

    def generate_bottle_image(self, record: WineRecord) -> str | None:
        return None

    def ask(self, record: WineRecord, question: str) -> str:
        raise RequestFailed("The sample provider cannot answer questions")
