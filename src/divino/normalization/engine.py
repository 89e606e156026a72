"""Normalization of loosely-typed model output into WineRecord values."""

from __future__ import annotations

import json
import logging
import math
import re
import unicodedata
import uuid
from dataclasses import dataclass
from typing import Any

from divino.exceptions import RequestFailed
from divino.normalization.repository import DictionaryRepository
from divino.schema import FlavorHighlights, TasteProfile, WineRecord, WineType

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
_NO_VINTAGE = {"", "NV", "N.V.", "N/A", "NA", "SA", "S.A."}

# Field names seen across schema versions, first match wins.
_NAME_KEYS = ("name", "wineName")
_PRODUCER_KEYS = ("winery", "producer", "producerOrWinery")
_VINTAGE_KEYS = ("year", "vintage", "vintageYear")
_TYPE_KEYS = ("type", "styleOrType", "style", "wineType")
_STAR_KEYS = ("averageRating", "stars", "starRating")
_SCORE_KEYS = ("score", "points")
_AMBIGUOUS_RATING_KEYS = ("qualityRating", "rating")
_ESTIMATE_KEYS = ("priceEstimate", "marketPriceEstimate", "marketPrice")
_MENU_PRICE_KEYS = ("menuPrice", "detectedOrMenuPrice", "detectedPrice")
_DESCRIPTION_KEYS = ("description", "expertOpinion")
_TASTE_AXES = {
    "body": ("bold", "body", "structure"),
    "tannins": ("tannic", "tannins"),
    "sweetness": ("sweet", "sweetness"),
    "acidity": ("acidic", "acidity"),
}
_HIGHLIGHT_KEYS = {
    "wood": ("woodNote", "wood"),
    "fruit": ("fruitNote", "fruit"),
    "earth": ("earthNote", "earth"),
}


class IdIssuer:
    """Hands out session-unique wine ids."""

    def __init__(self, prefix: str = "wine"):
        self.prefix = prefix
        self._issued: set[str] = set()

    def reserve(self, wine_id: str) -> None:
        self._issued.add(wine_id)

    def issue(self, suggested: Any = None) -> str:
        candidate = suggested.strip() if isinstance(suggested, str) else ""
        while not candidate or candidate in self._issued:
            candidate = f"{self.prefix}-{uuid.uuid4().hex[:12]}"
        self._issued.add(candidate)
        return candidate


@dataclass(frozen=True)
class NormalizationConfig:
    dictionary_version: str = "v1"


class NormalizationEngine:
    """Dictionary-first normalization of raw wine payloads."""

    def __init__(self, config: NormalizationConfig | None = None, ids: IdIssuer | None = None):
        self.config = config or NormalizationConfig()
        self.ids = ids or IdIssuer()
        self.repo = DictionaryRepository(version=self.config.dictionary_version)

    def normalize_payload(self, payload: Any) -> list[WineRecord]:
        """Normalize a JSON text, object or array of wine objects.

        Raises:
            RequestFailed: If the payload is not JSON or has no wine shape.
        """
        if isinstance(payload, (str, bytes)):
            try:
                payload = json.loads(payload) if payload else []
            except ValueError as e:
                raise RequestFailed(f"Model response is not valid JSON: {e}") from e

        if isinstance(payload, dict):
            nested = payload.get("wines", payload.get("results"))
            items = nested if isinstance(nested, list) else [payload]
        elif isinstance(payload, list):
            items = payload
        else:
            raise RequestFailed(f"Unexpected model response type: {type(payload).__name__}")

        wines: list[WineRecord] = []
        for item in items:
            wine = self.normalize_wine(item)
            if wine is not None:
                wines.append(wine)
        return wines

    def normalize_wine(self, raw: Any) -> WineRecord | None:
        if not isinstance(raw, dict):
            logger.warning("skipping non-object wine entry: %r", raw)
            return None

        name = _text(_first(raw, _NAME_KEYS))
        if not name:
            logger.warning("skipping wine entry without a name")
            return None

        raw_type = _text(_first(raw, _TYPE_KEYS))
        menu_price = _number(_first(raw, _MENU_PRICE_KEYS))
        review_count = _number(_first(raw, ("reviewCount", "reviews")))

        return WineRecord(
            id=self.ids.issue(raw.get("id")),
            name=name,
            producer=_text(_first(raw, _PRODUCER_KEYS)) or "",
            region=_text(raw.get("region")) or "",
            country=_text(raw.get("country")) or "",
            vintage=_vintage(_first(raw, _VINTAGE_KEYS)),
            wine_type=self.normalize_wine_type(raw_type),
            style=raw_type,
            rating=_rating(raw),
            review_count=int(review_count) if review_count is not None and review_count >= 0 else None,
            price_estimate=_text(_first(raw, _ESTIMATE_KEYS)) or "",
            menu_price=menu_price if menu_price is not None and menu_price > 0 else None,
            taste_profile=_taste_profile(raw),
            highlights=_highlights(raw),
            description=_text(_first(raw, _DESCRIPTION_KEYS)) or "",
            tasting_notes=_text(raw.get("tastingNotes")),
            food_pairing=_string_list(_first(raw, ("foodPairing", "food_pairing"))),
            grapes=_string_list(raw.get("grapes")),
            alcohol_content=_text(_first(raw, ("alcoholContent", "alcohol"))),
        )

    def normalize_wine_type(self, raw: str | None) -> WineType:
        """Map a free-form type string to a WineType. Unknown values map to OTHER."""
        if not raw or not isinstance(raw, str):
            return WineType.OTHER
        text = _normalize_text(raw)
        if not text:
            return WineType.OTHER

        for term in self.repo.terms_by_domain("wine_type"):
            if text in {_normalize_text(term.key), _normalize_text(term.label_en), _normalize_text(term.label_it)}:
                return WineType(term.key)

        for alias in self.repo.aliases_by_domain("wine_type"):
            if alias.match_type == "word" and re.search(rf"\b{re.escape(alias.alias)}\b", text):
                return WineType(alias.key)
            if alias.match_type == "contains" and alias.alias in text:
                return WineType(alias.key)
            if alias.match_type == "exact" and alias.alias == text:
                return WineType(alias.key)
        return WineType.OTHER


def normalize_wines(payload: Any, *, ids: IdIssuer | None = None) -> list[WineRecord]:
    """Normalize a raw model payload with the default dictionary."""

    return NormalizationEngine(ids=ids).normalize_payload(payload)


def _first(raw: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        match = _NUMBER.search(value.replace(",", "."))
        if match:
            number = float(match.group(0))
            return number if math.isfinite(number) else None
    return None


def _rating(raw: dict) -> float:
    stars = _number(_first(raw, _STAR_KEYS))
    if stars is not None:
        score = stars * 20.0
    else:
        score = _number(_first(raw, _SCORE_KEYS))
        if score is None:
            ambiguous = _number(_first(raw, _AMBIGUOUS_RATING_KEYS))
            if ambiguous is not None:
                score = ambiguous * 20.0 if ambiguous <= 5.0 else ambiguous
    if score is None:
        return 0.0
    return max(0.0, min(100.0, score))


def _vintage(value: Any) -> str | None:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = _text(value)
    if text is None or text.upper() in _NO_VINTAGE:
        return None
    return text


def _string_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = re.split(r"[,;\n]+", value)
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _taste_profile(raw: dict) -> TasteProfile | None:
    source = _first(raw, ("tasteProfile", "taste_profile"))
    if not isinstance(source, dict):
        return None
    axes = {axis: _number(_first(source, keys)) for axis, keys in _TASTE_AXES.items()}
    if all(value is None for value in axes.values()):
        return None
    return TasteProfile(**axes)


def _highlights(raw: dict) -> FlavorHighlights | None:
    nested = raw.get("flavorHighlights")
    source = nested if isinstance(nested, dict) else raw
    tags = {tag: _text(_first(source, keys)) for tag, keys in _HIGHLIGHT_KEYS.items()}
    if all(value is None for value in tags.values()):
        return None
    return FlavorHighlights(**tags)


def _normalize_text(value: str) -> str:
    text = unicodedata.normalize("NFKD", value)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.casefold().strip().replace("_", " ").replace("-", " ")
    text = re.sub(r"[^\w\s]", " ", text)
    return re.sub(r"\s+", " ", text).strip()
