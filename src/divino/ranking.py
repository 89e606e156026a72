"""Sorting of a result batch and the "best" badge."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from divino.pricing import compute_value_score, numeric_price
from divino.schema import WineRecord


class SortMode(str, Enum):
    VALUE = "value"
    RATING = "rating"
    ORIGINAL = "original"


BADGE_LABELS = {
    SortMode.VALUE: "MIGLIOR AFFARE",
    SortMode.RATING: "MIGLIOR VOTO",
}


@dataclass(frozen=True)
class RankedWines:
    wines: list[WineRecord]
    mode: SortMode
    badge: bool

    @property
    def badge_label(self) -> str | None:
        return BADGE_LABELS.get(self.mode) if self.badge else None


def _rating_key(wine: WineRecord) -> tuple[int, float]:
    if wine.rating <= 0:
        return (1, 0.0)
    return (0, -wine.rating)


def _value_key(wine: WineRecord) -> tuple[int, float]:
    score = compute_value_score(wine)
    if score is None:
        return (1, 0.0)
    return (0, -score)


def _qualifies(wine: WineRecord, mode: SortMode) -> bool:
    if mode is SortMode.RATING:
        return wine.rating > 0
    if mode is SortMode.VALUE:
        return numeric_price(wine) is not None
    return False


def rank_wines(wines: list[WineRecord], mode: SortMode | str = SortMode.VALUE) -> RankedWines:
    """Sort wines for display.

    Sorting is stable in every mode: unrated wines (rating mode) and wines
    without a value score (value mode) keep their input order at the end.
    """
    mode = SortMode(mode)
    if mode is SortMode.ORIGINAL:
        return RankedWines(wines=list(wines), mode=mode, badge=False)

    key = _rating_key if mode is SortMode.RATING else _value_key
    ordered = sorted(wines, key=key)
    badge = bool(ordered) and _qualifies(ordered[0], mode)
    return RankedWines(wines=ordered, mode=mode, badge=badge)
