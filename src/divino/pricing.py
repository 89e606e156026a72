"""Price parsing, value score and menu price comparison."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from urllib.parse import quote_plus

from divino.schema import WineRecord

SEARCH_URL = "https://www.google.com/search?q={query}"

_NUMBER = re.compile(r"\d+(?:[.,]\d+)?")


@dataclass(frozen=True)
class PriceComparison:
    market_price: float
    menu_price: float
    difference_percent: int
    is_markup: bool


def parse_average_price(text: str | None) -> float:
    """Return the mean of the numbers in a free-form price string, or 0."""
    if not isinstance(text, str):
        return 0.0
    values = [float(token.replace(",", ".")) for token in _NUMBER.findall(text)]
    if not values:
        return 0.0
    return sum(values) / len(values)


def _positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def numeric_price(wine: WineRecord) -> float | None:
    """Menu price first, then the market estimate average; None when unpriced."""
    if _positive(wine.menu_price):
        return wine.menu_price
    average = parse_average_price(wine.price_estimate)
    if _positive(average):
        return average
    return None


def compute_value_score(wine: WineRecord) -> float | None:
    price = numeric_price(wine)
    if price is None or not _positive(wine.rating):
        return None
    return wine.rating / price


def compare_menu_price(wine: WineRecord) -> PriceComparison | None:
    """Compare the price read from a menu against the market estimate."""
    market = parse_average_price(wine.price_estimate)
    menu = wine.menu_price
    if not _positive(menu) or not _positive(market):
        return None
    diff = menu - market
    return PriceComparison(
        market_price=market,
        menu_price=menu,
        difference_percent=round(diff / market * 100),
        is_markup=diff > 0,
    )


def purchase_url(wine: WineRecord) -> str:
    parts = ["acquistare", wine.name, wine.producer, wine.vintage or "", "miglior prezzo"]
    query = " ".join(part.strip() for part in parts if part and part.strip())
    return SEARCH_URL.format(query=quote_plus(query))
