"""divino: identify wines from photos or names and keep a personal cellar."""

from divino.core import identify, open_session, search
from divino.pricing import compute_value_score, parse_average_price
from divino.providers.base import ScanMode
from divino.ranking import SortMode, rank_wines
from divino.schema import TasteProfile, WineRecord, WineType

__version__ = "0.1.0"

__all__ = [
    "identify",
    "open_session",
    "search",
    "compute_value_score",
    "parse_average_price",
    "rank_wines",
    "ScanMode",
    "SortMode",
    "TasteProfile",
    "WineRecord",
    "WineType",
    "__version__",
]
