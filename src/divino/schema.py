"""Data models for divino."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

TASTE_DEFAULTS = {"body": 50.0, "tannins": 50.0, "sweetness": 10.0, "acidity": 50.0}


class WineType(str, Enum):
    """Closed set of wine categories."""

    RED = "red"
    WHITE = "white"
    ROSE = "rose"
    SPARKLING = "sparkling"
    DESSERT = "dessert"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _WINE_TYPE_LABELS[self]


_WINE_TYPE_LABELS = {
    WineType.RED: "Rosso",
    WineType.WHITE: "Bianco",
    WineType.ROSE: "Rosato",
    WineType.SPARKLING: "Bollicine",
    WineType.DESSERT: "Dessert",
    WineType.OTHER: "Altro",
}


def _clamp_axis(value: float | None) -> float | None:
    if value is None:
        return None
    return max(0.0, min(100.0, float(value)))


class TasteProfile(BaseModel):
    """Taste axes on a 0-100 scale (light to bold, smooth to tannic, dry to sweet, soft to acidic)."""

    model_config = ConfigDict(frozen=True)

    body: float | None = None
    tannins: float | None = None
    sweetness: float | None = None
    acidity: float | None = None

    @field_validator("body", "tannins", "sweetness", "acidity", mode="after")
    @classmethod
    def _clamp(cls, value: float | None) -> float | None:
        return _clamp_axis(value)

    def display_values(self) -> dict[str, float]:
        """Return every axis, substituting neutral defaults for missing ones."""
        values = {}
        for axis, default in TASTE_DEFAULTS.items():
            value = getattr(self, axis)
            values[axis] = _clamp_axis(value if value is not None else default)
        return values


class FlavorHighlights(BaseModel):
    """Short flavor tags shown on the detail screen."""

    model_config = ConfigDict(frozen=True)

    wood: str | None = None
    fruit: str | None = None
    earth: str | None = None


class WineRecord(BaseModel):
    """Normalized wine entity used everywhere past the AI boundary.

    `rating` is a 0-100 score; 0 means unrated.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    producer: str = ""
    region: str = ""
    country: str = ""
    vintage: str | None = None
    wine_type: WineType = WineType.OTHER
    style: str | None = None
    rating: float = Field(default=0.0, ge=0.0, le=100.0)
    review_count: int | None = Field(default=None, ge=0)
    price_estimate: str = ""
    menu_price: float | None = Field(default=None, gt=0.0)
    taste_profile: TasteProfile | None = None
    highlights: FlavorHighlights | None = None
    description: str = ""
    tasting_notes: str | None = None
    food_pairing: list[str] = Field(default_factory=list)
    grapes: list[str] = Field(default_factory=list)
    alcohol_content: str | None = None
    generated_image_uri: str | None = None

    @property
    def star_rating(self) -> float:
        """Rating on the 0-5 star display scale."""
        return round(self.rating / 20.0, 1)

    def display_taste_profile(self) -> dict[str, float]:
        return (self.taste_profile or TasteProfile()).display_values()

    def with_generated_image(self, uri: str) -> "WineRecord":
        if self.generated_image_uri:
            raise ValueError(f"Image already set for wine {self.id}")
        return self.model_copy(update={"generated_image_uri": uri})


class RawTasteProfile(BaseModel):
    bold: float | None = Field(default=None, description="0-100: light to full-bodied")
    tannic: float | None = Field(default=None, description="0-100: smooth to tannic")
    sweet: float | None = Field(default=None, description="0-100: dry to sweet")
    acidic: float | None = Field(default=None, description="0-100: soft to acidic")


class RawWine(BaseModel):
    """Response schema sent to the model. Parsed leniently by the normalizer."""

    name: str | None = Field(default=None, description="Full wine name")
    winery: str | None = Field(default=None, description="Winery or producer")
    region: str | None = Field(default=None, description="Region, e.g. Toscana, Piemonte, Napa Valley")
    country: str | None = Field(default=None, description="Country of origin")
    year: str | None = Field(default=None, description="Vintage if visible, otherwise 'NV'")
    type: str | None = Field(default=None, description="Red, white, rose, sparkling, dessert")
    averageRating: float | None = Field(default=None, description="Estimated rating out of 5.0")
    reviewCount: int | None = Field(default=None, description="Estimated number of reviews")
    priceEstimate: str | None = Field(
        default=None,
        description="Average retail/shop price range, e.g. 20-30 EUR. Never the menu price.",
    )
    menuPrice: float | None = Field(
        default=None, description="Exact price printed next to this wine on a menu, number only"
    )
    description: str | None = Field(default=None, description="Short sommelier description, max 50 words")
    tastingNotes: str | None = Field(default=None, description="Tasting notes")
    grapes: list[str] | None = Field(default=None, description="Grape varieties")
    foodPairing: list[str] | None = Field(default=None, description="Three food pairings")
    alcoholContent: str | None = Field(default=None, description="Estimated alcohol content")
    woodNote: str | None = Field(default=None, description="Oak or aging note")
    fruitNote: str | None = Field(default=None, description="Dominant fruit note")
    earthNote: str | None = Field(default=None, description="Earthy or vegetal note")
    tasteProfile: RawTasteProfile | None = None
