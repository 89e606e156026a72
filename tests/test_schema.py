"""Tests for schema models."""

import pytest
from pydantic import ValidationError

from divino import TasteProfile, WineRecord, WineType
from divino.schema import FlavorHighlights


def test_wine_record_defaults():
    """WineRecord with only id and name should work."""
    wine = WineRecord(id="wine-1", name="Barolo")
    assert wine.producer == ""
    assert wine.wine_type is WineType.OTHER
    assert wine.rating == 0.0
    assert wine.menu_price is None
    assert wine.taste_profile is None
    assert wine.food_pairing == []
    assert wine.generated_image_uri is None


def test_wine_record_requires_id():
    with pytest.raises(ValidationError):
        WineRecord(id="", name="Barolo")


def test_wine_record_rejects_negative_rating():
    with pytest.raises(ValidationError):
        WineRecord(id="wine-1", name="Barolo", rating=-1)


def test_wine_record_is_immutable():
    wine = WineRecord(id="wine-1", name="Barolo")
    with pytest.raises(ValidationError):
        wine.id = "wine-2"


def test_star_rating_converts_score():
    wine = WineRecord(id="wine-1", name="Barolo", rating=86)
    assert wine.star_rating == 4.3


def test_generated_image_is_set_once():
    wine = WineRecord(id="wine-1", name="Barolo")

    updated = wine.with_generated_image("data:image/png;base64,AAAA")

    assert updated.generated_image_uri == "data:image/png;base64,AAAA"
    assert updated.id == wine.id
    assert wine.generated_image_uri is None
    with pytest.raises(ValueError):
        updated.with_generated_image("data:image/png;base64,BBBB")


def test_taste_profile_clamps_axes():
    profile = TasteProfile(body=140, tannins=30, sweetness=-5)
    assert profile.body == 100
    assert profile.tannins == 30
    assert profile.sweetness == 0
    assert profile.acidity is None


def test_taste_profile_display_defaults():
    """Missing axes render as neutral values, sweetness as dry."""
    assert TasteProfile().display_values() == {
        "body": 50,
        "tannins": 50,
        "sweetness": 10,
        "acidity": 50,
    }
    assert TasteProfile(acidity=80).display_values()["acidity"] == 80


def test_wine_without_profile_uses_display_defaults():
    wine = WineRecord(id="wine-1", name="Barolo")
    assert wine.display_taste_profile()["sweetness"] == 10


def test_wine_type_labels():
    assert WineType.RED.label == "Rosso"
    assert WineType.SPARKLING.label == "Bollicine"
    assert WineType("rose") is WineType.ROSE


def test_wine_record_json_round_trip():
    wine = WineRecord(
        id="wine-1",
        name="Etna Bianco",
        producer="Benanti",
        wine_type=WineType.WHITE,
        rating=80,
        menu_price=38,
        taste_profile=TasteProfile(body=45, acidity=80),
        highlights=FlavorHighlights(fruit="Agrumi"),
        grapes=["Carricante"],
    )

    restored = WineRecord.model_validate_json(wine.model_dump_json())

    assert restored == wine
    assert restored.wine_type is WineType.WHITE
