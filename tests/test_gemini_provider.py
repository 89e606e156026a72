"""Tests for the Gemini provider with a fake client."""

import json
from types import SimpleNamespace

import pytest
from PIL import Image

from divino.exceptions import AuthenticationError, ImageError, QuotaExceeded, RequestFailed
from divino.providers.base import ScanMode
from divino.providers.gemini import GeminiProvider
from divino.schema import WineRecord, WineType


class FakeModels:
    def __init__(self, text=None, error=None, images=None):
        self.text = text
        self.error = error
        self.images = images
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append(SimpleNamespace(model=model, contents=contents, config=config))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)

    def generate_images(self, model, prompt, config):
        self.calls.append(SimpleNamespace(model=model, prompt=prompt, config=config))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(generated_images=self.images or [])


def _provider(**kwargs) -> tuple[GeminiProvider, FakeModels]:
    models = FakeModels(**kwargs)
    return GeminiProvider(client=SimpleNamespace(models=models)), models


def _image() -> Image.Image:
    return Image.new("RGB", (20, 20), color="white")


BAROLO = json.dumps(
    [
        {
            "name": "Barolo",
            "winery": "G.D. Vajra",
            "year": "2018",
            "type": "Rosso",
            "averageRating": 4.5,
            "priceEstimate": "38-48 €",
            "tasteProfile": {"bold": 80, "tannic": 85, "sweet": 5, "acidic": 70},
        }
    ]
)


def test_identify_from_image_normalizes_response():
    provider, models = _provider(text=BAROLO)

    wines = provider.identify_from_image(_image(), ScanMode.BOTTLE)

    assert len(wines) == 1
    wine = wines[0]
    assert wine.name == "Barolo"
    assert wine.producer == "G.D. Vajra"
    assert wine.wine_type is WineType.RED
    assert wine.rating == pytest.approx(90)
    assert wine.taste_profile.tannins == 85
    assert models.calls[0].config.response_mime_type == "application/json"


def test_menu_scan_asks_for_menu_prices():
    provider, models = _provider(text="[]")

    provider.identify_from_image(_image(), ScanMode.MENU)

    prompt = models.calls[0].contents[1]
    assert "menuPrice" in prompt
    assert "italiano" in prompt


def test_empty_response_text_is_empty_batch():
    provider, _ = _provider(text="")
    assert provider.identify_from_text("Barolo") == []


def test_invalid_json_raises_request_failed():
    provider, _ = _provider(text="certainly! here are your wines")

    with pytest.raises(RequestFailed):
        provider.identify_from_text("Barolo")


def test_quota_error_is_translated():
    provider, _ = _provider(error=RuntimeError("429 RESOURCE_EXHAUSTED: quota exceeded"))

    with pytest.raises(QuotaExceeded):
        provider.identify_from_text("Barolo")


def test_quota_error_detected_by_status_code():
    error = RuntimeError("Too many requests")
    error.code = 429
    provider, _ = _provider(error=error)

    with pytest.raises(QuotaExceeded):
        provider.identify_from_image(_image(), ScanMode.WALL)


def test_auth_error_is_translated():
    provider, _ = _provider(error=RuntimeError("API key not valid. Please pass a valid API key."))

    with pytest.raises(AuthenticationError):
        provider.identify_from_text("Barolo")


def test_other_errors_become_request_failed():
    provider, _ = _provider(error=RuntimeError("Internal error encountered."))

    with pytest.raises(RequestFailed) as excinfo:
        provider.identify_from_text("Barolo")

    assert not isinstance(excinfo.value, QuotaExceeded)


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(AuthenticationError):
        GeminiProvider()


def test_missing_image_file_raises(tmp_path):
    provider, models = _provider(text="[]")

    with pytest.raises(ImageError):
        provider.identify_from_image(tmp_path / "missing.jpg", ScanMode.BOTTLE)

    assert models.calls == []


def test_unreadable_image_bytes_raise():
    provider, _ = _provider(text="[]")

    with pytest.raises(ImageError):
        provider.identify_from_image(b"not an image", ScanMode.BOTTLE)


def test_image_path_is_loaded(tmp_path):
    path = tmp_path / "label.png"
    _image().save(path)
    provider, models = _provider(text=BAROLO)

    wines = provider.identify_from_image(str(path), ScanMode.BOTTLE)

    assert [w.name for w in wines] == ["Barolo"]
    assert isinstance(models.calls[0].contents[0], Image.Image)


def test_find_similar_never_reuses_reference_id():
    reference = WineRecord(id="wine-ref", name="Barolo", producer="G.D. Vajra")
    payload = json.dumps(
        [
            {"id": "wine-ref", "name": "Barbaresco", "winery": "Produttori del Barbaresco"},
            {"name": "Langhe Nebbiolo", "winery": "G.D. Vajra"},
        ]
    )
    provider, models = _provider(text=payload)

    wines = provider.find_similar(reference)

    assert [w.name for w in wines] == ["Barbaresco", "Langhe Nebbiolo"]
    assert all(w.id != "wine-ref" for w in wines)
    assert "G.D. Vajra" in models.calls[0].contents[0]


def test_generate_bottle_image_returns_data_uri():
    image = SimpleNamespace(image_bytes=b"png", mime_type="image/png")
    provider, models = _provider(images=[SimpleNamespace(image=image)])
    wine = WineRecord(id="wine-1", name="Barolo", producer="G.D. Vajra")

    assert provider.generate_bottle_image(wine) == "data:image/png;base64,cG5n"
    assert "Barolo" in models.calls[0].prompt


def test_generate_bottle_image_without_images_returns_none():
    provider, _ = _provider(images=[])
    assert provider.generate_bottle_image(WineRecord(id="wine-1", name="Barolo")) is None


def test_ask_returns_stripped_answer():
    provider, models = _provider(text="  Ottimo con il brasato.\n")
    wine = WineRecord(id="wine-1", name="Barolo", rating=88)

    answer = provider.ask(wine, "Con cosa lo abbino?")

    assert answer == "Ottimo con il brasato."
    assert "Con cosa lo abbino?" in models.calls[0].contents[0]
    assert "Rating: 4.4/5" in models.calls[0].contents[0]


def test_ask_empty_answer_raises():
    provider, _ = _provider(text="")

    with pytest.raises(RequestFailed):
        provider.ask(WineRecord(id="wine-1", name="Barolo"), "Ciao?")
