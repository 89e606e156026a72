"""Tests for the gateway fallback policy."""

import logging

import pytest

from divino.exceptions import QuotaExceeded, RequestFailed
from divino.gateway import CHAT_APOLOGY, WineGateway
from divino.providers.base import BaseProvider, ScanMode
from divino.providers.sample import SampleProvider
from divino.samples import SAMPLE_WINES
from divino.schema import WineRecord


@pytest.fixture
def provider(mocker):
    return mocker.MagicMock(spec=BaseProvider)


@pytest.fixture
def gateway(provider):
    return WineGateway(provider)


def _wine(wine_id: str, name: str = "Barolo") -> WineRecord:
    return WineRecord(id=wine_id, name=name)


def test_text_search_passes_through(gateway, provider):
    provider.identify_from_text.return_value = [_wine("a")]

    assert [w.id for w in gateway.identify_from_text("Barolo")] == ["a"]
    provider.identify_from_text.assert_called_once_with("Barolo")


def test_text_search_quota_serves_samples(gateway, provider, caplog):
    provider.identify_from_text.side_effect = QuotaExceeded("quota")

    with caplog.at_level(logging.WARNING):
        wines = gateway.identify_from_text("Barolo")

    assert [w.name for w in wines] == [item["name"] for item in SAMPLE_WINES]
    assert len({w.id for w in wines}) == len(wines)
    assert "quota exceeded" in caplog.text


def test_scan_quota_propagates(gateway, provider):
    provider.identify_from_image.side_effect = QuotaExceeded("quota")

    with pytest.raises(QuotaExceeded):
        gateway.identify_from_image(b"image", ScanMode.BOTTLE)


def test_scan_coerces_mode(gateway, provider):
    provider.identify_from_image.return_value = []

    gateway.identify_from_image("menu.jpg", "menu")

    provider.identify_from_image.assert_called_once_with("menu.jpg", ScanMode.MENU)


def test_unexpected_provider_error_is_wrapped(gateway, provider):
    provider.identify_from_text.side_effect = KeyError("boom")

    with pytest.raises(RequestFailed):
        gateway.identify_from_text("Barolo")


def test_similar_restamps_reference_id(gateway, provider):
    reference = _wine("wine-ref")
    provider.find_similar.return_value = [_wine("wine-ref", "Barbaresco"), _wine("wine-2", "Roero")]

    wines = gateway.find_similar(reference)

    assert [w.name for w in wines] == ["Barbaresco", "Roero"]
    assert wines[0].id not in {"wine-ref", "wine-2"}
    assert wines[1].id == "wine-2"


def test_similar_quota_excludes_reference(gateway, provider):
    reference = _wine("wine-ref", "Barolo")
    provider.find_similar.side_effect = QuotaExceeded("quota")

    wines = gateway.find_similar(reference)

    assert wines
    assert "Barolo" not in [w.name for w in wines]
    assert "wine-ref" not in [w.id for w in wines]


def test_similar_other_failures_propagate(gateway, provider):
    provider.find_similar.side_effect = RequestFailed("nope")

    with pytest.raises(RequestFailed):
        gateway.find_similar(_wine("wine-ref"))


def test_image_quota_returns_none(gateway, provider, caplog):
    provider.generate_bottle_image.side_effect = QuotaExceeded("quota")

    with caplog.at_level(logging.WARNING):
        assert gateway.generate_bottle_image(_wine("a")) is None

    assert "image generation quota exceeded" in caplog.text


def test_image_failure_returns_none(gateway, provider):
    provider.generate_bottle_image.side_effect = RuntimeError("no images today")
    assert gateway.generate_bottle_image(_wine("a")) is None


def test_ask_failure_returns_apology(gateway, provider):
    provider.ask.side_effect = RequestFailed("down")
    assert gateway.ask(_wine("a"), "Abbinamento?") == CHAT_APOLOGY


def test_ask_passes_answer_through(gateway, provider):
    provider.ask.return_value = "Brasato."
    assert gateway.ask(_wine("a"), "Abbinamento?") == "Brasato."


def test_sample_provider_search_matches_tokens():
    gateway = WineGateway(SampleProvider())

    wines = gateway.identify_from_text("barolo vajra")

    assert [(w.name, w.producer) for w in wines] == [("Barolo", "G.D. Vajra")]


def test_sample_provider_bottle_scan_returns_one():
    gateway = WineGateway(SampleProvider())

    assert len(gateway.identify_from_image(b"ignored", ScanMode.BOTTLE)) == 1
    assert len(gateway.identify_from_image(b"ignored", ScanMode.WALL)) == len(SAMPLE_WINES)


def test_sample_provider_chat_degrades_to_apology():
    gateway = WineGateway(SampleProvider())
    assert gateway.ask(_wine("a"), "Ciao?") == CHAT_APOLOGY
