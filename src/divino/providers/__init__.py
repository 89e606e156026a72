"""Providers for divino."""

from divino.providers.base import BaseProvider, ScanMode
from divino.providers.gemini import GeminiProvider
from divino.providers.sample import SampleProvider

__all__ = ["BaseProvider", "GeminiProvider", "SampleProvider", "ScanMode"]
