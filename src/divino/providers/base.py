"""Base provider interface."""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from PIL import Image

from divino.schema import WineRecord

ImageInput = str | Path | bytes | Image.Image


class ScanMode(str, Enum):
    """What the photographed image shows."""

    BOTTLE = "bottle"
    MENU = "menu"
    WALL = "wall"

    @property
    def instructions(self) -> str:
        return _SCAN_INSTRUCTIONS[self]


_SCAN_INSTRUCTIONS = {
    ScanMode.BOTTLE: "This is a single wine bottle. Identify it precisely and return exactly one wine.",
    ScanMode.MENU: (
        "This is a wine list or menu. List every wine found, each with the price printed "
        "next to it in 'menuPrice'."
    ),
    ScanMode.WALL: (
        "This is a wall or shelf of wine bottles. List the most visible and legible bottles, "
        "at most 10."
    ),
}


class BaseProvider(ABC):
    """Abstract base class for generative model providers."""

    @abstractmethod
    def identify_from_image(self, image: ImageInput, mode: ScanMode) -> list[WineRecord]:
        """Identify wines in a photo of a bottle, a menu or a wall of bottles.

        Args:
            image: Image input (file path, Path object, raw bytes or PIL Image)
            mode: What the image shows; shapes the instructions sent to the model

        Returns:
            Normalized wines, possibly empty
        """
        pass

    @abstractmethod
    def identify_from_text(self, query: str) -> list[WineRecord]:
        """Look up wines by free-form name or style."""
        pass

    @abstractmethod
    def find_similar(self, reference: WineRecord) -> list[WineRecord]:
        """Return 3-5 stylistically similar wines of equal or better value."""
        pass

    @abstractmethod
    def generate_bottle_image(self, record: WineRecord) -> str | None:
        """Return an image URI for a bottle illustration, or None."""
        pass

    @abstractmethod
    def ask(self, record: WineRecord, question: str) -> str:
        """Answer a free-text question about the given wine."""
        pass
