"""Runtime configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "imagen-3.0-generate-002"
DEFAULT_STORAGE_PATH = Path.home() / ".divino" / "storage.json"
PROVIDER_NAMES = {"gemini", "google", "sample", "offline"}


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_choice(value: str | None, choices: set[str], default: str) -> str:
    if value is None:
        return default
    normalized = value.strip().lower()
    return normalized if normalized in choices else default


@dataclass(frozen=True)
class DivinoConfig:
    api_key: str | None = None
    provider: str = "gemini"
    model: str = DEFAULT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    language: str = "italiano"
    storage_path: Path = DEFAULT_STORAGE_PATH
    cellar_dedupe: str = "name_producer"  # name_producer|id
    image_generation: bool = True

    @classmethod
    def from_env(cls) -> "DivinoConfig":
        storage_raw = (os.getenv("DIVINO_STORAGE_PATH") or "").strip()
        return cls(
            api_key=os.getenv("GEMINI_API_KEY") or None,
            provider=_parse_choice(os.getenv("DIVINO_PROVIDER"), PROVIDER_NAMES, "gemini"),
            model=(os.getenv("DIVINO_MODEL") or DEFAULT_MODEL).strip(),
            image_model=(os.getenv("DIVINO_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL).strip(),
            language=(os.getenv("DIVINO_LANGUAGE") or "italiano").strip(),
            storage_path=Path(storage_raw).expanduser() if storage_raw else DEFAULT_STORAGE_PATH,
            cellar_dedupe=_parse_choice(
                os.getenv("DIVINO_CELLAR_DEDUPE"), {"name_producer", "id"}, "name_producer"
            ),
            image_generation=_parse_bool(os.getenv("DIVINO_IMAGE_GENERATION"), True),
        )
