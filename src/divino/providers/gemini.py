"""Gemini provider implementation."""

import base64
import logging
import os
from io import BytesIO
from pathlib import Path

from google import genai
from google.genai import types
from PIL import Image

from divino.config import DEFAULT_IMAGE_MODEL, DEFAULT_MODEL
from divino.exceptions import AuthenticationError, ImageError, QuotaExceeded, RequestFailed
from divino.normalization.engine import NormalizationEngine
from divino.providers.base import BaseProvider, ImageInput, ScanMode
from divino.schema import RawWine, WineRecord

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = "You are a world-class sommelier. Give accurate data and write in {language}."

SCAN_PROMPT = """You are an expert sommelier backed by an AI wine database.
Analyze the provided image. It may show a single bottle, a wine menu or a wall of bottles.

{instructions}

Pricing:
1. If the image is a MENU, put the price written next to each wine in 'menuPrice'.
2. 'priceEstimate' is ALWAYS the average retail/shop price, never the restaurant price.

For each identified wine give detailed information like a wine rating app would.
Infer the taste profile (body, tannins, sweetness, acidity) from grape and region.
Return a JSON array only. All descriptive text (descriptions, pairings) must be in {language}."""

SEARCH_PROMPT = """Find the wine called: "{query}".
Give detailed information for this wine like a wine rating app would and infer its taste profile.
Return a JSON array with this single wine, or several if the name is ambiguous.
All descriptive text must be in {language}."""

SIMILAR_PROMPT = """Suggest 3 to 5 wines stylistically similar to this one, preferring equal or better value
for money. Do not include the wine itself.

Reference wine:
{summary}

Return a JSON array. All descriptive text must be in {language}."""

IMAGE_PROMPT = (
    "Professional studio photograph of a bottle of {name} by {producer}, {style} wine, "
    "elegant label, dark background, soft lighting."
)

CHAT_PROMPT = """You are a friendly sommelier answering a question about one wine.
Base your answer on these details and general wine knowledge. Answer briefly in {language}.

Wine:
{summary}

Question: {question}"""

_QUOTA_MARKERS = ("quota", "rate limit", "rate_limit", "resource_exhausted", "resource exhausted", "429")
_AUTH_MARKERS = ("api key", "api_key", "permission", "unauthenticated", "auth")


class GeminiProvider(BaseProvider):
    """Gemini API provider."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        *,
        image_model: str = DEFAULT_IMAGE_MODEL,
        language: str = "italiano",
        client=None,
        engine: NormalizationEngine | None = None,
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
            model: Model name used for wine data and chat.
            image_model: Model name used for bottle illustrations.
            language: Language of the descriptive text in responses.
            client: Preconfigured client, mainly for tests.
            engine: Normalization engine shared across the session.

        Raises:
            AuthenticationError: If no API key is provided or found.
        """
        self.model = model
        self.image_model = image_model
        self.language = language
        self.engine = engine or NormalizationEngine()
        if client is not None:
            self.client = client
            return

        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise AuthenticationError(
                "No API key provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )
        self.client = genai.Client(api_key=self.api_key)

    def _load_image(self, image: ImageInput) -> Image.Image:
        """Load image from various input types."""
        if isinstance(image, Image.Image):
            return image

        if isinstance(image, bytes):
            try:
                return Image.open(BytesIO(image))
            except Exception as e:
                raise ImageError(f"Failed to open image: {e}") from e

        path = Path(image) if isinstance(image, str) else image
        if not path.exists():
            raise ImageError(f"Image file not found: {path}")

        try:
            return Image.open(path)
        except Exception as e:
            raise ImageError(f"Failed to open image: {e}") from e

    def identify_from_image(self, image: ImageInput, mode: ScanMode) -> list[WineRecord]:
        """Identify wines in an image using Gemini Vision.

        Raises:
            ImageError: If image cannot be loaded
            QuotaExceeded: If API quota or rate limit is exceeded
            AuthenticationError: If API key is invalid
            RequestFailed: On any other model error or unparsable response
        """
        pil_image = self._load_image(image)
        prompt = SCAN_PROMPT.format(instructions=ScanMode(mode).instructions, language=self.language)
        return self._generate_wines([pil_image, prompt])

    def identify_from_text(self, query: str) -> list[WineRecord]:
        return self._generate_wines([SEARCH_PROMPT.format(query=query.strip(), language=self.language)])

    def find_similar(self, reference: WineRecord) -> list[WineRecord]:
        self.engine.ids.reserve(reference.id)
        prompt = SIMILAR_PROMPT.format(summary=_summarize(reference), language=self.language)
        return self._generate_wines([prompt])

    def generate_bottle_image(self, record: WineRecord) -> str | None:
        prompt = IMAGE_PROMPT.format(
            name=record.name,
            producer=record.producer or "an unknown producer",
            style=record.wine_type.value,
        )
        try:
            response = self.client.models.generate_images(
                model=self.image_model,
                prompt=prompt,
                config=types.GenerateImagesConfig(number_of_images=1),
            )
        except Exception as e:
            raise _translate_error(e, "image generation") from e

        generated = getattr(response, "generated_images", None) or []
        if not generated or generated[0].image is None or not generated[0].image.image_bytes:
            return None
        image = generated[0].image
        mime_type = getattr(image, "mime_type", None) or "image/png"
        encoded = base64.b64encode(image.image_bytes).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"

    def ask(self, record: WineRecord, question: str) -> str:
        prompt = CHAT_PROMPT.format(summary=_summarize(record), question=question.strip(), language=self.language)
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=[prompt],
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION.format(language=self.language),
                ),
            )
        except Exception as e:
            raise _translate_error(e, "chat") from e

        answer = (getattr(response, "text", None) or "").strip()
        if not answer:
            raise RequestFailed("Empty chat response")
        return answer

    def _generate_wines(self, contents: list) -> list[WineRecord]:
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=list[RawWine],
                    system_instruction=SYSTEM_INSTRUCTION.format(language=self.language),
                ),
            )
        except Exception as e:
            raise _translate_error(e, "wine lookup") from e

        raw_text = getattr(response, "text", None)
        if not raw_text:
            return []
        return self.engine.normalize_payload(raw_text)


def _translate_error(error: Exception, action: str) -> RequestFailed:
    message = str(error).lower()
    code = getattr(error, "code", None)
    if code == 429 or any(marker in message for marker in _QUOTA_MARKERS):
        return QuotaExceeded(f"API rate limit exceeded during {action}: {error}")
    if code in (401, 403) or any(marker in message for marker in _AUTH_MARKERS):
        return AuthenticationError(f"Invalid API key: {error}")
    logger.exception("gemini %s failed", action)
    return RequestFailed(f"Failed {action}: {error}")


def _summarize(record: WineRecord) -> str:
    lines = [
        f"Name: {record.name}",
        f"Producer: {record.producer or '-'}",
        f"Region: {', '.join(part for part in (record.region, record.country) if part) or '-'}",
        f"Vintage: {record.vintage or 'NV'}",
        f"Type: {record.style or record.wine_type.label}",
        f"Grapes: {', '.join(record.grapes) or '-'}",
        f"Rating: {record.star_rating:.1f}/5" if record.rating else "Rating: -",
        f"Market price: {record.price_estimate or '-'}",
    ]
    if record.menu_price:
        lines.append(f"Menu price: {record.menu_price:g}")
    if record.description:
        lines.append(f"Description: {record.description}")
    return "\n".join(lines)
