"""Provider selection and session assembly."""

from divino.config import DivinoConfig
from divino.exceptions import NoResultsFound
from divino.gateway import WineGateway
from divino.normalization.engine import IdIssuer, NormalizationEngine
from divino.providers.base import BaseProvider, ImageInput, ScanMode
from divino.schema import WineRecord
from divino.session import Session
from divino.store import CellarStore, JsonFileStorage, KeyValueStorage, RecentSearches


def _build_gemini_provider(api_key: str | None, config: DivinoConfig, ids: IdIssuer) -> BaseProvider:
    from divino.providers.gemini import GeminiProvider

    return GeminiProvider(
        api_key=api_key or config.api_key,
        model=config.model,
        image_model=config.image_model,
        language=config.language,
        engine=NormalizationEngine(ids=ids),
    )


def _build_sample_provider(ids: IdIssuer) -> BaseProvider:
    from divino.providers.sample import SampleProvider

    return SampleProvider(ids=ids)


def _select_provider(
    provider: str | None,
    api_key: str | None,
    config: DivinoConfig,
    ids: IdIssuer,
) -> BaseProvider:
    provider_name = (provider or config.provider or "gemini").strip().lower()
    if provider_name in {"gemini", "google"}:
        return _build_gemini_provider(api_key, config, ids)
    if provider_name in {"sample", "offline"}:
        return _build_sample_provider(ids)
    raise ValueError(f"Unsupported provider: {provider_name}")


def build_gateway(
    *,
    api_key: str | None = None,
    provider: str | None = None,
    config: DivinoConfig | None = None,
) -> WineGateway:
    config = config or DivinoConfig.from_env()
    ids = IdIssuer()
    return WineGateway(_select_provider(provider, api_key, config, ids), ids=ids)


def open_session(
    *,
    api_key: str | None = None,
    provider: str | None = None,
    config: DivinoConfig | None = None,
    storage: KeyValueStorage | None = None,
) -> Session:
    """Build a session over the configured provider and storage, and load persisted state.

    Args:
        api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
        provider: Provider name (`gemini` or `sample`). Defaults to
            `DIVINO_PROVIDER` env var, then `gemini`.
        config: Explicit configuration; read from the environment when omitted.
        storage: Key-value storage; a JSON file at `config.storage_path` by default.
    """
    config = config or DivinoConfig.from_env()
    storage = storage or JsonFileStorage(config.storage_path)
    session = Session(
        build_gateway(api_key=api_key, provider=provider, config=config),
        CellarStore(storage, dedupe=config.cellar_dedupe),
        RecentSearches(storage),
        image_generation=config.image_generation,
    )
    session.start()
    return session


def identify(
    image: ImageInput,
    mode: ScanMode | str = ScanMode.BOTTLE,
    *,
    api_key: str | None = None,
    provider: str | None = None,
) -> list[WineRecord]:
    """Identify wines in a photo of a bottle, a menu or a wall of bottles.

    Raises:
        RequestFailed: If the model call fails or returns unusable data.
    """
    return build_gateway(api_key=api_key, provider=provider).identify_from_image(image, mode)


def search(query: str, *, api_key: str | None = None, provider: str | None = None) -> list[WineRecord]:
    """Look up wines by name or style.

    Raises:
        NoResultsFound: If nothing matches.
        RequestFailed: If the model call fails.
    """
    wines = build_gateway(api_key=api_key, provider=provider).identify_from_text(query)
    if not wines:
        raise NoResultsFound(f"No wine found for {query!r}")
    return wines
