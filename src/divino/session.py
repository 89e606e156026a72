"""Intent handlers: run requests and feed their outcomes into the state machine."""

from __future__ import annotations

import itertools
import logging

from divino.exceptions import RequestFailed
from divino.gateway import WineGateway
from divino.navigation import (
    BatchLoaded,
    ChangeSort,
    DismissError,
    Event,
    GoBack,
    GoCellar,
    GoHome,
    LoadFailed,
    NavigationContext,
    NothingFound,
    RecentSearchesChanged,
    RequestKind,
    RequestSettled,
    RequestStarted,
    SelectWine,
    WineUpdated,
    reduce,
)
from divino.providers.base import ImageInput, ScanMode
from divino.ranking import RankedWines, SortMode, rank_wines
from divino.schema import WineRecord
from divino.store import CellarStore, RecentSearches

logger = logging.getLogger(__name__)

SCAN_FAILED_MESSAGE = "Impossibile analizzare l'immagine. Assicurati che sia chiara e riprova."
SEARCH_FAILED_MESSAGE = "Ricerca fallita."
SIMILAR_FAILED_MESSAGE = "Impossibile trovare vini simili. Riprova."


class BottleImageTracker:
    """At-most-once image requests per wine, with tokens to drop stale results."""

    def __init__(self):
        self._tokens = itertools.count(1)
        self._current: dict[str, int] = {}

    def begin(self, wine_id: str) -> int | None:
        """Return a token for a new request, or None if one was already made."""
        if wine_id in self._current:
            return None
        token = next(self._tokens)
        self._current[wine_id] = token
        return token

    def is_current(self, wine_id: str, token: int) -> bool:
        return self._current.get(wine_id) == token

    def invalidate(self, wine_id: str) -> None:
        """Make any in-flight result for this wine stale. No new request is allowed."""
        if wine_id in self._current:
            self._current[wine_id] = next(self._tokens)


class Session:
    """One user session: the navigation context plus the collaborators it drives."""

    def __init__(
        self,
        gateway: WineGateway,
        cellar: CellarStore,
        recent_searches: RecentSearches,
        *,
        image_generation: bool = True,
    ):
        self.gateway = gateway
        self.cellar = cellar
        self.recent_searches = recent_searches
        self.image_generation = image_generation
        self.images = BottleImageTracker()
        self.context = NavigationContext()

    def start(self) -> NavigationContext:
        """Load persisted state. Call once at startup."""
        self.cellar.load()
        return self.dispatch(RecentSearchesChanged(tuple(self.recent_searches.load())))

    def dispatch(self, event: Event) -> NavigationContext:
        previous = self.context
        self.context = reduce(previous, event)
        for wine in previous.results:
            if not self._in_memory(wine.id):
                self.images.invalidate(wine.id)
        return self.context

    # Requests

    def scan(self, image: ImageInput, mode: ScanMode | str = ScanMode.BOTTLE) -> NavigationContext:
        if not self._begin(RequestStarted(RequestKind.SCAN)):
            return self.context
        try:
            wines = self.gateway.identify_from_image(image, ScanMode(mode))
        except RequestFailed as e:
            logger.warning("scan failed: %s", e)
            self.dispatch(LoadFailed(SCAN_FAILED_MESSAGE))
        else:
            self.dispatch(BatchLoaded(tuple(wines)))
        finally:
            self.dispatch(RequestSettled())
        return self.context

    def search(self, query: str) -> NavigationContext:
        text = query.strip()
        if not text or not self._begin(RequestStarted(RequestKind.SEARCH)):
            return self.context
        self.dispatch(RecentSearchesChanged(tuple(self.recent_searches.add(text))))
        try:
            wines = self.gateway.identify_from_text(text)
        except RequestFailed as e:
            logger.warning("search failed: %s", e)
            self.dispatch(LoadFailed(SEARCH_FAILED_MESSAGE))
        else:
            if wines:
                self.dispatch(BatchLoaded(tuple(wines)))
            else:
                logger.info("no wine found for %r", text)
                self.dispatch(NothingFound())
        finally:
            self.dispatch(RequestSettled())
        return self.context

    def find_similar(self) -> NavigationContext:
        reference = self.context.selected
        if reference is None or not self._begin(RequestStarted(RequestKind.SIMILAR, reference=reference)):
            return self.context
        try:
            wines = self.gateway.find_similar(reference)
        except RequestFailed as e:
            logger.warning("similar wines lookup failed: %s", e)
            self.dispatch(LoadFailed(SIMILAR_FAILED_MESSAGE))
        else:
            self.dispatch(BatchLoaded(tuple(wines)))
        finally:
            self.dispatch(RequestSettled())
        return self.context

    def ask(self, question: str, wine: WineRecord | None = None) -> str:
        target = wine or self.context.selected
        if target is None:
            raise ValueError("No wine selected")
        return self.gateway.ask(target, question)

    def request_bottle_image(self, wine: WineRecord | None = None) -> WineRecord | None:
        """Generate an illustration for a wine once. Returns the updated wine when applied."""
        target = wine or self.context.selected
        if target is None or not self.image_generation or self._has_image(target):
            return None
        token = self.images.begin(target.id)
        if token is None:
            return None

        uri = self.gateway.generate_bottle_image(target)
        if not uri or not self.images.is_current(target.id, token):
            return None
        current = self._current_copy(target.id)
        if current is None or current.generated_image_uri:
            return None
        updated = current.with_generated_image(uri)
        self.dispatch(WineUpdated(updated))
        self.cellar.replace(updated)
        return updated

    # Navigation

    def select(self, wine: WineRecord) -> NavigationContext:
        return self.dispatch(SelectWine(wine))

    def back(self) -> NavigationContext:
        return self.dispatch(GoBack())

    def go_home(self) -> NavigationContext:
        return self.dispatch(GoHome())

    def go_cellar(self) -> NavigationContext:
        return self.dispatch(GoCellar())

    def dismiss_error(self) -> NavigationContext:
        return self.dispatch(DismissError())

    def change_sort(self, mode: SortMode | str) -> NavigationContext:
        return self.dispatch(ChangeSort(SortMode(mode)))

    # Cellar

    def toggle_favorite(self, wine: WineRecord | None = None) -> list[WineRecord]:
        target = wine or self.context.selected
        if target is None:
            raise ValueError("No wine selected")
        return self.cellar.toggle(target)

    def is_favorite(self, wine: WineRecord) -> bool:
        return self.cellar.contains(wine)

    def ranked_results(self) -> RankedWines:
        return rank_wines(list(self.context.results), self.context.sort_mode)

    def _begin(self, event: RequestStarted) -> bool:
        if self.context.loading:
            return False
        self.dispatch(event)
        return True

    def _has_image(self, wine: WineRecord) -> bool:
        current = self._current_copy(wine.id)
        return bool(wine.generated_image_uri or (current is not None and current.generated_image_uri))

    def _in_memory(self, wine_id: str) -> bool:
        return self._current_copy(wine_id) is not None

    def _current_copy(self, wine_id: str) -> WineRecord | None:
        context = self.context
        candidates = [*context.results, context.selected, context.reference, *self.cellar.wines]
        for wine in candidates:
            if wine is not None and wine.id == wine_id:
                return wine
        return None
