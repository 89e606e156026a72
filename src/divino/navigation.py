"""Screen state machine.

The whole view state is one immutable NavigationContext. Every user intent
and every request outcome is an event, and `reduce` maps a context and an
event to the next context without side effects.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from divino.ranking import SortMode
from divino.schema import WineRecord

HISTORY_LIMIT = 10
NOT_FOUND_MESSAGE = "Nessun vino trovato con questo nome."


class Screen(str, Enum):
    HOME = "home"
    SCANNING = "scanning"
    RESULTS = "results"
    DETAIL = "detail"
    CELLAR = "cellar"


class RequestKind(str, Enum):
    SCAN = "scan"
    SEARCH = "search"
    SIMILAR = "similar"


@dataclass(frozen=True)
class NavigationContext:
    screen: Screen = Screen.HOME
    results: tuple[WineRecord, ...] = ()
    selected: WineRecord | None = None
    loading: bool = False
    pending: RequestKind | None = None
    origin: Screen | None = None
    reference: WineRecord | None = None
    error: str | None = None
    sort_mode: SortMode = SortMode.VALUE
    recent_searches: tuple[str, ...] = ()
    history: tuple[Screen, ...] = ()


@dataclass(frozen=True)
class RequestStarted:
    kind: RequestKind
    reference: WineRecord | None = None


@dataclass(frozen=True)
class BatchLoaded:
    wines: tuple[WineRecord, ...]


@dataclass(frozen=True)
class NothingFound:
    message: str = NOT_FOUND_MESSAGE


@dataclass(frozen=True)
class LoadFailed:
    message: str


@dataclass(frozen=True)
class RequestSettled:
    pass


@dataclass(frozen=True)
class SelectWine:
    wine: WineRecord


@dataclass(frozen=True)
class GoBack:
    pass


@dataclass(frozen=True)
class GoHome:
    pass


@dataclass(frozen=True)
class GoCellar:
    pass


@dataclass(frozen=True)
class DismissError:
    pass


@dataclass(frozen=True)
class ChangeSort:
    mode: SortMode


@dataclass(frozen=True)
class RecentSearchesChanged:
    queries: tuple[str, ...]


@dataclass(frozen=True)
class WineUpdated:
    wine: WineRecord


Event = (
    RequestStarted
    | BatchLoaded
    | NothingFound
    | LoadFailed
    | RequestSettled
    | SelectWine
    | GoBack
    | GoHome
    | GoCellar
    | DismissError
    | ChangeSort
    | RecentSearchesChanged
    | WineUpdated
)

# Ignored while a request is in flight.
USER_INTENTS = (RequestStarted, SelectWine, GoBack, GoHome, GoCellar, ChangeSort)


def _push(history: tuple[Screen, ...], *screens: Screen) -> tuple[Screen, ...]:
    return (history + screens)[-HISTORY_LIMIT:]


def _finish(context: NavigationContext, **changes) -> NavigationContext:
    return replace(context, loading=False, pending=None, origin=None, reference=None, **changes)


def _on_request_started(context: NavigationContext, event: RequestStarted) -> NavigationContext:
    changes = {}
    if event.kind is RequestKind.SCAN:
        changes["screen"] = Screen.SCANNING
    if event.kind is RequestKind.SIMILAR:
        changes["selected"] = None
    return replace(
        context,
        loading=True,
        pending=event.kind,
        origin=context.screen,
        reference=event.reference,
        error=None,
        **changes,
    )


def _on_batch_loaded(context: NavigationContext, event: BatchLoaded) -> NavigationContext:
    if not context.loading:
        return context
    wines = tuple(event.wines)
    origin = context.origin or Screen.HOME

    if context.pending is RequestKind.SIMILAR:
        return _finish(
            context,
            screen=Screen.RESULTS,
            results=wines,
            selected=None,
            history=_push(context.history, origin),
        )

    if context.pending is RequestKind.SEARCH and not wines:
        return _on_nothing_found(context, NothingFound())

    if len(wines) == 1:
        # A single hit is shown as a one-item list with its detail opened on top.
        return _finish(
            context,
            screen=Screen.DETAIL,
            results=wines,
            selected=wines[0],
            history=_push(context.history, origin, Screen.RESULTS),
        )
    return _finish(
        context,
        screen=Screen.RESULTS,
        results=wines,
        selected=None,
        history=_push(context.history, origin),
    )


def _on_nothing_found(context: NavigationContext, event: NothingFound) -> NavigationContext:
    return _finish(
        context,
        screen=Screen.HOME,
        results=(),
        selected=None,
        error=event.message,
    )


def _on_load_failed(context: NavigationContext, event: LoadFailed) -> NavigationContext:
    if context.pending is RequestKind.SIMILAR and context.reference is not None:
        return _finish(context, screen=Screen.DETAIL, selected=context.reference, error=event.message)
    return _finish(context, screen=Screen.HOME, error=event.message)


def _on_request_settled(context: NavigationContext, event: RequestSettled) -> NavigationContext:
    if not context.loading:
        return context
    if context.pending is RequestKind.SIMILAR and context.reference is not None:
        return _finish(context, screen=Screen.DETAIL, selected=context.reference)
    screen = Screen.HOME if context.screen is Screen.SCANNING else context.screen
    return _finish(context, screen=screen)


def _on_select_wine(context: NavigationContext, event: SelectWine) -> NavigationContext:
    return replace(
        context,
        screen=Screen.DETAIL,
        selected=event.wine,
        history=_push(context.history, context.screen),
    )


def _can_return_to(context: NavigationContext, screen: Screen) -> bool:
    if screen is context.screen or screen is Screen.SCANNING:
        return False
    if screen is Screen.DETAIL:
        return context.selected is not None
    if screen is Screen.RESULTS:
        return bool(context.results)
    return True


def _on_go_back(context: NavigationContext, event: GoBack) -> NavigationContext:
    history = context.history
    target = None
    while history:
        candidate, history = history[-1], history[:-1]
        if _can_return_to(context, candidate):
            target = candidate
            break

    if target is None:
        if context.screen is Screen.DETAIL:
            # No recorded origin: a non-empty batch means we came from the list.
            target = Screen.RESULTS if context.results else Screen.CELLAR
        else:
            target = Screen.HOME
        history = ()

    if target is Screen.HOME:
        return replace(context, screen=Screen.HOME, results=(), selected=None, history=())
    selected = context.selected if target is Screen.DETAIL else None
    return replace(context, screen=target, selected=selected, history=history)


def _on_go_home(context: NavigationContext, event: GoHome) -> NavigationContext:
    return replace(context, screen=Screen.HOME, results=(), selected=None, history=())


def _on_go_cellar(context: NavigationContext, event: GoCellar) -> NavigationContext:
    return replace(context, screen=Screen.CELLAR, selected=None, history=())


def _on_dismiss_error(context: NavigationContext, event: DismissError) -> NavigationContext:
    return replace(context, error=None)


def _on_change_sort(context: NavigationContext, event: ChangeSort) -> NavigationContext:
    return replace(context, sort_mode=SortMode(event.mode))


def _on_recent_searches_changed(context: NavigationContext, event: RecentSearchesChanged) -> NavigationContext:
    return replace(context, recent_searches=tuple(event.queries))


def _on_wine_updated(context: NavigationContext, event: WineUpdated) -> NavigationContext:
    wine = event.wine
    results = tuple(wine if item.id == wine.id else item for item in context.results)
    selected = wine if context.selected is not None and context.selected.id == wine.id else context.selected
    return replace(context, results=results, selected=selected)


_HANDLERS = {
    RequestStarted: _on_request_started,
    BatchLoaded: _on_batch_loaded,
    NothingFound: _on_nothing_found,
    LoadFailed: _on_load_failed,
    RequestSettled: _on_request_settled,
    SelectWine: _on_select_wine,
    GoBack: _on_go_back,
    GoHome: _on_go_home,
    GoCellar: _on_go_cellar,
    DismissError: _on_dismiss_error,
    ChangeSort: _on_change_sort,
    RecentSearchesChanged: _on_recent_searches_changed,
    WineUpdated: _on_wine_updated,
}


def reduce(context: NavigationContext, event: Event) -> NavigationContext:
    """Return the context that follows `event`."""
    if context.loading and isinstance(event, USER_INTENTS):
        return context
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown navigation event: {type(event).__name__}")
    return handler(context, event)
