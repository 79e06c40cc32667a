from __future__ import annotations

"""Debounced loading and caching of link target catalogs.

Three categories are served: ``toc`` (document sections), ``abbreviation``
(glossary) and ``reference`` (bibliography). Each is configured with either a
static collection or a zero-argument producer returning a collection or a
future. Per category the loader keeps:

- a debouncer owned by this instance (no module-level timers),
- the last successfully fetched snapshot and its rendered markup,
- a pending flag while a future is outstanding, plus a single queued
  re-fetch for triggers that arrive meanwhile,
- a generation number so results arriving after :meth:`close` or after a
  source swap are dropped.

Failures never escape :meth:`request_category`. They fire the
``request<Category>:error`` event with a :class:`CatalogFetchError`, log the
category warning code and leave the previous snapshot in place. Nothing is
retried automatically.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from link_toolkit.core.exceptions import CatalogError, CatalogFetchError
from link_toolkit.core.interfaces import Scheduler
from link_toolkit.core.models import CatalogCategory
from link_toolkit.core.parser import parse_abbreviations, parse_references, parse_toc
from link_toolkit.core.scheduling import Debouncer
from link_toolkit.core.services import list_renderer

logger = logging.getLogger(__name__)

__all__ = ["TargetCatalogLoader", "CatalogListener", "DEFAULT_DEBOUNCE_MS"]

DEFAULT_DEBOUNCE_MS = 100

# Listener signature: receives the event payload mapping
CatalogListener = Callable[[Dict[str, Any]], None]

CategoryLike = Union[CatalogCategory, str]


def _is_deferred(value: Any) -> bool:
    return callable(getattr(value, "add_done_callback", None)) and callable(getattr(value, "result", None))


def _as_producer(category: CatalogCategory, source: Any) -> Callable[[], Any]:
    """Wrap a configured source as a zero-argument producer."""
    if callable(source):
        return source
    if source is None:
        return lambda: []
    if isinstance(source, (Mapping, list, tuple)):
        return lambda: source
    raise CatalogError(
        f"Unsupported catalog source of type {type(source).__name__}",
        category=category.value,
    )


@dataclass
class _CategoryState:
    producer: Callable[[], Any]
    snapshot: List[Any] = field(default_factory=list)
    markup: str = ""
    pending: bool = False
    rerun: bool = False
    generation: int = 0
    debouncer: Optional[Debouncer] = None


class TargetCatalogLoader:
    """Fetch, cache and render the three link target catalogs.

    Parameters
    ----------
    sources : Mapping[str, Any]
        Category name -> static collection or producer. Missing categories
        start with an empty static source.
    scheduler : Scheduler
        Tk-style ``after``/``after_cancel`` provider. Debounce timers and
        future resolutions run through it, so snapshots only change on the
        scheduler's thread.
    debounce_ms : int, default=100
        Quiescence window per category.
    input_name : str
        Radio group name used in rendered markup.
    level_marker : str
        Indentation marker for nested TOC rows.

    Examples
    --------
    >>> loader = TargetCatalogLoader({"toc": fetch_toc}, scheduler)
    >>> loader.request_category("toc")
    >>> # ~100 ms later, once the scheduler has run:
    >>> loader.markup("toc")
    """

    def __init__(
        self,
        sources: Optional[Mapping[str, Any]],
        scheduler: Scheduler,
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        input_name: str = list_renderer.DEFAULT_INPUT_NAME,
        level_marker: str = "-",
    ) -> None:
        self._scheduler = scheduler
        self._input_name = input_name
        self._level_marker = level_marker
        self._listeners: Dict[str, List[CatalogListener]] = {}
        self._closed = False

        sources = dict(sources or {})
        unknown = set(sources) - {c.value for c in CatalogCategory}
        if unknown:
            raise CatalogError(f"Unknown catalog categories: {', '.join(sorted(unknown))}")

        self._states: Dict[CatalogCategory, _CategoryState] = {}
        for category in CatalogCategory:
            state = _CategoryState(producer=_as_producer(category, sources.get(category.value)))
            state.debouncer = Debouncer(scheduler, debounce_ms, lambda c=category: self._fetch(c))
            self._states[category] = state

    # ------------------------------------------------------------------ API

    def request_category(self, category: CategoryLike, callback: Any = None) -> None:
        """Schedule a debounced fetch of ``category``.

        ``callback`` optionally replaces the category source (static
        collection or producer) before the fetch is scheduled.
        """
        cat = self._category(category)
        state = self._states[cat]
        if callback is not None:
            state.producer = _as_producer(cat, callback)
            # Results of the previous source are no longer wanted
            state.generation += 1
        if self._closed:
            logger.debug("Ignoring %s request on closed loader", cat.value)
            return
        state.debouncer.trigger()

    def request_all(self) -> None:
        for category in CatalogCategory:
            self.request_category(category)

    def snapshot(self, category: CategoryLike) -> List[Any]:
        """Return a copy of the last successful fetch (empty before the first)."""
        return list(self._states[self._category(category)].snapshot)

    def markup(self, category: CategoryLike) -> str:
        """Return rendered rows for ``category`` from the cached snapshot."""
        return self._states[self._category(category)].markup

    def render(self, category: CategoryLike, checked: Optional[str] = None) -> str:
        """Render the cached snapshot with ``checked`` pre-selected."""
        cat = self._category(category)
        return self._render(cat, self._states[cat].snapshot, checked)

    def is_pending(self, category: CategoryLike) -> bool:
        return self._states[self._category(category)].pending

    def on(self, event: str, listener: CatalogListener) -> Callable[[], None]:
        """Register ``listener`` for ``event``; return a function removing it.

        Events: ``request<Category>:error`` with ``{"category", "error"}`` and
        ``request<Category>:done`` with ``{"category", "items"}``.
        """
        self._listeners.setdefault(event, []).append(listener)

        def remove() -> None:
            try:
                self._listeners.get(event, []).remove(listener)
            except ValueError:
                pass

        return remove

    def flush(self) -> None:
        """Run every pending debounced fetch immediately."""
        for state in self._states.values():
            state.debouncer.flush()

    def close(self) -> None:
        """Cancel timers and ignore results of fetches still in flight."""
        self._closed = True
        for state in self._states.values():
            state.debouncer.cancel()
            state.generation += 1
            state.rerun = False

    # ------------------------------------------------------------- Internals

    @staticmethod
    def _category(category: CategoryLike) -> CatalogCategory:
        try:
            return CatalogCategory(category)
        except ValueError:
            raise CatalogError(f"Unknown catalog category: {category!r}") from None

    def _fire(self, event: str, payload: Dict[str, Any]) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                listener(payload)
            except Exception:
                logger.exception("Listener for %s failed", event)

    def _fetch(self, category: CatalogCategory) -> None:
        state = self._states[category]
        if state.pending:
            # One fetch in flight per category; fetch again once it settles
            logger.debug("Fetch of %s already pending; queued a re-fetch", category.value)
            state.rerun = True
            return

        generation = state.generation
        logger.debug("Fetching catalog %s", category.value)
        try:
            response = state.producer()
        except Exception as exc:
            self._fail(category, exc)
            return

        if not _is_deferred(response):
            self._accept(category, response)
            return

        state.pending = True
        response.add_done_callback(
            lambda fut: self._scheduler.after(0, lambda: self._settle(category, generation, fut))
        )

    def _settle(self, category: CatalogCategory, generation: int, future: Any) -> None:
        state = self._states[category]
        state.pending = False
        if generation != state.generation:
            logger.debug(
                "Dropping stale %s result (generation %d, current %d)",
                category.value, generation, state.generation,
            )
        else:
            try:
                if future.cancelled():
                    raise CatalogFetchError("Catalog request was cancelled", category=category.value)
                result = future.result()
            except Exception as exc:
                self._fail(category, exc)
            else:
                self._accept(category, result)

        if state.rerun and not self._closed:
            state.rerun = False
            self._fetch(category)

    def _accept(self, category: CatalogCategory, response: Any) -> None:
        state = self._states[category]
        try:
            items = self._parse(category, response)
            markup = self._render(category, items, None)
        except Exception as exc:
            self._fail(category, exc)
            return
        # Snapshot and markup are replaced together or not at all
        state.snapshot = items
        state.markup = markup
        logger.debug("Catalog %s updated with %d entries", category.value, len(items))
        self._fire(category.done_event_name, {"category": category.value, "items": list(items)})

    def _fail(self, category: CatalogCategory, exc: BaseException) -> None:
        error = exc if isinstance(exc, CatalogFetchError) else CatalogFetchError(
            str(exc) or type(exc).__name__, category=category.value, cause=exc
        )
        self._fire(category.event_name, {"category": category.value, "error": error})
        logger.warning("%s: %s", category.warning_code, error)

    @staticmethod
    def _parse(category: CatalogCategory, response: Any) -> List[Any]:
        if category is CatalogCategory.TOC:
            return parse_toc(response)
        if category is CatalogCategory.ABBREVIATION:
            return parse_abbreviations(response)
        return parse_references(response)

    def _render(self, category: CatalogCategory, items: List[Any], checked: Optional[str]) -> str:
        if category is CatalogCategory.TOC:
            return list_renderer.render_toc(items, checked, input_name=self._input_name, marker=self._level_marker)
        if category is CatalogCategory.ABBREVIATION:
            return list_renderer.render_abbreviations(items, checked, input_name=self._input_name)
        return list_renderer.render_references(items, checked, input_name=self._input_name)
