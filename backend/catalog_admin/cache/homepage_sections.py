"""
Process-wide cache of homepage sections.

Every admin screen and route reads the same instance, so a section edited in
one place is visible everywhere without another round trip to the database.

Contract:

- ``fetch`` loads at most once unless forced, and never while a load is in
  flight. The check-and-set of ``is_loading`` is taken under a lock so
  concurrent request threads start one load between them. That guard is the
  only backpressure: a loader that hangs leaves ``is_loading`` set and
  consumers must surface it.
- ``mutate`` accepts an updater ``prev -> next``, a replacement list (or
  ``None``), or nothing at all to force a re-fetch.
- Both always publish a whole new ``sections`` list or leave it alone, and
  neither raises. Failures land in ``state.error`` and the last good
  ``sections`` stay in place.
- There is no compare-and-swap: two ``mutate`` calls apply in call order and
  the last one wins.
"""
import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional

from flask import has_app_context

from catalog_admin.domain.exceptions import ValidationError
from catalog_admin.normalizers.section import map_section

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class CacheState:
    sections: Optional[List[dict]] = None  # None until the first successful load
    is_loading: bool = False
    error: Optional[Exception] = None


@dataclass(frozen=True)
class CacheView:
    """
    What consumers render from.

    ``is_loading`` is only true for the very first load (show a skeleton);
    ``is_fetching`` is true for any load, including background refreshes
    (show a spinner).
    """

    sections: List[dict]
    is_loading: bool
    is_fetching: bool
    error: Optional[Exception]


class HomepageSectionsCache:
    def __init__(self, loader: Optional[Callable[[], List[Any]]] = None):
        self._loader = loader
        self._state = CacheState()
        self._listeners: List[Callable[[CacheState], None]] = []
        # reentrant: listeners run under it and may call back into the cache
        self._loading_lock = threading.RLock()

    # ------------------------
    # Flask integration
    # ------------------------
    def init_app(self, app, loader=None):
        """
        Bind the cache to ``app``. Without an explicit loader, sections are
        read through the SQLAlchemy gateway inside an app context so the
        cache can also be refreshed outside a request.
        """
        if loader is None:
            from catalog_admin.gateway.sqlalchemy_gateway import SqlAlchemyGateway

            gateway = SqlAlchemyGateway()

            def loader():
                if has_app_context():
                    return gateway.list_sections()
                with app.app_context():
                    return gateway.list_sections()

        self._loader = loader
        self.reset()
        app.extensions["homepage_cache"] = self

    # ------------------------
    # Observation
    # ------------------------
    @property
    def state(self) -> CacheState:
        return self._state

    def subscribe(self, listener: Callable[[CacheState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def view(self) -> CacheView:
        state = self._state
        return CacheView(
            sections=state.sections if state.sections is not None else [],
            is_loading=state.is_loading and state.sections is None,
            is_fetching=state.is_loading,
            error=state.error,
        )

    def _emit(self, **changes):
        self._state = replace(self._state, **changes)
        state = self._state

        # copy: a listener may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Homepage cache listener %r failed", listener)

    # ------------------------
    # Loading
    # ------------------------
    def fetch(self, force: bool = False) -> None:
        # check-and-set of is_loading must be atomic across request threads
        with self._loading_lock:
            if self._state.is_loading:
                return

            if not force and self._state.sections is not None:
                return

            if self._loader is None:
                self._emit(error=RuntimeError("Homepage cache has no loader configured"))
                return

            self._emit(is_loading=True, error=None)

        try:
            records = self._loader() or []
            sections = sorted(
                (map_section(record) for record in records),
                key=lambda section: section["position"],
            )
        except Exception as exc:
            logger.warning("Failed to load homepage sections: %s", exc)
            self._emit(is_loading=False, error=exc)
            return

        self._emit(sections=sections, is_loading=False, error=None)
        logger.debug("Homepage cache loaded %d sections", len(sections))

    def refresh(self) -> None:
        self.fetch(force=True)

    # ------------------------
    # Mutation
    # ------------------------
    def mutate(self, updater=_MISSING) -> None:
        if updater is _MISSING:
            self.fetch(force=True)
            return

        if callable(updater):
            try:
                next_sections = updater(self._state.sections)
            except Exception as exc:
                logger.exception("Homepage cache updater failed")
                self._emit(error=exc)
                return
        else:
            next_sections = updater

        if next_sections is not None and not isinstance(next_sections, (list, tuple)):
            self._emit(
                error=ValidationError(
                    "Homepage cache only holds a list of sections or None",
                    details=[{"field": "sections", "message": type(next_sections).__name__}],
                )
            )
            return

        self._emit(sections=list(next_sections) if next_sections is not None else None)

    def reset(self) -> None:
        self._emit(sections=None, is_loading=False, error=None)
