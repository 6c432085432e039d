"""Synchronous store.

The store owns a mutable backing state. Setters mutate it, getters derive
values from it; both receive the state as their first argument and are
otherwise called with whatever arguments the caller passes:

    def add_player(state, name, team):
        state["players"].append({"name": name, "team": team, "score": 0})

    def active_players(state):
        return [p for p in state["players"] if p.get("is_active")]

    store = Store({"add_player": add_player}, {"active_players": active_players},
                  state={"players": []})
    store.add_player("A", "X")
    store.active_players()

A setter that returns `NO_CHANGE` reports that nothing changed: getter results
stay cached and no `update` is emitted. Any other return value (None
included) clears every cached getter result and emits `update` once.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

from statebus.contracts.events import UPDATE
from statebus.contracts.validation import ConfigurationError, validate_handlers
from statebus.core.channel import Listener, NotificationChannel

from .memo import MemoizedGetterCache


logger = logging.getLogger(__name__)


class _NoChange:
    _instance = None

    def __new__(cls) -> "_NoChange":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_CHANGE"

    def __reduce__(self) -> str:
        return "NO_CHANGE"


NO_CHANGE = _NoChange()

Handler = Callable[..., Any]


class Store:
    def __init__(
        self,
        setters: Optional[Mapping[str, Handler]] = None,
        getters: Optional[Mapping[str, Handler]] = None,
        *,
        state: Any = None,
        name: str = "store",
    ) -> None:
        self.name = name
        self._state = {} if state is None else state
        self._setters: dict[str, Handler] = {}
        self._getters: dict[str, Handler] = {}
        self._cache = MemoizedGetterCache()
        self.channel = NotificationChannel(name=f"store:{name}")
        self.add_setters(setters or {})
        self.add_getters(getters or {})

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Only reached for names that are not regular attributes.
        if name.startswith("_"):
            raise AttributeError(name)
        if name in self._setters:
            return lambda *args: self.dispatch(name, *args)
        if name in self._getters:
            return lambda *args: self.compute(name, *args)
        raise AttributeError(f"{type(self).__name__} {self.name!r} has no getter or setter {name!r}")

    def __repr__(self) -> str:
        return f"<Store {self.name} setters={sorted(self._setters)} getters={sorted(self._getters)}>"

    # --- registration ---

    def _taken(self) -> set[str]:
        return set(self._setters) | set(self._getters)

    def add_setters(self, setters: Mapping[str, Handler]) -> None:
        validate_handlers("setter", setters, taken=self._taken(), reserved=_RESERVED)
        self._setters.update(setters)

    def add_getters(self, getters: Mapping[str, Handler]) -> None:
        validate_handlers("getter", getters, taken=self._taken(), reserved=_RESERVED)
        self._getters.update(getters)

    @property
    def setter_names(self) -> list[str]:
        return sorted(self._setters)

    @property
    def getter_names(self) -> list[str]:
        return sorted(self._getters)

    @property
    def cached_entries(self) -> int:
        return len(self._cache)

    # --- calls ---

    def dispatch(self, name: str, *args: Any) -> Any:
        """Call setter `name`; invalidate and notify unless it returned NO_CHANGE."""

        setter = self._setters.get(name)
        if setter is None:
            raise ConfigurationError(f"unknown setter: {name!r}")
        result = setter(self._state, *args)
        if result is NO_CHANGE:
            return result
        self._cache.invalidate()
        logger.debug("store_mutated", extra={"store": self.name, "setter": name})
        self.channel.emit(UPDATE)
        return result

    def compute(self, name: str, *args: Any) -> Any:
        """Call getter `name`, answering from the cache until the next mutation."""

        getter = self._getters.get(name)
        if getter is None:
            raise ConfigurationError(f"unknown getter: {name!r}")
        return self._cache.get_or_compute(name, args, lambda: getter(self._state, *args))

    # --- notifications ---

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        return self.channel.on(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self.channel.off(event, listener)

    def emit(self, event: str, *args: Any) -> None:
        self.channel.emit(event, *args)


_RESERVED = {n for n in dir(Store) if not n.startswith("_")} | {"name", "channel"}
