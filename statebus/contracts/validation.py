from __future__ import annotations

import inspect
from typing import Any, Callable, Mapping

from statebus.core.models import ContractOptions

from . import events


CONTRACT_OPTION_KEYS = {"event", "client_only"}
# camelCase spellings accepted for the same options.
CONTRACT_OPTION_ALIASES = {"clientOnly": "client_only"}


class ConfigurationError(ValueError):
    """Raised when a store or contract is wired up incorrectly."""


class UnkeyableArgumentError(ValueError):
    """Raised when an argument list has no structural (value-based) encoding."""


def _require_known_keys(obj: Mapping[str, Any], *, allowed: set[str]) -> None:
    extra = set(obj.keys()) - allowed
    if extra:
        raise ConfigurationError(f"unknown contract options: {sorted(extra)}")


def _require_event_name(v: Any) -> str:
    if not isinstance(v, str) or not v.strip():
        raise ConfigurationError("event must be non-empty string")
    if v in events.LIFECYCLE_EVENTS:
        raise ConfigurationError(f"event may not reuse lifecycle event name {v!r}")
    return v


def validate_contract_options(options: Mapping[str, Any] | None) -> ContractOptions:
    """Strict option validation.

    - only `event` and `client_only` (or `clientOnly`) are recognized
    - `event` renames the default `update` event
    - `client_only` must be a bool
    """

    if options is None:
        return ContractOptions()
    if not isinstance(options, Mapping):
        raise ConfigurationError("contract options must be a mapping")

    normalized: dict[str, Any] = {}
    for key, value in options.items():
        canonical = CONTRACT_OPTION_ALIASES.get(key, key)
        if canonical in normalized:
            raise ConfigurationError(f"option given twice: {canonical}")
        normalized[canonical] = value
    _require_known_keys(normalized, allowed=CONTRACT_OPTION_KEYS)

    event = _require_event_name(normalized.get("event", events.UPDATE))
    client_only = normalized.get("client_only", False)
    if not isinstance(client_only, bool):
        raise ConfigurationError("client_only must be bool")
    return ContractOptions(event=event, client_only=client_only)


def validate_operation(operation: Callable[..., Any]) -> None:
    if not inspect.iscoroutinefunction(operation):
        raise ConfigurationError(f"operation must be a coroutine function, got {operation!r}")


def validate_handlers(kind: str, handlers: Mapping[str, Callable[..., Any]], *, taken: set[str], reserved: set[str]) -> None:
    """Check a batch of getter/setter registrations before any of them is applied."""

    if not isinstance(handlers, Mapping):
        raise ConfigurationError(f"{kind} must be a mapping of name -> callable")
    for name, fn in handlers.items():
        if not isinstance(name, str) or not name.isidentifier():
            raise ConfigurationError(f"{kind} name must be an identifier: {name!r}")
        if name.startswith("_") or name in reserved:
            raise ConfigurationError(f"{kind} name {name!r} is reserved")
        if name in taken:
            raise ConfigurationError(f"duplicate name: {name!r} is already registered")
        if not callable(fn):
            raise ConfigurationError(f"{kind} {name!r} must be callable")
