"""Argument keys.

Two argument lists get the same key exactly when Python considers them equal:
`1`, `1.0` and `True` share a key (as they share a dict slot, and as
`functools.lru_cache` treats them by default), while `{1: "x"}` and
`{"1": "x"}`, or `(1, 2)` and `[1, 2]`, do not. Containers are encoded as
tagged JSON arrays so no container can collide with a scalar or with a
container of another type.
"""

from __future__ import annotations

import json
import math
import uuid
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Iterable, List, Tuple

from statebus.contracts.validation import UnkeyableArgumentError


_KEY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "statebus.instance")


def _dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False)


def _qualname(obj: Any) -> str:
    cls = type(obj)
    return f"{cls.__module__}.{cls.__qualname__}"


def _float(v: float) -> Any:
    if math.isfinite(v) and v.is_integer():
        return int(v)
    if math.isnan(v):
        return ["float", "nan"]
    return v


def _encode(obj: Any) -> Any:
    # bool and IntEnum are ints and compare equal to them.
    if obj is None or isinstance(obj, str) and not isinstance(obj, Enum):
        return obj
    if isinstance(obj, Enum):
        if isinstance(obj, (int, float, str)):
            return _encode(obj.value)
        return ["enum", _qualname(obj), obj.name]
    if isinstance(obj, int):
        return int(obj)
    if isinstance(obj, float):
        return _float(obj)
    if isinstance(obj, list):
        return ["list", [_encode(v) for v in obj]]
    if isinstance(obj, tuple):
        return ["tuple", [_encode(v) for v in obj]]
    if isinstance(obj, dict):
        pairs = [[_encode(k), _encode(v)] for k, v in obj.items()]
        return ["dict", sorted(pairs, key=lambda kv: _dumps(kv[0]))]
    if isinstance(obj, (set, frozenset)):
        # set({1}) == frozenset({1}), so both share the tag.
        return ["set", sorted((_encode(v) for v in obj), key=_dumps)]
    if is_dataclass(obj) and not isinstance(obj, type):
        return ["dataclass", _qualname(obj), [[f.name, _encode(getattr(obj, f.name))] for f in fields(obj)]]
    if isinstance(obj, datetime):
        if obj.tzinfo is None or obj.utcoffset() is None:
            return ["datetime", obj.isoformat()]
        # Aware datetimes compare by instant.
        return ["datetime-utc", obj.astimezone(timezone.utc).isoformat()]
    if isinstance(obj, date):
        return ["date", obj.isoformat()]
    if isinstance(obj, time):
        return ["time", obj.isoformat()]
    if isinstance(obj, (bytes, bytearray)):
        return ["bytes", bytes(obj).hex()]
    raise UnkeyableArgumentError(f"argument of type {type(obj).__name__} has no structural encoding: {obj!r}")


def canonical_key(args: Iterable[Any]) -> str:
    """Deterministic, value-based key for a positional argument list."""

    return _dumps([_encode(a) for a in args])


def memo_key(args: Iterable[Any]) -> Tuple[str, List[Any]]:
    """Like `canonical_key`, but arguments with no structural encoding are keyed by identity.

    Returns the key and the arguments keyed by identity; the caller must keep
    those alive for as long as the key is in use so their ids are not reused.
    """

    encoded: list[Any] = []
    pinned: list[Any] = []
    for a in args:
        try:
            encoded.append(_encode(a))
        except UnkeyableArgumentError:
            encoded.append(["id", id(a)])
            pinned.append(a)
    return _dumps(encoded), pinned


def stable_instance_id(key: str) -> str:
    """Deterministic id for the instance behind a canonical key (safe for logs)."""

    return str(uuid.uuid5(_KEY_NAMESPACE, key))
