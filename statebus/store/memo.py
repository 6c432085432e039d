from __future__ import annotations

from typing import Any, Callable, Tuple

from statebus.core.keys import memo_key


class MemoizedGetterCache:
    """Results of getter calls, keyed by getter name and argument values.

    Entries live until `invalidate()`, which drops all of them at once. A hit
    returns the very object computed earlier, so callers can compare by
    identity to detect change. Arguments with no value encoding (callables,
    plain objects) are matched by identity and held by the entry.
    """

    def __init__(self) -> None:
        self._entries: dict[Tuple[str, str], Tuple[list, Any]] = {}
        self.misses = 0
        self.hits = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_compute(self, name: str, args: Tuple[Any, ...], compute: Callable[[], Any]) -> Any:
        key, pinned = memo_key(args)
        entry = self._entries.get((name, key))
        if entry is not None:
            self.hits += 1
            return entry[1]
        self.misses += 1
        value = compute()
        self._entries[(name, key)] = (pinned, value)
        return value

    def invalidate(self) -> None:
        self._entries.clear()
