from __future__ import annotations

import pytest

from statebus.contracts.events import UPDATE
from statebus.contracts.validation import ConfigurationError
from statebus.store.store import NO_CHANGE, Store


def _players_store() -> tuple[Store, dict]:
    calls = {"get_active_players": 0, "players_on": 0}

    def add_new_player(state, name, team):
        state["players"].append({"name": name, "team": team, "score": 0})

    def activate(state, name):
        for p in state["players"]:
            if p["name"] == name and not p.get("isActive"):
                p["isActive"] = True
                return True
        return NO_CHANGE

    def get_active_players(state):
        calls["get_active_players"] += 1
        return [p for p in state["players"] if p.get("isActive")]

    def players_on(state, team):
        calls["players_on"] += 1
        return [p["name"] for p in state["players"] if p["team"] == team]

    store = Store(
        {"add_new_player": add_new_player, "activate": activate},
        {"get_active_players": get_active_players, "players_on": players_on},
        state={"players": []},
    )
    return store, calls


def test_scenario_a_new_player_is_not_active() -> None:
    store, _ = _players_store()
    updates = []
    store.on(UPDATE, lambda: updates.append(1))

    store.add_new_player("A", "X")

    assert store.get_active_players() == []
    assert updates == [1]


def test_getter_memoized_between_mutations() -> None:
    store, calls = _players_store()
    first = store.get_active_players()
    second = store.get_active_players()

    assert first is second
    assert calls["get_active_players"] == 1

    store.add_new_player("A", "X")
    store.get_active_players()
    assert calls["get_active_players"] == 2


def test_getter_memoized_per_argument_values() -> None:
    store, calls = _players_store()
    store.add_new_player("A", "X")
    store.add_new_player("B", "Y")

    assert store.players_on("X") == ["A"]
    assert store.players_on("Y") == ["B"]
    assert store.players_on("X") == ["A"]
    assert calls["players_on"] == 2


def test_no_change_sentinel_keeps_cache_and_skips_update() -> None:
    store, calls = _players_store()
    store.add_new_player("A", "X")
    store.activate("A")
    cached = store.get_active_players()
    updates = []
    store.on(UPDATE, lambda: updates.append(1))

    assert store.activate("A") is NO_CHANGE
    assert store.get_active_players() is cached
    assert calls["get_active_players"] == 1
    assert updates == []


def test_any_other_result_invalidates_all_getters_and_updates_once() -> None:
    store, calls = _players_store()
    store.add_new_player("A", "X")
    store.get_active_players()
    store.players_on("X")
    updates = []
    store.on(UPDATE, lambda: updates.append(1))

    assert store.activate("A") is True
    assert [p["name"] for p in store.get_active_players()] == ["A"]
    store.players_on("X")

    assert updates == [1]
    assert calls == {"get_active_players": 2, "players_on": 2}
    assert store.cached_entries == 2


def test_dispatch_and_compute_by_name() -> None:
    store, _ = _players_store()
    store.dispatch("add_new_player", "A", "X")
    assert store.compute("players_on", "X") == ["A"]
    with pytest.raises(ConfigurationError):
        store.dispatch("missing")
    with pytest.raises(ConfigurationError):
        store.compute("missing")
    with pytest.raises(AttributeError):
        store.missing()


def test_incremental_registration() -> None:
    store, _ = _players_store()
    store.add_getters({"count": lambda state: len(state["players"])})
    store.add_setters({"reset": lambda state: state["players"].clear()})

    store.add_new_player("A", "X")
    assert store.count() == 1
    store.reset()
    assert store.count() == 0
    assert store.getter_names == ["count", "get_active_players", "players_on"]


@pytest.mark.parametrize("name", ["add_new_player", "get_active_players", "on", "emit", "dispatch", "_private", "not an id"])
def test_conflicting_names_fail_fast(name: str) -> None:
    store, _ = _players_store()
    with pytest.raises(ConfigurationError):
        store.add_getters({name: lambda state: None})


def test_non_callable_handler_rejected() -> None:
    with pytest.raises(ConfigurationError):
        Store({"bad": 1})


def test_state_is_not_exposed() -> None:
    state = {"players": []}
    store = Store({}, {"players": lambda s: list(s["players"])}, state=state)
    with pytest.raises(AttributeError):
        store.state
    assert store.players() is not state["players"]


def test_custom_events_and_listener_removal() -> None:
    store, _ = _players_store()
    got = []
    off = store.on("saved", lambda *args: got.append(args))
    store.emit("saved", "disk")
    off()
    store.emit("saved", "disk")
    assert got == [("disk",)]


def test_update_order_follows_subscription_order() -> None:
    store, _ = _players_store()
    order = []
    store.on(UPDATE, lambda: order.append("first"))
    store.on(UPDATE, lambda: order.append("second"))
    store.add_new_player("A", "X")
    assert order == ["first", "second"]


def test_getter_with_callable_argument_is_memoized_by_identity() -> None:
    calls = []

    def where(state, predicate):
        calls.append(predicate)
        return [n for n in state["numbers"] if predicate(n)]

    store = Store({"append": lambda s, n: s["numbers"].append(n)}, {"where": where}, state={"numbers": [1, 2, 3]})
    above_one = lambda n: n > 1  # noqa: E731

    first = store.where(above_one)
    assert first == [2, 3]
    assert store.where(above_one) is first
    assert store.where(lambda n: n > 2) == [3]
    assert len(calls) == 2

    store.append(4)
    assert store.where(above_one) == [2, 3, 4]
    assert len(calls) == 3


def test_getter_with_plain_object_argument() -> None:
    class Box:
        def __init__(self, v) -> None:
            self.v = v

    store = Store({}, {"plus": lambda s, box, n: box.v + n})
    box = Box(1)
    assert store.plus(box, 2) == 3
    assert store.plus(Box(10), 2) == 12
    assert store.cached_entries == 2
