from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing as a package.
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from statebus.contracts.events import EXECUTE, FINISH, OOPS, UPDATE
from statebus.core.settings import load_settings
from statebus.execution.contract import Contract
from statebus.store.store import Store


def _players_store() -> Store:
    def add_new_player(state, name, team):
        state["players"].append({"name": name, "team": team, "score": 0})

    def get_active_players(state):
        return [p for p in state["players"] if p.get("isActive")]

    return Store(
        {"add_new_player": add_new_player},
        {"get_active_players": get_active_players},
        state={"players": []},
        name="players",
    )


def replay_store() -> None:
    store = _players_store()
    store.on(UPDATE, lambda: print("[store] update"))
    store.add_new_player("A", "X")
    print(f"[store] active players: {store.get_active_players()}")


async def replay_contract(delay: float, fail: bool) -> None:
    calls = 0

    async def answer():
        nonlocal calls
        calls += 1
        await asyncio.sleep(delay)
        if fail:
            raise RuntimeError("no answer")
        return 42

    contract = Contract(answer)
    for event in (EXECUTE, UPDATE, FINISH, OOPS):
        contract.on(event, lambda ev: print(f"[contract] {ev.event:<8} state={ev.state.value} value={ev.value!r}"))

    instance = contract()
    results = await asyncio.gather(instance.execute(), instance.execute(), return_exceptions=True)
    print(f"[contract] results={results!r} invocations={calls}")


def main() -> None:
    ap = argparse.ArgumentParser(description="Walk through store and contract event sequences.")
    ap.add_argument("--scenario", choices=["store", "contract", "all"], default="all")
    ap.add_argument("--delay", type=float, default=0.1, help="Seconds the contract operation sleeps.")
    ap.add_argument("--fail", action="store_true", help="Make the contract operation raise instead of returning.")
    args = ap.parse_args()

    logging.basicConfig(level=load_settings().log_level)

    if args.scenario in ("store", "all"):
        replay_store()
    if args.scenario in ("contract", "all"):
        asyncio.run(replay_contract(args.delay, args.fail))


if __name__ == "__main__":
    main()
