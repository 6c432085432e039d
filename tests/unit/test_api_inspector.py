from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from statebus.api import main as api_main
from statebus.api.main import create_app
from statebus.core.settings import Settings
from statebus.execution.contract import Contract
from statebus.store.store import Store


async def _load_user(user_id):
    return {"id": user_id}


def test_inspector_reports_contracts_and_stores() -> None:
    users = Contract(_load_user, {"event": "users"}, settings=Settings())
    users(1).set({"id": 1})
    users(2)
    store = Store({"bump": lambda s: s.update(n=s.get("n", 0) + 1)}, {"n": lambda s: s.get("n", 0)}, name="counter")
    store.n()

    client = TestClient(create_app(contracts=[users], stores=[store]))

    assert client.get("/health").json() == {"status": "ok"}

    body = client.get("/contracts/_load_user").json()
    assert body["event"] == "users"
    assert [(i["args"], i["state"], i["has_value"]) for i in body["instances"]] == [
        ("(1,)", "resolved", True),
        ("(2,)", "idle", False),
    ]
    assert len(client.get("/contracts").json()["contracts"]) == 1

    stores = client.get("/stores").json()["stores"]
    assert stores == [{"name": "counter", "setters": ["bump"], "getters": ["n"], "cached_entries": 1}]


def test_unknown_contract_is_404() -> None:
    client = TestClient(create_app())
    assert client.get("/contracts/nope").status_code == 404


def build_counter_app():
    async def answer():
        return 42

    return create_app(contracts=[Contract(answer, settings=Settings())])


def test_main_serves_app_factory_given_on_command_line(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(api_main.uvicorn, "run", lambda target, **kw: calls.append((target, kw)))

    api_main.main(["--app", "tests.unit.test_api_inspector:build_counter_app", "--port", "8123"])

    assert calls == [("tests.unit.test_api_inspector:build_counter_app", {"factory": True, "host": "127.0.0.1", "port": 8123})]
    contracts = TestClient(build_counter_app()).get("/contracts").json()["contracts"]
    assert [c["name"] for c in contracts] == ["answer"]


def test_main_requires_app_factory() -> None:
    with pytest.raises(SystemExit):
        api_main.main([])
