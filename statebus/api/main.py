"""Read-only inspection endpoints for stores and contracts living in this process."""

from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Iterable, Optional, Sequence

from fastapi import FastAPI, HTTPException
import uvicorn

from statebus.core.settings import load_settings
from statebus.execution.contract import Contract
from statebus.execution.instance import ContractInstance
from statebus.store.store import Store


logger = logging.getLogger(__name__)


def _instance_snapshot(instance: ContractInstance) -> Dict[str, Any]:
    error = instance.errors()
    return {
        "instance_id": instance.instance_id,
        "args": repr(instance.args),
        "state": instance.state.value,
        "has_value": instance.has_value(),
        "error": repr(error) if error is not None else None,
    }


def _contract_snapshot(contract: Contract) -> Dict[str, Any]:
    return {
        "name": contract.name,
        "event": contract.update_event,
        "client_only": contract.options.client_only,
        "instances": [_instance_snapshot(i) for i in contract.instances()],
    }


def _store_snapshot(store: Store) -> Dict[str, Any]:
    return {
        "name": store.name,
        "setters": store.setter_names,
        "getters": store.getter_names,
        "cached_entries": store.cached_entries,
    }


def create_app(
    *,
    contracts: Optional[Iterable[Contract]] = None,
    stores: Optional[Iterable[Store]] = None,
) -> FastAPI:
    contracts_by_name = {c.name: c for c in contracts or ()}
    stores_by_name = {s.name: s for s in stores or ()}
    app = FastAPI(title="statebus inspector")

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/contracts")
    def list_contracts() -> dict:
        return {"contracts": [_contract_snapshot(c) for c in contracts_by_name.values()]}

    @app.get("/contracts/{name}")
    def get_contract(name: str) -> dict:
        contract = contracts_by_name.get(name)
        if contract is None:
            raise HTTPException(status_code=404, detail=f"unknown contract: {name}")
        return _contract_snapshot(contract)

    @app.get("/stores")
    def list_stores() -> dict:
        return {"stores": [_store_snapshot(s) for s in stores_by_name.values()]}

    return app


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Serve the read-only statebus inspector.")
    ap.add_argument(
        "--app",
        required=True,
        help="Import path of a zero-argument factory returning the app, e.g. myproject.inspect:build_app "
        "(typically a function calling create_app with the project's contracts and stores).",
    )
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    args = ap.parse_args(argv)

    s = load_settings()
    logging.basicConfig(level=s.log_level)
    logger.info("Starting statebus inspector (env=%s, app=%s)", s.env, args.app)
    uvicorn.run(args.app, factory=True, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
