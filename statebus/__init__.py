"""statebus: shared reactive state.

- `Store`: synchronous state with memoized getters, invalidated by setters.
- `Contract`: an async operation cached per argument list, with pending/error
  tracking and single-flight coalescing.
"""
from __future__ import annotations

from statebus.contracts.events import UPDATE
from statebus.contracts.validation import ConfigurationError, UnkeyableArgumentError
from statebus.core.channel import NotificationChannel
from statebus.core.models import ContractEvent, InstanceState
from statebus.execution.contract import Contract
from statebus.execution.instance import ContractInstance
from statebus.store.store import NO_CHANGE, Store

__all__ = [
    "UPDATE",
    "ConfigurationError",
    "UnkeyableArgumentError",
    "NotificationChannel",
    "ContractEvent",
    "InstanceState",
    "Contract",
    "ContractInstance",
    "NO_CHANGE",
    "Store",
]
