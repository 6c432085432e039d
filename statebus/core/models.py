from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from statebus.contracts.events import UPDATE


class InstanceState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ContractOptions:
    event: str = UPDATE
    client_only: bool = False


@dataclass(frozen=True)
class ContractEvent:
    """Payload carried by every event a contract emits.

    All instances of a contract share one channel, so listeners tell instances
    apart by `instance_id` / `args`.
    """

    event: str
    contract: str
    instance_id: str
    args: Tuple[Any, ...]
    state: InstanceState
    value: Any = None
    error: Optional[BaseException] = None
