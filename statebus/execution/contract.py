from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from statebus.contracts.validation import validate_contract_options, validate_operation
from statebus.core.channel import Listener, NotificationChannel
from statebus.core.keys import canonical_key
from statebus.core.settings import Settings, load_settings

from .instance import ContractInstance


logger = logging.getLogger(__name__)


class Contract:
    """An async operation cached per argument list.

    Calling the contract with arguments returns the `ContractInstance` for that
    argument list, creating it on first use. Value-equal argument lists share
    one instance, and therefore its cache, pending flag and error. All
    instances publish on one shared channel.

        async def load_user(user_id):
            ...

        users = Contract(load_user, {"event": "users"})
        user = await users(42).fetch()
    """

    def __init__(
        self,
        operation: Callable[..., Awaitable[Any]],
        options: Optional[Mapping[str, Any]] = None,
        *,
        name: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        validate_operation(operation)
        self.operation = operation
        self.options = validate_contract_options(options)
        self.name = name or getattr(operation, "__name__", "contract")
        self.settings = settings or load_settings()
        self.channel = NotificationChannel(name=f"contract:{self.name}")
        self._registry: dict[str, ContractInstance] = {}

    def __call__(self, *args: Any) -> ContractInstance:
        key = canonical_key(args)
        instance = self._registry.get(key)
        if instance is None:
            instance = ContractInstance(self, key, args)
            self._registry[key] = instance
            logger.debug("instance_created", extra={"contract": self.name, "instance_id": instance.instance_id})
        return instance

    def __repr__(self) -> str:
        return f"<Contract {self.name} instances={len(self._registry)}>"

    @property
    def update_event(self) -> str:
        return self.options.event

    def may_execute(self) -> bool:
        return not self.options.client_only or self.settings.is_client

    def instances(self) -> list[ContractInstance]:
        return list(self._registry.values())

    def clear(self) -> None:
        """Drop every instance; the next access per key starts from scratch. Emits nothing."""

        for instance in self._registry.values():
            instance.reset()
        self._registry.clear()
        logger.debug("registry_cleared", extra={"contract": self.name})

    # --- notifications ---

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        return self.channel.on(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        self.channel.off(event, listener)

    def emit(self, event: str, *args: Any) -> None:
        self.channel.emit(event, *args)
