"""Per-argument execution state machine.

States: idle -> pending -> resolved | rejected, and back to pending on the
next explicit `execute()`.

Every transition runs synchronously inside the method that triggers it, so
there is no window between checking and setting `pending`. The only
suspension point is inside the wrapped operation itself. Per cycle the
contract's channel sees: execute, update, finish|oops, update.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Optional, Tuple

from statebus.contracts.events import EXECUTE, FINISH, OOPS
from statebus.core.keys import stable_instance_id
from statebus.core.models import ContractEvent, InstanceState

if TYPE_CHECKING:
    from .contract import Contract


logger = logging.getLogger(__name__)

_EMPTY = object()


class ContractInstance:
    def __init__(self, contract: "Contract", key: str, args: Tuple[Any, ...]) -> None:
        self.contract = contract
        self.key = key
        self.args = args
        self.instance_id = stable_instance_id(key)
        self._value: Any = _EMPTY
        self._error: Optional[BaseException] = None
        self._pending = False
        self._waiters: list[asyncio.Future] = []
        # Strong refs to running tasks; the loop only keeps weak ones.
        self._tasks: set[asyncio.Task] = set()
        # Bumped by reset(); a run started before a reset must not write back.
        self._generation = 0

    def __repr__(self) -> str:
        return f"<ContractInstance {self.contract.name}{self.args!r} {self.state.value}>"

    # --- accessors ---

    @property
    def state(self) -> InstanceState:
        if self._pending:
            return InstanceState.PENDING
        if self._error is not None:
            return InstanceState.REJECTED
        if self._value is not _EMPTY:
            return InstanceState.RESOLVED
        return InstanceState.IDLE

    def has_value(self) -> bool:
        return self._value is not _EMPTY

    def value(self) -> Any:
        return None if self._value is _EMPTY else self._value

    def errors(self) -> Optional[BaseException]:
        return self._error

    def is_pending(self) -> bool:
        return self._pending

    # --- operations ---

    def execute(self) -> asyncio.Future:
        """Run the operation, or join the run already in flight.

        Returns a future settled with the run's value or error. Must be called
        with an event loop running.
        """

        loop = asyncio.get_running_loop()
        if not self._pending and not self._start(loop):
            return self._settled(loop)
        waiter = loop.create_future()
        self._waiters.append(waiter)
        return waiter

    def fetch(self) -> asyncio.Future:
        """Like `execute()`, but answers from the cache when a value is present."""

        if self.has_value():
            return self._settled(asyncio.get_running_loop())
        return self.execute()

    def get(self) -> Any:
        """Current value; starts a background run when nothing is cached yet.

        Never raises the operation's error and never waits.
        """

        if self.has_value() or self._pending or self._error is not None:
            return self.value()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("get_without_event_loop", extra={"contract": self.contract.name, "instance_id": self.instance_id})
            return self.value()
        self._start(loop)
        return self.value()

    def set(self, value: Any) -> None:
        self._value = value
        self._emit(self.contract.update_event)

    def reset(self) -> None:
        """Forget value, error and any in-flight run; the instance becomes brand new."""

        self._generation += 1
        self._value = _EMPTY
        self._error = None
        self._pending = False

    # --- internals ---

    def _settled(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future:
        fut = loop.create_future()
        fut.set_result(self.value())
        return fut

    def _start(self, loop: asyncio.AbstractEventLoop) -> bool:
        if not self.contract.may_execute():
            logger.debug("execute_skipped_client_only", extra={"contract": self.contract.name, "instance_id": self.instance_id})
            return False
        # Read before emitting: a listener may reset the instance.
        generation = self._generation
        self._error = None
        self._pending = True
        self._waiters = []
        waiters = self._waiters
        self._emit(EXECUTE)
        self._emit(self.contract.update_event)
        task = loop.create_task(self._run(generation, waiters))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    async def _run(self, generation: int, waiters: list[asyncio.Future]) -> None:
        try:
            value = await self.contract.operation(*self.args)
        except Exception as e:
            if generation == self._generation:
                self._error = e
                self._pending = False
                logger.info("execute_failed", extra={"contract": self.contract.name, "instance_id": self.instance_id, "error": repr(e)})
                self._emit(OOPS)
                self._emit(self.contract.update_event)
            for waiter in waiters:
                if not waiter.done():
                    waiter.set_exception(e)
            return

        if generation == self._generation:
            self._value = value
            self._pending = False
            self._emit(FINISH)
            self._emit(self.contract.update_event)
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(value)

    def _emit(self, event: str) -> None:
        self.contract.emit(
            event,
            ContractEvent(
                event=event,
                contract=self.contract.name,
                instance_id=self.instance_id,
                args=self.args,
                state=self.state,
                value=self.value(),
                error=self._error,
            ),
        )
