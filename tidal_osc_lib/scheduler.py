"""
Scheduling Gate

Holds trigger events back until their delta has elapsed.

Each delayed event gets a one-shot asyncio timer registered with the
gate, so a session can abandon everything still pending on teardown.
Timers are independent: an event with a shorter delta may fire before
one that arrived earlier.
"""

import asyncio
import itertools
import logging
from typing import Callable, Dict, Optional

from .model import TriggerEvent

logger = logging.getLogger(__name__)

DELTA_KEY = "delta"

EmitFn = Callable[[TriggerEvent], None]


class SchedulingGate:
    """
    Delays trigger emission by the event's delta field.

    Example:
        gate = SchedulingGate()
        gate.schedule({"s": "bd", "delta": 0.25}, print, received_at=loop.time())
        ...
        gate.cancel_all()
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._pending: Dict[int, asyncio.TimerHandle] = {}
        self._ids = itertools.count()

    @property
    def pending(self) -> int:
        """Number of armed timers."""
        return len(self._pending)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        # Not cached: a gate may be reused across event loops
        return self._loop or asyncio.get_running_loop()

    def schedule(
        self,
        event: TriggerEvent,
        emit: EmitFn,
        received_at: Optional[float] = None,
    ) -> Optional[asyncio.TimerHandle]:
        """
        Emit event now, or after its delta.

        The delta field is always removed from the emitted record.

        Args:
            event: Decoded trigger event
            emit: Sink called with the event (minus delta)
            received_at: Loop time the packet arrived; the delay is
                measured from here. Defaults to now.

        Returns:
            The armed TimerHandle, or None if emitted synchronously
        """
        record = dict(event)
        delta = record.pop(DELTA_KEY, None)

        if delta is None:
            emit(record)
            return None

        if isinstance(delta, bool) or not isinstance(delta, (int, float)):
            logger.debug(f"Non-numeric delta {delta!r}, emitting immediately")
            emit(record)
            return None

        loop = self._get_loop()
        anchor = loop.time() if received_at is None else received_at
        when = anchor + max(0.0, float(delta))

        timer_id = next(self._ids)
        handle = loop.call_at(when, self._fire, timer_id, emit, record)
        self._pending[timer_id] = handle
        return handle

    def _fire(self, timer_id: int, emit: EmitFn, record: TriggerEvent) -> None:
        self._pending.pop(timer_id, None)
        emit(record)

    def cancel_all(self) -> int:
        """
        Cancel every pending emission.

        Returns:
            Number of timers cancelled
        """
        count = len(self._pending)
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
        if count:
            logger.info(f"Cancelled {count} pending trigger events")
        return count
