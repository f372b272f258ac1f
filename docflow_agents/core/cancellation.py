"""Cooperative cancellation helpers.

Long-running operations accept an optional ``cancel_event``. It is checked at
every poll iteration and before every bulk item, and it interrupts sleeps.
A set event always surfaces as :class:`CancellationRequested`; native
``asyncio.CancelledError`` is never caught here.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from docflow_agents.core.errors import CancellationRequested


def raise_if_cancelled(cancel_event: Optional[asyncio.Event], what: str = "operation") -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise CancellationRequested(f"Cancellation requested during {what}")


async def cancellable_sleep(seconds: float, cancel_event: Optional[asyncio.Event] = None, what: str = "wait") -> None:
    """Sleep for ``seconds`` unless ``cancel_event`` is set first.

    Raises:
        CancellationRequested: If the event is set before or during the sleep.
    """
    if cancel_event is None:
        await asyncio.sleep(seconds)
        return
    raise_if_cancelled(cancel_event, what)
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return
    raise CancellationRequested(f"Cancellation requested during {what}")
