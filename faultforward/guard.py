"""
FaultForward - Guarded invocation.

Runs a fallible operation so that "returned an error" and "faulted" come
back through the same channel.
"""

from __future__ import annotations

import threading
from typing import Any, Awaitable, Callable, Optional

from .config import CaptureConfig
from .handlers import ErrorSlot, Handler, forward, recover


def go(
    fn: Callable[[], Optional[BaseException]],
    *,
    config: Optional[CaptureConfig] = None,
) -> Optional[BaseException]:
    """
    Call ``fn`` and convert any fault into a Panic.

    The returned error is assigned to the slot before the interception
    point can act, so a genuine error is never masked by a fault.

    Args:
        fn: Zero-argument operation returning an error or None
        config: Capture settings (uses process default if None)

    Returns:
        The operation's own error, a Panic if it faulted, or None
    """
    slot = ErrorSlot()
    with forward(slot, config=config):
        slot.error = fn()
    return slot.error


async def go_async(
    fn: Callable[[], Awaitable[Optional[BaseException]]],
    *,
    config: Optional[CaptureConfig] = None,
) -> Optional[BaseException]:
    """Coroutine counterpart of go()."""
    slot = ErrorSlot()
    async with forward(slot, config=config):
        slot.error = await fn()
    return slot.error


def spawn(
    fn: Callable[[], Any],
    handler: Optional[Handler],
    *,
    name: Optional[str] = None,
    config: Optional[CaptureConfig] = None,
) -> threading.Thread:
    """
    Start a worker thread whose body runs under recover(handler).

    Each thread installs its own interception point; a fault in the
    worker never reaches interception points on other threads. With
    ``handler=None`` the worker behaves like a plain thread.

    Returns:
        The started thread
    """
    def run():
        with recover(handler, config=config):
            fn()

    thread = threading.Thread(target=run, name=name)
    thread.start()
    return thread
