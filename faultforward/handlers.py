"""
FaultForward - Forwarding disciplines.

Two interception points that turn a fault raised inside a protected
section into a Panic:

- recover(handler): pass the Panic to a callback
- forward(slot): store the Panic in an ErrorSlot, unless it already
  holds an error

Both are context managers (sync and async) and decorators. With no
handler or slot they intercept nothing, so the fault propagates exactly
as if the interception point were absent.
"""

from __future__ import annotations

import functools
import inspect
import logging
from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Callable, Optional

from .capturing import capture
from .config import CaptureConfig
from .core import Panic, payload_of


logger = logging.getLogger("faultforward.handlers")

Handler = Callable[[Panic], None]


class ErrorSlot:
    """
    Single mutable error location shared by a protected section and its
    interception point.

    ``None`` means empty. One protected section owns a slot at a time.
    """

    __slots__ = ("error",)

    def __init__(self, error: Optional[BaseException] = None):
        self.error = error

    def is_empty(self) -> bool:
        return self.error is None

    def offer(self, error: BaseException) -> bool:
        """
        Store error only if the slot is empty.

        Returns:
            True if the error was stored
        """
        if self.error is not None:
            return False
        self.error = error
        return True

    def raise_if_set(self):
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        return f"ErrorSlot({self.error!r})"


class Interception(ABC):
    """
    Base class for interception points.

    Subclasses implement ``active`` and ``deliver``. Only ``Exception``
    instances are intercepted; KeyboardInterrupt, SystemExit,
    GeneratorExit and asyncio.CancelledError always propagate.
    """

    def __init__(self, config: Optional[CaptureConfig] = None):
        self.config = config

    @property
    @abstractmethod
    def active(self) -> bool:
        """Whether this interception point intercepts at all."""
        pass

    @abstractmethod
    def deliver(self, record: Panic):
        """Hand a captured Panic to its receiver."""
        pass

    def _intercept(self, exc: Optional[BaseException]) -> bool:
        if exc is None or not self.active or not isinstance(exc, Exception):
            return False
        record = capture(payload_of(exc), exc=exc, config=self.config)
        record.__cause__ = exc
        self.deliver(record)
        return True

    # ------------------------------------------------------------------------
    # Context manager protocol
    # ------------------------------------------------------------------------

    def __enter__(self) -> Interception:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        return self._intercept(exc)

    async def __aenter__(self) -> Interception:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        return self._intercept(exc)

    # ------------------------------------------------------------------------
    # Decorator protocol
    # ------------------------------------------------------------------------

    def __call__(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """
        Protect every call of ``func``.

        A call that faults returns None once the Panic has been delivered.
        Generators are protected while they are iterated; a faulting
        generator stops once the Panic has been delivered.
        """
        if inspect.isasyncgenfunction(func):
            @functools.wraps(func)
            async def async_gen_wrapper(*args, **kwargs):
                async with self:
                    async for item in func(*args, **kwargs):
                        yield item
            return async_gen_wrapper

        if inspect.isgeneratorfunction(func):
            @functools.wraps(func)
            def gen_wrapper(*args, **kwargs):
                with self:
                    return (yield from func(*args, **kwargs))
            return gen_wrapper

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                async with self:
                    return await func(*args, **kwargs)
            return async_wrapper

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with self:
                return func(*args, **kwargs)
        return wrapper


class Recover(Interception):
    """
    Callback discipline.

    Usage:
        ```python
        def on_panic(p: Panic):
            log.error(p.full_detail())

        with recover(on_panic):
            risky()
        ```
    """

    def __init__(self, handler: Optional[Handler], config: Optional[CaptureConfig] = None):
        super().__init__(config)
        self.handler = handler

    @property
    def active(self) -> bool:
        return self.handler is not None

    def deliver(self, record: Panic):
        logger.debug(f"Recovered {record.short_message()}")
        self.handler(record)


class Forward(Interception):
    """
    Error-slot discipline.

    An error already in the slot wins over the intercepted fault, and the
    Panic is discarded.

    Usage:
        ```python
        def work() -> Optional[Exception]:
            slot = ErrorSlot()
            with forward(slot):
                slot.error = step_one()
                step_two()
            return slot.error
        ```
    """

    def __init__(self, slot: Optional[ErrorSlot], config: Optional[CaptureConfig] = None):
        super().__init__(config)
        self.slot = slot

    @property
    def active(self) -> bool:
        return self.slot is not None

    def deliver(self, record: Panic):
        if self.slot.offer(record):
            logger.debug(f"Forwarded {record.short_message()}")
        else:
            logger.debug(
                f"Discarded {record.short_message()}; slot already holds {self.slot.error!r}"
            )


def recover(handler: Optional[Handler], *, config: Optional[CaptureConfig] = None) -> Recover:
    """
    Install a callback interception point.

    Args:
        handler: Called with the Panic when the protected section faults.
            None disables interception.
        config: Capture settings (uses process default if None)
    """
    return Recover(handler, config)


def forward(slot: Optional[ErrorSlot], *, config: Optional[CaptureConfig] = None) -> Forward:
    """
    Install an error-slot interception point.

    Args:
        slot: Receives the Panic if it is empty when the protected section
            faults. None disables interception.
        config: Capture settings (uses process default if None)
    """
    return Forward(slot, config)
