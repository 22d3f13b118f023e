"""
FaultForward - Turn escaping exceptions into error values.

A fault raised inside a protected section is captured as a Panic (time,
payload, stacks of every running thread and task) and handed to the
caller through one of two disciplines:

- recover(handler): callback dispatch
- forward(slot): error-slot injection, never overwriting an existing error

go(fn) combines forward() with a call so that returned errors and faults
share one result channel.

Core exports:
- Panic: Captured fault record (an Exception)
- panic: Raise an arbitrary payload
- recover / forward / ErrorSlot: Forwarding disciplines
- go / go_async / spawn: Guarded invocation
- CaptureConfig: Capture settings
"""

__version__ = "0.1.0"

from .core import (
    Panic,
    PanicSignal,
    PanicValue,
    TextMessage,
    WrappedError,
    OtherValue,
    classify,
    panic,
)

from .capturing import capture, dump_stacks

from .handlers import (
    ErrorSlot,
    Handler,
    Recover,
    Forward,
    recover,
    forward,
)

from .guard import go, go_async, spawn

from .config import (
    CaptureConfig,
    ConfigError,
    get_config,
    set_config,
)

__all__ = [
    # Core types
    "Panic",
    "PanicSignal",
    "PanicValue",
    "TextMessage",
    "WrappedError",
    "OtherValue",
    "classify",
    "panic",

    # Capture
    "capture",
    "dump_stacks",

    # Disciplines
    "ErrorSlot",
    "Handler",
    "Recover",
    "Forward",
    "recover",
    "forward",

    # Guarded invocation
    "go",
    "go_async",
    "spawn",

    # Configuration
    "CaptureConfig",
    "ConfigError",
    "get_config",
    "set_config",
]
