"""
FaultForward - Fault capture.

Builds a Panic from an intercepted payload:
1. Records the interception time
2. Dumps the stacks of every running thread (faulting thread first)
3. Appends the stacks of the other asyncio tasks on the faulting loop
4. Truncates the dump to the configured capture limit
"""

from __future__ import annotations

import asyncio
import io
import logging
import sys
import threading
import traceback
from datetime import datetime, timezone
from types import FrameType
from typing import Any, Optional

from .config import CaptureConfig, ConfigError, get_config
from .core import Panic


logger = logging.getLogger("faultforward.capture")

_warned_local_only = False
_warned_bad_config = False


def capture(
    value: Any,
    *,
    exc: Optional[BaseException] = None,
    config: Optional[CaptureConfig] = None,
) -> Panic:
    """
    Capture fault with runtime context.

    Args:
        value: Payload carried by the fault
        exc: Intercepted exception, whose traceback lists the unwound frames
        config: Capture settings (uses process default if None)

    Returns:
        Fully populated Panic
    """
    cfg = config or _resolve_config()
    time = datetime.now(timezone.utc)
    trace, truncated = dump_stacks(
        exc=exc,
        all_units=cfg.all_units,
        include_tasks=cfg.include_tasks,
        limit=cfg.capture_limit,
    )
    return Panic(value, time=time, trace=trace, truncated=truncated)


def dump_stacks(
    *,
    exc: Optional[BaseException] = None,
    all_units: bool = True,
    include_tasks: bool = True,
    limit: int = 1 << 16,
) -> tuple[str, bool]:
    """
    Render the call stacks of all running units.

    Args:
        exc: Exception being handled; its traceback is shown under the
            faulting thread
        all_units: Include every thread, not only the current one
        include_tasks: Include the other tasks of a running asyncio loop
        limit: Maximum dump size in bytes

    Returns:
        Tuple of (dump, truncated)
    """
    current = threading.current_thread()
    sections = []

    frames = _all_frames() if all_units else None
    if frames is None:
        frames = {current.ident: sys._getframe(1)}

    sections.append(_format_thread(current, frames.pop(current.ident, None), exc, faulting=True))

    names = {t.ident: t for t in threading.enumerate()}
    for ident, frame in frames.items():
        sections.append(_format_thread(names.get(ident), frame, None, ident=ident))

    if include_tasks:
        sections.extend(_format_tasks())

    return _truncate("\n".join(sections), limit)


def _resolve_config() -> CaptureConfig:
    global _warned_bad_config
    try:
        return get_config()
    except ConfigError as e:
        # A bad setting never replaces the intercepted fault
        if not _warned_bad_config:
            logger.warning(f"Invalid capture configuration, using defaults: {e}")
            _warned_bad_config = True
        return CaptureConfig()


def _all_frames() -> Optional[dict[int, FrameType]]:
    global _warned_local_only
    current_frames = getattr(sys, "_current_frames", None)
    if current_frames is None:
        if not _warned_local_only:
            logger.warning(
                "All-thread stack introspection is unavailable on this interpreter; "
                "capturing the faulting thread only"
            )
            _warned_local_only = True
        return None
    return dict(current_frames())


def _format_thread(
    thread: Optional[threading.Thread],
    frame: Optional[FrameType],
    exc: Optional[BaseException],
    *,
    ident: Optional[int] = None,
    faulting: bool = False,
) -> str:
    ident = thread.ident if thread is not None else ident
    name = thread.name if thread is not None else "unknown"
    state = "faulting" if faulting else "running"

    lines = [f"thread {ident} [{name}] ({state}):\n"]
    if frame is not None:
        lines.extend(traceback.format_stack(frame))
    if exc is not None and exc.__traceback__ is not None:
        lines.append("  -- unwound --\n")
        lines.extend(traceback.format_tb(exc.__traceback__))
    return "".join(lines)


def _format_tasks() -> list[str]:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return []

    current = asyncio.current_task(loop)
    sections = []
    for task in asyncio.all_tasks(loop):
        if task is current:
            continue
        buf = io.StringIO()
        task.print_stack(file=buf)
        sections.append(buf.getvalue())
    return sections


def _truncate(dump: str, limit: int) -> tuple[str, bool]:
    encoded = dump.encode("utf-8")
    if len(encoded) <= limit:
        return dump, False
    logger.debug(f"Stack dump truncated from {len(encoded)} to {limit} bytes")
    return encoded[:limit].decode("utf-8", errors="ignore"), True
