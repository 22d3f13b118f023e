"""
FaultForward - Testing utilities.

Provides :class:`PanicRecorder`, a handler that records every Panic it
receives for later assertion.
"""

from __future__ import annotations

import threading
from typing import List, Optional

from .core import Panic


class PanicRecorder:
    """
    Handler that captures panics instead of acting on them.

    Usage::

        recorder = PanicRecorder()
        with recover(recorder):
            panic("boom")

        assert recorder.has_panic("panic: boom")
        assert len(recorder.captured) == 1
        recorder.reset()
    """

    def __init__(self):
        self.captured: List[Panic] = []
        self._lock = threading.Lock()

    def __call__(self, record: Panic):
        with self._lock:
            self.captured.append(record)

    # ── Query helpers ──────────────────────────────────────────────

    @property
    def last(self) -> Optional[Panic]:
        return self.captured[-1] if self.captured else None

    def messages(self) -> List[str]:
        return [p.short_message() for p in self.captured]

    def has_panic(self, message: str) -> bool:
        """Check if a panic with the given short message was captured."""
        return message in self.messages()

    def reset(self):
        with self._lock:
            self.captured.clear()

    def __len__(self) -> int:
        return len(self.captured)

    def __repr__(self) -> str:
        return f"<PanicRecorder captured={len(self.captured)}>"
