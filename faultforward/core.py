"""
FaultForward - Core types.

Defines:
- Payload variants (TextMessage, WrappedError, OtherValue)
- Panic (captured fault record that doubles as an error value)
- PanicSignal and panic() for raising arbitrary payloads
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

import yaml


# ============================================================================
# Payload - closed sum of fault values
# ============================================================================

@dataclass(frozen=True, slots=True)
class TextMessage:
    """Fault carrying a plain message."""
    text: str

    def __str__(self) -> str:
        return self.text

    def to_primitive(self) -> Any:
        return self.text


@dataclass(frozen=True, slots=True)
class WrappedError:
    """Fault carrying an exception instance."""
    error: BaseException
    text: str

    def __str__(self) -> str:
        return self.text

    def to_primitive(self) -> Any:
        return {"error": type(self.error).__name__, "message": self.text}


@dataclass(frozen=True, slots=True)
class OtherValue:
    """
    Fault carrying any other object.

    The string form is computed once, at capture time, so later mutation
    of ``value`` does not change how the fault renders.
    """
    value: Any
    text: str

    def __str__(self) -> str:
        return self.text

    def to_primitive(self) -> Any:
        if _is_json_native(self.value):
            return self.value
        return self.text


PanicValue = Union[TextMessage, WrappedError, OtherValue]


def _is_json_native(value: Any) -> bool:
    if value is None or isinstance(value, (bool, int, float, str)):
        return True
    if isinstance(value, (list, tuple)):
        return all(_is_json_native(v) for v in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and _is_json_native(v) for k, v in value.items())
    return False


def classify(value: Any) -> PanicValue:
    """
    Classify a raw fault payload.

    Args:
        value: Raw payload (message, exception, or arbitrary object)

    Returns:
        TextMessage, WrappedError or OtherValue
    """
    if isinstance(value, (TextMessage, WrappedError, OtherValue)):
        return value
    if isinstance(value, str):
        return TextMessage(value)
    if isinstance(value, BaseException):
        return WrappedError(value, str(value) or type(value).__name__)
    return OtherValue(value, str(value))


# ============================================================================
# PanicSignal - raise-side carrier
# ============================================================================

class PanicSignal(Exception):
    """
    Exception used to raise a payload that is not itself an exception.

    Interception points unwrap it, so the recorded payload is ``value``,
    never the signal.
    """

    def __init__(self, value: Any):
        super().__init__(value)
        self.value = value

    def __str__(self) -> str:
        return str(self.value)


def panic(value: Any):
    """
    Abort the current protected section with ``value`` as the payload.

    Exceptions are raised as-is; any other value travels in a PanicSignal.

    Raises:
        TypeError: If value is None
    """
    if value is None:
        raise TypeError("panic called with None")
    if isinstance(value, BaseException):
        raise value
    raise PanicSignal(value)


def payload_of(exc: BaseException) -> Any:
    """Return the value an intercepted exception carries."""
    if isinstance(exc, PanicSignal):
        return exc.value
    return exc


# ============================================================================
# Panic - the fault record
# ============================================================================

class Panic(Exception):
    """
    Structured record of an intercepted fault.

    A Panic is an ordinary exception, so it can be returned as an error,
    stored in an ErrorSlot, or raised. All fields are read-only.

    Attributes:
        time: When the fault was intercepted (UTC)
        value: Raw payload carried by the fault
        payload: Classified payload (TextMessage, WrappedError, OtherValue)
        trace: Stacks of all running units at interception time
        truncated: Whether trace was cut to the capture limit

    Example:
        ```python
        err = go(lambda: panic("not at a disco"))
        assert str(err) == "panic: not at a disco"
        print(err.full_detail())
        ```
    """

    def __init__(
        self,
        value: Any,
        *,
        time: Optional[datetime] = None,
        trace: str = "",
        truncated: bool = False,
    ):
        self._payload = classify(value)
        self._time = time or datetime.now(timezone.utc)
        self._trace = trace
        self._truncated = truncated
        super().__init__(self.short_message())

    @property
    def time(self) -> datetime:
        return self._time

    @property
    def payload(self) -> PanicValue:
        return self._payload

    @property
    def value(self) -> Any:
        payload = self._payload
        if isinstance(payload, TextMessage):
            return payload.text
        if isinstance(payload, WrappedError):
            return payload.error
        return payload.value

    @property
    def trace(self) -> str:
        return self._trace

    @property
    def truncated(self) -> bool:
        return self._truncated

    def short_message(self) -> str:
        """One-line summary, without stack traces."""
        return f"panic: {self._payload}"

    def full_detail(self) -> str:
        """Summary followed by a blank line and every collected stack."""
        return f"{self.short_message()}\n\n{self._trace}"

    def __str__(self) -> str:
        return self.short_message()

    def __repr__(self) -> str:
        return f"Panic(value={str(self._payload)!r}, time={self._time.isoformat()})"

    def __reduce__(self):
        return (
            _rebuild_panic,
            (type(self), self.value, self._payload.text, self._time, self._trace, self._truncated),
        )

    # ------------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize record to dictionary.

        Returns:
            Dictionary with ``time``, ``value``, ``trace`` and ``truncated``
        """
        return {
            "time": self._time.isoformat(),
            "value": self._payload.to_primitive(),
            "trace": self._trace,
            "truncated": self._truncated,
        }

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Panic:
        """
        Rebuild a record from its serialized form.

        Exceptions cannot be revived, so a serialized WrappedError comes
        back as an OtherValue that renders with the original message.

        Args:
            data: Mapping produced by ``to_dict`` (or read from JSON/YAML)

        Returns:
            Panic with the stored time, value and trace

        Raises:
            ValueError: If ``value`` is missing or ``time`` is malformed
        """
        if "value" not in data:
            raise ValueError("serialized panic has no 'value'")

        raw = data["value"]
        if isinstance(raw, str):
            payload: PanicValue = TextMessage(raw)
        elif isinstance(raw, dict) and set(raw) == {"error", "message"}:
            payload = OtherValue(raw, str(raw["message"]))
        else:
            payload = OtherValue(raw, str(raw))

        time = data.get("time")
        if isinstance(time, str):
            time = _parse_time(time)

        return cls(
            payload,
            time=time,
            trace=data.get("trace") or "",
            truncated=bool(data.get("truncated", False)),
        )


def _rebuild_panic(cls, value, text, time, trace, truncated):
    payload = classify(value)
    if isinstance(payload, OtherValue):
        payload = OtherValue(value, text)
    return cls(payload, time=time, trace=trace, truncated=truncated)


_FRACTION = re.compile(r"\.(\d+)")


def _parse_time(value: str) -> datetime:
    """Parse ISO-8601/RFC3339 time, including ``Z`` and nanosecond fractions."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    # fromisoformat on 3.10 only takes 3 or 6 fractional digits
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    return datetime.fromisoformat(value)
