"""Observers for contract events.

A signed function announces two things: that it was signed, and that one of
its checks failed.  Both arrive as a :class:`ContractEvent`; a violation event
also carries the failing rule and whichever detail the error names (the
position, the type variable or the class).

Observers are attached per event with :func:`subscribe`.  An observer that
raises is logged and skipped so it cannot replace the violation being
reported.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Callable, Optional

from signet.errors import ContractViolation, ViolationKind

from . import logger

CONTRACT_SIGNED = "signet.contract.signed"
CONTRACT_VIOLATION = "signet.contract.violation"
EVENTS = (CONTRACT_SIGNED, CONTRACT_VIOLATION)

Observer = Callable[["ContractEvent"], None]


@dataclass(frozen=True, slots=True)
class ContractEvent:
    """What happened to a signed function."""

    name: str
    function: str
    signature: str
    stage: Optional[str] = None
    kind: Optional[ViolationKind] = None
    message: Optional[str] = None
    position: Optional[int] = None
    variable: Optional[str] = None
    type_class: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def signed(cls, function: str, signature: str) -> "ContractEvent":
        return cls(CONTRACT_SIGNED, function, signature)

    @classmethod
    def from_violation(
        cls, exc: ContractViolation, function: str, signature: str
    ) -> "ContractEvent":
        # Only some violation kinds define these attributes.
        return cls(
            CONTRACT_VIOLATION,
            function,
            signature,
            stage=exc.stage,
            kind=exc.kind,
            message=exc.message,
            position=getattr(exc, "position", None),
            variable=getattr(exc, "variable", None),
            type_class=getattr(exc, "type_class", None),
        )

    @property
    def is_violation(self) -> bool:
        return self.name == CONTRACT_VIOLATION


class Subscription:
    """Handle returned by :func:`subscribe`; usable as a context manager."""

    def __init__(self, event: str, observer: Observer) -> None:
        self.event = event
        self._observer = observer
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        with _LOCK:
            bucket = _OBSERVERS.get(self.event, [])
            if self._observer in bucket:
                bucket.remove(self._observer)
        self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()


_LOCK = RLock()
_OBSERVERS: dict[str, list[Observer]] = {name: [] for name in EVENTS}
_LOGGER = logger.get_logger("signet.telemetry.hooks")


def subscribe(event: str, observer: Observer) -> Subscription:
    """Call ``observer`` with every :class:`ContractEvent` named ``event``."""

    if event not in EVENTS:
        raise ValueError(f"unknown contract event {event!r}; expected one of {EVENTS}")
    if not callable(observer):
        raise TypeError("observer must be callable")
    with _LOCK:
        _OBSERVERS[event].append(observer)
    return Subscription(event, observer)


def observed(event: str) -> bool:
    with _LOCK:
        return bool(_OBSERVERS.get(event))


def emit(event: ContractEvent) -> None:
    with _LOCK:
        observers = list(_OBSERVERS.get(event.name, ()))
    for observer in observers:
        try:
            observer(event)
        except Exception:
            _LOGGER.exception("observer for %s on %s failed", event.name, event.function)


__all__ = [
    "CONTRACT_SIGNED",
    "CONTRACT_VIOLATION",
    "EVENTS",
    "ContractEvent",
    "Observer",
    "Subscription",
    "emit",
    "observed",
    "subscribe",
]
