#!/usr/bin/env python3
"""
Core unit and entry types for the Morse signal engine.
A unit is one symbolic timing token; an entry pairs it with an optional
completion listener as it sits in the playback queue.
"""

from dataclasses import dataclass
from typing import Optional, Callable, Any, Protocol
from enum import Enum
import logging

logger = logging.getLogger(__name__)

class TimingUnit(Enum):
    """Symbols of the Morse alphabet as timing tokens"""
    DOT = "."
    DASH = "-"
    CHAR_BOUNDARY_PAUSE = " "
    WORD_BOUNDARY_PAUSE = "/"
    EMPTY = ""                        # No-op: no command, no hold

    @property
    def is_keyed(self) -> bool:
        """True for units that turn the signal on"""
        return self in (TimingUnit.DOT, TimingUnit.DASH)

    @classmethod
    def normalize(cls, unit: Any) -> "TimingUnit":
        """
        Map whatever a producer handed in onto a playable unit.

        None and anything that is not a TimingUnit become EMPTY, so the
        worker skips them without a special case.
        """
        if isinstance(unit, cls):
            return unit
        if unit is not None:
            logger.warning(f"TimingUnit: Ignoring non-unit value {unit!r}, playing it as EMPTY")
        return cls.EMPTY


class CompletionListener(Protocol):
    """Protocol for completion listeners"""
    def __call__(self) -> Any:
        """Called once the unit it is attached to has finished playing"""
        ...


@dataclass(frozen=True)
class QueueEntry:
    """One queued unit and the listener (if any) to notify after it plays"""
    unit: TimingUnit
    listener: Optional[CompletionListener] = None

    def __post_init__(self):
        if not isinstance(self.unit, TimingUnit):
            raise ValueError(f"QueueEntry unit must be a TimingUnit: {self.unit!r}")
        if self.listener is not None and not callable(self.listener):
            raise ValueError(f"QueueEntry listener must be callable: {self.listener!r}")


# Type aliases for cleaner code
ErrorCallback = Callable[[BaseException], None]
