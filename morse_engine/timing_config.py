#!/usr/bin/env python3
"""
Timing configuration and the unit-to-signal translation table.

All holds are exact integer multiples of one dot, so the output stays
recognisable at any speed:

    dot hold : dash hold : symbol gap : char gap : word gap = 1 : 3 : 1 : 3 : 5
"""

from dataclasses import dataclass
import math
import threading
from typing import Optional, Tuple
import logging

from . import config
from .timing_units import TimingUnit

logger = logging.getLogger(__name__)

DASH_MULTIPLIER = 3
SYMBOL_GAP_MULTIPLIER = 1
CHAR_GAP_MULTIPLIER = 3
WORD_GAP_MULTIPLIER = 5


@dataclass(frozen=True)
class SignalStep:
    """
    One step of a unit's playback pattern.

    level is True (signal on), False (signal off) or None (no command, hold only).
    """
    level: Optional[bool]
    hold_seconds: float


@dataclass(frozen=True)
class TimingConfig:
    """Immutable timing settings injected into the scheduler"""
    dot_seconds: float = config.DEFAULT_DOT_MS / 1000.0

    def __post_init__(self):
        """Validate timing after initialization"""
        if not isinstance(self.dot_seconds, (int, float)) or isinstance(self.dot_seconds, bool):
            raise ValueError(f"Dot duration must be a number: {self.dot_seconds!r}")
        if not math.isfinite(self.dot_seconds) or self.dot_seconds <= 0:
            raise ValueError(f"Dot duration must be positive and finite: {self.dot_seconds}")
        if self.dot_seconds * WORD_GAP_MULTIPLIER > threading.TIMEOUT_MAX:
            raise ValueError(f"Dot duration too long to wait on: {self.dot_seconds}")

    @classmethod
    def from_milliseconds(cls, dot_ms: float) -> "TimingConfig":
        return cls(dot_seconds=dot_ms / 1000.0)

    @classmethod
    def from_wpm(cls, wpm: float) -> "TimingConfig":
        """Timing for a words-per-minute speed using the PARIS standard word"""
        if not math.isfinite(wpm) or wpm <= 0:
            raise ValueError(f"Words per minute must be positive and finite: {wpm}")
        return cls(dot_seconds=config.PARIS_DOT_SECONDS_PER_WPM / wpm)

    @property
    def dash_seconds(self) -> float:
        return self.dot_seconds * DASH_MULTIPLIER

    @property
    def symbol_gap_seconds(self) -> float:
        return self.dot_seconds * SYMBOL_GAP_MULTIPLIER

    @property
    def char_gap_seconds(self) -> float:
        return self.dot_seconds * CHAR_GAP_MULTIPLIER

    @property
    def word_gap_seconds(self) -> float:
        return self.dot_seconds * WORD_GAP_MULTIPLIER

    @property
    def wpm(self) -> float:
        return config.PARIS_DOT_SECONDS_PER_WPM / self.dot_seconds

    def pattern_for(self, unit: TimingUnit) -> Tuple[SignalStep, ...]:
        """
        Translate a unit into the ordered steps the worker plays.

        Args:
            unit: Unit to translate

        Returns:
            Tuple of SignalStep; empty for TimingUnit.EMPTY
        """
        if unit == TimingUnit.DOT:
            return (SignalStep(True, self.dot_seconds),
                    SignalStep(False, self.symbol_gap_seconds))
        elif unit == TimingUnit.DASH:
            return (SignalStep(True, self.dash_seconds),
                    SignalStep(False, self.symbol_gap_seconds))
        elif unit == TimingUnit.CHAR_BOUNDARY_PAUSE:
            return (SignalStep(None, self.char_gap_seconds),)
        elif unit == TimingUnit.WORD_BOUNDARY_PAUSE:
            return (SignalStep(None, self.word_gap_seconds),)
        elif unit == TimingUnit.EMPTY:
            return ()
        else:
            raise ValueError(f"Unknown timing unit: {unit!r}")

    def unit_duration(self, unit: TimingUnit) -> float:
        """Total wall-clock time one unit occupies"""
        return sum(step.hold_seconds for step in self.pattern_for(unit))
