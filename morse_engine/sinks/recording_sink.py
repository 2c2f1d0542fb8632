"""
In-memory signal sink.
Records every command with a monotonic timestamp; used for dry runs and tests.
"""

import threading
import time
from dataclasses import dataclass
from typing import List, Optional
import logging

from ..interfaces.signal_sink import SignalSink

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class SignalCommand:
    """A command as the sink received it"""
    timestamp: float
    on: bool


class RecordingSignalSink(SignalSink):
    """Thread-safe trace of on/off commands"""

    def __init__(self):
        self._commands: List[SignalCommand] = []
        self._condition = threading.Condition()
        self.closed = False

    def set_signal(self, on: bool) -> None:
        with self._condition:
            self._commands.append(SignalCommand(time.monotonic(), bool(on)))
            self._condition.notify_all()
        logger.debug(f"RecordingSignalSink: signal {'on' if on else 'off'}")

    def close(self) -> None:
        self.closed = True

    @property
    def commands(self) -> List[SignalCommand]:
        with self._condition:
            return list(self._commands)

    @property
    def levels(self) -> List[bool]:
        return [command.on for command in self.commands]

    def wait_for_commands(self, count: int, timeout: Optional[float] = None) -> bool:
        """
        Block until at least count commands have been recorded.

        Returns:
            False if the timeout expired first
        """
        with self._condition:
            return self._condition.wait_for(lambda: len(self._commands) >= count, timeout=timeout)

    def clear(self) -> None:
        with self._condition:
            self._commands.clear()
