# morse-signal-engine/morse_engine/__init__.py

from .timing_units import TimingUnit, QueueEntry, CompletionListener
from .timing_config import TimingConfig, SignalStep
from .interfaces import SignalSink
from .scheduling import MorseScheduler, SchedulerState
from .errors import MorseEngineError, SignalSinkError, SinkUnavailableError

__all__ = [
    'TimingUnit', 'QueueEntry', 'CompletionListener',
    'TimingConfig', 'SignalStep',
    'SignalSink',
    'MorseScheduler', 'SchedulerState',
    'MorseEngineError', 'SignalSinkError', 'SinkUnavailableError'
]
