"""
Scheduling package for the Morse signal engine.
Contains the ordered playback scheduler and its lifecycle states.
"""

from .symbol_scheduler import MorseScheduler, SchedulerState

__all__ = [
    'MorseScheduler',
    'SchedulerState'
]
