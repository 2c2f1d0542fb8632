"""
Interfaces package for the Morse signal engine.
Contains abstract base classes that define contracts for output devices.
"""

from .signal_sink import SignalSink

__all__ = [
    'SignalSink'
]
