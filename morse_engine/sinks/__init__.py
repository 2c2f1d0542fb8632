"""
Signal sink adapters for the Morse signal engine.
"""

from .recording_sink import RecordingSignalSink, SignalCommand
from .midi_sink import MidiSignalSink, open_default_midi_sink
from .tone_sink import ToneSignalSink

__all__ = [
    'RecordingSignalSink',
    'SignalCommand',
    'MidiSignalSink',
    'open_default_midi_sink',
    'ToneSignalSink'
]
