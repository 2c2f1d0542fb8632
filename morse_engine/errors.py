"""
Exception types raised by the Morse signal engine.

Producers never see these from the submit calls; they surface from sink
adapters and are logged by the playback worker.
"""


class MorseEngineError(Exception):
    """Base class for engine errors"""


class SignalSinkError(MorseEngineError):
    """A sink rejected or failed to deliver an on/off command"""


class SinkUnavailableError(MorseEngineError):
    """The output device behind a sink could not be opened"""
