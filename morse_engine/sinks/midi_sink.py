"""
MIDI signal sink.

Keys a single sustained note on and off through a mido output port. The note
is released with a low-velocity note_on rather than note_off, which keeps
receivers that ignore note_off from leaving the tone stuck on.
"""

from typing import Optional
import logging

import mido

from .. import config
from ..errors import SignalSinkError, SinkUnavailableError
from ..interfaces.signal_sink import SignalSink

logger = logging.getLogger(__name__)

class MidiSignalSink(SignalSink):
    """Signal sink driving one note on a MIDI output port"""

    def __init__(self, port, note: int = config.DEFAULT_MIDI_NOTE,
                 channel: int = config.DEFAULT_MIDI_CHANNEL):
        """
        Args:
            port: Open mido output port (anything with send(message))
            note: MIDI note number to key
            channel: MIDI channel, 0-15
        """
        if not 0 <= note <= 127:
            raise ValueError(f"MIDI note must be 0-127: {note}")
        if not 0 <= channel <= 15:
            raise ValueError(f"MIDI channel must be 0-15: {channel}")

        self.port = port
        self.note = note
        self.channel = channel
        self._on_message = mido.Message('note_on', channel=channel, note=note,
                                        velocity=config.MIDI_ON_VELOCITY)
        self._off_message = mido.Message('note_on', channel=channel, note=note,
                                         velocity=config.MIDI_OFF_VELOCITY)

    def set_signal(self, on: bool) -> None:
        message = self._on_message if on else self._off_message
        try:
            self.port.send(message)
        except Exception as e:
            raise SignalSinkError(f"MIDI port rejected {message}: {e}") from e

    def set_program(self, program: int) -> None:
        """Select the instrument on this sink's channel"""
        try:
            self.port.send(mido.Message('program_change', channel=self.channel, program=program))
        except Exception as e:
            raise SignalSinkError(f"Could not select MIDI program {program}: {e}") from e

    def close(self) -> None:
        close = getattr(self.port, 'close', None)
        if close is not None:
            close()
            logger.debug("MidiSignalSink: Port closed")


def open_default_midi_sink(port_name: Optional[str] = None,
                           note: int = config.DEFAULT_MIDI_NOTE,
                           channel: int = config.DEFAULT_MIDI_CHANNEL,
                           program: int = config.DEFAULT_MIDI_PROGRAM) -> MidiSignalSink:
    """
    Open a MIDI output port and prepare it for Morse keying.

    Selects a non-decaying instrument so a held note does not fade before it
    is released. If that selection fails the sink is still returned.

    Args:
        port_name: Output port to open; None picks the backend's default

    Raises:
        SinkUnavailableError: if no output port could be opened
    """
    try:
        port = mido.open_output(port_name)
    except Exception as e:
        raise SinkUnavailableError(f"Could not open MIDI output {port_name or '(default)'}: {e}") from e

    logger.info(f"MidiSignalSink: Opened MIDI output '{getattr(port, 'name', port_name)}'")
    sink = MidiSignalSink(port, note=note, channel=channel)
    try:
        sink.set_program(program)
    except SignalSinkError as e:
        logger.error(f"MidiSignalSink: Could not set up instrument: {e}")
    return sink
