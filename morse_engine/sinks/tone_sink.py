# Audio tone sink for morse-signal-engine
# Gates a sine tone through a sounddevice output stream

import logging

import numpy as np

from .. import config
from ..errors import SinkUnavailableError
from ..interfaces.signal_sink import SignalSink

logger = logging.getLogger(__name__)

class ToneSignalSink(SignalSink):
    """
    Sidetone-style sink: set_signal only flips a target gain, the audio
    callback renders the sine and ramps towards that gain sample by sample.
    """

    def __init__(self, frequency: float = config.DEFAULT_TONE_FREQUENCY_HZ,
                 sample_rate: int = config.DEFAULT_SAMPLE_RATE,
                 amplitude: float = config.DEFAULT_TONE_AMPLITUDE,
                 ramp_ms: float = config.TONE_RAMP_MS,
                 blocksize: int = config.TONE_BLOCKSIZE,
                 device=None):
        if frequency <= 0 or frequency >= sample_rate / 2:
            raise ValueError(f"Tone frequency must be between 0 and Nyquist: {frequency}")
        if not 0.0 < amplitude <= 1.0:
            raise ValueError(f"Amplitude must be in (0, 1]: {amplitude}")
        if ramp_ms < 0:
            raise ValueError(f"Ramp duration cannot be negative: {ramp_ms}")

        self.frequency = frequency
        self.sample_rate = sample_rate
        self.amplitude = amplitude
        self.blocksize = blocksize
        self.device = device

        # Written by the scheduler worker, read by the audio callback
        self._target_gain = 0.0

        # Audio callback state (only accessed by the callback / render)
        self._gain = 0.0
        self._phase = 0.0
        self._phase_increment = 2.0 * np.pi * frequency / sample_rate
        ramp_samples = int(sample_rate * ramp_ms / 1000.0)
        self._ramp_step = 1.0 / ramp_samples if ramp_samples > 0 else 1.0

        self._stream = None

    def start(self) -> None:
        """Open and start the output stream"""
        if self._stream is not None:
            logger.warning("ToneSignalSink already started")
            return
        try:
            import sounddevice as sd
            stream = sd.OutputStream(
                samplerate=self.sample_rate, channels=1, dtype='float32',
                callback=self._sd_callback,
                blocksize=self.blocksize,
                device=self.device  # None uses the default device
            )
            stream.start()
        except Exception as e:
            raise SinkUnavailableError(f"Could not open audio output: {e}") from e

        self._stream = stream
        logger.info(f"ToneSignalSink: Started {self.frequency:.0f} Hz tone stream at {self.sample_rate} Hz")

    def set_signal(self, on: bool) -> None:
        self._target_gain = 1.0 if on else 0.0

    @property
    def is_keyed(self) -> bool:
        return self._target_gain > 0.0

    def render(self, frames: int) -> np.ndarray:
        """
        Produce the next block of mono samples.

        Returns:
            float32 array of shape (frames,)
        """
        target = self._target_gain
        if self._gain == target:
            envelope = np.full(frames, self._gain, dtype=np.float64)
        else:
            steps = np.arange(1, frames + 1) * self._ramp_step
            if target > self._gain:
                envelope = np.minimum(self._gain + steps, target)
            else:
                envelope = np.maximum(self._gain - steps, target)
        self._gain = float(envelope[-1]) if frames else self._gain

        phases = self._phase + self._phase_increment * np.arange(frames)
        self._phase = (self._phase + self._phase_increment * frames) % (2.0 * np.pi)

        return (self.amplitude * envelope * np.sin(phases)).astype(np.float32)

    def _sd_callback(self, outdata: np.ndarray, frames: int, time_info, status) -> None:
        """Audio callback - never blocks"""
        if status:
            logger.debug(f"ToneSignalSink: Stream status {status}")
        outdata[:, 0] = self.render(frames)

    def close(self) -> None:
        self._target_gain = 0.0
        if self._stream is None:
            return
        try:
            self._stream.stop(ignore_errors=True)
            self._stream.close(ignore_errors=True)
        finally:
            self._stream = None
        logger.info("ToneSignalSink: Stream closed")

    def __enter__(self) -> "ToneSignalSink":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
