# morse-signal-engine/morse_engine/config.py

import logging
logger = logging.getLogger(__name__)

# --- Timing ---
# Base unit every other hold derives from (dash = 3, gap = 1, char gap = 3, word gap = 5)
DEFAULT_DOT_MS = 100

# Words-per-minute conversion uses the PARIS standard word (50 dot units)
PARIS_DOT_SECONDS_PER_WPM = 1.2

# --- Listener dispatch ---
# Completion listeners run on a small pool so a slow one never holds up playback;
# listeners past this many running at once each get an overflow thread
DEFAULT_LISTENER_WORKERS = 4

# --- MIDI sink ---
DEFAULT_MIDI_NOTE = 80
DEFAULT_MIDI_CHANNEL = 0
# General MIDI program 0 (acoustic grand) sustains until note off instead of fading
DEFAULT_MIDI_PROGRAM = 0
MIDI_ON_VELOCITY = 93
MIDI_OFF_VELOCITY = 1

# --- Tone sink ---
DEFAULT_TONE_FREQUENCY_HZ = 600.0
DEFAULT_SAMPLE_RATE = 44100
DEFAULT_TONE_AMPLITUDE = 0.3
# Linear attack/release on every transition, keeps key clicks out of the output
TONE_RAMP_MS = 5.0
TONE_BLOCKSIZE = 256


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    logger.info(f"Dot duration: {DEFAULT_DOT_MS} ms")
    logger.info(f"Listener workers: {DEFAULT_LISTENER_WORKERS}")
    logger.info(f"MIDI note/channel/program: {DEFAULT_MIDI_NOTE}/{DEFAULT_MIDI_CHANNEL}/{DEFAULT_MIDI_PROGRAM}")
    logger.info(f"Tone: {DEFAULT_TONE_FREQUENCY_HZ} Hz @ {DEFAULT_SAMPLE_RATE} Hz, amplitude {DEFAULT_TONE_AMPLITUDE}")
