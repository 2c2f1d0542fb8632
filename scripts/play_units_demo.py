"""Demonstration script for the Morse unit scheduler.

Queues "SOS" twice from two producer threads and logs when each copy has
finished playing. Plays through the sound card by default; pass --midi to
key the default MIDI output instead, or --dry-run to only log the commands.
"""

import argparse
import logging
import threading

from morse_engine import MorseScheduler, TimingConfig, TimingUnit
from morse_engine.sinks import RecordingSignalSink, ToneSignalSink, open_default_midi_sink

D, S, C, W = TimingUnit.DOT, TimingUnit.DASH, TimingUnit.CHAR_BOUNDARY_PAUSE, TimingUnit.WORD_BOUNDARY_PAUSE
SOS = [D, D, D, C, S, S, S, C, D, D, D, W]


def setup_logging(log_level_str='INFO'):
    """Set up logging with specified level"""
    log_level = getattr(logging, log_level_str.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Play SOS through a Morse signal sink")
    parser.add_argument("--wpm", type=float, default=12, help="Keying speed in words per minute (default: 12)")
    parser.add_argument("--midi", action='store_true', help="Key the default MIDI output instead of a tone")
    parser.add_argument("--dry-run", action='store_true', help="Record commands without any output device")
    parser.add_argument("--log-level", choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default='INFO')
    args = parser.parse_args()

    logger = setup_logging(args.log_level)

    if args.dry_run:
        sink = RecordingSignalSink()
    elif args.midi:
        sink = open_default_midi_sink()
    else:
        sink = ToneSignalSink()
        sink.start()

    try:
        timing = TimingConfig.from_wpm(args.wpm)
        sos_seconds = sum(timing.unit_duration(unit) for unit in SOS)
        logger.info(f"Playing SOS twice at {timing.wpm:.0f} wpm, {sos_seconds:.2f}s per copy")
        with MorseScheduler(sink, timing) as scheduler:
            producers = [
                threading.Thread(target=scheduler.submit_all,
                                 args=(SOS, lambda n=n: logger.info(f"SOS #{n} finished")))
                for n in (1, 2)
            ]
            for producer in producers:
                producer.start()
            for producer in producers:
                producer.join()
            scheduler.wait_until_idle()
            logger.info(f"Stats: {scheduler.get_stats()}")
    finally:
        sink.close()

    if args.dry_run:
        for command in sink.commands:
            logger.info(f"{command.timestamp:.3f} {'ON' if command.on else 'off'}")


if __name__ == "__main__":
    main()
