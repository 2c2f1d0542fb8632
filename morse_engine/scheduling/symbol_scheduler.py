#!/usr/bin/env python3
"""
Asynchronous Morse unit scheduler.

Producers on any thread queue timing units without waiting for playback. A
single playback worker drains the queue strictly in submission order, keys the
signal sink on and off with the configured holds, and hands completion
listeners to a small thread pool so a slow or failing listener never delays
the next unit. When every pool thread is tied up by a blocked listener,
further listeners get a thread of their own instead of waiting in line.
"""

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum, auto
from typing import Optional, Dict, Any, Iterable, List
import logging

from .. import config
from ..interfaces.signal_sink import SignalSink
from ..timing_config import TimingConfig
from ..timing_units import TimingUnit, QueueEntry, CompletionListener, ErrorCallback

logger = logging.getLogger(__name__)

# Queued behind pending entries to make the worker exit
_STOP = object()
# Marks "no unit seen yet" in submit_sequence, since None is a valid unit
_NO_UNIT = object()


class SchedulerState(Enum):
    """Lifecycle states of the playback worker"""
    IDLE = auto()           # Created, worker not started
    RUNNING = auto()        # Worker draining the queue
    STOPPING = auto()       # Stop requested, worker finishing up
    STOPPED = auto()        # Worker exited cleanly, can be restarted
    FAILED = auto()         # Worker died; nothing will play again


class MorseScheduler:
    """
    Ordered, non-blocking scheduler that turns Morse units into timed
    on/off commands for a SignalSink.
    """

    def __init__(self, sink: SignalSink, timing: Optional[TimingConfig] = None,
                 listener_workers: int = config.DEFAULT_LISTENER_WORKERS,
                 autostart: bool = True):
        """
        Args:
            sink: Output that receives on/off commands, only ever called from the worker
            timing: Hold durations; defaults to a 100 ms dot
            listener_workers: Size of the pool that runs completion listeners; listeners
                              beyond this many running at once get an overflow thread
            autostart: Start the playback worker immediately
        """
        if sink is None:
            raise ValueError("MorseScheduler requires a signal sink")
        if listener_workers < 1:
            raise ValueError(f"listener_workers must be at least 1: {listener_workers}")

        self.sink = sink
        self.timing = timing if timing is not None else TimingConfig()
        self._listener_workers = listener_workers

        # Unbounded FIFO shared by producers and the worker
        self._queue: "queue.Queue[Any]" = queue.Queue()
        # Held while inserting so a submit_all batch is never interleaved
        self._submit_lock = threading.Lock()

        # Lifecycle
        self._state = SchedulerState.IDLE
        self._state_lock = threading.RLock()
        self._worker_thread: Optional[threading.Thread] = None
        self._listener_executor: Optional[ThreadPoolExecutor] = None
        self._abort_event = threading.Event()

        # Entries submitted but not yet played, skipped or discarded
        self._outstanding = 0
        self._idle_condition = threading.Condition()

        # Listeners dispatched and not yet returned, across pool and overflow threads
        self._active_listeners = 0
        self._listener_lock = threading.Lock()

        # Only touched by the worker
        self._signal_on = False

        self._stats = {
            "units_submitted": 0,
            "units_played": 0,
            "units_skipped": 0,
            "units_discarded": 0,
            "sink_errors": 0,
            "listeners_dispatched": 0,
            "listener_overflow_threads": 0,
            "listener_errors": 0,
        }
        self._stats_lock = threading.Lock()

        self._error_callbacks: List[ErrorCallback] = []
        self._warned_not_playing = False

        logger.info(f"MorseScheduler initialized (dot={self.timing.dot_seconds * 1000:.1f} ms, "
                    f"listener workers={listener_workers})")

        if autostart:
            self.start()

    # --- Lifecycle ---

    def start(self) -> None:
        """Start the playback worker"""
        with self._state_lock:
            if self._state in (SchedulerState.RUNNING, SchedulerState.STOPPING):
                logger.warning("MorseScheduler already running")
                return
            if self._state == SchedulerState.FAILED:
                logger.error("MorseScheduler: Cannot start, playback worker has failed")
                return

            self._abort_event.clear()
            self._warned_not_playing = False
            self._listener_executor = ThreadPoolExecutor(
                max_workers=self._listener_workers,
                thread_name_prefix="MorseScheduler-Listener"
            )
            self._worker_thread = threading.Thread(
                target=self._playback_loop,
                daemon=True,
                name="MorseScheduler-Playback"
            )
            self._state = SchedulerState.RUNNING
            self._worker_thread.start()

        logger.info("MorseScheduler started")

    def stop(self, drain: bool = True, timeout: Optional[float] = None) -> bool:
        """
        Stop the playback worker.

        Args:
            drain: Play every entry queued before this call, then stop. When False,
                   the unit being played is cut short, the signal is turned off and
                   queued entries are discarded without notifying their listeners.
            timeout: Seconds to wait for the worker to exit (None waits forever)

        Returns:
            True if the worker has exited
        """
        with self._state_lock:
            if self._state != SchedulerState.RUNNING:
                logger.warning(f"MorseScheduler not running (state={self._state.name})")
                return self._worker_thread is None or not self._worker_thread.is_alive()

            self._state = SchedulerState.STOPPING
            if not drain:
                self._abort_event.set()
            self._queue.put(_STOP)
            worker = self._worker_thread

        logger.info(f"MorseScheduler stopping ({'draining queue' if drain else 'discarding queue'})")

        # The worker shuts the listener pool down itself on exit
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=timeout)
            if worker.is_alive():
                logger.warning("MorseScheduler playback worker did not stop within timeout")
                return False

        logger.info("MorseScheduler stopped")
        return True

    def __enter__(self) -> "MorseScheduler":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop(drain=True)

    @property
    def state(self) -> SchedulerState:
        with self._state_lock:
            return self._state

    def is_running(self) -> bool:
        """Check if the playback worker is accepting and playing units"""
        return self.state == SchedulerState.RUNNING

    def register_error_callback(self, callback: ErrorCallback) -> None:
        """Register a callback invoked if the playback worker dies"""
        self._error_callbacks.append(callback)

    # --- Enqueue surface ---

    def submit(self, unit: Optional[TimingUnit], listener: Optional[CompletionListener] = None) -> None:
        """
        Queue one unit. Returns as soon as it is queued.

        Args:
            unit: Unit to play; None is accepted and plays as an empty no-op
            listener: Called with no arguments after this unit has played
        """
        entry = self._make_entry(unit, listener)
        with self._submit_lock:
            self._put_entry(entry)

    def submit_all(self, units: Iterable[Optional[TimingUnit]],
                   listener: Optional[CompletionListener] = None) -> None:
        """
        Queue a batch of units in order, contiguously.

        The listener, if given, is attached to the last unit only. An empty
        batch never calls the listener.
        """
        units = list(units)
        if not units:
            if listener is not None:
                logger.debug("MorseScheduler: Empty batch submitted, listener will not be called")
            return

        last_index = len(units) - 1
        entries = [self._make_entry(unit, listener if i == last_index else None)
                   for i, unit in enumerate(units)]
        with self._submit_lock:
            for entry in entries:
                self._put_entry(entry)

    def submit_sequence(self, units: Iterable[Optional[TimingUnit]],
                        listener: Optional[CompletionListener] = None) -> None:
        """
        Queue units from a lazy, single-pass iterable as they are produced.

        With a listener, one unit of lookahead is held back so the listener can
        be attached to the final unit once the iterable is exhausted. An
        iterable that yields nothing never calls the listener. If the iterable
        raises, the unit held back is still queued (without the listener) and
        the exception propagates.
        """
        if listener is None:
            for unit in units:
                self.submit(unit)
            return

        held = _NO_UNIT
        try:
            for unit in units:
                if held is not _NO_UNIT:
                    self.submit(held)
                held = unit
        except Exception as e:
            if held is not _NO_UNIT:
                self.submit(held)
            logger.error(f"MorseScheduler: Unit sequence failed after partial submission: {e}")
            raise

        if held is _NO_UNIT:
            logger.debug("MorseScheduler: Empty sequence submitted, listener will not be called")
            return
        self.submit(held, listener)

    def _make_entry(self, unit: Any, listener: Any) -> QueueEntry:
        if listener is not None and not callable(listener):
            logger.warning(f"MorseScheduler: Ignoring non-callable listener {listener!r}")
            listener = None
        return QueueEntry(TimingUnit.normalize(unit), listener)

    def _put_entry(self, entry: QueueEntry) -> None:
        """Append one entry; caller holds _submit_lock"""
        with self._idle_condition:
            self._outstanding += 1
        with self._stats_lock:
            self._stats["units_submitted"] += 1
        self._queue.put(entry)

        state = self.state
        if state == SchedulerState.FAILED and not self._warned_not_playing:
            self._warned_not_playing = True
            logger.warning("MorseScheduler: Playback worker has failed, queued units will never play")

    # --- Introspection ---

    def pending_count(self) -> int:
        """Entries submitted but not yet finished, including the one playing"""
        with self._idle_condition:
            return self._outstanding

    def wait_until_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every entry submitted so far has been played.

        Returns:
            True when the queue is empty and nothing is playing; False on timeout
            or when the worker is not running and entries are still pending
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._idle_condition:
            while self._outstanding > 0:
                if self.state not in (SchedulerState.RUNNING, SchedulerState.STOPPING):
                    logger.debug(f"MorseScheduler: wait_until_idle - worker not running, "
                                 f"{self._outstanding} entries pending")
                    return False
                if deadline is None:
                    self._idle_condition.wait()
                else:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        logger.warning(f"MorseScheduler: Wait timeout after {timeout}s with "
                                       f"{self._outstanding} entries pending")
                        return False
                    self._idle_condition.wait(remaining)
            return True

    def get_stats(self) -> Dict[str, Any]:
        """Get scheduler statistics"""
        with self._stats_lock:
            stats = self._stats.copy()
        stats["pending"] = self.pending_count()
        stats["state"] = self.state.name
        return stats

    # --- Playback worker ---

    def _playback_loop(self) -> None:
        logger.info("MorseScheduler playback loop started")
        try:
            while True:
                # Sole suspension point while there is nothing to play
                entry = self._queue.get()
                if entry is _STOP:
                    break

                if self._abort_event.is_set():
                    self._discard_entry(entry)
                else:
                    self._play_entry(entry)
                self._entry_finished()

        except Exception as e:
            self._fail(e)
            return

        if self._signal_on:
            self._send(False)
        # Before STOPPED, so a restart never sees this pool
        self._shutdown_listener_executor()
        with self._state_lock:
            self._state = SchedulerState.STOPPED
        with self._idle_condition:
            self._idle_condition.notify_all()
        logger.info("MorseScheduler playback loop stopped")

    def _play_entry(self, entry: QueueEntry) -> None:
        """Play one entry synchronously, then hand its listener to the pool"""
        steps = self.timing.pattern_for(entry.unit)
        if not steps:
            logger.debug("MorseScheduler: Skipping empty unit")
            with self._stats_lock:
                self._stats["units_skipped"] += 1
        else:
            logger.debug(f"MorseScheduler: Playing {entry.unit.name} "
                         f"({'keyed' if entry.unit.is_keyed else 'silent'}, "
                         f"{self.timing.unit_duration(entry.unit):.3f}s)")
            # Holds are measured from the unit's start so send latency does not accumulate
            deadline = time.monotonic()
            for step in steps:
                if step.level is not None:
                    self._send(step.level)
                deadline += step.hold_seconds
                if self._abort_event.wait(max(0.0, deadline - time.monotonic())):
                    logger.debug(f"MorseScheduler: Aborted {entry.unit.name} mid-pattern")
                    if self._signal_on:
                        self._send(False)
                    self._discard_entry(entry)
                    return
            with self._stats_lock:
                self._stats["units_played"] += 1

        if entry.listener is not None:
            self._dispatch_listener(entry)

    def _discard_entry(self, entry: QueueEntry) -> None:
        logger.debug(f"MorseScheduler: Discarding {entry.unit.name}")
        with self._stats_lock:
            self._stats["units_discarded"] += 1

    def _entry_finished(self) -> None:
        with self._idle_condition:
            self._outstanding -= 1
            if self._outstanding == 0:
                self._idle_condition.notify_all()

    def _send(self, on: bool) -> None:
        """Send one command to the sink; failures are logged and playback continues"""
        self._signal_on = on
        try:
            self.sink.set_signal(on)
        except Exception as e:
            with self._stats_lock:
                self._stats["sink_errors"] += 1
            logger.error(f"MorseScheduler: Sink rejected signal {'on' if on else 'off'} command: {e}")

    def _dispatch_listener(self, entry: QueueEntry) -> None:
        """
        Hand a listener to the pool, or to an overflow thread when every pool
        thread is still busy with an earlier listener.
        """
        with self._listener_lock:
            overflow = self._active_listeners >= self._listener_workers
            self._active_listeners += 1

        try:
            if overflow:
                logger.debug(f"MorseScheduler: Listener pool busy, overflow thread for {entry.unit.name}")
                threading.Thread(
                    target=self._run_listener,
                    args=(entry.listener, entry.unit),
                    daemon=True,
                    name="MorseScheduler-Listener-Overflow"
                ).start()
            else:
                self._listener_executor.submit(self._run_listener, entry.listener, entry.unit)
        except RuntimeError as e:
            # Pool shut down, or no thread could be started
            self._listener_finished()
            logger.error(f"MorseScheduler: Could not dispatch listener for {entry.unit.name}: {e}")
            return

        with self._stats_lock:
            self._stats["listeners_dispatched"] += 1
            if overflow:
                self._stats["listener_overflow_threads"] += 1

    def _run_listener(self, listener: CompletionListener, unit: TimingUnit) -> None:
        """Runs on a pool or overflow thread, never on the playback worker"""
        try:
            listener()
        except Exception as e:
            with self._stats_lock:
                self._stats["listener_errors"] += 1
            logger.error(f"MorseScheduler: Completion listener for {unit.name} raised: {e}", exc_info=True)
        finally:
            self._listener_finished()

    def _listener_finished(self) -> None:
        with self._listener_lock:
            self._active_listeners -= 1

    def _shutdown_listener_executor(self) -> None:
        """Listeners already dispatched still run to completion"""
        if self._listener_executor is not None:
            self._listener_executor.shutdown(wait=False)

    def _fail(self, error: Exception) -> None:
        logger.critical(f"MorseScheduler: Playback worker died, no further units will play: {error}",
                        exc_info=True)
        self._shutdown_listener_executor()
        with self._state_lock:
            self._state = SchedulerState.FAILED
        with self._idle_condition:
            self._idle_condition.notify_all()
        self._notify_error_callbacks(error)

    def _notify_error_callbacks(self, error: Exception) -> None:
        """Notify all error callbacks"""
        for callback in self._error_callbacks:
            try:
                callback(error)
            except Exception as e:
                logger.error(f"Error in error callback: {e}")
