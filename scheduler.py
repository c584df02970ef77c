"""Batch fetch scheduler.

Walks a cursor over the catalog in fixed-size windows. Each cycle claims
the window's output files, sends one bulk query for the survivors and
demultiplexes the response into the claimed files. Cycles repeat on a fixed
timer until a stop is requested.
"""

from __future__ import annotations

import logging
import queue
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Sequence

from claim_store import SinkMap
from demux import split_response
from models import (
    CatalogRow,
    ClaimStatus,
    CycleResult,
    CycleStatus,
    FetchWindow,
    SchedulerState,
)
from query_builder import build_tle_query

# Spacing between batch requests so we don't hammer Space-Track.
TICK_INTERVAL_SECONDS = 500

LOGGER = logging.getLogger(__name__)


class _Event(Enum):
    TICK = "tick"
    STOP = "stop"


class BatchScheduler:
    """Drives batch cycles over ``rows``, one at a time, on the calling thread.

    Args:
        rows: Ordered catalog rows. Referenced, never modified.
        output_dir: Directory holding one ``<norad_id>.tle`` file per object.
        batch_size: Rows per window; the cursor advances by this much per cycle.
        transport: Callable taking a query string and returning the raw
            response text. Failures must raise.
        api_root: Base URL the TLE query path is appended to.
        interval: Seconds between timer ticks.
    """

    def __init__(
        self,
        rows: Sequence[CatalogRow],
        output_dir: str | Path,
        batch_size: int,
        transport: Callable[[str], str],
        api_root: str,
        interval: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self._rows = rows
        self._output_dir = Path(output_dir)
        self._batch_size = batch_size
        self._transport = transport
        self._api_root = api_root
        self._interval = interval

        self._cursor = 0
        self._state = SchedulerState.IDLE
        self._events: queue.SimpleQueue[_Event] = queue.SimpleQueue()
        self._timer_stop = threading.Event()
        self._tick_pending = threading.Event()
        self._stop_requested = threading.Event()
        self._timer_thread: threading.Thread | None = None

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> SchedulerState:
        return self._state

    def window(self) -> FetchWindow:
        """Window at the current cursor, clamped to the catalog length."""
        start = min(self._cursor, len(self._rows))
        return FetchWindow(start=start, stop=min(start + self._batch_size, len(self._rows)))

    def run_cycle(self) -> CycleResult:
        """Run one claim -> query -> fetch -> demultiplex cycle and advance the cursor.

        Any FetchError propagates; claimed sinks are released either way.
        The cursor is only advanced when the cycle completes.
        """
        window = self.window()
        result = CycleResult(status=CycleStatus.EMPTY, window=window)

        with SinkMap(self._output_dir) as sinks:
            for row in self._rows[window.start:window.stop]:
                if sinks.claim(row.norad_id) is ClaimStatus.CLAIMED:
                    result.claimed.append(row.norad_id)
                else:
                    result.skipped.append(row.norad_id)

            if len(sinks) == 0:
                LOGGER.info(
                    "Nothing to fetch in rows %s-%s (skipped=%s)",
                    window.start,
                    window.stop,
                    len(result.skipped),
                )
            else:
                result.query = build_tle_query(sinks.ids, self._api_root)
                raw = self._transport(result.query)
                result.demux = split_response(raw, sinks)
                result.status = CycleStatus.FETCHED
                LOGGER.info(
                    "Cycle rows %s-%s: claimed=%s skipped=%s written=%s dropped=%s",
                    window.start,
                    window.stop,
                    len(result.claimed),
                    len(result.skipped),
                    result.demux.lines_written,
                    result.demux.lines_dropped,
                )

        self._cursor += self._batch_size
        return result

    def request_stop(self) -> None:
        """Ask the loop to stop after the current cycle. Safe from signal handlers.

        It wins over ticks already queued ahead of it.
        """
        self._stop_requested.set()
        self._events.put(_Event.STOP)

    def run(self) -> None:
        """Run one cycle now, then one per timer tick until request_stop().

        A stop requested before run() means no cycle runs at all. A FetchError
        from any cycle stops the timer and propagates.
        """
        self._start_timer()
        try:
            while not self._stop_requested.is_set():
                self._cycle()
                if self._events.get() is _Event.TICK:
                    self._tick_pending.clear()
            LOGGER.info("Stop requested; cursor at %s", self._cursor)
        finally:
            self._stop_timer()
            self._state = SchedulerState.STOPPED

    def _cycle(self) -> None:
        self._state = SchedulerState.CYCLING
        try:
            self.run_cycle()
        finally:
            self._state = SchedulerState.IDLE

    def _start_timer(self) -> None:
        self._timer_stop.clear()
        self._timer_thread = threading.Thread(
            target=self._timer_loop, name="satfetch-timer", daemon=True
        )
        self._timer_thread.start()

    def _stop_timer(self) -> None:
        self._timer_stop.set()
        if self._timer_thread is not None:
            self._timer_thread.join()
            self._timer_thread = None

    def _timer_loop(self) -> None:
        # At most one tick is pending; ticks that fire during a long cycle coalesce.
        while not self._timer_stop.wait(self._interval):
            if not self._tick_pending.is_set():
                self._tick_pending.set()
                self._events.put(_Event.TICK)
