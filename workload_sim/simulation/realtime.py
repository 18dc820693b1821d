"""
Real-time Driver

Pumps a scheduler's simulated clock from wall-clock time in a background
thread and hands a frame to an optional renderer after every step. Pacing is
best effort: a slow renderer delays frames, it never changes the run.
"""

import logging
import threading
import time
from typing import Callable, Optional

from .scheduler import FrameSnapshot, SchedulerStatus, SimulationScheduler

logger = logging.getLogger(__name__)


class RealtimeDriver:
    """Keeps `scheduler.now` in step with elapsed wall-clock milliseconds."""

    def __init__(
        self,
        scheduler: SimulationScheduler,
        on_frame: Optional[Callable[[FrameSnapshot], None]] = None,
        frame_interval_ms: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.scheduler = scheduler
        self.on_frame = on_frame
        self.frame_interval_ms = frame_interval_ms or scheduler.settings.frame_interval_ms
        self._clock = clock
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="workload-sim-driver", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None

    def pump(self, elapsed_ms: float, sim_start: float) -> FrameSnapshot:
        """Advance to `sim_start + elapsed_ms` and return the new frame."""
        self.scheduler.advance_to(sim_start + elapsed_ms)
        frame = self.scheduler.frame()
        if self.on_frame is not None:
            self.on_frame(frame)
        return frame

    def run_until_idle(self, timeout: Optional[float] = None, poll_interval: float = 0.05) -> bool:
        """
        Block until the run completes and its last workload is gone.

        Returns False if `timeout` seconds pass first or the driver stops.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while self.is_running:
            frame = self.scheduler.frame()
            settled = frame.status in (SchedulerStatus.COMPLETED, SchedulerStatus.IDLE)
            if settled and not frame.workloads:
                return True
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(poll_interval)
        return False

    def _loop(self) -> None:
        wall_start = self._clock()
        sim_start = self.scheduler.now
        logger.debug("Real-time driver started at %.1f ms", sim_start)

        while not self._stop.is_set():
            elapsed_ms = (self._clock() - wall_start) * 1000.0
            self.pump(elapsed_ms, sim_start)
            self._stop.wait(self.frame_interval_ms / 1000.0)

        logger.debug("Real-time driver stopped at %.1f ms", self.scheduler.now)
