"""run_timer.py – Fixed-length run clock driven by simulated milliseconds."""

from __future__ import annotations

from settings import RUN_DURATION
from utils.events import EventEmitter


class RunTimer(EventEmitter):
    """Counts elapsed run time in seconds.

    Events:
        complete() – once, when elapsed time reaches the duration
    """

    def __init__(self, duration: float = RUN_DURATION):
        super().__init__()
        self.duration = duration
        self.elapsed_time = 0.0
        self.is_complete = False

    def start(self):
        self.elapsed_time = 0.0
        self.is_complete = False

    def update(self, dt: float):
        if self.is_complete:
            return
        self.elapsed_time += dt / 1000.0
        if self.elapsed_time >= self.duration:
            self.elapsed_time = self.duration
            self.is_complete = True
            self.emit("complete")

    @property
    def remaining_time(self) -> float:
        return max(0.0, self.duration - self.elapsed_time)
