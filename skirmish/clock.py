"""
Logical clock for paced steps.

The enemy phase is spread over scheduled steps so a viewer can follow it.
Time here is a counter advanced by the caller, never the wall clock, so
tests step through a turn deterministically.
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(order=True)
class ScheduledStep:
    due_ms: int
    seq: int
    label: str = field(compare=False)
    callback: Callable[[], None] = field(compare=False)


class Scheduler:
    """Single execution queue ordered by due time, FIFO on ties."""

    def __init__(self):
        self.now_ms = 0
        self._queue: list[ScheduledStep] = []
        self._seq = itertools.count()

    def schedule(self, delay_ms: int, callback: Callable[[], None], label: str = "") -> ScheduledStep:
        if delay_ms < 0:
            raise ValueError(f"delay must be non-negative, got {delay_ms}")
        step = ScheduledStep(self.now_ms + delay_ms, next(self._seq), label, callback)
        heapq.heappush(self._queue, step)
        return step

    def pending(self) -> int:
        return len(self._queue)

    def advance(self, ms: int) -> int:
        """Move time forward, running every step that falls due. Returns steps run."""
        target = self.now_ms + ms
        ran = 0
        while self._queue and self._queue[0].due_ms <= target:
            step = heapq.heappop(self._queue)
            self.now_ms = step.due_ms
            logger.debug(f"t={self.now_ms}ms running {step.label or 'step'}")
            step.callback()
            ran += 1
        self.now_ms = target
        return ran

    def run_until_idle(self) -> int:
        """Run steps (including ones scheduled along the way) until the queue drains."""
        ran = 0
        while self._queue:
            ran += self.advance(self._queue[0].due_ms - self.now_ms)
        return ran
