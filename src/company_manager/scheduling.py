"""
Delayed callbacks for the form's post-submit navigation.

``TimerScheduler`` runs callbacks on a ``threading.Timer``.
``DeferredScheduler`` only records them; the web layer turns the pending
navigation into a timed client-side redirect, and tests fire them by hand.
"""

import logging
import threading
from typing import Callable, List, Protocol

logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    delay: float

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def schedule(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


class TimerTask:
    """A callback running on its own timer thread."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self._timer = threading.Timer(delay, callback)
        self._timer.daemon = True

    def start(self) -> None:
        self._timer.start()

    def cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler:
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerTask:
        task = TimerTask(delay, callback)
        task.start()
        return task


class DeferredTask:
    """A recorded callback that fires only when asked to."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> bool:
        """Run the callback unless cancelled or already run."""
        if self.cancelled or self.fired:
            return False
        self.fired = True
        self.callback()
        return True


class DeferredScheduler:
    def __init__(self) -> None:
        self.tasks: List[DeferredTask] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> DeferredTask:
        task = DeferredTask(delay, callback)
        self.tasks.append(task)
        return task

    def run_pending(self) -> int:
        """Fire every live task; returns how many ran."""
        ran = 0
        for task in list(self.tasks):
            if task.fire():
                ran += 1
        self.tasks = [t for t in self.tasks if not (t.fired or t.cancelled)]
        return ran
