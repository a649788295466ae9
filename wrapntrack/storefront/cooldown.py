# wrapntrack/storefront/cooldown.py
import math
import time
from typing import Callable


class Cooldown:
    """
    Single cancellable countdown.

    start() (re)arms the deadline, replacing any running countdown;
    cancel() disarms it. `remaining` is the whole number of seconds
    left, suitable for a "Resend in 12s" label.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self.clock = clock
        self._deadline: float | None = None

    def start(self) -> None:
        self._deadline = self.clock() + self.seconds

    def cancel(self) -> None:
        self._deadline = None

    @property
    def is_active(self) -> bool:
        if self._deadline is None:
            return False
        if self.clock() >= self._deadline:
            self._deadline = None
            return False
        return True

    @property
    def remaining(self) -> int:
        if not self.is_active:
            return 0
        return math.ceil(self._deadline - self.clock())
