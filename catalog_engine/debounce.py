import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_WAIT = 0.3


class Debouncer(Generic[T]):
    """
    Collapses a burst of submissions into one.

    submit() records the latest value; ready() hands it back once `wait`
    seconds have passed with no newer submission, then forgets it.
    """
    def __init__(self, wait: float = DEFAULT_WAIT, clock: Callable[[], float] = time.monotonic):
        if wait < 0:
            raise ValueError("wait must be >= 0")
        self.wait = wait
        self._clock = clock
        self._pending: Optional[T] = None
        self._has_pending = False
        self._last = 0.0

    def submit(self, value: T, now: Optional[float] = None) -> None:
        self._pending = value
        self._has_pending = True
        self._last = self._clock() if now is None else now

    @property
    def pending(self) -> bool:
        return self._has_pending

    def ready(self, now: Optional[float] = None) -> Optional[T]:
        if not self._has_pending:
            return None
        now = self._clock() if now is None else now
        if now - self._last < self.wait:
            return None
        value = self._pending
        self._pending = None
        self._has_pending = False
        return value
