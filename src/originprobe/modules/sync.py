"""Lock-protected primitives shared across probe workers.

Workers are asyncio tasks, but the primitives take a real lock so the same
objects stay correct when driven from threads (and can be tested that way).
"""

import threading


class OneShotLatch:
    """A flag that can be set exactly once.

    ``trigger()`` returns True only for the caller that moved the latch from
    unset to set, so racing callers can tell who won.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._set = False

    def trigger(self) -> bool:
        with self._lock:
            if self._set:
                return False
            self._set = True
            return True

    def is_set(self) -> bool:
        return self._set

    def __bool__(self) -> bool:
        return self._set


class AtomicCounter:
    """Integer counter with serialized increments."""

    def __init__(self, initial: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = initial

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        return self._value


class InFlightGauge:
    """Tracks concurrently running probes and the highest level reached."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current = 0
        self._peak = 0

    def enter(self) -> int:
        with self._lock:
            self._current += 1
            if self._current > self._peak:
                self._peak = self._current
            return self._current

    def exit(self) -> int:
        with self._lock:
            self._current -= 1
            return self._current

    @property
    def current(self) -> int:
        return self._current

    @property
    def peak(self) -> int:
        return self._peak
