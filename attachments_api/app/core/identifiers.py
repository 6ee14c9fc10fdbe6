"""
Time ordered identifiers for comments.

An identifier is 20 characters long: 8 characters encode the creation
time in milliseconds and 12 characters are random.  The alphabet is
sorted by ASCII value, so identifiers compare in creation order.  When
several identifiers are generated within the same millisecond the random
part of the previous one is incremented instead of drawn again, which
keeps them ordered and unique inside one process.
"""

import secrets
import threading
import time
from typing import Callable, List


PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
TIME_CHARS = 8
RANDOM_CHARS = 12


class IdGenerator:
    """Thread safe generator of time ordered identifiers."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_random: List[int] = []

    def new_id(self) -> str:
        with self._lock:
            now_ms = int(self._clock() * 1000)
            if now_ms == self._last_ms:
                self._increment_random()
            else:
                self._last_ms = now_ms
                self._last_random = [secrets.randbelow(64) for _ in range(RANDOM_CHARS)]

            time_part = []
            remaining = now_ms
            for _ in range(TIME_CHARS):
                time_part.append(PUSH_CHARS[remaining % 64])
                remaining //= 64
            time_part.reverse()

            return "".join(time_part) + "".join(PUSH_CHARS[n] for n in self._last_random)

    def _increment_random(self) -> None:
        for i in range(RANDOM_CHARS - 1, -1, -1):
            if self._last_random[i] != 63:
                self._last_random[i] += 1
                return
            self._last_random[i] = 0


_generator = IdGenerator()


def new_comment_id() -> str:
    """Return a fresh identifier from the process wide generator."""
    return _generator.new_id()
