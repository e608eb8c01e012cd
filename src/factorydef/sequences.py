"""Monotonic value sequences for unique attribute values."""

import logging
import threading
from typing import Any, Callable, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class Sequence:
    """
    Lazy, infinite series of formatted values driven by an integer counter.

    Each call to next() formats the current counter with the block and then
    advances the counter, so values are never reused. The counter is guarded
    by a lock so that builds running on several threads still get distinct
    values.

    Args:
        name: Sequence name
        start: First counter value (defaults to 1)
        block: Formatter called with the counter; the raw counter is returned
            when omitted
        aliases: Extra names the sequence answers to

    Example:
        >>> email = Sequence("email", block=lambda n: f"person{n}@example.com")
        >>> email.next()
        'person1@example.com'
    """

    def __init__(
        self,
        name: str,
        start: int = 1,
        block: Optional[Callable[[int], Any]] = None,
        aliases: Iterable[str] = (),
    ):
        self.name = str(name)
        self.aliases: Tuple[str, ...] = tuple(str(alias) for alias in aliases)
        self._start = start
        self._value = start
        self._block = block
        self._lock = threading.Lock()

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name,) + self.aliases

    def next(self) -> Any:
        with self._lock:
            value = self._value
            self._value += 1
            # Formatting inside the lock keeps increment-and-format atomic.
            return self._block(value) if self._block is not None else value

    def rewind(self) -> None:
        """Restart the counter at its starting value."""
        with self._lock:
            self._value = self._start
        logger.debug(f"Rewound sequence '{self.name}' to {self._start}")

    def __iter__(self):
        return self

    def __next__(self) -> Any:
        return self.next()

    def __repr__(self):
        return f"Sequence({self.name!r}, next={self._value})"
