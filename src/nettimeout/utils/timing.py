"""utils/timing.py

Timeouts configuration and deadline arithmetic.
"""

import time
from dataclasses import dataclass
from typing import Optional


def now() -> float:
    """
    Current instant on the clock deadlines are measured against.
    Monotonic seconds, not epoch time.
    """
    return time.monotonic()


def deadline_after(timeout: Optional[float]) -> Optional[float]:
    """
    Absolute deadline ``timeout`` seconds from now.

    ``None`` means no deadline. Zero or negative values are not rejected:
    they yield an instant that has already passed.
    """
    if timeout is None:
        return None
    return now() + timeout


def remaining(deadline: Optional[float]) -> Optional[float]:
    """Seconds left until ``deadline`` (may be negative), or None."""
    if deadline is None:
        return None
    return deadline - now()


@dataclass(frozen=True)
class Timeouts:
    """
    Per-operation timeout configuration.

    Attributes:
        read: Maximum time a single read may take.
        write: Maximum time a single write may take.
    """

    read: Optional[float] = None
    write: Optional[float] = None

    @classmethod
    def from_float(cls, timeout: Optional[float]) -> "Timeouts":
        """Create a Timeouts instance using the same value for both directions."""
        return cls(read=timeout, write=timeout)
