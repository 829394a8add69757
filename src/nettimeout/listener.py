"""src/nettimeout/listener.py

Listener decorator producing TimedConnection objects, and the
listen_timed factory.
"""

import logging
from typing import Any, Optional

from nettimeout.connection import TimedConnection
from nettimeout.transport.interfaces import Listener
from nettimeout.transport.sockets import listen
from nettimeout.utils.timing import Timeouts

__all__ = ["TimedListener", "listen_timed"]

logger = logging.getLogger(__name__)


class TimedListener:
    """
    Wraps a :class:`~nettimeout.transport.interfaces.Listener` so that every
    accepted connection comes back as a :class:`TimedConnection` carrying
    this listener's read and write timeouts.

    Accept errors are raised unchanged, without retry. Every attribute not
    defined here is looked up on the wrapped listener.

    Attributes:
        listener: The wrapped listener, owned by this object.
    """

    __slots__ = ("listener", "_timeouts")

    def __init__(
        self,
        listener: Listener,
        read_timeout: Optional[float],
        write_timeout: Optional[float],
    ) -> None:
        self.listener = listener
        self._timeouts = Timeouts(read=read_timeout, write=write_timeout)

    @classmethod
    def from_timeouts(cls, listener: Listener, timeouts: Timeouts) -> "TimedListener":
        """Build from a :class:`Timeouts` record."""
        return cls(listener, timeouts.read, timeouts.write)

    @property
    def timeouts(self) -> Timeouts:
        return self._timeouts

    @property
    def read_timeout(self) -> Optional[float]:
        return self._timeouts.read

    @property
    def write_timeout(self) -> Optional[float]:
        return self._timeouts.write

    def accept(self) -> TimedConnection:
        """Accept the next connection and wrap it."""
        conn = self.listener.accept()
        logger.debug(
            "accepted %r (read_timeout=%s, write_timeout=%s)",
            conn,
            self._timeouts.read,
            self._timeouts.write,
        )
        return TimedConnection(conn, self._timeouts.read, self._timeouts.write)

    def close(self) -> None:
        self.listener.close()

    def __getattr__(self, name: str) -> Any:
        if name == "listener":
            raise AttributeError(name)
        return getattr(self.listener, name)

    def __enter__(self) -> "TimedListener":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<TimedListener {self.listener!r} read_timeout={self.read_timeout}"
            f" write_timeout={self.write_timeout}>"
        )


def listen_timed(
    network: str,
    address: str,
    read_timeout: Optional[float],
    write_timeout: Optional[float],
) -> TimedListener:
    """
    Open a listener and wrap it in a :class:`TimedListener`.

    Example::

        from nettimeout import listen_timed

        with listen_timed("tcp", "127.0.0.1:8080", 5.0, 5.0) as listener:
            conn = listener.accept()
            buf = bytearray(4096)
            n = conn.read(buf)

    Raises:
        BindError: The listening socket could not be opened.
    """
    return TimedListener(listen(network, address), read_timeout, write_timeout)
