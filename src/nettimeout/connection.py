"""src/nettimeout/connection.py

Connection decorator that arms a fresh deadline before every read and write.
"""

from typing import Any, Optional

from nettimeout.transport.interfaces import Buffer, Conn
from nettimeout.utils.timing import Timeouts, deadline_after

__all__ = ["TimedConnection"]


class TimedConnection:
    """
    Wraps a :class:`~nettimeout.transport.interfaces.Conn` so that each read
    and each write must finish within a fixed duration of being started.

    The deadline is recomputed from the current instant on every call, so
    idle time between calls never counts against the next call. Read and
    write deadlines are set independently.

    Errors from setting the deadline or from the I/O itself are raised
    unchanged. When setting the deadline fails the I/O is not attempted.

    Every attribute not defined here is looked up on the wrapped connection.

    Attributes:
        conn: The wrapped connection, owned by this object.
    """

    __slots__ = ("conn", "_timeouts")

    def __init__(
        self,
        conn: Conn,
        read_timeout: Optional[float],
        write_timeout: Optional[float],
    ) -> None:
        """
        Args:
            conn: Connection to wrap.
            read_timeout: Seconds allowed for each read. ``None`` disables
                the deadline; zero or negative values expire immediately on
                transports that treat past instants as expired.
            write_timeout: Seconds allowed for each write, same semantics.
        """
        self.conn = conn
        self._timeouts = Timeouts(read=read_timeout, write=write_timeout)

    @property
    def timeouts(self) -> Timeouts:
        return self._timeouts

    @property
    def read_timeout(self) -> Optional[float]:
        return self._timeouts.read

    @property
    def write_timeout(self) -> Optional[float]:
        return self._timeouts.write

    def read(self, buffer: Buffer) -> int:
        """Read into ``buffer`` with a read deadline of now + read_timeout."""
        self.conn.set_read_deadline(deadline_after(self._timeouts.read))
        return self.conn.read(buffer)

    def write(self, data: bytes) -> int:
        """Write ``data`` with a write deadline of now + write_timeout."""
        self.conn.set_write_deadline(deadline_after(self._timeouts.write))
        return self.conn.write(data)

    def close(self) -> None:
        self.conn.close()

    def __getattr__(self, name: str) -> Any:
        if name == "conn":
            raise AttributeError(name)
        return getattr(self.conn, name)

    def __enter__(self) -> "TimedConnection":
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
            f"<TimedConnection {self.conn!r} read_timeout={self.read_timeout}"
            f" write_timeout={self.write_timeout}>"
        )
