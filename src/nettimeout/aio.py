"""src/nettimeout/aio.py

asyncio counterparts of TimedConnection and TimedListener.

asyncio streams have no deadline primitive, so each read and each write
is bounded with ``asyncio.wait_for`` using the full configured duration.
"""

import asyncio
import contextlib
import logging
import socket
from typing import Any, Optional

from nettimeout.exceptions import ConnectionClosedError, DeadlineExceeded
from nettimeout.transport.sockets import format_address, listen
from nettimeout.utils.timing import Timeouts

__all__ = ["AsyncTimedConnection", "AsyncTimedListener", "listen_timed_async"]

logger = logging.getLogger(__name__)


def _check_expired(timeout: Optional[float], op: str) -> None:
    # wait_for treats non-positive timeouts differently across Python versions
    if timeout is not None and timeout <= 0:
        raise DeadlineExceeded(f"{op} deadline exceeded")


class AsyncTimedConnection:
    """
    Stream pair whose reads and writes each get ``read_timeout`` /
    ``write_timeout`` seconds, counted from the start of the call.

    Attributes:
        reader: Stream reader, owned by this object.
        writer: Stream writer, owned by this object.
    """

    __slots__ = ("reader", "writer", "_timeouts")

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        read_timeout: Optional[float],
        write_timeout: Optional[float],
    ) -> None:
        self.reader = reader
        self.writer = writer
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

    async def read(self, n: int) -> bytes:
        """
        Read up to ``n`` bytes; ``b""`` at end of stream.

        Raises:
            DeadlineExceeded: No data within read_timeout.
        """
        _check_expired(self._timeouts.read, "read")
        try:
            return await asyncio.wait_for(
                self.reader.read(n), timeout=self._timeouts.read
            )
        except asyncio.TimeoutError as e:
            raise DeadlineExceeded("read deadline exceeded") from e

    async def write(self, data: bytes) -> int:
        """
        Write ``data`` and wait for the transport to accept it.

        Raises:
            DeadlineExceeded: The peer did not drain within write_timeout.
        """
        _check_expired(self._timeouts.write, "write")
        self.writer.write(data)
        try:
            await asyncio.wait_for(self.writer.drain(), timeout=self._timeouts.write)
        except asyncio.TimeoutError as e:
            raise DeadlineExceeded("write deadline exceeded") from e
        return len(data)

    async def close(self) -> None:
        """Async close."""
        self.writer.close()
        with contextlib.suppress(Exception):
            await self.writer.wait_closed()

    @property
    def remote_address(self) -> str:
        return format_address(self.writer.get_extra_info("peername"))

    @property
    def local_address(self) -> str:
        return format_address(self.writer.get_extra_info("sockname"))

    async def __aenter__(self) -> "AsyncTimedConnection":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        await self.close()


class AsyncTimedListener:
    """
    Listening socket whose accepted connections are
    :class:`AsyncTimedConnection` objects with this listener's timeouts.

    A pending :meth:`accept` is interrupted by cancelling its task.
    """

    __slots__ = ("sock", "network", "_timeouts", "_closed")

    def __init__(
        self,
        sock: socket.socket,
        read_timeout: Optional[float],
        write_timeout: Optional[float],
        network: str = "tcp",
    ) -> None:
        sock.setblocking(False)
        self.sock = sock
        self.network = network
        self._timeouts = Timeouts(read=read_timeout, write=write_timeout)
        self._closed = False

    @property
    def timeouts(self) -> Timeouts:
        return self._timeouts

    async def accept(self) -> AsyncTimedConnection:
        """Accept the next connection and wrap it."""
        if self._closed:
            raise ConnectionClosedError()

        loop = asyncio.get_running_loop()
        raw, _ = await loop.sock_accept(self.sock)
        try:
            reader, writer = await asyncio.open_connection(sock=raw)
        except BaseException:
            raw.close()
            raise

        logger.debug("accepted %s on %s", raw, self.network)
        return AsyncTimedConnection(
            reader, writer, self._timeouts.read, self._timeouts.write
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.sock.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def address(self) -> str:
        return format_address(self.sock.getsockname())

    def fileno(self) -> int:
        return self.sock.fileno()

    async def __aenter__(self) -> "AsyncTimedListener":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()


async def listen_timed_async(
    network: str,
    address: str,
    read_timeout: Optional[float],
    write_timeout: Optional[float],
) -> AsyncTimedListener:
    """
    Open a listener for use from coroutines.

    Raises:
        BindError: The listening socket could not be opened.
    """
    listener = listen(network, address)
    return AsyncTimedListener(listener.sock, read_timeout, write_timeout, network)
