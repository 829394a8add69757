"""src/nettimeout/transport/sockets.py

Socket-backed implementations of the Conn and Listener capability sets.

Python sockets carry a single relative timeout. SocketConn instead keeps
independent absolute read and write deadlines and enforces them itself,
driving the socket in non-blocking mode and waiting on a selector.
"""

import contextlib
import logging
import os
import selectors
import socket
import threading
from typing import Any, Iterator, Optional

from nettimeout.exceptions import (
    BindError,
    ConnectionClosedError,
    DeadlineError,
    DeadlineExceeded,
)
from nettimeout.transport.interfaces import Buffer
from nettimeout.utils.address import (
    NETWORKS,
    join_host_port,
    parse_port,
    split_host_port,
)
from nettimeout.utils.timing import remaining

__all__ = ["SocketConn", "SocketListener", "listen", "format_address"]

logger = logging.getLogger(__name__)


def format_address(addr: Any) -> str:
    """Render a socket address as ``host:port``, or the unix socket path."""
    if isinstance(addr, tuple):
        return join_host_port(addr[0], addr[1])
    if isinstance(addr, bytes):
        return addr.decode(errors="replace")
    return str(addr)


def _close_quietly(sock: socket.socket) -> None:
    try:
        sock.close()
    except (OSError, socket.error):
        pass


def _shutdown_and_close(sock: socket.socket) -> None:
    # shutdown wakes a thread blocked in accept; close alone does not
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except (OSError, socket.error):
        pass
    _close_quietly(sock)


class SocketConn:
    """
    Stream socket with independent read and write deadlines.

    Deadlines are instants on the :func:`nettimeout.utils.timing.now` clock,
    ``None`` meaning no deadline. A deadline applies to every read (or
    write) started or pending until it is changed.

    :meth:`close` may be called from another thread while a read or write
    is waiting; the waiting call raises ConnectionClosedError. The file
    descriptor is released once the last such call has returned.

    Attributes:
        sock: The underlying socket object, kept in non-blocking mode.
    """

    __slots__ = (
        "sock",
        "_read_deadline",
        "_write_deadline",
        "_closed",
        "_pending",
        "_lock",
    )

    def __init__(self, sock: socket.socket) -> None:
        sock.setblocking(False)
        self.sock = sock
        self._read_deadline: Optional[float] = None
        self._write_deadline: Optional[float] = None
        self._closed = False
        self._pending = 0
        self._lock = threading.Lock()

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    @property
    def read_deadline(self) -> Optional[float]:
        """Current read deadline."""
        return self._read_deadline

    @property
    def write_deadline(self) -> Optional[float]:
        """Current write deadline."""
        return self._write_deadline

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        """Set the read deadline. Raises DeadlineError once closed."""
        if self._closed:
            raise DeadlineError("set read deadline: use of closed network connection")
        self._read_deadline = deadline

    def set_write_deadline(self, deadline: Optional[float]) -> None:
        """Set the write deadline. Raises DeadlineError once closed."""
        if self._closed:
            raise DeadlineError("set write deadline: use of closed network connection")
        self._write_deadline = deadline

    def set_deadline(self, deadline: Optional[float]) -> None:
        """Set both deadlines at once."""
        self.set_read_deadline(deadline)
        self.set_write_deadline(deadline)

    @contextlib.contextmanager
    def _operation(self) -> Iterator[None]:
        # the fd stays open while any read or write is inside this block
        with self._lock:
            if self._closed:
                raise ConnectionClosedError()
            self._pending += 1
        try:
            yield
        finally:
            with self._lock:
                self._pending -= 1
                release = self._closed and self._pending == 0
            if release:
                _close_quietly(self.sock)

    def _ready(self, deadline: Optional[float], op: str) -> None:
        if self._closed:
            raise ConnectionClosedError()
        left = remaining(deadline)
        if left is not None and left <= 0:
            raise DeadlineExceeded(f"{op} deadline exceeded")

    def _wait(self, events: int, deadline: Optional[float]) -> bool:
        """Wait for readiness; False once ``deadline`` has passed."""
        timeout = remaining(deadline)
        if timeout is not None and timeout <= 0:
            return False

        with selectors.DefaultSelector() as selector:
            try:
                selector.register(self.sock, events)
            except ValueError as e:
                # fileno() is -1: closed by another thread
                raise ConnectionClosedError() from e
            return bool(selector.select(timeout))

    def read(self, buffer: Buffer) -> int:
        """
        Read into ``buffer`` under the current read deadline.

        Returns the number of bytes read, 0 at end of stream.

        Raises:
            DeadlineExceeded: The read deadline passed before data arrived.
            ConnectionClosedError: The connection was closed.
        """
        with self._operation():
            self._ready(self._read_deadline, "read")
            while True:
                try:
                    return self.sock.recv_into(buffer)
                except (BlockingIOError, InterruptedError):
                    pass

                ready = self._wait(selectors.EVENT_READ, self._read_deadline)
                if self._closed:
                    raise ConnectionClosedError()
                if not ready:
                    raise DeadlineExceeded("read deadline exceeded")

    def write(self, data: bytes) -> int:
        """
        Write all of ``data`` under the current write deadline.

        Raises:
            DeadlineExceeded: The write deadline passed; ``written`` holds
                the bytes sent so far.
            ConnectionClosedError: The connection was closed.
        """
        with self._operation():
            self._ready(self._write_deadline, "write")
            view = memoryview(data).cast("B")
            total = 0
            while total < len(view):
                try:
                    total += self.sock.send(view[total:])
                    continue
                except (BlockingIOError, InterruptedError):
                    pass

                ready = self._wait(selectors.EVENT_WRITE, self._write_deadline)
                if self._closed:
                    raise ConnectionClosedError()
                if not ready:
                    raise DeadlineExceeded("write deadline exceeded", written=total)
            return total

    def close(self) -> None:
        """
        Close the connection. Calling it again is a no-op.

        A read or write blocked in another thread wakes and raises
        ConnectionClosedError.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            busy = self._pending > 0

        # shutdown wakes the selector of any pending call; that call
        # releases the fd on its way out
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except (OSError, socket.error):
            pass
        if not busy:
            _close_quietly(self.sock)

    def fileno(self) -> int:
        return self.sock.fileno()

    @property
    def local_address(self) -> str:
        return format_address(self.sock.getsockname())

    @property
    def remote_address(self) -> str:
        return format_address(self.sock.getpeername())

    def __enter__(self) -> "SocketConn":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"fd={self.sock.fileno()}"
        return f"<SocketConn {state}>"


class SocketListener:
    """
    Listening stream socket producing :class:`SocketConn` objects.

    Attributes:
        sock: The listening socket, in blocking mode.
        network: Network type the socket was opened with.
        path: Unix socket file to remove on close, if any.
    """

    __slots__ = ("sock", "network", "path", "_closed")

    def __init__(
        self, sock: socket.socket, network: str = "tcp", path: Optional[str] = None
    ) -> None:
        self.sock = sock
        self.network = network
        self.path = path
        self._closed = False

    def accept(self) -> SocketConn:
        """
        Block until a peer connects.

        Errors from the socket's accept propagate unchanged.
        """
        if self._closed:
            raise ConnectionClosedError()
        raw, _ = self.sock.accept()
        return SocketConn(raw)

    def close(self) -> None:
        """
        Stop listening. An accept blocked in another thread returns with
        an error. A unix socket file created by :func:`listen` is removed.
        Calling it again is a no-op.
        """
        if self._closed:
            return
        self._closed = True
        logger.debug("closing %s listener %s", self.network, self.sock)
        _shutdown_and_close(self.sock)
        if self.path:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self.path)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def address(self) -> str:
        """Bound address, with the actual port when 0 was requested."""
        return format_address(self.sock.getsockname())

    def fileno(self) -> int:
        return self.sock.fileno()

    def __enter__(self) -> "SocketListener":
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[Any],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else self.address
        return f"<SocketListener {self.network} {state}>"


def _listen_inet(family: int, network: str, address: str) -> socket.socket:
    host, port_text = split_host_port(address)
    port = parse_port(port_text, network)

    if not host:
        if family == socket.AF_UNSPEC:
            if socket.has_dualstack_ipv6():
                return socket.create_server(
                    ("", port), family=socket.AF_INET6, dualstack_ipv6=True
                )
            family = socket.AF_INET
        return socket.create_server(("", port), family=family)

    infos = socket.getaddrinfo(
        host, port, family, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )
    resolved_family, _, _, _, sockaddr = infos[0]
    return socket.create_server(sockaddr, family=resolved_family)


def _listen_unix(path: str) -> socket.socket:
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        sock.listen()
    except OSError:
        sock.close()
        raise
    return sock


def listen(network: str, address: str) -> SocketListener:
    """
    Open a listening socket.

    Args:
        network: ``tcp``, ``tcp4``, ``tcp6`` or ``unix``.
        address: ``host:port``, ``[host]:port`` or ``:port`` for TCP
            (port 0 picks a free port); a filesystem path for ``unix``.

    Raises:
        BindError: Unknown network, malformed address, or the operating
            system refused to bind or listen. Chained to the cause.
    """
    family = NETWORKS.get(network)
    if family is None:
        raise BindError(f"listen {network}: unknown network")

    try:
        if network == "unix":
            sock = _listen_unix(address)
        else:
            sock = _listen_inet(family, network, address)

    except ValueError as e:
        raise BindError(f"listen {network} {address}: {e}") from e

    except OSError as e:
        message = f"listen {network} {address}: {e.strerror or e}"
        if e.errno is None:
            raise BindError(message) from e
        raise BindError(e.errno, message) from e

    path = address if network == "unix" and not address.startswith("\0") else None
    listener = SocketListener(sock, network, path)
    logger.debug("listening on %s %s", network, listener.address)
    return listener
