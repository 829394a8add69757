import socket
from typing import Iterator, Tuple

import pytest

from nettimeout.transport.sockets import SocketConn


@pytest.fixture
def socket_pair() -> Iterator[Tuple[SocketConn, socket.socket]]:
    """A SocketConn and the plain socket at the other end of it."""
    left, right = socket.socketpair()
    conn = SocketConn(left)
    right.settimeout(5.0)
    try:
        yield conn, right
    finally:
        conn.close()
        right.close()
