"""src/nettimeout/transport/__init__.py

Transport layer module for nettimeout.

This module defines the connection and listener capability sets the timed
decorators consume, and socket-backed implementations of them with
independent read and write deadlines.
"""

from .interfaces import Conn, Listener
from .sockets import SocketConn, SocketListener, listen

__all__ = ["Conn", "Listener", "SocketConn", "SocketListener", "listen"]
