"""src/nettimeout/__init__.py

nettimeout - per-operation I/O deadlines for stream listeners and connections.

Wraps a listener so that every connection it accepts enforces a fresh
deadline on each read and each write: a single call must finish within the
configured duration, measured from the moment the call starts. Idle gaps
between calls never count.

Key Features:
    - Zero external dependencies
    - Read and write deadlines are independent
    - Errors from the underlying transport pass through unchanged
    - Works over any object providing the Conn / Listener capability sets
    - asyncio variant
    - Full type hints (PEP 561)

Example:
    Sync usage::

        from nettimeout import listen_timed

        with listen_timed("tcp", "127.0.0.1:8080", 5.0, 5.0) as listener:
            conn = listener.accept()
            buf = bytearray(4096)
            n = conn.read(buf)
            conn.write(bytes(buf[:n]))
            conn.close()

    Wrapping an existing listener::

        from nettimeout import TimedListener
        from nettimeout.transport import listen

        listener = TimedListener(listen("tcp4", ":0"), 1.0, 2.0)

    Async usage::

        import asyncio
        from nettimeout import listen_timed_async

        async def main():
            listener = await listen_timed_async("tcp", "127.0.0.1:8080", 5.0, 5.0)
            async with await listener.accept() as conn:
                data = await conn.read(4096)
                await conn.write(data)
            listener.close()

        asyncio.run(main())
"""

import logging

from nettimeout.aio import AsyncTimedConnection, AsyncTimedListener, listen_timed_async
from nettimeout.connection import TimedConnection
from nettimeout.exceptions import (
    BindError,
    ConnectionClosedError,
    DeadlineError,
    DeadlineExceeded,
    NetTimeoutError,
)
from nettimeout.listener import TimedListener, listen_timed
from nettimeout.utils.timing import Timeouts
from nettimeout.version import __version__

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "TimedConnection",
    "TimedListener",
    "listen_timed",
    "AsyncTimedConnection",
    "AsyncTimedListener",
    "listen_timed_async",
    "Timeouts",
    "NetTimeoutError",
    "BindError",
    "DeadlineError",
    "DeadlineExceeded",
    "ConnectionClosedError",
]
