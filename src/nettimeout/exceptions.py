"""src/nettimeout/exceptions.py

nettimeout Exceptions hierarchy.

Errors raised by the wrapped transport are never translated by the
decorators; these types are raised by the bundled socket transports.
"""


class NetTimeoutError(Exception):
    """Base exception for all nettimeout errors."""


class BindError(NetTimeoutError, OSError):
    """
    Opening a listener failed.
    Unknown network type, malformed address, or bind/listen refused.
    """


class DeadlineError(NetTimeoutError, OSError):
    """
    Setting a read or write deadline failed.
    The I/O call that needed the deadline is never attempted.
    """


class ConnectionClosedError(NetTimeoutError, OSError):
    """Use of a connection or listener that was already closed."""

    def __init__(self, message: str = "use of closed network connection"):
        super().__init__(message)


class DeadlineExceeded(NetTimeoutError, TimeoutError):
    """
    An I/O deadline expired before the operation completed.

    Attributes:
        written: Bytes already written when a write deadline expired.
    """

    def __init__(self, message: str = "i/o deadline exceeded", written: int = 0):
        super().__init__(message)
        self.written = written
