"""src/nettimeout/transport/interfaces.py

Capability sets consumed and re-exposed by the timed decorators.

Any object providing these methods can be wrapped; the bundled
:mod:`nettimeout.transport.sockets` implementations are one provider.
"""

from typing import Optional, Protocol, Union, runtime_checkable

Buffer = Union[bytearray, memoryview]

__all__ = ["Buffer", "Conn", "Listener"]


@runtime_checkable
class Conn(Protocol):
    """A bidirectional byte stream with independent read/write deadlines."""

    def read(self, buffer: Buffer) -> int:
        """Read into ``buffer``, returning the byte count (0 at EOF)."""

    def write(self, data: bytes) -> int:
        """Write ``data``, returning the byte count."""

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        """
        Absolute instant after which pending and future reads fail.

        Instants are on the :func:`time.monotonic` clock (see
        :func:`nettimeout.utils.timing.now`), not epoch seconds. ``None``
        clears the deadline.
        """

    def set_write_deadline(self, deadline: Optional[float]) -> None:
        """
        Absolute instant after which pending and future writes fail.

        Same clock and ``None`` meaning as :meth:`set_read_deadline`.
        """

    def close(self) -> None:
        """Close the stream."""


@runtime_checkable
class Listener(Protocol):
    """A source of accepted :class:`Conn` objects."""

    def accept(self) -> Conn:
        """Block until a peer connects and return its connection."""

    def close(self) -> None:
        """Stop listening."""
