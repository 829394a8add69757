"""Unit tests for nettimeout.listener module.

Test Coverage:
    - Every accepted connection is wrapped with the listener's timeouts
    - Accept errors pass through unchanged, without retry
    - Delegation of close/address/other attributes
    - listen_timed factory wiring and BindError propagation
"""

import errno
from unittest import mock

import pytest

from nettimeout.connection import TimedConnection
from nettimeout.exceptions import BindError
from nettimeout.listener import TimedListener, listen_timed
from nettimeout.utils.timing import Timeouts

# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def raw_listener() -> mock.Mock:
    listener = mock.Mock()
    listener.accept.side_effect = lambda: mock.Mock(name="raw_conn")
    return listener


@pytest.fixture
def timed(raw_listener: mock.Mock) -> TimedListener:
    return TimedListener(raw_listener, read_timeout=0.5, write_timeout=1.5)


# ============================================================================
# TEST CLASS: accept()
# ============================================================================


class TestTimedListenerAccept:
    """Tests for TimedListener.accept()."""

    def test_accept_wraps_connection(
        self, timed: TimedListener, raw_listener: mock.Mock
    ) -> None:
        conn = timed.accept()

        assert isinstance(conn, TimedConnection)
        assert conn.read_timeout == 0.5
        assert conn.write_timeout == 1.5
        raw_listener.accept.assert_called_once_with()

    def test_accept_wraps_the_accepted_connection_itself(
        self, raw_listener: mock.Mock
    ) -> None:
        raw = mock.Mock(name="raw")
        raw_listener.accept.side_effect = None
        raw_listener.accept.return_value = raw
        timed = TimedListener(raw_listener, 1, 1)

        assert timed.accept().conn is raw

    def test_every_accept_uses_listener_timeouts(self, timed: TimedListener) -> None:
        conns = [timed.accept() for _ in range(25)]

        assert len({id(c.conn) for c in conns}) == 25
        assert all(c.timeouts == Timeouts(read=0.5, write=1.5) for c in conns)

    def test_accept_error_passes_through_unchanged(
        self, timed: TimedListener, raw_listener: mock.Mock
    ) -> None:
        error = OSError(errno.EMFILE, "Too many open files")
        raw_listener.accept.side_effect = error

        with pytest.raises(OSError) as exc_info:
            timed.accept()

        assert exc_info.value is error
        raw_listener.accept.assert_called_once_with()

    def test_accept_does_not_touch_deadlines(self, timed: TimedListener) -> None:
        conn = timed.accept()

        conn.conn.set_read_deadline.assert_not_called()
        conn.conn.set_write_deadline.assert_not_called()

    def test_closing_one_connection_leaves_listener_and_siblings(
        self, timed: TimedListener, raw_listener: mock.Mock
    ) -> None:
        first = timed.accept()
        second = timed.accept()

        first.close()

        first.conn.close.assert_called_once_with()
        second.conn.close.assert_not_called()
        raw_listener.close.assert_not_called()


# ============================================================================
# TEST CLASS: Construction and delegation
# ============================================================================


class TestTimedListenerDelegation:
    """Everything except accept is forwarded unchanged."""

    def test_from_timeouts(self, raw_listener: mock.Mock) -> None:
        timed = TimedListener.from_timeouts(raw_listener, Timeouts(read=3.0, write=4.0))

        assert timed.listener is raw_listener
        assert timed.read_timeout == 3.0
        assert timed.write_timeout == 4.0

    def test_close_delegates(self, timed: TimedListener, raw_listener: mock.Mock) -> None:
        timed.close()

        raw_listener.close.assert_called_once_with()

    def test_address_forwarded(
        self, timed: TimedListener, raw_listener: mock.Mock
    ) -> None:
        raw_listener.address = "127.0.0.1:8080"

        assert timed.address == "127.0.0.1:8080"

    def test_context_manager_closes(self, raw_listener: mock.Mock) -> None:
        with TimedListener(raw_listener, 1, 1):
            pass

        raw_listener.close.assert_called_once_with()

    def test_timeouts_are_read_only(self, timed: TimedListener) -> None:
        with pytest.raises(AttributeError):
            timed.write_timeout = 9.0  # type: ignore[misc]


# ============================================================================
# TEST CLASS: listen_timed()
# ============================================================================


class TestListenTimed:
    """Tests for the listen_timed factory."""

    @mock.patch("nettimeout.listener.listen")
    def test_wraps_opened_listener(self, mock_listen: mock.Mock) -> None:
        raw = mock.Mock()
        mock_listen.return_value = raw

        timed = listen_timed("tcp", "127.0.0.1:9000", 0.05, 0.25)

        mock_listen.assert_called_once_with("tcp", "127.0.0.1:9000")
        assert isinstance(timed, TimedListener)
        assert timed.listener is raw
        assert timed.timeouts == Timeouts(read=0.05, write=0.25)

    @mock.patch("nettimeout.listener.listen")
    def test_bind_error_passes_through_unchanged(self, mock_listen: mock.Mock) -> None:
        error = BindError(errno.EADDRINUSE, "listen tcp :80: Address already in use")
        mock_listen.side_effect = error

        with pytest.raises(BindError) as exc_info:
            listen_timed("tcp", ":80", 1.0, 1.0)

        assert exc_info.value is error

    def test_opens_real_socket(self) -> None:
        with listen_timed("tcp4", "127.0.0.1:0", 1.0, 2.0) as timed:
            host, _, port = timed.address.rpartition(":")

            assert host == "127.0.0.1"
            assert int(port) > 0

        assert timed.listener.closed

    def test_unknown_network_raises_bind_error(self) -> None:
        with pytest.raises(BindError):
            listen_timed("udp", "127.0.0.1:0", 1.0, 1.0)
