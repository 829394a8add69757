"""utils/address.py

Network type and "host:port" address helpers.
"""

import socket
from typing import Dict, Tuple

__all__ = ["NETWORKS", "split_host_port", "join_host_port", "parse_port"]

# Network name -> address family. AF_UNSPEC lets resolution pick the family.
NETWORKS: Dict[str, int] = {
    "tcp": socket.AF_UNSPEC,
    "tcp4": socket.AF_INET,
    "tcp6": socket.AF_INET6,
}
if hasattr(socket, "AF_UNIX"):
    NETWORKS["unix"] = socket.AF_UNIX


def parse_port(port: str, network: str = "tcp") -> int:
    """
    Numeric port, or the port of a named service such as ``http``.
    An empty port means 0, an ephemeral port.
    """
    if not port:
        return 0
    if port.isdigit():
        value = int(port)
        if value > 65535:
            raise ValueError(f"invalid port {port!r}")
        return value
    try:
        return socket.getservbyname(port, network.rstrip("46"))
    except OSError as e:
        raise ValueError(f"unknown port {port!r}") from e


def split_host_port(address: str) -> Tuple[str, str]:
    """
    Split ``host:port``, ``[host]:port`` or ``:port``.

    The host comes back without brackets. An empty host means every
    local interface.
    """
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {address!r}")
        host = address[1:end]
        rest = address[end + 1 :]
        if not rest.startswith(":"):
            raise ValueError(f"missing port in address {address!r}")
        return host, rest[1:]

    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"missing port in address {address!r}")
    if ":" in host:
        raise ValueError(f"too many colons in address {address!r}")
    return host, port


def join_host_port(host: str, port: int) -> str:
    """Inverse of :func:`split_host_port`; IPv6 hosts get brackets."""
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
