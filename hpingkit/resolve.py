"""IPv4 host name resolution."""

from __future__ import annotations

import socket


class ResolveError(OSError):
    """Raised when a host name cannot be turned into an IPv4 address."""

    def __init__(self, hostname: str) -> None:
        super().__init__(f"Unable to resolve '{hostname}'")
        self.hostname = hostname


def resolve_addr(hostname: str) -> str:
    """Return the dotted IPv4 address for ``hostname``.

    Numeric addresses are accepted in any form the classic address parser
    takes; anything else is looked up by name.
    """
    try:
        packed = socket.inet_aton(hostname)
    except (OSError, ValueError):
        packed = None
    if packed is not None and packed != b"\xff\xff\xff\xff":
        return socket.inet_ntoa(packed)
    try:
        return socket.gethostbyname(hostname)
    except (OSError, UnicodeError, ValueError) as exc:
        raise ResolveError(hostname) from exc