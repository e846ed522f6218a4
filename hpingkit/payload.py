"""Signature search and listen-mode payload extraction."""

from __future__ import annotations

from dataclasses import dataclass

IPHDR_SIZE = 20


def find_signature(data: bytes, sign: bytes) -> int | None:
    """Return the offset of the first occurrence of ``sign`` in ``data``, or None."""
    index = bytes(data).find(bytes(sign))
    return None if index < 0 else index


@dataclass(frozen=True)
class ListenResult:
    """What a signed packet yielded.

    ``payload`` is the data after the signature, or None when the packet
    was discarded as out of order; ``restart_from`` then holds the id the
    sender must restart from.
    """

    packet_id: int
    payload: bytes | None
    restart_from: int | None = None


class ListenSession:
    """Extracts the data following a signature from received IP packets.

    In safe mode packets must arrive with consecutive IP ids starting at 1;
    an unexpected id is discarded and a restart is requested.
    """

    def __init__(self, sign: bytes | str, safe: bool = False) -> None:
        self.sign = sign.encode() if isinstance(sign, str) else bytes(sign)
        self.safe = safe
        self.expected_id = 1

    def process(self, ip_packet: bytes) -> ListenResult | None:
        """Handle one IP packet; None when it is truncated or unsigned."""
        packet = bytes(ip_packet)
        if len(packet) < IPHDR_SIZE:
            return None
        tot_len = int.from_bytes(packet[2:4], "big")
        packet_id = int.from_bytes(packet[4:6], "big")
        size = min(len(packet), tot_len)
        offset = find_signature(packet[:size], self.sign)
        if offset is None:
            return None
        if self.safe:
            if packet_id != self.expected_id:
                return ListenResult(packet_id, None, self.expected_id)
            self.expected_id = (self.expected_id + 1) & 0xFFFF
        return ListenResult(packet_id, packet[offset + len(self.sign) : size])