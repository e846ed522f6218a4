"""Round-trip time bookkeeping and relative IP id computation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)

STATUS_SENT = 0
STATUS_RECV = 1


class IdRelativizer:
    """Turns absolute IP ids into the id increase per sequence step."""

    def __init__(self) -> None:
        self.last_seq = 0
        self.last_id: int | None = None
        self.out_of_sequence = 0

    def relativize(self, seqnum: int, ip_id: int) -> int | None:
        """Return the id increase per sequence step since the last reply.

        The first reply only sets the reference and yields None; a reply
        whose sequence number does not advance is counted as out of
        sequence and also yields None.
        """
        if self.last_id is None:
            self.last_id = ip_id
            self.last_seq = seqnum
            return None
        seq_diff = seqnum - self.last_seq
        if seq_diff <= 0:
            self.out_of_sequence += 1
            return None
        if self.last_id > ip_id:
            relative = ((65535 - self.last_id) + ip_id) // seq_diff
        else:
            relative = (ip_id - self.last_id) // seq_diff
        self.last_id = ip_id
        self.last_seq = seqnum
        return relative


class RttStats:
    """Running minimum, maximum and average of round-trip times in ms."""

    def __init__(self) -> None:
        self.min = 0.0
        self.max = 0.0
        self.avg = 0.0
        self.count = 0

    def update(self, ms_delay: float) -> None:
        """Fold one round-trip time into the statistics."""
        if self.min == 0 or ms_delay < self.min:
            self.min = ms_delay
        if self.max == 0 or ms_delay > self.max:
            self.max = ms_delay
        self.count += 1
        n = self.count
        self.avg = (self.avg * (n - 1) / n) + (ms_delay / n)


@dataclass
class DelayEntry:
    """One sent packet remembered for round-trip time measurement."""

    seq: int = -1
    src: int = 0
    sec: int = 0
    usec: int = 0
    status: int = STATUS_SENT


class DelayTable:
    """A fixed-size ring of sent packets, looked up when replies arrive."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("delay table size must be positive")
        self.entries = [DelayEntry() for _ in range(size)]
        self.index = 0
        self.stats = RttStats()

    def add(self, seq: int, src: int, sec: int, usec: int, status: int) -> None:
        """Record a sent packet, overwriting the oldest slot."""
        self.entries[self.index % len(self.entries)] = DelayEntry(seq, src, sec, usec, status)
        self.index += 1

    def _find(self, seq: int, recvport: int) -> DelayEntry | None:
        if seq != 0:
            return next((e for e in self.entries if e.seq == seq), None)
        return next((e for e in self.entries if e.src == recvport), None)

    def lookup(
        self, seq: int, recvport: int, now_sec: int, now_usec: int
    ) -> tuple[int, int, float]:
        """Match a reply to a sent packet.

        The packet is found by ``seq`` or, when ``seq`` is 0, by source
        port. Returns (sequence number, previous status, delay in ms);
        an unknown packet gives status 0 and a delay of 0.
        """
        entry = self._find(seq, recvport)
        if entry is None:
            return seq, 0, 0.0
        if seq == 0:
            seq = entry.seq
        status = entry.status
        entry.status = STATUS_RECV
        sec_delay = now_sec - entry.sec
        usec_delay = now_usec - entry.usec
        if sec_delay == 0 and usec_delay < 0:
            usec_delay += 1_000_000
        ms_delay = sec_delay * 1000 + usec_delay / 1000
        self.stats.update(ms_delay)
        if ms_delay < 0:
            log.warning(
                "negative round-trip time: seq=%d status=%d sec_delay=%d usec_delay=%d ms=%f",
                seq,
                status,
                sec_delay,
                usec_delay,
                ms_delay,
            )
        return seq, status, ms_delay