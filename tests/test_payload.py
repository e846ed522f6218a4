import struct

import pytest

from hpingkit.payload import IPHDR_SIZE, ListenSession, find_signature


def make_ip(payload: bytes, packet_id: int, tot_len: int | None = None) -> bytes:
    length = IPHDR_SIZE + len(payload) if tot_len is None else tot_len
    header = struct.pack(
        "!BBHHHBBH4s4s", 0x45, 0, length, packet_id, 0, 64, 17, 0,
        bytes([10, 0, 0, 1]), bytes([10, 0, 0, 2]),
    )
    return header + payload


def test_find_signature_locates_needle():
    data = b"xxxSIGNyyy"
    idx = find_signature(data, b"SIGN")
    assert data[idx : idx + 4] == b"SIGN"
    assert find_signature(data, b"SIG") == idx


def test_find_signature_missing():
    assert find_signature(b"abcdef", b"xyz") is None
    assert find_signature(b"ab", b"abc") is None


def test_find_signature_at_end():
    data = b"0123abc"
    assert find_signature(data, b"abc") == len(data) - len(b"abc")


def test_listen_extracts_payload():
    session = ListenSession(b"mark")
    result = session.process(make_ip(b"mark" + b"hello", 42))
    assert result.payload == b"hello"
    assert result.packet_id == 42
    assert result.restart_from is None


def test_listen_accepts_str_sign():
    session = ListenSession("mark")
    result = session.process(make_ip(b"..mark" + b"data", 7))
    assert result.payload == b"data"


def test_listen_ignores_truncated_and_unsigned():
    session = ListenSession(b"mark")
    assert session.process(b"\x45" * (IPHDR_SIZE - 1)) is None
    assert session.process(make_ip(b"nothing here", 1)) is None


def test_listen_respects_total_length():
    body = b"mark" + b"abcdef"
    packet = make_ip(body, 3, tot_len=IPHDR_SIZE + len(body) - 2) + b"trailer"
    result = ListenSession(b"mark").process(packet)
    assert result.payload == b"abcd"


def test_safe_mode_sequence_and_restart():
    session = ListenSession(b"mark", safe=True)
    assert session.process(make_ip(b"markA", 1)).payload == b"A"
    assert session.process(make_ip(b"markB", 2)).payload == b"B"
    discarded = session.process(make_ip(b"markZ", 5))
    assert discarded.payload is None
    assert discarded.restart_from == 3
    assert session.process(make_ip(b"markC", 3)).payload == b"C"


@pytest.mark.parametrize("packet_id", [0, 2, 65535])
def test_safe_mode_rejects_wrong_first_id(packet_id):
    session = ListenSession(b"mark", safe=True)
    result = session.process(make_ip(b"markX", packet_id))
    assert result.payload is None
    assert result.restart_from == session.expected_id