"""Text descriptions of packet layers in the APD packet description syntax.

Every layer describer takes the raw wire bytes of one layer and returns
its description followed by a '+' separator; describe_packet joins the
layers and drops the final separator.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

IPHDR_SIZE = 20
ICMPHDR_SIZE = 8
UDPHDR_SIZE = 8
TCPHDR_SIZE = 20
IGRPHDR_SIZE = 12
IGRPENTRY_SIZE = 14

IP_RF = 0x8000
IP_DF = 0x4000
IP_MF = 0x2000

IPOPT_EOL = 0
IPOPT_NOP = 1
IPOPT_RR = 7
IPOPT_TIMESTAMP = 68
IPOPT_LSRR = 131
IPOPT_SSRR = 137

IPOPT_TS_TSONLY = 0
IPOPT_TS_TSANDADDR = 1
IPOPT_TS_PRESPEC = 3

ICMP_ECHOREPLY = 0
ICMP_DEST_UNREACH = 3
ICMP_SOURCE_QUENCH = 4
ICMP_REDIRECT = 5
ICMP_ECHO = 8
ICMP_TIME_EXCEEDED = 11
ICMP_PARAMETERPROB = 12
ICMP_TIMESTAMP = 13
ICMP_TIMESTAMPREPLY = 14
ICMP_INFO_REQUEST = 15
ICMP_INFO_REPLY = 16

TCP_TH_FIN = 0x01
TCP_TH_SYN = 0x02
TCP_TH_RST = 0x04
TCP_TH_PUSH = 0x08
TCP_TH_ACK = 0x10
TCP_TH_URG = 0x20
TCP_TH_X = 0x40
TCP_TH_Y = 0x80

TCPOPT_EOL = 0
TCPOPT_NOP = 1
TCPOPT_MAXSEG = 2
TCPOPT_WINDOW = 3
TCPOPT_SACK_PERM = 4
TCPOPT_SACK = 5
TCPOPT_ECHOREQUEST = 6
TCPOPT_ECHOREPLY = 7
TCPOPT_TIMESTAMP = 8

IGRP_OPCODE_UPDATE = 1
IGRP_OPCODE_REQUEST = 2

_IP_STRUCT = struct.Struct("!BBHHHBBH4s4s")
_TCP_STRUCT = struct.Struct("!HHIIBBHHH")
_IGRP_STRUCT = struct.Struct("!BBHHHHH")

_TCP_FLAG_LETTERS = (
    (TCP_TH_FIN, "f"),
    (TCP_TH_SYN, "s"),
    (TCP_TH_RST, "r"),
    (TCP_TH_PUSH, "p"),
    (TCP_TH_ACK, "a"),
    (TCP_TH_URG, "u"),
    (TCP_TH_X, "x"),
    (TCP_TH_Y, "y"),
)

_DATA_SPECIAL = frozenset(b"()+,=")

# Options are at most 255 bytes long; reads past the given bytes see zeros.
_OPTION_PAD = 264


class LayerType(Enum):
    """Kinds of layer that can be described."""

    IP = "ip"
    IPOPT = "ipopt"
    ICMP = "icmp"
    UDP = "udp"
    TCP = "tcp"
    TCPOPT = "tcpopt"
    IGRP = "igrp"
    IGRPENTRY = "igrpentry"
    DATA = "data"


@dataclass(frozen=True)
class Layer:
    """One layer of a packet: its kind, wire bytes and optional default header."""

    type: LayerType
    data: bytes
    default: bytes | None = None


def _need(data: bytes, size: int, what: str) -> bytes:
    data = bytes(data)
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")
    return data


def _padded(data: bytes) -> bytes:
    return data + bytes(max(0, _OPTION_PAD - len(data)))


def _dotted(raw: bytes) -> str:
    return ".".join(str(b) for b in raw)


def _u32(buf: bytes, offset: int) -> int:
    return int.from_bytes(buf[offset : offset + 4], "big")


def _u24(buf: bytes, offset: int) -> int:
    return int.from_bytes(buf[offset : offset + 3], "big")


def _option_parts(data: bytes, what: str) -> tuple[int, int, bytes]:
    data = bytes(data)
    if not data:
        raise ValueError(f"{what} needs at least one byte")
    optlen = data[1] if len(data) > 1 else 0
    return data[0], optlen, _padded(data)


def describe_ip(header: bytes, default: bytes | None = None) -> str:
    """Describe an IPv4 header; fields equal to ``default`` are left out."""
    (vihl, tos, tot_len, ident, frag_off, ttl, proto, check, saddr, daddr) = (
        _IP_STRUCT.unpack_from(_need(header, IPHDR_SIZE, "IP header"))
    )
    d = None
    if default is not None:
        d = _IP_STRUCT.unpack_from(_need(default, IPHDR_SIZE, "default IP header"))
    d_vihl, d_tos, _, d_id, d_frag, d_ttl = (d[0], d[1], d[2], d[3], d[4], d[5]) if d else (0,) * 6

    parts = ["ip("]
    if d is None or (vihl & 0xF) != (d_vihl & 0xF):
        parts.append(f"ihl=0x{vihl & 0xF:1x},")
    if d is None or (vihl >> 4) != (d_vihl >> 4):
        parts.append(f"ver=0x{vihl >> 4:1x},")
    if d is None or tos != d_tos:
        parts.append(f"tos=0x{tos:02x},")
    parts.append(f"totlen={tot_len},")
    if d is None or ident != d_id:
        parts.append(f"id={ident},")
    parts.append(f"fragoff={(frag_off & 0x1FFF) << 3},")
    for mask, name in ((IP_MF, "mf"), (IP_DF, "df"), (IP_RF, "rf")):
        if d is None or (frag_off & mask) != (d_frag & mask):
            parts.append(f"{name}={int(bool(frag_off & mask))},")
    if d is None or ttl != d_ttl:
        parts.append(f"ttl={ttl},")
    parts.append(f"proto={proto},")
    parts.append(f"cksum=0x{check:04x},")
    parts.append(f"saddr={_dotted(saddr)},")
    parts.append(f"daddr={_dotted(daddr)}")
    parts.append(")+")
    return "".join(parts)


def _describe_route(kind: int, optlen: int, buf: bytes) -> str:
    name = {IPOPT_RR: "rr", IPOPT_LSRR: "lsrr", IPOPT_SSRR: "ssrr"}[kind]
    addresses = []
    ptr = 4
    while ptr <= 37 and ptr <= optlen - 3:
        addresses.append(_dotted(buf[ptr - 1 : ptr + 3]))
        ptr += 4
    return f"ip.{name}(ptr={buf[2]},data={'/'.join(addresses)})+"


def _describe_timestamp(optlen: int, buf: bytes) -> str:
    overflow = (buf[3] & 0xF0) >> 4
    flags = buf[3] & 0x0F
    names = {
        IPOPT_TS_TSONLY: "tsonly",
        IPOPT_TS_TSANDADDR: "tsandaddr",
        IPOPT_TS_PRESPEC: "prespec",
    }
    flag_text = names.get(flags, str(flags))
    entries = []
    ptr = 5
    while ptr <= 37 and ptr <= optlen - 4:
        if flags not in (IPOPT_TS_TSANDADDR, IPOPT_TS_PRESPEC):
            entries.append(str(_u32(buf, ptr - 1)))
            ptr += 4
        else:
            addr = _dotted(buf[ptr - 1 : ptr + 3])
            entries.append(f"{_u32(buf, ptr + 3)}@{addr}")
            ptr += 8
    return (
        f"ip.ts(ptr={buf[2]},flags={flag_text},"
        f"overflow={overflow},data={'/'.join(entries)})+"
    )


def describe_ip_option(data: bytes) -> str:
    """Describe one IP option given its raw bytes."""
    kind, optlen, buf = _option_parts(data, "IP option")
    if kind == IPOPT_EOL:
        return "ip.eol()+"
    if kind == IPOPT_NOP:
        return "ip.nop()+"
    if kind in (IPOPT_RR, IPOPT_LSRR, IPOPT_SSRR):
        return _describe_route(kind, optlen, buf)
    if kind == IPOPT_TIMESTAMP:
        return _describe_timestamp(optlen, buf)
    hex_text = "".join(f"0x{b:02x}" for b in buf[:optlen])
    return f"ip.unknown(hex={hex_text})+"


def describe_icmp(header: bytes) -> str:
    """Describe an ICMP header; the fields shown depend on the message type."""
    buf = _need(header, ICMPHDR_SIZE, "ICMP header")
    icmp_type, code = buf[0], buf[1]
    fields = [f"type={icmp_type}", f"code={code}"]
    if icmp_type in (
        ICMP_DEST_UNREACH,
        ICMP_TIME_EXCEEDED,
        ICMP_PARAMETERPROB,
        ICMP_SOURCE_QUENCH,
    ):
        fields.append(f"unused={_u32(buf, 4)}")
    if icmp_type in (
        ICMP_ECHOREPLY,
        ICMP_ECHO,
        ICMP_TIMESTAMP,
        ICMP_TIMESTAMPREPLY,
        ICMP_INFO_REQUEST,
        ICMP_INFO_REPLY,
    ):
        fields.append(f"id={int.from_bytes(buf[4:6], 'big')}")
        fields.append(f"seq={int.from_bytes(buf[6:8], 'big')}")
    if icmp_type == ICMP_REDIRECT:
        fields.append(f"gw={_dotted(buf[4:8])}")
    return f"icmp({','.join(fields)})+"


def describe_udp(header: bytes) -> str:
    """Describe a UDP header."""
    sport, dport, length, cksum = struct.unpack_from(
        "!HHHH", _need(header, UDPHDR_SIZE, "UDP header")
    )
    return f"udp(sport={sport},dport={dport},len={length},cksum=0x{cksum:04x})+"


def describe_tcp(header: bytes, default: bytes | None = None) -> str:
    """Describe a TCP header; x2, off and urp equal to ``default`` are left out."""
    sport, dport, seq, ack, offx2, flags, win, cksum, urp = _TCP_STRUCT.unpack_from(
        _need(header, TCPHDR_SIZE, "TCP header")
    )
    d = None
    if default is not None:
        d = _TCP_STRUCT.unpack_from(_need(default, TCPHDR_SIZE, "default TCP header"))
    fields = [f"sport={sport}", f"dport={dport}", f"seq={seq}", f"ack={ack}"]
    x2, off = offx2 & 0x0F, offx2 >> 4
    if d is None or x2 != (d[4] & 0x0F):
        fields.append(f"x2=0x{x2:1x}")
    if d is None or off != (d[4] >> 4):
        fields.append(f"off={off}")
    letters = "".join(letter for mask, letter in _TCP_FLAG_LETTERS if flags & mask)
    fields.append(f"flags={letters}")
    fields.append(f"win={win}")
    fields.append(f"cksum=0x{cksum:04x}")
    if d is None or urp != d[8]:
        fields.append(f"urp={urp}")
    return f"tcp({','.join(fields)})+"


def describe_tcp_option(data: bytes) -> str:
    """Describe one TCP option given its raw bytes."""
    kind, optlen, buf = _option_parts(data, "TCP option")
    if kind == TCPOPT_EOL:
        return "tcp.eol()+"
    if kind == TCPOPT_NOP:
        return "tcp.nop()+"
    if kind == TCPOPT_MAXSEG:
        return f"tcp.mss(size={int.from_bytes(buf[2:4], 'big')})+"
    if kind == TCPOPT_WINDOW:
        return f"tcp.wscale(shift={buf[2]})+"
    if kind == TCPOPT_SACK_PERM:
        return "tcp.sackperm()+"
    if kind == TCPOPT_SACK:
        blocks = max(0, (optlen - 2) // 8)
        text = "/".join(
            f"{_u32(buf, 2 + 8 * i)}-{_u32(buf, 6 + 8 * i)}" for i in range(blocks)
        )
        return f"tcp.sack(blocks={text})+"
    if kind == TCPOPT_ECHOREQUEST:
        return f"tcp.echoreq(info={_u32(buf, 2)})+"
    if kind == TCPOPT_ECHOREPLY:
        return f"tcp.echoreply(info={_u32(buf, 2)})+"
    if kind == TCPOPT_TIMESTAMP:
        return f"tcp.timestamp(val={_u32(buf, 2)},ecr={_u32(buf, 6)})+"
    return f"tcp.unknown(hex={buf[:optlen].hex()})+"


def describe_igrp(header: bytes) -> str:
    """Describe an IGRP header."""
    vop, edition, autosys, interior, system, exterior, cksum = _IGRP_STRUCT.unpack_from(
        _need(header, IGRPHDR_SIZE, "IGRP header")
    )
    version, opcode = vop >> 4, vop & 0x0F
    if opcode == IGRP_OPCODE_UPDATE:
        opcode_text = "update"
    elif opcode == IGRP_OPCODE_REQUEST:
        opcode_text = "request"
    else:
        opcode_text = str(opcode)
    return (
        f"igrp(version={version},opcode={opcode_text},edition={edition},"
        f"autosys={autosys},interior={interior},system={system},"
        f"exterior={exterior},cksum=0x{cksum:04x})+"
    )


def describe_igrp_entry(entry: bytes) -> str:
    """Describe one IGRP routing entry."""
    buf = _need(entry, IGRPENTRY_SIZE, "IGRP entry")
    return (
        f"igrp.entry(dest={_dotted(buf[0:3])},delay={_u24(buf, 3)},"
        f"bandwidth={_u24(buf, 6)},mtu={int.from_bytes(buf[9:11], 'big')},"
        f"reliability={buf[11]},load={buf[12]},hopcount={buf[13]})+"
    )


def describe_data(data: bytes, hexdata: bool = False) -> str:
    """Describe a payload as hex digits or as an escaped string."""
    data = bytes(data)
    if hexdata:
        return f"data(hex={data.hex()})+"
    text = "".join(
        chr(b) if 0x21 <= b <= 0x7E and b not in _DATA_SPECIAL else f"\\{b:02x}"
        for b in data
    )
    return f"data(str={text})+"


def _describe_layer(layer: Layer, hexdata: bool) -> str:
    kind = layer.type
    if kind is LayerType.IP:
        return describe_ip(layer.data, layer.default)
    if kind is LayerType.IPOPT:
        return describe_ip_option(layer.data)
    if kind is LayerType.ICMP:
        return describe_icmp(layer.data)
    if kind is LayerType.UDP:
        return describe_udp(layer.data)
    if kind is LayerType.TCP:
        return describe_tcp(layer.data, layer.default)
    if kind is LayerType.TCPOPT:
        return describe_tcp_option(layer.data)
    if kind is LayerType.IGRP:
        return describe_igrp(layer.data)
    if kind is LayerType.IGRPENTRY:
        return describe_igrp_entry(layer.data)
    return describe_data(layer.data, hexdata)


def describe_packet(layers: Iterable[Layer], hexdata: bool = False) -> str:
    """Describe a whole packet, layers joined by '+'."""
    text = "".join(_describe_layer(layer, hexdata) for layer in layers)
    return text[:-1]