"""Command line option handling for the packet generator."""

from __future__ import annotations

import os
import socket
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

IPHDR_SIZE = 20
TCPHDR_SIZE = 20

TH_FIN = 0x01
TH_SYN = 0x02
TH_RST = 0x04
TH_PUSH = 0x08
TH_ACK = 0x10
TH_URG = 0x20
TH_X = 0x40
TH_Y = 0x80

BIND_NONE = 0
BIND_DPORT = 1
BIND_TTL = 2

LSRR_OPTION = 131
SSRR_OPTION = 137

DEFAULT_TRACEROUTE_TTL = 1
MAX_ROUTE_HOPS = 62
MAX_TEXT = 1023
MAX_SIGNATURE = 1024

_SPACE = " \t\n\v\f\r"
_HEX = "0123456789abcdefABCDEF"


class OptionError(ValueError):
    """Raised when the command line is invalid."""


class MissingTargetError(OptionError):
    """Raised when no target host was given and one is required."""

    def __init__(self, message: str = "missing host argument") -> None:
        super().__init__(message)


@dataclass
class HpingOptions:
    """Everything the command line selects."""

    target: str = ""
    count: int = -1
    sending_wait: int = 1
    wait_in_usec: bool = False
    usec_delay: int = 0
    numeric: bool = False
    gethost: bool = True
    quiet: bool = False
    interface: str = ""
    help_topic: str | None = None
    dst_port: int = 0
    base_dst_port: int = 0
    incdport: bool = False
    force_incdport: bool = False
    init_sport: int = -1
    ttl: int = 64
    ip_id: int = -1
    winsize: int = 512
    spoof_addr: str = ""
    tcp_flags: int = 0
    fragment: bool = False
    more_frag: bool = False
    dont_frag: bool = False
    frag_offset: int = 0
    tcp_offset: int = TCPHDR_SIZE >> 2
    relid: bool = False
    data_size: int = 0
    rawip: bool = False
    icmp: bool = False
    udp: bool = False
    scan: bool = False
    scan_ports: str = ""
    listen: bool = False
    sign_mode: bool = False
    sign: str = ""
    sign_len: int = 0
    raw_ip_protocol: int = 6
    icmp_type: int = 8
    icmp_code: int = 0
    ctrlz_bind: int = BIND_DPORT
    debug: bool = False
    verbose: bool = False
    winid_order: bool = False
    keep_still: bool = False
    data_from_file: bool = False
    data_filename: str = ""
    hexdump: bool = False
    contdump: bool = False
    safe: bool = False
    end: bool = False
    traceroute: bool = False
    tos: int = 0
    virtual_mtu: int = 16
    seqnum: bool = False
    badcksum: bool = False
    set_seqnum: bool = False
    tcp_seqnum: int = 0
    set_ack: bool = False
    tcp_ack: int = 0
    rroute: bool = False
    icmp_ip_version: int = 4
    icmp_ip_ihl: int = IPHDR_SIZE >> 2
    icmp_ip_tot_len: int = 0
    icmp_ip_id: int = 0
    icmp_ip_protocol: int = 6
    icmp_ip_srcip: str = ""
    icmp_ip_dstip: str = ""
    icmp_gwip: str = ""
    icmp_ip_srcport: int = 0
    icmp_ip_dstport: int = 0
    force_icmp: bool = False
    icmp_cksum: int = -1
    tcp_exitcode: bool = False
    tr_keep_ttl: bool = False
    tcp_timestamp: bool = False
    tr_stop: bool = False
    tr_no_rtt: bool = False
    rand_dest: bool = False
    rand_source: bool = False
    lsrr: bytes = b""
    ssrr: bytes = b""
    apd_send: str | None = None
    beep: bool = False
    flood: bool = False
    clock_skew: bool = False
    cs_window: int = 300
    cs_window_shift: int = 5
    cs_vector_len: int = 10
    warnings: list[str] = field(default_factory=list)


class _Arg(Enum):
    NONE = 0
    NEEDED = 1


@dataclass(frozen=True)
class _Spec:
    short: str | None
    long: str
    arg: _Arg
    setuid_disabled: bool


def _spec(short: str | None, long: str, needs_arg: bool, disabled: bool) -> _Spec:
    return _Spec(short, long, _Arg.NEEDED if needs_arg else _Arg.NONE, disabled)


_SPECS = (
    _spec("c", "count", True, False),
    _spec("i", "interval", True, True),
    _spec("n", "numeric", False, False),
    _spec("q", "quiet", False, False),
    _spec("I", "interface", True, False),
    _spec("h", "help", False, False),
    _spec("v", "version", False, False),
    _spec("p", "destport", True, True),
    _spec("s", "baseport", True, True),
    _spec("t", "ttl", True, False),
    _spec("N", "id", True, True),
    _spec("w", "win", True, True),
    _spec("a", "spoof", True, True),
    _spec("F", "fin", False, True),
    _spec("S", "syn", False, True),
    _spec("R", "rst", False, True),
    _spec("P", "push", False, True),
    _spec("A", "ack", False, True),
    _spec("U", "urg", False, True),
    _spec("X", "xmas", False, True),
    _spec("Y", "ymas", False, True),
    _spec("f", "frag", False, True),
    _spec("x", "morefrag", False, True),
    _spec("y", "dontfrag", False, False),
    _spec("g", "fragoff", True, True),
    _spec("O", "tcpoff", True, True),
    _spec("r", "rel", False, False),
    _spec("d", "data", True, True),
    _spec("0", "rawip", False, True),
    _spec("1", "icmp", False, False),
    _spec("2", "udp", False, False),
    _spec("8", "scan", True, False),
    _spec("z", "bind", False, False),
    _spec("Z", "unbind", False, False),
    _spec("D", "debug", False, False),
    _spec("V", "verbose", False, False),
    _spec("W", "winid", False, False),
    _spec("k", "keep", False, False),
    _spec("E", "file", True, True),
    _spec("j", "dump", False, True),
    _spec("J", "print", False, True),
    _spec("e", "sign", True, True),
    _spec("9", "listen", True, True),
    _spec("B", "safe", False, True),
    _spec("T", "traceroute", False, False),
    _spec("o", "tos", True, False),
    _spec("m", "mtu", True, True),
    _spec("Q", "seqnum", False, True),
    _spec("b", "badcksum", False, True),
    _spec("M", "setseq", True, True),
    _spec("L", "setack", True, True),
    _spec("C", "icmptype", True, True),
    _spec("K", "icmpcode", True, True),
    _spec("u", "end", False, True),
    _spec("G", "rroute", False, False),
    _spec("H", "ipproto", True, True),
    _spec(None, "icmp-help", False, False),
    _spec(None, "icmp-ipver", True, True),
    _spec(None, "icmp-iphlen", True, True),
    _spec(None, "icmp-iplen", True, True),
    _spec(None, "icmp-ipid", True, True),
    _spec(None, "icmp-ipproto", True, True),
    _spec(None, "icmp-cksum", True, True),
    _spec(None, "icmp-ts", False, False),
    _spec(None, "icmp-addr", False, False),
    _spec(None, "tcpexitcode", False, False),
    _spec(None, "fast", False, True),
    _spec(None, "faster", False, True),
    _spec(None, "tr-keep-ttl", False, False),
    _spec(None, "tcp-timestamp", False, False),
    _spec(None, "tr-stop", False, False),
    _spec(None, "tr-no-rtt", False, False),
    _spec(None, "rand-dest", False, False),
    _spec(None, "rand-source", False, False),
    _spec(None, "lsrr", True, True),
    _spec(None, "ssrr", True, True),
    _spec(None, "route-help", False, False),
    _spec(None, "apd-send", True, False),
    _spec(None, "icmp-ipsrc", True, True),
    _spec(None, "icmp-ipdst", True, True),
    _spec(None, "icmp-gw", True, True),
    _spec(None, "icmp-srcport", True, True),
    _spec(None, "icmp-dstport", True, True),
    _spec(None, "force-icmp", False, False),
    _spec(None, "beep", False, False),
    _spec(None, "flood", False, False),
    _spec(None, "clock-skew", False, False),
    _spec(None, "clock-skew-win", True, False),
    _spec(None, "clock-skew-win-shift", True, False),
    _spec(None, "clock-skew-packets-per-sample", True, False),
)

_BY_SHORT = {s.short: s for s in _SPECS if s.short}
_BY_LONG = {s.long: s for s in _SPECS}


# ---------------------------------------------------------------- numbers
def _strtol(text: str) -> int:
    """Parse a leading integer with C base detection; trailing junk is ignored."""
    s = text.lstrip(_SPACE)
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    base = 10
    if s[:2].lower() == "0x" and s[2:3] and s[2] in _HEX:
        base, s = 16, s[2:]
    elif s.startswith("0"):
        base = 8
    valid = "0123456789abcdefghijklmnopqrstuvwxyz"[:base]
    digits = []
    for ch in s:
        if ch.lower() not in valid or not ch.isascii():
            break
        digits.append(ch)
    return sign * int("".join(digits), base) if digits else 0


def _strtoul(text: str) -> int:
    return _strtol(text) & 0xFFFFFFFF


def _atol(text: str) -> int:
    s = text.lstrip(_SPACE)
    sign = 1
    if s[:1] in ("+", "-"):
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    digits = []
    for ch in s:
        if not ("0" <= ch <= "9"):
            break
        digits.append(ch)
    return sign * int("".join(digits)) if digits else 0


def _scan_hex2(text: str) -> int | None:
    s = text.lstrip(_SPACE)
    digits = []
    for ch in s[:2]:
        if ch not in _HEX:
            break
        digits.append(ch)
    return int("".join(digits), 16) if digits else None


def _truncate(text: str) -> str:
    return text[:MAX_TEXT]


# ----------------------------------------------------------------- routes
def parse_route(text: str) -> bytes:
    """Parse a source route such as ``[ptr:]addr/addr/...``.

    Returns the option without its kind byte: the length byte (which counts
    the kind byte too), the pointer byte, then four bytes per address. The
    pointer defaults to 8, or 4 for an empty route.
    """
    addresses: list[bytes] = []
    pointer: int | None = None
    i = 0
    end = len(text)
    while i < end:
        j = i
        while j < end and (text[j].isascii() and text[j].isalnum() or text[j] == "."):
            j += 1
        c = text[j] if j < end else ""
        if c in ("", "/"):
            if len(addresses) >= MAX_ROUTE_HOPS:
                raise OptionError("too long route")
            try:
                addresses.append(socket.inet_aton(text[i:j]))
            except (OSError, ValueError) as exc:
                raise OptionError("invalid IP adress in route") from exc
            if c == "/":
                j += 1
        elif c == ":":
            prefix = text[:j]
            if i == 0 and 0 < j < 4 and prefix.isdigit() and int(prefix) < 256:
                pointer = int(prefix)
                j += 1
            else:
                raise OptionError(f"invalid source route '{text}'")
        else:
            raise OptionError(f"invalid source route '{text}'")
        i = j
    if pointer is None:
        pointer = 8 if addresses else 4
    length = 4 * len(addresses) + 3
    return bytes([length & 0xFF, pointer]) + b"".join(addresses)


# ---------------------------------------------------------------- parsing
def _running_setuid() -> bool:
    getuid = getattr(os, "getuid", None)
    geteuid = getattr(os, "geteuid", None)
    if getuid is None or geteuid is None:
        return False
    return getuid() != geteuid()


def _tokens(argv: Sequence[str]):
    """Yield (spec, argument) pairs, with spec None for plain arguments."""
    args = list(argv)
    pos = 0
    while pos < len(args):
        arg = args[pos]
        pos += 1
        if arg == "--":
            for rest in args[pos:]:
                yield None, rest
            return
        if arg.startswith("--"):
            name, eq, value = arg[2:].partition("=")
            spec = _BY_LONG.get(name)
            if spec is None:
                matches = [s for s in _SPECS if s.long.startswith(name)]
                if not matches:
                    raise OptionError(f"unrecognized option '{arg}'")
                if len(matches) > 1:
                    raise OptionError(f"option '{arg}' is ambiguous")
                spec = matches[0]
            if spec.arg is _Arg.NEEDED:
                if not eq:
                    if pos >= len(args):
                        raise OptionError(f"option '--{spec.long}' requires an argument")
                    value = args[pos]
                    pos += 1
                yield spec, value
            else:
                if eq:
                    raise OptionError(f"option '--{spec.long}' doesn't allow an argument")
                yield spec, None
        elif arg.startswith("-") and len(arg) > 1:
            k = 1
            while k < len(arg):
                spec = _BY_SHORT.get(arg[k])
                if spec is None:
                    raise OptionError(f"invalid option -- '{arg[k]}'")
                k += 1
                if spec.arg is _Arg.NEEDED:
                    value = arg[k:]
                    if not value:
                        if pos >= len(args):
                            raise OptionError(
                                f"option requires an argument -- '{spec.short}'"
                            )
                        value = args[pos]
                        pos += 1
                    yield spec, value
                    break
                yield spec, None
        else:
            yield None, arg


_FLAG_OPTIONS = {
    "numeric": "numeric",
    "quiet": "quiet",
    "frag": "fragment",
    "morefrag": "more_frag",
    "dontfrag": "dont_frag",
    "rel": "relid",
    "rawip": "rawip",
    "icmp": "icmp",
    "udp": "udp",
    "debug": "debug",
    "verbose": "verbose",
    "winid": "winid_order",
    "keep": "keep_still",
    "dump": "hexdump",
    "print": "contdump",
    "safe": "safe",
    "end": "end",
    "traceroute": "traceroute",
    "seqnum": "seqnum",
    "badcksum": "badcksum",
    "rroute": "rroute",
    "force-icmp": "force_icmp",
    "tcpexitcode": "tcp_exitcode",
    "tr-keep-ttl": "tr_keep_ttl",
    "tcp-timestamp": "tcp_timestamp",
    "tr-stop": "tr_stop",
    "tr-no-rtt": "tr_no_rtt",
    "rand-dest": "rand_dest",
    "rand-source": "rand_source",
    "beep": "beep",
    "flood": "flood",
}

_TCP_FLAG_OPTIONS = {
    "fin": TH_FIN,
    "syn": TH_SYN,
    "rst": TH_RST,
    "push": TH_PUSH,
    "ack": TH_ACK,
    "urg": TH_URG,
    "xmas": TH_X,
    "ymas": TH_Y,
}

_INT_OPTIONS = {
    "count": "count",
    "baseport": "init_sport",
    "id": "ip_id",
    "win": "winsize",
    "fragoff": "frag_offset",
    "tcpoff": "tcp_offset",
    "ipproto": "raw_ip_protocol",
    "icmp-ipver": "icmp_ip_version",
    "icmp-iphlen": "icmp_ip_ihl",
    "icmp-iplen": "icmp_ip_tot_len",
    "icmp-ipid": "icmp_ip_id",
    "icmp-ipproto": "icmp_ip_protocol",
    "icmp-srcport": "icmp_ip_srcport",
    "icmp-dstport": "icmp_ip_dstport",
    "icmp-cksum": "icmp_cksum",
}

_TEXT_OPTIONS = {
    "interface": "interface",
    "spoof": "spoof_addr",
    "icmp-ipsrc": "icmp_ip_srcip",
    "icmp-ipdst": "icmp_ip_dstip",
    "icmp-gw": "icmp_gwip",
}

_HELP_OPTIONS = {
    "help": "usage",
    "version": "version",
    "icmp-help": "icmp",
    "route-help": "route",
}


def parse_options(argv: Sequence[str] | None = None) -> HpingOptions:
    """Parse the command line arguments (without the program name).

    A help or version request stops parsing at once and returns the options
    with ``help_topic`` set. Raises MissingTargetError when no target host
    is given outside listen mode, and OptionError for any other problem.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise MissingTargetError()

    opts = HpingOptions()
    ttl_set = False
    target_set = False
    delay_changed = False
    setuid = _running_setuid()

    for spec, value in _tokens(args):
        if spec is None:
            if target_set:
                raise OptionError("you must specify only one target host at a time")
            opts.target = _truncate(value)
            target_set = True
            continue
        if spec.setuid_disabled and setuid:
            raise OptionError("Option disabled when setuid")
        name = spec.long

        if name in _HELP_OPTIONS:
            opts.help_topic = _HELP_OPTIONS[name]
            return opts
        if name in _FLAG_OPTIONS:
            setattr(opts, _FLAG_OPTIONS[name], True)
        elif name in _TCP_FLAG_OPTIONS:
            opts.tcp_flags |= _TCP_FLAG_OPTIONS[name]
        elif name in _INT_OPTIONS:
            setattr(opts, _INT_OPTIONS[name], _strtol(value))
        elif name in _TEXT_OPTIONS:
            setattr(opts, _TEXT_OPTIONS[name], _truncate(value))
        elif name == "interval":
            delay_changed = True
            if value.startswith("u"):
                opts.wait_in_usec = True
                opts.usec_delay = _atol(value[1:])
            else:
                opts.sending_wait = _strtol(value)
        elif name == "destport":
            if value.startswith("+"):
                opts.incdport = True
                value = value[1:]
            if value.startswith("+"):
                opts.force_incdport = True
                value = value[1:]
            opts.dst_port = opts.base_dst_port = _strtol(value)
        elif name == "ttl":
            opts.ttl = _strtol(value)
            ttl_set = True
        elif name == "data":
            opts.data_size = _strtol(value) & 0xFFFF
        elif name == "icmp-ts":
            opts.icmp = True
            opts.icmp_type = 13
        elif name == "icmp-addr":
            opts.icmp = True
            opts.icmp_type = 17
        elif name == "scan":
            opts.scan = True
            opts.scan_ports = value
        elif name in ("listen", "sign"):
            if name == "listen":
                opts.listen = True
            else:
                opts.sign_mode = True
            opts.sign = _truncate(value)
            opts.sign_len = len(value)
        elif name == "icmptype":
            opts.icmp = True
            opts.icmp_type = _strtol(value)
        elif name == "icmpcode":
            opts.icmp = True
            opts.icmp_code = _strtol(value)
        elif name == "bind":
            opts.ctrlz_bind = BIND_TTL
        elif name == "unbind":
            opts.ctrlz_bind = BIND_NONE
        elif name == "file":
            opts.data_from_file = True
            opts.data_filename = _truncate(value)
        elif name == "tos":
            if value == "help":
                opts.help_topic = "tos"
                return opts
            tos = _scan_hex2(value)
            if tos is not None:
                opts.tos |= tos
        elif name == "mtu":
            mtu = _strtol(value)
            opts.fragment = True
            if mtu < 0 or mtu > 65535:
                mtu = 65535
                opts.warnings.append("Specified MTU too high, fixed to 65535.")
            opts.virtual_mtu = mtu
        elif name == "setseq":
            opts.set_seqnum = True
            opts.tcp_seqnum = _strtoul(value)
        elif name == "setack":
            opts.set_ack = True
            opts.tcp_ack = _strtoul(value)
        elif name == "fast":
            delay_changed = True
            opts.wait_in_usec = True
            opts.usec_delay = 100000
        elif name == "faster":
            delay_changed = True
            opts.wait_in_usec = True
            opts.usec_delay = 1
            # The faster option has always enabled tr-keep-ttl as well.
            opts.tr_keep_ttl = True
        elif name == "lsrr":
            route = parse_route(value)
            if opts.lsrr:
                opts.warnings.append("Warning: erasing previously given loose source route")
            opts.lsrr = bytes([LSRR_OPTION]) + route
        elif name == "ssrr":
            route = parse_route(value)
            if opts.ssrr:
                opts.warnings.append("Warning: erasing previously given strong source route")
            opts.ssrr = bytes([SSRR_OPTION]) + route
        elif name == "apd-send":
            opts.apd_send = value
        elif name == "clock-skew":
            opts.tcp_timestamp = True
            opts.clock_skew = True
        elif name == "clock-skew-win":
            opts.cs_window = _strtol(value)
            if opts.cs_window < 30:
                raise OptionError("clock skew window can't be < 30 sec.")
        elif name == "clock-skew-win-shift":
            opts.cs_window_shift = _strtol(value)
            if opts.cs_window_shift < 1:
                raise OptionError("clock skew window shift can't be < 1")
        elif name == "clock-skew-packets-per-sample":
            opts.cs_vector_len = _strtol(value)
            if opts.cs_vector_len < 1:
                raise OptionError("clock skew packets per sample can't be < 1")

    if not target_set and opts.listen and opts.safe:
        raise OptionError(
            "you must specify a target host if you require safe protocol\n"
            "because hping needs a target for HCMP packets"
        )
    if not target_set and not opts.listen:
        raise MissingTargetError()

    if opts.numeric:
        opts.gethost = False

    _validate(opts)

    if opts.safe:
        opts.ip_id = 1
    if opts.traceroute and opts.ctrlz_bind == BIND_DPORT:
        opts.ctrlz_bind = BIND_TTL
    if opts.traceroute and not ttl_set:
        opts.ttl = DEFAULT_TRACEROUTE_TTL
    if opts.sign_mode and not opts.data_size:
        opts.data_size = opts.sign_len & 0xFFFF
    if opts.scan and not delay_changed:
        opts.wait_in_usec = True
        opts.usec_delay = 0
    return opts


def _validate(opts: HpingOptions) -> None:
    if opts.data_size + IPHDR_SIZE + TCPHDR_SIZE > 65535:
        raise OptionError(
            "sorry, data size must be <= %d" % (65535 - IPHDR_SIZE + TCPHDR_SIZE)
        )
    if opts.count <= 0 and opts.count != -1:
        raise OptionError("count must > 0")
    if opts.sending_wait < 0:
        raise OptionError("bad timing interval")
    if opts.wait_in_usec and opts.usec_delay < 0:
        raise OptionError("bad timing interval")
    if opts.data_from_file and opts.data_size == 0:
        raise OptionError("-E option useless without -d")
    if opts.sign_mode and opts.data_size and opts.sign_len > opts.data_size:
        raise OptionError(
            f"signature ({opts.sign_len} bytes) is larger than data size\n"
            "check -d option, don't specify -d to let hping compute it"
        )
    if (opts.sign_mode or opts.listen) and opts.sign_len > MAX_SIGNATURE:
        raise OptionError("signature too big")
    if opts.safe and opts.ip_id != -1:
        raise OptionError("sorry, you can't set id and use safe protocol at some time")
    if opts.safe and not opts.data_from_file and not opts.listen:
        raise OptionError(
            "sorry, safe protocol is useless without 'data from file' option"
        )
    if opts.safe and not opts.sign_mode and not opts.listen:
        raise OptionError(
            "sorry, safe protocol require you sign your packets, see --sign | -e option"
        )
    if opts.rand_dest and not opts.interface:
        raise OptionError(
            "you need to specify an interface when the --rand-dest option is enabled"
        )