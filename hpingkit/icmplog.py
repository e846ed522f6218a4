"""Text lines describing received ICMP error messages."""

from __future__ import annotations

ICMP_EXC_TTL = 0
ICMP_EXC_FRAGTIME = 1

_UNREACH_MESSAGES = {
    0: "Network Unreachable from",
    1: "Host Unreachable from",
    2: "Protocol Unreachable from",
    3: "Port Unreachable from",
    4: "Fragmentation Needed/DF set from",
    5: "Source Route failed from",
    13: "Packet filtered from",
    14: "Precedence violation from",
    15: "precedence cut off from",
}


def _name_part(hostname: str | None) -> str:
    # None: no reverse lookup requested; empty string: the lookup failed.
    if hostname is None:
        return ""
    return f"name={hostname or 'UNKNOWN'}"


def describe_time_exceeded(src_addr: str, code: int, hostname: str | None = None) -> str:
    """Describe an ICMP time-exceeded message.

    ``hostname`` is None when no name lookup is wanted, or the looked-up
    name, with an empty string meaning the lookup found nothing.
    """
    if code == ICMP_EXC_TTL:
        text = f"TTL 0 during transit from ip={src_addr}"
    elif code == ICMP_EXC_FRAGTIME:
        text = f"TTL 0 during reassembly from ip={src_addr}"
    else:
        text = ""
    return text + _name_part(hostname)


def describe_unreachable(src_addr: str, code: int, hostname: str | None = None) -> str:
    """Describe an ICMP destination-unreachable message.

    ``hostname`` follows the same convention as in describe_time_exceeded.
    """
    message = _UNREACH_MESSAGES.get(code)
    if message is not None:
        text = f"ICMP {message} ip={src_addr}"
    else:
        text = f"ICMP Unreachable type={code} from ip={src_addr}"
    return text + _name_part(hostname)