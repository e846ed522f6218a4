import socket
import struct

import pytest

from hpingkit.rapd import (
    Layer,
    LayerType,
    describe_data,
    describe_icmp,
    describe_igrp,
    describe_igrp_entry,
    describe_ip,
    describe_ip_option,
    describe_packet,
    describe_tcp,
    describe_tcp_option,
    describe_udp,
)


def ip_header(ttl=64, ident=1, frag_off=0, tos=0, proto=6,
              src="10.0.0.1", dst="10.0.0.2", tot_len=40, check=0x1234):
    return struct.pack(
        "!BBHHHBBH4s4s", 0x45, tos, tot_len, ident, frag_off, ttl, proto, check,
        socket.inet_aton(src), socket.inet_aton(dst),
    )


def tcp_header(sport=1000, dport=80, seq=7, ack=9, flags=0x02, win=512,
               cksum=0xabcd, urp=0, off=5, x2=0):
    return struct.pack("!HHIIBBHHH", sport, dport, seq, ack,
                       (off << 4) | x2, flags, win, cksum, urp)


def test_ip_option_eol_and_nop():
    assert describe_ip_option(b"\x00") == "ip.eol()+"
    assert describe_ip_option(b"\x01") == "ip.nop()+"


def test_ip_option_record_route():
    a, b = "10.0.0.1", "10.0.0.2"
    data = bytes([7, 11, 4]) + socket.inet_aton(a) + socket.inet_aton(b)
    assert describe_ip_option(data) == f"ip.rr(ptr=4,data={a}/{b})+"


def test_ip_option_empty_loose_route():
    assert describe_ip_option(bytes([131, 3, 4])) == "ip.lsrr(ptr=4,data=)+"


def test_ip_option_timestamp_with_address():
    addr = "1.2.3.4"
    data = bytes([68, 12, 5, 0x01]) + socket.inet_aton(addr) + struct.pack("!I", 77)
    assert describe_ip_option(data) == f"ip.ts(ptr=5,flags=tsandaddr,overflow=0,data=77@{addr})+"


def test_ip_option_unknown():
    assert describe_ip_option(b"\x99\x03\x01") == "ip.unknown(hex=0x990x030x01)+"


def test_ip_option_empty_raises():
    with pytest.raises(ValueError):
        describe_ip_option(b"")


def test_ip_without_default_shows_every_field():
    text = describe_ip(ip_header(ttl=33, ident=99))
    assert text.startswith("ip(ihl=0x5,ver=0x4,tos=0x00,")
    assert "id=99," in text and "ttl=33," in text
    assert text.endswith("saddr=10.0.0.1,daddr=10.0.0.2)+")


def test_ip_with_equal_default_hides_defaulted_fields():
    header = ip_header()
    text = describe_ip(header, header)
    assert "ihl=" not in text and "ttl=" not in text and "id=" not in text
    assert "mf=" not in text and "df=" not in text
    assert "totlen=40," in text and "proto=6," in text


def test_ip_df_flag_and_fragment_offset():
    text = describe_ip(ip_header(frag_off=0x4000 | 3), ip_header())
    assert "df=1," in text
    assert f"fragoff={3 << 3}," in text
    assert "mf=" not in text


def test_ip_short_header_raises():
    with pytest.raises(ValueError):
        describe_ip(b"\x45" * 10)


def test_icmp_echo_shows_id_and_seq():
    header = struct.pack("!BBHHH", 8, 0, 0, 321, 17)
    assert describe_icmp(header) == "icmp(type=8,code=0,id=321,seq=17)+"


def test_icmp_unreachable_shows_unused():
    header = struct.pack("!BBHI", 3, 1, 0, 5)
    assert describe_icmp(header) == "icmp(type=3,code=1,unused=5)+"


def test_icmp_redirect_shows_gateway():
    gw = "192.168.1.1"
    header = struct.pack("!BBH", 5, 0, 0) + socket.inet_aton(gw)
    assert describe_icmp(header) == f"icmp(type=5,code=0,gw={gw})+"


def test_udp():
    header = struct.pack("!HHHH", 1234, 53, 8, 0xBEEF)
    assert describe_udp(header) == f"udp(sport=1234,dport=53,len=8,cksum=0x{0xBEEF:04x})+"


def test_tcp_flags_and_defaults():
    header = tcp_header(flags=0x12)
    text = describe_tcp(header, header)
    assert "flags=sa," in text
    assert "x2=" not in text and "off=" not in text and "urp=" not in text
    assert text.endswith(f"cksum=0x{0xabcd:04x})+")


def test_tcp_all_flags_order():
    assert "flags=fsrpauxy," in describe_tcp(tcp_header(flags=0xFF))


def test_tcp_without_default():
    text = describe_tcp(tcp_header(urp=5))
    assert text.startswith("tcp(sport=1000,dport=80,seq=7,ack=9,x2=0x0,off=5,")
    assert text.endswith("urp=5)+")


def test_tcp_options_fixed():
    assert describe_tcp_option(b"\x00") == "tcp.eol()+"
    assert describe_tcp_option(b"\x01") == "tcp.nop()+"
    assert describe_tcp_option(b"\x04\x02") == "tcp.sackperm()+"


def test_tcp_option_values():
    assert describe_tcp_option(bytes([2, 4]) + (1460).to_bytes(2, "big")) == "tcp.mss(size=1460)+"
    assert describe_tcp_option(bytes([3, 3, 7])) == "tcp.wscale(shift=7)+"
    ts = bytes([8, 10]) + struct.pack("!II", 11, 22)
    assert describe_tcp_option(ts) == "tcp.timestamp(val=11,ecr=22)+"
    echo = bytes([6, 6]) + struct.pack("!I", 42)
    assert describe_tcp_option(echo) == "tcp.echoreq(info=42)+"


def test_tcp_option_sack_blocks():
    data = bytes([5, 18]) + struct.pack("!IIII", 1, 2, 3, 4)
    assert describe_tcp_option(data) == "tcp.sack(blocks=1-2/3-4)+"


def test_tcp_option_unknown():
    data = b"\x1e\x04\xab\xcd"
    assert describe_tcp_option(data) == f"tcp.unknown(hex={data.hex()})+"


def test_igrp_opcodes():
    update = struct.pack("!BBHHHHH", 0x11, 2, 100, 1, 2, 3, 0x0F0F)
    assert describe_igrp(update).startswith("igrp(version=1,opcode=update,edition=2,autosys=100,")
    request = struct.pack("!BBHHHHH", 0x12, 0, 0, 0, 0, 0, 0)
    assert "opcode=request," in describe_igrp(request)
    other = struct.pack("!BBHHHHH", 0x17, 0, 0, 0, 0, 0, 0)
    assert "opcode=7," in describe_igrp(other)


def test_igrp_entry():
    entry = bytes([10, 1, 2]) + (300).to_bytes(3, "big") + (5000).to_bytes(3, "big") \
        + (1500).to_bytes(2, "big") + bytes([255, 1, 4])
    assert describe_igrp_entry(entry) == (
        "igrp.entry(dest=10.1.2,delay=300,bandwidth=5000,mtu=1500,"
        "reliability=255,load=1,hopcount=4)+"
    )


def test_data_string_escapes_specials():
    assert describe_data(b"ab(c d") == "data(str=ab\\28c\\20d)+"


def test_data_hex():
    data = b"\x00\xffhi"
    assert describe_data(data, hexdata=True) == f"data(hex={data.hex()})+"


def test_packet_joins_layers_and_drops_last_separator():
    ip = ip_header()
    tcp = tcp_header()
    layers = [
        Layer(LayerType.IP, ip, ip),
        Layer(LayerType.TCP, tcp, tcp),
        Layer(LayerType.DATA, b"xyz"),
    ]
    expected = describe_ip(ip, ip) + describe_tcp(tcp, tcp) + describe_data(b"xyz")
    result = describe_packet(layers)
    assert result == expected[:-1]
    assert not result.endswith("+")


def test_packet_hexdata_and_empty():
    assert describe_packet([Layer(LayerType.DATA, b"\x01")], hexdata=True) == "data(hex=01)"
    assert describe_packet([]) == ""


def test_short_headers_raise():
    with pytest.raises(ValueError):
        describe_udp(b"\x00" * 4)
    with pytest.raises(ValueError):
        describe_igrp_entry(b"\x00" * 5)