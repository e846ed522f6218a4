# hpingkit

hpingkit holds the parts of a command-line packet prober that work without raw
sockets. It parses the prober's command line, turns packet headers into text,
keeps round-trip statistics and pulls signed payloads out of IP packets. It also
has a small arbitrary-precision integer library and an RC4-style pseudo-random
generator. It needs nothing outside the standard library.

## Modules

| Module | What it gives you |
| --- | --- |
| `hpingkit.options` | `parse_options(argv)` takes the arguments without the program name and returns an `HpingOptions` dataclass. It raises `MissingTargetError` when no target host is given outside listen mode and `OptionError` for anything else that is wrong. A help, version, ICMP-help, route-help or `--tos help` request stops parsing and sets `help_topic`; non-fatal notices go to `warnings`. `parse_route(text)` turns `[ptr:]addr/addr/...` into source-route option bytes: length, pointer, then four bytes per address (the option kind byte is not included). |
| `hpingkit.rapd` | Text descriptions of packets, such as `ip(...)+tcp(...)+data(...)`. `describe_packet(layers, hexdata)` joins a list of `Layer` values (each with a `LayerType`, its wire bytes and an optional default header). The per-layer functions are `describe_ip`, `describe_ip_option`, `describe_icmp`, `describe_udp`, `describe_tcp`, `describe_tcp_option`, `describe_igrp`, `describe_igrp_entry` and `describe_data`; each returns its text followed by `+`. |
| `hpingkit.stats` | `RttStats` keeps the minimum, maximum and running average round-trip time. `DelayTable` is a fixed-size ring of sent-packet records (`DelayEntry`); `lookup` matches a reply by sequence number or, for sequence 0, by source port, and returns `(seq, previous status, delay in ms)`. `IdRelativizer.relativize` returns the IP id increase per sequence step, or `None` for the first reply and for out-of-sequence ones. |
| `hpingkit.payload` | `find_signature(data, sign)` returns the offset of a signature or `None`. `ListenSession(sign, safe)` processes IP packets and returns a `ListenResult` with the data after the signature; in safe mode an unexpected IP id yields no payload and a `restart_from` id. |
| `hpingkit.icmplog` | `describe_time_exceeded` and `describe_unreachable` build text lines for ICMP error messages, optionally with a looked-up host name. |
| `hpingkit.resolve` | `resolve_addr(hostname)` returns a dotted IPv4 address for a numeric address or a host name and raises `ResolveError` when it cannot. |
| `hpingkit.bignum` | `Mpz`, an immutable signed arbitrary-precision integer with `+`, `-`, `*`, unary `-`, `abs()`, comparisons, truncating division (`tdiv_qr`, `tdiv_q`, `tdiv_r`), `mod`, `cmpabs`, `bits`, `set_bit`, `clear_bit`, `test_bit`, `lshift`, `rshift`, `bit_and` and `to_float`. Bit operations act on the magnitude and keep the sign. `from_float(value)` truncates a float toward zero. |
| `hpingkit.bignum_math` | `factorial`, `power`, `power_mod`, `isqrt`, `gcd` and `random_mpz`. Note that `factorial(0)` is 0 and `power(b, 0)` is `abs(b)`. `random_mpz` draws from a shared reproducible generator unless one is passed. |
| `hpingkit.bignum_text` | `to_string(z, base)` and `from_string(text, base)` for bases 2 to 36; `from_string` with base 0 guesses the base from a `0x`, `0b` or `0` prefix. `size_in_base` gives an upper bound on the number of digits. |
| `hpingkit.rc4` | `Rc4Generator` produces 32-bit values and can be reseeded with `seed(data)`. `identity_generator()` starts from the identity state box, so its output is reproducible; `system_seeded_generator()` seeds from the system entropy source and the clock. |

## Examples

Parse a command line:

```python
from hpingkit.options import OptionError, parse_options

try:
    opts = parse_options(["-S", "-p", "80", "-c", "3", "target.example.com"])
    print(opts.target, opts.dst_port, opts.count, opts.tcp_flags)
except OptionError as exc:
    print(f"bad options: {exc}")
```

Work with big integers:

```python
from hpingkit.bignum import Mpz
from hpingkit.bignum_math import factorial, power_mod
from hpingkit.bignum_text import from_string, to_string

n = factorial(30)
print(to_string(n, 10))
print(to_string(n, 16))

x = from_string("0xff", 0)
q, r = (x * Mpz(1000)).tdiv_qr(Mpz(7))
print(to_string(power_mod(4, 13, 497), 10))
```

Get reproducible pseudo-random numbers:

```python
from hpingkit.rc4 import identity_generator

gen = identity_generator()
values = [gen.next_u32() for _ in range(4)]
```

Keep round-trip statistics:

```python
from hpingkit.stats import RttStats

stats = RttStats()
for ms in (12.5, 9.75, 14.0):
    stats.update(ms)
print(stats.min, stats.avg, stats.max)
```

## What it does not do

hpingkit does not send or capture packets: there are no raw sockets, no packet
capture, no interface discovery and no packet building or checksumming. It has
no command to run; `parse_options` only returns the selected settings, and the
work those settings describe (pinging, scanning, traceroute, listen mode on a
live interface) is left to the caller.

## Running the tests

Install the `test` extra, then run `pytest` from the project directory.