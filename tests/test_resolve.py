import socket
from unittest import mock

import pytest

from hpingkit.resolve import ResolveError, resolve_addr


def test_dotted_quad_passes_through():
    assert resolve_addr("192.168.1.1") == "192.168.1.1"


def test_short_numeric_form():
    assert resolve_addr("127.1") == "127.0.0.1"


def test_numeric_does_not_query_dns():
    with mock.patch("hpingkit.resolve.socket.gethostbyname") as lookup:
        assert resolve_addr("10.1.2.3") == "10.1.2.3"
    assert lookup.call_count == 0


def test_name_is_looked_up():
    with mock.patch("hpingkit.resolve.socket.gethostbyname", return_value="10.0.0.5") as lookup:
        assert resolve_addr("host.example.com") == "10.0.0.5"
    lookup.assert_called_once_with("host.example.com")


def test_broadcast_goes_through_lookup():
    with mock.patch(
        "hpingkit.resolve.socket.gethostbyname", return_value="255.255.255.255"
    ) as lookup:
        assert resolve_addr("255.255.255.255") == "255.255.255.255"
    assert lookup.call_count == 1


def test_failure_raises_resolve_error():
    with mock.patch(
        "hpingkit.resolve.socket.gethostbyname", side_effect=socket.gaierror("no")
    ):
        with pytest.raises(ResolveError) as info:
            resolve_addr("nowhere.example.com")
    assert info.value.hostname == "nowhere.example.com"
    assert str(info.value) == "Unable to resolve 'nowhere.example.com'"