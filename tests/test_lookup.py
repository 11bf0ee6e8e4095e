import socket
from unittest import mock

import pytest

from rudp.lookup import canonical_name, main, reverse_lookup


def test_reverse_lookup_returns_name_and_aliases():
    answer = ("host.example.com", ["alias.example.com"], ["192.0.2.1"])
    with mock.patch("socket.gethostbyaddr", return_value=answer) as lookup:
        names = reverse_lookup("192.0.2.1")
    assert names == ["host.example.com", "alias.example.com"]
    lookup.assert_called_once_with("192.0.2.1")


def test_reverse_lookup_propagates_errors():
    with mock.patch("socket.gethostbyaddr", side_effect=socket.herror(1, "Unknown host")):
        with pytest.raises(OSError):
            reverse_lookup("192.0.2.1")


def test_canonical_name_picks_reported_name():
    infos = [
        (socket.AF_INET, socket.SOCK_STREAM, 6, "", ("192.0.2.7", 0)),
        (socket.AF_INET, socket.SOCK_STREAM, 6, "canon.example.com", ("192.0.2.7", 0)),
    ]
    with mock.patch("socket.getaddrinfo", return_value=infos):
        assert canonical_name("www.example.com") == "canon.example.com"


def test_canonical_name_falls_back_to_host():
    infos = [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("192.0.2.7", 0))]
    with mock.patch("socket.getaddrinfo", return_value=infos):
        assert canonical_name("www.example.com") == "www.example.com"


def test_canonical_name_propagates_errors():
    with mock.patch("socket.getaddrinfo", side_effect=socket.gaierror(-2, "Name unknown")):
        with pytest.raises(OSError):
            canonical_name("missing.example.com")


def test_main_prints_both_results(capsys):
    answer = ("host.example.com", ["alias.example.com"], ["192.0.2.1"])
    infos = [(socket.AF_INET, socket.SOCK_STREAM, 6, "canon.example.com", ("192.0.2.7", 0))]
    with mock.patch("socket.gethostbyaddr", return_value=answer), mock.patch(
        "socket.getaddrinfo", return_value=infos
    ):
        status = main(["192.0.2.1", "www.example.com"])
    assert status == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["[host.example.com alias.example.com]", "canon.example.com"]


def test_main_reports_failure(capsys):
    infos = [(socket.AF_INET, socket.SOCK_STREAM, 6, "canon.example.com", ("192.0.2.7", 0))]
    with mock.patch(
        "socket.gethostbyaddr", side_effect=socket.herror(1, "Unknown host")
    ), mock.patch("socket.getaddrinfo", return_value=infos):
        status = main(["192.0.2.1", "www.example.com"])
    assert status == 1
    out = capsys.readouterr().out
    assert "Unknown host" in out
    assert "canon.example.com" in out