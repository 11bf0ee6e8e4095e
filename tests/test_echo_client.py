import socket
import threading

import pytest

from rudp.echo_client import DEFAULT_MESSAGE, main, request


@pytest.fixture
def responder():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(3)
    received = []

    def answer():
        try:
            data, remote = sock.recvfrom(2048)
        except OSError:
            return
        received.append(data)
        sock.sendto(b"reply:" + data, remote)

    thread = threading.Thread(target=answer, daemon=True)
    thread.start()
    yield sock.getsockname()[1], received
    thread.join(timeout=3)
    sock.close()


@pytest.fixture
def silent_peer():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    yield sock.getsockname()[1]
    sock.close()


def test_request_returns_reply(responder):
    port, received = responder
    reply = request("127.0.0.1", port, "hello", 3)
    assert reply == b"reply:hello"
    assert received == [b"hello"]


def test_request_sends_default_message(responder):
    port, received = responder
    reply = request("127.0.0.1", port, timeout=3)
    assert received == [b"Message from RUDP client."]
    assert reply == b"reply:" + DEFAULT_MESSAGE.encode()


def test_request_accepts_bytes(responder):
    port, received = responder
    assert request("127.0.0.1", port, b"\x00\x01", 3) == b"reply:\x00\x01"


def test_request_times_out_without_reply(silent_peer):
    with pytest.raises(TimeoutError):
        request("127.0.0.1", silent_peer, "anyone?", 0.1)


def test_main_prints_reply(responder, capsys):
    port, _ = responder
    status = main(["--port", str(port), "--message", "ping", "--timeout", "3"])
    assert status == 0
    assert capsys.readouterr().out.strip() == "reply:ping"


def test_main_reports_error(silent_peer, capsys):
    status = main(["--port", str(silent_peer), "--timeout", "0.1"])
    assert status == 1
    assert capsys.readouterr().out.startswith("Some error")