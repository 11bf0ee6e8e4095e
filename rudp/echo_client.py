"""A plain UDP client that sends one message and prints the reply."""

from __future__ import annotations

import argparse
import socket
from typing import Optional, Sequence, Union

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7777
DEFAULT_MESSAGE = "Message from RUDP client."
BUFFER_SIZE = 2048


def request(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    message: Union[str, bytes] = DEFAULT_MESSAGE,
    timeout: Optional[float] = None,
) -> bytes:
    """Send one datagram and return the first reply.

    With no timeout the call waits indefinitely; otherwise TimeoutError is raised.
    """
    payload = message.encode("utf-8") if isinstance(message, str) else bytes(message)
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.settimeout(timeout)
        sock.connect((host, port))
        sock.send(payload)
        return sock.recv(BUFFER_SIZE)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Send one UDP message and print the reply.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--message", default=DEFAULT_MESSAGE)
    parser.add_argument("--timeout", type=float, default=None)
    args = parser.parse_args(argv)
    try:
        reply = request(args.host, args.port, args.message, args.timeout)
    except OSError as exc:
        print(f"Some error {exc}")
        return 1
    print(reply.decode("utf-8", errors="replace"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())