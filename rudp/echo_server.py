"""A plain UDP server that answers every datagram with a fixed greeting."""

from __future__ import annotations

import argparse
import socket
import threading
from typing import Optional, Sequence

RESPONSE = b"From server: Hello I got your message "
BUFFER_SIZE = 2048
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7777

_POLL_INTERVAL = 0.05


def serve(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    stop: Optional[threading.Event] = None,
) -> int:
    """Answer datagrams until ``stop`` is set; return how many were read.

    Raises OSError if the address cannot be bound.
    """
    handled = 0
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind((host, port))
        sock.settimeout(_POLL_INTERVAL)
        while stop is None or not stop.is_set():
            try:
                data, remote = sock.recvfrom(BUFFER_SIZE)
            except socket.timeout:
                continue
            except OSError as exc:
                print(f"Some error {exc}")
                continue
            text = data.decode("utf-8", errors="replace")
            print(f"Read a message from {remote[0]}:{remote[1]} {text}")
            handled += 1
            try:
                sock.sendto(RESPONSE, remote)
            except OSError as exc:
                print(f"Couldn't send response {exc}")
    return handled


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Answer UDP datagrams with a greeting.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    try:
        serve(args.host, args.port)
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        print(f"Some error {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())