"""Small name-service queries: reverse lookup and canonical names."""

from __future__ import annotations

import argparse
import socket
from typing import Optional, Sequence

DEFAULT_ADDRESS = "127.0.0.1"
DEFAULT_HOST = "localhost"


def reverse_lookup(address: str) -> list[str]:
    """Return the host names mapped to an IP address; raise OSError on failure."""
    hostname, aliases, _ = socket.gethostbyaddr(address)
    return [hostname, *aliases]


def canonical_name(host: str) -> str:
    """Return the canonical name of a host, or the host itself if none is reported."""
    infos = socket.getaddrinfo(host, None, 0, 0, 0, socket.AI_CANONNAME)
    for _family, _kind, _proto, canon, _sockaddr in infos:
        if canon:
            return canon
    return host


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Reverse-resolve an address and a host.")
    parser.add_argument("address", nargs="?", default=DEFAULT_ADDRESS)
    parser.add_argument("host", nargs="?", default=DEFAULT_HOST)
    args = parser.parse_args(argv)

    status = 0
    try:
        names = reverse_lookup(args.address)
    except OSError as exc:
        print(exc)
        status = 1
    else:
        print(f"[{' '.join(names)}]")

    try:
        print(canonical_name(args.host))
    except OSError as exc:
        print(exc)
        status = 1
    return status


if __name__ == "__main__":
    raise SystemExit(main())