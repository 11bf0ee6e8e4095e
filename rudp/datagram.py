"""Compact datagram format: little-endian sequence number, type byte, payload."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass

HEADER_SIZE = 5

MAX_RETRIES = 5
MAX_CLIENTS = 32

_HEADER = struct.Struct("<IB")


class TruncatedPacketError(ValueError):
    """Raised when a datagram is shorter than its header."""

    def __init__(self, message: str = "packet truncated") -> None:
        super().__init__(message)


class PacketType(enum.IntEnum):
    """Type byte of a datagram; unknown byte values render as INVALID."""

    SYN = 0x1
    DAT = 0x2
    ACK = 0x3
    RST = 0x4
    EACK = 0x5
    FIN = 0x6

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and 0 <= value <= 0xFF:
            member = int.__new__(cls, value)
            member._name_ = "INVALID"
            member._value_ = value
            return member
        return None

    def __str__(self) -> str:
        return self._name_


@dataclass
class Datagram:
    """In-memory form of one datagram."""

    seq: int = 0
    flag: PacketType = PacketType(0)
    data: bytes = b""

    def __post_init__(self) -> None:
        self.flag = PacketType(self.flag)
        self.data = bytes(self.data) if self.data is not None else b""

    def marshal_binary(self) -> bytes:
        """Encode the datagram into its wire format."""
        try:
            header = _HEADER.pack(self.seq, int(self.flag))
        except struct.error as exc:
            raise ValueError(f"datagram field out of range: {exc}") from exc
        return header + self.data


def unmarshal_datagram(data: bytes) -> Datagram:
    """Decode wire bytes into a Datagram; raise TruncatedPacketError if too short."""
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise TruncatedPacketError()
    seq, flag = _HEADER.unpack_from(data)
    return Datagram(seq=seq, flag=PacketType(flag), data=data[HEADER_SIZE:])