"""Wire format of reliable-UDP packets, including the fragmentation header."""

from __future__ import annotations

import struct
from dataclasses import dataclass

HEADER_SIZE = 5
FRAG_HEADER_SIZE = 6

# Largest payload carried by a single packet before a message is fragmented.
PAYLOAD_MTU = 500

_FLAG_ACK = 0x01
_FLAG_SYN = 0x02
_FLAG_FIN = 0x04
_FLAG_FRAG = 0x08

_HEADER = struct.Struct(">IB")
_FRAG_HEADER = struct.Struct(">HHH")


class MalformedPacketError(ValueError):
    """Raised when received bytes are too short to form a valid packet."""

    def __init__(self, message: str = "malformed packet received") -> None:
        super().__init__(message)


@dataclass
class Packet:
    """A packet with reliability flags and optional fragmentation fields."""

    seq_num: int = 0
    ack: bool = False
    syn: bool = False
    fin: bool = False
    data: bytes = b""
    retrans: int = 0
    is_frag: bool = False
    frag_id: int = 0
    frag_count: int = 0
    frag_index: int = 0

    def __str__(self) -> str:
        names = (
            ("SYN", self.syn),
            ("ACK", self.ack),
            ("FIN", self.fin),
            ("FRAG", self.is_frag),
        )
        flags = "|".join(name for name, present in names if present)
        if self.is_frag:
            detail = f"FragID:{self.frag_id}, {self.frag_index + 1}/{self.frag_count}"
        else:
            detail = f"DataLen:{len(self.data)}"
        return f"Packet{{Seq:{self.seq_num}, Flags:[{flags}], {detail}}}"


def _flags_of(packet: Packet) -> int:
    flags = 0
    if packet.ack:
        flags |= _FLAG_ACK
    if packet.syn:
        flags |= _FLAG_SYN
    if packet.fin:
        flags |= _FLAG_FIN
    if packet.is_frag:
        flags |= _FLAG_FRAG
    return flags


def serialize_packet(packet: Packet) -> bytes:
    """Encode a packet into its big-endian on-wire representation."""
    try:
        header = _HEADER.pack(packet.seq_num, _flags_of(packet))
        if packet.is_frag:
            header += _FRAG_HEADER.pack(
                packet.frag_id, packet.frag_count, packet.frag_index
            )
    except struct.error as exc:
        raise ValueError(f"packet field out of range: {exc}") from exc
    return header + bytes(packet.data)


def parse_packet(data: bytes) -> Packet:
    """Decode on-wire bytes into a packet.

    Raises MalformedPacketError if the data is shorter than the headers it claims.
    """
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise MalformedPacketError()

    seq_num, flags = _HEADER.unpack_from(data)
    packet = Packet(
        seq_num=seq_num,
        ack=bool(flags & _FLAG_ACK),
        syn=bool(flags & _FLAG_SYN),
        fin=bool(flags & _FLAG_FIN),
        is_frag=bool(flags & _FLAG_FRAG),
    )

    offset = HEADER_SIZE
    if packet.is_frag:
        if len(data) < HEADER_SIZE + FRAG_HEADER_SIZE:
            raise MalformedPacketError()
        packet.frag_id, packet.frag_count, packet.frag_index = _FRAG_HEADER.unpack_from(
            data, HEADER_SIZE
        )
        offset += FRAG_HEADER_SIZE

    packet.data = data[offset:]
    return packet