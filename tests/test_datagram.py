import pytest

from rudp.datagram import (
    Datagram,
    PacketType,
    TruncatedPacketError,
    unmarshal_datagram,
)


@pytest.mark.parametrize(
    "seq, flag, data",
    [
        (12345, 0x1, None),
        (0xDEADBEEF, 0x2, b"hello world"),
        (0, 0, b""),
    ],
    ids=["empty payload", "non-empty payload", "zero values"],
)
def test_marshal_unmarshal_round_trip(seq, flag, data):
    original = Datagram(seq=seq, flag=flag, data=data)
    got = unmarshal_datagram(original.marshal_binary())
    assert got.seq == seq
    assert got.flag == flag
    assert got.data == (data or b"")


def test_unmarshal_truncated():
    with pytest.raises(TruncatedPacketError):
        unmarshal_datagram(b"\x01\x02")


def test_truncated_is_value_error():
    with pytest.raises(ValueError, match="packet truncated"):
        unmarshal_datagram(b"")


def test_marshal_is_little_endian():
    encoded = Datagram(seq=0x01020304, flag=PacketType.ACK, data=b"z").marshal_binary()
    assert encoded == b"\x04\x03\x02\x01\x03z"


def test_header_only_datagram():
    got = unmarshal_datagram(b"\x07\x00\x00\x00\x06")
    assert got.seq == 7
    assert got.flag is PacketType.FIN
    assert got.data == b""


@pytest.mark.parametrize(
    "value, name",
    [(1, "SYN"), (2, "DAT"), (3, "ACK"), (4, "RST"), (5, "EACK"), (6, "FIN")],
)
def test_packet_type_str(value, name):
    assert str(PacketType(value)) == name


@pytest.mark.parametrize("value", [0, 7, 255])
def test_packet_type_invalid_str(value):
    flag = PacketType(value)
    assert str(flag) == "INVALID"
    assert int(flag) == value


def test_packet_type_out_of_byte_range():
    with pytest.raises(ValueError):
        PacketType(256)


def test_unknown_flag_round_trip():
    got = unmarshal_datagram(Datagram(seq=1, flag=9, data=b"q").marshal_binary())
    assert int(got.flag) == 9
    assert str(got.flag) == "INVALID"


def test_marshal_seq_out_of_range():
    with pytest.raises(ValueError):
        Datagram(seq=1 << 32, flag=PacketType.SYN).marshal_binary()