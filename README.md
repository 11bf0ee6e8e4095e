# rudp

A small reliable transport built on top of UDP. A `Socket` binds a local
UDP address, accepts sessions from peers that open one with a SYN, and
delivers application data in order. Unacknowledged packets are
retransmitted on a timer, and messages larger than the payload limit are
split into fragments and reassembled on the other side.

The package has no dependencies beyond the standard library.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Using a socket

```python
from rudp.socket import EventType, Socket


def on_event(event):
    if event.type is EventType.DATA:
        print(event.session, event.data)


with Socket("127.0.0.1:0", on_event) as server, Socket("127.0.0.1:0") as client:
    session = client.dial(server.address)
    client.send(session, b"hello")
```

Addresses are given either as a `"host:port"` string or as a
`(host, port)` tuple; port `0` picks a free port, and `Socket.address`
reports the `(host, port)` actually bound. Only IPv4 is used.

The handler is called from the socket's background threads with an
`Event`, which has a `type` (an `EventType`), the `session` it concerns
and a `data` payload:

- `EventType.CREATE` when a peer opens a new session with a SYN;
- `EventType.DATA` for each complete message delivered, in sequence order;
- `EventType.TIMEOUT` when a packet has been retransmitted the maximum
  number of times without being acknowledged; the packet is dropped and
  its payload is carried in `data`;
- `EventType.CLOSE` when a session is closed, either by a FIN from the
  peer or by closing the socket.

What the socket does:

- `Socket.dial(addr)` sends a SYN and waits for the peer's SYN+ACK. If no
  answer arrives within `(max_retrans + 1) * timeout` seconds it raises
  `DialTimeoutError`.
- `Socket.send(session, data)` assigns sequence numbers, adds the packets
  to the session's send window and transmits them. It raises
  `SessionClosedError` if the session has been closed, and
  `WindowFullError` if the window already holds `window` unacknowledged
  packets. All of these errors derive from `RUDPError`.
- Packets that arrive ahead of the next expected sequence number are
  buffered until the gap before them is filled. Duplicates are dropped.
  Each received data packet is answered with a cumulative acknowledgement.
- Fragments are grouped by fragment id and delivered as one message once
  every piece is present.
- `Socket.close()` (or leaving the `with` block) stops the listener,
  closes the UDP socket and marks every open session closed, reporting a
  close event for each.

`Socket` takes these keyword arguments:

| Argument      | Default | Meaning                                                |
|---------------|---------|--------------------------------------------------------|
| `window`      | 100     | most unacknowledged packets allowed on a session       |
| `timeout`     | 0.5     | seconds between retransmission rounds                  |
| `max_retrans` | 5       | retransmissions before a packet times out              |
| `payload_mtu` | 500     | largest payload sent before a message is fragmented    |
| `send_acks`   | `True`  | whether received data is acknowledged                  |
| `send_hook`   | `None`  | called with each outgoing `Packet`; returning false drops it |

A `Session` exposes its `peer_addr` and its `state`, a `SessionState`
of `CONNECTING`, `ESTABLISHED` or `CLOSED`.

## Wire formats

`rudp.packet` holds the packet format used by the socket: a big-endian
32-bit sequence number, a flag byte (ACK, SYN, FIN and FRAG), and, for
fragments, a header with the fragment id, the fragment count and the
fragment index. `serialize_packet` and `parse_packet` convert between
`Packet` objects and bytes; `parse_packet` raises `MalformedPacketError`
for input too short to hold its headers, and `serialize_packet` raises
`ValueError` when a field does not fit its width.

`rudp.datagram` holds a separate, little-endian format: a sequence number,
a single `PacketType` byte (`SYN`, `DAT`, `ACK`, `RST`, `EACK`, `FIN`;
any other byte value prints as `INVALID`) and the payload.
`Datagram.marshal_binary()` encodes one, and `unmarshal_datagram` decodes
it, raising `TruncatedPacketError` when the header is incomplete. The
socket does not use this format.

## Command-line tools

A plain UDP pair, by default on 127.0.0.1 port 7777. These speak raw UDP,
not the reliable protocol above:

```
rudp-echo-server [--host HOST] [--port PORT]
rudp-echo-client [--host HOST] [--port PORT] [--message TEXT] [--timeout SECONDS]
```

The server prints each message it reads and answers the sender with a
fixed greeting until interrupted. The client sends one message and prints
the reply; without `--timeout` it waits for the reply indefinitely.

A name-service helper that prints the reverse lookup of an address
(default `127.0.0.1`) and the canonical name of a host (default
`localhost`):

```
rudp-lookup [ADDRESS] [HOST]
```

The same functions are available as `rudp.echo_server.serve`,
`rudp.echo_client.request`, `rudp.lookup.reverse_lookup` and
`rudp.lookup.canonical_name`.

## What it does not do

- Closing a socket does not send a FIN to its peers or wait for queued data
  to be acknowledged; sessions are only marked closed locally.
- When the send window is full, `send` raises rather than queuing the data.
- Sequence numbers are compared directly, without wrap-around handling.
- There is no command-line tool that speaks the reliable protocol; it is
  used through `rudp.socket.Socket` from Python.