"""Reliable sockets over UDP: sessions, retransmission, ordering and reassembly."""

from __future__ import annotations

import enum
import socket
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .packet import (
    PAYLOAD_MTU,
    MalformedPacketError,
    Packet,
    parse_packet,
    serialize_packet,
)

DEFAULT_WINDOW = 100
DEFAULT_TIMEOUT = 0.5
DEFAULT_MAX_RETRANS = 5
RCV_BUFFER_SIZE = 4096

_SEQ_MASK = 0xFFFFFFFF
_MAX_FRAGMENTS = 0xFFFF
_POLL_INTERVAL = 0.05

Address = Union[str, "tuple[str, int]"]
PeerAddress = "tuple[str, int]"


class RUDPError(Exception):
    """Base class for errors raised by reliable sockets."""


class SessionClosedError(RUDPError):
    """Raised when sending on a session that has been closed."""


class WindowFullError(RUDPError):
    """Raised when the send window holds too many unacknowledged packets."""


class DialTimeoutError(RUDPError, TimeoutError):
    """Raised when the peer does not answer the opening handshake in time."""


class EventType(str, enum.Enum):
    """Kinds of events delivered to a socket's handler."""

    DATA = "RUDP_EVENT_DATA"
    TIMEOUT = "RUDP_EVENT_TIMEOUT"
    CLOSE = "RUDP_EVENT_CLOSE"
    CREATE = "RUDP_EVENT_CREATE"


@dataclass(frozen=True)
class Event:
    """An event, the session it concerns and an optional payload."""

    type: EventType
    session: Optional["Session"]
    data: bytes = b""


EventHandler = Callable[[Event], None]


class SessionState(enum.Enum):
    """Lifecycle of a session."""

    CONNECTING = 0
    ESTABLISHED = 1
    CLOSED = 2


class Session:
    """State kept for one peer: send window, receive buffer and reassembly."""

    def __init__(self, peer_addr: tuple[str, int]) -> None:
        self.peer_addr = peer_addr
        self.expected_seq = 1
        self.recv_buffer: dict[int, Packet] = {}
        self.reassembly_buffer: dict[int, list[Optional[Packet]]] = {}
        self.last_seq_num = 0
        self.send_window: list[Packet] = []
        self.acked_until = 0
        self.last_active = time.monotonic()
        self._state = SessionState.CONNECTING
        self._next_frag_id = 0
        self._lock = threading.Lock()
        self._established = threading.Event()
        self._closed = threading.Event()

    @property
    def state(self) -> SessionState:
        return self._state

    def __repr__(self) -> str:
        return f"Session(peer_addr={self.peer_addr!r}, state={self._state.name})"

    def _next_seq(self) -> int:
        self.last_seq_num = (self.last_seq_num + 1) & _SEQ_MASK
        return self.last_seq_num

    def _close(self) -> bool:
        """Mark the session closed; the caller holds the lock."""
        if self._state is SessionState.CLOSED:
            return False
        self._state = SessionState.CLOSED
        self._closed.set()
        return True

    def _handle(self, packet: Packet, sock: "Socket") -> list[Event]:
        with self._lock:
            self.last_active = time.monotonic()
            if self._state is SessionState.CLOSED:
                return []

            if packet.ack:
                if self._state is SessionState.CONNECTING and packet.syn:
                    self._state = SessionState.ESTABLISHED
                    self._established.set()
                if packet.seq_num > self.acked_until:
                    self.acked_until = packet.seq_num
                return []

            if packet.fin:
                self._close()
                return [Event(EventType.CLOSE, self)]

            if packet.syn:
                reply = Packet(
                    seq_num=(packet.seq_num + 1) & _SEQ_MASK, ack=True, syn=True
                )
                sock._send_raw(self, reply)
                return []

            if packet.data:
                return self._handle_data(packet, sock)
            return []

    def _acknowledge(self, sock: "Socket") -> None:
        if sock._send_acks:
            sock._send_raw(self, Packet(seq_num=self.expected_seq, ack=True))

    def _handle_data(self, packet: Packet, sock: "Socket") -> list[Event]:
        if packet.seq_num < self.expected_seq:
            self._acknowledge(sock)
            return []

        if packet.seq_num > self.expected_seq:
            self.recv_buffer[packet.seq_num] = packet
            self._acknowledge(sock)
            return []

        ready = [packet]
        self.expected_seq = (self.expected_seq + 1) & _SEQ_MASK
        while (buffered := self.recv_buffer.pop(self.expected_seq, None)) is not None:
            ready.append(buffered)
            self.expected_seq = (self.expected_seq + 1) & _SEQ_MASK

        events = []
        for item in ready:
            message = self._reassemble(item) if item.is_frag else bytes(item.data)
            if message is not None:
                events.append(Event(EventType.DATA, self, message))

        self._acknowledge(sock)
        return events

    def _reassemble(self, fragment: Packet) -> Optional[bytes]:
        """Store a fragment; return the whole message once every piece is present."""
        pieces = self.reassembly_buffer.setdefault(
            fragment.frag_id, [None] * fragment.frag_count
        )
        if fragment.frag_index < len(pieces):
            pieces[fragment.frag_index] = fragment
        if any(piece is None for piece in pieces):
            return None
        del self.reassembly_buffer[fragment.frag_id]
        return b"".join(piece.data for piece in pieces)


def _resolve(addr: Address, *, passive: bool = False) -> tuple[str, int]:
    """Turn "host:port" or (host, port) into a concrete IPv4 address."""
    if isinstance(addr, str):
        host, sep, port_text = addr.rpartition(":")
        if not sep:
            raise ValueError(f"missing port in address {addr!r}")
        host = host.strip("[]")
        try:
            port = int(port_text)
        except ValueError:
            raise ValueError(f"invalid port in address {addr!r}") from None
    else:
        host, port = addr
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range: {port}")
    if not host:
        host = "0.0.0.0" if passive else "127.0.0.1"
    infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
    ip, resolved_port = infos[0][4][:2]
    return ip, resolved_port


class Socket:
    """A UDP socket that demultiplexes peers into reliable sessions.

    Incoming data, timeouts, new sessions and closes are reported to the
    handler, which runs on the socket's background threads.
    """

    def __init__(
        self,
        addr: Address,
        handler: Optional[EventHandler] = None,
        *,
        window: int = DEFAULT_WINDOW,
        timeout: float = DEFAULT_TIMEOUT,
        max_retrans: int = DEFAULT_MAX_RETRANS,
        payload_mtu: int = PAYLOAD_MTU,
        send_acks: bool = True,
        send_hook: Optional[Callable[[Packet], bool]] = None,
    ) -> None:
        if payload_mtu <= 0:
            raise ValueError("payload_mtu must be positive")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        bind_addr = _resolve(addr, passive=True)
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(bind_addr)
        except OSError:
            sock.close()
            raise
        sock.settimeout(_POLL_INTERVAL)

        self._sock = sock
        self._address: tuple[str, int] = sock.getsockname()[:2]
        self._handler: EventHandler = handler or (lambda event: None)
        self._window = window
        self._timeout = timeout
        self._max_retrans = max_retrans
        self._payload_mtu = payload_mtu
        self._send_acks = send_acks
        self._send_hook = send_hook
        self._sessions: dict[tuple[str, int], Session] = {}
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._listener = threading.Thread(
            target=self._listen, name=f"rudp-listen-{self._address[1]}", daemon=True
        )
        self._listener.start()

    @property
    def address(self) -> tuple[str, int]:
        """The local (host, port) the socket is bound to."""
        return self._address

    def __repr__(self) -> str:
        return f"Socket(address={self._address!r})"

    def __enter__(self) -> "Socket":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def send(self, session: Session, data: bytes) -> None:
        """Queue data for reliable delivery, fragmenting it above the MTU."""
        data = bytes(data)
        with session._lock:
            if session._state is SessionState.CLOSED:
                raise SessionClosedError("cannot send: session closed")
            if len(session.send_window) >= self._window:
                raise WindowFullError(
                    "too many unacknowledged packets, wait to queue again"
                )

            mtu = self._payload_mtu
            if len(data) > mtu:
                chunks = [data[start:start + mtu] for start in range(0, len(data), mtu)]
                if len(chunks) > _MAX_FRAGMENTS:
                    raise ValueError("message needs more fragments than can be numbered")
                frag_id = session._next_frag_id
                session._next_frag_id = (frag_id + 1) & 0xFFFF
                packets = [
                    Packet(
                        seq_num=session._next_seq(),
                        data=chunk,
                        is_frag=True,
                        frag_id=frag_id,
                        frag_count=len(chunks),
                        frag_index=index,
                    )
                    for index, chunk in enumerate(chunks)
                ]
            else:
                packets = [Packet(seq_num=session._next_seq(), data=data)]

            for packet in packets:
                session.send_window.append(packet)
                self._send_raw(session, packet)

    def dial(self, addr: Address) -> Session:
        """Open a session with a peer; raise DialTimeoutError if it never answers."""
        peer = _resolve(addr)
        session = Session(peer)
        with self._lock:
            self._sessions[peer] = session

        self._send_syn(session)
        self._start_send_loop(session)

        if session._established.wait((self._max_retrans + 1) * self._timeout):
            return session

        with session._lock:
            if session._state is not SessionState.ESTABLISHED:
                session._close()
        with self._lock:
            if self._sessions.get(peer) is session:
                del self._sessions[peer]
        raise DialTimeoutError("dial timed out")

    def close(self) -> None:
        """Stop listening and close every session, reporting each close."""
        with self._lock:
            if self._stopping.is_set():
                return
            self._stopping.set()
        if threading.current_thread() is not self._listener:
            self._listener.join()
        self._sock.close()

        events = []
        with self._lock:
            for session in self._sessions.values():
                with session._lock:
                    if session._close():
                        events.append(Event(EventType.CLOSE, session))
        for event in events:
            self._handler(event)

    def _send_syn(self, session: Session) -> None:
        with session._lock:
            syn = Packet(seq_num=1, syn=True)
            session.last_seq_num = 1
            session.send_window.append(syn)
            self._send_raw(session, syn)

    def _send_raw(self, session: Session, packet: Packet) -> None:
        if self._send_hook is not None and not self._send_hook(packet):
            return
        try:
            self._sock.sendto(serialize_packet(packet), session.peer_addr)
        except OSError:
            pass

    def _start_send_loop(self, session: Session) -> None:
        threading.Thread(
            target=self._send_loop, args=(session,), name="rudp-send", daemon=True
        ).start()

    def _send_loop(self, session: Session) -> None:
        while not session._closed.wait(self._timeout):
            expired = []
            with session._lock:
                if session._state is SessionState.CLOSED:
                    return
                remaining = []
                for packet in session.send_window:
                    if packet.seq_num < session.acked_until:
                        continue
                    if packet.retrans >= self._max_retrans:
                        expired.append(Event(EventType.TIMEOUT, session, packet.data))
                        continue
                    self._send_raw(session, packet)
                    packet.retrans += 1
                    remaining.append(packet)
                session.send_window = remaining
            for event in expired:
                self._handler(event)

    def _listen(self) -> None:
        while not self._stopping.is_set():
            try:
                data, addr = self._sock.recvfrom(RCV_BUFFER_SIZE)
            except socket.timeout:
                continue
            except ConnectionResetError:
                continue
            except OSError:
                return
            self._handle_datagram(addr[:2], data)

    def _handle_datagram(self, addr: tuple[str, int], data: bytes) -> None:
        try:
            packet = parse_packet(data)
        except MalformedPacketError:
            return

        created = False
        with self._lock:
            if self._stopping.is_set():
                return
            session = self._sessions.get(addr)
            if session is None:
                if not packet.syn:
                    return
                session = Session(addr)
                session.expected_seq = (packet.seq_num + 1) & _SEQ_MASK
                self._sessions[addr] = session
                created = True

        if created:
            self._handler(Event(EventType.CREATE, session))
            self._start_send_loop(session)

        for event in session._handle(packet, self):
            self._handler(event)