"""
OSC Port

Bidirectional OSC over a single UDP socket.

The same socket receives from and sends to the remote peer, so replies to
handshakes sent from a port arrive back on it. Bundles (including nested
ones) are flattened into RawPackets in their original order before they
reach callbacks. No retry logic: socket errors go to error callbacks.
"""

import asyncio
import logging
from typing import AsyncIterator, Callable, List, Optional, Sequence, Union

from pythonosc import osc_bundle, osc_message
from pythonosc.osc_message_builder import BuildError, OscMessageBuilder
from pythonosc.parsing import osc_types

from .model import Endpoint, OscArgument, RawPacket, TransportError, TypeTag

logger = logging.getLogger(__name__)

PacketCallback = Callable[[RawPacket], None]
ReadyCallback = Callable[[], None]
ErrorCallback = Callable[[TransportError], None]

_PARSE_ERRORS = (osc_message.ParseError, osc_bundle.ParseError, osc_types.ParseError)

_KNOWN_TAGS = frozenset(tag.value for tag in TypeTag)


# =============================================================================
# FRAMING
# =============================================================================

def encode_packet(address: str, args: Sequence[Union[OscArgument, object]] = ()) -> bytes:
    """
    Frame an OSC message.

    Args:
        address: OSC address path
        args: OscArguments (explicit tags) or plain values (inferred tags)

    Raises:
        TransportError: if a value cannot be encoded with its tag
    """
    builder = OscMessageBuilder(address=address)
    try:
        for arg in args:
            if not isinstance(arg, OscArgument):
                arg = OscArgument.of(arg)
            builder.add_arg(arg.value, arg.type_tag.value)
        return builder.build().dgram
    except (BuildError, ValueError) as e:
        raise TransportError(f"Cannot encode {address}: {e}") from e


def _wire_tags(message: osc_message.OscMessage) -> Optional[str]:
    """Read the type tag string of a parsed message (without the comma)."""
    _, index = osc_types.get_string(message.dgram, 0)
    # Type tag string is optional in old-style messages
    if index >= len(message.dgram):
        return None
    tags, _ = osc_types.get_string(message.dgram, index)
    return tags[1:] if tags.startswith(",") else None


def _to_raw_packet(
    message: osc_message.OscMessage,
    received_at: Optional[float],
    metadata: bool,
) -> RawPacket:
    params = list(message.params)
    tags = _wire_tags(message) if metadata else None
    # Arrays flatten tags and params differently; fall back to inference
    if tags is None or len(tags) != len(params):
        args = tuple(OscArgument.of(v) for v in params)
    else:
        args = tuple(
            OscArgument(TypeTag(tag), value)
            if tag in _KNOWN_TAGS
            else OscArgument.of(value)
            for tag, value in zip(tags, params)
        )
    return RawPacket(address=message.address, args=args, received_at=received_at)


def _flatten(content, received_at, metadata, out: List[RawPacket]) -> None:
    if isinstance(content, osc_bundle.OscBundle):
        for item in content:
            _flatten(item, received_at, metadata, out)
    else:
        out.append(_to_raw_packet(content, received_at, metadata))


def decode_datagram(
    data: bytes,
    received_at: Optional[float] = None,
    metadata: bool = True,
) -> List[RawPacket]:
    """
    Parse one UDP datagram into packets.

    Args:
        data: Raw datagram
        received_at: Arrival time stamped on every packet
        metadata: Read exact type tags from the wire (otherwise infer them)

    Returns:
        One packet for a plain message, all members in order for a bundle

    Raises:
        osc_message.ParseError / osc_bundle.ParseError / osc_types.ParseError
            on malformed framing
    """
    packets: List[RawPacket] = []
    if osc_bundle.OscBundle.dgram_is_bundle(data):
        _flatten(osc_bundle.OscBundle(data), received_at, metadata, packets)
    elif osc_message.OscMessage.dgram_is_message(data):
        _flatten(osc_message.OscMessage(data), received_at, metadata, packets)
    else:
        raise osc_message.ParseError("Datagram is neither an OSC message nor a bundle")
    return packets


# =============================================================================
# OSC PORT
# =============================================================================

class _OscProtocol(asyncio.DatagramProtocol):
    """Forwards asyncio datagram events to the owning OscPort."""

    def __init__(self, port: "OscPort"):
        self._port = port

    def connection_made(self, transport):
        self._port._on_connection_made(transport)

    def datagram_received(self, data, addr):
        self._port._on_datagram(data, addr)

    def error_received(self, exc):
        self._port._on_error(TransportError(f"[{self._port.name}] {exc}"))

    def connection_lost(self, exc):
        if exc is not None:
            self._port._on_error(TransportError(f"[{self._port.name}] Connection lost: {exc}"))


class OscPort:
    """
    UDP port bound locally and paired with one remote peer.

    Features:
    - Readiness callback fired once per open
    - Packet callbacks (push) and receive() async iterator (pull)
    - Typed send with explicit OSC tags
    - Errors reported to callbacks, never retried

    Example:
        port = OscPort(Endpoint(local_port=57120, remote_port=6010))
        port.add_packet_callback(handle)
        if await port.open():
            port.send("/ctrl", [OscArgument(TypeTag.STRING, "speed"), ...])
        port.close()
    """

    def __init__(self, endpoint: Endpoint, name: str = "osc"):
        self.endpoint = endpoint
        self.name = name
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._ready_callbacks: List[ReadyCallback] = []
        self._packet_callbacks: List[PacketCallback] = []
        self._error_callbacks: List[ErrorCallback] = []

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def add_ready_callback(self, callback: ReadyCallback):
        if callback not in self._ready_callbacks:
            self._ready_callbacks.append(callback)

    def add_packet_callback(self, callback: PacketCallback):
        """
        Add callback for incoming packets.

        Called once per message; bundle members are delivered in order.
        """
        if callback not in self._packet_callbacks:
            self._packet_callbacks.append(callback)

    def remove_packet_callback(self, callback: PacketCallback):
        if callback in self._packet_callbacks:
            self._packet_callbacks.remove(callback)

    def add_error_callback(self, callback: ErrorCallback):
        if callback not in self._error_callbacks:
            self._error_callbacks.append(callback)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> bool:
        """
        Bind the local socket.

        Returns:
            True if bound; False after reporting a TransportError
        """
        if self._transport is not None:
            return True

        self._loop = asyncio.get_running_loop()
        try:
            await self._loop.create_datagram_endpoint(
                lambda: _OscProtocol(self),
                local_addr=(self.endpoint.local_address, self.endpoint.local_port),
                allow_broadcast=self.endpoint.broadcast,
            )
        except OSError as e:
            self._on_error(TransportError(f"[{self.name}] Cannot bind {self.endpoint}: {e}"))
            return False
        return True

    def close(self):
        """Close the socket. Safe to call repeatedly."""
        if self._transport is None:
            return
        transport = self._transport
        self._transport = None
        transport.close()
        logger.info(f"[{self.name}] Closed")

    def is_open(self) -> bool:
        return self._transport is not None

    @property
    def local_port(self) -> Optional[int]:
        """Actually bound port (differs from the endpoint when it asked for 0)."""
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")[1]

    # -------------------------------------------------------------------------
    # Receive / send
    # -------------------------------------------------------------------------

    async def receive(self) -> AsyncIterator[RawPacket]:
        """
        Iterate over received packets for as long as the port is open.

        Example:
            async for packet in port.receive():
                print(packet.address)
        """
        queue: "asyncio.Queue[RawPacket]" = asyncio.Queue()
        self.add_packet_callback(queue.put_nowait)
        try:
            while True:
                yield await queue.get()
        finally:
            self.remove_packet_callback(queue.put_nowait)

    def send(self, address: str, args: Sequence[Union[OscArgument, object]] = ()):
        """
        Send an OSC message to the remote peer.

        Raises:
            TransportError: port closed, value not encodable, or socket failure
        """
        if self._transport is None:
            raise TransportError(f"[{self.name}] Port not open, cannot send {address}")

        dgram = encode_packet(address, args)
        try:
            self._transport.sendto(dgram, self.endpoint.remote)
        except OSError as e:
            raise TransportError(f"[{self.name}] Send to {self.endpoint.remote} failed: {e}") from e

        if logger.isEnabledFor(logging.DEBUG):
            args_str = " ".join(str(a) for a in args) if args else "(no args)"
            logger.debug(f"[{self.name}] TX: {address} {args_str}")

    # -------------------------------------------------------------------------
    # Protocol hooks
    # -------------------------------------------------------------------------

    def _on_connection_made(self, transport):
        self._transport = transport
        logger.info(f"[{self.name}] OSC port ready: {self.endpoint}")
        for callback in list(self._ready_callbacks):
            try:
                callback()
            except Exception as e:
                logger.error(f"[{self.name}] Ready callback error: {e}")

    def _on_datagram(self, data: bytes, addr):
        received_at = self._loop.time() if self._loop else None
        try:
            packets = decode_datagram(data, received_at, self.endpoint.metadata)
        except _PARSE_ERRORS as e:
            logger.warning(f"[{self.name}] Dropping malformed datagram from {addr}: {e}")
            return

        for packet in packets:
            logger.debug(f"[{self.name}] RX: {packet}")
            for callback in list(self._packet_callbacks):
                try:
                    callback(packet)
                except Exception as e:
                    logger.error(f"[{self.name}] Packet callback error: {e}")

    def _on_error(self, error: TransportError):
        logger.error(str(error))
        for callback in list(self._error_callbacks):
            try:
                callback(error)
            except Exception as e:
                logger.error(f"[{self.name}] Error callback error: {e}")
