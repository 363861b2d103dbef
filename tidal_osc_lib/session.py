"""
Tidal Session

Composes ports, router, decoder, scheduling gate and encoder into the
public bridge object.

Connections (all bound on in_address):
- main:   in_port      trigger messages in, /ctrl out
- tempo:  in_port + 1  /cps/cycle in, /hello handshake out (listen_tempo)
- rms:    in_port + 2  /rms in, /notify handshake out (listen_rms)

Every connection feeds the same router, so a packet is handled by
address regardless of which port it arrived on.
"""

import logging
from typing import Any, Dict, Optional

from .decoder import decode_metering, decode_tempo, decode_trigger
from .encoder import ControlEncoder
from .enrich import add_midi_data
from .events import EventChannel
from .model import (
    Channel,
    ControlMessage,
    DecodeError,
    MeteringEvent,
    OscArgument,
    RawPacket,
    TempoEvent,
    TransportError,
    TriggerEvent,
    TypeTag,
)
from .osc_client import OscPort
from .scheduler import SchedulingGate
from .tidal_config import (
    HELLO_ADDRESS,
    NOTIFY_ADDRESS,
    BridgeConfig,
    classify_address,
)

logger = logging.getLogger(__name__)

MAIN = "main"
TEMPO = "tempo"
RMS = "rms"


class TidalSession:
    """
    Bidirectional bridge between Tidal and the synthesis engine.

    Channels:
        ready: fired once the main port is bound (payload None)
        messages: TriggerEvent records, after any delta delay
        tempo: TempoEvent
        rms: MeteringEvent
        errors: TransportError

    Example:
        session = TidalSession(BridgeConfig(listen_tempo=True))
        session.messages.add_callback(print)
        session.tempo.add_callback(print)
        async with session:
            session.send_float("cutoff", 0.5)
            await asyncio.sleep(60)
    """

    def __init__(self, config: Optional[BridgeConfig] = None):
        self.config = config or BridgeConfig()

        self.ready: EventChannel[None] = EventChannel("ready")
        self.messages: EventChannel[TriggerEvent] = EventChannel("message")
        self.tempo: EventChannel[TempoEvent] = EventChannel("tempo")
        self.rms: EventChannel[MeteringEvent] = EventChannel("rms")
        self.errors: EventChannel[TransportError] = EventChannel("error")

        self._gate = SchedulingGate()
        self._encoder = ControlEncoder(self._send_main)
        self._ports: Dict[str, OscPort] = {}

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def open(self) -> bool:
        """
        Open the main port and any enabled secondary ports.

        Secondary ports are only opened once the main port is bound, and
        failing to bind them does not fail the session. Every bind failure
        is reported on the errors channel; after a main port failure no
        port stays open, so open() may be retried.

        Returns:
            True if the main port is open
        """
        if self._ports:
            return MAIN in self._ports

        main = self._create_port(MAIN, self.config.main_endpoint())
        main.add_ready_callback(lambda: self.ready.emit(None))
        if not await self._open_port(main):
            return False

        if self.config.listen_tempo:
            tempo = self._create_port(TEMPO, self.config.tempo_endpoint())
            tempo.add_ready_callback(lambda: self._handshake(tempo, HELLO_ADDRESS))
            await self._open_port(tempo)

        if self.config.listen_rms:
            rms = self._create_port(RMS, self.config.rms_endpoint())
            rms.add_ready_callback(
                lambda: self._handshake(rms, NOTIFY_ADDRESS, [OscArgument(TypeTag.INT, 1)])
            )
            await self._open_port(rms)

        return True

    async def close(self):
        """Abandon pending trigger events and close every port."""
        self._gate.cancel_all()
        for port in self._ports.values():
            port.close()
        self._ports.clear()
        logger.info("Tidal session closed")

    async def __aenter__(self) -> "TidalSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def is_open(self) -> bool:
        return MAIN in self._ports

    @property
    def pending_events(self) -> int:
        """Trigger events waiting for their delta to elapse."""
        return self._gate.pending

    def port(self, name: str) -> Optional[OscPort]:
        """Open port by name ("main", "tempo", "rms")."""
        return self._ports.get(name)

    def _create_port(self, name: str, endpoint) -> OscPort:
        port = OscPort(endpoint, name=name)
        port.add_packet_callback(self.handle_packet)
        port.add_error_callback(self.errors.emit)
        return port

    async def _open_port(self, port: OscPort) -> bool:
        # Registered before binding so ready callbacks can already send
        self._ports[port.name] = port
        if not await port.open():
            del self._ports[port.name]
            return False
        return True

    def _handshake(self, port: OscPort, address: str, args=()):
        try:
            port.send(address, args)
        except TransportError as e:
            self.errors.emit(e)

    # -------------------------------------------------------------------------
    # Inbound
    # -------------------------------------------------------------------------

    def handle_packet(self, packet: RawPacket) -> None:
        """
        Route, decode and emit one packet.

        Malformed packets are logged and dropped; nothing raised here
        reaches the receive path.
        """
        channel = classify_address(packet.address, self.config.address_pattern)
        try:
            if channel is Channel.TRIGGER:
                event = decode_trigger(packet.args)
                self._gate.schedule(event, self._emit_trigger, packet.received_at)
            elif channel is Channel.TEMPO:
                self.tempo.emit(decode_tempo(packet.args))
            elif channel is Channel.METERING:
                self.rms.emit(decode_metering(packet.args))
            else:
                logger.debug(f"Ignoring unmatched address {packet.address}")
        except DecodeError as e:
            e.address = packet.address
            logger.warning(f"Dropping malformed packet: {e}")

    def _emit_trigger(self, event: TriggerEvent) -> None:
        self.messages.emit(add_midi_data(event, self.config.add_midi_data))

    # -------------------------------------------------------------------------
    # Outbound
    # -------------------------------------------------------------------------

    def _send_main(self, address: str, args) -> None:
        self._ports[MAIN].send(address, args)

    def _send_control(self, method, *args) -> Optional[ControlMessage]:
        if not self.is_open():
            logger.debug(f"Session not open, cannot send control {args[0]!r}")
            return None
        try:
            return method(*args)
        except TransportError as e:
            self.errors.emit(e)
            return None

    def send_ctrl(self, name: str, type_tag: TypeTag, value: Any) -> Optional[ControlMessage]:
        """
        Send /ctrl with an explicit type tag.

        Values that do not match type_tag are skipped (returns None).
        """
        return self._send_control(self._encoder.send_ctrl, name, type_tag, value)

    def send_float(self, name: str, value: Any) -> Optional[ControlMessage]:
        """Send a float control; non-numeric values are skipped."""
        return self._send_control(self._encoder.send_float, name, value)

    def send_int(self, name: str, value: Any) -> Optional[ControlMessage]:
        """Send an int control; non-numeric values are skipped."""
        return self._send_control(self._encoder.send_int, name, value)

    def send_string(self, name: str, value: Any) -> Optional[ControlMessage]:
        return self._send_control(self._encoder.send_string, name, value)

    def send_param(self, name: str, value: Any) -> Optional[ControlMessage]:
        """
        Send a string control.

        DEPRECATED: Use send_string().
        """
        return self._send_control(self._encoder.send_param, name, value)
