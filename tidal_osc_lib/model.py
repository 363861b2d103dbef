"""
Domain Models for the Tidal OSC bridge

Immutable data structures for endpoints, raw OSC packets, decoded
events and outbound control messages, plus the error taxonomy.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple, Union


# =============================================================================
# ERRORS
# =============================================================================

class TidalOscError(Exception):
    """Base class for all bridge errors."""


class TransportError(TidalOscError):
    """Socket bind or send failure. Non-fatal to the session."""


class DecodeError(TidalOscError):
    """
    Malformed OSC argument list.

    Attributes:
        reason: Short machine-readable code (UNDEFINED_KEY, MISSING_FIELD,
            DANGLING_VALUE)
        address: OSC address of the offending packet, when known
    """

    UNDEFINED_KEY = "UNDEFINED_KEY"
    MISSING_FIELD = "MISSING_FIELD"
    DANGLING_VALUE = "DANGLING_VALUE"

    def __init__(self, reason: str, message: str, address: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.address = address

    def __str__(self) -> str:
        text = super().__str__()
        if self.address:
            return f"{self.address}: {text} ({self.reason})"
        return f"{text} ({self.reason})"


# =============================================================================
# OSC TYPES
# =============================================================================

class TypeTag(str, Enum):
    """
    OSC argument type tags.

    FLOAT, INT and STRING are the tags exchanged with Tidal; the rest
    appear in SuperDirt/scsynth traffic and are decoded for completeness.
    """
    FLOAT = "f"
    INT = "i"
    STRING = "s"
    DOUBLE = "d"
    INT64 = "h"
    BLOB = "b"
    TRUE = "T"
    FALSE = "F"
    NIL = "N"

    @classmethod
    def for_value(cls, value: Any) -> "TypeTag":
        """
        Infer the tag python-osc used to decode a value.

        bool must be checked before int since bool is an int subclass.
        """
        if value is None:
            return cls.NIL
        if isinstance(value, bool):
            return cls.TRUE if value else cls.FALSE
        if isinstance(value, int):
            return cls.INT
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, (bytes, bytearray)):
            return cls.BLOB
        return cls.STRING


# Tags accepted for the value of an outbound control message
CONTROL_TYPE_TAGS = (TypeTag.FLOAT, TypeTag.INT, TypeTag.STRING)

_CONTROL_VALUE_TYPES = {
    TypeTag.FLOAT: float,
    TypeTag.INT: int,
    TypeTag.STRING: str,
}


@dataclass(frozen=True)
class OscArgument:
    """Single typed OSC argument."""
    type_tag: TypeTag
    value: Any

    @classmethod
    def of(cls, value: Any) -> "OscArgument":
        return cls(TypeTag.for_value(value), value)

    def __str__(self) -> str:
        return f"{self.type_tag.value}:{self.value!r}"


@dataclass(frozen=True)
class RawPacket:
    """
    Single OSC message as delivered by the transport.

    Attributes:
        address: OSC address path
        args: Typed arguments in wire order
        received_at: Event-loop time when the enclosing datagram arrived
            (None when built by hand, e.g. in tests)
    """
    address: str
    args: Tuple[OscArgument, ...] = ()
    received_at: Optional[float] = None

    @classmethod
    def from_values(
        cls,
        address: str,
        values: Any = (),
        received_at: Optional[float] = None,
    ) -> "RawPacket":
        """Build a packet from plain python values, inferring type tags."""
        return cls(address, tuple(OscArgument.of(v) for v in values), received_at)

    @property
    def values(self) -> Tuple[Any, ...]:
        return tuple(arg.value for arg in self.args)

    def __str__(self) -> str:
        if not self.args:
            return self.address
        return f"{self.address} " + " ".join(str(a) for a in self.args)


@dataclass(frozen=True)
class Endpoint:
    """
    Local binding and remote peer of one UDP connection.

    Attributes:
        local_address: Address to bind
        local_port: Port to bind (0 picks a free port)
        remote_address: Peer to send to
        remote_port: Peer port to send to
        broadcast: Allow sending to broadcast addresses
        metadata: Keep OSC type tags on received arguments
    """
    local_address: str = "127.0.0.1"
    local_port: int = 57120
    remote_address: str = "127.0.0.1"
    remote_port: int = 6010
    broadcast: bool = False
    metadata: bool = True

    @property
    def remote(self) -> Tuple[str, int]:
        return (self.remote_address, self.remote_port)

    def __str__(self) -> str:
        return (
            f"{self.local_address}:{self.local_port} -> "
            f"{self.remote_address}:{self.remote_port}"
        )


# =============================================================================
# CHANNELS
# =============================================================================

class Channel(Enum):
    """Semantic channel an inbound packet belongs to."""
    TRIGGER = auto()    # Pattern events (/play2...)
    TEMPO = auto()      # Clock updates (/cps/cycle)
    METERING = auto()   # RMS levels (/rms)
    UNMATCHED = auto()  # Anything else on the shared port


# =============================================================================
# EVENTS
# =============================================================================

# Trigger events are open-ended key/value records
TriggerValue = Union[float, int, str]
TriggerEvent = Dict[str, TriggerValue]


@dataclass(frozen=True)
class TempoEvent:
    """Tempo clock update."""
    at_cycle: float
    cps: float
    paused: bool = False

    @property
    def bpm(self) -> float:
        """Beats per minute assuming four beats per cycle."""
        return self.cps * 60.0 * 4


@dataclass(frozen=True)
class ChannelLevel:
    """Level reading for one audio channel of an orbit."""
    peak: float
    power: float


@dataclass(frozen=True)
class MeteringEvent:
    """RMS reading for one orbit."""
    orbit: int
    channels: Tuple[ChannelLevel, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ControlMessage:
    """
    Outbound named parameter update.

    The value must already match type_tag; use ControlEncoder to parse
    loosely typed input.
    """
    name: str
    type_tag: TypeTag
    value: Any

    def __post_init__(self):
        if self.type_tag not in CONTROL_TYPE_TAGS:
            raise ValueError(f"Unsupported control type tag: {self.type_tag!r}")
        expected = _CONTROL_VALUE_TYPES[self.type_tag]
        if isinstance(self.value, bool) or not isinstance(self.value, expected):
            raise ValueError(
                f"Control '{self.name}' value {self.value!r} does not match "
                f"type tag '{self.type_tag.value}'"
            )

    def to_args(self) -> Tuple[OscArgument, OscArgument]:
        return (
            OscArgument(TypeTag.STRING, self.name),
            OscArgument(self.type_tag, self.value),
        )
