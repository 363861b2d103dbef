"""
Control Encoder

Builds /ctrl messages for Tidal's control bus:

    /ctrl  s:<name>  <tag>:<value>

Numeric sends parse loosely typed input (e.g. strings from a UI or CLI).
Values that do not parse are skipped silently so a bad value never
interrupts a live performance.
"""

import logging
import math
from typing import Any, Callable, Optional, Sequence

from pythonosc import osc_message

from .model import ControlMessage, OscArgument, TypeTag
from .osc_client import encode_packet
from .tidal_config import CTRL_ADDRESS

logger = logging.getLogger(__name__)

SendFn = Callable[[str, Sequence[OscArgument]], None]


# =============================================================================
# PARSING
# =============================================================================

def parse_float(value: Any) -> Optional[float]:
    """Parse a float, returning None for non-numeric or NaN input."""
    if isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) else f


def parse_int(value: Any) -> Optional[int]:
    """
    Parse an int, truncating fractional input ("3.7" -> 3).

    Returns None for non-numeric, NaN or infinite input.
    """
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    f = parse_float(value)
    if f is None or math.isinf(f):
        return None
    return int(f)


# =============================================================================
# WIRE FORMAT
# =============================================================================

def encode_ctrl_message(message: ControlMessage) -> bytes:
    """Frame a control message as an OSC datagram."""
    return encode_packet(CTRL_ADDRESS, message.to_args())


def decode_ctrl_message(dgram: bytes) -> ControlMessage:
    """
    Parse a /ctrl datagram back into a ControlMessage.

    Raises:
        ValueError: wrong address or argument layout
    """
    message = osc_message.OscMessage(dgram)
    if message.address != CTRL_ADDRESS:
        raise ValueError(f"Not a control message: {message.address}")
    params = list(message.params)
    if len(params) != 2 or not isinstance(params[0], str):
        raise ValueError(f"Control message needs [name, value], got {params!r}")
    name, value = params
    return ControlMessage(name=name, type_tag=TypeTag.for_value(value), value=value)


# =============================================================================
# ENCODER
# =============================================================================

class ControlEncoder:
    """
    Typed control sends on top of a transport send function.

    Example:
        encoder = ControlEncoder(port.send)
        encoder.send_float("cutoff", "1.5")   # sent
        encoder.send_float("cutoff", "abc")   # skipped
    """

    def __init__(self, send: SendFn):
        self._send = send

    def send_ctrl(self, name: str, type_tag: TypeTag, value: Any) -> Optional[ControlMessage]:
        """
        Send a control message with an explicit tag.

        A value that does not match type_tag is skipped like any other
        unparseable control value.

        Returns:
            The message sent, or None if skipped

        Raises:
            TransportError: from the underlying send
        """
        try:
            message = ControlMessage(name=str(name), type_tag=TypeTag(type_tag), value=value)
        except ValueError as e:
            logger.debug(f"Skipping control '{name}': {e}")
            return None
        self._send(CTRL_ADDRESS, message.to_args())
        return message

    def send_float(self, name: str, value: Any) -> Optional[ControlMessage]:
        f = parse_float(value)
        if f is None:
            logger.debug(f"Skipping control '{name}': {value!r} is not a float")
            return None
        return self.send_ctrl(name, TypeTag.FLOAT, f)

    def send_int(self, name: str, value: Any) -> Optional[ControlMessage]:
        i = parse_int(value)
        if i is None:
            logger.debug(f"Skipping control '{name}': {value!r} is not an int")
            return None
        return self.send_ctrl(name, TypeTag.INT, i)

    def send_string(self, name: str, value: Any) -> Optional[ControlMessage]:
        """Send a string control. Always sends; non-strings are stringified."""
        return self.send_ctrl(name, TypeTag.STRING, str(value))

    def send_param(self, name: str, value: Any) -> Optional[ControlMessage]:
        """
        Send a string control.

        DEPRECATED: Use send_string().
        """
        return self.send_string(name, value)
