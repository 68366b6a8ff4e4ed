# src/pycoolmaster/core/protocol.py
"""
Translation between channel commands and CoolMasterNet ASCII protocol lines.

Everything here is pure: the only shared data are the immutable lookup tables
in ``constants``, so these functions are safe to call from any thread or task.
"""
import logging
from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Final, Union

from .constants import (
    FAN_NUM_TO_STR,
    MODE_NUM_TO_STR,
    POWER_ON_REPLY,
    QUERY_CHARS,
    Channel,
)

log = logging.getLogger(__name__)

StateValue = Union[bool, Decimal, str]


class RefreshType:
    """Marker command asking for a full refresh instead of a protocol write."""

    _instance: "RefreshType | None" = None

    def __new__(cls) -> "RefreshType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "REFRESH"


REFRESH: Final = RefreshType()


class ResponseParseError(ValueError):
    """A query reply could not be turned into a value for its channel."""

    def __init__(self, channel: Channel, raw: str):
        self.channel = channel
        self.raw = raw
        super().__init__(f"Malformed {channel.value} reply: {raw!r}")


def _token(value: str) -> str:
    # str-mixin enums format as "Mode.COOL" on recent Pythons
    return value.value if isinstance(value, Enum) else value


def _encode_power(uid: str, value: bool) -> str:
    return f"{'on' if value else 'off'} {uid}"


def _encode_set_temperature(uid: str, value: Decimal) -> str:
    return f"temp {uid} {value}"


def _encode_mode(uid: str, value: str) -> str:
    # The mode token is the protocol command itself
    return f"{_token(value)} {uid}"


def _encode_fan_speed(uid: str, value: str) -> str:
    return f"fspeed {uid} {_token(value)}"


def _encode_louvre(uid: str, value: str) -> str:
    return f"swing {uid} {_token(value)}"


# Writable channels with the value type each one accepts.
# CURRENT_TEMPERATURE is read-only and deliberately absent.
ENCODERS: Final[dict[Channel, tuple[type, Callable[[str, Any], str]]]] = {
    Channel.POWER: (bool, _encode_power),
    Channel.SET_TEMPERATURE: (Decimal, _encode_set_temperature),
    Channel.MODE: (str, _encode_mode),
    Channel.FAN_SPEED: (str, _encode_fan_speed),
    Channel.LOUVRE: (str, _encode_louvre),
}


def is_refresh(value: Any) -> bool:
    return isinstance(value, RefreshType)


def encode(channel: Channel, value: Any, uid: str) -> str | None:
    """
    Build the protocol line that applies ``value`` to ``channel`` of unit ``uid``.

    Returns None when there is nothing to send: the refresh marker, a write to
    a read-only channel, or a value of the wrong type for the channel. Tokens
    for symbolic channels are not validated; the controller rejects bad ones.
    """
    if is_refresh(value):
        return None
    entry = ENCODERS.get(channel)
    if entry is None:
        return None
    accepts, build = entry
    if not isinstance(value, accepts):
        return None
    return build(uid, value)


def query_command(uid: str, query_char: str) -> str:
    return f"query {uid} {query_char}"


def query_for(channel: Channel, uid: str) -> str:
    return query_command(uid, QUERY_CHARS[channel])


def _decode_power(channel: Channel, raw: str) -> bool:
    return raw == POWER_ON_REPLY


def _decode_decimal(channel: Channel, raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ResponseParseError(channel, raw) from e
    if not value.is_finite():
        raise ResponseParseError(channel, raw)
    return value


def _decode_mode(channel: Channel, raw: str) -> str | None:
    return MODE_NUM_TO_STR.get(raw)


def _decode_fan_speed(channel: Channel, raw: str) -> str | None:
    return FAN_NUM_TO_STR.get(raw)


def _decode_verbatim(channel: Channel, raw: str) -> str:
    return raw


DECODERS: Final[dict[Channel, Callable[[Channel, str], StateValue | None]]] = {
    Channel.POWER: _decode_power,
    Channel.CURRENT_TEMPERATURE: _decode_decimal,
    Channel.SET_TEMPERATURE: _decode_decimal,
    Channel.MODE: _decode_mode,
    Channel.LOUVRE: _decode_verbatim,
    Channel.FAN_SPEED: _decode_fan_speed,
}


def decode(channel: Channel, raw: str | None) -> StateValue | None:
    """
    Turn a raw query reply into the typed value for ``channel``.

    An absent reply or an ordinal missing from its lookup table yields None.
    A temperature reply that is not a decimal raises ResponseParseError.
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    value = DECODERS[channel](channel, raw)
    if value is None:
        log.debug(f"No mapping for {channel.value} reply {raw!r}")
    return value
