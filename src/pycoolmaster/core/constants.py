# src/pycoolmaster/core/constants.py
from enum import Enum
from types import MappingProxyType

# Protocol constants
DEFAULT_PORT = 10102
PROMPT = b">"
OK_LINE = "OK"
LINE_ENDING = "\r\n"


# Channels of a single HVAC unit
class Channel(str, Enum):
    POWER = "power"
    SET_TEMPERATURE = "set_temperature"
    CURRENT_TEMPERATURE = "current_temperature"
    MODE = "mode"
    FAN_SPEED = "fan_speed"
    LOUVRE = "louvre"

    @property
    def writable(self) -> bool:
        return self is not Channel.CURRENT_TEMPERATURE


# Operating modes (the token is the protocol verb itself)
class Mode(str, Enum):
    COOL = "cool"
    HEAT = "heat"
    AUTO = "auto"
    DRY = "dry"
    FAN = "fan"


# Fan speeds (single-letter protocol tokens)
class FanSpeed(str, Enum):
    LOW = "l"
    MEDIUM = "m"
    HIGH = "h"
    AUTO = "a"
    TOP = "t"


# The query command reports modes as digits 0-5, none of which is itself a
# settable command. 4 is "aux heat", which has no set command; it reads as heat.
MODE_NUM_TO_STR = MappingProxyType(
    {
        "0": Mode.COOL.value,
        "1": Mode.HEAT.value,
        "2": Mode.AUTO.value,
        "3": Mode.DRY.value,
        "4": Mode.HEAT.value,
        "5": Mode.FAN.value,
    }
)

# The query command reports fan speed as digits, the fspeed command takes letters.
FAN_NUM_TO_STR = MappingProxyType(
    {
        "0": FanSpeed.LOW.value,
        "1": FanSpeed.MEDIUM.value,
        "2": FanSpeed.HIGH.value,
        "3": FanSpeed.AUTO.value,
        "4": FanSpeed.TOP.value,
    }
)

# Query character for each channel, in the order a full refresh issues them
QUERY_CHARS = MappingProxyType(
    {
        Channel.POWER: "o",
        Channel.CURRENT_TEMPERATURE: "a",
        Channel.SET_TEMPERATURE: "t",
        Channel.MODE: "m",
        Channel.LOUVRE: "s",
        Channel.FAN_SPEED: "f",
    }
)

# Reply that means the unit is switched on
POWER_ON_REPLY = "1"
