# src/pycoolmaster/core/models.py
from collections.abc import Iterable
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict

from .constants import Channel
from .protocol import StateValue


class UnitState(BaseModel):
    """Last known values of one unit's channels; None until first decoded."""

    model_config = ConfigDict(frozen=True)

    uid: str
    power: bool | None = None
    set_temperature: Decimal | None = None
    current_temperature: Decimal | None = None
    mode: str | None = None
    fan_speed: str | None = None
    louvre: str | None = None

    def get(self, channel: Channel) -> StateValue | None:
        return getattr(self, channel.value)

    def apply(self, updates: dict[Channel, StateValue] | Iterable[tuple[Channel, StateValue]]) -> "UnitState":
        """Return a copy with the given channel updates applied."""
        pairs = updates.items() if isinstance(updates, dict) else updates
        return self.model_copy(update={channel.value: value for channel, value in pairs})

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    def to_json(self, **kwargs) -> str:
        return self.model_dump_json(**kwargs)


class UnitStatus(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"


class StatusReport(BaseModel):
    uid: str
    status: UnitStatus
    detail: str | None = None
