# src/pycoolmaster/core/unit.py
import logging
from collections.abc import Callable
from typing import Any, Protocol

from .constants import QUERY_CHARS, Channel
from .models import StatusReport, UnitState, UnitStatus
from .protocol import (
    ResponseParseError,
    StateValue,
    decode,
    encode,
    is_refresh,
    query_command,
)

log = logging.getLogger(__name__)

StateCallback = Callable[[Channel, StateValue], None]
StatusCallback = Callable[[StatusReport], None]


class Connection(Protocol):
    # send_command raises ConnectionError (TransportError) when the link fails
    address: str

    def is_connected(self) -> bool: ...

    async def send_command(self, command: str) -> str: ...


class HVACUnit:
    """Handles commands and state refresh for one UID on a CoolMasterNet controller."""

    def __init__(
        self,
        uid: str,
        connection: Connection,
        on_state: StateCallback | None = None,
        on_status: StatusCallback | None = None,
    ):
        self.uid = uid
        self.connection = connection
        self.on_state = on_state
        self.on_status = on_status
        self.state = UnitState(uid=uid)

    def _report_status(self, status: UnitStatus, detail: str | None = None) -> None:
        if self.on_status is not None:
            self.on_status(StatusReport(uid=self.uid, status=status, detail=detail))

    def mark_online(self) -> None:
        self._report_status(UnitStatus.ONLINE)

    async def handle_command(self, channel: Channel, command: Any) -> None:
        if not self.connection.is_connected():
            self._report_status(
                UnitStatus.OFFLINE,
                f"Could not connect to CoolMasterNet unit {self.connection.address}",
            )
            return

        if is_refresh(command):
            await self.refresh()
            return

        line = encode(channel, command, self.uid)
        if line is None:
            log.debug(f"Ignoring {command!r} for channel {channel.value}")
            return

        try:
            await self.connection.send_command(line)
        except ConnectionError as e:
            log.error(f"Failed to set channel {channel.value} -> {command}: {e}")

    async def query(self, query_char: str) -> str | None:
        """Send one query; a transport failure is logged and reads as no value."""
        command = query_command(self.uid, query_char)
        try:
            return await self.connection.send_command(command)
        except ConnectionError as e:
            log.error(f"Query '{command}' failed: {e}")
        return None

    async def refresh(self) -> dict[Channel, StateValue]:
        """
        Query every channel and apply what could be decoded.

        Each channel stands alone: a failed query, an empty reply, an unmapped
        ordinal or a malformed temperature drops that channel only.
        """
        updates: dict[Channel, StateValue] = {}
        for channel, query_char in QUERY_CHARS.items():
            raw = await self.query(query_char)
            try:
                value = decode(channel, raw)
            except ResponseParseError as e:
                log.warning(f"Unparseable reply for unit {self.uid}: {e}")
                continue
            if value is None:
                continue
            updates[channel] = value
            if self.on_state is not None:
                self.on_state(channel, value)

        self.state = self.state.apply(updates)
        return updates
