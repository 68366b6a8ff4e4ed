# src/pycoolmaster/mqtt.py
import asyncio
import logging
from decimal import Decimal

import aiomqtt as mqtt

from .config import settings
from .core.connection import CoolMasterConnection, TransportError
from .core.constants import Channel
from .core.models import UnitState
from .core.protocol import StateValue
from .core.unit import HVACUnit

log = logging.getLogger(__name__)


def format_payload(value: StateValue) -> str:
    if isinstance(value, bool):
        return "ON" if value else "OFF"
    if isinstance(value, Decimal):
        return str(value)
    return value


class MqttPublisher:
    """Publishes decoded channel values for one unit, retained per topic."""

    def __init__(self, uid: str) -> None:
        self._client: mqtt.Client | None = None
        self._hostname = settings.MQTT_HOST
        self._port = settings.MQTT_PORT
        self._username = settings.MQTT_USER
        self._password = settings.MQTT_PASSWORD
        self.base_topic = f"{settings.MQTT_TOPIC_PREFIX}/{uid}"
        self.state_topic = f"{self.base_topic}/state"

    def channel_topic(self, channel: Channel) -> str:
        return f"{self.base_topic}/{channel.value}"

    async def connect(self) -> None:
        """Connect to MQTT broker."""
        try:
            self._client = mqtt.Client(
                hostname=self._hostname,
                port=self._port,
                username=self._username,
                password=self._password,
            )
            await self._client.__aenter__()
            log.info(f"Connected to MQTT broker at {self._hostname}:{self._port}")
        except mqtt.MqttError as e:
            self._client = None
            log.error(f"Failed to connect to MQTT broker: {e}")
            raise

    async def disconnect(self) -> None:
        """Disconnect from MQTT broker."""
        if self._client:
            try:
                await self._client.__aexit__(None, None, None)
            except mqtt.MqttError as e:
                log.warning(f"Error during MQTT disconnect: {e}")
            self._client = None
            log.info("Disconnected from MQTT broker.")

    async def __aenter__(self) -> "MqttPublisher":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    async def _publish(self, topic: str, payload: str) -> bool:
        if not settings.MQTT_ENABLED or self._client is None:
            return False
        try:
            await self._client.publish(topic, payload=payload, qos=1, retain=True)
        except mqtt.MqttError as e:
            log.error(f"Failed to publish to MQTT topic {topic}: {e}")
            return False
        return True

    async def publish_update(self, channel: Channel, value: StateValue) -> bool:
        return await self._publish(self.channel_topic(channel), format_payload(value))

    async def publish_state(self, state: UnitState) -> bool:
        published = await self._publish(self.state_topic, state.to_json())
        if published:
            log.info(f"Published state to MQTT topic: {self.state_topic}")
        return published

    async def publish_refresh(self, updates: dict[Channel, StateValue], state: UnitState) -> None:
        for channel, value in updates.items():
            await self.publish_update(channel, value)
        await self.publish_state(state)


async def poll_and_publish(
    unit: HVACUnit,
    connection: CoolMasterConnection,
    publisher: MqttPublisher,
    interval: float,
    cycles: int | None = None,
) -> None:
    """Refresh the unit every ``interval`` seconds and publish what was decoded."""
    done = 0
    while cycles is None or done < cycles:
        if not connection.is_connected():
            try:
                await connection.connect()
                unit.mark_online()
            except TransportError as e:
                log.error(f"{e}, retrying in {interval}s")
        if connection.is_connected():
            updates = await unit.refresh()
            await publisher.publish_refresh(updates, unit.state)
        done += 1
        if cycles is None or done < cycles:
            await asyncio.sleep(interval)
