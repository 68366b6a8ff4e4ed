# tests/test_mqtt.py
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import aiomqtt
import pytest

from pycoolmaster import mqtt
from pycoolmaster.config import settings
from pycoolmaster.core.connection import TransportError
from pycoolmaster.core.constants import Channel
from pycoolmaster.core.models import UnitState, UnitStatus
from pycoolmaster.core.unit import HVACUnit
from pycoolmaster.mqtt import MqttPublisher, format_payload, poll_and_publish

UID = "L1.100"


def test_format_payload():
    assert format_payload(True) == "ON"
    assert format_payload(False) == "OFF"
    assert format_payload(Decimal("23.50")) == "23.50"
    assert format_payload("h") == "h"


class TestMqttPublisher:
    @pytest.fixture
    def enabled(self, monkeypatch):
        monkeypatch.setattr(settings, "MQTT_ENABLED", True)

    @pytest.fixture
    def publisher(self):
        pub = MqttPublisher(UID)
        pub._client = AsyncMock()
        return pub

    def test_topics(self, publisher):
        assert publisher.state_topic == f"hvac/coolmaster/{UID}/state"
        assert publisher.channel_topic(Channel.FAN_SPEED) == f"hvac/coolmaster/{UID}/fan_speed"

    @pytest.mark.asyncio
    async def test_publish_update(self, enabled, publisher):
        assert await publisher.publish_update(Channel.POWER, True)

        publisher._client.publish.assert_awaited_once_with(
            f"hvac/coolmaster/{UID}/power", payload="ON", qos=1, retain=True
        )

    @pytest.mark.asyncio
    async def test_publish_disabled(self, publisher):
        assert not await publisher.publish_update(Channel.POWER, True)

        publisher._client.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_error_is_logged(self, enabled, publisher, caplog):
        publisher._client.publish.side_effect = aiomqtt.MqttError("broker gone")

        assert not await publisher.publish_state(UnitState(uid=UID))
        assert "broker gone" in caplog.text

    @pytest.mark.asyncio
    async def test_publish_refresh(self, enabled, publisher):
        state = UnitState(uid=UID, mode="cool", set_temperature=Decimal("22"))

        await publisher.publish_refresh(
            {Channel.MODE: "cool", Channel.SET_TEMPERATURE: Decimal("22")}, state
        )

        topics = [call.args[0] for call in publisher._client.publish.await_args_list]
        assert topics == [
            f"hvac/coolmaster/{UID}/mode",
            f"hvac/coolmaster/{UID}/set_temperature",
            f"hvac/coolmaster/{UID}/state",
        ]

    @pytest.mark.asyncio
    async def test_context_manager(self, monkeypatch):
        client = MagicMock()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        monkeypatch.setattr(mqtt.mqtt, "Client", MagicMock(return_value=client))

        async with MqttPublisher(UID) as publisher:
            assert publisher._client is client

        client.__aexit__.assert_awaited_once()
        assert publisher._client is None


class TestPollAndPublish:
    @pytest.fixture
    def connection(self):
        conn = MagicMock()
        conn.address = "coolmaster:10102"
        conn.connect = AsyncMock()
        conn.send_command = AsyncMock(return_value="1")
        return conn

    @pytest.fixture
    def publisher(self):
        return AsyncMock(spec=MqttPublisher)

    @pytest.mark.asyncio
    async def test_connects_and_publishes(self, connection, publisher):
        connection.is_connected = MagicMock(side_effect=[False, True])
        reports = []
        unit = HVACUnit(UID, connection, on_status=reports.append)

        await poll_and_publish(unit, connection, publisher, interval=0, cycles=1)

        connection.connect.assert_awaited_once()
        assert reports[0].status is UnitStatus.ONLINE
        publisher.publish_refresh.assert_awaited_once()
        updates, state = publisher.publish_refresh.await_args.args
        assert updates[Channel.POWER] is True
        assert state.power is True

    @pytest.mark.asyncio
    async def test_skips_cycle_when_unreachable(self, connection, publisher):
        connection.is_connected = MagicMock(return_value=False)
        connection.connect.side_effect = TransportError("Could not connect to CoolMasterNet unit coolmaster:10102")
        unit = HVACUnit(UID, connection)

        await poll_and_publish(unit, connection, publisher, interval=0, cycles=2)

        assert connection.connect.await_count == 2
        connection.send_command.assert_not_awaited()
        publisher.publish_refresh.assert_not_awaited()
