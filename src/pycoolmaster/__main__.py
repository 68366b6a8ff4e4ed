# src/pycoolmaster/__main__.py
import asyncio

import typer

from . import cli
from .config import settings
from .core.connection import CoolMasterConnection
from .core.models import StatusReport
from .core.unit import HVACUnit
from .mqtt import MqttPublisher, poll_and_publish

app = typer.Typer(
    name="pycoolmaster",
    help="A Python tool to control HVAC units through a CoolMasterNet controller.",
    add_completion=False,
)

app.add_typer(cli.app, name="cli")


def print_status(report: StatusReport):
    detail = f" ({report.detail})" if report.detail else ""
    print(f"Unit {report.uid} is {report.status.value}{detail}")


@app.command()
def publish():
    """
    Refreshes the unit on a fixed cadence and publishes its state to MQTT.
    """
    if not settings.MQTT_ENABLED:
        print("MQTT publisher is disabled. Set MQTT_ENABLED=true to use it.")
        raise typer.Exit(code=1)

    print(
        f"Publishing unit {settings.COOLMASTER_UID} from "
        f"{settings.COOLMASTER_HOST}:{settings.COOLMASTER_PORT} to "
        f"'{settings.MQTT_TOPIC_PREFIX}/{settings.COOLMASTER_UID}' "
        f"every {settings.POLL_INTERVAL}s."
    )

    async def _publish():
        connection = CoolMasterConnection(
            host=settings.COOLMASTER_HOST,
            port=settings.COOLMASTER_PORT,
            timeout=settings.COOLMASTER_TIMEOUT,
            retries=settings.COOLMASTER_RETRIES,
        )
        unit = HVACUnit(settings.COOLMASTER_UID, connection, on_status=print_status)
        try:
            async with MqttPublisher(settings.COOLMASTER_UID) as publisher:
                await poll_and_publish(unit, connection, publisher, settings.POLL_INTERVAL)
        finally:
            await connection.close()

    asyncio.run(_publish())


if __name__ == "__main__":
    app()
