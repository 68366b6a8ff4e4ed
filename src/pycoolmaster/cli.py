# src/pycoolmaster/cli.py
import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .core.connection import CoolMasterConnection, TransportError
from .core.constants import Channel, FanSpeed, Mode
from .core.models import UnitState
from .core.unit import HVACUnit

app = typer.Typer(
    name="cli",
    help="Command-Line Interface for a single CoolMasterNet HVAC unit.",
    no_args_is_help=True,
)
console = Console()

UID_OPTION = typer.Option(None, "--uid", help="Unit UID (defaults to COOLMASTER_UID).")

CHANNEL_LABELS = {
    Channel.POWER: "Power",
    Channel.CURRENT_TEMPERATURE: "Room Temp",
    Channel.SET_TEMPERATURE: "Setpoint",
    Channel.MODE: "Mode",
    Channel.FAN_SPEED: "Fan Speed",
    Channel.LOUVRE: "Louvre",
}

FAN_LABELS = {
    FanSpeed.LOW.value: "Low",
    FanSpeed.MEDIUM.value: "Medium",
    FanSpeed.HIGH.value: "High",
    FanSpeed.AUTO.value: "Auto",
    FanSpeed.TOP.value: "Top",
}


class PowerState(str, Enum):
    ON = "on"
    OFF = "off"


async def get_connection() -> CoolMasterConnection:
    """Async factory for the controller connection."""
    return CoolMasterConnection(
        host=settings.COOLMASTER_HOST,
        port=settings.COOLMASTER_PORT,
        timeout=settings.COOLMASTER_TIMEOUT,
        retries=settings.COOLMASTER_RETRIES,
    )


def run_async(coro):
    """Helper to run an async function from a sync Typer command."""
    return asyncio.run(coro)


def format_value(channel: Channel, value: Any) -> str:
    if value is None:
        return "-"
    if channel is Channel.POWER:
        return "On" if value else "Off"
    if channel is Channel.FAN_SPEED:
        return FAN_LABELS.get(value, value)
    if channel in (Channel.CURRENT_TEMPERATURE, Channel.SET_TEMPERATURE):
        return f"{value}°"
    return str(value)


def print_state(state: UnitState):
    """Prints the unit state in a human-readable format."""
    console.print(f"[bold]Unit:[/] {state.uid}")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Channel", style="dim")
    table.add_column("Value")
    for channel in Channel:
        table.add_row(CHANNEL_LABELS[channel], format_value(channel, state.get(channel)))
    console.print(table)


async def with_unit(uid: Optional[str], action: Callable[[HVACUnit], Awaitable[None]]) -> None:
    connection = await get_connection()
    try:
        async with connection:
            unit = HVACUnit(uid or settings.COOLMASTER_UID, connection)
            await action(unit)
    except TransportError as e:
        console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(code=1)


def send_and_show(uid: Optional[str], channel: Channel, value: Any) -> None:
    async def _send(unit: HVACUnit):
        await unit.handle_command(channel, value)
        console.print(f"[green]{CHANNEL_LABELS[channel]} updated. New status:[/]")
        await unit.refresh()
        print_state(unit.state)

    run_async(with_unit(uid, _send))


def parse_temperature(value: str) -> Decimal:
    try:
        temp = Decimal(value)
    except InvalidOperation:
        raise typer.BadParameter(f"'{value}' is not a decimal temperature.")
    # The controller only reads plain decimals such as 23.5
    if not temp.is_finite() or str(temp) != value:
        raise typer.BadParameter(f"'{value}' is not a decimal temperature.")
    return temp


@app.command()
def status(uid: Optional[str] = UID_OPTION):
    """Print the current state of the unit."""

    async def _status(unit: HVACUnit):
        await unit.refresh()
        print_state(unit.state)

    run_async(with_unit(uid, _status))


@app.command()
def status_json(uid: Optional[str] = UID_OPTION):
    """Print the state of the unit in JSON format."""

    async def _status_json(unit: HVACUnit):
        await unit.refresh()
        console.print_json(unit.state.to_json())

    run_async(with_unit(uid, _status_json))


@app.command()
def power(
    state: PowerState = typer.Argument(..., help="Switch the unit on or off."),
    uid: Optional[str] = UID_OPTION,
):
    """Switch the unit on or off."""
    send_and_show(uid, Channel.POWER, state is PowerState.ON)


@app.command()
def temp(
    value: Decimal = typer.Argument(..., parser=parse_temperature, help="Setpoint, e.g. 23.5."),
    uid: Optional[str] = UID_OPTION,
):
    """Set the target temperature."""
    send_and_show(uid, Channel.SET_TEMPERATURE, value)


@app.command()
def mode(
    token: str = typer.Argument(
        ..., help=f"Mode command ({', '.join(m.value for m in Mode)})."
    ),
    uid: Optional[str] = UID_OPTION,
):
    """Set the operating mode."""
    send_and_show(uid, Channel.MODE, token)


@app.command()
def fan(
    token: str = typer.Argument(
        ..., help=f"Fan speed letter ({', '.join(f.value for f in FanSpeed)})."
    ),
    uid: Optional[str] = UID_OPTION,
):
    """Set the fan speed."""
    send_and_show(uid, Channel.FAN_SPEED, token)


@app.command()
def swing(
    token: str = typer.Argument(..., help="Louvre position token."),
    uid: Optional[str] = UID_OPTION,
):
    """Set the louvre position."""
    send_and_show(uid, Channel.LOUVRE, token)


@app.command()
def raw(command: List[str] = typer.Argument(..., help="Command line to send, e.g. 'ls'.")):
    """Send a raw command line to the controller and print its reply."""

    async def _raw():
        connection = await get_connection()
        try:
            async with connection:
                reply = await connection.send_command(" ".join(command))
        except TransportError as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(code=1)
        console.print(reply)

    run_async(_raw())


if __name__ == "__main__":
    app()
