"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import typer
import yaml

from tabletdb.api import Client
from tabletdb.core.errors import InvalidArgumentError, TabletdbError
from tabletdb.core.model import Device

app = typer.Typer(help="Look up graphics tablet capabilities")


class OutputFormat(str, Enum):
    text = "text"
    yaml = "yaml"


DatadirOption = typer.Option(
    None,
    "--datadir",
    help=(
        "Directory with .tablet files and wacom.stylus. Defaults to $TABLETDB_DATADIR "
        "or the packaged data, with per-user tablets layered on top"
    ),
)
FormatOption = typer.Option(OutputFormat.text, "--format", help="Output format")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _build_client(datadir: Path | None, verbose: bool) -> Client:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    client = Client(datadir=datadir)
    for warning in client.load_warnings:
        typer.echo(f"Warning: {warning}", err=True)
    return client


def _echo(data: Any, fmt: OutputFormat) -> None:
    if fmt is OutputFormat.yaml:
        typer.echo(yaml.safe_dump(data, sort_keys=False).rstrip())
        return
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        typer.echo(f"{key}: {value}")


def _parse_usb_id(value: str) -> tuple[int, int]:
    vendor, sep, product = value.partition(":")
    try:
        if not sep:
            raise ValueError(value)
        return int(vendor, 16), int(product, 16)
    except ValueError:
        raise InvalidArgumentError(f"USB ID must look like VID:PID, got '{value}'") from None


@app.command("list")
def list_devices(
    datadir: Path | None = DatadirOption,
    fmt: OutputFormat = FormatOption,
    verbose: bool = VerboseOption,
) -> None:
    """List every known tablet."""
    try:
        with _build_client(datadir, verbose) as client:
            devices = client.list_devices()
        if not devices:
            typer.echo("No tablets known")
            raise typer.Exit(code=1)

        if fmt is OutputFormat.yaml:
            typer.echo(yaml.safe_dump([d.as_dict() for d in devices], sort_keys=False).rstrip())
            return
        for device in devices:
            typer.echo(f"{device.match}: {device.vendor or ''} {device.product or ''}".rstrip())
    except TabletdbError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("show")
def show_device(
    path: str | None = typer.Option(None, "--path", help="Device node, e.g. /dev/input/event5"),
    usb: str | None = typer.Option(None, "--usb", help="USB VID:PID in hex"),
    name: str | None = typer.Option(None, "--name", help="Exact product name"),
    match: str | None = typer.Option(None, "--match", help="Match key, e.g. usb:0x56a:0xb9"),
    fallback: bool = typer.Option(False, "--fallback", help="Fall back to the generic tablet"),
    datadir: Path | None = DatadirOption,
    fmt: OutputFormat = FormatOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show the tablet matching exactly one of --path, --usb, --name or --match."""
    try:
        selectors = [s for s in (path, usb, name, match) if s is not None]
        if len(selectors) != 1:
            raise InvalidArgumentError("Pass exactly one of --path, --usb, --name or --match")

        with _build_client(datadir, verbose) as client:
            device: Device
            if path is not None:
                device = client.device_from_path(path, fallback=fallback)
            elif usb is not None:
                device = client.device_from_usbid(*_parse_usb_id(usb))
            elif name is not None:
                device = client.device_from_name(name)
            else:
                device = client.device_from_match(match)
        _echo(device.as_dict(), fmt)
    except TabletdbError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("stylus")
def show_stylus(
    stylus_id: str = typer.Argument(..., help="Stylus ID, hex with 0x prefix or decimal, e.g. 0x802"),
    datadir: Path | None = DatadirOption,
    fmt: OutputFormat = FormatOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show a stylus by its ID."""
    try:
        try:
            parsed_id = int(stylus_id, 0)
        except ValueError:
            raise InvalidArgumentError(
                f"Stylus ID must be 0x-prefixed hex or decimal, got '{stylus_id}'"
            ) from None
        with _build_client(datadir, verbose) as client:
            stylus = client.stylus(parsed_id)
        _echo(stylus.as_dict(), fmt)
    except TabletdbError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
