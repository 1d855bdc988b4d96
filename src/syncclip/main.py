"""CLI handling for syncclip.

This module provides the command-line front end: a click command group
that locates the engine, configures logging, and runs each command as one
asyncio program against the history, discovery, config and about
components.

Usage:
    syncclip --socket PATH [--verbose] [--wait] COMMAND [ARGS]
    syncclip --address HOST:PORT [--verbose] [--wait] COMMAND [ARGS]
"""

from __future__ import annotations

import asyncio
import datetime
import json
import os
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import click

from syncclip.about import AboutPanel, UpdateStatus
from syncclip.constants import ONE_SHOT_TIMEOUT, REFRESH_INTERVAL
from syncclip.config_model import ConfigFieldError
from syncclip.config_store import ConfigStore
from syncclip.discovery import DiscoveryAggregator
from syncclip.gateway import GATEWAY_ERRORS, CommandGateway, EngineAddress
from syncclip.gateway_retry import wait_for_engine
from syncclip.main_logging import configure_logging
from syncclip.main_options import engine_location_options, resolve_engine_address
from syncclip.models import EntryKind
from syncclip.resources import ResourceUnavailable, fetch_resource
from syncclip.view import HistoryView, run_watch

Action = Callable[[CommandGateway], Awaitable[bool]]


@dataclass
class CliSettings:
    """Engine location and startup behaviour shared by all subcommands."""

    address: EngineAddress | None
    wait: bool = False

    def gateway(self, timeout: float | None) -> CommandGateway:
        if self.address is None:
            raise click.UsageError("Either --socket or --address must be specified")
        return CommandGateway(self.address, timeout=timeout)


def _fail(message: str | None) -> bool:
    click.echo(f"Error: {message or 'unknown error'}", err=True)
    return False


def _run(settings: CliSettings, action: Action, timeout: float | None = ONE_SHOT_TIMEOUT) -> None:
    """Run an async action against the engine and exit 1 if it fails.

    Args:
        settings: CLI settings from the command group.
        action: Coroutine function taking the gateway, returning success.
        timeout: Per-call gateway timeout; None for mounted views.
    """
    gateway = settings.gateway(timeout)

    async def runner() -> bool:
        if settings.wait:
            await wait_for_engine(gateway)
        return await action(gateway)

    try:
        ok = asyncio.run(runner())
    except GATEWAY_ERRORS as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not ok:
        sys.exit(1)


@click.group()
@engine_location_options
@click.option(
    "--wait",
    is_flag=True,
    help="Wait for the engine to come up before running the command",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
@click.pass_context
def main(
    ctx: click.Context,
    socket: str | None,
    address: EngineAddress | None,
    wait: bool,
    verbose: bool,
) -> None:
    """Browse and manage synchronized clipboard history."""
    configure_logging(verbose)
    ctx.obj = CliSettings(address=resolve_engine_address(ctx, socket, address), wait=wait)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw entries as JSON")
@click.option(
    "--check-resources",
    is_flag=True,
    help="Try to load image entries and hide those that fail",
)
@click.pass_obj
def history(settings: CliSettings, as_json: bool, check_resources: bool) -> None:
    """Show clipboard history, newest first."""

    async def action(gateway: CommandGateway) -> bool:
        view = HistoryView(gateway)
        if not await view.history.refresh():
            return _fail(view.history.last_error)
        if as_json:
            entries = [e.to_dict() for e in view.history.entries]
            click.echo(json.dumps(entries, indent=2, ensure_ascii=False))
            return True
        await view.config.load()
        if check_resources:
            await view.probe_new_images()
        click.echo(view.render())
        return True

    _run(settings, action)


@main.command()
@click.option(
    "--interval",
    type=float,
    default=REFRESH_INTERVAL,
    show_default=True,
    help="Seconds between refreshes",
)
@click.pass_obj
def watch(settings: CliSettings, interval: float) -> None:
    """Live history view; refreshes until interrupted."""

    async def action(gateway: CommandGateway) -> bool:
        await run_watch(gateway, interval=interval)
        return True

    _run(settings, action, timeout=None)


@main.command()
@click.argument("entry_id", type=int)
@click.pass_obj
def copy(settings: CliSettings, entry_id: int) -> None:
    """Copy a text entry to the clipboard."""

    async def action(gateway: CommandGateway) -> bool:
        view = HistoryView(gateway)
        if not await view.history.refresh():
            return _fail(view.history.last_error)
        entry = view.history.find(entry_id)
        if entry is None:
            return _fail(f"No history entry with id {entry_id}")
        if entry.kind is not EntryKind.TEXT or not entry.content:
            click.echo(f"Entry {entry_id} has no text to copy")
            return True
        if not view.history.copy(entry):
            return _fail(view.history.last_error)
        click.echo(f"Copied entry {entry_id}")
        return True

    _run(settings, action)


@main.command()
@click.argument("entry_id", type=int)
@click.pass_obj
def pin(settings: CliSettings, entry_id: int) -> None:
    """Pin or unpin an entry."""

    async def action(gateway: CommandGateway) -> bool:
        view = HistoryView(gateway)
        if not await view.history.toggle_pin(entry_id):
            return _fail(view.history.last_error)
        entry = view.history.find(entry_id)
        if entry is None:
            click.echo(f"Toggled pin on entry {entry_id}")
        else:
            click.echo(f"Entry {entry_id} {'pinned' if entry.pinned else 'unpinned'}")
        return True

    _run(settings, action)


@main.command()
@click.argument("entry_id", type=int)
@click.pass_obj
def delete(settings: CliSettings, entry_id: int) -> None:
    """Delete one entry."""

    async def action(gateway: CommandGateway) -> bool:
        view = HistoryView(gateway)
        if not await view.history.delete(entry_id):
            return _fail(view.history.last_error)
        click.echo(f"Deleted entry {entry_id}")
        return True

    _run(settings, action)


@main.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def clear(settings: CliSettings, yes: bool) -> None:
    """Delete every unpinned entry. Pinned entries are kept."""

    def confirm(text: str) -> bool:
        return yes or click.confirm(text, default=False)

    async def action(gateway: CommandGateway) -> bool:
        view = HistoryView(gateway)
        if await view.history.clear_unpinned(confirm):
            click.echo("Cleared unpinned history")
            return True
        if view.history.last_error:
            return _fail(view.history.last_error)
        click.echo("Aborted.")
        return True

    _run(settings, action)


@main.command()
@click.argument("entry_id", type=int)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True),
    help="Destination file (default: the stored file name)",
)
@click.pass_obj
def fetch(settings: CliSettings, entry_id: int, output: str | None) -> None:
    """Download the stored file of an image or file entry."""

    async def action(gateway: CommandGateway) -> bool:
        view = HistoryView(gateway)
        if not await view.history.refresh():
            return _fail(view.history.last_error)
        entry = view.history.find(entry_id)
        if entry is None:
            return _fail(f"No history entry with id {entry_id}")
        if entry.kind is EntryKind.TEXT or not entry.file_ref:
            return _fail(f"Entry {entry_id} has no stored file")
        await view.config.load()
        url = view.resource_url(entry.file_ref)
        try:
            data = await fetch_resource(url)
        except ResourceUnavailable as e:
            return _fail(str(e))
        destination = output or os.path.basename(entry.file_ref)
        with open(destination, "wb") as f:
            f.write(data)
        click.echo(f"Saved {len(data)} bytes to {destination}")
        return True

    _run(settings, action)


def _format_last_active(timestamp: int | None) -> str:
    if timestamp is None:
        return ""
    when = datetime.datetime.fromtimestamp(timestamp)
    return f"  last active {when:%Y-%m-%d %H:%M:%S}"


@main.command()
@click.option("--no-scan", is_flag=True, help="Only show local network information")
@click.option(
    "--copy-ip",
    "copy_name",
    metavar="NAME",
    help="Copy the IP of this interface or device to the clipboard",
)
@click.pass_obj
def network(settings: CliSettings, no_scan: bool, copy_name: str | None) -> None:
    """Show local interfaces, discovered servers and connected devices."""

    async def action(gateway: CommandGateway) -> bool:
        discovery = DiscoveryAggregator(gateway)
        info_ok = await discovery.fetch_network_info()
        scan_ok = True if no_scan else await discovery.scan()

        info = discovery.network_info
        if info is not None:
            click.echo(f"Host: {info.hostname}")
            for iface in info.interfaces:
                marker = " (physical)" if iface.is_physical else ""
                click.echo(f"  {iface.name:<12} {iface.ip}{marker}")
        if not no_scan:
            click.echo("LAN devices:")
            for peer in discovery.lan_devices:
                click.echo(f"  {peer.name:<20} {peer.address}")
            if not discovery.lan_devices:
                click.echo("  (none found)")
            click.echo("Connected devices:")
            for client in discovery.connected_clients:
                click.echo(f"  {client.name:<20} {client.ip}{_format_last_active(client.last_active_at)}")
            if not discovery.connected_clients:
                click.echo("  (none)")
        if not (info_ok and scan_ok):
            return _fail(discovery.last_error)
        if copy_name is not None:
            ip = discovery.find_ip(copy_name)
            if ip is None:
                return _fail(f"No interface or device named {copy_name!r}")
            if not discovery.copy_ip(ip):
                return _fail(discovery.last_error)
            click.echo(f"Copied {ip}")
        return True

    _run(settings, action)


@main.group()
def config() -> None:
    """Show or change the engine configuration."""


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Print the raw snapshot as JSON")
@click.pass_obj
def config_show(settings: CliSettings, as_json: bool) -> None:
    """Print the current configuration."""

    async def action(gateway: CommandGateway) -> bool:
        store = ConfigStore(gateway)
        if not await store.load():
            return _fail("Failed to load config")
        snapshot = store.config.to_dict()
        if as_json:
            click.echo(json.dumps(snapshot, indent=2, ensure_ascii=False))
            return True
        for section, fields in snapshot.items():
            click.echo(f"[{section}]")
            for name, value in fields.items():
                click.echo(f"  {name} = {_display_value(name, value)}")
        return True

    _run(settings, action)


def _display_value(name: str, value: Any) -> str:
    if value and name in ("token", "encrypt_password", "password"):
        return "********"
    return json.dumps(value, ensure_ascii=False)


@config.command("set")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_obj
def config_set(settings: CliSettings, assignments: tuple[str, ...]) -> None:
    """Change fields and save, e.g. server.port=5034 general.device_name=Laptop."""
    parsed: list[tuple[str, str, str]] = []
    for item in assignments:
        key, sep, value = item.partition("=")
        section, dot, field = key.partition(".")
        if not sep or not dot or not field:
            raise click.BadParameter(f"Expected SECTION.FIELD=VALUE, got {item!r}")
        parsed.append((section, field, value))

    async def action(gateway: CommandGateway) -> bool:
        store = ConfigStore(gateway)
        if not await store.load():
            return _fail("Failed to load config; nothing saved")
        try:
            for section, field, value in parsed:
                store.edit(section, field, value)
        except ConfigFieldError as e:
            return _fail(e.args[0])
        if not await store.save():
            return _fail(f"Error saving config: {store.status_message}")
        click.echo("Saved!")
        return True

    _run(settings, action)


@config.command("check-port")
@click.argument("port", type=int)
@click.pass_obj
def config_check_port(settings: CliSettings, port: int) -> None:
    """Check whether the engine can bind PORT and suggest another if not."""

    async def action(gateway: CommandGateway) -> bool:
        store = ConfigStore(gateway)
        available = await store.check_port_available(port)
        if available is None:
            return _fail("Port check failed")
        if available:
            click.echo(f"Port {port} is available")
            return True
        suggestion = await store.find_available_port(port + 1)
        hint = f"; try {suggestion}" if suggestion is not None else ""
        click.echo(f"Port {port} is in use{hint}")
        return True

    _run(settings, action)


@main.command()
@click.pass_obj
def about(settings: CliSettings) -> None:
    """Show engine version and bundled libraries."""

    async def action(gateway: CommandGateway) -> bool:
        panel = AboutPanel(gateway)
        if not await panel.load_app_info() or panel.app_info is None:
            return _fail("Failed to load app info")
        info = panel.app_info
        click.echo(f"{info.name} {info.version}")
        for label, value in (
            ("Identifier", info.identifier),
            ("Engine", info.engine_version),
            ("License", info.license),
            ("Source", info.github_url),
        ):
            if value:
                click.echo(f"  {label}: {value}")
        if await panel.load_dependencies() and panel.dependencies:
            click.echo("Dependencies:")
            for dep in panel.dependencies:
                click.echo(f"  {dep.name:<12} {dep.version:<10} {dep.category}")
        return True

    _run(settings, action)


@main.command("check-update")
@click.pass_obj
def check_update(settings: CliSettings) -> None:
    """Check whether a newer release is available."""

    async def action(gateway: CommandGateway) -> bool:
        result = await AboutPanel(gateway).check_update()
        if result.status is UpdateStatus.AVAILABLE:
            click.echo(f"Update available: {result.version}")
            return True
        if result.status is UpdateStatus.UP_TO_DATE:
            click.echo("You're up to date!")
            return True
        return _fail("Failed to check for updates, please try again later")

    _run(settings, action)
