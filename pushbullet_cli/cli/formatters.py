"""CLI output formatting functions.

This module contains functions for printing devices, chats and pushes to
the command line.
"""

from datetime import datetime
from typing import Optional

import click

from pushbullet_cli.models import Item


def format_timestamp(timestamp: Optional[float]) -> str:
    """Render a Unix timestamp in local time, or '-' if unknown."""
    if timestamp is None:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def show_devices(devices: list[Item]) -> None:
    """Print a table of devices."""
    if not devices:
        click.echo("No active devices found.")
        return

    click.echo(f"{'Nickname':<30} {'Type':<12} {'Iden':<24}")
    click.echo("-" * 66)
    for device in devices:
        nickname = device.nickname or "(unnamed)"
        click.echo(f"{nickname:<30} {device.type:<12} {device.iden:<24}")
    click.echo()
    click.echo(f"Total: {len(devices)} device(s)")


def show_chats(chats: list[Item]) -> None:
    """Print a table of chats (contacts)."""
    if not chats:
        click.echo("No active chats found.")
        return

    click.echo(f"{'Name':<30} {'Email':<36}")
    click.echo("-" * 66)
    for chat in chats:
        click.echo(f"{chat.display_name:<30} {chat.email or '':<36}")
    click.echo()
    click.echo(f"Total: {len(chats)} chat(s)")


def show_push(push: Item, verbose: bool = False) -> None:
    """
    Print a single push.

    Args:
        push: Push to print
        verbose: Also print the identifier and modification time
    """
    header = click.style(f"[{push.type}]", fg="cyan")
    title = push.title or push.file_name or ""
    click.echo(f"{header} {title}".rstrip())

    if push.body:
        for line in push.body.splitlines():
            click.echo(f"  {line}")
    if push.url:
        click.echo(f"  {click.style(push.url, fg='blue')}")
    if push.file_url:
        click.echo(f"  {click.style(push.file_url, fg='blue')}")

    if verbose:
        click.echo(
            f"  iden: {push.iden}  created: {format_timestamp(push.created)}  "
            f"modified: {format_timestamp(push.modified)}"
        )


def show_pushes(pushes: list[Item], verbose: bool = False) -> None:
    """Print pushes in the order given, separated by blank lines."""
    if not pushes:
        click.echo("No pushes found.")
        return

    for index, push in enumerate(pushes):
        if index:
            click.echo()
        show_push(push, verbose=verbose)
