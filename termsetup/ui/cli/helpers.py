"""
Shared CLI helpers — settings resolution and banner output.
"""

from __future__ import annotations

import sys
from collections.abc import Callable

import click

from termsetup.core.config.loader import ConfigError, load_settings
from termsetup.core.models.settings import Settings


def resolve_settings(ctx: click.Context) -> Settings:
    """Load Settings once per invocation; exit 1 on a config error."""
    settings = ctx.obj.get("settings")
    if settings is not None:
        return settings
    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        fail(str(e))
    ctx.obj["settings"] = settings
    return settings


def banner(message: str, color: str = "green") -> None:
    click.secho("\n==>", fg=color, bold=True, nl=False)
    click.echo(f" {message}")


def fail(message: str) -> None:
    click.secho(f"\n❌ {message}", fg="red", bold=True, err=True)
    sys.exit(1)


def make_notifier(quiet: bool = False) -> Callable[[str, str], None]:
    """``(level, message)`` printer for service callbacks."""

    def notify(level: str, message: str) -> None:
        if level == "stage":
            banner(message)
        elif level == "warn":
            banner(message, color="yellow")
        elif not quiet:
            click.echo(f"    {message}")

    return notify
