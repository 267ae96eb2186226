"""
CLI commands for the shell start-up file.

Thin wrappers over ``termsetup.core.services.zshrc``.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import click

from termsetup.ui.cli.helpers import banner, fail, resolve_settings


@click.group()
def zshrc() -> None:
    """~/.zshrc — patch plugins and marker blocks, inspect the plugins line."""


@zshrc.command()
@click.option("--file", "file_path", type=click.Path(dir_okay=False), default=None,
              help="Start-up file to patch (default: ~/.zshrc).")
@click.option("--no-prompt", is_flag=True, help="Skip the Starship init block.")
@click.option("--dry-run", is_flag=True, help="Print the result instead of writing it.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def patch(
    ctx: click.Context,
    file_path: str | None,
    no_prompt: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Ensure ZSH, the plugins array and the marker blocks are present."""
    from termsetup.core.services.zshrc import PatchError, patch_file

    settings = resolve_settings(ctx)
    path = Path(file_path) if file_path else settings.zshrc
    include_prompt = not no_prompt and shutil.which("starship") is not None

    try:
        result = patch_file(path, settings, include_prompt=include_prompt, dry_run=dry_run)
    except PatchError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
            ctx.exit(1)
        fail(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if not result.changed:
        click.secho(f"✅ {path} already up to date", fg="green")
        return

    verb = "Would apply" if dry_run else "Applied"
    banner(f"{verb} to {path}: {', '.join(result.changes)}")
    if result.added_plugins:
        click.echo(f"    plugins added: {' '.join(result.added_plugins)}")
    for name in result.skipped_blocks:
        click.secho(f"    skipped {name} block (command not found)", fg="yellow")
    if dry_run:
        click.echo()
        click.echo(result.text)


@zshrc.command()
@click.option("--file", "file_path", type=click.Path(dir_okay=False), default=None,
              help="Start-up file to read (default: ~/.zshrc).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, file_path: str | None, as_json: bool) -> None:
    """Show the plugins declaration and which required plugins are missing."""
    from termsetup.core.persistence.atomic import read_text_exact
    from termsetup.core.services.zshrc import inspect_document

    settings = resolve_settings(ctx)
    path = Path(file_path) if file_path else settings.zshrc
    if not path.is_file():
        fail(f"{path} does not exist")

    try:
        text = read_text_exact(path)
    except (OSError, UnicodeDecodeError) as e:
        fail(f"Cannot read {path}: {e}")
    info = inspect_document(text, settings)

    if as_json:
        click.echo(json.dumps(info, indent=2))
        return

    if info["error"]:
        fail(info["error"])

    if info["plugins"] is None:
        click.secho("No plugins=(...) declaration", fg="yellow")
    else:
        click.echo(f"line {info['line']}: plugins=({' '.join(info['plugins'])})")
    if info["missing_plugins"]:
        click.secho(f"missing: {' '.join(info['missing_plugins'])}", fg="yellow")
