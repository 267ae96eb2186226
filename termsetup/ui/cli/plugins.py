"""
CLI commands for plugin repositories.

Thin wrappers over ``termsetup.core.services.plugin_sync``.
"""

from __future__ import annotations

import json

import click

from termsetup.ui.cli.helpers import fail, resolve_settings


@click.group()
def plugins() -> None:
    """Plugins — clone or update the plugin repositories."""


@plugins.command()
@click.option("--dry-run", is_flag=True, help="Validate without running git.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def sync(ctx: click.Context, dry_run: bool, as_json: bool) -> None:
    """Clone missing plugins and fast-forward existing ones."""
    from termsetup.adapters.registry import build_registry
    from termsetup.core.services.plugin_sync import SyncError, sync_all

    settings = resolve_settings(ctx)
    registry = build_registry(dry_run=dry_run)

    try:
        outcomes = sync_all(registry, settings)
    except SyncError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e), "repo": e.repo}, indent=2))
            ctx.exit(1)
        fail(str(e))

    if as_json:
        click.echo(json.dumps([o.to_dict() for o in outcomes], indent=2))
        return

    for outcome in outcomes:
        click.secho(f"   ✓ {outcome.name} ", fg="green", nl=False)
        click.echo(f"{outcome.action}  → {outcome.path}")
        if ctx.obj.get("verbose") and outcome.output:
            for line in outcome.output.splitlines()[:5]:
                click.echo(f"     │ {line}")
