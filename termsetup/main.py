"""
termsetup — CLI entrypoint.

Usage:
    termsetup                 # same as: termsetup install
    termsetup install --yes
    termsetup zshrc patch --dry-run
    termsetup status
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from termsetup import __version__
from termsetup.core.observability.logging_config import resolve_level, setup_from_env
from termsetup.ui.cli.helpers import banner, fail, make_notifier, resolve_settings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="termsetup")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: $TERMSETUP_CONFIG or ~/.config/termsetup/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """termsetup — install zsh, Oh My Zsh, plugins and Starship, then wire up ~/.zshrc."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))

    if ctx.invoked_subcommand is None:
        ctx.invoke(install)


@cli.command()
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Change the login shell without asking.")
@click.option("--no-chsh", is_flag=True, help="Never offer to change the login shell.")
@click.option("--skip-packages", is_flag=True, help="Don't run the package manager.")
@click.option("--dry-run", is_flag=True, help="Validate and show edits, change nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    assume_yes: bool = False,
    no_chsh: bool = False,
    skip_packages: bool = False,
    dry_run: bool = False,
    as_json: bool = False,
) -> None:
    """Run the full setup (the default command)."""
    from termsetup.core.services.default_shell import always_yes
    from termsetup.core.use_cases.provision import run_provision

    settings = resolve_settings(ctx)
    quiet = ctx.obj.get("quiet", False)

    result = run_provision(
        settings,
        decide=always_yes if assume_yes else None,
        notify=None if as_json else make_notifier(quiet),
        skip_packages=skip_packages,
        skip_shell=no_chsh,
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    if result.error:
        fail(result.error)

    if dry_run and result.patch and result.patch.changed:
        banner(f"[dry-run] {settings.zshrc} would become:", color="cyan")
        click.echo(result.patch.text)

    if result.warnings and not quiet:
        click.echo()
        click.secho(f"⚠️  {len(result.warnings)} warning(s)", fg="yellow")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show what is already set up."""
    from termsetup.core.use_cases.status import get_status

    settings = resolve_settings(ctx)
    result = get_status(settings)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    def mark(ok: bool) -> str:
        return click.style("✓", fg="green") if ok else click.style("✗", fg="red")

    click.secho(f"\n🖥  Platform: {result.platform}", fg="cyan", bold=True)
    for cmd, path in result.commands.items():
        click.echo(f"   {mark(path is not None)} {cmd}  {path or '(not found)'}")

    click.echo(f"   {mark(result.framework)} Oh My Zsh  → {settings.zsh_dir}")

    click.secho("\n   Plugins:", fg="white", bold=True)
    for plugin in result.plugins:
        click.echo(f"     {mark(plugin['checkout'])} {plugin['name']}  → {plugin['path']}")

    click.secho(f"\n   {settings.zshrc}:", fg="white", bold=True)
    info = result.zshrc
    if not result.zshrc_exists:
        click.echo(f"     {mark(False)} missing")
    elif info.get("error"):
        click.secho(f"     ❌ {info['error']}", fg="red")
    else:
        click.echo(f"     {mark(info['root_variable'])} export ZSH=")
        declared = info.get("plugins")
        label = f"plugins=({' '.join(declared)})" if declared is not None else "plugins=(...) missing"
        click.echo(f"     {mark(not info['missing_plugins'])} {label}")
        for name, present in info["markers"].items():
            click.echo(f"     {mark(present)} {name} block")

    click.echo(f"\n   Login shell: {result.login_shell or '(unknown)'}")
    if result.complete:
        click.secho("\n✅ Everything is in place", fg="green", bold=True)
    click.echo()


# ── Register sub-command groups from termsetup/ui/cli/ ────────────

from termsetup.ui.cli.plugins import plugins  # noqa: E402
from termsetup.ui.cli.zshrc import zshrc  # noqa: E402

cli.add_command(plugins)
cli.add_command(zshrc)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
