"""
Cyber Toolkit — CLI entrypoint.

Usage:
    cyber-toolkit --help
    cyber-toolkit add blue-teamer red-teamer
    cyber-toolkit remove blue-teamer
    cyber-toolkit update red-teamer
    cyber-toolkit current
    cyber-toolkit list-all
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from cyber_toolkit import __version__
from cyber_toolkit.core.observability.logging_config import resolve_level, setup_from_env

if TYPE_CHECKING:
    from cyber_toolkit.core.models.result import OperationResult


def _validate_roles(
    ctx: click.Context, param: click.Parameter, value: tuple[str, ...]
) -> tuple[str, ...]:
    """Reject blank role names, embedded whitespace, and "." / ".."."""
    roles = []
    for raw in value:
        role = raw.strip()
        if not role:
            raise click.BadParameter("role names must not be empty")
        if any(ch.isspace() for ch in role):
            raise click.BadParameter(f"role name must not contain whitespace: {raw!r}")
        if role in (".", ".."):
            raise click.BadParameter(f"not a valid role name: {role!r}")
        roles.append(role)
    return tuple(roles)


def _reconcile_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by add/remove/update."""
    decorators = [
        click.argument("roles", nargs=-1, required=True, callback=_validate_roles),
        click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON."),
        click.option("--dry-run", is_flag=True, help="Plan but don't run the package manager or save roles."),
        click.option("--mock", is_flag=True, help="Use the recording adapter instead of the package manager (roles are still saved)."),
    ]
    for decorator in reversed(decorators):
        fn = decorator(fn)
    return fn


@click.group()
@click.version_option(version=__version__, prog_name="cyber-toolkit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to config.yml (default: $CTK_CONFIG or ~/.config/cyber-toolkit/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Cyber Toolkit — manage roles and the tools they install."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_env(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


# ── Reconcile commands ──────────────────────────────────────────


@cli.command()
@_reconcile_options
@click.pass_context
def add(ctx: click.Context, roles: tuple[str, ...], as_json: bool, dry_run: bool, mock: bool) -> None:
    """Add roles and install/upgrade every configured role's tools."""
    _run(ctx, "add", roles, as_json=as_json, dry_run=dry_run, mock=mock)


@cli.command()
@_reconcile_options
@click.pass_context
def remove(ctx: click.Context, roles: tuple[str, ...], as_json: bool, dry_run: bool, mock: bool) -> None:
    """Remove roles and uninstall tools no remaining role needs."""
    _run(ctx, "remove", roles, as_json=as_json, dry_run=dry_run, mock=mock)


@cli.command()
@_reconcile_options
@click.pass_context
def update(ctx: click.Context, roles: tuple[str, ...], as_json: bool, dry_run: bool, mock: bool) -> None:
    """Set the configured roles to exactly ROLES (install first, then remove)."""
    _run(ctx, "update", roles, as_json=as_json, dry_run=dry_run, mock=mock)


def _run(
    ctx: click.Context,
    operation: str,
    roles: tuple[str, ...],
    *,
    as_json: bool,
    dry_run: bool,
    mock: bool,
) -> None:
    from cyber_toolkit.core.use_cases.reconcile import run_reconcile

    result = run_reconcile(
        operation,  # type: ignore[arg-type]
        list(roles),
        config_path=ctx.obj.get("config_path"),
        dry_run=dry_run,
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None
    plan = report.plan
    quiet = ctx.obj.get("quiet", False)

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    if not quiet:
        click.secho(f"\n⚙️  {mode_label}{operation} {' '.join(roles)}", fg="cyan", bold=True)
        click.echo(f"   Roles: {_fmt_roles(plan.previous_roles)} → {_fmt_roles(plan.resulting_roles)}")
        if plan.removed_roles:
            click.echo(f"   Removing: {', '.join(plan.removed_roles)}")
        elif operation == "remove":
            click.secho("   None of these roles are configured.", fg="yellow")

    if report.load_error:
        click.secho(f"   ⚠️  Could not read role file: {report.load_error}", fg="yellow")

    for role, reason in plan.skipped_roles.items():
        click.secho(f"   ⚠️  Skipped role {role}: {reason}", fg="yellow")

    if plan.uninstall_withheld:
        click.secho(
            "   ⚠️  Uninstall withheld: not every remaining role could be resolved",
            fg="yellow",
        )

    if dry_run:
        _echo_tools("Would install", plan.tools_to_install)
        _echo_tools("Would uninstall", plan.tools_to_uninstall)
        click.echo()
        return

    if report.install is not None:
        _echo_batch(report.install, ctx.obj.get("verbose", False))
    if report.uninstall is not None:
        _echo_batch(report.uninstall, ctx.obj.get("verbose", False))

    click.echo()
    if report.persist_error:
        click.secho(f"❌ Could not save roles: {report.persist_error}", fg="red", bold=True)
    elif report.persisted_roles is not None and not quiet:
        click.secho(f"💾 Saved roles to {result.role_file}: {_fmt_roles(report.persisted_roles)}", fg="cyan")
    elif report.load_error and not quiet:
        click.secho(f"   {result.role_file} left unchanged.", fg="yellow")

    if report.exit_code:
        click.echo()
        sys.exit(report.exit_code)
    click.echo()


def _fmt_roles(roles: list[str]) -> str:
    return ", ".join(roles) if roles else "(none)"


def _echo_tools(label: str, tools: list[str]) -> None:
    if tools:
        click.echo(f"   {label} ({len(tools)}): {', '.join(tools)}")
    else:
        click.echo(f"   {label}: nothing")


def _echo_batch(result: OperationResult, verbose: bool) -> None:
    """Per-tool failures, then a succeeded/failed summary."""
    click.echo()
    if result.total == 0:
        click.echo(f"   No tools to {result.verb}")

    if result.launch_error:
        click.secho(f"   ❌ {result.launch_error}", fg="red")

    if result.mode == "individual":
        click.secho(f"   ⚠️  Bulk {result.verb} failed; retried each tool", fg="yellow")

    if verbose:
        for tool in result.succeeded:
            click.secho(f"   ✓ {tool}", fg="green")
    for tool in result.failed:
        click.secho(f"   ✗ {tool}", fg="red")

    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(result.status, "white")
    click.secho(
        f"   {result.verb.capitalize()}: {len(result.succeeded)} succeeded, "
        f"{len(result.failed)} failed",
        fg=status_color,
        bold=True,
    )


# ── Read-only commands ──────────────────────────────────────────


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def current(ctx: click.Context, as_json: bool) -> None:
    """Show the currently configured roles."""
    from cyber_toolkit.core.use_cases.reconcile import get_current

    result = get_current(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not result.roles:
        click.secho("No roles configured.", fg="yellow")
        return

    click.secho(f"📋 Current roles ({len(result.roles)}):", fg="cyan", bold=True)
    for role in result.roles:
        click.echo(f"   • {role}")


@cli.command("list-all")
@click.option("--names-only", is_flag=True, help="List role names without fetching their tools.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_all(ctx: click.Context, names_only: bool, as_json: bool) -> None:
    """List every role in the catalog and the tools it installs."""
    from cyber_toolkit.core.use_cases.catalog_listing import list_catalog

    listing = list_catalog(config_path=ctx.obj.get("config_path"), names_only=names_only)

    if as_json:
        click.echo(json.dumps(listing.to_dict(), indent=2))
        sys.exit(1 if listing.error else 0)

    if listing.error:
        click.secho(f"❌ {listing.error}", fg="red")
        sys.exit(1)

    if not listing.roles:
        click.secho("No roles are defined in the catalog.", fg="yellow")
        return

    for role in listing.roles:
        if names_only:
            click.echo(role)
            continue
        click.secho(f"{role}:", fg="cyan", bold=True)
        if role in listing.errors:
            click.secho(f"   ⚠️  {listing.errors[role]}", fg="yellow")
        elif not listing.tools.get(role):
            click.echo("   (no tools listed)")
        else:
            for tool in listing.tools[role]:
                click.echo(f"   {tool}")


if __name__ == "__main__":
    cli()
