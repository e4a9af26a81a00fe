"""
Module Registry — CLI entrypoint.

Usage:
    modreg --help
    modreg validate
    modreg resolve payments@^2.0
    modreg index --check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from modreg import __version__
from modreg.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="modreg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to modreg.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Module Registry — validate, resolve and index registry modules."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def _print_issues(issues, limit: int | None = None) -> None:
    shown = issues if limit is None else issues[:limit]
    for issue in shown:
        color = "red" if issue.is_error else "yellow"
        click.secho(f"   • {issue}", fg=color)
    if limit is not None and len(issues) > limit:
        click.echo(f"   … and {len(issues) - limit} more")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--strict", is_flag=True, help="Treat warnings as errors.")
@click.pass_context
def validate(ctx: click.Context, as_json: bool, strict: bool) -> None:
    """Validate every module, component and application document."""
    from modreg.core.use_cases.validate import run_validate

    result = run_validate(config_path=ctx.obj.get("config_path"), strict=strict or None)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    report = result.report
    assert report is not None  # guaranteed after error check above

    if result.valid:
        click.secho("✅ Registry is valid", fg="green", bold=True)
    else:
        click.secho(f"❌ {len(report.errors)} error(s):", fg="red", bold=True)
        _print_issues(report.errors)

    if not ctx.obj.get("quiet"):
        click.echo(f"   Documents checked: {report.documents_checked}")

    if report.warnings:
        click.echo()
        click.secho(f"⚠️  {len(report.warnings)} warning(s):", fg="yellow")
        _print_issues(report.warnings)

    click.echo()
    if not result.valid:
        sys.exit(1)


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool) -> None:
    """List modules and their versions."""
    from modreg.core.use_cases.listing import list_modules

    result = list_modules(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not result.modules:
        click.secho("No modules found.", fg="yellow")
        return

    status_color = {"active": "green", "deprecated": "yellow", "retired": "red"}

    click.secho(f"\n📦 Modules: {len(result.modules)}", fg="cyan", bold=True)
    for mod in result.modules:
        latest = mod.latest or "—"
        click.secho(f"   {mod.name}", bold=True, nl=False)
        click.echo(f"  latest {latest}")
        if mod.description and not ctx.obj.get("quiet"):
            click.echo(f"     {mod.description}")
        for version in mod.versions:
            status = mod.statuses.get(version, "")
            click.echo(f"     • {version} ", nl=False)
            click.secho(status, fg=status_color.get(status, "white"))

    click.echo()
    click.echo(f"   Components: {result.component_count}")
    click.echo(f"   Applications: {result.application_count}")
    click.echo()


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--components", is_flag=True, help="Component-level graph.")
@click.option("--module", "module", default=None, help="Only this module and its dependencies.")
@click.pass_context
def graph(ctx: click.Context, as_json: bool, components: bool, module: str | None) -> None:
    """Show the dependency graph of the latest module versions."""
    from modreg.core.use_cases.graph import build_graph

    result = build_graph(
        config_path=ctx.obj.get("config_path"),
        components=components,
        module=module,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.error else 0)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    g = result.graph
    assert g is not None  # guaranteed after error check above

    title = "Component graph" if components else "Module graph"
    click.secho(f"\n🔗 {title}: {len(g)} nodes, {len(g.edges)} edges", fg="cyan", bold=True)

    for node in g.nodes:
        attrs = g.node(node)
        label = f"@{attrs['version']}" if attrs.get("version") else ""
        if attrs.get("missing"):
            click.secho(f"   {node} (missing)", fg="red")
        else:
            click.secho(f"   {node}{label}", bold=True)
        for edge in g.edges:
            if edge.source != node:
                continue
            color = "red" if edge.dangling else None
            if edge.version_range is None:
                click.secho(f"     → {edge.target}", fg=color)
                for contract, version_range in sorted(edge.ranges.items()):
                    click.secho(f"         {contract or '-'} {version_range}", fg=color)
                continue
            contracts = f" [{', '.join(sorted(edge.contracts))}]" if edge.contracts else ""
            click.secho(f"     → {edge.target} {edge.version_range}{contracts}", fg=color)

    cycles = g.cycles()
    click.echo()
    if cycles:
        click.secho("⚠️  Cycles:", fg="yellow")
        for cycle in cycles:
            click.echo(f"   • {' → '.join(cycle + cycle[:1])}")
    else:
        click.echo(f"   Order: {', '.join(g.topological_order())}")
    click.echo()


@cli.command()
@click.argument("requirements", nargs=-1)
@click.option("--app", "application", default=None, help="Application file or name.")
@click.option("--env", "environment", default=None, help="Application environment.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def resolve(
    ctx: click.Context,
    requirements: tuple[str, ...],
    application: str | None,
    environment: str | None,
    as_json: bool,
) -> None:
    """Resolve module versions for REQUIREMENTS (name@range) or an application."""
    from modreg.core.use_cases.resolve import run_resolve

    result = run_resolve(
        config_path=ctx.obj.get("config_path"),
        requirements=list(requirements),
        application=application,
        environment=environment,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    resolution = result.resolution
    assert resolution is not None  # guaranteed after error check above

    context = ""
    if result.application:
        context = f" for {result.application}"
        if result.environment:
            context += f" ({result.environment})"

    if resolution.conflicts:
        click.secho(f"❌ Resolution failed{context}:", fg="red", bold=True)
        for conflict in resolution.conflicts:
            click.echo(f"   • {conflict}")
            if ctx.obj.get("verbose") or ctx.obj.get("debug"):
                for constraint in conflict.constraints:
                    click.echo(f"       {constraint}")
        click.echo()
        sys.exit(1)

    click.secho(f"✅ Resolved{context}", fg="green", bold=True)
    for name in resolution.order:
        click.secho(f"   {name}@{resolution.selected[name]}", bold=True)
        if not ctx.obj.get("quiet"):
            for comp, version in sorted(resolution.components.get(name, {}).items()):
                click.echo(f"     • {comp}@{version}")

    if result.issues:
        click.echo()
        click.secho("Configuration:", fg="yellow")
        _print_issues(result.issues)

    click.echo()
    if not result.ok:
        sys.exit(1)


@cli.command()
@click.option("--output", "-o", type=click.Path(), default=None, help="Index file to write.")
@click.option("--check", is_flag=True, help="Fail if the index on disk is out of date.")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the index instead of writing it.")
@click.option("--allow-invalid", is_flag=True, help="Skip invalid documents instead of failing.")
@click.option("--no-timestamp", is_flag=True, help="Omit generatedAt.")
@click.pass_context
def index(
    ctx: click.Context,
    output: str | None,
    check: bool,
    to_stdout: bool,
    allow_invalid: bool,
    no_timestamp: bool,
) -> None:
    """Regenerate the registry index (registry.yaml)."""
    from modreg.core.use_cases.index import generate_index

    result = generate_index(
        config_path=ctx.obj.get("config_path"),
        output=Path(output) if output else None,
        check=check,
        allow_invalid=allow_invalid,
        include_timestamp=False if no_timestamp else None,
        write=not to_stdout,
    )

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=to_stdout)
        if result.report is not None and result.report.errors:
            _print_issues(result.report.errors, limit=10)
        sys.exit(1)

    if to_stdout and not check:
        click.echo(result.render(), nl=False)
        return

    if result.excluded:
        click.secho(f"⚠️  Excluded {len(result.excluded)} invalid document(s):", fg="yellow")
        for source in result.excluded:
            click.echo(f"   • {source}")

    if check:
        if result.current:
            click.secho(f"✅ {result.path} is up to date", fg="green")
            return
        click.secho(f"❌ {result.path} is out of date; run 'modreg index'", fg="red")
        sys.exit(1)

    assert result.index is not None  # guaranteed after error check above
    summary = result.index.summary
    click.secho(f"✅ Wrote {result.path}", fg="green", bold=True)
    if not ctx.obj.get("quiet"):
        click.echo(f"   Modules: {summary.total_modules}")
        click.echo(f"   Module versions: {summary.total_module_versions}")
        click.echo(f"   Components: {summary.total_components}")
        click.echo(f"   Contracts: {summary.total_contracts}")
    click.echo()


if __name__ == "__main__":
    cli()
