"""Bakelint CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from bakelint import __version__


@click.group()
@click.version_option(version=__version__, prog_name="bakelint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (debug logging).")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Bakelint - convention rule engine for TypeScript projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    elif quiet:
        logging.basicConfig(level=logging.ERROR, format="%(levelname)s %(name)s: %(message)s")


_project_option = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to bakelint.yml (default: <project>/bakelint.yml).",
)


@main.command()
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 if violations found.",
)
@_config_option
@_project_option
def lint(
    *,
    fmt: str | None,
    strict: bool,
    config_path: Path | None,
    project: Path | None,
) -> None:
    """Check every function, controller and database file against the conventions.

    Exit codes: 0 = clean or violations without --strict,
    1 = violations with --strict, 2 = configuration error.
    """
    from bakelint.linter import LintError
    from bakelint.linter import format_json as _format_json
    from bakelint.linter import format_porcelain as _format_porcelain
    from bakelint.linter import format_rich as _format_rich
    from bakelint.linter import lint as run_lint

    project_root = project or Path.cwd()

    # Resolve output format: explicit flag > TTY detection.
    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = run_lint(project_root, config_path=config_path)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    formatters = {
        "rich": _format_rich,
        "json": _format_json,
        "porcelain": _format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if strict and result.diagnostics:
        sys.exit(1)


@main.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--paths-only",
    is_flag=True,
    default=False,
    help="Only run path rules (file name, nesting); content is not read.",
)
@click.option("--rule", "rule_names", multiple=True, help="Run only these rules (repeatable).")
@_config_option
@_project_option
def check(
    *,
    files: tuple[Path, ...],
    paths_only: bool,
    rule_names: tuple[str, ...],
    config_path: Path | None,
    project: Path | None,
) -> None:
    """Check individual files; one line per violation.

    Exit codes: 0 = clean, 1 = violations, 2 = configuration error,
    unknown rule or an unreadable file.
    """
    from bakelint.config import load_project_conventions
    from bakelint.rules import ProjectResources, RuleContext, dispatch, get_rule

    project_root = (project or Path.cwd()).resolve()
    try:
        conventions = load_project_conventions(project_root, config_path)
        for name in rule_names:
            get_rule(name)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    resources = ProjectResources(project_root, conventions)
    found = 0
    unreadable = 0
    for path in files:
        resolved = path.resolve()
        try:
            content = "" if paths_only else resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            click.echo(f"Error: cannot read {path}: {exc}", err=True)
            unreadable += 1
            continue
        context = RuleContext.create(
            project_root, resolved, content, conventions=conventions, resources=resources
        )
        diagnostics = dispatch(context, names=rule_names or None, path_only=paths_only)
        for d in diagnostics:
            click.echo(f"{d.file_path}: [{d.rule}] {d.error}")
        found += len(diagnostics)

    if found:
        sys.exit(1)
    if unreadable:
        sys.exit(2)


@main.command("rules")
@click.option("--area", default=None, help="Only list rules of this area.")
def list_rules(*, area: str | None) -> None:
    """List registered rules with their area and description."""
    from rich.console import Console
    from rich.table import Table

    from bakelint.rules import all_rules

    table = Table(title="Rules", box=None, padding=(0, 1))
    table.add_column("rule", style="cyan", no_wrap=True)
    table.add_column("area", no_wrap=True)
    table.add_column("files", no_wrap=True)
    table.add_column("phase", no_wrap=True)
    table.add_column("description")
    for spec in all_rules():
        if area is not None and spec.area != area:
            continue
        phase = "path" if not spec.needs_content else "content"
        table.add_row(spec.name, spec.area, spec.targets, phase, spec.description)

    Console().print(table)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="JSON output.")
@_config_option
@_project_option
def databases(*, as_json: bool, config_path: Path | None, project: Path | None) -> None:
    """Print discovered database variables and their testing factories."""
    from bakelint.config import load_project_conventions
    from bakelint.resolvers import find_database_variables

    project_root = (project or Path.cwd()).resolve()
    try:
        conventions = load_project_conventions(project_root, config_path)
        catalog = find_database_variables(project_root, conventions)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    if as_json:
        data = [
            {
                "name": variable.name,
                "testing_factory": variable.testing_factory,
                "module_path": variable.module_path,
            }
            for variable in catalog
        ]
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not len(catalog):
        click.echo("No database variables found.")
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title="Database variables", box=None, padding=(0, 1))
    table.add_column("variable", style="cyan", no_wrap=True)
    table.add_column("testing factory", no_wrap=True)
    table.add_column("module")
    for variable in catalog:
        table.add_row(variable.name, variable.testing_factory, variable.module_path)

    Console().print(table)
