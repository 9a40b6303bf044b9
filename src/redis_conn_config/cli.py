"""Typer CLI for redis-conn-config.

Commands:
  lint      Check a schema definition (the built-in Redis schema by default)
  describe  List every field with its default and visibility conditions
  active    Show which fields are active for a value set
  resolve   Resolve a value set into an effective configuration
  spec      Show the connection record handed to the connection factory
  explain   Explain a single field, or a whole resolution
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path  # noqa: TC003
from typing import Annotated, Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from whenever import Instant

from field_schema import (
    OptionGroup,
    ResolutionResult,
    Schema,
    SchemaDefinitionError,
    evaluate,
    resolve,
)
from field_schema.resolver import REDACTED
from redis_conn_config.compat import env_to_values, migrate_values, set_path
from redis_conn_config.connection import build_connection_spec
from redis_conn_config.explain import explain_field, explain_resolution
from redis_conn_config.registry import REDIS_SCHEMA
from redis_conn_config.settings import CLISettings, LogLevel

app = typer.Typer(
    name="redis-conn-config",
    help="Validate and resolve Redis connection settings",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _read_mapping(path: Path) -> dict[str, Any]:
    """Read a mapping from a JSON or YAML file."""
    if not path.exists():
        console.print(f"[red]File not found: {escape(str(path))}[/red]")
        raise typer.Exit(1)
    text = path.read_text()
    try:
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        console.print(f"[red]Error reading {escape(str(path))}: {escape(str(e))}[/red]")
        raise typer.Exit(1) from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        console.print(f"[red]{escape(str(path))} must contain a mapping[/red]")
        raise typer.Exit(1)
    return data


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_assignments(values: dict[str, Any], assignments: list[str]) -> dict[str, Any]:
    """Apply key=value strings; dotted keys address option-group fields."""
    for item in assignments:
        if "=" not in item:
            console.print(
                f"[red]Invalid assignment format: '{escape(item)}'. Use key=value[/red]"
            )
            raise typer.Exit(1)
        key, raw = item.split("=", 1)
        set_path(values, key.strip(), raw)
    return values


def _collect_values(
    values_file: Path | None,
    assignments: list[str] | None,
    *,
    include_env: bool,
    from_version: str | None = None,
) -> dict[str, Any]:
    """Layer env vars (optional), then the value file, then --set assignments."""
    values: dict[str, Any] = env_to_values(os.environ) if include_env else {}
    if values_file is not None:
        loaded = _read_mapping(values_file)
        if from_version:
            try:
                loaded = migrate_values(loaded, from_version)
            except ValueError as e:
                console.print(f"[red]Error: {escape(str(e))}[/red]")
                raise typer.Exit(1) from None
        values = _merge(values, loaded)
    return _apply_assignments(values, assignments or [])


def _exit_on_failure(result: ResolutionResult) -> None:
    if result.ok:
        return
    console.print(f"[red]Resolution failed ({len(result.errors)} error(s)):[/red]")
    for issue in result.errors:
        console.print(f"  [red]✗[/red] {escape(str(issue))}")
    raise typer.Exit(1)


@app.callback()
def main(
    log_level: Annotated[
        LogLevel | None,
        typer.Option("--log-level", case_sensitive=False, help="Root log level"),
    ] = None,
) -> None:
    """Redis connection configuration tooling."""
    logging.basicConfig(
        level=(log_level or CLISettings().log_level).value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def lint(
    schema_file: Annotated[
        Path | None,
        typer.Argument(help="JSON or YAML schema document (omit for the built-in schema)"),
    ] = None,
) -> None:
    """Check a schema definition for structural problems."""
    if schema_file is None:
        schema = REDIS_SCHEMA
    else:
        try:
            schema = Schema.model_validate(_read_mapping(schema_file))
        except SchemaDefinitionError as e:
            console.print(f"[red]Schema is broken ({len(e.problems)} problem(s)):[/red]")
            for problem in e.problems:
                console.print(f"  [red]✗[/red] {escape(problem)}")
            raise typer.Exit(1) from None
        except ValidationError as e:
            console.print(f"[red]Not a schema document: {escape(str(e))}[/red]")
            raise typer.Exit(1) from None

    console.print(
        f"[green]Schema {escape(schema.name)} {schema.version} OK[/green] "
        f"({len(schema.paths())} fields)"
    )


@app.command()
def describe(
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: text or json")
    ] = None,
) -> None:
    """List every field with its type, default and visibility conditions."""
    schema = REDIS_SCHEMA
    if (format or CLISettings().output_format) == "json":
        console.print_json(schema.model_dump_json())
        return

    table = Table(title=f"{schema.name} {schema.version}")
    table.add_column("Field", style="cyan")
    table.add_column("Type")
    table.add_column("Default", style="green")
    table.add_column("Required")
    table.add_column("Visible when")

    for path in schema.paths():
        descriptor = schema.get(path)
        if descriptor is None:
            continue
        if isinstance(descriptor, OptionGroup):
            default = "{…}"
        elif descriptor.default is None:
            default = "-"
        elif descriptor.secret and descriptor.default:
            default = REDACTED
        else:
            default = repr(descriptor.default)
        table.add_row(
            path,
            descriptor.type.value,
            escape(default),
            "yes" if descriptor.required else "",
            escape(" and ".join(c.describe() for c in descriptor.visible_when) or "always"),
        )
    console.print(table)


@app.command()
def active(
    values_file: Annotated[Path | None, typer.Argument(help="JSON or YAML value set")] = None,
    assign: Annotated[
        list[str] | None, typer.Option("--set", "-s", help="Field assignment (key=value)")
    ] = None,
) -> None:
    """Show which fields are active for a value set."""
    values = _collect_values(values_file, assign, include_env=CLISettings().include_env)
    active_paths = evaluate(REDIS_SCHEMA, values)
    for path in REDIS_SCHEMA.paths():
        marker = "[green]●[/green]" if path in active_paths else "[dim]○[/dim]"
        console.print(f"{marker} {path}")


@app.command("resolve")
def resolve_command(
    values_file: Annotated[Path | None, typer.Argument(help="JSON or YAML value set")] = None,
    assign: Annotated[
        list[str] | None, typer.Option("--set", "-s", help="Field assignment (key=value)")
    ] = None,
    from_version: Annotated[
        str | None,
        typer.Option("--from-version", help="Schema version the value file was written for"),
    ] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Reject undeclared keys")] = False,
    show_secrets: Annotated[
        bool, typer.Option("--show-secrets", help="Print secret values unmasked")
    ] = False,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the configuration as JSON")
    ] = None,
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: text or json")
    ] = None,
) -> None:
    """Resolve a value set into an effective configuration."""
    settings = CLISettings()
    values = _collect_values(
        values_file, assign, include_env=settings.include_env, from_version=from_version
    )
    result = resolve(REDIS_SCHEMA, values, strict=strict or settings.strict)
    _exit_on_failure(result)

    config = result.unwrap()
    rendered = config.as_dict() if show_secrets else config.redacted()

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "schema": config.schema_name,
            "version": str(config.schema_version),
            "resolved_at": str(Instant.now()),
            "values": rendered,
        }
        output.write_text(json.dumps(document, indent=2) + "\n")
        logger.info("Wrote resolved configuration to %s", output)
        console.print(f"[green]Configuration written to {escape(str(output))}[/green]")
        return

    if (format or settings.output_format) == "json":
        console.print_json(json.dumps(rendered))
        return

    table = Table(title=f"{config.schema_name} {config.schema_version}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source")
    for resolved in config.trace:
        value = resolved.value
        if resolved.secret and value and not show_secrets:
            value = REDACTED
        table.add_row(resolved.path, escape(repr(value)), resolved.source)
    console.print(table)


@app.command()
def spec(
    values_file: Annotated[Path | None, typer.Argument(help="JSON or YAML value set")] = None,
    assign: Annotated[
        list[str] | None, typer.Option("--set", "-s", help="Field assignment (key=value)")
    ] = None,
    show_secrets: Annotated[
        bool, typer.Option("--show-secrets", help="Print secret values unmasked")
    ] = False,
) -> None:
    """Show the connection record handed to the connection factory."""
    settings = CLISettings()
    values = _collect_values(values_file, assign, include_env=settings.include_env)
    result = resolve(REDIS_SCHEMA, values, strict=settings.strict)
    _exit_on_failure(result)

    connection = build_connection_spec(result.unwrap())
    if not show_secrets:
        masked: dict[str, Any] = {}
        if connection.password:
            masked["password"] = REDACTED
        if connection.tls is not None and connection.tls.key:
            masked["tls"] = connection.tls.model_copy(update={"key": REDACTED})
        connection = connection.model_copy(update=masked)
    console.print_json(connection.model_dump_json())


@app.command()
def explain(
    values_file: Annotated[Path | None, typer.Argument(help="JSON or YAML value set")] = None,
    field: Annotated[
        str | None, typer.Option("--field", "-k", help="Explain a single field path")
    ] = None,
    assign: Annotated[
        list[str] | None, typer.Option("--set", "-s", help="Field assignment (key=value)")
    ] = None,
    format: Annotated[
        str | None, typer.Option("--format", "-f", help="Output format: text or json")
    ] = None,
) -> None:
    """Explain a field, or a whole resolution when no --field is given."""
    settings = CLISettings()
    values = _collect_values(values_file, assign, include_env=settings.include_env)
    as_json = (format or settings.output_format) == "json"

    if field:
        try:
            explanation = explain_field(REDIS_SCHEMA, field, values)
        except ValueError as e:
            console.print(f"[red]Error: {escape(str(e))}[/red]")
            raise typer.Exit(1) from None
        if as_json:
            console.print_json(explanation.to_json())
        else:
            console.print(explanation.to_text(), markup=False)
        return

    report = explain_resolution(REDIS_SCHEMA, values, strict=settings.strict)
    if as_json:
        console.print_json(report.to_json())
    else:
        console.print(report.to_text(), markup=False)


if __name__ == "__main__":
    app()
