"""CLI commands for apiresource."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from apiresource.client import HttpApiClient
from apiresource.config import EngineConfig, load_config
from apiresource.engine import ResourceEngine
from apiresource.errors import ResourceEngineError
from apiresource.schema import ResourceDescriptor, load_descriptor
from apiresource.state import DeclarativeState

console = Console()


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def render_state(descriptor: ResourceDescriptor, state: DeclarativeState) -> Table:
    """Render a state as a table, masking sensitive properties."""
    table = Table(title=f"{descriptor.name} ({state.id})")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    values = state.to_dict()
    for prop in descriptor.schema_definition.properties:
        name = prop.canonical_name
        if name not in values:
            continue
        value: Any = values[name]
        if prop.sensitive:
            rendered = "***"
        elif isinstance(value, (dict, list)):
            rendered = json.dumps(value, sort_keys=True)
        else:
            rendered = str(value)
        table.add_row(name, escape(rendered))
    return table


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """apiresource - Drive remote API resources from their descriptors."""
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
    except ResourceEngineError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)
    if verbose:
        config_obj.verbose = True

    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = verbose

    setup_logging(config_obj.verbose)


@cli.command()
@click.argument("descriptor_path", type=click.Path(exists=True))
@click.argument("import_id")
@click.option("--json", "as_json", is_flag=True, help="Print the state as JSON")
@click.pass_context
def show(ctx: click.Context, descriptor_path: str, import_id: str, as_json: bool) -> None:
    """Import a resource by IMPORT_ID ({parent_id}/.../{id}) and print its state."""
    config: EngineConfig = ctx.obj["config"]
    try:
        descriptor = load_descriptor(descriptor_path)
        engine = ResourceEngine(descriptor, config)
        with HttpApiClient(config) as client:
            state = engine.import_resource(import_id, client)
    except ResourceEngineError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"id": state.id, **state.to_dict()}, indent=2, sort_keys=True))
    else:
        console.print(render_state(descriptor, state))


@cli.command()
@click.argument("descriptor_path", type=click.Path(exists=True))
@click.argument("import_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx: click.Context, descriptor_path: str, import_id: str, yes: bool) -> None:
    """Delete the resource identified by IMPORT_ID ({parent_id}/.../{id})."""
    config: EngineConfig = ctx.obj["config"]
    if not yes:
        click.confirm(f"Delete resource '{import_id}'?", abort=True)
    try:
        descriptor = load_descriptor(descriptor_path)
        engine = ResourceEngine(descriptor, config)
        with HttpApiClient(config) as client:
            state = engine.import_resource(import_id, client)
            engine.delete(state, client)
    except ResourceEngineError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]Deleted[/green] {descriptor.name} '{import_id}'")


def main() -> None:
    cli()
