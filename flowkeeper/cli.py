"""
flowkeeper CLI

Command line tool for validating workflow graphs and inspecting autosave
snapshots
"""

import json
import sys
from datetime import datetime, timezone

import click

from . import __version__
from .autosave import (
    AutoSavePersistence,
    AutoSaveState,
    FileSink,
    ManualScheduler,
    SnapshotStore,
)
from .config import load_config, validate_config
from .core.document import load_graph
from .exceptions.errors import ConfigError, DocumentError
from .utils.logging import configure_logging, get_logger
from .validation import validate_single_field, validate_workflow

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True),
    help="Configuration file (YAML or JSON)"
)
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx, config_path, log_level):
    """flowkeeper - workflow graph validation and autosave"""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message)

    if log_level:
        config.log_level = log_level
    issues = validate_config(config)
    if issues:
        raise click.ClickException("; ".join(issues))

    configure_logging(config.log_level, config.log_format, config.use_structlog)
    ctx.obj = config


def _load(document):
    try:
        return load_graph(document)
    except DocumentError as e:
        raise click.ClickException(e.message)


def _print_report(report) -> None:
    for error in report.graph_errors:
        suffix = f" [{error.node_id}]" if error.node_id else ""
        click.echo(f"  - {error.message}{suffix}", err=True)
    for node_id, record in report.node_errors.items():
        for field, message in record.slots().items():
            if message:
                click.echo(f"  - [{node_id}] {field}: {message}", err=True)


@cli.command()
@click.argument("document", type=click.Path(exists=True))
def validate(document):
    """Validate a workflow graph"""
    graph = _load(document)
    report = validate_workflow(graph.nodes, graph.edges)

    if not report.is_valid:
        click.echo("Validation failed:", err=True)
        _print_report(report)
        sys.exit(1)

    click.echo(f"Graph is valid: {document}")
    click.echo(f"Nodes: {len(graph.nodes)}")
    click.echo(f"Edges: {len(graph.edges)}")


@cli.command()
@click.argument("document", type=click.Path(exists=True))
def show(document):
    """Show the graph structure"""
    graph = _load(document)

    click.echo(f"Graph: {document}")
    click.echo()
    click.echo("Nodes:")
    for node in graph.nodes:
        click.echo(f"  - [{node.type}] {node.id}")
        name = getattr(node.data, "custom_name", None)
        if name:
            click.echo(f"      name: {name}")

    click.echo()
    click.echo("Edges:")
    for edge in graph.edges:
        click.echo(f"  - {edge.source} -- {edge.target}")


@cli.command()
@click.argument("field")
@click.argument("value")
@click.option("--node-type", default=None, help="Type of the node owning the field")
@click.option("--operator", default=None, help="Selected operator (for the value field)")
def field(field, value, node_type, operator):
    """Check a single field value"""
    error = validate_single_field(
        field, value, {"nodeType": node_type, "operator": operator}
    )
    if error:
        click.echo(error, err=True)
        sys.exit(1)
    click.echo("OK")


@cli.command()
@click.argument("document", type=click.Path(exists=True))
@click.argument("store", type=click.Path())
@click.option("--key", default=None, help="Storage key (defaults to the configured one)")
@click.pass_obj
def save(config, document, store, key):
    """Run one autosave cycle for a graph file"""
    graph = _load(document)
    report = validate_workflow(graph.nodes, graph.edges)

    settings = config.autosave
    scheduler = ManualScheduler()
    autosave = AutoSavePersistence(
        FileSink(store),
        key or settings.storage_key,
        scheduler=scheduler,
        debounce_ms=settings.debounce_ms,
        min_saving_ms=settings.min_saving_ms,
        saved_display_ms=settings.saved_display_ms,
        clock=lambda: datetime.now(timezone.utc),
    )
    autosave.subscribe(
        lambda previous, current: click.echo(f"{previous.value} -> {current.value}")
    )

    # the first report only seeds the machine
    autosave.update([], [])
    autosave.update(graph.nodes, graph.edges, report.graph_errors, report.node_errors)
    scheduler.advance(settings.debounce_ms + settings.min_saving_ms)
    autosave.close()

    if autosave.state == AutoSaveState.ERROR:
        if not report.is_valid:
            click.echo("Not saved, graph has errors:", err=True)
            _print_report(report)
        else:
            click.echo("Not saved, storage failed", err=True)
        sys.exit(1)

    click.echo(f"Saved at {autosave.last_saved.isoformat()} to {store}")


@cli.group()
def snapshot():
    """Inspect stored snapshots"""
    pass


@snapshot.command("show")
@click.argument("store", type=click.Path(exists=True))
@click.option("--key", default=None, help="Storage key (defaults to the configured one)")
@click.pass_obj
def snapshot_show(config, store, key):
    """Print the stored snapshot"""
    snapshot_store = SnapshotStore(
        FileSink(store), key or config.autosave.storage_key
    )
    stored = snapshot_store.load()
    if stored is None:
        click.echo("No snapshot stored", err=True)
        sys.exit(1)

    click.echo(f"Saved at: {stored.saved_at}")
    click.echo(f"Nodes: {len(stored.nodes)}")
    click.echo(f"Edges: {len(stored.edges)}")
    click.echo(json.dumps(stored.to_payload(), indent=2, ensure_ascii=False))


@snapshot.command("clear")
@click.argument("store", type=click.Path(exists=True))
@click.option("--key", default=None, help="Storage key (defaults to the configured one)")
@click.pass_obj
def snapshot_clear(config, store, key):
    """Delete the stored snapshot"""
    storage_key = key or config.autosave.storage_key
    SnapshotStore(FileSink(store), storage_key).clear()
    logger.info("snapshot cleared", store=store, key=storage_key)
    click.echo(f"Cleared '{storage_key}' in {store}")


def main():
    """CLI entry point"""
    cli()


if __name__ == "__main__":
    main()
