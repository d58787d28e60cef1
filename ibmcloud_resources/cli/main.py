"""
Command-line interface for ibmcloud-resources.

This module provides commands to list the registered types, print their
schemas, read a resource or data source, and show the active settings.
"""

import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import click

from ..config.settings import MonitoringSettings, get_settings
from ..provider import Provider
from ..resources.base import Operation


class StructuredFormatter(logging.Formatter):
    """Formatter for structured JSON logging."""

    _RESERVED = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "stack_info",
        "exc_info",
        "exc_text",
        "message",
    }

    def format(self, record):
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add any extra fields from the record
        for key, value in record.__dict__.items():
            if key not in self._RESERVED and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(monitoring: MonitoringSettings, verbose: bool = False) -> None:
    """Install the console handler (and optional file handler) on the root logger."""
    if monitoring.log_format == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else monitoring.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if monitoring.log_file:
        file_handler = logging.FileHandler(monitoring.log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)


def parse_assignments(assignments: Tuple[str, ...]) -> Dict[str, Any]:
    """Parse ``key=value`` pairs; values are JSON when they parse as JSON."""
    attributes: Dict[str, Any] = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key:
            raise click.BadParameter(
                f"{assignment!r} is not of the form key=value", param_hint="--set"
            )
        try:
            attributes[key] = json.loads(raw)
        except json.JSONDecodeError:
            attributes[key] = raw
    return attributes


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose):
    """Manage IBM Cloud resources and read data sources."""
    ctx.ensure_object(dict)
    settings = get_settings()
    configure_logging(settings.monitoring, verbose)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command()
@click.pass_context
def types(ctx):
    """List registered resource and data source types."""
    provider = Provider(ctx.obj["settings"])

    click.echo("Resources:")
    for type_name in provider.resource_types():
        click.echo(f"  {type_name}")
    click.echo("Data sources:")
    for type_name in provider.data_source_types():
        click.echo(f"  {type_name}")


@cli.command()
@click.argument("type_name")
@click.pass_context
def schema(ctx, type_name):
    """Print the schema of a type as JSON."""
    provider = Provider(ctx.obj["settings"])
    if not provider.registry.is_registered(type_name):
        click.echo(f"Unknown type: {type_name}", err=True)
        sys.exit(2)

    async def _schema():
        return await provider.handler(type_name).get_schema()

    result = asyncio.run(_schema())
    click.echo(json.dumps(result.model_dump(mode="json"), indent=2))


@cli.command()
@click.argument("type_name")
@click.option("--id", "resource_id", default="", help="Identifier of the object to read")
@click.option(
    "--set",
    "assignments",
    multiple=True,
    help="Attribute as key=value (repeatable, values may be JSON)",
)
@click.option("--output", "-o", type=click.Path(), help="Save result to JSON file")
@click.pass_context
def read(ctx, type_name, resource_id, assignments, output: Optional[str]):
    """Read a resource or data source and print its state."""
    provider = Provider(ctx.obj["settings"])
    if not provider.registry.is_registered(type_name):
        click.echo(f"Unknown type: {type_name}", err=True)
        sys.exit(2)

    attributes = parse_assignments(assignments)

    async def _read():
        return await provider.apply(
            type_name, Operation.READ, attributes=attributes, resource_id=resource_id
        )

    result = asyncio.run(_read())
    rendered = json.dumps(result.model_dump(mode="json"), indent=2)

    if output:
        with open(output, "w") as f:
            f.write(rendered)
        click.echo(f"Result saved to {output}")
    else:
        click.echo(rendered)

    if not result.success:
        for diagnostic in result.diagnostics:
            click.echo(f"{diagnostic.summary}: {diagnostic.detail}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def config(ctx):
    """Show the active configuration with secrets masked."""
    click.echo(json.dumps(ctx.obj["settings"].get_safe_dict(), indent=2, default=str))


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
