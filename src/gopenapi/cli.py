"""CLI entry point for gopenapi."""

import sys
from pathlib import Path

import click

from gopenapi.errors import GopenapiError
from gopenapi.generate.sink import SINKS, resolve_sink
from gopenapi.generate.spec import generate
from gopenapi.log import configure_logging

STDOUT = "-"


def normalize_input_path(path: Path) -> Path:
    """Resolve a relative source path against the working directory."""
    return path if path.is_absolute() else Path.cwd() / path


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every file and directive on stderr.")
def main(verbose: bool):
    """gopenapi: an OpenAPI utility for Go."""
    configure_logging(verbose)


@main.group(name="generate")
def generate_group():
    """The generator utility."""
    pass


@generate_group.command()
@click.argument("path", required=False, default=".", type=click.Path(path_type=Path))
@click.option("-f", "--format", "fmt", default="json", type=click.Choice(sorted(SINKS)), help="The format of the output.")
@click.option("-o", "--output", default=STDOUT, help="Where the output goes: '-' (stdout) or a file path.")
def spec(path: Path, fmt: str, output: str):
    """Generate an OpenAPI specification from Go source code."""
    root = normalize_input_path(path)
    sink = resolve_sink(fmt, sys.stdout if output == STDOUT else Path(output))
    try:
        generate(root, sink)
    except GopenapiError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"cannot write {output}: {e}") from e
    if output != STDOUT:
        click.echo(f"Specification saved to {output}", err=True)
