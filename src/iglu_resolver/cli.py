# src/iglu_resolver/cli.py
"""
iglu-resolver Command Line Interface (CLI).

This module implements the terminal interface using `typer` and `rich`.

Features
--------
- **resolve**: look a schema up through the configured repositories and print it.
- **validate**: validate a self-describing JSON file against the schema it names.

Both commands read the resolver configuration from ``--config`` or, when
omitted, from ``IGLU_RESOLVER_CONFIG``; without either only the bundled
schemas are available.

Exit codes
----------
- ``0`` success
- ``1`` invalid input (malformed key or envelope, validation failure, schema mismatch)
- ``2`` schema not found in any repository
- ``3`` schema could not be resolved because of repository failures

Usage
-----
    $ iglu-resolver resolve iglu:com.acme/event/jsonschema/1-0-0 --config resolver.json
    $ iglu-resolver validate event.json --data-only --criterion "iglu:com.acme/event/jsonschema/1-*-*"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from iglu_resolver.core.errors import ClientError, ResolutionError
from iglu_resolver.core.result import Err
from iglu_resolver.core.schema_key import MalformedKey, SchemaCriterion, SchemaKey
from iglu_resolver.core.settings import load_settings
from iglu_resolver.resolver import Resolver, ResolverConfigError
from iglu_resolver.validation import validate as validate_instance
from iglu_resolver.validation import verify_schema_and_validate

# Ensure env vars (like IGLU_RESOLVER_CONFIG) are loaded before any logic runs
load_dotenv()

app = typer.Typer(
    help="iglu-resolver: resolve Iglu schemas and validate self-describing JSON.",
    rich_markup_mode="markdown",
)
console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Resolver configuration JSON (defaults to IGLU_RESOLVER_CONFIG).",
    ),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _build_resolver(config: Path | None) -> Resolver:
    """Helper: build the resolver from ``--config``, the environment, or nothing."""
    path = config or load_settings().resolver_config
    if path is None:
        return Resolver.bootstrap()
    try:
        return Resolver.from_file(path)
    except (OSError, json.JSONDecodeError, ResolverConfigError) as e:
        console.print(f"[bold red]Invalid resolver configuration {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _print_json(document: Any, title: str) -> None:
    rendered = json.dumps(document, indent=2, ensure_ascii=False)
    console.print(Panel(Syntax(rendered, "json"), title=title, border_style="green"))


def _fail(error: ClientError) -> typer.Exit:
    """Helper: report a client error and pick the exit code."""
    console.print(f"[bold red]{type(error).__name__}:[/bold red] {error.message}")
    if isinstance(error, ResolutionError):
        for repo, history in error.value.items():
            reasons = ", ".join(sorted(e.message for e in history.errors))
            console.print(f"  [dim]{repo}: {reasons} ({history.attempts} attempt(s))[/dim]")
        return typer.Exit(code=2 if error.is_not_found else 3)
    return typer.Exit(code=1)


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def resolve(
    schema_uri: Annotated[
        str, typer.Argument(help="Iglu URI, e.g. iglu:com.acme/event/jsonschema/1-0-0.")
    ],
    config: ConfigOption = None,
) -> None:
    """Resolve a schema through the configured repositories and print it."""
    try:
        key = SchemaKey.parse(schema_uri)
    except MalformedKey as e:
        console.print(f"[bold red]Malformed schema key:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    resolver = _build_resolver(config)
    result = resolver.resolve_schema(key)
    if isinstance(result, Err):
        raise _fail(result.error)
    _print_json(result.unwrap(), title=key.to_uri())


@app.command()  # type: ignore[misc]
def validate(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to a self-describing JSON document.",
        ),
    ],
    data_only: Annotated[
        bool,
        typer.Option("--data-only", "-d", help="Print only the validated payload."),
    ] = False,
    criterion: Annotated[
        str | None,
        typer.Option(
            "--criterion",
            help="Require the instance's schema to match, e.g. iglu:com.acme/event/jsonschema/1-*-*.",
        ),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Validate a self-describing JSON document against the schema it names."""
    try:
        with file.open("r", encoding="utf-8") as f:
            instance = json.load(f)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]{file} is not valid JSON:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    expected: SchemaCriterion | None = None
    if criterion is not None:
        try:
            expected = SchemaCriterion.parse(criterion)
        except MalformedKey as e:
            console.print(f"[bold red]Malformed criterion:[/bold red] {e}")
            raise typer.Exit(code=1) from e

    resolver = _build_resolver(config)
    if expected is None:
        result = validate_instance(instance, resolver, data_only=data_only)
    else:
        result = verify_schema_and_validate(instance, expected, resolver, data_only=data_only)

    if isinstance(result, Err):
        raise _fail(result.error)
    console.print("[bold green]Valid[/bold green]")
    _print_json(result.unwrap(), title=str(file.name))


if __name__ == "__main__":
    app()
