"""CLI entry point for featuretrack.

Provides ``tree`` and ``report`` sub-commands using Click and Rich for
output formatting.  Progress messages go to standard output (or the
configured file); logs and diagnostics go to standard error.

Usage::

    featuretrack tree features/login.feature --format dot
    featuretrack tree src/test/resources --classpath-root src/test/resources
    featuretrack report events.ndjson features/*.feature --strict
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.tree import Tree

from featuretrack.config import ConfigError, load_settings
from featuretrack.document.models import FeatureDocument
from featuretrack.document.parser import ParseError, parse_feature_file
from featuretrack.document.registry import DocumentNotFoundError, DocumentRegistry
from featuretrack.hierarchy.graph import to_dot_string
from featuretrack.hierarchy.resolver import Descriptor, FeatureResolver
from featuretrack.reporting.events import EventDecodeError, UnclassifiedStepError, read_events
from featuretrack.reporting.reporter import TeamCityReporter

console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _expand(paths: tuple[str, ...]) -> list[Path]:
    """Expand directories into the ``.feature`` files below them."""
    files: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(sorted(path.rglob("*.feature")))
        else:
            files.append(path)
    return files


def _load_registry(
    paths: tuple[str, ...], classpath_root: str | None, freeze: bool = True
) -> DocumentRegistry:
    registry = DocumentRegistry()
    root = Path(classpath_root).resolve() if classpath_root else None
    for path in _expand(paths):
        uri = None
        if root is not None:
            resolved = path.resolve()
            if resolved.is_relative_to(root):
                uri = f"classpath:{resolved.relative_to(root).as_posix()}"
        document: FeatureDocument = parse_feature_file(path, uri=uri)
        registry.add(document)
    if freeze:
        registry.freeze()
    return registry


@click.group()
@click.version_option(package_name="featuretrack")
def main() -> None:
    """featuretrack: feature hierarchy resolution and TeamCity progress output."""


@main.command()
@click.argument("features", nargs=-1, required=True, type=click.Path(exists=True))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["tree", "dot"]),
    default="tree",
    help="Render as a tree or as a GraphViz DOT graph.",
)
@click.option(
    "--classpath-root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Register features below this directory as classpath resources.",
)
@click.option("--env-file", type=click.Path(), default=None, help="Settings .env file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def tree(
    features: tuple[str, ...],
    output_format: str,
    classpath_root: str | None,
    env_file: str | None,
    verbose: bool,
) -> None:
    """Resolve feature files and print their execution hierarchy."""
    _setup_logging(verbose)
    try:
        settings = load_settings(env_file)
        registry = _load_registry(features, classpath_root)
    except (ConfigError, ParseError) as exc:
        console.print(f"[red]Failed to load features:[/red] {exc}")
        raise SystemExit(1) from exc

    descriptors = FeatureResolver(engine_id=settings.engine_id).resolve_all(registry)

    if output_format == "dot":
        click.echo(to_dot_string(descriptors))
        return

    out = Console()
    for descriptor in descriptors:
        root = Tree(_node_label(descriptor))
        _add_children(root, descriptor)
        out.print(root)


def _node_label(descriptor: Descriptor) -> str:
    name = escape(descriptor.display_name or "(unnamed)")
    label = f"[bold]{name}[/bold] [dim]{escape(str(descriptor.key.last))}[/dim]"
    if descriptor.tags:
        label += " [cyan]" + escape(" ".join(sorted(descriptor.tags))) + "[/cyan]"
    return label


def _add_children(branch: Tree, descriptor: Descriptor) -> None:
    for child in descriptor.children:
        _add_children(branch.add(_node_label(child)), child)


@main.command()
@click.argument("events", type=click.File("r"))
@click.argument("features", nargs=-1, type=click.Path(exists=True))
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Treat pending and undefined results as failures.",
)
@click.option("--output", "-o", type=click.Path(), default=None, help="Write messages to a file.")
@click.option(
    "--classpath-root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Register features below this directory as classpath resources.",
)
@click.option("--env-file", type=click.Path(), default=None, help="Settings .env file.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def report(
    events,
    features: tuple[str, ...],
    strict: bool | None,
    output: str | None,
    classpath_root: str | None,
    env_file: str | None,
    verbose: bool,
) -> None:
    """Replay an NDJSON event stream as TeamCity service messages.

    Feature files given as arguments are read before any event; the stream
    may also carry its own source_read events.
    """
    _setup_logging(verbose)
    try:
        settings = load_settings(env_file)
        registry = _load_registry(features, classpath_root, freeze=False)
    except (ConfigError, ParseError) as exc:
        console.print(f"[red]Failed to load features:[/red] {exc}")
        raise SystemExit(1) from exc

    strict_mode = settings.strict if strict is None else strict
    target = output or settings.output

    sink = open(target, "w", encoding="utf-8") if target else None
    try:
        reporter = TeamCityReporter(registry=registry, sink=sink, strict=strict_mode)
        reporter.run(read_events(events))
    except (
        DocumentNotFoundError,
        EventDecodeError,
        ParseError,
        UnclassifiedStepError,
    ) as exc:
        console.print(f"[red]Reporting aborted:[/red] {exc}")
        raise SystemExit(1) from exc
    finally:
        if sink is not None:
            sink.close()


if __name__ == "__main__":
    main()
