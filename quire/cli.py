"""Command-line interface for Quire.

This module defines the CLI commands using Click framework.
It provides commands for checking, listing and rendering content collections
from a project directory.

Commands:
- check: Load every collection and report item counts.
- list: Print the slugs of one collection.
- render: Render a single Markdown file to HTML.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import ConfigError, LoadOptions, load_config
from .content import ContentItemBuilder, ContentLoadError, ContentStore
from .filesystem import DirectoryFS


@click.group()
@click.version_option(version=__version__, prog_name="quire")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Quire content collections."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Content directory (overrides quire.yaml)",
)
def check(content_dir: Path | None):
    """Load every collection and report item counts."""
    config = _load_project_config()
    content_root = _content_root(config, content_dir)
    collections = _get_collections(content_root)
    if not collections:
        raise click.ClickException(
            f"No collections found in {content_root}. Create a folder like posts/ first."
        )

    options = LoadOptions.from_config(config)
    fs = DirectoryFS(content_root)
    store = ContentStore()
    total = 0
    for name in collections:
        try:
            items = store.load(dict, fs, name, key=name, options=options)
        except ContentLoadError as exc:
            _report_failure(exc)
            raise SystemExit(1) from None
        total += len(items)
        click.echo(f"{name}: {len(items)} items")
    click.echo(f"Loaded {total} items from {len(collections)} collections")


@cli.command(name="list")
@click.argument("collection")
@click.option(
    "--content-dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=False,
    help="Content directory (overrides quire.yaml)",
)
def list_items(collection: str, content_dir: Path | None):
    """Print the slugs of one collection."""
    config = _load_project_config()
    content_root = _content_root(config, content_dir)
    store = ContentStore()
    try:
        items = store.load(
            dict,
            DirectoryFS(content_root),
            collection,
            options=LoadOptions.from_config(config),
        )
    except ContentLoadError as exc:
        _report_failure(exc)
        raise SystemExit(1) from None
    for item in items:
        title = item.meta.get("title")
        click.echo(f"{item.slug}\t{title}" if title else item.slug)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def render(file: Path):
    """Render a single Markdown file to HTML."""
    config = _load_project_config()
    content_root = (Path.cwd() / config["content_dir"]).resolve()
    file = file.resolve()
    if file.is_relative_to(content_root):
        fs = DirectoryFS(content_root)
        path = file.relative_to(content_root).as_posix()
    else:
        fs = DirectoryFS(file.parent)
        path = file.name

    builder = ContentItemBuilder(
        fs, path.rpartition("/")[0] or ".", dict, LoadOptions.from_config(config)
    )
    try:
        item = builder.build(path)
    except ContentLoadError as exc:
        _report_failure(exc)
        raise SystemExit(1) from None
    click.echo(item.html)


def _load_project_config() -> dict:
    """Load quire.yaml from the working directory."""
    try:
        return load_config(Path.cwd())
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from None


def _content_root(config: dict, override: Path | None) -> Path:
    """Resolve the content directory and make sure it exists."""
    content_root = override or Path.cwd() / config["content_dir"]
    if not content_root.is_dir():
        raise click.ClickException(f"No content directory found at {content_root}")
    return content_root


def _get_collections(content_root: Path) -> list[str]:
    """Get the collection folders in the content directory.

    Hidden folders and folders starting with _ are skipped.
    """
    folders = [
        path.name
        for path in content_root.iterdir()
        if path.is_dir() and not path.name.startswith(("_", "."))
    ]
    folders.sort()
    return folders


def _report_failure(exc: ContentLoadError) -> None:
    """Display a load error in the same layout for every command."""
    click.echo(click.style("Load failed:", fg="red", bold=True), err=True)
    click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
    click.echo(click.style(f"  Error: {exc.message}", fg="white"), err=True)


def main():
    """Entry point for the CLI application."""
    cli()
