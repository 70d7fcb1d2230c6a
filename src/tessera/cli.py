"""CLI interface for Tessera.

Command-line tool for serving the content API and checking content data.
"""

import logging
import sys
from pathlib import Path

import click

from tessera.config import Config
from tessera.core.authorization import Ability, Identity
from tessera.core.serializer import serialize_content
from tessera.core.store import ContentStore, ContentStoreLoader
from tessera.core.tree import TreeSerializer, find_structural_defects
from tessera.errors import (
    IngredientSerializationError,
    StoreLoadError,
    StructuralIntegrityError,
)

CHECK_IDENTITY = Identity(id="tessera-check", role="admin")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Tessera - read-only JSON API over page and element content trees."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None, data_file: Path | None) -> Config:
    try:
        config = Config.load(config_path)
    except ValueError as e:
        click.echo(click.style(f"Error: invalid configuration: {e}", fg="red"), err=True)
        sys.exit(1)
    return config.with_overrides(data_file=data_file)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover tessera.toml)",
)
@click.option(
    "--data-file",
    "-d",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Content data file (overrides config)",
)
@click.option(
    "--host",
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
def serve(
    config_path: Path | None,
    data_file: Path | None,
    host: str | None,
    port: int | None,
) -> None:
    """Start the content API server."""
    from tessera.server import run_server

    config = _load_config(config_path, data_file).with_overrides(host=host, port=port)

    click.echo(f"Starting server on {config.server.host}:{config.server.port}")
    click.echo(f"Data file: {config.store.data_file}")
    click.echo(f"Default locale: {config.store.default_locale}")

    try:
        run_server(config)
    except (StoreLoadError, StructuralIntegrityError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover tessera.toml)",
)
@click.option(
    "--data-file",
    "-d",
    type=click.Path(exists=True, path_type=Path, dir_okay=False),
    default=None,
    help="Content data file (overrides config)",
)
def check(config_path: Path | None, data_file: Path | None) -> None:
    """Check content data for structural and ingredient defects.

    Exits with status 1 when the data contains structural defects.
    Ingredient defects are reported but do not fail the check.
    """
    config = _load_config(config_path, data_file)

    try:
        store = ContentStoreLoader(
            config.store.data_file,
            default_locale=config.store.default_locale,
        ).load()
    except (StoreLoadError, StructuralIntegrityError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    structural = find_structural_defects(store)
    structural.extend(_traverse_pages(store, config.serializer.max_depth))
    ingredient = _ingredient_defects(store)

    for defect in structural:
        click.echo(click.style(f"Structural: {defect}", fg="red"))
    for defect in ingredient:
        click.echo(click.style(f"Ingredient: {defect}", fg="yellow"))

    click.echo(
        f"Checked {len(store.pages())} pages and {len(store.elements())} elements: "
        f"{len(structural)} structural, {len(ingredient)} ingredient defects"
    )
    if structural:
        sys.exit(1)


def _traverse_pages(store: ContentStore, max_depth: int | None) -> list[str]:
    """Fully serialize every top-level page tree, collecting failures."""
    serializer = TreeSerializer(
        store,
        Ability(store),
        CHECK_IDENTITY,
        full=True,
        max_depth=max_depth,
    )
    defects: list[str] = []
    for page in store.pages():
        if page.parent_id is not None:
            continue
        try:
            serializer.serialize_page(page)
        except StructuralIntegrityError as e:
            defects.append(f"Page {page.id} ({page.urlname}): {e}")
    return defects


def _ingredient_defects(store: ContentStore) -> list[str]:
    defects: list[str] = []
    for element in store.elements():
        for content in store.contents(element.id):
            try:
                serialize_content(content)
            except IngredientSerializationError as e:
                defects.append(f"Element {element.id}, content {content.name!r}: {e}")
    return defects


if __name__ == "__main__":
    cli()
