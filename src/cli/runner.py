# src/cli/runner.py

"""Headless CLI: sync the catalog, run one query, print the results."""

import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from src.config.settings import Settings
from src.models.catalog_state import CatalogState
from src.models.errors import CatalogError
from src.models.product import Product
from src.models.query_state import FilterOptions, QueryState
from src.services.health_checker import probe_store
from src.services.product_catalog import ProductCatalog
from src.storage.document_store import DocumentStore
from src.storage.file_manager import FileManager, load_documents
from src.storage.memory_store import InMemoryDocumentStore
from src.storage.rest_store import RestDocumentStore

logger = logging.getLogger("catalog_sync.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def build_store(
    store_url: str | None,
    seed_path: str | None,
    collection: str,
) -> DocumentStore:
    """Pick the store backend from CLI flags (or ``CATALOG_STORE_URL``).

    Raises ``SystemExit`` when no backend is configured.
    """
    url = store_url or Settings.STORE_URL
    if seed_path is not None:
        documents = load_documents(Path(seed_path))
        return InMemoryDocumentStore({collection: documents})
    if url:
        return RestDocumentStore(url)
    _err.print(
        "[red]No document store configured.[/red] "
        "[dim]Pass --store-url, --seed, or set CATALOG_STORE_URL.[/dim]"
    )
    raise SystemExit(1)


def build_query_state(
    search: str | None,
    category: str | None,
    brand_csv: str | None,
    min_price: float | None,
    max_price: float | None,
    min_rating: float | None,
    in_stock: bool,
    sort_by: str,
    descending: bool,
) -> QueryState:
    """Translate CLI flags into a :class:`QueryState`."""
    default_low, default_high = Settings.DEFAULT_PRICE_RANGE
    brands = (
        frozenset(b.strip() for b in brand_csv.split(",") if b.strip())
        if brand_csv
        else frozenset()
    )
    filters = FilterOptions(
        category=category or "",
        price_range=(
            default_low if min_price is None else min_price,
            default_high if max_price is None else max_price,
        ),
        brand=brands,
        rating=min_rating or 0.0,
        in_stock=in_stock,
    )
    return QueryState(
        search_query=search or "",
        filters=filters,
        sort_by=sort_by,  # type: ignore[arg-type]
        sort_order="desc" if descending else "asc",
    )


def _apply_query_state(catalog: ProductCatalog, state: QueryState) -> None:
    catalog.set_search_query(state.search_query)
    catalog.set_filters(state.filters)
    catalog.set_sort_by(state.sort_by)
    catalog.set_sort_order(state.sort_order)


def _print_table(products: list[Product], title: str) -> None:
    """Render a Rich table of products to stdout."""
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Brand", style="magenta")
    table.add_column("Category")
    table.add_column("Stock", justify="center")

    for idx, p in enumerate(products, 1):
        table.add_row(
            str(idx),
            p.name[:50],
            f"{p.price:,.2f}",
            f"{p.rating:g}" if p.rating else "—",
            p.brand or "—",
            p.category or "—",
            "✓" if p.in_stock else "✗",
        )

    Console().print(table)


def _emit(products: list[Product], output_format: str, title: str) -> None:
    if output_format == "table":
        _print_table(products, title)
    else:
        json.dump(
            [p.to_dict() for p in products],
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")


def _save_results(label: str, products: list[Product]) -> None:
    """Save JSON + CSV copies of the results."""
    try:
        file_manager = FileManager()
        json_path = file_manager.save_results(label, products)
        csv_path = file_manager.export_csv(label, products)
        _err.print(f"[dim]Saved → {json_path}, {csv_path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")


async def cli_query(
    store: DocumentStore,
    query_state: QueryState,
    collection: str,
    output_format: str = "json",
    save: bool = False,
    watch: float = 0.0,
) -> int:
    """Sync, query and print; return an exit code (0=ok, 1=fail).

    With *watch* > 0 the catalog stays subscribed for that many seconds
    and the results are re-printed after every published snapshot.
    """
    catalog = ProductCatalog(store, collection)
    _apply_query_state(catalog, query_state)
    label = query_state.search_query or collection

    try:
        async with catalog:
            try:
                state = await catalog.wait_until_ready(Settings.READY_TIMEOUT)
            except asyncio.TimeoutError:
                _err.print("[red]Timed out waiting for the catalog.[/red]")
                return 1

            if state.error:
                _err.print(f"[red]Error: {state.error}[/red]")

            products = catalog.products
            _err.print(
                f"[green]✓ {len(products)} of "
                f"{len(catalog.all_products)} products[/green]"
            )
            _emit(products, output_format, f"Catalog: {label}")

            if save and products:
                _save_results(label, products)

            if watch > 0:
                _err.print(f"[dim]Watching for {watch:g}s…[/dim]")

                def on_publish(new_state: CatalogState) -> None:
                    if new_state.error:
                        _err.print(f"[red]Error: {new_state.error}[/red]")
                    _emit(
                        catalog.products,
                        output_format,
                        f"Catalog: {label} (v{new_state.version})",
                    )

                remove = catalog.sync.add_listener(on_publish)
                try:
                    await asyncio.sleep(watch)
                finally:
                    remove()
    finally:
        store.close()

    return 0 if products else 1


async def run_import(
    store: DocumentStore,
    source_path: str,
    collection: str,
) -> int:
    """Create every record of a JSON file through the mutator."""
    from rich.progress import Progress

    from src.services.catalog_mutator import CatalogMutator

    documents = load_documents(Path(source_path))
    mutator = CatalogMutator(store, collection)
    created = 0
    failed = 0

    try:
        with Progress(console=_err) as progress:
            task = progress.add_task("Importing...", total=len(documents))
            for doc_id, fields in documents:
                try:
                    await mutator.create(fields)
                    created += 1
                except CatalogError as exc:
                    failed += 1
                    logger.warning("Import of %s failed: %s", doc_id, exc)
                progress.advance(task)
    finally:
        store.close()

    _err.print(
        f"[green]✓ Imported {created:,} products[/green]"
        + (f" [red]({failed:,} failed)[/red]" if failed else "")
    )
    return 1 if failed and not created else 0


async def run_health_check(store: DocumentStore, collection: str) -> int:
    """Probe the store and print a one-row status table."""
    _err.print("[bold]Running document store health check...[/bold]")
    try:
        result = await probe_store(store, collection)
    finally:
        store.close()

    table = Table(
        title="Document Store Health",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Collection", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Documents", justify="right")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]✅ OK[/green]"
    elif result.status == "slow":
        status = "[yellow]⚠️  SLOW[/yellow]"
    else:
        status = "[red]❌ DOWN[/red]"

    table.add_row(
        result.collection,
        status,
        f"{result.latency_ms:.0f}ms",
        f"{result.valid_count}/{result.document_count}",
        result.message,
    )
    Console().print(table)
    return 1 if result.status == "down" else 0
