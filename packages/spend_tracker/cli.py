"""CLI for the ``spend_tracker`` package.

A Typer console interface over :mod:`spend_tracker.api`. The root callback
loads a local ``.env`` (``python-dotenv``) and configures logging before any
command runs; each command opens its own :class:`~tracker_db.client.Store`
from ``--database-url`` or ``DATABASE_URL``. Business logic lives in the
pipeline modules; this module only parses options and renders results.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table
from tracker_db.client import Store

from . import api
from .colors import ColorStrategy, PastelColorStrategy
from .errors import FormatError
from .logging_setup import configure_logging, get_logger
from .models import DashboardData, MutationResult, TransactionFilters, TransactionView
from .pending import CategorizationQueue
from .term_ui import (
    TOP_LEVEL_SENTINEL,
    CreateCategoryRequest,
    format_transaction,
    prompt_new_category_name,
    prompt_recurring,
    prompt_select_parent,
    select_category_or_create,
)

logger = get_logger("spend_tracker.cli")
console = Console()

app = typer.Typer(
    name="spend-tracker",
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank statement CSVs, categorize spending by vendor and review "
        "the totals. Loads DATABASE_URL from a local .env before running."
    ),
)


# ---- Small module-level helpers used by CLI commands -------------------------


@contextmanager
def _open_store(ctx: typer.Context) -> Iterator[Store]:
    database_url = (ctx.obj or {}).get("database_url")
    try:
        store = Store(database_url)
        store.initialize()
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    try:
        yield store
    finally:
        store.dispose()


def _check(result: MutationResult, success_message: str) -> None:
    if not result["success"]:
        console.print(f"[red]Error:[/red] {result.get('error', 'unknown error')}")
        raise typer.Exit(1)
    console.print(success_message)


def _transactions_table(title: str, rows: Sequence[TransactionView]) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Date")
    table.add_column("Vendor")
    table.add_column("Amount", justify="right")
    table.add_column("Category")
    table.add_column("Recurring")
    for t in rows:
        table.add_row(
            str(t.id),
            t.date.isoformat(),
            t.vendor_name,
            f"{t.amount:.2f}",
            t.category_name or "-",
            "yes" if t.recurring else "",
        )
    return table


def render_dashboard(data: DashboardData, colors: dict[str, str] | None = None) -> None:
    """Print every dashboard aggregate as a rich table."""

    colors = colors or {}

    monthly = Table(title="Monthly spending (last 12 months)")
    monthly.add_column("Month")
    monthly.add_column("Recurring", justify="right")
    monthly.add_column("Non-recurring", justify="right")
    for label, rec, non in zip(
        data.monthly.labels, data.monthly.recurring, data.monthly.non_recurring, strict=True
    ):
        monthly.add_row(label, f"{rec:.2f}", f"{non:.2f}")
    console.print(monthly)

    breakdown = Table(title="Categories (last 30 days)")
    breakdown.add_column("Category")
    breakdown.add_column("Total", justify="right")
    breakdown.add_column("Recurring", justify="right")
    cats = data.categories
    for name, total, count in zip(cats.labels, cats.totals, cats.recurring_counts, strict=True):
        swatch = f"[on {colors[name]}]  [/] " if name in colors else ""
        breakdown.add_row(f"{swatch}{name}", f"{total:.2f}", str(count))
    console.print(breakdown)

    pivot = data.month_by_category
    if pivot.months and pivot.categories:
        grid = Table(title="Spending by category and month")
        grid.add_column("Category")
        for m in pivot.months:
            grid.add_column(m, justify="right")
        for name, row in zip(pivot.categories, pivot.rows(), strict=True):
            grid.add_row(name, *(f"{v:.2f}" for v in row))
        console.print(grid)

    console.print(_transactions_table("Recent transactions", data.recent_transactions))


def run_review(
    store: Store,
    queue: CategorizationQueue,
    *,
    session: PromptSession | None = None,
    color_strategy: ColorStrategy | None = None,
) -> int:
    """Drain ``queue`` interactively; returns the number of decisions saved.

    Choosing an unknown name offers to create the category (with a parent and
    a pastel color) before the decision is submitted. A failed write stops the
    review and leaves the transaction pending.
    """

    pick_color = color_strategy or PastelColorStrategy()
    saved = 0
    while queue:
        head = queue.peek()
        if head is None:
            break
        categories = api.get_categories(store)
        by_name = {c.name: c.id for c in categories}

        console.print(f"[cyan]{len(queue)} left[/cyan]  {format_transaction(head)}")
        choice = select_category_or_create(
            list(by_name), default=head.category_name or "", session=session
        )

        if isinstance(choice, CreateCategoryRequest):
            name = prompt_new_category_name(initial=choice.name, session=session)
            if name is None:
                continue
            parent = prompt_select_parent(list(by_name), session=session)
            if parent is None:
                continue
            parent_id = None if parent == TOP_LEVEL_SENTINEL else by_name.get(parent)
            created = api.add_category(store, name, parent_id, color=pick_color())
            if not created["success"]:
                console.print(f"[red]Error:[/red] {created.get('error')}")
                continue
            category_id = created["category_id"]
        else:
            category_id = by_name[choice]

        recurring = prompt_recurring(session=session)
        result = queue.submit(category_id, recurring)
        if not result["success"]:
            console.print(f"[red]Error:[/red] {result.get('error')}")
            break
        saved += 1
    return saved


def _review(store: Store) -> None:
    queue = CategorizationQueue.load(store)
    if not queue:
        console.print("No transactions waiting for a category.")
        return
    try:
        saved = run_review(store, queue)
    except (KeyboardInterrupt, EOFError):
        logger.info("review interrupted with %d transaction(s) pending", len(queue))
        console.print(f"\n[yellow]Review stopped.[/yellow] {len(queue)} still pending.")
        return
    console.print(f"[green]Categorized {saved} transaction(s).[/green]")


# ---- Typer-based console interface -------------------------------------------


@app.callback()
def _root(
    ctx: typer.Context,
    database_url: Annotated[
        str | None, typer.Option(help="Override DATABASE_URL (falls back to env var).")
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()
    ctx.obj = {"database_url": database_url}


@app.command("init-db")
def init_db_cmd(ctx: typer.Context) -> None:
    """Create the schema in the configured database."""

    with _open_store(ctx) as store:
        console.print(f"[green]Database ready:[/green] {store.engine.url.render_as_string()}")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    csv_path: Annotated[
        list[Path],
        typer.Option("--csv-path", help="Statement CSV to import (repeat for several files)."),
    ],
    review: Annotated[
        bool, typer.Option(help="Categorize pending transactions right after importing.")
    ] = False,
) -> None:
    """Import one or more statement CSVs, skipping duplicates."""

    with _open_store(ctx) as store:
        try:
            summaries = api.import_files(store, list(csv_path))
        except FormatError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1) from e
        except OSError as e:
            console.print(f"[red]Error reading file:[/red] {e}")
            raise typer.Exit(1) from e

        table = Table(title="Import summary")
        table.add_column("File")
        table.add_column("Imported", justify="right")
        table.add_column("Duplicates", justify="right")
        table.add_column("New uncategorized vendors", justify="right")
        for s in summaries:
            table.add_row(
                s.file_name,
                str(s.imported_count),
                str(s.duplicate_count),
                str(len(s.uncategorized_vendor_ids)),
            )
        console.print(table)

        pending = summaries[-1].pending if summaries else ()
        console.print(f"{len(pending)} transaction(s) waiting for a category.")
        if review and pending:
            _review(store)


@app.command("review")
def review_cmd(ctx: typer.Context) -> None:
    """Categorize uncategorized transactions one at a time."""

    with _open_store(ctx) as store:
        _review(store)


@app.command("dashboard")
def dashboard_cmd(
    ctx: typer.Context,
    as_of: Annotated[
        datetime | None,
        typer.Option(formats=["%Y-%m-%d"], help="Anchor date for the trailing windows."),
    ] = None,
) -> None:
    """Show monthly, per-category and recent spending."""

    with _open_store(ctx) as store:
        data = api.get_dashboard_data(store, as_of=as_of.date() if as_of else None)
        colors = {c.name: c.color for c in api.get_categories(store)}
        render_dashboard(data, colors)


@app.command("transactions")
def transactions_cmd(
    ctx: typer.Context,
    start: Annotated[
        datetime | None, typer.Option(formats=["%Y-%m-%d"], help="Earliest date (inclusive).")
    ] = None,
    end: Annotated[
        datetime | None, typer.Option(formats=["%Y-%m-%d"], help="Latest date (inclusive).")
    ] = None,
    category_id: Annotated[int | None, typer.Option(help="Only this category.")] = None,
    vendor_id: Annotated[int | None, typer.Option(help="Only this vendor.")] = None,
    search: Annotated[
        str | None, typer.Option(help="Substring of the vendor name or description.")
    ] = None,
) -> None:
    """List stored transactions, newest first."""

    try:
        filters = TransactionFilters(
            start_date=start.date() if start else None,
            end_date=end.date() if end else None,
            category_id=category_id,
            vendor_id=vendor_id,
            search=search,
        )
    except ValidationError as e:
        console.print(f"[red]Error:[/red] invalid filters: {e.errors()[0]['msg']}")
        raise typer.Exit(1) from e

    with _open_store(ctx) as store:
        rows = api.get_transactions(store, filters)
        console.print(_transactions_table(f"Transactions ({len(rows)})", rows))


@app.command("categories")
def categories_cmd(ctx: typer.Context) -> None:
    """List categories with their colors."""

    with _open_store(ctx) as store:
        cats = api.get_categories(store)
        names = {c.id: c.name for c in cats}
        table = Table(title="Categories")
        table.add_column("ID", justify="right")
        table.add_column("Name")
        table.add_column("Parent")
        table.add_column("Color")
        for c in cats:
            parent = names.get(c.parent_id, "") if c.parent_id is not None else ""
            table.add_row(str(c.id), c.name, parent, f"[on {c.color}]  [/] {c.color}")
        console.print(table)


@app.command("add-category")
def add_category_cmd(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Category name.")],
    parent_id: Annotated[int | None, typer.Option(help="Parent category id.")] = None,
    color: Annotated[
        str | None, typer.Option(help="#rrggbb color (a pastel color is picked if omitted).")
    ] = None,
) -> None:
    """Create a category."""

    with _open_store(ctx) as store:
        result = api.add_category(store, name, parent_id, color or PastelColorStrategy()())
        _check(result, f"[green]Added category[/green] {result.get('category_id')}")


@app.command("set-color")
def set_color_cmd(
    ctx: typer.Context,
    category_id: Annotated[int, typer.Argument(help="Category id.")],
    color: Annotated[str, typer.Argument(help="#rrggbb color.")],
) -> None:
    """Change a category's color."""

    with _open_store(ctx) as store:
        _check(api.update_category_color(store, category_id, color), "[green]Color updated[/green]")


@app.command("delete-category")
def delete_category_cmd(
    ctx: typer.Context,
    category_id: Annotated[int, typer.Argument(help="Category id.")],
) -> None:
    """Delete a category; its transactions and vendors become uncategorized."""

    with _open_store(ctx) as store:
        _check(api.delete_category(store, category_id), "[green]Category deleted[/green]")


@app.command("delete-transaction")
def delete_transaction_cmd(
    ctx: typer.Context,
    transaction_id: Annotated[int, typer.Argument(help="Transaction id.")],
) -> None:
    """Delete a single transaction."""

    with _open_store(ctx) as store:
        _check(api.delete_transaction(store, transaction_id), "[green]Transaction deleted[/green]")


@app.command("clear-all")
def clear_all_cmd(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation.")] = False,
) -> None:
    """Delete every transaction, vendor, category and import record."""

    if not yes:
        typer.confirm("Delete ALL stored data?", abort=True)
    with _open_store(ctx) as store:
        _check(api.clear_all_data(store), "[green]All data cleared[/green]")


def main() -> None:  # pragma: no cover - console script entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m spend_tracker.cli`
    app()
