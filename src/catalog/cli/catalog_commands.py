"""Read-only catalog inspection commands."""

import typer
from rich.table import Table

from src.catalog.core.errors import CatalogError
from src.catalog.entities.category.repository import CategoryRepository
from src.catalog.entities.product.repository import ProductRepository

from .utils import console, get_db

category_app = typer.Typer(help="Category commands")
product_app = typer.Typer(help="Product commands")


@category_app.command("list")
def list_categories(
    counts: bool = typer.Option(False, "--counts", help="Include live product counts"),
) -> None:
    """List categories by name."""
    categories = CategoryRepository(get_db()).list(include_product_count=counts)

    table = Table(title="Categories")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Description")
    if counts:
        table.add_column("Products", justify="right")

    for category in categories:
        row = [str(category.id), category.name, category.description or ""]
        if counts:
            row.append(str(category.product_count))
        table.add_row(*row)

    console.print(table)


@product_app.command("list")
def list_products(
    category_id: int | None = typer.Option(None, "--category-id", help="Only this category"),
    in_stock: bool | None = typer.Option(
        None, "--in-stock/--out-of-stock", help="Filter on the stock flag"
    ),
    page: int = typer.Option(1, "--page", help="Page number, from 1"),
    page_size: int | None = typer.Option(None, "--page-size", help="Items per page"),
) -> None:
    """List products ordered by id."""
    try:
        result = ProductRepository(get_db()).list(
            page=page, page_size=page_size, category_id=category_id, in_stock=in_stock
        )
    except CatalogError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1) from e

    table = Table(title=f"Products (page {result.page}/{max(result.total_pages, 1)}, {result.total} total)")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("SKU")
    table.add_column("Price", justify="right")
    table.add_column("In stock")
    table.add_column("Categories")

    for product in result.items:
        table.add_row(
            str(product.id),
            product.name,
            product.sku or "",
            f"{product.price:.2f}",
            "yes" if product.in_stock else "no",
            ", ".join(category.name for category in product.categories),
        )

    console.print(table)
