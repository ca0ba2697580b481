"""Main CLI application module."""

import typer

from .catalog_commands import category_app, product_app
from .db_commands import db_app

app = typer.Typer(
    help="Catalog CLI - database provisioning and catalog inspection",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(db_app, name="db")
app.add_typer(category_app, name="category")
app.add_typer(product_app, name="product")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
