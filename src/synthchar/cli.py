"""Command-line entrypoints for SynthChar."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Dict, List

import typer

from synthchar.chemistry import gravimetric_factor, mass_percent, molecular_weight
from synthchar.config import Settings, load_settings
from synthchar.errors import RecipeError, TableLoadError
from synthchar.formula import describe_elements
from synthchar.log import configure_logging
from synthchar.models import ComponentEntry, ProductEntry
from synthchar.periodic import AtomicTable, load_atomic_table
from synthchar.report import DEFAULT_TITLE, build_report_snapshot, format_value
from synthchar.session import BatchSession, LoadRecipe, coerce_number

app = typer.Typer(add_completion=False)

TableOption = Annotated[
    Path | None, typer.Option("--table", help="Periodic table CSV (defaults to the bundled one).")
]


def _settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def _table(path: Path | None) -> AtomicTable:
    settings = _settings()
    try:
        return load_atomic_table(path or settings.periodic_table_path)
    except TableLoadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)


def _parse_components(data: List[Dict[str, Any]]) -> tuple[ComponentEntry, ...]:
    components = []
    for row in data:
        components.append(
            ComponentEntry(
                formula=str(row["formula"]).strip(),
                matrix=coerce_number(row.get("matrix", 0.0)),
            )
        )
    return tuple(components)


def _parse_products(data: List[Dict[str, Any]]) -> tuple[ProductEntry, ...]:
    products = []
    for row in data:
        products.append(
            ProductEntry(
                formula=str(row.get("formula", "")).strip(),
                precursor_formula=str(row.get("precursor_formula", "")).strip(),
                precursor_moles=coerce_number(row.get("precursor_moles"), 1.0),
                product_moles=coerce_number(row.get("product_moles"), 1.0),
            )
        )
    return tuple(products)


def parse_recipe(data: Dict[str, Any]) -> LoadRecipe:
    """Turn a recipe mapping into a session event."""
    if not isinstance(data, dict):
        raise RecipeError("Recipe must be a JSON object")
    components = data.get("components")
    if not isinstance(components, list) or not components:
        raise RecipeError("Recipe needs a non-empty 'components' list")
    products = data.get("products", [])
    if not isinstance(products, list):
        raise RecipeError("'products' must be a list")
    if len(products) > len(components):
        raise RecipeError(
            f"Recipe has {len(products)} products but only {len(components)} precursors"
        )
    try:
        return LoadRecipe(
            components=_parse_components(components),
            products=_parse_products(products),
            desired_batch=data.get("desired_batch"),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise RecipeError(f"Malformed recipe row: {exc!r}") from exc


@app.command()
def run(
    recipe_file: Annotated[Path, typer.Argument(help="Path to JSON recipe file.")],
    output: Annotated[
        Path | None, typer.Option(help="Path to save the report JSON.")
    ] = None,
    table: TableOption = None,
    title: Annotated[str, typer.Option(help="Report title.")] = DEFAULT_TITLE,
) -> None:
    """Compute batch weights for a recipe and print the report as JSON."""
    settings = _settings()
    try:
        with open(recipe_file, "r") as f:
            recipe = parse_recipe(json.load(f))
    except (OSError, json.JSONDecodeError, RecipeError) as exc:
        typer.echo(f"Invalid recipe {recipe_file}: {exc}", err=True)
        raise typer.Exit(code=1)

    session = BatchSession(settings)
    if not session.load_table(table or settings.periodic_table_path):
        typer.echo("Periodic table could not be loaded; results are unavailable.", err=True)
    derived = session.dispatch(recipe)

    payload = build_report_snapshot(derived, title=title).to_dict()
    payload["issues"] = [
        {"kind": issue.kind.value, "message": issue.message, "formula": issue.formula}
        for issue in derived.issues
    ]
    json_output = json.dumps(payload, indent=2, ensure_ascii=False)
    typer.echo(json_output)

    if output:
        with open(output, "w") as f:
            f.write(json_output)


@app.command()
def mw(
    formula: Annotated[str, typer.Argument(help="Chemical formula, e.g. La2O3.")],
    table: TableOption = None,
) -> None:
    """Print the molecular weight of a formula."""
    typer.echo(format_value(molecular_weight(formula, _table(table)), 3))


@app.command()
def gf(
    precursor: Annotated[str, typer.Argument(help="Precursor formula.")],
    product: Annotated[str, typer.Argument(help="Product formula.")],
    precursor_moles: Annotated[float, typer.Option(help="Moles of precursor.")] = 1.0,
    product_moles: Annotated[float, typer.Option(help="Moles of product.")] = 1.0,
    table: TableOption = None,
) -> None:
    """Print the gravimetric factor from a precursor to a product."""
    factor = gravimetric_factor(precursor, product, precursor_moles, product_moles, _table(table))
    typer.echo(format_value(factor, 4))


@app.command()
def elements(
    formula: Annotated[str, typer.Argument(help="Chemical formula.")],
    table: TableOption = None,
) -> None:
    """Print each element of a formula with its mass percentage."""
    atomic_table = _table(table)
    compound_weight = molecular_weight(formula, atomic_table)
    rows = []
    for item in describe_elements(formula, atomic_table):
        mass = atomic_table.atomic_mass(item.symbol)
        percent = mass_percent(item.count, mass, compound_weight) if mass is not None else None
        rows.append(
            {
                "symbol": item.symbol,
                "element": item.element_name,
                "count": item.count,
                "mass_percent": percent,
            }
        )
    typer.echo(json.dumps({"formula": formula, "molecular_weight": compound_weight, "elements": rows}, indent=2))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
