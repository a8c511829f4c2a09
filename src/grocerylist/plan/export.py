"""CSV export and pantry filtering for grocery lists."""

import re
from collections.abc import Iterable, Mapping

from grocerylist.models import CATEGORY_LABELS, Category, ConsolidatedLine
from grocerylist.normalize.names import normalize_ingredient_name
from grocerylist.plan.formatting import decimal_to_fraction

CSV_HEADER = "Category,Item,Quantity,Unit,Recipes"


def _csv_field(value: str) -> str:
    return f'"{value}"' if "," in value else value


def generate_csv(grouped_items: Mapping[Category, Iterable[ConsolidatedLine]]) -> str:
    """
    Serialize a category-grouped grocery list as CSV.

    One row per line: category label, item name, quantity as a culinary
    fraction (empty when absent), unit and the recipes joined with "; ".
    """
    rows = [CSV_HEADER]
    for category, items in grouped_items.items():
        category_name = CATEGORY_LABELS[Category.coerce(category)]
        for item in items:
            qty = decimal_to_fraction(item.total_quantity) if item.total_quantity is not None else ""
            fields = (
                category_name,
                item.name,
                qty,
                item.unit or "",
                "; ".join(item.source_recipes),
            )
            rows.append(",".join(_csv_field(f) for f in fields))
    return "\n".join(rows)


def csv_filename(event_name: str) -> str:
    """Download filename for an event's grocery list."""
    slug = re.sub(r"\s+", "-", event_name.lower())
    return f"grocery-list-{slug}.csv"


def filter_pantry_items(
    items: Iterable[ConsolidatedLine],
    pantry_items: Iterable[str],
) -> list[ConsolidatedLine]:
    """
    Drop lines the user already has on hand.

    Both sides are compared by canonical name, so a pantry entry of "salt"
    removes "kosher salt". There is no substring matching: "salt" keeps
    "salted butter".
    """
    pantry = {normalize_ingredient_name(name) for name in pantry_items}
    return [item for item in items if normalize_ingredient_name(item.name) not in pantry]
