"""Grocery list consolidation, formatting and export."""

from grocerylist.plan.export import csv_filename, filter_pantry_items, generate_csv
from grocerylist.plan.formatting import (
    decimal_to_fraction,
    format_grocery_item,
    simple_pluralize,
)
from grocerylist.plan.grocery_list import combine_ingredients, group_by_category

__all__ = [
    "combine_ingredients",
    "csv_filename",
    "decimal_to_fraction",
    "filter_pantry_items",
    "format_grocery_item",
    "generate_csv",
    "group_by_category",
    "simple_pluralize",
]
