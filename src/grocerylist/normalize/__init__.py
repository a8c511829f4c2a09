"""Canonicalize ingredient names and units, and convert between units."""

from grocerylist.normalize.names import normalize_ingredient_name, singularize
from grocerylist.normalize.units import (
    METRIC_UNITS,
    UnitFamily,
    family_of,
    normalize_unit,
    to_preferred_unit,
)

__all__ = [
    "METRIC_UNITS",
    "UnitFamily",
    "family_of",
    "normalize_ingredient_name",
    "normalize_unit",
    "singularize",
    "to_preferred_unit",
]
