"""Unit normalization and conversion utilities."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

# =============================================================================
# Unit Synonym Table
# =============================================================================

UNIT_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        "cups": "cup",
        "tablespoons": "tbsp",
        "tablespoon": "tbsp",
        "teaspoons": "tsp",
        "teaspoon": "tsp",
        "ounces": "oz",
        "ounce": "oz",
        "pounds": "lb",
        "pound": "lb",
        "cloves": "clove",
        "slices": "slice",
        "pieces": "piece",
        "cans": "can",
        "bottles": "bottle",
        "bunches": "bunch",
        "heads": "head",
        "stalks": "stalk",
        "ribs": "rib",
        "strips": "strip",
        "ears": "ear",
        "sprigs": "sprig",
        "pinches": "pinch",
        "dashes": "dash",
        "liters": "liter",
        "milliliters": "ml",
        "grams": "g",
        "kilograms": "kg",
    }
)

# Metric units are converted to imperial when the family allows it
METRIC_UNITS: frozenset[str] = frozenset({"g", "kg", "ml"})


def normalize_unit(unit: str | None) -> str:
    """
    Canonicalize a raw unit token.

    Returns an empty string for a missing unit; unknown tokens are returned
    lowercased and trimmed but otherwise unchanged.
    """
    if not unit:
        return ""
    lower = unit.lower().strip()
    return UNIT_ALIASES.get(lower, lower)


# =============================================================================
# Conversion Families
# =============================================================================


@dataclass(frozen=True, eq=False)
class FamilySpec:
    """Units of one measurement system, as factors of its base unit."""

    base_unit: str
    factors: MappingProxyType[str, float]


class UnitFamily(Enum):
    """Closed set of unit families that support arithmetic across units."""

    VOLUME = FamilySpec(
        base_unit="tsp",
        factors=MappingProxyType({"tsp": 1.0, "tbsp": 3.0, "cup": 48.0}),
    )
    WEIGHT = FamilySpec(
        base_unit="oz",
        factors=MappingProxyType(
            {"g": 1 / 28.35, "oz": 1.0, "lb": 16.0, "kg": 1000 / 28.35}
        ),
    )

    @property
    def base_unit(self) -> str:
        return self.value.base_unit

    @property
    def factors(self) -> MappingProxyType[str, float]:
        return self.value.factors

    def factor(self, unit: str) -> float:
        """Number of base units in one ``unit``."""
        return self.value.factors[unit]

    def to_base(self, quantity: float, unit: str) -> float:
        return quantity * self.factor(unit)

    def from_base(self, total_base: float, unit: str) -> float:
        return total_base / self.factor(unit)

    def imperial_units(self) -> tuple[str, ...]:
        """Units of this family without the metric ones, when any remain."""
        imperial = tuple(u for u in self.value.factors if u not in METRIC_UNITS)
        return imperial or tuple(self.value.factors)


def family_of(unit: str) -> tuple[UnitFamily, float] | None:
    """
    Find the conversion family of a canonical unit.

    Returns:
        Tuple of (family, factor relative to the family's base unit), or None
        when the unit belongs to no family (discrete counts, cans, unknowns).
    """
    for family in UnitFamily:
        if unit in family.factors:
            return family, family.factor(unit)
    return None


def to_preferred_unit(
    total_base: float,
    family: UnitFamily,
    candidate_units: Iterable[str],
    min_quantity: float = 1,
) -> tuple[float, str]:
    """
    Pick the most readable unit for an amount expressed in base units.

    The largest candidate wins whenever it yields at least half a unit
    (14 tbsp -> 7/8 cup). Otherwise the largest candidate giving at least
    ``min_quantity`` is used, falling back to the smallest candidate.

    Returns:
        Tuple of (quantity, unit)
    """
    ranked = sorted(candidate_units, key=family.factor, reverse=True)

    largest = ranked[0]
    if family.from_base(total_base, largest) >= 0.5:
        return family.from_base(total_base, largest), largest

    for unit in ranked:
        converted = family.from_base(total_base, unit)
        if converted >= min_quantity:
            return converted, unit

    smallest = ranked[-1]
    return family.from_base(total_base, smallest), smallest
