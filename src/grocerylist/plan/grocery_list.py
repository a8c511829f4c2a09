"""Grocery list consolidation across the recipes of one shopping trip."""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from grocerylist.logging_config import get_logger
from grocerylist.models import CATEGORY_ORDER, Category, ConsolidatedLine, RawIngredientLine
from grocerylist.normalize.names import normalize_ingredient_name
from grocerylist.normalize.units import (
    METRIC_UNITS,
    UnitFamily,
    family_of,
    normalize_unit,
    to_preferred_unit,
)

logger = get_logger(__name__)

UNKNOWN_RECIPE = "Unknown Recipe"


# =============================================================================
# Ingredient-Specific Tables
# =============================================================================

# Categories recipe parsers frequently get wrong
CATEGORY_OVERRIDES: MappingProxyType[str, Category] = MappingProxyType(
    {
        "olive oil": Category.PANTRY,
        "vegetable oil": Category.PANTRY,
        "canola oil": Category.PANTRY,
        "coconut oil": Category.PANTRY,
        "sesame oil": Category.PANTRY,
        "avocado oil": Category.PANTRY,
        "tofu": Category.MEAT_SEAFOOD,
        "tempeh": Category.MEAT_SEAFOOD,
        "seitan": Category.MEAT_SEAFOOD,
        "egg": Category.PANTRY,
        "egg yolk": Category.PANTRY,
        "egg white": Category.PANTRY,
        "ghee": Category.PANTRY,
        "tomato paste": Category.PANTRY,
        "sesame seed": Category.PANTRY,
        "water": Category.OTHER,
        "chicken stock": Category.PANTRY,
        "low sodium chicken stock": Category.PANTRY,
        "beef stock": Category.PANTRY,
        "vegetable stock": Category.PANTRY,
    }
)

# Count units that are combined under another name
UNIT_REMAP: MappingProxyType[str, str] = MappingProxyType({"rib": "stalk", "slice": "strip"})

# Unit given to a bare count ("3 celery" -> 3 celery stalks)
PREFERRED_COUNT_UNIT: MappingProxyType[str, str] = MappingProxyType(
    {
        "celery": "stalk",
        "bacon": "strip",
        "garlic": "clove",
        "corn": "ear",
        "broccoli": "head",
    }
)


@dataclass(frozen=True)
class BulkConversion:
    """Switch to a larger unit once a count gets unwieldy (12 cloves -> 1 head)."""

    from_unit: str
    to_unit: str
    ratio: float
    threshold: float


BULK_CONVERSIONS: MappingProxyType[str, BulkConversion] = MappingProxyType(
    {
        "garlic": BulkConversion(from_unit="clove", to_unit="head", ratio=10, threshold=10),
    }
)

# Cups of chopped ingredient in one whole unit
COUNT_TO_CUP: MappingProxyType[str, float] = MappingProxyType(
    {
        "onion": 1,
        "bell pepper": 1,
        "carrot": 0.5,
        "celery": 0.5,
        "zucchini": 1.25,
        "garlic": 1 / 48,  # one clove is about a teaspoon
    }
)

# Pounds in one whole unit
COUNT_TO_LB: MappingProxyType[str, float] = MappingProxyType(
    {
        "potato": 0.5,
        "broccoli": 1.25,
    }
)

# Cups in one standard can
CAN_TO_CUP: MappingProxyType[str, float] = MappingProxyType(
    {
        "chicken broth": 1.8125,  # 14.5 oz can
        "chicken stock": 1.8125,
        "beef broth": 1.8125,
        "beef stock": 1.8125,
        "vegetable broth": 1.8125,
        "vegetable stock": 1.8125,
        "coconut milk": 1.75,  # 13.5 oz can
    }
)


# =============================================================================
# Per-Group Accumulators
# =============================================================================


@dataclass
class _FamilyTotal:
    """Running total of one unit family, in base units."""

    total_base: float
    original_units: list[str] = field(default_factory=list)

    def add(self, amount_base: float, unit: str) -> None:
        self.total_base += amount_base
        if unit not in self.original_units:
            self.original_units.append(unit)


@dataclass
class _PlainTotal:
    """Running sum for a unit outside both families; None means no quantity yet."""

    total: float | None = None

    def add(self, quantity: float | None) -> None:
        if quantity is not None:
            self.total = quantity if self.total is None else self.total + quantity


@dataclass
class _IngredientGroup:
    category: Category
    items: list[tuple[float | None, str]] = field(default_factory=list)
    recipes: list[str] = field(default_factory=list)

    def add(self, quantity: float | None, unit: str, recipe_name: str) -> None:
        self.items.append((quantity, unit))
        if recipe_name not in self.recipes:
            self.recipes.append(recipe_name)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# =============================================================================
# Cross-Family Merges
# =============================================================================


def _merge_cans_into_volume(
    name: str,
    family_totals: dict[UnitFamily, _FamilyTotal],
    plain_totals: dict[str, _PlainTotal],
) -> None:
    """Express cans as cups ("4 cans broth" + "3 cups broth")."""
    cups_per_can = CAN_TO_CUP.get(name)
    can_entry = plain_totals.get("can")
    if cups_per_can is None or can_entry is None or can_entry.total is None:
        return

    volume = UnitFamily.VOLUME
    amount_base = volume.to_base(can_entry.total * cups_per_can, "cup")
    if volume in family_totals:
        family_totals[volume].add(amount_base, "cup")
    else:
        family_totals[volume] = _FamilyTotal(total_base=amount_base, original_units=["cup"])
    del plain_totals["can"]


def _merge_volume_into_count(
    name: str,
    family_totals: dict[UnitFamily, _FamilyTotal],
    plain_totals: dict[str, _PlainTotal],
) -> None:
    """Express chopped volume as whole units ("1 cup onion" + "2 onions")."""
    cups_per_unit = COUNT_TO_CUP.get(name)
    volume = UnitFamily.VOLUME
    if cups_per_unit is None or volume not in family_totals:
        return

    cups = volume.from_base(family_totals.pop(volume).total_base, "cup")
    count_key = PREFERRED_COUNT_UNIT.get(name, "")
    plain_totals.setdefault(count_key, _PlainTotal()).add(cups / cups_per_unit)


def _merge_weight_into_count(
    name: str,
    family_totals: dict[UnitFamily, _FamilyTotal],
    plain_totals: dict[str, _PlainTotal],
) -> None:
    """Top up an existing count with weight ("1 lb potatoes" + "5 potatoes")."""
    lb_per_unit = COUNT_TO_LB.get(name)
    weight = UnitFamily.WEIGHT
    count_key = PREFERRED_COUNT_UNIT.get(name, "")
    if lb_per_unit is None or weight not in family_totals or count_key not in plain_totals:
        return

    pounds = weight.from_base(family_totals.pop(weight).total_base, "lb")
    plain_totals[count_key].add(pounds / lb_per_unit)


def _apply_bulk_conversion(name: str, plain_totals: dict[str, _PlainTotal]) -> None:
    bulk = BULK_CONVERSIONS.get(name)
    if bulk is None:
        return
    entry = plain_totals.get(bulk.from_unit)
    if entry is None or entry.total is None or entry.total <= bulk.threshold:
        return

    del plain_totals[bulk.from_unit]
    converted = _round_half_up(entry.total / bulk.ratio)
    plain_totals.setdefault(bulk.to_unit, _PlainTotal()).add(converted)


# =============================================================================
# Emission
# =============================================================================


def _family_quantity(family: UnitFamily, family_total: _FamilyTotal) -> tuple[float, str]:
    """Convert a family total back into a displayable (quantity, unit)."""
    total_base = family_total.total_base
    candidates = family.imperial_units()
    units = family_total.original_units

    if len(units) == 1 and units[0] not in METRIC_UNITS:
        unit = units[0]
        largest = max(candidates, key=family.factor)
        if family.factor(unit) < family.factor(largest) and family.from_base(
            total_base, largest
        ) >= 0.5:
            return to_preferred_unit(total_base, family, candidates, min_quantity=0.5)
        return family.from_base(total_base, unit), unit

    return to_preferred_unit(total_base, family, candidates)


def _combine_group(name: str, group: _IngredientGroup) -> list[ConsolidatedLine]:
    family_totals: dict[UnitFamily, _FamilyTotal] = {}
    plain_totals: dict[str, _PlainTotal] = {}

    for quantity, unit in group.items:
        conversion = family_of(unit) if unit else None

        if conversion is not None and quantity is not None:
            family, factor = conversion
            amount_base = quantity * factor
            if family in family_totals:
                family_totals[family].add(amount_base, unit)
            else:
                family_totals[family] = _FamilyTotal(total_base=amount_base, original_units=[unit])
            continue

        unit_key = UNIT_REMAP.get(unit, unit)
        if not unit_key:
            unit_key = PREFERRED_COUNT_UNIT.get(name, "")
        plain_totals.setdefault(unit_key, _PlainTotal()).add(quantity)

    # Fixed precedence; no ingredient currently qualifies for more than one
    _merge_cans_into_volume(name, family_totals, plain_totals)
    _merge_volume_into_count(name, family_totals, plain_totals)
    _merge_weight_into_count(name, family_totals, plain_totals)

    source_recipes = tuple(group.recipes)
    lines: list[ConsolidatedLine] = []

    for family, family_total in family_totals.items():
        quantity, unit = _family_quantity(family, family_total)
        lines.append(
            ConsolidatedLine(
                name=name,
                total_quantity=quantity,
                unit=unit,
                category=group.category,
                source_recipes=source_recipes,
            )
        )

    _apply_bulk_conversion(name, plain_totals)

    for unit, plain in plain_totals.items():
        lines.append(
            ConsolidatedLine(
                name=name,
                total_quantity=plain.total,
                unit=unit or None,
                category=group.category,
                source_recipes=source_recipes,
            )
        )

    return lines


def combine_ingredients(
    ingredients: Iterable[RawIngredientLine],
    recipe_names: Mapping[str, str],
) -> list[ConsolidatedLine]:
    """
    Combine ingredient lines from several recipes into one grocery list.

    Lines are grouped by canonical name only. Within a group, quantities are
    summed per unit family (volume, weight) or per discrete unit, then merged
    across families where an ingredient-specific ratio is known. A group whose
    units cannot be reconciled emits more than one line.

    Args:
        ingredients: Raw lines as written in each recipe.
        recipe_names: Recipe id -> display name, used for source attribution.

    Returns:
        Consolidated lines, in order of first appearance of each name.
    """
    grouped: dict[str, _IngredientGroup] = {}

    for ing in ingredients:
        name = normalize_ingredient_name(ing.name)
        unit = normalize_unit(ing.unit)
        recipe_name = recipe_names.get(ing.recipe_id, UNKNOWN_RECIPE)

        group = grouped.get(name)
        if group is None:
            group = grouped[name] = _IngredientGroup(
                category=CATEGORY_OVERRIDES.get(name, Category.coerce(ing.category))
            )
        group.add(ing.quantity, unit, recipe_name)

    results: list[ConsolidatedLine] = []
    for name, group in grouped.items():
        results.extend(_combine_group(name, group))

    logger.debug(f"Combined {len(grouped)} ingredients into {len(results)} grocery lines")
    return results


def group_by_category(
    items: Iterable[ConsolidatedLine],
) -> dict[Category, list[ConsolidatedLine]]:
    """Group lines by category in store walk order, omitting empty categories."""
    items = list(items)
    grouped: dict[Category, list[ConsolidatedLine]] = {}
    for category in CATEGORY_ORDER:
        category_items = [item for item in items if item.category == category]
        if category_items:
            grouped[category] = category_items
    return grouped
