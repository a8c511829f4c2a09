"""Render consolidated grocery lines as natural-language shopping items."""

import math
from collections.abc import Callable

from grocerylist.models import ConsolidatedLine

# Culinary fractions a quantity may snap to
FRACTIONS: tuple[tuple[float, str], ...] = (
    (0.125, "1/8"),
    (0.25, "1/4"),
    (0.333, "1/3"),
    (0.375, "3/8"),
    (0.5, "1/2"),
    (0.625, "5/8"),
    (0.667, "2/3"),
    (0.75, "3/4"),
    (0.875, "7/8"),
)
FRACTION_TOLERANCE = 0.02

# Words never pluralized in display, checked against the last word of a name
MASS_NOUNS: frozenset[str] = frozenset(
    {
        "flour", "sugar", "salt", "rice", "water", "milk", "butter", "oil",
        "garlic", "ginger", "chicken", "beef", "pork", "lamb", "turkey", "fish",
        "salmon", "tuna", "shrimp", "pasta", "spaghetti", "penne", "macaroni",
        "bread", "cheese", "cream", "honey", "mustard", "vinegar", "broth",
        "stock", "cornstarch", "cornmeal", "cilantro", "parsley", "basil",
        "oregano", "thyme", "rosemary", "dill", "cinnamon", "paprika", "cumin",
        "turmeric", "nutmeg", "lettuce", "spinach", "kale", "cabbage", "celery",
        "broccoli", "cauliflower", "corn", "bacon", "sausage", "ham",
        "chocolate", "cocoa", "coffee", "tea", "juice", "wine", "beer",
        "mayonnaise", "ketchup", "sriracha", "tahini", "hummus", "pesto",
        "couscous", "quinoa", "oatmeal", "granola", "yogurt", "tofu", "tempeh",
        "seitan", "coriander", "sage", "tarragon", "powder", "sauce", "paste",
        "soy", "mint", "wheat", "sumac", "breadcrumbs", "flakes", "half",
        "cayenne", "buttermilk", "soda", "extract", "vanilla", "ghee",
        "allspice", "arugula", "watercress", "asparagus", "paneer", "pancetta",
        "gelatin", "margarine", "seaweed", "molasses", "steak", "noodle",
    }
)

# Whole names that are mass nouns even though their last word is countable
MASS_NOUN_NAMES: frozenset[str] = frozenset(
    {
        "cayenne pepper",
        "pepper",
        "half and half",
        "garam masala",
        "tandoori masala",
        "italian seasoning",
        "kasuri methi",
        "gochujang",
        "pomegranate molasses",
        "urad dal",
        "white hominy",
    }
)

ABBREVIATED_UNITS: frozenset[str] = frozenset({"tsp", "tbsp", "oz", "lb", "g", "kg", "ml"})

# Units that read after the name: "5 celery stalks", not "5 stalks celery"
NAME_FIRST_UNITS: frozenset[str] = frozenset(
    {"stalk", "strip", "ear", "clove", "head", "bunch", "sprig", "piece", "slice", "rib"}
)

O_ES_WORDS: frozenset[str] = frozenset({"potato", "tomato", "hero"})
VOWELS = "aeiou"


def decimal_to_fraction(value: float) -> str:
    """
    Render a quantity the way a recipe would.

    Examples:
        3 -> "3"
        0.5 -> "1/2"
        2.5 -> "2 1/2"
        1.1 -> "1.1"
    """
    if float(value).is_integer():
        return str(int(value))

    whole = math.floor(value)
    decimal = value - whole

    for target, fraction in FRACTIONS:
        if abs(decimal - target) < FRACTION_TOLERANCE:
            return f"{whole} {fraction}" if whole > 0 else fraction

    return f"{value:.2f}".rstrip("0").rstrip(".")


def _consonant_y(name: str) -> bool:
    return name.endswith("y") and len(name) > 1 and name[-2] not in VOWELS


def _o_plural(name: str) -> str:
    last_word = name.split(" ")[-1]
    return name + "es" if last_word in O_ES_WORDS else name + "s"


# Evaluated in order, first match wins
PLURAL_RULES: tuple[tuple[Callable[[str], bool], Callable[[str], str]], ...] = (
    (lambda s: s.endswith("leaf"), lambda s: s[:-4] + "leaves"),
    (lambda s: s.endswith(("s", "sh", "ch")), lambda s: s + "es"),
    (_consonant_y, lambda s: s[:-1] + "ies"),
    (lambda s: s.endswith("o"), _o_plural),
)


def simple_pluralize(name: str) -> str:
    """Pluralize an English noun phrase by its last word."""
    for matches, transform in PLURAL_RULES:
        if matches(name):
            return transform(name)
    return name + "s"


def pluralize_unit(unit: str, quantity: float) -> str:
    if quantity <= 1 or unit in ABBREVIATED_UNITS:
        return unit
    return simple_pluralize(unit)


def is_mass_noun(name: str) -> bool:
    """Check if an ingredient name is uncountable ("rice", "garam masala")."""
    return name.split(" ")[-1] in MASS_NOUNS or name in MASS_NOUN_NAMES


def format_grocery_item(item: ConsolidatedLine) -> str:
    """
    Turn a consolidated line into a shopping list entry.

    Examples:
        garlic, 7 clove -> "7 garlic cloves"
        blueberry, 1 cup -> "1 cup blueberries"
        egg, 4 -> "4 eggs"
        salt -> "salt"
    """
    parts: list[str] = []
    qty = item.total_quantity
    unit = item.unit

    if qty is not None:
        parts.append(decimal_to_fraction(qty))

    if unit and unit in NAME_FIRST_UNITS:
        # Name stays singular, the unit carries the count
        parts.append(item.name)
        parts.append(pluralize_unit(unit, qty) if qty is not None else unit)
        return " ".join(parts)

    if unit:
        parts.append(pluralize_unit(unit, qty) if qty is not None else unit)

    # "4 eggs" and "1 cup blueberries", but "1 garlic"
    should_pluralize = not is_mass_noun(item.name) and qty is not None and (qty > 1 or bool(unit))
    parts.append(simple_pluralize(item.name) if should_pluralize else item.name)

    return " ".join(parts)
