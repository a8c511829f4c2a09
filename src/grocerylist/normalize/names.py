"""Ingredient name canonicalization."""

from collections.abc import Callable
from types import MappingProxyType

# =============================================================================
# Lookup Tables
# =============================================================================

# Alias -> canonical name. Order matters: an alias may produce a string that a
# later alias in the same pass rewrites again.
INGREDIENT_ALIASES: MappingProxyType[str, str] = MappingProxyType(
    {
        "corn starch": "cornstarch",
        "soy bean": "soybean",
        "green onion": "scallion",
        "spring onion": "scallion",
        "sea salt": "salt",
        "kosher salt": "salt",
        "table salt": "salt",
        "extra virgin olive oil": "olive oil",
        "bread crumb": "breadcrumbs",
        "breadcrumb": "breadcrumbs",
        "black pepper": "pepper",
        "white pepper": "pepper",
        "boston lettuce": "butter lettuce",
        "garlic clove": "garlic",
        "red pepper flake": "red pepper flakes",
        "all-purpose flour": "flour",
        "all purpose flour": "flour",
        "yellow onion": "onion",
        "sweet corn": "corn",
        "extra-virgin olive oil": "olive oil",
        "heavy whipping cream": "heavy cream",
        "yoghurt": "yogurt",
        "cilantro leaf": "cilantro",
        "coriander leaf": "cilantro",
        "flat-leaf parsley": "parsley",
        "white sugar": "sugar",
        "granulated sugar": "sugar",
        "tumeric": "turmeric",
        "beef mince": "ground beef",
        "lamb mince": "ground lamb",
        "tahini paste": "tahini",
        "dark brown sugar": "brown sugar",
        "scallion green": "scallion",
        "green onion top": "scallion",
        "jalapeno pepper": "jalapeno",
        "star anise pod": "star anise",
        "chicken breast half": "chicken breast",
        "white rice": "rice",
        "confectioners sugar": "powdered sugar",
        "confectioners' sugar": "powdered sugar",
        "chicken broth": "chicken stock",
        "low sodium chicken broth": "low sodium chicken stock",
        "beef broth": "beef stock",
        "vegetable broth": "vegetable stock",
        "chilli": "chili",
        "chile": "chili",
        "chilli powder": "chili powder",
        "chile powder": "chili powder",
        "chilli oil": "chili oil",
        "chile oil": "chili oil",
        "chilli flake": "chili flake",
        "chile flake": "chili flake",
        "dry white wine": "white wine",
    }
)

COOKING_ADJECTIVES: tuple[str, ...] = (
    "fresh",
    "dried",
    "minced",
    "diced",
    "chopped",
    "sliced",
    "grated",
    "shredded",
    "crushed",
    "ground",
    "toasted",
    "roasted",
    "raw",
    "cooked",
    "frozen",
    "canned",
    "organic",
    "boneless",
    "skinless",
    "thinly",
    "finely",
    "roughly",
    "cold",
    "hot",
    "warm",
    "large",
    "small",
    "medium",
    "whole",
    "halved",
    "quartered",
    "peeled",
    "deseeded",
    "trimmed",
    "unsalted",
    "unsweetened",
    "reduced-sodium",
    "low-sodium",
)

# Names where the leading modifier identifies a distinct product
PRESERVED_COMPOUNDS: frozenset[str] = frozenset(
    {
        "crushed tomato",
        "crushed tomatoes",
        "peeled whole tomato",
        "peeled whole tomatoes",
        "ground beef",
        "ground turkey",
        "ground pork",
        "ground lamb",
        "ground chicken",
        "whole chicken",
    }
)

# Words that belong in the unit field rather than the name
COUNT_UNIT_WORDS: tuple[str, ...] = (
    "head",
    "bunch",
    "stalk",
    "clove",
    "sprig",
    "ear",
    "strip",
    "slice",
    "piece",
    "rib",
)

GENERIC_OILS: frozenset[str] = frozenset({"oil", "cooking oil", "neutral oil"})
DEFAULT_OIL = "vegetable oil"


# =============================================================================
# Singularization Rules
# =============================================================================

_NOT_PLAIN_ES = ("ses", "ches", "shes", "kes", "ves")

# Evaluated in order, first match wins
SINGULAR_RULES: tuple[tuple[Callable[[str], bool], Callable[[str], str]], ...] = (
    (lambda s: s.endswith("leaves"), lambda s: s[:-6] + "leaf"),
    (lambda s: s.endswith("ies") and len(s) > 4, lambda s: s[:-3] + "y"),
    (
        lambda s: s.endswith("es") and not s.endswith(_NOT_PLAIN_ES) and len(s) > 4,
        lambda s: s[:-2],
    ),
    (
        lambda s: s.endswith("s") and not s.endswith(("ss", "us")) and len(s) > 3,
        lambda s: s[:-1],
    ),
)


def singularize(name: str) -> str:
    """Apply the first matching singularization rule, if any."""
    for matches, transform in SINGULAR_RULES:
        if matches(name):
            return transform(name)
    return name


# =============================================================================
# Normalization Steps
# =============================================================================


def _apply_aliases(name: str) -> str:
    for alias, canonical in INGREDIENT_ALIASES.items():
        if name == alias or name.endswith(f" {alias}"):
            name = name[: -len(alias)] + canonical
    return name


def _strip_adjectives(name: str) -> str:
    changed = True
    while changed and name not in PRESERVED_COMPOUNDS:
        changed = False
        for adjective in COOKING_ADJECTIVES:
            if name.startswith(adjective + " "):
                name = name[len(adjective) + 1 :]
                changed = True
                break
    return name


def _strip_count_unit(name: str) -> str:
    for word in COUNT_UNIT_WORDS:
        if name.endswith(f" {word}"):
            return name[: -(len(word) + 1)]
    return name


def normalize_ingredient_name(name: str) -> str:
    """
    Canonicalize an ingredient name so that lines from different recipes match.

    - Lowercase and trim
    - Resolve aliases ("kosher salt" -> "salt")
    - Strip leading cooking adjectives ("finely chopped onion" -> "onion"),
      unless the name is a preserved compound ("ground beef")
    - Singularize ("carrots" -> "carrot")
    - Resolve aliases again, now that plurals are gone
    - Move trailing count words out of the name ("garlic clove" -> "garlic")
    - Untyped oil becomes vegetable oil
    """
    original = (name or "").lower().strip()

    normalized = _apply_aliases(original)
    normalized = _strip_adjectives(normalized)
    normalized = singularize(normalized)
    normalized = _apply_aliases(normalized)
    normalized = _strip_count_unit(normalized)

    if normalized in GENERIC_OILS:
        normalized = DEFAULT_OIL

    return normalized.strip() or original
