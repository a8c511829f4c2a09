"""Core data model for ingredient lines and consolidated grocery items."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Category(str, Enum):
    """Grocery store section an item is shelved in."""

    PRODUCE = "produce"
    MEAT_SEAFOOD = "meat_seafood"
    DAIRY = "dairy"
    PANTRY = "pantry"
    SPICES = "spices"
    FROZEN = "frozen"
    BAKERY = "bakery"
    BEVERAGES = "beverages"
    CONDIMENTS = "condiments"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Display label for the category."""
        return CATEGORY_LABELS[self]

    @classmethod
    def coerce(cls, value: "str | Category | None") -> "Category":
        """Map a raw category value onto the enum, falling back to OTHER."""
        if isinstance(value, Category):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.OTHER


CATEGORY_LABELS: MappingProxyType[Category, str] = MappingProxyType(
    {
        Category.PRODUCE: "Produce",
        Category.MEAT_SEAFOOD: "Protein",
        Category.DAIRY: "Dairy",
        Category.PANTRY: "Pantry",
        Category.SPICES: "Spices",
        Category.FROZEN: "Frozen",
        Category.BAKERY: "Bakery",
        Category.BEVERAGES: "Beverages",
        Category.CONDIMENTS: "Condiments",
        Category.OTHER: "Other",
    }
)

# Order in which categories are shown on the list (store walk order)
CATEGORY_ORDER: tuple[Category, ...] = tuple(Category)


@dataclass(frozen=True)
class RawIngredientLine:
    """One ingredient as written in one recipe."""

    recipe_id: str
    name: str
    quantity: float | None = None
    unit: str | None = None
    category: Category = Category.OTHER
    sort_order: int | None = None


@dataclass(frozen=True)
class ConsolidatedLine:
    """A grocery list entry after combining lines across recipes.

    A line without quantity and unit is a "to taste" style item.
    """

    name: str
    total_quantity: float | None = None
    unit: str | None = None
    category: Category = Category.OTHER
    source_recipes: tuple[str, ...] = field(default_factory=tuple)
