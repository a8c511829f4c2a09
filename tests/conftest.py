"""Pytest configuration and shared fixtures."""

import pytest

from grocerylist.models import Category, RawIngredientLine

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require external services)"
    )


# =============================================================================
# Recipe Fixtures
# =============================================================================


@pytest.fixture
def recipe_names():
    """Recipe id -> display name for a three-recipe dinner club."""
    return {
        "r-soup": "Chicken Noodle Soup",
        "r-stirfry": "Garlic Broccoli Stir Fry",
        "r-roast": "Sheet Pan Potatoes",
    }


@pytest.fixture
def dinner_club_lines():
    """Ingredient lines as written across the three recipes."""
    return [
        RawIngredientLine("r-soup", "Chicken Broth", 2, "cans", Category.PANTRY),
        RawIngredientLine("r-soup", "chicken broth", 1, "cup", Category.PANTRY),
        RawIngredientLine("r-soup", "celery stalks", 2, None, Category.PRODUCE),
        RawIngredientLine("r-soup", "diced carrots", 2, None, Category.PRODUCE),
        RawIngredientLine("r-soup", "Kosher Salt", None, None, Category.SPICES),
        RawIngredientLine("r-stirfry", "garlic cloves", 4, "cloves", Category.PRODUCE),
        RawIngredientLine("r-stirfry", "broccoli", 1, "head", Category.PRODUCE),
        RawIngredientLine("r-stirfry", "Green Onions", 3, None, Category.PRODUCE),
        RawIngredientLine("r-stirfry", "sesame oil", 1, "tablespoon", Category.CONDIMENTS),
        RawIngredientLine("r-roast", "potatoes", 4, None, Category.PRODUCE),
        RawIngredientLine("r-roast", "potato", 1, "lb", Category.PRODUCE),
        RawIngredientLine("r-roast", "garlic", 3, "clove", Category.PRODUCE),
        RawIngredientLine("r-roast", "olive oil", 2, "tbsp", Category.CONDIMENTS),
        RawIngredientLine("r-roast", "sea salt", 1, "tsp", Category.SPICES),
    ]


def line(name, quantity=None, unit=None, recipe_id="r-1", category=Category.OTHER):
    """Build a raw ingredient line with test defaults."""
    return RawIngredientLine(
        recipe_id=recipe_id,
        name=name,
        quantity=quantity,
        unit=unit,
        category=category,
    )


@pytest.fixture
def make_line():
    """Factory for raw ingredient lines."""
    return line
