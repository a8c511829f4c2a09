"""Unit tests for unit normalization and conversion families."""

import pytest

from grocerylist.normalize.units import (
    UnitFamily,
    family_of,
    normalize_unit,
    to_preferred_unit,
)


class TestNormalizeUnit:
    """Tests for normalize_unit function."""

    def test_synonyms(self):
        """Test plural and long forms map to canonical units."""
        assert normalize_unit("cups") == "cup"
        assert normalize_unit("Tablespoons") == "tbsp"
        assert normalize_unit("teaspoon") == "tsp"
        assert normalize_unit("pounds") == "lb"
        assert normalize_unit("cloves") == "clove"
        assert normalize_unit("grams") == "g"

    def test_whitespace(self):
        """Test trimming before lookup."""
        assert normalize_unit("  Ounces ") == "oz"

    def test_unknown_passes_through(self):
        """Test unknown units are returned lowercased."""
        assert normalize_unit("Handful") == "handful"
        assert normalize_unit("tbsp") == "tbsp"

    def test_missing(self):
        """Test empty or missing units."""
        assert normalize_unit(None) == ""
        assert normalize_unit("") == ""


class TestFamilyOf:
    """Tests for family_of function."""

    def test_volume(self):
        """Test volume units report their factor relative to tsp."""
        assert family_of("tsp") == (UnitFamily.VOLUME, 1.0)
        assert family_of("tbsp") == (UnitFamily.VOLUME, 3.0)
        assert family_of("cup") == (UnitFamily.VOLUME, 48.0)

    def test_weight(self):
        """Test weight units report their factor relative to oz."""
        assert family_of("lb") == (UnitFamily.WEIGHT, 16.0)
        family, factor = family_of("g")
        assert family is UnitFamily.WEIGHT
        assert factor == pytest.approx(1 / 28.35)

    def test_no_family(self):
        """Test counts and unknown units belong to no family."""
        assert family_of("clove") is None
        assert family_of("can") is None
        assert family_of("ml") is None
        assert family_of("") is None

    def test_base_units(self):
        """Test family base units."""
        assert UnitFamily.VOLUME.base_unit == "tsp"
        assert UnitFamily.WEIGHT.base_unit == "oz"

    def test_imperial_units_exclude_metric(self):
        """Test metric units are dropped from display candidates."""
        assert set(UnitFamily.WEIGHT.imperial_units()) == {"oz", "lb"}
        assert set(UnitFamily.VOLUME.imperial_units()) == {"tsp", "tbsp", "cup"}


class TestToPreferredUnit:
    """Tests for to_preferred_unit function."""

    def test_largest_unit_when_half_or_more(self):
        """Test 14 tbsp becomes 7/8 cup."""
        qty, unit = to_preferred_unit(42, UnitFamily.VOLUME, ["tsp", "tbsp", "cup"])
        assert unit == "cup"
        assert qty == pytest.approx(0.875)

    def test_first_unit_reaching_min_quantity(self):
        """Test 2 tbsp stays in tbsp."""
        qty, unit = to_preferred_unit(6, UnitFamily.VOLUME, ["tsp", "tbsp", "cup"])
        assert unit == "tbsp"
        assert qty == pytest.approx(2)

    def test_smallest_unit_fallback(self):
        """Test tiny amounts fall back to the smallest unit."""
        qty, unit = to_preferred_unit(0.5, UnitFamily.VOLUME, ["tsp", "tbsp", "cup"])
        assert unit == "tsp"
        assert qty == pytest.approx(0.5)

    def test_min_quantity_lowered(self):
        """Test a lower minimum accepts half a unit."""
        qty, unit = to_preferred_unit(1.5, UnitFamily.VOLUME, ["tsp", "tbsp"], min_quantity=0.5)
        assert unit == "tbsp"
        assert qty == pytest.approx(0.5)

    def test_candidate_order_irrelevant(self):
        """Test candidates are ranked by size, not input order."""
        assert to_preferred_unit(32, UnitFamily.WEIGHT, ["oz", "lb"]) == to_preferred_unit(
            32, UnitFamily.WEIGHT, ["lb", "oz"]
        )
        qty, unit = to_preferred_unit(32, UnitFamily.WEIGHT, ["oz", "lb"])
        assert (qty, unit) == (2, "lb")
