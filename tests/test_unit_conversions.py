# tests/test_unit_conversions.py

import pytest

from services import unit_conversions
from services.unit_conversions import (
    UnitConversion,
    convert_unit,
    get_available_conversions,
    get_conversion_factor,
    get_unit_category,
)


def test_direct_factor():
    assert get_conversion_factor("sq ft", "sq m") == 0.092903
    assert get_conversion_factor("weeks", "days") == 7
    assert get_conversion_factor("hrs", "days") == 0.0416667


def test_same_unit():
    assert get_conversion_factor("m", "m") == 1.0


def test_reverse_lookup(monkeypatch):
    monkeypatch.setattr(unit_conversions, "UNIT_CONVERSIONS", [UnitConversion("yd", "ft", 4)])

    assert get_conversion_factor("yd", "ft") == 4
    assert get_conversion_factor("ft", "yd") == 0.25


def test_no_chained_conversion():
    assert get_conversion_factor("m", "in") is None
    assert get_conversion_factor("kg", "oz") is None
    assert get_conversion_factor("cu m", "gallons") is None


def test_convert_unit():
    assert convert_unit(10, "ft", "in") == 120
    assert convert_unit(2, "kg", "g") == 2000
    assert convert_unit(1, "kg", "liters") is None


def test_available_conversions_without_duplicates():
    targets = get_available_conversions("ft")
    assert targets == ["m", "yd", "in"]
    assert len(targets) == len(set(targets))


def test_available_conversions_unknown_unit():
    assert get_available_conversions("furlong") == []


@pytest.mark.parametrize("unit,category", [
    ("sq ft", "area"),
    ("CM", "linear"),
    ("liters", "volume"),
    ("lbs", "weight"),
    ("days", "time"),
    ("pcs", "piece"),
    ("bundle", "other"),
    (None, "other"),
])
def test_unit_category(unit, category):
    assert get_unit_category(unit) == category
