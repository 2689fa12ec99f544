# services/unit_conversions.py - Conversions d'unités de mesure (UOM)

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class UnitConversion:
    from_unit: str
    to_unit: str
    factor: float


UNIT_CONVERSIONS: List[UnitConversion] = [
    # Surfaces
    UnitConversion("sq ft", "sq m", 0.092903),
    UnitConversion("sq m", "sq ft", 10.7639),
    UnitConversion("sq ft", "sq yd", 0.111111),
    UnitConversion("sq yd", "sq ft", 9),
    UnitConversion("sq ft", "sq in", 144),
    UnitConversion("sq in", "sq ft", 0.00694444),

    # Longueurs
    UnitConversion("ft", "m", 0.3048),
    UnitConversion("m", "ft", 3.28084),
    UnitConversion("ft", "yd", 0.333333),
    UnitConversion("yd", "ft", 3),
    UnitConversion("ft", "in", 12),
    UnitConversion("in", "ft", 0.0833333),
    UnitConversion("m", "cm", 100),
    UnitConversion("cm", "m", 0.01),
    UnitConversion("in", "cm", 2.54),
    UnitConversion("cm", "in", 0.393701),

    # Volumes
    UnitConversion("cu ft", "cu m", 0.0283168),
    UnitConversion("cu m", "cu ft", 35.3147),
    UnitConversion("cu ft", "cu yd", 0.037037),
    UnitConversion("cu yd", "cu ft", 27),
    UnitConversion("cu ft", "cu in", 1728),
    UnitConversion("cu in", "cu ft", 0.000578704),
    UnitConversion("cu m", "liters", 1000),
    UnitConversion("liters", "cu m", 0.001),
    UnitConversion("gallons", "liters", 3.78541),
    UnitConversion("liters", "gallons", 0.264172),

    # Poids
    UnitConversion("kg", "lbs", 2.20462),
    UnitConversion("lbs", "kg", 0.453592),
    UnitConversion("kg", "g", 1000),
    UnitConversion("g", "kg", 0.001),
    UnitConversion("lbs", "oz", 16),
    UnitConversion("oz", "lbs", 0.0625),

    # Durées
    UnitConversion("hrs", "days", 0.0416667),
    UnitConversion("days", "hrs", 24),
    UnitConversion("days", "weeks", 0.142857),
    UnitConversion("weeks", "days", 7),
    UnitConversion("weeks", "months", 0.230137),
    UnitConversion("months", "weeks", 4.34524),
]

UNIT_CATEGORIES = {
    "area": ["sq ft", "sq m", "sq yd", "sq in", "sq cm", "sq mm"],
    "linear": ["ft", "m", "yd", "in", "cm", "mm", "km", "miles"],
    "volume": ["cu ft", "cu m", "cu yd", "cu in", "liters", "gallons", "ml"],
    "weight": ["kg", "lbs", "g", "oz", "tons"],
    "time": ["hrs", "days", "weeks", "months", "years"],
    "piece": ["pcs", "pieces", "units", "items", "nos", "each"],
}


def get_conversion_factor(from_unit: str, to_unit: str) -> Optional[float]:
    """Facteur de conversion direct, ou inverse d'une conversion connue, sinon None."""
    if from_unit == to_unit:
        return 1.0

    for conv in UNIT_CONVERSIONS:
        if conv.from_unit == from_unit and conv.to_unit == to_unit:
            return conv.factor

    for conv in UNIT_CONVERSIONS:
        if conv.from_unit == to_unit and conv.to_unit == from_unit:
            return 1 / conv.factor

    return None


def convert_unit(value: float, from_unit: str, to_unit: str) -> Optional[float]:
    factor = get_conversion_factor(from_unit, to_unit)
    if factor is None:
        return None
    return value * factor


def get_available_conversions(unit: str) -> List[str]:
    """Unités atteignables depuis `unit` (sens direct et inverse, sans doublon)."""
    targets: List[str] = []
    for conv in UNIT_CONVERSIONS:
        if conv.from_unit == unit and conv.to_unit not in targets:
            targets.append(conv.to_unit)
    for conv in UNIT_CONVERSIONS:
        if conv.to_unit == unit and conv.from_unit not in targets:
            targets.append(conv.from_unit)
    return targets


def get_unit_category(unit: str) -> str:
    unit = (unit or "").lower()
    for category, units in UNIT_CATEGORIES.items():
        if unit in units:
            return category
    return "other"
