from typing import Dict

from quoter.models.quote import Unit

# square feet per square unit
CONVERSION_FACTORS: Dict[Unit, float] = {
    Unit.inch: 1 / 144,
    Unit.foot: 1.0,
    Unit.centimeter: 1 / 929.0304,
    Unit.meter: 10.7639,
}


def area_in_square_feet(width: float, height: float, unit: Unit) -> float:
    if width <= 0 or height <= 0:
        raise ValueError(f"dimensions must be positive, got {width}x{height}")
    return width * height * CONVERSION_FACTORS[Unit(unit)]


def rate_from_total(total: float, area: float, quantity: int) -> float:
    if area <= 0 or quantity <= 0:
        raise ValueError("area and quantity must be positive")
    return total / (area * quantity)


def total_from_rate(rate: float, area: float, quantity: int) -> float:
    return rate * area * quantity
