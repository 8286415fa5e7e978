"""Per-item cost and price rules shared by every quote mode.

An item is priced by area when its area spec is complete (width, height, unit and
cost per area all present); otherwise its unit price times quantity is used.
"""
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from quoter.models.quote import (
    FORMULA_MARKER,
    Category,
    ItemRole,
    LineItem,
    PriceValue,
    PricingMode,
)
from quoter.services.errors import InvalidItem, ItemNotFound
from quoter.services.expression import evaluate
from quoter.services.margin import markup
from quoter.services.units import area_in_square_feet

logger = logging.getLogger(__name__)

# checked in order, first match wins
CATEGORY_KEYWORDS = [
    (Category.print, ("impresion", "impresión", "print", "banner", "vinil", "vinyl")),
    (Category.materials, ("material", "acm", "acrilico", "acrílico", "acrylic", "perfil", "mdf")),
    (Category.labor, ("instalacion", "instalación", "install", "corte", "cutting", "armado",
                      "assembly", "soldadura", "welding", "labor")),
    (Category.transport, ("transporte", "transport", "envio", "envío", "shipping", "flete",
                          "freight", "entrega", "delivery")),
]


def suggest_category(description: str) -> Optional[Category]:
    """Best-effort category guess from free text. Advisory only: pricing never reads it."""
    text = (description or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(k in text for k in keywords):
            return category
    return None


def parse_price_input(raw: Optional[str], manual: bool = True) -> PriceValue:
    """Turn form text into a price value: empty -> absent, ``=...`` -> formula, else a number."""
    text = "" if raw is None else str(raw).strip()
    if text == "":
        return PriceValue(value=None, manual=manual)
    if text.startswith(FORMULA_MARKER):
        return PriceValue(value=None, formula=text, manual=manual)
    try:
        value = float(text)
    except ValueError:
        logger.warning("Non-numeric price input %r treated as absent", raw)
        value = None
    return PriceValue(value=value, manual=manual)


def resolve_price(price: PriceValue) -> PriceValue:
    if not price.is_formula:
        return price
    return PriceValue(value=evaluate(price.formula), formula=None, manual=price.manual)


def item_area(item: LineItem) -> Optional[float]:
    if item.area is None or not item.area.is_complete:
        return None
    if item.area.width <= 0 or item.area.height <= 0:
        logger.warning("Item %s has non-positive dimensions, ignoring area pricing", item.id)
        return None
    return area_in_square_feet(item.area.width, item.area.height, item.area.unit)


def item_cost(item: LineItem, use_real_cost: bool = False) -> float:
    if use_real_cost and item.real_cost is not None:
        return item.real_cost
    area = item_area(item)
    if area is not None:
        return area * item.area.cost_per_area * item.quantity
    return item.unit_price.amount() * item.quantity


def item_price(item: LineItem) -> float:
    if item.role == ItemRole.cost:
        return 0.0
    area = item_area(item)
    if area is not None and item.sale_rate is not None:
        if item.pricing_mode == PricingMode.flat_total:
            return item.sale_rate * item.quantity
        return item.sale_rate * area * item.quantity
    if item.sale_price is not None:
        return item.sale_price * item.quantity
    return item.unit_price.amount() * item.quantity


def switch_pricing_mode(item: LineItem, mode: PricingMode) -> LineItem:
    """Change how the sale rate is read, converting it so the item's price is unchanged."""
    mode = PricingMode(mode)
    if item.pricing_mode == mode:
        return item
    rate = item.sale_rate
    area = item_area(item)
    if rate is not None and area is not None:
        if mode == PricingMode.flat_total:
            rate = rate * area
        else:
            rate = rate / area
    return item.model_copy(update={"pricing_mode": mode, "sale_rate": rate})


def additional_sale_price(cost: float, margin: float) -> float:
    """Sale price of a print-quote extra priced by margin over its cost."""
    return markup(cost, margin)


def build_item(data: Dict[str, Any]) -> LineItem:
    data = dict(data)
    price = data.get("unit_price")
    if price is None or isinstance(price, (str, int, float)):
        data["unit_price"] = parse_price_input(price)
    try:
        item = LineItem.model_validate(data)
    except ValidationError as e:
        raise InvalidItem(str(e)) from e

    if item.quantity <= 0:
        raise InvalidItem(f"quantity must be positive, got {item.quantity}")
    if "is_print" not in data and item.category == Category.print:
        item.is_print = True
    item.unit_price = resolve_price(item.unit_price)
    return item


def find_item(items: List[LineItem], item_id: str) -> LineItem:
    for item in items:
        if item.id == item_id:
            return item
    raise ItemNotFound(item_id)


def update_item(items: List[LineItem], item_id: str, changes: Dict[str, Any]) -> List[LineItem]:
    current = find_item(items, item_id)
    changes = {k: v for k, v in changes.items() if k != "id"}
    new_mode = changes.pop("pricing_mode", None)
    if new_mode is not None and "sale_rate" in changes:
        # an explicit rate is already expressed in the new mode
        changes["pricing_mode"] = new_mode
        new_mode = None
    merged = current.model_dump()
    merged.update(changes)
    merged["id"] = item_id
    updated = build_item(merged)
    if new_mode is not None:
        updated = switch_pricing_mode(updated, new_mode)
    return [updated if i.id == item_id else i for i in items]


def remove_item(items: List[LineItem], item_id: str) -> List[LineItem]:
    find_item(items, item_id)
    return [i for i in items if i.id != item_id]
