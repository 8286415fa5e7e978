from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from quoter.config import DEFAULT_COMMISSION_PERCENT, DEFAULT_TARGET_MARGIN


class Unit(str, Enum):
    inch = "inch"
    foot = "foot"
    centimeter = "centimeter"
    meter = "meter"


class QuoteMode(str, Enum):
    general = "general"
    print = "print"
    combined = "combined"


class ItemRole(str, Enum):
    sale = "sale"
    cost = "cost"


class PricingMode(str, Enum):
    per_area = "per_area"
    flat_total = "flat_total"


class Category(str, Enum):
    print = "print"
    materials = "materials"
    labor = "labor"
    transport = "transport"
    services = "services"
    other = "other"


FORMULA_MARKER = "="


class PriceValue(BaseModel):
    """A price field: a literal amount, an unresolved ``=`` formula, or absent.

    ``manual`` marks a value the user pinned; automatic recomputation must not
    overwrite it.
    """

    value: Optional[float] = None
    formula: Optional[str] = None
    manual: bool = False

    @property
    def is_formula(self) -> bool:
        return self.formula is not None

    @property
    def is_absent(self) -> bool:
        return self.value is None and self.formula is None

    def amount(self) -> float:
        return self.value if self.value is not None else 0.0


class AreaSpec(BaseModel):
    width: Optional[float] = None
    height: Optional[float] = None
    unit: Unit = Unit.inch
    cost_per_area: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return None not in (self.width, self.height, self.cost_per_area)


def _new_id() -> str:
    return uuid4().hex


class LineItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    description: str = ""
    quantity: int = 1
    unit_price: PriceValue = Field(default_factory=PriceValue)
    area: Optional[AreaSpec] = None
    # per-area sale rate, or the per-unit total when pricing_mode is flat_total
    sale_rate: Optional[float] = None
    pricing_mode: PricingMode = PricingMode.per_area
    is_print: bool = False
    category: Optional[Category] = None
    role: Optional[ItemRole] = None
    real_cost: Optional[float] = None
    # print quotes: additional item absorbed into the base price
    included: bool = False
    sale_price: Optional[float] = None


class Quote(BaseModel):
    id: Optional[str] = None
    mode: QuoteMode = QuoteMode.general
    name: str = ""
    client: Optional[str] = None
    items: List[LineItem] = Field(default_factory=list)
    target_margin: float = DEFAULT_TARGET_MARGIN
    commission_percent: float = DEFAULT_COMMISSION_PERCENT
    final_price: PriceValue = Field(default_factory=PriceValue)
    note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuoteTotals(BaseModel):
    cost_total: float = 0.0
    cost_total_by_role: Dict[str, float] = Field(default_factory=dict)
    real_cost_total: float = 0.0
    sale_total: float = 0.0
    print_sale_total: float = 0.0
    non_print_sale_total: float = 0.0
    non_print_cost_total: float = 0.0
    included_cost_total: float = 0.0
    cost_by_category: Dict[str, float] = Field(default_factory=dict)


class QuoteSummary(BaseModel):
    """Read-only snapshot consumed by exporters and the UI."""

    quote_id: Optional[str]
    mode: QuoteMode
    project_name: str
    client_name: Optional[str]
    note: Optional[str]
    items: List[LineItem]
    totals: QuoteTotals
    cost_total: float
    sale_total: float
    suggested_price: float
    final_price: float
    final_price_manual: bool
    margin_percent: float
    realized_margin_percent: float
    margin_rating: str
    commission_percent: float
    commission: float
    net_profit: float
    real_cost_total: float
    real_net_profit: float
    budget_difference: float


class SaveResult(BaseModel):
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None
