from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from pydantic import BaseModel, Field

from quoter.models.quote import LineItem, PriceValue, Quote, QuoteMode
from quoter.services import commission as calc
from quoter.services.errors import ScenarioUnsupported
from quoter.services.line_items import item_cost
from quoter.services.modes import policy_for
from quoter.services.reconciler import recompute_quote

OPTIMISTIC_MARGIN_STEP = 10.0
OPTIMISTIC_MARGIN_CAP = 80.0
OPTIMISTIC_PRICE_FACTOR = 1.1
PESSIMISTIC_COST_FACTOR = 1.1


class Scenario(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str
    description: str = ""
    mode: QuoteMode = QuoteMode.general
    items: List[LineItem] = Field(default_factory=list)
    target_margin: float
    commission_percent: float
    final_price: PriceValue = Field(default_factory=PriceValue)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScenarioMetrics(BaseModel):
    scenario_id: str
    name: str
    cost_total: float
    final_price: float
    commission: float
    profit: float
    margin: float


def snapshot(quote: Quote, name: str, description: str = "") -> Scenario:
    q = recompute_quote(quote)
    return Scenario(
        name=name,
        description=description,
        mode=q.mode,
        items=q.items,
        target_margin=q.target_margin,
        commission_percent=q.commission_percent,
        final_price=q.final_price,
    )


def scenario_metrics(scenario: Scenario) -> ScenarioMetrics:
    # real costs count only where the quote mode tracks them
    use_real = policy_for(scenario.mode).supports_real_cost
    cost_total = sum(item_cost(i, use_real_cost=use_real) for i in scenario.items)
    final = scenario.final_price.amount()
    commission_amount = calc.commission(final, scenario.commission_percent)
    return ScenarioMetrics(
        scenario_id=scenario.id,
        name=scenario.name,
        cost_total=cost_total,
        final_price=final,
        commission=commission_amount,
        profit=calc.net_profit(final, cost_total, commission_amount),
        margin=calc.realized_margin(final, cost_total),
    )


def generate_scenarios(quote: Quote) -> List[Scenario]:
    if not policy_for(quote.mode).supports_real_cost:
        raise ScenarioUnsupported(quote.mode.value)
    q = recompute_quote(quote)
    base = snapshot(q, "Current")

    optimistic = base.model_copy(deep=True, update={
        "id": uuid4().hex,
        "name": "Optimistic",
        "description": f"Margin raised by {OPTIMISTIC_MARGIN_STEP:g} points",
        "target_margin": min(q.target_margin + OPTIMISTIC_MARGIN_STEP, OPTIMISTIC_MARGIN_CAP),
        "final_price": PriceValue(value=q.final_price.amount() * OPTIMISTIC_PRICE_FACTOR),
    })

    pessimistic_items = [
        i.model_copy(update={
            "real_cost": (i.real_cost if i.real_cost is not None else item_cost(i)) * PESSIMISTIC_COST_FACTOR,
        })
        for i in q.items
    ]
    pessimistic = base.model_copy(deep=True, update={
        "id": uuid4().hex,
        "name": "Pessimistic",
        "description": "Costs increased by 10%",
        "items": pessimistic_items,
    })

    no_commission = base.model_copy(deep=True, update={
        "id": uuid4().hex,
        "name": "No commission",
        "description": "Scenario without commission",
        "commission_percent": 0.0,
    })
    return [optimistic, pessimistic, no_commission]


def apply_scenario(quote: Quote, scenario: Scenario) -> Quote:
    q = quote.model_copy(deep=True)
    q.items = [i.model_copy(deep=True) for i in scenario.items]
    q.target_margin = scenario.target_margin
    q.commission_percent = scenario.commission_percent
    q.final_price = scenario.final_price.model_copy()
    return recompute_quote(q)
