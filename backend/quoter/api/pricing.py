import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field

from quoter.api.quotes import apply_change
from quoter.api.store import drafts
from quoter.models.quote import Unit
from quoter.services import reconciler
from quoter.services.errors import QuoteError
from quoter.services.export import export_filename, export_json
from quoter.services.expression import evaluate
from quoter.services.line_items import additional_sale_price, suggest_category
from quoter.services.pricing import PriceEngine
from quoter.services.scenarios import apply_scenario, generate_scenarios, scenario_metrics, snapshot
from quoter.services.units import area_in_square_feet, rate_from_total

logger = logging.getLogger(__name__)

# draft-bound pricing, mounted under /quotes
router = APIRouter()
# stateless helpers for the item form, mounted under /pricing
tools = APIRouter()


class MarginRequest(BaseModel):
    margin: float


class CommissionRequest(BaseModel):
    percent: float


class FinalPriceRequest(BaseModel):
    # raw field text: a number, an "=formula", or "" to clear
    value: Optional[str] = ""


class ScenarioCreate(BaseModel):
    name: str
    description: str = ""


class ExpressionRequest(BaseModel):
    expression: str


class AreaRequest(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)
    unit: Unit = Unit.inch
    quantity: int = Field(1, gt=0)
    total: Optional[float] = None


class CategorizeRequest(BaseModel):
    description: str


class MarkupRequest(BaseModel):
    cost: float = Field(..., ge=0)
    margin: float


@router.put("/{draft_id}/margin")
def set_margin(draft_id: str, req: MarginRequest):
    return apply_change(draft_id, reconciler.set_target_margin, req.margin)


@router.put("/{draft_id}/commission")
def set_commission(draft_id: str, req: CommissionRequest):
    return apply_change(draft_id, reconciler.set_commission_percent, req.percent)


@router.put("/{draft_id}/final-price")
def set_final_price(draft_id: str, req: FinalPriceRequest):
    return apply_change(draft_id, reconciler.set_final_price, req.value)


@router.put("/{draft_id}/final-margin")
def set_final_margin(draft_id: str, req: MarginRequest):
    return apply_change(draft_id, reconciler.set_final_margin, req.margin)


@router.delete("/{draft_id}/final-price")
def reset_final_price(draft_id: str):
    return apply_change(draft_id, reconciler.reset_final_price)


@router.get("/{draft_id}/summary")
def summary(draft_id: str):
    return PriceEngine().summarize(drafts.get(draft_id)).model_dump(mode="json")


@router.get("/{draft_id}/export")
def export(draft_id: str):
    s = PriceEngine().summarize(drafts.get(draft_id))
    return Response(
        content=export_json(s),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(s)}"'},
    )


@router.get("/{draft_id}/scenarios")
def list_scenarios(draft_id: str):
    return [
        {"scenario": s.model_dump(mode="json"), "metrics": scenario_metrics(s).model_dump()}
        for s in drafts.scenarios(draft_id)
    ]


@router.post("/{draft_id}/scenarios", status_code=201)
def create_scenario(draft_id: str, req: ScenarioCreate):
    try:
        s = snapshot(drafts.get(draft_id), req.name, req.description)
    except QuoteError as e:
        raise HTTPException(status_code=422, detail=str(e))
    drafts.add_scenarios(draft_id, [s])
    return {"scenario": s.model_dump(mode="json"), "metrics": scenario_metrics(s).model_dump()}


@router.post("/{draft_id}/scenarios/generate", status_code=201)
def generate(draft_id: str):
    try:
        generated = generate_scenarios(drafts.get(draft_id))
    except QuoteError as e:
        raise HTTPException(status_code=422, detail=str(e))
    drafts.add_scenarios(draft_id, generated)
    return [{"scenario": s.model_dump(mode="json"), "metrics": scenario_metrics(s).model_dump()} for s in generated]


@router.post("/{draft_id}/scenarios/{scenario_id}/apply")
def apply(draft_id: str, scenario_id: str):
    scenario = drafts.find_scenario(draft_id, scenario_id)
    if scenario is None:
        raise HTTPException(status_code=404, detail="scenario not found")
    return apply_change(draft_id, apply_scenario, scenario)


@router.delete("/{draft_id}/scenarios/{scenario_id}")
def delete_scenario(draft_id: str, scenario_id: str):
    if not drafts.remove_scenario(draft_id, scenario_id):
        raise HTTPException(status_code=404, detail="scenario not found")
    return {"ok": True}


@tools.post("/evaluate")
def evaluate_expression(req: ExpressionRequest):
    return {"expression": req.expression, "value": evaluate(req.expression)}


@tools.post("/area")
def area(req: AreaRequest):
    sq_ft = area_in_square_feet(req.width, req.height, req.unit)
    result = {"area_sq_ft": sq_ft, "quantity": req.quantity}
    if req.total is not None:
        result["rate_per_sq_ft"] = rate_from_total(req.total, sq_ft, req.quantity)
    return result


@tools.post("/categorize")
def categorize(req: CategorizeRequest):
    category = suggest_category(req.description)
    return {"category": category.value if category else None, "advisory": True}


@tools.post("/markup")
def markup_price(req: MarkupRequest):
    try:
        price = additional_sale_price(req.cost, req.margin)
    except QuoteError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"cost": req.cost, "margin": req.margin, "sale_price": price}
