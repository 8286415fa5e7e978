import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from quoter.api.store import drafts
from quoter.models.quote import PricingMode, Quote, QuoteMode
from quoter.services import quotes as ops
from quoter.services.errors import ItemNotFound, QuoteError
from quoter.services.pricing import PriceEngine
from quoter.services.reconciler import recompute_quote
from quoter.services.repository import QuoteRepository

logger = logging.getLogger(__name__)
router = APIRouter()


class QuoteCreate(BaseModel):
    mode: QuoteMode = QuoteMode.general
    name: str = ""
    client: Optional[str] = None
    note: Optional[str] = None


class QuoteUpdate(BaseModel):
    name: Optional[str] = None
    client: Optional[str] = None
    note: Optional[str] = None


class PricingModeChange(BaseModel):
    pricing_mode: PricingMode


def quote_response(draft_id: str, quote: Quote, status_code: int = 200) -> JSONResponse:
    summary = PriceEngine().summarize(quote)
    return JSONResponse({"draft_id": draft_id, "summary": summary.model_dump(mode="json")}, status_code=status_code)


def draft_response(draft_id: str, status_code: int = 200) -> JSONResponse:
    return quote_response(draft_id, drafts.get(draft_id), status_code)


def apply_change(draft_id: str, change, *args) -> JSONResponse:
    """Run one edit transaction against a draft; the draft is only replaced if the result summarizes."""
    quote = drafts.get(draft_id)
    try:
        updated = change(quote, *args)
        response = quote_response(draft_id, updated)
    except ItemNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except QuoteError as e:
        logger.warning("Rejected change on draft %s: %s", draft_id, e)
        raise HTTPException(status_code=422, detail=str(e))
    drafts.put(draft_id, updated)
    return response


@router.post("")
def create_quote(req: QuoteCreate):
    quote = ops.new_quote(req.mode, req.name, req.client)
    quote.note = req.note
    draft_id = drafts.create(quote)
    logger.info("Created draft %s mode=%s", draft_id, req.mode.value)
    return draft_response(draft_id, status_code=201)


@router.get("/{draft_id}")
def get_quote(draft_id: str):
    return draft_response(draft_id)


@router.patch("/{draft_id}")
def update_quote(draft_id: str, upd: QuoteUpdate):
    changes = upd.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)
    return apply_change(draft_id, lambda q: q.model_copy(update=changes))


@router.delete("/{draft_id}")
def discard_quote(draft_id: str):
    if not drafts.discard(draft_id):
        raise HTTPException(status_code=404, detail="draft not found")
    return {"ok": True}


@router.post("/{draft_id}/duplicate")
def duplicate(draft_id: str):
    copy_id = drafts.create(ops.duplicate_quote(drafts.get(draft_id)))
    return draft_response(copy_id, status_code=201)


@router.post("/{draft_id}/save")
def save_quote(draft_id: str):
    quote = recompute_quote(drafts.get(draft_id))
    result = QuoteRepository().save(quote)
    if not result.success:
        logger.error("Saving draft %s failed: %s", draft_id, result.error)
        return JSONResponse(result.model_dump(), status_code=500)
    drafts.put(draft_id, quote.model_copy(update={"id": result.id}))
    return result.model_dump()


@router.post("/{draft_id}/items")
def add_item(draft_id: str, item: Dict[str, Any]):
    return apply_change(draft_id, ops.add_item, item)


@router.patch("/{draft_id}/items/{item_id}")
def edit_item(draft_id: str, item_id: str, changes: Dict[str, Any]):
    return apply_change(draft_id, ops.edit_item, item_id, changes)


@router.delete("/{draft_id}/items/{item_id}")
def delete_item(draft_id: str, item_id: str):
    return apply_change(draft_id, ops.delete_item, item_id)


@router.put("/{draft_id}/items/{item_id}/pricing-mode")
def change_pricing_mode(draft_id: str, item_id: str, req: PricingModeChange):
    return apply_change(draft_id, ops.change_pricing_mode, item_id, req.pricing_mode)
