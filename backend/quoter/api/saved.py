import logging

from fastapi import APIRouter, HTTPException

from quoter.api.quotes import draft_response
from quoter.api.store import drafts
from quoter.services.repository import QuoteRepository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
def list_saved():
    quotes = QuoteRepository().list_all()
    return [
        {
            "id": q.id,
            "mode": q.mode.value,
            "name": q.name,
            "client": q.client,
            "final_price": q.final_price.value,
            "created_at": q.created_at.isoformat() if q.created_at else None,
        }
        for q in quotes
    ]


@router.post("/{quote_id}/open")
def open_saved(quote_id: str):
    """Load a saved quote into a new draft for editing."""
    quote = QuoteRepository().load_by_id(quote_id)
    if quote is None:
        raise HTTPException(status_code=404, detail="quote not found")
    draft_id = drafts.create(quote)
    logger.info("Opened saved quote id=%s as draft %s", quote_id, draft_id)
    return draft_response(draft_id, status_code=201)


@router.delete("/{quote_id}")
def delete_saved(quote_id: str):
    if not QuoteRepository().delete_by_id(quote_id):
        raise HTTPException(status_code=404, detail="quote not found")
    return {"ok": True}
