from typing import Any, Dict, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from quoter.models.quote import QuoteMode
from quoter.services.validation import Validator

router = APIRouter()


class ValidateRequest(BaseModel):
    item: Dict[str, Any]
    mode: Optional[QuoteMode] = None


@router.post("/item")
async def validate_item(req: ValidateRequest):
    v = Validator()
    return v.validate(req.item, req.mode.value if req.mode else None)
