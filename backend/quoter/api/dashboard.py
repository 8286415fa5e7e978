import logging
from typing import Dict

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import func, select

from quoter.db.session import get_session
from quoter.models.record import QuoteRecord

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/summary")
def summary():
    session = get_session()
    try:
        total = int(session.exec(select(func.count()).select_from(QuoteRecord)).one() or 0)
        rows = session.exec(select(QuoteRecord.mode, QuoteRecord.final_price, QuoteRecord.cost_total)).all()

        by_mode: Dict[str, int] = {}
        quoted = 0.0
        cost = 0.0
        for mode, final_price, cost_total in rows:
            by_mode[mode] = by_mode.get(mode, 0) + 1
            quoted += final_price or 0
            cost += cost_total or 0

        return {
            "total_quotes": total,
            "by_mode": by_mode,
            "quoted_total": quoted,
            "cost_total": cost,
            "gross_profit": quoted - cost,
        }
    except SQLAlchemyError as e:
        logger.exception("Failed to compute summary: %s", e)
        raise HTTPException(status_code=500, detail="Failed to compute dashboard summary")
    finally:
        session.close()
