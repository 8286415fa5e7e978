"""Persistence adapter: maps quotes to ``QuoteRecord`` rows.

Failures are logged and returned to the caller (a failed ``SaveResult``, ``None``,
an empty list or ``False``); nothing is retried here.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from quoter.db.session import get_session
from quoter.models.quote import LineItem, PriceValue, Quote, QuoteMode, SaveResult
from quoter.models.record import QuoteRecord
from quoter.services.errors import QuoteError
from quoter.services.pricing import PriceEngine

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def record_to_quote(record: QuoteRecord) -> Quote:
    # a stored price is what the customer saw; keep it pinned on reload
    return Quote(
        id=record.id,
        mode=QuoteMode(record.mode),
        name=record.name,
        client=record.client,
        note=record.note,
        items=[LineItem.model_validate(i) for i in (record.items or [])],
        target_margin=record.target_margin,
        commission_percent=record.commission_percent,
        final_price=PriceValue(value=record.final_price, manual=True),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


class QuoteRepository:
    def __init__(self, session_factory: Callable[[], Session] = get_session, engine: Optional[PriceEngine] = None):
        self.session_factory = session_factory
        self.engine = engine or PriceEngine()

    def _fill(self, record: QuoteRecord, quote: Quote) -> None:
        summary = self.engine.summarize(quote)
        record.mode = quote.mode.value
        record.name = quote.name or "Untitled quote"
        record.client = quote.client or None
        record.note = quote.note or None
        record.items = [i.model_dump(mode="json") for i in summary.items]
        record.target_margin = quote.target_margin
        record.commission_percent = quote.commission_percent
        record.final_price = summary.final_price
        # stored cost uses real costs where the mode tracks them
        record.cost_total = summary.real_cost_total
        record.updated_at = _now()

    def save(self, quote: Quote) -> SaveResult:
        session = self.session_factory()
        try:
            if quote.id:
                record = session.get(QuoteRecord, quote.id)
                if record is None:
                    logger.warning("Save requested for missing quote id=%s", quote.id)
                    return SaveResult(success=False, error=f"quote not found: {quote.id}")
            else:
                record = QuoteRecord(id=uuid4().hex, mode=quote.mode.value, name="", created_at=_now())
            self._fill(record, quote)
            session.add(record)
            session.commit()
            session.refresh(record)
            logger.info("Saved quote id=%s mode=%s final_price=%s", record.id, record.mode, record.final_price)
            return SaveResult(success=True, id=record.id)
        except QuoteError as e:
            logger.warning("Refused to save quote id=%s: %s", quote.id, e)
            return SaveResult(success=False, error=str(e))
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Failed to save quote id=%s: %s", quote.id, e)
            return SaveResult(success=False, error=f"database error: {e}")
        finally:
            session.close()

    def load_by_id(self, quote_id: str) -> Optional[Quote]:
        session = self.session_factory()
        try:
            record = session.get(QuoteRecord, quote_id)
            if record is None:
                return None
            return record_to_quote(record)
        except (SQLAlchemyError, ValidationError) as e:
            logger.exception("Failed to load quote id=%s: %s", quote_id, e)
            return None
        finally:
            session.close()

    def list_all(self) -> List[Quote]:
        session = self.session_factory()
        try:
            rows = session.exec(select(QuoteRecord).order_by(QuoteRecord.created_at.desc())).all()
            return [record_to_quote(r) for r in rows]
        except (SQLAlchemyError, ValidationError) as e:
            logger.exception("Failed to list quotes: %s", e)
            return []
        finally:
            session.close()

    def delete_by_id(self, quote_id: str) -> bool:
        session = self.session_factory()
        try:
            record = session.get(QuoteRecord, quote_id)
            if record is None:
                return False
            session.delete(record)
            session.commit()
            logger.info("Deleted quote id=%s", quote_id)
            return True
        except SQLAlchemyError as e:
            session.rollback()
            logger.exception("Failed to delete quote id=%s: %s", quote_id, e)
            return False
        finally:
            session.close()
