"""Edit transactions on an in-memory quote.

Each function applies one change and returns the reconciled quote, so item
update, re-aggregation and price reconciliation always happen together.
"""
import logging
from typing import Any, Dict, Optional

from quoter.config import DEFAULT_COMMISSION_PERCENT, DEFAULT_TARGET_MARGIN
from quoter.models.quote import ItemRole, PricingMode, Quote, QuoteMode
from quoter.services import line_items
from quoter.services.errors import InvalidItem
from quoter.services.modes import policy_for
from quoter.services.reconciler import recompute_quote

logger = logging.getLogger(__name__)


def new_quote(mode: QuoteMode = QuoteMode.general, name: str = "", client: Optional[str] = None) -> Quote:
    return recompute_quote(Quote(
        mode=mode,
        name=name,
        client=client,
        target_margin=DEFAULT_TARGET_MARGIN,
        commission_percent=DEFAULT_COMMISSION_PERCENT,
    ))


def duplicate_quote(quote: Quote) -> Quote:
    q = quote.model_copy(deep=True)
    q.id = None
    q.name = f"{quote.name} (Copy)" if quote.name else "(Copy)"
    q.created_at = None
    q.updated_at = None
    return recompute_quote(q)


def _check_mode_fields(quote: Quote, data: Dict[str, Any]) -> Dict[str, Any]:
    policy = policy_for(quote.mode)
    data = dict(data)
    if policy.has_roles:
        data.setdefault("role", ItemRole.sale)
    elif data.get("role") is not None:
        raise InvalidItem(f"item roles are only used in combined quotes, not {quote.mode.value}")
    if data.get("included") and not policy.supports_included:
        raise InvalidItem(f"included extras are only used in print quotes, not {quote.mode.value}")
    return data


def add_item(quote: Quote, data: Dict[str, Any]) -> Quote:
    item = line_items.build_item(_check_mode_fields(quote, data))
    q = quote.model_copy(deep=True)
    q.items.append(item)
    logger.info("Added item id=%s to quote id=%s", item.id, quote.id)
    return recompute_quote(q)


def edit_item(quote: Quote, item_id: str, changes: Dict[str, Any]) -> Quote:
    changes = dict(changes)
    if "role" in changes or "included" in changes:
        _check_mode_fields(quote, {"role": changes.get("role"), "included": changes.get("included")})
    q = quote.model_copy(deep=True)
    q.items = line_items.update_item(q.items, item_id, changes)
    logger.info("Edited item id=%s on quote id=%s", item_id, quote.id)
    return recompute_quote(q)


def delete_item(quote: Quote, item_id: str) -> Quote:
    q = quote.model_copy(deep=True)
    q.items = line_items.remove_item(q.items, item_id)
    logger.info("Removed item id=%s from quote id=%s", item_id, quote.id)
    return recompute_quote(q)


def change_pricing_mode(quote: Quote, item_id: str, mode: PricingMode) -> Quote:
    return edit_item(quote, item_id, {"pricing_mode": mode})
