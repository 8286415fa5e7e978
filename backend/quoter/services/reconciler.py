"""Keeps suggested price, target margin and the final price consistent.

Every mutation goes through one of the setters below, each of which returns a
new quote with items, totals and final price already reconciled. Callers never
read derived values from a partially updated quote.
"""
import logging
from typing import Optional, Tuple

from quoter.models.quote import PriceValue, Quote, QuoteTotals
from quoter.services.aggregator import aggregate
from quoter.services.errors import CommissionOutOfRange
from quoter.services.line_items import parse_price_input, resolve_price
from quoter.services.margin import MAX_MARGIN, ensure_margin, margin_of, markup
from quoter.services.modes import policy_for

logger = logging.getLogger(__name__)

# highest margin a manual price may write back; rounding must stay below MAX_MARGIN
MAX_DERIVED_MARGIN = MAX_MARGIN - 0.01


def suggested_price(quote: Quote, totals: Optional[QuoteTotals] = None) -> float:
    policy = policy_for(quote.mode)
    if totals is None:
        totals = aggregate(quote.items, policy)
    if not policy.margin_driven:
        # print quotes: print items at their own price plus non-included extras
        return totals.sale_total
    return markup(totals.non_print_cost_total, quote.target_margin) + totals.print_sale_total


def reconcile(quote: Quote) -> Tuple[Quote, QuoteTotals]:
    q = quote.model_copy(deep=True)
    q.items = [i.model_copy(update={"unit_price": resolve_price(i.unit_price)}) for i in q.items]
    q.final_price = resolve_price(q.final_price)

    totals = aggregate(q.items, policy_for(q.mode))
    if not q.final_price.manual:
        q.final_price = PriceValue(value=suggested_price(q, totals), manual=False)
    return q, totals


def recompute_quote(quote: Quote) -> Quote:
    """Resolve formulas, re-aggregate, and refresh an automatic final price."""
    return reconcile(quote)[0]


def set_target_margin(quote: Quote, margin: float) -> Quote:
    q = quote.model_copy(deep=True)
    q.target_margin = ensure_margin(margin)
    return recompute_quote(q)


def set_commission_percent(quote: Quote, percent: float) -> Quote:
    if percent is None or percent < 0 or percent > 100:
        raise CommissionOutOfRange(percent)
    q = quote.model_copy(deep=True)
    q.commission_percent = float(percent)
    return recompute_quote(q)


def _pin_final_price(quote: Quote, price: PriceValue) -> Quote:
    q = quote.model_copy(deep=True)
    q.final_price = resolve_price(price.model_copy(update={"manual": True}))
    q, totals = reconcile(q)

    value = q.final_price.value
    if policy_for(q.mode).reverse_margin and value is not None:
        if totals.cost_total > 0 and value > totals.cost_total:
            q.target_margin = min(round(margin_of(value, totals.cost_total), 2), MAX_DERIVED_MARGIN)
            logger.info("Target margin re-derived from manual price: %s%%", q.target_margin)
    return q


def set_final_price(quote: Quote, raw: Optional[str]) -> Quote:
    """Pin the final price from form input (number, ``=formula`` or empty to clear)."""
    return _pin_final_price(quote, parse_price_input(raw, manual=True))


def set_final_margin(quote: Quote, margin: float) -> Quote:
    """Pin the final price so that it earns ``margin`` percent over the full cost total."""
    margin = ensure_margin(margin)
    q, totals = reconcile(quote)
    if totals.cost_total <= 0:
        return q
    return _pin_final_price(q, PriceValue(value=markup(totals.cost_total, margin)))


def reset_final_price(quote: Quote) -> Quote:
    q = quote.model_copy(deep=True)
    q.final_price = PriceValue(manual=False)
    return recompute_quote(q)
