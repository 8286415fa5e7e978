import logging

from quoter.models.quote import Quote, QuoteSummary
from quoter.services import commission as calc
from quoter.services.reconciler import reconcile, suggested_price

logger = logging.getLogger(__name__)


class PriceEngine:
    """Derives every figure shown or exported for a quote in one call."""

    def summarize(self, quote: Quote) -> QuoteSummary:
        q, totals = reconcile(quote)

        suggested = suggested_price(q, totals)
        # an empty final price falls back to the item sale total
        final = q.final_price.value if q.final_price.value is not None else totals.sale_total

        commission_amount = calc.commission(final, q.commission_percent)
        realized = calc.realized_margin(final, totals.cost_total)

        summary = QuoteSummary(
            quote_id=q.id,
            mode=q.mode,
            project_name=q.name,
            client_name=q.client,
            note=q.note,
            items=q.items,
            totals=totals,
            cost_total=totals.cost_total,
            sale_total=totals.sale_total,
            suggested_price=suggested,
            final_price=final,
            final_price_manual=q.final_price.manual,
            margin_percent=q.target_margin,
            realized_margin_percent=realized,
            margin_rating=calc.margin_rating(realized),
            commission_percent=q.commission_percent,
            commission=commission_amount,
            net_profit=calc.net_profit(final, totals.cost_total, commission_amount),
            real_cost_total=totals.real_cost_total,
            real_net_profit=calc.real_net_profit(final, totals.real_cost_total, commission_amount),
            budget_difference=calc.budget_difference(totals.real_cost_total, totals.cost_total),
        )
        logger.debug("Summarized quote id=%s final_price=%s cost_total=%s", q.id, final, totals.cost_total)
        return summary
