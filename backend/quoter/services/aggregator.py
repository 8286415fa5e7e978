from typing import Iterable

from quoter.models.quote import ItemRole, LineItem, QuoteTotals
from quoter.services.line_items import item_cost, item_price
from quoter.services.modes import ModePolicy

UNCATEGORIZED = "uncategorized"


def aggregate(items: Iterable[LineItem], policy: ModePolicy) -> QuoteTotals:
    totals = QuoteTotals()
    if policy.has_roles:
        totals.cost_total_by_role = {ItemRole.sale.value: 0.0, ItemRole.cost.value: 0.0}

    for item in items:
        cost = item_cost(item)
        totals.cost_total += cost
        totals.real_cost_total += item_cost(item, use_real_cost=policy.supports_real_cost)

        category = item.category.value if item.category else UNCATEGORIZED
        totals.cost_by_category[category] = totals.cost_by_category.get(category, 0.0) + cost

        if policy.has_roles:
            role = (item.role or ItemRole.sale).value
            totals.cost_total_by_role[role] += cost

        if policy.supports_included and item.included:
            totals.included_cost_total += cost

        if not policy.counts_as_sale(item):
            continue

        price = item_price(item)
        totals.sale_total += price
        if item.is_print:
            totals.print_sale_total += price
        else:
            totals.non_print_sale_total += price
            totals.non_print_cost_total += cost

    return totals
