from dataclasses import dataclass
from typing import Dict

from quoter.models.quote import ItemRole, LineItem, QuoteMode


@dataclass(frozen=True)
class ModePolicy:
    """What distinguishes one quoting mode from another.

    has_roles: items carry a sale/cost role; cost-role items never add revenue.
    supports_included: extras can be absorbed into the base price (cost only).
    supports_real_cost: real-cost overrides feed the actual-cost figures.
    margin_driven: suggested price marks up non-print cost by the target margin;
        otherwise it is the plain sum of item prices.
    reverse_margin: a manually entered final price rewrites the target margin.
    """

    mode: QuoteMode
    has_roles: bool = False
    supports_included: bool = False
    supports_real_cost: bool = True
    margin_driven: bool = True
    reverse_margin: bool = True

    def counts_as_sale(self, item: LineItem) -> bool:
        if self.has_roles and item.role == ItemRole.cost:
            return False
        if self.supports_included and item.included:
            return False
        return True


POLICIES: Dict[QuoteMode, ModePolicy] = {
    QuoteMode.general: ModePolicy(QuoteMode.general),
    QuoteMode.print: ModePolicy(QuoteMode.print, supports_included=True, margin_driven=False),
    QuoteMode.combined: ModePolicy(QuoteMode.combined, has_roles=True, supports_real_cost=False,
                                     reverse_margin=False),
}


def policy_for(mode: QuoteMode) -> ModePolicy:
    return POLICIES[QuoteMode(mode)]
