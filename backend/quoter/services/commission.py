from quoter.services.margin import margin_of


def commission(final_price: float, commission_percent: float) -> float:
    return final_price * commission_percent / 100


def net_profit(final_price: float, cost_total: float, commission_amount: float) -> float:
    return final_price - cost_total - commission_amount


def realized_margin(final_price: float, cost_total: float) -> float:
    return margin_of(final_price, cost_total)


def real_net_profit(final_price: float, real_cost_total: float, commission_amount: float) -> float:
    return net_profit(final_price, real_cost_total, commission_amount)


def budget_difference(real_cost_total: float, cost_total: float) -> float:
    """Positive when the job cost more than estimated."""
    return real_cost_total - cost_total


def margin_rating(margin: float) -> str:
    if margin > 30:
        return "good"
    if margin > 15:
        return "fair"
    return "low"
