from quoter.services.errors import MarginOutOfRange

MAX_MARGIN = 100.0


def ensure_margin(margin: float) -> float:
    """Reject margins the markup formula cannot handle (m >= 100 divides by <= 0)."""
    if margin is None or margin < 0 or margin >= MAX_MARGIN:
        raise MarginOutOfRange(margin)
    return float(margin)


def markup(cost: float, margin: float) -> float:
    """Sale price that leaves ``margin`` percent of the price as profit over ``cost``."""
    return cost / (1 - ensure_margin(margin) / 100)


def margin_of(price: float, cost: float) -> float:
    return (price - cost) / price * 100 if price > 0 else 0.0
