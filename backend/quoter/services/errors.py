class QuoteError(ValueError):
    """Base class for pricing domain errors."""


class MarginOutOfRange(QuoteError):
    def __init__(self, margin: float):
        super().__init__(f"margin must be in [0, 100), got {margin}")
        self.margin = margin


class InvalidItem(QuoteError):
    pass


class ItemNotFound(QuoteError):
    def __init__(self, item_id: str):
        super().__init__(f"item not found: {item_id}")
        self.item_id = item_id


class CommissionOutOfRange(QuoteError):
    def __init__(self, percent: float):
        super().__init__(f"commission percent must be in [0, 100], got {percent}")
        self.percent = percent


class ScenarioUnsupported(QuoteError):
    def __init__(self, mode: str):
        super().__init__(f"generated scenarios need real-cost tracking, not available in {mode} quotes")
        self.mode = mode
