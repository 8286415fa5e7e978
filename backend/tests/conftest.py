"""
conftest.py: shared pytest fixtures for the quoter test suite.

Engine tests are pure and need no fixtures beyond the sample items below.
Repository and API tests run against an in-memory SQLite engine that is
created fresh for every test.
"""

import pytest
from sqlmodel import Session

from quoter.db.session import init_db, make_engine, set_engine
from quoter.models.quote import (
    AreaSpec,
    Category,
    ItemRole,
    LineItem,
    PriceValue,
    PricingMode,
    Quote,
    QuoteMode,
    Unit,
)


# ---------------------------------------------------------------------------
# Item factories
# ---------------------------------------------------------------------------

def flat_item(price, quantity=1, **kwargs) -> LineItem:
    return LineItem(
        description=kwargs.pop("description", "flat item"),
        quantity=quantity,
        unit_price=PriceValue(value=price),
        **kwargs,
    )


def area_item(width, height, cost_per_area, quantity=1, unit=Unit.foot, **kwargs) -> LineItem:
    return LineItem(
        description=kwargs.pop("description", "area item"),
        quantity=quantity,
        area=AreaSpec(width=width, height=height, unit=unit, cost_per_area=cost_per_area),
        **kwargs,
    )


@pytest.fixture
def banner():
    """2 banners of 10 x 5 ft (50 sq ft each) at 3/sq ft cost, 5/sq ft sale."""
    return area_item(10, 5, 3.0, quantity=2, sale_rate=5.0, is_print=True, category=Category.print)


@pytest.fixture
def general_quote(banner):
    """General quote: one print banner plus 100 of non-print materials, 40% margin, 10% commission."""
    return Quote(
        mode=QuoteMode.general,
        name="Storefront",
        client="ACME",
        items=[banner, flat_item(100.0, description="ACM panel", category=Category.materials)],
        target_margin=40.0,
        commission_percent=10.0,
    )


@pytest.fixture
def combined_quote():
    """Combined quote: a 100 sale item and a 50 cost-role item, 40% margin."""
    return Quote(
        mode=QuoteMode.combined,
        items=[
            flat_item(100.0, role=ItemRole.sale, description="sign assembly"),
            flat_item(50.0, role=ItemRole.cost, description="transport"),
        ],
        target_margin=40.0,
        commission_percent=10.0,
    )


@pytest.fixture
def print_quote():
    """Print quote: 10 prints of 24 x 36 in (6 sq ft) plus one included and one billed extra."""
    return Quote(
        mode=QuoteMode.print,
        items=[
            area_item(24, 36, 2.0, quantity=10, unit=Unit.inch, sale_rate=5.0, is_print=True),
            flat_item(20.0, description="lamination", included=True),
            flat_item(30.0, description="delivery", sale_price=50.0),
        ],
        commission_percent=10.0,
    )


@pytest.fixture
def flat_total_item():
    return area_item(10, 5, 3.0, quantity=2, sale_rate=250.0, pricing_mode=PricingMode.flat_total, is_print=True)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_engine():
    engine = make_engine("sqlite://", echo=False)
    init_db(engine)
    set_engine(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(memory_engine):
    return lambda: Session(memory_engine)


@pytest.fixture
def client(memory_engine):
    from fastapi.testclient import TestClient

    from quoter.api.store import drafts
    from quoter.main import app

    with TestClient(app) as c:
        yield c
    drafts.clear()
