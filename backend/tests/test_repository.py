"""QuoteRepository against an in-memory SQLite database."""

from datetime import datetime

import pytest

from conftest import flat_item
from quoter.models.quote import Quote, QuoteMode
from quoter.models.record import QuoteRecord
from quoter.services.reconciler import recompute_quote, set_final_price
from quoter.services.repository import QuoteRepository

SUGGESTED = 100.0 / 0.6 + 500.0


@pytest.fixture
def repo(session_factory):
    return QuoteRepository(session_factory=session_factory)


class TestSave:

    def test_new_quote_gets_id(self, repo, general_quote, session_factory):
        result = repo.save(recompute_quote(general_quote))
        assert result.success is True
        assert result.id

        with session_factory() as s:
            record = s.get(QuoteRecord, result.id)
            assert record.name == "Storefront"
            assert record.mode == "general"
            assert record.final_price == pytest.approx(SUGGESTED)
            assert record.cost_total == pytest.approx(400.0)
            assert len(record.items) == 2
            assert record.created_at is not None

    def test_stores_real_cost_total(self, repo, general_quote, session_factory):
        general_quote.items[1].real_cost = 180.0
        result = repo.save(general_quote)
        with session_factory() as s:
            assert s.get(QuoteRecord, result.id).cost_total == pytest.approx(480.0)

    def test_empty_name_gets_default(self, repo, session_factory):
        result = repo.save(Quote(items=[flat_item(5.0)]))
        with session_factory() as s:
            assert s.get(QuoteRecord, result.id).name == "Untitled quote"

    def test_empty_final_price_stores_sale_total(self, repo, general_quote, session_factory):
        result = repo.save(set_final_price(general_quote, ""))
        with session_factory() as s:
            assert s.get(QuoteRecord, result.id).final_price == pytest.approx(600.0)

    def test_update_existing(self, repo, general_quote):
        first = repo.save(general_quote)
        loaded = repo.load_by_id(first.id)
        loaded.name = "Storefront v2"
        second = repo.save(loaded)
        assert second.id == first.id
        assert [q.name for q in repo.list_all()] == ["Storefront v2"]

    def test_update_missing_id_fails(self, repo, general_quote):
        general_quote.id = "nope"
        result = repo.save(general_quote)
        assert result.success is False
        assert "not found" in result.error

    def test_invalid_margin_fails_without_writing(self, repo):
        result = repo.save(Quote(items=[flat_item(5.0)], target_margin=120))
        assert result.success is False
        assert "margin" in result.error
        assert repo.list_all() == []

    def test_database_error_is_reported(self, memory_engine, repo, general_quote):
        QuoteRecord.__table__.drop(memory_engine)
        result = repo.save(general_quote)
        assert result.success is False
        assert result.error.startswith("database error")


class TestLoad:

    def test_round_trip_keeps_figures(self, repo, general_quote):
        general_quote.note = "rush job"
        general_quote.items[0].real_cost = 310.0
        saved = recompute_quote(general_quote)
        result = repo.save(saved)
        loaded = repo.load_by_id(result.id)

        assert loaded.id == result.id
        assert loaded.mode == QuoteMode.general
        assert loaded.client == "ACME"
        assert loaded.note == "rush job"
        assert loaded.target_margin == 40.0
        assert loaded.commission_percent == 10.0
        assert [i.id for i in loaded.items] == [i.id for i in saved.items]
        assert loaded.items[0].real_cost == 310.0
        assert loaded.items[0].area == saved.items[0].area

    def test_loaded_price_is_pinned(self, repo, general_quote):
        result = repo.save(set_final_price(recompute_quote(general_quote), "700"))
        loaded = repo.load_by_id(result.id)
        assert loaded.final_price.value == 700.0
        assert loaded.final_price.manual is True
        # a further edit must not replace the price the customer saw
        assert recompute_quote(loaded).final_price.value == 700.0

    def test_missing_returns_none(self, repo):
        assert repo.load_by_id("missing") is None

    def test_list_newest_first(self, repo, session_factory):
        first = repo.save(Quote(name="first", items=[flat_item(1.0)]))
        second = repo.save(Quote(name="second", items=[flat_item(1.0)]))
        with session_factory() as s:
            s.get(QuoteRecord, first.id).created_at = datetime(2024, 1, 1)
            s.get(QuoteRecord, second.id).created_at = datetime(2024, 6, 1)
            s.commit()
        assert [q.name for q in repo.list_all()] == ["second", "first"]

    def test_list_empty_on_error(self, memory_engine, session_factory):
        QuoteRecord.__table__.drop(memory_engine)
        assert QuoteRepository(session_factory=session_factory).list_all() == []


class TestDelete:

    def test_delete(self, repo, general_quote):
        result = repo.save(general_quote)
        assert repo.delete_by_id(result.id) is True
        assert repo.load_by_id(result.id) is None

    def test_delete_missing(self, repo):
        assert repo.delete_by_id("missing") is False
