"""Tests for collateral_vault/state/positions.py: Position and the persistent PositionBook."""

import pytest

from collateral_vault.state import EMPTY_POSITION, Position, PositionBook


class TestPosition:
    def test_defaults(self):
        p = Position()
        assert p.collateral_amount == 0
        assert p.debt_amount == 0
        assert p.last_update_time == 0
        assert p.is_empty

    @pytest.mark.parametrize("kwargs", [{"collateral_amount": -1}, {"debt_amount": -1}])
    def test_negative_rejected(self, kwargs):
        with pytest.raises(ValueError):
            Position(**kwargs)

    def test_not_empty(self):
        assert not Position(debt_amount=1).is_empty
        assert not Position(collateral_amount=1).is_empty
        assert Position(last_update_time=9).is_empty


class TestPositionBook:
    def test_lookup_missing_is_zero_position(self):
        book = PositionBook()
        assert book.lookup("ghost") is EMPTY_POSITION
        assert "ghost" not in book
        assert len(book) == 0

    def test_with_position_is_persistent(self):
        book = PositionBook()
        updated = book.with_position("alice", Position(5, 1))
        assert len(book) == 0
        assert updated.lookup("alice") == Position(5, 1)
        assert updated["alice"] == Position(5, 1)

    def test_zeroed_position_kept(self):
        book = PositionBook().with_position("alice", Position(last_update_time=3))
        assert "alice" in book
        assert book.lookup("alice").last_update_time == 3

    def test_empty_account_rejected(self):
        with pytest.raises(ValueError):
            PositionBook().with_position("", Position(1))

    def test_iteration_sorted(self):
        book = PositionBook({"carol": Position(1), "alice": Position(2), "bob": Position(3)})
        assert list(book) == ["alice", "bob", "carol"]

    def test_totals(self):
        book = PositionBook({"a": Position(10, 3), "b": Position(5, 0)})
        assert book.total_collateral() == 15
        assert book.total_debt() == 3
        assert book.verify_non_negative()

    def test_is_a_mapping(self):
        book = PositionBook({"a": Position(1)})
        assert dict(book.items()) == {"a": Position(1)}
        assert book.get("missing") is None
