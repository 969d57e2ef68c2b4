import pytest

from bidbazaar.auction.errors import (
    DuplicateNameError,
    InsufficientBalanceError,
    InvalidAmountError,
    NoCardsAvailableError,
    NotFoundError
)
from bidbazaar.auction.team_ledger import TeamLedger


@pytest.fixture
def ledger():
    ledger = TeamLedger()
    ledger.create_team("Alpha")
    ledger.create_team("Beta")
    return ledger


def test_new_team_starts_empty(ledger):
    team = ledger.get_team("Alpha")
    assert team.points == 0
    assert team.mystery_cards == 0
    assert team.products_won == []


def test_duplicate_team_rejected_and_count_unchanged(ledger):
    with pytest.raises(DuplicateNameError):
        ledger.create_team("Alpha")
    assert len(ledger) == 2


def test_team_names_are_case_sensitive(ledger):
    ledger.create_team("alpha")
    assert "alpha" in ledger
    assert len(ledger) == 3


def test_blank_team_name_rejected(ledger):
    with pytest.raises(ValueError):
        ledger.create_team("   ")


def test_delete_team(ledger):
    ledger.delete_team("Beta")
    assert "Beta" not in ledger
    with pytest.raises(NotFoundError):
        ledger.delete_team("Beta")


def test_get_missing_team(ledger):
    with pytest.raises(NotFoundError):
        ledger.get_team("Gamma")


def test_credit_and_debit(ledger):
    ledger.credit("Alpha", 50)
    removed = ledger.debit("Alpha", 20)
    assert removed == 20
    assert ledger.get_team("Alpha").points == 30


def test_debit_short_balance_fails_without_change(ledger):
    ledger.credit("Alpha", 10)
    with pytest.raises(InsufficientBalanceError):
        ledger.debit("Alpha", 11)
    assert ledger.get_team("Alpha").points == 10


def test_clamped_debit_floors_at_zero(ledger):
    ledger.credit("Alpha", 10)
    removed = ledger.debit("Alpha", 25, clamp=True)
    assert removed == 10
    assert ledger.get_team("Alpha").points == 0


def test_negative_amounts_rejected(ledger):
    with pytest.raises(InvalidAmountError):
        ledger.credit("Alpha", -5)
    with pytest.raises(InvalidAmountError):
        ledger.debit("Alpha", -5)
    assert ledger.get_team("Alpha").points == 0


def test_mystery_cards(ledger):
    ledger.grant_mystery_card("Beta")
    ledger.spend_mystery_card("Beta")
    assert ledger.get_team("Beta").mystery_cards == 0

    with pytest.raises(NoCardsAvailableError):
        ledger.spend_mystery_card("Beta")
    assert ledger.get_team("Beta").mystery_cards == 0


def test_record_win_keeps_order_without_duplicates(ledger):
    ledger.record_win("Alpha", "p1")
    ledger.record_win("Alpha", "p2")
    ledger.record_win("Alpha", "p1")
    assert ledger.get_team("Alpha").products_won == ["p1", "p2"]
