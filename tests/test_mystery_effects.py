import pytest

from bidbazaar.auction.errors import (
    InsufficientBalanceError,
    InvalidAmountError,
    InvalidTargetError,
    NoCardsAvailableError,
    NotFoundError
)
from bidbazaar.auction.mystery_effects import EffectType, MysteryEffectResolver


@pytest.fixture
def resolver(state):
    ledger = state.ledger
    ledger.create_team("Alpha")
    ledger.create_team("Beta")
    ledger.credit("Alpha", 50)
    ledger.credit("Beta", 10)
    ledger.grant_mystery_card("Beta")
    return MysteryEffectResolver(state)


def balances(state):
    return {
        name: (team.points, team.mystery_cards)
        for name, team in state.ledger.teams.items()
    }


def test_steal_moves_points_and_spends_card(state, resolver):
    outcome = resolver.apply_effect("Beta", EffectType.STEAL, "Alpha", 30)

    assert state.ledger.get_team("Beta").points == 40
    assert state.ledger.get_team("Alpha").points == 20
    assert state.ledger.get_team("Beta").mystery_cards == 0
    assert outcome.points_moved == 30
    assert outcome.to_dict() == {
        'ownerTeam': "Beta",
        'effect': 'steal',
        'targetTeam': "Alpha",
        'points': 30,
        'pointsApplied': 30
    }


def test_steal_is_zero_sum(state, resolver):
    before = sum(t.points for t in state.ledger.teams.values())
    resolver.apply_effect("Beta", "steal", "Alpha", 25)
    after = sum(t.points for t in state.ledger.teams.values())
    assert before == after


def test_steal_more_than_target_has_fails_without_change(state, resolver):
    before = balances(state)
    with pytest.raises(InsufficientBalanceError):
        resolver.apply_effect("Beta", EffectType.STEAL, "Alpha", 100)
    assert balances(state) == before


def test_steal_from_own_team_fails(state, resolver):
    before = balances(state)
    with pytest.raises(InvalidTargetError):
        resolver.apply_effect("Beta", EffectType.STEAL, "Beta", 5)
    assert balances(state) == before


def test_effect_without_card_fails(state, resolver):
    before = balances(state)
    with pytest.raises(NoCardsAvailableError):
        resolver.apply_effect("Alpha", EffectType.STEAL, "Beta", 5)
    assert balances(state) == before


@pytest.mark.parametrize("points", [0, -3])
def test_non_positive_points_rejected(state, resolver, points):
    before = balances(state)
    with pytest.raises(InvalidAmountError):
        resolver.apply_effect("Beta", EffectType.DOUBLE, points=points)
    assert balances(state) == before


def test_unknown_teams_rejected(state, resolver):
    before = balances(state)
    with pytest.raises(NotFoundError):
        resolver.apply_effect("Gamma", EffectType.DOUBLE, points=5)
    with pytest.raises(NotFoundError):
        resolver.apply_effect("Beta", EffectType.DEDUCT, "Gamma", 5)
    assert balances(state) == before


def test_target_required_for_steal_and_deduct(state, resolver):
    with pytest.raises(InvalidTargetError):
        resolver.apply_effect("Beta", EffectType.DEDUCT, None, 5)
    assert state.ledger.get_team("Beta").mystery_cards == 1


def test_unknown_effect_rejected(resolver):
    with pytest.raises(ValueError):
        resolver.apply_effect("Beta", "triple", points=5)


def test_deduct_floors_at_zero(state, resolver):
    outcome = resolver.apply_effect("Beta", EffectType.DEDUCT, "Alpha", 80)

    assert state.ledger.get_team("Alpha").points == 0
    assert state.ledger.get_team("Beta").points == 10
    assert outcome.points_moved == 50
    assert outcome.points_requested == 80


def test_double_credits_owner(state, resolver):
    outcome = resolver.apply_effect("Beta", EffectType.DOUBLE, "Alpha", 10)

    assert state.ledger.get_team("Beta").points == 20
    assert state.ledger.get_team("Alpha").points == 50
    assert outcome.target_team is None
