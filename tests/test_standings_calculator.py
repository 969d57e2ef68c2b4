from bidbazaar import config
from bidbazaar.auction.auction_event import ProductType
from bidbazaar.auction.standings_calculator import (
    build_display_snapshot,
    determine_winner,
    get_standings_summary,
    obscure_product,
    serialize_teams
)
from bidbazaar.auction.state_machine import AuctionStateMachine


def test_teams_sorted_by_points_with_stable_ties(state):
    for name in ("Alpha", "Beta", "Gamma"):
        state.ledger.create_team(name)
    state.ledger.credit("Beta", 10)
    state.ledger.credit("Gamma", 10)

    names = [t['teamName'] for t in serialize_teams(state)]
    assert names == ["Beta", "Gamma", "Alpha"]


def test_snapshot_contents(state, alpha_beta):
    p1, _ = alpha_beta
    AuctionStateMachine(state).set_current(p1.product_id)
    state.show_leaderboard = True

    snapshot = build_display_snapshot(state)

    assert snapshot['currentProduct']['id'] == p1.product_id
    assert len(snapshot['allProducts']) == 2
    assert [t['teamName'] for t in snapshot['teams']] == ["Alpha", "Beta"]
    assert snapshot['showLeaderboard'] is True
    assert snapshot['countdown']['isActive'] is False


def test_snapshot_without_current_product(state):
    assert build_display_snapshot(state)['currentProduct'] is None


def test_obscure_hides_unsold_mystery_item(state):
    product = state.catalog.add_product(
        "Golden Ticket", "Backstage pass", 500, 80, is_mystery=True
    )

    data = obscure_product(product)

    assert data['id'] == product.product_id
    assert data['name'] == config.MYSTERY_NAME
    assert data['pointValue'] is None
    assert data['baseMoneyPrice'] is None
    assert product.name == "Golden Ticket"


def test_obscure_keeps_normal_and_sold_items(state):
    state.ledger.create_team("Alpha")
    normal = state.catalog.add_product("Vase", "Blue", 10, 5)
    mystery = state.catalog.add_product(
        "Box", "Secret", 10, 5, product_type=ProductType.MYSTERY
    )
    AuctionStateMachine(state).mark_sold(mystery.product_id, "Alpha")

    assert obscure_product(normal)['name'] == "Vase"
    assert obscure_product(mystery)['name'] == "Box"


def test_winner_is_first_created_on_tie(state):
    state.ledger.create_team("Alpha")
    state.ledger.create_team("Beta")
    state.ledger.credit("Alpha", 20)
    state.ledger.credit("Beta", 20)

    result = determine_winner(state)

    assert result['winner']['teamName'] == "Alpha"
    assert [t['teamName'] for t in result['teams']] == ["Alpha", "Beta"]


def test_no_teams_no_winner(state):
    assert determine_winner(state) == {'winner': None, 'teams': []}


def test_standings_summary(state, alpha_beta):
    p1, p2 = alpha_beta
    machine = AuctionStateMachine(state)
    machine.mark_sold(p1.product_id, "Alpha")
    machine.mark_sold(p2.product_id, "Beta")

    summary = get_standings_summary(state)

    assert summary['num_teams'] == 2
    assert summary['products_sold'] == 2
    assert summary['products_remaining'] == 0
    assert summary['total_points_awarded'] == 50
    assert summary['mystery_cards_held'] == 1
