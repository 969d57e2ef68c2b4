"""
Standings and display snapshot calculation.

Pure functions over an AuctionState: nothing here mutates state, so the
snapshot pushed to viewers can be recomputed and tested in isolation.
"""

import logging
from typing import Dict, List, Optional

from .. import config
from .auction_event import Product, ProductStatus, Team
from .auction_state import AuctionState

logger = logging.getLogger(__name__)


def sort_teams(teams: List[Team]) -> List[Team]:
    """
    Rank teams for the leaderboard.

    Args:
        teams: Teams in creation order

    Returns:
        Teams sorted by points descending; ties keep creation order
    """
    return sorted(teams, key=lambda t: t.points, reverse=True)


def serialize_teams(state: AuctionState) -> List[Dict]:
    """Sorted team list as pushed in teamsUpdate."""
    return [team.to_dict() for team in sort_teams(list(state.ledger.teams.values()))]


def build_display_snapshot(state: AuctionState) -> Dict:
    """
    Build the read-only projection pushed to every viewer.

    Returns:
        Dict with:
        - currentProduct: the live product or None
        - allProducts: full catalog in creation order
        - teams: teams sorted by points
        - showLeaderboard: whether the display shows the leaderboard
        - countdown: current showcase/preview countdown
    """
    current = state.catalog.current_product()
    return {
        'currentProduct': current.to_dict() if current else None,
        'allProducts': [p.to_dict() for p in state.catalog.all_products()],
        'teams': serialize_teams(state),
        'showLeaderboard': state.show_leaderboard,
        'countdown': state.countdown.to_dict()
    }


def obscure_product(product: Product) -> Dict:
    """
    Serialize a product for viewers, hiding a mystery item's identity.

    Sold products are returned in full: the sale reveals them.
    """
    data = product.to_dict()
    if not product.is_mystery_item or product.status == ProductStatus.SOLD:
        return data

    data.update({
        'name': config.MYSTERY_NAME,
        'description': config.MYSTERY_DESCRIPTION,
        'imageUrl': config.MYSTERY_IMAGE_URL,
        'baseMoneyPrice': None,
        'pointValue': None
    })
    return data


def build_preview_catalog(state: AuctionState) -> List[Dict]:
    """Catalog shown during the preview phase, mystery items obscured."""
    return [obscure_product(p) for p in state.catalog.all_products()]


def determine_winner(state: AuctionState) -> Dict:
    """
    Final result of the event.

    Returns:
        Dict with:
        - winner: highest-scoring team (first created wins a tie), or None
        - teams: all teams sorted by points
    """
    teams = sort_teams(list(state.ledger.teams.values()))
    winner: Optional[Team] = teams[0] if teams else None

    if winner:
        logger.info(f"Event winner: {winner.team_name} with {winner.points} points")
    else:
        logger.warning("Event ended with no teams")

    return {
        'winner': winner.to_dict() if winner else None,
        'teams': [team.to_dict() for team in teams]
    }


def get_standings_summary(state: AuctionState) -> Dict:
    """Key metrics about the event so far."""
    products = state.catalog.all_products()
    sold = [p for p in products if p.status == ProductStatus.SOLD]
    teams = list(state.ledger.teams.values())

    return {
        'num_teams': len(teams),
        'num_products': len(products),
        'products_sold': len(sold),
        'products_remaining': len(products) - len(sold),
        'total_points_awarded': sum(t.points for t in teams),
        'mystery_cards_held': sum(t.mystery_cards for t in teams)
    }
