"""
Auction state machine: pending -> current -> sold.

The AuctionStateMachine is responsible for:
- Keeping at most one product current at any time
- Settling a sale: marking the product sold and routing the reward
  (points or a mystery card) to the winning team
- Reporting whether a sale revealed a mystery product

It only mutates AuctionState. Broadcasting the result is the caller's job.
"""

import logging
from dataclasses import dataclass

from .auction_event import Product, ProductStatus, ProductType, Team
from .auction_state import AuctionState

logger = logging.getLogger(__name__)


@dataclass
class SaleOutcome:
    """What happened when a product was sold."""

    product: Product
    team: Team
    points_awarded: int = 0
    mystery_card_awarded: bool = False
    mystery_revealed: bool = False

    def to_dict(self) -> dict:
        return {
            'product': self.product.to_dict(),
            'winnerTeam': self.team.team_name,
            'pointsAwarded': self.points_awarded,
            'mysteryCardAwarded': self.mystery_card_awarded,
            'mysteryRevealed': self.mystery_revealed
        }


class AuctionStateMachine:
    """Applies lifecycle transitions to the products of an AuctionState."""

    def __init__(self, state: AuctionState):
        self.state = state

    def set_current(self, product_id: str) -> Product:
        """
        Open a product for bidding.

        Every product, sold ones included, is reset to pending first, so the
        catalog always ends with exactly one current product. A sold product
        reset this way loses its winner; the points and won-list entry
        already awarded stay with the team.

        Args:
            product_id: Product to make current

        Returns:
            The now-current Product

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.state.catalog.get_product(product_id)

        for other in self.state.catalog.products.values():
            if other.status == ProductStatus.SOLD:
                logger.warning(
                    f"Resetting sold product {other.name} to pending "
                    f"(was won by {other.winner_team})"
                )
                other.winner_team = None
            other.status = ProductStatus.PENDING

        product.status = ProductStatus.CURRENT

        logger.info(f"Product live: {product.name} ({product.product_id})")
        return product

    def mark_sold(self, product_id: str, winner_team: str) -> SaleOutcome:
        """
        Close a product and award it to a team.

        Reward routing:
        1. mystery-card products grant one mystery card and no points
        2. all other products credit point_value and join the won list
        3. mystery products (flag or type) are additionally revealed

        Args:
            product_id: Product being sold
            winner_team: Name of the winning team

        Returns:
            SaleOutcome describing the reward

        Raises:
            NotFoundError: If the product or the team does not exist
        """
        product = self.state.catalog.get_product(product_id)
        team = self.state.ledger.get_team(winner_team)

        if product.status != ProductStatus.CURRENT:
            logger.warning(
                f"Selling {product.name} from status {product.status.value}, not current"
            )

        product.status = ProductStatus.SOLD
        product.winner_team = team.team_name

        outcome = SaleOutcome(product=product, team=team)

        if product.product_type == ProductType.MYSTERY_CARD:
            self.state.ledger.grant_mystery_card(team.team_name)
            outcome.mystery_card_awarded = True
        else:
            self.state.ledger.credit(team.team_name, product.point_value)
            self.state.ledger.record_win(team.team_name, product.product_id)
            outcome.points_awarded = product.point_value

        outcome.mystery_revealed = product.is_mystery_item

        logger.info(
            f"Sold {product.name} -> {team.team_name} "
            f"(+{outcome.points_awarded} points"
            f"{', +1 mystery card' if outcome.mystery_card_awarded else ''})"
        )

        return outcome
