"""
The single owned state object of an auction event.

AuctionState bundles the team ledger, the product catalog, the countdown
snapshot and the leaderboard flag. It replaces process-wide globals: the
session creates one, passes it to every component, and can reset it or
checkpoint it to JSON.
"""

from dataclasses import dataclass, field
from typing import Optional
import json

from .auction_event import Product, ProductStatus, Team
from .product_catalog import ProductCatalog
from .team_ledger import TeamLedger


@dataclass
class CountdownState:
    """Snapshot of the shared showcase/preview countdown."""

    kind: str = 'showcase'     # 'showcase' or 'preview'
    is_active: bool = False
    duration: int = 0
    timer: int = 0

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'isActive': self.is_active,
            'duration': self.duration,
            'timer': self.timer
        }


@dataclass
class AuctionState:
    """Complete mutable state of one auction event."""

    ledger: TeamLedger = field(default_factory=TeamLedger)
    catalog: ProductCatalog = field(default_factory=ProductCatalog)
    countdown: CountdownState = field(default_factory=CountdownState)
    show_leaderboard: bool = False
    event_ended: bool = False

    def reset(self) -> None:
        """Drop all teams and products and return to a fresh event."""
        self.ledger = TeamLedger()
        self.catalog = ProductCatalog()
        self.countdown = CountdownState()
        self.show_leaderboard = False
        self.event_ended = False

    def to_dict(self) -> dict:
        """
        Convert to dictionary for JSON serialization.

        The countdown is not persisted: a restarted process has no ticker.
        """
        return {
            'teams': [team.to_dict() for team in self.ledger.teams.values()],
            'products': [p.to_dict() for p in self.catalog.products.values()],
            'show_leaderboard': self.show_leaderboard,
            'event_ended': self.event_ended
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AuctionState':
        """Create AuctionState from dictionary."""
        teams = [Team.from_dict(t) for t in data.get('teams', [])]
        products = [Product.from_dict(p) for p in data.get('products', [])]
        return cls(
            ledger=TeamLedger({t.team_name: t for t in teams}),
            catalog=ProductCatalog({p.product_id: p for p in products}),
            show_leaderboard=data.get('show_leaderboard', False),
            event_ended=data.get('event_ended', False)
        )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> 'AuctionState':
        return cls.from_dict(json.loads(json_str))

    def validate(self) -> None:
        """
        Check state consistency.

        Raises:
            ValueError: If more than one product is current, or a winner is
                set on a product that is not sold (or missing on one that is)
        """
        current = [p for p in self.catalog.products.values() if p.status == ProductStatus.CURRENT]
        if len(current) > 1:
            raise ValueError(
                f"{len(current)} products are current: "
                f"{', '.join(p.product_id for p in current)}"
            )

        for product in self.catalog.products.values():
            is_sold = product.status == ProductStatus.SOLD
            if is_sold != (product.winner_team is not None):
                raise ValueError(
                    f"Product {product.product_id} is {product.status.value} "
                    f"with winner {product.winner_team!r}"
                )

        for team in self.ledger.teams.values():
            if team.points < 0 or team.mystery_cards < 0:
                raise ValueError(f"Team {team.team_name} has a negative balance")
