"""
Core data structures for auction events, teams and products.

These dataclasses represent the state of a live auction event: the
products being auctioned, the teams bidding on them, and the log entries
recorded whenever the admin changes something.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
import json


class ProductStatus(str, Enum):
    """Lifecycle status of a product."""

    PENDING = 'pending'
    CURRENT = 'current'
    SOLD = 'sold'


class ProductType(str, Enum):
    """Controls how the reward is routed when a product sells."""

    NORMAL = 'normal'
    MYSTERY = 'mystery'
    MYSTERY_CARD = 'mystery-card'


@dataclass
class Team:
    """Tracks a single team's balances."""

    team_name: str                        # Unique, case-sensitive key
    points: int = 0
    mystery_cards: int = 0
    products_won: List[str] = field(default_factory=list)  # product_ids, in win order
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'teamName': self.team_name,
            'points': self.points,
            'mysteryCards': self.mystery_cards,
            'productsWon': list(self.products_won),
            'createdAt': self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Team':
        """Create Team from dictionary."""
        return cls(
            team_name=data['teamName'],
            points=data.get('points', 0),
            mystery_cards=data.get('mysteryCards', 0),
            products_won=list(data.get('productsWon', [])),
            created_at=datetime.fromisoformat(data['createdAt'])
        )


@dataclass
class Product:
    """A single item put up for auction."""

    product_id: str
    name: str
    description: str
    image_url: Optional[str]
    base_money_price: int                 # Display only
    point_value: int                      # Reward on sale
    status: ProductStatus = ProductStatus.PENDING
    product_type: ProductType = ProductType.NORMAL
    is_mystery: bool = False
    winner_team: Optional[str] = None     # Set only while status is SOLD
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_mystery_item(self) -> bool:
        """True if the product's identity is hidden until it sells."""
        return self.is_mystery or self.product_type == ProductType.MYSTERY

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.product_id,
            'name': self.name,
            'description': self.description,
            'imageUrl': self.image_url,
            'baseMoneyPrice': self.base_money_price,
            'pointValue': self.point_value,
            'status': self.status.value,
            'productType': self.product_type.value,
            'isMystery': self.is_mystery,
            'winnerTeam': self.winner_team,
            'createdAt': self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Product':
        """Create Product from dictionary."""
        return cls(
            product_id=data['id'],
            name=data['name'],
            description=data['description'],
            image_url=data.get('imageUrl'),
            base_money_price=data.get('baseMoneyPrice', 0),
            point_value=data.get('pointValue', 0),
            status=ProductStatus(data.get('status', 'pending')),
            product_type=ProductType(data.get('productType', 'normal')),
            is_mystery=data.get('isMystery', False),
            winner_team=data.get('winnerTeam'),
            created_at=datetime.fromisoformat(data['createdAt'])
        )


@dataclass
class AuctionEvent:
    """Represents a single admin action recorded in the event log."""

    sequence: int             # Position in the log, starting at 1
    event_type: str           # e.g. 'product_sold', 'effect_applied'
    details: Dict             # Event-specific payload
    timestamp: datetime       # When the action was applied

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'sequence': self.sequence,
            'event_type': self.event_type,
            'details': self.details,
            'timestamp': self.timestamp.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AuctionEvent':
        """Create AuctionEvent from dictionary (JSON deserialization)."""
        return cls(
            sequence=data['sequence'],
            event_type=data['event_type'],
            details=data.get('details', {}),
            timestamp=datetime.fromisoformat(data['timestamp'])
        )

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> 'AuctionEvent':
        """Create AuctionEvent from JSON string."""
        return cls.from_dict(json.loads(json_str))
