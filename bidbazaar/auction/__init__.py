"""
Live auction subsystem for the BidBazaar event controller.

This package holds the auction state machine, the team ledger, mystery
effect resolution, the shared countdown and the websocket broadcast hub,
plus the FastAPI server that exposes them.
"""

from .auction_event import AuctionEvent, Product, ProductStatus, ProductType, Team
from .auction_state import AuctionState, CountdownState
from .team_ledger import TeamLedger
from .product_catalog import ProductCatalog
from .state_machine import AuctionStateMachine, SaleOutcome
from .mystery_effects import EffectType, MysteryEffectResolver
from .countdown import Countdown
from .broadcast_hub import BroadcastHub
from .event_store import AuctionEventStore
from .auction_session import AuctionSession

__all__ = [
    'AuctionEvent',
    'Product',
    'ProductStatus',
    'ProductType',
    'Team',
    'AuctionState',
    'CountdownState',
    'TeamLedger',
    'ProductCatalog',
    'AuctionStateMachine',
    'SaleOutcome',
    'EffectType',
    'MysteryEffectResolver',
    'Countdown',
    'BroadcastHub',
    'AuctionEventStore',
    'AuctionSession',
]
