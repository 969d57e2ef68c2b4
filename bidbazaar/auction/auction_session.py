"""
Main orchestrator for a live auction event.

The AuctionSession coordinates all components:
- Applies admin commands to the ledger, catalog and state machine
- Records every applied command in the event log
- Checkpoints the state for crash recovery
- Recomputes the display snapshot and pushes it to every viewer
- Owns the shared showcase/preview countdown

Every command runs the synchronous core to completion before the first
await, so commands are serialized on the event loop.
"""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .. import config
from .auction_event import Product, ProductType, Team
from .auction_state import AuctionState, CountdownState
from .broadcast_hub import BroadcastHub
from .countdown import Countdown, SleepFn
from .event_store import AuctionEventStore
from .mystery_effects import EffectOutcome, EffectType, MysteryEffectResolver
from .standings_calculator import (
    build_display_snapshot,
    determine_winner,
    obscure_product,
    serialize_teams,
    sort_teams
)
from .state_machine import AuctionStateMachine, SaleOutcome

logger = logging.getLogger(__name__)


class AuctionSession:
    """Owns the auction state and every component that mutates it."""

    def __init__(
        self,
        state: Optional[AuctionState] = None,
        hub: Optional[BroadcastHub] = None,
        event_store: Optional[AuctionEventStore] = None,
        checkpoint_path: Optional[Path] = None,
        results_dir: Optional[Path] = None,
        sleep: SleepFn = asyncio.sleep,
        tick_seconds: float = config.COUNTDOWN_TICK_SECONDS
    ):
        """
        Initialize the session.

        Args:
            state: Starting state (fresh if None)
            hub: Broadcast hub for viewers (new hub if None)
            event_store: Optional event log; nothing is logged if None
            checkpoint_path: Optional checkpoint file written after each command
            results_dir: Optional directory for result CSVs written at event end
            sleep: Sleep coroutine used by the countdown
            tick_seconds: Seconds between countdown ticks
        """
        self.state = state or AuctionState()
        self.hub = hub or BroadcastHub()
        self.event_store = event_store
        self.checkpoint_path = Path(checkpoint_path) if checkpoint_path else None
        self.results_dir = Path(results_dir) if results_dir else None

        self.state_machine = AuctionStateMachine(self.state)
        self.resolver = MysteryEffectResolver(self.state)
        self.countdown = Countdown(
            self.state,
            emit=self.hub.broadcast,
            sleep=sleep,
            tick_seconds=tick_seconds
        )

        self._committed = self.state.to_dict()
        self.hub.latest_snapshot = build_display_snapshot(self.state)

    # ===== Teams =====

    def list_teams(self) -> List[Team]:
        return sort_teams(list(self.state.ledger.teams.values()))

    def get_team(self, team_name: str) -> Team:
        return self.state.ledger.get_team(team_name)

    async def create_team(self, team_name: str) -> Team:
        team = self.state.ledger.create_team(team_name)
        self._commit('team_created', {'teamName': team.team_name})
        await self.publish_state()
        return team

    async def delete_team(self, team_name: str) -> Team:
        team = self.state.ledger.delete_team(team_name)
        self._commit('team_deleted', {'teamName': team.team_name, 'points': team.points})
        await self.publish_state()
        return team

    # ===== Products =====

    def list_products(self, newest_first: bool = True) -> List[Product]:
        products = self.state.catalog.all_products()
        return list(reversed(products)) if newest_first else products

    async def add_product(
        self,
        name: str,
        description: str,
        base_money_price: int,
        point_value: int,
        product_type: ProductType = ProductType.NORMAL,
        is_mystery: bool = False,
        image_url: Optional[str] = None
    ) -> Product:
        product = self.state.catalog.add_product(
            name=name,
            description=description,
            base_money_price=base_money_price,
            point_value=point_value,
            product_type=product_type,
            is_mystery=is_mystery,
            image_url=image_url
        )
        self._commit('product_added', {
            'productId': product.product_id,
            'name': product.name,
            'productType': product.product_type.value,
            'pointValue': product.point_value
        })

        await self.publish_state()
        await self._publish_products()
        return product

    async def update_product(self, product_id: str, **fields) -> Product:
        """Edit a product; fields are those of ProductCatalog.update_product."""
        product = self.state.catalog.update_product(product_id, **fields)
        self._commit('product_updated', {'productId': product_id, 'name': product.name})

        await self.publish_state()
        await self._publish_products()
        await self.hub.broadcast('productUpdated', product.to_dict())
        return product

    async def delete_product(self, product_id: str) -> Product:
        product = self.state.catalog.delete_product(product_id)
        self._commit('product_deleted', {
            'productId': product_id,
            'name': product.name,
            'status': product.status.value
        })

        await self.publish_state()
        await self._publish_products()
        return product

    # ===== Auction lifecycle =====

    async def set_current(self, product_id: str) -> Product:
        """Open a product for bidding and announce it to viewers."""
        product = self.state_machine.set_current(product_id)
        self._commit('product_live', {'productId': product_id, 'name': product.name})

        await self.publish_state()
        await self.hub.broadcast('productLive', obscure_product(product))
        return product

    async def mark_sold(self, product_id: str, winner_team: str) -> SaleOutcome:
        """
        Settle a sale and announce the result.

        Events pushed after the state update:
        - productSold for every sale
        - mysteryCardAwarded when the product was a mystery card
        - mysteryRevealed when the product was a mystery item
        """
        outcome = self.state_machine.mark_sold(product_id, winner_team)
        self._commit('product_sold', {
            'productId': product_id,
            'name': outcome.product.name,
            'winnerTeam': outcome.team.team_name,
            'pointsAwarded': outcome.points_awarded,
            'mysteryCardAwarded': outcome.mystery_card_awarded
        })

        await self.publish_state()

        product_data = outcome.product.to_dict()
        await self.hub.broadcast('productSold', {
            'product': product_data,
            'winnerTeam': outcome.team.team_name
        })
        if outcome.mystery_card_awarded:
            await self.hub.broadcast('mysteryCardAwarded', {
                'teamName': outcome.team.team_name,
                'product': product_data
            })
        if outcome.mystery_revealed:
            await self.hub.broadcast('mysteryRevealed', {
                'product': product_data,
                'winnerTeam': outcome.team.team_name
            })

        return outcome

    async def apply_mystery_effect(
        self,
        owner_team: str,
        effect: EffectType,
        target_team: Optional[str] = None,
        points: int = 0
    ) -> EffectOutcome:
        """Spend a mystery card and announce the effect."""
        outcome = self.resolver.apply_effect(owner_team, effect, target_team, points)
        self._commit('effect_applied', outcome.to_dict())

        await self.publish_state()
        await self.hub.broadcast('mysteryEffectApplied', outcome.to_dict())

        if outcome.effect == EffectType.STEAL:
            await self.hub.broadcast('pointsStolen', {
                'stealingTeam': outcome.owner_team,
                'targetTeam': outcome.target_team,
                'pointsStolen': outcome.points_moved
            })

        return outcome

    # ===== Countdown and display =====

    async def start_countdown(self, kind: str, duration: int) -> CountdownState:
        return await self.countdown.start(kind, duration)

    def countdown_state(self) -> CountdownState:
        return self.state.countdown

    async def toggle_leaderboard(self, show: bool) -> List[Dict]:
        self.state.show_leaderboard = show
        teams = serialize_teams(self.state)
        self._save_checkpoint()

        await self.hub.broadcast('leaderboardToggle', {'show': show, 'teams': teams})
        await self.publish_state()
        return teams

    def display_state(self) -> Dict:
        return build_display_snapshot(self.state)

    async def end_event(self) -> Dict:
        """
        Close the event and announce the winner.

        Returns:
            Dict with the winning team and all teams sorted by points
        """
        result = determine_winner(self.state)
        self.state.event_ended = True

        winner = result['winner']
        self._commit('event_ended', {
            'winner': winner['teamName'] if winner else None,
            'teams': len(result['teams'])
        })

        if self.results_dir is not None:
            from ..output_writer import write_results
            write_results(self.state, output_dir=str(self.results_dir))

        await self.hub.broadcast('eventEnded', result)
        return result

    # ===== State lifecycle =====

    async def reset(self) -> None:
        """Cancel the countdown and start over with an empty event."""
        await self.countdown.cancel()
        self.state.reset()
        if self.event_store is not None:
            self.event_store.clear()
        self._save_checkpoint()

        logger.warning("Auction state reset")
        await self.publish_state()

    async def shutdown(self) -> None:
        """Stop the countdown and write a final checkpoint."""
        await self.countdown.cancel()
        self._save_checkpoint()
        logger.info("Auction session shut down")

    async def publish_state(self) -> None:
        """Recompute the display snapshot and push it to every viewer."""
        await self.hub.publish_state(
            build_display_snapshot(self.state),
            serialize_teams(self.state)
        )

    async def _publish_products(self) -> None:
        await self.hub.broadcast(
            'productsUpdate',
            [p.to_dict() for p in self.state.catalog.all_products()]
        )

    def _commit(self, event_type: str, details: Dict) -> None:
        """
        Validate the state, log the command and checkpoint.

        If validation fails the state is rolled back to the last commit, so
        nothing is logged, checkpointed or broadcast for the command.
        """
        try:
            self.state.validate()
        except ValueError as e:
            logger.error(f"State validation failed after {event_type}, rolling back: {e}")
            self._rollback()
            raise

        if self.event_store is not None:
            self.event_store.append(event_type, details)

        self._save_checkpoint()

    def _rollback(self) -> None:
        restored = AuctionState.from_dict(self._committed)
        self.state.ledger = restored.ledger
        self.state.catalog = restored.catalog
        self.state.show_leaderboard = restored.show_leaderboard
        self.state.event_ended = restored.event_ended

    def _save_checkpoint(self) -> None:
        # In-memory copy for rollback, then the file when one is configured
        self._committed = self.state.to_dict()
        if self.checkpoint_path is None:
            return
        save_checkpoint(self.state, self.checkpoint_path)


def save_checkpoint(state: AuctionState, filepath: Path) -> None:
    """
    Save the auction state to JSON for crash recovery.

    Args:
        state: State to save
        filepath: Path for checkpoint file
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    checkpoint_data = {
        'state': state.to_dict(),
        'checkpoint_time': datetime.now().isoformat()
    }

    # Atomic write: write to temp file, then rename
    temp_path = filepath.with_suffix('.tmp')
    with open(temp_path, 'w', encoding='utf-8') as f:
        json.dump(checkpoint_data, f, indent=2)

    temp_path.replace(filepath)

    logger.debug(
        f"Saved checkpoint: {len(state.ledger)} teams, "
        f"{len(state.catalog)} products -> {filepath}"
    )


def load_checkpoint(filepath: Path) -> AuctionState:
    """
    Load the auction state from a JSON checkpoint.

    Args:
        filepath: Path to checkpoint file

    Returns:
        AuctionState with loaded teams and products

    Raises:
        FileNotFoundError: If checkpoint doesn't exist
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Checkpoint not found: {filepath}")

    with open(filepath, 'r', encoding='utf-8') as f:
        checkpoint_data = json.load(f)

    state = AuctionState.from_dict(checkpoint_data['state'])
    state.validate()

    logger.info(
        f"Loaded checkpoint: {len(state.ledger)} teams, "
        f"{len(state.catalog)} products <- {filepath}"
    )

    return state
