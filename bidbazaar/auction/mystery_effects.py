"""
Mystery effect resolution.

A team holding a mystery card can spend it on exactly one effect:

- steal:  move points from a target team to the owner. Fails if the target
          is the owner or has fewer points than requested.
- deduct: remove points from a target team, floored at zero.
- double: credit the owner with a bonus amount chosen by the admin.

All checks run before the card is spent, so a rejected effect leaves every
balance and card count unchanged. The legacy steal-power command goes
through the same steal rules.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .auction_state import AuctionState
from .errors import InsufficientBalanceError, InvalidAmountError, InvalidTargetError, NoCardsAvailableError

logger = logging.getLogger(__name__)


class EffectType(str, Enum):
    STEAL = 'steal'
    DEDUCT = 'deduct'
    DOUBLE = 'double'


@dataclass
class EffectOutcome:
    """Result of a resolved mystery effect."""

    owner_team: str
    effect: EffectType
    target_team: Optional[str]
    points_requested: int
    points_moved: int            # Less than requested only for a clamped deduct

    def to_dict(self) -> dict:
        return {
            'ownerTeam': self.owner_team,
            'effect': self.effect.value,
            'targetTeam': self.target_team,
            'points': self.points_requested,
            'pointsApplied': self.points_moved
        }


class MysteryEffectResolver:
    """Spends mystery cards and applies their effects to the ledger."""

    def __init__(self, state: AuctionState):
        self.state = state

    def apply_effect(
        self,
        owner_team: str,
        effect: EffectType,
        target_team: Optional[str] = None,
        points: int = 0
    ) -> EffectOutcome:
        """
        Spend one of the owner's mystery cards on an effect.

        Args:
            owner_team: Team spending the card
            effect: Which effect to apply
            target_team: Team affected by steal/deduct (ignored for double)
            points: Positive point amount for the effect

        Returns:
            EffectOutcome with the points actually moved

        Raises:
            NotFoundError: If the owner or target does not exist
            NoCardsAvailableError: If the owner holds no mystery cards
            InvalidTargetError: If steal/deduct has no target, or steal
                targets the owner
            InvalidAmountError: If points is not positive
            InsufficientBalanceError: If the steal target is short of points
        """
        effect = EffectType(effect)
        ledger = self.state.ledger
        owner = ledger.get_team(owner_team)

        if owner.mystery_cards <= 0:
            raise NoCardsAvailableError(f"Team {owner_team} has no mystery cards available")

        if points <= 0:
            raise InvalidAmountError(f"Effect points must be positive: {points}")

        target = None
        if effect != EffectType.DOUBLE:
            if not target_team:
                raise InvalidTargetError(f"The {effect.value} effect needs a target team")
            target = ledger.get_team(target_team)

        if effect == EffectType.STEAL:
            if target.team_name == owner.team_name:
                raise InvalidTargetError("Cannot steal from own team")
            if target.points < points:
                raise InsufficientBalanceError(
                    f"Target team {target.team_name} does not have enough points "
                    f"({target.points} < {points})"
                )

        ledger.spend_mystery_card(owner.team_name)

        if effect == EffectType.STEAL:
            moved = ledger.debit(target.team_name, points)
            ledger.credit(owner.team_name, moved)
        elif effect == EffectType.DEDUCT:
            moved = ledger.debit(target.team_name, points, clamp=True)
        else:
            ledger.credit(owner.team_name, points)
            moved = points

        logger.info(
            f"{owner.team_name} used {effect.value}"
            f"{' on ' + target.team_name if target else ''}: "
            f"{moved}/{points} points"
        )

        return EffectOutcome(
            owner_team=owner.team_name,
            effect=effect,
            target_team=target.team_name if target else None,
            points_requested=points,
            points_moved=moved
        )
