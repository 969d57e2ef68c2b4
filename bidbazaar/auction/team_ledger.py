"""
Team ledger: point balances and mystery-card counts.

Every mutation validates its inputs before touching a field, so a failed
credit or debit leaves the team exactly as it was.
"""

import logging
from typing import Dict, Optional

from .auction_event import Team
from .errors import (
    DuplicateNameError,
    InsufficientBalanceError,
    InvalidAmountError,
    NoCardsAvailableError,
    NotFoundError
)

logger = logging.getLogger(__name__)


class TeamLedger:
    """Holds every team keyed by name, in creation order."""

    def __init__(self, teams: Optional[Dict[str, Team]] = None):
        self.teams: Dict[str, Team] = teams if teams is not None else {}

    def create_team(self, team_name: str) -> Team:
        """
        Register a new team with zero points and zero mystery cards.

        Args:
            team_name: Unique, case-sensitive team name

        Returns:
            The new Team

        Raises:
            ValueError: If the name is blank
            DuplicateNameError: If a team with this name already exists
        """
        if not team_name or not team_name.strip():
            raise ValueError("Team name must not be blank")

        if team_name in self.teams:
            raise DuplicateNameError(f"Team name already exists: {team_name}")

        team = Team(team_name=team_name)
        self.teams[team_name] = team

        logger.info(f"Created team {team_name} ({len(self.teams)} teams)")
        return team

    def delete_team(self, team_name: str) -> Team:
        """Remove a team. Products it already won are left untouched."""
        team = self.get_team(team_name)
        del self.teams[team_name]

        logger.info(f"Deleted team {team_name} ({team.points} points)")
        return team

    def get_team(self, team_name: str) -> Team:
        """
        Look up a team by name.

        Raises:
            NotFoundError: If the team does not exist
        """
        team = self.teams.get(team_name)
        if team is None:
            raise NotFoundError(f"Team not found: {team_name}")
        return team

    def credit(self, team_name: str, amount: int) -> Team:
        """Add points to a team."""
        _check_amount(amount)
        team = self.get_team(team_name)
        team.points += amount

        logger.debug(f"Credited {team_name} +{amount} -> {team.points}")
        return team

    def debit(self, team_name: str, amount: int, clamp: bool = False) -> int:
        """
        Remove points from a team.

        Args:
            team_name: Team to debit
            amount: Points to remove
            clamp: If True, floor the balance at zero instead of failing

        Returns:
            Points actually removed (less than amount only when clamped)

        Raises:
            InsufficientBalanceError: If clamp is False and the balance is short
        """
        _check_amount(amount)
        team = self.get_team(team_name)

        if team.points < amount and not clamp:
            raise InsufficientBalanceError(
                f"Team {team_name} has {team.points} points, cannot remove {amount}"
            )

        removed = min(amount, team.points)
        team.points -= removed

        logger.debug(f"Debited {team_name} -{removed} -> {team.points}")
        return removed

    def grant_mystery_card(self, team_name: str) -> Team:
        team = self.get_team(team_name)
        team.mystery_cards += 1

        logger.info(f"Granted mystery card to {team_name} ({team.mystery_cards} held)")
        return team

    def spend_mystery_card(self, team_name: str) -> Team:
        """
        Consume one mystery card.

        Raises:
            NoCardsAvailableError: If the team holds no cards
        """
        team = self.get_team(team_name)
        if team.mystery_cards <= 0:
            raise NoCardsAvailableError(f"Team {team_name} has no mystery cards available")

        team.mystery_cards -= 1
        logger.info(f"{team_name} spent a mystery card ({team.mystery_cards} left)")
        return team

    def record_win(self, team_name: str, product_id: str) -> Team:
        team = self.get_team(team_name)
        if product_id not in team.products_won:
            team.products_won.append(product_id)
        return team

    def __len__(self) -> int:
        return len(self.teams)

    def __contains__(self, team_name: str) -> bool:
        return team_name in self.teams


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise InvalidAmountError(f"Point amount must not be negative: {amount}")
