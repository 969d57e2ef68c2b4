"""
Request and response models for the auction API.

Field names are snake_case in Python and camelCase on the wire, matching
the JSON the display and player clients already consume.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .. import config
from .mystery_effects import EffectType


class CamelModel(BaseModel):
    """Accepts both the camelCase alias and the Python field name."""

    model_config = ConfigDict(populate_by_name=True)


# ========== Teams ==========

class CreateTeamRequest(CamelModel):
    """Request body for POST /api/teams."""
    team_name: str = Field(..., alias='teamName', min_length=1, max_length=50)


class TeamResponse(CamelModel):
    team_name: str = Field(alias='teamName')
    points: int
    mystery_cards: int = Field(alias='mysteryCards')
    products_won: List[str] = Field(alias='productsWon')
    created_at: str = Field(alias='createdAt')


# ========== Products ==========

class MarkSoldRequest(CamelModel):
    """Request body for POST /api/products/{id}/sold."""
    winner_team: str = Field(..., alias='winnerTeam', min_length=1)


# ========== Countdown and display ==========

class CountdownStartRequest(CamelModel):
    """Request body for POST /api/showcase/start and /api/preview/start."""
    duration: int = Field(
        config.DEFAULT_COUNTDOWN_DURATION,
        ge=1,
        le=config.MAX_COUNTDOWN_DURATION,
        description="Countdown length in seconds"
    )


class CountdownStateResponse(CamelModel):
    kind: str
    is_active: bool = Field(alias='isActive')
    duration: int
    timer: int


class LeaderboardToggleRequest(CamelModel):
    """Request body for POST /api/display/leaderboard."""
    show: bool


# ========== Mystery effects ==========

class StealPowerRequest(CamelModel):
    """Request body for the legacy POST /api/steal-power endpoint."""
    stealing_team: str = Field(..., alias='stealingTeam')
    target_team: str = Field(..., alias='targetTeam')
    points_to_steal: int = Field(..., alias='pointsToSteal')


class MysteryEffectRequest(CamelModel):
    """Request body for POST /api/mystery-effect."""
    owner_team: str = Field(..., alias='ownerTeam')
    effect: EffectType
    target_team: Optional[str] = Field(None, alias='targetTeam')
    points: int = Field(0, description="Points to steal, deduct or grant")


class EffectResponse(CamelModel):
    owner_team: str = Field(alias='ownerTeam')
    effect: EffectType
    target_team: Optional[str] = Field(None, alias='targetTeam')
    points: int
    points_applied: int = Field(alias='pointsApplied')


# ========== Event ==========

class EventEndResponse(BaseModel):
    """Response for POST /api/event/end."""
    winner: Optional[Dict]
    teams: List[Dict] = Field(description="Teams sorted by points descending")


class MessageResponse(BaseModel):
    message: str


# ========== Admin ==========

class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(BaseModel):
    token: str
