"""
Error taxonomy for the auction controller.

Every rejected command raises a subclass of AuctionError carrying a
human-readable message. The API layer maps these to HTTP status codes.
"""


class AuctionError(Exception):
    """Base class for all auction rule violations."""

    status_code = 400


class NotFoundError(AuctionError):
    """Raised when a team or product does not exist."""

    status_code = 404


class DuplicateNameError(AuctionError):
    """Raised when a team name is already taken."""


class InsufficientBalanceError(AuctionError):
    """Raised when a steal exceeds the target team's balance."""


class NoCardsAvailableError(AuctionError):
    """Raised when a team without mystery cards attempts an effect."""


class InvalidTargetError(AuctionError):
    """Raised when an effect targets the wrong team (e.g. stealing from itself)."""


class InvalidAmountError(AuctionError):
    """Raised for negative point amounts or non-positive durations."""
