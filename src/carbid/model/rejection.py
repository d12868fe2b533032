from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class RejectionReason(Enum):
    """Reasons a bid is not accepted."""

    NOT_FOUND = "not_found"
    AUCTION_NOT_ACTIVE = "auction_not_active"
    INVALID_AMOUNT = "invalid_amount"
    BID_TOO_LOW = "bid_too_low"
    ALREADY_HIGHEST_BIDDER = "already_highest_bidder"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class BidRejection:
    """A bid that was not accepted.

    Fields:
        reason: (RejectionReason) Why the bid was rejected.
        auction_id: (str) The auction the bid was placed on.
        minimum: (Decimal | None) The amount a bid has to exceed, set for BID_TOO_LOW.
    """

    reason: RejectionReason
    auction_id: str
    minimum: Decimal | None = None

    def is_retryable(self) -> bool:
        """Returns whether the same bid may succeed when placed again."""
        return self.reason is RejectionReason.CONFLICT

    def describe(self) -> str:
        """Returns a human readable description of the rejection."""
        match self.reason:
            case RejectionReason.NOT_FOUND:
                return f"Auction {self.auction_id} not found."
            case RejectionReason.AUCTION_NOT_ACTIVE:
                return "Auction is not active or has ended."
            case RejectionReason.INVALID_AMOUNT:
                return "Bid amount must be a positive amount with at most two decimal places."
            case RejectionReason.BID_TOO_LOW:
                return f"Bid must be higher than current highest bid ({self.minimum})."
            case RejectionReason.ALREADY_HIGHEST_BIDDER:
                return "You are already the highest bidder."
            case RejectionReason.CONFLICT:
                return "The auction changed concurrently, please try again."

    def __str__(self) -> str:
        return f"BidRejection({self.reason.value}, auction={self.auction_id}, minimum={self.minimum})"
