from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Bid:
    """An accepted bid.

    Bids are created once by the bidding engine and never changed or removed afterwards.

    Fields:
        id: (str) Unique identifier of the bid.
        auction_id: (str) The auction the bid was placed on.
        bidder_id: (str) The account that placed the bid.
        amount: (Decimal) The bid amount.
        placed_at: (datetime) When the bid was placed.
    """

    id: str
    auction_id: str
    bidder_id: str
    amount: Decimal
    placed_at: datetime

    def __str__(self) -> str:
        return f"Bid {self.id} of {self.amount} by {self.bidder_id} on {self.auction_id} at {self.placed_at.isoformat()}"


@dataclass(frozen=True)
class BidReceipt:
    """Receipt handed to the caller for an accepted bid."""

    bid_id: str
    auction_id: str
    bidder_id: str
    amount: Decimal
    placed_at: datetime

    @staticmethod
    def from_bid(bid: Bid) -> BidReceipt:
        """Returns the receipt of a committed bid."""
        return BidReceipt(
            bid_id=bid.id,
            auction_id=bid.auction_id,
            bidder_id=bid.bidder_id,
            amount=bid.amount,
            placed_at=bid.placed_at,
        )
