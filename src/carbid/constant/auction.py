from enum import Enum


class AuctionStatus(Enum):
    """Auction states.

    Pending, active and ended are derived from the bidding window.
    Cancelled is a manual override and terminal.
    """

    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"
    CANCELLED = "cancelled"


status2description: dict[AuctionStatus, str] = {
    AuctionStatus.PENDING: "Auction in preparation",
    AuctionStatus.ACTIVE: "Auction is running and accepting bids",
    AuctionStatus.ENDED: "Auction has ended, no more bids accepted",
    AuctionStatus.CANCELLED: "Auction has been cancelled",
}
