"""Status of an auction derived from its bidding window.

The bidding window is closed: bids are accepted at exactly the start and at exactly the end time.
"""

from datetime import datetime

from carbid.constant import AuctionStatus
from carbid.model import Auction


def effective_status(auction: Auction, now: datetime) -> AuctionStatus:
    """Returns the status of the auction at the given time.

    A cancelled auction stays cancelled; otherwise the status follows the window.

    Args:
        auction (Auction): The auction.
        now (datetime): The current time.

    Returns:
        AuctionStatus: The effective status.
    """
    if auction.is_cancelled():
        return AuctionStatus.CANCELLED
    if now < auction.get_start_time():
        return AuctionStatus.PENDING
    if now <= auction.get_end_time():
        return AuctionStatus.ACTIVE
    return AuctionStatus.ENDED


def is_biddable(auction: Auction, now: datetime) -> bool:
    """Returns whether the auction accepts bids at the given time."""
    return effective_status(auction, now) is AuctionStatus.ACTIVE


def refresh_status(auction: Auction, now: datetime) -> Auction:
    """Returns a copy of the auction carrying its effective status."""
    refreshed = Auction.copy(auction)
    refreshed._set_status(effective_status(auction, now))
    return refreshed
