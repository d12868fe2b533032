from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from carbid.model import Auction, Bid


@dataclass(frozen=True)
class VersionToken:
    """Opaque token describing the state of an auction at read time.

    Only the store that issued a token interprets it.
    """

    auction_id: str
    version: int


class CommitOutcome(Enum):
    """Outcome of a conflict-guarded write."""

    COMMITTED = "committed"
    CONFLICT = "conflict"


class AuctionStore(ABC):
    """Storage of auctions and their bids.

    Expected conditions (missing auction, stale version token) are reported as return values.
    Infrastructure failures raise StoreError.
    """

    @abstractmethod
    def get_auction(self, auction_id: str) -> Auction | None:
        """Returns a recent snapshot of the auction, None if it does not exist."""

    @abstractmethod
    def get_auction_for_update(
        self, auction_id: str
    ) -> tuple[Auction, VersionToken] | None:
        """Returns a snapshot of the auction with the token guarding a subsequent write.

        Args:
            auction_id (str): The id of the auction.

        Returns:
            tuple[Auction, VersionToken] | None: The auction and its version token, None if it does not exist.
        """

    @abstractmethod
    def commit_bid(
        self,
        auction_id: str,
        token: VersionToken,
        bid: Bid,
        new_highest: Decimal,
        new_highest_bidder: str,
    ) -> CommitOutcome:
        """Atomically appends the bid and sets the highest bid of the auction.

        Either both happen or neither.

        Args:
            auction_id (str): The id of the auction.
            token (VersionToken): The token obtained with the auction the bid was validated against.
            bid (Bid): The bid to append.
            new_highest (Decimal): The new current highest bid.
            new_highest_bidder (str): The new highest bidder.

        Returns:
            CommitOutcome: CONFLICT if the auction changed (or vanished) since the token was issued.
        """

    @abstractmethod
    def add_auction(self, auction: Auction) -> None:
        """Adds a new auction.

        Raises:
            AuctionValidationError: If an auction with the same id exists.
        """

    @abstractmethod
    def save_auction(self, auction: Auction, token: VersionToken) -> CommitOutcome:
        """Writes administrative changes of the auction, guarded by the version token.

        The highest bid fields are never written by this method.

        Returns:
            CommitOutcome: CONFLICT if the auction changed (or vanished) since the token was issued.
        """

    @abstractmethod
    def delete_auction(self, auction_id: str) -> bool:
        """Deletes an auction without bids.

        Returns:
            bool: Whether an auction was deleted.

        Raises:
            AuctionHasBidsError: If the auction has bids.
        """

    @abstractmethod
    def list_auctions(self) -> list[Auction]:
        """Returns all auctions ordered by start time, then id."""

    @abstractmethod
    def get_bids(self, auction_id: str) -> list[Bid]:
        """Returns the bids of the auction in commit order."""
