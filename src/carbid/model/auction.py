from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from carbid.constant import AuctionStatus, status2description
from carbid.util.money import is_valid_amount, to_money

from .bid import Bid
from .errors import AuctionValidationError, AuctionStateError, AuctionHasBidsError


class Auction:
    """Auction class handling the data of an auction.

    This includes the vehicle, the bidding window, the starting bid and the current highest bid.
    The current highest bid and its bidder are denormalized from the bid history of the store.
    """

    def __init__(
        self,
        auction_id: str,
        vehicle_id: str,
        start_time: datetime,
        end_time: datetime,
        starting_bid: Decimal,
        created_at: datetime,
        status: AuctionStatus = AuctionStatus.PENDING,
        current_highest_bid: Decimal | None = None,
        highest_bidder_id: str | None = None,
        updated_at: datetime | None = None,
    ) -> None:
        """Initializes the auction class.

        Args:
            auction_id (str): The id of the auction.
            vehicle_id (str): The vehicle sold by the auction. Never dereferenced.

            start_time (datetime): Start of the bidding window (timezone aware).
            end_time (datetime): End of the bidding window (timezone aware).
            starting_bid (Decimal): The amount the first bid has to exceed.
            created_at (datetime): Creation time of the auction.

            status (AuctionStatus, optional): The persisted status. Defaults to pending.
            current_highest_bid (Decimal, optional): The current highest bid. Defaults to None.
            highest_bidder_id (str, optional): The bidder of the current highest bid. Defaults to None.
            updated_at (datetime, optional): Last modification time. Defaults to created_at.

        Raises:
            AuctionValidationError: If the auction data is inconsistent.
        """
        Auction._check_window(start_time, end_time)
        if not is_valid_amount(starting_bid):
            raise AuctionValidationError("Starting bid must be positive.")
        if (current_highest_bid is None) != (highest_bidder_id is None):
            raise AuctionValidationError(
                "Highest bid and highest bidder must be set together."
            )

        # Identification
        self._id: str = auction_id
        self._vehicle_id: str = vehicle_id

        # Auction information
        self._start_time: datetime = start_time
        self._end_time: datetime = end_time
        self._starting_bid: Decimal = to_money(starting_bid)

        # Auction states
        self._status: AuctionStatus = status
        self._current_highest_bid: Decimal | None = (
            None if current_highest_bid is None else to_money(current_highest_bid)
        )
        self._highest_bidder_id: str | None = highest_bidder_id

        if (
            self._current_highest_bid is not None
            and self._current_highest_bid < self._starting_bid
        ):
            raise AuctionValidationError(
                "Highest bid must not be lower than the starting bid."
            )

        # Bookkeeping
        self._created_at: datetime = created_at
        self._updated_at: datetime = created_at if updated_at is None else updated_at

    # Identification methods
    def get_id(self) -> str:
        """Returns the id of the auction."""
        return self._id

    def get_vehicle_id(self) -> str:
        """Returns the id of the vehicle sold by the auction."""
        return self._vehicle_id

    # Auction information methods
    def get_start_time(self) -> datetime:
        """Returns the start of the bidding window."""
        return self._start_time

    def get_end_time(self) -> datetime:
        """Returns the end of the bidding window."""
        return self._end_time

    def get_starting_bid(self) -> Decimal:
        """Returns the starting bid of the auction."""
        return self._starting_bid

    def get_created_at(self) -> datetime:
        return self._created_at

    def get_updated_at(self) -> datetime:
        return self._updated_at

    # Highest bid methods
    def get_current_highest_bid(self) -> Decimal | None:
        """Returns the current highest bid, None if no bid has been accepted yet."""
        return self._current_highest_bid

    def get_highest_bidder_id(self) -> str | None:
        """Returns the bidder of the current highest bid, None if no bid has been accepted yet."""
        return self._highest_bidder_id

    def get_highest_bid(self) -> tuple[str, Decimal] | None:
        """Returns the highest bid.

        Returns:
            tuple[str, Decimal] | None: The bidder and amount of the highest bid, None without bids.
        """
        if self._current_highest_bid is None or self._highest_bidder_id is None:
            return None
        return (self._highest_bidder_id, self._current_highest_bid)

    def get_floor(self) -> Decimal:
        """Returns the amount a new bid has to exceed.

        This is the current highest bid or the starting bid if there is no bid yet.
        """
        if self._current_highest_bid is None:
            return self._starting_bid
        return self._current_highest_bid

    def has_bids(self) -> bool:
        """Returns whether a bid has been accepted for the auction."""
        return self._current_highest_bid is not None

    def record_bid(self, bid: Bid) -> None:
        """Records an accepted bid as the current highest bid.

        Args:
            bid (Bid): The accepted bid.

        Raises:
            AuctionStateError: If the bid does not belong to the auction or does not exceed the floor.
        """
        if bid.auction_id != self._id:
            raise AuctionStateError(f"{bid} does not belong to auction {self._id}")
        if bid.amount <= self.get_floor():
            raise AuctionStateError(
                f"{bid} does not exceed the floor {self.get_floor()} of auction {self._id}"
            )
        self._current_highest_bid = bid.amount
        self._highest_bidder_id = bid.bidder_id
        self._status = AuctionStatus.ACTIVE
        self._updated_at = bid.placed_at

    # Auction state methods
    def get_status(self) -> AuctionStatus:
        """Returns the persisted status of the auction.

        For auctions that are not cancelled this is a cache of the status derived from the window.
        """
        return self._status

    def get_status_description(self) -> str:
        """Returns the description of the persisted status."""
        return status2description[self._status]

    def is_cancelled(self) -> bool:
        """Returns whether the auction is cancelled."""
        return self._status is AuctionStatus.CANCELLED

    def cancel(self, now: datetime) -> None:
        """Cancels the auction."""
        self._status = AuctionStatus.CANCELLED
        self._updated_at = now

    def _set_status(self, status: AuctionStatus) -> None:
        """Sets the persisted status of the auction.

        This method should only be used when deserializing an auction or refreshing the status cache.

        Args:
            status (AuctionStatus): The status of the auction.
        """
        self._status = status

    # Administration methods
    def reschedule(self, start_time: datetime, end_time: datetime, now: datetime) -> None:
        """Moves the bidding window.

        Raises:
            AuctionValidationError: If the window is invalid.
        """
        Auction._check_window(start_time, end_time)
        self._start_time = start_time
        self._end_time = end_time
        self._updated_at = now

    def set_starting_bid(self, starting_bid: Decimal, now: datetime) -> None:
        """Changes the starting bid.

        Raises:
            AuctionValidationError: If the starting bid is invalid.
            AuctionHasBidsError: If a bid has already been accepted.
        """
        if not is_valid_amount(starting_bid):
            raise AuctionValidationError("Starting bid must be positive.")
        if self.has_bids():
            raise AuctionHasBidsError(
                f"Starting bid of auction {self._id} cannot change once bids exist"
            )
        self._starting_bid = to_money(starting_bid)
        self._updated_at = now

    def __str__(self) -> str:
        return f"Auction {self._id} of vehicle {self._vehicle_id} with ({self._starting_bid}, {self._start_time.isoformat()}, {self._end_time.isoformat()}) currently in state {self._status.value}"

    def __repr__(self) -> str:
        return str(self)

    @staticmethod
    def copy(other: Auction) -> Auction:
        """Returns a copy of the auction.

        Args:
            other (Auction): The auction to copy.

        Returns:
            Auction: The copy of the auction.
        """
        return Auction(
            auction_id=other.get_id(),
            vehicle_id=other.get_vehicle_id(),
            start_time=other.get_start_time(),
            end_time=other.get_end_time(),
            starting_bid=other.get_starting_bid(),
            created_at=other.get_created_at(),
            status=other.get_status(),
            current_highest_bid=other.get_current_highest_bid(),
            highest_bidder_id=other.get_highest_bidder_id(),
            updated_at=other.get_updated_at(),
        )

    @staticmethod
    def _check_window(start_time: datetime, end_time: datetime) -> None:
        if start_time.tzinfo is None or end_time.tzinfo is None:
            raise AuctionValidationError("Start and end time must be timezone aware.")
        if end_time <= start_time:
            raise AuctionValidationError("End time must be after start time.")
