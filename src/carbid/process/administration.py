from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from logging import Logger
from typing import Callable

# === Custom Modules ===

from carbid.constant import AuctionStatus, DEFAULT_MAX_RETRIES
from carbid.model import (
    Auction,
    AuthContext,
    Bid,
    AuctionNotFoundError,
    AuctionValidationError,
    AuctionStateError,
    AuctionHasBidsError,
    AuctionConflictError,
)
from carbid.store import AuctionStore, CommitOutcome
from carbid.util import Clock, create_logger, generate_id

# === Local Modules ===

from .lifecycle import effective_status, refresh_status


class AuctionAdministration:
    """Administration and read paths of auctions.

    The administration is responsible for the following:
        - Creating auctions (admin only).
        - Editing the window and starting bid of auctions, and cancelling them (admin only).
        - Deleting auctions without bids (admin only).
        - Listing auctions, reading a single auction and its bid history (public).

    Edits are guarded by the same version token as bids, so an edit never overwrites a concurrently accepted bid.
    Auctions returned carry their effective status.
    """

    def __init__(
        self,
        store: AuctionStore,
        clock: Clock,
        max_retries: int = DEFAULT_MAX_RETRIES,
        logger: Logger | None = None,
    ) -> None:
        """Initializes the auction administration.

        Args:
            store (AuctionStore): The store holding auctions and bids. May be a shared memory object.
            clock (Clock): The clock providing the current time.
            max_retries (int, optional): Attempts of a conflicting edit. Defaults to DEFAULT_MAX_RETRIES.
            logger (Logger, optional): The logger to use. Defaults to a logger without own handler.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self._name: str = self.__class__.__name__.lower()
        self._prefix: str = f"{self._name}"
        self._logger: Logger = logger if logger is not None else create_logger(self._name)

        self._store: AuctionStore = store
        self._clock: Clock = clock
        self._max_retries: int = max_retries

    # === Administration ===

    def create_auction(
        self,
        auth: AuthContext,
        vehicle_id: str,
        start_time: datetime,
        end_time: datetime,
        starting_bid: Decimal,
    ) -> Auction:
        """Creates an auction.

        Args:
            auth (AuthContext): The acting account, must be an administrator.
            vehicle_id (str): The vehicle to sell.
            start_time (datetime): Start of the bidding window.
            end_time (datetime): End of the bidding window.
            starting_bid (Decimal): The amount the first bid has to exceed.

        Returns:
            Auction: The created auction.

        Raises:
            PermissionDeniedError: If the account is not an administrator.
            AuctionValidationError: If the window or starting bid is invalid.
        """
        auth.require_admin()
        if not vehicle_id:
            raise AuctionValidationError("Vehicle id must not be empty.")

        now = self._clock.now()
        auction = Auction(
            auction_id=generate_id(),
            vehicle_id=vehicle_id,
            start_time=start_time,
            end_time=end_time,
            starting_bid=starting_bid,
            created_at=now,
        )
        auction._set_status(effective_status(auction, now))
        self._store.add_auction(auction)

        self._logger.info(f"{self._prefix}: {auth.user_id} created {auction}")
        return auction

    def update_auction(
        self,
        auth: AuthContext,
        auction_id: str,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        starting_bid: Decimal | None = None,
        status: AuctionStatus | None = None,
    ) -> Auction:
        """Edits an auction. Arguments left as None keep their current value.

        Ended and cancelled auctions cannot be edited.
        The start time and starting bid are fixed once bids exist.
        The only status that can be set manually is cancelled.

        Returns:
            Auction: The edited auction.

        Raises:
            PermissionDeniedError: If the account is not an administrator.
            AuctionNotFoundError: If the auction does not exist.
            AuctionValidationError: If the resulting window or starting bid is invalid.
            AuctionStateError: If the auction cannot be edited anymore.
            AuctionConflictError: If the auction kept changing concurrently.
        """
        auth.require_admin()
        if status is not None and status is not AuctionStatus.CANCELLED:
            raise AuctionValidationError(
                f"Status {status.value} follows the bidding window and cannot be set."
            )

        def change(auction: Auction, now: datetime) -> None:
            current = effective_status(auction, now)
            if current in (AuctionStatus.ENDED, AuctionStatus.CANCELLED):
                raise AuctionStateError(
                    f"Auction {auction_id} is {current.value} and cannot be edited"
                )

            if start_time is not None or end_time is not None:
                new_start = auction.get_start_time() if start_time is None else start_time
                new_end = auction.get_end_time() if end_time is None else end_time
                if auction.has_bids() and new_start != auction.get_start_time():
                    raise AuctionHasBidsError(
                        f"Start time of auction {auction_id} cannot change once bids exist"
                    )
                auction.reschedule(new_start, new_end, now)

            if starting_bid is not None:
                auction.set_starting_bid(starting_bid, now)

            if status is AuctionStatus.CANCELLED:
                auction.cancel(now)
            else:
                auction._set_status(effective_status(auction, now))

        auction = self._modify(auction_id, change)
        self._logger.info(f"{self._prefix}: {auth.user_id} updated {auction}")
        return auction

    def cancel_auction(self, auth: AuthContext, auction_id: str) -> Auction:
        """Cancels a pending or active auction.

        Raises:
            PermissionDeniedError: If the account is not an administrator.
            AuctionNotFoundError: If the auction does not exist.
            AuctionStateError: If the auction has already ended or is cancelled.
        """
        return self.update_auction(auth, auction_id, status=AuctionStatus.CANCELLED)

    def delete_auction(self, auth: AuthContext, auction_id: str) -> None:
        """Deletes an auction without bids.

        Raises:
            PermissionDeniedError: If the account is not an administrator.
            AuctionNotFoundError: If the auction does not exist.
            AuctionHasBidsError: If bids have been placed on the auction.
        """
        auth.require_admin()
        if not self._store.delete_auction(auction_id):
            raise AuctionNotFoundError(auction_id)
        self._logger.info(f"{self._prefix}: {auth.user_id} deleted auction {auction_id}")

    # === Read paths ===

    def list_auctions(self, active_only: bool = False) -> list[Auction]:
        """Returns the auctions ordered by start time.

        Args:
            active_only (bool, optional): Whether to only return auctions accepting bids. Defaults to False.
        """
        now = self._clock.now()
        auctions = [
            refresh_status(auction, now) for auction in self._store.list_auctions()
        ]
        if active_only:
            return [
                auction
                for auction in auctions
                if auction.get_status() is AuctionStatus.ACTIVE
            ]
        return auctions

    def get_auction(self, auction_id: str) -> Auction:
        """Returns the auction.

        Raises:
            AuctionNotFoundError: If the auction does not exist.
        """
        auction = self._store.get_auction(auction_id)
        if auction is None:
            raise AuctionNotFoundError(auction_id)
        return refresh_status(auction, self._clock.now())

    def get_bids(self, auction_id: str) -> list[Bid]:
        """Returns the bid history of the auction in the order the bids were accepted.

        Raises:
            AuctionNotFoundError: If the auction does not exist.
        """
        if self._store.get_auction(auction_id) is None:
            raise AuctionNotFoundError(auction_id)
        return self._store.get_bids(auction_id)

    # === Helper ===

    def _modify(
        self, auction_id: str, change: Callable[[Auction, datetime], None]
    ) -> Auction:
        """Applies the change to a fresh snapshot and saves it, retrying on conflicts."""
        for attempt in range(1, self._max_retries + 1):
            record = self._store.get_auction_for_update(auction_id)
            if record is None:
                raise AuctionNotFoundError(auction_id)
            auction, token = record

            change(auction, self._clock.now())

            if self._store.save_auction(auction, token) is CommitOutcome.COMMITTED:
                return auction
            self._logger.warning(
                f"{self._prefix}: Conflict saving auction {auction_id} (attempt {attempt}/{self._max_retries})"
            )

        raise AuctionConflictError(
            f"Auction {auction_id} kept changing concurrently, giving up after {self._max_retries} attempts"
        )
