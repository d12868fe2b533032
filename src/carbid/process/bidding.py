from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from logging import Logger

# === Custom Modules ===

from carbid.constant import DEFAULT_MAX_RETRIES
from carbid.model import Auction, Bid, BidReceipt, BidRejection, RejectionReason
from carbid.store import AuctionStore, CommitOutcome
from carbid.util import Clock, create_logger, generate_id, is_valid_amount, to_money

# === Local Modules ===

from .lifecycle import is_biddable


class BiddingEngine:
    """Bidding engine placing bids on auctions.

    A bid is validated against a snapshot of the auction read together with a version token.
    The bid and the new highest bid are then committed in one step, guarded by that token.
    If another write got in between, the bid is validated again against the fresh auction,
    at most max_retries times, before a conflict is reported.

    The engine keeps no state between calls and holds no locks; concurrent calls are serialized per auction by the store.
    """

    def __init__(
        self,
        store: AuctionStore,
        clock: Clock,
        max_retries: int = DEFAULT_MAX_RETRIES,
        logger: Logger | None = None,
    ) -> None:
        """Initializes the bidding engine.

        Args:
            store (AuctionStore): The store holding auctions and bids. May be a shared memory object.
            clock (Clock): The clock providing the current time.
            max_retries (int, optional): Commit attempts per bid. Defaults to DEFAULT_MAX_RETRIES.
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

    def place_bid(
        self, auction_id: str, bidder_id: str, amount: Decimal
    ) -> BidReceipt | BidRejection:
        """Places a bid on an auction.

        Checks, in this order: the auction exists, it accepts bids now, the amount is valid,
        the amount exceeds the floor, and the bidder is not already the highest bidder.

        Args:
            auction_id (str): The auction to bid on.
            bidder_id (str): The authenticated bidder.
            amount (Decimal): The bid amount.

        Returns:
            BidReceipt | BidRejection: The receipt of the committed bid, or why it was rejected.

        Raises:
            StoreError: If the store failed; whether the bid was committed is unknown then.
        """
        for attempt in range(1, self._max_retries + 1):
            record = self._store.get_auction_for_update(auction_id)
            if record is None:
                return self._reject(RejectionReason.NOT_FOUND, auction_id, bidder_id, amount)
            auction, token = record

            # Read after the auction, such that bids of one auction are placed in non-decreasing time
            now = self._clock.now()

            rejection = self._validate(auction, bidder_id, amount, now)
            if rejection is not None:
                self._logger.info(
                    f"{self._prefix}: Rejected bid of {amount} by {bidder_id}: {rejection}"
                )
                return rejection

            bid = Bid(
                id=generate_id(),
                auction_id=auction_id,
                bidder_id=bidder_id,
                amount=to_money(amount),
                placed_at=now,
            )
            outcome = self._store.commit_bid(
                auction_id, token, bid, bid.amount, bidder_id
            )
            match outcome:
                case CommitOutcome.COMMITTED:
                    self._logger.info(f"{self._prefix}: Accepted {bid}")
                    return BidReceipt.from_bid(bid)
                case CommitOutcome.CONFLICT:
                    self._logger.warning(
                        f"{self._prefix}: Conflict committing bid of {amount} by {bidder_id} on {auction_id} (attempt {attempt}/{self._max_retries})"
                    )

        return self._reject(RejectionReason.CONFLICT, auction_id, bidder_id, amount)

    # === Helper ===

    def _validate(
        self, auction: Auction, bidder_id: str, amount: Decimal, now: datetime
    ) -> BidRejection | None:
        """Returns the first check the bid fails, None if it passes all of them."""
        if not is_biddable(auction, now):
            return BidRejection(RejectionReason.AUCTION_NOT_ACTIVE, auction.get_id())

        if not is_valid_amount(amount):
            return BidRejection(RejectionReason.INVALID_AMOUNT, auction.get_id())

        floor = auction.get_floor()
        if amount <= floor:
            return BidRejection(
                RejectionReason.BID_TOO_LOW, auction.get_id(), minimum=floor
            )

        if auction.get_highest_bidder_id() == bidder_id:
            return BidRejection(
                RejectionReason.ALREADY_HIGHEST_BIDDER, auction.get_id()
            )

        return None

    def _reject(
        self,
        reason: RejectionReason,
        auction_id: str,
        bidder_id: str,
        amount: Decimal,
    ) -> BidRejection:
        rejection = BidRejection(reason, auction_id)
        self._logger.info(
            f"{self._prefix}: Rejected bid of {amount} by {bidder_id}: {rejection}"
        )
        return rejection
