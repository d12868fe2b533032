from datetime import timedelta
from decimal import Decimal

import pytest

from carbid.constant import AuctionStatus
from carbid.model import BidReceipt, BidRejection, RejectionReason, StoreError
from carbid.process import BiddingEngine
from carbid.store import CommitOutcome, MemoryAuctionStore
from carbid.util import FixedClock

from conftest import T0, ONE_HOUR, build_auction


def test_first_bid_is_accepted(engine, store, make_auction, clock) -> None:
    make_auction()
    clock.advance(timedelta(minutes=5))

    result = engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    assert isinstance(result, BidReceipt)
    assert result.auction_id == "auction-1"
    assert result.bidder_id == "alice-1"
    assert result.amount == Decimal("1500.00")
    assert result.placed_at == T0 + timedelta(minutes=5)

    auction = store.get_auction("auction-1")
    assert auction.get_highest_bid() == ("alice-1", Decimal("1500"))
    assert [bid.id for bid in store.get_bids("auction-1")] == [result.bid_id]


def test_unknown_auction(engine) -> None:
    result = engine.place_bid("missing", "alice-1", Decimal("1500"))
    assert result == BidRejection(RejectionReason.NOT_FOUND, "missing")


def test_bid_must_exceed_starting_bid(engine, make_auction) -> None:
    make_auction()

    result = engine.place_bid("auction-1", "alice-1", Decimal("1000"))

    assert result.reason is RejectionReason.BID_TOO_LOW
    assert result.minimum == Decimal("1000")


def test_tie_is_rejected_with_minimum(engine, store, make_auction) -> None:
    make_auction()
    assert isinstance(engine.place_bid("auction-1", "alice-1", Decimal("1500")), BidReceipt)

    result = engine.place_bid("auction-1", "bob-1", Decimal("1500"))

    assert result.reason is RejectionReason.BID_TOO_LOW
    assert result.minimum == Decimal("1500")
    assert store.get_auction("auction-1").get_highest_bidder_id() == "alice-1"
    assert len(store.get_bids("auction-1")) == 1


def test_outbidding(engine, store, make_auction) -> None:
    make_auction()
    engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    result = engine.place_bid("auction-1", "bob-1", Decimal("1500.01"))

    assert isinstance(result, BidReceipt)
    assert store.get_auction("auction-1").get_highest_bid() == ("bob-1", Decimal("1500.01"))
    assert [bid.amount for bid in store.get_bids("auction-1")] == [
        Decimal("1500"),
        Decimal("1500.01"),
    ]


def test_highest_bidder_cannot_outbid_themselves(engine, store, make_auction) -> None:
    make_auction()
    engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    result = engine.place_bid("auction-1", "alice-1", Decimal("2000"))

    assert result.reason is RejectionReason.ALREADY_HIGHEST_BIDDER
    assert store.get_auction("auction-1").get_current_highest_bid() == Decimal("1500")


def test_too_low_is_checked_before_highest_bidder(engine, make_auction) -> None:
    make_auction()
    engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    result = engine.place_bid("auction-1", "alice-1", Decimal("1200"))

    assert result.reason is RejectionReason.BID_TOO_LOW


@pytest.mark.parametrize(
    "amount",
    [
        Decimal("0"),
        Decimal("-5"),
        Decimal("1500.001"),
        Decimal("NaN"),
        Decimal("Infinity"),
        1500.5,
        True,
        "1500",
    ],
)


def test_invalid_amounts(engine, make_auction, amount) -> None:
    make_auction()

    result = engine.place_bid("auction-1", "alice-1", amount)

    assert result.reason is RejectionReason.INVALID_AMOUNT


def test_integer_and_trailing_zero_amounts_are_valid(engine, make_auction) -> None:
    make_auction()

    assert isinstance(engine.place_bid("auction-1", "alice-1", 1500), BidReceipt)
    result = engine.place_bid("auction-1", "bob-1", Decimal("1600.000"))
    assert isinstance(result, BidReceipt)
    assert result.amount == Decimal("1600.00")


def test_inactive_is_checked_before_amount(engine, make_auction, clock) -> None:
    make_auction()
    clock.set(T0 + 2 * ONE_HOUR)

    result = engine.place_bid("auction-1", "alice-1", Decimal("-1"))

    assert result.reason is RejectionReason.AUCTION_NOT_ACTIVE


def test_window_bounds_are_inclusive(engine, make_auction, clock) -> None:
    make_auction()

    clock.set(T0)
    assert isinstance(engine.place_bid("auction-1", "alice-1", Decimal("1100")), BidReceipt)

    clock.set(T0 + ONE_HOUR)
    assert isinstance(engine.place_bid("auction-1", "bob-1", Decimal("1200")), BidReceipt)

    clock.set(T0 + ONE_HOUR + timedelta(microseconds=1))
    result = engine.place_bid("auction-1", "alice-1", Decimal("1300"))
    assert result.reason is RejectionReason.AUCTION_NOT_ACTIVE


def test_bid_before_start_is_rejected(engine, make_auction, clock) -> None:
    make_auction(status=AuctionStatus.PENDING)
    clock.set(T0 - timedelta(microseconds=1))

    result = engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    assert result.reason is RejectionReason.AUCTION_NOT_ACTIVE


def test_cancelled_auction_rejects_bids(engine, store, make_auction) -> None:
    auction = make_auction()
    snapshot, token = store.get_auction_for_update(auction.get_id())
    snapshot.cancel(T0)
    assert store.save_auction(snapshot, token) is CommitOutcome.COMMITTED

    result = engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    assert result.reason is RejectionReason.AUCTION_NOT_ACTIVE


def test_rejections_leave_no_trace(engine, store, make_auction) -> None:
    make_auction()
    engine.place_bid("auction-1", "alice-1", Decimal("1500"))
    before = store.get_auction_for_update("auction-1")

    first = engine.place_bid("auction-1", "bob-1", Decimal("1400"))
    second = engine.place_bid("auction-1", "bob-1", Decimal("1400"))

    assert first == second
    assert store.get_auction_for_update("auction-1")[1] == before[1]
    assert len(store.get_bids("auction-1")) == 1


def test_bids_increase_in_commit_order(engine, store, make_auction, clock) -> None:
    make_auction()
    bidders = ["alice-1", "bob-1"]
    for step in range(10):
        clock.advance(timedelta(seconds=1))
        engine.place_bid("auction-1", bidders[step % 2], Decimal(1100 + step * 10))

    bids = store.get_bids("auction-1")
    assert len(bids) == 10
    for previous, current in zip(bids, bids[1:]):
        assert current.amount > previous.amount
        assert current.placed_at >= previous.placed_at
    assert store.get_auction("auction-1").get_current_highest_bid() == bids[-1].amount


def test_max_retries_must_be_positive(store, clock) -> None:
    with pytest.raises(ValueError):
        BiddingEngine(store, clock, max_retries=0)


class ConflictingStore(MemoryAuctionStore):
    """Store where every commit loses against a concurrent writer."""

    def __init__(self) -> None:
        super().__init__()
        self.commits: int = 0

    def commit_bid(self, auction_id, token, bid, new_highest, new_highest_bidder):
        self.commits += 1
        return CommitOutcome.CONFLICT


class FailingStore(MemoryAuctionStore):
    """Store losing its connection on commit."""

    def commit_bid(self, auction_id, token, bid, new_highest, new_highest_bidder):
        raise StoreError("connection lost")


class RacingStore(MemoryAuctionStore):
    """Store where another bid slips in before the first commit."""

    def __init__(self) -> None:
        super().__init__()
        self.raced: bool = False

    def commit_bid(self, auction_id, token, bid, new_highest, new_highest_bidder):
        if not self.raced:
            self.raced = True
            engine = BiddingEngine(self, FixedClock(T0))
            engine.place_bid(auction_id, "carol-1", Decimal("1800"))
        return super().commit_bid(auction_id, token, bid, new_highest, new_highest_bidder)


def test_conflicts_exhaust_retries(clock) -> None:
    store = ConflictingStore()
    store.add_auction(build_auction())
    engine = BiddingEngine(store, clock, max_retries=3)

    result = engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    assert result.reason is RejectionReason.CONFLICT
    assert result.is_retryable()
    assert store.commits == 3
    assert store.get_bids("auction-1") == []


def test_conflict_revalidates_against_fresh_auction(clock) -> None:
    store = RacingStore()
    store.add_auction(build_auction())
    engine = BiddingEngine(store, clock)

    # The racing bid of 1800 wins, so 1500 is too low on the retry
    result = engine.place_bid("auction-1", "alice-1", Decimal("1500"))

    assert result.reason is RejectionReason.BID_TOO_LOW
    assert result.minimum == Decimal("1800")
    assert store.get_auction("auction-1").get_highest_bidder_id() == "carol-1"


def test_conflict_retry_can_succeed(clock) -> None:
    store = RacingStore()
    store.add_auction(build_auction())
    engine = BiddingEngine(store, clock)

    result = engine.place_bid("auction-1", "alice-1", Decimal("2000"))

    assert isinstance(result, BidReceipt)
    assert [bid.bidder_id for bid in store.get_bids("auction-1")] == ["carol-1", "alice-1"]


def test_store_errors_propagate(clock) -> None:
    store = FailingStore()
    store.add_auction(build_auction())
    engine = BiddingEngine(store, clock)

    with pytest.raises(StoreError):
        engine.place_bid("auction-1", "alice-1", Decimal("1500"))
