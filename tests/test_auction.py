from datetime import timedelta
from decimal import Decimal

import pytest

from carbid.constant import AuctionStatus
from carbid.model import (
    Auction,
    Bid,
    AuctionValidationError,
    AuctionStateError,
    AuctionHasBidsError,
)
from carbid.util import FixedClock, is_valid_amount, to_money

from conftest import T0, ONE_HOUR, build_auction


def make_bid(amount: str, bidder_id: str = "alice-1", auction_id: str = "auction-1") -> Bid:
    return Bid(
        id="bid-1",
        auction_id=auction_id,
        bidder_id=bidder_id,
        amount=Decimal(amount),
        placed_at=T0,
    )


@pytest.mark.parametrize(
    "value, valid",
    [
        (Decimal("0.01"), True),
        (Decimal("12.50"), True),
        (Decimal("12.500"), True),
        (7, True),
        (Decimal("99999999999999.99"), True),
        (Decimal("1000000000000000"), False),
        (Decimal("0.001"), False),
        (Decimal("0"), False),
        (-1, False),
        (1.5, False),
        (False, False),
        (None, False),
        (Decimal("sNaN"), False),
    ],
)
def test_is_valid_amount(value, valid) -> None:
    assert is_valid_amount(value) is valid


def test_to_money() -> None:
    assert str(to_money(5)) == "5.00"
    assert str(to_money(Decimal("1E+2"))) == "100.00"
    with pytest.raises(ValueError):
        to_money(Decimal("0.005"))


def test_highest_bid_fields_are_set_together() -> None:
    with pytest.raises(AuctionValidationError):
        Auction(
            auction_id="auction-1",
            vehicle_id="vehicle-1",
            start_time=T0,
            end_time=T0 + ONE_HOUR,
            starting_bid=Decimal("1000"),
            created_at=T0,
            current_highest_bid=Decimal("1500"),
        )


def test_record_bid_moves_floor() -> None:
    auction = build_auction(status=AuctionStatus.PENDING)
    assert auction.get_floor() == Decimal("1000")

    auction.record_bid(make_bid("1500"))

    assert auction.get_floor() == Decimal("1500")
    assert auction.get_highest_bid() == ("alice-1", Decimal("1500"))
    assert auction.get_status() is AuctionStatus.ACTIVE
    assert auction.has_bids()


def test_record_bid_refuses_inconsistent_bids() -> None:
    auction = build_auction()
    with pytest.raises(AuctionStateError):
        auction.record_bid(make_bid("1000"))
    with pytest.raises(AuctionStateError):
        auction.record_bid(make_bid("1500", auction_id="auction-2"))
    assert auction.get_highest_bid() is None


def test_copy_is_independent() -> None:
    auction = build_auction()
    copy = Auction.copy(auction)

    copy.cancel(T0)

    assert copy.is_cancelled()
    assert not auction.is_cancelled()
    assert copy.get_id() == auction.get_id()


def test_starting_bid_fixed_after_bid() -> None:
    auction = build_auction()
    auction.set_starting_bid(Decimal("1200"), T0)
    auction.record_bid(make_bid("1300"))

    with pytest.raises(AuctionHasBidsError):
        auction.set_starting_bid(Decimal("1250"), T0)


def test_fixed_clock() -> None:
    clock = FixedClock(T0)
    assert clock.now() == T0
    assert clock.advance(timedelta(seconds=3)) == T0 + timedelta(seconds=3)
    with pytest.raises(ValueError):
        FixedClock(T0.replace(tzinfo=None))
