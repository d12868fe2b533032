from decimal import Decimal
from json import dumps, loads

import pytest
from marshmallow import ValidationError

from carbid.communication import (
    AuctionMessageData,
    MessageBidReceipt,
    MessageBidRejection,
    MessageBidRequest,
    MessageCreateAuction,
    MessageUpdateAuction,
)
from carbid.constant import AuctionStatus
from carbid.model import Bid, BidRejection, RejectionReason

from conftest import T0, ONE_HOUR, build_auction


@pytest.mark.parametrize(
    "body, amount",
    [
        (b'{"amount": 1500}', Decimal("1500")),
        (b'{"amount": 1500.25}', Decimal("1500.25")),
        (b'{"amount": "1500.25"}', Decimal("1500.25")),
        (b'{"amount": 0.1}', Decimal("0.1")),
    ],
)
def test_bid_request_amount_is_exact(body, amount) -> None:
    request = MessageBidRequest.decode(body)
    assert isinstance(request.amount, Decimal)
    assert request.amount == amount


@pytest.mark.parametrize(
    "body",
    [b"{}", b'{"amount": "lots"}', b'{"amount": true}', b'{"amount": null}'],
)
def test_bid_request_without_amount_is_invalid(body) -> None:
    with pytest.raises(ValidationError):
        MessageBidRequest.decode(body)


def test_receipt_encodes_amount_as_string() -> None:
    bid = Bid(
        id="bid-1",
        auction_id="auction-1",
        bidder_id="alice-1",
        amount=Decimal("1500.50"),
        placed_at=T0,
    )

    data = loads(MessageBidReceipt.from_bid(bid).encode())

    assert data == {
        "bid_id": "bid-1",
        "auction_id": "auction-1",
        "bidder_id": "alice-1",
        "amount": "1500.50",
        "placed_at": T0.isoformat(),
    }


def test_rejection_carries_minimum() -> None:
    rejection = BidRejection(RejectionReason.BID_TOO_LOW, "auction-1", minimum=Decimal("1500.00"))

    data = loads(MessageBidRejection.from_rejection(rejection).encode())

    assert data["error"] == "bid_too_low"
    assert data["minimum"] == "1500.00"
    assert "1500.00" in data["message"]


def test_rejection_without_minimum() -> None:
    data = loads(
        MessageBidRejection.from_rejection(
            BidRejection(RejectionReason.ALREADY_HIGHEST_BIDDER, "auction-1")
        ).encode()
    )
    assert data["error"] == "already_highest_bidder"
    assert data["minimum"] is None


def test_auction_data_keeps_values() -> None:
    auction = build_auction(starting_bid=Decimal("999.99"))

    decoded = AuctionMessageData.decode(AuctionMessageData.from_auction(auction).encode())
    restored = decoded.to_auction()

    assert decoded.starting_bid == Decimal("999.99")
    assert restored.get_start_time() == T0
    assert restored.get_end_time() == T0 + ONE_HOUR
    assert restored.get_status() is AuctionStatus.ACTIVE
    assert restored.get_highest_bid() is None


def test_auction_data_rejects_unknown_status() -> None:
    data = loads(AuctionMessageData.from_auction(build_auction()).encode())
    data["status"] = "sold"

    with pytest.raises(ValidationError):
        AuctionMessageData.decode(bytes(dumps(data), "utf-8"))


def test_create_auction_request() -> None:
    body = (
        b'{"vehicle_id": "vehicle-1", "start_time": "2026-05-01T12:00:00+00:00",'
        b' "end_time": "2026-05-01T13:00:00+00:00", "starting_bid": 1000.5}'
    )

    request = MessageCreateAuction.decode(body)

    assert request.start_time == T0
    assert request.end_time == T0 + ONE_HOUR
    assert request.starting_bid == Decimal("1000.5")


def test_update_auction_request_fields_are_optional() -> None:
    request = MessageUpdateAuction.decode(b'{"status": "cancelled"}')

    assert request.start_time is None
    assert request.starting_bid is None
    assert request.get_status() is AuctionStatus.CANCELLED
    assert MessageUpdateAuction.decode(b"{}").get_status() is None


@pytest.mark.parametrize("body", [b'{"amount": "NaN"}', b'{"amount": NaN}'])
def test_bid_request_passes_nan_on(body) -> None:
    assert MessageBidRequest.decode(body).amount.is_nan()
