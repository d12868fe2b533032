from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from marshmallow import validate
import marshmallow_dataclass

from json import dumps, loads

from carbid.model import Bid, BidReceipt


@dataclass
class MessageBidRequest:
    """Body of a bid request.

    Only the type of the amount is checked here, its value is judged by the bidding engine,
    so NaN and infinite amounts pass on to be rejected as invalid amounts.
    Values that are no number at all (booleans, other strings) fail decoding.

    Fields:
        amount: (Decimal) The bid amount. JSON numbers and strings are accepted.
    """

    amount: Decimal = field(metadata={"as_string": True, "allow_nan": True})

    def __str__(self) -> str:
        """Returns the string representation of the message."""
        return f"MessageBidRequest(amount={self.amount})"

    def encode(self) -> bytes:
        """Returns the encoded message."""
        return bytes(dumps(SCHEMA_MESSAGE_BID_REQUEST().dump(self)), "utf-8")

    @staticmethod
    def decode(message: bytes) -> MessageBidRequest:
        """Return the decoded bid request."""
        return SCHEMA_MESSAGE_BID_REQUEST().load(
            loads(message.decode("utf-8"), parse_float=Decimal, parse_constant=Decimal)
        )  # type: ignore


@dataclass
class MessageBidReceipt:
    """Receipt of an accepted bid, also used for the entries of a bid history.

    Fields:
        bid_id: (str) Unique identifier of the bid.
        auction_id: (str) The auction the bid was placed on.
        bidder_id: (str) The bidder.
        amount: (Decimal) The bid amount.
        placed_at: (datetime) When the bid was placed.
    """

    bid_id: str = field(metadata={"validate": validate.Length(min=1)})
    auction_id: str = field(metadata={"validate": validate.Length(min=1)})
    bidder_id: str = field(metadata={"validate": validate.Length(min=1)})
    amount: Decimal = field(metadata={"as_string": True})
    placed_at: datetime = field()

    def __str__(self) -> str:
        """Returns the string representation of the message."""
        return f"MessageBidReceipt(bid_id={self.bid_id}, auction_id={self.auction_id}, bidder_id={self.bidder_id}, amount={self.amount})"

    def encode(self) -> bytes:
        """Returns the encoded message."""
        return bytes(dumps(SCHEMA_MESSAGE_BID_RECEIPT().dump(self)), "utf-8")

    @staticmethod
    def encode_many(receipts: list[MessageBidReceipt]) -> bytes:
        """Returns the encoded list of receipts."""
        return bytes(dumps(SCHEMA_MESSAGE_BID_RECEIPT(many=True).dump(receipts)), "utf-8")

    @staticmethod
    def decode(message: bytes) -> MessageBidReceipt:
        """Return the decoded bid receipt."""
        return SCHEMA_MESSAGE_BID_RECEIPT().load(
            loads(message.decode("utf-8"), parse_float=Decimal)
        )  # type: ignore

    @staticmethod
    def from_receipt(receipt: BidReceipt) -> MessageBidReceipt:
        """Return the message of the bid receipt."""
        return MessageBidReceipt(
            bid_id=receipt.bid_id,
            auction_id=receipt.auction_id,
            bidder_id=receipt.bidder_id,
            amount=receipt.amount,
            placed_at=receipt.placed_at,
        )

    @staticmethod
    def from_bid(bid: Bid) -> MessageBidReceipt:
        """Return the message of a bid of the bid history."""
        return MessageBidReceipt.from_receipt(BidReceipt.from_bid(bid))


SCHEMA_MESSAGE_BID_REQUEST = marshmallow_dataclass.class_schema(MessageBidRequest)
SCHEMA_MESSAGE_BID_RECEIPT = marshmallow_dataclass.class_schema(MessageBidReceipt)
