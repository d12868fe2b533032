from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from marshmallow import validate
import marshmallow_dataclass

from json import dumps, loads

from carbid.constant import AuctionStatus
from carbid.model import Auction


@dataclass
class AuctionMessageData:
    """Auction data class for representing an auction and sending it over the network.

    Fields:
        id: (str) Unique identifier of the auction.
        vehicle_id: (str) The vehicle sold by the auction.

        start_time: (datetime) Start of the bidding window.
        end_time: (datetime) End of the bidding window.
        starting_bid: (Decimal) The amount the first bid has to exceed.

        current_highest_bid: (Decimal | None) The current highest bid.
        highest_bidder_id: (str | None) The bidder of the current highest bid.
        status: (str) Status of the auction.

        created_at: (datetime) Creation time.
        updated_at: (datetime) Last modification time.
    """

    # Auction ID and vehicle
    id: str = field(metadata={"validate": validate.Length(min=1)})
    vehicle_id: str = field(metadata={"validate": validate.Length(min=1)})

    # Auction information
    start_time: datetime = field()
    end_time: datetime = field()
    starting_bid: Decimal = field(metadata={"as_string": True})

    # Auction state
    status: str = field(
        metadata={"validate": validate.OneOf([status.value for status in AuctionStatus])}
    )
    created_at: datetime = field()
    updated_at: datetime = field()
    current_highest_bid: Optional[Decimal] = field(
        default=None, metadata={"as_string": True}
    )
    highest_bidder_id: Optional[str] = field(default=None)

    def __str__(self) -> str:
        """Return the string representation of the auction data."""
        return f"AuctionMessageData(id={self.id}, vehicle_id={self.vehicle_id}, starting_bid={self.starting_bid}, current_highest_bid={self.current_highest_bid}, status={self.status})"

    def __repr__(self) -> str:
        """Return the string representation of the auction data."""
        return self.__str__()

    def __eq__(self, o: object) -> bool:
        """Return whether the auction data is equal to another auction data."""
        if not isinstance(o, AuctionMessageData):
            return False
        return self.id == o.id

    def encode(self) -> bytes:
        """Return the encoded auction data."""
        return bytes(dumps(SCHEMA_AUCTION_MESSAGE_DATA().dump(self)), "utf-8")

    @staticmethod
    def encode_many(auctions: list[AuctionMessageData]) -> bytes:
        """Return the encoded list of auction data."""
        return bytes(
            dumps(SCHEMA_AUCTION_MESSAGE_DATA(many=True).dump(auctions)), "utf-8"
        )

    @staticmethod
    def decode(message: bytes) -> AuctionMessageData:
        """Return the decoded auction data."""
        return SCHEMA_AUCTION_MESSAGE_DATA().load(
            loads(message.decode("utf-8"), parse_float=Decimal)
        )  # type: ignore

    def to_auction(self) -> Auction:
        """Return the auction from the auction data."""
        return Auction(
            auction_id=self.id,
            vehicle_id=self.vehicle_id,
            start_time=self.start_time,
            end_time=self.end_time,
            starting_bid=self.starting_bid,
            created_at=self.created_at,
            status=AuctionStatus(self.status),
            current_highest_bid=self.current_highest_bid,
            highest_bidder_id=self.highest_bidder_id,
            updated_at=self.updated_at,
        )

    @staticmethod
    def from_auction(auction: Auction) -> AuctionMessageData:
        """Return the auction data from the auction."""
        return AuctionMessageData(
            id=auction.get_id(),
            vehicle_id=auction.get_vehicle_id(),
            start_time=auction.get_start_time(),
            end_time=auction.get_end_time(),
            starting_bid=auction.get_starting_bid(),
            status=auction.get_status().value,
            created_at=auction.get_created_at(),
            updated_at=auction.get_updated_at(),
            current_highest_bid=auction.get_current_highest_bid(),
            highest_bidder_id=auction.get_highest_bidder_id(),
        )


@dataclass
class MessageCreateAuction:
    """Body of an auction creation request.

    Fields:
        vehicle_id: (str) The vehicle to sell.
        start_time: (datetime) Start of the bidding window, with timezone.
        end_time: (datetime) End of the bidding window, with timezone.
        starting_bid: (Decimal) The amount the first bid has to exceed.
    """

    vehicle_id: str = field(metadata={"validate": validate.Length(min=1)})
    start_time: datetime = field()
    end_time: datetime = field()
    starting_bid: Decimal = field(metadata={"as_string": True})

    def __str__(self) -> str:
        """Returns the string representation of the message."""
        return f"MessageCreateAuction(vehicle_id={self.vehicle_id}, starting_bid={self.starting_bid})"

    def encode(self) -> bytes:
        """Returns the encoded message."""
        return bytes(dumps(SCHEMA_MESSAGE_CREATE_AUCTION().dump(self)), "utf-8")

    @staticmethod
    def decode(message: bytes) -> MessageCreateAuction:
        """Return the decoded auction creation request."""
        return SCHEMA_MESSAGE_CREATE_AUCTION().load(
            loads(message.decode("utf-8"), parse_float=Decimal)
        )  # type: ignore


@dataclass
class MessageUpdateAuction:
    """Body of an auction edit request. Absent fields keep their value.

    Fields:
        start_time: (datetime | None) New start of the bidding window.
        end_time: (datetime | None) New end of the bidding window.
        starting_bid: (Decimal | None) New starting bid.
        status: (str | None) New status; only "cancelled" is accepted by the administration.
    """

    start_time: Optional[datetime] = field(default=None)
    end_time: Optional[datetime] = field(default=None)
    starting_bid: Optional[Decimal] = field(default=None, metadata={"as_string": True})
    status: Optional[str] = field(
        default=None,
        metadata={"validate": validate.OneOf([status.value for status in AuctionStatus])},
    )

    def __str__(self) -> str:
        """Returns the string representation of the message."""
        return f"MessageUpdateAuction(start_time={self.start_time}, end_time={self.end_time}, starting_bid={self.starting_bid}, status={self.status})"

    def encode(self) -> bytes:
        """Returns the encoded message."""
        return bytes(dumps(SCHEMA_MESSAGE_UPDATE_AUCTION().dump(self)), "utf-8")

    @staticmethod
    def decode(message: bytes) -> MessageUpdateAuction:
        """Return the decoded auction edit request."""
        return SCHEMA_MESSAGE_UPDATE_AUCTION().load(
            loads(message.decode("utf-8"), parse_float=Decimal)
        )  # type: ignore

    def get_status(self) -> AuctionStatus | None:
        """Returns the requested status."""
        return None if self.status is None else AuctionStatus(self.status)


SCHEMA_AUCTION_MESSAGE_DATA = marshmallow_dataclass.class_schema(AuctionMessageData)
SCHEMA_MESSAGE_CREATE_AUCTION = marshmallow_dataclass.class_schema(MessageCreateAuction)
SCHEMA_MESSAGE_UPDATE_AUCTION = marshmallow_dataclass.class_schema(MessageUpdateAuction)
