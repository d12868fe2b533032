from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from marshmallow import validate
import marshmallow_dataclass

from json import dumps, loads

from carbid.model import BidRejection, RejectionReason


@dataclass
class MessageBidRejection:
    """Body of a rejected bid.

    Fields:
        error: (str) The rejection reason.
        message: (str) Human readable description.
        minimum: (Decimal | None) The amount a bid has to exceed, for rejections because the bid is too low.
    """

    error: str = field(
        metadata={"validate": validate.OneOf([reason.value for reason in RejectionReason])}
    )
    message: str = field(default="")
    minimum: Optional[Decimal] = field(default=None, metadata={"as_string": True})

    def __str__(self) -> str:
        """Returns the string representation of the message."""
        return f"MessageBidRejection(error={self.error}, minimum={self.minimum})"

    def encode(self) -> bytes:
        """Returns the encoded message."""
        return bytes(dumps(SCHEMA_MESSAGE_BID_REJECTION().dump(self)), "utf-8")

    @staticmethod
    def decode(message: bytes) -> MessageBidRejection:
        """Return the decoded bid rejection."""
        return SCHEMA_MESSAGE_BID_REJECTION().load(
            loads(message.decode("utf-8"), parse_float=Decimal)
        )  # type: ignore

    @staticmethod
    def from_rejection(rejection: BidRejection) -> MessageBidRejection:
        """Return the message of the bid rejection."""
        return MessageBidRejection(
            error=rejection.reason.value,
            message=rejection.describe(),
            minimum=rejection.minimum,
        )


@dataclass
class MessageError:
    """Body of a failed request.

    Fields:
        error: (str) Description of the failure.
    """

    error: str = field(metadata={"validate": validate.Length(min=1)})

    def __str__(self) -> str:
        """Returns the string representation of the message."""
        return f"MessageError(error={self.error})"

    def encode(self) -> bytes:
        """Returns the encoded message."""
        return bytes(dumps(SCHEMA_MESSAGE_ERROR().dump(self)), "utf-8")

    @staticmethod
    def decode(message: bytes) -> MessageError:
        """Return the decoded error."""
        return SCHEMA_MESSAGE_ERROR().load(loads(message.decode("utf-8")))  # type: ignore


SCHEMA_MESSAGE_BID_REJECTION = marshmallow_dataclass.class_schema(MessageBidRejection)
SCHEMA_MESSAGE_ERROR = marshmallow_dataclass.class_schema(MessageError)
