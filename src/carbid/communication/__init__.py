from .messages import (
    MessageBidRequest,
    MessageBidReceipt,
    MessageBidRejection,
    MessageError,
    AuctionMessageData,
    MessageCreateAuction,
    MessageUpdateAuction,
)
