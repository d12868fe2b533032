from .bid import MessageBidRequest, MessageBidReceipt
from .rejection import MessageBidRejection, MessageError
from .auction import AuctionMessageData, MessageCreateAuction, MessageUpdateAuction
