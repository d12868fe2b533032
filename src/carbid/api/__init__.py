from .handlers import AuctionHandlers, Response, rejection2status
