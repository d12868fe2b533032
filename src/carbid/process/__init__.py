from .lifecycle import effective_status, is_biddable, refresh_status
from .bidding import BiddingEngine
from .administration import AuctionAdministration
from .manager import Manager, AUCTION_STORE
