from .client import Client
from .bidder import Bidder
from .administrator import Administrator
from .formatting import format_auction, format_bid, format_result
