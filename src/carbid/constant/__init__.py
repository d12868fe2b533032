from .auction import AuctionStatus, status2description
from .account import Role
from .bidding import MONEY_PLACES, MONEY_DIGITS, DEFAULT_MAX_RETRIES
from . import interaction
