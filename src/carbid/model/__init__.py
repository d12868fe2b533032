from .errors import (
    CarbidError,
    StoreError,
    AuctionNotFoundError,
    AuctionValidationError,
    AuctionStateError,
    AuctionHasBidsError,
    AuctionConflictError,
    PermissionDeniedError,
)
from .bid import Bid, BidReceipt
from .rejection import RejectionReason, BidRejection
from .auction import Auction
from .auth import AuthContext, Authenticator, StaticAuthenticator
