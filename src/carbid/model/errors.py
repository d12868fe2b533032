class CarbidError(Exception):
    """Base class of all errors raised by the auction core."""


class StoreError(CarbidError):
    """The auction store failed (connection loss, timeout, ...).

    The outcome of the operation that raised it is unknown to the caller.
    """


class AuctionNotFoundError(CarbidError):
    """No auction with the requested id exists."""

    def __init__(self, auction_id: str) -> None:
        super(AuctionNotFoundError, self).__init__(f"Auction {auction_id} not found")
        self.auction_id: str = auction_id


class AuctionValidationError(CarbidError, ValueError):
    """Auction data is invalid (window, starting bid, ...)."""


class AuctionStateError(CarbidError):
    """The auction is in a state that does not allow the requested change."""


class AuctionHasBidsError(AuctionStateError):
    """The auction has bids and can therefore not be deleted or have its starting bid changed."""


class AuctionConflictError(CarbidError):
    """The auction kept changing concurrently until the retries were exhausted."""


class PermissionDeniedError(CarbidError):
    """The authenticated account lacks the role required for the operation."""
