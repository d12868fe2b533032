from __future__ import annotations

from dataclasses import dataclass
from json import JSONDecodeError
from logging import Logger
from typing import Callable

from marshmallow import ValidationError

# === Custom Modules ===

from carbid.communication import (
    AuctionMessageData,
    MessageBidReceipt,
    MessageBidRejection,
    MessageBidRequest,
    MessageCreateAuction,
    MessageError,
    MessageUpdateAuction,
)
from carbid.model import (
    AuthContext,
    BidReceipt,
    RejectionReason,
    CarbidError,
    StoreError,
    AuctionNotFoundError,
    AuctionValidationError,
    AuctionStateError,
    AuctionConflictError,
    PermissionDeniedError,
)
from carbid.process import AuctionAdministration, BiddingEngine
from carbid.util import create_logger

# HTTP status of each bid rejection
rejection2status: dict[RejectionReason, int] = {
    RejectionReason.NOT_FOUND: 404,
    RejectionReason.AUCTION_NOT_ACTIVE: 409,
    RejectionReason.CONFLICT: 409,
    RejectionReason.INVALID_AMOUNT: 422,
    RejectionReason.BID_TOO_LOW: 422,
    RejectionReason.ALREADY_HIGHEST_BIDDER: 422,
}


@dataclass(frozen=True)
class Response:
    """Status and JSON body handed back to the HTTP layer."""

    status: int
    body: bytes = b""


class AuctionHandlers:
    """Request handlers for the auction routes.

    The handlers are independent of the HTTP framework: the framework routes the request,
    resolves the identity of the caller through its authenticator and passes the raw body.

        POST   /auctions/{id}/bids  place_bid
        GET    /auctions            list_auctions
        GET    /auctions/{id}       get_auction
        GET    /auctions/{id}/bids  get_bids
        POST   /auctions            create_auction
        PUT    /auctions/{id}       update_auction
        DELETE /auctions/{id}       delete_auction
    """

    def __init__(
        self,
        engine: BiddingEngine,
        administration: AuctionAdministration,
        logger: Logger | None = None,
    ) -> None:
        """Initializes the auction handlers.

        Args:
            engine (BiddingEngine): The bidding engine.
            administration (AuctionAdministration): The auction administration.
            logger (Logger, optional): The logger to use. Defaults to a logger without own handler.
        """
        self._name: str = self.__class__.__name__.lower()
        self._prefix: str = f"{self._name}"
        self._logger: Logger = logger if logger is not None else create_logger(self._name)

        self._engine: BiddingEngine = engine
        self._administration: AuctionAdministration = administration

    # === Bidding ===

    def place_bid(
        self, auction_id: str, auth: AuthContext | None, body: bytes
    ) -> Response:
        """Handles POST /auctions/{id}/bids with body {"amount": ...}."""
        if auth is None:
            return AuctionHandlers._error(401, "Authentication required.")

        try:
            request = MessageBidRequest.decode(body)
        except (ValidationError, JSONDecodeError, UnicodeDecodeError) as e:
            self._logger.info(f"{self._prefix}: Invalid bid request for {auction_id}: {e}")
            return AuctionHandlers._error(400, "Invalid data format.")

        try:
            result = self._engine.place_bid(auction_id, auth.user_id, request.amount)
        except StoreError as e:
            self._logger.error(f"{self._prefix}: Store failure placing bid on {auction_id}: {e}")
            return AuctionHandlers._error(503, "Bid outcome unknown, please check the auction.")

        if isinstance(result, BidReceipt):
            return Response(201, MessageBidReceipt.from_receipt(result).encode())
        return Response(
            rejection2status[result.reason],
            MessageBidRejection.from_rejection(result).encode(),
        )

    # === Read paths ===

    def list_auctions(self, active_only: bool = False) -> Response:
        """Handles GET /auctions."""
        return self._guard(
            lambda: Response(
                200,
                AuctionMessageData.encode_many(
                    [
                        AuctionMessageData.from_auction(auction)
                        for auction in self._administration.list_auctions(active_only)
                    ]
                ),
            )
        )

    def get_auction(self, auction_id: str) -> Response:
        """Handles GET /auctions/{id}."""
        return self._guard(
            lambda: Response(
                200,
                AuctionMessageData.from_auction(
                    self._administration.get_auction(auction_id)
                ).encode(),
            )
        )

    def get_bids(self, auction_id: str) -> Response:
        """Handles GET /auctions/{id}/bids."""
        return self._guard(
            lambda: Response(
                200,
                MessageBidReceipt.encode_many(
                    [
                        MessageBidReceipt.from_bid(bid)
                        for bid in self._administration.get_bids(auction_id)
                    ]
                ),
            )
        )

    # === Administration ===

    def create_auction(self, auth: AuthContext | None, body: bytes) -> Response:
        """Handles POST /auctions."""
        if auth is None:
            return AuctionHandlers._error(401, "Authentication required.")

        def create() -> Response:
            request = MessageCreateAuction.decode(body)
            auction = self._administration.create_auction(
                auth,
                vehicle_id=request.vehicle_id,
                start_time=request.start_time,
                end_time=request.end_time,
                starting_bid=request.starting_bid,
            )
            return Response(201, AuctionMessageData.from_auction(auction).encode())

        return self._guard(create)

    def update_auction(
        self, auction_id: str, auth: AuthContext | None, body: bytes
    ) -> Response:
        """Handles PUT /auctions/{id}."""
        if auth is None:
            return AuctionHandlers._error(401, "Authentication required.")

        def update() -> Response:
            request = MessageUpdateAuction.decode(body)
            auction = self._administration.update_auction(
                auth,
                auction_id,
                start_time=request.start_time,
                end_time=request.end_time,
                starting_bid=request.starting_bid,
                status=request.get_status(),
            )
            return Response(200, AuctionMessageData.from_auction(auction).encode())

        return self._guard(update)

    def delete_auction(self, auction_id: str, auth: AuthContext | None) -> Response:
        """Handles DELETE /auctions/{id}."""
        if auth is None:
            return AuctionHandlers._error(401, "Authentication required.")

        def remove() -> Response:
            self._administration.delete_auction(auth, auction_id)
            return Response(204)

        return self._guard(remove)

    # === Helper ===

    def _guard(self, handle: Callable[[], Response]) -> Response:
        """Runs the handler and maps the errors it raises to responses."""
        try:
            return handle()
        except (ValidationError, JSONDecodeError, UnicodeDecodeError) as e:
            self._logger.info(f"{self._prefix}: Invalid request: {e}")
            return AuctionHandlers._error(400, "Invalid data format.")
        except AuctionNotFoundError as e:
            return AuctionHandlers._error(404, str(e))
        except AuctionValidationError as e:
            return AuctionHandlers._error(400, str(e))
        except PermissionDeniedError:
            return AuctionHandlers._error(403, "Access denied.")
        except (AuctionStateError, AuctionConflictError) as e:
            return AuctionHandlers._error(409, str(e))
        except StoreError as e:
            self._logger.error(f"{self._prefix}: Store failure: {e}")
            return AuctionHandlers._error(503, "A storage error occurred.")
        except CarbidError as e:
            self._logger.error(f"{self._prefix}: Unexpected failure: {e}")
            return AuctionHandlers._error(500, "An unexpected error occurred.")

    @staticmethod
    def _error(status: int, message: str) -> Response:
        return Response(status, MessageError(error=message).encode())
