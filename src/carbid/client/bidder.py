from decimal import Decimal
from logging import Logger

import re
import inquirer

# === Custom Modules ===

from carbid.model import Auction, AuthContext, AuctionNotFoundError
from carbid.process import AuctionAdministration, BiddingEngine
from carbid.util import create_logger

from carbid.constant import interaction as inter

# === Local Modules ===

from .formatting import format_auction, format_bid, format_result


class Bidder:
    """The bidder class handles the bidding of the signed in account.

    The bidder class provides an interactive command line interface to list auctions, show their bid history and place bids.
    """

    def __init__(
        self,
        engine: BiddingEngine,
        administration: AuctionAdministration,
        auth: AuthContext,
        logger: Logger | None = None,
    ) -> None:
        """Initializes the bidder class.

        Args:
            engine (BiddingEngine): The bidding engine to place bids with.
            administration (AuctionAdministration): The administration to read auctions from.
            auth (AuthContext): The signed in account.
            logger (Logger, optional): The logger to use.
        """
        self._name: str = self.__class__.__name__.lower()
        self._prefix: str = f"{self._name}::{auth.name}"
        self._logger: Logger = logger if logger is not None else create_logger(self._name)

        self._engine: BiddingEngine = engine
        self._administration: AuctionAdministration = administration
        self._auth: AuthContext = auth

        self._logger.info(f"{self._prefix}: Initialized")

    def interact(self) -> None:
        """Runs the bidder menu until the user goes back.

        Rejected bids are shown to the user, store failures propagate to the client.
        """
        while True:
            answer = inquirer.prompt(
                [
                    inquirer.List(
                        "action",
                        message=inter.BIDDER_ACTION_QUESTION,
                        choices=[
                            inter.BIDDER_ACTION_ACTIVE_AUCTIONS,
                            inter.BIDDER_ACTION_AUCTION_DETAILS,
                            inter.BIDDER_ACTION_PLACE_BID,
                            inter.BIDDER_ACTION_GO_BACK,
                        ],
                    )
                ]
            )

            if answer is None:
                break

            match answer["action"]:
                case inter.BIDDER_ACTION_ACTIVE_AUCTIONS:
                    self._show_active_auctions()
                case inter.BIDDER_ACTION_AUCTION_DETAILS:
                    self._show_auction()
                case inter.BIDDER_ACTION_PLACE_BID:
                    self._place_bid()
                case inter.BIDDER_ACTION_GO_BACK:
                    break
                case _:
                    self._logger.error(
                        f"{self._prefix}: Invalid action {answer['action']}"
                    )

    # === Menu actions ===

    def _show_active_auctions(self) -> None:
        """Lists the auctions accepting bids."""
        print("Auctions accepting bids:")
        for auction in self._administration.list_auctions(active_only=True):
            print(format_auction(auction))
        print()

    def _show_auction(self) -> None:
        """Shows an auction with its bid history, ended auctions included."""
        auction_id: str | None = self._choose_auction(
            self._administration.list_auctions()
        )
        if auction_id is None:
            return

        try:
            auction: Auction = self._administration.get_auction(auction_id)
            bids = self._administration.get_bids(auction_id)
        except AuctionNotFoundError:
            print(f"Auction with id {auction_id} does not exist")
            return

        print(format_auction(auction))
        print(f"Bid history ({len(bids)} bids):")
        for bid in bids:
            print(format_bid(bid))
        print()

    def _place_bid(self) -> None:
        """Places a bid of the signed in account on a running auction."""
        auction_id: str | None = self._choose_auction(
            self._administration.list_auctions(active_only=True)
        )
        if auction_id is None:
            return

        amount: Decimal | None = self._bid_amount()
        if amount is None:
            return

        result = self._engine.place_bid(auction_id, self._auth.user_id, amount)
        self._logger.info(f"{self._prefix}: Bid of {amount} on {auction_id}: {result}")
        print(format_result(result))
        print()

    # === Prompts ===

    def _choose_auction(self, auctions: list[Auction]) -> None | str:
        """Prompts for one of the given auctions.

        Args:
            auctions (list[Auction]): The auctions to choose from.

        Returns:
            str | None: The id of the chosen auction, None if there is none to choose or the prompt was aborted.
        """
        if len(auctions) == 0:
            print("No auctions available")
            return None

        answer = inquirer.prompt(
            [
                inquirer.List(
                    "auction",
                    message=inter.BIDDER_AUCTION_QUESTION,
                    choices=[auction.get_id() for auction in auctions],
                )
            ]
        )

        if answer is None:
            return None

        return str(answer["auction"])

    def _bid_amount(self) -> Decimal | None:
        """Prompts for the amount, accepting at most two decimal places."""
        answer = inquirer.prompt(
            [
                inquirer.Text(
                    "amount",
                    message=inter.BIDDER_BID_AMOUNT_QUESTION,
                    validate=lambda _, x: re.match(inter.AMOUNT_PATTERN, x) is not None,
                )
            ]
        )

        if answer is None:
            return None

        return Decimal(answer["amount"])
