from datetime import timedelta
from decimal import Decimal
from logging import Logger

import re
import inquirer

# === Custom Modules ===

from carbid.model import AuthContext, CarbidError
from carbid.process import AuctionAdministration
from carbid.util import Clock, create_logger

from carbid.constant import interaction as inter

# === Local Modules ===

from .formatting import format_auction


class Administrator:
    """Administrator class handles the management of auctions.

    The administrator class is responsible for the following:
    - Creating an auction: for a vehicle, with starting bid, start offset and duration.
    - Listing all auctions, whatever their status.
    - Cancelling a pending or running auction.
    - Deleting an auction without bids.
    """

    def __init__(
        self,
        administration: AuctionAdministration,
        clock: Clock,
        auth: AuthContext,
        logger: Logger | None = None,
    ) -> None:
        """Initializes the administrator class.

        Args:
            administration (AuctionAdministration): The auction administration.
            clock (Clock): The clock the bidding window is computed from.
            auth (AuthContext): The signed in account, should be an administrator.
            logger (Logger, optional): The logger to use.
        """
        self._name: str = self.__class__.__name__.lower()
        self._prefix: str = f"{self._name}::{auth.name}"
        self._logger: Logger = logger if logger is not None else create_logger(self._name)

        self._administration: AuctionAdministration = administration
        self._clock: Clock = clock
        self._auth: AuthContext = auth

        self._logger.info(f"{self._prefix}: Initialized")

    def interact(self) -> None:
        """Handles the interactive command line interface for the administrator.

        This should be run in the main thread (process), handling user input.
        """
        while True:
            answer = inquirer.prompt(
                [
                    inquirer.List(
                        "action",
                        message=inter.ADMINISTRATOR_ACTION_QUESTION,
                        choices=[
                            inter.ADMINISTRATOR_ACTION_CREATE,
                            inter.ADMINISTRATOR_ACTION_LIST_AUCTIONS,
                            inter.ADMINISTRATOR_ACTION_CANCEL,
                            inter.ADMINISTRATOR_ACTION_DELETE,
                            inter.ADMINISTRATOR_ACTION_GO_BACK,
                        ],
                    )
                ]
            )

            if answer is None:
                break

            try:
                match answer["action"]:
                    case inter.ADMINISTRATOR_ACTION_CREATE:
                        self._create_auction()
                    case inter.ADMINISTRATOR_ACTION_LIST_AUCTIONS:
                        self._list_auctions()
                    case inter.ADMINISTRATOR_ACTION_CANCEL:
                        self._cancel_auction()
                    case inter.ADMINISTRATOR_ACTION_DELETE:
                        self._delete_auction()
                    case inter.ADMINISTRATOR_ACTION_GO_BACK:
                        break
                    case _:
                        self._logger.error(f"{self._prefix}: Invalid action {answer['action']}")
            except CarbidError as e:
                self._logger.info(f"{self._prefix}: {answer['action']} failed: {e}")
                print(f"Failed: {e}")
                print()

    # === Interaction methods ===

    def _create_auction(self) -> None:
        """Creates an auction from the prompted information."""
        answer = inquirer.prompt(
            [
                inquirer.Text(
                    "vehicle",
                    message=inter.ADMINISTRATOR_VEHICLE_QUESTION,
                    validate=lambda _, x: len(x.strip()) > 0,
                ),
                inquirer.Text(
                    "starting_bid",
                    message=inter.ADMINISTRATOR_STARTING_BID_QUESTION,
                    validate=lambda _, x: re.match(inter.AMOUNT_PATTERN, x) is not None,
                ),
                inquirer.Text(
                    "start",
                    message=inter.ADMINISTRATOR_START_QUESTION,
                    validate=lambda _, x: re.match(r"^\d+$", x) is not None,
                ),
                inquirer.Text(
                    "duration",
                    message=inter.ADMINISTRATOR_DURATION_QUESTION,
                    validate=lambda _, x: re.match(r"^[1-9]\d*$", x) is not None,
                ),
            ]
        )

        if answer is None:
            return

        start_time = self._clock.now() + timedelta(minutes=int(answer["start"]))
        auction = self._administration.create_auction(
            self._auth,
            vehicle_id=answer["vehicle"].strip(),
            start_time=start_time,
            end_time=start_time + timedelta(minutes=int(answer["duration"])),
            starting_bid=Decimal(answer["starting_bid"]),
        )
        print(f"Created {format_auction(auction)}")
        print()

    def _list_auctions(self) -> None:
        """Lists all auctions."""
        print("Auctions:")
        for auction in self._administration.list_auctions():
            print(format_auction(auction))
        print()

    def _cancel_auction(self) -> None:
        """Cancels a chosen auction."""
        auction_id = self._choose_auction()
        if auction_id is None:
            return
        auction = self._administration.cancel_auction(self._auth, auction_id)
        print(f"Cancelled {format_auction(auction)}")
        print()

    def _delete_auction(self) -> None:
        """Deletes a chosen auction."""
        auction_id = self._choose_auction()
        if auction_id is None:
            return
        self._administration.delete_auction(self._auth, auction_id)
        print(f"Deleted auction {auction_id}")
        print()

    # === Prompt methods ===

    def _choose_auction(self) -> str | None:
        """Prompts the user to choose one of all auctions."""
        auctions = self._administration.list_auctions()
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
