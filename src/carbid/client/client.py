from logging import Logger

import inquirer

# === Custom Modules ===

from carbid.model import AuthContext, StaticAuthenticator
from carbid.process import AuctionAdministration, BiddingEngine
from carbid.util import Clock, LoggerConfig, create_logger

from carbid.constant import interaction as inter

# === Local Modules ===

from .administrator import Administrator
from .bidder import Bidder


class Client:
    """Client class for the interactive console.

    It handles the two cases of client actions; administrating and bidding implemented in their respective classes.
    The administrating actions are only offered to administrator accounts.

    The client actions are given through an interactive command line interface, which will cause to run the respective methods.
    """

    def __init__(
        self,
        engine: BiddingEngine,
        administration: AuctionAdministration,
        authenticator: StaticAuthenticator,
        clock: Clock,
        logger_config: LoggerConfig | None = None,
    ) -> None:
        """Initializes the client class.

        Args:
            engine (BiddingEngine): The bidding engine.
            administration (AuctionAdministration): The auction administration.
            authenticator (StaticAuthenticator): The authenticator of the configured accounts.
            clock (Clock): The clock of the application.
            logger_config (LoggerConfig, optional): The logger configuration.
        """
        self._name: str = self.__class__.__name__.lower()
        self._prefix: str = f"{self._name}"
        self._logger_config: LoggerConfig | None = logger_config
        self._logger: Logger = create_logger(self._name, logger_config)

        self._engine: BiddingEngine = engine
        self._administration: AuctionAdministration = administration
        self._authenticator: StaticAuthenticator = authenticator
        self._clock: Clock = clock

        self._logger.info(f"{self._prefix}: Initialized")

    def run(self) -> None:
        """Signs in and starts the interactive command line interface."""
        self._logger.info(f"{self._prefix}: Started")

        auth = self._sign_in()
        if auth is None:
            self._logger.info(f"{self._prefix}: No account signed in")
            return

        self._logger.info(f"{self._prefix}: Signed in as {auth.name} ({auth.role.value})")
        self.interact(auth)
        self._logger.info(f"{self._prefix}: Stopped")

    def interact(self, auth: AuthContext) -> None:
        """Handles the interactive command line interface for the client.

        This should be run in the main thread (process), handling user input.
        """
        bidder = Bidder(
            self._engine,
            self._administration,
            auth,
            create_logger("bidder", self._logger_config),
        )
        administrator: Administrator | None = (
            Administrator(
                self._administration,
                self._clock,
                auth,
                create_logger("administrator", self._logger_config),
            )
            if auth.is_admin()
            else None
        )

        choices = [inter.CLIENT_ACTION_BIDDER]
        if administrator is not None:
            choices.append(inter.CLIENT_ACTION_ADMINISTRATOR)
        choices.append(inter.CLIENT_ACTION_STOP)

        while True:
            answer = inquirer.prompt(
                [
                    inquirer.List(
                        "action",
                        message=inter.CLIENT_ACTION_QUESTION,
                        choices=choices,
                    )
                ]
            )

            if answer is None:
                break

            match answer["action"]:
                case inter.CLIENT_ACTION_BIDDER:
                    bidder.interact()
                case inter.CLIENT_ACTION_ADMINISTRATOR if administrator is not None:
                    administrator.interact()
                case inter.CLIENT_ACTION_STOP:
                    break
                case _:
                    self._logger.error(
                        f"{self._prefix}: Invalid action {answer['action']}"
                    )

    # === Helper Methods ===

    def _sign_in(self) -> AuthContext | None:
        """Prompts for the account to act as."""
        names = self._authenticator.names()
        if len(names) == 0:
            print("No accounts configured")
            return None

        answer = inquirer.prompt(
            [inquirer.List("account", message=inter.LOGIN_QUESTION, choices=names)]
        )
        if answer is None:
            return None

        return self._authenticator.authenticate(str(answer["account"]))
