"""Interactive console of the vehicle auction core."""

import argparse

# === Custom Modules ===

from carbid.client import Client
from carbid.model import StaticAuthenticator
from carbid.process import AuctionAdministration, BiddingEngine, Manager
from carbid.store import AuctionStore, SqlAuctionStore
from carbid.util import Config, SystemClock, create_logger
from carbid.util.config import DEFAULT_CONFIG_PATH


def main(argv: list[str] | None = None) -> None:
    """Starts the store and runs the interactive console on it."""
    parser = argparse.ArgumentParser(prog="carbid", description=__doc__)
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG_PATH, help="path of the TOML configuration"
    )
    args = parser.parse_args(argv)

    config = Config.load(args.config)
    logger = create_logger("main", config.logger)
    clock = SystemClock()

    # Memory stores live in the manager process, such that other processes can share them
    manager: Manager | None = None
    sql_store: SqlAuctionStore | None = None
    store: AuctionStore
    if config.store.backend == "memory":
        manager = Manager(
            address=(config.manager.address, config.manager.port),
            authkey=config.manager.authkey.encode("utf-8"),
        )
        manager.start()
        store = manager.AuctionStore()  # type: ignore
        logger.info(f"main: Serving memory store at {manager.address}")
    else:
        sql_store = SqlAuctionStore.from_url(config.store.url, echo=config.store.echo)
        store = sql_store
        logger.info(f"main: Using sql store at {config.store.url}")

    engine = BiddingEngine(
        store,
        clock,
        max_retries=config.bidding.max_retries,
        logger=create_logger("biddingengine", config.logger),
    )
    administration = AuctionAdministration(
        store,
        clock,
        max_retries=config.bidding.max_retries,
        logger=create_logger("auctionadministration", config.logger),
    )
    client = Client(
        engine=engine,
        administration=administration,
        authenticator=StaticAuthenticator(config.accounts),
        clock=clock,
        logger_config=config.logger,
    )

    try:
        client.run()
    finally:
        # Release the store when the client interaction is done
        if manager is not None:
            manager.shutdown()
        if sql_store is not None:
            sql_store.dispose()
        logger.info("main: Stopped")


if __name__ == "__main__":
    main()
