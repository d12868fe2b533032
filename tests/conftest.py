from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Iterator

import pytest

from carbid.constant import AuctionStatus, Role
from carbid.model import Auction, AuthContext
from carbid.process import AuctionAdministration, BiddingEngine
from carbid.store import AuctionStore, MemoryAuctionStore, SqlAuctionStore
from carbid.util import FixedClock

T0 = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
ONE_HOUR = timedelta(hours=1)

ADMIN = AuthContext(user_id="admin-1", role=Role.ADMIN, name="admin")
ALICE = AuthContext(user_id="alice-1", role=Role.USER, name="alice")
BOB = AuthContext(user_id="bob-1", role=Role.USER, name="bob")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def store() -> MemoryAuctionStore:
    return MemoryAuctionStore()


@pytest.fixture
def engine(store: AuctionStore, clock: FixedClock) -> BiddingEngine:
    return BiddingEngine(store, clock)


@pytest.fixture
def administration(store: AuctionStore, clock: FixedClock) -> AuctionAdministration:
    return AuctionAdministration(store, clock)


@pytest.fixture
def sql_store() -> Iterator[SqlAuctionStore]:
    store = SqlAuctionStore.from_url("sqlite://")
    yield store
    store.dispose()


def build_auction(
    auction_id: str = "auction-1",
    start: datetime = T0,
    end: datetime = T0 + ONE_HOUR,
    starting_bid: Decimal = Decimal("1000"),
    status: AuctionStatus = AuctionStatus.ACTIVE,
) -> Auction:
    return Auction(
        auction_id=auction_id,
        vehicle_id="vehicle-1",
        start_time=start,
        end_time=end,
        starting_bid=starting_bid,
        created_at=start - ONE_HOUR,
        status=status,
    )


@pytest.fixture
def make_auction(store: AuctionStore) -> Callable[..., Auction]:
    """Returns a function adding an auction to the store."""

    def make(**kwargs) -> Auction:
        auction = build_auction(**kwargs)
        store.add_auction(auction)
        return auction

    return make
