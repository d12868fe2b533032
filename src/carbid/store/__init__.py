from .base import AuctionStore, VersionToken, CommitOutcome
from .memory import MemoryAuctionStore
from .sql import SqlAuctionStore
