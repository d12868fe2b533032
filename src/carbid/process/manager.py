from multiprocessing.managers import BaseManager

from carbid.store import MemoryAuctionStore

# Name under which the memory auction store is registered
AUCTION_STORE: str = "AuctionStore"


# Store Manager
class Manager(BaseManager):
    """Store manager serving memory auction stores to several processes.

    Each call of manager.AuctionStore() creates a store in the manager process and returns a proxy to it.
    The proxy can be handed to other processes; calls are executed in the manager process,
    one thread per connection, where the store serializes them per auction.

    Args:
        BaseManager: The base manager provided by the multiprocessing module.
    """

    pass


# Register managed objects
Manager.register(AUCTION_STORE, MemoryAuctionStore)
