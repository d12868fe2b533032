from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from threading import Lock
from typing import Iterator

from carbid.model import Auction, Bid, AuctionValidationError, AuctionHasBidsError

from .base import AuctionStore, VersionToken, CommitOutcome


class MemoryAuctionStore(AuctionStore):
    """The memory auction store keeps auctions and bids in process memory.

    Every auction has its own lock and version counter, such that writes to different auctions never contend.
    Locks exist only for stored auctions: they are created when an auction is added and dropped when it is deleted.
    Snapshots handed out are copies; the stored auctions are never shared with callers.

    The store can be shared between processes by serving it through the store manager.
    """

    def __init__(self) -> None:
        self._auctions: dict[str, Auction] = {}
        self._versions: dict[str, int] = {}
        self._bids: dict[str, list[Bid]] = {}

        # Guards the dictionaries above, held only for lookups, insertions and removals
        self._registry_lock: Lock = Lock()
        self._locks: dict[str, Lock] = {}

    def get_auction(self, auction_id: str) -> Auction | None:
        with self._locked(auction_id) as exists:
            if not exists:
                return None
            return Auction.copy(self._auctions[auction_id])

    def get_auction_for_update(
        self, auction_id: str
    ) -> tuple[Auction, VersionToken] | None:
        with self._locked(auction_id) as exists:
            if not exists:
                return None
            return Auction.copy(self._auctions[auction_id]), VersionToken(
                auction_id, self._versions[auction_id]
            )

    def commit_bid(
        self,
        auction_id: str,
        token: VersionToken,
        bid: Bid,
        new_highest: Decimal,
        new_highest_bidder: str,
    ) -> CommitOutcome:
        if (
            bid.auction_id != auction_id
            or bid.amount != new_highest
            or bid.bidder_id != new_highest_bidder
        ):
            raise ValueError(f"{bid} does not match the new highest bid of {auction_id}")

        with self._locked(auction_id) as exists:
            if not exists or not self._is_current(auction_id, token):
                return CommitOutcome.CONFLICT

            # Apply on a copy first, such that a failing check leaves the stored auction untouched
            updated = Auction.copy(self._auctions[auction_id])
            updated.record_bid(bid)

            self._auctions[auction_id] = updated
            self._bids[auction_id].append(bid)
            self._versions[auction_id] += 1
            return CommitOutcome.COMMITTED

    def add_auction(self, auction: Auction) -> None:
        with self._registry_lock:
            if auction.get_id() in self._auctions:
                raise AuctionValidationError(
                    f"Auction with id {auction.get_id()} already exists"
                )
            self._locks.setdefault(auction.get_id(), Lock())
            self._auctions[auction.get_id()] = Auction.copy(auction)
            self._versions[auction.get_id()] = 0
            self._bids[auction.get_id()] = []

    def save_auction(self, auction: Auction, token: VersionToken) -> CommitOutcome:
        with self._locked(auction.get_id()) as exists:
            if not exists or not self._is_current(auction.get_id(), token):
                return CommitOutcome.CONFLICT

            stored = self._auctions[auction.get_id()]
            if (
                stored.get_current_highest_bid() != auction.get_current_highest_bid()
                or stored.get_highest_bidder_id() != auction.get_highest_bidder_id()
            ):
                raise ValueError(
                    f"Saving auction {auction.get_id()} must not change its highest bid"
                )

            self._auctions[auction.get_id()] = Auction.copy(auction)
            self._versions[auction.get_id()] += 1
            return CommitOutcome.COMMITTED

    def delete_auction(self, auction_id: str) -> bool:
        with self._locked(auction_id) as exists:
            if not exists:
                return False
            if self._bids[auction_id]:
                raise AuctionHasBidsError(
                    f"Auction {auction_id} has {len(self._bids[auction_id])} bids and cannot be deleted"
                )
            with self._registry_lock:
                del self._auctions[auction_id]
                del self._versions[auction_id]
                del self._bids[auction_id]
                del self._locks[auction_id]
            return True

    def list_auctions(self) -> list[Auction]:
        with self._registry_lock:
            auction_ids = list(self._auctions.keys())

        auctions: list[Auction] = []
        for auction_id in auction_ids:
            auction = self.get_auction(auction_id)
            if auction is not None:
                auctions.append(auction)
        return sorted(
            auctions, key=lambda auction: (auction.get_start_time(), auction.get_id())
        )

    def get_bids(self, auction_id: str) -> list[Bid]:
        with self._locked(auction_id) as exists:
            if not exists:
                return []
            return list(self._bids[auction_id])

    # === Helper ===

    @contextmanager
    def _locked(self, auction_id: str) -> Iterator[bool]:
        """Holds the lock of the auction and yields whether the auction exists.

        Missing auctions get no lock. An auction deleted while waiting for its lock counts as missing,
        even if an auction with the same id has been added since.
        """
        with self._registry_lock:
            lock = self._locks.get(auction_id)
        if lock is None:
            yield False
            return

        with lock:
            with self._registry_lock:
                exists = self._locks.get(auction_id) is lock
            yield exists

    def _is_current(self, auction_id: str, token: VersionToken) -> bool:
        """Returns whether the token matches the current version of the auction."""
        return token.auction_id == auction_id and self._versions[auction_id] == token.version
