from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    TypeDecorator,
    create_engine,
    delete,
    exists,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from carbid.constant import AuctionStatus, MONEY_PLACES, DEFAULT_MAX_RETRIES
from carbid.model import (
    Auction,
    Bid,
    StoreError,
    AuctionValidationError,
    AuctionHasBidsError,
    AuctionConflictError,
)

from .base import AuctionStore, VersionToken, CommitOutcome


class UtcDateTime(TypeDecorator):
    """Timezone aware datetime stored as naive UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError(f"Naive datetime {value} cannot be stored")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


class Money(TypeDecorator):
    """Exact monetary amount stored as integer minor units."""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Optional[Decimal], dialect) -> Optional[int]:
        if value is None:
            return None
        minor = value.scaleb(MONEY_PLACES)
        if minor != minor.to_integral_value():
            raise ValueError(f"Amount {value} has more than {MONEY_PLACES} decimal places")
        return int(minor)

    def process_result_value(self, value: Optional[int], dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value).scaleb(-MONEY_PLACES)


class Base(DeclarativeBase):
    pass


class AuctionRow(Base):
    """Auction table."""

    __tablename__ = "auctions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    vehicle_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    start_time: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    starting_bid: Mapped[Decimal] = mapped_column(Money, nullable=False)
    current_highest_bid: Mapped[Optional[Decimal]] = mapped_column(Money, nullable=True)
    highest_bidder_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="chk_auction_window"),
        CheckConstraint("starting_bid > 0", name="chk_auction_starting_bid_positive"),
        CheckConstraint(
            "(current_highest_bid IS NULL) = (highest_bidder_id IS NULL)",
            name="chk_auction_highest_bid_pair",
        ),
    )


class BidRow(Base):
    """Bid table. Rows are only ever inserted."""

    __tablename__ = "bids"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    auction_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("auctions.id", ondelete="RESTRICT"), nullable=False
    )
    bidder_id: Mapped[str] = mapped_column(String(36), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    placed_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    # Auction version the bid produced; orders the bids of an auction by commit
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="chk_bid_amount_positive"),
        Index("idx_bids_auction_sequence", "auction_id", "sequence", unique=True),
    )


class SqlAuctionStore(AuctionStore):
    """Auction store on a relational database through SQLAlchemy.

    Writes are guarded optimistically by the version column of the auction:
    a bid commit is one transaction issuing an UPDATE conditioned on the version read before,
    followed by the INSERT of the bid. Any concurrent commit bumps the version and thereby
    turns the later UPDATE into a no-op, which is reported as a conflict.
    """

    def __init__(self, engine: Engine) -> None:
        """Initializes the store and creates missing tables.

        Args:
            engine (Engine): The SQLAlchemy engine to use.
        """
        self._engine: Engine = engine
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine, expire_on_commit=False
        )
        with self._translate_errors("create tables"):
            Base.metadata.create_all(engine)

    @staticmethod
    def from_url(url: str, echo: bool = False) -> SqlAuctionStore:
        """Creates a store for the database url.

        SQLite connections may be used from several threads; in-memory SQLite databases share one connection.

        Args:
            url (str): The SQLAlchemy database url.
            echo (bool, optional): Whether to log the emitted statements. Defaults to False.

        Returns:
            SqlAuctionStore: The store.
        """
        if url.startswith("sqlite"):
            connect_args = {"check_same_thread": False, "timeout": 30}
            if url in ("sqlite://", "sqlite:///:memory:"):
                engine = create_engine(
                    url, echo=echo, connect_args=connect_args, poolclass=StaticPool
                )
            else:
                engine = create_engine(url, echo=echo, connect_args=connect_args)
        else:
            engine = create_engine(url, echo=echo, pool_pre_ping=True)
        return SqlAuctionStore(engine)

    def dispose(self) -> None:
        """Releases the connections of the store."""
        self._engine.dispose()

    def get_auction(self, auction_id: str) -> Auction | None:
        with self._translate_errors(f"read auction {auction_id}"):
            with self._session_factory() as session:
                row = session.get(AuctionRow, auction_id)
                return None if row is None else SqlAuctionStore._to_auction(row)

    def get_auction_for_update(
        self, auction_id: str
    ) -> tuple[Auction, VersionToken] | None:
        with self._translate_errors(f"read auction {auction_id}"):
            with self._session_factory() as session:
                row = session.get(AuctionRow, auction_id)
                if row is None:
                    return None
                return SqlAuctionStore._to_auction(row), VersionToken(
                    auction_id, row.version
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
        if token.auction_id != auction_id:
            return CommitOutcome.CONFLICT

        with self._translate_errors(f"commit bid {bid.id}"):
            with self._session_factory.begin() as session:
                result = session.execute(
                    update(AuctionRow)
                    .where(
                        AuctionRow.id == auction_id,
                        AuctionRow.version == token.version,
                    )
                    .values(
                        current_highest_bid=new_highest,
                        highest_bidder_id=new_highest_bidder,
                        status=AuctionStatus.ACTIVE.value,
                        updated_at=bid.placed_at,
                        version=AuctionRow.version + 1,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    return CommitOutcome.CONFLICT

                session.add(
                    BidRow(
                        id=bid.id,
                        auction_id=auction_id,
                        bidder_id=bid.bidder_id,
                        amount=bid.amount,
                        placed_at=bid.placed_at,
                        sequence=token.version + 1,
                    )
                )
        return CommitOutcome.COMMITTED

    def add_auction(self, auction: Auction) -> None:
        with self._translate_errors(f"add auction {auction.get_id()}"):
            with self._session_factory.begin() as session:
                if session.get(AuctionRow, auction.get_id()) is not None:
                    raise AuctionValidationError(
                        f"Auction with id {auction.get_id()} already exists"
                    )
                row = AuctionRow(id=auction.get_id(), version=0)
                SqlAuctionStore._apply(row, auction)
                row.current_highest_bid = auction.get_current_highest_bid()
                row.highest_bidder_id = auction.get_highest_bidder_id()
                session.add(row)

    def save_auction(self, auction: Auction, token: VersionToken) -> CommitOutcome:
        if token.auction_id != auction.get_id():
            return CommitOutcome.CONFLICT

        with self._translate_errors(f"save auction {auction.get_id()}"):
            with self._session_factory.begin() as session:
                result = session.execute(
                    update(AuctionRow)
                    .where(
                        AuctionRow.id == auction.get_id(),
                        AuctionRow.version == token.version,
                    )
                    .values(
                        vehicle_id=auction.get_vehicle_id(),
                        start_time=auction.get_start_time(),
                        end_time=auction.get_end_time(),
                        starting_bid=auction.get_starting_bid(),
                        status=auction.get_status().value,
                        updated_at=auction.get_updated_at(),
                        version=AuctionRow.version + 1,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:  # type: ignore[attr-defined]
                    return CommitOutcome.CONFLICT
        return CommitOutcome.COMMITTED

    def delete_auction(self, auction_id: str) -> bool:
        for _ in range(DEFAULT_MAX_RETRIES):
            with self._translate_errors(f"delete auction {auction_id}"):
                with self._session_factory.begin() as session:
                    row = session.get(AuctionRow, auction_id)
                    if row is None:
                        return False
                    if session.scalar(
                        select(exists().where(BidRow.auction_id == auction_id))
                    ):
                        raise AuctionHasBidsError(
                            f"Auction {auction_id} has bids and cannot be deleted"
                        )
                    result = session.execute(
                        delete(AuctionRow)
                        .where(
                            AuctionRow.id == auction_id,
                            AuctionRow.version == row.version,
                        )
                        .execution_options(synchronize_session=False)
                    )
                    if result.rowcount == 1:  # type: ignore[attr-defined]
                        return True
        raise AuctionConflictError(f"Auction {auction_id} kept changing during deletion")

    def list_auctions(self) -> list[Auction]:
        with self._translate_errors("list auctions"):
            with self._session_factory() as session:
                rows = session.scalars(
                    select(AuctionRow).order_by(AuctionRow.start_time, AuctionRow.id)
                ).all()
                return [SqlAuctionStore._to_auction(row) for row in rows]

    def get_bids(self, auction_id: str) -> list[Bid]:
        with self._translate_errors(f"read bids of auction {auction_id}"):
            with self._session_factory() as session:
                rows = session.scalars(
                    select(BidRow)
                    .where(BidRow.auction_id == auction_id)
                    .order_by(BidRow.sequence)
                ).all()
                return [
                    Bid(
                        id=row.id,
                        auction_id=row.auction_id,
                        bidder_id=row.bidder_id,
                        amount=row.amount,
                        placed_at=row.placed_at,
                    )
                    for row in rows
                ]

    # === Helper ===

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        """Turns database errors into store errors."""
        try:
            yield
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to {action}: {exc}") from exc

    @staticmethod
    def _to_auction(row: AuctionRow) -> Auction:
        return Auction(
            auction_id=row.id,
            vehicle_id=row.vehicle_id,
            start_time=row.start_time,
            end_time=row.end_time,
            starting_bid=row.starting_bid,
            created_at=row.created_at,
            status=AuctionStatus(row.status),
            current_highest_bid=row.current_highest_bid,
            highest_bidder_id=row.highest_bidder_id,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _apply(row: AuctionRow, auction: Auction) -> None:
        """Copies the administrative fields of the auction onto the row."""
        row.vehicle_id = auction.get_vehicle_id()
        row.start_time = auction.get_start_time()
        row.end_time = auction.get_end_time()
        row.starting_bid = auction.get_starting_bid()
        row.status = auction.get_status().value
        row.created_at = auction.get_created_at()
        row.updated_at = auction.get_updated_at()
