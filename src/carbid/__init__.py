"""Auction bidding core of the vehicle marketplace."""

__version__ = "0.1.0"
