from carbid.model import Auction, Bid, BidReceipt, BidRejection

TIME_FORMAT: str = "%a, %d %b %Y %H:%M:%S %z"


def format_auction(auction: Auction) -> str:
    """Returns a one line summary of the auction."""
    highest = auction.get_highest_bid()
    highest_text = "n/a" if highest is None else f"{highest[1]} by {highest[0]}"
    return (
        f"Auction {auction.get_id()}: Progress: {auction.get_status_description()}, "
        f"Vehicle: {auction.get_vehicle_id()}, Starting bid: {auction.get_starting_bid()}, "
        f"Highest bid: {highest_text}, Ends: {auction.get_end_time().strftime(TIME_FORMAT)}"
    )


def format_bid(bid: Bid) -> str:
    """Returns a one line summary of a bid of the bid history."""
    return f"* {bid.placed_at.strftime(TIME_FORMAT)}: {bid.amount} by {bid.bidder_id}"


def format_result(result: BidReceipt | BidRejection) -> str:
    """Returns the message shown after placing a bid."""
    if isinstance(result, BidReceipt):
        return f"Bid {result.bid_id} of {result.amount} accepted."
    return f"Bid rejected: {result.describe()}"
