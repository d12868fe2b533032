from uuid import uuid4


def generate_id() -> str:
    """Generates a unique identifier for auctions and bids.

    Returns:
        str: The unique identifier.
    """
    return str(uuid4())
