"""Constants of the bidding core."""

# Number of fractional digits a monetary amount may carry
MONEY_PLACES: int = 2

# Total number of digits of a monetary amount (NUMERIC(17, 2))
MONEY_DIGITS: int = 17

# Attempts of a conflict-guarded write before giving up
DEFAULT_MAX_RETRIES: int = 5
