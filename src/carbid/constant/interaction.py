"""This file contains all the constants related to the interaction for the interactive command line interface."""

# Sign in constants
LOGIN_QUESTION: str = "Sign in as"

# Client action constants
CLIENT_ACTION_QUESTION: str = "Who do you want to act as"
CLIENT_ACTION_BIDDER: str = "Bidder"
CLIENT_ACTION_ADMINISTRATOR: str = "Administrator"
CLIENT_ACTION_STOP: str = "Stop"

# Administrator action constants
ADMINISTRATOR_ACTION_QUESTION: str = "What do you want to do"
ADMINISTRATOR_ACTION_CREATE: str = "Create an auction"
ADMINISTRATOR_ACTION_LIST_AUCTIONS: str = "List all auctions"
ADMINISTRATOR_ACTION_CANCEL: str = "Cancel an auction"
ADMINISTRATOR_ACTION_DELETE: str = "Delete an auction"
ADMINISTRATOR_ACTION_GO_BACK: str = "Go back"
ADMINISTRATOR_VEHICLE_QUESTION: str = "Vehicle id"
ADMINISTRATOR_STARTING_BID_QUESTION: str = "Starting bid"
ADMINISTRATOR_START_QUESTION: str = "Starts in how many minutes"
ADMINISTRATOR_DURATION_QUESTION: str = "Runs for how many minutes"

# Bidder action constants
BIDDER_ACTION_QUESTION: str = "What do you want to do"
BIDDER_ACTION_ACTIVE_AUCTIONS: str = "List currently active auctions"
BIDDER_ACTION_AUCTION_DETAILS: str = "Show an auction and its bids"
BIDDER_ACTION_PLACE_BID: str = "Bid on an auction"
BIDDER_ACTION_GO_BACK: str = "Go back"
BIDDER_AUCTION_QUESTION: str = "Which auction"
BIDDER_BID_AMOUNT_QUESTION: str = "How much do you want to bid"

# Amount input format
AMOUNT_PATTERN: str = r"^\d+(\.\d{1,2})?$"
