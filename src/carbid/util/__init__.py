from .config import (
    load_config,
    Config,
    LoggerConfig,
    BiddingConfig,
    StoreConfig,
    ManagerConfig,
    AccountConfig,
)
from .logger import create_logger
from .clock import Clock, SystemClock, FixedClock
from .generator import generate_id
from .money import is_valid_amount, to_money
