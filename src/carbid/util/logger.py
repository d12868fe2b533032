import os
import logging

# === Custom Modules ===

from carbid.util.config import LoggerConfig


def create_logger(name: str, config: LoggerConfig | None = None) -> logging.Logger:
    """Creates a logger with corresponding log file.

    Without a configuration the logger has no handler of its own and only propagates.

    Args:
        name (str): The name of the logger and corresponding file.
        config (LoggerConfig, optional): The logger configuration. Defaults to None.
    """
    logger = logging.getLogger(f"carbid.{name}")
    if config is None:
        return logger

    if not os.path.isdir(config.path):
        os.makedirs(config.path, exist_ok=True)
    path = os.path.abspath(os.path.join(config.path, name + ".log"))

    logger.setLevel(config.get_level())
    if any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == path
        for handler in logger.handlers
    ):
        return logger

    handler = logging.FileHandler(path)
    handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)

    return logger
