import logging
from pathlib import Path

import pytest
from marshmallow import ValidationError

from carbid.constant import Role
from carbid.model import StaticAuthenticator
from carbid.util import Config, LoggerConfig, create_logger

DEV_CONFIG = Path(__file__).resolve().parent.parent / "config" / "config.dev.toml"


def test_load_dev_config() -> None:
    config = Config.load(str(DEV_CONFIG))

    assert config.bidding.max_retries == 5
    assert config.store.backend == "memory"
    assert config.manager.port == 50050
    assert config.logger.get_level() == logging.INFO
    assert {account.name: account.get_role() for account in config.accounts} == {
        "admin": Role.ADMIN,
        "alice": Role.USER,
        "bob": Role.USER,
    }


def test_missing_sections_use_defaults(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text('[store]\nbackend = "sql"\nurl = "sqlite://"\n')

    config = Config.load(str(path))

    assert config.store.backend == "sql"
    assert config.bidding.max_retries == 5
    assert config.accounts == []


@pytest.mark.parametrize(
    "content",
    [
        "[bidding]\nmax_retries = 0\n",
        '[store]\nbackend = "redis"\n',
        '[logger]\nlevel = "LOUD"\n',
        '[[accounts]]\nid = "x"\nname = "eve"\nrole = "root"\n',
    ],
)
def test_invalid_config_is_refused(tmp_path, content) -> None:
    path = tmp_path / "config.toml"
    path.write_text(content)

    with pytest.raises(ValidationError):
        Config.load(str(path))


def test_static_authenticator() -> None:
    authenticator = StaticAuthenticator(Config.load(str(DEV_CONFIG)).accounts)

    admin = authenticator.authenticate("admin")
    alice = authenticator.authenticate("alice")

    assert admin.is_admin()
    assert not alice.is_admin()
    assert alice.user_id == "2b1f7f3a-0c9e-4d7e-8f61-5a0b6c2d9e31"
    assert authenticator.authenticate("mallory") is None
    assert authenticator.names() == ["admin", "alice", "bob"]


def test_create_logger_writes_file_once(tmp_path) -> None:
    config = LoggerConfig(path=str(tmp_path / "log"), level="DEBUG")

    logger = create_logger("configtest", config)
    again = create_logger("configtest", config)
    logger.debug("configtest: hello")
    for handler in logger.handlers:
        handler.flush()

    assert logger is again
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert "configtest: hello" in (tmp_path / "log" / "configtest.log").read_text()

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
