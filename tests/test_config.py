from pathlib import Path

import pytest

from bo7_scoreboard.config import Config

ENV_VARS = [
    "DISCORD_TOKEN", "COMMAND_PREFIX", "ADMIN_ROLE_NAME", "DISCORD_GUILD_IDS",
    "DATA_FILE", "BACKUP_DIR", "MAX_BACKUPS", "BACKUP_INTERVAL_HOURS", "BACKUP_ON_WRITE",
    "ALLOW_PLAYER_REPORTS", "PORT", "KEEPALIVE_INTERVAL_MINUTES", "DEBUG", "LOG_DIR",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = Config.from_env(dotenv=False)
    assert config.discord_token is None
    assert config.command_prefix == "!"
    assert config.admin_role_name == "Admin"
    assert config.data_file == Path("scores.json")
    assert config.backup_dir == Path("backups")
    assert config.max_backups == 5
    assert config.backup_interval_hours == 24
    assert config.backup_on_write is True
    assert config.allow_player_reports is True
    assert config.port == 3000
    assert config.debug is False


def test_reads_environment(clean_env):
    clean_env.setenv("DISCORD_TOKEN", "abc")
    clean_env.setenv("COMMAND_PREFIX", "?")
    clean_env.setenv("ADMIN_ROLE_NAME", "Mods")
    clean_env.setenv("DATA_FILE", "/data/board.json")
    clean_env.setenv("MAX_BACKUPS", "10")
    clean_env.setenv("BACKUP_ON_WRITE", "no")
    clean_env.setenv("ALLOW_PLAYER_REPORTS", "false")
    clean_env.setenv("PORT", "0")
    clean_env.setenv("DEBUG", "TRUE")

    config = Config.from_env(dotenv=False)
    assert config.discord_token == "abc"
    assert config.command_prefix == "?"
    assert config.admin_role_name == "Mods"
    assert config.data_file == Path("/data/board.json")
    assert config.max_backups == 10
    assert config.backup_on_write is False
    assert config.allow_player_reports is False
    assert config.port == 0
    assert config.debug is True


def test_bad_integer_names_variable(clean_env):
    clean_env.setenv("MAX_BACKUPS", "lots")
    with pytest.raises(ValueError, match="MAX_BACKUPS"):
        Config.from_env(dotenv=False)


def test_guild_ids():
    assert Config(discord_guild_ids="").get_guild_ids() == []
    assert Config(discord_guild_ids="1, 2,,3").get_guild_ids() == [1, 2, 3]
    with pytest.raises(ValueError):
        Config(discord_guild_ids="1,abc").get_guild_ids()


def test_validate():
    Config(discord_token="abc").validate()
    with pytest.raises(ValueError, match="DISCORD_TOKEN"):
        Config().validate()
    with pytest.raises(ValueError, match="MAX_BACKUPS"):
        Config(discord_token="abc", max_backups=0).validate()
    with pytest.raises(ValueError, match="PORT"):
        Config(discord_token="abc", port=-1).validate()
