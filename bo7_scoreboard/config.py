import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from bo7_scoreboard.constants import BackupConstants


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class Config:
    """Bot configuration settings"""

    # Discord settings
    discord_token: Optional[str] = None
    command_prefix: str = '!'
    admin_role_name: str = 'Admin'
    discord_guild_ids: str = ''  # Comma-separated for guild-scoped slash sync

    # Storage settings
    data_file: Path = Path('scores.json')
    backup_dir: Path = Path('backups')
    max_backups: int = BackupConstants.DEFAULT_MAX_BACKUPS
    backup_interval_hours: int = BackupConstants.DEFAULT_INTERVAL_HOURS
    backup_on_write: bool = True

    # Match reporting
    allow_player_reports: bool = True

    # Process host
    port: int = 3000
    keepalive_interval_minutes: int = 2

    # Logging
    debug: bool = False
    log_dir: Path = field(default_factory=lambda: Path('logs'))

    @classmethod
    def from_env(cls, dotenv: bool = True) -> 'Config':
        """Build configuration from environment variables (and a .env file)"""
        if dotenv:
            load_dotenv()

        return cls(
            discord_token=os.getenv('DISCORD_TOKEN'),
            command_prefix=os.getenv('COMMAND_PREFIX', '!'),
            admin_role_name=os.getenv('ADMIN_ROLE_NAME', 'Admin'),
            discord_guild_ids=os.getenv('DISCORD_GUILD_IDS', ''),
            data_file=Path(os.getenv('DATA_FILE', 'scores.json')),
            backup_dir=Path(os.getenv('BACKUP_DIR', 'backups')),
            max_backups=_env_int('MAX_BACKUPS', BackupConstants.DEFAULT_MAX_BACKUPS),
            backup_interval_hours=_env_int('BACKUP_INTERVAL_HOURS', BackupConstants.DEFAULT_INTERVAL_HOURS),
            backup_on_write=_env_bool('BACKUP_ON_WRITE', True),
            allow_player_reports=_env_bool('ALLOW_PLAYER_REPORTS', True),
            port=_env_int('PORT', 3000),
            keepalive_interval_minutes=_env_int('KEEPALIVE_INTERVAL_MINUTES', 2),
            debug=_env_bool('DEBUG', False),
            log_dir=Path(os.getenv('LOG_DIR', 'logs')),
        )

    def get_guild_ids(self) -> List[int]:
        """Get list of guild IDs for command syncing"""
        if not self.discord_guild_ids:
            # Global sync
            return []
        try:
            return [int(guild_id.strip()) for guild_id in self.discord_guild_ids.split(',') if guild_id.strip()]
        except ValueError:
            raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")

    def validate(self):
        """Validate that required configuration is present"""
        if not self.discord_token:
            raise ValueError("DISCORD_TOKEN is required")
        if self.max_backups < 1:
            raise ValueError("MAX_BACKUPS must be at least 1")
        if self.backup_interval_hours < 1:
            raise ValueError("BACKUP_INTERVAL_HOURS must be at least 1")
        if self.keepalive_interval_minutes < 1:
            raise ValueError("KEEPALIVE_INTERVAL_MINUTES must be at least 1")
        if self.port < 0:
            raise ValueError("PORT must not be negative")
        self.get_guild_ids()
