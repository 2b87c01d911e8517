"""
Application context for the BO7 scoreboard bot.

Built once at startup from a Config and handed to the bot; cogs reach the
ledger through `bot.app.ledger` instead of module-level globals.
"""

from dataclasses import dataclass

from bo7_scoreboard.config import Config
from bo7_scoreboard.database.storage import LedgerRepository
from bo7_scoreboard.services.ledger_service import LedgerService


@dataclass
class AppContext:
    config: Config
    repository: LedgerRepository
    ledger: LedgerService

    @classmethod
    def build(cls, config: Config) -> 'AppContext':
        repository = LedgerRepository(
            data_file=config.data_file,
            backup_dir=config.backup_dir,
            max_backups=config.max_backups,
        )
        ledger = LedgerService(repository, backup_on_write=config.backup_on_write)
        return cls(config=config, repository=repository, ledger=ledger)
