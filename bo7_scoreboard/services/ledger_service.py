"""
Ledger service for the BO7 scoreboard bot.

Wraps every command in a load -> mutate -> save unit of work guarded by a lock
keyed on the storage path, so two handlers touching the same file can never
interleave their read and write. Repository calls run in a worker thread via
asyncio.to_thread; the event loop keeps serving the gateway meanwhile.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional, Tuple

from bo7_scoreboard.constants import BackupConstants
from bo7_scoreboard.data_models.ledger import (
    BackupEntry, Ledger, LeaderboardEntry, MatchRecord, OverviewEntry, PlayerRef, UserStats
)
from bo7_scoreboard.database.storage import LedgerRepository
from bo7_scoreboard.operations.ledger_operations import LedgerOperations
from bo7_scoreboard.utils.ledger_exceptions import StorageWriteError

logger = logging.getLogger(__name__)

_path_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Dict[Path, asyncio.Lock]]" = (
    weakref.WeakKeyDictionary()
)


def lock_for(path: Path) -> asyncio.Lock:
    """
    Lock for one storage file within the running event loop.

    Must be called from a coroutine; locks are created on first use so they
    always belong to the loop that awaits them.
    """
    loop = asyncio.get_running_loop()
    locks = _path_locks.get(loop)
    if locks is None:
        locks = _path_locks[loop] = {}
    key = Path(path).resolve()
    lock = locks.get(key)
    if lock is None:
        lock = locks[key] = asyncio.Lock()
    return lock


class LedgerService:
    """Serialized access to the ledger file for command handlers."""

    def __init__(self, repository: LedgerRepository, backup_on_write: bool = True,
                 save_retries: int = BackupConstants.SAVE_RETRIES):
        """
        Initialize ledger service.

        Args:
            repository: Storage for the scores document and its backups
            backup_on_write: Take a backup after every committed mutation
            save_retries: Save attempts before StorageWriteError is raised
        """
        self.repository = repository
        self.backup_on_write = backup_on_write
        self.save_retries = save_retries

    @property
    def _lock(self) -> asyncio.Lock:
        return lock_for(self.repository.data_file)

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Ledger, None]:
        """
        Provide a freshly loaded ledger and persist it when the block exits cleanly.

        An exception inside the block discards the in-memory changes.
        """
        async with self._lock:
            ledger = await asyncio.to_thread(self.repository.load)
            yield ledger
            await self._save_with_retry(ledger)
            if self.backup_on_write:
                await asyncio.to_thread(self.repository.create_backup)

    @asynccontextmanager
    async def read(self) -> AsyncGenerator[Ledger, None]:
        """Provide a freshly loaded ledger for queries; nothing is saved."""
        async with self._lock:
            yield await asyncio.to_thread(self.repository.load)

    async def _save_with_retry(self, ledger: Ledger):
        for attempt in range(self.save_retries):
            if await asyncio.to_thread(self.repository.save, ledger):
                return
            if attempt < self.save_retries - 1:
                logger.warning(f"Retry attempt {attempt + 1} for ledger save")
                await asyncio.sleep(0.1 * (2 ** attempt))  # Exponential backoff
        raise StorageWriteError(self.repository.data_file, self.save_retries)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_win(self, user_id: str, rank: str) -> int:
        async with self.transaction() as ledger:
            count = LedgerOperations.add_win(ledger, user_id, rank)
        logger.info(f"Added win for {user_id} in {rank} (now {count})")
        return count

    async def remove_win(self, user_id: str, rank: str) -> int:
        async with self.transaction() as ledger:
            count = LedgerOperations.remove_win(ledger, user_id, rank)
        logger.info(f"Removed win for {user_id} in {rank} (now {count})")
        return count

    async def set_wins(self, user_id: str, rank: str, value: int) -> int:
        async with self.transaction() as ledger:
            count = LedgerOperations.set_wins(ledger, user_id, rank, value)
        logger.info(f"Set wins for {user_id} in {rank} to {count}")
        return count

    async def record_match(self, player1: PlayerRef, player2: PlayerRef, rank: str,
                           winner_id: str, winner_score: int, loser_score: int) -> Tuple[MatchRecord, int]:
        """Record a match; returns the record and the winner's new count at that rank."""
        async with self.transaction() as ledger:
            record = LedgerOperations.record_match(
                ledger, player1, player2, rank, winner_id, winner_score, loser_score
            )
            count = ledger.scores[record.winner.id][record.rank]
        logger.info(
            f"Recorded {record.rank} match: {record.winner.username} ({record.winner.id}) "
            f"beat {record.loser.username} ({record.loser.id}) {record.winner_score}-{record.loser_score}"
        )
        return record, count

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def stats_for(self, user_id: str) -> UserStats:
        async with self.read() as ledger:
            return LedgerOperations.stats_for(ledger, user_id)

    async def leaderboard(self, rank: Optional[str] = None, top_n: int = 10) -> List[LeaderboardEntry]:
        async with self.read() as ledger:
            return LedgerOperations.leaderboard(ledger, rank, top_n)

    async def overview(self, top_n: Optional[int] = None) -> List[OverviewEntry]:
        async with self.read() as ledger:
            return LedgerOperations.overview(ledger, top_n)

    async def match_history(self, user_id: Optional[str] = None, limit: int = 10) -> List[MatchRecord]:
        async with self.read() as ledger:
            return LedgerOperations.match_history(ledger, user_id, limit)

    async def known_usernames(self, user_ids: List[str]) -> Dict[str, str]:
        """Names stored on match records, used when a user can't be resolved live."""
        async with self.read() as ledger:
            names = {}
            for user_id in user_ids:
                name = LedgerOperations.known_username(ledger, user_id)
                if name:
                    names[user_id] = name
            return names

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    async def create_backup(self) -> Optional[BackupEntry]:
        async with self._lock:
            return await asyncio.to_thread(self.repository.create_backup)

    async def list_backups(self) -> List[BackupEntry]:
        return await asyncio.to_thread(self.repository.list_backups)

    async def restore_backup(self, name: str) -> bool:
        async with self._lock:
            return await asyncio.to_thread(self.repository.restore_from_backup, name)
