"""
Ledger Operations - in-memory score ledger logic

All methods work on a `Ledger` value that the caller loaded and will save;
nothing here touches storage. Validation happens before any mutation, so a
raised LedgerException always leaves the ledger exactly as it was.

Ordering rules:
- Leaderboard and overview sort by win count descending. Python's sort is
  stable, so ties keep the order in which users were first added to the
  ledger (dict insertion order, preserved through the JSON document).
- Match history sorts by record date descending.
"""

from datetime import datetime
from typing import List, Optional

from bo7_scoreboard.constants import MatchConstants
from bo7_scoreboard.data_models.ledger import (
    Ledger, LeaderboardEntry, MatchRecord, OverviewEntry, PlayerRef, UserStats, empty_counts, utc_now_iso
)
from bo7_scoreboard.utils.ledger_exceptions import (
    InvalidValueError, InvalidWinnerError, NothingToRemoveError
)
from bo7_scoreboard.utils.ranks import RANKS, normalize_rank


class LedgerOperations:
    """Score ledger mutations and queries"""

    @staticmethod
    def ensure_user(ledger: Ledger, user_id: str) -> dict:
        """
        Create a zeroed counter for every rank the first time a user is touched.

        Idempotent; ranks missing from an existing entry are filled with 0.

        Returns:
            The user's rank -> count mapping
        """
        counts = ledger.scores.get(user_id)
        if counts is None:
            counts = empty_counts()
            ledger.scores[user_id] = counts
        else:
            for rank in RANKS:
                counts.setdefault(rank, 0)
        return counts

    @staticmethod
    def add_win(ledger: Ledger, user_id: str, rank: str) -> int:
        """Add one win and return the new count."""
        rank = normalize_rank(rank)
        counts = LedgerOperations.ensure_user(ledger, user_id)
        counts[rank] += 1
        return counts[rank]

    @staticmethod
    def remove_win(ledger: Ledger, user_id: str, rank: str) -> int:
        """
        Remove one win and return the new count.

        Raises:
            NothingToRemoveError: If the count is already 0 (ledger untouched)
        """
        rank = normalize_rank(rank)
        current = ledger.scores.get(user_id, {}).get(rank, 0)
        if current <= 0:
            raise NothingToRemoveError(user_id, rank)

        counts = LedgerOperations.ensure_user(ledger, user_id)
        counts[rank] = current - 1
        return counts[rank]

    @staticmethod
    def set_wins(ledger: Ledger, user_id: str, rank: str, value: int) -> int:
        """
        Overwrite a user's win count for a rank.

        Raises:
            InvalidValueError: If value is negative or not an integer
        """
        rank = normalize_rank(rank)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidValueError(value, "Please provide a valid number of wins (0 or higher).")
        if value < 0:
            raise InvalidValueError(value, "Please provide a valid number of wins (0 or higher).")

        counts = LedgerOperations.ensure_user(ledger, user_id)
        counts[rank] = value
        return value

    @staticmethod
    def record_match(
        ledger: Ledger,
        player1: PlayerRef,
        player2: PlayerRef,
        rank: str,
        winner_id: str,
        winner_score: int,
        loser_score: int,
        now: Optional[datetime] = None
    ) -> MatchRecord:
        """
        Append a completed best-of-7 and credit the winner with one win at that rank.

        Args:
            ledger: Ledger to update
            player1: First participant (id + display name at record time)
            player2: Second participant
            rank: Rank the match was played at
            winner_id: Must equal player1.id or player2.id
            winner_score: Games won by the winner (1-7)
            loser_score: Games won by the loser (0-6)
            now: Record timestamp, defaults to the current UTC time

        Returns:
            The appended MatchRecord

        Raises:
            InvalidWinnerError: Winner is not a participant, or both players are the same user
            InvalidValueError: A score is out of range
        """
        rank = normalize_rank(rank)

        if player1.id == player2.id:
            raise InvalidWinnerError(winner_id, "A match needs two different players.")
        if winner_id == player1.id:
            winner, loser = player1, player2
        elif winner_id == player2.id:
            winner, loser = player2, player1
        else:
            raise InvalidWinnerError(winner_id)

        LedgerOperations._check_score(
            winner_score, MatchConstants.MIN_WINNER_SCORE, MatchConstants.MAX_WINNER_SCORE, "Winner"
        )
        LedgerOperations._check_score(
            loser_score, MatchConstants.MIN_LOSER_SCORE, MatchConstants.MAX_LOSER_SCORE, "Loser"
        )

        record = MatchRecord(
            player1=player1,
            player2=player2,
            rank=rank,
            winner=winner,
            loser=loser,
            winner_score=winner_score,
            loser_score=loser_score,
            date=utc_now_iso(now),
        )
        ledger.matches.append(record)
        LedgerOperations.add_win(ledger, winner.id, rank)
        return record

    @staticmethod
    def _check_score(score: int, low: int, high: int, side: str):
        if isinstance(score, bool) or not isinstance(score, int) or not low <= score <= high:
            raise InvalidValueError(score, f"{side} score must be between {low} and {high}.")

    @staticmethod
    def stats_for(ledger: Ledger, user_id: str) -> UserStats:
        """Per-rank counts (absent ranks reported as 0) and their total. Read-only."""
        stored = ledger.scores.get(user_id, {})
        wins = {rank: stored.get(rank, 0) for rank in RANKS}
        return UserStats(user_id=user_id, wins=wins, total=sum(wins.values()))

    @staticmethod
    def leaderboard(ledger: Ledger, rank: Optional[str] = None, top_n: int = 10) -> List[LeaderboardEntry]:
        """
        Users ranked by wins at one rank, or by total wins when rank is None.

        Users with 0 relevant wins are left out; the result holds at most top_n rows.
        """
        if top_n <= 0:
            return []
        rank = normalize_rank(rank) if rank is not None else None

        rows = []
        for user_id, counts in ledger.scores.items():
            if rank is None:
                wins = sum(counts.get(r, 0) for r in RANKS)
            else:
                wins = counts.get(rank, 0)
            if wins > 0:
                rows.append((user_id, wins))

        rows.sort(key=lambda row: row[1], reverse=True)
        return [
            LeaderboardEntry(position=index + 1, user_id=user_id, wins=wins)
            for index, (user_id, wins) in enumerate(rows[:top_n])
        ]

    @staticmethod
    def overview(ledger: Ledger, top_n: Optional[int] = None) -> List[OverviewEntry]:
        """Every user with at least one win, full breakdown, sorted by total descending."""
        rows = []
        for user_id in ledger.scores:
            stats = LedgerOperations.stats_for(ledger, user_id)
            if stats.total > 0:
                rows.append(stats)

        rows.sort(key=lambda stats: stats.total, reverse=True)
        if top_n is not None:
            rows = rows[:max(top_n, 0)]
        return [
            OverviewEntry(position=index + 1, user_id=stats.user_id, wins=stats.wins, total=stats.total)
            for index, stats in enumerate(rows)
        ]

    @staticmethod
    def match_history(ledger: Ledger, user_id: Optional[str] = None, limit: int = 10) -> List[MatchRecord]:
        """Most recent matches first, optionally only those the user played in."""
        if limit <= 0:
            return []
        matches = ledger.matches
        if user_id is not None:
            matches = [match for match in matches if match.involves(user_id)]
        return sorted(matches, key=lambda match: match.played_at, reverse=True)[:limit]

    @staticmethod
    def known_username(ledger: Ledger, user_id: str) -> Optional[str]:
        """Latest display name recorded for a user on any match, if any."""
        for match in reversed(ledger.matches):
            for player in (match.player1, match.player2):
                if player.id == user_id and player.username:
                    return player.username
        return None
