"""
Ledger data models for the BO7 scoreboard.

`Ledger` is the aggregate that gets loaded from and saved to the scores
document: per-user per-rank win counters plus the append-only match log.
The remaining dataclasses are immutable result objects handed to the
presentation layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from bo7_scoreboard.constants import BackupConstants
from bo7_scoreboard.utils.ledger_exceptions import InvalidRankError
from bo7_scoreboard.utils.ranks import RANKS, normalize_rank

UNKNOWN_USERNAME = "Unknown"

# Sorts records without a usable date after every dated record
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def parse_iso(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing Z. Returns None if unparseable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class PlayerRef:
    """A user id with the display name captured when the match was recorded."""
    id: str
    username: str = UNKNOWN_USERNAME

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "username": self.username}

    @classmethod
    def from_dict(cls, data: Any, required: bool = False) -> 'PlayerRef':
        if not isinstance(data, dict):
            if required:
                raise ValueError(f"player reference must be an object, got {type(data).__name__}")
            data = {}
        user_id = data.get("id")
        if user_id is None or str(user_id) == "":
            if required:
                raise ValueError("player reference is missing an id")
            user_id = ""
        return cls(id=str(user_id), username=str(data.get("username") or UNKNOWN_USERNAME))


@dataclass(frozen=True)
class MatchRecord:
    """One completed best-of-7, appended once and never modified."""
    player1: PlayerRef
    player2: PlayerRef
    rank: str
    winner: PlayerRef
    loser: PlayerRef
    winner_score: int
    loser_score: int
    date: str

    @property
    def played_at(self) -> datetime:
        return parse_iso(self.date) or _EPOCH

    def involves(self, user_id: str) -> bool:
        return user_id in (self.player1.id, self.player2.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player1": self.player1.to_dict(),
            "player2": self.player2.to_dict(),
            "rank": self.rank,
            "winner": self.winner.to_dict(),
            "loser": self.loser.to_dict(),
            "winnerScore": self.winner_score,
            "loserScore": self.loser_score,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'MatchRecord':
        if not isinstance(data, dict):
            raise ValueError(f"match record must be an object, got {type(data).__name__}")

        winner = PlayerRef.from_dict(data.get("winner"), required=True)
        loser = PlayerRef.from_dict(data.get("loser"), required=True)
        # Older records may lack the participant block; rebuild it from winner/loser
        player1 = PlayerRef.from_dict(data["player1"]) if "player1" in data else winner
        player2 = PlayerRef.from_dict(data["player2"]) if "player2" in data else loser

        return cls(
            player1=player1,
            player2=player2,
            rank=str(data.get("rank") or ""),
            winner=winner,
            loser=loser,
            winner_score=int(data.get("winnerScore", 0)),
            loser_score=int(data.get("loserScore", 0)),
            date=str(data.get("date") or ""),
        )


@dataclass
class Ledger:
    """Aggregate root: win counters keyed by user id then rank, plus match history."""
    scores: Dict[str, Dict[str, int]] = field(default_factory=dict)
    matches: List[MatchRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scores": {user_id: dict(counts) for user_id, counts in self.scores.items()},
            "matches": [match.to_dict() for match in self.matches],
        }

    @classmethod
    def from_dict(cls, data: Any) -> 'Ledger':
        """
        Build a ledger from a decoded scores document.

        Missing sections default to empty and unknown rank keys are dropped.
        Rank keys are normalized, so "gold" and "Gold" merge into one count.
        Structural damage (wrong types, negative counts) raises ValueError so
        the storage layer can fall back to a backup.
        """
        if not isinstance(data, dict):
            raise ValueError(f"ledger document must be an object, got {type(data).__name__}")

        raw_scores = data.get("scores") or {}
        if not isinstance(raw_scores, dict):
            raise ValueError("'scores' must be an object")

        scores: Dict[str, Dict[str, int]] = {}
        for user_id, counts in raw_scores.items():
            if not isinstance(counts, dict):
                raise ValueError(f"scores for user {user_id} must be an object")
            user_counts = {}
            for key, value in counts.items():
                try:
                    rank = normalize_rank(key)
                except InvalidRankError:
                    continue
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"count for {user_id}/{rank} must be an integer")
                if value < 0:
                    raise ValueError(f"count for {user_id}/{rank} is negative")
                # Keys differing only in case or spelling collapse onto one rank
                user_counts[rank] = user_counts.get(rank, 0) + value
            scores[str(user_id)] = user_counts

        raw_matches = data.get("matches") or []
        if not isinstance(raw_matches, list):
            raise ValueError("'matches' must be a list")

        return cls(scores=scores, matches=[MatchRecord.from_dict(m) for m in raw_matches])


@dataclass(frozen=True)
class UserStats:
    """Per-rank win counts for one user, every catalog rank present."""
    user_id: str
    wins: Dict[str, int]
    total: int

    def __getitem__(self, rank: str) -> int:
        return self.wins[rank]


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    position: int
    user_id: str
    wins: int


@dataclass(frozen=True)
class OverviewEntry:
    """Single overview row with the full per-rank breakdown."""
    position: int
    user_id: str
    wins: Dict[str, int]
    total: int


@dataclass(frozen=True)
class BackupEntry:
    """A timestamped copy of the scores document."""
    name: str
    path: Path
    created_at: datetime
    label: str
    size: int

    @property
    def is_pre_restore(self) -> bool:
        return self.label == BackupConstants.PRE_RESTORE_LABEL


def empty_counts() -> Dict[str, int]:
    return {rank: 0 for rank in RANKS}
