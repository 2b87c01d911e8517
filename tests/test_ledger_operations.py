import copy
from datetime import timedelta

import pytest

from bo7_scoreboard.data_models.ledger import PlayerRef
from bo7_scoreboard.operations.ledger_operations import LedgerOperations as ops
from bo7_scoreboard.utils.ledger_exceptions import (
    InvalidRankError, InvalidValueError, InvalidWinnerError, NothingToRemoveError
)
from bo7_scoreboard.utils.ranks import RANKS


# ---------------------------------------------------------
# Win counters
# ---------------------------------------------------------

def test_ensure_user_zeroes_every_rank(ledger):
    ops.ensure_user(ledger, "1")
    stats = ops.stats_for(ledger, "1")
    assert all(stats[rank] == 0 for rank in RANKS)
    assert stats.total == 0


def test_ensure_user_is_idempotent(ledger):
    ops.add_win(ledger, "1", "Gold")
    ops.ensure_user(ledger, "1")
    assert ledger.scores["1"]["Gold"] == 1


def test_ensure_user_fills_missing_ranks(ledger):
    ledger.scores["1"] = {"Gold": 2}
    counts = ops.ensure_user(ledger, "1")
    assert counts["Gold"] == 2
    assert set(counts) == set(RANKS)


def test_add_win_increments(ledger):
    assert ops.add_win(ledger, "1", "gold") == 1
    assert ops.add_win(ledger, "1", "Gold") == 2
    assert ledger.scores["1"]["Gold"] == 2


def test_add_win_rejects_unknown_rank(ledger):
    with pytest.raises(InvalidRankError):
        ops.add_win(ledger, "1", "Mythic")
    assert ledger.scores == {}


@pytest.mark.parametrize("start", [0, 1, 5])
def test_add_then_remove_restores_count(ledger, start):
    ops.set_wins(ledger, "1", "Silver", start)
    ops.add_win(ledger, "1", "Silver")
    assert ops.remove_win(ledger, "1", "Silver") == start


def test_remove_win_at_zero_leaves_ledger_unchanged(ledger):
    ops.ensure_user(ledger, "1")
    before = copy.deepcopy(ledger)
    with pytest.raises(NothingToRemoveError):
        ops.remove_win(ledger, "1", "Diamond")
    assert ledger == before


def test_remove_win_for_unknown_user_does_not_create_entry(ledger):
    with pytest.raises(NothingToRemoveError):
        ops.remove_win(ledger, "ghost", "Gold")
    assert "ghost" not in ledger.scores


def test_set_wins_overwrites(ledger):
    ops.add_win(ledger, "1", "Champion")
    assert ops.set_wins(ledger, "1", "Champion", 9) == 9
    assert ledger.scores["1"]["Champion"] == 9


@pytest.mark.parametrize("value", [-1, -100, 1.5, "3", True])
def test_set_wins_rejects_invalid_values(ledger, value):
    ops.add_win(ledger, "1", "Gold")
    before = copy.deepcopy(ledger)
    with pytest.raises(InvalidValueError):
        ops.set_wins(ledger, "1", "Gold", value)
    assert ledger == before


# ---------------------------------------------------------
# Match recording
# ---------------------------------------------------------

def test_record_match_appends_and_credits_winner(ledger, alice, bob, fixed_now):
    record = ops.record_match(ledger, alice, bob, "Gold", alice.id, 4, 2, now=fixed_now)

    assert ledger.matches == [record]
    assert record.winner == alice
    assert record.loser == bob
    assert record.winner_score == 4
    assert record.loser_score == 2
    assert record.date == "2024-05-01T12:00:00.000Z"
    assert ledger.scores[alice.id]["Gold"] == 1
    assert alice.id in ledger.scores and bob.id not in ledger.scores


def test_record_match_second_player_can_win(ledger, alice, bob):
    record = ops.record_match(ledger, alice, bob, "ssl", bob.id, 4, 3)
    assert record.winner == bob
    assert record.loser == alice
    assert record.rank == "Super Sonic Legend"
    assert ledger.scores[bob.id]["Super Sonic Legend"] == 1


def test_record_match_rejects_outsider_winner(ledger, alice, bob):
    with pytest.raises(InvalidWinnerError):
        ops.record_match(ledger, alice, bob, "Gold", "333", 4, 0)
    assert ledger.matches == []
    assert ledger.scores == {}


def test_record_match_rejects_same_player_twice(ledger, alice):
    with pytest.raises(InvalidWinnerError):
        ops.record_match(ledger, alice, alice, "Gold", alice.id, 4, 0)
    assert ledger.matches == []


@pytest.mark.parametrize("winner_score, loser_score", [(0, 0), (8, 1), (4, 7), (4, -1)])
def test_record_match_rejects_out_of_range_scores(ledger, alice, bob, winner_score, loser_score):
    with pytest.raises(InvalidValueError):
        ops.record_match(ledger, alice, bob, "Gold", alice.id, winner_score, loser_score)
    assert ledger.matches == []
    assert ledger.scores == {}


def test_record_match_does_not_require_winner_ahead(ledger, alice, bob):
    # Scores are only range-checked; 1-0 and 2-5 are both accepted
    ops.record_match(ledger, alice, bob, "Gold", alice.id, 1, 0)
    ops.record_match(ledger, alice, bob, "Gold", alice.id, 2, 5)
    assert len(ledger.matches) == 2


# ---------------------------------------------------------
# Queries
# ---------------------------------------------------------

def test_stats_for_unknown_user_is_zero_and_read_only(ledger):
    stats = ops.stats_for(ledger, "nobody")
    assert stats.total == 0
    assert set(stats.wins) == set(RANKS)
    assert ledger.scores == {}


def test_stats_total_sums_ranks(ledger):
    ops.set_wins(ledger, "1", "Bronze", 2)
    ops.set_wins(ledger, "1", "Grand Champion", 3)
    assert ops.stats_for(ledger, "1").total == 5


def test_overall_leaderboard_sorts_and_excludes_zero(ledger):
    ops.set_wins(ledger, "a", "Gold", 1)
    ops.set_wins(ledger, "b", "Gold", 2)
    ops.set_wins(ledger, "b", "Silver", 2)
    ops.ensure_user(ledger, "zero")
    ops.set_wins(ledger, "c", "Diamond", 3)

    board = ops.leaderboard(ledger, None, top_n=10)
    assert [(e.user_id, e.wins) for e in board] == [("b", 4), ("c", 3), ("a", 1)]
    assert [e.position for e in board] == [1, 2, 3]


def test_rank_leaderboard_uses_that_rank_only(ledger):
    ops.set_wins(ledger, "a", "Gold", 5)
    ops.set_wins(ledger, "b", "Silver", 9)
    ops.set_wins(ledger, "b", "Gold", 1)

    board = ops.leaderboard(ledger, "gold", top_n=10)
    assert [(e.user_id, e.wins) for e in board] == [("a", 5), ("b", 1)]


def test_leaderboard_ties_keep_first_touch_order(ledger):
    for user_id in ("first", "second", "third"):
        ops.add_win(ledger, user_id, "Gold")
    board = ops.leaderboard(ledger)
    assert [e.user_id for e in board] == ["first", "second", "third"]


def test_leaderboard_truncates(ledger):
    for index in range(15):
        ops.set_wins(ledger, str(index), "Gold", index + 1)
    board = ops.leaderboard(ledger, None, top_n=10)
    assert len(board) == 10
    assert board[0].wins == 15
    assert ops.leaderboard(ledger, None, top_n=0) == []


def test_overview_breakdown(ledger):
    ops.set_wins(ledger, "a", "Gold", 1)
    ops.set_wins(ledger, "b", "Bronze", 1)
    ops.set_wins(ledger, "b", "Platinum", 2)
    ops.ensure_user(ledger, "c")

    rows = ops.overview(ledger)
    assert [row.user_id for row in rows] == ["b", "a"]
    assert rows[0].total == 3
    assert rows[0].wins["Platinum"] == 2
    assert len(ops.overview(ledger, top_n=1)) == 1


def test_match_history_newest_first_and_filtered(ledger, alice, bob, fixed_now):
    carol = PlayerRef("333", "carol")
    ops.record_match(ledger, alice, bob, "Gold", alice.id, 4, 1, now=fixed_now)
    ops.record_match(ledger, bob, carol, "Gold", carol.id, 4, 2, now=fixed_now + timedelta(hours=1))
    ops.record_match(ledger, alice, carol, "Gold", alice.id, 4, 3, now=fixed_now + timedelta(hours=2))

    history = ops.match_history(ledger, None, limit=10)
    assert [m.loser_score for m in history] == [3, 2, 1]

    bob_history = ops.match_history(ledger, bob.id, limit=10)
    assert [m.loser_score for m in bob_history] == [2, 1]

    assert len(ops.match_history(ledger, None, limit=1)) == 1
    assert ops.match_history(ledger, "nobody", limit=5) == []


def test_known_username_uses_latest_record(ledger, alice, bob, fixed_now):
    ops.record_match(ledger, alice, bob, "Gold", alice.id, 4, 1, now=fixed_now)
    ops.record_match(ledger, PlayerRef(alice.id, "alice-renamed"), bob, "Gold", bob.id, 4, 1, now=fixed_now)
    assert ops.known_username(ledger, alice.id) == "alice-renamed"
    assert ops.known_username(ledger, "404") is None


def test_end_to_end_scenario(ledger, alice, bob):
    for _ in range(3):
        ops.add_win(ledger, alice.id, "Gold")
    ops.record_match(ledger, alice, bob, "Gold", alice.id, 4, 1)

    assert ops.stats_for(ledger, alice.id)["Gold"] == 4
    latest = ops.match_history(ledger, limit=1)
    assert len(latest) == 1
    assert (latest[0].winner_score, latest[0].loser_score) == (4, 1)
