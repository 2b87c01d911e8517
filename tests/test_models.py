from datetime import datetime, timezone

import pytest

from bo7_scoreboard.data_models.ledger import (
    Ledger, MatchRecord, PlayerRef, parse_iso, utc_now_iso
)


def test_utc_now_iso_format():
    stamp = utc_now_iso(datetime(2024, 1, 2, 3, 4, 5, 678900, tzinfo=timezone.utc))
    assert stamp == "2024-01-02T03:04:05.678Z"


def test_utc_now_iso_treats_naive_as_utc():
    assert utc_now_iso(datetime(2024, 1, 2)) == "2024-01-02T00:00:00.000Z"


def test_parse_iso():
    assert parse_iso("2024-01-02T03:04:05.678Z") == datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert parse_iso("") is None
    assert parse_iso("yesterday") is None


def test_player_ref_defaults_username():
    assert PlayerRef.from_dict({"id": 42}) == PlayerRef("42", "Unknown")
    assert PlayerRef.from_dict(None) == PlayerRef("", "Unknown")


def test_player_ref_required_rejects_missing_id():
    with pytest.raises(ValueError):
        PlayerRef.from_dict({"username": "x"}, required=True)
    with pytest.raises(ValueError):
        PlayerRef.from_dict("123", required=True)


def test_match_record_requires_winner_and_loser():
    with pytest.raises(ValueError):
        MatchRecord.from_dict({"winner": {"id": "1"}, "rank": "Gold"})


def test_match_record_undated_is_oldest():
    record = MatchRecord.from_dict({"winner": {"id": "1"}, "loser": {"id": "2"}})
    assert record.date == ""
    assert record.played_at < datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_match_record_involves_participants_only():
    record = MatchRecord.from_dict({
        "player1": {"id": "1"}, "player2": {"id": "2"},
        "winner": {"id": "2"}, "loser": {"id": "1"},
    })
    assert record.involves("1")
    assert record.involves("2")
    assert not record.involves("3")


@pytest.mark.parametrize("document", [
    [],
    {"scores": []},
    {"scores": {"1": 5}},
    {"scores": {"1": {"Gold": "3"}}},
    {"scores": {"1": {"Gold": True}}},
    {"scores": {"1": {"Gold": -1}}},
    {"matches": {}},
    {"matches": ["nope"]},
])
def test_ledger_from_dict_rejects_damaged_documents(document):
    with pytest.raises(ValueError):
        Ledger.from_dict(document)


def test_ledger_from_dict_empty_document():
    assert Ledger.from_dict({}) == Ledger()


def test_ledger_to_dict_copies_counts():
    ledger = Ledger(scores={"1": {"Gold": 1}})
    document = ledger.to_dict()
    document["scores"]["1"]["Gold"] = 99
    assert ledger.scores["1"]["Gold"] == 1


def test_ledger_from_dict_merges_rank_keys_differing_in_case():
    ledger = Ledger.from_dict({"scores": {"1": {"gold": 5, "Gold": 1, "grand champion": 2}}})
    assert ledger.scores == {"1": {"Gold": 6, "Grand Champion": 2}}
