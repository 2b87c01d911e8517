import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from bo7_scoreboard.data_models.ledger import Ledger, PlayerRef
from bo7_scoreboard.database.storage import LedgerRepository


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def alice():
    return PlayerRef("111", "alice")


@pytest.fixture
def bob():
    return PlayerRef("222", "bob")


@pytest.fixture
def fixed_now():
    return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def repository(tmp_path):
    return LedgerRepository(
        data_file=tmp_path / "scores.json",
        backup_dir=tmp_path / "backups",
        max_backups=5,
    )
