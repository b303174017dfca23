import threading
import time

import pytest

from goblin.heist.errors import NoTargetsError
from goblin.heist.target import (
    Target,
    default_targets,
    get_targets,
    read_targets,
    recover_vaults,
    run_vault_updater,
    select_target,
    write_target,
)
from goblin.store import DocumentStore


@pytest.fixture
def store():
    return DocumentStore()


def test_default_targets_first_and_last():
    targets = default_targets("g")
    assert len(targets) == 16
    first, last = targets[0], targets[-1]
    assert (first.name, first.crew_size, first.success, first.vault) == (
        "Goblin Forest",
        2,
        29.3,
        16000,
    )
    assert (last.name, last.crew_size, last.vault_max) == ("Sherbet Towers", 55, 688000)
    assert all(t.is_at_max and t.vault == t.vault_max for t in targets)


def test_document_round_trip():
    target = Target("g", "clash", "Rocky Fort", 5, 14.5, 42000, 42000, False, "id1")
    assert Target.from_document(target.to_document()) == target


def test_get_targets_creates_defaults(store):
    created = get_targets(store, "g", "clash")
    assert [t.name for t in created] == [t.name for t in default_targets("g")]
    stored = read_targets(store, "g", "clash")
    assert len(stored) == len({t.name for t in created})
    assert {t.name for t in stored} == {t.name for t in created}


def test_get_targets_reads_existing(store):
    write_target(store, Target("g", "clash", "Only", 4, 10.0, 100, 100))
    targets = get_targets(store, "g", "clash")
    assert [t.name for t in targets] == ["Only"]


@pytest.mark.parametrize(
    "crew, expected",
    [(1, "Goblin Forest"), (2, "Goblin Forest"), (3, "Goblin Outpost"), (4, "Rocky Fort"),
     (100, "Sherbet Towers")],
)
def test_select_target(crew, expected):
    assert select_target(default_targets("g"), crew).name == expected


def test_select_target_empty():
    with pytest.raises(NoTargetsError):
        select_target([], 3)


def test_steal_from_vault(store):
    target = default_targets("g")[0]
    target.steal_from_vault(store, 1000)
    assert target.vault == target.vault_max - 1000
    assert target.is_at_max is False
    stored = read_targets(store, "g", "clash")
    assert stored[0].vault == target.vault


def test_steal_more_than_vault(store):
    target = default_targets("g")[0]
    target.steal_from_vault(store, target.vault_max * 2)
    assert target.vault == 0


def test_steal_nothing_changes_nothing(store):
    target = default_targets("g")[0]
    target.steal_from_vault(store, 0)
    assert target.vault == target.vault_max
    assert target.is_at_max is True
    assert read_targets(store, "g", "clash") == []


def test_recover_vaults_until_full(store):
    target = default_targets("g")[0]
    target.steal_from_vault(store, target.vault_max)
    previous = 0
    for _ in range(100):
        updated = recover_vaults(store)
        if not updated:
            break
        assert previous < updated[0].vault <= target.vault_max
        previous = updated[0].vault
    stored = read_targets(store, "g", "clash")[0]
    assert stored.vault == stored.vault_max
    assert stored.is_at_max is True
    assert recover_vaults(store) == []


def test_run_vault_updater_stops_when_set(store):
    target = default_targets("g")[0]
    target.steal_from_vault(store, 1000)
    stop = threading.Event()
    stop.set()
    run_vault_updater(store, 0.01, stop)
    assert read_targets(store, "g", "clash")[0].vault == target.vault


def test_run_vault_updater_recovers(store):
    target = default_targets("g")[0]
    target.steal_from_vault(store, 1000)
    stop = threading.Event()
    worker = threading.Thread(target=run_vault_updater, args=(store, 0.01, stop))
    worker.start()
    try:
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline:
            if read_targets(store, "g", "clash")[0].vault > target.vault:
                break
            time.sleep(0.01)
    finally:
        stop.set()
        worker.join(timeout=5)
    assert read_targets(store, "g", "clash")[0].vault > target.vault
    assert not worker.is_alive()