import pytest

from goblin.store import DocumentStore, InsufficientFundsError, Ledger, NotFoundError


@pytest.fixture
def store():
    return DocumentStore()


def test_insert_then_find_one_round_trip(store):
    doc = {"guild_id": "123", "theme": "clash", "bet_amount": 100}
    object_id = store.update_or_insert("race_configs", {"guild_id": "123"}, doc)
    found = store.find_one("race_configs", {"guild_id": "123"})
    assert found["_id"] == object_id
    assert found["theme"] == "clash"
    assert found["bet_amount"] == 100


def test_find_one_missing_raises(store):
    with pytest.raises(NotFoundError):
        store.find_one("race_configs", {"guild_id": "nope"})


def test_update_replaces_fields_and_keeps_id(store):
    first = store.update_or_insert("c", {"guild_id": "123"}, {"guild_id": "123", "bet_amount": 100})
    second = store.update_or_insert("c", {"guild_id": "123"}, {"guild_id": "123", "bet_amount": 1000})
    assert first == second
    assert store.find_one("c", {"guild_id": "123"})["bet_amount"] == 1000
    assert len(store.find_many("c", {})) == 1


def test_filter_by_id(store):
    object_id = store.update_or_insert("c", {"guild_id": "1"}, {"name": "a"})
    store.update_or_insert("c", {"_id": object_id}, {"name": "b"})
    assert store.find_one("c", {"_id": object_id})["name"] == "b"


def test_filter_accepts_pairs(store):
    store.update_or_insert("c", [("guild_id", "1"), ("theme", "clash")], {"emoji": "x"})
    found = store.find_one("c", [("guild_id", "1"), ("theme", "clash")])
    assert found["emoji"] == "x"


def test_returned_documents_are_copies(store):
    store.update_or_insert("c", {"k": 1}, {"items": [1, 2]})
    found = store.find_one("c", {"k": 1})
    found["items"].append(3)
    assert store.find_one("c", {"k": 1})["items"] == [1, 2]


def test_find_many_sort_and_limit(store):
    for size in (5, 2, 8, 3):
        store.update_or_insert("t", {"name": f"n{size}"}, {"crew_size": size, "guild_id": "g"})
    ascending = [d["crew_size"] for d in store.find_many("t", {"guild_id": "g"}, [("crew_size", 1)])]
    assert ascending == sorted(ascending)
    descending = [d["crew_size"] for d in store.find_many("t", {"guild_id": "g"}, {"crew_size": -1})]
    assert descending == sorted(descending, reverse=True)
    limited = store.find_many("t", {"guild_id": "g"}, [("crew_size", 1)], 2)
    assert [d["crew_size"] for d in limited] == ascending[:2]


def test_find_many_empty(store):
    assert store.find_many("nothing", {"guild_id": "x"}) == []


def test_delete_and_delete_many(store):
    for member in ("456", "789"):
        store.update_or_insert("m", {"guild_id": "123", "member_id": member}, {"races_won": 0})
    assert store.delete("m", {"guild_id": "123", "member_id": "456"}) == 1
    assert store.delete("m", {"guild_id": "123", "member_id": "456"}) == 0
    assert store.delete_many("m", {"guild_id": "123"}) == 1
    assert store.find_many("m", {}) == []


def test_ledger_deposit_and_withdraw(store):
    ledger = Ledger(store, starting_balance=1500)
    assert ledger.balance("123", "456") == 1500
    assert ledger.deposit("123", "456", 100) == 1600
    assert ledger.withdraw("123", "456", 1600) == 0
    assert ledger.balance("123", "456") == 0


def test_ledger_accounts_are_separate(store):
    ledger = Ledger(store)
    ledger.deposit("123", "456", 100)
    assert ledger.balance("123", "789") == 0
    assert ledger.balance("999", "456") == 0


def test_ledger_insufficient_funds(store):
    ledger = Ledger(store)
    ledger.deposit("g", "m", 50)
    with pytest.raises(InsufficientFundsError):
        ledger.withdraw("g", "m", 51)
    assert ledger.balance("g", "m") == 50


def test_ledger_rejects_negative_amounts(store):
    ledger = Ledger(store)
    with pytest.raises(ValueError):
        ledger.deposit("g", "m", -1)
    with pytest.raises(ValueError):
        ledger.withdraw("g", "m", -1)