import pytest

from goblin.race.member import (
    RACE_MEMBER_COLLECTION,
    RaceMember,
    get_race_member,
    read_race_member,
    write_race_member,
)
from goblin.store import DocumentStore, InsufficientFundsError, Ledger


@pytest.fixture
def store():
    return DocumentStore()


@pytest.fixture
def bank(store):
    return Ledger(store, starting_balance=1000)


def test_get_race_member_write_and_read(store):
    member = get_race_member(store, "123", "456")
    assert member.member_id == "456"

    member.races_won = 1
    write_race_member(store, member)

    loaded = read_race_member(store, "123", "456")
    assert loaded.races_won == 1

    assert store.delete(RACE_MEMBER_COLLECTION, {"guild_id": "123", "member_id": "456"}) == 1
    assert read_race_member(store, "123", "456") is None


def test_get_race_member_creates_once(store):
    first = get_race_member(store, "123", "456")
    second = get_race_member(store, "123", "456")
    assert first.id == second.id
    assert len(store.find_many(RACE_MEMBER_COLLECTION, {"guild_id": "123"})) == 1


def test_win_race(store, bank):
    member = get_race_member(store, "123", "456")
    member.win_race(store, bank, 100)
    loaded = read_race_member(store, "123", "456")
    assert loaded.races_won == 1
    assert loaded.total_earnings == 100
    assert bank.balance("123", "456") == 1100


def test_place_in_race(store, bank):
    member = get_race_member(store, "123", "456")
    member.place_in_race(store, bank, 100)
    loaded = read_race_member(store, "123", "456")
    assert loaded.races_placed == 1
    assert loaded.total_earnings == 100
    assert loaded.races_won == 0


def test_show_in_race(store, bank):
    member = get_race_member(store, "123", "456")
    member.show_in_race(store, bank, 100)
    loaded = read_race_member(store, "123", "456")
    assert loaded.races_showed == 1
    assert loaded.total_earnings == 100
    assert loaded.races_won == 0


def test_lose_race(store):
    member = get_race_member(store, "123", "456")
    member.lose_race(store)
    loaded = read_race_member(store, "123", "456")
    assert loaded.races_won == 0
    assert loaded.total_earnings == 0
    assert loaded.races_lost == 1


def test_place_bet(store, bank):
    member = get_race_member(store, "123", "456")
    member.place_bet(store, bank, 100)
    loaded = read_race_member(store, "123", "456")
    assert loaded.bets_made == 1
    assert loaded.total_earnings == -100
    assert bank.balance("123", "456") == 900


def test_place_bet_without_funds(store):
    poor_bank = Ledger(store)
    member = get_race_member(store, "123", "456")
    with pytest.raises(InsufficientFundsError):
        member.place_bet(store, poor_bank, 100)
    loaded = read_race_member(store, "123", "456")
    assert loaded.bets_made == 0
    assert loaded.total_earnings == 0


def test_win_bet(store, bank):
    member = get_race_member(store, "123", "456")
    member.win_bet(store, bank, 100)
    loaded = read_race_member(store, "123", "456")
    assert loaded.bets_won == 1
    assert loaded.bets_earnings == 100
    assert loaded.total_earnings == 100


def test_document_round_trip():
    member = RaceMember(guild_id="g", member_id="m", races_won=3, bets_made=2, id="xyz")
    document = member.to_document()
    assert document["_id"] == "xyz"
    assert document["races_won"] == 3
    assert RaceMember.from_document(document) == member