"""Guild members taking part in races, with their race and betting records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from goblin.race.config import MemberNotFoundError
from goblin.store import DocumentStore, Ledger, NotFoundError

RACE_MEMBER_COLLECTION = "race_members"

logger = logging.getLogger(__name__)

_COUNTERS = (
    "races_lost",
    "races_placed",
    "races_showed",
    "races_won",
    "total_races",
    "bets_earnings",
    "bets_made",
    "bets_won",
    "total_earnings",
)


@dataclass
class RaceMember:
    """A guild member's race results and betting history."""

    guild_id: str
    member_id: str
    races_lost: int = 0
    races_placed: int = 0
    races_showed: int = 0
    races_won: int = 0
    total_races: int = 0
    bets_earnings: int = 0
    bets_made: int = 0
    bets_won: int = 0
    total_earnings: int = 0
    id: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the member."""
        document: dict[str, Any] = {"guild_id": self.guild_id, "member_id": self.member_id}
        document.update((name, getattr(self, name)) for name in _COUNTERS)
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> RaceMember:
        """Build a member from its stored form."""
        return cls(
            guild_id=document["guild_id"],
            member_id=document["member_id"],
            id=document.get("_id"),
            **{name: document.get(name, 0) for name in _COUNTERS},
        )

    def _finish(self, store: DocumentStore, bank: Ledger, amount: int) -> None:
        bank.deposit(self.guild_id, self.member_id, amount)
        self.total_earnings += amount

    def win_race(self, store: DocumentStore, bank: Ledger, amount: int) -> None:
        """Record a first-place finish and pay out the prize."""
        self._finish(store, bank, amount)
        self.races_won += 1
        write_race_member(store, self)
        logger.info("member %s won a race in guild %s", self.member_id, self.guild_id)

    def place_in_race(self, store: DocumentStore, bank: Ledger, amount: int) -> None:
        """Record a second-place finish and pay out the prize."""
        self._finish(store, bank, amount)
        self.races_placed += 1
        write_race_member(store, self)
        logger.info("member %s placed in a race in guild %s", self.member_id, self.guild_id)

    def show_in_race(self, store: DocumentStore, bank: Ledger, amount: int) -> None:
        """Record a third-place finish and pay out the prize."""
        self._finish(store, bank, amount)
        self.races_showed += 1
        write_race_member(store, self)
        logger.info("member %s showed in a race in guild %s", self.member_id, self.guild_id)

    def lose_race(self, store: DocumentStore) -> None:
        """Record a race in which the member did not win, place or show."""
        self.races_lost += 1
        write_race_member(store, self)
        logger.info("member %s lost a race in guild %s", self.member_id, self.guild_id)

    def place_bet(self, store: DocumentStore, bank: Ledger, bet_amount: int) -> None:
        """Take the bet from the member's account; raises if funds are short."""
        bank.withdraw(self.guild_id, self.member_id, bet_amount)
        self.bets_made += 1
        self.total_earnings -= bet_amount
        write_race_member(store, self)
        logger.info("member %s placed a bet of %d", self.member_id, bet_amount)

    def win_bet(self, store: DocumentStore, bank: Ledger, winnings: int) -> None:
        """Record a winning bet and pay out the winnings."""
        bank.deposit(self.guild_id, self.member_id, winnings)
        self.bets_won += 1
        self.bets_earnings += winnings
        self.total_earnings += winnings
        write_race_member(store, self)
        logger.info("member %s won a bet of %d", self.member_id, winnings)


def read_race_member(store: DocumentStore, guild_id: str, member_id: str) -> Optional[RaceMember]:
    """Load a race member, or return None if it is not stored."""
    try:
        document = store.find_one(
            RACE_MEMBER_COLLECTION, {"guild_id": guild_id, "member_id": member_id}
        )
    except NotFoundError:
        return None
    return RaceMember.from_document(document)


def write_race_member(store: DocumentStore, member: RaceMember) -> None:
    """Create or update the stored race member."""
    if member.id:
        key = {"_id": member.id}
    else:
        key = {"guild_id": member.guild_id, "member_id": member.member_id}
    member.id = store.update_or_insert(RACE_MEMBER_COLLECTION, key, member.to_document())


def _load_race_member(store: DocumentStore, guild_id: str, member_id: str) -> RaceMember:
    member = read_race_member(store, guild_id, member_id)
    if member is None:
        raise MemberNotFoundError()
    return member


def get_race_member(store: DocumentStore, guild_id: str, member_id: str) -> RaceMember:
    """Return the race member, creating and storing a new one if needed."""
    try:
        return _load_race_member(store, guild_id, member_id)
    except MemberNotFoundError:
        member = RaceMember(guild_id=guild_id, member_id=member_id)
        write_race_member(store, member)
        logger.info("new race member %s in guild %s", member_id, guild_id)
        return member