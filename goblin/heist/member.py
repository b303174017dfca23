"""Members who take part in heists: their criminal record, jail time and deaths."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum, IntEnum
from typing import Any, Optional

from goblin.heist.config import HeistConfig
from goblin.store import DocumentStore, NotFoundError

HEIST_MEMBER_COLLECTION = "heist_members"

logger = logging.getLogger(__name__)


class MemberStatus(str, Enum):
    """Where a heist member stands after their last heist."""

    ESCAPED = "Escaped"
    FREE = "Free"
    DEAD = "Dead"
    APPREHENDED = "Apprehended"
    OOB = "Out on Bail"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


class CriminalLevel(IntEnum):
    """Thresholds of the criminal levels a member climbs through."""

    GREENHORN = 0
    RENEGADE = 1
    VETERAN = 10
    COMMANDER = 25
    WAR_CHIEF = 50
    LEGEND = 75
    IMMORTAL = 100


_LEVEL_NAMES = (
    (CriminalLevel.IMMORTAL, "Immortal"),
    (CriminalLevel.LEGEND, "Legend"),
    (CriminalLevel.WAR_CHIEF, "WarChief"),
    (CriminalLevel.COMMANDER, "Commander"),
    (CriminalLevel.VETERAN, "Veteran"),
    (CriminalLevel.RENEGADE, "Renegade"),
    (CriminalLevel.GREENHORN, "Greenhorn"),
)


def criminal_level_name(level: int) -> str:
    """Return the name of the criminal level reached at the given count."""
    for threshold, name in _LEVEL_NAMES:
        if level >= threshold:
            return name
    return "Unknown"


@dataclass
class GuildMember:
    """A member of a guild, as known to the games."""

    guild_id: str
    member_id: str
    name: str = ""


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _remaining(deadline: Optional[datetime]) -> timedelta:
    if deadline is None:
        return timedelta(0)
    now = _now()
    if deadline < now:
        return timedelta(0)
    return deadline - now


@dataclass
class HeistMember:
    """The heist record of a guild member."""

    guild_id: str
    member_id: str
    bail_cost: int = 0
    criminal_level: int = CriminalLevel.GREENHORN
    deaths: int = 0
    death_timer: Optional[datetime] = None
    jail_counter: int = 0
    jail_timer: Optional[datetime] = None
    sentence: timedelta = field(default_factory=timedelta)
    spree: int = 0
    status: MemberStatus = MemberStatus.FREE
    total_jail: int = 0
    id: Optional[str] = None
    guild_member: Optional[GuildMember] = field(default=None, repr=False, compare=False)

    @property
    def name(self) -> str:
        """The member's display name, or their id when no name is known."""
        if self.guild_member is not None and self.guild_member.name:
            return self.guild_member.name
        return self.member_id

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the member."""
        document: dict[str, Any] = {
            "guild_id": self.guild_id,
            "member_id": self.member_id,
            "bail_cost": self.bail_cost,
            "criminal_level": int(self.criminal_level),
            "deaths": self.deaths,
            "death_timer": self.death_timer,
            "jail_counter": self.jail_counter,
            "jail_timer": self.jail_timer,
            "sentence": self.sentence.total_seconds(),
            "spree": self.spree,
            "status": self.status.value,
            "total_jail": self.total_jail,
        }
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(
        cls, document: Mapping[str, Any], guild_member: Optional[GuildMember] = None
    ) -> HeistMember:
        """Build a member from its stored form."""
        return cls(
            guild_id=document["guild_id"],
            member_id=document["member_id"],
            bail_cost=document.get("bail_cost", 0),
            criminal_level=document.get("criminal_level", 0),
            deaths=document.get("deaths", 0),
            death_timer=document.get("death_timer"),
            jail_counter=document.get("jail_counter", 0),
            jail_timer=document.get("jail_timer"),
            sentence=timedelta(seconds=document.get("sentence") or 0),
            spree=document.get("spree", 0),
            status=MemberStatus(document.get("status") or MemberStatus.FREE.value),
            total_jail=document.get("total_jail", 0),
            id=document.get("_id"),
            guild_member=guild_member,
        )

    def apprehended(self, store: DocumentStore, config: HeistConfig) -> None:
        """Send the member to jail after being caught during a heist."""
        bail_cost = config.bail_base
        if self.status is MemberStatus.OOB:
            bail_cost *= 3
        self.sentence = config.sentence_base * (self.jail_counter + 1)
        self.jail_timer = _now() + self.sentence
        self.status = MemberStatus.APPREHENDED
        self.jail_counter += 1
        self.total_jail += 1
        self.spree = 0
        self.criminal_level += 1
        self.bail_cost = bail_cost
        write_member(store, self)
        logger.debug("heist member %s apprehended in guild %s", self.member_id, self.guild_id)

    def died(self, store: DocumentStore, config: HeistConfig) -> None:
        """Mark the member as dead after dying during a heist."""
        self.bail_cost = 0
        self.criminal_level = CriminalLevel.GREENHORN
        self.deaths += 1
        self.death_timer = _now() + config.death_timer
        self.jail_counter = 0
        self.jail_timer = None
        self.sentence = timedelta(0)
        self.spree = 0
        self.status = MemberStatus.DEAD
        write_member(store, self)
        logger.debug("heist member %s died in guild %s", self.member_id, self.guild_id)

    def escaped(self, store: DocumentStore) -> None:
        """Record a successful escape from a heist."""
        self.spree += 1
        write_member(store, self)
        logger.debug("heist member %s escaped in guild %s", self.member_id, self.guild_id)

    def update_status(self, store: DocumentStore) -> None:
        """Free the member once their jail sentence or death timer has run out."""
        if self.status in (MemberStatus.APPREHENDED, MemberStatus.OOB):
            if self.remaining_jail_time() <= timedelta(0):
                self.clear_jail_and_death_status(store)
        elif self.status is MemberStatus.DEAD:
            if self.remaining_death_time() <= timedelta(0):
                self.clear_jail_and_death_status(store)

    def clear_jail_and_death_status(self, store: DocumentStore) -> None:
        """Release the member from jail or raise them from the grave."""
        if self.status is MemberStatus.DEAD:
            logger.debug("heist member %s risen from the grave", self.member_id)
        elif self.status in (MemberStatus.APPREHENDED, MemberStatus.OOB):
            logger.debug("heist member %s released from jail", self.member_id)
        self.bail_cost = 0
        self.death_timer = None
        self.jail_counter = 0
        self.jail_timer = None
        self.sentence = timedelta(0)
        self.spree = 0
        self.status = MemberStatus.FREE
        write_member(store, self)

    def remaining_jail_time(self) -> timedelta:
        """Return how long is left of the member's sentence."""
        return _remaining(self.jail_timer)

    def remaining_death_time(self) -> timedelta:
        """Return how long until the member is revived."""
        return _remaining(self.death_timer)


def read_member(store: DocumentStore, guild_member: GuildMember) -> Optional[HeistMember]:
    """Load the heist record of a guild member, or return None if there is none."""
    try:
        document = store.find_one(
            HEIST_MEMBER_COLLECTION,
            {"guild_id": guild_member.guild_id, "member_id": guild_member.member_id},
        )
    except NotFoundError:
        logger.debug("heist member %s not found", guild_member.member_id)
        return None
    return HeistMember.from_document(document, guild_member)


def write_member(store: DocumentStore, member: HeistMember) -> None:
    """Create or update the stored heist member."""
    if member.id:
        key: dict[str, Any] = {"_id": member.id}
    else:
        key = {"guild_id": member.guild_id, "member_id": member.member_id}
    member.id = store.update_or_insert(HEIST_MEMBER_COLLECTION, key, member.to_document())


def get_heist_member(store: DocumentStore, guild_member: GuildMember) -> HeistMember:
    """Return the heist record of a guild member, creating and storing one if needed."""
    member = read_member(store, guild_member)
    if member is None:
        member = HeistMember(
            guild_id=guild_member.guild_id,
            member_id=guild_member.member_id,
            guild_member=guild_member,
        )
        write_member(store, member)
        logger.debug("created heist member %s", guild_member.member_id)
    return member