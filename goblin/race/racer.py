"""Characters that race on behalf of guild members, and how they move."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from goblin.race.config import NoRacersFoundError
from goblin.store import DocumentStore

RACER_COLLECTION = "race_racers"

logger = logging.getLogger(__name__)

_DEFAULT_RACERS = (
    ("<:minion:288380851023249408>", "veryfast"),
    ("<:miner:288434873629147158>", "veryfast"),
    ("<:goblin:288380850943295488>", "veryfast"),
    ("<:betaminion:1138954584744808548>", "veryfast"),
    ("<:wallbreaker:288380850620334080>", "fast"),
    ("<:valkyrie:288380850738036746>", "fast"),
    ("<:sneakyarcher:316157730434056193>", "fast"),
    ("<:hogrider:1153765836604067980>", "fast"),
    ("<:Queen:700065300137246790>", "fast"),
    ("<:archer:1155943729882988654>", "fast"),
    ("<:barbarian:288380850117148682>", "steady"),
    ("<:cannoncart:693145555832012851>", "steady"),
    ("<:healer:288380850662408203>", "steady"),
    ("<:wizard:288380840289894401>", "steady"),
    ("<:barbarianking:1138953623884267520>", "steady"),
    ("<:GW:690611154061361183>", "steady"),
    ("<:battlemachine:1155944842103369829>", "steady"),
    ("<:bomber:1155945132735082539>", "abberant"),
    ("<:dropship:316157731264397312>", "abberant"),
    ("<:ballooncoc:288380851090096148>", "abberant"),
    ("<:edragplead:872921108150616154>", "predator"),
    ("<:dragoncoc:288380850402492416>", "predator"),
    ("<:battleblimp:1153753935048347818>", "predator"),
    ("<:lavahound:288380851090096138>", "predator"),
    ("<:babydragon:342505061554978816>", "babydragon"),
    ("<:ragedbarbarian:316157730735915009>", "special"),
    ("<:superpekka:316157731302146050>", "slow"),
    ("<:pekka:1153759228301946991>", "slow"),
    ("<:bowler:288380850809339914>", "slow"),
    ("<:witch:288380845830438923>", "slow"),
    ("<:wallwrecker:935755961220616192>", "slow"),
    ("<:nightwitch:316157731297820672>", "slow"),
    ("<:golem:288380851232833546>", "slow"),
    ("<:giant:288380850855477259>", "slow"),
    ("<:boxergiant:316157730782183426>", "slow"),
)


@dataclass
class Racer:
    """A character that may be assigned to a member during a race."""

    guild_id: str
    theme: str
    emoji: str
    movement_speed: str
    id: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the racer."""
        document: dict[str, Any] = {
            "guild_id": self.guild_id,
            "theme": self.theme,
            "emoji": self.emoji,
            "movement_speed": self.movement_speed,
        }
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Racer:
        """Build a racer from its stored form."""
        return cls(
            guild_id=document["guild_id"],
            theme=document["theme"],
            emoji=document["emoji"],
            movement_speed=document["movement_speed"],
            id=document.get("_id"),
        )

    def calculate_movement(self, turn: int, rng: Optional[random.Random] = None) -> int:
        """Return how far the racer moves on the given turn."""
        rng = rng or random.Random()
        match self.movement_speed:
            case "veryfast":
                return rng.randrange(8) * 2
            case "fast":
                return rng.randrange(5) * 3
            case "slow":
                return (rng.randrange(3) + 1) * 3
            case "steady":
                return 2 * 3
            case "abberant":
                if rng.randrange(100) > 90:
                    return 5 * 3
                return rng.randrange(3) * 3
            case "predator":
                if turn % 2 == 0:
                    return 0
                return (rng.randrange(4) + 2) * 3
            case _:
                if turn == 0:
                    return 14 * 3
                if turn == 1:
                    return 0
                return rng.randrange(3) * 3


def default_racers(guild_id: str) -> list[Racer]:
    """Return the built-in racers for a guild."""
    return [
        Racer(guild_id=guild_id, theme="clash", emoji=emoji, movement_speed=speed)
        for emoji, speed in _DEFAULT_RACERS
    ]


def read_racers(store: DocumentStore, guild_id: str, theme_name: str) -> list[Racer]:
    """Load the stored racers for a guild and theme; raise NoRacersFoundError if none."""
    documents = store.find_many(RACER_COLLECTION, {"guild_id": guild_id, "theme": theme_name})
    if not documents:
        raise NoRacersFoundError()
    return [Racer.from_document(document) for document in documents]


def write_racer(store: DocumentStore, racer: Racer) -> None:
    """Create or update the stored racer."""
    if racer.id:
        key: dict[str, Any] = {"_id": racer.id}
    else:
        key = {
            "guild_id": racer.guild_id,
            "theme": racer.theme,
            "emoji": racer.emoji,
            "movement_speed": racer.movement_speed,
        }
    racer.id = store.update_or_insert(RACER_COLLECTION, key, racer.to_document())


def get_racers(store: DocumentStore, guild_id: str, theme_name: str) -> list[Racer]:
    """Return the racers for a guild and theme, storing the defaults if none exist."""
    try:
        return read_racers(store, guild_id, theme_name)
    except NoRacersFoundError:
        racers = default_racers(guild_id)
        for racer in racers:
            write_racer(store, racer)
        logger.info("created %d racers for guild %s", len(racers), guild_id)
        return racers