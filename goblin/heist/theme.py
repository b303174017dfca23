"""Heist themes: the wording and outcome messages that flavour a heist."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from goblin.heist.config import get_config
from goblin.heist.errors import ThemeNotFoundError
from goblin.store import DocumentStore, NotFoundError

THEME_COLLECTION = "heist_themes"

ESCAPED = "Escaped"
APPREHENDED = "Apprehended"
DEAD = "Dead"

logger = logging.getLogger(__name__)

_GOLD = "<:gold:312346438157991938>"

_ESCAPED_MESSAGES = (
    (f"%s brought a few healers to keep themself alive <:healer:288380850662408203>. +25 {_GOLD}", 25),
    (f"%s brought a rage spell to the raid <:ragespell:1153756488117014578>. +25 {_GOLD}", 25),
    (f"%s remembered to request CC troops before attacking. +25 {_GOLD}", 25),
    (f"%s used Royal Cloak <:Queen:700065300137246790>. +25 {_GOLD}", 25),
    (f"%s used Iron Fist <:BK:288380851111329792>. +25 {_GOLD}", 25),
    (f"%s took out a corner builder hut <:builderhut:1153757245914488914>. +50 {_GOLD}.", 50),
    (f"%s boosted the training barracks <:gems:312346463453708289>. +50 {_GOLD}", 50),
    (f"%s lured defending CC troops. +50 {_GOLD}", 50),
    (f"%s built a funnel correctly. +100 {_GOLD}", 100),
    (f"%s used a power potion on the clan. +100 {_GOLD}", 100),
    (
        "%s dropped a heal on a known Giant Bomb location "
        f"<:healingspell:1153756342016823316>. +100 {_GOLD}",
        100,
    ),
    (f"%s successfully scouted the top base. +100 {_GOLD}", 100),
    (f"%s managed to take out the Town Hall. +150 {_GOLD}", 150),
    (f"%s got every last drop of Dark Elixir <:darkelixir:312346454645669889>. +250 {_GOLD}", 250),
    (
        "%s three starred a base with barch <:barbarian:288380850117148682> "
        f"<:sneakyarcher:316157730434056193>. +250 {_GOLD}",
        250,
    ),
    (f"%s cast Eternal Tome <:GW:690611154061361183>. +250 {_GOLD}", 250),
    (f"%s HOG RIIIIIIIIDDEEEER <:hogrider:1153765836604067980>. +500 {_GOLD}", 500),
    (f"%s scored a six pack <:sharkhi:301544708063100930>. +1,000 {_GOLD}", 1000),
    (f"%s 3 starred the top base in War without use of Heroes. +1,500 {_GOLD}", 1500),
    (f"%s found a gem box <:gems:312346463453708289>. +2,500 {_GOLD}", 2500),
)

_APPREHENDED_MESSAGES = (
    "%s stepped onto a spring trap.",
    "%s forgot to bring heals to their GoHo attack <:golem:288380851232833546><:hogrider:1153765836604067980>.",
    "%s used their builder potions while not upgrading anything.",
    "%s dropped rage on healers too late <:ragespell:1153756488117014578> <:healer:288380850662408203>.",
    "%s forgot to bring heroes to the raid.",
    "%s forgot to bring CC troops to the raid.",
    "%s lost connection!",
    "%s brought jump spells to a LaLo attack. <:jumpspell:1153756390934978613> "
    "<:lavahound:288380851090096138> <:ballooncoc:288380851090096148> ",
    "%s fell out of a balloon <:ballooncoc:288380851090096148>.",
    "%s tried using a cold air balloon <:ballooncoc:288380851090096148>.",
    "%s got stuck in the clouds.",
    "%s stayed behind to finish taking out a wall.",
    "%s was paralyzed by a Hidden Tesla.",
    "%s dropped a freeze spell on themself <:freezespell:1153757695078301797>.",
    "%s attempted to teach the Hog Rider to ride Sheep instead <:hogrider:1153765836604067980>.",
    "%s forgot to attack <:starfishbarb:312350355960889344>.",
    "%s managed to get 0 stars.",
    "%s decided to upgrade all their barracks at the same time.",
    "%s decided to upgrade all their spell factories at the same time.",
    "%s decided to heal the grass <:healingspell:1153756342016823316>.",
    "%s dropped their spells instead of troops and rage quit.",
    "%s decided to chase around a butterfly <:pekka:1153759228301946991>.",
    "%s got lost in a Miner tunnel <:miner:288434873629147158>.",
    "%s left Grand Warden in air mode <:GW:690611154061361183>.",
    "%s left Grand Warden in ground mode <:GW:690611154061361183>.",
    "%s spent all their gold on an empty Wall Wrecker <:wallwrecker:935755961220616192>.",
    "%s spent all their gold on a Battle Blimp with a hole in it <:battleblimp:1153753935048347818>.",
    "%s was taken out by a Sneaky Archer <:sneakyarcher:316157730434056193>.",
    "%s was knocked into next week by a Boxer Giant <:boxergiant:316157730782183426>.",
    "%s was blown off the map by an Air Sweeper.",
    "%s used GoWiPe it was super ineffective <:golem:288380851232833546>"
    "<:wizard:288380840289894401><:pekka:1153759228301946991>.",
    "%s attempted to clone the Dark Elixir Storage <:clonespell:1153754704401141760> "
    "<:darkelixir:312346454645669889>.",
    "%s brought their farming army to the war <:barbarian:288380850117148682> "
    "<:sneakyarcher:316157730434056193>.",
    "%s fell asleep under a builder hut <a:sleep_zzz:400680923151990784>  "
    "<:builderhut:1153757245914488914>.",
    "%s got paralyzed by an Electro Dragon <:edragBplease:721984769667366919>.",
    "%s donated wallbreakers for defending CC <:wallwrecker:935755961220616192>.",
    "%s's dragons took a stroll around the perimeter of the base <:dragoncoc:288380850402492416> "
    "<:edragBplease:721984769667366919>.",
    "%s forgot to use the King's ability <:BK:288380851111329792>.",
    "%s forgot to use the Queen's ability <:Queen:700065300137246790>.",
    "%s forgot to the use the Warden's ability <:GW:690611154061361183>.",
    "%s's wallbreakers went to the wrong wall <:wallwrecker:935755961220616192>.",
    "%s's night witches ran into a mega mine <:nightwitch:316157731297820672>.",
    "%s used a Book of Building to save the ten seconds needed to finish a level one gold mine.",
    "%s used a Book of Heroes to finish the level two Barbarian King upgrade <:BK:288380851111329792>.",
    "%s spent gems on wall rings to get level two walls!",
    "%s got a 49%% 0 Star. <:starempty:1153758399117414502><:starempty:1153758399117414502>"
    "<:starempty:1153758399117414502>",
    "%s got a 99%% 1 Star in the deciding attack. <:starnew:1153758461553807480>"
    "<:starempty:1153758399117414502><:starempty:1153758399117414502>",
)

_TOMBSTONE = "(death) <:tombstone:688467782496419942>"

_DIED_MESSAGES = (
    f"%s forgot funnel and was singled out by an archer tower. {_TOMBSTONE}",
    f"%s walked into double giant bombs. {_TOMBSTONE}",
    f"%s was burnt to a crisp by a single target Inferno Tower. {_TOMBSTONE}",
    f"%s got killed by the CC troops. {_TOMBSTONE}",
    f"%s accidentally drank a poison spell <:poisonspell:1153756439496634389>. {_TOMBSTONE}",
    f"%s tried to take out the Giga Tesla alone. {_TOMBSTONE}",
    f"%s was eaten by a dragon <:dragoncoc:288380850402492416>. {_TOMBSTONE}",
    f"%s wasn't healed by the healers <:healer:288380850662408203>. {_TOMBSTONE}",
    f"%s pinged the discord mods for help with their attack. {_TOMBSTONE}",
    f"%s was tripled by an engineer. {_TOMBSTONE}",
    f"%s was banned by a moderator. {_TOMBSTONE}",
)


@dataclass
class HeistMessage:
    """An outcome message for one crew member; "%s" stands for the member's name."""

    message: str
    result: str
    bonus_amount: int = 0

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the message."""
        document: dict[str, Any] = {"message": self.message, "result": self.result}
        if self.bonus_amount:
            document["bonus_amount"] = self.bonus_amount
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> HeistMessage:
        """Build a message from its stored form."""
        return cls(
            message=document["message"],
            result=document.get("result", ""),
            bonus_amount=document.get("bonus_amount", 0),
        )


@dataclass
class Theme:
    """A set of words and messages that give a heist its flavour."""

    guild_id: str
    name: str
    escaped_messages: list[HeistMessage] = field(default_factory=list)
    apprehended_messages: list[HeistMessage] = field(default_factory=list)
    died_messages: list[HeistMessage] = field(default_factory=list)
    jail: str = ""
    oob: str = ""
    police: str = ""
    bail: str = ""
    crew: str = ""
    sentence: str = ""
    heist: str = ""
    vault: str = ""
    id: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the theme."""
        document: dict[str, Any] = {
            "guild_id": self.guild_id,
            "name": self.name,
            "escaped_messages": [m.to_document() for m in self.escaped_messages],
            "apprehended_messages": [m.to_document() for m in self.apprehended_messages],
            "died_messages": [m.to_document() for m in self.died_messages],
            "jail": self.jail,
            "oob": self.oob,
            "police": self.police,
            "bail": self.bail,
            "crew": self.crew,
            "sentence": self.sentence,
            "heist": self.heist,
            "vault": self.vault,
        }
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Theme:
        """Build a theme from its stored form."""

        def messages(key: str) -> list[HeistMessage]:
            return [HeistMessage.from_document(m) for m in document.get(key) or []]

        return cls(
            guild_id=document["guild_id"],
            name=document["name"],
            escaped_messages=messages("escaped_messages"),
            apprehended_messages=messages("apprehended_messages"),
            died_messages=messages("died_messages"),
            jail=document.get("jail", ""),
            oob=document.get("oob", ""),
            police=document.get("police", ""),
            bail=document.get("bail", ""),
            crew=document.get("crew", ""),
            sentence=document.get("sentence", ""),
            heist=document.get("heist", ""),
            vault=document.get("vault", ""),
            id=document.get("_id"),
        )

    def __str__(self) -> str:
        return (
            f"Theme{{ID={self.id}, GuildID={self.guild_id}, ThemeID={self.name}, "
            f"Escaped={len(self.escaped_messages)}, Apprehended={len(self.apprehended_messages)}, "
            f"Died={len(self.died_messages)}, Jail={self.jail}, OOB={self.oob}, "
            f"Police={self.police}, Bail={self.bail}, Crew={self.crew}, "
            f"Sentence={self.sentence}, Heist={self.heist}, Vault={self.vault}}}"
        )


def default_theme(guild_id: str) -> Theme:
    """Return the built-in "clash" theme for a guild."""
    return Theme(
        guild_id=guild_id,
        name="clash",
        escaped_messages=[
            HeistMessage(message=text, result=ESCAPED, bonus_amount=bonus)
            for text, bonus in _ESCAPED_MESSAGES
        ],
        apprehended_messages=[
            HeistMessage(message=text, result=APPREHENDED) for text in _APPREHENDED_MESSAGES
        ],
        died_messages=[HeistMessage(message=text, result=DEAD) for text in _DIED_MESSAGES],
        jail="resting",
        oob="running on gems",
        police="Enemy CC Troops",
        bail="heal",
        crew="clan",
        sentence="nap",
        heist="raid",
        vault="village",
    )


def read_theme(store: DocumentStore, guild_id: str, name: str) -> Theme:
    """Load a stored theme; raise ThemeNotFoundError if it is not stored."""
    try:
        document = store.find_one(THEME_COLLECTION, {"guild_id": guild_id, "name": name})
    except NotFoundError as exc:
        raise ThemeNotFoundError() from exc
    return Theme.from_document(document)


def write_theme(store: DocumentStore, theme: Theme) -> None:
    """Create or update the stored theme."""
    if theme.id:
        key: dict[str, Any] = {"_id": theme.id}
    else:
        key = {"guild_id": theme.guild_id, "name": theme.name}
    theme.id = store.update_or_insert(THEME_COLLECTION, key, theme.to_document())
    logger.debug("wrote theme %s for guild %s", theme.name, theme.guild_id)


def get_themes(store: DocumentStore, guild_id: str) -> list[Theme]:
    """Return every theme stored for the guild."""
    documents = store.find_many(THEME_COLLECTION, {"guild_id": guild_id})
    return [Theme.from_document(document) for document in documents]


def get_theme_names(store: DocumentStore, guild_id: str) -> list[str]:
    """Return the names of the themes stored for the guild."""
    return [theme.name for theme in get_themes(store, guild_id)]


def get_theme(store: DocumentStore, guild_id: str) -> Theme:
    """Return the guild's configured theme, storing the default theme if it is missing."""
    config = get_config(store, guild_id)
    try:
        return read_theme(store, guild_id, config.theme)
    except ThemeNotFoundError:
        logger.error("theme %s not found for guild %s", config.theme, guild_id)
    theme = default_theme(guild_id)
    write_theme(store, theme)
    logger.debug("created default theme for guild %s", guild_id)
    return theme