"""Heist game configuration and its storage."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from goblin.store import DocumentStore, NotFoundError

GAME_ID = "heist"
CONFIG_COLLECTION = "heist_configs"

BAIL_BASE = 250
CREW_OUTPUT = "None"
DEATH_TIMER = timedelta(seconds=45)
HEIST_COST = 1500
POLICE_ALERT = timedelta(seconds=60)
SENTENCE_BASE = timedelta(seconds=45)
WAIT_TIME = timedelta(seconds=60)
HEIST_DEFAULT_THEME = "clash"

logger = logging.getLogger(__name__)

_DURATIONS = ("death_timer", "police_alert", "sentence_base", "wait_time")


@dataclass
class HeistConfig:
    """Settings for heists in one guild."""

    guild_id: str
    theme: str = HEIST_DEFAULT_THEME
    alert_time: Optional[datetime] = None
    bail_base: int = BAIL_BASE
    crew_output: str = CREW_OUTPUT
    death_timer: timedelta = DEATH_TIMER
    heist_cost: int = HEIST_COST
    police_alert: timedelta = POLICE_ALERT
    sentence_base: timedelta = SENTENCE_BASE
    targets: str = HEIST_DEFAULT_THEME
    wait_time: timedelta = WAIT_TIME
    id: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the configuration."""
        document: dict[str, Any] = {
            "guild_id": self.guild_id,
            "theme": self.theme,
            "alert_time": self.alert_time,
            "bail_base": self.bail_base,
            "crew_output": self.crew_output,
            "heist_cost": self.heist_cost,
            "targets": self.targets,
        }
        document.update((name, getattr(self, name).total_seconds()) for name in _DURATIONS)
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> HeistConfig:
        """Build a configuration from its stored form."""
        defaults = cls(guild_id=document["guild_id"])

        def seconds(key: str) -> timedelta:
            value = document.get(key)
            return getattr(defaults, key) if value is None else timedelta(seconds=value)

        return cls(
            guild_id=document["guild_id"],
            theme=document.get("theme", defaults.theme),
            alert_time=document.get("alert_time"),
            bail_base=document.get("bail_base", defaults.bail_base),
            crew_output=document.get("crew_output", defaults.crew_output),
            death_timer=seconds("death_timer"),
            heist_cost=document.get("heist_cost", defaults.heist_cost),
            police_alert=seconds("police_alert"),
            sentence_base=seconds("sentence_base"),
            targets=document.get("targets", defaults.targets),
            wait_time=seconds("wait_time"),
            id=document.get("_id"),
        )

    def set_alert_time(self, store: DocumentStore) -> None:
        """Put the police on alert from now for the configured time, and store it."""
        self.alert_time = datetime.now(timezone.utc) + self.police_alert
        write_config(store, self)

    def __str__(self) -> str:
        return json.dumps(self.to_document(), default=str)


def read_config(store: DocumentStore, guild_id: str) -> Optional[HeistConfig]:
    """Load the guild's heist configuration, or return None if there is none."""
    try:
        document = store.find_one(CONFIG_COLLECTION, {"guild_id": guild_id})
    except NotFoundError:
        logger.debug("heist configuration not found for guild %s", guild_id)
        return None
    return HeistConfig.from_document(document)


def write_config(store: DocumentStore, config: HeistConfig) -> None:
    """Create or update the stored heist configuration."""
    if config.id:
        key = {"_id": config.id}
    else:
        key = {"guild_id": config.guild_id}
    config.id = store.update_or_insert(CONFIG_COLLECTION, key, config.to_document())


def get_config(store: DocumentStore, guild_id: str) -> HeistConfig:
    """Return the guild's heist configuration, creating and storing a default one if needed."""
    config = read_config(store, guild_id)
    if config is None:
        config = HeistConfig(guild_id=guild_id)
        write_config(store, config)
        logger.debug("heist configuration created for guild %s", guild_id)
    return config