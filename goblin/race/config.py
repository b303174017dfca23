"""Race game configuration, its storage, and the race game's errors."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from goblin.store import DocumentStore, NotFoundError

RACE_CONFIG_COLLECTION = "race_configs"

logger = logging.getLogger(__name__)


class RaceError(Exception):
    """Base class for errors raised by the race game."""


class ConfigNotFoundError(RaceError):
    """Raised when a guild has no stored race configuration."""

    def __init__(self, message: str = "configuration file not found") -> None:
        super().__init__(message)


class MemberNotFoundError(RaceError):
    """Raised when a race member is not stored."""

    def __init__(self, message: str = "member not found") -> None:
        super().__init__(message)


class RacerNotFoundError(RaceError):
    """Raised when a racer is not stored."""

    def __init__(self, message: str = "racer not found") -> None:
        super().__init__(message)


class NoRacersFoundError(RaceError):
    """Raised when no racers are stored for a guild and theme."""

    def __init__(self, message: str = "no racers found") -> None:
        super().__init__(message)


@dataclass
class RaceConfig:
    """Settings for races in one guild."""

    guild_id: str
    bet_amount: int = 100
    currency: str = "credit"
    last_race_ended: Optional[datetime] = None
    max_num_racers: int = 10
    max_prize_amount: int = 1250
    min_num_racers: int = 2
    min_price_amount: int = 750
    theme: str = "clash"
    wait_between_races: timedelta = field(default_factory=lambda: timedelta(minutes=5))
    wait_for_bets: timedelta = field(default_factory=lambda: timedelta(minutes=1))
    wait_to_start: timedelta = field(default_factory=lambda: timedelta(seconds=30))
    starting_line: str = "🏁"
    ending_line: str = ""
    id: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the configuration."""
        document: dict[str, Any] = {
            "guild_id": self.guild_id,
            "bet_amount": self.bet_amount,
            "currency": self.currency,
            "last_race_ended": self.last_race_ended,
            "max_num_racers": self.max_num_racers,
            "max_prize_amount": self.max_prize_amount,
            "min_num_racers": self.min_num_racers,
            "min_price_amount": self.min_price_amount,
            "theme": self.theme,
            "wait_between_races": self.wait_between_races.total_seconds(),
            "wait_for_bets": self.wait_for_bets.total_seconds(),
            "wait_to_start": self.wait_to_start.total_seconds(),
            "starting_line": self.starting_line,
            "ending_line": self.ending_line,
        }
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> RaceConfig:
        """Build a configuration from its stored form."""
        defaults = cls(guild_id=document["guild_id"])

        def seconds(key: str, default: timedelta) -> timedelta:
            value = document.get(key)
            return default if value is None else timedelta(seconds=value)

        return cls(
            guild_id=document["guild_id"],
            bet_amount=document.get("bet_amount", defaults.bet_amount),
            currency=document.get("currency", defaults.currency),
            last_race_ended=document.get("last_race_ended"),
            max_num_racers=document.get("max_num_racers", defaults.max_num_racers),
            max_prize_amount=document.get("max_prize_amount", defaults.max_prize_amount),
            min_num_racers=document.get("min_num_racers", defaults.min_num_racers),
            min_price_amount=document.get("min_price_amount", defaults.min_price_amount),
            theme=document.get("theme", defaults.theme),
            wait_between_races=seconds("wait_between_races", defaults.wait_between_races),
            wait_for_bets=seconds("wait_for_bets", defaults.wait_for_bets),
            wait_to_start=seconds("wait_to_start", defaults.wait_to_start),
            starting_line=document.get("starting_line", defaults.starting_line),
            ending_line=document.get("ending_line", defaults.ending_line),
            id=document.get("_id"),
        )


def read_config(store: DocumentStore, guild_id: str) -> Optional[RaceConfig]:
    """Load the guild's race configuration, or return None if there is none."""
    try:
        document = store.find_one(RACE_CONFIG_COLLECTION, {"guild_id": guild_id})
    except NotFoundError:
        logger.debug("race configuration not found for guild %s", guild_id)
        return None
    return RaceConfig.from_document(document)


def write_config(store: DocumentStore, config: RaceConfig) -> None:
    """Create or update the stored race configuration."""
    if config.id:
        key = {"_id": config.id}
    else:
        key = {"guild_id": config.guild_id}
    config.id = store.update_or_insert(RACE_CONFIG_COLLECTION, key, config.to_document())


def _load_config(store: DocumentStore, guild_id: str) -> RaceConfig:
    config = read_config(store, guild_id)
    if config is None:
        raise ConfigNotFoundError()
    return config


def get_config(store: DocumentStore, guild_id: str) -> RaceConfig:
    """Return the guild's race configuration, creating and storing a default one if needed."""
    try:
        return _load_config(store, guild_id)
    except ConfigNotFoundError:
        config = RaceConfig(guild_id=guild_id)
        write_config(store, config)
        logger.info("race configuration created for guild %s", guild_id)
        return config