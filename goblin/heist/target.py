"""Heist targets, their vaults, and the background recovery of emptied vaults."""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional

from goblin.heist.errors import NoTargetsError
from goblin.store import DocumentStore

TARGET_COLLECTION = "heist_targets"

VAULT_UPDATE_TIME = timedelta(minutes=1)
VAULT_RECOVER_PERCENT = 0.04

logger = logging.getLogger(__name__)

_DEFAULT_TARGETS = (
    ("Goblin Forest", 2, 29.3, 16000),
    ("Goblin Outpost", 3, 20.65, 24000),
    ("Goblin Outpost", 3, 20.65, 24000),
    ("Rocky Fort", 5, 14.5, 42000),
    ("Goblin Gauntlet", 8, 9.5, 71000),
    ("Gobbotown", 11, 6.75, 101000),
    ("Fort Knobs", 14, 5.2, 133000),
    ("Bouncy Castle", 17, 4.25, 167000),
    ("Gobbo Campus", 21, 3.5, 213000),
    ("Walls Of Steel", 25, 2.91, 263000),
    ("Obsidian Tower", 29, 2.49, 314000),
    ("Queen's Gambit", 34, 2.15, 379000),
    ("Faulty Towers", 39, 1.86, 448000),
    ("Megamansion", 44, 1.64, 512000),
    ("P.e.k.k.a's Playhouse", 49, 1.46, 598000),
    ("Sherbet Towers", 55, 1.31, 688000),
)


@dataclass
class Target:
    """A place a crew may hit, with its vault of credits."""

    guild_id: str
    theme: str
    name: str
    crew_size: int
    success: float
    vault: int
    vault_max: int
    is_at_max: bool = True
    id: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        """Return the stored form of the target."""
        document: dict[str, Any] = {
            "guild_id": self.guild_id,
            "theme": self.theme,
            "target_id": self.name,
            "crew": self.crew_size,
            "success": self.success,
            "vault": self.vault,
            "vault_max": self.vault_max,
            "is_at_max": self.is_at_max,
        }
        if self.id:
            document["_id"] = self.id
        return document

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> Target:
        """Build a target from its stored form."""
        return cls(
            guild_id=document["guild_id"],
            theme=document.get("theme", ""),
            name=document["target_id"],
            crew_size=document.get("crew", 0),
            success=document.get("success", 0.0),
            vault=document.get("vault", 0),
            vault_max=document.get("vault_max", 0),
            is_at_max=document.get("is_at_max", False),
            id=document.get("_id"),
        )

    def steal_from_vault(self, store: DocumentStore, amount: int) -> None:
        """Take credits from the vault, never leaving it below zero, and store the target."""
        if amount <= 0:
            logger.debug("nothing stolen from the vault of %s", self.name)
            return
        original = self.vault
        self.vault = max(0, self.vault - amount)
        self.is_at_max = False
        write_target(store, self)
        logger.debug(
            "stole %d from %s in guild %s: %d -> %d",
            amount,
            self.name,
            self.guild_id,
            original,
            self.vault,
        )

    def __str__(self) -> str:
        return (
            f"Target{{ID={self.id}, GuildID={self.guild_id}, TargetID={self.name}, "
            f"CrewSize={self.crew_size}, Success={self.success:.2f}, Vault={self.vault}, "
            f"VaultMax={self.vault_max}}}"
        )


def default_targets(guild_id: str) -> list[Target]:
    """Return the built-in targets for a guild."""
    return [
        Target(
            guild_id=guild_id,
            theme="clash",
            name=name,
            crew_size=crew_size,
            success=success,
            vault=vault,
            vault_max=vault,
        )
        for name, crew_size, success, vault in _DEFAULT_TARGETS
    ]


def read_targets(store: DocumentStore, guild_id: str, theme: str) -> list[Target]:
    """Load the stored targets for a guild and theme."""
    documents = store.find_many(TARGET_COLLECTION, {"guild_id": guild_id, "theme": theme})
    return [Target.from_document(document) for document in documents]


def write_target(store: DocumentStore, target: Target) -> None:
    """Create or update the stored target."""
    if target.id:
        key: dict[str, Any] = {"_id": target.id}
    else:
        key = {"guild_id": target.guild_id, "target_id": target.name}
    target.id = store.update_or_insert(TARGET_COLLECTION, key, target.to_document())


def get_targets(store: DocumentStore, guild_id: str, theme: str) -> list[Target]:
    """Return the targets for a guild and theme, storing the defaults if none exist."""
    targets = read_targets(store, guild_id, theme)
    if not targets:
        targets = default_targets(guild_id)
        for target in targets:
            write_target(store, target)
    return targets


def select_target(targets: list[Target], crew_size: int) -> Target:
    """Return the target with the smallest crew size that fits the crew.

    If no target is large enough, the last target is used.
    """
    if not targets:
        raise NoTargetsError()
    fitting = [target for target in targets if target.crew_size >= crew_size]
    target = min(fitting, key=lambda t: t.crew_size) if fitting else targets[-1]
    logger.debug("heist target is %s", target.name)
    return target


def recover_vaults(store: DocumentStore) -> list[Target]:
    """Refill every vault that is below its maximum by one step; return the updated targets."""
    updated = []
    for document in store.find_many(TARGET_COLLECTION, {"is_at_max": False}):
        target = Target.from_document(document)
        recover_amount = int(target.vault_max * VAULT_RECOVER_PERCENT)
        new_amount = min(target.vault + recover_amount, target.vault_max)
        logger.info(
            "vault of %s in guild %s: %d -> %d (max %d)",
            target.name,
            target.guild_id,
            target.vault,
            new_amount,
            target.vault_max,
        )
        target.vault = new_amount
        if target.vault == target.vault_max:
            target.is_at_max = True
        write_target(store, target)
        updated.append(target)
    return updated


def run_vault_updater(
    store: DocumentStore,
    interval: timedelta | float = VAULT_UPDATE_TIME,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Refill vaults once per interval until the stop event is set."""
    stop_event = stop_event or threading.Event()
    seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
    while not stop_event.wait(seconds):
        recover_vaults(store)