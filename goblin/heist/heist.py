"""Planning, joining and running heists, and sharing out the loot."""

from __future__ import annotations

import logging
import math
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from goblin.heist.config import HeistConfig, get_config
from goblin.heist.errors import (
    AlreadyJoinedError,
    DeadError,
    HeistInProgressError,
    InJailError,
    NotEnoughCreditsError,
    NotEnoughMembersError,
    PoliceOnAlertError,
)
from goblin.heist.member import GuildMember, HeistMember, MemberStatus, get_heist_member
from goblin.heist.target import Target, get_targets, select_target
from goblin.heist.theme import Theme, get_theme
from goblin.store import DocumentStore, Ledger

logger = logging.getLogger(__name__)


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


@dataclass
class HeistMemberResult:
    """How one crew member fared in a heist."""

    player: HeistMember
    status: MemberStatus
    message: str
    stolen_credits: int = 0
    bonus_credits: int = 0

    def __str__(self) -> str:
        return (
            f"HeistMemberResult{{Player: {self.player.member_id}, Status: {self.status}, "
            f"Message: {self.message}, StolenCredits: {self.stolen_credits}, "
            f"BonusCredits: {self.bonus_credits}}}"
        )


@dataclass
class HeistResult:
    """The outcome of a heist for the whole crew."""

    target: Target
    all_results: list[HeistMemberResult] = field(default_factory=list)
    escaped: list[HeistMemberResult] = field(default_factory=list)
    apprehended: list[HeistMemberResult] = field(default_factory=list)
    dead: list[HeistMemberResult] = field(default_factory=list)
    total_stolen: int = 0

    def __str__(self) -> str:
        return (
            f"HeistResult{{Escaped: {len(self.escaped)}, Apprehended: {len(self.apprehended)}, "
            f"Dead: {len(self.dead)}, Target: {self.target}, TotalStolen: {self.total_stolen}}}"
        )


@dataclass
class Heist:
    """A heist being planned or under way in one guild."""

    guild_id: str
    organizer: HeistMember
    config: HeistConfig
    theme: Theme
    targets: list[Target]
    crew: list[HeistMember] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_crew_member(self, store: DocumentStore, bank: Ledger, member: HeistMember) -> None:
        """Add a member to the crew; raises if they may not join."""
        with self._lock:
            heist_checks(store, bank, self, member)
            self.crew.append(member)
        logger.debug("member %s joined heist in guild %s", member.member_id, self.guild_id)

    def start(self, store: DocumentStore, rng: Optional[random.Random] = None) -> HeistResult:
        """Run the heist and return how each crew member fared."""
        rng = rng or random.Random()
        if len(self.crew) < 2:
            raise NotEnoughMembersError(self.theme.crew, self.theme.heist)

        target = select_target(self.targets, len(self.crew))
        results = HeistResult(target=target)

        def good_pool() -> list:
            return list(self.theme.escaped_messages)

        def bad_pool() -> list:
            return list(self.theme.apprehended_messages) + list(self.theme.died_messages)

        good = good_pool()
        bad = bad_pool()
        success_rate = calculate_success_rate(self, target)

        for crew_member in self.crew:
            chance = rng.randint(1, 100)
            if crew_member.guild_member is not None:
                player = get_heist_member(store, crew_member.guild_member)
            else:
                player = crew_member
            logger.debug("player %s rolled %d against %d", player.member_id, chance, success_rate)
            if chance <= success_rate:
                message = good.pop(rng.randrange(len(good)))
                if not good:
                    good = good_pool()
                result = HeistMemberResult(
                    player=player,
                    status=MemberStatus.FREE,
                    message=message.message,
                    bonus_credits=message.bonus_amount,
                )
                results.escaped.append(result)
            else:
                message = bad.pop(rng.randrange(len(bad)))
                if not bad:
                    bad = bad_pool()
                result = HeistMemberResult(
                    player=player,
                    status=MemberStatus(message.result),
                    message=message.message,
                )
                if result.status is MemberStatus.DEAD:
                    results.dead.append(result)
                else:
                    results.apprehended.append(result)
            results.all_results.append(result)

        if results.escaped:
            calculate_credits(results)
        return results

    def __str__(self) -> str:
        return (
            f"Heist{{GuildID: {self.guild_id}, Organizer: {self.organizer.member_id}, "
            f"Crew: {len(self.crew)}, StartTime: {self.start_time}}}"
        )


class HeistRegistry:
    """The heists currently planned or under way, one per guild."""

    def __init__(self) -> None:
        self._heists: dict[str, Heist] = {}
        self._lock = threading.Lock()

    def new_heist(self, store: DocumentStore, bank: Ledger, guild_member: GuildMember) -> Heist:
        """Plan a new heist organised by the member; raises if one cannot be planned."""
        guild_id = guild_member.guild_id
        with self._lock:
            if guild_id in self._heists:
                raise HeistInProgressError()
            theme = get_theme(store, guild_id)
            organizer = get_heist_member(store, guild_member)
            heist = Heist(
                guild_id=guild_id,
                organizer=organizer,
                config=get_config(store, guild_id),
                theme=theme,
                targets=get_targets(store, guild_id, theme.name),
            )
            heist_checks(store, bank, heist, organizer)
            heist.crew.append(organizer)
            self._heists[guild_id] = heist
        logger.debug("heist planned in guild %s by %s", guild_id, guild_member.member_id)
        return heist

    def current(self, guild_id: str) -> Optional[Heist]:
        """Return the guild's current heist, or None."""
        with self._lock:
            return self._heists.get(guild_id)

    def end(self, store: DocumentStore, heist: Heist) -> None:
        """End the heist and put the police on alert."""
        heist.config.set_alert_time(store)
        with self._lock:
            self._heists.pop(heist.guild_id, None)
        logger.debug("heist ended in guild %s", heist.guild_id)


def heist_checks(store: DocumentStore, bank: Ledger, heist: Heist, member: HeistMember) -> None:
    """Raise the reason the member may not take part in the heist, if there is one."""
    member.update_status(store)

    if any(crew.member_id == member.member_id for crew in heist.crew):
        raise AlreadyJoinedError()

    if bank.balance(heist.guild_id, member.member_id) < heist.config.heist_cost:
        raise NotEnoughCreditsError(heist.config.heist_cost)

    alert_time = heist.config.alert_time
    now = datetime.now(timezone.utc)
    if alert_time is not None and alert_time > now:
        raise PoliceOnAlertError(heist.theme.police, alert_time - now)

    if member.status is MemberStatus.APPREHENDED:
        raise InJailError(
            heist.theme.jail,
            heist.theme.sentence,
            member.remaining_jail_time(),
            heist.theme.bail,
            member.bail_cost,
        )

    if member.status is MemberStatus.DEAD:
        raise DeadError(member.remaining_death_time())


def calculate_success_rate(heist: Heist, target: Target) -> int:
    """Return the chance, out of 100, that each crew member gets away."""
    return _round_half_away(target.success) + calculate_bonus_rate(heist, target)


def calculate_bonus_rate(heist: Heist, target: Target) -> int:
    """Return the bonus to success; the fuller the crew, the larger the bonus."""
    percent = 100 * len(heist.crew) // target.crew_size
    if percent <= 20:
        return 0
    if percent <= 40:
        return 1
    if percent <= 60:
        return 3
    if percent <= 80:
        return 4
    return 5


def calculate_credits(results: HeistResult) -> None:
    """Share three quarters of the vault among survivors; escapees get twice the base share."""
    num_escaped = len(results.escaped)
    num_apprehended = len(results.apprehended)
    num_survived = num_escaped + num_apprehended
    stolen_per_survivor = _round_half_away(results.target.vault * 0.75 / num_survived)
    total_stolen = num_survived * stolen_per_survivor
    base_stolen = total_stolen // (2 * num_escaped + num_apprehended)

    results.total_stolen = 0
    for result in results.escaped:
        result.stolen_credits = 2 * base_stolen
        results.total_stolen += result.stolen_credits
    for result in results.apprehended:
        result.stolen_credits = base_stolen
        results.total_stolen += result.stolen_credits
    logger.debug("total stolen from %s: %d", results.target.name, results.total_stolen)