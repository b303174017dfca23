"""Running a race: participants, legs, results and the per-guild race registry."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from goblin.race.config import NoRacersFoundError, RaceConfig, get_config, write_config
from goblin.race.member import RaceMember
from goblin.race.racer import Racer
from goblin.store import DocumentStore

logger = logging.getLogger(__name__)

START_POSITION = 100


@dataclass
class RaceParticipant:
    """A member who is racing, with the racer assigned to them."""

    member: RaceMember
    racer: Racer


@dataclass
class RaceBetter:
    """A member betting on the outcome of a race."""

    member: RaceMember
    racer: RaceParticipant


@dataclass
class RaceParticipantPosition:
    """Where a participant stands on the track after one leg of the race."""

    participant: RaceParticipant
    position: int = 0
    movement: int = 0
    speed: float = 0.0
    turn: int = 0
    finished: bool = False


@dataclass
class RaceLeg:
    """The positions of all participants for a single turn."""

    positions: list[RaceParticipantPosition] = field(default_factory=list)


@dataclass
class RaceResult:
    """The first three finishers of a race and their finishing times."""

    win: Optional[RaceParticipant] = None
    place: Optional[RaceParticipant] = None
    show: Optional[RaceParticipant] = None
    win_time: float = 0.0
    place_time: float = 0.0
    show_time: float = 0.0


@dataclass
class Race:
    """A race in one guild, with its racers, betters, legs and result."""

    guild_id: str
    config: RaceConfig
    racers: list[RaceParticipant] = field(default_factory=list)
    betters: list[RaceBetter] = field(default_factory=list)
    race_legs: list[RaceLeg] = field(default_factory=list)
    race_result: Optional[RaceResult] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add_racer(self, participant: RaceParticipant) -> None:
        """Add a participant to the race."""
        with self._lock:
            self.racers.append(participant)
        logger.info("racer %s added to race in guild %s", participant.member.member_id, self.guild_id)

    def add_better(self, better: RaceBetter) -> None:
        """Add a better to the race."""
        with self._lock:
            self.betters.append(better)
        logger.info("better %s added to race in guild %s", better.member.member_id, self.guild_id)

    def run_race(self, track_length: int, rng: Optional[random.Random] = None) -> RaceResult:
        """Run every leg until all racers finish, and record the top three.

        Racers always start START_POSITION units from the finish line;
        track_length is accepted for display purposes and does not change
        the simulation.
        """
        rng = rng or random.Random()
        with self._lock:
            previous = RaceLeg(
                [
                    RaceParticipantPosition(participant=racer, position=START_POSITION)
                    for racer in self.racers
                ]
            )
            self.race_legs.append(previous)

            turn = 0
            still_racing = True
            while still_racing:
                turn += 1
                leg = RaceLeg([move(position, turn, rng) for position in previous.positions])
                still_racing = any(not position.finished for position in leg.positions)
                self.race_legs.append(leg)
                previous = leg
                logger.debug("ran leg %d of race in guild %s", turn, self.guild_id)

            tie_breaks = {id(position): rng.random() for position in previous.positions}
            previous.positions.sort(key=lambda p: (p.speed, tie_breaks[id(p)]))

            result = RaceResult()
            finishers = previous.positions
            if len(finishers) > 0:
                result.win, result.win_time = finishers[0].participant, finishers[0].speed
            if len(finishers) > 1:
                result.place, result.place_time = finishers[1].participant, finishers[1].speed
            if len(finishers) > 2:
                result.show, result.show_time = finishers[2].participant, finishers[2].speed
            self.race_result = result
            return result


class RaceRegistry:
    """The races currently under way, one per guild."""

    def __init__(self) -> None:
        self._races: dict[str, Race] = {}
        self._lock = threading.Lock()

    def get_race(self, store: DocumentStore, guild_id: str) -> Race:
        """Return the guild's current race, creating one if none is under way."""
        with self._lock:
            race = self._races.get(guild_id)
            if race is None:
                race = Race(guild_id=guild_id, config=get_config(store, guild_id))
                self._races[guild_id] = race
                logger.info("new race in guild %s", guild_id)
            return race

    def current(self, guild_id: str) -> Optional[Race]:
        """Return the guild's current race, or None."""
        with self._lock:
            return self._races.get(guild_id)

    def end(self, store: DocumentStore, race: Race) -> None:
        """End the race and record when it ended in the guild's configuration."""
        with self._lock:
            self._races.pop(race.guild_id, None)
            config = get_config(store, race.guild_id)
            config.last_race_ended = datetime.now(timezone.utc)
            write_config(store, config)
        logger.info("race ended in guild %s", race.guild_id)

    def reset(self, guild_id: str) -> None:
        """Discard a hung race for the guild."""
        with self._lock:
            self._races.pop(guild_id, None)
        logger.info("race reset in guild %s", guild_id)


def new_race_participant(
    member: RaceMember, racers: list[Racer], rng: Optional[random.Random] = None
) -> RaceParticipant:
    """Assign a randomly chosen racer to the member."""
    if not racers:
        raise NoRacersFoundError()
    rng = rng or random.Random()
    participant = RaceParticipant(member=member, racer=racers[rng.randrange(len(racers))])
    logger.debug("member %s races as %s", member.member_id, participant.racer.emoji)
    return participant


def move(
    previous: RaceParticipantPosition, turn: int, rng: Optional[random.Random] = None
) -> RaceParticipantPosition:
    """Return the participant's position after moving on the given turn."""
    if previous.position <= 0:
        return RaceParticipantPosition(
            participant=previous.participant, finished=True, speed=previous.speed
        )

    movement = previous.participant.racer.calculate_movement(turn, rng)
    position = RaceParticipantPosition(
        participant=previous.participant,
        position=previous.position - movement,
        movement=movement,
        turn=previous.turn + 1,
        finished=False,
    )
    position.speed = float(position.turn)
    if position.position <= 0:
        position.speed += previous.position / movement
    return position