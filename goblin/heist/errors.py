"""Errors raised by the heist game, and duration formatting for their messages."""

from __future__ import annotations

from datetime import timedelta


def format_duration(seconds: float | timedelta) -> str:
    """Return a short human-readable form of a duration, such as "1h 2m 5s".

    Negative durations are shown as "0s".
    """
    if isinstance(seconds, timedelta):
        seconds = seconds.total_seconds()
    total = max(0, int(seconds))
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    parts = [
        f"{value}{unit}"
        for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s"))
        if value
    ]
    return " ".join(parts) or "0s"


class HeistError(Exception):
    """Base class for errors raised by the heist game."""


class ConfigNotFoundError(HeistError):
    """Raised when a guild has no stored heist configuration."""

    def __init__(self, message: str = "configuration file not found") -> None:
        super().__init__(message)


class HeistInProgressError(HeistError):
    """Raised when a heist is planned while another is under way."""

    def __init__(self, message: str = "heist already in progress") -> None:
        super().__init__(message)


class AlreadyJoinedError(HeistError):
    """Raised when a member joins a heist they are already part of."""

    def __init__(self, message: str = "you have already joined the heist") -> None:
        super().__init__(message)


class NoHeistError(HeistError):
    """Raised when no heist is being planned."""

    def __init__(self, message: str = "heist not found") -> None:
        super().__init__(message)


class NotAllowedError(HeistError):
    """Raised when a member may not use a command."""

    def __init__(self, message: str = "user is not allowed to perform command") -> None:
        super().__init__(message)


class ThemeNotFoundError(HeistError):
    """Raised when a theme is not stored."""

    def __init__(self, message: str = "theme not found") -> None:
        super().__init__(message)


class NotEnoughMembersError(HeistError):
    """Raised when too few members joined for a heist to start."""

    def __init__(self, crew: str, heist: str) -> None:
        self.crew = crew
        self.heist = heist
        super().__init__(
            f"You tried to rally a {crew}, but no one wanted to follow you. "
            f"The {heist} has been cancelled."
        )


class NoTargetsError(HeistError):
    """Raised when there are no targets to hit."""

    def __init__(self) -> None:
        super().__init__("Oh no! There are no targets!")


class NotEnoughCreditsError(HeistError):
    """Raised when a member cannot pay the cost of entry."""

    def __init__(self, credits_needed: int) -> None:
        self.credits_needed = credits_needed
        super().__init__(
            "You do not have enough credits to cover the cost of entry. "
            f"You need {credits_needed:,} credits to participate"
        )


class PoliceOnAlertError(HeistError):
    """Raised when the police are still on alert after the last heist."""

    def __init__(self, police: str, remaining_time: timedelta) -> None:
        self.police = police
        self.remaining_time = remaining_time
        super().__init__(
            f"The {police} are on high alert after the last target. We should wait for "
            "things to cool off before hitting another target. "
            f"Time remaining: {format_duration(remaining_time)}."
        )


class InJailError(HeistError):
    """Raised when a member in jail tries to take part in a heist."""

    def __init__(
        self,
        jail: str,
        sentence: str,
        remaining_time: timedelta,
        bail: str,
        bail_cost: int,
    ) -> None:
        self.jail = jail
        self.sentence = sentence
        self.remaining_time = remaining_time
        self.bail = bail
        self.bail_cost = bail_cost
        super().__init__(
            f"You are in {jail}. You can wait out your remaining {sentence} of "
            f"{format_duration(remaining_time)}, or pay {bail_cost} credits to be "
            f"released on {bail}."
        )


class DeadError(HeistError):
    """Raised when a dead member tries to take part in a heist."""

    def __init__(self, remaining_time: timedelta) -> None:
        self.remaining_time = remaining_time
        super().__init__(f"You are dead. You will revive in {format_duration(remaining_time)}")