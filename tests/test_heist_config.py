import json
from datetime import datetime, timedelta, timezone

import pytest

from goblin.heist.config import (
    BAIL_BASE,
    CREW_OUTPUT,
    DEATH_TIMER,
    HEIST_COST,
    HEIST_DEFAULT_THEME,
    POLICE_ALERT,
    SENTENCE_BASE,
    WAIT_TIME,
    HeistConfig,
    get_config,
    read_config,
    write_config,
)
from goblin.store import DocumentStore


@pytest.fixture
def store():
    return DocumentStore()


def test_get_config_defaults(store):
    config = get_config(store, "12345")
    assert config.guild_id == "12345"
    assert config.theme == HEIST_DEFAULT_THEME
    assert config.bail_base == BAIL_BASE
    assert config.crew_output == CREW_OUTPUT
    assert config.death_timer == DEATH_TIMER
    assert config.heist_cost == HEIST_COST
    assert config.police_alert == POLICE_ALERT
    assert config.sentence_base == SENTENCE_BASE
    assert config.wait_time == WAIT_TIME
    assert config.targets == HEIST_DEFAULT_THEME
    assert config.alert_time is None


def test_default_values_match_source(store):
    config = get_config(store, "defaults")
    assert config.bail_base == 250
    assert config.heist_cost == 1500
    assert config.death_timer == timedelta(seconds=45)
    assert config.police_alert == timedelta(seconds=60)
    assert config.sentence_base == timedelta(seconds=45)
    assert config.wait_time == timedelta(seconds=60)
    assert config.theme == "clash"
    assert config.crew_output == "None"


def test_get_config_stores_new_config(store):
    config = get_config(store, "12345")
    stored = read_config(store, "12345")
    assert stored == config
    assert stored.id is not None


def test_read_config_missing_returns_none(store):
    assert read_config(store, "nothing") is None


def test_written_changes_are_read_back(store):
    config = get_config(store, "12345")
    config.heist_cost = 1000
    config.wait_time = timedelta(seconds=30)
    write_config(store, config)

    again = get_config(store, "12345")
    assert again.heist_cost == 1000
    assert again.wait_time == timedelta(seconds=30)
    assert again.id == config.id


def test_document_round_trip():
    config = HeistConfig(
        guild_id="g",
        theme="other",
        alert_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        bail_base=10,
        heist_cost=20,
        police_alert=timedelta(seconds=5),
        id="abc",
    )
    assert HeistConfig.from_document(config.to_document()) == config


def test_set_alert_time(store):
    config = get_config(store, "12345")
    before = datetime.now(timezone.utc)
    config.set_alert_time(store)
    after = datetime.now(timezone.utc)

    assert before + config.police_alert <= config.alert_time <= after + config.police_alert
    assert read_config(store, "12345").alert_time == config.alert_time


def test_str_is_json(store):
    config = get_config(store, "12345")
    decoded = json.loads(str(config))
    assert decoded["guild_id"] == "12345"
    assert decoded["heist_cost"] == HEIST_COST