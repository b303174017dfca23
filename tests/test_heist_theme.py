import pytest

from goblin.heist.config import get_config, write_config
from goblin.heist.errors import ThemeNotFoundError
from goblin.heist.theme import (
    APPREHENDED,
    DEAD,
    ESCAPED,
    HeistMessage,
    Theme,
    default_theme,
    get_theme,
    get_theme_names,
    get_themes,
    read_theme,
    write_theme,
)
from goblin.store import DocumentStore

GUILD_ID = "12345"


@pytest.fixture
def store():
    return DocumentStore()


def test_default_theme_words():
    theme = default_theme(GUILD_ID)
    assert theme.name == "clash"
    assert theme.guild_id == GUILD_ID
    assert theme.heist == "raid"
    assert theme.crew == "clan"
    assert theme.police == "Enemy CC Troops"


def test_default_theme_message_results():
    theme = default_theme(GUILD_ID)
    assert theme.escaped_messages
    assert all(m.result == ESCAPED and m.bonus_amount > 0 for m in theme.escaped_messages)
    assert all(m.result == APPREHENDED and m.bonus_amount == 0 for m in theme.apprehended_messages)
    assert all(m.result == DEAD and m.bonus_amount == 0 for m in theme.died_messages)


def test_default_messages_format_with_name():
    theme = default_theme(GUILD_ID)
    for message in theme.escaped_messages + theme.apprehended_messages + theme.died_messages:
        text = message.message % "**Bob**"
        assert text.startswith("**Bob**")
        assert "%s" not in text


def test_percent_escape_formats_to_single_percent():
    theme = default_theme(GUILD_ID)
    texts = [m.message % "X" for m in theme.apprehended_messages]
    assert any("49% 0 Star" in text for text in texts)


def test_message_document_omits_zero_bonus():
    message = HeistMessage(message="%s fell.", result=APPREHENDED)
    document = message.to_document()
    assert "bonus_amount" not in document
    assert HeistMessage.from_document(document) == message


def test_theme_document_round_trip():
    theme = default_theme(GUILD_ID)
    theme.id = "abc"
    restored = Theme.from_document(theme.to_document())
    assert restored == theme


def test_get_theme_creates_and_stores_default(store):
    theme = get_theme(store, GUILD_ID)
    assert theme.name == "clash"
    assert theme.id
    stored = read_theme(store, GUILD_ID, "clash")
    assert stored == theme


def test_get_theme_second_call_reads_stored(store):
    first = get_theme(store, GUILD_ID)
    second = get_theme(store, GUILD_ID)
    assert second.id == first.id
    assert len(get_themes(store, GUILD_ID)) == 1


def test_get_theme_uses_configured_theme(store):
    custom = Theme(guild_id=GUILD_ID, name="space", heist="mission", crew="squad")
    write_theme(store, custom)
    config = get_config(store, GUILD_ID)
    config.theme = "space"
    write_config(store, config)
    theme = get_theme(store, GUILD_ID)
    assert theme.name == "space"
    assert theme.heist == "mission"


def test_read_theme_missing_raises(store):
    with pytest.raises(ThemeNotFoundError):
        read_theme(store, GUILD_ID, "missing")


def test_get_themes_empty_for_new_guild(store):
    assert get_themes(store, GUILD_ID) == []
    assert get_theme_names(store, GUILD_ID) == []


def test_get_theme_names(store):
    get_theme(store, GUILD_ID)
    write_theme(store, Theme(guild_id=GUILD_ID, name="space"))
    write_theme(store, Theme(guild_id="other", name="elsewhere"))
    assert sorted(get_theme_names(store, GUILD_ID)) == ["clash", "space"]


def test_write_theme_updates_existing(store):
    theme = Theme(guild_id=GUILD_ID, name="space", vault="station")
    write_theme(store, theme)
    first_id = theme.id
    theme.vault = "outpost"
    write_theme(store, theme)
    assert theme.id == first_id
    assert read_theme(store, GUILD_ID, "space").vault == "outpost"
    assert len(get_themes(store, GUILD_ID)) == 1


def test_str_includes_name_and_counts():
    theme = Theme(
        guild_id=GUILD_ID,
        name="space",
        died_messages=[HeistMessage(message="%s died.", result=DEAD)],
    )
    text = str(theme)
    assert "ThemeID=space" in text
    assert "Died=1" in text
    assert "Escaped=0" in text