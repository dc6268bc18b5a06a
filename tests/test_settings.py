# tests/test_settings.py
from studydeck.db import init_db
from studydeck.settings import (
    DEFAULT_USER_ID, get_setting, get_user_id, parse_log_level, set_setting,
)


def test_get_setting_default(tmp_db):
    init_db(tmp_db)
    assert get_setting(tmp_db, "missing") is None
    assert get_setting(tmp_db, "missing", "x") == "x"


def test_set_setting_overwrites(tmp_db):
    init_db(tmp_db)
    set_setting(tmp_db, "theme", "dark")
    set_setting(tmp_db, "theme", "light")
    assert get_setting(tmp_db, "theme") == "light"


def test_user_id_defaults_and_override(tmp_db):
    init_db(tmp_db)
    assert get_user_id(tmp_db) == DEFAULT_USER_ID
    set_setting(tmp_db, "user_id", "alice")
    assert get_user_id(tmp_db) == "alice"


def test_parse_log_level():
    assert parse_log_level("debug") == "DEBUG"
    assert parse_log_level(" info ") == "INFO"
    assert parse_log_level(None) == "WARNING"
    assert parse_log_level("verbose") == "WARNING"
    assert parse_log_level("") == "WARNING"
