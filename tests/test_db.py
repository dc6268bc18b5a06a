"""Tests for database initialization and connection management."""
from studydeck.db import init_db, get_connection


def test_init_db_creates_tables(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    )
    tables = {row[0] for row in cursor.fetchall()}
    expected = {
        "decks", "flashcards", "user_flashcard_srs",
        "user_flashcard_stats", "user_settings",
    }
    assert expected.issubset(tables)
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise
    conn = get_connection(tmp_db)
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    assert len(cursor.fetchall()) > 0
    conn.close()


def test_init_db_creates_parent_directory(tmp_path):
    db_path = str(tmp_path / "nested" / "dir" / "studydeck.db")
    init_db(db_path)
    assert (tmp_path / "nested" / "dir" / "studydeck.db").exists()


def test_get_connection_returns_row_factory(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    conn.execute("INSERT INTO user_settings (key, value) VALUES ('test', 'val')")
    row = conn.execute("SELECT key, value FROM user_settings WHERE key='test'").fetchone()
    assert row["key"] == "test"
    conn.close()


def test_deleting_flashcard_cascades_review_state(seeded_db):
    db_path, card_ids = seeded_db
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_flashcard_srs (user_id, flashcard_id, next_review_date) VALUES ('u', ?, '2026-03-10')",
        (card_ids[0],),
    )
    conn.execute("DELETE FROM flashcards WHERE id = ?", (card_ids[0],))
    conn.commit()
    count = conn.execute("SELECT COUNT(*) FROM user_flashcard_srs").fetchone()[0]
    conn.close()
    assert count == 0
