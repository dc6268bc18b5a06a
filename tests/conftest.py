import pytest

from studydeck.db import init_db
from studydeck.decks import add_flashcard, create_deck


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_studydeck.db")
    return db_path


@pytest.fixture
def seeded_db(tmp_db):
    """An initialized database with one deck of five cards. Returns (db_path, card_ids)."""
    init_db(tmp_db)
    deck = create_deck(tmp_db, "Biology", subject="Science", chapter="Cells")
    card_ids = [
        add_flashcard(tmp_db, deck.id, f"Question {i}", f"Answer {i}").id
        for i in range(1, 6)
    ]
    return tmp_db, card_ids
