# tests/test_decks.py
import pytest

from studydeck.db import init_db
from studydeck.decks import (
    add_flashcard, create_deck, delete_flashcard, get_deck, get_decks,
    get_flashcard, get_flashcards,
)
from studydeck.reviews import ReviewService
from studydeck.store import FlashcardNotFound, SqliteReviewStateStore


def test_create_deck(tmp_db):
    init_db(tmp_db)
    deck = create_deck(tmp_db, "  Chemistry ", subject="Science")
    assert deck.name == "Chemistry"
    assert get_deck(tmp_db, deck.id).subject == "Science"


def test_create_deck_requires_name(tmp_db):
    init_db(tmp_db)
    with pytest.raises(ValueError):
        create_deck(tmp_db, "   ")


def test_get_deck_missing(tmp_db):
    init_db(tmp_db)
    assert get_deck(tmp_db, 99) is None


def test_get_decks_with_counts(seeded_db):
    db_path, _ = seeded_db
    create_deck(db_path, "Anatomy")
    decks = get_decks(db_path)
    assert [d["name"] for d in decks] == ["Anatomy", "Biology"]
    assert [d["card_count"] for d in decks] == [0, 5]


def test_add_and_get_flashcards(seeded_db):
    db_path, card_ids = seeded_db
    cards = get_flashcards(db_path)
    assert [c.id for c in cards] == card_ids
    card = get_flashcard(db_path, card_ids[2])
    assert card.question == "Question 3"
    assert card.answer == "Answer 3"
    assert card.source == "manual"


def test_get_flashcards_by_deck(seeded_db):
    db_path, _ = seeded_db
    other = create_deck(db_path, "Other")
    add_flashcard(db_path, other.id, "Q", "A")
    assert len(get_flashcards(db_path, other.id)) == 1
    assert len(get_flashcards(db_path)) == 6


def test_add_flashcard_requires_both_sides(seeded_db):
    db_path, _ = seeded_db
    with pytest.raises(ValueError):
        add_flashcard(db_path, 1, "Question", " ")


def test_get_flashcard_missing(seeded_db):
    db_path, _ = seeded_db
    with pytest.raises(FlashcardNotFound):
        get_flashcard(db_path, 999)


def test_delete_flashcard_removes_review_state(seeded_db):
    db_path, card_ids = seeded_db
    store = SqliteReviewStateStore(db_path)
    ReviewService(store, "alice").record_review(card_ids[0], "good")
    delete_flashcard(db_path, card_ids[0])
    assert store.get("alice", card_ids[0]) is None
    assert store.count_flashcards() == 4
    with pytest.raises(FlashcardNotFound):
        delete_flashcard(db_path, card_ids[0])
