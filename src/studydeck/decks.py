"""Deck and flashcard management."""
from datetime import datetime

from studydeck.db import get_connection
from studydeck.models import Deck, Flashcard
from studydeck.store import FlashcardNotFound


def create_deck(db_path: str, name: str, subject: str = "", chapter: str = "", description: str = "") -> Deck:
    if not name.strip():
        raise ValueError("Deck name is required")
    conn = get_connection(db_path)
    cursor = conn.execute(
        "INSERT INTO decks (name, subject, chapter, description, created_at) VALUES (?, ?, ?, ?, ?)",
        (name.strip(), subject, chapter, description, datetime.now().isoformat()),
    )
    conn.commit()
    deck_id = cursor.lastrowid
    conn.close()
    return Deck(id=deck_id, name=name.strip(), subject=subject, chapter=chapter, description=description)


def get_decks(db_path: str) -> list[dict]:
    """All decks with their card counts, alphabetically."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT d.*, COUNT(f.id) as card_count
        FROM decks d LEFT JOIN flashcards f ON f.deck_id = d.id
        GROUP BY d.id
        ORDER BY d.name COLLATE NOCASE"""
    ).fetchall()
    conn.close()
    return [dict(r) for r in rows]


def get_deck(db_path: str, deck_id: int) -> Deck | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM decks WHERE id = ?", (deck_id,)).fetchone()
    conn.close()
    if not row:
        return None
    return Deck(
        id=row["id"], name=row["name"], subject=row["subject"] or "",
        chapter=row["chapter"] or "", description=row["description"] or "",
    )


def add_flashcard(db_path: str, deck_id: int, question: str, answer: str, source: str = "manual") -> Flashcard:
    if not question.strip() or not answer.strip():
        raise ValueError("Flashcards need both a question and an answer")
    conn = get_connection(db_path)
    cursor = conn.execute(
        "INSERT INTO flashcards (deck_id, question, answer, source, created_at) VALUES (?, ?, ?, ?, ?)",
        (deck_id, question.strip(), answer.strip(), source, datetime.now().isoformat()),
    )
    conn.commit()
    card_id = cursor.lastrowid
    conn.close()
    return Flashcard(id=card_id, deck_id=deck_id, question=question.strip(), answer=answer.strip(), source=source)


def get_flashcards(db_path: str, deck_id: int | None = None) -> list[Flashcard]:
    conn = get_connection(db_path)
    if deck_id is None:
        rows = conn.execute("SELECT * FROM flashcards ORDER BY id").fetchall()
    else:
        rows = conn.execute("SELECT * FROM flashcards WHERE deck_id = ? ORDER BY id", (deck_id,)).fetchall()
    conn.close()
    return [
        Flashcard(id=r["id"], deck_id=r["deck_id"], question=r["question"], answer=r["answer"], source=r["source"])
        for r in rows
    ]


def get_flashcard(db_path: str, flashcard_id: int) -> Flashcard:
    conn = get_connection(db_path)
    r = conn.execute("SELECT * FROM flashcards WHERE id = ?", (flashcard_id,)).fetchone()
    conn.close()
    if not r:
        raise FlashcardNotFound(flashcard_id)
    return Flashcard(id=r["id"], deck_id=r["deck_id"], question=r["question"], answer=r["answer"], source=r["source"])


def delete_flashcard(db_path: str, flashcard_id: int) -> None:
    """Delete a card along with every user's review state for it."""
    conn = get_connection(db_path)
    cursor = conn.execute("DELETE FROM flashcards WHERE id = ?", (flashcard_id,))
    conn.commit()
    conn.close()
    if cursor.rowcount == 0:
        raise FlashcardNotFound(flashcard_id)
