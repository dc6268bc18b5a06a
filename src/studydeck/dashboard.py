"""Progress dashboard statistics."""
from datetime import date
from typing import Optional

from studydeck.db import get_connection
from studydeck.decks import get_flashcards
from studydeck.srs import CardStatus, get_card_status
from studydeck.store import SqliteReviewStateStore


def get_retention_label(score: float) -> str:
    if score >= 85:
        return "STRONG"
    elif score >= 70:
        return "GOOD"
    elif score >= 50:
        return "SHAKY"
    return "WEAK"


def get_retention_color(score: float) -> str:
    if score >= 85:
        return "green"
    elif score >= 70:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def get_retention(db_path: str, user_id: str) -> float:
    """Share of correct (good/easy) answers across all reviews, as a percentage."""
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT SUM(correct_count) as c, SUM(incorrect_count) as i FROM user_flashcard_stats WHERE user_id = ?",
        (user_id,),
    ).fetchone()
    conn.close()
    total = (row["c"] or 0) + (row["i"] or 0)
    if not total:
        return 0.0
    return round(row["c"] / total * 100, 1)


def get_status_breakdown(
    db_path: str, user_id: str, deck_id: int | None = None, today: Optional[date] = None,
) -> dict[CardStatus, int]:
    """Count of cards per status, with every status present."""
    states = SqliteReviewStateStore(db_path).list_for_user(user_id)
    counts = {status: 0 for status in CardStatus}
    for card in get_flashcards(db_path, deck_id):
        counts[get_card_status(states.get(card.id), today=today)] += 1
    return counts


def get_study_stats(db_path: str, user_id: str) -> dict:
    conn = get_connection(db_path)
    reviewed = conn.execute(
        "SELECT COUNT(*) FROM user_flashcard_srs WHERE user_id = ? AND last_reviewed IS NOT NULL",
        (user_id,),
    ).fetchone()[0]
    totals = conn.execute(
        "SELECT SUM(correct_count) as c, SUM(incorrect_count) as i FROM user_flashcard_stats WHERE user_id = ?",
        (user_id,),
    ).fetchone()
    decks = conn.execute("SELECT COUNT(*) FROM decks").fetchone()[0]
    cards = conn.execute("SELECT COUNT(*) FROM flashcards").fetchone()[0]
    conn.close()
    return {
        "decks": decks,
        "flashcards": cards,
        "cards_reviewed": reviewed,
        "reviews": (totals["c"] or 0) + (totals["i"] or 0),
        "retention": get_retention(db_path, user_id),
    }
