# tests/test_integration.py
"""End-to-end test of the review workflow."""
from datetime import date, timedelta

from studydeck.dashboard import get_status_breakdown, get_study_stats
from studydeck.db import init_db
from studydeck.importer import import_file
from studydeck.reviews import ReviewService
from studydeck.srs import CardStatus
from studydeck.store import SqliteReviewStateStore

START = date(2026, 3, 10)


def test_full_review_workflow(tmp_path, tmp_db):
    init_db(tmp_db)
    f = tmp_path / "capitals.txt"
    f.write_text("France :: Paris\nJapan :: Tokyo\nPeru :: Lima\n")
    result = import_file(tmp_db, str(f))
    assert result["imported"] == 3

    service = ReviewService(SqliteReviewStateStore(tmp_db), "alice")
    assert service.review_stats(today=START).new == 3

    cards = service.store.get_flashcards(range(1, 4))
    for card_id in cards:
        service.initialize(card_id, today=START)
    assert service.review_stats(today=START).due == 3

    # Day 1: know France, fail Japan, skip Peru
    service.record_review(1, "easy", today=START)
    service.record_review(2, "again", today=START)
    due = service.cards_to_review(today=START)
    assert [c["flashcard"].question for c in due] == ["Peru"]

    # Keep getting France right until it is mastered
    today = START
    for _ in range(4):
        state = service.store.get("alice", 1)
        today = date.fromisoformat(state.next_review_date)
        state = service.record_review(1, "good", today=today)
    assert state.interval_days > 21
    assert state.repetitions == 5
    assert state.quality_history == [5, 3, 3, 3, 3]

    breakdown = get_status_breakdown(tmp_db, "alice", today=today + timedelta(days=1))
    assert breakdown[CardStatus.MASTERED] == 1
    assert breakdown[CardStatus.DUE] == 2

    stats = get_study_stats(tmp_db, "alice")
    assert stats["reviews"] == 6
    assert stats["cards_reviewed"] == 2
