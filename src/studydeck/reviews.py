"""Review recording, due-card queues and review statistics for one user."""
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from studydeck.models import ReviewState, ReviewStats
from studydeck.srs import (
    CardStatus, Response, compute_next_review, get_card_status,
    is_difficulty_correct, response_to_quality, utc_today, validate_quality,
)
from studydeck.store import ReviewStateStore

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, store: ReviewStateStore, user_id: str):
        if not user_id:
            raise ValueError("User ID is required")
        self.store = store
        self.user_id = user_id

    def initialize(self, flashcard_id: int, today: Optional[date] = None) -> ReviewState:
        """Create the initial state for a card, due today. Existing state is kept."""
        today = today or utc_today()

        def mutate(current: Optional[ReviewState]) -> ReviewState:
            return current or ReviewState(next_review_date=today.isoformat())

        return self.store.update(self.user_id, flashcard_id, mutate)

    def record_review(
        self,
        flashcard_id: int,
        response: Union[Response, str],
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> ReviewState:
        """Grade a card with again/hard/good/easy and persist the new schedule."""
        quality = response_to_quality(response)
        state = self.record_quality(flashcard_id, quality, today=today, now=now)
        correct = is_difficulty_correct(response)
        try:
            self.store.record_outcome(self.user_id, flashcard_id, correct, state.last_reviewed)
        except Exception:
            logger.warning("Error updating flashcard stats for card %s", flashcard_id, exc_info=True)
        return state

    def record_quality(
        self,
        flashcard_id: int,
        quality: int,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> ReviewState:
        """Grade a card with a raw 0-5 quality and persist the new schedule."""
        validate_quality(quality)
        today = today or utc_today()
        reviewed_at = (now or datetime.now(timezone.utc)).isoformat()

        def mutate(current: Optional[ReviewState]) -> ReviewState:
            current = current or ReviewState(next_review_date=today.isoformat())
            update = compute_next_review(
                quality,
                ease_factor=current.ease_factor,
                interval_days=current.interval_days,
                repetitions=current.repetitions,
                today=today,
            )
            return current.apply(update, quality, reviewed_at)

        state = self.store.update(self.user_id, flashcard_id, mutate)
        logger.info(
            "Card %s reviewed with quality %s, next review %s (interval %s)",
            flashcard_id, quality, state.next_review_date, state.interval_days,
        )
        return state

    def cards_to_review(self, today: Optional[date] = None) -> list[dict]:
        """Cards whose next review date is today or earlier, oldest first."""
        today_str = (today or utc_today()).isoformat()
        due = [
            (fid, state) for fid, state in self.store.list_for_user(self.user_id).items()
            if state.next_review_date and state.next_review_date <= today_str
        ]
        due.sort(key=lambda item: item[1].next_review_date)
        flashcards = self.store.get_flashcards(fid for fid, _ in due)
        return [
            {"flashcard": flashcards[fid], "state": state}
            for fid, state in due
            if fid in flashcards
        ]

    def review_stats(self, today: Optional[date] = None) -> ReviewStats:
        states = self.store.list_for_user(self.user_id)
        stats = ReviewStats()
        for state in states.values():
            status = get_card_status(state, today=today)
            if status == CardStatus.DUE:
                stats.due += 1
            elif status == CardStatus.MASTERED:
                stats.mastered += 1
            elif status == CardStatus.NEW:
                stats.new += 1
            else:
                stats.learning += 1
        # Cards never reviewed have no stored state
        stats.new += max(0, self.store.count_flashcards() - len(states))
        return stats

    def upcoming_reviews(self, days: int = 7, today: Optional[date] = None) -> list[dict]:
        """Reviews due between today and ``days`` from now, grouped by date."""
        today = today or utc_today()
        start, end = today.isoformat(), (today + timedelta(days=days)).isoformat()
        upcoming = sorted(
            (
                (state.next_review_date, fid, state)
                for fid, state in self.store.list_for_user(self.user_id).items()
                if state.next_review_date and start <= state.next_review_date <= end
            ),
            key=lambda item: (item[0], item[1]),
        )
        flashcards = self.store.get_flashcards(fid for _, fid, _ in upcoming)

        grouped: dict[str, list[dict]] = {}
        for review_date, fid, state in upcoming:
            grouped.setdefault(review_date, []).append(
                {"flashcard": flashcards.get(fid), "state": state}
            )
        return [
            {"date": review_date, "count": len(cards), "cards": cards}
            for review_date, cards in grouped.items()
        ]
