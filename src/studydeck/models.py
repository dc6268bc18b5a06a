"""Data classes for decks, flashcards and review scheduling state."""
from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass
class Deck:
    id: int
    name: str
    subject: str = ""
    chapter: str = ""
    description: str = ""


@dataclass
class Flashcard:
    id: int
    deck_id: int
    question: str
    answer: str
    source: str = "manual"


@dataclass(frozen=True)
class ScheduleUpdate:
    """Engine output: the scheduling fields that replace a card's state."""
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review_date: str


@dataclass
class ReviewState:
    """Scheduling state for one (user, flashcard) pair."""
    ease_factor: float = 2.5
    interval_days: int = 0
    repetitions: int = 0
    next_review_date: Optional[str] = None
    quality_history: list[int] = field(default_factory=list)
    last_reviewed: Optional[str] = None

    def apply(self, update: ScheduleUpdate, quality: int, reviewed_at: str) -> "ReviewState":
        return replace(
            self,
            ease_factor=update.ease_factor,
            interval_days=update.interval_days,
            repetitions=update.repetitions,
            next_review_date=update.next_review_date,
            quality_history=[*self.quality_history, quality],
            last_reviewed=reviewed_at,
        )


@dataclass
class ReviewStats:
    due: int = 0
    learning: int = 0
    mastered: int = 0
    new: int = 0
