"""SM-2 spaced repetition engine and card status classification.

All dates are UTC calendar dates exchanged as ``YYYY-MM-DD`` strings.
"""
import math
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from studydeck.models import ReviewState, ScheduleUpdate

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MASTERED_INTERVAL_DAYS = 21
SOON_WINDOW_DAYS = 3


class InvalidInput(ValueError):
    """Raised for a quality or response the engine does not accept."""


class Response(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"


class CardStatus(str, Enum):
    NEW = "new"
    DUE = "due"
    SOON = "soon"
    LEARNING = "learning"
    MASTERED = "mastered"


QUALITY_BY_RESPONSE = {
    Response.AGAIN: 1,  # blackout, relearn
    Response.HARD: 2,   # wrong, recognised on reveal
    Response.GOOD: 3,
    Response.EASY: 5,
}

STATUS_LABELS = {
    CardStatus.NEW: "New",
    CardStatus.DUE: "Due",
    CardStatus.SOON: "Soon",
    CardStatus.LEARNING: "Learning",
    CardStatus.MASTERED: "Mastered",
}

STATUS_EMOJI = {
    CardStatus.NEW: "🔵",
    CardStatus.DUE: "🔴",
    CardStatus.SOON: "🟡",
    CardStatus.LEARNING: "⚪",
    CardStatus.MASTERED: "🟢",
}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for positive values (2.5 -> 3, 0.125 -> 0.13)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_response(response: Union[Response, str]) -> Response:
    if isinstance(response, Response):
        return response
    try:
        return Response(response)
    except ValueError:
        raise InvalidInput(
            f"Invalid response: {response!r}. Must be 'again', 'hard', 'good', or 'easy'"
        ) from None


def validate_quality(quality: int) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInput(f"Quality must be an integer between 0 and 5, got {quality!r}")
    if not 0 <= quality <= 5:
        raise InvalidInput(f"Quality must be between 0 and 5, got {quality}")
    return quality


def compute_next_review(
    quality: int,
    ease_factor: float = DEFAULT_EASE_FACTOR,
    interval_days: int = 0,
    repetitions: int = 0,
    today: Optional[date] = None,
) -> ScheduleUpdate:
    """Calculate the next scheduling state using SM-2.

    Args:
        quality: Rating 0-5; below 3 is a failure.
        ease_factor: Current ease factor (2.5 for a new card).
        interval_days: Current interval in days (0 before any success).
        repetitions: Consecutive successful reviews since the last failure.
        today: Reference date, UTC today when omitted.

    Returns:
        ScheduleUpdate with the new ease factor, interval, repetitions and
        next review date. Appending ``quality`` to the card's history is the
        caller's job.

    Raises:
        InvalidInput: if quality is not an integer in [0, 5].
    """
    validate_quality(quality)
    today = today or utc_today()

    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ef = max(MIN_EASE_FACTOR, new_ef)
    new_ef = round_half_up(new_ef, 2)

    if quality >= 3:
        new_repetitions = repetitions + 1
        if new_repetitions == 1:
            new_interval = 1
        elif new_repetitions == 2:
            new_interval = 6
        else:
            new_interval = max(1, int(round_half_up(interval_days * new_ef)))
    else:
        # Incorrect, reset
        new_repetitions = 0
        new_interval = 1

    return ScheduleUpdate(
        ease_factor=new_ef,
        interval_days=new_interval,
        repetitions=new_repetitions,
        next_review_date=(today + timedelta(days=new_interval)).isoformat(),
    )


def response_to_quality(response: Union[Response, str]) -> int:
    return QUALITY_BY_RESPONSE[parse_response(response)]


def is_difficulty_correct(response: Union[Response, str]) -> bool:
    """True for good/easy, False for again/hard."""
    return parse_response(response) not in (Response.AGAIN, Response.HARD)


def get_card_status(state: Optional[ReviewState], today: Optional[date] = None) -> CardStatus:
    """Classify a card by its stored review state.

    Checked in order: due, mastered, soon, learning. A card with an interval
    above 21 days is mastered even when its review falls inside the 1-3 day
    window.
    """
    if state is None or not state.next_review_date:
        return CardStatus.NEW

    today = today or utc_today()
    days_until_review = (date.fromisoformat(state.next_review_date) - today).days

    if days_until_review <= 0:
        return CardStatus.DUE
    if state.interval_days > MASTERED_INTERVAL_DAYS:
        return CardStatus.MASTERED
    if 1 <= days_until_review <= SOON_WINDOW_DAYS:
        return CardStatus.SOON
    return CardStatus.LEARNING


def status_label(status: Union[CardStatus, str]) -> str:
    try:
        return STATUS_LABELS[CardStatus(status)]
    except ValueError:
        return "Unknown"


def status_emoji(status: Union[CardStatus, str]) -> str:
    try:
        return STATUS_EMOJI[CardStatus(status)]
    except ValueError:
        return STATUS_EMOJI[CardStatus.LEARNING]
