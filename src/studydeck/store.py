"""Review state persistence keyed by (user_id, flashcard_id)."""
import json
import logging
import sqlite3
import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol

from studydeck.db import get_connection
from studydeck.models import Flashcard, ReviewState

logger = logging.getLogger(__name__)

Mutator = Callable[[Optional[ReviewState]], ReviewState]


class FlashcardNotFound(LookupError):
    def __init__(self, flashcard_id: int):
        super().__init__(f"Flashcard {flashcard_id} does not exist")
        self.flashcard_id = flashcard_id


class ReviewStateStore(Protocol):
    def flashcard_exists(self, flashcard_id: int) -> bool: ...

    def count_flashcards(self) -> int: ...

    def get_flashcards(self, flashcard_ids: Iterable[int]) -> dict[int, Flashcard]: ...

    def get(self, user_id: str, flashcard_id: int) -> Optional[ReviewState]: ...

    def list_for_user(self, user_id: str) -> dict[int, ReviewState]: ...

    def update(self, user_id: str, flashcard_id: int, mutate: Mutator) -> ReviewState:
        """Replace the state with ``mutate(current)`` as one atomic step."""
        ...

    def record_outcome(self, user_id: str, flashcard_id: int, correct: bool, reviewed_at: str) -> None: ...


def _row_to_state(row: sqlite3.Row) -> ReviewState:
    return ReviewState(
        ease_factor=row["ease_factor"],
        interval_days=row["interval_days"],
        repetitions=row["repetitions"],
        next_review_date=row["next_review_date"],
        quality_history=json.loads(row["quality_history"] or "[]"),
        last_reviewed=row["last_reviewed"],
    )


def _copy_state(state: Optional[ReviewState]) -> Optional[ReviewState]:
    return replace(state, quality_history=list(state.quality_history)) if state else None


def _row_to_flashcard(row: sqlite3.Row) -> Flashcard:
    return Flashcard(
        id=row["id"],
        deck_id=row["deck_id"],
        question=row["question"],
        answer=row["answer"],
        source=row["source"],
    )


class SqliteReviewStateStore:
    """Store backed by the ``user_flashcard_srs`` and ``user_flashcard_stats`` tables."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def flashcard_exists(self, flashcard_id: int) -> bool:
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT 1 FROM flashcards WHERE id = ?", (flashcard_id,)).fetchone()
        conn.close()
        return row is not None

    def count_flashcards(self) -> int:
        conn = get_connection(self.db_path)
        count = conn.execute("SELECT COUNT(*) FROM flashcards").fetchone()[0]
        conn.close()
        return count

    def get_flashcards(self, flashcard_ids: Iterable[int]) -> dict[int, Flashcard]:
        ids = list(flashcard_ids)
        if not ids:
            return {}
        placeholders = ",".join("?" * len(ids))
        conn = get_connection(self.db_path)
        rows = conn.execute(
            f"SELECT * FROM flashcards WHERE id IN ({placeholders})", ids
        ).fetchall()
        conn.close()
        return {r["id"]: _row_to_flashcard(r) for r in rows}

    def get(self, user_id: str, flashcard_id: int) -> Optional[ReviewState]:
        conn = get_connection(self.db_path)
        row = conn.execute(
            "SELECT * FROM user_flashcard_srs WHERE user_id = ? AND flashcard_id = ?",
            (user_id, flashcard_id),
        ).fetchone()
        conn.close()
        return _row_to_state(row) if row else None

    def list_for_user(self, user_id: str) -> dict[int, ReviewState]:
        conn = get_connection(self.db_path)
        rows = conn.execute(
            "SELECT * FROM user_flashcard_srs WHERE user_id = ? ORDER BY next_review_date ASC",
            (user_id,),
        ).fetchall()
        conn.close()
        return {r["flashcard_id"]: _row_to_state(r) for r in rows}

    def update(self, user_id: str, flashcard_id: int, mutate: Mutator) -> ReviewState:
        conn = get_connection(self.db_path)
        conn.isolation_level = None
        try:
            # Write lock up front so concurrent reviews of a card serialize
            conn.execute("BEGIN IMMEDIATE")
            if not conn.execute("SELECT 1 FROM flashcards WHERE id = ?", (flashcard_id,)).fetchone():
                raise FlashcardNotFound(flashcard_id)
            row = conn.execute(
                "SELECT * FROM user_flashcard_srs WHERE user_id = ? AND flashcard_id = ?",
                (user_id, flashcard_id),
            ).fetchone()
            state = mutate(_row_to_state(row) if row else None)
            conn.execute(
                """INSERT INTO user_flashcard_srs
                (user_id, flashcard_id, ease_factor, interval_days, repetitions,
                 next_review_date, quality_history, last_reviewed, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id, flashcard_id) DO UPDATE SET
                    ease_factor=excluded.ease_factor,
                    interval_days=excluded.interval_days,
                    repetitions=excluded.repetitions,
                    next_review_date=excluded.next_review_date,
                    quality_history=excluded.quality_history,
                    last_reviewed=excluded.last_reviewed,
                    updated_at=excluded.updated_at""",
                (
                    user_id, flashcard_id, state.ease_factor, state.interval_days,
                    state.repetitions, state.next_review_date,
                    json.dumps(state.quality_history), state.last_reviewed,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.execute("COMMIT")
            logger.debug("Saved review state for %s/%s: %s", user_id, flashcard_id, state)
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()
        return state

    def record_outcome(self, user_id: str, flashcard_id: int, correct: bool, reviewed_at: str) -> None:
        conn = get_connection(self.db_path)
        conn.execute(
            """INSERT INTO user_flashcard_stats
            (user_id, flashcard_id, correct_count, incorrect_count, last_reviewed)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id, flashcard_id) DO UPDATE SET
                correct_count = correct_count + excluded.correct_count,
                incorrect_count = incorrect_count + excluded.incorrect_count,
                last_reviewed = excluded.last_reviewed""",
            (user_id, flashcard_id, int(correct), int(not correct), reviewed_at),
        )
        conn.commit()
        conn.close()


class InMemoryReviewStateStore:
    """Dict-backed store for embedding and tests."""

    def __init__(self, flashcards: Iterable[Flashcard] = ()):
        self._flashcards = {card.id: card for card in flashcards}
        self._states: dict[tuple[str, int], ReviewState] = {}
        self._outcomes: dict[tuple[str, int], dict] = {}
        self._lock = threading.Lock()

    def add_flashcard(self, card: Flashcard) -> None:
        self._flashcards[card.id] = card

    def flashcard_exists(self, flashcard_id: int) -> bool:
        return flashcard_id in self._flashcards

    def count_flashcards(self) -> int:
        return len(self._flashcards)

    def get_flashcards(self, flashcard_ids: Iterable[int]) -> dict[int, Flashcard]:
        return {i: self._flashcards[i] for i in flashcard_ids if i in self._flashcards}

    def get(self, user_id: str, flashcard_id: int) -> Optional[ReviewState]:
        with self._lock:
            return _copy_state(self._states.get((user_id, flashcard_id)))

    def list_for_user(self, user_id: str) -> dict[int, ReviewState]:
        with self._lock:
            states = {fid: _copy_state(s) for (uid, fid), s in self._states.items() if uid == user_id}
        return dict(sorted(states.items(), key=lambda item: item[1].next_review_date or ""))

    def update(self, user_id: str, flashcard_id: int, mutate: Mutator) -> ReviewState:
        if flashcard_id not in self._flashcards:
            raise FlashcardNotFound(flashcard_id)
        with self._lock:
            state = mutate(_copy_state(self._states.get((user_id, flashcard_id))))
            self._states[(user_id, flashcard_id)] = _copy_state(state)
        return state

    def record_outcome(self, user_id: str, flashcard_id: int, correct: bool, reviewed_at: str) -> None:
        with self._lock:
            tally = self._outcomes.setdefault(
                (user_id, flashcard_id), {"correct_count": 0, "incorrect_count": 0}
            )
            tally["correct_count" if correct else "incorrect_count"] += 1
            tally["last_reviewed"] = reviewed_at

    def outcomes(self, user_id: str, flashcard_id: int) -> Optional[dict]:
        with self._lock:
            tally = self._outcomes.get((user_id, flashcard_id))
            return dict(tally) if tally else None
