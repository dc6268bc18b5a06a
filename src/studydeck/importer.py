"""Import flashcards from text, structured and document files."""
import csv
import io
import json
import logging
import re
from pathlib import Path

from studydeck.decks import add_flashcard, create_deck, get_deck

logger = logging.getLogger(__name__)

STRUCTURED_SUFFIXES = (".json", ".yaml", ".yml", ".csv")
QA_SEPARATOR = "::"
QUESTION_PREFIX = re.compile(r"^\s*(?:Q|Question)\s*[:.]\s*(.*)$", re.IGNORECASE)
ANSWER_PREFIX = re.compile(r"^\s*(?:A|Answer)\s*[:.]\s*(.*)$", re.IGNORECASE)


def read_file_content(file_path: str) -> str:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md", ".csv", ".json", ".yaml", ".yml"):
        return path.read_text()
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return "\n".join(p.text for p in doc.paragraphs)
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        html = path.read_text()
        return BeautifulSoup(html, "html.parser").get_text("\n")
    else:
        # Try reading as plain text
        return path.read_text()


def parse_text_cards(text: str) -> list[tuple[str, str]]:
    """Extract ``question :: answer`` lines and ``Q:``/``A:`` pairs."""
    cards = []
    pending_question = None
    for line in text.splitlines():
        if QA_SEPARATOR in line:
            question, _, answer = line.partition(QA_SEPARATOR)
            if question.strip() and answer.strip():
                cards.append((question.strip(), answer.strip()))
            pending_question = None
            continue
        q_match = QUESTION_PREFIX.match(line)
        if q_match:
            pending_question = q_match.group(1).strip()
            continue
        a_match = ANSWER_PREFIX.match(line)
        if a_match and pending_question:
            answer = a_match.group(1).strip()
            if answer:
                cards.append((pending_question, answer))
            pending_question = None
    return cards


def _cards_from_records(records) -> list[tuple[str, str]]:
    if isinstance(records, dict):
        records = records.get("cards", [])
    cards = []
    for record in records or []:
        if not isinstance(record, dict):
            continue
        question = record.get("question", record.get("front"))
        answer = record.get("answer", record.get("back"))
        if question and answer:
            cards.append((str(question).strip(), str(answer).strip()))
    return cards


def parse_structured_cards(content: str, suffix: str) -> list[tuple[str, str]]:
    if suffix == ".json":
        return _cards_from_records(json.loads(content))
    elif suffix in (".yaml", ".yml"):
        import yaml
        return _cards_from_records(yaml.safe_load(content))
    elif suffix == ".csv":
        rows = csv.reader(io.StringIO(content))
        cards = [(r[0].strip(), r[1].strip()) for r in rows if len(r) >= 2 and r[0].strip() and r[1].strip()]
        # Drop a header row
        if cards and cards[0][0].lower() in ("question", "front"):
            cards = cards[1:]
        return cards
    raise ValueError(f"Unsupported structured format: {suffix}")


def extract_cards(file_path: str) -> list[tuple[str, str]]:
    suffix = Path(file_path).suffix.lower()
    content = read_file_content(file_path)
    if suffix in STRUCTURED_SUFFIXES:
        return parse_structured_cards(content, suffix)
    return parse_text_cards(content)


def import_file(db_path: str, file_path: str, deck_id: int | None = None) -> dict:
    """Import a file's cards into a deck. Creates a deck named after the file if deck_id not provided."""
    path = Path(file_path)
    cards = extract_cards(file_path)
    if deck_id is None:
        deck_id = create_deck(db_path, path.stem, description=f"Imported from {path.name}").id
    elif get_deck(db_path, deck_id) is None:
        raise ValueError(f"Deck {deck_id} does not exist")
    for question, answer in cards:
        add_flashcard(db_path, deck_id, question, answer, source="imported")
    if not cards:
        logger.warning("No flashcards found in %s", path.name)
    logger.info("Imported %d cards from %s into deck %s", len(cards), path.name, deck_id)
    return {"filename": path.name, "deck_id": deck_id, "imported": len(cards)}
