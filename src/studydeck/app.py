"""Interactive CLI application."""
import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from studydeck.dashboard import (
    get_retention_color, get_retention_label, get_status_breakdown, get_study_stats,
)
from studydeck.db import DEFAULT_DB_PATH, init_db
from studydeck.decks import add_flashcard, create_deck, get_decks, get_flashcards
from studydeck.importer import import_file
from studydeck.reviews import ReviewService
from studydeck.settings import LOG_LEVEL, get_user_id, parse_log_level
from studydeck.srs import Response, get_card_status, status_emoji, status_label
from studydeck.store import SqliteReviewStateStore

console = Console()


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=parse_log_level(level),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def make_service(db_path: str) -> ReviewService:
    return ReviewService(SqliteReviewStateStore(db_path), get_user_id(db_path))


def show_welcome():
    console.print(Panel(
        "[bold]studydeck[/bold]\n[dim]Spaced repetition flashcards[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Review due cards"),
        ("decks", "List decks and card status"),
        ("add", "Add a deck or flashcard"),
        ("import", "Import flashcards from a file"),
        ("dashboard", "Progress and retention"),
        ("upcoming", "Reviews in the next 7 days"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def run_review_session(service: ReviewService, cards: list[dict]) -> int:
    """Walk through due cards, recording each answer. Returns the number reviewed."""
    if not cards:
        console.print("[yellow]No cards due right now![/yellow]")
        return 0
    console.print(f"\n[bold]Review Session[/bold] - {len(cards)} cards\n")
    choices = [r.value for r in Response]
    for i, item in enumerate(cards, 1):
        card = item["flashcard"]
        console.print(Panel(card.question, title=f"Card {i}/{len(cards)}", border_style="cyan"))
        Prompt.ask("[dim]Press Enter to reveal answer[/dim]", default="", show_default=False)
        console.print(Panel(card.answer, border_style="green"))
        response = Prompt.ask("How well did you remember?", choices=choices)
        state = service.record_review(card.id, response)
        console.print(f"[dim]Next review {state.next_review_date} (in {state.interval_days} days)[/dim]\n")
    return len(cards)


def cmd_review(db_path: str):
    service = make_service(db_path)
    reviewed = service.store.list_for_user(service.user_id)
    # Unreviewed cards have no state until their first answer
    new_cards = [
        {"flashcard": card, "state": None}
        for card in get_flashcards(db_path) if card.id not in reviewed
    ]
    run_review_session(service, service.cards_to_review() + new_cards)


def cmd_decks(db_path: str):
    decks = get_decks(db_path)
    if not decks:
        console.print("[yellow]No decks yet. Use 'add' or 'import' to create one.[/yellow]")
        return
    table = Table(title="Decks")
    table.add_column("ID", justify="right")
    table.add_column("Deck", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Status")
    user_id = get_user_id(db_path)
    for deck in decks:
        breakdown = get_status_breakdown(db_path, user_id, deck["id"])
        summary = "  ".join(
            f"{status_emoji(s)} {count}" for s, count in breakdown.items() if count
        )
        table.add_row(str(deck["id"]), deck["name"], str(deck["card_count"]), summary)
    console.print(table)


def cmd_add(db_path: str):
    kind = Prompt.ask("Add", choices=["deck", "card"], default="card")
    if kind == "deck":
        name = Prompt.ask("Deck name")
        subject = Prompt.ask("Subject", default="")
        deck = create_deck(db_path, name, subject=subject)
        console.print(f"[green]Created deck {deck.name} ({deck.id})[/green]")
        return
    decks = get_decks(db_path)
    if not decks:
        console.print("[yellow]Create a deck first.[/yellow]")
        return
    for d in decks:
        console.print(f"  [cyan]{d['id']}[/cyan]) {d['name']}")
    deck_id = IntPrompt.ask("Select deck", choices=[str(d["id"]) for d in decks])
    question = Prompt.ask("Question")
    answer = Prompt.ask("Answer")
    card = add_flashcard(db_path, deck_id, question, answer)
    console.print(f"[green]Added card {card.id}[/green]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_file(db_path, file_path)
    console.print(f"[green]Imported {result['imported']} cards from {result['filename']} -> deck {result['deck_id']}[/green]")


def cmd_dashboard(db_path: str):
    user_id = get_user_id(db_path)
    stats = get_study_stats(db_path, user_id)
    review_stats = make_service(db_path).review_stats()
    score = stats["retention"]
    color = get_retention_color(score)

    bar_filled = int(score / 5)
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(Panel(
        f"Retention: [bold]{score}%[/bold] {bar} [{color}]{get_retention_label(score)}[/{color}]",
        title="Progress Dashboard", border_style="blue",
    ))

    table = Table(title="Cards by Status")
    table.add_column("Status", style="cyan")
    table.add_column("Cards", justify="right")
    for status in ("due", "learning", "mastered", "new"):
        table.add_row(f"{status_emoji(status)} {status_label(status)}", str(getattr(review_stats, status)))
    console.print(table)

    console.print(f"\n  Decks: [bold]{stats['decks']}[/bold]  |  "
                  f"Cards: [bold]{stats['flashcards']}[/bold]  |  "
                  f"Reviewed: [bold]{stats['cards_reviewed']}[/bold]  |  "
                  f"Reviews: [bold]{stats['reviews']}[/bold]")


def cmd_upcoming(db_path: str):
    upcoming = make_service(db_path).upcoming_reviews(days=7)
    if not upcoming:
        console.print("[green]Nothing scheduled for the next 7 days.[/green]")
        return
    table = Table(title="Upcoming Reviews")
    table.add_column("Date")
    table.add_column("Cards", justify="right")
    table.add_column("Examples")
    for day in upcoming:
        examples = ", ".join(
            f"{status_emoji(get_card_status(c['state']))} {c['flashcard'].question[:30]}"
            for c in day["cards"][:3] if c["flashcard"]
        )
        table.add_row(day["date"], str(day["count"]), examples)
    console.print(table)


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        try:
            if choice == "review":
                cmd_review(db_path)
            elif choice == "decks":
                cmd_decks(db_path)
            elif choice == "add":
                cmd_add(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "dashboard":
                cmd_dashboard(db_path)
            elif choice == "upcoming":
                cmd_upcoming(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logging.getLogger(__name__).debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
