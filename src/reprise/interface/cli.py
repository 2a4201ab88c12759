"""reprise CLI: scheduling config, card selection, grading and review reports."""

import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from reprise.application.config import SchedulingConfig, resolve_settings
from reprise.application.factory import Services, build_services
from reprise.application.grading import grading_details
from reprise.application.selection import default_count
from reprise.consts import VERSION
from reprise.domain.constants import DEFAULT_SCHEDULE_DAYS
from reprise.domain.errors import ConfigOutOfRange, DeckFormatError, UnknownModeError
from reprise.domain.models import FlashcardWord, LearningItem, PracticeMode, ReviewOutcome

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="reprise: spaced-repetition scheduling for sentence flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage scheduling parameters.", no_args_is_help=True)
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    deck: Annotated[
        Path | None, typer.Option("--deck", help="YAML deck file with the cards to study.")
    ] = None,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding reviews and config.")
    ] = None,
    backend: Annotated[
        str | None, typer.Option(help="Storage backend: file or memory.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for reprise."""
    settings = resolve_settings(
        {"deck_file": deck, "data_dir": data_dir, "backend": backend}
    )

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    logger.debug(f"Settings: backend={settings.backend} data_dir={settings.data_dir}")


def _services(ctx: typer.Context, seed: int | None = None) -> Services:
    rng = random.Random(seed) if seed is not None else None
    return build_services(ctx.obj["settings"], rng=rng)


def _run(coro):
    try:
        return asyncio.run(coro)
    except DeckFormatError as e:
        typer.secho(f"Cannot read deck: {e}", fg="red")
        raise typer.Exit(1)


def _item_row(item: LearningItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "lesson": item.collection_id,
        "prompt": item.prompt,
        "target": item.target,
        "favorite": item.favorite,
    }


def _entry_row(entry: LearningItem | FlashcardWord) -> dict[str, Any]:
    if isinstance(entry, FlashcardWord):
        return {"word": entry.word, "item": entry.item.id}
    return _item_row(entry)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


@app.command()
def select(
    ctx: typer.Context,
    mode: Annotated[str, typer.Argument(help="Practice mode, e.g. normal, weak, flashcard.")],
    count: Annotated[int | None, typer.Option("--count", "-n", help="Number of cards.")] = None,
    ids: Annotated[
        str | None, typer.Option(help="Comma-separated card ids (custom mode).")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for reproducible shuffles.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Select[/bold green] the cards for a study session."""
    services = _services(ctx, seed)
    item_ids = [i.strip() for i in ids.split(",") if i.strip()] if ids else None

    try:
        settings = ctx.obj["settings"]
        n = count if count is not None else (settings.default_count or default_count(mode))
        if n < 0:
            typer.secho(f"Count must not be negative, got {n}.", fg="red")
            raise typer.Exit(2)
        entries = _run(services.selector.select(mode, n, item_ids=item_ids))
    except UnknownModeError:
        valid = ", ".join(m.value for m in PracticeMode)
        typer.secho(f"Unknown mode '{mode}'. Valid modes: {valid}", fg="red")
        raise typer.Exit(2)

    if json_output:
        typer.echo(json.dumps([_entry_row(e) for e in entries], ensure_ascii=False, indent=2))
        return

    if not entries:
        typer.secho("Nothing to study.", fg="yellow")
        return

    for i, entry in enumerate(entries, start=1):
        if isinstance(entry, FlashcardWord):
            typer.echo(f"{i:>3}. {entry.word}  ({entry.item.id})")
        else:
            star = "*" if entry.favorite else " "
            typer.echo(f"{i:>3}.{star}[{entry.id}] {entry.prompt} -> {entry.target}")


@app.command()
def items(
    ctx: typer.Context,
    lesson: Annotated[str | None, typer.Option(help="Only cards of this lesson.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List the cards in the deck."""
    services = _services(ctx)

    if lesson:
        found = _run(services.items.get_by_collection(lesson))
    else:
        found = _run(services.items.get_all())

    if json_output:
        typer.echo(json.dumps([_item_row(i) for i in found], ensure_ascii=False, indent=2))
        return

    for item in found:
        typer.echo(f"[{item.id}] ({item.collection_id}) {item.prompt} -> {item.target}")
    typer.echo(f"{len(found)} cards")


@app.command()
def due(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option(help="Show at most this many.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show due reviews, most urgent first."""
    services = _services(ctx)
    ranked = _run(services.ranker.rank_due(limit=limit))

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": r.item.id,
                        "priority": r.priority,
                        "days_overdue": r.days_overdue,
                        "interval_days": r.review.interval_days,
                        "last_outcome": r.review.last_outcome.value,
                    }
                    for r in ranked
                ],
                indent=2,
            )
        )
        return

    if not ranked:
        typer.secho("No reviews due.", fg="green")
        return

    for r in ranked:
        typer.echo(
            f"{r.priority:>5}  [{r.item.id}] {r.item.prompt}"
            f"  ({r.days_overdue}d overdue, {r.review.interval_days}d, {r.review.last_outcome.value})"
        )


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------


@app.command()
def grade(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Card id.")],
    outcome: Annotated[str, typer.Argument(help="OK, MAYBE or NG.")],
):
    """Record a grading outcome and reschedule the card."""
    try:
        parsed = ReviewOutcome.parse(outcome)
    except ValueError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(2)

    services = _services(ctx)
    state = _run(services.review_service.record_outcome(item_id, parsed))
    typer.secho(
        f"{item_id}: {parsed.value}, next review in {state.interval_days}d "
        f"({state.due_at.date().isoformat()})",
        fg="green",
    )


@app.command()
def check(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Card id.")],
    answer: Annotated[str, typer.Argument(help="The typed answer.")],
    record: Annotated[
        bool, typer.Option("--record", help="Also record the outcome.")
    ] = False,
):
    """Auto-grade a typed answer against a card's target."""
    services = _services(ctx)
    item = _run(services.items.get_by_id(item_id))
    if item is None:
        typer.secho(f"Card '{item_id}' not found.", fg="red")
        raise typer.Exit(1)

    details = grading_details(answer, item.target)
    color = {"OK": "green", "MAYBE": "yellow", "NG": "red"}[details.outcome.value]
    typer.secho(f"{details.outcome.value} ({details.similarity:.0%} similar)", fg=color)
    if details.outcome is not ReviewOutcome.OK:
        typer.echo(f"Expected: {item.target}")

    if record:
        _run(services.review_service.record_outcome(item_id, details.outcome))


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Summarize stored reviews."""
    services = _services(ctx)
    result = _run(services.review_service.review_stats())

    data = {
        "total_reviews": result.total_reviews,
        "due_reviews": result.due_reviews,
        "upcoming_reviews": result.upcoming_reviews,
        "average_interval": result.average_interval,
        "overdue_count": result.overdue_count,
        "outcomes": {k.value: v for k, v in result.outcome_distribution.items()},
    }
    if json_output:
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"Reviews: {result.total_reviews}  Due: {result.due_reviews}")
    typer.echo(f"Upcoming (7d): {result.upcoming_reviews}")
    typer.echo(f"Average interval: {result.average_interval}d")
    typer.echo("Last outcomes: " + "  ".join(f"{k}={v}" for k, v in data["outcomes"].items()))


@app.command()
def schedule(
    ctx: typer.Context,
    days: Annotated[int, typer.Option(help="Number of days to show.")] = DEFAULT_SCHEDULE_DAYS,
):
    """Show how many reviews fall on each upcoming day."""
    services = _services(ctx)
    per_day = _run(services.review_service.review_schedule(days=days))
    for day, n in per_day.items():
        typer.echo(f"{day.isoformat()}  {n:>3}  {'#' * n}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display the scheduling config in effect."""
    services = _services(ctx)
    config = _run(services.config.load())
    typer.echo(json.dumps(config.to_storage(), indent=2))


@config_app.command("set")
def config_set(
    ctx: typer.Context,
    ok_multiplier: Annotated[float | None, typer.Option(help="Interval factor after OK.")] = None,
    maybe_multiplier: Annotated[
        float | None, typer.Option(help="Interval factor after MAYBE.")
    ] = None,
    ng_interval: Annotated[int | None, typer.Option(help="Interval after NG (days).")] = None,
    min_interval: Annotated[int | None, typer.Option(help="Shortest interval (days).")] = None,
    max_interval: Annotated[int | None, typer.Option(help="Longest interval (days).")] = None,
    initial_interval: Annotated[
        int | None, typer.Option(help="Interval after the first grading (days).")
    ] = None,
    strict: Annotated[
        bool, typer.Option("--strict", help="Reject out-of-range values instead of clamping.")
    ] = False,
):
    """Update scheduling parameters. Out-of-range values are clamped."""
    overrides = {
        "ok_multiplier": ok_multiplier,
        "maybe_multiplier": maybe_multiplier,
        "ng_interval": ng_interval,
        "min_interval": min_interval,
        "max_interval": max_interval,
        "initial_interval": initial_interval,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        typer.secho("Nothing to change.", fg="yellow")
        raise typer.Exit(1)

    services = _services(ctx)
    try:
        saved: SchedulingConfig = _run(services.config.update(overrides, strict=strict))
    except ConfigOutOfRange as e:
        typer.secho(f"Rejected: {e}", fg="red")
        raise typer.Exit(2)

    typer.echo(json.dumps(saved.to_storage(), indent=2))


@config_app.command("reset")
def config_reset(ctx: typer.Context):
    """Restore the default scheduling parameters."""
    services = _services(ctx)
    _run(services.config.reset())
    typer.secho("Scheduling config reset to defaults.", fg="green")


@app.command()
def version():
    """Print the reprise version."""
    typer.echo(VERSION)

