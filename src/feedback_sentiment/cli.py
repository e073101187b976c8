"""Command-line interface for Feedback Sentiment.

Classify feedback, import files, run an interactive correction session, and
call the optional LLM assistant, with rich terminal output using the
``click`` and ``rich`` libraries.

Usage::

    feedback-sentiment classify "Delivery was quick and painless"
    feedback-sentiment import reviews.xlsx
    feedback-sentiment session
    feedback-sentiment evaluate -k 5
    feedback-sentiment report --import reviews.csv
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analyzer import FeedbackAnalyzer
from .classifier import CATEGORIES
from .config import configure_logging, get_settings
from .evaluation import cross_validate, out_of_fold_metrics
from .models import Category, FeedbackItem, Prediction, SentimentStats

console = Console()

HELP_TEXT = (
    "Type feedback to classify and save it.\n"
    "  :fix ID LABEL  correct an item (Positive, Negative, Neutral)\n"
    "  :list          show saved items\n"
    "  :stats         show counts per category\n"
    "  :quit          leave the session"
)


def _label_style(label: Category) -> str:
    """Return a rich style string for a category."""
    return {
        Category.POSITIVE: "bold green",
        Category.NEGATIVE: "bold red",
        Category.NEUTRAL: "bold white",
    }.get(label, "")


def _label_icon(label: Category) -> str:
    return {
        Category.POSITIVE: "🙂",
        Category.NEGATIVE: "🙁",
        Category.NEUTRAL: "😐",
    }.get(label, "")


def _parse_label(value: str) -> Category:
    """Case-insensitive label lookup."""
    try:
        return Category(value.strip().capitalize())
    except ValueError:
        raise click.BadParameter(
            f"'{value}' is not one of {', '.join(c.value for c in CATEGORIES)}"
        ) from None


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/] {error}")
    sys.exit(1)


def _build_analyzer(import_file: Optional[Path]) -> FeedbackAnalyzer:
    analyzer = FeedbackAnalyzer()
    if import_file:
        try:
            analyzer.import_file(import_file)
        except Exception as e:
            _fail(e)
    return analyzer


def _build_assistant():
    from .assistant import FeedbackAssistant

    try:
        return FeedbackAssistant(settings=get_settings())
    except Exception as e:
        _fail(e)


@click.group()
@click.version_option(package_name="feedback-sentiment")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Logging verbosity (defaults to FEEDBACK_SENTIMENT_LOG_LEVEL).")
def main(log_level: Optional[str]) -> None:
    """💬 Feedback Sentiment — classify customer feedback and learn from corrections."""
    configure_logging((log_level or get_settings().log_level).upper())


@main.command()
@click.argument("text")
@click.option("--import", "import_file", type=click.Path(exists=True, path_type=Path),
              default=None, help="Add the lines of a feedback file to the training data first.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def classify(text: str, import_file: Optional[Path], output: str) -> None:
    """Classify a single piece of feedback.

    Example: feedback-sentiment classify "Love the new dashboard"
    """
    analyzer = _build_analyzer(import_file)
    prediction = analyzer.classify(text)

    if output == "json":
        click.echo(json.dumps(prediction.to_dict(), indent=2))
    else:
        _render_prediction(text, prediction)


@main.command("import")
@click.argument("file", type=click.Path(exists=True, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def import_(file: Path, output: str) -> None:
    """Import feedback from a text, CSV, Excel or Word file and classify every line.

    Example: feedback-sentiment import reviews.csv
    """
    analyzer = FeedbackAnalyzer()

    with console.status("[bold blue]Importing feedback...", spinner="dots"):
        try:
            imported = analyzer.import_file(file)
        except Exception as e:
            _fail(e)

    if output == "json":
        click.echo(json.dumps({
            "imported": [item.to_dict() for item in imported],
            "stats": analyzer.stats().to_dict(),
        }, indent=2))
        return

    console.print(f"Imported [bold]{len(imported)}[/] item(s) from {file.name}")
    _render_items(imported, title=f"Imported — {file.name}")
    _render_stats(analyzer.stats())


@main.command()
@click.option("--import", "import_file", type=click.Path(exists=True, path_type=Path),
              default=None, help="Start the session with the lines of a feedback file.")
def session(import_file: Optional[Path]) -> None:
    """Interactive classify-and-correct loop.

    Each saved item and each correction re-trains the model immediately.
    """
    analyzer = _build_analyzer(import_file)
    console.print(Panel(HELP_TEXT, title="💬 Feedback session", border_style="blue"))

    while True:
        try:
            line = click.prompt("feedback", default="", show_default=False, prompt_suffix="> ")
        except click.Abort:
            break

        line = line.strip()
        if not line:
            continue
        if line in (":quit", ":q", ":exit"):
            break
        if line == ":help":
            console.print(HELP_TEXT)
        elif line == ":stats":
            _render_stats(analyzer.stats())
        elif line == ":list":
            _render_items(analyzer.items, title="Saved feedback")
        elif line.startswith(":fix"):
            _session_fix(analyzer, line)
        elif line.startswith(":"):
            console.print(f"[yellow]Unknown command:[/] {line}")
        else:
            prediction = analyzer.classify(line)
            item = analyzer.add(line, label=prediction.label)
            _render_prediction(line, prediction)
            console.print(f"[dim]Saved #{item.id} as {item.label.value}[/]")

    console.print(f"[dim]Session ended with {len(analyzer)} item(s).[/]")


def _session_fix(analyzer: FeedbackAnalyzer, line: str) -> None:
    parts = line.split()
    if len(parts) != 3 or not parts[1].isdigit():
        console.print("[yellow]Usage:[/] :fix ID LABEL")
        return
    try:
        item = analyzer.correct(int(parts[1]), _parse_label(parts[2]))
    except (KeyError, click.BadParameter) as e:
        message = e.args[0] if isinstance(e, KeyError) else e.format_message()
        console.print(f"[bold red]Error:[/] {message}")
        return
    console.print(f"Item #{item.id} is now [{_label_style(item.label)}]{item.label.value}[/]")


@main.command()
@click.option("--import", "import_file", type=click.Path(exists=True, path_type=Path),
              default=None, help="Add the lines of a feedback file to the history first.")
@click.option("--folds", "-k", default=3, show_default=True, type=click.IntRange(min=2),
              help="Number of cross-validation folds.")
@click.option("--seed", default=42, show_default=True, help="Seed for fold shuffling.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def evaluate(import_file: Optional[Path], folds: int, seed: int, output: str) -> None:
    """Cross-validate the model on the feedback history.

    Example: feedback-sentiment evaluate --import reviews.csv -k 5
    """
    analyzer = _build_analyzer(import_file)
    documents = analyzer.documents
    if len(documents) < folds:
        _fail(ValueError(
            f"Need at least {folds} feedback items for {folds}-fold cross-validation, "
            f"have {len(documents)}"
        ))

    with console.status("[bold blue]Cross-validating...", spinner="dots"):
        per_fold = cross_validate(documents, k=folds, seed=seed)
        overall = out_of_fold_metrics(documents, k=folds, seed=seed)

    if output == "json":
        click.echo(json.dumps({
            "folds": [m.to_dict() for m in per_fold],
            "overall": overall.to_dict(),
        }, indent=2))
        return

    table = Table(title=f"{folds}-fold cross-validation", show_lines=False)
    table.add_column("Fold", justify="right")
    table.add_column("Items", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Macro F1", justify="right")
    for number, metrics in enumerate(per_fold, start=1):
        table.add_row(
            str(number),
            str(metrics.total),
            f"{metrics.accuracy:.0%}",
            f"{metrics.macro_f1:.3f}",
        )
    console.print(table)
    console.print(Panel(overall.summary(), title="Out-of-fold metrics", border_style="blue"))


@main.command()
@click.option("--import", "import_file", type=click.Path(exists=True, path_type=Path),
              default=None, help="Include the lines of a feedback file in the report.")
def report(import_file: Optional[Path]) -> None:
    """Generate an AI insight report over the feedback history."""
    analyzer = _build_analyzer(import_file)
    assistant = _build_assistant()

    with console.status("[bold blue]Generating report...", spinner="dots"):
        try:
            text = assistant.insight_report(analyzer.items)
        except Exception as e:
            _fail(e)

    console.print(Panel(text, title="📊 Insight Report", border_style="blue"))


@main.command()
@click.argument("text")
@click.option("--label", "-l", default=None, help="Sentiment to reply to (default: predicted).")
def reply(text: str, label: Optional[str]) -> None:
    """Draft a customer-service reply to a piece of feedback."""
    analyzer = FeedbackAnalyzer()
    category = _parse_label(label) if label else analyzer.classify(text).label
    item = FeedbackItem(id=0, text=text, label=category)
    assistant = _build_assistant()

    with console.status("[bold blue]Drafting reply...", spinner="dots"):
        try:
            draft = assistant.draft_reply(item)
        except Exception as e:
            _fail(e)

    console.print(Panel(draft, title=f"✉️ Reply ({category.value})", border_style="blue"))


@main.command()
@click.argument("text")
def verify(text: str) -> None:
    """Compare the model's prediction with an AI second opinion."""
    prediction = FeedbackAnalyzer().classify(text)
    assistant = _build_assistant()

    with console.status("[bold blue]Asking for a second opinion...", spinner="dots"):
        try:
            verification = assistant.verify_sentiment(text)
        except Exception as e:
            _fail(e)

    _render_prediction(text, prediction)
    if verification.sentiment is None:
        console.print(Panel(verification.raw, title="AI opinion (unparsed)", border_style="yellow"))
        return

    agrees = verification.agrees_with(prediction.label)
    console.print(Panel(
        f"Sentiment: [{_label_style(verification.sentiment)}]{verification.sentiment.value}[/]\n"
        f"Confidence: {verification.confidence or '?'}\n"
        f"Reasoning: {verification.reasoning or '-'}",
        title="✅ AI agrees" if agrees else "⚠️ AI disagrees",
        border_style="green" if agrees else "yellow",
    ))


@main.command()
@click.option("--count", "-n", default=5, show_default=True, type=click.IntRange(1, 50),
              help="Number of examples to generate.")
def generate(count: int) -> None:
    """Generate synthetic labelled feedback and show how the model scores it."""
    analyzer = FeedbackAnalyzer()
    assistant = _build_assistant()

    with console.status("[bold blue]Generating examples...", spinner="dots"):
        try:
            examples = assistant.generate_examples(count)
        except Exception as e:
            _fail(e)

    if not examples:
        console.print("[yellow]The assistant returned no usable examples.[/]")
        return

    predictions = analyzer.classifier.predict_batch(doc.text for doc in examples)
    table = Table(title="Generated examples", show_lines=True)
    table.add_column("Text", style="white", max_width=60)
    table.add_column("Label", justify="center")
    table.add_column("Model", justify="center")
    for doc, prediction in zip(examples, predictions):
        table.add_row(
            doc.text,
            Text(doc.label.value, style=_label_style(doc.label)),
            Text(prediction.label.value, style=_label_style(prediction.label)),
        )
    console.print(table)

    analyzer.add_examples(examples)
    _render_stats(analyzer.stats())


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_prediction(text: str, prediction: Prediction) -> None:
    """Render a prediction with its per-category scores."""
    label = prediction.label
    table = Table(show_header=True, box=None)
    table.add_column("Category", style="cyan")
    table.add_column("Log score", justify="right")
    table.add_column("Probability", justify="right")

    probabilities = prediction.probabilities
    for category in CATEGORIES:
        marker = " ◀" if category == label else ""
        table.add_row(
            category.value + marker,
            f"{prediction.scores[category]:.3f}",
            f"{probabilities[category]:.0%}",
        )

    console.print(Panel(
        table,
        title=f"{_label_icon(label)} [{_label_style(label)}]{label.value}[/] "
              f"({prediction.confidence:.0%})",
        subtitle=text[:60] + ("..." if len(text) > 60 else ""),
        border_style="blue",
    ))


def _render_items(items: list[FeedbackItem], title: str) -> None:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", width=4)
    table.add_column("Label", width=10)
    table.add_column("Text", style="white", max_width=70)
    table.add_column("Source", style="dim", width=14)

    for item in items[:50]:
        table.add_row(
            str(item.id),
            Text(item.label.value, style=_label_style(item.label)),
            item.text[:120] + ("..." if len(item.text) > 120 else ""),
            item.source,
        )
    if len(items) > 50:
        table.add_row("...", "", f"({len(items) - 50} more)", "")

    console.print(table)


def _render_stats(stats: SentimentStats) -> None:
    parts = [
        f"[{_label_style(c)}]{c.value}[/]: {stats.count(c)} ({stats.share(c):.0%})"
        for c in CATEGORIES
    ]
    console.print(" | ".join(parts) + f" | Total: {stats.total}")


if __name__ == "__main__":
    main()
