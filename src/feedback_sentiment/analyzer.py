"""Feedback history with a self-correcting classifier.

The ``FeedbackAnalyzer`` is the primary entry point for interactive use. It
keeps the list of saved feedback items and a :class:`NaiveBayesClassifier`
fitted on exactly that list. Any change to the history (new items, imports,
label corrections) triggers a full re-fit, so user corrections flow straight
into the next prediction.
"""

from __future__ import annotations

import itertools
import logging
from pathlib import Path
from typing import Iterable, Optional

from .classifier import CATEGORIES, NaiveBayesClassifier, category_counts
from .models import Category, Document, FeedbackItem, Prediction, SentimentStats
from .parsers import parse_feedback_file

logger = logging.getLogger(__name__)

INITIAL_FEEDBACK: tuple[Document, ...] = (
    Document("The product is great, fast delivery!", Category.POSITIVE),
    Document("Terrible service, very slow and rude.", Category.NEGATIVE),
    Document("It's okay, nothing special.", Category.NEUTRAL),
    Document("I love the new features.", Category.POSITIVE),
    Document("Broken immediately. Waste of money.", Category.NEGATIVE),
)


class FeedbackAnalyzer:
    """Feedback history plus the classifier trained on it.

    Items are kept newest first. The classifier is re-fitted after every
    mutation; reads never change state.

    Example::

        analyzer = FeedbackAnalyzer()
        item = analyzer.add("Checkout keeps crashing on my phone")
        analyzer.correct(item.id, "Negative")
        analyzer.classify("crashing again").label

    Args:
        history: Initial labelled documents. Defaults to a small seed set;
            pass an empty list to start with no training data.
        classifier: Custom classifier instance (optional).
    """

    def __init__(
        self,
        history: Optional[Iterable[Document]] = None,
        classifier: Optional[NaiveBayesClassifier] = None,
    ) -> None:
        self._classifier = classifier or NaiveBayesClassifier()
        self._ids = itertools.count(1)
        seed = INITIAL_FEEDBACK if history is None else history
        self._items: list[FeedbackItem] = [
            FeedbackItem(
                id=next(self._ids),
                text=doc.text or "",
                label=Category(doc.label),
                source="Initial Data",
            )
            for doc in seed
        ]
        self._refit()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def classifier(self) -> NaiveBayesClassifier:
        return self._classifier

    @property
    def items(self) -> list[FeedbackItem]:
        return list(self._items)

    @property
    def documents(self) -> list[Document]:
        """The current training corpus."""
        return [item.to_document() for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: int) -> FeedbackItem:
        """Look up an item by id.

        Raises:
            KeyError: If no item has that id.
        """
        for item in self._items:
            if item.id == item_id:
                return item
        raise KeyError(f"No feedback item with id {item_id}")

    def classify(self, text: str) -> Prediction:
        return self._classifier.predict(text)

    def stats(self) -> SentimentStats:
        counts = category_counts(item.label for item in self._items)
        return SentimentStats(
            positive=counts[Category.POSITIVE],
            negative=counts[Category.NEGATIVE],
            neutral=counts[Category.NEUTRAL],
        )

    def categorized(self) -> dict[Category, list[FeedbackItem]]:
        """Items grouped by label, newest first within each group."""
        groups: dict[Category, list[FeedbackItem]] = {c: [] for c in CATEGORIES}
        for item in self._items:
            groups[item.label].append(item)
        return groups

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(
        self,
        text: str,
        label: Category | str | None = None,
        source: str = "Manual",
    ) -> FeedbackItem:
        """Save a piece of feedback, labelling it with the model if no label is given.

        Raises:
            ValueError: If ``text`` is blank or ``label`` is not a category.
        """
        if not text or not text.strip():
            raise ValueError("Feedback text must not be empty")

        category = Category(label) if label is not None else self.classify(text).label
        item = FeedbackItem(id=next(self._ids), text=text.strip(), label=category, source=source)
        self._items.insert(0, item)
        self._refit()
        return item

    def correct(self, item_id: int, label: Category | str) -> FeedbackItem:
        """Relabel an existing item and re-fit the classifier.

        Raises:
            KeyError: If no item has that id.
            ValueError: If ``label`` is not a category.
        """
        category = Category(label)
        item = self.get(item_id)
        if item.label != category:
            logger.info("Relabelling item %d: %s -> %s", item_id, item.label.value, category.value)
            item.label = category
            self._refit()
        return item

    def import_lines(
        self,
        lines: Iterable[str],
        source: str = "Imported File",
    ) -> list[FeedbackItem]:
        """Label each line with the current model and prepend them in order.

        All lines are scored against the model as it was before the import;
        the classifier is re-fitted once afterwards.
        """
        new_items = [
            FeedbackItem(
                id=next(self._ids),
                text=line.strip(),
                label=self.classify(line).label,
                source=source,
            )
            for line in lines
            if line and line.strip()
        ]
        if new_items:
            self._items[:0] = new_items
            self._refit()
        logger.info("Imported %d feedback items from %s", len(new_items), source)
        return new_items

    def import_file(self, path: str | Path) -> list[FeedbackItem]:
        """Parse a feedback file and import its lines."""
        parsed = parse_feedback_file(path)
        return self.import_lines(parsed.lines)

    def add_examples(
        self,
        documents: Iterable[Document],
        source: str = "AI Generated",
    ) -> list[FeedbackItem]:
        """Prepend already-labelled documents, skipping invalid ones."""
        new_items: list[FeedbackItem] = []
        for doc in documents:
            try:
                category = Category(doc.label)
            except ValueError:
                logger.warning("Skipping example with unknown label %r", doc.label)
                continue
            if not doc.text or not doc.text.strip():
                continue
            new_items.append(
                FeedbackItem(id=next(self._ids), text=doc.text.strip(), label=category, source=source)
            )

        if new_items:
            self._items[:0] = new_items
            self._refit()
        return new_items

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _refit(self) -> None:
        self._classifier.fit(self.documents)
