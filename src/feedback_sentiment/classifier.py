"""Multinomial Naive Bayes sentiment classifier.

Bag-of-words model over three fixed categories (Positive, Negative,
Neutral), written in pure Python with no numpy or sklearn dependency.

The model is an immutable value object produced by :func:`fit_model` and
consumed by :func:`predict`. :class:`NaiveBayesClassifier` owns one such
model and swaps it wholesale on every ``fit``, so a caller that serialises
access to the instance never observes partially rebuilt statistics.

Scoring, per category ``c`` and for every token occurrence ``t``::

    log(max(docs[c], 0.1) / max(total_docs, 1))
      + sum log((tf[c][t] + 1) / max(terms[c] + |V|, 1))
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import Category, Document, Prediction

logger = logging.getLogger(__name__)

#: Scoring order. Ties go to whichever category comes first here.
CATEGORIES: tuple[Category, ...] = (Category.POSITIVE, Category.NEGATIVE, Category.NEUTRAL)

#: Floor applied to a category's document count before taking the log prior.
PRIOR_FLOOR = 0.1

#: Tokens of this length or shorter are dropped.
MIN_TOKEN_LENGTH = 3

_PUNCT_RE = re.compile(r"[^\w\s]|_")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

def tokenize(text: Optional[str]) -> list[str]:
    """Normalise raw text into a list of terms.

    Lower-cases, strips anything that is not a letter, digit or whitespace,
    splits on whitespace and drops tokens shorter than three characters.
    Duplicates and order are preserved.
    """
    if not text:
        return []
    cleaned = _PUNCT_RE.sub("", text.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SentimentModel:
    """Fitted term and document statistics. Never mutated after ``fit_model``.

    Attributes:
        term_frequency: ``{category: {term: occurrences}}``.
        category_document_count: ``{category: documents}``.
        vocabulary: Every distinct term seen in any category.
        total_document_count: Number of documents fitted.
    """

    term_frequency: dict = field(default_factory=dict)
    category_document_count: dict = field(default_factory=dict)
    vocabulary: frozenset[str] = frozenset()
    total_document_count: int = 0

    @property
    def vocabulary_size(self) -> int:
        return len(self.vocabulary)

    def total_terms(self, category: Category) -> int:
        """Total term occurrences recorded for ``category``."""
        return sum(self.term_frequency.get(category, {}).values())

    def term_count(self, category: Category, term: str) -> int:
        return self.term_frequency.get(category, {}).get(term, 0)

    def document_count(self, category: Category) -> int:
        return self.category_document_count.get(category, 0)

    def to_dict(self) -> dict:
        """Summary of the fitted statistics (for display, not persistence)."""
        return {
            "total_documents": self.total_document_count,
            "vocabulary_size": self.vocabulary_size,
            "categories": {
                c.value: {
                    "documents": self.document_count(c),
                    "terms": self.total_terms(c),
                }
                for c in CATEGORIES
            },
        }


def _coerce_label(label):
    try:
        return Category(label)
    except ValueError:
        return label


def fit_model(documents: Iterable[Document]) -> SentimentModel:
    """Build a model from scratch over a labelled corpus.

    An empty corpus yields an empty model. Documents whose label is not a
    :class:`Category` are still counted under that label, but ``predict``
    never reads those statistics.

    Args:
        documents: Labelled documents, in any order.

    Returns:
        A new :class:`SentimentModel`.
    """
    term_frequency: dict = {c: Counter() for c in CATEGORIES}
    doc_counts: dict = {c: 0 for c in CATEGORIES}
    vocabulary: set[str] = set()
    total = 0

    for doc in documents:
        label = _coerce_label(doc.label)
        if label not in doc_counts:
            logger.warning("Document labelled %r is outside the known categories", label)
            term_frequency[label] = Counter()
            doc_counts[label] = 0

        total += 1
        doc_counts[label] += 1
        for term in tokenize(doc.text):
            vocabulary.add(term)
            term_frequency[label][term] += 1

    logger.debug(
        "Fitted %d documents, vocabulary of %d terms", total, len(vocabulary)
    )
    return SentimentModel(
        term_frequency={c: dict(counts) for c, counts in term_frequency.items()},
        category_document_count=doc_counts,
        vocabulary=frozenset(vocabulary),
        total_document_count=total,
    )


def score(model: SentimentModel, tokens: list[str], category: Category) -> float:
    """Unnormalised log posterior of ``category`` for a token list."""
    prior_count = max(model.document_count(category), PRIOR_FLOOR)
    log_prob = math.log(prior_count / max(model.total_document_count, 1))

    denominator = max(model.total_terms(category) + model.vocabulary_size, 1)
    for token in tokens:
        log_prob += math.log((model.term_count(category, token) + 1) / denominator)
    return log_prob


def predict(model: SentimentModel, text: Optional[str]) -> Prediction:
    """Classify ``text`` against a fitted model.

    The running best starts as ``Neutral`` at ``-inf`` and a category only
    replaces it with a strictly greater score, so exact ties resolve to the
    earliest category in :data:`CATEGORIES`.
    """
    tokens = tokenize(text)
    best = Category.NEUTRAL
    best_score = -math.inf
    scores: dict[Category, float] = {}

    for category in CATEGORIES:
        log_prob = score(model, tokens, category)
        scores[category] = log_prob
        if log_prob > best_score:
            best_score = log_prob
            best = category

    return Prediction(label=best, scores=scores)


# ---------------------------------------------------------------------------
# Owning wrapper
# ---------------------------------------------------------------------------

class NaiveBayesClassifier:
    """Holds the current :class:`SentimentModel` and refits it on demand.

    Not thread-safe: callers must not run ``fit`` concurrently with
    ``predict`` or another ``fit`` on the same instance.

    Example::

        classifier = NaiveBayesClassifier()
        classifier.fit([Document("great fast delivery", Category.POSITIVE)])
        classifier.predict("fast delivery").label  # Category.POSITIVE
    """

    def __init__(self) -> None:
        self._model = SentimentModel()

    @property
    def model(self) -> SentimentModel:
        return self._model

    @property
    def vocabulary(self) -> frozenset[str]:
        return self._model.vocabulary

    def fit(self, documents: Iterable[Document]) -> "NaiveBayesClassifier":
        """Replace the model with one fitted on ``documents``."""
        self._model = fit_model(documents)
        return self

    def predict(self, text: Optional[str]) -> Prediction:
        return predict(self._model, text)

    def predict_batch(self, texts: Iterable[Optional[str]]) -> list[Prediction]:
        model = self._model
        return [predict(model, text) for text in texts]

    def most_informative_terms(
        self,
        category: Category | str,
        top_n: int = 10,
    ) -> list[tuple[str, float]]:
        """Terms most indicative of ``category``.

        Ranks each vocabulary term by its smoothed log likelihood under the
        category minus the mean over the other two.

        Raises:
            ValueError: If ``category`` is not a known category.
        """
        target = Category(category)
        model = self._model
        others = [c for c in CATEGORIES if c != target]

        def log_likelihood(cat: Category, term: str) -> float:
            denominator = max(model.total_terms(cat) + model.vocabulary_size, 1)
            return math.log((model.term_count(cat, term) + 1) / denominator)

        ratios: list[tuple[str, float]] = []
        for term in model.vocabulary:
            other = sum(log_likelihood(c, term) for c in others) / len(others)
            ratios.append((term, round(log_likelihood(target, term) - other, 4)))

        ratios.sort(key=lambda x: (-x[1], x[0]))
        return ratios[:top_n]


def category_counts(labels: Iterable) -> dict[Category, int]:
    """Count labels per category, ignoring anything unknown."""
    counts: dict[Category, int] = defaultdict(int)
    for label in labels:
        coerced = _coerce_label(label)
        if isinstance(coerced, Category):
            counts[coerced] += 1
    return {c: counts[c] for c in CATEGORIES}
