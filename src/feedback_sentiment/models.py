"""Data models for feedback sentiment classification."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """Sentiment categories, in scoring order."""

    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


@dataclass(frozen=True)
class Document:
    """A labelled snippet of feedback used for fitting."""

    text: Optional[str]
    label: Category

    def to_dict(self) -> dict:
        return {"text": self.text or "", "label": _label_value(self.label)}


@dataclass
class Prediction:
    """Winning category plus the log score of every category."""

    label: Category
    scores: dict[Category, float] = field(default_factory=dict)

    @property
    def probabilities(self) -> dict[Category, float]:
        """Scores normalised to probabilities (log-sum-exp)."""
        if not self.scores:
            return {}
        max_score = max(self.scores.values())
        exp_scores = {c: math.exp(s - max_score) for c, s in self.scores.items()}
        total = sum(exp_scores.values())
        return {c: v / total for c, v in exp_scores.items()}

    @property
    def confidence(self) -> float:
        return self.probabilities.get(self.label, 0.0)

    def to_dict(self) -> dict:
        return {
            "label": self.label.value,
            "confidence": round(self.confidence, 4),
            "scores": {c.value: round(s, 4) for c, s in self.scores.items()},
            "probabilities": {
                c.value: round(p, 4) for c, p in self.probabilities.items()
            },
        }


@dataclass
class FeedbackItem:
    """A stored piece of feedback and its current label."""

    id: int
    text: str
    label: Category
    source: str = "Manual"
    timestamp: datetime = field(default_factory=datetime.now)

    def to_document(self) -> Document:
        return Document(text=self.text, label=self.label)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "label": self.label.value,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
        }


@dataclass
class SentimentStats:
    """Per-category counts over a feedback history."""

    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral

    def count(self, category: Category) -> int:
        return {
            Category.POSITIVE: self.positive,
            Category.NEGATIVE: self.negative,
            Category.NEUTRAL: self.neutral,
        }[category]

    def share(self, category: Category) -> float:
        """Fraction of items labelled ``category`` (0.0 when empty)."""
        if not self.total:
            return 0.0
        return self.count(category) / self.total

    def to_dict(self) -> dict:
        return {
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "total": self.total,
        }


def _label_value(label) -> str:
    return label.value if isinstance(label, Category) else str(label)
