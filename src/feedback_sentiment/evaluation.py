"""How well does the model separate the saved feedback?

Cross-validates the Naive Bayes model over a labelled feedback history and
reports per-category precision, recall and F1. Labels are compared by their
string value, so :class:`Category` members and plain strings mix freely.
Known categories are always reported in scoring order.
"""

from __future__ import annotations

import random
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Sequence

from .classifier import CATEGORIES, fit_model, predict
from .models import Document


def _value(label) -> str:
    return getattr(label, "value", label)


def _label_order(labels) -> list[str]:
    """Known categories first, in scoring order, then anything else sorted."""
    present = set(labels)
    known = [c.value for c in CATEGORIES if c.value in present]
    return known + sorted(present - set(known))


@dataclass
class ClassificationMetrics:
    """Agreement between true and predicted labels for one evaluation run."""

    accuracy: float = 0.0
    labels: list[str] = field(default_factory=list)
    per_class: dict[str, dict[str, float]] = field(default_factory=dict)
    confusion_matrix: dict[str, dict[str, int]] = field(default_factory=dict)
    support: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.support.values())

    def _mean(self, key: str) -> float:
        if not self.per_class:
            return 0.0
        return sum(scores[key] for scores in self.per_class.values()) / len(self.per_class)

    @property
    def macro_precision(self) -> float:
        return self._mean("precision")

    @property
    def macro_recall(self) -> float:
        return self._mean("recall")

    @property
    def macro_f1(self) -> float:
        return self._mean("f1")

    @property
    def weighted_f1(self) -> float:
        """F1 averaged by how many items truly carry each label."""
        if not self.total:
            return 0.0
        return sum(
            self.per_class[label]["f1"] * count for label, count in self.support.items()
        ) / self.total

    def to_dict(self) -> dict:
        return {
            "items": self.total,
            "accuracy": round(self.accuracy, 4),
            "macro_precision": round(self.macro_precision, 4),
            "macro_recall": round(self.macro_recall, 4),
            "macro_f1": round(self.macro_f1, 4),
            "weighted_f1": round(self.weighted_f1, 4),
            "per_class": {
                label: {k: round(v, 4) for k, v in scores.items()}
                for label, scores in self.per_class.items()
            },
            "confusion_matrix": self.confusion_matrix,
            "support": self.support,
        }

    def summary(self) -> str:
        """Plain-text report, one row per label."""
        rows = [
            f"Accuracy: {self.accuracy:.2%} over {self.total} item(s)",
            f"Macro F1: {self.macro_f1:.3f}  Weighted F1: {self.weighted_f1:.3f}",
            "",
            f"{'Label':<10}{'Precision':>11}{'Recall':>9}{'F1':>8}{'Items':>7}",
        ]
        for label in self.labels:
            scores = self.per_class[label]
            rows.append(
                f"{label:<10}{scores['precision']:>11.3f}{scores['recall']:>9.3f}"
                f"{scores['f1']:>8.3f}{self.support.get(label, 0):>7}"
            )
        return "\n".join(rows)


def compute_metrics(y_true: Sequence, y_pred: Sequence) -> ClassificationMetrics:
    """Score predicted labels against the true ones.

    Raises:
        ValueError: If the two sequences differ in length.
    """
    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")

    pairs = [(_value(t), _value(p)) for t, p in zip(y_true, y_pred)]
    labels = _label_order(label for pair in pairs for label in pair)

    matrix = {actual: dict.fromkeys(labels, 0) for actual in labels}
    for actual, predicted in pairs:
        matrix[actual][predicted] += 1

    per_class: dict[str, dict[str, float]] = {}
    for label in labels:
        hits = matrix[label][label]
        predicted_as = sum(row[label] for row in matrix.values())
        actually = sum(matrix[label].values())
        precision = hits / predicted_as if predicted_as else 0.0
        recall = hits / actually if actually else 0.0
        f1 = 2 * precision * recall / (precision + recall) if hits else 0.0
        per_class[label] = {"precision": precision, "recall": recall, "f1": f1}

    correct = sum(matrix[label][label] for label in labels)
    return ClassificationMetrics(
        accuracy=correct / len(pairs) if pairs else 0.0,
        labels=labels,
        per_class=per_class,
        confusion_matrix=matrix,
        support=dict(Counter(actual for actual, _ in pairs)),
    )


def stratified_k_fold(
    labels: Sequence,
    k: int = 5,
    seed: int = 42,
) -> list[tuple[list[int], list[int]]]:
    """Deal item indices into ``k`` folds so each fold mirrors the label mix.

    Each label's items are shuffled and dealt round-robin; the starting fold
    rotates from one label to the next so fold sizes stay even.

    Returns:
        ``(train_indices, test_indices)`` per fold.
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")

    rng = random.Random(seed)
    by_label: dict[str, list[int]] = defaultdict(list)
    for index, label in enumerate(labels):
        by_label[_value(label)].append(index)

    folds: list[list[int]] = [[] for _ in range(k)]
    start = 0
    for label in _label_order(by_label):
        indices = by_label[label]
        rng.shuffle(indices)
        for offset, index in enumerate(indices):
            folds[(start + offset) % k].append(index)
        start = (start + len(indices)) % k

    everything = range(len(labels))
    return [
        (sorted(set(everything) - set(test)), sorted(test))
        for test in folds
    ]


def _fold_predictions(documents: Sequence[Document], k: int, seed: int):
    labels = [doc.label for doc in documents]
    for train, test in stratified_k_fold(labels, k=k, seed=seed):
        if not test:
            continue
        model = fit_model(documents[i] for i in train)
        yield (
            [documents[i].label for i in test],
            [predict(model, documents[i].text).label for i in test],
        )


def cross_validate(
    documents: Sequence[Document],
    k: int = 5,
    seed: int = 42,
) -> list[ClassificationMetrics]:
    """Metrics for each fold, the model re-fitted on the other folds every time."""
    return [compute_metrics(y_true, y_pred) for y_true, y_pred in _fold_predictions(documents, k, seed)]


def out_of_fold_metrics(
    documents: Sequence[Document],
    k: int = 5,
    seed: int = 42,
) -> ClassificationMetrics:
    """One set of metrics over every item, each predicted by a model that never saw it."""
    y_true: list = []
    y_pred: list = []
    for fold_true, fold_pred in _fold_predictions(documents, k, seed):
        y_true.extend(fold_true)
        y_pred.extend(fold_pred)
    return compute_metrics(y_true, y_pred)
