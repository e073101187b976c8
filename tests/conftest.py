"""Shared test fixtures for feedback-sentiment tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from feedback_sentiment.models import Category, Document


@pytest.fixture
def two_doc_corpus() -> list[Document]:
    """One positive and one negative document with disjoint vocabulary."""
    return [
        Document("great fast delivery", Category.POSITIVE),
        Document("terrible slow service", Category.NEGATIVE),
    ]


@pytest.fixture
def feedback_corpus() -> list[Document]:
    """Small balanced corpus of customer feedback."""
    positive = [
        "Love the new dashboard, really intuitive and fast",
        "Great support team, they fixed my issue quickly",
        "Delivery was fast and the packaging was great",
        "Excellent value, love how easy the checkout is",
        "Fantastic update, the app feels fast and smooth",
        "Support was friendly and helpful, great experience",
    ]
    negative = [
        "Terrible experience, the app crashes constantly",
        "Support never answered, awful and slow service",
        "Broken on arrival, waste of money and time",
        "Checkout crashes every time, really frustrating",
        "Slow delivery and rude staff, terrible service",
        "Awful update, everything is broken and slow",
    ]
    neutral = [
        "The package arrived on Tuesday as scheduled",
        "It works okay, nothing special about it",
        "Average product, does what the description says",
        "Received the order, have not opened it yet",
        "The color is grey, similar to the photos",
        "Okay experience overall, fairly average service",
    ]
    return (
        [Document(t, Category.POSITIVE) for t in positive]
        + [Document(t, Category.NEGATIVE) for t in negative]
        + [Document(t, Category.NEUTRAL) for t in neutral]
    )


@pytest.fixture
def feedback_text_file(tmp_path: Path) -> Path:
    """A plain text file with one review per line plus some noise."""
    file = tmp_path / "reviews.txt"
    file.write_text(
        "Absolutely love this product, works great\n"
        "\n"
        "ok\n"
        "Terrible customer service, very slow\n"
        "   The box arrived on time   \n",
        encoding="utf-8",
    )
    return file
