"""Tests for FeedbackAnalyzer — history, corrections and imports."""

from __future__ import annotations

from pathlib import Path

import pytest

from feedback_sentiment.analyzer import INITIAL_FEEDBACK, FeedbackAnalyzer
from feedback_sentiment.classifier import NaiveBayesClassifier
from feedback_sentiment.models import Category, Document


@pytest.fixture
def analyzer() -> FeedbackAnalyzer:
    return FeedbackAnalyzer()


@pytest.fixture
def empty_analyzer() -> FeedbackAnalyzer:
    return FeedbackAnalyzer(history=[])


class TestInitialState:
    """Seed data and read-only views."""

    def test_default_seed(self, analyzer):
        assert len(analyzer) == len(INITIAL_FEEDBACK)
        assert all(item.source == "Initial Data" for item in analyzer.items)
        assert analyzer.stats().to_dict() == {
            "positive": 2,
            "negative": 2,
            "neutral": 1,
            "total": 5,
        }

    def test_classifier_fitted_on_seed(self, analyzer):
        assert analyzer.classifier.model.total_document_count == 5

    def test_empty_history(self, empty_analyzer):
        assert len(empty_analyzer) == 0
        assert empty_analyzer.classify("anything").label == Category.POSITIVE

    def test_custom_classifier_is_used(self):
        clf = NaiveBayesClassifier()
        analyzer = FeedbackAnalyzer(classifier=clf)
        assert analyzer.classifier is clf
        assert clf.model.total_document_count == 5

    def test_seed_predictions(self, analyzer):
        assert analyzer.classify("I love the fast delivery").label == Category.POSITIVE
        assert analyzer.classify("terrible and rude, such a waste").label == Category.NEGATIVE

    def test_items_is_a_copy(self, analyzer):
        analyzer.items.clear()
        assert len(analyzer) == 5

    def test_get_unknown_id(self, analyzer):
        with pytest.raises(KeyError):
            analyzer.get(999)

    def test_categorized(self, analyzer):
        groups = analyzer.categorized()
        assert list(groups) == [Category.POSITIVE, Category.NEGATIVE, Category.NEUTRAL]
        assert len(groups[Category.NEUTRAL]) == 1
        assert all(item.label == Category.NEGATIVE for item in groups[Category.NEGATIVE])


class TestAdd:
    """Saving new feedback."""

    def test_add_uses_prediction(self, analyzer):
        expected = analyzer.classify("Love the features").label
        item = analyzer.add("Love the features")
        assert item.label == expected
        assert analyzer.items[0] is item

    def test_add_with_explicit_label(self, analyzer):
        item = analyzer.add("Love the features", label="Negative")
        assert item.label == Category.NEGATIVE
        assert analyzer.classifier.model.document_count(Category.NEGATIVE) == 3

    def test_add_refits(self, empty_analyzer):
        empty_analyzer.add("checkout crashes constantly", label=Category.NEGATIVE)
        assert empty_analyzer.classifier.model.total_document_count == 1
        assert "crashes" in empty_analyzer.classifier.vocabulary

    def test_add_blank_raises(self, analyzer):
        with pytest.raises(ValueError, match="must not be empty"):
            analyzer.add("   ")

    def test_add_invalid_label_raises(self, analyzer):
        with pytest.raises(ValueError):
            analyzer.add("fine", label="Angry")
        assert len(analyzer) == 5

    def test_ids_are_unique(self, analyzer):
        first = analyzer.add("first feedback here")
        second = analyzer.add("second feedback here")
        ids = [item.id for item in analyzer.items]
        assert len(ids) == len(set(ids))
        assert second.id == first.id + 1


class TestCorrect:
    """Corrections feed back into the model."""

    def test_correction_changes_future_predictions(self, empty_analyzer):
        crash = empty_analyzer.add("checkout crashes constantly", label=Category.NEGATIVE)
        empty_analyzer.add("delivery was wonderful", label=Category.POSITIVE)
        assert empty_analyzer.classify("checkout crashes").label == Category.NEGATIVE

        empty_analyzer.correct(crash.id, Category.POSITIVE)
        assert empty_analyzer.classify("checkout crashes").label == Category.POSITIVE

    def test_correct_updates_counts(self, analyzer):
        neutral = analyzer.categorized()[Category.NEUTRAL][0]
        analyzer.correct(neutral.id, "Positive")
        model = analyzer.classifier.model
        assert model.document_count(Category.NEUTRAL) == 0
        assert model.document_count(Category.POSITIVE) == 3
        assert analyzer.stats().neutral == 0

    def test_correct_same_label_is_noop(self, analyzer):
        item = analyzer.items[0]
        model_before = analyzer.classifier.model
        analyzer.correct(item.id, item.label)
        assert analyzer.classifier.model is model_before

    def test_correct_unknown_id(self, analyzer):
        with pytest.raises(KeyError):
            analyzer.correct(42, Category.POSITIVE)

    def test_correct_invalid_label(self, analyzer):
        with pytest.raises(ValueError):
            analyzer.correct(1, "Mixed")

    def test_training_corpus_tracks_history(self, analyzer):
        item = analyzer.add("meh, could be better", label=Category.NEUTRAL)
        analyzer.correct(item.id, Category.NEGATIVE)
        assert Document("meh, could be better", Category.NEGATIVE) in analyzer.documents


class TestImport:
    """Bulk import of unlabelled lines."""

    def test_import_lines_labels_with_pre_import_model(self, analyzer):
        lines = ["I love the new features so much", "Broken again, waste of money"]
        expected = [analyzer.classify(line).label for line in lines]
        imported = analyzer.import_lines(lines)
        assert [item.label for item in imported] == expected
        assert all(item.source == "Imported File" for item in imported)

    def test_import_preserves_file_order_at_front(self, analyzer):
        imported = analyzer.import_lines(["first imported line", "second imported line"])
        assert analyzer.items[:2] == imported
        assert len(analyzer) == 7

    def test_import_skips_blank_lines(self, analyzer):
        imported = analyzer.import_lines(["", "   ", "real feedback line"])
        assert len(imported) == 1

    def test_import_nothing(self, analyzer):
        model_before = analyzer.classifier.model
        assert analyzer.import_lines([]) == []
        assert analyzer.classifier.model is model_before

    def test_import_file(self, analyzer, feedback_text_file: Path):
        imported = analyzer.import_file(feedback_text_file)
        assert [item.text for item in imported] == [
            "Absolutely love this product, works great",
            "Terrible customer service, very slow",
            "The box arrived on time",
        ]
        assert analyzer.classifier.model.total_document_count == 8

    def test_import_missing_file(self, analyzer, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            analyzer.import_file(tmp_path / "missing.txt")


class TestAddExamples:
    """Already-labelled examples (e.g. synthetic data)."""

    def test_adds_valid_examples(self, analyzer):
        added = analyzer.add_examples([
            Document("Superb onboarding experience", Category.POSITIVE),
            Document("Refund took weeks", "Negative"),
        ])
        assert [item.label for item in added] == [Category.POSITIVE, Category.NEGATIVE]
        assert all(item.source == "AI Generated" for item in added)
        assert len(analyzer) == 7

    def test_skips_invalid(self, analyzer, caplog):
        with caplog.at_level("WARNING"):
            added = analyzer.add_examples([
                Document("Weird label", "Sarcastic"),
                Document("   ", Category.NEUTRAL),
                Document("Fine I guess", Category.NEUTRAL),
            ])
        assert len(added) == 1
        assert "unknown label" in caplog.text
