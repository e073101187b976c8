"""Feedback Sentiment -- Naive Bayes feedback classification with user corrections."""

__version__ = "0.1.0"

from .analyzer import INITIAL_FEEDBACK, FeedbackAnalyzer
from .classifier import (
    CATEGORIES,
    NaiveBayesClassifier,
    SentimentModel,
    fit_model,
    predict,
    tokenize,
)
from .evaluation import (
    ClassificationMetrics,
    compute_metrics,
    cross_validate,
    out_of_fold_metrics,
    stratified_k_fold,
)
from .models import Category, Document, FeedbackItem, Prediction, SentimentStats
from .parsers import ParsedFeedback, get_parser, parse_feedback_file

__all__ = [
    # Classifier
    "CATEGORIES",
    "NaiveBayesClassifier",
    "SentimentModel",
    "fit_model",
    "predict",
    "tokenize",
    # Evaluation
    "ClassificationMetrics",
    "compute_metrics",
    "cross_validate",
    "out_of_fold_metrics",
    "stratified_k_fold",
    # History
    "FeedbackAnalyzer",
    "INITIAL_FEEDBACK",
    # Models
    "Category",
    "Document",
    "FeedbackItem",
    "Prediction",
    "SentimentStats",
    # Parsers
    "ParsedFeedback",
    "get_parser",
    "parse_feedback_file",
]
