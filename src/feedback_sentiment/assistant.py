"""
LLM-backed feedback assistant.
Uses OpenAI or Anthropic models to draft reports and replies, give a second
opinion on a classification, generate synthetic examples and answer questions
about the feedback history. Nothing here influences the Naive Bayes model.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from tenacity import retry, stop_after_attempt, wait_exponential

from .config import Settings, get_settings
from .models import Category, Document, FeedbackItem
from .prompts import (
    ANALYST_SYSTEM_PROMPT,
    CONSULTANT_SYSTEM_PROMPT,
    GENERATOR_SYSTEM_PROMPT,
    INSIGHT_REPORT_PROMPT,
    SENTIMENT_EXPERT_SYSTEM_PROMPT,
    SMART_REPLY_PROMPT,
    SYNTHETIC_DATA_PROMPT,
    VERIFY_SENTIMENT_PROMPT,
)

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated."

_FIELD_RE = re.compile(r"^\s*(?:[-•]\s*)?(sentiment|confidence|reasoning)\s*:\s*(.+?)\s*$", re.IGNORECASE)


@dataclass
class SentimentVerification:
    """Parsed second opinion from the LLM."""

    sentiment: Optional[Category]
    confidence: Optional[str]
    reasoning: Optional[str]
    raw: str

    def agrees_with(self, label: Category) -> bool:
        return self.sentiment == label

    def to_dict(self) -> dict:
        return {
            "sentiment": self.sentiment.value if self.sentiment else None,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


class FeedbackAssistant:
    """
    Generative-language helper for the feedback dashboard.
    Supports both OpenAI and Anthropic models.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        settings: Optional[Settings] = None,
        client: Any = None,
    ):
        """
        Initialize the assistant.

        Args:
            model: Model name (gpt-4o-mini, claude-3-5-sonnet-latest, etc.).
                Defaults to the configured model.
            settings: Settings to read API keys from (defaults to the environment).
            client: Pre-built API client; skips key lookup when given.
        """
        if settings is None:
            settings = get_settings()
        if model:
            settings = settings.model_copy(update={"model": model})
        self.settings = settings
        self.model = settings.model
        self.is_anthropic = settings.is_anthropic
        self.client = client if client is not None else self._init_client()

    def _init_client(self):
        """Initialize the appropriate API client."""
        api_key = self.settings.api_key
        if self.is_anthropic:
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not found in environment")

            from anthropic import Anthropic

            return Anthropic(api_key=api_key)

        if not api_key:
            raise ValueError("OPENAI_API_KEY not found in environment")

        from openai import OpenAI

        return OpenAI(api_key=api_key)

    @retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=10))
    def _call_llm(self, prompt: str, system_prompt: str = "") -> str:
        """
        Make a call to the LLM with retry logic.

        Returns:
            The model's response text
        """
        logger.debug("Calling %s (%d prompt chars)", self.model, len(prompt))
        if self.is_anthropic:
            kwargs = {"system": system_prompt} if system_prompt else {}
            response = self.client.messages.create(
                model=self.model,
                max_tokens=1024,
                messages=[{"role": "user", "content": prompt}],
                **kwargs,
            )
            text = response.content[0].text if response.content else None
        else:
            messages = [{"role": "user", "content": prompt}]
            if system_prompt:
                messages.insert(0, {"role": "system", "content": system_prompt})
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=0.3,
                max_tokens=1024,
            )
            text = response.choices[0].message.content if response.choices else None
        return text or NO_RESPONSE

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def insight_report(self, items: Iterable[FeedbackItem]) -> str:
        """Trend, top complaints, top praise and one recommendation."""
        context = _data_context(items, self.settings.report_items)
        prompt = INSIGHT_REPORT_PROMPT.format(data_context=context)
        return self._call_llm(prompt, CONSULTANT_SYSTEM_PROMPT)

    def draft_reply(self, item: FeedbackItem) -> str:
        """Customer-service reply to a single piece of feedback."""
        prompt = SMART_REPLY_PROMPT.format(text=item.text, label=item.label.value)
        return self._call_llm(prompt)

    def ask(self, question: str, items: Iterable[FeedbackItem]) -> str:
        """Answer a question grounded on the feedback history."""
        context = _data_context(items, self.settings.chat_items)
        return self._call_llm(question, ANALYST_SYSTEM_PROMPT.format(data_context=context))

    def verify_sentiment(self, text: str) -> SentimentVerification:
        """Ask the LLM for an independent sentiment read of ``text``."""
        response = self._call_llm(
            VERIFY_SENTIMENT_PROMPT.format(text=text), SENTIMENT_EXPERT_SYSTEM_PROMPT
        )
        return parse_verification(response)

    def generate_examples(self, count: int = 5) -> list[Document]:
        """Synthetic labelled reviews. Unusable output yields an empty list."""
        response = self._call_llm(
            SYNTHETIC_DATA_PROMPT.format(count=count), GENERATOR_SYSTEM_PROMPT
        )
        return parse_examples(response)


def _data_context(items: Iterable[FeedbackItem], limit: int) -> str:
    selected = []
    for i, item in enumerate(items):
        if i >= limit:
            break
        selected.append({"id": item.id, "text": item.text, "label": item.label.value})
    return json.dumps(selected)


def _strip_code_fences(response: str) -> str:
    return re.sub(r"```(?:json)?", "", response).strip()


def parse_examples(response: str) -> list[Document]:
    """Parse a JSON array of ``{"text", "label"}`` objects into documents."""
    try:
        data = json.loads(_strip_code_fences(response))
    except json.JSONDecodeError:
        logger.warning("Could not parse generated examples as JSON")
        return []

    if not isinstance(data, list):
        return []

    documents = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        text = entry.get("text")
        try:
            label = Category(entry.get("label"))
        except ValueError:
            logger.warning("Dropping generated example with label %r", entry.get("label"))
            continue
        if isinstance(text, str) and text.strip():
            documents.append(Document(text=text.strip(), label=label))
    return documents


def parse_verification(response: str) -> SentimentVerification:
    """Parse ``Sentiment:``/``Confidence:``/``Reasoning:`` lines."""
    fields: dict[str, str] = {}
    for line in response.splitlines():
        match = _FIELD_RE.match(line.replace("*", ""))
        if match:
            fields[match.group(1).lower()] = match.group(2).strip("[] ")

    sentiment = None
    if "sentiment" in fields:
        try:
            sentiment = Category(fields["sentiment"].strip("[] .!").capitalize())
        except ValueError:
            sentiment = None

    return SentimentVerification(
        sentiment=sentiment,
        confidence=fields.get("confidence"),
        reasoning=fields.get("reasoning"),
        raw=response,
    )
