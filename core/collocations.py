"""Collocation analysis using the Claude API.

``CollocationAnalyzer.analyze(word)`` asks Claude for the statistically
significant collocates of a word, each with a frequency and example
sentences, and returns them as validated ``Collocation`` objects.

The Anthropic client is lazy-initialised so that the class can be
instantiated in tests without requiring a live API key.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import anthropic
from pydantic import ValidationError

from core.errors import EmptyWordError, ServiceError
from core.models import Collocation, CollocationAnalysis

if TYPE_CHECKING:
    from config.settings import Settings

logger = logging.getLogger(__name__)

#: System prompt for the collocation call.
_COLLOCATION_SYSTEM = (
    "You are a linguistic expert. Find statistically significant and "
    "contextually relevant collocations for the word you are given. "
    "Return only JSON, no commentary."
)

_COLLOCATION_PROMPT = (
    "Find collocations for the word: {word}\n\n"
    "Each collocation must have:\n"
    "- collocate: the collocate.\n"
    "- frequency: the frequency of the collocate with the input word.\n"
    "- exampleSentences: example sentences using the collocate with the input word.\n\n"
    "Make sure that the example sentences clearly show how the words are used together."
)


class CollocationAnalyzer:
    """Looks up collocations for a word through the Claude API."""

    def __init__(self, settings: Settings) -> None:
        """Initialise the analyzer.

        Args:
            settings: Application configuration.
        """
        self.settings = settings
        self._client: object = None  # Lazy-initialised anthropic.Anthropic

    @property
    def client(self) -> object:
        """Lazy-initialise and return the Anthropic SDK client."""
        if self._client is None:
            self._client = anthropic.Anthropic(api_key=self.settings.anthropic_api_key)
        return self._client

    def analyze(self, word: str) -> list[Collocation]:
        """Return the collocations Claude finds for *word*.

        An empty list is a valid answer: the word may simply have none.

        Args:
            word: The word to look up.

        Returns:
            The collocations, in the order Claude listed them.

        Raises:
            EmptyWordError: If *word* is blank.
            ServiceError: If the API call fails or its output does not match
                the ``CollocationAnalysis`` schema.
        """
        word = word.strip()
        if not word:
            raise EmptyWordError("Word must not be empty.")

        try:
            response = self.client.messages.parse(
                model=self.settings.collocation_model,
                max_tokens=2000,
                system=_COLLOCATION_SYSTEM,
                messages=[
                    {"role": "user", "content": _COLLOCATION_PROMPT.format(word=word)}
                ],
                output_format=CollocationAnalysis,
            )
        except anthropic.APIError as exc:
            raise ServiceError(exc.message) from exc
        except ValidationError as exc:
            raise ServiceError(f"Unexpected response format: {exc}") from exc

        analysis = response.parsed_output
        if analysis is None:
            raise ServiceError("The collocation service returned no structured output.")

        logger.info("Found %d collocations for word=%r", len(analysis.collocations), word)
        return analysis.collocations

    __call__ = analyze
