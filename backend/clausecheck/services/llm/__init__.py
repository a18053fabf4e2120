"""Model factory: returns the extractor and classifier for the configured provider."""

from __future__ import annotations

import logging

from ...config import Settings
from .base import RiskClassifier, TextExtractor
from .fake import FakeTextExtractor, KeywordRiskClassifier

logger = logging.getLogger(__name__)

__all__ = [
    "RiskClassifier",
    "TextExtractor",
    "FakeTextExtractor",
    "KeywordRiskClassifier",
    "build_models",
]


def build_models(settings: Settings) -> tuple[TextExtractor, RiskClassifier]:
    """Return ``(extractor, classifier)`` for ``settings.llm_provider``.

    Raises ``RuntimeError`` when the Gemini provider is selected without an API key.
    """
    if settings.llm_provider == "fake":
        logger.warning("LLM_PROVIDER=fake: contract analysis uses keyword rules, not Gemini")
        return FakeTextExtractor(), KeywordRiskClassifier()

    from .gemini import GeminiClient

    client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        temperature=settings.gemini_temperature,
        max_attempts=settings.gemini_max_attempts,
    )
    return client, client
