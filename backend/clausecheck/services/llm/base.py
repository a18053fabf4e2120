"""Capabilities the analysis pipeline needs from a language model."""

from __future__ import annotations

import abc

from ...schemas.analysis import ContractRiskReport


class TextExtractor(abc.ABC):
    """Recovers the text printed in an image."""

    name: str = "base"

    @abc.abstractmethod
    async def extract_text(self, image: bytes, mime_type: str) -> str:
        """Return all text found in *image*; an empty string when there is none."""


class RiskClassifier(abc.ABC):
    """Sorts contract text into the four consumer-risk categories."""

    name: str = "base"

    @abc.abstractmethod
    async def classify(self, text: str) -> ContractRiskReport:
        """Return a validated report for *text*."""
