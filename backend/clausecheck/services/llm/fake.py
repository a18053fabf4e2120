"""Deterministic stand-ins for the Gemini model, used in tests and offline development."""

from __future__ import annotations

import re

from ...schemas.analysis import (
    AutoRenewTrap,
    ContractRiskReport,
    DangerousClause,
    HiddenRisk,
    MoneyTrap,
)
from .base import RiskClassifier, TextExtractor

_AMOUNT = re.compile(r"(?:[$€£]\s?\d[\d,]*(?:\.\d+)?|\d[\d,]*(?:\.\d+)?\s?(?:USD|EUR|GBP))")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class FakeTextExtractor(TextExtractor):
    """Treats the image bytes as encoded text.

    With *text* set, that value is returned for every image instead.
    """

    name = "fake"

    def __init__(self, text: str | None = None) -> None:
        self.text = text

    async def extract_text(self, image: bytes, mime_type: str) -> str:
        if self.text is not None:
            return self.text
        for enc in ["utf-8", "utf-16", "cp1251", "latin-1"]:
            try:
                return image.decode(enc)
            except UnicodeDecodeError:
                continue
        return image.decode("utf-8", errors="ignore")


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_END.split(text) if s.strip()]


def _matches(sentence: str, keywords: tuple[str, ...]) -> bool:
    lowered = sentence.lower()
    return any(k in lowered for k in keywords)


AUTO_RENEW_KEYWORDS = ("automatically renew", "auto-renew", "auto renew", "renews automatically")
FEE_KEYWORDS = ("fee", "charge", "penalty", "surcharge")
DANGEROUS_KEYWORDS = ("arbitration", "waive", "non-compete", "class action", "indemnify")
HIDDEN_RISK_KEYWORDS = ("not liable", "without notice", "at our sole discretion", "may change")


class KeywordRiskClassifier(RiskClassifier):
    """Sentence-level keyword rules covering the four categories."""

    name = "fake"

    async def classify(self, text: str) -> ContractRiskReport:
        report = ContractRiskReport.empty()
        for sentence in _sentences(text):
            if _matches(sentence, AUTO_RENEW_KEYWORDS):
                hard = _matches(sentence, ("in writing", "by mail", "in person", "days before"))
                report.auto_renew_traps.append(
                    AutoRenewTrap(
                        title="Automatic renewal",
                        description=sentence,
                        cancellation_difficulty="hard" if hard else "moderate",
                    )
                )
            if _matches(sentence, FEE_KEYWORDS):
                amount = _AMOUNT.search(sentence)
                report.money_traps.append(
                    MoneyTrap(
                        title="Additional charge",
                        description=sentence,
                        amount=amount.group(0) if amount else None,
                    )
                )
            if _matches(sentence, DANGEROUS_KEYWORDS):
                report.dangerous_clauses.append(
                    DangerousClause(
                        title="Restrictive legal term",
                        description=sentence,
                        legal_impact="Limits the consumer's legal remedies",
                    )
                )
            if _matches(sentence, HIDDEN_RISK_KEYWORDS):
                report.hidden_risks.append(
                    HiddenRisk(title="One-sided term", description=sentence, severity="medium")
                )
        return report
