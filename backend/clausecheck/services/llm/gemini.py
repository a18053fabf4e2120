from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from google import genai  # type: ignore
from google.genai import types  # type: ignore
from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...errors import ModelResponseError
from ...schemas.analysis import ContractRiskReport
from ..prompt_builder import EXTRACTION_INSTRUCTION, build_classification_prompt
from .base import RiskClassifier, TextExtractor

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STRING = genai.types.Schema(type=genai.types.Type.STRING)


def _item_schema(required: list[str], extra: dict[str, genai.types.Schema]) -> genai.types.Schema:
    return genai.types.Schema(
        type=genai.types.Type.OBJECT,
        required=["title", "description", *required],
        properties={"title": _STRING, "description": _STRING, **extra},
    )


def _list_of(item: genai.types.Schema) -> genai.types.Schema:
    return genai.types.Schema(type=genai.types.Type.ARRAY, items=item)


RISK_REPORT_SCHEMA = genai.types.Schema(
    type=genai.types.Type.OBJECT,
    required=["hiddenRisks", "moneyTraps", "autoRenewTraps", "dangerousClauses"],
    properties={
        "hiddenRisks": _list_of(
            _item_schema(
                ["severity"],
                {
                    "severity": genai.types.Schema(
                        type=genai.types.Type.STRING, enum=["low", "medium", "high"]
                    )
                },
            )
        ),
        "moneyTraps": _list_of(
            _item_schema([], {"amount": genai.types.Schema(type=genai.types.Type.STRING, nullable=True)})
        ),
        "autoRenewTraps": _list_of(
            _item_schema(["cancellationDifficulty"], {"cancellationDifficulty": _STRING})
        ),
        "dangerousClauses": _list_of(_item_schema(["legalImpact"], {"legalImpact": _STRING})),
    },
)


class GeminiClient(TextExtractor, RiskClassifier):
    """Text extraction and risk classification backed by one Gemini model."""

    name = "gemini"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.2,
        max_attempts: int = 1,
        client: Any | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise RuntimeError("GEMINI_API_KEY is not configured")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_attempts = max_attempts

    def _build_classification_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.temperature,
            response_mime_type="application/json",
            response_schema=RISK_REPORT_SCHEMA,
        )

    async def _with_retries(self, call: Callable[[], Awaitable[T]]) -> T:
        # max_attempts=1 means a single call and no backoff
        async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=8),
                retry=retry_if_exception_type(Exception),
                reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info("Retrying Gemini call, attempt %d", attempt.retry_state.attempt_number)
                return await call()
        raise RuntimeError("unreachable")

    async def extract_text(self, image: bytes, mime_type: str) -> str:
        async def _call() -> str:
            result = await self.client.aio.models.generate_content(
                model=self.model,
                contents=[
                    types.Content(
                        role="user",
                        parts=[
                            types.Part.from_bytes(data=image, mime_type=mime_type),
                            types.Part.from_text(text=EXTRACTION_INSTRUCTION),
                        ],
                    )
                ],
            )
            return result.text or ""

        return await self._with_retries(_call)

    async def classify(self, text: str) -> ContractRiskReport:
        config = self._build_classification_config()
        prompt = build_classification_prompt(text)

        async def _call() -> ContractRiskReport:
            result = await self.client.aio.models.generate_content(
                model=self.model,
                config=config,
                contents=[
                    types.Content(role="user", parts=[types.Part.from_text(text=prompt)])
                ],
            )
            return parse_risk_report(result.text)

        return await self._with_retries(_call)


def parse_risk_report(raw: str | None) -> ContractRiskReport:
    """Validate a structured-generation response before it is persisted."""
    if not raw:
        raise ModelResponseError("Gemini returned an empty classification")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Gemini returned non-JSON classification (%d chars)", len(raw))
        raise ModelResponseError("Gemini returned non-JSON classification") from exc
    try:
        return ContractRiskReport.model_validate(data)
    except ValidationError as exc:
        logger.error("Gemini classification failed validation: %s", exc.errors())
        raise ModelResponseError("Gemini classification does not match the schema") from exc
