from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

Severity = Literal["low", "medium", "high"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HiddenRisk(CamelModel):
    title: str
    description: str
    severity: Severity | None = None

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower() or None
        return value


class MoneyTrap(CamelModel):
    title: str
    description: str
    amount: str | None = None


class AutoRenewTrap(CamelModel):
    title: str
    description: str
    cancellation_difficulty: str


class DangerousClause(CamelModel):
    title: str
    description: str
    legal_impact: str


class ContractRiskReport(CamelModel):
    """The four risk categories produced by the classification stage.

    Every list is required; an empty list means the model found nothing in that
    category.
    """

    hidden_risks: list[HiddenRisk]
    money_traps: list[MoneyTrap]
    auto_renew_traps: list[AutoRenewTrap]
    dangerous_clauses: list[DangerousClause]

    @classmethod
    def empty(cls) -> ContractRiskReport:
        return cls(hidden_risks=[], money_traps=[], auto_renew_traps=[], dangerous_clauses=[])

    def to_storage(self) -> dict[str, list[dict[str, Any]]]:
        """Category lists keyed by column name, items in their API (camelCase) form."""
        return {
            "hidden_risks": [item.model_dump(by_alias=True) for item in self.hidden_risks],
            "money_traps": [item.model_dump(by_alias=True) for item in self.money_traps],
            "auto_renew_traps": [item.model_dump(by_alias=True) for item in self.auto_renew_traps],
            "dangerous_clauses": [item.model_dump(by_alias=True) for item in self.dangerous_clauses],
        }


class AnalysisOut(ContractRiskReport):
    id: str
    image_url: str
    extracted_text: str
    created_at: datetime

    @field_validator("extracted_text", mode="before")
    @classmethod
    def _never_null(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # SQLite drops tzinfo on read; stored values are always UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def from_row(cls, row: Any) -> AnalysisOut:
        return cls(
            id=row.id,
            image_url=row.image_url,
            extracted_text=row.extracted_text,
            hidden_risks=row.hidden_risks or [],
            money_traps=row.money_traps or [],
            auto_renew_traps=row.auto_renew_traps or [],
            dangerous_clauses=row.dangerous_clauses or [],
            created_at=row.created_at,
        )
