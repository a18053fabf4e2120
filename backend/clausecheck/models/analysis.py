from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

JsonList = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(Base):
    """One persisted contract analysis. Rows are inserted once and never updated."""

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_key: Mapped[str] = mapped_column(Text, nullable=False)
    extracted_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    hidden_risks: Mapped[list[dict[str, Any]]] = mapped_column(JsonList, nullable=False, default=list)
    money_traps: Mapped[list[dict[str, Any]]] = mapped_column(JsonList, nullable=False, default=list)
    auto_renew_traps: Mapped[list[dict[str, Any]]] = mapped_column(
        JsonList, nullable=False, default=list
    )
    dangerous_clauses: Mapped[list[dict[str, Any]]] = mapped_column(
        JsonList, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False, index=True
    )
