from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from clausecheck.schemas.analysis import AnalysisOut, ContractRiskReport

REPORT = {
    "hiddenRisks": [{"title": "Unilateral changes", "description": "Terms may change.", "severity": "High"}],
    "moneyTraps": [{"title": "Setup fee", "description": "One-off fee.", "amount": "$25"}],
    "autoRenewTraps": [
        {"title": "Annual renewal", "description": "Renews yearly.", "cancellationDifficulty": "Phone only"}
    ],
    "dangerousClauses": [
        {"title": "Arbitration", "description": "No court.", "legalImpact": "Waives jury trial"}
    ],
}


def test_report_accepts_camel_case_and_normalizes_severity():
    report = ContractRiskReport.model_validate(REPORT)

    assert report.hidden_risks[0].severity == "high"
    assert report.auto_renew_traps[0].cancellation_difficulty == "Phone only"
    assert report.dangerous_clauses[0].legal_impact == "Waives jury trial"


def test_report_requires_every_category():
    data = {k: v for k, v in REPORT.items() if k != "moneyTraps"}

    with pytest.raises(ValidationError):
        ContractRiskReport.model_validate(data)


def test_report_rejects_unknown_severity():
    data = dict(REPORT, hiddenRisks=[{"title": "t", "description": "d", "severity": "critical"}])

    with pytest.raises(ValidationError):
        ContractRiskReport.model_validate(data)


def test_report_rejects_items_missing_required_fields():
    data = dict(REPORT, autoRenewTraps=[{"title": "t", "description": "d"}])

    with pytest.raises(ValidationError):
        ContractRiskReport.model_validate(data)


def test_optional_fields_may_be_absent():
    data = dict(
        REPORT,
        hiddenRisks=[{"title": "t", "description": "d"}],
        moneyTraps=[{"title": "t", "description": "d"}],
    )

    report = ContractRiskReport.model_validate(data)

    assert report.hidden_risks[0].severity is None
    assert report.money_traps[0].amount is None


def test_to_storage_uses_api_field_names():
    stored = ContractRiskReport.model_validate(REPORT).to_storage()

    assert set(stored) == {"hidden_risks", "money_traps", "auto_renew_traps", "dangerous_clauses"}
    assert stored["auto_renew_traps"][0]["cancellationDifficulty"] == "Phone only"
    assert stored["hidden_risks"][0]["severity"] == "high"


def test_empty_report_has_four_empty_lists():
    dumped = ContractRiskReport.empty().model_dump(by_alias=True)

    assert dumped == {"hiddenRisks": [], "moneyTraps": [], "autoRenewTraps": [], "dangerousClauses": []}


def _row(**overrides):
    values = dict(
        id="0b7f6f0e-6a59-4a4c-9d1e-2f4f0f7f5b1a",
        image_url="http://test/api/files/x.jpg",
        extracted_text="text",
        created_at=datetime(2026, 10, 19, 12, 30, 0, 123456),
        **ContractRiskReport.model_validate(REPORT).to_storage(),
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def test_analysis_out_treats_naive_timestamps_as_utc():
    out = AnalysisOut.from_row(_row())

    assert out.created_at == datetime(2026, 10, 19, 12, 30, 0, 123456, tzinfo=timezone.utc)


def test_analysis_out_converts_offsets_to_utc():
    local = datetime(2026, 10, 19, 14, 30, tzinfo=timezone(timedelta(hours=2)))

    out = AnalysisOut.from_row(_row(created_at=local))

    assert out.created_at == datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)
    assert out.created_at.utcoffset() == timedelta(0)


def test_analysis_out_serializes_camel_case():
    body = AnalysisOut.from_row(_row(extracted_text=None, money_traps=None)).model_dump(
        mode="json", by_alias=True
    )

    assert body["extractedText"] == ""
    assert body["moneyTraps"] == []
    assert body["imageUrl"] == "http://test/api/files/x.jpg"
    assert body["createdAt"].startswith("2026-10-19T12:30:00.123456")
    assert body["autoRenewTraps"][0]["cancellationDifficulty"] == "Phone only"
