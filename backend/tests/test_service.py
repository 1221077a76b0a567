"""End-to-end tests for the validation service."""

import json
import logging

import pytest

from reconciler import AggregationInconsistency, ValidationService, validate_documents
from reconciler.observability import RunLog, configure_logging
from reconciler.schemas.report import CONTRACT_VERSION, RiskLevel


def _run_entry(caplog):
    records = [r for r in caplog.records if r.name == "recon.run"]
    return json.loads(records[-1].getMessage())


@pytest.fixture
def service(settings, registry):
    return ValidationService(settings, registry)


class TestValidationService:
    """Tests for the full validation run."""

    def test_clean_shipment(self, service, shipment_set):
        report = service.validate(shipment_set)
        assert report.metrics.risk_level == RiskLevel.LOW
        assert all(result.passed for result in report.rule_results)
        assert [r.rule_name for r in report.rule_results] == [
            "weight_consistency",
            "package_count_consistency",
            "date_sequence",
            "financial_consistency",
            "code_mapping",
        ]
        assert [s.document_id for s in report.documents_summary] == ["BOE-1", "INV-1", "AWB-1"]

    def test_json_contract(self, service, shipment_set):
        payload = service.validate(shipment_set).to_json_dict()
        assert payload["contractVersion"] == CONTRACT_VERSION == "1.0"
        for key in ("documentsSummary", "fieldComparisons", "ruleResults", "criticalDiscrepancies", "metrics"):
            assert key in payload
        record = payload["fieldComparisons"][0]
        assert "matchStatus" in record
        assert "sourceDocumentId" in record["values"][0]
        json.dumps(payload)

    def test_input_order_does_not_matter(self, service, invoice, air_waybill, bill_of_entry):
        first = service.validate([invoice, air_waybill, bill_of_entry]).to_json_dict()
        second = service.validate([bill_of_entry, invoice, air_waybill]).to_json_dict()
        assert first == second

    def test_dict_input(self, service):
        report = service.validate([
            {
                "documentId": "INV-7",
                "documentType": "commercial_invoice",
                "fields": {"invoiceNumber": "A-100", "grossWeight": "10 kg"},
            },
            {
                "documentId": "AWB-7",
                "documentType": "airway_bill",
                "fields": {"awbNumber": "176-12345675", "grossWeight": "10.0 KGS"},
            },
        ])
        types = {s.document_id: s.document_type.value for s in report.documents_summary}
        assert types == {"INV-7": "invoice", "AWB-7": "air_waybill"}
        weight = next(r for r in report.field_comparisons if r.group_id == "weight.gross")
        assert weight.match_status.value == "semantic"

    def test_duplicate_document_ids(self, service, invoice):
        with pytest.raises(AggregationInconsistency):
            service.validate([invoice, invoice])

    def test_empty_set(self, service):
        report = service.validate([])
        assert report.field_comparisons == []
        assert report.metrics.overall_consistency == 0.0
        assert report.metrics.risk_level == RiskLevel.LOW
        assert any(r.kind == "missing_documents" for r in report.recommendations)

    def test_high_risk_logged(self, service, caplog):
        documents = [
            {"documentId": "INV-1", "documentType": "invoice", "fields": {
                "invoiceNumber": "A-1", "grossWeight": "20 kg", "netWeight": "30 kg", "hsnCode": "73261990",
            }},
            {"documentId": "PL-1", "documentType": "packing_list", "fields": {
                "invoiceNumber": "B-2", "grossWeight": "90 kg", "hsnCode": "8471.30.00",
            }},
        ]
        with caplog.at_level(logging.WARNING, logger="recon.service"):
            report = service.validate(documents)
        assert report.metrics.risk_level == RiskLevel.HIGH
        assert "High-risk document set" in caplog.text

    def test_module_entry_point(self, settings, shipment_set):
        report = validate_documents(shipment_set, settings)
        assert report.contract_version == "1.0"


class TestObservability:
    """Tests for logging setup and the run log."""

    def test_run_log_emits_json(self, service, shipment_set, caplog):
        with caplog.at_level(logging.INFO, logger="recon.run"):
            service.validate(shipment_set)
        entry = _run_entry(caplog)
        assert entry["status"] == "ok"
        assert entry["documents"] == 3
        assert entry["risk_level"] == "low"
        assert "run_id" in entry
        assert "duration_ms" in entry

    def test_run_log_marks_failures(self, caplog):
        with caplog.at_level(logging.INFO, logger="recon.run"):
            with pytest.raises(ValueError):
                with RunLog(2):
                    raise ValueError("boom")
        entry = _run_entry(caplog)
        assert entry["status"] == "failed"
        assert entry["error"] == "ValueError"

    def test_configure_logging_sets_package_level(self, settings):
        package_logger = logging.getLogger("recon")
        previous = package_logger.level
        settings.log_level = "debug"
        try:
            configure_logging(settings)
            assert package_logger.level == logging.DEBUG
            assert logging.getLogger("recon.run").getEffectiveLevel() == logging.DEBUG
        finally:
            package_logger.setLevel(previous)

    def test_validation_leaves_logging_config_alone(self, service, shipment_set):
        package_logger = logging.getLogger("recon")
        previous = package_logger.level
        service.validate(shipment_set)
        assert package_logger.level == previous
