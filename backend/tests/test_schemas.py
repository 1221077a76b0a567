"""Tests for extraction input schemas."""

import pytest
from pydantic import ValidationError

from reconciler import config
from reconciler.schemas.extraction import DocumentExtraction, DocumentType, ExtractedField


class TestDocumentExtraction:
    """Tests for nested-field flattening and document type coercion."""

    def test_direct_construction_uses_configured_default(self, monkeypatch):
        monkeypatch.setattr(config.settings, "default_field_confidence", 0.7)
        doc = DocumentExtraction(document_id="AWB-1", fields={"shipment": {"grossWeight": "37 kg"}})
        assert doc.fields["shipment.grossWeight"].confidence == 0.7

    def test_from_nested_explicit_default(self, monkeypatch):
        monkeypatch.setattr(config.settings, "default_field_confidence", 0.7)
        doc = DocumentExtraction.from_nested("INV-1", "invoice", {
            "invoiceNumber": "HFKD-0217",
            "commercial": {"invoiceValue": {"amount": 1989.0, "currency": "GBP", "confidence": 0.95}},
        }, default_confidence=0.5)
        assert doc.fields["invoiceNumber"].confidence == 0.5
        value = doc.fields["commercial.invoiceValue"]
        assert value.confidence == 0.95
        assert value.unit == "GBP"

    def test_from_nested_falls_back_to_configured_default(self, monkeypatch):
        monkeypatch.setattr(config.settings, "default_field_confidence", 0.8)
        doc = DocumentExtraction.from_nested("INV-1", DocumentType.INVOICE, {"invoiceNumber": "A-1"})
        assert doc.fields["invoiceNumber"].confidence == 0.8

    def test_validation_context_default(self):
        doc = DocumentExtraction.model_validate(
            {"documentId": "PL-1", "documentType": "packing", "fields": {"Gross Weight": "37 kg"}},
            context={"default_confidence": 0.6},
        )
        assert doc.document_type == DocumentType.PACKING_LIST
        assert doc.fields["Gross Weight"].confidence == 0.6

    def test_null_leaves_dropped(self):
        doc = DocumentExtraction.from_nested("AWB-1", "awb", {
            "grossWeight": None,
            "netWeight": {"value": None, "confidence": 0.9},
            "pieces": "2",
        })
        assert list(doc.fields) == ["pieces"]

    def test_extracted_field_kept_as_given(self):
        field = ExtractedField(value="37 kg", confidence=0.4)
        doc = DocumentExtraction(document_id="AWB-1", fields={"Gross Weight": field})
        assert doc.fields["Gross Weight"] == field

    def test_document_type_aliases(self):
        assert DocumentExtraction(document_id="A", document_type="Airway Bill").document_type == (
            DocumentType.AIR_WAYBILL
        )
        assert DocumentExtraction(document_id="B", document_type="manifest").document_type == DocumentType.UNKNOWN

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            ExtractedField(value="x", confidence=1.5)
