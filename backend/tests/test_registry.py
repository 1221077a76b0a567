"""Tests for the canonical field registry."""

import pytest

from reconciler.errors import RegistryMiss
from reconciler.registry.field_groups import CanonicalFieldGroup
from reconciler.registry.registry import FieldRegistry, candidate_keys, label_key
from reconciler.schemas.comparison import FieldCategory, ToleranceWindow, ValueKind
from reconciler.schemas.extraction import DocumentType


class TestLabelKeys:
    """Tests for label key normalization."""

    def test_separators_and_case(self):
        assert label_key("Invoice No.") == "invoice no"
        assert label_key("gross_weight") == "gross weight"

    def test_camel_case(self):
        assert label_key("invoiceNumber") == "invoice number"
        assert label_key("HSNCode") == "hsn code"

    def test_dotted_candidates(self):
        keys = candidate_keys("shipment.grossWeight.value")
        assert keys[-1] == ("gross weight", False)
        assert ("shipment gross weight", True) in keys

    def test_wrapper_prefix_keeps_overrides(self):
        assert ("number", True) in candidate_keys("identifiers.number")
        assert ("number", True) in candidate_keys("header.document.number")

    def test_bare_segment_dropped_behind_other_prefix(self):
        keys = [key for key, _ in candidate_keys("container.number")]
        assert "number" not in keys

    def test_count_unit_stays_in_label(self):
        assert [key for key, _ in candidate_keys("Total PCS")] == ["total pcs"]
        assert ("gross wt", False) in candidate_keys("Gross Wt (KGS)")


class TestResolve:
    """Tests for label resolution per document type."""

    def test_global_alias(self, registry):
        assert registry.resolve("Invoice No.", DocumentType.INVOICE) == "invoice.number"
        assert registry.resolve("MAWB No", DocumentType.AIR_WAYBILL) == "awb.number"

    def test_nested_paths(self, registry):
        assert registry.resolve("shipment.grossWeight.value", DocumentType.AIR_WAYBILL) == "weight.gross"
        assert registry.resolve("parties.shipper.name", DocumentType.INVOICE) == "shipper.name"
        assert registry.resolve("customs.duties.totalDuty", DocumentType.BILL_OF_ENTRY) == "duty.total"

    def test_scoped_override(self, registry):
        assert registry.resolve("Date", DocumentType.INVOICE) == "date.invoice"
        assert registry.resolve("Date", DocumentType.AIR_WAYBILL) == "date.shipment"
        assert registry.resolve("Date", DocumentType.BILL_OF_ENTRY) == "date.customs"

    def test_same_label_different_group(self, registry):
        assert registry.resolve("Quantity", DocumentType.PACKING_LIST) == "package.count"
        assert registry.resolve("Quantity", DocumentType.INVOICE) == "product.quantity"

    def test_unit_suffix_ignored(self, registry):
        assert registry.resolve("Gross Wt. (KGS)", DocumentType.PACKING_LIST) == "weight.gross"

    def test_prefixed_generic_labels_not_captured(self, registry):
        assert registry.resolve("container.number", DocumentType.INVOICE) is None
        assert registry.resolve("payment.date", DocumentType.INVOICE) is None
        assert registry.resolve("Total PCS", DocumentType.INVOICE) == "package.count"

    def test_wrapper_prefixed_overrides(self, registry):
        assert registry.resolve("identifiers.number", DocumentType.INVOICE) == "invoice.number"
        assert registry.resolve("dates.date", DocumentType.AIR_WAYBILL) == "date.shipment"

    def test_unit_stripped_label_skips_overrides(self, registry):
        assert registry.resolve("Total KG", DocumentType.INVOICE) is None

    def test_unknown_label(self, registry):
        assert registry.resolve("Favourite Colour", DocumentType.INVOICE) is None
        assert registry.resolve("Date", DocumentType.UNKNOWN) is None

    def test_lookup_raises_registry_miss(self, registry):
        with pytest.raises(RegistryMiss) as exc_info:
            registry.lookup("Favourite Colour", DocumentType.INVOICE)
        assert exc_info.value.label == "Favourite Colour"
        assert exc_info.value.document_type == "invoice"


class TestRegistration:
    """Tests for schema registration and configuration overrides."""

    def test_required_groups(self, registry):
        assert "invoice.number" in registry.required_groups(DocumentType.INVOICE)
        assert registry.required_groups(DocumentType.UNKNOWN) == ()

    def test_register_document_type_leaves_groups_untouched(self, registry):
        before = {g.group_id: g for g in registry.groups()}
        registry.register_document_type(
            DocumentType.UNKNOWN,
            required_groups=["weight.gross"],
            overrides={"Kilos": "weight.gross"},
        )
        assert registry.resolve("Kilos", DocumentType.UNKNOWN) == "weight.gross"
        assert registry.required_groups(DocumentType.UNKNOWN) == ("weight.gross",)
        assert {g.group_id: g for g in registry.groups()} == before

    def test_register_unknown_group_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.register_document_type(DocumentType.UNKNOWN, required_groups=["no.such.group"])

    def test_conflicting_alias_rejected(self, registry):
        clash = CanonicalFieldGroup(
            group_id="weight.chargeable",
            kind=ValueKind.NUMBER,
            category=FieldCategory.SHIPMENT,
            aliases=frozenset({"Gross Weight"}),
        )
        with pytest.raises(ValueError):
            registry.register_group(clash)

    def test_tolerance_override(self):
        registry = FieldRegistry(tolerance_overrides={"weight.gross": ToleranceWindow(ratio=0.1)})
        assert registry.tolerance_for("weight.gross").ratio == 0.1
        assert registry.tolerance_for("weight.net").ratio == 0.02

    def test_tolerance_override_unknown_group(self):
        with pytest.raises(ValueError):
            FieldRegistry(tolerance_overrides={"no.such.group": ToleranceWindow(ratio=0.1)})
