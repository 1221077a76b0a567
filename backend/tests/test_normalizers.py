"""Tests for value normalizers: pure functions, no registry."""

from datetime import date

import pytest

from reconciler.errors import AmbiguousDate, InvalidCodeFormat, UnparseableDate, UnparseableNumber
from reconciler.normalizer.normalizers import (
    NormalizationContext,
    display_value,
    normalize,
    normalize_field,
    normalize_identifier,
    normalize_text,
    parse_address,
    parse_date,
    parse_decimal,
    parse_money,
    parse_quantity,
)
from reconciler.schemas.comparison import ValueKind
from reconciler.schemas.extraction import DocumentType


class TestNormalizeText:
    """Tests for free-text and identifier normalization."""

    def test_case_and_whitespace(self):
        assert normalize_text("  Global   TRADERS\nPvt Ltd ") == "global traders pvt ltd"

    def test_punctuation_stripped(self):
        assert normalize_text("Global Traders Pvt. Ltd.") == "global traders pvt ltd"
        assert normalize_text("R.A. Labone & Co") == "ra labone co"

    def test_identifier_keeps_alphanumerics(self):
        assert normalize_identifier("098-80828764") == "09880828764"
        assert normalize_identifier("hfkd 0217") == "HFKD0217"


class TestParseQuantity:
    """Tests for number+unit splitting and unit conversion."""

    def test_glued_unit(self):
        assert parse_quantity("37.000KGS") == (37.0, "kg")

    def test_unit_synonyms(self):
        assert parse_quantity("37KG") == (37.0, "kg")
        assert parse_quantity("2 cartons") == (2.0, "ctn")
        assert parse_quantity("5 Pieces") == (5.0, "pcs")
        assert parse_quantity("0.071 m3") == (0.071, "cbm")

    def test_decimal_comma(self):
        assert parse_quantity("1.234,5 kg") == (1234.5, "kg")

    def test_thousands_separator(self):
        assert parse_quantity("1,234 kg") == (1234.0, "kg")

    def test_missing_unit_takes_expected(self):
        assert parse_quantity("37", expected_unit="kg") == (37.0, "kg")

    def test_numeric_value_uses_hint(self):
        assert parse_quantity(37, unit_hint="KGS") == (37.0, "kg")

    def test_mass_conversion(self):
        amount, unit = parse_quantity("100 lbs", expected_unit="kg")
        assert unit == "kg"
        assert amount == pytest.approx(45.359237)

    def test_count_units_not_converted(self):
        assert parse_quantity("12 ctns", expected_unit="pcs") == (12.0, "ctn")

    def test_no_numeral(self):
        with pytest.raises(UnparseableNumber):
            parse_quantity("N/A")


class TestParseMoney:
    """Tests for amount/currency separation."""

    def test_symbol(self):
        assert parse_money("$1,200.50") == (1200.5, "USD")
        assert parse_money("£1,989.00") == (1989.0, "GBP")

    def test_iso_code(self):
        assert parse_money("GBP 1989") == (1989.0, "GBP")

    def test_indian_grouping(self):
        assert parse_money("Rs. 2,60,547.76") == (260547.76, "INR")

    def test_currency_hint(self):
        assert parse_money(80717.8, "INR") == (80717.8, "INR")

    def test_european_format(self):
        assert parse_money("EUR 1.234,56") == (1234.56, "EUR")

    def test_no_amount(self):
        with pytest.raises(UnparseableNumber):
            parse_money("USD")

    def test_parse_decimal_multiple_points(self):
        assert parse_decimal("1.234.567") == 1234567.0


class TestParseDate:
    """Tests for date parsing and region-driven day/month order."""

    def test_iso(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)
        assert parse_date("2024-01-15T10:30:00Z") == date(2024, 1, 15)

    def test_day_first_region(self):
        assert parse_date("03/04/2024", region="IN") == date(2024, 4, 3)
        assert parse_date("03.04.2024", region="GB") == date(2024, 4, 3)

    def test_month_first_region(self):
        assert parse_date("03/04/2024", region="US") == date(2024, 3, 4)
        assert parse_date("03/04/2024", region="en-US") == date(2024, 3, 4)

    def test_component_over_twelve_fixes_day(self):
        assert parse_date("13/04/2024", region="US") == date(2024, 4, 13)
        assert parse_date("04/13/2024", region="IN") == date(2024, 4, 13)

    def test_two_digit_year(self):
        assert parse_date("10-01-24") == date(2024, 1, 10)

    def test_ambiguous(self):
        with pytest.raises(AmbiguousDate):
            parse_date("13/14/2024")

    def test_invalid_calendar_date(self):
        with pytest.raises(UnparseableDate):
            parse_date("31/02/2024")

    def test_free_text(self):
        assert parse_date("15 Jan 2024") == date(2024, 1, 15)
        assert parse_date("January 15, 2024") == date(2024, 1, 15)

    def test_free_text_missing_day(self):
        with pytest.raises(UnparseableDate):
            parse_date("January 2024")

    def test_garbage(self):
        with pytest.raises(UnparseableDate):
            parse_date("pending")

    def test_date_object_passthrough(self):
        assert parse_date(date(2024, 1, 10)) == date(2024, 1, 10)


class TestParseAddress:
    """Tests for best-effort address splitting."""

    def test_full_address(self):
        parts = parse_address("12 Anna Salai, Chennai, Tamil Nadu 600002, India")
        assert parts["country"] == "india"
        assert parts["postal_code"] == "600002"
        assert parts["city"] == "Chennai"
        assert parts["region"] == "Tamil Nadu"
        assert parts["line"] == "12 Anna Salai"

    def test_country_alias(self):
        parts = parse_address("Unit 4, Hounslow, TW3 1LS, UK")
        assert parts["country"] == "united kingdom"
        assert parts["postal_code"] == "TW31LS"
        assert parts["city"] == "Hounslow"

    def test_partial(self):
        parts = parse_address("Warehouse 9")
        assert parts["line"] == "Warehouse 9"
        assert parts["country"] is None


class TestNormalize:
    """Tests for the kind dispatcher and the field-level wrapper."""

    def test_context_carried(self):
        ctx = NormalizationContext(
            source_document_id="AWB-1",
            document_type=DocumentType.AIR_WAYBILL,
            source_label="Gross Weight",
            confidence=0.8,
            expected_unit="kg",
        )
        value = normalize("37.000KGS", ValueKind.NUMBER, ctx)
        assert value.canonical == 37.0
        assert value.unit == "kg"
        assert value.raw == "37.000KGS"
        assert value.source_document_id == "AWB-1"
        assert value.confidence == 0.8

    def test_date_canonical_is_iso(self):
        assert normalize("10/01/2024", ValueKind.DATE).canonical == "2024-01-10"

    def test_code_strips_separators(self):
        assert normalize("7326.19.90", ValueKind.CODE).canonical == "73261990"

    def test_short_code_best_effort(self):
        ctx = NormalizationContext(confidence=0.8)
        with pytest.raises(InvalidCodeFormat) as exc_info:
            normalize("732", ValueKind.CODE, ctx)
        best = exc_info.value.best_effort
        assert best.canonical == "732"
        assert best.confidence == pytest.approx(0.4)
        assert best.error == "InvalidCodeFormat"

    def test_code_without_digits_has_no_best_effort(self):
        with pytest.raises(InvalidCodeFormat) as exc_info:
            normalize("n/a", ValueKind.CODE)
        assert exc_info.value.best_effort is None

    def test_address_components(self):
        value = normalize("12 Anna Salai, Chennai, India", ValueKind.ADDRESS)
        assert value.components["country"] == "india"
        assert value.canonical == "12 anna salai|chennai|||india"

    def test_normalize_field_degrades_invalid_code(self):
        ctx = NormalizationContext(source_document_id="INV-1", confidence=0.9)
        value, issue = normalize_field("HS", "hsn.code", "73", ValueKind.CODE, ctx)
        assert value is not None
        assert value.confidence == pytest.approx(0.45)
        assert issue.error == "InvalidCodeFormat"

    def test_normalize_field_drops_unparseable(self):
        ctx = NormalizationContext(source_document_id="AWB-1")
        value, issue = normalize_field("Gross Weight", "weight.gross", "N/A", ValueKind.NUMBER, ctx)
        assert value is None
        assert issue.error == "UnparseableNumber"
        assert issue.label == "Gross Weight"

    def test_display_value(self):
        weight = normalize("37.000KGS", ValueKind.NUMBER)
        money = normalize("GBP 1989", ValueKind.MONEY)
        assert display_value(weight, ValueKind.NUMBER) == "37 kg"
        assert display_value(money, ValueKind.MONEY) == "1989.00 GBP"
