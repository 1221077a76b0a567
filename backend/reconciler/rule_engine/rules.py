"""Pure business-rule checks over a FieldSet. No settings or logging dependency.

Every rule returns exactly one RuleResult. Missing inputs give a passing
``info`` result with low confidence instead of a failure.
"""

from dataclasses import dataclass, field
from datetime import date
from itertools import combinations

from reconciler.classification.matcher import CodeMatch, match_codes, validate_code
from reconciler.normalizer.reference import COMMERCIAL_COUNT_UNITS, SHIPPING_COUNT_UNITS
from reconciler.rule_engine.fieldset import FieldSet
from reconciler.schemas.comparison import CodeLevel, NormalizedValue
from reconciler.schemas.extraction import DocumentType
from reconciler.schemas.rules import RuleResult, Severity

INSUFFICIENT_DATA_CONFIDENCE = 0.1

COMMERCIAL_COUNT_SOURCES = (DocumentType.INVOICE, DocumentType.PACKING_LIST)
SHIPPING_COUNT_SOURCES = (DocumentType.HOUSE_WAYBILL, DocumentType.AIR_WAYBILL, DocumentType.DELIVERY_NOTE)


@dataclass
class RuleThresholds:
    max_packaging_ratio: float = 0.20
    package_ratio_min: float = 0.5
    package_ratio_max: float = 4.0
    max_invoice_shipment_gap_days: int = 30
    duty_ratio_min: float = 0.0
    duty_ratio_max: float = 0.5
    code_low_confidence_threshold: float = 0.5
    invalid_code_scale: float = 0.5
    strict_code_pairs: list[tuple[DocumentType, DocumentType]] = field(
        default_factory=lambda: [(DocumentType.INVOICE, DocumentType.PACKING_LIST)]
    )


def insufficient_data(rule_name: str, subject: str, group_ids: list[str]) -> RuleResult:
    return RuleResult(
        rule_name=rule_name,
        passed=True,
        severity=Severity.INFO,
        message=f"Insufficient {subject} data for validation",
        confidence=INSUFFICIENT_DATA_CONFIDENCE,
        group_ids=group_ids,
    )


def _source(value: NormalizedValue) -> str:
    return f"{value.document_type.value} {value.source_document_id}"


def _number(value: float) -> str:
    return f"{value:,.2f}".rstrip("0").rstrip(".")


# ── Weight ──


def check_weight_consistency(fields: FieldSet, thresholds: RuleThresholds) -> RuleResult:
    """Gross weight must cover net weight with bounded packaging overhead."""
    rule, group_ids = "weight_consistency", ["weight.gross", "weight.net"]
    nets = fields.by_document("weight.net")
    pairs = [
        (_source(gross), gross, nets[doc_id])
        for doc_id, gross in fields.by_document("weight.gross").items()
        if doc_id in nets
    ]
    if not pairs:
        gross, net = fields.resolved("weight.gross"), fields.resolved("weight.net")
        if gross is None or net is None:
            return insufficient_data(rule, "weight", group_ids)
        pairs = [("cross-document", gross, net)]

    failures, checked = [], []
    for source, gross, net in pairs:
        if gross.unit and net.unit and gross.unit != net.unit:
            continue
        gross_kg, net_kg = float(gross.canonical), float(net.canonical)
        unit = gross.unit or net.unit or ""
        if gross_kg < net_kg:
            failures.append(
                f"{source}: gross weight {_number(gross_kg)} {unit} is less than net weight {_number(net_kg)} {unit}"
            )
            continue
        if net_kg <= 0:
            continue
        overhead = (gross_kg - net_kg) / net_kg
        if overhead > thresholds.max_packaging_ratio:
            failures.append(
                f"{source}: packaging overhead {overhead:.1%} exceeds {thresholds.max_packaging_ratio:.0%}"
            )
        else:
            checked.append(f"{source}: packaging overhead {overhead:.1%}")

    if failures:
        return RuleResult(
            rule_name=rule,
            passed=False,
            severity=Severity.ERROR,
            message="Weight inconsistency: " + "; ".join(failures),
            confidence=0.2,
            group_ids=group_ids,
        )
    if not checked:
        return insufficient_data(rule, "comparable weight", group_ids)
    return RuleResult(
        rule_name=rule,
        passed=True,
        severity=Severity.INFO,
        message="Weight consistency verified (" + "; ".join(checked) + ")",
        confidence=0.95,
        group_ids=group_ids,
    )


# ── Package count ──


def explain_count_units(commercial: NormalizedValue, shipping: NormalizedValue) -> str | None:
    """Explain a count difference caused by counting different packing units."""
    if commercial.unit in COMMERCIAL_COUNT_UNITS and shipping.unit in SHIPPING_COUNT_UNITS:
        return f"commercial documents count {commercial.unit} while shipping documents count {shipping.unit}"
    if commercial.unit and shipping.unit and commercial.unit != shipping.unit:
        return f"documents use different count units ({commercial.unit} vs {shipping.unit})"
    return None


def check_package_count(fields: FieldSet, thresholds: RuleThresholds) -> RuleResult:
    """Commercial package count over shipping piece count must stay within bounds."""
    rule, group_ids = "package_count_consistency", ["package.count"]
    commercial = fields.first_of("package.count", COMMERCIAL_COUNT_SOURCES)
    shipping = fields.first_of("package.count", SHIPPING_COUNT_SOURCES)
    if commercial is None or shipping is None or float(shipping.canonical) == 0:
        return insufficient_data(rule, "package count", group_ids)

    commercial_count, shipping_count = float(commercial.canonical), float(shipping.canonical)
    ratio = commercial_count / shipping_count
    passed = thresholds.package_ratio_min <= ratio <= thresholds.package_ratio_max
    detail = (
        f"{_source(commercial)} reports {_number(commercial_count)}, "
        f"{_source(shipping)} reports {_number(shipping_count)} (ratio {ratio:.2f})"
    )
    explanation = explain_count_units(commercial, shipping)
    if explanation:
        detail += f"; {explanation}"

    if passed:
        return RuleResult(
            rule_name=rule,
            passed=True,
            severity=Severity.INFO,
            message=f"Package counts consistent: {detail}",
            confidence=0.9,
            group_ids=group_ids,
        )
    return RuleResult(
        rule_name=rule,
        passed=False,
        severity=Severity.WARNING,
        message=(
            f"Package count ratio outside {thresholds.package_ratio_min}-{thresholds.package_ratio_max}: {detail}"
        ),
        confidence=0.3,
        group_ids=group_ids,
    )


# ── Dates ──


def _as_date(value: NormalizedValue | None) -> date | None:
    return date.fromisoformat(str(value.canonical)) if value is not None else None


def check_date_sequence(fields: FieldSet, thresholds: RuleThresholds) -> RuleResult:
    """Invoice, shipment and customs dates must occur in order and close together."""
    rule, group_ids = "date_sequence", ["date.invoice", "date.shipment", "date.customs"]
    invoice = _as_date(fields.resolved("date.invoice"))
    shipment = _as_date(fields.resolved("date.shipment"))
    customs = _as_date(fields.resolved("date.customs"))
    if sum(d is not None for d in (invoice, shipment, customs)) < 2:
        return insufficient_data(rule, "date", group_ids)

    issues: list[str] = []
    confidence = 0.9
    if invoice and shipment:
        gap = (shipment - invoice).days
        if gap < 0:
            issues.append(f"Shipment date ({shipment}) precedes invoice date ({invoice}) by {-gap} days")
            confidence -= 0.2
        elif gap > thresholds.max_invoice_shipment_gap_days:
            issues.append(
                f"{gap}-day gap between invoice date ({invoice}) and shipment date ({shipment}) "
                f"exceeds {thresholds.max_invoice_shipment_gap_days} days"
            )
            confidence -= 0.2
    if customs and shipment and customs < shipment:
        issues.append(f"Customs entry date ({customs}) precedes shipment date ({shipment})")
        confidence -= 0.3
    elif customs and invoice and not shipment and customs < invoice:
        issues.append(f"Customs entry date ({customs}) precedes invoice date ({invoice})")
        confidence -= 0.3

    if issues:
        return RuleResult(
            rule_name=rule,
            passed=False,
            severity=Severity.WARNING,
            message="Date sequence issue: " + "; ".join(issues),
            confidence=round(max(confidence, 0.1), 2),
            group_ids=group_ids,
        )
    return RuleResult(
        rule_name=rule,
        passed=True,
        severity=Severity.INFO,
        message="Document dates follow the expected sequence",
        confidence=confidence,
        group_ids=group_ids,
    )


# ── Financial ──


def check_financial_consistency(fields: FieldSet, thresholds: RuleThresholds) -> RuleResult:
    """Total duty as a share of the declared value must be plausible."""
    rule, group_ids = "financial_consistency", ["duty.total", "invoice.value", "customs.assessed_value"]
    duty = fields.resolved("duty.total")
    invoice_value = fields.resolved("invoice.value")
    assessed = fields.resolved("customs.assessed_value")
    if duty is None or (invoice_value is None and assessed is None):
        return insufficient_data(rule, "financial", group_ids)

    base, base_name = invoice_value, "invoice value"
    if base is None or (duty.unit and base.unit and duty.unit != base.unit):
        base, base_name = assessed, "assessed value"
    if base is None or (duty.unit and base.unit and duty.unit != base.unit):
        return insufficient_data(rule, "same-currency financial", group_ids)
    if float(base.canonical) <= 0:
        return insufficient_data(rule, "financial", group_ids)

    ratio = float(duty.canonical) / float(base.canonical)
    currency = f" {duty.unit or base.unit}" if (duty.unit or base.unit) else ""
    detail = (
        f"duty {_number(float(duty.canonical))}{currency} is {ratio:.1%} of "
        f"{base_name} {_number(float(base.canonical))}{currency}"
    )
    if thresholds.duty_ratio_min <= ratio <= thresholds.duty_ratio_max:
        return RuleResult(
            rule_name=rule,
            passed=True,
            severity=Severity.INFO,
            message=f"Duty rate plausible: {detail}",
            confidence=0.8,
            group_ids=group_ids,
        )
    return RuleResult(
        rule_name=rule,
        passed=False,
        severity=Severity.WARNING,
        message=(
            f"Unusual duty rate: {detail} "
            f"(expected {thresholds.duty_ratio_min:.0%}-{thresholds.duty_ratio_max:.0%})"
        ),
        confidence=0.3,
        group_ids=group_ids,
    )


# ── Classification codes ──


def is_strict_pair(type_a: DocumentType, type_b: DocumentType, strict_pairs) -> bool:
    if type_a == type_b:
        return True
    return (type_a, type_b) in strict_pairs or (type_b, type_a) in strict_pairs


def _grade_code_pair(match: CodeMatch, strict: bool, thresholds: RuleThresholds) -> tuple[bool, Severity]:
    if match.level == CodeLevel.NONE:
        return False, Severity.ERROR if strict else Severity.WARNING
    if match.level == CodeLevel.CHAPTER:
        return (False, Severity.ERROR) if strict else (True, Severity.INFO)
    if match.confidence < thresholds.code_low_confidence_threshold:
        return False, Severity.ERROR if strict else Severity.WARNING
    return True, Severity.INFO


def check_code_mapping(fields: FieldSet, thresholds: RuleThresholds) -> RuleResult:
    """Classification codes reported by different documents must agree closely."""
    rule, group_ids = "code_mapping", ["hsn.code"]
    values = fields.values("hsn.code")
    if len(values) < 2:
        return insufficient_data(rule, "classification code", group_ids)

    graded = []
    for a, b in combinations(values, 2):
        match = match_codes(a.canonical, b.canonical, thresholds.invalid_code_scale)
        strict = is_strict_pair(a.document_type, b.document_type, thresholds.strict_code_pairs)
        passed, severity = _grade_code_pair(match, strict, thresholds)
        graded.append((passed, severity, match, a, b))

    passed, severity, match, a, b = min(graded, key=lambda g: (-g[1].rank, g[0], g[2].confidence))
    pair = f"{_source(a)} '{match.code_a}' vs {_source(b)} '{match.code_b}'"
    message = f"Codes agree at {match.level.value} level: {pair}"
    if match.level == CodeLevel.CHAPTER:
        category = validate_code(match.code_a).category
        message = f"Codes agree only at chapter {match.code_a[:2]}"
        message += f" ({category})" if category else ""
        message += f": {pair}"
    elif match.level == CodeLevel.NONE:
        message = f"Codes do not agree: {pair}"
    if not match.valid:
        message += "; at least one code has an invalid format"
    if len(graded) > 1:
        message += f" (worst of {len(graded)} pairs)"
    return RuleResult(
        rule_name=rule,
        passed=passed,
        severity=severity,
        message=message,
        confidence=match.confidence,
        group_ids=group_ids,
    )
