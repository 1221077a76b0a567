"""Pure value normalizers: raw extracted values to canonical comparable forms.

Every function here is deterministic and free of I/O. ``normalize`` dispatches
on the value kind and raises a NormalizationError subclass when a value cannot
be understood.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

from reconciler.errors import (
    AmbiguousDate,
    InvalidCodeFormat,
    NormalizationError,
    UnparseableDate,
    UnparseableNumber,
)
from reconciler.normalizer.reference import (
    COUNTRY_ALIASES,
    CURRENCY_SYMBOLS,
    KNOWN_CURRENCIES,
    MONTH_FIRST_REGIONS,
    UNIT_FAMILIES,
    UNIT_SYNONYMS,
)
from reconciler.schemas.comparison import NormalizedValue, ValueKind
from reconciler.schemas.extraction import DocumentType
from reconciler.schemas.report import NormalizationIssue

logger = logging.getLogger("recon.normalizer")

CODE_MIN_LENGTH = 4
CODE_MAX_LENGTH = 10

_NUMERAL_RE = re.compile(r"[-+]?\d(?:[\d,.']*\d)?")
_UNIT_RE = re.compile(r"[A-Za-z][A-Za-z0-9³]*\.?(?:\s+[A-Za-z]+)?")
_ISO_DATE_RE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?:[T ].*)?$")
_NUMERIC_DATE_RE = re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4}|\d{2})$")
_POSTAL_RE = re.compile(r"\b(\d{6}|\d{5}(?:-\d{4})?|[A-Z]{1,2}\d[A-Z\d]?\s*\d[A-Z]{2})\b", re.IGNORECASE)


@dataclass(frozen=True)
class NormalizationContext:
    """Where a raw value came from and how to read it."""

    source_document_id: str = ""
    document_type: DocumentType = DocumentType.UNKNOWN
    source_label: str | None = None
    confidence: float = 1.0
    expected_unit: str | None = None
    unit_hint: str | None = None
    region: str = "IN"
    invalid_code_confidence_scale: float = 0.5


# ── Text and identifiers ──


def normalize_text(value: Any) -> str:
    """Lowercase, trim, strip punctuation and collapse whitespace."""
    s = str(value).strip().lower()
    s = re.sub(r"[.'’]", "", s)
    s = re.sub(r"[^\w\s]", " ", s).replace("_", " ")
    return re.sub(r"\s+", " ", s).strip()


def normalize_identifier(value: Any) -> str:
    """Reference numbers compare on uppercase alphanumerics only (098-80828764 == 09880828764)."""
    return re.sub(r"[^0-9A-Z]", "", str(value).upper())


# ── Numbers, units and money ──


def parse_decimal(numeral: str) -> float:
    """Parse a numeral that may use either comma or point as decimal separator."""
    s = numeral.replace("'", "")
    if "," in s and "." in s:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif "," in s:
        head, _, tail = s.rpartition(",")
        if s.count(",") == 1 and len(tail) in (1, 2):
            s = f"{head}.{tail}"
        else:
            s = s.replace(",", "")
    elif s.count(".") > 1:
        s = s.replace(".", "")
    try:
        return float(s)
    except ValueError as exc:
        raise UnparseableNumber(f"Cannot read '{numeral}' as a number", numeral) from exc


def canonical_unit(token: str | None) -> str | None:
    if not token:
        return None
    key = token.strip().lower().rstrip(".")
    return UNIT_SYNONYMS.get(key, key)


def _split_unit(text: str, start: int, end: int) -> str | None:
    after = _UNIT_RE.match(text[end:].strip())
    if after:
        phrase = after.group(0).rstrip(".").lower()
        if phrase in UNIT_SYNONYMS:
            return UNIT_SYNONYMS[phrase]
        return canonical_unit(phrase.split()[0])
    before = text[:start].strip().split()
    if before and before[-1].lower().rstrip(".") in UNIT_SYNONYMS:
        return canonical_unit(before[-1])
    return None


def convert_unit(amount: float, unit: str | None, target: str | None) -> tuple[float, str | None]:
    """Convert between units of the same family; other units pass through unchanged."""
    if unit is None or target is None or unit == target:
        return amount, unit or target
    source_family = UNIT_FAMILIES.get(unit)
    target_family = UNIT_FAMILIES.get(target)
    if source_family and target_family and source_family[0] == target_family[0]:
        return amount * source_family[1] / target_family[1], target
    return amount, unit


def parse_quantity(value: Any, unit_hint: str | None = None, expected_unit: str | None = None) -> tuple[float, str | None]:
    """Split a number+unit value such as ``37.000KGS`` into ``(37.0, "kg")``."""
    if isinstance(value, bool):
        raise UnparseableNumber(f"Boolean is not a quantity: {value}", value)
    if isinstance(value, (int, float)):
        amount, unit = float(value), canonical_unit(unit_hint)
    else:
        text = str(value).strip()
        match = _NUMERAL_RE.search(text)
        if not match:
            raise UnparseableNumber(f"No numeral in '{text}'", value)
        amount = parse_decimal(match.group(0))
        unit = _split_unit(text, match.start(), match.end()) or canonical_unit(unit_hint)
    amount, unit = convert_unit(amount, unit, expected_unit)
    return round(amount, 6), unit


def _find_currency(text: str) -> str | None:
    for token in re.findall(r"(?<![A-Za-z])[A-Za-z]{3}(?![A-Za-z])", text):
        if token.upper() in KNOWN_CURRENCIES:
            return token.upper()
    lowered = text.lower()
    for symbol, code in sorted(CURRENCY_SYMBOLS.items(), key=lambda item: -len(item[0])):
        if symbol.isalpha():
            if re.search(rf"\b{symbol}\b", lowered):
                return code
        elif symbol in lowered:
            return code
    return None


def parse_money(value: Any, currency_hint: str | None = None) -> tuple[float, str | None]:
    """Separate amount and ISO currency (``Rs. 2,60,547.76`` -> ``(260547.76, "INR")``)."""
    hint = _find_currency(currency_hint) if currency_hint else None
    if isinstance(value, bool):
        raise UnparseableNumber(f"Boolean is not an amount: {value}", value)
    if isinstance(value, (int, float)):
        return round(float(value), 2), hint
    text = str(value).strip()
    match = _NUMERAL_RE.search(text)
    if not match:
        raise UnparseableNumber(f"No amount in '{text}'", value)
    amount = parse_decimal(match.group(0))
    return round(amount, 2), _find_currency(text) or hint


# ── Dates ──


def is_month_first(region: str) -> bool:
    code = region.replace("_", "-").split("-")[-1].upper()
    return code in MONTH_FIRST_REGIONS


def _build_date(year: int, month: int, day: int, raw: Any) -> date:
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise UnparseableDate(f"Invalid calendar date '{raw}'", raw) from exc


def parse_date(value: Any, region: str = "IN") -> date:
    """Parse a document date; numeric day/month order follows the region."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        raise UnparseableDate("Empty date", value)

    iso = _ISO_DATE_RE.match(text)
    if iso:
        year, month, day = (int(part) for part in iso.groups())
        return _build_date(year, month, day, value)

    numeric = _NUMERIC_DATE_RE.match(text)
    if numeric:
        first, second, year_text = numeric.groups()
        a, b = int(first), int(second)
        year = int(year_text) + 2000 if len(year_text) == 2 else int(year_text)
        if a > 12 and b > 12:
            raise AmbiguousDate(f"Neither position of '{text}' can be a month", value)
        if a > 12:
            day, month = a, b
        elif b > 12:
            month, day = a, b
        elif is_month_first(region):
            month, day = a, b
        else:
            day, month = a, b
        return _build_date(year, month, day, value)

    # Free text: parse twice with different defaults so a missing component shows up
    dayfirst = not is_month_first(region)
    try:
        first_pass = date_parser.parse(text, dayfirst=dayfirst, fuzzy=True, default=datetime(2000, 1, 1))
        second_pass = date_parser.parse(text, dayfirst=dayfirst, fuzzy=True, default=datetime(2001, 2, 2))
    except (ValueError, OverflowError) as exc:
        raise UnparseableDate(f"Cannot read '{text}' as a date", value) from exc
    if first_pass.date() != second_pass.date():
        raise UnparseableDate(f"Date '{text}' is missing a day, month or year", value)
    return first_pass.date()


# ── Addresses ──


def _match_country(token: str) -> tuple[str | None, str]:
    """Return (country, remainder) when the token is or ends with a known country."""
    lowered = token.strip().lower().rstrip(".")
    if lowered in COUNTRY_ALIASES:
        return COUNTRY_ALIASES[lowered], ""
    for alias in sorted(COUNTRY_ALIASES, key=len, reverse=True):
        if len(alias) > 3 and lowered.endswith(" " + alias):
            return COUNTRY_ALIASES[alias], token.strip()[: -len(alias)].strip()
    return None, token


def parse_address(value: Any) -> dict[str, str | None]:
    """Split an address into line, city, region, postal code and country.

    The country is anchored on the last token; missing parts stay ``None``.
    """
    parts = [p.strip() for p in re.split(r"[,\n;]+", str(value)) if p.strip()]
    components: dict[str, str | None] = {"line": None, "city": None, "region": None, "postal_code": None, "country": None}
    if not parts:
        return components

    country, remainder = _match_country(parts[-1])
    if country:
        components["country"] = country
        if remainder:
            parts[-1] = remainder
        else:
            parts.pop()

    for index in range(len(parts) - 1, -1, -1):
        postal = _POSTAL_RE.search(parts[index])
        if postal:
            components["postal_code"] = postal.group(1).upper().replace(" ", "")
            rest = (parts[index][: postal.start()] + parts[index][postal.end():]).strip(" -")
            if rest:
                parts[index] = rest
            else:
                parts.pop(index)
            break

    if len(parts) >= 3:
        components["line"] = ", ".join(parts[:-2])
        components["city"] = parts[-2]
        components["region"] = parts[-1]
    elif len(parts) == 2:
        components["line"], components["city"] = parts
    elif parts:
        components["line"] = parts[0]
    return components


def address_canonical(components: dict[str, str | None]) -> str:
    keys = ("line", "city", "region", "postal_code", "country")
    return "|".join(normalize_text(components[k]) if components.get(k) else "" for k in keys)


# ── Classification codes ──


def clean_code(value: Any) -> str:
    return re.sub(r"\D", "", str(value))


# ── Dispatch ──


def _format_number(amount: float) -> str:
    if amount == int(amount):
        return str(int(amount))
    return f"{amount:.6f}".rstrip("0")


def display_value(value: NormalizedValue, kind: ValueKind) -> str:
    """Human-readable canonical form, e.g. ``37 kg`` or ``1989.00 GBP``."""
    if value.canonical is None:
        return str(value.raw)
    if kind == ValueKind.NUMBER:
        number = _format_number(float(value.canonical))
        return f"{number} {value.unit}" if value.unit else number
    if kind == ValueKind.MONEY:
        amount = f"{float(value.canonical):.2f}"
        return f"{amount} {value.unit}" if value.unit else amount
    if kind == ValueKind.ADDRESS:
        return str(value.raw).strip()
    return str(value.canonical)


def normalize(raw_value: Any, kind: ValueKind, context: NormalizationContext | None = None) -> NormalizedValue:
    """Convert one raw value to its canonical form; raises NormalizationError on failure."""
    ctx = context or NormalizationContext()
    base = {
        "raw": raw_value,
        "source_document_id": ctx.source_document_id,
        "document_type": ctx.document_type,
        "source_label": ctx.source_label,
        "confidence": ctx.confidence,
    }
    if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
        raise NormalizationError("Empty value", raw_value)

    if kind == ValueKind.TEXT:
        return NormalizedValue(canonical=normalize_text(raw_value), **base)

    if kind == ValueKind.IDENTIFIER:
        canonical = normalize_identifier(raw_value)
        if not canonical:
            raise NormalizationError(f"No alphanumerics in identifier '{raw_value}'", raw_value)
        return NormalizedValue(canonical=canonical, **base)

    if kind == ValueKind.NUMBER:
        amount, unit = parse_quantity(raw_value, ctx.unit_hint, ctx.expected_unit)
        return NormalizedValue(canonical=amount, unit=unit, **base)

    if kind == ValueKind.MONEY:
        amount, currency = parse_money(raw_value, ctx.unit_hint)
        return NormalizedValue(canonical=amount, unit=currency, **base)

    if kind == ValueKind.DATE:
        return NormalizedValue(canonical=parse_date(raw_value, ctx.region).isoformat(), **base)

    if kind == ValueKind.ADDRESS:
        components = parse_address(raw_value)
        return NormalizedValue(canonical=address_canonical(components), components=components, **base)

    if kind == ValueKind.CODE:
        digits = clean_code(raw_value)
        if not CODE_MIN_LENGTH <= len(digits) <= CODE_MAX_LENGTH:
            best_effort = None
            if digits:
                base["confidence"] = round(ctx.confidence * ctx.invalid_code_confidence_scale, 4)
                best_effort = NormalizedValue(canonical=digits, error="InvalidCodeFormat", **base)
            raise InvalidCodeFormat(
                f"Code '{raw_value}' has {len(digits)} digits, expected {CODE_MIN_LENGTH}-{CODE_MAX_LENGTH}",
                raw_value,
                best_effort=best_effort,
            )
        return NormalizedValue(canonical=digits, **base)

    raise NormalizationError(f"Unsupported value kind {kind}", raw_value)


def normalize_field(
    label: str,
    group_id: str,
    raw_value: Any,
    kind: ValueKind,
    context: NormalizationContext,
) -> tuple[NormalizedValue | None, NormalizationIssue | None]:
    """Field-level wrapper around ``normalize`` that never raises.

    An invalid code degrades to its low-confidence best effort; any other
    failure drops the value and reports an issue for the document summary.
    """
    try:
        return normalize(raw_value, kind, context), None
    except InvalidCodeFormat as exc:
        issue = NormalizationIssue(label=label, group_id=group_id, error=exc.code, message=str(exc))
        logger.debug("Degraded %s on %s: %s", label, context.source_document_id, exc)
        return exc.best_effort, issue
    except NormalizationError as exc:
        issue = NormalizationIssue(label=label, group_id=group_id, error=exc.code, message=str(exc))
        logger.debug("Dropped %s on %s: %s", label, context.source_document_id, exc)
        return None, issue
