"""Static field-group catalogue: aliases, kinds, tolerances and per-type schemas."""

from dataclasses import dataclass, field

from reconciler.schemas.comparison import CodeLevel, FieldCategory, ToleranceWindow, ValueKind
from reconciler.schemas.extraction import DocumentType


@dataclass(frozen=True)
class CanonicalFieldGroup:
    """One business field that different documents label differently."""

    group_id: str
    kind: ValueKind
    category: FieldCategory
    aliases: frozenset[str] = field(default_factory=frozenset)
    tolerance: ToleranceWindow = field(default_factory=ToleranceWindow)
    expected_unit: str | None = None
    description: str = ""


def _group(group_id, kind, category, aliases, description, tolerance=None, expected_unit=None):
    return CanonicalFieldGroup(
        group_id=group_id,
        kind=kind,
        category=category,
        aliases=frozenset(aliases),
        tolerance=tolerance or ToleranceWindow(),
        expected_unit=expected_unit,
        description=description,
    )


_ID = FieldCategory.IDENTIFIERS
_PARTY = FieldCategory.PARTIES
_FIN = FieldCategory.FINANCIAL
_SHIP = FieldCategory.SHIPMENT
_DESC = FieldCategory.DESCRIPTIVE

_NAME_MATCH = ToleranceWindow(similarity=0.85)
_ADDRESS_MATCH = ToleranceWindow(similarity=0.75)
_MONEY_MATCH = ToleranceWindow(ratio=0.01)
_WEIGHT_MATCH = ToleranceWindow(ratio=0.02)
_SAME_DAY = ToleranceWindow(days=0)


FIELD_GROUPS: list[CanonicalFieldGroup] = [
    # ── Identifiers ──
    _group("invoice.number", ValueKind.IDENTIFIER, _ID, [
        "invoice number", "invoice no", "invoice num", "inv no", "inv number", "invoice",
        "commercial invoice number", "commercial invoice no", "invoice ref", "invoice reference",
    ], "Commercial invoice number"),
    _group("po.number", ValueKind.IDENTIFIER, _ID, [
        "customer po", "po number", "po no", "purchase order", "purchase order number",
        "order number", "buyer order no", "buyers order no",
    ], "Purchase order reference"),
    _group("awb.number", ValueKind.IDENTIFIER, _ID, [
        "awb number", "awb no", "awb", "mawb", "mawb number", "mawb no", "master awb",
        "master awb number", "air waybill number", "airway bill number", "air waybill no",
    ], "Master air waybill number"),
    _group("hawb.number", ValueKind.IDENTIFIER, _ID, [
        "hawb", "hawb number", "hawb no", "house awb", "house awb number",
        "house air waybill number", "house waybill number",
    ], "House air waybill number"),
    _group("boe.number", ValueKind.IDENTIFIER, _ID, [
        "be number", "be no", "boe number", "boe no", "bill of entry number",
        "bill of entry no", "entry number", "customs entry number",
    ], "Bill of entry number"),
    _group("packing_list.number", ValueKind.IDENTIFIER, _ID, [
        "packing list number", "packing list no", "pl number", "pl no",
    ], "Packing list number"),
    _group("delivery_note.number", ValueKind.IDENTIFIER, _ID, [
        "delivery note number", "delivery note no", "dn number", "dn no",
    ], "Delivery note number"),
    # ── Parties ──
    _group("shipper.name", ValueKind.TEXT, _PARTY, [
        "shipper", "shipper name", "exporter", "exporter name", "consignor", "consignor name",
        "seller", "seller name", "supplier", "supplier name",
    ], "Shipper / exporter name", _NAME_MATCH),
    _group("shipper.address", ValueKind.ADDRESS, _PARTY, [
        "shipper address", "exporter address", "consignor address", "seller address", "supplier address",
    ], "Shipper address", _ADDRESS_MATCH),
    _group("consignee.name", ValueKind.TEXT, _PARTY, [
        "consignee", "consignee name", "importer", "importer name", "buyer", "buyer name",
        "receiver", "receiver name", "deliver to",
    ], "Consignee / importer name", _NAME_MATCH),
    _group("consignee.address", ValueKind.ADDRESS, _PARTY, [
        "consignee address", "importer address", "buyer address", "receiver address",
        "delivery address", "ship to address",
    ], "Consignee address", _ADDRESS_MATCH),
    _group("consignee.importer_code", ValueKind.IDENTIFIER, _PARTY, [
        "importer code", "iec", "iec code", "iec no", "importer exporter code",
    ], "Importer-exporter code"),
    # ── Financial ──
    _group("invoice.value", ValueKind.MONEY, _FIN, [
        "invoice value", "invoice total", "total invoice value", "total amount", "invoice amount",
        "total value", "grand total",
    ], "Total invoice value", _MONEY_MATCH),
    _group("freight.amount", ValueKind.MONEY, _FIN, [
        "freight", "freight amount", "freight charges",
    ], "Freight charges", _MONEY_MATCH),
    _group("insurance.amount", ValueKind.MONEY, _FIN, [
        "insurance", "insurance amount", "insurance charges",
    ], "Insurance charges", _MONEY_MATCH),
    _group("customs.assessed_value", ValueKind.MONEY, _FIN, [
        "assessed value", "assessable value", "customs value", "assessed amount",
    ], "Customs assessable value", _MONEY_MATCH),
    _group("duty.total", ValueKind.MONEY, _FIN, [
        "total duty", "duty amount", "total duty amount", "duty", "duties total", "total duties",
        "customs duty",
    ], "Total customs duty", _MONEY_MATCH),
    _group("incoterms", ValueKind.TEXT, _FIN, [
        "incoterms", "incoterm", "terms of delivery", "delivery terms", "trade terms",
    ], "Incoterms delivery term"),
    _group("hsn.code", ValueKind.CODE, _FIN, [
        "hsn", "hsn code", "hs code", "hts code", "tariff code", "cth", "cti", "ritc",
        "commodity code", "customs tariff heading",
    ], "HSN / tariff classification code", ToleranceWindow(code_level=CodeLevel.SUBHEADING)),
    # ── Shipment ──
    _group("weight.gross", ValueKind.NUMBER, _SHIP, [
        "gross weight", "gross wt", "gr wt", "total gross weight", "gross weight kg",
    ], "Gross weight", _WEIGHT_MATCH, "kg"),
    _group("weight.net", ValueKind.NUMBER, _SHIP, [
        "net weight", "net wt", "nt wt", "total net weight", "net weight kg",
    ], "Net weight", _WEIGHT_MATCH, "kg"),
    _group("package.count", ValueKind.NUMBER, _SHIP, [
        "package count", "packages", "no of packages", "number of packages", "pkgs",
        "total packages", "pieces", "no of pieces", "number of pieces", "pcs", "cartons",
        "no of cartons", "total cartons", "total pcs", "total pieces",
    ], "Number of packages"),
    _group("volume", ValueKind.NUMBER, _SHIP, [
        "volume", "cbm", "total volume", "measurement",
    ], "Shipment volume", _WEIGHT_MATCH, "cbm"),
    _group("origin", ValueKind.TEXT, _SHIP, [
        "origin", "port of loading", "airport of departure", "place of receipt", "origin airport",
        "port of origin",
    ], "Origin port or airport", _NAME_MATCH),
    _group("destination", ValueKind.TEXT, _SHIP, [
        "destination", "port of discharge", "airport of destination", "final destination",
        "destination airport", "port of destination",
    ], "Destination port or airport", _NAME_MATCH),
    _group("carrier", ValueKind.TEXT, _SHIP, [
        "carrier", "airline", "carrier name", "shipping line",
    ], "Carrier name", _NAME_MATCH),
    _group("flight.number", ValueKind.IDENTIFIER, _SHIP, [
        "flight", "flight number", "flight no",
    ], "Flight number"),
    _group("country_of_origin", ValueKind.TEXT, _SHIP, [
        "country of origin", "origin country", "made in", "country of origin of goods",
    ], "Country of origin of the goods"),
    _group("date.invoice", ValueKind.DATE, _SHIP, [
        "invoice date", "inv date", "date of invoice",
    ], "Invoice date", _SAME_DAY),
    _group("date.shipment", ValueKind.DATE, _SHIP, [
        "shipment date", "ship date", "shipping date", "date of shipment", "awb date", "hawb date",
        "mawb date", "flight date", "departure date", "date of departure", "dispatch date",
    ], "Shipment / departure date", _SAME_DAY),
    _group("date.customs", ValueKind.DATE, _SHIP, [
        "be date", "boe date", "bill of entry date", "entry date", "customs date",
        "clearance date", "date of entry",
    ], "Customs entry date", _SAME_DAY),
    _group("date.delivery", ValueKind.DATE, _SHIP, [
        "delivery date", "date of delivery", "delivered on",
    ], "Delivery date", _SAME_DAY),
    # ── Descriptive ──
    _group("product.description", ValueKind.TEXT, _DESC, [
        "description", "product description", "description of goods", "goods description",
        "item description", "cargo description", "nature of goods", "commodity",
    ], "Goods description", ToleranceWindow(similarity=0.6)),
    _group("product.item_number", ValueKind.IDENTIFIER, _DESC, [
        "item number", "item no", "part number", "part no", "sku", "item code", "product code",
    ], "Item / part number"),
    _group("product.quantity", ValueKind.NUMBER, _DESC, [
        "quantity", "qty", "product quantity", "total quantity",
    ], "Goods quantity"),
    _group("product.unit_price", ValueKind.MONEY, _DESC, [
        "unit price", "rate", "price per unit", "unit rate", "unit value",
    ], "Unit price", _MONEY_MATCH),
]


_NUMBER_LABELS = ("number", "no", "document number", "document no", "reference", "ref")
_DATE_LABELS = ("date", "document date", "issue date")


def _scoped(group_id: str, labels) -> dict[str, str]:
    return {label: group_id for label in labels}


# (document type, label) -> group id; consulted before the global aliases
DOCUMENT_OVERRIDES: dict[DocumentType, dict[str, str]] = {
    DocumentType.INVOICE: {
        **_scoped("invoice.number", _NUMBER_LABELS),
        **_scoped("date.invoice", _DATE_LABELS),
        **_scoped("invoice.value", ("total", "amount", "value")),
        "weight": "weight.gross",
    },
    DocumentType.AIR_WAYBILL: {
        **_scoped("awb.number", _NUMBER_LABELS),
        **_scoped("date.shipment", (*_DATE_LABELS, "execution date", "executed on")),
        **_scoped("weight.gross", ("weight", "total weight", "actual weight")),
        "no of pieces rcp": "package.count",
    },
    DocumentType.HOUSE_WAYBILL: {
        **_scoped("hawb.number", _NUMBER_LABELS),
        **_scoped("date.shipment", (*_DATE_LABELS, "execution date")),
        **_scoped("weight.gross", ("weight", "total weight")),
    },
    DocumentType.BILL_OF_ENTRY: {
        **_scoped("boe.number", _NUMBER_LABELS),
        **_scoped("date.customs", _DATE_LABELS),
        **_scoped("customs.assessed_value", ("value", "total value", "total assessable value")),
        **_scoped("duty.total", ("total amount", "amount payable", "total duty payable")),
    },
    DocumentType.PACKING_LIST: {
        **_scoped("packing_list.number", _NUMBER_LABELS),
        **_scoped("package.count", ("quantity", "total quantity", "qty")),
    },
    DocumentType.DELIVERY_NOTE: {
        **_scoped("delivery_note.number", _NUMBER_LABELS),
        **_scoped("date.delivery", _DATE_LABELS),
        **_scoped("package.count", ("quantity", "qty")),
        "weight": "weight.gross",
    },
}


# Expected-field schema per document type
REQUIRED_GROUPS: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.INVOICE: ("invoice.number", "date.invoice", "shipper.name", "consignee.name", "invoice.value"),
    DocumentType.AIR_WAYBILL: (
        "awb.number", "date.shipment", "shipper.name", "consignee.name", "weight.gross", "package.count",
    ),
    DocumentType.HOUSE_WAYBILL: (
        "hawb.number", "awb.number", "shipper.name", "consignee.name", "weight.gross", "package.count",
    ),
    DocumentType.BILL_OF_ENTRY: ("boe.number", "date.customs", "consignee.name", "hsn.code", "duty.total"),
    DocumentType.PACKING_LIST: ("package.count", "weight.gross", "weight.net"),
    DocumentType.DELIVERY_NOTE: ("delivery_note.number", "date.delivery", "package.count", "consignee.name"),
    DocumentType.UNKNOWN: (),
}

# Tie-break order for consensus when a group has no authoritative document
DOCUMENT_PRECEDENCE: tuple[DocumentType, ...] = (
    DocumentType.BILL_OF_ENTRY,
    DocumentType.INVOICE,
    DocumentType.AIR_WAYBILL,
    DocumentType.HOUSE_WAYBILL,
    DocumentType.PACKING_LIST,
    DocumentType.DELIVERY_NOTE,
    DocumentType.UNKNOWN,
)
