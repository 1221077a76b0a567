import pytest

from reconciler.config import Settings
from reconciler.registry.registry import FieldRegistry
from reconciler.schemas.extraction import DocumentExtraction, DocumentType


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def registry(settings):
    return FieldRegistry.from_settings(settings)


@pytest.fixture
def invoice():
    return DocumentExtraction.from_nested("INV-1", DocumentType.INVOICE, {
        "identifiers": {"invoiceNumber": {"value": "HFKD-0217", "confidence": 0.95}},
        "parties": {
            "shipper": {"name": {"value": "R.A. Labone & Co Ltd", "confidence": 0.9}},
            "consignee": {"name": {"value": "Global Traders Pvt Ltd", "confidence": 0.9}},
        },
        "dates": {"invoiceDate": {"value": "10/01/2024", "confidence": 0.9}},
        "commercial": {"invoiceValue": {"amount": 1989.0, "currency": "GBP", "confidence": 0.95}},
        "shipment": {
            "packageCount": {"value": "2 cartons", "confidence": 0.9},
            "grossWeight": {"value": "37 KGS", "confidence": 0.9},
            "netWeight": {"value": "34.2 kg", "confidence": 0.9},
        },
        "product": {"hsnCode": {"value": "7326.19.90", "confidence": 0.85}},
    })


@pytest.fixture
def air_waybill():
    return DocumentExtraction.from_nested("AWB-1", DocumentType.AIR_WAYBILL, {
        "identifiers": {"awbNumber": {"value": "098-80828764", "confidence": 0.95}},
        "parties": {
            "shipper": {"name": {"value": "R A LABONE AND CO LTD", "confidence": 0.85}},
            "consignee": {"name": {"value": "Global Traders Pvt. Ltd.", "confidence": 0.9}},
        },
        "dates": {"awbDate": {"value": "12/01/2024", "confidence": 0.9}},
        "shipment": {
            "packageCount": {"value": "2 PCS", "confidence": 0.9},
            "grossWeight": {"value": "37.000KGS", "confidence": 0.9},
        },
    })


@pytest.fixture
def bill_of_entry():
    return DocumentExtraction.from_nested("BOE-1", DocumentType.BILL_OF_ENTRY, {
        "identifiers": {
            "beNumber": {"value": "2345678", "confidence": 0.95},
            "awbNumber": {"value": "09880828764", "confidence": 0.9},
        },
        "parties": {"consignee": {"name": {"value": "GLOBAL TRADERS PVT LTD", "confidence": 0.9}}},
        "dates": {"entryDate": {"value": "2024-01-15", "confidence": 0.9}},
        "commercial": {"invoiceValue": {"amount": 1989.0, "currency": "GBP", "confidence": 0.9}},
        "product": {"hsnCode": {"value": "73261990", "confidence": 0.9}},
        "customs": {
            "assessedValue": {"amount": "2,60,547.76", "currency": "INR", "confidence": 0.9},
            "duties": {"totalDuty": {"amount": 80717.80, "currency": "INR", "confidence": 0.9}},
        },
    })


@pytest.fixture
def shipment_set(invoice, air_waybill, bill_of_entry):
    return [invoice, air_waybill, bill_of_entry]
