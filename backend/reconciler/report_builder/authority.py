"""Authoritative-source lookup for discrepancies."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from reconciler.normalizer.normalizers import display_value
from reconciler.schemas.comparison import ComparisonRecord
from reconciler.schemas.extraction import DocumentType


@dataclass
class AuthorityResolution:
    document_type: DocumentType | None
    value: str | None
    resolution: str


def resolve_authority(
    group_ids: Sequence[str],
    records: Mapping[str, ComparisonRecord],
    authority_table: Mapping[str, DocumentType],
) -> AuthorityResolution:
    """Find the reference document for the first group that has one."""
    for group_id in group_ids:
        authority = authority_table.get(group_id)
        if authority is None:
            continue
        record = records.get(group_id)
        value = next((v for v in record.values if v.document_type == authority), None) if record else None
        if value is None:
            return AuthorityResolution(
                authority,
                None,
                f"No {group_id} value from the authoritative {authority.value}; obtain it to resolve",
            )
        shown = display_value(value, record.kind)
        return AuthorityResolution(
            authority,
            shown,
            f"Use {shown} from the {authority.value} ({value.source_document_id}) as the reference value",
        )
    subject = ", ".join(group_ids) if group_ids else "this check"
    return AuthorityResolution(None, None, f"No authoritative source for {subject}; confirm with the issuing parties")
