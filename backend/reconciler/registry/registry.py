"""Field registry: resolves raw extraction labels to canonical field groups."""

import logging
import re
from collections.abc import Iterable, Mapping

from reconciler.errors import RegistryMiss
from reconciler.normalizer.reference import UNIT_FAMILIES, UNIT_SYNONYMS
from reconciler.registry.field_groups import (
    DOCUMENT_OVERRIDES,
    FIELD_GROUPS,
    REQUIRED_GROUPS,
    CanonicalFieldGroup,
)
from reconciler.schemas.comparison import ToleranceWindow
from reconciler.schemas.extraction import DocumentType

logger = logging.getLogger("recon.registry")

# Trailing path segments that only wrap the actual value
_LEAF_SEGMENTS = {"value", "amount", "text", "original text", "raw"}

# Leading path segments that only group fields
WRAPPER_SEGMENTS = {
    "identifiers", "ids", "references", "refs", "dates", "parties", "commercial", "financial",
    "header", "document", "details", "fields", "data", "summary", "extracted",
}


def label_key(label: str) -> str:
    """Case- and separator-insensitive form of a label (``invoiceNo.`` -> ``invoice no``)."""
    s = re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", " ", label.strip())
    s = re.sub(r"[^0-9a-zA-Z]+", " ", s.lower())
    return s.strip()


def _without_unit(key: str) -> str | None:
    """``gross wt kgs`` -> ``gross wt``; count units such as ``pcs`` stay part of the label."""
    head, _, last = key.rpartition(" ")
    if head and UNIT_SYNONYMS.get(last) in UNIT_FAMILIES:
        return head
    return None


def candidate_keys(raw_label: str) -> list[tuple[str, bool]]:
    """Keys to try for a possibly dotted label, most specific first.

    Each key is paired with whether document-type overrides may claim it. A
    trailing part of a dotted label keeps that only when every dropped segment
    is a wrapper, so ``container.number`` never reaches a bare ``number``; other
    suffixes must be multi-word and match global aliases only. Unit-stripped
    keys are global-only too.
    """
    segments = [label_key(part) for part in raw_label.split(".")]
    segments = [s for s in segments if s]
    while len(segments) > 1 and segments[-1] in _LEAF_SEGMENTS:
        segments.pop()

    keys = [(label_key(raw_label), True)]
    for start in range(len(segments)):
        suffix = " ".join(segments[start:])
        if all(s in WRAPPER_SEGMENTS for s in segments[:start]):
            keys.append((suffix, True))
        elif " " in suffix:
            keys.append((suffix, False))

    candidates: list[tuple[str, bool]] = []
    seen: set[str] = set()
    for key, scoped in keys:
        for candidate, allow_scoped in ((key, scoped), (_without_unit(key), False)):
            if candidate and candidate not in seen:
                seen.add(candidate)
                candidates.append((candidate, allow_scoped))
    return candidates


class FieldRegistry:
    """Label-to-group lookup plus the per-document-type expected-field schema.

    Lookups try the ``(document_type, label)`` override table first, then the
    global aliases, for each candidate key of a dotted label.
    """

    def __init__(
        self,
        groups: Iterable[CanonicalFieldGroup] = FIELD_GROUPS,
        overrides: Mapping[DocumentType, Mapping[str, str]] = DOCUMENT_OVERRIDES,
        required: Mapping[DocumentType, Iterable[str]] = REQUIRED_GROUPS,
        tolerance_overrides: Mapping[str, ToleranceWindow] | None = None,
    ):
        self._groups: dict[str, CanonicalFieldGroup] = {}
        self._aliases: dict[str, str] = {}
        self._overrides: dict[DocumentType, dict[str, str]] = {}
        self._required: dict[DocumentType, tuple[str, ...]] = {}
        self._tolerances: dict[str, ToleranceWindow] = dict(tolerance_overrides or {})

        for group in groups:
            self.register_group(group)
        for document_type in DocumentType:
            self.register_document_type(
                document_type,
                required.get(document_type, ()),
                overrides.get(document_type, {}),
            )
        unknown = set(self._tolerances) - set(self._groups)
        if unknown:
            raise ValueError(f"Tolerance overrides for unknown groups: {sorted(unknown)}")

    @classmethod
    def from_settings(cls, settings) -> "FieldRegistry":
        return cls(tolerance_overrides=settings.tolerance_overrides)

    def register_group(self, group: CanonicalFieldGroup) -> None:
        if group.group_id in self._groups:
            raise ValueError(f"Field group '{group.group_id}' is already registered")
        for alias in group.aliases:
            key = label_key(alias)
            owner = self._aliases.get(key)
            if owner is not None and owner != group.group_id:
                raise ValueError(f"Alias '{alias}' is claimed by both '{owner}' and '{group.group_id}'")
            self._aliases[key] = group.group_id
        self._groups[group.group_id] = group

    def register_document_type(
        self,
        document_type: DocumentType,
        required_groups: Iterable[str] = (),
        overrides: Mapping[str, str] | None = None,
    ) -> None:
        """Add or replace a document type's schema and label overrides."""
        required_groups = tuple(required_groups)
        scoped = {label_key(label): group_id for label, group_id in (overrides or {}).items()}
        for group_id in (*required_groups, *scoped.values()):
            if group_id not in self._groups:
                raise ValueError(f"Unknown field group '{group_id}' for {document_type.value}")
        self._required[document_type] = required_groups
        self._overrides[document_type] = scoped

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._groups

    def get(self, group_id: str) -> CanonicalFieldGroup:
        return self._groups[group_id]

    def groups(self) -> list[CanonicalFieldGroup]:
        return list(self._groups.values())

    def tolerance_for(self, group_id: str) -> ToleranceWindow:
        return self._tolerances.get(group_id) or self._groups[group_id].tolerance

    def required_groups(self, document_type: DocumentType) -> tuple[str, ...]:
        return self._required.get(document_type, ())

    def resolve(self, raw_label: str, document_type: DocumentType) -> str | None:
        """Return the group id for a label, or None when no group claims it."""
        scoped = self._overrides.get(document_type, {})
        for key, allow_scoped in candidate_keys(raw_label):
            if allow_scoped and key in scoped:
                return scoped[key]
            if key in self._aliases:
                return self._aliases[key]
        return None

    def lookup(self, raw_label: str, document_type: DocumentType) -> str:
        """Like ``resolve`` but raises RegistryMiss for unclaimed labels."""
        group_id = self.resolve(raw_label, document_type)
        if group_id is None:
            logger.debug("Unmapped label '%s' on %s", raw_label, document_type.value)
            raise RegistryMiss(raw_label, document_type.value)
        return group_id
