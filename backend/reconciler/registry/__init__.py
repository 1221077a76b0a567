from reconciler.registry.field_groups import DOCUMENT_PRECEDENCE, CanonicalFieldGroup
from reconciler.registry.registry import FieldRegistry, label_key

__all__ = ["DOCUMENT_PRECEDENCE", "CanonicalFieldGroup", "FieldRegistry", "label_key"]
