from reconciler.matching_engine.matchers import MatchScales, compare_values, text_similarity
from reconciler.matching_engine.service import FieldComparator, ResolvedDocument, compare_across_documents

__all__ = [
    "FieldComparator",
    "MatchScales",
    "ResolvedDocument",
    "compare_across_documents",
    "compare_values",
    "text_similarity",
]
