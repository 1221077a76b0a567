from reconciler.report_builder.aggregator import build_report, collect_discrepancies, weighted_consistency
from reconciler.report_builder.authority import resolve_authority

__all__ = ["build_report", "collect_discrepancies", "resolve_authority", "weighted_consistency"]
