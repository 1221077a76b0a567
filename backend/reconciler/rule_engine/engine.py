"""RuleEngine: runs every business rule over a comparison set.

Rules:
1. weight_consistency (gross >= net, packaging overhead bounded)
2. package_count_consistency (commercial vs shipping counts)
3. date_sequence (invoice -> shipment -> customs)
4. financial_consistency (duty share of declared value)
5. code_mapping (classification codes across documents)

Rules are independent; one failing to evaluate never stops the others.
"""

import logging
from collections.abc import Callable, Sequence

from reconciler.config import Settings, settings as default_settings
from reconciler.rule_engine.fieldset import FieldSet
from reconciler.rule_engine.rules import (
    RuleThresholds,
    check_code_mapping,
    check_date_sequence,
    check_financial_consistency,
    check_package_count,
    check_weight_consistency,
    insufficient_data,
)
from reconciler.schemas.comparison import ComparisonRecord
from reconciler.schemas.rules import RuleResult

logger = logging.getLogger("recon.rule_engine")

Rule = Callable[[FieldSet, RuleThresholds], RuleResult]

DEFAULT_RULES: dict[str, Rule] = {
    "weight_consistency": check_weight_consistency,
    "package_count_consistency": check_package_count,
    "date_sequence": check_date_sequence,
    "financial_consistency": check_financial_consistency,
    "code_mapping": check_code_mapping,
}


def thresholds_from_settings(settings: Settings) -> RuleThresholds:
    return RuleThresholds(
        max_packaging_ratio=settings.max_packaging_ratio,
        package_ratio_min=settings.package_ratio_min,
        package_ratio_max=settings.package_ratio_max,
        max_invoice_shipment_gap_days=settings.max_invoice_shipment_gap_days,
        duty_ratio_min=settings.duty_ratio_min,
        duty_ratio_max=settings.duty_ratio_max,
        code_low_confidence_threshold=settings.code_low_confidence_threshold,
        invalid_code_scale=settings.invalid_code_confidence_scale,
        strict_code_pairs=list(settings.strict_code_pairs),
    )


class RuleEngine:
    """Evaluates all registered rules; never short-circuits."""

    def __init__(self, settings: Settings | None = None, rules: dict[str, Rule] | None = None):
        self.settings = settings or default_settings
        self.rules = rules if rules is not None else dict(DEFAULT_RULES)
        self.thresholds = thresholds_from_settings(self.settings)

    def evaluate(self, comparisons: Sequence[ComparisonRecord]) -> list[RuleResult]:
        fields = FieldSet.from_records(comparisons, self.settings.authority_table)
        results: list[RuleResult] = []
        for name, rule in self.rules.items():
            try:
                results.append(rule(fields, self.thresholds))
            except (ArithmeticError, ValueError, TypeError, KeyError) as e:
                logger.exception("Rule %s could not be evaluated", name)
                result = insufficient_data(name, "usable", [])
                result.message = f"{result.message}: {e}"
                results.append(result)
        failed = sum(1 for r in results if not r.passed)
        logger.debug("Evaluated %d rules, %d failed", len(results), failed)
        return results


def run_rules(comparisons: Sequence[ComparisonRecord], settings: Settings | None = None) -> list[RuleResult]:
    return RuleEngine(settings).evaluate(comparisons)
