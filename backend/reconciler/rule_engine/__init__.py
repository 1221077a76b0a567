from reconciler.rule_engine.engine import DEFAULT_RULES, RuleEngine, run_rules
from reconciler.rule_engine.fieldset import FieldSet
from reconciler.rule_engine.rules import RuleThresholds

__all__ = ["DEFAULT_RULES", "FieldSet", "RuleEngine", "RuleThresholds", "run_rules"]
