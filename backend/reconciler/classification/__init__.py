from reconciler.classification.matcher import CodeMatch, CodeValidation, match_codes, validate_code

__all__ = ["CodeMatch", "CodeValidation", "match_codes", "validate_code"]
