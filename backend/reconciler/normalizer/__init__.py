from reconciler.normalizer.normalizers import (
    NormalizationContext,
    display_value,
    normalize,
    normalize_field,
    parse_address,
    parse_date,
    parse_money,
    parse_quantity,
)

__all__ = [
    "NormalizationContext",
    "display_value",
    "normalize",
    "normalize_field",
    "parse_address",
    "parse_date",
    "parse_money",
    "parse_quantity",
]
