"""
Tadka - Text utilities.

Quantity parsing/scaling and name normalization shared by the kitchen
functions and the generation pipeline.
"""

from tadka.tools.normalize import (
    matches_pantry_exact,
    matches_pantry_fuzzy,
    normalize_key,
    normalize_name,
    pantry_match_percent,
)
from tadka.tools.quantity import (
    format_quantity,
    get_scaled_quantity,
    parse_quantity,
    split_quantity,
)

__all__ = [
    "format_quantity",
    "get_scaled_quantity",
    "matches_pantry_exact",
    "matches_pantry_fuzzy",
    "normalize_key",
    "normalize_name",
    "pantry_match_percent",
    "parse_quantity",
    "split_quantity",
]
