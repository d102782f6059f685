"""
Tadka - Quantity Parsing and Scaling.

Ingredient quantities are stored as free text ("1 1/2 tsp", "200g", "a pinch").
These helpers read the leading number, scale it by a serving multiplier and
render it back with kitchen-friendly fractions. Anything that isn't a plain
number is passed through untouched.
"""

import math
import re

# Glyphs accepted on input, expanded to ascii fractions before parsing
VULGAR_FRACTIONS: dict[str, str] = {
    "¼": "1/4",
    "½": "1/2",
    "¾": "3/4",
    "⅓": "1/3",
    "⅔": "2/3",
}

# Glyphs used on output, with their exact values
FRACTION_GLYPHS: list[tuple[float, str]] = [
    (1 / 4, "¼"),
    (1 / 3, "⅓"),
    (1 / 2, "½"),
    (2 / 3, "⅔"),
    (3 / 4, "¾"),
]

SNAP_TOLERANCE = 0.05

_MIXED_RE = re.compile(r"^(\d+)(?:\s+|-)(\d+)/(\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")
_DECIMAL_RE = re.compile(r"^\d+(?:\.\d+)?$")

# Leading numeric run (digits, spaces, slashes, dots, dashes) ending on a
# digit/dot/slash; whatever follows, including its leading space, is kept.
_LEADING_NUMBER_RE = re.compile(r"^([\d\s/.\-]*[\d/.])(.*)$", re.DOTALL)


def parse_quantity(text: str) -> float | None:
    """
    Parse a bare quantity.

    Accepts integers, decimals, simple fractions and mixed numbers.
    Returns None for anything else (units, ranges, words), never raises.

    Examples:
        parse_quantity("2") -> 2.0
        parse_quantity("0.5") -> 0.5
        parse_quantity("1/2") -> 0.5
        parse_quantity("1 1/2") -> 1.5
        parse_quantity("1-1/2") -> 1.5
        parse_quantity("2-3") -> None
    """
    if not isinstance(text, str):
        return None
    clean = text.strip()

    mixed = _MIXED_RE.match(clean)
    if mixed:
        whole, num, den = (int(g) for g in mixed.groups())
        if den == 0:
            return None
        return whole + num / den

    fraction = _FRACTION_RE.match(clean)
    if fraction:
        num, den = (int(g) for g in fraction.groups())
        if den == 0:
            return None
        return num / den

    if _DECIMAL_RE.match(clean):
        return float(clean)

    return None


def format_quantity(value: float) -> str:
    """
    Render a quantity for display.

    Integers render bare. A fractional part within 0.05 of ¼ ⅓ ½ ⅔ ¾ snaps to
    the glyph ("1 ½"); otherwise the value is shown with one decimal place.
    Zero renders as an empty string.
    """
    if value == 0:
        return ""
    if float(value).is_integer():
        return str(int(value))

    whole = math.floor(value)
    remainder = value - whole

    distance, glyph = min((abs(remainder - target), g) for target, g in FRACTION_GLYPHS)
    if distance < SNAP_TOLERANCE:
        return f"{whole} {glyph}" if whole > 0 else glyph

    text = f"{value:.1f}"
    return text[:-2] if text.endswith(".0") else text


def expand_vulgar_fractions(text: str) -> str:
    """Replace ½-style glyphs with ascii fractions ("1½" -> "1 1/2")."""
    for glyph, ascii_fraction in VULGAR_FRACTIONS.items():
        if glyph in text:
            text = text.replace(glyph, f" {ascii_fraction}")
    return text.lstrip()


def split_quantity(raw: str) -> tuple[float | None, str]:
    """
    Split a quantity string into its numeric value and trailing text.

    Returns:
        (value, rest) where rest is kept verbatim, including a leading space.
        (None, raw) when there is no parseable leading number.

    Examples:
        split_quantity("1/2 cup") -> (0.5, " cup")
        split_quantity("200g") -> (200.0, "g")
        split_quantity("½ cup") -> (0.5, " cup")
        split_quantity("a pinch") -> (None, "a pinch")
    """
    if not raw:
        return (None, raw or "")

    match = _LEADING_NUMBER_RE.match(expand_vulgar_fractions(raw))
    if not match:
        return (None, raw)

    value = parse_quantity(match.group(1))
    if value is None:
        return (None, raw)
    return (value, match.group(2))


def _format_multiplier(servings: float) -> str:
    if float(servings).is_integer():
        return str(int(servings))
    return str(servings)


def get_scaled_quantity(raw_qty: str, servings: float) -> str:
    """
    Scale a free-text quantity by a serving multiplier.

    servings == 1 returns the input unchanged. A parseable leading number is
    multiplied and re-rendered, keeping the trailing text as-is; otherwise the
    multiplier is appended so nothing is silently dropped.

    Examples:
        get_scaled_quantity("1/2 cup", 4) -> "2 cup"
        get_scaled_quantity("1 1/2 tsp", 2) -> "3 tsp"
        get_scaled_quantity("a pinch", 2) -> "a pinch (x2)"
    """
    if servings == 1:
        return raw_qty

    value, rest = split_quantity(raw_qty)
    if value is not None:
        return f"{format_quantity(value * servings)}{rest}"

    return f"{raw_qty} (x{_format_multiplier(servings)})"
