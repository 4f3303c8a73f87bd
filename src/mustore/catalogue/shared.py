"""Helpers shared by catalogue aggregates."""

import re

_SKU_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")

_TRANSLIT = str.maketrans(
    {
        "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e",
        "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
        "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
        "ф": "f", "х": "h", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "sch",
        "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
    }
)  # fmt: skip


def slugify(value: str) -> str:
    """URL-safe slug: lowercase latin letters, digits and single hyphens."""
    text = value.lower().translate(_TRANSLIT)
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def sku_errors(code: str) -> list[str]:
    """Return format violations for a SKU code (empty when valid)."""
    errors = []
    if not _SKU_PATTERN.match(code):
        errors.append("SKU must contain only alphanumeric characters and hyphens")
    if code.startswith("-") or code.endswith("-"):
        errors.append("SKU must not start or end with a hyphen")
    if "--" in code:
        errors.append("SKU must not contain consecutive hyphens")
    return errors
