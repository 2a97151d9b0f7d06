"""
Zip code and budget validation.

Values coming back from the extraction model are normalised here; when the
model misses them, the user's own words are scanned with simple patterns.
"""

from __future__ import annotations

import math
import re
from typing import Any

from stylist_ai.errors import ValidationError

MIN_BUDGET = 10
MAX_BUDGET = 10_000

_ZIP_FIVE = re.compile(r"^\d{5}$")
_ZIP_PLUS_FOUR = re.compile(r"^\d{5}-\d{4}$")
_ZIP_NINE = re.compile(r"^\d{9}$")
_ZIP_IN_TEXT = re.compile(r"\b\d{5}\b")

_AMOUNT = r"(?<![\d,.])(\d{1,4}(?:,\d{3})*(?:\.\d{2})?)(?!\d)"
_BUDGET_IN_TEXT = [
    re.compile(r"\$\s*" + _AMOUNT),  # $500, $1,000, $1,500.00
    re.compile(_AMOUNT + r"\s*dollars?", re.IGNORECASE),  # 500 dollars
    re.compile(_AMOUNT + r"\s*bucks?", re.IGNORECASE),  # 500 bucks
    re.compile(r"around\s*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"about\s*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"up\s*to\s*\$?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"budget\s*(?:is|of)?\s*\$?\s*" + _AMOUNT, re.IGNORECASE),
]

_BUDGET_RANGES: list[tuple[str, int]] = [
    ("Under $100", 75),
    ("$100 - $250", 175),
    ("$250 - $500", 375),
    ("$500 - $750", 625),
    ("$750 - $1,000", 875),
    ("$1,000 - $1,500", 1250),
    ("$1,500 - $2,000", 1750),
    ("$2,000+", 2500),
]


def validate_zip_code(value: Any) -> str:
    """Validate a US zip code and normalise it to five digits.

    Accepts ``12345``, ``12345-6789`` and ``123456789``.

    Raises:
        ValidationError: If the value is missing or malformed
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("Zip code is required", field="zipCode")

    cleaned = str(value).strip()
    if _ZIP_FIVE.match(cleaned):
        return cleaned
    if _ZIP_PLUS_FOUR.match(cleaned) or _ZIP_NINE.match(cleaned):
        return cleaned[:5]

    raise ValidationError(
        "Invalid zip code format. Please enter a 5-digit US zip code (e.g., 12345)",
        field="zipCode",
    )


def validate_budget(value: Any) -> int:
    """Validate a budget and round it to whole dollars.

    Strings may carry ``$``, thousands separators and whitespace.

    Raises:
        ValidationError: If the value is missing, not numeric or outside
            ``[MIN_BUDGET, MAX_BUDGET]``
    """
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError("Budget is required", field="maxBudget")

    if isinstance(value, str):
        try:
            amount = float(re.sub(r"[$,\s]", "", value))
        except ValueError as e:
            raise ValidationError("Budget must be a valid number", field="maxBudget") from e
    elif isinstance(value, (int, float)):
        amount = float(value)
    else:
        raise ValidationError("Budget must be a valid number", field="maxBudget")

    if math.isnan(amount) or math.isinf(amount):
        raise ValidationError("Budget must be a valid number", field="maxBudget")
    if amount < MIN_BUDGET:
        raise ValidationError(f"Budget must be at least ${MIN_BUDGET}", field="maxBudget")
    if amount > MAX_BUDGET:
        raise ValidationError(f"Budget must be less than ${MAX_BUDGET:,}", field="maxBudget")

    # Round half up
    return int(math.floor(amount + 0.5))


def extract_zip_code_from_text(text: str) -> str | None:
    """Return the first five-digit zip code mentioned in *text*."""
    if not text:
        return None
    match = _ZIP_IN_TEXT.search(text)
    return match.group(0) if match else None


def extract_budget_from_text(text: str) -> int | None:
    """Return the first valid budget amount mentioned in *text*.

    Example:
        >>> extract_budget_from_text("I'd like to spend around $500 a month")
        500
    """
    if not text:
        return None

    for pattern in _BUDGET_IN_TEXT:
        match = pattern.search(text)
        if not match:
            continue
        try:
            return validate_budget(match.group(1).replace(",", ""))
        except ValidationError:
            continue

    return None


def budget_range_suggestions(budget: int | None = None) -> list[dict[str, Any]]:
    """Preset budget ranges, flagging those within $75 of *budget*."""
    ranges: list[dict[str, Any]] = []
    for label, value in _BUDGET_RANGES:
        entry: dict[str, Any] = {"label": label, "value": value}
        if budget:
            entry["suggested"] = value - 75 <= budget <= value + 75
        ranges.append(entry)
    return ranges


def climate_info(zip_code: str) -> dict[str, str] | None:
    """Coarse US region and climate for a zip code."""
    try:
        zip_code = validate_zip_code(zip_code)
    except ValidationError:
        return None

    prefix = int(zip_code) // 10_000
    if prefix == 1:
        return {"region": "Northeast", "climate": "Continental"}
    if prefix in (2, 3):
        return {"region": "Southeast", "climate": "Humid Subtropical"}
    if prefix in (4, 5, 6):
        return {"region": "Midwest", "climate": "Continental"}
    if prefix == 7:
        return {"region": "South", "climate": "Humid Subtropical"}
    if prefix == 8:
        return {"region": "Mountain West", "climate": "Arid/Semi-Arid"}
    if prefix == 9:
        return {"region": "West Coast", "climate": "Mediterranean/Oceanic"}
    return {"region": "Unknown", "climate": "Temperate"}
