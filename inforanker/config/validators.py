"""Shared validators for Pydantic config models.

This module provides common validation utilities used across
configuration models:
- Weight sum validation
- Alias list normalization
"""

from typing import Any


def validate_weights_sum(
    values: dict[str, float],
    tolerance: float = 0.01,
    expected_sum: float = 1.0,
) -> None:
    """Validate that numeric values sum to expected value.

    Args:
        values: Dictionary of field names to weight values
        tolerance: Allowed deviation from expected_sum
        expected_sum: Expected sum of all weights

    Raises:
        ValueError: If sum deviates from expected by more than tolerance
    """
    total = sum(values.values())
    if abs(total - expected_sum) > tolerance:
        raise ValueError(f"Weights must sum to {expected_sum} (got {total:.2f}). Values: {values}")


def normalize_alias_list(value: Any) -> list[str]:
    """Normalize keyword aliases.

    Accepts None, a comma-separated string, or a list of strings. Entries
    are stripped, empty entries dropped and duplicates removed while
    keeping order.

    Args:
        value: Input value (None, str, or list[str])

    Returns:
        List of aliases
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [s for s in value if isinstance(s, str)]
    else:
        return []

    seen: set[str] = set()
    aliases: list[str] = []
    for item in items:
        alias = item.strip()
        if alias and alias not in seen:
            seen.add(alias)
            aliases.append(alias)
    return aliases


__all__ = [
    "validate_weights_sum",
    "normalize_alias_list",
]
