"""
Cell value helpers for loosely typed spreadsheet data.

Used by the reconciliation engine to decide which fields are empty
and to render cell values for storage.
"""

import math
from typing import Any, Optional


def is_blank(value: Any) -> bool:
    """
    Loose truthiness check for a cell value.

    Blank values:
    - None / missing
    - "" and whitespace-only strings
    - 0, 0.0, False
    - NaN (pandas empty cell)

    Args:
        value: Raw cell or stored value

    Returns:
        True if the value counts as empty
    """
    if value is None:
        return True

    if isinstance(value, str):
        return not value.strip()

    if isinstance(value, float) and math.isnan(value):
        return True

    return not value


def has_value(value: Any) -> bool:
    """Inverse of is_blank()."""
    return not is_blank(value)


def to_store_value(value: Any) -> Optional[str]:
    """
    Render a cell value as the string persisted in the companies table.

    - None and NaN stay None
    - Integral floats lose the trailing ".0" (phone numbers read as numbers)
    - Strings are stripped; length is not limited

    Args:
        value: Raw cell value

    Returns:
        String value or None
    """
    if value is None:
        return None

    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)

    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value).strip()

    return text
