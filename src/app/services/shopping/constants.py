"""Constants for shopping list aggregation.

Contains:
- Unit aliases understood by the optional unit conversion
- Write retry limits for read-modify-write list updates
"""

from __future__ import annotations

from typing import Final


# =============================================================================
# Unit Conversion
# =============================================================================
# Lower-cased unit text as typed in recipes -> Pint unit name.
# Units not listed here (pieces, cloves, pinches...) are never converted.

PINT_UNIT_MAP: Final[dict[str, str]] = {
    # Weight units
    "mg": "milligram",
    "g": "gram",
    "gr": "gram",
    "gram": "gram",
    "grams": "gram",
    "kg": "kilogram",
    "oz": "ounce",
    "lb": "pound",
    "lbs": "pound",
    # Volume units
    "ml": "milliliter",
    "l": "liter",
    "liter": "liter",
    "litre": "liter",
    "cup": "cup",
    "cups": "cup",
    "tbsp": "tablespoon",
    "tsp": "teaspoon",
}

# Converted amounts are rounded to this many decimals before summing.
CONVERSION_PRECISION: Final[int] = 6


# =============================================================================
# Persistence
# =============================================================================

# Compare-and-set attempts before a list update gives up with a conflict.
MAX_WRITE_ATTEMPTS: Final[int] = 3
