"""Number parsing and normalization."""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..exceptions import VolumeParseError


class NumberNormalizer:
    """Handles parsing of user-entered quantities."""

    # Preset portions offered by the hydration screen, in milliliters
    WATER_PRESETS_ML = {
        "cup": Decimal("250"),
        "bottle": Decimal("750"),
    }

    @staticmethod
    def parse_decimal(text: str) -> Optional[Decimal]:
        """
        Parse a decimal number accepting either separator.

        Examples:
        - '72,5' -> Decimal('72.5')
        - ' 250 ' -> Decimal('250')
        - 'abc' -> None
        """
        if text is None:
            return None
        cleaned = re.sub(r"\s+", "", str(text)).replace(",", ".")
        if not cleaned:
            return None
        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            return None
        return value if value.is_finite() else None

    @classmethod
    def milliliters_to_liters(cls, ml_text: str) -> float:
        """
        Convert a custom water amount typed in mL to liters.

        Example: '330' -> 0.33

        Raises:
            VolumeParseError: If the amount is not a positive number.
        """
        value = cls.parse_decimal(ml_text)
        if value is None or value <= 0:
            raise VolumeParseError(str(ml_text))
        return float(value / Decimal("1000"))

    @classmethod
    def preset_liters(cls, preset: str) -> float:
        """
        Liters for a named water preset ('cup' or 'bottle').

        Raises:
            VolumeParseError: If the preset name is unknown.
        """
        try:
            return float(cls.WATER_PRESETS_ML[preset.lower()] / Decimal("1000"))
        except KeyError:
            raise VolumeParseError(preset)

    @staticmethod
    def is_positive_finite(value: float) -> bool:
        """True for finite numbers greater than zero."""
        try:
            return math.isfinite(value) and value > 0
        except TypeError:
            return False
