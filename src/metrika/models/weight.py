"""Body weight value object."""

from decimal import Decimal, InvalidOperation
from typing import Union

from pydantic import BaseModel, field_serializer

from ..exceptions import WeightParseError

Number = Union[Decimal, int, float, str]

# Range accepted by the opt-in plausibility check
MIN_PLAUSIBLE_KG = Decimal("20")
MAX_PLAUSIBLE_KG = Decimal("300")


class Weight(BaseModel):
    """
    A body weight in kilograms, kept as a Decimal.

    Instances are frozen. Text from the CLI or an OCR token goes through
    ``from_string``; ``is_plausible`` is the opt-in range check.
    """

    value_kg: Decimal

    model_config = {"frozen": True}

    @classmethod
    def from_kg(cls, kg: Number) -> "Weight":
        # str() first so 72.5 stays 72.5 rather than its binary expansion
        return cls(value_kg=Decimal(str(kg)))

    @classmethod
    def from_string(cls, text: str) -> "Weight":
        """
        Parse a weight token such as '72.5' or '72,5'.

        Raises:
            WeightParseError: If the text is not a finite number.
        """
        try:
            value = Decimal((text or "").strip().replace(",", "."))
        except InvalidOperation:
            raise WeightParseError(text)
        if not value.is_finite():
            raise WeightParseError(text)
        return cls(value_kg=value)

    @property
    def kg(self) -> Decimal:
        return self.value_kg

    def is_positive(self) -> bool:
        return self.value_kg > 0

    def is_plausible(self, min_kg: Number = MIN_PLAUSIBLE_KG, max_kg: Number = MAX_PLAUSIBLE_KG) -> bool:
        """
        True when the weight lies within [min_kg, max_kg] (20-300 kg by default).

        Token extraction never applies this check; callers opt in before
        offering a detected value for confirmation.
        """
        return Decimal(str(min_kg)) <= self.value_kg <= Decimal(str(max_kg))

    def formatted(self) -> str:
        """One decimal place, e.g. '72.5'."""
        return f"{float(self.value_kg):.1f}"

    @field_serializer("value_kg")
    def serialize_kg(self, value: Decimal) -> str:
        return str(value)

    def __repr__(self) -> str:
        return f"Weight({self.value_kg} kg)"

    def __str__(self) -> str:
        return f"{self.value_kg} kg"
