"""Weight token extractor for photographed scale displays."""

import re
from typing import Optional, Sequence, Tuple

from .base import BaseExtractor
from ..normalizers.text import TextNormalizer


class WeightTokenExtractor(BaseExtractor):
    """
    Extracts the first number that looks like a body weight.

    Each line has all whitespace removed and is then searched for either a
    decimal reading (1-3 digits, ',' or '.', 1-2 digits) or a bare 2-3 digit
    integer. The first line with any match wins and the leftmost match in it
    is returned with its comma replaced by a period.

    The policy is "first plausible number", not "most plausible number": no
    range check is done here, and whitespace removal can merge separate
    tokens ('9 99' is read as '999'). Use ``Weight.is_plausible`` on the
    result if a range check is wanted.
    """

    # Digit lookarounds keep "exactly 2-3 digits" from matching inside longer runs
    WEIGHT_PATTERN = re.compile(
        r"(?<!\d)\d{1,3}[,.]\d{1,2}(?!\d)"
        r"|(?<!\d)\d{2,3}(?!\d)",
        re.ASCII,
    )

    def extract(self, lines: Sequence[str]) -> Optional[str]:
        """
        Extract a weight token from recognized lines.

        Examples:
        - ['Peso: 72,5 kg'] -> '72.5'
        - ['no match here', '83.4 kg net'] -> '83.4'
        - ['abc'] -> None
        """
        value, _ = self.extract_with_index(lines)
        return value

    def extract_with_index(
        self, lines: Sequence[str]
    ) -> Tuple[Optional[str], Optional[int]]:
        """
        Extract a weight token and the index of the line it came from.

        Returns:
            Tuple of (token, line_index), or (None, None) when nothing matched.
        """
        found = self.find_first_match(
            lines, self.WEIGHT_PATTERN, TextNormalizer.remove_whitespace
        )
        if found is None:
            return None, None
        index, match = found
        return TextNormalizer.normalize_decimal_separator(match.group()), index


_default_extractor = WeightTokenExtractor()


def extract_weight(lines: Sequence[str]) -> Optional[str]:
    """Return the first weight-like token in ``lines``, or None."""
    return _default_extractor.extract(lines)
