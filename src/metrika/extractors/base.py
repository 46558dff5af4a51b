"""Base class for token extractors."""

import re
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence, Tuple


class BaseExtractor(ABC):
    """Abstract base class for extractors over recognized text lines."""

    @abstractmethod
    def extract(self, lines: Sequence[str]) -> Optional[str]:
        """
        Extract a value from recognized lines.

        Args:
            lines: Recognized text lines in source order.

        Returns:
            Extracted token, or None if nothing matched.
        """
        pass

    def find_first_match(
        self,
        lines: Sequence[str],
        pattern: re.Pattern,
        preprocess: Optional[Callable[[str], str]] = None,
    ) -> Optional[Tuple[int, re.Match]]:
        """
        Find the leftmost match in the first line that matches at all.

        Args:
            lines: Recognized text lines.
            pattern: Compiled pattern to search for.
            preprocess: Optional transform applied to each line before searching.

        Returns:
            Tuple of (line_index, match) or None.
        """
        for index, line in enumerate(lines):
            text = preprocess(line) if preprocess else line
            match = pattern.search(text)
            if match:
                return index, match
        return None
