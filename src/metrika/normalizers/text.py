"""Text normalization for recognized display lines."""

import re


class TextNormalizer:
    """Handles cleanup of OCR lines before pattern matching."""

    _WHITESPACE = re.compile(r"\s+")

    @classmethod
    def remove_whitespace(cls, text: str) -> str:
        """
        Remove every whitespace character (spaces, tabs, newlines, NBSP).

        Example: '72 , 5 kg' -> '72,5kg'
        """
        return cls._WHITESPACE.sub("", text)

    @staticmethod
    def normalize_decimal_separator(token: str) -> str:
        """
        Replace decimal commas with periods.

        Example: '72,5' -> '72.5'; '72.5' is returned unchanged.
        """
        return token.replace(",", ".")

    @staticmethod
    def split_lines(text: str) -> list[str]:
        """
        Split raw recognizer output into non-blank lines, preserving order.

        Example: '72.5\\n\\n kg \\n' -> ['72.5', ' kg ']
        """
        return [line for line in text.replace("\u00a0", " ").splitlines() if line.strip()]
