"""Tesseract-backed text recognizer."""

from typing import Optional

import pytesseract
from PIL import Image, ImageOps

from .base import TextRecognizer
from ..exceptions import TextRecognitionError
from ..normalizers.text import TextNormalizer

# Single uniform block of text, LSTM engine
DEFAULT_CONFIG = "--oem 1 --psm 6"


class TesseractRecognizer(TextRecognizer):
    """
    Recognizes text with Tesseract through pytesseract.

    The image is converted to grayscale before recognition. The raw output
    is split into non-blank lines, keeping the order Tesseract returned.
    """

    engine = "pytesseract"

    def __init__(self, lang: str = "por", config: Optional[str] = None):
        self.lang = lang
        self.config = config if config is not None else DEFAULT_CONFIG

    def recognize(self, image: Image.Image) -> list[str]:
        try:
            gray = ImageOps.grayscale(image)
            text = pytesseract.image_to_string(gray, lang=self.lang, config=self.config) or ""
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
            raise TextRecognitionError(self.engine, str(e))
        return TextNormalizer.split_lines(text)
