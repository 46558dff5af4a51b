"""Image capture, text recognition and scale scanning."""

from .base import FileImageSource, ImageSource, TextRecognizer
from .scanner import ScanResult, ScanStatus, WeightScanner
from .tesseract import TesseractRecognizer

__all__ = [
    "TextRecognizer",
    "ImageSource",
    "FileImageSource",
    "TesseractRecognizer",
    "WeightScanner",
    "ScanResult",
    "ScanStatus",
]
