"""Extractors for values in recognized text."""

from .base import BaseExtractor
from .weight import WeightTokenExtractor, extract_weight

__all__ = [
    "BaseExtractor",
    "WeightTokenExtractor",
    "extract_weight",
]
