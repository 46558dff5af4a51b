"""Normalization utilities for recognized text, numbers and dates."""

from .text import TextNormalizer
from .numbers import NumberNormalizer
from .datetime import DateTimeNormalizer

__all__ = ["TextNormalizer", "NumberNormalizer", "DateTimeNormalizer"]
