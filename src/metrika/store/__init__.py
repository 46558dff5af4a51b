"""Health data store package."""

from .interface import HealthStore
from .memory import InMemoryHealthStore
from .json_store import JsonHealthStore

__all__ = [
    "HealthStore",
    "InMemoryHealthStore",
    "JsonHealthStore",
]
