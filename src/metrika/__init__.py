"""
Metrika: personal health tracking.

Records body weight and water intake (typed in, or read from a photo of a
scale display), reads activity data, and builds summary cards and history
reports on top of a pluggable health data store.
"""

__version__ = "1.0.0"

from .extractors.weight import WeightTokenExtractor, extract_weight
from .health import HealthManager
from .cache import HealthDataCache
from .reports import ReportBuilder
from .store import HealthStore, InMemoryHealthStore, JsonHealthStore
from .exceptions import (
    MetrikaException,
    HealthStoreError,
    HealthDataUnavailableError,
    AuthorizationDeniedError,
    StoreReadError,
    StoreWriteError,
    StoreTimeoutError,
    CorruptStoreError,
    RecognitionError,
    ImageLoadError,
    TextRecognitionError,
    CaptureCancelledError,
    NormalizationError,
    WeightParseError,
    VolumeParseError,
    OutputError,
    FileWriteError,
    UnsupportedFormatError,
)
from .logging import (
    configure_logging,
    get_logger,
    HealthLogger,
    LoggingBackend,
    LoggingConfig,
    register_backend,
    unregister_backend,
    get_registered_backends,
    get_current_config,
    configure_for_file,
    StreamBackend,
    FileBackend,
)

__all__ = [
    "extract_weight",
    "WeightTokenExtractor",
    "HealthManager",
    "HealthDataCache",
    "ReportBuilder",
    # Stores
    "HealthStore",
    "InMemoryHealthStore",
    "JsonHealthStore",
    # Exceptions
    "MetrikaException",
    "HealthStoreError",
    "HealthDataUnavailableError",
    "AuthorizationDeniedError",
    "StoreReadError",
    "StoreWriteError",
    "StoreTimeoutError",
    "CorruptStoreError",
    "RecognitionError",
    "ImageLoadError",
    "TextRecognitionError",
    "CaptureCancelledError",
    "NormalizationError",
    "WeightParseError",
    "VolumeParseError",
    "OutputError",
    "FileWriteError",
    "UnsupportedFormatError",
    # Logging
    "configure_logging",
    "get_logger",
    "HealthLogger",
    "LoggingBackend",
    "LoggingConfig",
    "register_backend",
    "unregister_backend",
    "get_registered_backends",
    "get_current_config",
    "configure_for_file",
    "StreamBackend",
    "FileBackend",
]
