"""Exceptions raised inside metrika.

Low-level collaborators (stores, recognizers, parsers, writers) raise these.
``HealthManager`` and ``WeightScanner`` catch them and turn them into empty
values or scan statuses, so callers of the service layer rarely see one.
"""

from typing import Any, Optional


class MetrikaException(Exception):
    """Root of the metrika error tree.

    Attributes:
        message: What went wrong, in one sentence
        details: Structured context, logged alongside the message
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} (details: {self.details})"


# =============================================================================
# Store
# =============================================================================

class HealthStoreError(MetrikaException):
    """A health store could not serve a request."""

    def __init__(self, message: str, quantity_type: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        context = dict(details or {})
        if quantity_type:
            context["quantity_type"] = quantity_type
        super().__init__(message, context)
        self.quantity_type = quantity_type


class HealthDataUnavailableError(HealthStoreError):
    """No health data store exists on this device."""

    def __init__(self, reason: str = "health data store is not available"):
        self.reason = reason
        super().__init__(f"Health data unavailable: {reason}",
                         details={"error_type": "unavailable"})


class AuthorizationDeniedError(HealthStoreError):
    """The user has not granted ``access`` ('read' or 'write') to a category."""

    def __init__(self, quantity_type: str, access: str = "read"):
        self.access = access
        super().__init__(f"Not authorized to {access} '{quantity_type}'",
                         quantity_type, {"access": access})


class StoreReadError(HealthStoreError):
    def __init__(self, quantity_type: str, original_error: str):
        super().__init__(f"Failed to query '{quantity_type}': {original_error}",
                         quantity_type, {"error": original_error})


class StoreWriteError(HealthStoreError):
    def __init__(self, quantity_type: str, original_error: str):
        super().__init__(f"Failed to save '{quantity_type}': {original_error}",
                         quantity_type, {"error": original_error})


class StoreTimeoutError(HealthStoreError):
    """An awaited store call ran past its deadline."""

    def __init__(self, operation: str, timeout_s: float):
        self.operation = operation
        self.timeout_s = timeout_s
        super().__init__(
            f"Store operation '{operation}' timed out after {timeout_s}s",
            details={"operation": operation, "timeout_s": timeout_s},
        )


class CorruptStoreError(HealthStoreError):
    """The store file exists but is not a readable store document."""

    def __init__(self, filepath: str, original_error: str):
        self.filepath = filepath
        super().__init__(f"Health store file is corrupt: {filepath}",
                         details={"filepath": filepath, "error": original_error})


# =============================================================================
# Recognition
# =============================================================================

class RecognitionError(MetrikaException):
    """Capturing a display image or reading its text failed."""


class ImageLoadError(RecognitionError):
    def __init__(self, filepath: str, original_error: str):
        self.filepath = filepath
        super().__init__(f"Could not load image: {filepath}",
                         {"filepath": filepath, "error": original_error})


class TextRecognitionError(RecognitionError):
    """The OCR engine raised or is not installed."""

    def __init__(self, engine: str, original_error: str):
        self.engine = engine
        super().__init__(f"Text recognition failed ({engine}): {original_error}",
                         {"engine": engine, "error": original_error})


class CaptureCancelledError(RecognitionError):
    """The user backed out of the capture step."""

    def __init__(self):
        super().__init__("Image capture was cancelled")


# =============================================================================
# Normalization
# =============================================================================

class NormalizationError(MetrikaException):
    """User or OCR input that does not parse into a value."""

    def __init__(self, input_value: str, message: str,
                 details: Optional[dict[str, Any]] = None):
        self.input_value = input_value
        super().__init__(message, {**(details or {}), "input_value": input_value})


class WeightParseError(NormalizationError):
    def __init__(self, input_value: str):
        super().__init__(input_value, f"Could not parse weight from: '{input_value}'")


class VolumeParseError(NormalizationError):
    def __init__(self, input_value: str):
        super().__init__(input_value, f"Could not parse volume from: '{input_value}'")


# =============================================================================
# Output
# =============================================================================

class OutputError(MetrikaException):
    """A report could not be rendered or written."""


class FileWriteError(OutputError):
    def __init__(self, filepath: str, original_error: str):
        self.filepath = filepath
        super().__init__(f"Failed to write file: {filepath}",
                         {"filepath": filepath, "error": original_error})


class UnsupportedFormatError(OutputError):
    """Requested output format is neither JSON nor CSV."""

    def __init__(self, format_name: str, supported_formats: list[str]):
        self.format_name = format_name
        self.supported_formats = supported_formats
        super().__init__(f"Unsupported output format: '{format_name}'",
                         {"format": format_name, "supported": supported_formats})
