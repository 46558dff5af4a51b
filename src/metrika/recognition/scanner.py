"""
Scale display scanner.

Runs the capture -> recognize -> extract -> confirm -> save flow that turns
a photo of a scale into a saved body weight.
"""

from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from PIL import Image
from pydantic import BaseModel, ConfigDict

from .base import ImageSource, TextRecognizer
from ..exceptions import CaptureCancelledError, NormalizationError, RecognitionError
from ..extractors.weight import WeightTokenExtractor
from ..logging import HealthLogger
from ..models.weight import Weight

if TYPE_CHECKING:
    from ..cache import HealthDataCache

logger = HealthLogger(__name__)


class ScanStatus(str, Enum):
    """Outcome of a scan-and-save run."""

    CANCELLED = "cancelled"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    IMPLAUSIBLE = "implausible"
    DECLINED = "declined"
    SAVED = "saved"
    SAVE_FAILED = "save_failed"


class ScanResult(BaseModel):
    """Result of ``WeightScanner.scan_and_save``."""

    model_config = ConfigDict(frozen=True)

    status: ScanStatus
    weight_text: Optional[str] = None
    lines: list[str] = []
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ScanStatus.SAVED


class WeightScanner:
    """
    Reads a body weight from a photographed scale display.

    Args:
        recognizer: Text recognition engine.
        extractor: Weight token extractor; a default one is created if omitted.
        check_plausibility: Reject tokens outside ``Weight.is_plausible``
            instead of offering them for confirmation. Off by default.
    """

    def __init__(
        self,
        recognizer: TextRecognizer,
        extractor: Optional[WeightTokenExtractor] = None,
        check_plausibility: bool = False,
    ):
        self.recognizer = recognizer
        self.extractor = extractor or WeightTokenExtractor()
        self.check_plausibility = check_plausibility

    def read_lines(self, image: Image.Image) -> list[str]:
        """Recognize text lines in ``image``."""
        logger.recognition_started(source=self.recognizer.engine)
        return self.recognizer.recognize(image)

    def scan_lines(self, lines: list[str]) -> Optional[str]:
        """Extract a weight token from recognized lines and log the outcome."""
        value, index = self.extractor.extract_with_index(lines)
        if value is None:
            logger.weight_not_found(line_count=len(lines))
        else:
            logger.weight_detected(value=value, line_index=index)
        return value

    def scan(self, image: Image.Image) -> Optional[str]:
        """
        Recognize ``image`` and return the detected weight token, or None.

        Raises:
            TextRecognitionError: If the recognizer fails.
        """
        return self.scan_lines(self.read_lines(image))

    def scan_and_save(
        self,
        source: ImageSource,
        confirm: Callable[[str], bool],
        cache: "HealthDataCache",
    ) -> ScanResult:
        """
        Capture an image, detect a weight and save it once confirmed.

        ``confirm`` receives the detected token and returns whether the user
        accepted it. The cached latest weight is refreshed after a save.
        """
        try:
            image = source.capture()
        except CaptureCancelledError:
            image = None
        except RecognitionError as e:
            logger.recognition_failed(error=e.message, error_type=type(e).__name__)
            return ScanResult(status=ScanStatus.FAILED, error=e.message)

        if image is None:
            logger.capture_cancelled(source=source.describe())
            return ScanResult(status=ScanStatus.CANCELLED)

        try:
            lines = self.read_lines(image)
        except RecognitionError as e:
            logger.recognition_failed(error=e.message, error_type=type(e).__name__)
            return ScanResult(status=ScanStatus.FAILED, error=e.message)

        token = self.scan_lines(lines)
        if token is None:
            return ScanResult(status=ScanStatus.NOT_FOUND, lines=lines)

        try:
            weight = Weight.from_string(token)
        except NormalizationError as e:
            return ScanResult(status=ScanStatus.NOT_FOUND, lines=lines, error=e.message)

        if self.check_plausibility and not weight.is_plausible():
            logger.warning("weight_implausible", value=token)
            return ScanResult(status=ScanStatus.IMPLAUSIBLE, weight_text=token, lines=lines)

        if not confirm(token):
            return ScanResult(status=ScanStatus.DECLINED, weight_text=token, lines=lines)

        if cache.record_weight(float(weight.kg)):
            return ScanResult(status=ScanStatus.SAVED, weight_text=token, lines=lines)
        return ScanResult(status=ScanStatus.SAVE_FAILED, weight_text=token, lines=lines)
