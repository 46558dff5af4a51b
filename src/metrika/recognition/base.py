"""Text recognition and image capture interfaces."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from ..exceptions import ImageLoadError


class TextRecognizer(ABC):
    """Turns a still image into recognized text lines."""

    engine: str = "unknown"

    @abstractmethod
    def recognize(self, image: Image.Image) -> list[str]:
        """
        Recognize text in an image.

        Returns:
            Non-blank lines in source order; empty when no text was found.

        Raises:
            TextRecognitionError: If the engine fails.
        """
        pass


class ImageSource(ABC):
    """Produces one still image per capture action."""

    @abstractmethod
    def capture(self) -> Optional[Image.Image]:
        """
        Return the captured image, or None if the user cancelled.

        Sources may also raise CaptureCancelledError to signal cancellation.
        """
        pass

    def describe(self) -> str:
        return type(self).__name__


class FileImageSource(ImageSource):
    """Image source that reads a photo from disk."""

    def __init__(self, filepath: Union[str, Path]):
        self.filepath = Path(filepath)

    def capture(self) -> Optional[Image.Image]:
        if not self.filepath.exists():
            raise ImageLoadError(str(self.filepath), "file not found")
        try:
            with Image.open(self.filepath) as img:
                img.load()
                return img.copy()
        except (UnidentifiedImageError, OSError) as e:
            raise ImageLoadError(str(self.filepath), str(e))

    def describe(self) -> str:
        return str(self.filepath)
