from abc import ABC, abstractmethod
from pathlib import Path

IMAGE_SUFFIXES = frozenset({".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".gif", ".webp"})


def is_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_SUFFIXES


def is_pdf(path: Path) -> bool:
    return path.suffix.lower() == ".pdf"


class BaseOcrEngine(ABC):
    """Contract for all OCR adapters."""

    @abstractmethod
    def extract_text(self, path: Path) -> str:
        """Extract plain text from a scanned PDF or image.

        Args:
            path: Local path of the document.

        Returns:
            Extracted text as a single string, pages separated by newlines.

        Raises:
            OcrError: on engine failure, or if the file is unreadable or
                of an unsupported type.
        """
