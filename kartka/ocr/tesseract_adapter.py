from collections.abc import Iterator
from pathlib import Path

import pymupdf
import pytesseract
from PIL import Image

from kartka.ocr.base import BaseOcrEngine, is_image, is_pdf
from kartka.ocr.exceptions import OcrError


class TesseractAdapter(BaseOcrEngine):
    """OCR with Tesseract; PDF pages are rasterized with PyMuPDF first."""

    def __init__(self, *, language: str = "eng", dpi: int = 300) -> None:
        self._language = language
        self._dpi = dpi

    def extract_text(self, path: Path) -> str:
        if not (is_pdf(path) or is_image(path)):
            raise OcrError(f"unsupported document type: '{path.name}'")
        try:
            pages = [self._recognize(image) for image in self._page_images(path)]
        except OcrError:
            raise
        except pytesseract.TesseractNotFoundError as exc:
            raise OcrError(f"tesseract binary not found: {exc}") from exc
        except Exception as exc:
            raise OcrError(f"tesseract OCR failed for {path}: {exc}") from exc
        return "\n".join(pages).strip()

    def _recognize(self, image: Image.Image) -> str:
        return pytesseract.image_to_string(image, lang=self._language)

    def _page_images(self, path: Path) -> Iterator[Image.Image]:
        if is_image(path):
            with Image.open(path) as image:
                image.load()
                yield image
            return
        with pymupdf.open(path) as doc:  # type: ignore[no-untyped-call]
            if doc.page_count == 0:
                raise OcrError(f"PDF has no pages: {path}")
            for page in doc:
                pixmap = page.get_pixmap(dpi=self._dpi)
                yield Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)
