from pathlib import Path

import pdfplumber

from kartka.ocr.base import BaseOcrEngine, is_pdf
from kartka.ocr.exceptions import OcrError


class PdfPlumberAdapter(BaseOcrEngine):
    """Reads the embedded text layer of a PDF using pdfplumber.

    No recognition happens here; only PDFs that already carry text
    (born-digital, or OCR'd by the scanner) yield anything.
    """

    def extract_text(self, path: Path) -> str:
        if not is_pdf(path):
            raise OcrError(f"pdfplumber can only read PDF files, got '{path.name}'")
        try:
            with pdfplumber.open(path) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return "\n".join(pages).strip()
        except Exception as exc:
            raise OcrError(f"pdfplumber extraction failed for {path}: {exc}") from exc
