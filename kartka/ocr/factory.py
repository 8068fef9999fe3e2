from kartka.config.settings import Settings
from kartka.ocr.base import BaseOcrEngine
from kartka.ocr.pdfplumber_adapter import PdfPlumberAdapter
from kartka.ocr.tesseract_adapter import TesseractAdapter


class OcrEngineFactory:
    """Creates the correct OCR engine based on settings."""

    ENGINES = ("tesseract", "pdfplumber")

    @classmethod
    def create(cls, settings: Settings) -> BaseOcrEngine:
        engine = settings.ocr_engine.lower()
        if engine == "tesseract":
            return TesseractAdapter(language=settings.ocr_language, dpi=settings.ocr_dpi)
        if engine == "pdfplumber":
            return PdfPlumberAdapter()
        raise ValueError(f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}")
