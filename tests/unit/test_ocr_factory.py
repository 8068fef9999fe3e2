import pytest

from kartka.ocr.factory import OcrEngineFactory
from kartka.ocr.pdfplumber_adapter import PdfPlumberAdapter
from kartka.ocr.tesseract_adapter import TesseractAdapter


class TestOcrEngineFactory:
    def test_creates_tesseract_adapter(self, make_settings) -> None:
        adapter = OcrEngineFactory.create(make_settings(ocr_engine="tesseract"))
        assert isinstance(adapter, TesseractAdapter)

    def test_creates_pdfplumber_adapter(self, make_settings) -> None:
        adapter = OcrEngineFactory.create(make_settings(ocr_engine="pdfplumber"))
        assert isinstance(adapter, PdfPlumberAdapter)

    def test_is_case_insensitive(self, make_settings) -> None:
        adapter = OcrEngineFactory.create(make_settings(ocr_engine="Tesseract"))
        assert isinstance(adapter, TesseractAdapter)

    def test_raises_for_unknown_engine(self, make_settings) -> None:
        with pytest.raises(ValueError, match="Unknown OCR engine"):
            OcrEngineFactory.create(make_settings(ocr_engine="unknown"))
