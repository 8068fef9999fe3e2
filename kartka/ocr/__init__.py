from kartka.ocr.base import BaseOcrEngine
from kartka.ocr.exceptions import OcrError
from kartka.ocr.factory import OcrEngineFactory

__all__ = ["BaseOcrEngine", "OcrEngineFactory", "OcrError"]
