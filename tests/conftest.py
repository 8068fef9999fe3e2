import io
from collections.abc import Callable
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from kartka.config.settings import Settings
from kartka.ocr.base import BaseOcrEngine
from kartka.ocr.exceptions import OcrError


class ContentOcrEngine(BaseOcrEngine):
    """Deterministic stand-in for an OCR engine: the 'recognized' text is the file content.

    Files whose content starts with b"CORRUPT" fail like an unreadable scan.
    """

    def __init__(self) -> None:
        self.calls: list[Path] = []

    def extract_text(self, path: Path) -> str:
        self.calls.append(path)
        data = path.read_bytes()
        if data.startswith(b"CORRUPT"):
            raise OcrError(f"cannot read {path.name}")
        return data.decode("utf-8")


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def ocr_engine() -> ContentOcrEngine:
    return ContentOcrEngine()


@pytest.fixture()
def dirs(tmp_path: Path) -> dict[str, Path]:
    """scan, index and remote directories for a local-backend setup."""
    paths = {name: tmp_path / name for name in ("scan", "index", "remote", "done")}
    for path in paths.values():
        path.mkdir()
    return paths


@pytest.fixture()
def make_settings(dirs: dict[str, Path]) -> Callable[..., Settings]:
    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "scan_dir": dirs["scan"],
            "index_dir": dirs["index"],
            "storage_backend": "local",
            "local_remote_dir": dirs["remote"],
        }
        values.update(overrides)
        return Settings(**values)  # type: ignore[arg-type]

    return _make
