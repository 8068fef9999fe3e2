from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from kartka.ocr.base import BaseOcrEngine
from kartka.ocr.exceptions import OcrError
from kartka.processor.exceptions import SourceRetireError
from kartka.processor.index_directory import IndexDirectory
from kartka.processor.naming import index_entry_name, remote_key_for
from kartka.processor.pipeline import PipelineContext, PipelineStep
from kartka.processor.processor import Processor, build_hydrate_processor, build_scan_processor
from kartka.processor.steps import (
    AssignRemoteKeyStep,
    ConvertImageStep,
    DiscardUncommittedEntryStep,
    DownloadBlobStep,
    ExtractTextStep,
    RetireSourceStep,
    UploadBlobStep,
    WriteIndexEntryStep,
)
from kartka.storage.base import BaseObjectStore
from kartka.storage.exceptions import StorageError


def _make_scan_pipeline(
    tmp_path: Path,
) -> tuple[Processor, MagicMock, MagicMock, IndexDirectory, Path]:
    ocr_engine = MagicMock(spec=BaseOcrEngine)
    store = MagicMock(spec=BaseObjectStore)
    index_dir = tmp_path / "index"
    index_dir.mkdir()
    index = IndexDirectory(index_dir)
    ocr_engine.extract_text.return_value = "Hello World"
    steps: list[PipelineStep] = [
        ExtractTextStep(ocr_engine),
        AssignRemoteKeyStep(),
        WriteIndexEntryStep(index),
        UploadBlobStep(store),
        RetireSourceStep(),
    ]
    processor = Processor(steps=steps, failed_step=DiscardUncommittedEntryStep(index))
    source = tmp_path / "letter1.pdf"
    source.write_bytes(b"%PDF letter1")
    return processor, ocr_engine, store, index, source


def _context(tmp_path: Path, source: Path | None = None) -> PipelineContext:
    work_dir = tmp_path / "work"
    work_dir.mkdir(exist_ok=True)
    return PipelineContext(work_dir=work_dir, source_path=source)


class TestProcessorPipeline:
    def test_runs_all_steps_and_commits(self, tmp_path: Path) -> None:
        processor, ocr_engine, store, index, source = _make_scan_pipeline(tmp_path)
        key = remote_key_for(source)

        context = processor.process(_context(tmp_path, source))

        ocr_engine.extract_text.assert_called_once_with(source)
        store.upload.assert_called_once_with(source, key)
        assert context.remote_key == key
        assert context.entry_name == index_entry_name(key)
        assert index.read_entry(context.entry_name) == "Hello World"
        assert not source.exists()

    def test_runs_steps_in_order(self, tmp_path: Path) -> None:
        call_order: list[str] = []

        class _Recorder(PipelineStep):
            def __init__(self, name: str) -> None:
                self._name = name

            def run(self, context: PipelineContext) -> PipelineContext:
                call_order.append(self._name)
                return context

        Processor([_Recorder("ocr"), _Recorder("write"), _Recorder("upload")]).process(
            _context(tmp_path)
        )

        assert call_order == ["ocr", "write", "upload"]

    def test_ocr_failure_reraises_and_leaves_source(self, tmp_path: Path) -> None:
        processor, ocr_engine, store, index, source = _make_scan_pipeline(tmp_path)
        ocr_engine.extract_text.side_effect = OcrError("bad scan")

        with pytest.raises(OcrError, match="bad scan"):
            processor.process(_context(tmp_path, source))

        store.upload.assert_not_called()
        assert index.entry_names() == []
        assert source.exists()

    def test_upload_failure_discards_index_entry(self, tmp_path: Path) -> None:
        processor, _ocr, store, index, source = _make_scan_pipeline(tmp_path)
        store.upload.side_effect = StorageError("offline")

        with pytest.raises(StorageError, match="offline"):
            processor.process(_context(tmp_path, source))

        assert index.entry_names() == []
        assert source.exists()

    def test_interrupted_upload_discards_index_entry(self, tmp_path: Path) -> None:
        processor, _ocr, store, index, source = _make_scan_pipeline(tmp_path)
        store.upload.side_effect = KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            processor.process(_context(tmp_path, source))

        assert index.entry_names() == []
        assert source.exists()

    def test_failed_step_sees_error_message(self, tmp_path: Path) -> None:
        failed_step = MagicMock(spec=PipelineStep)
        broken = MagicMock(spec=PipelineStep)
        broken.run.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            Processor([broken], failed_step=failed_step).process(_context(tmp_path))

        context = failed_step.run.call_args.args[0]
        assert context.error_message == "boom"


class TestRetireSourceStep:
    def test_moves_to_done_dir(self, tmp_path: Path) -> None:
        done = tmp_path / "done"
        done.mkdir()
        source = tmp_path / "letter.pdf"
        source.write_bytes(b"x")

        RetireSourceStep(done).run(_context(tmp_path, source))

        assert not source.exists()
        assert (done / "letter.pdf").read_bytes() == b"x"

    def test_keeps_earlier_scan_with_same_name(self, tmp_path: Path) -> None:
        done = tmp_path / "done"
        done.mkdir()
        (done / "letter.pdf").write_bytes(b"first")
        source = tmp_path / "letter.pdf"
        source.write_bytes(b"second")
        context = _context(tmp_path, source)
        context.remote_key = remote_key_for(source)

        RetireSourceStep(done).run(context)

        assert not source.exists()
        assert (done / "letter.pdf").read_bytes() == b"first"
        assert (done / Path(context.remote_key).name).read_bytes() == b"second"

    def test_refuses_to_overwrite_without_remote_key(self, tmp_path: Path) -> None:
        done = tmp_path / "done"
        done.mkdir()
        (done / "letter.pdf").write_bytes(b"first")
        source = tmp_path / "letter.pdf"
        source.write_bytes(b"second")

        with pytest.raises(SourceRetireError):
            RetireSourceStep(done).run(_context(tmp_path, source))

        assert (done / "letter.pdf").read_bytes() == b"first"
        assert source.exists()

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(SourceRetireError):
            RetireSourceStep().run(_context(tmp_path, tmp_path / "gone.pdf"))


class TestConvertImageStep:
    def test_wraps_image_in_pdf(self, tmp_path: Path) -> None:
        source = tmp_path / "scan.png"
        Image.new("RGB", (40, 20), "white").save(source)
        context = ConvertImageStep().run(_context(tmp_path, source))

        assert context.upload_path == context.work_dir / "scan.pdf"
        assert context.upload_path.read_bytes().startswith(b"%PDF")

    def test_leaves_pdf_alone(self, tmp_path: Path) -> None:
        source = tmp_path / "scan.pdf"
        source.write_bytes(b"%PDF")
        assert ConvertImageStep().run(_context(tmp_path, source)).upload_path is None

    def test_remote_key_takes_pdf_suffix(self, tmp_path: Path) -> None:
        source = tmp_path / "scan.png"
        source.write_bytes(b"png")
        context = _context(tmp_path, source)
        context.upload_path = context.work_dir / "scan.pdf"

        context = AssignRemoteKeyStep().run(context)

        assert context.remote_key == remote_key_for(source, suffix=".pdf")
        assert context.remote_key.endswith(".pdf")


class TestExtractTextStep:
    def test_reads_converted_upload_when_present(self, tmp_path: Path) -> None:
        ocr_engine = MagicMock(spec=BaseOcrEngine)
        ocr_engine.extract_text.return_value = "text"
        context = _context(tmp_path, tmp_path / "scan.png")
        context.upload_path = context.work_dir / "scan.pdf"

        ExtractTextStep(ocr_engine).run(context)

        ocr_engine.extract_text.assert_called_once_with(context.work_dir / "scan.pdf")


class TestDownloadBlobStep:
    def test_downloads_into_work_dir(self, tmp_path: Path) -> None:
        store = MagicMock(spec=BaseObjectStore)
        context = _context(tmp_path)
        context.remote_key = "2024/letter.pdf"

        context = DownloadBlobStep(store).run(context)

        store.download.assert_called_once_with("2024/letter.pdf", context.work_dir / "letter.pdf")
        assert context.source_path == context.work_dir / "letter.pdf"


class TestBuilders:
    def test_scan_processor_adds_conversion_when_enabled(self, make_settings) -> None:
        processor = build_scan_processor(
            make_settings(convert_images_to_pdf=True),
            MagicMock(spec=BaseOcrEngine),
            MagicMock(spec=BaseObjectStore),
            MagicMock(spec=IndexDirectory),
        )
        assert isinstance(processor._steps[0], ConvertImageStep)

    def test_scan_processor_retires_last(self, make_settings) -> None:
        processor = build_scan_processor(
            make_settings(),
            MagicMock(spec=BaseOcrEngine),
            MagicMock(spec=BaseObjectStore),
            MagicMock(spec=IndexDirectory),
        )
        assert [type(step) for step in processor._steps] == [
            ExtractTextStep,
            AssignRemoteKeyStep,
            WriteIndexEntryStep,
            UploadBlobStep,
            RetireSourceStep,
        ]

    def test_hydrate_processor_steps(self) -> None:
        processor = build_hydrate_processor(
            MagicMock(spec=BaseOcrEngine),
            MagicMock(spec=BaseObjectStore),
            MagicMock(spec=IndexDirectory),
        )
        assert [type(step) for step in processor._steps] == [
            DownloadBlobStep,
            ExtractTextStep,
            WriteIndexEntryStep,
        ]
