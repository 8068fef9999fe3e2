import tempfile
from pathlib import Path

from kartka.config.settings import Settings
from kartka.logging.logger import Log
from kartka.ocr.exceptions import OcrError
from kartka.ocr.factory import OcrEngineFactory
from kartka.processor.exceptions import IndexWriteError, ProcessorError
from kartka.processor.index_directory import IndexDirectory
from kartka.processor.naming import is_hidden
from kartka.processor.pipeline import PipelineContext
from kartka.processor.processor import Processor, build_scan_processor
from kartka.runner.models import BatchReport, DocumentFailure
from kartka.storage.exceptions import StorageError
from kartka.storage.factory import ObjectStoreFactory


class ScanRunner:
    """Processes every file in the scan directory once: OCR, index, upload, retire.

    A failing document is reported and left in place for the next run; only
    an unusable index directory aborts the batch.
    """

    def __init__(self, processor: Processor, scan_dir: Path, index: IndexDirectory) -> None:
        self._processor = processor
        self._scan_dir = scan_dir
        self._index = index

    def run(self) -> BatchReport:
        self._index.ensure_writable()
        report = BatchReport()
        documents = self._pending_documents()
        Log.info(f"Found {len(documents)} document(s) in {self._scan_dir}")

        for position, path in enumerate(documents, start=1):
            Log.info(f"({position} / {len(documents)}) processing {path.name}..")
            try:
                with tempfile.TemporaryDirectory(prefix="kartka-scan-") as work_dir:
                    context = self._processor.process(
                        PipelineContext(work_dir=Path(work_dir), source_path=path)
                    )
            except IndexWriteError:
                raise
            except (OcrError, StorageError, ProcessorError, OSError) as exc:
                self._handle_failure(report, path.name, exc)
                continue
            report.processed.append(context.remote_key)

        Log.info(f"Scan finished: {report.summary()}")
        return report

    def _pending_documents(self) -> list[Path]:
        try:
            return sorted(
                path
                for path in self._scan_dir.iterdir()
                if path.is_file() and not is_hidden(path.name)
            )
        except OSError as exc:
            raise ProcessorError(f"cannot read scan directory {self._scan_dir}: {exc}") from exc

    def _handle_failure(self, report: BatchReport, name: str, exc: Exception) -> None:
        Log.error(f"Failed to process {name}: {exc}")
        report.failures.append(DocumentFailure(name=name, error=str(exc)))


def build_scan_runner(settings: Settings) -> ScanRunner:
    index = IndexDirectory(settings.index_dir)
    processor = build_scan_processor(
        settings,
        ocr_engine=OcrEngineFactory.create(settings),
        store=ObjectStoreFactory.create(settings),
        index=index,
    )
    return ScanRunner(processor, settings.scan_dir, index)
