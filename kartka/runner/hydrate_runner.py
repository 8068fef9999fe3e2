import tempfile
from pathlib import Path

from kartka.config.settings import Settings
from kartka.logging.logger import Log
from kartka.ocr.exceptions import OcrError
from kartka.ocr.factory import OcrEngineFactory
from kartka.processor.exceptions import IndexWriteError, ProcessorError
from kartka.processor.index_directory import IndexDirectory
from kartka.processor.naming import index_entry_name
from kartka.processor.pipeline import PipelineContext
from kartka.processor.processor import Processor, build_hydrate_processor
from kartka.runner.models import BatchReport, DocumentFailure
from kartka.storage.base import BaseObjectStore
from kartka.storage.exceptions import StorageError
from kartka.storage.factory import ObjectStoreFactory


class HydrateRunner:
    """Rebuilds index entries from the blobs in remote storage.

    Blobs whose entry already exists are skipped unless overwrite is set.
    A failed listing aborts the run; a failed blob is reported and skipped.
    """

    def __init__(
        self,
        processor: Processor,
        store: BaseObjectStore,
        index: IndexDirectory,
        *,
        overwrite: bool = False,
    ) -> None:
        self._processor = processor
        self._store = store
        self._index = index
        self._overwrite = overwrite

    def run(self) -> BatchReport:
        self._index.ensure_writable()
        report = BatchReport()
        keys = self._store.list_keys()
        existing = set(self._index.entry_names())
        Log.info(f"Found {len(keys)} blob(s) in remote storage, {len(existing)} local entries")

        for position, key in enumerate(keys, start=1):
            entry_name = index_entry_name(key)
            if entry_name in existing and not self._overwrite:
                Log.debug(f"Skipping {key}: index entry already present")
                report.skipped.append(key)
                continue
            Log.info(f"({position} / {len(keys)}) pulling, converting, and processing: {key}..")
            try:
                with tempfile.TemporaryDirectory(prefix="kartka-hydrate-") as work_dir:
                    self._processor.process(
                        PipelineContext(
                            work_dir=Path(work_dir),
                            remote_key=key,
                            entry_name=entry_name,
                        )
                    )
            except IndexWriteError:
                raise
            except (OcrError, StorageError, ProcessorError, OSError) as exc:
                Log.error(f"Failed to hydrate {key}: {exc}")
                report.failures.append(DocumentFailure(name=key, error=str(exc)))
                continue
            report.processed.append(key)

        Log.info(f"Hydrate finished: {report.summary()}")
        return report


def build_hydrate_runner(settings: Settings, overwrite: bool | None = None) -> HydrateRunner:
    index = IndexDirectory(settings.index_dir)
    store = ObjectStoreFactory.create(settings)
    processor = build_hydrate_processor(
        ocr_engine=OcrEngineFactory.create(settings),
        store=store,
        index=index,
    )
    return HydrateRunner(
        processor,
        store,
        index,
        overwrite=settings.hydrate_overwrite if overwrite is None else overwrite,
    )
