import shutil
from pathlib import Path

import pymupdf

from kartka.logging.logger import Log
from kartka.ocr.base import BaseOcrEngine, is_image
from kartka.processor.exceptions import ConversionError, SourceRetireError
from kartka.processor.index_directory import IndexDirectory
from kartka.processor.naming import index_entry_name, remote_key_for
from kartka.processor.pipeline import PipelineContext, PipelineStep
from kartka.storage.base import BaseObjectStore


def _require_source(context: PipelineContext) -> Path:
    if context.source_path is None:
        raise ValueError("PipelineContext.source_path must be set before this step")
    return context.source_path


def _done_target(done_dir: Path, source: Path, remote_key: str) -> Path:
    """done_dir/<name>, or the remote-key name when an earlier scan already holds it."""
    target = done_dir / source.name
    if not target.exists():
        return target
    if not remote_key:
        raise FileExistsError(f"{target} already exists")
    return done_dir / f"{Path(remote_key).stem}{source.suffix.lower()}"


class ConvertImageStep(PipelineStep):
    """Wraps an image scan into a single-page PDF; the PDF is what gets uploaded."""

    def run(self, context: PipelineContext) -> PipelineContext:
        source = _require_source(context)
        if not is_image(source):
            return context
        target = context.work_dir / f"{source.stem}.pdf"
        try:
            with pymupdf.open(source) as image:  # type: ignore[no-untyped-call]
                target.write_bytes(image.convert_to_pdf())
        except Exception as exc:
            raise ConversionError(f"could not convert {source.name} to PDF: {exc}") from exc
        context.upload_path = target
        Log.info(f"Converted {source.name} to PDF")
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, ocr_engine: BaseOcrEngine) -> None:
        self._ocr_engine = ocr_engine

    def run(self, context: PipelineContext) -> PipelineContext:
        # scan and hydrate OCR the same bytes: the blob that gets uploaded
        document = context.upload_path or _require_source(context)
        context.extracted_text = self._ocr_engine.extract_text(document)
        Log.info(f"Extracted {len(context.extracted_text)} chars from {document.name}")
        return context


class AssignRemoteKeyStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        source = _require_source(context)
        suffix = context.upload_path.suffix if context.upload_path is not None else None
        context.remote_key = remote_key_for(source, suffix=suffix)
        context.entry_name = index_entry_name(context.remote_key)
        return context


class WriteIndexEntryStep(PipelineStep):
    def __init__(self, index: IndexDirectory) -> None:
        self._index = index

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.entry_name:
            raise ValueError("PipelineContext.entry_name must be set before writing the index")
        self._index.write_entry(context.entry_name, context.extracted_text)
        context.entry_written = True
        Log.info(f"Wrote index entry {context.entry_name}")
        return context


class UploadBlobStep(PipelineStep):
    def __init__(self, store: BaseObjectStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        local_path = context.upload_path or _require_source(context)
        self._store.upload(local_path, context.remote_key)
        context.uploaded = True
        Log.info(f"Uploaded {local_path.name} as {context.remote_key}")
        return context


class RetireSourceStep(PipelineStep):
    """Deletes the processed scan, or moves it into done_dir when one is given."""

    def __init__(self, done_dir: Path | None = None) -> None:
        self._done_dir = done_dir

    def run(self, context: PipelineContext) -> PipelineContext:
        source = _require_source(context)
        try:
            if self._done_dir is None:
                source.unlink()
                Log.info(f"Removed {source.name} from scan directory")
            else:
                target = _done_target(self._done_dir, source, context.remote_key)
                shutil.move(source, target)
                Log.info(f"Moved {source.name} to {target}")
        except OSError as exc:
            raise SourceRetireError(f"could not retire {source}: {exc}") from exc
        return context


class DownloadBlobStep(PipelineStep):
    def __init__(self, store: BaseObjectStore) -> None:
        self._store = store

    def run(self, context: PipelineContext) -> PipelineContext:
        target = context.work_dir / Path(context.remote_key).name
        self._store.download(context.remote_key, target)
        context.source_path = target
        Log.debug(f"Downloaded {context.remote_key} to {target}")
        return context


class DiscardUncommittedEntryStep(PipelineStep):
    """Failure handler: drops an index entry whose blob never reached storage."""

    def __init__(self, index: IndexDirectory) -> None:
        self._index = index

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.entry_written and not context.uploaded:
            self._index.remove_entry(context.entry_name)
            context.entry_written = False
            Log.warning(f"Removed index entry {context.entry_name} after failed upload")
        return context
