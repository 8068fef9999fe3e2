from kartka.config.settings import Settings
from kartka.logging.logger import Log
from kartka.ocr.base import BaseOcrEngine
from kartka.processor.index_directory import IndexDirectory
from kartka.processor.pipeline import PipelineContext, PipelineStep
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


class Processor:
    """Runs one document through an ordered list of steps.

    On failure the optional failed_step sees the context (with error_message
    set) before the exception is re-raised to the caller.
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        failed_step: PipelineStep | None = None,
    ) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, context: PipelineContext) -> PipelineContext:
        for step in self._steps:
            try:
                context = step.run(context)
            except BaseException as exc:
                context.error_message = str(exc)
                Log.debug(f"{type(step).__name__} failed for {context.display_name}: {exc}")
                if self._failed_step is not None:
                    self._failed_step.run(context)
                raise
        return context


def build_scan_processor(
    settings: Settings,
    ocr_engine: BaseOcrEngine,
    store: BaseObjectStore,
    index: IndexDirectory,
) -> Processor:
    """Scan order: OCR, text entry, upload, and only then retire the source."""
    steps: list[PipelineStep] = []
    if settings.convert_images_to_pdf:
        steps.append(ConvertImageStep())
    steps += [
        ExtractTextStep(ocr_engine),
        AssignRemoteKeyStep(),
        WriteIndexEntryStep(index),
        UploadBlobStep(store),
        RetireSourceStep(settings.done_dir),
    ]
    return Processor(steps=steps, failed_step=DiscardUncommittedEntryStep(index))


def build_hydrate_processor(
    ocr_engine: BaseOcrEngine,
    store: BaseObjectStore,
    index: IndexDirectory,
) -> Processor:
    return Processor(
        steps=[
            DownloadBlobStep(store),
            ExtractTextStep(ocr_engine),
            WriteIndexEntryStep(index),
        ]
    )
