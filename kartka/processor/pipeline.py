from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class PipelineContext:
    """State of one document moving through the pipeline steps.

    `work_dir` is a scoped temporary directory owned by the caller.
    """

    work_dir: Path
    source_path: Path | None = None
    upload_path: Path | None = None
    remote_key: str = ""
    entry_name: str = ""
    extracted_text: str = ""
    entry_written: bool = False
    uploaded: bool = False
    error_message: str = ""

    @property
    def display_name(self) -> str:
        if self.source_path is not None and not self.remote_key:
            return self.source_path.name
        return self.remote_key


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
