from dataclasses import dataclass, field


@dataclass(frozen=True)
class DocumentFailure:
    name: str
    error: str


@dataclass
class BatchReport:
    """Outcome of one scan or hydrate run."""

    processed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.processed) + len(self.skipped) + len(self.failures)

    @property
    def all_failed(self) -> bool:
        """True when there was work to do and none of it succeeded."""
        return bool(self.failures) and not self.processed and not self.skipped

    def summary(self) -> str:
        return (
            f"{len(self.processed)} processed, {len(self.skipped)} skipped, "
            f"{len(self.failures)} failed"
        )
