"""
Batch orchestration.

`BatchRunner` walks the resolved file set and drives each file through
read → prompt → completion → write.  Every file yields a `FileOutcome`;
a failure in one file is recorded and never stops the others.  Results
are reported in resolved order even when a worker pool is used.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .errors import CompletionError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 3

STAGE_READ = "read"
STAGE_COMPLETION = "completion"
STAGE_WRITE = "write"


class CompletionService(Protocol):
    def complete(self, model: str, instruction: str, content: str) -> str:
        ...


class FileStore(Protocol):
    def read(self, path: Path) -> str:
        ...

    def write(self, path: Path, content: str) -> None:
        ...


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing one file."""

    path: Path
    ok: bool
    reason: Optional[str] = None
    stage: Optional[str] = None

    @classmethod
    def success(cls, path: Path) -> "FileOutcome":
        return cls(path=path, ok=True)

    @classmethod
    def failure(cls, path: Path, stage: str, reason: str) -> "FileOutcome":
        return cls(path=path, ok=False, reason=reason, stage=stage)


@dataclass
class BatchReport:
    """Aggregated outcomes of one batch, in resolved file order."""

    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.ok else EXIT_PARTIAL_FAILURE

    def summary(self) -> str:
        lines = [
            f"Processed {len(self.outcomes)} file(s): "
            f"{len(self.succeeded)} succeeded, {len(self.failed)} failed."
        ]
        for outcome in self.failed:
            lines.append(f"  FAILED {outcome.path}: {outcome.reason}")
        return "\n".join(lines)


class BatchRunner:
    """Applies one instruction to every file in a batch.

    The instruction and model are read-only for the lifetime of the
    runner; nothing else is shared between files.
    """

    def __init__(
        self,
        client: CompletionService,
        store: FileStore,
        instruction: str,
        model: str,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.client = client
        self.store = store
        self.instruction = instruction
        self.model = model
        self.workers = workers

    def process_file(self, path: Path) -> FileOutcome:
        """Run one file through read → completion → write and report how it went."""
        try:
            content = self.store.read(path)
        except (OSError, UnicodeDecodeError) as exc:
            outcome = FileOutcome.failure(path, STAGE_READ, f"read error: {exc}")
            logger.error("Error processing file %s: %s", path, outcome.reason)
            return outcome

        try:
            new_content = self.client.complete(self.model, self.instruction, content)
        except CompletionError as exc:
            outcome = FileOutcome.failure(path, STAGE_COMPLETION, str(exc))
            logger.error("Error processing file %s: %s", path, outcome.reason)
            return outcome
        except Exception as exc:
            # Anything else from the client still only fails this file.
            outcome = FileOutcome.failure(path, STAGE_COMPLETION, f"unexpected error: {exc!r}")
            logger.exception("Error processing file %s: %s", path, outcome.reason)
            return outcome

        try:
            self.store.write(path, new_content)
        except (OSError, UnicodeError) as exc:
            outcome = FileOutcome.failure(path, STAGE_WRITE, f"write error: {exc}")
            logger.error("Error processing file %s: %s", path, outcome.reason)
            return outcome

        logger.info("Changes applied successfully for %s", path)
        return FileOutcome.success(path)

    def _run_sequential(self, paths: Sequence[Path]) -> List[FileOutcome]:
        outcomes: List[FileOutcome] = []
        for index, path in enumerate(paths, start=1):
            logger.info("Processing file %s (%d/%d)", path, index, len(paths))
            outcomes.append(self.process_file(path))
        return outcomes

    def _run_pooled(self, paths: Sequence[Path]) -> List[FileOutcome]:
        logger.info("Processing %d file(s) with %d workers", len(paths), self.workers)
        pool = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="refactorer")
        try:
            futures = [pool.submit(self.process_file, path) for path in paths]
            return [future.result() for future in futures]
        except KeyboardInterrupt:
            # Files already written stay written; queued ones are never started.
            pool.shutdown(wait=False, cancel_futures=True)
            raise
        finally:
            pool.shutdown(wait=True)

    def run(self, paths: Sequence[Path]) -> BatchReport:
        """Process every path and return the aggregated report.

        Always attempts every path; per-file failures only show up in the
        report.
        """
        if self.workers > 1 and len(paths) > 1:
            outcomes = self._run_pooled(paths)
        else:
            outcomes = self._run_sequential(paths)
        return BatchReport(outcomes=outcomes)
