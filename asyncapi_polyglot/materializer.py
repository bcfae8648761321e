"""Concurrent artifact materializer.

Writes generated artifacts under a base directory:
- Paths are checked (relative, inside the base, distinct) before any I/O
- Parent directories are created idempotently, once per distinct directory
- One write task per artifact runs on a bounded thread pool, each with its own timeout
- Every (path, outcome) pair is collected; failures are aggregated, not short-circuited

Writes are plain overwrites, so re-running after a partial failure or a
cancellation converges on the same tree.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
import logging
from pathlib import Path, PurePosixPath
from typing import Protocol

from asyncapi_polyglot.errors import MaterializationError

logger = logging.getLogger(__name__)

Content = str | Callable[[], str]


@dataclass(frozen=True)
class Artifact:
    """A file to write: a relative POSIX path and its text (or a thunk producing it)."""

    path: str
    content: Content

    def render(self) -> str:
        return self.content() if callable(self.content) else self.content

    def under(self, prefix: str) -> Artifact:
        """Same artifact, relocated below ``prefix``."""
        return Artifact(f"{prefix}/{self.path}", self.content)

    def resolved(self) -> Artifact:
        """Same artifact with a thunk already rendered to text."""
        return self if isinstance(self.content, str) else Artifact(self.path, self.render())


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. ``threading.Event`` or ``asyncio.Event``."""

    def is_set(self) -> bool: ...


class WriteStatus(StrEnum):
    WRITTEN = "written"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class WriteOutcome:
    path: Path
    status: WriteStatus
    error: BaseException | None = None


@dataclass(frozen=True)
class MaterializeResult:
    """Outcome of a run, one entry per artifact in input order."""

    outcomes: tuple[WriteOutcome, ...]

    @property
    def written(self) -> list[Path]:
        return [o.path for o in self.outcomes if o.status is WriteStatus.WRITTEN]

    @property
    def failures(self) -> list[tuple[Path, BaseException]]:
        return [
            (o.path, o.error)
            for o in self.outcomes
            if o.status is WriteStatus.FAILED and o.error is not None
        ]

    @property
    def skipped(self) -> list[Path]:
        return [o.path for o in self.outcomes if o.status is WriteStatus.SKIPPED]

    @property
    def count(self) -> int:
        return len(self.written)

    @property
    def ok(self) -> bool:
        return all(o.status is WriteStatus.WRITTEN for o in self.outcomes)


def _write_file(target: Path, artifact: Artifact) -> None:
    # Bytes keep line endings identical on every platform
    target.write_bytes(artifact.render().encode("utf-8"))


def _create_directories(directories: list[Path]) -> dict[Path, OSError]:
    errors: dict[Path, OSError] = {}
    for directory in directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create directory %s: %s", directory, e)
            errors[directory] = e
    return errors


class Materializer:
    """Writes artifacts under ``base_path`` with bounded parallelism.

    Attributes:
        base_path: Directory every artifact path is relative to
        max_workers: Upper bound on concurrent writes (semaphore and pool size)
        task_timeout: Seconds allowed for a single write
    """

    def __init__(
        self,
        base_path: Path | str,
        max_workers: int = 8,
        task_timeout: float = 30.0,
    ) -> None:
        if max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise ValueError(msg)
        self.base_path = Path(base_path)
        self.max_workers = max_workers
        self.task_timeout = task_timeout

    def resolve(self, artifacts: Iterable[Artifact]) -> list[tuple[Artifact, Path]]:
        """Map artifacts to target paths, rejecting unsafe or duplicate paths.

        Raises:
            ValueError: On an absolute path, a path escaping the base or a duplicate
        """
        resolved: list[tuple[Artifact, Path]] = []
        seen: set[PurePosixPath] = set()
        for artifact in artifacts:
            relative = PurePosixPath(artifact.path)
            if not artifact.path or relative.is_absolute() or ".." in relative.parts:
                msg = f"Artifact path must be relative and stay inside the base: {artifact.path!r}"
                raise ValueError(msg)
            if relative in seen:
                msg = f"Duplicate artifact path: {artifact.path!r}"
                raise ValueError(msg)
            seen.add(relative)
            resolved.append((artifact, self.base_path.joinpath(*relative.parts)))
        return resolved

    async def run(
        self,
        artifacts: Iterable[Artifact],
        cancel_token: CancelToken | None = None,
    ) -> MaterializeResult:
        """Write all artifacts and return their outcomes.

        Raises:
            ValueError: Before any I/O, when artifact paths are invalid
            MaterializationError: When any artifact failed or was skipped
        """
        targets = self.resolve(artifacts)
        loop = asyncio.get_running_loop()
        semaphore = asyncio.Semaphore(self.max_workers)
        executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="materializer-",
        )

        try:
            directories = sorted({target.parent for _, target in targets})
            dir_errors = await loop.run_in_executor(executor, _create_directories, directories)

            async def write_one(artifact: Artifact, target: Path) -> WriteOutcome:
                async with semaphore:
                    if cancel_token is not None and cancel_token.is_set():
                        return WriteOutcome(target, WriteStatus.SKIPPED)
                    if target.parent in dir_errors:
                        return WriteOutcome(target, WriteStatus.FAILED, dir_errors[target.parent])
                    try:
                        await asyncio.wait_for(
                            loop.run_in_executor(executor, _write_file, target, artifact),
                            timeout=self.task_timeout,
                        )
                    except TimeoutError:
                        error = TimeoutError(f"write timed out after {self.task_timeout}s")
                        logger.warning("Timed out writing %s", target)
                        return WriteOutcome(target, WriteStatus.FAILED, error)
                    except Exception as e:  # noqa: BLE001 - collected into MaterializationError
                        logger.warning("Failed to write %s: %s", target, e)
                        return WriteOutcome(target, WriteStatus.FAILED, e)
                    logger.debug("Wrote %s", target)
                    return WriteOutcome(target, WriteStatus.WRITTEN)

            outcomes = await asyncio.gather(*(write_one(a, t) for a, t in targets))
        finally:
            # Timed-out writes may still hold a worker; don't block on them
            executor.shutdown(wait=False, cancel_futures=True)

        result = MaterializeResult(tuple(outcomes))
        logger.info(
            "Materialized %d/%d artifacts under %s",
            result.count,
            len(result.outcomes),
            self.base_path,
        )
        if not result.ok:
            raise MaterializationError(result.failures, result.skipped)
        return result


def materialize(
    artifacts: Iterable[Artifact],
    base_path: Path | str,
    *,
    max_workers: int = 8,
    task_timeout: float = 30.0,
    cancel_token: CancelToken | None = None,
) -> MaterializeResult:
    """Synchronous wrapper around ``Materializer.run``."""
    materializer = Materializer(base_path, max_workers=max_workers, task_timeout=task_timeout)
    return asyncio.run(materializer.run(artifacts, cancel_token))
