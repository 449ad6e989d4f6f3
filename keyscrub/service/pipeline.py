# keyscrub/service/pipeline.py

"""Scatter-gather orchestration of scout, merge, and sanitize."""

import time
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from keyscrub.core.domain import (
    FileFailure,
    KeyTable,
    ProgressEvent,
    RunReport,
    SanitizedRecord,
)
from keyscrub.core.exceptions import InputError, PipelineError, ScrubError
from keyscrub.core.loader import IndicatorLoader
from keyscrub.engine import merge, sanitize, scout
from keyscrub.logic.templates import expand_template
from keyscrub.service.config import settings
from keyscrub.service.keylist import read_keylist, write_keylist

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Reader = Callable[[str], str]
Writer = Callable[[str, str], str]


class ScrubOrchestrator:
    """Runs scouts in parallel, merges behind a barrier, then sanitizes.

    Phase one scouts every file on a thread pool; each task owns its content
    and its own key namer. Phase two merges the per-file tables on the
    calling thread, in input order, once every scout has finished. Phase
    three sanitizes every scouted file on a thread pool against the frozen
    global table.

    A file that cannot be read or written is recorded as a FileFailure and
    the rest of its phase carries on. An InvariantViolation propagates as is;
    any other error raised by a task is a bug and surfaces as a PipelineError.
    """

    def __init__(
        self,
        loader: Optional[IndicatorLoader] = None,
        max_workers: Optional[int] = None,
        on_progress: Optional[Callable[[ProgressEvent], None]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            loader: Rule data; defaults to the configured or packaged set
            max_workers: Threads per phase; defaults to settings.max_workers
            on_progress: Called on the coordinating thread per finished task
            clock: Source of banner dates and record timestamps
        """
        if loader is None:
            loader = (
                IndicatorLoader(settings.indicators_path)
                if settings.indicators_path
                else IndicatorLoader.get_instance()
            )
        self.loader = loader
        self.indicators = loader.get_indicators()
        self.ignore_list = loader.get_ignore_list()
        self.max_workers = max_workers if max_workers is not None else settings.max_workers
        self.on_progress = on_progress
        self._clock = clock

    def expanded_banner(self) -> str:
        return expand_template(self.loader.get_banner(), self._clock(), settings.date_format)

    def expanded_keylist_banner(self) -> str:
        return expand_template(
            self.loader.get_keylist_banner(), self._clock(), settings.date_format
        )

    def run_documents(
        self, documents: Sequence[Tuple[str, str]], seed: Optional[KeyTable] = None
    ) -> RunReport:
        """Sanitizes in-memory documents.

        Args:
            documents: (path, decoded content) pairs in a reproducible order
            seed: Key table from an earlier run whose placeholders are kept

        Returns:
            RunReport whose outputs map each path to its sanitized content
        """
        contents: Dict[str, str] = {}
        for path, content in documents:
            if path in contents:
                raise ValueError(f"Duplicate document path: {path}")
            contents[path] = content

        return self._run(
            list(contents),
            read=contents.__getitem__,
            write=lambda path, _: path,
            seed=seed,
        )

    def run_files(
        self,
        paths: Sequence[PathLike],
        output_dir: Optional[PathLike] = None,
        seed: Optional[KeyTable] = None,
        keylist_path: Optional[PathLike] = None,
    ) -> RunReport:
        """Sanitizes files on disk and writes the keylist artifact.

        Each sanitized file is written as ``<stem><suffix><ext>`` into
        ``output_dir``, or next to its input when no directory is given.
        Inputs whose output names would clash get ``-2``, ``-3``, ... appended
        in input order.

        Args:
            paths: Input files in a reproducible order
            output_dir: Destination directory for sanitized files
            seed: Key table from an earlier run whose placeholders are kept
            keylist_path: Keylist destination; defaults to settings.keylist_name
                inside the output directory

        Raises:
            ValueError: If the same input path is given twice.
        """
        names = [str(p) for p in paths]
        out_dir = Path(output_dir) if output_dir else None

        seen = set()
        for name in names:
            resolved = Path(name).resolve()
            if resolved in seen:
                raise ValueError(f"Duplicate input path: {name}")
            seen.add(resolved)

        targets = _output_paths(names, out_dir)

        def write(path: str, text: str) -> str:
            return _write_text(targets[path], text)

        report = self._run(names, read=_read_text, write=write, seed=seed)

        if report.metadata.get("status") == "empty":
            return report

        if keylist_path is None:
            base = out_dir if out_dir else Path(names[0]).parent
            keylist_path = base / settings.keylist_name

        try:
            written = write_keylist(
                keylist_path,
                self.expanded_keylist_banner(),
                report.global_table,
                report.records,
                encoding=settings.encoding,
            )
            report.metadata["keylist_path"] = str(written)
        except InputError as e:
            logger.error("Keylist could not be written", extra={"path": e.path})
            report.failures.append(FileFailure(path=e.path, phase="keylist", message=e.message))
            report.metadata["status"] = "partial"

        return report

    def _run(
        self,
        paths: List[str],
        read: Reader,
        write: Writer,
        seed: Optional[KeyTable] = None,
    ) -> RunReport:
        """Runs the three phases.

        Raises:
            InvariantViolation: If key table uniqueness is broken.
            PipelineError: If a task fails with anything but an InputError.
        """
        try:
            return self._run_phases(paths, read, write, seed)
        except ScrubError:
            raise
        except Exception as e:
            logger.error(
                "Scrub run failed unexpectedly",
                exc_info=True,
                extra={"file_count": len(paths)},
            )
            raise PipelineError(f"Scrub run failed: {e}") from e

    def _run_phases(
        self,
        paths: List[str],
        read: Reader,
        write: Writer,
        seed: Optional[KeyTable],
    ) -> RunReport:
        started = time.monotonic()
        banner = self.expanded_banner()
        failures: Dict[int, FileFailure] = {}

        logger.info(
            "Starting scrub run",
            extra={"file_count": len(paths), "max_workers": self.max_workers},
        )

        # Phase 1: scout
        scouted: Dict[int, Tuple[str, KeyTable]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._scout_task, path, read): index
                for index, path in enumerate(paths)
            }
            for done, future in enumerate(as_completed(futures), start=1):
                index = futures[future]
                try:
                    scouted[index] = future.result()
                except InputError as e:
                    failures[index] = self._failure(paths[index], "scout", e)
                self._notify("scout", paths[index], done, len(paths), index in scouted)

        if not scouted:
            logger.warning("No usable input files were scouted", extra={"file_count": len(paths)})
            return RunReport(
                global_table=merge([], seed),
                failures=[failures[i] for i in sorted(failures)],
                metadata={
                    "status": "empty",
                    "error": "No usable input files",
                    "file_count": len(paths),
                },
            )

        # Phase 2: merge barrier, strictly in input order
        order = sorted(scouted)
        global_table = merge([scouted[i][1] for i in order], seed)

        # Phase 3: sanitize
        sanitized: Dict[int, Tuple[str, SanitizedRecord]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(
                    self._sanitize_task, paths[i], scouted[i][0], global_table, banner, write
                ): i
                for i in order
            }
            for done, future in enumerate(as_completed(futures), start=1):
                index = futures[future]
                try:
                    sanitized[index] = future.result()
                except InputError as e:
                    failures[index] = self._failure(paths[index], "sanitize", e)
                self._notify("sanitize", paths[index], done, len(order), index in sanitized)

        report = RunReport(
            global_table=global_table,
            records=[sanitized[i][1] for i in sorted(sanitized)],
            outputs={paths[i]: sanitized[i][0] for i in sorted(sanitized)},
            failures=[failures[i] for i in sorted(failures)],
            metadata={
                "status": "partial" if failures else "completed",
                "file_count": len(paths),
                "sanitized_count": len(sanitized),
                "key_count": len(global_table),
                "duration_seconds": round(time.monotonic() - started, 3),
            },
        )

        logger.info(
            "Scrub run finished",
            extra={k: v for k, v in report.metadata.items() if k != "status"},
        )
        return report

    def _scout_task(self, path: str, read: Reader) -> Tuple[str, KeyTable]:
        content = read(path)
        return content, scout(content, self.indicators, self.ignore_list)

    def _sanitize_task(
        self, path: str, content: str, key_table: KeyTable, banner: str, write: Writer
    ) -> Tuple[str, SanitizedRecord]:
        text = sanitize(content, key_table, banner)
        output_path = write(path, text)
        record = SanitizedRecord(
            output_path=output_path,
            timestamp=self._clock().strftime(settings.timestamp_format),
        )
        return text, record

    def _failure(self, path: str, phase: str, error: InputError) -> FileFailure:
        logger.warning(
            f"{phase.capitalize()} failed for file",
            extra={"path": path, "phase": phase, "error": error.message},
        )
        return FileFailure(path=path, phase=phase, message=error.message)

    def _notify(self, phase: str, path: str, completed: int, total: int, ok: bool) -> None:
        if self.on_progress is not None:
            self.on_progress(ProgressEvent(phase, path, completed, total, ok))


def _read_text(path: str) -> str:
    try:
        return Path(path).read_text(encoding=settings.encoding)
    except UnicodeDecodeError as e:
        raise InputError(path, f"not valid {settings.encoding} text") from e
    except OSError as e:
        raise InputError(path, f"cannot read: {e.strerror or e}") from e


def _write_text(path: Path, text: str) -> str:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding=settings.encoding)
    except OSError as e:
        raise InputError(str(path), f"cannot write: {e.strerror or e}") from e
    return str(path)


def _output_path(source: Path, output_dir: Optional[Path]) -> Path:
    name = f"{source.stem}{settings.output_suffix}{source.suffix}"
    return (output_dir or source.parent) / name


def _output_paths(names: Sequence[str], output_dir: Optional[Path]) -> Dict[str, Path]:
    """Maps each input to its own output file.

    Inputs with the same file name from different folders would otherwise
    write to the same place; later ones get ``-2``, ``-3``, ... in input order.
    """
    taken = set()
    targets: Dict[str, Path] = {}
    for name in names:
        base = _output_path(Path(name), output_dir)
        candidate, n = base, 1
        while candidate.resolve() in taken:
            n += 1
            candidate = base.with_name(f"{base.stem}-{n}{base.suffix}")

        if candidate != base:
            logger.warning(
                "Output name already taken, renaming",
                extra={"path": name, "output_path": str(candidate)},
            )
        taken.add(candidate.resolve())
        targets[name] = candidate
    return targets


def scrub_files(
    paths: Sequence[PathLike],
    output_dir: Optional[PathLike] = None,
    seed_keylist: Optional[PathLike] = None,
    on_progress: Optional[Callable[[ProgressEvent], None]] = None,
) -> RunReport:
    """Main entry point for sanitizing files on disk.

    Args:
        paths: Input files in a reproducible order
        output_dir: Destination directory for sanitized files
        seed_keylist: Keylist from an earlier run to keep placeholders stable
        on_progress: Optional per-task progress callback

    Returns:
        RunReport for the run. On failure, returns a report whose metadata
        carries the error instead of raising.
    """
    if not paths:
        logger.warning("No files provided for sanitizing")
        return RunReport(
            global_table=KeyTable().freeze(),
            metadata={"status": "empty", "error": "No input files provided"},
        )

    try:
        orchestrator = ScrubOrchestrator(on_progress=on_progress)

        seed = None
        if seed_keylist is not None:
            seed = read_keylist(
                seed_keylist,
                labels=orchestrator.loader.get_labels(),
                encoding=settings.encoding,
            )

        return orchestrator.run_files(paths, output_dir=output_dir, seed=seed)

    except (ScrubError, ValueError) as e:
        # Known errors, log with context but keep the report shape
        logger.error(
            f"Known error during scrub run: {type(e).__name__}",
            exc_info=True,
            extra={"file_count": len(paths)},
        )
        return RunReport(
            global_table=KeyTable().freeze(),
            metadata={
                "error": str(e),
                "status": "failed",
                "error_type": type(e).__name__,
            },
        )

    except Exception:
        # Catch-all for unexpected bugs
        logger.error(
            "Unexpected critical error in scrub pipeline",
            exc_info=True,
            extra={"file_count": len(paths)},
        )
        return RunReport(
            global_table=KeyTable().freeze(),
            metadata={
                "error": "An unexpected system error occurred.",
                "status": "failed",
                "error_type": PipelineError.__name__,
            },
        )
