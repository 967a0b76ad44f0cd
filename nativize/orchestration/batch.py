"""
Batch processing of JavaScript files.

Files are independent: each one is read, transformed and (in write mode)
written back on its own, sequentially or in a process pool. A failure in one
file is recorded in its result and does not stop the others.
"""

from __future__ import annotations

import concurrent.futures
import difflib
import fnmatch
import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..config import NativizeConfig, ProcessingStrategy
from ..errors import NativizeError

logger = logging.getLogger(__name__)


class ProcessingMode(Enum):
    """What to do with a transformed file."""

    WRITE = "write"
    CHECK = "check"
    DIFF = "diff"


class FileStatus(Enum):
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileResult:
    """Result of processing a single file."""

    path: str
    status: FileStatus
    applied_rules: List[str] = field(default_factory=list)
    diff: str = ""
    error: Optional[str] = None
    duration: float = 0.0

    @property
    def changed(self) -> bool:
        return self.status is FileStatus.CHANGED

    @property
    def failed(self) -> bool:
        return self.status is FileStatus.FAILED

    def to_dict(self) -> dict:
        data = {
            "path": self.path,
            "status": self.status.value,
            "applied_rules": list(self.applied_rules),
            "duration": round(self.duration, 4),
        }
        if self.error:
            data["error"] = self.error
        if self.diff:
            data["diff"] = self.diff
        return data


@dataclass
class BatchResult:
    """Results for every file of a run."""

    mode: ProcessingMode
    files: List[FileResult] = field(default_factory=list)
    duration: float = 0.0

    @property
    def changed(self) -> List[FileResult]:
        return [f for f in self.files if f.changed]

    @property
    def failed(self) -> List[FileResult]:
        return [f for f in self.files if f.failed]

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "success": self.success,
            "files_processed": len(self.files),
            "files_changed": len(self.changed),
            "files_failed": len(self.failed),
            "duration": round(self.duration, 4),
            "files": [f.to_dict() for f in self.files],
        }


def _is_excluded(path: Path, patterns: Sequence[str]) -> bool:
    for part in path.parts:
        if any(fnmatch.fnmatch(part, pattern) for pattern in patterns):
            return True
    return False


def find_files(paths: Iterable[str], config: NativizeConfig) -> List[Path]:
    """
    Expand files and directories into the JavaScript files to process.

    Explicitly named files are always included; directory contents are
    filtered by extension and excluded patterns.
    """
    settings = config.processing_settings
    extensions = tuple(settings.extensions)
    found: List[Path] = []
    seen = set()

    for raw in paths:
        path = Path(raw)
        if path.is_file():
            candidates = [path]
        elif path.is_dir():
            candidates = []
            for dirpath, dirnames, filenames in os.walk(path):
                dirnames[:] = sorted(
                    d for d in dirnames if not _is_excluded(Path(d), settings.excluded_patterns)
                )
                for name in sorted(filenames):
                    if name.endswith(extensions) and not _is_excluded(
                        Path(name), settings.excluded_patterns
                    ):
                        candidates.append(Path(dirpath) / name)
        else:
            raise NativizeError(f"Path does not exist: {raw}")

        for candidate in candidates:
            key = candidate.resolve()
            if key not in seen:
                seen.add(key)
                found.append(candidate)
    return found


def unified_diff(path: str, before: str, after: str) -> str:
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )


def process_file(path: str, mode: ProcessingMode, config: NativizeConfig) -> FileResult:
    """
    Transform one file. Module-level so a process pool can pickle it.

    Errors are captured in the returned result.
    """
    # Imported here so worker processes build their own registry.
    from ..api import Nativize

    start = time.time()
    try:
        size = os.path.getsize(path)
        if size > config.processing_settings.max_file_size:
            logger.info(f"Skipping {path}: {size} bytes exceeds max_file_size")
            return FileResult(path, FileStatus.SKIPPED, error="file too large")

        with open(path, "r", encoding="utf-8") as f:
            source = f.read()

        result = Nativize(config).transform(source)
        if not result.modified:
            return FileResult(path, FileStatus.UNCHANGED, duration=time.time() - start)

        diff = ""
        if mode is ProcessingMode.DIFF:
            diff = unified_diff(path, source, result.code)
        elif mode is ProcessingMode.WRITE:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(result.code)
        return FileResult(
            path,
            FileStatus.CHANGED,
            applied_rules=result.applied_rules,
            diff=diff,
            duration=time.time() - start,
        )
    except (NativizeError, OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to process {path}: {e}")
        return FileResult(path, FileStatus.FAILED, error=str(e), duration=time.time() - start)


class BatchProcessor:
    """Runs ``process_file`` over many files."""

    def __init__(self, config: Optional[NativizeConfig] = None):
        self.config = config or NativizeConfig.default()

    def _use_pool(self, file_count: int) -> bool:
        settings = self.config.processing_settings
        return (
            settings.strategy is ProcessingStrategy.PARALLEL
            and settings.jobs > 1
            and file_count > 1
        )

    def process(self, paths: Iterable[str], mode: ProcessingMode = ProcessingMode.WRITE) -> BatchResult:
        """
        Process every JavaScript file under ``paths``.

        Raises:
            NativizeError: If a given path does not exist.
        """
        start = time.time()
        files = [str(p) for p in find_files(paths, self.config)]
        logger.info(f"Processing {len(files)} file(s) in {mode.value} mode")

        if self._use_pool(len(files)):
            results = self._process_pool(files, mode)
        else:
            results = [process_file(path, mode, self.config) for path in files]

        results.sort(key=lambda r: r.path)
        batch = BatchResult(mode=mode, files=results, duration=time.time() - start)
        logger.info(
            f"Processed {len(results)} file(s): {len(batch.changed)} changed, "
            f"{len(batch.failed)} failed"
        )
        return batch

    def _process_pool(self, files: List[str], mode: ProcessingMode) -> List[FileResult]:
        results = []
        workers = self.config.processing_settings.jobs
        with concurrent.futures.ProcessPoolExecutor(max_workers=workers) as executor:
            future_to_path = {
                executor.submit(process_file, path, mode, self.config): path for path in files
            }
            for future in concurrent.futures.as_completed(future_to_path):
                path = future_to_path[future]
                try:
                    results.append(future.result())
                except Exception as e:
                    # A crashed worker loses only its own file.
                    logger.error(f"Worker failed on {path}: {e}")
                    results.append(FileResult(path, FileStatus.FAILED, error=str(e)))
        return results
