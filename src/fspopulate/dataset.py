"""
Построение детерминированного дерева файлов заданного суммарного размера.

Раскладка: ROOT/dir%06d/file%06d. Первые N_bulk файлов имеют размер bulk_size,
остальные по 10 MiB, последний обрезается до остатка. Повторный запуск дописывает
только недостающие байты, поэтому прерванное заполнение можно просто перезапустить.
"""
from __future__ import annotations

import os
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from .config import PopulationConfig

FILL_BUFFER_SIZE = 10 * 1024 * 1024
FILL_SEED = 1
STANDARD_FILE_SIZE = 10 * 1024 * 1024
PROGRESS_EVERY = 100

ProgressCallback = Callable[[int, int, Path, int], None]


class PopulateError(Exception):
    """Фатальная ошибка ввода-вывода при заполнении дерева."""

    def __init__(self, op: str, path: Path, cause: Optional[OSError] = None, detail: Optional[str] = None):
        self.op = op
        self.path = Path(path)
        reason = detail or (cause.strerror if cause is not None and cause.strerror else str(cause))
        super().__init__(f'{op} "{self.path}": {reason}')


def make_fill_buffer(size: int = FILL_BUFFER_SIZE, seed: int = FILL_SEED) -> bytes:
    # Random data so the files don't compress down to nothing; fixed seed keeps it reproducible.
    return random.Random(seed).randbytes(size)


@dataclass(frozen=True)
class FileTask:
    dir_index: int
    file_index: int
    expected_size: int
    create_dir: bool = False

    @property
    def dirname(self) -> str:
        return f"dir{self.dir_index:06d}"

    @property
    def filename(self) -> str:
        return f"file{self.file_index:06d}"

    def dir_path(self, root: Path) -> Path:
        return Path(root) / self.dirname

    def file_path(self, root: Path) -> Path:
        return Path(root) / self.dirname / self.filename


def plan_files(config: PopulationConfig) -> Iterator[FileTask]:
    """Yield the file tasks for ``config`` in write order.

    Only two counters are kept: ``bi`` numbers files, ``di`` cycles over the
    subdirectories. The first ``subdirs`` slots (by file number) are the ones
    that create their directory.
    """
    planned = 0
    di = 0
    bi = 0
    while planned < config.total_size:
        nominal = config.bulk_size if bi < config.bulk_files else STANDARD_FILE_SIZE
        expected = min(nominal, config.total_size - planned)
        yield FileTask(dir_index=di, file_index=bi, expected_size=expected, create_dir=bi < config.subdirs)
        planned += expected
        di = (di + 1) % config.subdirs
        bi += 1


@dataclass
class PopulationResult:
    files: int = 0
    planned_bytes: int = 0
    bytes_written: int = 0
    files_created: int = 0
    files_extended: int = 0
    files_complete: int = 0
    files_oversized: int = 0
    dirs_created: int = 0
    duration_sec: float = 0.0
    dry_run: bool = False


@dataclass
class VerifyResult:
    files: int = 0
    planned_bytes: int = 0
    missing: List[Path] = field(default_factory=list)
    short: List[Path] = field(default_factory=list)
    oversized: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not (self.missing or self.short or self.oversized)


def ensure_dir(p: Path) -> bool:
    """Создать каталог; True, если он действительно был создан."""
    try:
        p.mkdir(parents=True)
    except FileExistsError:
        if not p.is_dir():
            raise PopulateError("mkdir", p, detail="exists and is not a directory")
        return False
    except OSError as exc:
        raise PopulateError("mkdir", p, exc) from exc
    return True


def populate_file(fh, nbytes: int, buf: bytes, path: Optional[Path] = None) -> int:
    """Append ``nbytes`` bytes from ``buf`` to the append-mode handle ``fh``.

    Every write starts at the beginning of ``buf``. Returns the number of bytes
    written.
    """
    view = memoryview(buf)
    written = 0
    while written < nbytes:
        ntowrite = min(nbytes - written, len(buf))
        try:
            result = fh.write(view[:ntowrite])
        except OSError as exc:
            raise PopulateError("write", path or Path(getattr(fh, "name", "?")), exc) from exc
        if not result:
            raise PopulateError("write", path or Path(getattr(fh, "name", "?")), detail="write returned 0 bytes")
        written += result
    return written


def populate(
    config: PopulationConfig,
    buf: Optional[bytes] = None,
    progress: Optional[ProgressCallback] = None,
) -> PopulationResult:
    """
    Create or complete the tree described by ``config``.

    Idempotent: files that already have their expected size are opened but
    not written to. Any I/O error raises PopulateError and leaves the tree
    as it is; running again with the same config picks up where it stopped.
    """
    result = PopulationResult(dry_run=config.dry_run)
    if config.dry_run:
        for task in plan_files(config):
            result.files += 1
            result.planned_bytes += task.expected_size
        return result

    if buf is None:
        buf = make_fill_buffer()
    if not buf and config.total_size > 0:
        raise ValueError("fill buffer must not be empty")

    started = time.monotonic()
    root = Path(config.path)
    if ensure_dir(root):
        result.dirs_created += 1

    for task in plan_files(config):
        if task.create_dir and ensure_dir(task.dir_path(root)):
            result.dirs_created += 1

        path = task.file_path(root)
        try:
            fh = open(path, "ab", buffering=0)
        except OSError as exc:
            raise PopulateError("open", path, exc) from exc
        with fh:
            try:
                current = os.fstat(fh.fileno()).st_size
            except OSError as exc:
                raise PopulateError("fstat", path, exc) from exc
            shortfall = task.expected_size - current
            if shortfall > 0:
                result.bytes_written += populate_file(fh, shortfall, buf, path)
                if current == 0:
                    result.files_created += 1
                else:
                    result.files_extended += 1
            elif shortfall < 0:
                # Never shrink: existing data stays where it is.
                result.files_oversized += 1
            else:
                result.files_complete += 1

        result.planned_bytes += task.expected_size
        result.files += 1
        if progress is not None and result.files % PROGRESS_EVERY == 0:
            progress(result.files, result.planned_bytes, path, task.expected_size)

    result.duration_sec = time.monotonic() - started
    return result


def verify(config: PopulationConfig) -> VerifyResult:
    """Сверить дерево на диске с планом, ничего не записывая."""
    root = Path(config.path)
    result = VerifyResult()
    for task in plan_files(config):
        path = task.file_path(root)
        result.files += 1
        result.planned_bytes += task.expected_size
        try:
            size = path.stat().st_size
        except (FileNotFoundError, NotADirectoryError):
            result.missing.append(path)
            continue
        except OSError as exc:
            raise PopulateError("stat", path, exc) from exc
        if size < task.expected_size:
            result.short.append(path)
        elif size > task.expected_size:
            result.oversized.append(path)
    return result
