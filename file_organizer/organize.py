"""Organize - Sort files into category folders by extension.

Scans a source directory, classifies every file by its extension and moves it
to ``<dest>/<category>/<name>`` using a bounded pool of concurrent workers.

Usage:
    organize --source DIR --dest DIR [options]

Options:
    --source DIR        Directory to organize files from (required)
    --dest DIR          Directory to move organized files to (required)
    --dry-run           Simulate actions without moving files
    --recursive         Also organize files in subdirectories
    --workers N         Number of concurrent file operations (default: 5)
    --categories PATH   JSON file with custom extension -> category mappings
    --config PATH       Path to configuration file (default: .organizerc.json)
    --progress          Show a progress bar while moving files
    --strict            Exit with status 1 if any file could not be moved
    --verbose           Show detailed output
    --quiet             Suppress per-file output, show only the summary
    --help              Show this help message
    --version           Show version number

Configuration:
    Create a .organizerc.json (or .organizerc.yaml) file in your project root:

    {
        "source_dir": "~/Downloads",
        "dest_dir": "~/Sorted",
        "recursive": true,
        "workers": 8,
        "categories": {
            ".psd": "Images",
            "epub": "Books"
        }
    }

    Category overrides replace the default category of an extension; a
    missing leading dot is added and keys are lowercased.

Environment Variables:
    ORGANIZER_SOURCE_DIR    Source directory
    ORGANIZER_DEST_DIR      Destination directory
    ORGANIZER_WORKERS       Number of workers
    ORGANIZER_RECURSIVE     Set to 'true' for recursive scanning
    ORGANIZER_DRY_RUN       Set to 'true' for dry run
    ORGANIZER_VERBOSE       Set to 'true' for verbose output
"""

from __future__ import annotations

import argparse
import errno
import json
import os
import queue
import shutil
import sys
import threading
import time
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from concurrent.futures import as_completed
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import TypedDict

import yaml

# Version
__version__ = "1.0.0"

# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".organizerc.json",
    ".organizerc",
    "organizer.config.json",
    ".organizerc.yaml",
    ".organizerc.yml",
]

# Pre-commit config file
PRE_COMMIT_CONFIG = ".pre-commit-config.yaml"

# Hook id looked up in the pre-commit config
PRE_COMMIT_HOOK_ID = "organize"

# Category used for extensions missing from the mapping
FALLBACK_CATEGORY = "Others"

DEFAULT_WORKERS = 5

# Work queue capacity per worker
QUEUE_FACTOR = 2

# Suffix format for renamed collisions: YYYYMMDD_HHMMSS
COLLISION_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"

# Counter suffixes tried after the timestamp name is taken
MAX_COLLISION_ATTEMPTS = 100

DEFAULT_CATEGORY_MAPPINGS: Mapping[str, str] = MappingProxyType(
    {
        # Images
        ".jpg": "Images",
        ".jpeg": "Images",
        ".png": "Images",
        ".gif": "Images",
        ".bmp": "Images",
        ".tiff": "Images",
        ".webp": "Images",
        ".heic": "Images",
        # Documents
        ".pdf": "Documents",
        ".doc": "Documents",
        ".docx": "Documents",
        ".ppt": "Documents",
        ".pptx": "Documents",
        ".xls": "Documents",
        ".xlsx": "Documents",
        ".txt": "Documents",
        ".rtf": "Documents",
        ".odt": "Documents",
        # Videos
        ".mp4": "Videos",
        ".mov": "Videos",
        ".avi": "Videos",
        ".mkv": "Videos",
        ".webm": "Videos",
        # Audio
        ".mp3": "Audio",
        ".wav": "Audio",
        ".flac": "Audio",
        ".aac": "Audio",
        # Archives
        ".zip": "Archives",
        ".rar": "Archives",
        ".7z": "Archives",
        ".tar": "Archives",
        ".gz": "Archives",
        # Executables
        ".exe": "Executables",
        ".dmg": "Executables",
        ".app": "Executables",
        ".deb": "Executables",
        ".rpm": "Executables",
        # Code
        ".go": "Code",
        ".js": "Code",
        ".ts": "Code",
        ".py": "Code",
        ".java": "Code",
        ".c": "Code",
        ".cpp": "Code",
        ".h": "Code",
        ".hpp": "Code",
        ".html": "Code",
        ".css": "Code",
        ".json": "Code",
        ".xml": "Code",
        ".md": "Code",
    }
)


class OrganizerError(Exception):
    """Base error for the organizer."""


class ConfigError(OrganizerError):
    """Invalid configuration value."""


class ScanError(OrganizerError):
    """The source root could not be walked."""


@dataclass(frozen=True)
class PlannedMove:
    """A single relocation produced by the scanner."""

    source: Path
    destination: Path
    dry_run: bool = False


@dataclass(frozen=True)
class MoveOutcome:
    """Result of executing one planned move.

    Exactly one of ``moved`` and ``errored`` is 1.
    """

    moved: int = 0
    errored: int = 0
    source: Path | None = None
    destination: Path | None = None
    reason: str | None = None

    @classmethod
    def success(cls, move: PlannedMove, destination: Path) -> MoveOutcome:
        return cls(moved=1, source=move.source, destination=destination)

    @classmethod
    def failure(cls, move: PlannedMove, reason: str) -> MoveOutcome:
        return cls(errored=1, source=move.source, destination=move.destination, reason=reason)


@dataclass
class ScanResult:
    """Counters collected while walking the source tree."""

    total_visited: int = 0
    total_planned: int = 0
    total_skipped: int = 0
    directories_visited: int = 0
    errored_entries: int = 0
    first_error: OSError | None = None

    def record_error(self, error: OSError) -> None:
        """Count an errored entry, keeping only the first error."""
        self.errored_entries += 1
        if self.first_error is None:
            self.first_error = error


@dataclass
class OrganizeResult:
    """Result of a full scan and dispatch run."""

    scan: ScanResult = field(default_factory=ScanResult)
    planned: list[PlannedMove] = field(default_factory=list)
    moved: int = 0
    errored: int = 0
    dry_run: bool = False
    duration: float = 0.0

    @property
    def completed_with_errors(self) -> bool:
        return self.errored > 0 or self.scan.first_error is not None


class ConfigDict(TypedDict, total=False):
    """Configuration dictionary type."""

    source_dir: str
    dest_dir: str
    dry_run: bool
    recursive: bool
    workers: int
    categories: dict[str, str]
    categories_file: str


@dataclass
class OrganizerConfig:
    """Configuration for an organize run."""

    source_dir: str = ""
    dest_dir: str = ""
    dry_run: bool = False
    recursive: bool = False
    workers: int = DEFAULT_WORKERS
    categories: dict[str, str] = field(default_factory=dict)
    progress: bool = False
    verbosity: int = 1  # 0=quiet, 1=normal, 2=verbose

    @classmethod
    def from_dict(cls, data: ConfigDict, base_dir: Path | None = None) -> OrganizerConfig:
        """Create config from dictionary."""
        config = cls()

        if "source_dir" in data:
            config.source_dir = data["source_dir"]
        if "dest_dir" in data:
            config.dest_dir = data["dest_dir"]
        if "dry_run" in data:
            config.dry_run = bool(data["dry_run"])
        if "recursive" in data:
            config.recursive = bool(data["recursive"])
        if "workers" in data:
            config.workers = parse_workers(data["workers"])
        if "categories_file" in data:
            categories_path = Path(data["categories_file"]).expanduser()
            if base_dir and not categories_path.is_absolute():
                categories_path = base_dir / categories_path
            config.categories.update(load_custom_mappings(categories_path))
        if "categories" in data:
            config.categories.update(normalize_mappings(data["categories"]))

        return config

    def mappings(self) -> Mapping[str, str]:
        """Return the immutable category mapping for this run."""
        return build_category_mappings(self.categories)


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    MAGENTA = "\033[35m"
    GRAY = "\033[90m"

    @classmethod
    def disable(cls) -> None:
        """Disable colors (for non-TTY output)."""
        cls.RESET = ""
        cls.BOLD = ""
        cls.DIM = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.RED = ""
        cls.BLUE = ""
        cls.CYAN = ""
        cls.MAGENTA = ""
        cls.GRAY = ""


class Logger:
    """Logger with verbosity control, safe to call from worker threads."""

    def __init__(self, verbosity: int = 1, dry_run: bool = False) -> None:
        self.verbosity = verbosity
        self.dry_run = dry_run
        self._lock = threading.Lock()

        # Disable colors if not a TTY
        if not sys.stdout.isatty():
            Colors.disable()

    def _emit(self, message: str, stream=None) -> None:
        with self._lock:
            print(message, file=stream or sys.stdout)

    def info(self, message: str) -> None:
        """Log info message."""
        if self.verbosity >= 1:
            prefix = "[DRY-RUN] " if self.dry_run else ""
            self._emit(f"{prefix}{message}")

    def success(self, message: str) -> None:
        """Log success message."""
        if self.verbosity >= 1:
            self._emit(f"{Colors.GREEN}✓{Colors.RESET} {message}")

    def warn(self, message: str) -> None:
        """Log warning message."""
        if self.verbosity >= 1:
            self._emit(f"{Colors.YELLOW}⚠{Colors.RESET} {message}")

    def error(self, message: str) -> None:
        """Log error message."""
        self._emit(f"{Colors.RED}✗{Colors.RESET} {message}", sys.stderr)

    def skip(self, message: str) -> None:
        """Log skip message."""
        if self.verbosity >= 2:
            self._emit(f"{Colors.GRAY}⊘ {message}{Colors.RESET}")

    def verbose(self, message: str) -> None:
        """Log verbose message."""
        if self.verbosity >= 2:
            self._emit(f"{Colors.DIM}{message}{Colors.RESET}")

    def header(self, message: str) -> None:
        """Log header message."""
        if self.verbosity >= 1:
            self._emit(f"\n{Colors.BOLD}=== {message} ==={Colors.RESET}")

    def summary(self, label: str, value: object, color: str = "") -> None:
        """Log a summary line; shown even in quiet mode."""
        self._emit(f"  {label}: {color}{value}{Colors.RESET}")


def parse_workers(value: object) -> int:
    """Validate a worker count coming from config or environment."""
    try:
        workers = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise ConfigError(f"workers must be an integer, got {value!r}") from None
    if workers < 1:
        raise ConfigError(f"workers must be >= 1, got {workers}")
    return workers


def normalize_mappings(raw: Mapping[str, object]) -> dict[str, str]:
    """Normalize extension keys: lowercase with a leading dot."""
    if not isinstance(raw, Mapping):
        raise ConfigError("category mappings must be an object of extension -> category")

    normalized: dict[str, str] = {}
    for ext, category in raw.items():
        if not isinstance(category, str) or not category.strip():
            raise ConfigError(f"invalid category for {ext!r}: {category!r}")
        ext = str(ext).strip()
        if not ext.startswith("."):
            ext = "." + ext
        normalized[ext.lower()] = category.strip()
    return normalized


def build_category_mappings(overrides: Mapping[str, str] | None = None) -> Mapping[str, str]:
    """Merge overrides onto the default mapping and freeze the result."""
    merged = dict(DEFAULT_CATEGORY_MAPPINGS)
    if overrides:
        merged.update(normalize_mappings(overrides))
    return MappingProxyType(merged)


def load_custom_mappings(path: Path) -> dict[str, str]:
    """Load a JSON file of extension -> category overrides."""
    if not path.exists():
        raise FileNotFoundError(f"Category mappings file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return normalize_mappings(data)


def load_config_file(config_path: Path | None = None) -> ConfigDict:
    """Load configuration from file."""
    root_dir = Path.cwd()

    # If explicit config path provided, try to load it
    if config_path:
        full_path = root_dir / config_path
        if full_path.exists():
            return _read_config(full_path)
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # Try default config file names
    for filename in CONFIG_FILE_NAMES:
        full_path = root_dir / filename
        if full_path.exists():
            return _read_config(full_path)

    return {}


def _read_config(path: Path) -> ConfigDict:
    with open(path, encoding="utf-8") as f:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain an object: {path}")
    return data  # type: ignore[return-value]


def load_env_config() -> ConfigDict:
    """Load configuration from environment variables."""
    config: ConfigDict = {}

    if os.environ.get("ORGANIZER_SOURCE_DIR"):
        config["source_dir"] = os.environ["ORGANIZER_SOURCE_DIR"]
    if os.environ.get("ORGANIZER_DEST_DIR"):
        config["dest_dir"] = os.environ["ORGANIZER_DEST_DIR"]
    if os.environ.get("ORGANIZER_WORKERS"):
        config["workers"] = parse_workers(os.environ["ORGANIZER_WORKERS"])
    if os.environ.get("ORGANIZER_RECURSIVE") == "true":
        config["recursive"] = True
    if os.environ.get("ORGANIZER_DRY_RUN") == "true":
        config["dry_run"] = True

    return config


def load_pre_commit_config(root_dir: Path) -> ConfigDict:
    """Load organizer configuration from .pre-commit-config.yaml if present."""
    config_path = root_dir / PRE_COMMIT_CONFIG
    if not config_path.exists():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            pre_commit_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}

    for repo in pre_commit_config.get("repos", []):
        for hook in repo.get("hooks", []):
            if hook.get("id") == PRE_COMMIT_HOOK_ID:
                return _parse_args_to_config(hook.get("args", []))

    return {}


def _parse_args_to_config(args: list[str]) -> ConfigDict:
    """Parse CLI-style args into a config dict."""
    config: ConfigDict = {}
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--source" and i + 1 < len(args):
            config["source_dir"] = args[i + 1]
            i += 2
        elif arg == "--dest" and i + 1 < len(args):
            config["dest_dir"] = args[i + 1]
            i += 2
        elif arg == "--workers" and i + 1 < len(args):
            config["workers"] = parse_workers(args[i + 1])
            i += 2
        elif arg == "--categories" and i + 1 < len(args):
            config["categories_file"] = args[i + 1]
            i += 2
        elif arg == "--recursive":
            config["recursive"] = True
            i += 1
        elif arg == "--dry-run":
            config["dry_run"] = True
            i += 1
        else:
            i += 1
    return config


class CategoryResolver:
    """Maps a file extension to its category."""

    def __init__(self, mappings: Mapping[str, str] | None = None) -> None:
        self.mappings = mappings if mappings is not None else DEFAULT_CATEGORY_MAPPINGS

    def resolve(self, extension: str) -> str:
        return self.mappings.get(extension.lower(), FALLBACK_CATEGORY)

    def category_for(self, path: Path) -> str:
        return self.resolve(path.suffix)


def is_within(path: Path, root: Path) -> bool:
    """Check whether ``path`` is ``root`` or lies below it."""
    return path == root or root in path.parents


def scan_tree(
    source_root: Path,
    dest_root: Path,
    recursive: bool,
    mappings: Mapping[str, str] | None = None,
    logger: Logger | None = None,
    dry_run: bool = False,
) -> tuple[ScanResult, list[PlannedMove]]:
    """Walk ``source_root`` and plan a move for every file outside ``dest_root``.

    Entries are visited depth-first in lexical order. Errors on individual
    entries are recorded on the result and traversal continues; a root that
    cannot be listed raises :class:`ScanError`.
    """
    logger = logger or Logger(verbosity=0)
    resolver = CategoryResolver(mappings)
    source_root = Path(os.path.abspath(source_root))
    dest_root = Path(os.path.abspath(dest_root))
    result = ScanResult()
    moves: list[PlannedMove] = []

    try:
        root_entries = _list_dir(source_root)
    except OSError as e:
        raise ScanError(f"error walking source directory '{source_root}': {e}") from e

    result.total_visited += 1
    result.directories_visited += 1

    # Stack of pending entry lists, popped depth-first
    stack: list[Iterator[os.DirEntry[str]]] = [iter(root_entries)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        path = Path(entry.path)
        result.total_visited += 1

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            if not is_dir:
                entry.stat()
        except OSError as e:
            logger.warn(f"Error accessing path {path}: {e}. Skipping.")
            result.record_error(e)
            continue

        if is_dir:
            result.directories_visited += 1
            if not recursive:
                logger.skip(f"Not descending into {path} (non-recursive)")
                continue
            try:
                stack.append(iter(_list_dir(path)))
            except OSError as e:
                # The failed listing counts as its own visited entry
                result.total_visited += 1
                logger.warn(f"Error accessing path {path}: {e}. Skipping.")
                result.record_error(e)
            continue

        if is_within(path, dest_root):
            logger.skip(f"{path.name} is already in the destination directory")
            result.total_skipped += 1
            continue

        category = resolver.category_for(path)
        moves.append(
            PlannedMove(
                source=path,
                destination=dest_root / category / path.name,
                dry_run=dry_run,
            )
        )

    result.total_planned = len(moves)
    return result, moves


def _list_dir(path: Path) -> list[os.DirEntry[str]]:
    with os.scandir(path) as it:
        return sorted(it, key=lambda e: e.name)


def collision_name(destination: Path, now: datetime | None = None, attempt: int = 0) -> Path:
    """Build ``<stem>_<YYYYMMDD_HHMMSS>[_<attempt>]<suffix>`` next to destination."""
    timestamp = (now or datetime.now()).strftime(COLLISION_TIMESTAMP_FORMAT)
    counter = f"_{attempt}" if attempt else ""
    return destination.with_name(f"{destination.stem}_{timestamp}{counter}{destination.suffix}")


def _exists(path: Path) -> bool:
    """Stat ``path``; only "not found" counts as absent."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def _claim(path: Path) -> bool:
    """Atomically create an empty placeholder at ``path`` if nothing is there."""
    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return False
    os.close(fd)
    return True


def _release(placeholder: Path, logger: Logger) -> None:
    """Remove a claimed placeholder after a failed move."""
    try:
        placeholder.unlink()
    except OSError as e:
        logger.verbose(f"Could not remove placeholder {placeholder}: {e}")


def _rename(source: Path, target: Path) -> None:
    try:
        os.replace(source, target)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        shutil.move(str(source), str(target))


def execute_move(
    move: PlannedMove,
    logger: Logger | None = None,
    now: datetime | None = None,
) -> MoveOutcome:
    """Execute one planned move and report exactly one outcome.

    Never raises: every failure, expected or not, becomes an errored outcome.
    """
    logger = logger or Logger(verbosity=0)
    try:
        return _execute(move, logger, now)
    except Exception as e:
        logger.error(f"Unexpected error moving {move.source}: {e!r}")
        return MoveOutcome.failure(move, f"internal error: {e!r}")


def _candidates(destination: Path, collided: bool, now: datetime) -> Iterator[Path]:
    """Yield target names in the order they should be tried."""
    if not collided:
        yield destination
    for attempt in range(MAX_COLLISION_ATTEMPTS + 1):
        yield collision_name(destination, now, attempt)


def _execute(move: PlannedMove, logger: Logger, now: datetime | None) -> MoveOutcome:
    dest_dir = move.destination.parent

    if not dest_dir.is_dir():
        if move.dry_run:
            logger.info(f"Would create directory: {dest_dir}")
        else:
            try:
                dest_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"Failed to create destination directory '{dest_dir}': {e}")
                return MoveOutcome.failure(move, f"mkdir failed: {e}")
            logger.verbose(f"Created directory: {dest_dir}")

    try:
        collided = _exists(move.destination)
    except OSError as e:
        logger.error(f"Error checking existence of '{move.destination}': {e}")
        return MoveOutcome.failure(move, f"stat failed: {e}")

    candidates = _candidates(move.destination, collided, now or datetime.now())
    target = next(candidates)
    if collided:
        logger.verbose(f"Collision: renaming '{move.destination.name}' to '{target.name}'")

    if move.dry_run:
        logger.info(f"Would move '{move.source}' to '{target}'")
        return MoveOutcome.success(move, target)

    # Another worker may take the same name between the stat and here
    try:
        while not _claim(target):
            target = next(candidates, None)
            if target is None:
                logger.error(f"No free name for '{move.destination}'")
                return MoveOutcome.failure(move, "no free destination name")
            logger.verbose(f"Name taken, trying '{target.name}'")
    except OSError as e:
        logger.error(f"Failed to reserve '{target}': {e}")
        return MoveOutcome.failure(move, f"claim failed: {e}")

    try:
        _rename(move.source, target)
    except OSError as e:
        _release(target, logger)
        logger.error(f"Failed to move '{move.source}' to '{target}': {e}")
        return MoveOutcome.failure(move, f"rename failed: {e}")
    except Exception:
        _release(target, logger)
        raise

    logger.success(f"Moved: {move.source} → {target}")
    return MoveOutcome.success(move, target)


class OutcomeStream:
    """Closable channel of move outcomes with a single consumer."""

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue: queue.Queue[object] = queue.Queue()

    def emit(self, outcome: MoveOutcome) -> None:
        self._queue.put(outcome)

    def close(self) -> None:
        self._queue.put(self._CLOSED)

    def __iter__(self) -> Iterator[MoveOutcome]:
        while True:
            item = self._queue.get()
            if item is self._CLOSED:
                return
            yield item  # type: ignore[misc]


# Close signal for the work queue, one per worker
_STOP = object()


def _worker(
    work: queue.Queue[object],
    outcomes: OutcomeStream,
    logger: Logger,
    executor: Callable[[PlannedMove, Logger], MoveOutcome],
) -> int:
    processed = 0
    while True:
        item = work.get()
        if item is _STOP:
            return processed
        move: PlannedMove = item  # type: ignore[assignment]
        try:
            outcome = executor(move, logger)
        except Exception as e:
            outcome = MoveOutcome.failure(move, f"worker fault: {e!r}")
        outcomes.emit(outcome)
        processed += 1


def dispatch(
    moves: Iterable[PlannedMove],
    workers: int,
    outcomes: OutcomeStream,
    logger: Logger | None = None,
    executor: Callable[[PlannedMove, Logger], MoveOutcome] = execute_move,
) -> int:
    """Run ``moves`` through a fixed pool of workers sharing a bounded queue.

    Returns the number of moves dispatched once every worker has exited, so
    all outcomes are on ``outcomes`` by then. The stream is not closed here.
    """
    logger = logger or Logger(verbosity=0)
    workers = max(1, workers)
    work: queue.Queue[object] = queue.Queue(maxsize=workers * QUEUE_FACTOR)
    dispatched = 0

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="organize") as pool:
        futures = [
            pool.submit(_worker, work, outcomes, logger, executor)
            for _ in range(workers)
        ]
        for move in moves:
            work.put(move)
            dispatched += 1
        for _ in range(workers):
            work.put(_STOP)

        processed = sum(future.result() for future in as_completed(futures))

    logger.verbose(f"Workers finished: {processed}/{dispatched} processed")
    return dispatched


class ProgressReporter:
    """Progress display: a tqdm bar when interactive, periodic log lines otherwise."""

    def __init__(
        self,
        total: int,
        interactive: bool = False,
        logger: Logger | None = None,
        log_every: int = 100,
    ) -> None:
        self.total = total
        self.interactive = interactive
        self.logger = logger or Logger(verbosity=0)
        self.log_every = max(1, log_every)
        self.count = 0
        self.errored = 0
        self._bar = None

        if self.interactive:
            from tqdm import tqdm

            self._bar = tqdm(total=total, desc="Processing files", unit="file", leave=False)

    def update(self, outcome: MoveOutcome) -> None:
        self.count += 1
        self.errored += outcome.errored
        if self._bar is not None:
            if outcome.errored:
                self._bar.set_postfix(errored=self.errored, refresh=False)
            self._bar.update(1)
        elif self.count % self.log_every == 0 or self.count == self.total:
            pct = (self.count / self.total) * 100 if self.total else 100.0
            self.logger.verbose(
                f"Progress: {self.count}/{self.total} files ({pct:.1f}%), {self.errored} errored"
            )

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()


class ProgressAggregator:
    """Single consumer that tallies outcomes from the stream."""

    def __init__(self, reporter: ProgressReporter | None = None, logger: Logger | None = None) -> None:
        self.reporter = reporter
        self.logger = logger or Logger(verbosity=0)
        self.moved = 0
        self.errored = 0
        self._thread: threading.Thread | None = None

    def consume(self, stream: OutcomeStream) -> None:
        """Drain ``stream`` until it is closed.

        Counters are updated before the reporter sees an outcome. A reporter
        that raises is dropped and draining continues.
        """
        try:
            for outcome in stream:
                self.moved += outcome.moved
                self.errored += outcome.errored
                if self.reporter is not None:
                    self._report(outcome)
        finally:
            if self.reporter is not None:
                self.reporter.close()

    def _report(self, outcome: MoveOutcome) -> None:
        try:
            self.reporter.update(outcome)
        except Exception as e:
            self.logger.warn(f"Progress display failed, continuing without it: {e!r}")
            reporter, self.reporter = self.reporter, None
            try:
                reporter.close()
            except Exception as close_error:
                self.logger.verbose(f"Progress display did not close cleanly: {close_error!r}")

    def start(self, stream: OutcomeStream) -> None:
        self._thread = threading.Thread(
            target=self.consume, args=(stream,), name="organize-progress", daemon=True
        )
        self._thread.start()

    def join(self) -> None:
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    @property
    def total(self) -> int:
        return self.moved + self.errored


def organize(
    config: OrganizerConfig,
    logger: Logger | None = None,
    reporter_factory: Callable[[int], ProgressReporter] | None = None,
) -> OrganizeResult:
    """Scan the source tree, then move every planned file with the worker pool.

    Raises :class:`ScanError` if the source root cannot be walked.
    """
    logger = logger or Logger(config.verbosity, config.dry_run)
    start = time.monotonic()
    source = Path(config.source_dir).expanduser().absolute()
    dest = Path(config.dest_dir).expanduser().absolute()
    result = OrganizeResult(dry_run=config.dry_run)

    logger.header(f"Organizing files from {source} to {dest}")
    if config.dry_run:
        logger.warn("DRY RUN MODE: no files will be moved or created")

    scan, moves = scan_tree(
        source, dest, config.recursive, config.mappings(), logger, dry_run=config.dry_run
    )
    result.scan = scan
    result.planned = moves

    if scan.first_error is not None:
        logger.warn("Scan completed with some errors")
    if not moves:
        logger.info("No files found to organize")
        result.duration = time.monotonic() - start
        return result

    logger.info(f"Found {len(moves)} files to process")

    reporter = reporter_factory(len(moves)) if reporter_factory else None
    aggregator = ProgressAggregator(reporter, logger)
    outcomes = OutcomeStream()
    aggregator.start(outcomes)
    try:
        dispatch(moves, config.workers, outcomes, logger)
    finally:
        outcomes.close()
        aggregator.join()

    result.moved = aggregator.moved
    result.errored = aggregator.errored
    result.duration = time.monotonic() - start
    return result


def print_summary(result: OrganizeResult, logger: Logger) -> None:
    """Print the end-of-run summary."""
    scan = result.scan
    logger.header("Summary")
    logger.summary("Total entries scanned", scan.total_visited, Colors.GREEN)
    logger.summary("Files to process", scan.total_planned, Colors.GREEN)
    logger.summary("Files skipped (already in destination)", scan.total_skipped, Colors.YELLOW)
    if scan.errored_entries:
        logger.summary("Entries with access errors", scan.errored_entries, Colors.RED)
    if scan.first_error is not None:
        logger.summary("First scan error", scan.first_error, Colors.RED)

    if result.dry_run:
        logger.summary("Files that would be moved", result.moved, Colors.GREEN)
    else:
        logger.summary("Files moved", result.moved, Colors.GREEN)
    if result.errored:
        logger.summary("Errors", result.errored, Colors.RED)
    logger.summary("Time taken", f"{result.duration:.3f}s", Colors.MAGENTA)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="organize",
        description="Sort files into category folders by extension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  organize --source ~/Downloads --dest ~/Sorted            # Organize top-level files
  organize --source ~/Downloads --dest ~/Sorted --dry-run  # Preview changes
  organize --source inbox --dest sorted --recursive        # Include subdirectories
  organize --source inbox --dest sorted --workers 16       # More concurrent moves
  organize --source inbox --dest sorted --categories cats.json

Configuration Files:
  .organizerc.json, .organizerc, organizer.config.json, .organizerc.yaml
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file (default: .organizerc.json)",
    )
    parser.add_argument(
        "--source",
        dest="source_dir",
        help="Source directory to organize files from",
    )
    parser.add_argument(
        "--dest",
        dest="dest_dir",
        help="Destination directory to move organized files to",
    )
    parser.add_argument(
        "--categories",
        type=Path,
        help="JSON file with custom extension -> category mappings",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help=f"Number of concurrent file operations (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--recursive",
        "-r",
        action="store_true",
        help="Scan and organize files in subdirectories",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate actions without moving files",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while moving files",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 if any file could not be moved",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show detailed output",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress per-file output (show only the summary)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> OrganizerConfig:
    """Merge config layers with precedence: CLI > ENV > pre-commit > File > Defaults."""
    file_config = load_config_file(args.config)
    env_config = load_env_config()
    pre_commit_config = load_pre_commit_config(Path.cwd())

    merged_config: ConfigDict = {**file_config, **pre_commit_config, **env_config}
    config = OrganizerConfig.from_dict(merged_config, Path.cwd())

    # Apply CLI overrides
    if args.source_dir:
        config.source_dir = args.source_dir
    if args.dest_dir:
        config.dest_dir = args.dest_dir
    if args.categories:
        config.categories.update(load_custom_mappings(args.categories))
    if args.workers is not None:
        config.workers = parse_workers(args.workers)
    if args.recursive:
        config.recursive = True
    if args.dry_run:
        config.dry_run = True
    if args.progress:
        config.progress = True
    if args.verbose or os.environ.get("ORGANIZER_VERBOSE") == "true":
        config.verbosity = 2
    if args.quiet:
        config.verbosity = 0

    if not config.source_dir:
        raise ConfigError("--source directory is required")
    if not config.dest_dir:
        raise ConfigError("--dest directory is required")

    return config


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)
    except FileNotFoundError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} Invalid JSON in config file: {e}", file=sys.stderr)
        return 1
    except yaml.YAMLError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} Invalid YAML in config file: {e}", file=sys.stderr)
        return 1
    except ConfigError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    logger = Logger(config.verbosity, config.dry_run)
    interactive = config.progress and sys.stderr.isatty()

    def reporter_factory(total: int) -> ProgressReporter:
        return ProgressReporter(total, interactive=interactive, logger=logger)

    try:
        result = organize(config, logger, reporter_factory)
    except ScanError as e:
        logger.error(f"Error during file scanning: {e}")
        return 1

    print_summary(result, logger)

    if result.completed_with_errors:
        logger.warn("Completed with errors")
        if args.strict:
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
