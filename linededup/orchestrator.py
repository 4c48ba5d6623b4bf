import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, TextIO

from pydantic import ValidationError

from linededup.models import (
    ConfigError,
    FileProcessingError,
    ProcessingRequest,
    RunStats,
    Settings,
    Stats,
    UsageError,
)
from linededup.pipeline import process_file
from linededup.progress import ProgressReporter, TqdmProgress
from linededup.utils import display_path, get_logger, load_config
from linededup.walker import iter_files

logger = get_logger(__name__)

ProgressFactory = Callable[[Path], ProgressReporter]


def _apply_overrides(cfg: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> None:
    if not overrides:
        return

    # Detection
    if (
        overrides.get("sample_size") is not None
        or overrides.get("default_encoding") is not None
        or overrides.get("min_confidence") is not None
    ):
        det = cfg.setdefault("detection", {})
        if overrides.get("sample_size") is not None:
            det["sample_size"] = int(overrides["sample_size"])
        if overrides.get("default_encoding") is not None:
            det["default_encoding"] = overrides["default_encoding"]
        if overrides.get("min_confidence") is not None:
            det["min_confidence"] = float(overrides["min_confidence"])

    if overrides.get("chunk_size") is not None:
        cfg.setdefault("reading", {})["chunk_size"] = int(overrides["chunk_size"])

    # Walk
    if (
        overrides.get("ignore")
        or overrides.get("include_hidden") is not None
        or overrides.get("use_ignore_files") is not None
    ):
        walk = cfg.setdefault("walk", {})
        if overrides.get("ignore"):
            walk["ignore"] = list(walk.get("ignore") or []) + list(overrides["ignore"])
        if overrides.get("include_hidden") is not None:
            walk["include_hidden"] = overrides["include_hidden"]
        if overrides.get("use_ignore_files") is not None:
            walk["use_ignore_files"] = overrides["use_ignore_files"]

    if overrides.get("layout") is not None:
        cfg.setdefault("output", {})["layout"] = overrides["layout"]

    if overrides.get("progress_enabled") is not None:
        cfg.setdefault("progress", {})["enabled"] = overrides["progress_enabled"]


def build_settings(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Settings:
    cfg = load_config(config_path)
    _apply_overrides(cfg, overrides)
    try:
        return Settings.model_validate(cfg)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e


# ---------- Stats reporting ----------

def format_stats(stats: Stats) -> List[str]:
    return [
        f"  Total lines read: {stats.total_lines}",
        f"  Duplicate lines found: {stats.duplicate_lines}",
        f"  Lines written: {stats.lines_written}",
        f"  Duration: {stats.duration:.2f}s",
    ]


def print_stats(stats: Stats, stream: TextIO) -> None:
    for line in format_stats(stats):
        print(line, file=stream)


# ---------- Output path preparation ----------

def output_path_for(file_path: Path, root: Path, output_dir: Optional[Path], layout: str) -> Optional[Path]:
    """Map an input file found under ``root`` to its output location."""
    if output_dir is None:
        return None
    if layout == "mirror":
        return output_dir / file_path.relative_to(root)
    return output_dir / file_path.name


# ---------- Runs ----------

def _default_progress(settings: Settings) -> ProgressFactory:
    enabled = settings.progress.enabled and sys.stderr.isatty()
    return lambda path: TqdmProgress(path.name, enabled=enabled)


def _process(request: ProcessingRequest, settings: Settings, progress_factory: ProgressFactory) -> Stats:
    return process_file(
        request,
        progress=progress_factory(request.input_path),
        sample_size=settings.detection.sample_size,
        chunk_size=settings.reading.chunk_size,
        default_encoding=settings.detection.default_encoding,
        min_confidence=settings.detection.min_confidence,
    )


def _run_file(
    file_path: Path,
    output: Optional[Path],
    settings: Settings,
    run: RunStats,
    progress_factory: ProgressFactory,
) -> None:
    try:
        stats = _process(ProcessingRequest(file_path, output), settings, progress_factory)
    except FileProcessingError as e:
        logger.error("Error processing file %s: %s", file_path, e.cause)
        run.fail()
        return
    run.add(stats)


def _run_directory(
    directory: Path,
    output: Optional[Path],
    settings: Settings,
    run: RunStats,
    progress_factory: ProgressFactory,
    *,
    stat: bool,
    stats_stream: TextIO,
) -> None:
    files = list(
        iter_files(
            directory,
            settings.walk.ignore,
            include_hidden=settings.walk.include_hidden,
            use_ignore_files=settings.walk.use_ignore_files,
        )
    )
    print(f"Found {len(files)} files to process in directory.", file=stats_stream)

    claimed: Dict[Path, Path] = {}
    for file_path in files:
        out_path = output_path_for(file_path, directory, output, settings.output.layout)
        if out_path is not None:
            previous = claimed.get(out_path)
            if previous is not None:
                logger.warning(
                    "output collision: %s overwrites output of %s at %s",
                    display_path(file_path, directory),
                    display_path(previous, directory),
                    out_path,
                )
            claimed[out_path] = file_path

        try:
            stats = _process(ProcessingRequest(file_path, out_path), settings, progress_factory)
        except FileProcessingError as e:
            logger.error("Error processing file %s: %s", file_path, e.cause)
            run.fail()
            continue

        if stat:
            print(f"\nStats for {file_path}:", file=stats_stream)
            print_stats(stats, stats_stream)
        run.add(stats)


def run_once(
    *,
    file: Optional[str] = None,
    directory: Optional[str] = None,
    output: Optional[str] = None,
    stat: bool = False,
    ignore: Sequence[str] = (),
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    progress_factory: Optional[ProgressFactory] = None,
    stats_stream: Optional[TextIO] = None,
) -> RunStats:
    """Deduplicate a single file or every file under a directory.

    Per-file I/O errors are logged and counted; they never abort the run.

    Raises:
        UsageError: neither or both of ``file``/``directory`` given, the
            directory does not exist, or the configuration is invalid.
    """
    if (file is None) == (directory is None):
        raise UsageError("You must specify an input file or a directory with -d.")

    merged = dict(overrides or {})
    if ignore:
        merged["ignore"] = list(merged.get("ignore") or []) + list(ignore)
    settings = build_settings(config_path, merged)

    out_path = Path(output) if output else None
    if stats_stream is None:
        # the deduplicated text owns stdout when there is no output path
        stats_stream = sys.stderr if out_path is None else sys.stdout
    if progress_factory is None:
        progress_factory = _default_progress(settings)

    run = RunStats()
    t0 = time.monotonic()

    if directory is not None:
        root = Path(directory)
        if not root.is_dir():
            raise UsageError(f"Not a directory: {directory}")
        _run_directory(root, out_path, settings, run, progress_factory, stat=stat, stats_stream=stats_stream)
    else:
        _run_file(Path(file), out_path, settings, run, progress_factory)

    run.duration = time.monotonic() - t0
    run.totals.duration = run.duration
    logger.info(
        "run.done files=%d failed=%d total=%d duplicates=%d written=%d",
        run.files_processed,
        run.files_failed,
        run.totals.total_lines,
        run.totals.duplicate_lines,
        run.totals.lines_written,
    )

    if stat:
        print("\n--- Total Execution Stats ---", file=stats_stream)
        print_stats(run.totals, stats_stream)
    return run
