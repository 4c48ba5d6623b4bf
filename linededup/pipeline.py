from __future__ import annotations

import os
import time
import typing as t

from linededup.models import FileProcessingError, ProcessingRequest, Stats
from linededup.progress import NullProgress, ProgressReporter
from linededup.stages.decoder import DecodedLineStream
from linededup.stages.dedup import dedup_lines
from linededup.stages.encoding import detect_encoding
from linededup.stages.sinks import LineSink, sink_for
from linededup.utils import get_logger

logger = get_logger(__name__)

DEFAULT_SAMPLE_SIZE = 1024 * 1024
DEFAULT_CHUNK_SIZE = 65536


def _same_file(a, b) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def process_file(
    request: ProcessingRequest,
    *,
    sink: t.Optional[LineSink] = None,
    progress: t.Optional[ProgressReporter] = None,
    sample_size: t.Optional[int] = DEFAULT_SAMPLE_SIZE,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    default_encoding: str = "utf-8",
    min_confidence: float = 0.0,
) -> Stats:
    """Deduplicate one file into one sink.

    The input is opened once: the first ``sample_size`` bytes (the whole file
    when ``None``) drive encoding detection and are then decoded ahead of the
    remaining bytes. Without an explicit ``sink`` the request's output path
    decides between a new file and stdout. The sink is finished whether the
    loop completes or fails.

    Raises:
        FileProcessingError: on any I/O or output encoding failure for this file.
    """
    path = request.input_path
    progress = progress if progress is not None else NullProgress()
    t0 = time.monotonic()

    try:
        if request.output_path is not None and _same_file(path, request.output_path):
            raise OSError(f"output path is the input file: {request.output_path}")
        with open(path, "rb") as raw:
            total = os.fstat(raw.fileno()).st_size
            sample = raw.read() if sample_size is None else raw.read(sample_size)
            decision = detect_encoding(sample, default=default_encoding, min_confidence=min_confidence)
            logger.info("file.open path=%s bytes=%d encoding=%s", path, total, decision.encoding)

            out = sink if sink is not None else sink_for(request.output_path)
            progress.start(total)
            try:
                stream = DecodedLineStream(raw, decision.encoding, prefix=sample, chunk_size=chunk_size)
                stats = dedup_lines(stream, out, progress=progress, position=lambda: stream.bytes_consumed)
            finally:
                progress.finish()
                out.finish()
    except (OSError, UnicodeError) as e:
        raise FileProcessingError(path, e) from e

    stats.duration = time.monotonic() - t0
    logger.info(
        "file.done path=%s total=%d duplicates=%d written=%d took_ms=%d",
        path,
        stats.total_lines,
        stats.duplicate_lines,
        stats.lines_written,
        int(stats.duration * 1000),
    )
    return stats
