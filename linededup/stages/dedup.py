from __future__ import annotations

import typing as t

from linededup.models import Stats
from linededup.progress import ProgressReporter
from linededup.stages.sinks import LineSink
from linededup.utils import get_logger

logger = get_logger(__name__)


def strip_terminator(line: str) -> str:
    """Drop exactly one trailing ``\\r\\n``, ``\\n`` or ``\\r``."""
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n") or line.endswith("\r"):
        return line[:-1]
    return line


def dedup_lines(
    lines: t.Iterable[str],
    sink: LineSink,
    *,
    progress: t.Optional[ProgressReporter] = None,
    position: t.Optional[t.Callable[[], int]] = None,
) -> Stats:
    """Write the first occurrence of every distinct line to ``sink``, in order.

    Lines are compared with their terminator removed, so ``"a\\r\\n"`` and
    ``"a"`` are the same key and every written line ends with a single
    ``\\n``. ``position`` returns the raw byte offset reached so far and is
    forwarded to ``progress`` after each line.
    """
    seen: t.Set[str] = set()
    stats = Stats()

    for line in lines:
        key = strip_terminator(line)
        stats.total_lines += 1
        if key in seen:
            stats.duplicate_lines += 1
        else:
            seen.add(key)
            sink.write_line(key)
            stats.lines_written += 1
        if progress is not None and position is not None:
            progress.update(position())

    logger.debug("dedup.lines: kept=%d from=%d", stats.lines_written, stats.total_lines)
    return stats
