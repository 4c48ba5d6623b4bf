from __future__ import annotations

import sys
import typing as t
from pathlib import Path

from linededup.utils import ensure_parent_dir


class LineSink(t.Protocol):
    """Destination for deduplicated lines."""

    def write_line(self, text: str) -> None: ...

    def finish(self) -> None: ...


class StreamSink:
    """Write lines to an already-open text stream (stdout by default).

    Streams backed by a binary buffer get UTF-8 bytes regardless of their
    own encoding. ``finish`` flushes but leaves the stream open; the caller
    owns it.
    """

    def __init__(self, stream: t.Optional[t.TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self._buffer = getattr(self.stream, "buffer", None)
        if self._buffer is not None:
            # text already queued on the stream must come first
            self.stream.flush()

    def write_line(self, text: str) -> None:
        if self._buffer is not None:
            self._buffer.write(text.encode("utf-8") + b"\n")
        else:
            self.stream.write(text)
            self.stream.write("\n")

    def finish(self) -> None:
        if self._buffer is not None:
            self._buffer.flush()
        else:
            self.stream.flush()


class FileSink:
    """Create ``path`` (and any missing parent directories) and write UTF-8 lines."""

    def __init__(self, path: Path):
        self.path = Path(path)
        ensure_parent_dir(self.path)
        self._fh = open(self.path, "w", encoding="utf-8", newline="\n")

    def write_line(self, text: str) -> None:
        self._fh.write(text)
        self._fh.write("\n")

    def finish(self) -> None:
        if not self._fh.closed:
            self._fh.close()


def sink_for(output_path: t.Optional[Path]) -> LineSink:
    if output_path is None:
        return StreamSink()
    return FileSink(output_path)
