from __future__ import annotations

import codecs
import re
import typing as t

_TERMINATOR = re.compile(r"\r\n|\r|\n")


class DecodedLineStream:
    """Lazily decode a binary source into text lines.

    Each yielded line keeps its terminator (``\\r\\n``, ``\\r`` or ``\\n``) when
    the source has one. ``prefix`` holds bytes already read from ``raw`` (the
    encoding detection sample) and is decoded before the rest of the source.
    Malformed byte sequences become U+FFFD; decoding never raises.

    One pass only: iterating a second time yields nothing.
    """

    def __init__(self, raw: t.BinaryIO, encoding: str, *, prefix: bytes = b"", chunk_size: int = 65536):
        self._raw = raw
        self._prefix = prefix
        self._chunk_size = chunk_size
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._exhausted = False
        self.encoding = encoding
        self.bytes_consumed = 0

    def _chunks(self) -> t.Iterator[bytes]:
        if self._prefix:
            yield self._prefix
            self._prefix = b""
        while True:
            chunk = self._raw.read(self._chunk_size)
            if not chunk:
                return
            yield chunk

    def _texts(self) -> t.Iterator[str]:
        for chunk in self._chunks():
            self.bytes_consumed += len(chunk)
            text = self._decoder.decode(chunk)
            if text:
                yield text
        tail = self._decoder.decode(b"", final=True)
        if tail:
            yield tail

    def __iter__(self) -> t.Iterator[str]:
        if self._exhausted:
            return
        self._exhausted = True

        # pieces of the current unterminated line; joined once per line
        parts: t.List[str] = []
        for text in self._texts():
            if parts and parts[-1].endswith("\r"):
                # held CR is rescanned with the new chunk so CRLF stays one terminator
                parts[-1] = parts[-1][:-1]
                text = "\r" + text
            start = 0
            for m in _TERMINATOR.finditer(text):
                # a trailing CR may be the first half of a CRLF in the next chunk
                if m.group() == "\r" and m.end() == len(text):
                    break
                parts.append(text[start:m.end()])
                yield "".join(parts)
                parts = []
                start = m.end()
            if start < len(text):
                parts.append(text[start:])
        line = "".join(parts)
        if line:
            yield line
