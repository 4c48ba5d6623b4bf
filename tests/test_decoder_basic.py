import io
import time

from linededup.stages.decoder import DecodedLineStream


def _lines(data: bytes, encoding: str = "utf-8", **kw):
    return list(DecodedLineStream(io.BytesIO(data), encoding, **kw))


def test_lines_keep_their_terminators():
    assert _lines(b"a\nb\r\nc\rd") == ["a\n", "b\r\n", "c\r", "d"]


def test_crlf_split_across_chunks_is_one_line():
    assert _lines(b"a\r\nb\r\n", chunk_size=1) == ["a\r\n", "b\r\n"]
    assert _lines(b"a\r", chunk_size=1) == ["a\r"]


def test_multibyte_character_split_across_chunks():
    data = "héllo\nwörld\n".encode("utf-8")
    assert _lines(data, chunk_size=1) == ["héllo\n", "wörld\n"]


def test_prefix_is_decoded_before_the_rest():
    raw = io.BytesIO(b"c\nd\n")
    stream = DecodedLineStream(raw, "utf-8", prefix=b"a\nb")
    assert list(stream) == ["a\n", "bc\n", "d\n"]
    assert stream.bytes_consumed == 7


def test_malformed_bytes_are_replaced():
    assert _lines(b"ok\n\xff\xfe\xfa bad\n", "utf-8") == ["ok\n", "��� bad\n"]


def test_empty_lines_and_leading_terminator():
    assert _lines(b"\n\nx") == ["\n", "\n", "x"]
    assert _lines(b"") == []


def test_stream_is_single_pass():
    stream = DecodedLineStream(io.BytesIO(b"a\nb\n"), "utf-8")
    assert list(stream) == ["a\n", "b\n"]
    assert list(stream) == []


def test_bytes_consumed_is_monotonic():
    stream = DecodedLineStream(io.BytesIO(b"one\ntwo\nthree\n"), "utf-8", chunk_size=4)
    seen = []
    for _ in stream:
        seen.append(stream.bytes_consumed)
    assert seen == sorted(seen)
    assert stream.bytes_consumed == 14


def test_long_single_line_is_linear():
    size = 4 * 1024 * 1024
    data = b"x" * size + b"\n" + b"y" * size
    t0 = time.perf_counter()
    lines = _lines(data, chunk_size=1024)
    elapsed = time.perf_counter() - t0
    assert [len(line) for line in lines] == [size + 1, size]
    # a rescanning splitter needs minutes here
    assert elapsed < 10.0


def test_cr_held_across_many_chunks():
    # chunks: "aaa" x3, "aa\r", "\nb\r", "c"
    data = b"a" * 11 + b"\r\nb\rc"
    assert _lines(data, chunk_size=3) == ["a" * 11 + "\r\n", "b\r", "c"]
