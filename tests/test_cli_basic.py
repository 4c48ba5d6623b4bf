import pytest

import cli


def test_requires_file_or_directory(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code != 0
    assert "usage" in capsys.readouterr().err


def test_file_and_directory_are_exclusive(tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main([str(tmp_path / "a.txt"), "-d", str(tmp_path)])
    assert exc.value.code != 0


def test_missing_directory_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli.main(["-d", str(tmp_path / "nope")])
    assert exc.value.code == 2


def test_streams_to_stdout_and_stats_to_stderr(tmp_path, capsys):
    src = tmp_path / "in.txt"
    src.write_bytes(b"apple\nbanana\napple\norange\nbanana")
    assert cli.main([str(src), "--stat", "--no-progress"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "apple\nbanana\norange\n"
    assert "Total lines read: 5" in captured.err


def test_writes_output_file(tmp_path, capsys):
    src = tmp_path / "in.txt"
    src.write_bytes(b"a\r\nb\r\na\r\n")
    dst = tmp_path / "new" / "out.txt"
    assert cli.main([str(src), "-o", str(dst), "--no-progress", "--stat"]) == 0
    assert dst.read_bytes() == b"a\nb\n"
    assert "Lines written: 2" in capsys.readouterr().out


def test_single_file_io_error_still_exits_zero(tmp_path):
    assert cli.main([str(tmp_path / "missing.txt"), "--no-progress"]) == 0


def test_directory_mode_with_ignore(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "keep.txt").write_text("k\nk\n", encoding="utf-8")
    (src / "skip.bak").write_text("s\n", encoding="utf-8")
    out = tmp_path / "out"
    assert cli.main(["-d", str(src), "-o", str(out), "--ignore", "*.bak", "--no-progress"]) == 0
    assert (out / "keep.txt").read_text(encoding="utf-8") == "k\n"
    assert not (out / "skip.bak").exists()
