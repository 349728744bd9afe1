import logging
import os
import stat

import pytest

from bib_sort.main import EXIT_OK, EXIT_PARSE, EXIT_USAGE, EXIT_WRITE, build_parser, main


UNSORTED = "% refs\n@misc{boers2019, x={1}}\n\n@misc{Baxter1982, x={2}}\n"
SORTED = "% refs\n\n@misc{Baxter1982, x={2}}\n@misc{boers2019, x={1}}\n"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("BIB_SORT_CASE_SENSITIVE", "BIB_SORT_SORT_BY", "BIB_SORT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    yield
    logging.getLogger().setLevel(logging.WARNING)


def _write(path, text):
    path.write_bytes(text.encode("utf-8"))
    return str(path)


def test_main_prints_sorted_to_stdout(tmp_path, capsys):
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    assert main([bib]) == EXIT_OK
    captured = capsys.readouterr()
    assert captured.out == SORTED
    assert captured.err == ""


def test_main_writes_output_file(tmp_path, capsys):
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    out = tmp_path / "sorted.bib"
    assert main([bib, "-o", str(out)]) == EXIT_OK
    assert out.read_bytes().decode("utf-8") == SORTED
    assert capsys.readouterr().out == ""


def test_main_can_overwrite_input(tmp_path):
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    assert main([bib, "--out", bib]) == EXIT_OK
    assert (tmp_path / "refs.bib").read_bytes().decode("utf-8") == SORTED
    assert os.listdir(tmp_path) == ["refs.bib"]


def test_main_parse_error_leaves_output_untouched(tmp_path, capsys):
    bib = _write(tmp_path / "refs.bib", UNSORTED + "@misc{broken, title = {x}\n")
    out = tmp_path / "sorted.bib"
    out.write_bytes(b"precious\n")
    assert main([bib, "-o", str(out)]) == EXIT_PARSE
    assert out.read_bytes() == b"precious\n"
    err = capsys.readouterr().err
    assert "MalformedEntry" in err
    assert "line 5" in err


def test_main_parse_error_on_input_as_output(tmp_path, capsys):
    text = UNSORTED + "@misc{, title = {x}}\n"
    bib = _write(tmp_path / "refs.bib", text)
    assert main([bib, "-o", bib]) == EXIT_PARSE
    assert (tmp_path / "refs.bib").read_bytes().decode("utf-8") == text
    assert "MissingKey" in capsys.readouterr().err


def test_main_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "nope.bib")]) == EXIT_PARSE
    err = capsys.readouterr().err
    assert "IoError" in err
    assert "cannot read" in err


def test_main_invalid_utf8(tmp_path, capsys):
    bib = tmp_path / "latin1.bib"
    bib.write_bytes("@misc{müller, x={1}}\n".encode("latin-1"))
    assert main([str(bib)]) == EXIT_PARSE
    assert "EncodingError" in capsys.readouterr().err


def test_main_unwritable_output(tmp_path, capsys):
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    blocker = tmp_path / "file"
    blocker.write_text("x")
    assert main([bib, "-o", str(blocker / "sorted.bib")]) == EXIT_WRITE
    err = capsys.readouterr().err
    assert "IoError" in err
    assert "cannot write" in err


def test_main_case_sensitive_flag(tmp_path, capsys):
    bib = _write(tmp_path / "refs.bib", "@misc{alpha, x={1}}\n@misc{Zeta, x={2}}\n")
    assert main([bib, "-c"]) == EXIT_OK
    assert capsys.readouterr().out == "@misc{Zeta, x={2}}\n@misc{alpha, x={1}}\n"


def test_main_case_sensitive_from_env(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("BIB_SORT_CASE_SENSITIVE", "yes")
    bib = _write(tmp_path / "refs.bib", "@misc{alpha, x={1}}\n@misc{Zeta, x={2}}\n")
    assert main([bib]) == EXIT_OK
    assert capsys.readouterr().out.startswith("@misc{Zeta")


def test_main_sort_by_author_alias(tmp_path, capsys):
    text = "@misc{a1, author = {Zhang, W.}}\n@misc{z9, author = {Adams, A.}}\n"
    bib = _write(tmp_path / "refs.bib", text)
    assert main([bib, "--sbfaf"]) == EXIT_OK
    assert capsys.readouterr().out.startswith("@misc{z9")


def test_main_invalid_env_config(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("BIB_SORT_SORT_BY", "title")
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    assert main([bib]) == EXIT_USAGE
    assert "invalid configuration" in capsys.readouterr().err


def test_main_verbose_logs_to_stderr(tmp_path, capsys):
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    assert main([bib, "-v"]) == EXIT_OK
    captured = capsys.readouterr()
    assert captured.out == SORTED
    assert "[split]" in captured.err


def test_author_modes_are_exclusive():
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["refs.bib", "--sbfaf", "--sbfafn"])
    assert exc.value.code == 2


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    assert "--out" in capsys.readouterr().out


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_main_overwrite_keeps_file_mode(tmp_path):
    bib = _write(tmp_path / "refs.bib", UNSORTED)
    os.chmod(bib, 0o644)
    assert main([bib, "-o", bib]) == EXIT_OK
    assert stat.S_IMODE(os.stat(bib).st_mode) == 0o644
