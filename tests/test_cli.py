# tests/test_cli.py
import json
from pathlib import Path
from textwrap import dedent

import pytest

from webch.cli import build_config, main, run
from webch.errors import ConfigurationError, NoMatchError

WEB = dedent("""\
    @* Introduction.
    This is the base text.
    @d banner "Version 1"
    @<Global variables@>=
    int count;
    @ The end.
    """)

CH_BANNER = dedent("""\
    Bump the banner.
    @x
    @d banner "Version 1"
    @y
    @d banner "Version 1 (local)"
    @z
    """)

CH_COUNT = dedent("""\
    @x
    int count;
    @y
    long count;
    int extra;
    @z
    """)


def _write(dirpath: Path, name: str, text: str) -> Path:
    p = dirpath / name
    p.write_bytes(text.encode("utf-8"))
    return p


@pytest.fixture
def project(tmp_path: Path, monkeypatch):
    _write(tmp_path, "prog.web", WEB)
    _write(tmp_path, "banner.ch", CH_BANNER)
    _write(tmp_path, "count.ch", CH_COUNT)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _raw_contents(data: bytes):
    return [row.split(b" | ", 1)[1] for row in data.split(b"\n")[:-1]]


def test_build_config():
    cfg = build_config(["-vv", "-w", "src", "-o", "-", "--no-crlf", "a.web", "b.ch", "c.ch"])
    assert cfg.verbose == 2
    assert cfg.directory == "src"
    assert cfg.output == "-"
    assert cfg.crlf is False
    assert cfg.web_file == "a.web"
    assert cfg.change_files == ("b.ch", "c.ch")


def test_double_dash_ends_options():
    cfg = build_config(["--", "-odd.web", "x.ch"])
    assert cfg.web_file == "-odd.web"
    assert cfg.output is None


def test_options_stop_at_web_file():
    cfg = build_config(["-v", "a.web", "-x.ch", "b.ch", "-o"])
    assert cfg.verbose == 1
    assert cfg.output is None
    assert cfg.change_files == ("-x.ch", "b.ch", "-o")


@pytest.mark.parametrize("argv", [[], ["a.web"], ["-w"], ["-o"], ["-v", "a.web"]])
def test_missing_arguments_are_configuration_errors(argv):
    with pytest.raises(ConfigurationError):
        build_config(argv)


def test_main_reports_configuration_error(capsys, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    rc = main(["only.web"])
    assert rc == 1
    assert "Problem parsing arguments" in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []


def test_listing_to_stdout(project, capsys):
    rc = main(["prog.web", "banner.ch"])
    assert rc == 0
    rows = capsys.readouterr().out.splitlines()
    assert len(rows) == 6
    assert rows[2].startswith("banner.ch(5)")
    assert rows[2].endswith('| @d banner "Version 1 (local)"')
    assert rows[0].startswith("prog.web(1) ")


def test_raw_output_file_with_two_change_files(project):
    rc = main(["--no-crlf", "-o", "out.txt", "prog.web", "banner.ch", "count.ch"])
    assert rc == 0
    data = (project / "out.txt").read_bytes()
    assert _raw_contents(data) == [
        b"@* Introduction.",
        b"This is the base text.",
        b'@d banner "Version 1 (local)"',
        b"@<Global variables@>=",
        b"long count;",
        b"int extra;",
        b"@ The end.",
    ]
    assert b"\r" not in data


def test_raw_output_to_stdout(project, capsysbinary):
    rc = main(["--no-crlf", "-o", "-", "prog.web", "count.ch"])
    assert rc == 0
    out = capsysbinary.readouterr().out
    assert b"count.ch(4) | long count;\n" in out
    assert b"\x1b[7m" not in out


def test_workdir_option(project, monkeypatch, capsys):
    monkeypatch.chdir(project.parent)
    rc = main(["-w", project.name, "prog.web", "banner.ch"])
    assert rc == 0
    assert "Version 1 (local)" in capsys.readouterr().out


def test_no_match_fails_and_writes_nothing(project, capsys):
    _write(project, "bad.ch", "@x\nnot in the web\n@y\nX\n@z\n")
    rc = main(["-o", "out.txt", "prog.web", "banner.ch", "bad.ch"])
    assert rc == 1
    err = capsys.readouterr().err
    assert "Application error: Change file section do not match [bad.ch(1)]" in err
    assert not (project / "out.txt").exists()


def test_applying_same_change_twice_aborts(project, capsys):
    assert main(["prog.web", "banner.ch", "banner.ch"]) == 1
    assert "do not match [banner.ch(2)]" in capsys.readouterr().err


def test_structure_error_is_fatal(project, capsys):
    _write(project, "stray.ch", "intro\n@y\n")
    assert main(["prog.web", "stray.ch"]) == 1
    assert "missing @x at stray.ch(2)" in capsys.readouterr().err


def test_missing_web_file(project, capsys):
    assert main(["absent.web", "banner.ch"]) == 1
    assert "absent.web" in capsys.readouterr().err


def test_missing_z_warns_but_succeeds(project, capsys):
    _write(project, "open.ch", "@x\nint count;\n@y\nshort count;\n")
    assert main(["prog.web", "open.ch"]) == 0
    captured = capsys.readouterr()
    assert "missing @z [open.ch]" in captured.err
    assert "short count;" in captured.out


def test_verbose_progress(project, capsys):
    assert main(["-vv", "prog.web", "banner.ch"]) == 0
    err = capsys.readouterr().err
    assert "[webch] Web file: prog.web" in err
    assert "[webch] Change file: banner.ch" in err
    assert "section banner.ch(2) matched at prog.web(3)" in err


def test_crlf_round_trip(project):
    _write(project, "dos.web", "one\r\ntwo\r\n")
    _write(project, "dos.ch", "@x\r\ntwo\r\n@y\r\nTWO\r\n@z\r\n")
    assert main(["--crlf", "-o", "dos.out", "dos.web", "dos.ch"]) == 0
    assert (project / "dos.out").read_bytes() == b"dos.web(1) | one\r\ndos.ch(4)  | TWO\r\n"


def test_cr_is_content_without_crlf(project):
    _write(project, "dos.web", "one\r\ntwo\r\n")
    _write(project, "unix.ch", "@x\ntwo\n@y\nTWO\n@z\n")
    with pytest.raises(NoMatchError):
        run(build_config(["--no-crlf", "-o", "x.out", "dos.web", "unix.ch"]))


def test_receipt_out_on_success(project):
    rc = main(["--receipt-out", "r.json", "-o", "out.txt", "prog.web", "banner.ch", "count.ch"])
    assert rc == 0
    j = json.loads((project / "r.json").read_text(encoding="utf-8"))
    assert j["status"] == "ok"
    assert j["web"]["path"] == "prog.web"
    assert j["web"]["lines"] == 6
    assert [cf["path"] for cf in j["changeFiles"]] == ["banner.ch", "count.ch"]
    assert j["changeFiles"][1]["sections"][0]["matchedAt"] == {"file": "prog.web", "line": 5}
    assert j["output"] == {"destination": "out.txt", "lines": 7}


def test_receipt_out_on_failure(project):
    _write(project, "bad.ch", "@x\nmissing\n@y\n@z\n")
    rc = main(["--receipt-out", "r.json", "prog.web", "banner.ch", "bad.ch"])
    assert rc == 1
    j = json.loads((project / "r.json").read_text(encoding="utf-8"))
    assert j["status"] == "error"
    assert "bad.ch(1)" in j["reason"]
    assert [cf["path"] for cf in j["changeFiles"]] == ["banner.ch"]


def test_change_file_named_like_an_option(project, capsys):
    _write(project, "-banner.ch", CH_BANNER)
    assert main(["prog.web", "-banner.ch"]) == 0
    assert "Version 1 (local)" in capsys.readouterr().out


def test_output_that_cannot_be_created(project, capsys):
    assert main(["-o", "nodir/out.txt", "prog.web", "banner.ch"]) == 1
    assert "Application error: nodir/out.txt" in capsys.readouterr().err
    assert not (project / "nodir").exists()


def test_missing_change_file(project, capsys):
    assert main(["-o", "out.txt", "prog.web", "banner.ch", "gone.ch"]) == 1
    assert "Application error: gone.ch" in capsys.readouterr().err
    assert not (project / "out.txt").exists()


def test_missing_workdir(project, capsys):
    assert main(["-w", "nowhere", "prog.web", "banner.ch"]) == 1
    assert "Application error: nowhere" in capsys.readouterr().err
