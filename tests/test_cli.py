"""Command line parsing and output."""
import io
import json
import logging

import pytest

from conftest import offset_of

from go_doc_mcp.cli import parse_pos, run
from go_doc_mcp.errors import InvalidPositionError


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def go_environ(monkeypatch, go_env):
    monkeypatch.setenv("GOROOT", str(go_env.goroot))
    monkeypatch.setenv("GOPATH", str(go_env.gopath))
    monkeypatch.setenv("GOOS", "linux")
    monkeypatch.setenv("GOARCH", "amd64")
    monkeypatch.delenv("GO_DOC_BUILTIN_SOURCE", raising=False)
    monkeypatch.delenv("GO_DOC_TAGS", raising=False)
    return go_env


def test_parse_pos_valid():
    assert parse_pos("foo.go:#123") == ("foo.go", 123)
    assert parse_pos("C:/dir/foo.go:#0") == ("C:/dir/foo.go", 0)


@pytest.mark.parametrize("value", [
    "foo.go:123",
    "foo.go#123",
    "foo.go#:123",
    "123",
    "foo.go::123",
    "foo.go##123",
    "#:123",
    "foo.go:#",
    "foo.go:#abc",
])
def test_parse_pos_invalid(value):
    with pytest.raises(InvalidPositionError) as excinfo:
        parse_pos(value)
    assert str(excinfo.value) == f"invalid option: -pos={value}"


def test_parse_pos_missing():
    with pytest.raises(InvalidPositionError, match="missing required -pos flag"):
        parse_pos("")


def test_json_output(go_environ, idents_file):
    offset = offset_of(idents_file, "Println(Answer", len("Println("))
    out = io.StringIO()

    status = run(["-pos", f"{idents_file}:#{offset}", "-json"], stdout=out)

    assert status == 0
    record = json.loads(out.getvalue())
    assert record["name"] == "Answer"
    assert record["decl"] == "const Answer = 42"
    assert set(record) == {"name", "import", "pkg", "decl", "doc", "pos"}


def test_text_output(go_environ, idents_file):
    offset = offset_of(idents_file, "pt.X", len("pt."))
    out = io.StringIO()

    status = run(["-pos", f"{idents_file}:#{offset}"], stdout=out)

    assert status == 0
    assert out.getvalue() == 'import "example/idents"\n\nfield X int\n\nX is horizontal.\n\n'


def test_modified_archive_from_stdin(go_environ, idents_file):
    modified = open(idents_file, 'rb').read().replace(b"// Answer is the answer.", b"// Answer from stdin.")
    offset = modified.index(b"Println(Answer") + len("Println(")
    archive = f"{idents_file}\n{len(modified)}\n".encode() + modified
    out = io.StringIO()

    status = run(["-pos", f"{idents_file}:#{offset}", "-modified", "-json"],
                 stdin=io.BytesIO(archive), stdout=out)

    assert status == 0
    assert json.loads(out.getvalue())["doc"].startswith("Answer from stdin.\n")


def test_errors_go_to_stderr(go_environ, capsys):
    status = run(["-pos", "foo.go:123"], stdout=io.StringIO())

    assert status == 1
    assert "invalid option: -pos=foo.go:123" in capsys.readouterr().err


def test_missing_pos_flag(go_environ, capsys):
    assert run([], stdout=io.StringIO()) == 1
    assert "missing required -pos flag" in capsys.readouterr().err
