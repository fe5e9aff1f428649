"""DocumentationService with a mocked MCP context."""
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from conftest import offset_of

from go_doc_mcp.services import DocumentationService


@pytest.fixture
def service(go_env):
    ctx = Mock()
    ctx.request_context.lifespan_context = SimpleNamespace(settings=go_env.settings, catalog=None, query_count=0)
    return DocumentationService(ctx)


def test_get_documentation_returns_record_dict(service, idents_file):
    offset = offset_of(idents_file, "Println(Answer", len("Println("))

    result = service.get_documentation(idents_file, offset)

    assert result == {
        "name": "Answer",
        "import": "example/idents",
        "pkg": "idents",
        "decl": "const Answer = 42",
        "doc": "Answer is the answer.\n\nConstant Value: 42",
        "pos": f"{idents_file}:10:7",
    }
    assert service.helper.query_count == 1


def test_get_documentation_text(service, idents_file):
    offset = offset_of(idents_file, "Println(Answer", len("Println("))

    text = service.get_documentation_text(idents_file, offset, line_length=40)

    assert text == (
        'import "example/idents"\n\n'
        "const Answer = 42\n\n"
        "Answer is the answer.\n\n"
        "Constant Value: 42\n"
    )


def test_modified_files_override_disk(service, idents_file):
    modified = open(idents_file).read().replace("// Answer is the answer.", "// Answer changed.")
    offset = modified.encode().index(b"Println(Answer") + len("Println(")

    result = service.get_documentation(idents_file, offset, modified_files={idents_file: modified})

    assert result["doc"].startswith("Answer changed.\n")


@pytest.mark.parametrize("file_path,offset", [
    ("", 0),
    ("main.txt", 0),
    ("main.go", -1),
    ("main.go", "12"),
])
def test_rejects_invalid_requests(service, file_path, offset):
    with pytest.raises(ValueError):
        service.get_documentation(file_path, offset)


def test_rejects_invalid_line_length(service, idents_file):
    with pytest.raises(ValueError):
        service.get_documentation_text(idents_file, 0, line_length=0)


def test_get_config_reports_settings(service, go_env):
    config = service.get_config()

    assert config["goroot"] == str(go_env.goroot)
    assert config["gopath"] == [str(go_env.gopath)]
    assert config["queries_served"] == 0
