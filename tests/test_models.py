"""Documentation record output forms."""
from go_doc_mcp.models import DocumentationRecord, format_doc_text, is_exported


def test_to_text_with_import_and_doc():
    record = DocumentationRecord(
        name="Answer",
        decl="const Answer = 42",
        import_path="example/idents",
        pkg="idents",
        doc="Answer is the answer.\n\nConstant Value: 42",
    )

    assert record.to_text() == (
        'import "example/idents"\n\n'
        "const Answer = 42\n\n"
        "Answer is the answer.\n\n"
        "Constant Value: 42\n"
    )


def test_to_text_without_doc_or_import():
    record = DocumentationRecord(name="x", decl="var x int")

    assert record.to_text() == "var x int\n\nUndocumented.\n"


def test_to_dict_uses_editor_keys():
    record = DocumentationRecord(name="n", decl="d", import_path="i", pkg="p", doc="doc", pos="f.go:1:1")

    assert record.to_dict() == {"name": "n", "import": "i", "pkg": "p", "decl": "d", "doc": "doc", "pos": "f.go:1:1"}


def test_format_doc_text_wraps_paragraphs():
    assert format_doc_text("one two three four", line_length=9) == "one two\nthree\nfour\n"


def test_format_doc_text_keeps_preformatted_blocks():
    text = "Intro line.\n\n\tslice = append(slice, elem)\n\nAfter."

    assert format_doc_text(text) == "Intro line.\n\n    slice = append(slice, elem)\n\nAfter.\n"


def test_is_exported():
    assert is_exported("Answer")
    assert not is_exported("answer")
    assert not is_exported("")
