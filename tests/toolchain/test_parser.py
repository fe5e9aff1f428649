"""Comment groups and their attachment to declarations."""
from go_doc_mcp.toolchain.parser import CommentGroup, get_parser

SOURCE = b"""package p

//go:generate stringer
// Documented has a doc.
//
// Second paragraph.
func Documented() {}

// Floating comment.

var x = 1 // trailing note
"""


def _parse():
    return get_parser().parse("p.go", SOURCE)


def _first(source, node_type):
    return next(n for n in source.root.named_children if n.type == node_type)


def test_lead_comment_drops_directives():
    source = _parse()
    func = _first(source, 'function_declaration')

    group = source.lead_comment(func)

    assert group is not None
    assert group.text() == "Documented has a doc.\n\nSecond paragraph.\n"


def test_comment_separated_by_blank_line_is_not_a_doc():
    source = _parse()
    var = _first(source, 'var_declaration')

    assert source.lead_comment(var) is None


def test_line_comment_on_same_line():
    source = _parse()
    var = _first(source, 'var_declaration')

    group = source.line_comment(var)

    assert group is not None
    assert group.text() == "trailing note\n"


def test_block_comment_text():
    group = CommentGroup(comments=["/*\n Block text\n\n\n more  \n*/"])

    assert group.text() == " Block text\n\n more\n"


def test_empty_group_has_no_text():
    assert CommentGroup(comments=["//", "//go:noinline"]).text() == ""


def test_package_name_and_positions():
    source = _parse()

    assert source.package_name == "p"
    assert source.position_string(SOURCE.index(b"Documented()")) == "p.go:7:6"
