"""Lookups of identifiers declared in the queried package."""
import pytest

from conftest import offset_of, write_go

from go_doc_mcp.engine import document_at
from go_doc_mcp.errors import NoDocumentationFoundError, OutOfRangeError, UnresolvedIdentifierError


def lookup(path, settings, needle, delta=0, occurrence=0, **kwargs):
    return document_at(path, offset_of(path, needle, delta, occurrence), settings=settings, **kwargs)


def test_constant_use_documents_declaration(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "Println(Answer", len("Println("))

    assert record.name == "Answer"
    assert record.decl == "const Answer = 42"
    assert record.import_path == "example/idents"
    assert record.pkg == "idents"
    assert record.doc == "Answer is the answer.\n\nConstant Value: 42"
    assert record.pos == f"{idents_file}:10:7"


def test_constant_definition_matches_use(idents_file, go_env):
    use = lookup(idents_file, go_env.settings, "Println(Answer", len("Println("))
    definition = lookup(idents_file, go_env.settings, "const Answer", len("const "))

    assert definition == use


@pytest.mark.parametrize("delta", [0, 1, 3, 5])
def test_any_offset_inside_identifier_resolves_it(idents_file, go_env, delta):
    record = lookup(idents_file, go_env.settings, "Println(Answer", len("Println(") + delta)

    assert record.name == "Answer"
    assert record.decl == "const Answer = 42"


def test_grouped_constant_prefers_spec_doc(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "Answer, Circle", len("Answer, "))

    assert record.decl == "const Circle = iota"
    assert record.doc == "Circle is round.\n\nConstant Value: 0"


def test_grouped_constant_uses_line_comment(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "\tSquare //", 1)

    assert record.name == "Square"
    assert record.doc == "Square has corners.\n\nConstant Value: 1"


def test_grouped_constant_falls_back_to_declaration_doc(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "Circle, Triangle", len("Circle, "))

    assert record.decl == "const Triangle"
    assert record.doc == "Shape groups the shape constants.\n\nConstant Value: 2"


def test_constant_values_are_exact(idents_file, go_env):
    ratio = lookup(idents_file, go_env.settings, "const Ratio", len("const "))
    greeting = lookup(idents_file, go_env.settings, "const Greeting", len("const "))

    assert ratio.doc.endswith("Constant Value: 3/2")
    assert greeting.doc.endswith('Constant Value: "hi\\n"')


def test_field_lead_comment(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "pt.X", len("pt."))

    assert record.name == "X"
    assert record.decl == "field X int"
    assert record.doc == "X is horizontal.\n"
    assert record.pkg == "idents"


def test_field_line_comment_through_pointer_receiver(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "p.Y*p.Y", len("p."))

    assert record.name == "Y"
    assert record.doc == "Y is vertical.\n"


def test_composite_literal_key_resolves_to_field(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "Point{X", len("Point{"))

    assert record.decl == "field X int"
    assert record.doc == "X is horizontal.\n"


def test_struct_type_elides_unexported_fields(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "(pt Point)", len("(pt "))

    assert record.name == "Point"
    assert record.doc == "Point is a location.\n"
    assert record.decl == (
        "type Point struct {\n"
        "\t// X is horizontal.\n"
        "\tX int\n"
        "\tY int // Y is vertical.\n"
        "\t// Has unexported fields.\n"
        "}"
    )


def test_struct_type_with_unexported_fields_shown(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "(pt Point)", len("(pt "), show_unexported=True)

    assert "\tz int\n" in record.decl
    assert "Has unexported fields" not in record.decl


def test_interface_type_elides_unexported_methods(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "type Thing", len("type "))

    assert record.doc == "Thing does things.\n"
    assert record.decl == (
        "type Thing interface {\n"
        "\t// SameTypeParams takes two strings.\n"
        "\tSameTypeParams(x, y string)\n"
        "\t// Has unexported methods.\n"
        "}"
    )


def test_interface_method_renders_signature(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "\tSameTypeParams", 1)

    assert record.decl == "func (Thing).SameTypeParams(x string, y string)"
    assert record.doc == "SameTypeParams takes two strings.\n"


def test_method_declaration_without_body(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, ") Distance(", 2)

    assert record.decl == "func (p *Point) Distance() float64"
    assert record.doc == "Distance returns how far p is from the origin.\n"


def test_method_call_on_composite_literal_variable(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "origin.Distance", len("origin."))

    assert record.name == "Distance"
    assert record.decl == "func (p *Point) Distance() float64"


def test_local_variable_has_type_and_no_doc(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "\twords = append", 1)

    assert record.name == "words"
    assert record.decl == "var words []string"
    assert record.doc == ""
    assert record.pkg == "idents"


def test_lookup_is_repeatable(idents_file, go_env):
    first = lookup(idents_file, go_env.settings, "Println(Answer", len("Println("))
    second = lookup(idents_file, go_env.settings, "Println(Answer", len("Println("))

    assert first == second


def test_offset_beyond_end_of_file(idents_file, go_env):
    size = len(open(idents_file, 'rb').read())

    with pytest.raises(OutOfRangeError):
        document_at(idents_file, size + 10, settings=go_env.settings)


def test_keyword_has_no_documentation(idents_file, go_env):
    with pytest.raises(NoDocumentationFoundError):
        lookup(idents_file, go_env.settings, "\tif len", 1)


def test_package_clause_name_is_unresolved(idents_file, go_env):
    with pytest.raises(UnresolvedIdentifierError):
        lookup(idents_file, go_env.settings, "package idents", len("package "))


EMBEDDED_GO = """package emb

// Base is embedded.
type Base struct {
\t// ID identifies.
\tID int
}

// Outer wraps Base.
type Outer struct {
\tBase
\tname string
}

func use(o Outer) int {
\treturn o.ID
}
"""


@pytest.fixture
def embedded_file(go_env):
    return write_go(go_env.root, 'emb/emb.go', EMBEDDED_GO)


def test_embedded_field_documents_its_type(embedded_file, go_env):
    record = lookup(embedded_file, go_env.settings, "\tBase\n", 1)

    assert record.name == "Base"
    assert record.doc == "Base is embedded.\n"
    assert record.decl == "type Base struct {\n\t// ID identifies.\n\tID int\n}"


def test_promoted_field_through_embedding(embedded_file, go_env):
    record = lookup(embedded_file, go_env.settings, "o.ID", len("o."))

    assert record.decl == "field ID int"
    assert record.doc == "ID identifies.\n"
    assert record.import_path == "command-line-arguments"


def test_exported_embedded_field_is_kept(embedded_file, go_env):
    record = lookup(embedded_file, go_env.settings, "type Outer", len("type "))

    assert record.decl == "type Outer struct {\n\tBase\n\t// Has unexported fields.\n}"


MEMBERS_GO = """package members

type (
\t// Two is second.
\tTwo struct {
\t\tE int
\t\tf int
\t}
)

// Mixed mixes visibility in one field.
type Mixed struct {
\tC string
\ta, B int
}

// Failer fails.
type Failer interface {
\terror
\tfail()
}

type base struct{}

// Wrapper hides its base.
type Wrapper struct {
\t*base
\tName string
}

// Deep has a documented field.
type Deep struct {
\t// Z is deep.
\tZ int // z trails
}
"""


@pytest.fixture
def members_file(go_env):
    return write_go(go_env.root, 'members/members.go', MEMBERS_GO)


def test_grouped_struct_type_is_outdented(members_file, go_env):
    record = lookup(members_file, go_env.settings, "\tTwo struct", 1)

    assert record.doc == "Two is second.\n"
    assert record.decl == "type Two struct {\n\tE int\n\t// Has unexported fields.\n}"


def test_grouped_struct_type_with_unexported_fields_shown(members_file, go_env):
    record = lookup(members_file, go_env.settings, "\tTwo struct", 1, show_unexported=True)

    assert record.decl == "type Two struct {\n\tE int\n\tf int\n}"


def test_unexported_name_hides_whole_field(members_file, go_env):
    record = lookup(members_file, go_env.settings, "type Mixed", len("type "))

    assert record.decl == "type Mixed struct {\n\tC string\n\t// Has unexported fields.\n}"


def test_embedded_error_is_kept_in_interface(members_file, go_env):
    record = lookup(members_file, go_env.settings, "type Failer", len("type "))

    assert record.decl == "type Failer interface {\n\terror\n\t// Has unexported methods.\n}"


def test_unexported_embedded_pointer_is_elided(members_file, go_env):
    record = lookup(members_file, go_env.settings, "type Wrapper", len("type "))

    assert record.decl == "type Wrapper struct {\n\tName string\n\t// Has unexported fields.\n}"


def test_field_lead_comment_wins_over_line_comment(members_file, go_env):
    record = lookup(members_file, go_env.settings, "\tZ int", 1)

    assert record.decl == "field Z int"
    assert record.doc == "Z is deep.\n"


SIGNATURES_GO = """package sigs

// Sorter sorts.
type Sorter interface {
\t// Less compares.
\tLess(i, j int) bool
}

// Visit visits values.
var Visit func(depth int) bool

func name(x interface{}) string {
\tswitch v := x.(type) {
\tcase int:
\t\treturn describe(v)
\t}
\treturn ""
}

func describe(n int) string {
\treturn ""
}
"""


@pytest.fixture
def signatures_file(go_env):
    return write_go(go_env.root, 'sigs/sigs.go', SIGNATURES_GO)


def test_type_switch_variable_takes_case_type(signatures_file, go_env):
    record = lookup(signatures_file, go_env.settings, "describe(v", len("describe("))

    assert record.name == "v"
    assert record.decl == "var v int"
    assert record.doc == ""


def test_interface_method_parameter_is_bound(signatures_file, go_env):
    record = lookup(signatures_file, go_env.settings, "i, j int", len("i, "))

    assert record.decl == "var j int"
    assert record.doc == ""
    assert record.pkg == "sigs"


def test_function_type_parameter_is_bound(signatures_file, go_env):
    record = lookup(signatures_file, go_env.settings, "func(depth", len("func("))

    assert record.decl == "var depth int"
    assert record.doc == ""
