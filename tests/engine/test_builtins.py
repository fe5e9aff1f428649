"""Predeclared identifiers are documented from the builtin package."""
from conftest import offset_of

from go_doc_mcp.engine import BuiltinCatalog, document_at
from go_doc_mcp.engine.builtin import BUNDLED_BUILTIN, builtin_source_path, load_builtin_catalog
from go_doc_mcp.settings import ToolchainSettings

CATALOG_SOURCE = b"""package builtin

// Type is a placeholder.
type Type int

// IntegerType is another placeholder.
type IntegerType int

// Grow returns a grown slice.
func Grow(s []Type) []Type

// Count counts.
func Count(v Type) int

// Limit values are bounds.
const (
	Low IntegerType = 0
	High IntegerType = 10
)

// Zero is nothing.
var Zero Type
"""


def lookup(path, settings, needle, delta=0):
    return document_at(path, offset_of(path, needle, delta), settings=settings)


def test_builtin_function(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "= append(", 2)

    assert record.name == "append"
    assert record.import_path == "builtin"
    assert record.pkg == "builtin"
    assert record.pos == ""
    assert record.decl == "func append(slice []Type, elems ...Type) []Type"
    assert record.doc.startswith("The append built-in function appends elements to the end of a slice.")


def test_builtin_error_type(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, ") error {", 2)

    assert record.name == "error"
    assert record.decl == "type error interface {\n\tError() string\n}"
    assert record.doc.startswith("The error built-in interface type is the conventional interface for")


def test_builtin_conversion_type(idents_file, go_env):
    record = lookup(idents_file, go_env.settings, "float64(p.X")

    assert record.decl == "type float64 float64"
    assert record.doc == "float64 is the set of all IEEE-754 64-bit floating-point numbers.\n"


def test_catalog_search_order_and_type_association():
    catalog = BuiltinCatalog.from_source("builtin.go", CATALOG_SOURCE)

    # Grow returns the Type placeholder, so it belongs to that type; Count does not
    assert [f.name for f in catalog.funcs] == ["Count"]
    type_by_name = {t.name: t for t in catalog.types}
    assert [f.name for f in type_by_name["Type"].funcs] == ["Grow"]
    assert type_by_name["IntegerType"].consts[0].names == ["Low", "High"]

    assert catalog.lookup("Grow") == ("Grow returns a grown slice.\n", "func Grow(s []Type) []Type")
    assert catalog.lookup("High") == ("Limit values are bounds.\n", "const High IntegerType = 10")
    assert catalog.lookup("Zero") == ("Zero is nothing.\n", "var Zero Type")
    assert catalog.lookup("IntegerType") == ("IntegerType is another placeholder.\n", "type IntegerType int")
    assert catalog.lookup("missing") == ("", "")


def test_builtin_source_prefers_explicit_setting(tmp_path):
    explicit = tmp_path / 'builtin.go'
    explicit.write_bytes(CATALOG_SOURCE)

    assert builtin_source_path(ToolchainSettings(builtin_source=str(explicit))) == str(explicit)
    assert builtin_source_path(ToolchainSettings(goroot=str(tmp_path / 'missing'))) == BUNDLED_BUILTIN
    assert builtin_source_path(None) == BUNDLED_BUILTIN


def test_builtin_value_decl_drops_alignment():
    catalog = load_builtin_catalog(ToolchainSettings(builtin_source=BUNDLED_BUILTIN))

    doc, decl = catalog.lookup("true")
    assert decl == "const true = 0 == 0"
    assert doc == "true and false are the two untyped boolean values.\n"
