"""Package loading and import path resolution."""
import os

import pytest

from conftest import write_go

from go_doc_mcp.errors import LoadError
from go_doc_mcp.toolchain.loader import PackageLoader, escape_module_path, parse_go_mod

GO_MOD = """module example.com/app // main module

go 1.21

require (
\tgithub.com/Foo/bar v1.2.3
\tgolang.org/x/text v0.14.0 // indirect
)

require example.com/single v0.1.0

replace example.com/single => ../single
replace (
\tgolang.org/x/text v0.14.0 => golang.org/x/text v0.15.0
)
"""


def test_parse_go_mod():
    module = parse_go_mod("/work/app", GO_MOD)

    assert module.path == "example.com/app"
    assert module.root == "/work/app"
    assert module.requires == {
        "github.com/Foo/bar": "v1.2.3",
        "golang.org/x/text": "v0.14.0",
        "example.com/single": "v0.1.0",
    }
    assert module.replaces == {
        "example.com/single": ("../single", ""),
        "golang.org/x/text": ("golang.org/x/text", "v0.15.0"),
    }


def test_escape_module_path():
    assert escape_module_path("github.com/Foo/bar") == "github.com/!foo/bar"


def test_import_path_for_goroot_and_gopath(go_env):
    loader = PackageLoader(settings=go_env.settings)

    assert loader.import_path_for_dir(str(go_env.goroot / 'src' / 'math')) == "math"
    assert loader.import_path_for_dir(str(go_env.gopath / 'src' / 'a' / 'b')) == "a/b"


def test_vendor_directory_wins_over_goroot(go_env):
    write_go(go_env.gopath, 'src/app/vendor/math/math.go', "package math\n")
    loader = PackageLoader(settings=go_env.settings)

    directory, import_path = loader.resolve_import("math", str(go_env.gopath / 'src' / 'app'))

    assert directory == str(go_env.gopath / 'src' / 'app' / 'vendor' / 'math')
    assert import_path == "app/vendor/math"


def test_unresolvable_imports(go_env):
    loader = PackageLoader(settings=go_env.settings)

    assert loader.resolve_import("C", str(go_env.root)) is None
    assert loader.resolve_import("does/not/exist", str(go_env.root)) is None


def test_module_cache_and_replace_directives(go_env):
    write_go(go_env.root, 'app/go.mod', GO_MOD)
    write_go(go_env.root, 'single/single.go', "package single\n")
    cached = os.path.join(go_env.settings.gomodcache, 'github.com', '!foo', 'bar@v1.2.3')
    write_go(cached, 'baz/baz.go', "package baz\n")
    loader = PackageLoader(settings=go_env.settings)
    app = str(go_env.root / 'app')

    assert loader.resolve_import("github.com/Foo/bar/baz", app) == (
        os.path.join(cached, 'baz'), "github.com/Foo/bar/baz")
    assert loader.resolve_import("example.com/single", app) == (
        str(go_env.root / 'single'), "example.com/single")


def test_load_program_collects_package_files(go_env):
    write_go(go_env.root, 'p/b.go', "package p\n")
    write_go(go_env.root, 'p/a_test.go', "package p\n")
    write_go(go_env.root, 'p/ext_test.go', "package p_test\n")
    write_go(go_env.root, 'p/other.go', "package other\n")
    query = write_go(go_env.root, 'p/c.go', "package p\n")
    loader = PackageLoader(settings=go_env.settings)

    program = loader.load_program(query)

    assert [os.path.basename(f.path) for f in program.main.files] == ["b.go", "c.go"]
    assert program.query_file.path == query
    assert program.main.name == "p"


def test_test_file_query_includes_tests(go_env):
    write_go(go_env.root, 'p/b.go', "package p\n")
    query = write_go(go_env.root, 'p/b_test.go', "package p\n")

    program = PackageLoader(settings=go_env.settings).load_program(query)

    assert [os.path.basename(f.path) for f in program.main.files] == ["b.go", "b_test.go"]


def test_overlay_supplies_unsaved_files(go_env):
    query = str(go_env.root / 'p' / 'new.go')
    loader = PackageLoader(settings=go_env.settings, overlay={query: b"package fresh\n"})

    program = loader.load_program(query)

    assert program.main.name == "fresh"


@pytest.mark.parametrize("name,content", [
    ("notes.txt", "package p\n"),
    ("nopkg.go", "// only a comment\n"),
])
def test_load_program_errors(go_env, name, content):
    path = write_go(go_env.root, name, content)

    with pytest.raises(LoadError):
        PackageLoader(settings=go_env.settings).load_program(path)


def test_missing_file_is_a_load_error(go_env):
    with pytest.raises(LoadError):
        PackageLoader(settings=go_env.settings).load_program(str(go_env.root / 'missing.go'))
