"""Toolchain settings resolved from environment mappings."""
import os

from go_doc_mcp.settings import ToolchainSettings, parse_build_tags


def test_from_env_reads_go_variables():
    environ = {
        "GOROOT": "/opt/go",
        "GOPATH": os.pathsep.join(["/work/one", "/work/two"]),
        "GOOS": "darwin",
        "GOARCH": "arm64",
        "GO_DOC_TAGS": "integration,slow",
        "GO_DOC_BUILTIN_SOURCE": "/tmp/builtin.go",
    }

    settings = ToolchainSettings.from_env(environ)

    assert settings.goroot == "/opt/go"
    assert settings.gopath == ["/work/one", "/work/two"]
    assert settings.gomodcache == os.path.join("/work/one", "pkg", "mod")
    assert (settings.goos, settings.goarch) == ("darwin", "arm64")
    assert settings.build_tags == ["integration", "slow"]
    assert settings.builtin_source == "/tmp/builtin.go"


def test_from_env_defaults_and_overrides():
    settings = ToolchainSettings.from_env({}, include_tests=True)

    assert settings.goroot == ""
    assert settings.gopath == [os.path.join(os.path.expanduser("~"), "go")]
    assert settings.include_tests is True
    assert settings.to_dict()["include_tests"] is True


def test_parse_build_tags():
    assert parse_build_tags("a b,c") == ["a", "b", "c"]
    assert parse_build_tags("") == []
