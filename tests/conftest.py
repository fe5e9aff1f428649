"""Shared fixtures: Go workspaces written into a temporary directory."""
import sys
from pathlib import Path as _TestPath
from types import SimpleNamespace

import pytest

ROOT = _TestPath(__file__).resolve().parents[1]
SRC_PATH = ROOT / 'src'
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from go_doc_mcp.settings import ToolchainSettings

MATH_GO = """\
// Package math provides basic constants and mathematical functions.
package math

// Pi is the ratio of a circle's circumference to its diameter.
const Pi = 3.14159265358979323846264338327950288419716939937510582097494459

// Sqrt returns the square root of x.
func Sqrt(x float64) float64 {
	return x
}
"""

FMT_DOC_GO = """\
// Package fmt implements formatted I/O.
package fmt
"""

FMT_PRINT_GO = """\
// Printing functions live here.
package fmt

// Println formats using the default formats for its operands and writes to standard output.
func Println(a ...any) (n int, err error) {
	return 0, nil
}

// Sprint formats using the default formats for its operands and returns the resulting string.
func Sprint(a ...any) string {
	return ""
}
"""

IDENTS_GO = """\
// Package idents exercises identifier lookups.
package idents

import (
	"fmt"
	mth "math"
)

// Answer is the answer.
const Answer = 42

// Shape groups the shape constants.
const (
	// Circle is round.
	Circle = iota
	Square // Square has corners.
	Triangle
)

// Ratio is one and a half.
const Ratio = 1.5

// Greeting says hello.
const Greeting = "hi" + "\\n"

// Point is a location.
type Point struct {
	// X is horizontal.
	X int
	Y int // Y is vertical.
	z int
}

// Thing does things.
type Thing interface {
	// SameTypeParams takes two strings.
	SameTypeParams(x, y string)
	hidden()
}

// Distance returns how far p is from the origin.
func (p *Point) Distance() float64 {
	return mth.Sqrt(float64(p.X*p.X + p.Y*p.Y))
}

// Describe prints things.
func Describe(pt Point) error {
	var words []string
	words = append(words, fmt.Sprint(pt.X))
	origin := Point{X: 0}
	fmt.Println(Answer, Circle, Triangle, origin.Distance())
	if len(words) == 0 {
		return nil
	}
	return nil
}
"""

VENDORED_MAIN_GO = """\
package main

import "vp"

func main() {
	vp.Hello()
}
"""

VP_GO = """\
// Package vp is vendored.
package vp

// Hello greets.
func Hello() {}
"""


def write_go(root, relpath, text):
    """Write a file below ``root`` and return its path as a string."""
    path = _TestPath(root) / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


def offset_of(path, needle, delta=0, occurrence=0):
    """Byte offset of the ``occurrence``-th ``needle`` in a file, plus ``delta``."""
    content = _TestPath(path).read_bytes()
    start = -1
    for _ in range(occurrence + 1):
        start = content.index(needle.encode('utf-8'), start + 1)
    return start + delta


@pytest.fixture
def go_env(tmp_path):
    """A fake GOROOT with math and fmt stubs plus an empty GOPATH."""
    goroot = tmp_path / 'goroot'
    gopath = tmp_path / 'gopath'
    write_go(goroot, 'src/math/math.go', MATH_GO)
    write_go(goroot, 'src/fmt/doc.go', FMT_DOC_GO)
    write_go(goroot, 'src/fmt/print.go', FMT_PRINT_GO)
    (gopath / 'src').mkdir(parents=True)
    settings = ToolchainSettings(
        goroot=str(goroot),
        gopath=[str(gopath)],
        gomodcache=str(gopath / 'pkg' / 'mod'),
        goos='linux',
        goarch='amd64',
    )
    return SimpleNamespace(root=tmp_path, goroot=goroot, gopath=gopath, settings=settings)


@pytest.fixture
def idents_file(go_env):
    """Path of the idents package's main file inside GOPATH."""
    return write_go(go_env.gopath, 'src/example/idents/idents.go', IDENTS_GO)


@pytest.fixture
def vendored_file(go_env):
    """A GOPATH package importing ``vp`` from its vendor directory."""
    write_go(go_env.gopath, 'src/vendored/vendor/vp/vp.go', VP_GO)
    return write_go(go_env.gopath, 'src/vendored/main.go', VENDORED_MAIN_GO)
