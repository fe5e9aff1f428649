"""Exact evaluation of constant declarations."""
from fractions import Fraction

import pytest

from conftest import write_go

from go_doc_mcp.toolchain.checker import Checker
from go_doc_mcp.toolchain.constant import ConstantEvaluator, exact_string, go_quote, parse_int_literal
from go_doc_mcp.toolchain.loader import PackageLoader

CONSTS_GO = """package consts

type Weekday int

const (
\tSunday Weekday = iota
\tMonday
)

const (
\tQuotient = -7 / 2
\tRemainder = -7 % 2
\tBits = 1<<3 | 1
\tHalves = 7 / 2.0
\tBytes = len("h\\u00e9llo")
\tMasked = 0xff &^ 0x0f
\tTruth = Quotient < 0 && true
)

const Truncated int = 5 / 2.0
"""


@pytest.fixture
def evaluate(go_env):
    path = write_go(go_env.root, 'consts/consts.go', CONSTS_GO)
    program = PackageLoader(settings=go_env.settings).load_program(path)
    checker = Checker(program)
    members = checker.package_scope(program.main).members
    evaluator = ConstantEvaluator(checker)
    return lambda name: evaluator.exact_string(members[name])


@pytest.mark.parametrize("name,expected", [
    ("Sunday", "0"),
    ("Monday", "1"),
    ("Quotient", "-3"),
    ("Remainder", "-1"),
    ("Bits", "9"),
    ("Halves", "7/2"),
    ("Bytes", "6"),
    ("Masked", "240"),
    ("Truth", "true"),
])
def test_constant_values(evaluate, name, expected):
    assert evaluate(name) == expected


def test_inexact_integer_conversion_has_no_value(evaluate):
    assert evaluate("Truncated") is None


def test_exact_string_formats():
    assert exact_string(Fraction(6, 4)) == "3/2"
    assert exact_string(Fraction(4, 2)) == "2"
    assert exact_string(False) == "false"
    assert exact_string('tab\there') == '"tab\\there"'


def test_go_quote_escapes_control_characters():
    assert go_quote('a"b\x01') == '"a\\"b\\x01"'


@pytest.mark.parametrize("text,value", [
    ("42", 42), ("0x2A", 42), ("0b101010", 42), ("0o52", 42), ("052", 42), ("1_000", 1000),
])
def test_parse_int_literal(text, value):
    assert parse_int_literal(text) == value
