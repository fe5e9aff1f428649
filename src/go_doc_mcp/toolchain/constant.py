"""
Exact evaluation of Go constant expressions.

Values are kept exactly: integers as ``int``, other numbers as
``fractions.Fraction``, strings and booleans as themselves. Integer division
truncates toward zero the way Go's does for untyped integer constants.
"""

import logging
import operator
from fractions import Fraction
from typing import Optional, Union

from ..models import Symbol, SymbolKind
from .parser import SourceFile

logger = logging.getLogger(__name__)

Value = Union[int, Fraction, str, bool]

_ESCAPES = {
    'a': '\a', 'b': '\b', 'f': '\f', 'n': '\n', 'r': '\r', 't': '\t', 'v': '\v',
    '\\': '\\', "'": "'", '"': '"',
}
_QUOTE_ESCAPES = {
    '\a': '\\a', '\b': '\\b', '\f': '\\f', '\n': '\\n', '\r': '\\r', '\t': '\\t',
    '\v': '\\v', '\\': '\\\\', '"': '\\"',
}
_INTEGER_TYPES = frozenset([
    'int', 'int8', 'int16', 'int32', 'int64', 'uint', 'uint8', 'uint16',
    'uint32', 'uint64', 'uintptr', 'byte', 'rune',
])
_MAX_DEPTH = 64


class ConstantError(ValueError):
    """A constant expression could not be evaluated exactly."""


def exact_string(value: Value) -> str:
    """Format a value the way go/constant's ExactString does."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return go_quote(value)
    if isinstance(value, Fraction):
        if value.denominator == 1:
            return str(value.numerator)
        return f"{value.numerator}/{value.denominator}"
    return str(value)


def go_quote(text: str) -> str:
    """Double-quote a string with Go escapes for non-printable characters."""
    parts = ['"']
    for ch in text:
        if ch in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif ord(ch) < 0x80:
            parts.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:
            parts.append(f"\\u{ord(ch):04x}")
        else:
            parts.append(f"\\U{ord(ch):08x}")
    parts.append('"')
    return ''.join(parts)


def parse_int_literal(text: str) -> int:
    text = text.replace('_', '')
    lowered = text.lower()
    if lowered.startswith('0x'):
        return int(text[2:], 16)
    if lowered.startswith('0b'):
        return int(text[2:], 2)
    if lowered.startswith('0o'):
        return int(text[2:], 8)
    if len(text) > 1 and text.startswith('0'):
        return int(text[1:], 8)
    return int(text)


def parse_float_literal(text: str) -> Fraction:
    text = text.replace('_', '')
    if text.lower().startswith('0x'):
        mantissa, _, exponent = text[2:].lower().partition('p')
        whole, _, fraction = mantissa.partition('.')
        digits = int((whole + fraction) or '0', 16)
        value = Fraction(digits, 16 ** len(fraction))
        power = int(exponent or '0')
        return value * (Fraction(2) ** power)
    return Fraction(text)


def unquote(text: str) -> str:
    """Decode a Go string literal (interpreted or raw)."""
    if text.startswith('`'):
        return text[1:-1].replace('\r', '')
    body = text[1:-1]
    out = []
    raw = bytearray()

    def flush_raw():
        if raw:
            out.append(raw.decode('utf-8', errors='replace'))
            raw.clear()

    i = 0
    while i < len(body):
        ch = body[i]
        if ch != '\\':
            flush_raw()
            out.append(ch)
            i += 1
            continue
        code = body[i + 1] if i + 1 < len(body) else ''
        if code in _ESCAPES:
            flush_raw()
            out.append(_ESCAPES[code])
            i += 2
        elif code == 'x':
            raw.append(int(body[i + 2:i + 4], 16))
            i += 4
        elif code in '01234567' and code:
            raw.append(int(body[i + 1:i + 4], 8))
            i += 4
        elif code == 'u':
            flush_raw()
            out.append(chr(int(body[i + 2:i + 6], 16)))
            i += 6
        elif code == 'U':
            flush_raw()
            out.append(chr(int(body[i + 2:i + 10], 16)))
            i += 10
        else:
            raise ConstantError(f"unknown escape sequence in {text!r}")
    flush_raw()
    return ''.join(out)


def _truncating_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def _truncating_mod(a: int, b: int) -> int:
    return a - b * _truncating_div(a, b)


_COMPARISONS = {
    '==': operator.eq, '!=': operator.ne, '<': operator.lt,
    '<=': operator.le, '>': operator.gt, '>=': operator.ge,
}


class ConstantEvaluator:
    """Evaluates constant Symbols through the checker's bindings."""

    def __init__(self, checker):
        self.checker = checker

    def exact_string(self, symbol: Symbol) -> Optional[str]:
        """Exact textual value of a constant, or None when it cannot be computed."""
        try:
            return exact_string(self.value_of(symbol))
        except (ConstantError, ArithmeticError, ValueError, IndexError) as e:
            logger.debug(f"Cannot evaluate constant {symbol.name}: {e}")
            return None

    def value_of(self, symbol: Symbol, depth: int = 0) -> Value:
        if symbol.kind is not SymbolKind.CONSTANT:
            raise ConstantError(f"{symbol.name} is not a constant")
        if symbol.file is None:
            # Predeclared constants
            if symbol.name in ('true', 'false'):
                return symbol.name == 'true'
            raise ConstantError(f"no value for predeclared {symbol.name}")
        if symbol.value_node is None:
            raise ConstantError(f"constant {symbol.name} has no value")
        value = self.evaluate(symbol.file, symbol.value_node, symbol.iota, depth + 1)
        return self._convert(symbol.file, symbol.type_node, value)

    def _convert(self, source: SourceFile, type_node, value: Value) -> Value:
        if type_node is None or isinstance(value, (str, bool)):
            return value
        if source.text(type_node) in _INTEGER_TYPES and isinstance(value, Fraction):
            if value.denominator != 1:
                raise ConstantError(f"{value} truncated to integer")
            return value.numerator
        return value

    def evaluate(self, source: SourceFile, node, iota: int, depth: int = 0) -> Value:
        """Evaluate an expression node in the context of ``iota``."""
        if depth > _MAX_DEPTH:
            raise ConstantError("constant expression too deep")
        kind = node.type
        text = source.text(node)
        if kind == 'int_literal':
            return parse_int_literal(text)
        if kind == 'float_literal':
            return parse_float_literal(text)
        if kind == 'rune_literal':
            decoded = unquote('"' + text[1:-1].replace('"', '\\"') + '"')
            if len(decoded) != 1:
                raise ConstantError(f"invalid rune literal {text}")
            return ord(decoded)
        if kind in ('interpreted_string_literal', 'raw_string_literal'):
            return unquote(text)
        if kind in ('true', 'false'):
            return kind == 'true'
        if kind == 'iota':
            return iota
        if kind == 'parenthesized_expression':
            return self.evaluate(source, node.named_children[0], iota, depth + 1)
        if kind in ('identifier', 'selector_expression'):
            target = node if kind == 'identifier' else node.child_by_field_name('field')
            symbol = self.checker.object_of(source, target)
            if symbol is None:
                raise ConstantError(f"unresolved name {text}")
            return self.value_of(symbol, depth + 1)
        if kind == 'unary_expression':
            return self._unary(source, node, iota, depth)
        if kind == 'binary_expression':
            return self._binary(source, node, iota, depth)
        if kind in ('call_expression', 'type_conversion_expression'):
            return self._call(source, node, iota, depth)
        raise ConstantError(f"unsupported constant expression {kind}")

    def _unary(self, source, node, iota, depth) -> Value:
        op = source.text(node.child_by_field_name('operator'))
        value = self.evaluate(source, node.child_by_field_name('operand'), iota, depth + 1)
        if op == '!':
            return not value
        if op == '-':
            return -value
        if op == '+':
            return value
        if op == '^' and isinstance(value, int):
            return ~value
        raise ConstantError(f"unsupported unary operator {op}")

    def _binary(self, source, node, iota, depth) -> Value:
        op = source.text(node.child_by_field_name('operator'))
        left = self.evaluate(source, node.child_by_field_name('left'), iota, depth + 1)
        if op == '&&':
            return bool(left) and bool(self.evaluate(source, node.child_by_field_name('right'), iota, depth + 1))
        if op == '||':
            return bool(left) or bool(self.evaluate(source, node.child_by_field_name('right'), iota, depth + 1))
        right = self.evaluate(source, node.child_by_field_name('right'), iota, depth + 1)
        if op in _COMPARISONS:
            return _COMPARISONS[op](left, right)
        if op == '+':
            return left + right
        if op == '-':
            return left - right
        if op == '*':
            return left * right
        if op == '/':
            if isinstance(left, int) and isinstance(right, int) and not isinstance(left, bool):
                return _truncating_div(left, right)
            return Fraction(left) / Fraction(right)
        if not isinstance(left, int) or not isinstance(right, int):
            raise ConstantError(f"operator {op} requires integer operands")
        if op == '%':
            return _truncating_mod(left, right)
        if op == '<<':
            return left << right
        if op == '>>':
            return left >> right
        if op == '&':
            return left & right
        if op == '|':
            return left | right
        if op == '^':
            return left ^ right
        if op == '&^':
            return left & ~right
        raise ConstantError(f"unsupported binary operator {op}")

    def _call(self, source, node, iota, depth) -> Value:
        if node.type == 'type_conversion_expression':
            value = self.evaluate(source, node.child_by_field_name('operand'), iota, depth + 1)
            return self._convert(source, node.child_by_field_name('type'), value)
        function = node.child_by_field_name('function')
        arguments = node.child_by_field_name('arguments')
        args = [a for a in arguments.named_children if a.type != 'comment'] if arguments else []
        if function is None or len(args) != 1:
            raise ConstantError("unsupported call in constant expression")
        name = source.text(function)
        if name == 'len':
            value = self.evaluate(source, args[0], iota, depth + 1)
            if isinstance(value, str):
                return len(value.encode('utf-8'))
            raise ConstantError("len of non-string constant")
        # A conversion such as int64(1) or Weekday(iota)
        value = self.evaluate(source, args[0], iota, depth + 1)
        return self._convert(source, function, value)
