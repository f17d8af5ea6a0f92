"""Parsing, printing and evaluating arithmetic formulas over cell references."""

import enum
import math
import operator
import re
from dataclasses import dataclass

from spreadsheet.common import (
    FormulaError,
    FormulaErrorCategory,
    FormulaException,
    Position,
)


class ParsingError(Exception):
    """The formula text is not well formed."""


class _Precedence(enum.IntEnum):
    ADD = 0
    SUB = 1
    MUL = 2
    DIV = 3
    UNARY = 4
    ATOM = 5


_NONE = 0b00
_LEFT = 0b01
_RIGHT = 0b10
_BOTH = _LEFT | _RIGHT

# _RULES[parent][child]: whether a child needs parentheses on the left or right.
_RULES = {
    _Precedence.ADD: (_NONE, _NONE, _NONE, _NONE, _NONE, _NONE),
    _Precedence.SUB: (_RIGHT, _RIGHT, _NONE, _NONE, _NONE, _NONE),
    _Precedence.MUL: (_BOTH, _BOTH, _NONE, _NONE, _NONE, _NONE),
    _Precedence.DIV: (_BOTH, _BOTH, _RIGHT, _RIGHT, _NONE, _NONE),
    _Precedence.UNARY: (_BOTH, _BOTH, _NONE, _NONE, _NONE, _NONE),
    _Precedence.ATOM: (_NONE, _NONE, _NONE, _NONE, _NONE, _NONE),
}


def _format_number(value):
    return format(value, ".6g")


class _Expr:
    precedence = _Precedence.ATOM

    def tree(self):
        raise NotImplementedError

    def formula_body(self):
        raise NotImplementedError

    def evaluate(self, args):
        raise NotImplementedError

    def formula(self, parent, right_child=False):
        mask = _RIGHT if right_child else _LEFT
        body = self.formula_body()
        if _RULES[parent][self.precedence] & mask:
            return f"({body})"
        return body


_BINARY_PRECEDENCE = {
    "+": _Precedence.ADD,
    "-": _Precedence.SUB,
    "*": _Precedence.MUL,
    "/": _Precedence.DIV,
}

_BINARY_FUNCS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


@dataclass(frozen=True)
class _BinaryOp(_Expr):
    op: str
    lhs: _Expr
    rhs: _Expr

    @property
    def precedence(self):
        return _BINARY_PRECEDENCE[self.op]

    def tree(self):
        return f"({self.op} {self.lhs.tree()} {self.rhs.tree()})"

    def formula_body(self):
        own = self.precedence
        return self.lhs.formula(own) + self.op + self.rhs.formula(own, right_child=True)

    def evaluate(self, args):
        left = self.lhs.evaluate(args)
        right = self.rhs.evaluate(args)
        try:
            result = _BINARY_FUNCS[self.op](left, right)
        except ZeroDivisionError:
            raise FormulaError(FormulaErrorCategory.ARITHMETIC) from None
        if not math.isfinite(result):
            raise FormulaError(FormulaErrorCategory.ARITHMETIC)
        return result


@dataclass(frozen=True)
class _UnaryOp(_Expr):
    op: str
    operand: _Expr

    precedence = _Precedence.UNARY

    def tree(self):
        return f"({self.op} {self.operand.tree()})"

    def formula_body(self):
        return self.op + self.operand.formula(self.precedence)

    def evaluate(self, args):
        value = self.operand.evaluate(args)
        return -value if self.op == "-" else value


@dataclass(frozen=True)
class _CellRef(_Expr):
    position: Position

    def tree(self):
        if not self.position.is_valid():
            return FormulaErrorCategory.REF.value
        return str(self.position)

    def formula_body(self):
        return self.tree()

    def evaluate(self, args):
        return args(self.position)


@dataclass(frozen=True)
class _Number(_Expr):
    value: float

    def tree(self):
        return _format_number(self.value)

    def formula_body(self):
        return self.tree()

    def evaluate(self, args):
        return self.value


_TOKEN_RE = re.compile(
    r"""
    (?P<ws>[ \t\n\r]+)
    |(?P<number>[0-9]*\.[0-9]+(?:[eE][+-]?[0-9]+)?|[0-9]+(?:[eE][+-]?[0-9]+)?)
    |(?P<cell>[A-Z]+[0-9]+)
    |(?P<op>[-+*/()])
    """,
    re.VERBOSE,
)


def _tokenize(text):
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ParsingError(
                f"Error when lexing: token recognition error at: '{text[pos]}'"
            )
        kind = match.lastgroup
        if kind != "ws":
            yield kind, match.group()
        pos = match.end()


class _Parser:
    def __init__(self, text):
        self._tokens = list(_tokenize(text))
        self._index = 0
        self.cells = []

    def _peek(self):
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None, "<EOF>"

    def _advance(self):
        token = self._peek()
        self._index += 1
        return token

    def _error(self):
        _, text = self._peek()
        return ParsingError(f"Error when parsing: {text}")

    def parse(self):
        root = self._additive()
        if self._peek()[0] is not None:
            raise self._error()
        return root

    def _additive(self):
        node = self._multiplicative()
        while self._peek() in (("op", "+"), ("op", "-")):
            _, op = self._advance()
            node = _BinaryOp(op, node, self._multiplicative())
        return node

    def _multiplicative(self):
        node = self._unary()
        while self._peek() in (("op", "*"), ("op", "/")):
            _, op = self._advance()
            node = _BinaryOp(op, node, self._unary())
        return node

    def _unary(self):
        if self._peek() in (("op", "+"), ("op", "-")):
            _, op = self._advance()
            return _UnaryOp(op, self._unary())
        return self._primary()

    def _primary(self):
        kind, text = self._peek()
        if kind == "number":
            self._advance()
            try:
                value = float(text)
            except ValueError:
                raise ParsingError(f"Invalid number: {text}") from None
            if not math.isfinite(value):
                raise ParsingError(f"Invalid number: {text}")
            return _Number(value)
        if kind == "cell":
            self._advance()
            position = Position.from_string(text)
            if not position.is_valid():
                raise FormulaException(f"Invalid position: {text}")
            self.cells.append(position)
            return _CellRef(position)
        if (kind, text) == ("op", "("):
            self._advance()
            node = self._additive()
            if self._peek() != ("op", ")"):
                raise self._error()
            self._advance()
            return node
        raise self._error()


class FormulaAST:
    """A parsed formula together with the sorted cells it references."""

    def __init__(self, root, cells):
        self._root = root
        self._cells = sorted(cells)

    @property
    def cells(self):
        """Referenced positions in sorted order, repeats included."""
        return list(self._cells)

    def execute(self, args):
        """Evaluate with ``args`` mapping a position to a number; may raise FormulaError."""
        return self._root.evaluate(args)

    def to_tree_string(self):
        """The expression in prefix form, e.g. ``(+ 1 2)``."""
        return self._root.tree()

    def to_formula(self):
        """The expression in infix form with only the needed parentheses."""
        return self._root.formula(_Precedence.ATOM)

    def cells_string(self):
        """The referenced cells, each followed by a space."""
        return "".join(f"{cell} " for cell in self._cells)


def parse_formula_ast(text):
    """Parse formula text (without the leading '=') into a FormulaAST."""
    parser = _Parser(text)
    root = parser.parse()
    return FormulaAST(root, parser.cells)