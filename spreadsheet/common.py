"""Cell positions, sheet sizes, formula errors and the exceptions of the sheet."""

import enum
import re
from dataclasses import dataclass
from typing import ClassVar

_LETTERS = 26
_MAX_LETTER_COUNT = 3
_INT_MAX = 2**31 - 1
_SPLIT_RE = re.compile(r"([A-Z]*)(.*)", re.DOTALL)
_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, order=True)
class Position:
    """A zero-based cell position; ordered by row, then column."""

    row: int = 0
    col: int = 0

    MAX_ROWS: ClassVar[int] = 16384
    MAX_COLS: ClassVar[int] = 16384
    NONE: ClassVar["Position"]

    def is_valid(self):
        """Whether the position lies inside the sheet's limits."""
        return 0 <= self.row < self.MAX_ROWS and 0 <= self.col < self.MAX_COLS

    def __str__(self):
        if not self.is_valid():
            return ""
        letters = []
        c = self.col
        while c >= 0:
            letters.append(chr(ord("A") + c % _LETTERS))
            c = c // _LETTERS - 1
        return "".join(reversed(letters)) + str(self.row + 1)

    @classmethod
    def from_string(cls, text):
        """Parse a reference such as ``B12``; malformed text gives ``Position.NONE``."""
        letters, digits = _SPLIT_RE.fullmatch(text).groups()
        if not letters or not digits:
            return cls.NONE
        if len(letters) > _MAX_LETTER_COUNT:
            return cls.NONE
        if not _DIGITS_RE.fullmatch(digits):
            return cls.NONE
        row = int(digits)
        if row > _INT_MAX:
            return cls.NONE
        col = 0
        for ch in letters:
            col = col * _LETTERS + (ord(ch) - ord("A") + 1)
        return cls(row - 1, col - 1)


Position.NONE = Position(-1, -1)


@dataclass(frozen=True)
class Size:
    """The number of rows and columns of a printable area."""

    rows: int = 0
    cols: int = 0


class FormulaErrorCategory(enum.Enum):
    """The kinds of error a formula can evaluate to."""

    REF = "#REF!"
    VALUE = "#VALUE!"
    ARITHMETIC = "#ARITHM!"


class FormulaError(Exception):
    """An evaluation error; usable both as a raised error and as a cell value."""

    def __init__(self, category):
        super().__init__(category.value)
        self.category = category

    def __eq__(self, other):
        if not isinstance(other, FormulaError):
            return NotImplemented
        return self.category == other.category

    def __hash__(self):
        return hash(self.category)

    def __str__(self):
        return self.category.value

    def __repr__(self):
        return f"FormulaError({self.category})"


class InvalidPositionError(IndexError):
    """A position outside the sheet was used."""


class FormulaException(Exception):
    """A formula could not be built."""


class CircularDependencyError(Exception):
    """Setting a cell would make formulas depend on themselves."""