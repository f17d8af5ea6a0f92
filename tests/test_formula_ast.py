import math

import pytest

from spreadsheet.common import (
    FormulaError,
    FormulaErrorCategory,
    FormulaException,
    Position,
)
from spreadsheet.formula_ast import ParsingError, parse_formula_ast


def _no_cells(pos):
    raise AssertionError(f"unexpected cell lookup {pos}")


def _table(values):
    def lookup(pos):
        return values[str(pos)]

    return lookup


@pytest.mark.parametrize(
    "text",
    [
        "1+2*3",
        "(1+2)*3",
        "1-(2-3)",
        "1-2-3",
        "1/(2*3)",
        "1/(2/3)",
        "-(1+2)",
        "-1*2",
        "A1+B2",
        "(A1+B2)/C3",
        "0.5",
    ],
)
def test_canonical_formula_prints_unchanged(text):
    assert parse_formula_ast(text).to_formula() == text


@pytest.mark.parametrize(
    "redundant, canonical",
    [
        ("((1+2))", "1+2"),
        ("1+(2+3)", "1+2+3"),
        ("1+(2*3)", "1+2*3"),
        ("(1*2)/3", "1*2/3"),
        ("( A1 )", "A1"),
        ("1 +\t2", "1+2"),
    ],
)
def test_redundant_parentheses_and_spaces_dropped(redundant, canonical):
    assert parse_formula_ast(redundant).to_formula() == canonical


@pytest.mark.parametrize("text", ["1-(2+3)*4", "-(A1-B1)/+(C1+2)", "1/(2-3/(4+5))"])
def test_printed_formula_reparses_to_same_tree(text):
    ast = parse_formula_ast(text)
    again = parse_formula_ast(ast.to_formula())
    assert again.to_tree_string() == ast.to_tree_string()
    assert again.to_formula() == ast.to_formula()


def test_tree_string():
    assert parse_formula_ast("1+2").to_tree_string() == "(+ 1 2)"


def test_unary_binds_tighter_than_multiplication():
    ast = parse_formula_ast("-A1*B1")
    reference = parse_formula_ast("(-A1)*B1")
    assert ast.to_tree_string() == reference.to_tree_string()


def test_execute_numbers():
    assert parse_formula_ast("1+2*3").execute(_no_cells) == 1 + 2 * 3
    assert parse_formula_ast("(1+2)*3").execute(_no_cells) == (1 + 2) * 3
    assert parse_formula_ast("8/2/2").execute(_no_cells) == 8 / 2 / 2
    assert parse_formula_ast("-+-4").execute(_no_cells) == 4


def test_execute_with_cells():
    args = _table({"A1": 3.0, "B2": 4.0})
    assert parse_formula_ast("A1*B2-A1").execute(args) == 3.0 * 4.0 - 3.0
    assert parse_formula_ast("-A1").execute(args) == -3.0


@pytest.mark.parametrize("text", ["1/0", "0/0", "1e308*10", "A1/B1"])
def test_arithmetic_error(text):
    args = _table({"A1": 1.0, "B1": 0.0})
    with pytest.raises(FormulaError) as info:
        parse_formula_ast(text).execute(args)
    assert info.value.category is FormulaErrorCategory.ARITHMETIC


def test_error_from_args_propagates():
    def failing(pos):
        raise FormulaError(FormulaErrorCategory.VALUE)

    with pytest.raises(FormulaError) as info:
        parse_formula_ast("1+A1").execute(failing)
    assert info.value == FormulaError(FormulaErrorCategory.VALUE)


def test_cells_are_sorted_with_repeats():
    ast = parse_formula_ast("B2+A1+B2")
    expected = sorted(Position.from_string(name) for name in ("B2", "A1", "B2"))
    assert ast.cells == expected
    assert ast.cells_string() == " ".join(str(p) for p in expected) + " "


def test_no_cells():
    ast = parse_formula_ast("1+2")
    assert ast.cells == []
    assert ast.cells_string() == ""


def test_number_formatting_follows_six_significant_digits():
    ast = parse_formula_ast("1e10")
    assert ast.to_formula() == format(1e10, ".6g")
    assert math.isclose(ast.execute(_no_cells), 1e10)


@pytest.mark.parametrize("text", ["", "1+", "1 2", "(1", "1)", "*1", "()", "A1 B1"])
def test_parse_errors(text):
    with pytest.raises(ParsingError):
        parse_formula_ast(text)


@pytest.mark.parametrize("text", ["a1", "1$", "AB", "1.", "1e"])
def test_lexing_errors(text):
    with pytest.raises(ParsingError, match="Error when lexing"):
        parse_formula_ast(text)


def test_number_out_of_range():
    with pytest.raises(ParsingError, match="Invalid number"):
        parse_formula_ast("1e400")


@pytest.mark.parametrize("text", ["A0", "ABCD1", "A99999"])
def test_invalid_cell_reference(text):
    with pytest.raises(FormulaException, match="Invalid position"):
        parse_formula_ast(text)