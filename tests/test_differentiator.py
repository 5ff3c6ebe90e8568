# File: tests/test_differentiator.py

import pytest
from differentiator import InvalidVariableError, differentiate
from expander import expand
from expression import Constant
from interop import is_derivative
from parser import parse
from renderer import to_canonical_string
from simplifier import simplify


def prepared(src: str):
    return simplify(expand(parse(src)))


# ─── 1) Power rule ───────────────────────────────────────────────────────────

@pytest.mark.parametrize("src, variable, expected", [
    ("x",                      "x", "1"),
    ("x",                      "y", "0"),
    ("3 + 2.4",                "x", "0"),
    ("x * x * x",              "x", "3 * x * x"),
    ("x * x * y + 3 * x",      "x", "2 * x * y + 3"),
    ("x * y",                  "y", "x"),
    ("(x + 1) * (x + 1)",      "x", "2 * x + 2"),
    ("0.5 * x * x",            "x", "x"),
    ("x * x * y * y",          "y", "2 * x * x * y"),
    ("foo * foo + bar",        "foo", "2 * foo"),
    ("X * x",                  "X", "x"),
    ("4 + 3*x + 2*x*x + 1*x*x*x", "x", "3 * x * x + 4 * x + 3"),
])
def test_differentiate(src, variable, expected):
    assert to_canonical_string(differentiate(prepared(src), variable)) == expected

@pytest.mark.parametrize("src", ["0", "7", "3 * 2.5 + 1", "(1 + 2) * (3 + 4)"])
@pytest.mark.parametrize("variable", ["x", "y", "abc"])
def test_constant_rule(src, variable):
    assert differentiate(prepared(src), variable) == Constant(0)


# ─── 2) Properties ───────────────────────────────────────────────────────────

CASES = [
    "x * x * y + y * y * x + 3",
    "(x + y) * (x + y) * (x + 2)",
    "a * b * c + a * a",
    "2.5 * x * x * x + 0.5 * x",
]

@pytest.mark.parametrize("src", CASES)
@pytest.mark.parametrize("variable", ["x", "y", "a", "q"])
def test_matches_sympy(src, variable):
    tree = prepared(src)
    assert is_derivative(tree, variable, differentiate(tree, variable))

@pytest.mark.parametrize("src", CASES)
def test_result_is_canonical(src):
    result = differentiate(prepared(src), "x")
    assert simplify(result) == result

def test_accepts_any_expanded_input():
    assert differentiate(parse("x * x + x * x"), "x") == prepared("4 * x")


# ─── 3) Invalid targets ──────────────────────────────────────────────────────

@pytest.mark.parametrize("variable", ["", "x1", "x y", "2", "_", None])
def test_invalid_variable(variable):
    with pytest.raises(InvalidVariableError) as exc_info:
        differentiate(prepared("x"), variable)
    assert exc_info.value.variable == variable
    assert isinstance(exc_info.value, ValueError)
