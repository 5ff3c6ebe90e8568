# File: tests/test_expression.py

import math
from fractions import Fraction

import pytest
from expression import (
    Addition,
    Constant,
    Expression,
    ExpressionType,
    InvariantViolation,
    Multiplication,
    Variable,
    factors,
    is_variable_name,
    postvisitor,
    summands,
)

x, y, z = Variable("x"), Variable("y"), Variable("z")


# ─── 1) Construction & invariants ────────────────────────────────────────────

@pytest.mark.parametrize("value, expected", [
    (3, Fraction(3)),
    (2.5, Fraction(5, 2)),
    ("2.4", Fraction(12, 5)),
    ("1.00000", Fraction(1)),
    (Fraction(1, 3), Fraction(1, 3)),
    (0, Fraction(0)),
])
def test_constant_value(value, expected):
    assert Constant(value).value == expected

@pytest.mark.parametrize("value", [-1, -0.5, "-2", math.inf, math.nan, "abc", None])
def test_constant_rejects_invalid_values(value):
    with pytest.raises(InvariantViolation):
        Constant(value)

@pytest.mark.parametrize("name", ["", "x1", "x y", "_x", "é", 3, None])
def test_variable_rejects_invalid_names(name):
    with pytest.raises(InvariantViolation):
        Variable(name)

@pytest.mark.parametrize("name, valid", [
    ("x", True), ("foo", True), ("XyZ", True),
    ("", False), ("x2", False), ("x_y", False), (" x", False), (None, False),
])
def test_is_variable_name(name, valid):
    assert is_variable_name(name) is valid

@pytest.mark.parametrize("cls", [Addition, Multiplication])
def test_binary_rejects_non_expressions(cls):
    with pytest.raises(InvariantViolation):
        cls(x, 3)
    with pytest.raises(InvariantViolation):
        cls(None, x)

def test_invariant_violation_is_not_a_value_error():
    # Programmer errors must not be swallowed by input-error handlers.
    assert not issubclass(InvariantViolation, ValueError)
    assert issubclass(InvariantViolation, AssertionError)


# ─── 2) Accessors ────────────────────────────────────────────────────────────

def test_type_tags():
    assert Constant(1).type is ExpressionType.CONSTANT
    assert x.type is ExpressionType.VARIABLE
    assert Addition(x, y).type is ExpressionType.ADDITION
    assert Multiplication(x, y).type is ExpressionType.MULTIPLICATION

def test_binary_operands():
    node = Multiplication(x, Addition(y, z))
    assert node.left is x
    assert node.right == Addition(y, z)
    assert node.operands == (x, Addition(y, z))
    assert not node.is_leaf

@pytest.mark.parametrize("leaf", [Constant(4), Variable("q")])
def test_leaf_left_and_right_return_itself(leaf):
    assert leaf.left is leaf
    assert leaf.right is leaf
    assert leaf.operands == ()
    assert leaf.is_leaf

def test_nodes_are_immutable():
    c = Constant(2)
    with pytest.raises(AttributeError):
        c.value = 3
    with pytest.raises(AttributeError):
        c._value = Fraction(3)
    node = Addition(x, y)
    with pytest.raises(AttributeError):
        node._left = z
    assert node.left is x

def test_convenience_methods():
    assert Expression.parse("x + 1") == Addition(x, Constant(1))
    assert Multiplication(x, Addition(y, z)).expand() == Addition(
        Multiplication(x, y), Multiplication(x, z)
    )
    assert Addition(Multiplication(Constant(2), x), Constant("0.5")).to_canonical_string() == "2 * x + 0.5"
    assert str(Multiplication(x, y)) == "x * y"


# ─── 3) Structural equality & hashing ────────────────────────────────────────

@pytest.mark.parametrize("a, b", [
    (Constant(1), Constant(1.0)),
    (Constant(1), Constant("1.00000")),
    (Constant(-0.0), Constant(0.0)),
    (Constant("2.4"), Constant(Fraction(12, 5))),
    (Variable("foo"), Variable("foo")),
    (Addition(x, y), Addition(Variable("x"), Variable("y"))),
    (Multiplication(Addition(x, y), z), Multiplication(Addition(x, y), z)),
])
def test_equal_trees(a, b):
    assert a == b
    assert hash(a) == hash(b)

@pytest.mark.parametrize("a, b", [
    (Constant(1), Constant(2)),
    (Variable("x"), Variable("X")),
    (Constant(1), Variable("x")),
    (Addition(x, y), Multiplication(x, y)),
    (Addition(x, y), Addition(y, x)),
    (Multiplication(Multiplication(x, y), z), Multiplication(x, Multiplication(y, z))),
])
def test_unequal_trees(a, b):
    assert a != b

def test_equality_with_other_types():
    assert Constant(1) != 1
    assert Variable("x") != "x"

def test_usable_as_dict_keys():
    seen = {Addition(x, Constant(1)): "a"}
    assert seen[Addition(Variable("x"), Constant("1.0"))] == "a"

def test_deep_trees_compare_without_recursion():
    a = b = Constant(0)
    for _ in range(20000):
        a = Addition(a, x)
        b = Addition(b, Variable("x"))
    assert a == b
    assert a != Addition(a, x)


# ─── 4) Traversal ────────────────────────────────────────────────────────────

def test_postvisitor_counts_nodes():
    tree = Multiplication(Addition(x, Constant(2)), y)
    assert postvisitor(tree, lambda node, *sizes: 1 + sum(sizes)) == 5

def test_postvisitor_visits_shared_subtrees_once():
    shared = Addition(x, y)
    calls = []

    def record(node, *_):
        calls.append(node)
        return None

    postvisitor(Multiplication(shared, shared), record)
    assert len(calls) == 4

def test_postvisitor_with_restricted_operands():
    tree = Addition(Multiplication(x, y), z)
    only_sums = lambda node: node.operands if isinstance(node, Addition) else ()
    found = postvisitor(
        tree,
        lambda node, *parts: sum(parts, []) if parts else [node],
        operands=only_sums,
    )
    assert found == [Multiplication(x, y), z]

def test_summands_and_factors():
    tree = Addition(Addition(Multiplication(Constant(2), x), y), Multiplication(x, Multiplication(y, z)))
    assert summands(tree) == [Multiplication(Constant(2), x), y, Multiplication(x, Multiplication(y, z))]
    assert factors(summands(tree)[2]) == [x, y, z]
    assert summands(x) == [x]
    assert factors(x) == [x]
