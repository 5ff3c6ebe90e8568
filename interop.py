from sympy import Add, Mul, Rational, Symbol, diff, expand

from expression import Addition, Constant, Expression, Multiplication, Variable, postvisitor


def _convert(node, *operands):
    if isinstance(node, Constant):
        return Rational(node.value.numerator, node.value.denominator)
    if isinstance(node, Variable):
        return Symbol(node.name)
    if isinstance(node, Addition):
        return Add(*operands)
    if isinstance(node, Multiplication):
        return Mul(*operands)
    raise TypeError(f"cannot convert {type(node).__name__} to sympy")


def to_sympy(expr: Expression):
    """
    Convert an expression tree into the equivalent SymPy expression.

    Symbols are created directly from variable names, so names SymPy would
    otherwise treat specially (``E``, ``I``, ``pi``) stay plain symbols.
    """
    return postvisitor(expr, _convert)


def equivalent(first: Expression, second: Expression) -> bool:
    """True if both expressions are equal as polynomials."""
    return expand(to_sympy(first) - to_sympy(second)) == 0


def is_derivative(expr: Expression, variable: str, derivative: Expression) -> bool:
    """True if ``derivative`` equals SymPy's derivative of ``expr`` by ``variable``."""
    expected = diff(to_sympy(expr), Symbol(variable))
    return expand(expected - to_sympy(derivative)) == 0
