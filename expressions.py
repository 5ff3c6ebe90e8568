"""
String-based interface to the expression system.

    >>> simplify("3 + 2.4")
    '5.4'
    >>> differentiate("x * x * y + 3 * x", "x")
    '2 * x * y + 3'
"""
import logging

from differentiator import InvalidVariableError, differentiate as differentiate_expression
from expander import expand
from expression import is_variable_name
from parser import ExpressionSyntaxError, parse
from renderer import to_canonical_string
from simplifier import simplify as simplify_expression

logger = logging.getLogger(__name__)

__all__ = [
    "ExpressionSyntaxError",
    "InvalidVariableError",
    "differentiate",
    "simplify",
]


def simplify(expression: str) -> str:
    """
    Simplify an expression.

    Returns an equal expression written as a sum of terms without
    parentheses. Each combination of variable exponents appears in at most
    one term, each term carries at most one constant factor (never exactly
    1), and read left to right the largest exponent in each term never
    increases.

    Raises ExpressionSyntaxError if ``expression`` is not valid.
    """
    tree = simplify_expression(expand(parse(expression)))
    result = to_canonical_string(tree)
    logger.debug("simplify(%r) -> %r", expression, result)
    return result


def differentiate(expression: str, variable: str) -> str:
    """
    Differentiate an expression with respect to a variable.

    The answer is in the same canonical form ``simplify`` produces.

    Raises InvalidVariableError if ``variable`` is not a valid variable name,
    and ExpressionSyntaxError if ``expression`` is not valid.
    """
    if not is_variable_name(variable):
        raise InvalidVariableError(variable)
    tree = simplify_expression(expand(parse(expression)))
    result = to_canonical_string(differentiate_expression(tree, variable))
    logger.debug("differentiate(%r, %r) -> %r", expression, variable, result)
    return result
