import logging

from expression import Expression, is_variable_name
from simplifier import from_polynomial, simplify, to_polynomial

logger = logging.getLogger(__name__)


class InvalidVariableError(ValueError):
    """Raised when the differentiation target is not a valid variable name."""

    def __init__(self, variable):
        super().__init__(f"not a valid variable name: {variable!r}")
        self.variable = variable


def differentiate(expr: Expression, variable: str) -> Expression:
    """
    Differentiate a simplified expression with respect to ``variable``.

    Each term is differentiated on its own with the power rule (a term's
    factors of ``variable`` are already collapsed into one power, so no
    product rule is needed). The resulting sum is simplified again before
    it is returned, so the answer is in canonical form.
    """
    if not is_variable_name(variable):
        raise InvalidVariableError(variable)
    terms = to_polynomial(expr)
    logger.debug("differentiating %d term(s) with respect to %s", len(terms), variable)
    raw = from_polynomial(term.derivative(variable) for term in terms)
    return simplify(raw)
