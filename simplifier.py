import logging
from dataclasses import dataclass
from fractions import Fraction

from expression import (
    Addition,
    Constant,
    Expression,
    Multiplication,
    Variable,
    factors,
    summands,
)

logger = logging.getLogger(__name__)

ONE = Fraction(1)
ZERO = Fraction(0)


@dataclass(frozen=True)
class Monomial:
    """
    One term of a polynomial: ``coefficient * v1**e1 * v2**e2 * ...``.

    ``powers`` holds (name, exponent) pairs sorted by name, every exponent at
    least 1. A term with no powers is a plain constant.
    """

    coefficient: Fraction
    powers: tuple = ()

    @property
    def signature(self) -> tuple:
        """Key under which like terms are merged."""
        return self.powers

    @property
    def degree(self) -> int:
        return sum(exponent for _, exponent in self.powers)

    @property
    def max_exponent(self) -> int:
        return max((exponent for _, exponent in self.powers), default=0)

    def exponent(self, variable: str) -> int:
        return dict(self.powers).get(variable, 0)

    def sort_key(self):
        # Highest single exponent first, then higher total degree, then by
        # variable names so that the order is total.
        return (-self.max_exponent, -self.degree, self.powers)

    def derivative(self, variable: str) -> "Monomial":
        """Power rule: d/dv (c * v**k * rest) = (c*k) * v**(k-1) * rest."""
        k = self.exponent(variable)
        if k == 0:
            return Monomial(ZERO)
        powers = tuple(
            (name, exponent - 1 if name == variable else exponent)
            for name, exponent in self.powers
            if not (name == variable and exponent == 1)
        )
        return Monomial(self.coefficient * k, powers)

    def to_expression(self) -> Expression:
        """
        Left-leaning product of the coefficient and each variable repeated
        ``exponent`` times. A coefficient of exactly 1 is left out unless the
        term is a bare constant.
        """
        operands = []
        if self.coefficient != ONE or not self.powers:
            operands.append(Constant(self.coefficient))
        for name, exponent in self.powers:
            operands.extend(Variable(name) for _ in range(exponent))
        result = operands[0]
        for operand in operands[1:]:
            result = Multiplication(result, operand)
        return result


def monomial(term: Expression) -> Monomial:
    """
    Collapse one product of constants and variables into a Monomial.

    Raises ValueError if the product still contains a sum, i.e. ``term`` was
    not expanded first.
    """
    coefficient = ONE
    counts = {}
    for factor in factors(term):
        if isinstance(factor, Constant):
            coefficient *= factor.value
        elif isinstance(factor, Variable):
            counts[factor.name] = counts.get(factor.name, 0) + 1
        else:
            raise ValueError(
                "cannot simplify a product containing a sum; expand it first"
            )
    return Monomial(coefficient, tuple(sorted(counts.items())))


def to_polynomial(expr: Expression) -> list:
    """
    Collect an expanded expression into a list of Monomials.

    Like terms (same variable exponents) are merged by adding coefficients,
    terms whose coefficient ends up 0 are dropped, and the rest are sorted
    into canonical order.
    """
    merged = {}
    for term in summands(expr):
        part = monomial(term)
        merged[part.signature] = merged.get(part.signature, ZERO) + part.coefficient
    terms = [
        Monomial(coefficient, powers)
        for powers, coefficient in merged.items()
        if coefficient != ZERO
    ]
    terms.sort(key=Monomial.sort_key)
    return terms


def from_polynomial(terms) -> Expression:
    """Left-leaning sum of the terms in order; the empty sum is Constant(0)."""
    terms = list(terms)
    if not terms:
        return Constant(0)
    result = terms[0].to_expression()
    for term in terms[1:]:
        result = Addition(result, term.to_expression())
    return result


def simplify(expr: Expression) -> Expression:
    """
    Canonicalize an expanded expression into an ordered sum of monomials.

    The caller is responsible for expanding first; this never distributes.
    ``simplify(simplify(e)) == simplify(e)``.
    """
    if not isinstance(expr, Expression):
        raise TypeError(f"expected Expression, got {type(expr).__name__}")
    terms = to_polynomial(expr)
    logger.debug("simplified to %d term(s)", len(terms))
    return from_polynomial(terms)
