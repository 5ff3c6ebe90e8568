from decimal import MAX_EMAX, MIN_EMIN, Decimal, localcontext
from fractions import Fraction

from expression import Constant, Expression, Variable, postvisitor


def _digits(n: int) -> int:
    """Upper bound on the decimal digits of ``n``, without int -> str."""
    return n.bit_length() * 30103 // 100000 + 1


def format_number(value: Fraction) -> str:
    """
    Render a nonnegative number as a plain decimal literal.

    Integers have no decimal point (``2``); other values are written out in
    positional notation with no trailing zeros (``5.4``, ``0.125``). Any value
    built from decimal literals with ``+`` and ``*`` terminates, so it is
    rendered exactly; other fractions are rounded to the working precision.
    Conversion goes through Decimal, so there is no limit on the number of
    digits.
    """
    value = Fraction(value)
    with localcontext() as ctx:
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        if value.denominator == 1:
            return str(Decimal(value.numerator))
        # 2**k and 5**k have at most k decimal places, and k < 4 * digits.
        ctx.prec = _digits(value.numerator) + 4 * _digits(value.denominator) + 2
        number = Decimal(value.numerator) / Decimal(value.denominator)
        text = format(number.normalize(), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _render(node: Expression, *operands):
    """Return (text, precedence) for ``node``; leaves bind tightest."""
    if isinstance(node, Constant):
        return format_number(node.value), 3
    if isinstance(node, Variable):
        return node.name, 3
    (left, left_prec), (right, right_prec) = operands
    if left_prec < node.precedence:
        left = f"({left})"
    # Both operators associate to the left, so an equal-precedence right
    # operand needs parentheses to survive a round trip.
    if right_prec <= node.precedence:
        right = f"({right})"
    return f"{left} {node.symbol} {right}", node.precedence


def to_canonical_string(expr: Expression) -> str:
    """
    Render ``expr`` in the input grammar.

    Parentheses appear only where they are needed to reproduce the same tree,
    so ``parse(to_canonical_string(e)) == e`` for every tree ``e``. A simplified
    tree is a left-leaning sum of left-leaning products and renders without
    any parentheses, e.g. ``2 * x * x + 3 * x + 4``.
    """
    if not isinstance(expr, Expression):
        raise TypeError(f"expected Expression, got {type(expr).__name__}")
    text, _ = postvisitor(expr, _render)
    return text
