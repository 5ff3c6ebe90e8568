from expression import Addition, Expression, Multiplication, postvisitor


def _sum_skeleton(node: Expression) -> tuple:
    return node.operands if isinstance(node, Addition) else ()


def _map_summands(expr: Expression, fn) -> Expression:
    """
    Rebuild the addition skeleton of ``expr`` with every summand replaced by
    ``fn(summand)``. The shape of the sum is kept, so ``(a + b) + c`` maps to
    ``(fn(a) + fn(b)) + fn(c)``.
    """
    def rebuild(node, *operands):
        if operands:
            return Addition(*operands)
        return fn(node)

    return postvisitor(expr, rebuild, operands=_sum_skeleton)


def distribute(left: Expression, right: Expression) -> Expression:
    """
    Multiply two expanded expressions, distributing over any sums.

    ``(a + b) * c`` becomes ``a*c + b*c`` and ``a * (b + c)`` becomes
    ``a*b + a*c``; when both sides are sums the left one is split first.
    The result is expanded whenever both inputs are.
    """
    if not isinstance(left, Addition) and not isinstance(right, Addition):
        return Multiplication(left, right)
    return _map_summands(
        left,
        lambda l: _map_summands(right, lambda r: Multiplication(l, r)),
    )


def _expand_node(node: Expression, *operands: Expression) -> Expression:
    if not operands:
        return node
    left, right = operands
    if isinstance(node, Multiplication):
        if left is node.left and right is node.right and not (
            isinstance(left, Addition) or isinstance(right, Addition)
        ):
            return node
        return distribute(left, right)
    if left is node.left and right is node.right:
        return node
    return Addition(left, right)


def expand(expr: Expression) -> Expression:
    """
    Distribute multiplication over addition everywhere in ``expr``.

    Operands are expanded before their parent, so after distributing no
    Multiplication in the result has an Addition as either operand, at any
    depth. Expanding an already expanded tree returns an equal tree, and
    subtrees that need no rewriting are returned as-is.
    """
    if not isinstance(expr, Expression):
        raise TypeError(f"expected Expression, got {type(expr).__name__}")
    return postvisitor(expr, _expand_node)
