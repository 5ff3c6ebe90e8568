import re
from enum import Enum
from fractions import Fraction

VARIABLE_PATTERN = re.compile(r"[A-Za-z]+")


class InvariantViolation(AssertionError):
    """
    Raised when a node is built with a value the grammar can never produce
    (negative constant, non-alphabetic name, non-Expression operand).
    """


class ExpressionType(Enum):
    CONSTANT = "constant"
    VARIABLE = "variable"
    ADDITION = "addition"
    MULTIPLICATION = "multiplication"


def is_variable_name(name) -> bool:
    return isinstance(name, str) and VARIABLE_PATTERN.fullmatch(name) is not None


class Expression:
    """
    Immutable node of an arithmetic expression tree.

    The variant set is closed: Constant, Variable, Addition, Multiplication.
    Equality is structural and order-sensitive, so ``x + y`` and ``y + x``
    are different trees; compare simplified forms to test mathematical
    equivalence.
    """

    __slots__ = ("_hash",)

    type: ExpressionType

    @staticmethod
    def parse(text: str) -> "Expression":
        from parser import parse
        return parse(text)

    @property
    def operands(self) -> tuple:
        """() for a leaf, (left, right) for a binary node."""
        return ()

    @property
    def is_leaf(self) -> bool:
        return not self.operands

    @property
    def left(self) -> "Expression":
        return self

    @property
    def right(self) -> "Expression":
        return self

    def expand(self) -> "Expression":
        from expander import expand
        return expand(self)

    def to_canonical_string(self) -> str:
        from renderer import to_canonical_string
        return to_canonical_string(self)

    def _key(self):
        raise NotImplementedError

    def __setattr__(self, name, value):
        if hasattr(self, "_hash"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, name, value)

    def __hash__(self):
        return self._hash

    def __eq__(self, other):
        if not isinstance(other, Expression):
            return NotImplemented
        # Walk both trees side by side without recursing.
        pending = [(self, other)]
        while pending:
            a, b = pending.pop()
            if a is b:
                continue
            if type(a) is not type(b) or a._hash != b._hash:
                return False
            if a.is_leaf:
                if a._key() != b._key():
                    return False
            else:
                pending.append((a.right, b.right))
                pending.append((a.left, b.left))
        return True

    def __str__(self):
        return self.to_canonical_string()


class Constant(Expression):
    """Nonnegative numeric constant, held exactly as a Fraction."""

    __slots__ = ("_value",)
    type = ExpressionType.CONSTANT

    def __init__(self, value):
        try:
            value = Fraction(value)
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvariantViolation(f"not a finite number: {value!r}") from exc
        if value < 0:
            raise InvariantViolation(f"constant must be nonnegative, got {value}")
        self._value = value
        self._hash = hash((self.type, value))

    @property
    def value(self) -> Fraction:
        return self._value

    def _key(self):
        return self._value

    def __repr__(self):
        if self._value.denominator == 1:
            return f"Constant({self._value.numerator})"
        return f"Constant({str(self._value)!r})"


class Variable(Expression):
    __slots__ = ("_name",)
    type = ExpressionType.VARIABLE

    def __init__(self, name: str):
        if not is_variable_name(name):
            raise InvariantViolation(f"variable name must match [A-Za-z]+, got {name!r}")
        self._name = name
        self._hash = hash((self.type, name))

    @property
    def name(self) -> str:
        return self._name

    def _key(self):
        return self._name

    def __repr__(self):
        return f"Variable({self._name!r})"


class BinaryExpression(Expression):
    __slots__ = ("_left", "_right")

    symbol: str
    precedence: int

    def __init__(self, left: Expression, right: Expression):
        if not isinstance(left, Expression) or not isinstance(right, Expression):
            raise InvariantViolation(
                f"{type(self).__name__} operands must be expressions, "
                f"got {left!r} and {right!r}"
            )
        self._left = left
        self._right = right
        self._hash = hash((self.type, left._hash, right._hash))

    @property
    def left(self) -> Expression:
        return self._left

    @property
    def right(self) -> Expression:
        return self._right

    @property
    def operands(self) -> tuple:
        return (self._left, self._right)

    def __repr__(self):
        return f"{type(self).__name__}({self._left!r}, {self._right!r})"


class Addition(BinaryExpression):
    __slots__ = ()
    type = ExpressionType.ADDITION
    symbol = "+"
    precedence = 1


class Multiplication(BinaryExpression):
    __slots__ = ()
    type = ExpressionType.MULTIPLICATION
    symbol = "*"
    precedence = 2


def postvisitor(expr: Expression, fn, operands=lambda node: node.operands):
    """
    Visit an expression in post-order, applying ``fn`` to every node.

    ``fn(node, *results)`` receives the node and the results of visiting the
    children returned by ``operands(node)``. Passing a narrower ``operands``
    restricts the walk, e.g. to the addition skeleton of a sum; nodes with no
    visited children are treated as leaves.

    The walk uses an explicit stack, so tree depth is bounded only by memory.
    Results are memoized per node object, which keeps shared subtrees from
    being visited twice.
    """
    visited = {}
    stack = [(expr, False)]

    while stack:
        node, processed = stack.pop()
        if id(node) in visited:
            continue
        children = operands(node)
        if processed:
            results = tuple(visited[id(child)][1] for child in children)
            # Keep the node alive so its id() cannot be reused mid-walk.
            visited[id(node)] = (node, fn(node, *results))
        else:
            stack.append((node, True))
            for child in reversed(children):
                if id(child) not in visited:
                    stack.append((child, False))

    return visited[id(expr)][1]


def summands(expr: Expression) -> list:
    """The non-Addition nodes of ``expr``'s addition skeleton, left to right."""
    found = []
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, Addition):
            stack.append(node.right)
            stack.append(node.left)
        else:
            found.append(node)
    return found


def factors(expr: Expression) -> list:
    """The non-Multiplication nodes of ``expr``'s product skeleton, left to right."""
    found = []
    stack = [expr]
    while stack:
        node = stack.pop()
        if isinstance(node, Multiplication):
            stack.append(node.right)
            stack.append(node.left)
        else:
            found.append(node)
    return found
