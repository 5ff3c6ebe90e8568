import logging
import re
from decimal import Decimal

from expression import Addition, Constant, Expression, Multiplication, Variable

logger = logging.getLogger(__name__)

NUMBER = "NUMBER"
VARIABLE = "VARIABLE"
PLUS = "PLUS"
TIMES = "TIMES"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
EOF = "EOF"

_DESCRIPTIONS = {
    NUMBER: "a number",
    VARIABLE: "a variable",
    PLUS: "'+'",
    TIMES: "'*'",
    LPAREN: "'('",
    RPAREN: "')'",
    EOF: "end of input",
}


class ExpressionSyntaxError(ValueError):
    """
    Raised when text is not a valid expression.

    Carries the rejected ``text`` and the ``position`` (0-based character
    offset) where parsing stopped.
    """

    def __init__(self, message: str, text: str, position: int):
        super().__init__(f"{message} at position {position} in {text!r}")
        self.text = text
        self.position = position


class Token:
    __slots__ = ("type", "value", "position")

    def __init__(self, type: str, value: str, position: int):
        self.type = type
        self.value = value
        self.position = position

    def __repr__(self):
        return f"Token({self.type}, {self.value!r}, {self.position})"


class Tokenizer:
    """
    Splits text into tokens. Whitespace between tokens is skipped.
    """

    TOKEN_SPECS = [
        (r"\s+", None),
        (r"[0-9]+(?:\.[0-9]+)?", NUMBER),
        (r"[A-Za-z]+", VARIABLE),
        (r"\+", PLUS),
        (r"\*", TIMES),
        (r"\(", LPAREN),
        (r"\)", RPAREN),
    ]
    _COMPILED_SPECS = [(re.compile(pattern), kind) for pattern, kind in TOKEN_SPECS]

    def __init__(self, text: str):
        self.text = text

    def tokenize(self) -> list[Token]:
        tokens = []
        pos = 0
        while pos < len(self.text):
            for regex, kind in self._COMPILED_SPECS:
                match = regex.match(self.text, pos)
                if match:
                    if kind:
                        tokens.append(Token(kind, match.group(0), pos))
                    pos = match.end()
                    break
            else:
                raise ExpressionSyntaxError(
                    f"unexpected character {self.text[pos]!r}", self.text, pos
                )
        tokens.append(Token(EOF, "", len(self.text)))
        return tokens


class _Group:
    """Partial sum and product of one parenthesized group (or the whole text)."""

    __slots__ = ("total", "product")

    def __init__(self):
        self.total = None
        self.product = None

    def push_factor(self, node: Expression):
        self.product = node if self.product is None else Multiplication(self.product, node)

    def push_term(self):
        self.total = self.product if self.total is None else Addition(self.total, self.product)
        self.product = None

    def finish(self) -> Expression:
        self.push_term()
        return self.total


class Parser:
    """
    Parser for the grammar

        expr    ::= term ('+' term)*
        term    ::= primary ('*' primary)*
        primary ::= NUMBER | VARIABLE | '(' expr ')'

    Both operators are left associative, so ``x + y + z`` becomes
    ``Addition(Addition(x, y), z)``. Parentheses only group and leave no
    node of their own.

    Open parentheses are kept on an explicit stack of groups rather than
    the call stack, so nesting depth is bounded only by memory.
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = Tokenizer(text).tokenize()
        self.index = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _error(self, expected: str) -> ExpressionSyntaxError:
        token = self.current
        found = _DESCRIPTIONS[token.type]
        if token.type in (NUMBER, VARIABLE):
            found = f"{found} {token.value!r}"
        return ExpressionSyntaxError(
            f"expected {expected}, found {found}", self.text, token.position
        )

    def _eat(self, kind: str) -> Token:
        token = self.current
        if token.type != kind:
            raise self._error(_DESCRIPTIONS[kind])
        self.index += 1
        return token

    def parse(self) -> Expression:
        if self.current.type == EOF:
            raise ExpressionSyntaxError("empty expression", self.text, 0)
        groups = [_Group()]
        while True:
            node = self._primary(groups)
            groups[-1].push_factor(node)
            # Operator, closing parenthesis or end of input.
            while self.current.type == RPAREN and len(groups) > 1:
                self._eat(RPAREN)
                node = groups.pop().finish()
                groups[-1].push_factor(node)
            kind = self.current.type
            if kind == TIMES:
                self._eat(TIMES)
            elif kind == PLUS:
                self._eat(PLUS)
                groups[-1].push_term()
            elif kind == EOF and len(groups) == 1:
                return groups[0].finish()
            elif len(groups) > 1:
                raise self._error("'+', '*' or ')'")
            else:
                raise self._error("'+', '*' or end of input")

    def _primary(self, groups: list) -> Expression:
        """Consume any '(' (opening new groups) and then one number or variable."""
        while self.current.type == LPAREN:
            self._eat(LPAREN)
            groups.append(_Group())
        token = self.current
        if token.type == NUMBER:
            self._eat(NUMBER)
            # Decimal keeps the literal exact (2.4 stays 12/5) and, unlike
            # int(str), has no cap on the number of digits.
            return Constant(Decimal(token.value))
        if token.type == VARIABLE:
            self._eat(VARIABLE)
            return Variable(token.value)
        raise self._error("a number, a variable or '('")


def parse(text: str) -> Expression:
    """
    Parse ``text`` into an expression tree.

    Raises ExpressionSyntaxError for anything outside the grammar; no
    partial tree is ever returned.
    """
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")
    expr = Parser(text).parse()
    logger.debug("parsed %r", text)
    return expr
