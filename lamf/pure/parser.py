"""Recursive-descent parser for the lamf language: turns a list of Tokens (see lexical.py) into a list of Statements
(see grammar.py). Binary operators are parsed by precedence climbing.

Parentheses do double duty. A parenthesized expression followed by something that can start an expression is an
application whose argument is everything that follows, so `(λprint. print) (λv. v + 10) 10` prints 20. Otherwise
the parentheses only group: `(2 + 3) * 4` is 20. Within such an argument an identifier does not take a following
`(` as its own argument, so `(λascii. ascii) h (λascii. ascii) 105` is two calls.

A `-` where an operand is expected negates the atom after it: `(λv. v + (-3)) 5` is 2.
"""

from lamf.lang.error import ParseError
from lamf.pure import lexical
from lamf.pure.grammar import (Abstraction, Application, BinaryOp, Binding, ExpressionStatement, NumberLiteral,
                               Negation, RecursiveCall, Variable)


LOWEST = 0
SUM = 1       # + -
PRODUCT = 2   # * /
BITWISE = 3   # & |

PRECEDENCE = {"+": SUM, "-": SUM, "*": PRODUCT, "/": PRODUCT, "&": BITWISE, "|": BITWISE}

# tokens that can start an expression, and therefore an argument
STARTS = (lexical.NUMBER, lexical.IDENT, lexical.LAMBDA, lexical.RECURSION, lexical.LPAREN)


def starts_operand(token):
    """Whether token can start an operand: anything in STARTS, or a prefix minus."""
    return token.kind in STARTS or (token.kind == lexical.OPERATOR and token.text == "-")


class Parser:
    """Governs one pass over a token list. Use parse() rather than the statement/expression methods directly."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.pos = 0
        self.depth = 0  # enclosing abstractions: 𝑓 is only legal when this is positive
        self.chained = False  # inside the argument of `(E) rest`, where a `(` starts the next call

    def look_ahead(self, offset=0):
        idx = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[idx]

    def consume(self):
        token = self.look_ahead()
        if token.kind != lexical.EOF:
            self.pos += 1
        return token

    def consume_expect(self, kind, what):
        token = self.look_ahead()
        if token.kind != kind:
            raise self.unexpected(token, what)
        return self.consume()

    @staticmethod
    def unexpected(token, what):
        if token.kind == lexical.EOF:
            return ParseError("expected {}, got end of input", what, line=token.line, col=token.col)
        if token.kind == lexical.NEWLINE:
            return ParseError("expected {}, got end of line", what, line=token.line, col=token.col)
        return ParseError("expected {}, got '{}'", (what, token.text), line=token.line, col=token.col,
                          length=len(token.text))

    def parse(self):
        """Returns the list of Statements in self.tokens, in source order."""
        statements = []
        while True:
            token = self.look_ahead()
            if token.kind == lexical.EOF:
                return statements
            elif token.kind == lexical.NEWLINE:
                self.consume()
            elif token.kind == lexical.RPAREN:
                raise ParseError("unmatched parenthesis ')'", line=token.line, col=token.col)
            else:
                statements.append(self.statement())

                # several expression statements may share a line; anything else must end it
                end = self.look_ahead()
                if end.kind not in (lexical.NEWLINE, lexical.EOF) + STARTS:
                    if end.kind == lexical.RPAREN:
                        raise ParseError("unmatched parenthesis ')'", line=end.line, col=end.col)
                    raise self.unexpected(end, "end of statement")

    def statement(self):
        token = self.look_ahead()
        if token.kind == lexical.IDENT and self.look_ahead(1).kind == lexical.EQUALS:
            self.consume()
            self.consume()
            if not starts_operand(self.look_ahead()):
                raise self.unexpected(self.look_ahead(), f"an expression after '{token.text} ='")
            return Binding(token.text, self.expression(), line=token.line, col=token.col)
        return ExpressionStatement(self.expression(), line=token.line, col=token.col)

    def expression(self, precedence=LOWEST):
        """Parses an expression whose binary operators all bind tighter than precedence."""
        left = self.prefix()
        while True:
            token = self.look_ahead()
            if token.kind != lexical.OPERATOR or PRECEDENCE[token.text] <= precedence:
                return left

            self.consume()
            if not starts_operand(self.look_ahead()):
                raise self.unexpected(self.look_ahead(), f"an operand after '{token.text}'")
            right = self.expression(PRECEDENCE[token.text])
            left = BinaryOp(token.text, left, right, line=left.line, col=left.col)

    def prefix(self):
        token = self.look_ahead()

        if token.kind == lexical.NUMBER:
            self.consume()
            return NumberLiteral(token.value, line=token.line, col=token.col)

        elif token.kind == lexical.IDENT:
            callee = self.atom()
            while self.juxtaposes(self.look_ahead()):  # juxtaposition: f a b = ((f a) b)
                callee = Application(callee, self.atom(), line=token.line, col=token.col)
            return callee

        elif token.kind == lexical.LAMBDA:
            return self.abstraction()

        elif token.kind == lexical.RECURSION:
            return self.recursion()

        elif token.kind == lexical.LPAREN:
            inner = self.group()
            if self.look_ahead().kind in STARTS:
                chained, self.chained = self.chained, True
                try:
                    argument = self.expression()
                finally:
                    self.chained = chained
                return Application(inner, argument, line=token.line, col=token.col)
            return inner

        elif token.kind == lexical.OPERATOR and token.text == "-":
            self.consume()
            if not starts_operand(self.look_ahead()):
                raise self.unexpected(self.look_ahead(), "an operand after '-'")
            operand = self.prefix() if self.look_ahead().kind == lexical.OPERATOR else self.atom()
            return Negation(operand, line=token.line, col=token.col)

        raise self.unexpected(token, "an expression")

    def juxtaposes(self, token):
        """Whether token is the next argument of an identifier being applied by juxtaposition."""
        if self.chained and token.kind == lexical.LPAREN:
            return False  # `(λascii. ascii) h (λascii. ascii) 105` is two statements
        return token.kind in STARTS

    def atom(self):
        """Parses a juxtaposition argument: a number, a name, a parenthesized group, an abstraction or a 𝑓 call."""
        token = self.look_ahead()
        if token.kind == lexical.NUMBER:
            self.consume()
            return NumberLiteral(token.value, line=token.line, col=token.col)
        elif token.kind == lexical.IDENT:
            self.consume()
            return Variable(token.text, line=token.line, col=token.col)
        elif token.kind == lexical.LPAREN:
            return self.group()
        elif token.kind == lexical.LAMBDA:
            return self.abstraction()
        elif token.kind == lexical.RECURSION:
            return self.recursion()
        raise self.unexpected(token, "an expression")

    def group(self):
        opening = self.consume_expect(lexical.LPAREN, "'('")
        if self.look_ahead().kind == lexical.RPAREN:
            raise self.unexpected(self.look_ahead(), "an expression")

        chained, self.chained = self.chained, False
        try:
            inner = self.expression()
        finally:
            self.chained = chained
        if self.look_ahead().kind != lexical.RPAREN:
            if self.look_ahead().kind == lexical.EOF:
                raise ParseError("unmatched parenthesis '('", line=opening.line, col=opening.col)
            raise self.unexpected(self.look_ahead(), "')'")
        self.consume()
        return inner

    def abstraction(self):
        bind = self.consume_expect(lexical.LAMBDA, "'λ'")
        param = self.look_ahead()
        if param.kind != lexical.IDENT:
            raise self.unexpected(param, "a parameter name after 'λ'")
        self.consume()
        self.consume_expect(lexical.DOT, f"'.' after 'λ{param.text}'")

        if not starts_operand(self.look_ahead()):
            raise self.unexpected(self.look_ahead(), "an abstraction body")

        self.depth += 1
        try:
            body = self.expression()
        finally:
            self.depth -= 1
        return Abstraction(param.text, body, line=bind.line, col=bind.col)

    def recursion(self):
        recur = self.consume_expect(lexical.RECURSION, "'𝑓'")
        if self.depth == 0:
            raise ParseError("'{}' used outside of an abstraction", recur.text, line=recur.line, col=recur.col)
        if self.look_ahead().kind != lexical.LPAREN:
            raise self.unexpected(self.look_ahead(), "'(' after '𝑓'")
        return RecursiveCall(self.group(), line=recur.line, col=recur.col)


def parse(tokens):
    """Returns the list of Statements built from tokens."""
    return Parser(tokens).parse()
