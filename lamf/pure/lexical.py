"""Lexical analysis for the lamf language: turns source text into a flat list of Tokens. No semantic knowledge.

```
<ident>   ::= [A-Za-z_][A-Za-z0-9_]*
<number>  ::= <digits> [("e" | "E") ["+"] <digits>]     ; <digits> may use single "_" separators: 1_000
<lambda>  ::= "λ"
<recur>   ::= "𝑓"                                     ; U+1D453, mathematical italic small f
<op>      ::= "+" | "-" | "*" | "/" | "&" | "|"
<comment> ::= "//" <char>*                             ; runs to end of line, dropped
```

Line breaks separate statements, except inside an open parenthesis group (parentheses may span lines).
"""

from dataclasses import dataclass

from lamf.lang.error import LexicalError


IDENT = "IDENT"
NUMBER = "NUMBER"
LAMBDA = "LAMBDA"
RECURSION = "RECURSION"
DOT = "DOT"
EQUALS = "EQUALS"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
OPERATOR = "OPERATOR"
NEWLINE = "NEWLINE"
EOF = "EOF"

LAMBDA_CHAR = "λ"
RECURSION_CHAR = "\U0001d453"
OPERATORS = "+-*/&|"
MAX_DIGITS = 4300  # CPython's default limit for converting between int and str

SINGLES = {
    LAMBDA_CHAR: LAMBDA,
    RECURSION_CHAR: RECURSION,
    ".": DOT,
    "=": EQUALS,
    "(": LPAREN,
    ")": RPAREN,
}


@dataclass
class Token:
    kind: str
    text: str
    line: int
    col: int
    value: int = None

    def __repr__(self):
        return f"Token({self.kind}, {self.text!r}, {self.line}:{self.col})"


def _is_digit(char):
    return char != "" and char in "0123456789"


def _is_ident_start(char):
    return char.isascii() and (char.isalpha() or char == "_")


def _is_ident_char(char):
    return char.isascii() and (char.isalnum() or char == "_")


class Lexer:
    """Single pass, character-by-character tokenizer. Use tokenize() rather than instantiating directly."""

    def __init__(self, source, line=1):
        self.source = source
        self.pos = 0
        self.line = line
        self.col = 1
        self.depth = 0  # open parentheses; newlines inside a group are whitespace
        self.tokens = []

    def peek(self, offset=0):
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def advance(self):
        char = self.source[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return char

    def emit(self, kind, text, line, col, value=None):
        self.tokens.append(Token(kind, text, line, col, value))

    def run(self):
        while self.pos < len(self.source):
            char = self.peek()
            line, col = self.line, self.col

            if char == "\n":
                self.advance()
                if self.depth == 0 and self.tokens and self.tokens[-1].kind != NEWLINE:
                    self.emit(NEWLINE, "\n", line, col)

            elif char.isspace():
                self.advance()

            elif char == "/" and self.peek(1) == "/":
                while self.pos < len(self.source) and self.peek() != "\n":
                    self.advance()

            elif char in SINGLES:
                self.advance()
                if char == "(":
                    self.depth += 1
                elif char == ")":
                    self.depth = max(self.depth - 1, 0)  # the parser reports the unmatched paren
                self.emit(SINGLES[char], char, line, col)

            elif char in OPERATORS:
                self.advance()
                self.emit(OPERATOR, char, line, col)

            elif _is_ident_start(char):
                text = ""
                while _is_ident_char(self.peek()):
                    text += self.advance()
                self.emit(IDENT, text, line, col)

            elif _is_digit(char):
                self.number(line, col)

            else:
                raise LexicalError("unexpected character '{}'", char, line=line, col=col)

        self.emit(EOF, "", self.line, self.col)
        return self.tokens

    def number(self, line, col):
        """Consumes a numeric literal. Only whole numbers exist in lamf, so fractions are malformed."""
        text = self.digits()
        mantissa, exponent = text, "0"

        if self.peek() in ("e", "E") and (_is_digit(self.peek(1)) or self.peek(1) in ("+", "-")):
            text += self.advance()
            sign = self.advance() if self.peek() in ("+", "-") else ""
            exponent = self.digits()
            text += sign + exponent

            if sign == "-" or not exponent:
                raise self.malformed(text, line, col)

        if self.peek() == "." and _is_digit(self.peek(1)):
            text += self.advance() + self.digits()
            raise self.malformed(text, line, col)

        if _is_ident_char(self.peek()):
            while _is_ident_char(self.peek()):
                text += self.advance()
            raise self.malformed(text, line, col)

        if "__" in text or text.endswith("_") or "_e" in text.lower():
            raise self.malformed(text, line, col)

        mantissa, exponent = mantissa.replace("_", ""), exponent.replace("_", "") or "0"
        if len(exponent) > len(str(MAX_DIGITS)) or len(mantissa) + int(exponent) > MAX_DIGITS:
            raise LexicalError("numeric literal '{}' is too large", text, line=line, col=col, length=len(text))

        value = int(mantissa) * 10 ** int(exponent)
        self.emit(NUMBER, text, line, col, value)

    def digits(self):
        text = ""
        while _is_digit(self.peek()) or (self.peek() == "_" and text):
            text += self.advance()
        return text

    @staticmethod
    def malformed(text, line, col):
        return LexicalError("malformed numeric literal '{}'", text, line=line, col=col, length=len(text))


def tokenize(source, line=1):
    """Returns the list of Tokens in source, always terminated by an EOF token. line is the line number of the first
    line of source, for error positions.
    """
    return Lexer(source, line).run()
