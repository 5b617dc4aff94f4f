"""Abstract syntax tree of the lamf language. The parser (see parser.py) builds one Statement per top-level statement;
the evaluator walks the Expressions underneath.

```
<statement>  ::= <ident> "=" <expr>                  ; Binding
               | <expr>                              ; ExpressionStatement
<expr>       ::= <number>                            ; NumberLiteral
               | <ident>                             ; Variable
               | "λ" <ident> "." <expr>              ; Abstraction: bodies are greedy
               | "(" <expr> ")" <expr>               ; Application: the argument is greedy too
               | <ident> <atom>+                     ; Application, associating by left: f a b = ((f a) b)
               | <expr> <op> <expr>                  ; BinaryOp
               | "-" <atom>                          ; Negation
               | "𝑓" "(" <expr> ")"                  ; RecursiveCall, only inside an abstraction body
```
"""

from abc import ABC


class Grammar(ABC):
    """Superclass representing any node of a lamf syntax tree. line and col are the position of its first token."""

    def __init__(self, *nodes, line=None, col=None):
        self.nodes = list(nodes)
        self.line = line
        self.col = col
        self._cls = type(self).__name__

    @property
    def expr(self):
        """Source text of this node."""
        return str(self)

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Grammar>(expr='<expr>', nodes=[
            <Grammar>(expr='<expr>', nodes=[
                ...
                <Grammar>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}(expr='{self.expr}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self.expr}')"

    def __eq__(self, other):
        return isinstance(other, type(self)) and self.expr == other.expr

    def __hash__(self):
        return hash((self._cls, self.expr))


class Expression(Grammar):
    """Any lamf expression."""

    @property
    def atomic(self):
        """Whether or not this expression prints without needing parentheses around it."""
        return True

    def wrapped(self):
        return str(self) if self.atomic else f"({self})"


class NumberLiteral(Expression):

    def __init__(self, value, **kwargs):
        super().__init__(**kwargs)
        self.value = value

    def __str__(self):
        return str(self.value)


class Variable(Expression):

    def __init__(self, name, **kwargs):
        super().__init__(**kwargs)
        self.name = name

    def __str__(self):
        return self.name


class Abstraction(Expression):
    """λparam.body. Becomes a Closure once evaluated."""

    def __init__(self, param, body, **kwargs):
        super().__init__(body, **kwargs)
        self.param = param

    @property
    def body(self):
        return self.nodes[0]

    @property
    def atomic(self):
        return False

    def __str__(self):
        return f"λ{self.param}.{self.body}"


class Application(Expression):
    """Binary application node: multi-argument application is a left-to-right chain of these."""

    def __init__(self, callee, argument, **kwargs):
        super().__init__(callee, argument, **kwargs)

    @property
    def callee(self):
        return self.nodes[0]

    @property
    def argument(self):
        return self.nodes[1]

    @property
    def atomic(self):
        return False

    def __str__(self):
        return f"({self.callee}) {self.argument}"


class BinaryOp(Expression):
    OPERATORS = ("+", "-", "*", "/", "&", "|")

    def __init__(self, operator, left, right, **kwargs):
        super().__init__(left, right, **kwargs)
        self.operator = operator

    @property
    def left(self):
        return self.nodes[0]

    @property
    def right(self):
        return self.nodes[1]

    @property
    def atomic(self):
        return False

    def __str__(self):
        return f"{self.left.wrapped()} {self.operator} {self.right.wrapped()}"


class Negation(Expression):
    """-operand. Binds tighter than any binary operator."""

    def __init__(self, operand, **kwargs):
        super().__init__(operand, **kwargs)

    @property
    def operand(self):
        return self.nodes[0]

    def __str__(self):
        return f"-{self.operand.wrapped()}"


class RecursiveCall(Expression):
    """𝑓(argument): invokes the innermost enclosing abstraction again with argument."""

    def __init__(self, argument, **kwargs):
        super().__init__(argument, **kwargs)

    @property
    def argument(self):
        return self.nodes[0]

    def __str__(self):
        return f"\U0001d453({self.argument})"


class Statement(Grammar):
    """Top-level statement. Statements run in source order."""


class Binding(Statement):
    """<name> = <expr>: writes into the global binding table."""

    def __init__(self, name, expr, **kwargs):
        super().__init__(expr, **kwargs)
        self.name = name

    @property
    def term(self):
        return self.nodes[0]

    def __str__(self):
        return f"{self.name} = {self.term}"


class ExpressionStatement(Statement):

    def __init__(self, expr, **kwargs):
        super().__init__(expr, **kwargs)

    @property
    def term(self):
        return self.nodes[0]

    def __str__(self):
        return str(self.term)
