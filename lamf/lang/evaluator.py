"""Evaluation of lamf statements and expressions.

Application binds the argument in a child of the closure's captured scope and evaluates the body there. An
abstraction whose parameter is named after a built-in (`λprint. ...`) delivers its body's result to that built-in.

𝑓(x) re-applies the closure whose body is being evaluated. When the body is a 𝑓 call, x is delivered like a body
result and then becomes the next argument, until it is 0: that ends the recursion with HALT. The re-application is a
loop in apply(), so countdowns of any length run in constant host stack. A 𝑓 call anywhere else in a body goes
through the host stack.

HALT is an ordinary value. An application whose callee or argument is HALT, or a binary operation with a HALT
operand, evaluates to HALT without doing anything else.
"""

from lamf.lang.abstractions import BuiltinAbstractions
from lamf.lang.error import DivisionByZero, GenericException, ValueKindError
from lamf.lang.values import BUILTIN_NAMES, HALT, Builtin, Closure, Num, Scope, is_zero
from lamf.pure.grammar import (Abstraction, Application, BinaryOp, Binding, ExpressionStatement, NumberLiteral,
                               Negation, RecursiveCall, Variable)


OPERATIONS = {
    "+": lambda left, right: left + right,
    "-": lambda left, right: left - right,
    "*": lambda left, right: left * right,
    "/": lambda left, right: left // right,
    "&": lambda left, right: left & right,
    "|": lambda left, right: left | right,
}


class Evaluator:
    """Runs lamf statements. Owns the global binding table (self.scope), so independent runs don't share state."""

    def __init__(self, abstractions=None, scope=None):
        self.abstractions = abstractions if abstractions is not None else BuiltinAbstractions()
        self.scope = scope if scope is not None else Scope()

    def run(self, statements):
        """Executes statements in order. Returns the value of each."""
        return [self.execute(statement) for statement in statements]

    def execute(self, statement):
        """Executes a single top-level statement and returns its value. Bindings store HALT like any other value."""
        if isinstance(statement, Binding):
            value = self.evaluate(statement.term, self.scope)
            self.scope.define(statement.name, value)
            return value
        elif isinstance(statement, ExpressionStatement):
            return self.evaluate(statement.term, self.scope)
        raise GenericException("cannot execute '{}'", repr(statement), internal=True)

    def evaluate(self, expr, scope, frame=None):
        """Returns the value of expr in scope. frame is the closure whose body is being evaluated, if any."""
        try:
            if isinstance(expr, NumberLiteral):
                return Num(expr.value)

            elif isinstance(expr, Variable):
                return scope.lookup(expr.name)

            elif isinstance(expr, Abstraction):
                return Closure(expr.param, expr.body, scope)

            elif isinstance(expr, BinaryOp):
                return self.binary(expr, scope, frame)

            elif isinstance(expr, Negation):
                operand = self.evaluate(expr.operand, scope, frame)
                if operand is HALT:
                    return HALT
                if not isinstance(operand, Num):
                    raise ValueKindError("'-' needs a whole number, got '{}'", str(operand))
                return Num(-operand.value)

            elif isinstance(expr, Application):
                callee = self.evaluate(expr.callee, scope, frame)
                if callee is HALT:
                    return HALT  # the argument is never evaluated
                argument = self.evaluate(expr.argument, scope, frame)
                return self.apply(callee, argument)

            elif isinstance(expr, RecursiveCall):
                if frame is None:
                    raise GenericException("'𝑓' evaluated outside of an abstraction", internal=True)
                argument = self.step(frame, self.evaluate(expr.argument, scope, frame))
                return self.apply(frame, argument)

        except GenericException as error:
            raise error.at(expr.line, expr.col, len(str(expr)) if expr.line else 1)

        raise GenericException("cannot evaluate '{}'", repr(expr), internal=True)

    def binary(self, expr, scope, frame):
        left = self.evaluate(expr.left, scope, frame)
        right = self.evaluate(expr.right, scope, frame)
        if left is HALT or right is HALT:
            return HALT

        for operand in (left, right):
            if not isinstance(operand, Num):
                raise ValueKindError("'{}' needs whole numbers, got '{}'", (expr.operator, operand))

        if expr.operator == "/" and right.value == 0:
            raise DivisionByZero("division by zero in '{}'", str(expr))
        return Num(OPERATIONS[expr.operator](left.value, right.value))

    def apply(self, callee, argument):
        """Applies callee to argument (both already evaluated)."""
        if callee is HALT or argument is HALT:
            return HALT

        if isinstance(callee, Builtin):
            return self.abstractions.call(callee.tag, argument)

        if not isinstance(callee, Closure):
            raise ValueKindError("'{}' is not an abstraction and cannot be applied", str(callee))

        while argument is not HALT:
            scope = callee.scope.child(callee.param, argument)

            if not isinstance(callee.body, RecursiveCall):
                return self.deliver(callee, self.evaluate(callee.body, scope, callee))

            try:
                value = self.evaluate(callee.body.argument, scope, callee)
            except GenericException as error:
                raise error.at(callee.body.line, callee.body.col, len(str(callee.body)))
            argument = self.step(callee, value)

        return HALT

    def step(self, closure, value):
        """One 𝑓 iteration of closure with value: delivers value, then returns the next argument (HALT at 0)."""
        if value is HALT:
            return HALT
        if not isinstance(value, Num):
            raise ValueKindError("'𝑓' takes a whole number, got '{}'", str(value))

        self.deliver(closure, value)
        return HALT if is_zero(value) else value

    def deliver(self, closure, result):
        """Passes result to the built-in closure's parameter is named after, if any."""
        if result is HALT or closure.param not in BUILTIN_NAMES:
            return result
        return self.abstractions.call(BUILTIN_NAMES[closure.param], result)
