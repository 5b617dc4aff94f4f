"""Runtime values and scopes of the lamf language.

A value is a whole number (Num), a Closure, one of the five Builtin abstractions, or the HALT signal. Scopes are
chained: lookups walk from the innermost scope outwards, and names nothing binds fall through to the built-in
abstractions.
"""

from dataclasses import dataclass
from enum import Enum

from lamf.lang.error import NameResolutionError


class Tag(Enum):
    """The closed set of built-in abstractions. Values are the reserved names."""
    ASCII = "ascii"
    PRINT = "print"
    INPUT = "input"
    TIME = "time"
    SLEEP = "sleep"


BUILTIN_NAMES = {tag.value: tag for tag in Tag}


class Value:
    """Superclass of all lamf runtime values."""


@dataclass(frozen=True)
class Num(Value):
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(eq=False)
class Closure(Value):
    """An abstraction bundled with the scope it was evaluated in. Applying it never writes into scope: the parameter
    is bound in a fresh child scope. The closure is also its own recursion target for 𝑓.
    """
    param: str
    body: object
    scope: "Scope"

    def __str__(self):
        return f"λ{self.param}.{self.body}"


@dataclass(frozen=True)
class Builtin(Value):
    tag: Tag

    def __str__(self):
        return f"<builtin {self.tag.value}>"


class Halt(Value):
    """The signal produced when a 𝑓 recursion terminates. Anything that would consume it is skipped instead."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "HALT"

    __str__ = __repr__


HALT = Halt()


def is_zero(value):
    return isinstance(value, Num) and value.value == 0


class Scope:
    """One link of a scope chain. The global scope is the only one written after creation: by top-level bindings."""

    def __init__(self, bindings=None, parent=None):
        self.bindings = dict(bindings) if bindings else {}
        self.parent = parent

    def child(self, name, value):
        """Returns a new scope binding name to value, chained to this one."""
        return Scope({name: value}, self)

    def define(self, name, value):
        self.bindings[name] = value

    def lookup(self, name):
        """Returns the value bound to name, walking outwards. Unbound reserved names resolve to their Builtin."""
        scope = self
        while scope is not None:
            if name in scope.bindings:
                return scope.bindings[name]
            scope = scope.parent

        if name in BUILTIN_NAMES:
            return Builtin(BUILTIN_NAMES[name])
        raise NameResolutionError("unbound name '{}'", name)

    def __repr__(self):
        names = ", ".join(self.bindings)
        return f"Scope([{names}], parent={'yes' if self.parent else 'no'})"
