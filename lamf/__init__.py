"""lamf: an interpreter for a small lambda calculus with numbers, five built-in effectful abstractions and a
self-recursion construct that ends in a HALT signal.
"""

__version__ = "0.1.0"
