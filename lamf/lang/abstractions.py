"""The five built-in abstractions: ascii, print, input, time and sleep. Each takes exactly one whole number and returns
one. Output goes to a binary stream (ascii writes raw bytes) and is flushed after every call, so that it interleaves
correctly with diagnostics and with input prompts.
"""

import sys
import time

from lamf.lang.error import BuiltinContractError, InputError
from lamf.lang.values import Num, Tag


class BuiltinAbstractions:
    """Dispatches calls of Builtin values. stdin is a text stream, stdout a binary one; both default to the process'
    standard streams, looked up on each use.
    """

    def __init__(self, stdin=None, stdout=None):
        self._stdin = stdin
        self._stdout = stdout

        self.dispatch = {
            Tag.ASCII: self.ascii,
            Tag.PRINT: self.print,
            Tag.INPUT: self.input,
            Tag.TIME: self.time,
            Tag.SLEEP: self.sleep,
        }

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout.buffer

    def call(self, tag, value):
        """Calls built-in tag with value, which must be a Num. Returns the resulting Num."""
        if not isinstance(value, Num):
            raise BuiltinContractError("'{}' takes a whole number, got '{}'", (tag.value, value))
        return Num(self.dispatch[tag](value.value))

    def write(self, data):
        self.stdout.write(data)
        self.stdout.flush()

    def ascii(self, code):
        if not 0 <= code <= 255:
            raise BuiltinContractError("'ascii' takes a character code from 0 to 255, got '{}'", str(code))
        self.write(bytes([code]))
        return code

    def print(self, number):
        self.write(str(number).encode("ascii"))
        return number

    def input(self, mode):
        if mode == 0:
            char = self.stdin.read(1)
            if not char:
                raise InputError("'input' reached the end of standard input")
            return ord(char)

        elif mode == 1:
            line = self.stdin.readline()
            if not line:
                raise InputError("'input' reached the end of standard input")
            try:
                return int(line.strip())
            except ValueError:
                raise InputError("'input' expected a whole number, got '{}'", line.strip())

        raise BuiltinContractError("'input' takes 0 (character) or 1 (number), got '{}'", str(mode))

    @staticmethod
    def time(__):
        """Returns Unix epoch time in milliseconds: the unit sleep takes."""
        return int(time.time() * 1000)

    @staticmethod
    def sleep(millis):
        if millis < 0:
            raise BuiltinContractError("'sleep' takes a non-negative number of milliseconds, got '{}'", str(millis))
        time.sleep(millis / 1000)
        return millis
