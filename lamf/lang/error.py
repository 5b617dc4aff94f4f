"""Error handling for the lamf language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every error is fatal to the program being run. Diagnostics (and warnings) are written to stderr, because stdout
belongs to the program's ascii/print output.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a lamf error/warning. exprs are formatted
    into msg in bold; line and col point at the offending source position, if known.
    """
    kind = "runtime"

    def __init__(self, msg, exprs=None, line=None, col=None, length=1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))  # color expr snippets

        self.line = line
        self.col = col
        self.length = max(length, 1)  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal

    def at(self, line, col, length=1):
        """Attaches a source position if the error does not carry one yet. Returns self, so it can be re-raised."""
        if self.line is None:
            self.line, self.col, self.length = line, col, max(length, 1)
        return self


class LexicalError(GenericException):
    kind = "lexical"


class ParseError(GenericException):
    kind = "syntax"


class NameResolutionError(GenericException):
    kind = "name"


class DivisionByZero(GenericException):
    kind = "arithmetic"


class ValueKindError(GenericException):
    """A value of the wrong kind reached an operation: a number applied as a function, a closure used in arithmetic.
    """
    kind = "type"


class BuiltinContractError(GenericException):
    kind = "builtin"


class InputError(GenericException):
    kind = "input"


class ErrorHandler:
    """Context manager that reports lamf errors raised inside it, and unexpected Python errors as internal ones. Exits
    with status 1 when fatal, otherwise suppresses the error and lets the caller continue.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.traceback = {}
        self.sources = {}

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stderr)

    def register_file(self, path):
        """Starts tracking path, with no current line."""
        self.traceback[path] = (None, None)

    def register_source(self, path, source, line_num=1):
        """Keeps the lines of source, whose first line is line_num, so diagnostics can quote the offending line."""
        lines = self.sources.setdefault(path, {})
        for offset, line in enumerate(source.splitlines()):
            lines[line_num + offset] = line

    def register_line(self, path, line_num):
        """Registers line_num in traceback given path. Should be called prior to Session run."""
        self.traceback[path] = (line_num, self.source_line(path, line_num))

    def remove_line(self, path):
        """Clears the current line of path once its statement has run."""
        self.traceback[path] = (None, None)

    def source_line(self, path, line_num):
        """Returns line line_num (1-based) of the source registered for path, or None."""
        return self.sources.get(path, {}).get(line_num)

    @staticmethod
    def diagnose(error, line, warning=False):
        """Returns line with the offending part of it highlighted and bolded, and a marker underneath."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start = error.col - 1
        end = min(start + error.length, max(len(line), start + 1))

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self, error):
        """Returns (file, line_num, col) describing where error happened, falling back on the registered line."""
        file, line_num, col = "<unknown>", error.line, error.col
        for path, (registered_num, __) in self.traceback.items():
            file = path
            if line_num is None:
                line_num = registered_num
        return file, line_num, col

    def _header(self, error, label, color):
        file, line_num, col = self._location(error)
        location = file
        if line_num is not None:
            location += f":{line_num}"
            if col is not None:
                location += f":{col}"
        return colored(f"{location}: ", attrs=["bold"]) + colored(label, color, attrs=["bold"])

    def warn(self, *args, **kwargs):
        """Prints a warning built like a GenericException from args. Warnings never stop the run."""
        error = GenericException(*args, **kwargs)
        self._print(self._header(error, "warning: ", ErrorHandler.WARNING) + error.msg)

        file, line_num, __ = self._location(error)
        line = self.source_line(file, line_num)
        if not error.internal and error.diagnosis and line is not None and error.col is not None:
            self._print(ErrorHandler.diagnose(error, line, warning=True))

    def throw(self, error):
        """Reports error, a GenericException, at its own position or else at the line registered in self.traceback.
        Exits with status 1 if fatal.
        """
        error_msg = ""
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += self._header(error, f"error[{error.kind}]: ", ErrorHandler.ERROR) + error.msg
        self._print(error_msg)

        file, line_num, __ = self._location(error)
        line = self.source_line(file, line_num)

        if not error.internal and error.diagnosis and line is not None and error.col is not None:
            self._print(ErrorHandler.diagnose(error, line))

        if self.fatal:
            sys.exit(1)
        self.traceback = {path: (None, None) for path in self.traceback}  # if error occurred, reset traceback

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
