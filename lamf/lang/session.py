"""Session control for the lamf language: loading a .lamf file, or accumulating lines typed into the shell, and running
them statement by statement against one Evaluator.
"""

from lamf.lang.error import GenericException
from lamf.lang.evaluator import Evaluator
from lamf.lang.values import BUILTIN_NAMES
from lamf.pure.grammar import Binding
from lamf.pure.lexical import tokenize
from lamf.pure.parser import parse


class Session:
    """Governs a lamf session, with control over the global binding table."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, abstractions=None):
        self.error_handler = error_handler

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.evaluator = Evaluator(abstractions)
        self.to_exec = []    # statements added but not run yet
        self.results = []    # list of (statement, value) of executed statements

        if self.cmd_line:
            self.error_handler.fatal = False
        self.error_handler.register_file(path)

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except (OSError, UnicodeDecodeError):
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            self.add(source)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Preprocesses a line from the command-line: strips comments and joins it onto add_to_prev, the unfinished
        lines before it. Returns updated value of line and whether the line continues (a parenthesis is still open).
        """
        if "//" in line:
            line = line[:line.index("//")]  # get rid of comments

        line = line.rstrip()
        if add_to_prev:
            line = add_to_prev + "\n" + line

        return line, line.count("(") > line.count(")")

    def add(self, source, line_num=1):
        """Tokenizes and parses source, whose first line is line line_num. Statements are run when run is called."""
        self.error_handler.register_source(self.path, source, line_num)

        statements = parse(tokenize(source, line_num))
        self.to_exec.extend(statements)
        return statements

    def run(self):
        """Runs this session's pending statements in order. Will raise any errors that are encountered; statements
        before the failing one keep their effects.
        """
        while self.to_exec:
            stmt = self.to_exec.pop(0)
            self.error_handler.register_line(self.path, stmt.line)

            if isinstance(stmt, Binding) and stmt.name in BUILTIN_NAMES:
                self.error_handler.warn("binding '{}' shadows the built-in abstraction", stmt.name,
                                        line=stmt.line, col=stmt.col, length=len(stmt.name))

            try:
                value = self.evaluator.execute(stmt)
            except (GenericException, RecursionError):
                if self.cmd_line:
                    self.to_exec = []  # drop the rest of the failed input
                raise

            self.results.append((stmt, value))
            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the (statement, value) pair of the last executed statement."""
        return self.results.pop()
