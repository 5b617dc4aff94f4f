"""Handles interactive/command-line mode for lamf interpreter. Uses cmd as backend."""

import cmd

from lamf.lang.values import HALT
from lamf.pure.grammar import ExpressionStatement


class Shell(cmd.Cmd):
    """lamf interpreter shell."""
    intro = "lamf interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # shown while parentheses are still open
    _tmp_prompt = "> "       # restored once the statement is complete

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self._first_line = 0
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary lamf statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            if not self._tmp_line:
                self._first_line = self.line_num

            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if not line.strip():
                return

            self.sess.results = []
            self.sess.add(line, self._first_line)
            self.sess.run()

            for stmt, value in self.sess.results:
                if isinstance(stmt, ExpressionStatement) and value is not HALT:
                    self.stdout.write(f"\n=> {value}\n")
            self.stdout.flush()
            self.sess.results = []

    def onecmd(self, line):
        """Sends every line to default, except the shell's own commands."""
        self.line_num += 1
        command = line.strip()
        if command in ("help", "?", "exit", "EOF"):
            return super().onecmd(command)
        if not command and not self._tmp_line:
            return self.emptyline()
        return self.default(line)

    def do_help(self, arg):
        """Prints a short tour of the language instead of the command list."""
        self.stdout.write("Welcome to the lamf interpreter!\n\n"
                          "Abstractions are written 'λx. body' and applied by juxtaposition: '(λv. v + 1) 10'.\n"
                          "An abstraction whose parameter is ascii, print, input, time or sleep hands its result\n"
                          "to that built-in: try '(λprint. print) 42'. Inside an abstraction, '𝑓(n)' runs it again\n"
                          "with n, until n is 0: try '(λprint. 𝑓(print - 1)) 10'.\n")

    def emptyline(self):
        """An empty line does nothing (cmd.Cmd would repeat the last one)."""
        return ""

    def do_EOF(self, arg):
        """Ends the session at end of input."""
        self.stdout.write("\n")
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
