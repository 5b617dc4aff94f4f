"""Uses the lamf lexer/parser/evaluator to interpret .lamf files or run in command-line mode. Also uses error handling
context manager. Called from the lamf console script.
"""

import argparse
import sys

from lamf.lang.error import ErrorHandler
from lamf.lang.session import Session
from lamf.lang.shell import Shell


def main(argv=None):
    """Runs lamf interpreter. Called from lamf console script. Exits with status 1 if the program fails."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="lamf")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--tree", action="store_true", help="print the syntax tree of each statement in file "
                                                                "instead of running it")
        args = parser.parse_args(argv)

        if args.tree and args.file is None:
            parser.error("--tree needs a file")

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)
            if args.tree:
                for stmt in sess.to_exec:
                    print(stmt.display())
            else:
                sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
