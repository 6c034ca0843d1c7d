"""Runs .lox files or starts the interactive shell, using the error handling context manager. Called from the lox
console script.

Exit codes: 0 on success, 65 if a lexical, syntax or resolution error occurred, 70 if a runtime error occurred.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler
from lox.lang.session import Session
from lox.lang.shell import Shell


def main(argv=None):
    """Runs lox interpreter. Returns the process exit code."""
    parser = argparse.ArgumentParser(prog="lox", description="Lox tree-walking interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--tokens", action="store_true", help="print the scanned tokens of file instead of running it")
    parser.add_argument("--no-color", action="store_true", help="do not color diagnostics")
    args = parser.parse_args(argv)

    with ErrorHandler(color=False if args.no_color else None) as error_handler:
        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)

            if args.tokens:
                for token in sess.tokens:
                    print(token)
            elif not error_handler.had_error:
                sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()
            error_handler.reset()  # errors in the shell never change its exit code

    return error_handler.exit_code


if __name__ == "__main__":
    sys.exit(main())
