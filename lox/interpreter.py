"""Lox interpreter.

Basic program flow:
    1. Scanner: turns source text into a flat list of tokens (lox/core/scanner.py)
    2. Parser: recursive descent over the tokens, producing statement/expression nodes (lox/core/parser.py)
        - For the grammar rules, see the module docstring of lox/core/parser.py
    3. Resolver: walks the produced AST once to compute, for each local variable reference, how many scopes away its
       declaration is (lox/core/resolver.py)
        - Will fail on static errors such as returning from top-level code
    4. Interpreter: not a compiler, so it just walks the AST and executes on the fly (lox/core/interpreter.py)

Any lexical, syntax or resolution error stops the unit before step 4. Session (lox/lang/session.py) drives the steps
and ErrorHandler (lox/lang/error.py) reports what goes wrong.
"""

import io

from lox.lang.error import ErrorHandler
from lox.lang.session import Session


def run(source, out=None, error_handler=None):
    """Runs source once in a fresh session. Returns (exit code, error handler).

    If out is None, printed output goes to sys.stdout; diagnostics go to error_handler (by default an uncolored,
    non-fatal handler writing to an in-memory stream).
    """
    if error_handler is None:
        error_handler = ErrorHandler(fatal=False, stream=io.StringIO(), color=False)

    sess = Session(error_handler, Session.SH_FILE, cmd_line=True, out=out)
    with error_handler:
        if sess.add(source):
            sess.run()

    return error_handler.exit_code, error_handler
