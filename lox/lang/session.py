"""Session control for the Lox language: runs source through the whole pipeline, either once for a file or line by line
for the interactive shell. Global state persists across every unit a session runs.
"""

from lox.core.interpreter import Interpreter
from lox.core.parser import Parser
from lox.core.resolver import Resolver
from lox.core.scanner import Scanner
from lox.lang.error import LoxRuntimeError


class Session:
    """Governs a Lox session, with one interpreter (and so one global scope) for its whole lifetime."""
    SH_FILE = "<in>"  # command-line interpreter filename

    # exit codes for problems outside the program itself (sysexits.h)
    USAGE_ERROR_CODE = 64
    NO_INPUT_CODE = 66

    def __init__(self, error_handler, path, cmd_line, out=None):
        self.error_handler = error_handler

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.interpreter = Interpreter(out)
        self.tokens = []   # tokens of the last unit added
        self.to_exec = []  # resolved statements waiting for run

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    source = file.read()
            except (OSError, UnicodeDecodeError):
                self.error_handler.throw(f"'{path}' could not be opened", Session.NO_INPUT_CODE)
                return

            self.add(source)

        elif not cmd_line:
            self.error_handler.throw(f"'{Session.SH_FILE}' is a reserved filename", Session.USAGE_ERROR_CODE)

    @staticmethod
    def preprocess_line(line, pending=""):
        """Joins line to the pending (unfinished) input. Returns the joined source and whether it still needs more lines,
        i.e. whether braces or parentheses are left open.
        """
        source = pending + line + "\n"

        code = "\n".join(text.split("//")[0] for text in source.split("\n"))  # comments may hold stray brackets
        unbalanced = code.count("{") > code.count("}") or code.count("(") > code.count(")")
        return source, unbalanced

    def add(self, source):
        """Scans, parses and resolves source. Its statements are queued for run only if no static error was reported
        along the way. Returns whether they were queued.
        """
        self.tokens = Scanner(source, self.error_handler).scan_tokens()
        statements = Parser(self.tokens, self.error_handler).parse()
        if self.error_handler.had_error:
            return False

        Resolver(self.interpreter, self.error_handler).resolve(statements)
        if self.error_handler.had_error:
            return False

        self.to_exec.extend(statements)
        return True

    def run(self):
        """Executes the queued statements. The first runtime error is reported and the rest of the queue is dropped;
        output already produced stays.
        """
        statements, self.to_exec = self.to_exec, []
        try:
            self.interpreter.interpret(statements)
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)
