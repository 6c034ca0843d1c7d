"""Error handling for the Lox language. Only LoxErrors should be encountered during running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Static errors (lexical, syntax, resolution) are reported as

    [line N] Error<where>: message

and runtime errors as

    message
    [line N]
"""

import sys

from termcolor import colored

from lox.core.tokens import TokenType


class LoxError(Exception):
    """Templates a Lox error message so that it can be reported by ErrorHandler."""

    def __init__(self, msg, line, where=""):
        super().__init__(msg)
        self.msg = msg
        self.line = line
        self.where = where  # "", " at end" or " at '<lexeme>'"

    @classmethod
    def at(cls, token, msg):
        """Builds an error located at token."""
        if token.type is TokenType.EOF:
            return cls(msg, token.line, " at end")
        return cls(msg, token.line, f" at '{token.lexeme}'")

    def __str__(self):
        return f"[line {self.line}] Error{self.where}: {self.msg}"


class LexicalError(LoxError):
    """Unexpected character or unterminated string."""


class ParseError(LoxError):
    """Syntax error. Raised inside the Parser to unwind to the nearest statement boundary."""


class ResolutionError(LoxError):
    """Static scoping error found by the Resolver."""


class LoxRuntimeError(LoxError):
    """Error raised while evaluating a program. Carries the token of the operator/name that triggered it."""

    def __init__(self, token, msg):
        super().__init__(msg, token.line)
        self.token = token

    def __str__(self):
        return f"{self.msg}\n[line {self.line}]"


class ErrorHandler:
    """Context manager that reports Lox errors, keeps track of whether any occurred, and turns stray Python errors into
    diagnostics instead of tracebacks.
    """
    ERROR = "red"
    WARNING = "magenta"

    STATIC_ERROR_CODE = 65
    RUNTIME_ERROR_CODE = 70
    INTERNAL_ERROR_CODE = 1

    def __init__(self, fatal=True, stream=None, color=None):
        """stream defaults to sys.stderr at report time. color=None lets termcolor decide based on the terminal."""
        self.fatal = fatal
        self.stream = stream
        self.color = color

        self.errors = []  # every static error reported so far
        self.had_error = False
        self.had_runtime_error = False
        self.had_internal_error = False  # a Python error that is not a Lox error escaped the pipeline

    @property
    def exit_code(self):
        """Process exit code matching the errors seen so far."""
        if self.had_error:
            return ErrorHandler.STATIC_ERROR_CODE
        if self.had_runtime_error:
            return ErrorHandler.RUNTIME_ERROR_CODE
        if self.had_internal_error:
            return ErrorHandler.INTERNAL_ERROR_CODE
        return 0

    def _colored(self, text, color=None, attrs=None):
        if self.color is None:
            return colored(text, color, attrs=attrs)
        return colored(text, color, attrs=attrs, no_color=not self.color, force_color=self.color)

    def _write(self, text):
        print(text, file=self.stream if self.stream is not None else sys.stderr)

    def report(self, error):
        """Reports a static error. Scanning, parsing and resolving keep going afterwards."""
        self.errors.append(error)
        self.had_error = True

        marker = self._colored("Error", ErrorHandler.ERROR, attrs=["bold"])
        self._write(f"[line {error.line}] {marker}{error.where}: {error.msg}")

    def runtime_error(self, error):
        """Reports a runtime error. The statement being executed is abandoned by the caller."""
        self.had_runtime_error = True
        self._write(f"{self._colored(error.msg, ErrorHandler.ERROR)}\n[line {error.line}]")

    def warn(self, msg):
        """Prints a non-fatal message, e.g. when the shell drops an unfinished block at EOF."""
        self._write(self._colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + msg)

    def reset(self):
        """Forgets earlier errors, so the next interactive line starts clean."""
        self.errors = []
        self.had_error = False
        self.had_runtime_error = False
        self.had_internal_error = False

    def throw(self, msg, code, internal=False):
        """Prints an error that is not tied to a source line. Exits if this handler is fatal."""
        error_msg = ""
        if internal:
            error_msg += self._colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += self._colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + msg
        self._write(error_msg)

        if self.fatal:
            sys.exit(code)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or exc_type is SystemExit:
            return False

        if exc_type is KeyboardInterrupt:
            self.throw("keyboard interrupt", 130)
        elif exc_type is RecursionError:
            # unbounded recursion exhausts the host stack: fatal, not a language error
            self.had_runtime_error = True
            self.throw("Stack overflow.", ErrorHandler.RUNTIME_ERROR_CODE)
        elif issubclass(exc_type, LoxRuntimeError):
            self.runtime_error(exc_val)
            if self.fatal:
                sys.exit(self.exit_code)
        elif issubclass(exc_type, LoxError):
            self.report(exc_val)
            if self.fatal:
                sys.exit(self.exit_code)
        else:
            self.had_internal_error = True
            self.throw(f"unknown error: '{exc_type.__name__}: {exc_val}'", ErrorHandler.INTERNAL_ERROR_CODE,
                       internal=True)

        return True
