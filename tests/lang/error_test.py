import io
import unittest

from lox.core.tokens import Token, TokenType
from lox.lang.error import ErrorHandler, LexicalError, LoxError, LoxRuntimeError, ParseError, ResolutionError


def handler(fatal=False, color=False):
    return ErrorHandler(fatal=fatal, stream=io.StringIO(), color=color)


class LoxErrorTestCase(unittest.TestCase):

    def test_str(self):
        self.assertEqual("[line 3] Error: Unexpected character.", str(LexicalError("Unexpected character.", 3)))

        cases = {
            Token(TokenType.EOF, "", None, 2): "[line 2] Error at end: Expected expression.",
            Token(TokenType.SEMICOLON, ";", None, 5): "[line 5] Error at ';': Expected expression.",
        }
        for case, expected in cases.items():
            error = ParseError.at(case, "Expected expression.")
            self.assertIsInstance(error, ParseError)
            self.assertEqual(expected, str(error))

    def test_runtime_error(self):
        error = LoxRuntimeError(Token(TokenType.SLASH, "/", None, 4), "Division by zero.")
        self.assertIsInstance(error, LoxError)
        self.assertEqual(4, error.line)
        self.assertEqual("Division by zero.\n[line 4]", str(error))


class ErrorHandlerTestCase(unittest.TestCase):

    def test_report(self):
        error_handler = handler()
        error_handler.report(ResolutionError("Can't return from top-level code.", 1, " at 'return'"))
        error_handler.report(LexicalError("Unterminated string.", 2))

        self.assertTrue(error_handler.had_error)
        self.assertEqual(2, len(error_handler.errors))
        self.assertEqual("[line 1] Error at 'return': Can't return from top-level code.\n"
                         "[line 2] Error: Unterminated string.\n", error_handler.stream.getvalue())

    def test_exit_code(self):
        error_handler = handler()
        self.assertEqual(0, error_handler.exit_code)

        error_handler.runtime_error(LoxRuntimeError(Token(TokenType.MINUS, "-", None, 1), "Operand must be a number."))
        self.assertEqual(70, error_handler.exit_code)

        error_handler.report(LexicalError("Unexpected character.", 1))
        self.assertEqual(65, error_handler.exit_code)

        error_handler.reset()
        self.assertEqual(0, error_handler.exit_code)
        self.assertEqual([], error_handler.errors)

    def test_color(self):
        error_handler = handler(color=True)
        error_handler.report(LexicalError("Unexpected character.", 1))
        self.assertIn("\x1b[", error_handler.stream.getvalue())

        error_handler = handler(color=False)
        error_handler.warn("unknown command")
        self.assertEqual("warning: unknown command\n", error_handler.stream.getvalue())

    def test_throw(self):
        error_handler = handler()
        error_handler.throw("'x.lox' could not be opened", 66)
        self.assertEqual("error: 'x.lox' could not be opened\n", error_handler.stream.getvalue())

        error_handler = handler(fatal=True)
        with self.assertRaises(SystemExit) as cm:
            error_handler.throw("oops", 3, internal=True)
        self.assertEqual(3, cm.exception.code)
        self.assertEqual("[internal] error: oops\n", error_handler.stream.getvalue())

    def test_context_manager_suppresses(self):
        token = Token(TokenType.IDENTIFIER, "x", None, 9)
        cases = {
            LoxRuntimeError(token, "Undefined variable 'x'."): "Undefined variable 'x'.\n[line 9]\n",
            ParseError.at(token, "Expected ';' after value."): "[line 9] Error at 'x': Expected ';' after value.\n",
            ValueError("boom"): "[internal] error: unknown error: 'ValueError: boom'\n",
            RecursionError("maximum recursion depth exceeded"): "error: Stack overflow.\n",
        }
        for case, expected in cases.items():
            error_handler = handler()
            with error_handler:
                raise case
            self.assertEqual(expected, error_handler.stream.getvalue(), case)

    def test_internal_error_exit_code(self):
        error_handler = handler()
        with error_handler:
            raise KeyError("this")
        self.assertTrue(error_handler.had_internal_error)
        self.assertEqual(ErrorHandler.INTERNAL_ERROR_CODE, error_handler.exit_code)

        error_handler.reset()
        self.assertEqual(0, error_handler.exit_code)

    def test_context_manager_exits_when_fatal(self):
        token = Token(TokenType.IDENTIFIER, "x", None, 1)
        cases = {
            LoxRuntimeError(token, "Undefined variable 'x'."): 70,
            ResolutionError.at(token, "Can't read local variable in its own initializer."): 65,
            RecursionError(): 70,
            KeyboardInterrupt(): 130,
            ValueError("boom"): 1,
        }
        for case, expected in cases.items():
            with self.assertRaises(SystemExit) as cm:
                with handler(fatal=True):
                    raise case
            self.assertEqual(expected, cm.exception.code, case)

    def test_context_manager_passes_system_exit(self):
        with self.assertRaises(SystemExit):
            with handler():
                raise SystemExit(0)


if __name__ == '__main__':
    unittest.main()
