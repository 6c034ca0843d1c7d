import io
import unittest

from lox.core.scanner import Scanner
from lox.core.tokens import TokenType
from lox.lang.error import ErrorHandler, LexicalError


def scan(source):
    error_handler = ErrorHandler(fatal=False, stream=io.StringIO(), color=False)
    return Scanner(source, error_handler).scan_tokens(), error_handler


def types(source):
    tokens, __ = scan(source)
    return [token.type for token in tokens]


class ScannerTestCase(unittest.TestCase):

    def test_operators(self):
        cases = {
            "(){},.-+;*/": [TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
                            TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS, TokenType.SEMICOLON,
                            TokenType.STAR, TokenType.SLASH],
            "! != = == < <= > >=": [TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL,
                                    TokenType.LESS, TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL],
            "!==": [TokenType.BANG_EQUAL, TokenType.EQUAL],
            "===": [TokenType.EQUAL_EQUAL, TokenType.EQUAL],
            "<>": [TokenType.LESS, TokenType.GREATER],
        }
        for case, expected in cases.items():
            self.assertEqual(expected + [TokenType.EOF], types(case), case)

    def test_comments_and_whitespace(self):
        cases = {
            "// nothing here": [],
            "1 // trailing\n2": [TokenType.NUMBER, TokenType.NUMBER],
            "\t \r\n": [],
            "a / b": [TokenType.IDENTIFIER, TokenType.SLASH, TokenType.IDENTIFIER],
        }
        for case, expected in cases.items():
            self.assertEqual(expected + [TokenType.EOF], types(case), case)

    def test_numbers(self):
        cases = {"123": 123.0, "1.5": 1.5, "0.25": 0.25, "007": 7.0}
        for case, expected in cases.items():
            tokens, __ = scan(case)
            self.assertIs(TokenType.NUMBER, tokens[0].type, case)
            self.assertEqual(expected, tokens[0].literal, case)
            self.assertEqual(case, tokens[0].lexeme, case)

    def test_trailing_dot_not_swallowed(self):
        self.assertEqual([TokenType.NUMBER, TokenType.DOT, TokenType.IDENTIFIER, TokenType.EOF], types("1.foo"))
        self.assertEqual([TokenType.NUMBER, TokenType.DOT, TokenType.EOF], types("1."))
        self.assertEqual([TokenType.DOT, TokenType.NUMBER, TokenType.EOF], types(".5"))

    def test_strings(self):
        tokens, error_handler = scan("\"hello\" \"\"")
        self.assertEqual(["hello", ""], [token.literal for token in tokens[:2]])
        self.assertEqual("\"hello\"", tokens[0].lexeme)
        self.assertFalse(error_handler.had_error)

    def test_multiline_string(self):
        tokens, __ = scan("\"a\nb\" x")
        self.assertEqual("a\nb", tokens[0].literal)
        self.assertEqual(2, tokens[1].line)

    def test_keywords_and_identifiers(self):
        cases = {
            "and": TokenType.AND, "class": TokenType.CLASS, "else": TokenType.ELSE, "false": TokenType.FALSE,
            "for": TokenType.FOR, "fun": TokenType.FUN, "if": TokenType.IF, "nil": TokenType.NIL,
            "or": TokenType.OR, "print": TokenType.PRINT, "return": TokenType.RETURN, "super": TokenType.SUPER,
            "this": TokenType.THIS, "true": TokenType.TRUE, "var": TokenType.VAR, "while": TokenType.WHILE,
            "orchid": TokenType.IDENTIFIER, "_private": TokenType.IDENTIFIER, "x1": TokenType.IDENTIFIER,
            "Class": TokenType.IDENTIFIER,
        }
        for case, expected in cases.items():
            self.assertEqual([expected, TokenType.EOF], types(case), case)

    def test_lines(self):
        tokens, __ = scan("a\nb\n\nc")
        self.assertEqual([1, 2, 4, 4], [token.line for token in tokens])

    def test_errors_are_collected(self):
        tokens, error_handler = scan("@ var # x = \"open")
        self.assertEqual([TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.EOF],
                         [token.type for token in tokens])

        self.assertTrue(error_handler.had_error)
        self.assertTrue(all(isinstance(error, LexicalError) for error in error_handler.errors))
        self.assertEqual(["Unexpected character.", "Unexpected character.", "Unterminated string."],
                         [error.msg for error in error_handler.errors])

    def test_error_format(self):
        __, error_handler = scan("\n\n  ^")
        self.assertEqual("[line 3] Error: Unexpected character.\n", error_handler.stream.getvalue())

    def test_always_ends_with_eof(self):
        should_pass = ["", "   ", "\"unterminated", "var x;"]
        for case in should_pass:
            tokens, __ = scan(case)
            self.assertIs(TokenType.EOF, tokens[-1].type, case)

    def test_token_str(self):
        tokens, __ = scan("var x = 1;")
        self.assertEqual(["VAR var null", "IDENTIFIER x null", "EQUAL = null", "NUMBER 1 1.0", "SEMICOLON ; null",
                          "EOF  null"], [str(token) for token in tokens])


if __name__ == '__main__':
    unittest.main()
