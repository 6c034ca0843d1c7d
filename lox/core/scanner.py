"""Lexical analysis for the Lox language: a single left-to-right, maximal-munch pass over the source text.

Scanning never aborts. Every unexpected character and unterminated string is reported to the error handler and the
scanner carries on, so one pass reports all lexical errors in a file.
"""

from lox.core.tokens import KEYWORDS, Token, TokenType
from lox.lang.error import LexicalError
from lox.lang.numerical import number


class Scanner:
    """Converts source text into a flat list of Tokens ending with an EOF token."""
    SINGLE = {
        "(": TokenType.LEFT_PAREN,
        ")": TokenType.RIGHT_PAREN,
        "{": TokenType.LEFT_BRACE,
        "}": TokenType.RIGHT_BRACE,
        ",": TokenType.COMMA,
        ".": TokenType.DOT,
        "-": TokenType.MINUS,
        "+": TokenType.PLUS,
        ";": TokenType.SEMICOLON,
        "*": TokenType.STAR,
    }

    # char: (token if followed by '=', token otherwise)
    DOUBLE = {
        "!": (TokenType.BANG_EQUAL, TokenType.BANG),
        "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
        "<": (TokenType.LESS_EQUAL, TokenType.LESS),
        ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
    }

    WHITESPACE = " \r\t"

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0    # first character of the lexeme being scanned
        self.current = 0  # character about to be consumed
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source. Returns the token list, which always ends with EOF."""
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    def scan_token(self):
        char = self.advance()

        if char in Scanner.SINGLE:
            self.add_token(Scanner.SINGLE[char])

        elif char in Scanner.DOUBLE:
            matched, single = Scanner.DOUBLE[char]
            self.add_token(matched if self.match("=") else single)

        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.is_at_end():  # comment runs to end of line
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)

        elif char in Scanner.WHITESPACE:
            pass

        elif char == "\n":
            self.line += 1

        elif char == "\"":
            self.string()

        elif self.is_digit(char):
            self.number()

        elif self.is_alpha(char):
            self.identifier()

        else:
            self.error("Unexpected character.")

    def string(self):
        while self.peek() != "\"" and not self.is_at_end():
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.is_at_end():
            self.error("Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while self.is_digit(self.peek()):
            self.advance()

        # only a '.' followed by a digit belongs to the number, so "1.foo" stays NUMBER DOT IDENTIFIER
        if self.peek() == "." and self.is_digit(self.peek_next()):
            self.advance()
            while self.is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, number(self.source[self.start:self.current]))

    def identifier(self):
        while self.is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def match(self, expected):
        """Consumes the next character only if it is expected."""
        if self.is_at_end() or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        if self.is_at_end():
            return "\0"
        return self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def advance(self):
        char = self.source[self.current]
        self.current += 1
        return char

    def is_at_end(self):
        return self.current >= len(self.source)

    def add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))

    def error(self, msg):
        self.error_handler.report(LexicalError(msg, self.line))

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"

    @staticmethod
    def is_alpha(char):
        return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"

    @staticmethod
    def is_alphanumeric(char):
        return Scanner.is_alpha(char) or Scanner.is_digit(char)
