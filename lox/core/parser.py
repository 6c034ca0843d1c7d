"""Lox parser: recursive descent, one method per precedence level, from lowest to highest.

```
program     -> declaration* EOF
declaration -> classDecl | funDecl | varDecl | statement
classDecl   -> "class" IDENT ( "<" IDENT )? "{" ( "class"? function )* "}"
funDecl     -> "fun" function
function    -> IDENT "(" parameters? ")" block
varDecl     -> "var" IDENT ( "=" expression )? ";"
statement   -> exprStmt | forStmt | ifStmt | printStmt | returnStmt | whileStmt | block

expression  -> assignment
assignment  -> ( call "." )? IDENT "=" assignment | logic_or
logic_or    -> logic_and ( "or" logic_and )*
logic_and   -> equality ( "and" equality )*
equality    -> comparison ( ( "!=" | "==" ) comparison )*
comparison  -> term ( ( ">" | ">=" | "<" | "<=" ) term )*
term        -> factor ( ( "-" | "+" ) factor )*
factor      -> unary ( ( "/" | "*" ) unary )*
unary       -> ( "!" | "-" ) unary | call
call        -> primary ( "(" arguments? ")" | "." IDENT )*
primary     -> "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENT | "(" expression ")" | "super" "." IDENT
```

Syntax errors are reported as soon as they are found. The parser then enters panic mode: it discards tokens up to the
next statement boundary and resumes, so one pass reports every independent error in a file.
"""

from lox.core import ast
from lox.core.tokens import TokenType
from lox.lang.error import ParseError


class Parser:
    """Builds a list of statements from a token list ending with EOF."""
    MAX_ARGS = 255

    # tokens that begin a new statement, used to resynchronize after an error
    BOUNDARIES = {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
    }

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    def parse(self):
        """Parses declarations until EOF. Declarations that failed to parse are left out of the result."""
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # ------------------------------------------------------------
    # declarations and statements
    # ------------------------------------------------------------

    def declaration(self):
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.FUN):
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()

        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expected class name.")

        superclass = None
        if self.match(TokenType.LESS):
            self.consume(TokenType.IDENTIFIER, "Expected superclass name.")
            superclass = ast.Variable(self.previous())

        self.consume(TokenType.LEFT_BRACE, "Expected '{' before class body.")

        methods = []
        static_methods = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            if self.match(TokenType.CLASS):
                static_methods.append(self.function("static method"))
            else:
                methods.append(self.function("method"))

        self.consume(TokenType.RIGHT_BRACE, "Expected '}' after class body.")
        return ast.Class(name, superclass, methods, static_methods)

    def function(self, kind):
        """Shared by functions, methods and static methods. kind is only used in error messages."""
        name = self.consume(TokenType.IDENTIFIER, f"Expected {kind} name.")

        self.consume(TokenType.LEFT_PAREN, f"Expected '(' after {kind} name.")
        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expected parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after parameters.")

        self.consume(TokenType.LEFT_BRACE, f"Expected '{{' before {kind} body.")
        body = self.block()
        return ast.Function(name, params, body)

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expected variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expected ';' after variable declaration.")
        return ast.Var(name, initializer)

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return ast.Block(self.block())
        return self.expression_statement()

    def for_statement(self):
        """Desugars a for loop into a while loop wrapped in blocks."""
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])
        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)
        if initializer is not None:
            body = ast.Block([initializer, body])

        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after if condition.")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenType.ELSE):  # binds to the nearest if
            else_branch = self.statement()

        return ast.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after value.")
        return ast.Print(value)

    def return_statement(self):
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expected ';' after return value.")
        return ast.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expected '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expected ')' after condition.")
        body = self.statement()

        return ast.While(condition, body)

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after expression.")
        return ast.Expression(expr)

    def block(self):
        """Parses declarations up to the closing brace. The opening brace has already been consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)

        self.consume(TokenType.RIGHT_BRACE, "Expected '}' after block.")
        return statements

    # ------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logic_or()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()  # right-associative

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            elif isinstance(expr, ast.Get):
                return ast.Set(expr.obj, expr.name, value)

            # reported, but the parser is not confused: no need for panic mode
            self.error(equals, "Invalid assignment target.")

        return expr

    def logic_or(self):
        expr = self.logic_and()

        while self.match(TokenType.OR):
            operator = self.previous()
            right = self.logic_and()
            expr = ast.Logical(expr, operator, right)

        return expr

    def logic_and(self):
        expr = self.equality()

        while self.match(TokenType.AND):
            operator = self.previous()
            right = self.equality()
            expr = ast.Logical(expr, operator, right)

        return expr

    def equality(self):
        return self._binary(self.comparison, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self._binary(self.term, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS,
                            TokenType.LESS_EQUAL)

    def term(self):
        return self._binary(self.factor, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self._binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def _binary(self, operand, *operators):
        """Left-associative binary level: operand ( operator operand )*."""
        expr = operand()

        while self.match(*operators):
            operator = self.previous()
            right = operand()
            expr = ast.Binary(expr, operator, right)

        return expr

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            right = self.unary()
            return ast.Unary(operator, right)

        return self.call()

    def call(self):
        expr = self.primary()

        while True:
            if self.match(TokenType.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expected property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= Parser.MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARGS} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expected ')' after arguments.")
        return ast.Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenType.FALSE):
            return ast.Literal(False)
        if self.match(TokenType.TRUE):
            return ast.Literal(True)
        if self.match(TokenType.NIL):
            return ast.Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return ast.Literal(self.previous().literal)

        if self.match(TokenType.SUPER):
            keyword = self.previous()
            self.consume(TokenType.DOT, "Expected '.' after 'super'.")
            method = self.consume(TokenType.IDENTIFIER, "Expected superclass method name.")
            return ast.Super(keyword, method)

        if self.match(TokenType.THIS):
            return ast.This(self.previous())

        if self.match(TokenType.IDENTIFIER):
            return ast.Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expected ')' after expression.")
            return ast.Grouping(expr)

        raise self.error(self.peek(), "Expected expression.")

    # ------------------------------------------------------------
    # token helpers
    # ------------------------------------------------------------

    def match(self, *types):
        """Consumes the current token if it has any of types."""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type, msg):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), msg)

    def check(self, token_type):
        if self.is_at_end():
            return False
        return self.peek().type is token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, msg):
        """Reports msg at token and returns (does not raise) the error, so the caller decides whether to unwind."""
        error = ParseError.at(token, msg)
        self.error_handler.report(error)
        return error

    def synchronize(self):
        """Panic mode: discards tokens until just after a ';' or just before a token that begins a statement."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in Parser.BOUNDARIES:
                return
            self.advance()
