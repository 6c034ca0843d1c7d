"""Static variable resolution. Runs once over the parsed program, after parsing and before any execution.

For every local variable reference, the Resolver counts the scopes between the reference and the declaration, and
hands (node, distance) to the Interpreter. References it cannot find are left out and treated as globals at runtime.
It creates exactly the scopes the Interpreter creates (one per block, one per call, one for 'this' on each bound
method and one for 'super' in each subclass), which is what keeps the two in agreement.
"""

from enum import Enum, auto

from lox.core import ast
from lox.lang.error import ResolutionError


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()
    STATIC = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Walks statements and expressions, reporting static errors and recording local distances in the Interpreter."""

    def __init__(self, interpreter, error_handler):
        self.interpreter = interpreter
        self.error_handler = error_handler

        self.scopes = []  # innermost last; name: whether its initializer has been resolved
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        self.in_static_method = False  # stays set inside functions nested in a static method

    def resolve(self, statements):
        for stmt in statements:
            self.resolve_stmt(stmt)

    # ------------------------------------------------------------
    # statements
    # ------------------------------------------------------------

    def resolve_stmt(self, stmt):
        if isinstance(stmt, ast.Block):
            self.begin_scope()
            self.resolve(stmt.statements)
            self.end_scope()

        elif isinstance(stmt, ast.Class):
            self.resolve_class(stmt)

        elif isinstance(stmt, ast.Var):
            # declare, resolve, define: reading the variable inside its own initializer is detectable
            self.declare(stmt.name)
            if stmt.initializer is not None:
                self.resolve_expr(stmt.initializer)
            self.define(stmt.name)

        elif isinstance(stmt, ast.Function):
            # defined before the body, so the function can refer to itself recursively
            self.declare(stmt.name)
            self.define(stmt.name)
            self.resolve_function(stmt, FunctionType.FUNCTION)

        elif isinstance(stmt, (ast.Expression, ast.Print)):
            self.resolve_expr(stmt.expression)

        elif isinstance(stmt, ast.If):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self.resolve_stmt(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            self.resolve_expr(stmt.condition)
            self.resolve_stmt(stmt.body)

        elif isinstance(stmt, ast.Return):
            if self.current_function is FunctionType.NONE:
                self.error(stmt.keyword, "Can't return from top-level code.")

            if stmt.value is not None:
                if self.current_function is FunctionType.INITIALIZER:
                    self.error(stmt.keyword, "Can't return a value from an initializer.")
                self.resolve_expr(stmt.value)

        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def resolve_class(self, stmt):
        enclosing_class = self.current_class
        enclosing_static = self.in_static_method
        self.current_class = ClassType.CLASS
        self.in_static_method = False  # a class declared inside a static method has its own 'this'

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.name.lexeme == stmt.superclass.name.lexeme:
                self.error(stmt.superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self.resolve_expr(stmt.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.in_static_method = True
        for method in stmt.static_methods:
            self.resolve_function(method, FunctionType.STATIC)
        self.in_static_method = False

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self.resolve_function(method, kind)

        self.end_scope()

        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class
        self.in_static_method = enclosing_static

    def resolve_function(self, function, kind):
        """Resolves a function body once, at its declaration, in a new scope holding its parameters."""
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    # ------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------

    def resolve_expr(self, expr):
        if isinstance(expr, ast.Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.error(expr.name, "Can't read local variable in its own initializer.")
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, ast.Assign):
            self.resolve_expr(expr.value)
            self.resolve_local(expr, expr.name)

        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self.resolve_expr(expr.left)
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Unary):
            self.resolve_expr(expr.right)

        elif isinstance(expr, ast.Grouping):
            self.resolve_expr(expr.expression)

        elif isinstance(expr, ast.Call):
            self.resolve_expr(expr.callee)
            for argument in expr.arguments:
                self.resolve_expr(argument)

        elif isinstance(expr, ast.Get):
            self.resolve_expr(expr.obj)  # property names are looked up dynamically

        elif isinstance(expr, ast.Set):
            self.resolve_expr(expr.value)
            self.resolve_expr(expr.obj)

        elif isinstance(expr, ast.This):
            if self.current_class is ClassType.NONE:
                self.error(expr.keyword, "Can't use 'this' outside of a class.")
                return
            if self.in_static_method:
                self.error(expr.keyword, "Can't use 'this' in a static method.")
                return
            self.resolve_local(expr, expr.keyword)

        elif isinstance(expr, ast.Super):
            if self.current_class is ClassType.NONE:
                self.error(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class is not ClassType.SUBCLASS:
                self.error(expr.keyword, "Can't use 'super' in a class with no superclass.")
            elif self.in_static_method:
                self.error(expr.keyword, "Can't use 'super' in a static method.")
                return
            self.resolve_local(expr, expr.keyword)

        elif isinstance(expr, ast.Literal):
            pass

        else:
            raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def resolve_local(self, expr, name):
        """Records how many scopes out from the innermost one name was declared. Not found means global."""
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return

    # ------------------------------------------------------------
    # scopes
    # ------------------------------------------------------------

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        """Adds name to the innermost scope, marked as not ready yet. Globals are not tracked."""
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error(name, "There is already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def error(self, token, msg):
        self.error_handler.report(ResolutionError.at(token, msg))
