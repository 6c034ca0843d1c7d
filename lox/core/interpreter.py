"""Tree-walking evaluator for Lox. Executes statements in source order and evaluates expressions recursively, driving
the runtime object model with the scope distances computed by the Resolver.
"""

from lox.core import ast
from lox.core.environment import Environment
from lox.core.runtime import Clock, LoxCallable, LoxClass, LoxFunction, LoxInstance, Return
from lox.core.tokens import TokenType
from lox.lang.error import LoxRuntimeError
from lox.lang.numerical import stringify_number


class Interpreter:
    """Holds the global scope (fixed for the interpreter's lifetime) and the scope currently being executed in."""

    def __init__(self, out=None):
        """out is where print writes; None means the current sys.stdout."""
        self.out = out

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # resolved node: scope distance

        self.globals.define("clock", Clock())

    def interpret(self, statements):
        """Executes statements in order. The first LoxRuntimeError aborts the rest and propagates to the caller."""
        for stmt in statements:
            self.execute(stmt)

    def resolve(self, expr, depth):
        """Called by the Resolver for every local reference."""
        self.locals[expr] = depth

    # ------------------------------------------------------------
    # statements
    # ------------------------------------------------------------

    def execute(self, stmt):
        if isinstance(stmt, ast.Expression):
            self.evaluate(stmt.expression)

        elif isinstance(stmt, ast.Print):
            value = self.evaluate(stmt.expression)
            print(self.stringify(value), file=self.out)

        elif isinstance(stmt, ast.Var):
            value = None
            if stmt.initializer is not None:
                value = self.evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)

        elif isinstance(stmt, ast.Block):
            self.execute_block(stmt.statements, Environment(self.environment))

        elif isinstance(stmt, ast.If):
            if self.is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.then_branch)
            elif stmt.else_branch is not None:
                self.execute(stmt.else_branch)

        elif isinstance(stmt, ast.While):
            while self.is_truthy(self.evaluate(stmt.condition)):
                self.execute(stmt.body)

        elif isinstance(stmt, ast.Function):
            function = LoxFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)

        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.value is not None:
                value = self.evaluate(stmt.value)
            raise Return(value)

        elif isinstance(stmt, ast.Class):
            self.execute_class(stmt)

        else:
            raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    def execute_block(self, statements, environment):
        """Executes statements in environment, restoring the previous scope however the block is left."""
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                self.execute(stmt)
        finally:
            self.environment = previous

    def execute_class(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            methods[method.name.lexeme] = LoxFunction(method, self.environment, method.name.lexeme == "init")

        static_methods = {}
        for method in stmt.static_methods:
            static_methods[method.name.lexeme] = LoxFunction(method, self.environment)

        klass = LoxClass(stmt.name.lexeme, superclass, methods, static_methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(stmt.name, klass)

    # ------------------------------------------------------------
    # expressions
    # ------------------------------------------------------------

    def evaluate(self, expr):
        if isinstance(expr, ast.Literal):
            return expr.value

        if isinstance(expr, ast.Grouping):
            return self.evaluate(expr.expression)

        if isinstance(expr, ast.Variable):
            return self.look_up_variable(expr.name, expr)

        if isinstance(expr, ast.Assign):
            value = self.evaluate(expr.value)
            distance = self.locals.get(expr)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value

        if isinstance(expr, ast.Unary):
            return self.evaluate_unary(expr)

        if isinstance(expr, ast.Binary):
            return self.evaluate_binary(expr)

        if isinstance(expr, ast.Logical):
            left = self.evaluate(expr.left)

            # short-circuit, returning the deciding operand itself
            if expr.operator.type is TokenType.OR:
                if self.is_truthy(left):
                    return left
            elif not self.is_truthy(left):
                return left

            return self.evaluate(expr.right)

        if isinstance(expr, ast.Call):
            return self.evaluate_call(expr)

        if isinstance(expr, ast.Get):
            obj = self.evaluate(expr.obj)
            if isinstance(obj, (LoxInstance, LoxClass)):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.")

        if isinstance(expr, ast.Set):
            obj = self.evaluate(expr.obj)
            if not isinstance(obj, (LoxInstance, LoxClass)):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")

            value = self.evaluate(expr.value)
            obj.set(expr.name, value)
            return value

        if isinstance(expr, ast.This):
            return self.look_up_variable(expr.keyword, expr)

        if isinstance(expr, ast.Super):
            return self.evaluate_super(expr)

        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def evaluate_unary(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.type is TokenType.BANG:
            return not self.is_truthy(right)

        # only '-' is left
        self.check_number_operands(expr.operator, right)
        return -right

    def evaluate_binary(self, expr):
        left = self.evaluate(expr.left)  # left before right
        right = self.evaluate(expr.right)
        operator = expr.operator
        kind = operator.type

        if kind is TokenType.EQUAL_EQUAL:
            return self.is_equal(left, right)
        if kind is TokenType.BANG_EQUAL:
            return not self.is_equal(left, right)

        if kind is TokenType.PLUS:
            if self.is_number(left) and self.is_number(right):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            # a number next to a string is concatenated in its printed form
            if isinstance(left, str) and self.is_number(right):
                return left + stringify_number(right)
            if self.is_number(left) and isinstance(right, str):
                return stringify_number(left) + right
            raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        self.check_number_operands(operator, left, right)

        if kind is TokenType.MINUS:
            return left - right
        if kind is TokenType.STAR:
            return left * right
        if kind is TokenType.SLASH:
            if right == 0:
                raise LoxRuntimeError(operator, "Division by zero.")
            return left / right
        if kind is TokenType.GREATER:
            return left > right
        if kind is TokenType.GREATER_EQUAL:
            return left >= right
        if kind is TokenType.LESS:
            return left < right
        if kind is TokenType.LESS_EQUAL:
            return left <= right

        raise TypeError(f"unknown binary operator: {operator.lexeme}")

    def evaluate_call(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        if len(arguments) != callee.arity():
            raise LoxRuntimeError(expr.paren, f"Expected {callee.arity()} arguments but got {len(arguments)}.")

        return callee.call(self, arguments)

    def evaluate_super(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")  # 'this' is always one scope inside 'super'

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")

        return method.bind(instance)

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    # ------------------------------------------------------------
    # value rules
    # ------------------------------------------------------------

    @staticmethod
    def is_number(value):
        # bool is an int subclass in Python, but never a Lox number
        return isinstance(value, float)

    @staticmethod
    def check_number_operands(operator, *operands):
        if all(Interpreter.is_number(operand) for operand in operands):
            return
        if len(operands) == 1:
            raise LoxRuntimeError(operator, "Operand must be a number.")
        raise LoxRuntimeError(operator, "Operands must be numbers.")

    @staticmethod
    def is_truthy(value):
        """nil and false are falsy, everything else (0 and "" included) is truthy."""
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return True

    @staticmethod
    def is_equal(a, b):
        """No implicit conversions: nil equals only nil, and true is not 1."""
        if a is None:
            return b is None
        if type(a) is not type(b):
            return False
        return a == b

    @staticmethod
    def stringify(value):
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return stringify_number(value)
        return str(value)
