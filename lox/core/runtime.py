"""Lox runtime object model. A Lox value is one of:

- nil: None
- boolean: bool
- number: float
- string: str
- callable: NativeFunction, LoxFunction or LoxClass (LoxCallable subclasses)
- instance: LoxInstance

No implicit coercions exist between these beyond truthiness, which lives in the Interpreter.
"""

import time
from abc import ABC, abstractmethod

from lox.core.environment import Environment
from lox.lang.error import LoxRuntimeError


class Return(Exception):
    """Unwinds from a return statement to the enclosing call boundary. Only LoxFunction.call catches it, and it is not a
    LoxError, so error handling never mistakes it for a failure.
    """

    def __init__(self, value):
        super().__init__()
        self.value = value


class LoxCallable(ABC):
    """Anything that can be called with (...): native functions, user functions and classes."""

    @abstractmethod
    def arity(self):
        """Exact number of arguments call expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Invokes this callable. arguments has already been checked against arity."""


class NativeFunction(LoxCallable):
    """Callable implemented in Python."""

    def __init__(self, arity, function):
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"


class Clock(NativeFunction):
    """clock(): wall-clock seconds since the epoch, as a number."""

    def __init__(self):
        super().__init__(0, time.time)


class LoxFunction(LoxCallable):
    """A user function or method, closed over the environment active where it was declared."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def bind(self, instance):
        """Returns a copy of this function whose closure has 'this' bound to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        # a fresh scope per call, chained to the closure (not to the caller), so recursion works
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        try:
            interpreter.execute_block(self.declaration.body, environment)
        except Return as signal:
            if self.is_initializer:
                return self.closure.get_at(0, "this")
            return signal.value

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None

    def __str__(self):
        return f"<fn {self.declaration.name.lexeme}>"


class LoxInstance:
    """An object: a reference to its class and a field map, populated lazily on first write."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. Methods are looked up through the class chain and bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        if self.klass.find_static_method(name.lexeme) is not None:
            raise LoxRuntimeError(name, f"Can't access static method '{name.lexeme}' in an instance.")

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"


class LoxClass(LoxCallable):
    """A class. Calling it constructs an instance; it also holds its own fields and static methods."""

    def __init__(self, name, superclass, methods, static_methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods                # name: LoxFunction, looked up by instances
        self.static_methods = static_methods  # name: LoxFunction, looked up through the class only
        self.fields = {}

    def find_method(self, name):
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def find_static_method(self, name):
        if name in self.static_methods:
            return self.static_methods[name]
        if self.superclass is not None:
            return self.superclass.find_static_method(name)
        return None

    def get(self, name):
        """Property access on the class itself: class fields, then static methods."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.find_static_method(name.lexeme)
        if method is not None:
            return method

        raise LoxRuntimeError(name, f"Undefined static property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def arity(self):
        initializer = self.find_method("init")
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name
