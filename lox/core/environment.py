"""Lexical scopes. Each Environment maps names to values and links to its single enclosing scope (None for globals).

Scopes are shared, not copied: every closure and call frame that references a scope holds the same object, so a
mutation made through one of them is visible through all the others.
"""

from lox.lang.error import LoxRuntimeError


class Environment:
    """One lexical scope in the environment chain."""

    def __init__(self, enclosing=None):
        self.enclosing = enclosing
        self.values = {}

    def define(self, name, value):
        """Binds (or rebinds) name in this scope."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up through the whole chain. Used for globals and unresolved names."""
        if name.lexeme in self.values:
            return self.values[name.lexeme]

        if self.enclosing is not None:
            return self.enclosing.get(name)

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Unlike define, assign cannot create a new binding."""
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return

        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        """Returns the scope exactly distance enclosing links away."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name (a str) from the scope the Resolver found it in."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        """Writes name (a Token) in the scope the Resolver found it in."""
        self.ancestor(distance).values[name.lexeme] = value

    def __contains__(self, name):
        return name in self.values

    def __repr__(self):
        return f"Environment(values={self.values!r}, enclosing={'yes' if self.enclosing else 'no'})"
