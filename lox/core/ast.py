"""Lox abstract syntax tree. The node set is closed: the Resolver and the Interpreter dispatch on it exhaustively.

Nodes compare and hash by identity (eq=False). Two syntactically identical references at different source positions
are different nodes and may resolve to different bindings, so the Resolver's distance table is keyed by the node
object itself.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from lox.core.tokens import Token


# ============================================================
# EXPRESSIONS
# ============================================================


class Expr:
    """Base for all expression nodes."""


@dataclass(eq=False)
class Literal(Expr):
    value: object


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Logical(Expr):
    """'and'/'or': kept apart from Binary because the right operand may not be evaluated."""
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: List[Expr]


@dataclass(eq=False)
class Get(Expr):
    obj: Expr
    name: Token


@dataclass(eq=False)
class Set(Expr):
    obj: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Super(Expr):
    keyword: Token
    method: Token


# ============================================================
# STATEMENTS
# ============================================================


class Stmt:
    """Base for all statement nodes."""


@dataclass(eq=False)
class Expression(Stmt):
    expression: Expr


@dataclass(eq=False)
class Print(Stmt):
    expression: Expr


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(eq=False)
class Block(Stmt):
    statements: List[Stmt]


@dataclass(eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt


@dataclass(eq=False)
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[Variable]
    methods: List[Function]
    static_methods: List[Function] = field(default_factory=list)
