from dataclasses import dataclass
from typing import Any

from treelox.tokens import Token

# Nodes compare and hash by identity: the resolver keys its scope distances on
# the node object itself.
node = dataclass(frozen=True, eq=False)


@node
class Expr:
    ...

@node
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr

@node
class Grouping(Expr):
    expression: Expr

@node
class Literal(Expr):
    value: Any

@node
class Unary(Expr):
    operator: Token
    right: Expr

@node
class Ternary(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Expr

@node
class Variable(Expr):
    name: Token

@node
class Assign(Expr):
    name: Token
    value: Expr

@node
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr

@node
class Call(Expr):
    callee: Expr
    paren: Token
    arguments: tuple[Expr, ...]

@node
class Get(Expr):
    object: Expr
    name: Token

@node
class Set(Expr):
    object: Expr
    name: Token
    value: Expr

@node
class This(Expr):
    keyword: Token

@node
class Super(Expr):
    keyword: Token
    method: Token
