from treelox import expr as ex
from treelox.expr import node
from treelox.tokens import Token


@node
class Stmt:
    ...

@node
class Expression(Stmt):
    expression: ex.Expr

@node
class Print(Stmt):
    expression: ex.Expr

@node
class Var(Stmt):
    name: Token
    initializer: ex.Expr | None = None

@node
class Block(Stmt):
    statements: tuple[Stmt, ...]

@node
class If(Stmt):
    condition: ex.Expr
    then_branch: Stmt
    else_branch: Stmt | None = None

@node
class While(Stmt):
    condition: ex.Expr
    body: Stmt
    # Only set by the for loop rewrite, runs after every iteration
    increment: ex.Expr | None = None

@node
class Break(Stmt):
    keyword: Token

@node
class Continue(Stmt):
    keyword: Token

@node
class Function(Stmt):
    name: Token
    params: tuple[Token, ...]
    body: tuple[Stmt, ...]

@node
class Class(Stmt):
    name: Token
    superclass: ex.Variable | None
    methods: tuple[Function, ...]

@node
class Return(Stmt):
    keyword: Token
    value: ex.Expr | None
