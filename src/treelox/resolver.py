from contextlib import contextmanager
from enum import Enum, auto
from typing import Final, Iterator

from treelox.diagnostics import Diagnostics
from treelox.tokens import Token
from treelox import interpreter as interp, stmt as st, expr as ex

class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()

class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()

class VariableState(Enum):
    DECLARED = auto()
    DEFINED = auto()

class Variable:
    name: Final[Token]
    state: VariableState

    def __init__(self, name: Token, state: VariableState) -> None:
        self.name = name
        self.state = state

class Resolver:
    """Static pass run between parsing and execution.

    Reports every local variable reference's scope distance to the
    interpreter and checks the rules that don't need a running program.
    Names not found in any scope are left unresolved and looked up in the
    global frame at run time.
    """

    interpreter: interp.Interpreter
    diagnostics: Diagnostics
    scopes: list[dict[str, Variable]]
    current_function: FunctionType
    current_class: ClassType
    loop_depth: int

    def __init__(self, interpreter: interp.Interpreter, diagnostics: Diagnostics) -> None:
        self.interpreter = interpreter
        self.diagnostics = diagnostics
        self.scopes = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE
        self.loop_depth = 0

    def resolve(self, node: list[st.Stmt] | tuple[st.Stmt, ...] | st.Stmt | ex.Expr) -> None:
        match node:
            case list(statements) | tuple(statements):
                for statement in statements:
                    self.resolve(statement)
            case st.Stmt():
                self.resolve_stmt(node)
            case ex.Expr():
                self.resolve_expr(node)
            case _:
                raise NotImplementedError(f"'{node.__class__.__name__}' could not be handled by resolve()")

    @contextmanager
    def scope(self, content: dict[str, Variable] | None = None) -> Iterator[dict[str, Variable]]:
        if content is None:
            content = {}
        self.scopes.append(content)
        try:
            yield content
        finally:
            self.scopes.pop()

    @contextmanager
    def loop(self) -> Iterator[None]:
        self.loop_depth += 1
        try:
            yield
        finally:
            self.loop_depth -= 1

    def error(self, token: Token, message: str) -> None:
        self.diagnostics.error(token, message)

    def declare(self, name: Token) -> None:
        if self.scopes:
            scope = self.scopes[-1]
            if name.lexeme in scope:
                self.error(name, "Already a variable with this name in this scope.")

            scope[name.lexeme] = Variable(name, VariableState.DECLARED)

    def define(self, name: Token) -> None:
        if self.scopes:
            scope = self.scopes[-1]
            if name.lexeme in scope:
                scope[name.lexeme].state = VariableState.DEFINED
            else:
                scope[name.lexeme] = Variable(name, VariableState.DEFINED)

    def resolve_local(self, expr: ex.Expr, name: Token) -> None:
        for i, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, i)
                return

    def resolve_function(self, function: st.Function, type: FunctionType) -> None:
        enclosing_function = self.current_function
        enclosing_loop_depth = self.loop_depth
        self.current_function = type
        # Loops around a declaration don't reach into its body
        self.loop_depth = 0

        try:
            with self.scope():
                for param in function.params:
                    self.declare(param)
                    self.define(param)
                self.resolve(function.body)
        finally:
            self.current_function = enclosing_function
            self.loop_depth = enclosing_loop_depth

    def resolve_stmt(self, stmt: st.Stmt) -> None:
        match stmt:
            case st.Block(statements):
                with self.scope():
                    self.resolve(statements)
            case st.Break(keyword) | st.Continue(keyword):
                if self.loop_depth == 0:
                    self.error(keyword, f"Can't use '{keyword.lexeme}' outside of a loop.")
            case st.Class():
                self.resolve_class(stmt)
            case st.Expression(expression) | st.Print(expression):
                self.resolve(expression)
            case st.Function(name):
                self.declare(name)
                self.define(name)

                self.resolve_function(stmt, FunctionType.FUNCTION)
            case st.If(condition, then_branch, else_branch):
                self.resolve(condition)
                self.resolve(then_branch)

                if else_branch is not None:
                    self.resolve(else_branch)
            case st.Return(keyword, value):
                if self.current_function is FunctionType.NONE:
                    self.error(keyword, "Can't return from top-level code.")

                if value is not None:
                    if self.current_function is FunctionType.INITIALIZER:
                        self.error(keyword, "Can't return a value from an initializer.")
                    self.resolve(value)
            case st.Var(name, initializer):
                self.declare(name)
                if initializer is not None:
                    self.resolve(initializer)
                self.define(name)
            case st.While(condition, body, increment):
                self.resolve(condition)
                with self.loop():
                    self.resolve(body)
                if increment is not None:
                    self.resolve(increment)
            case _:
                raise NotImplementedError(f"'{stmt.__class__.__name__}' could not be resolved")

    def resolve_class(self, stmt: st.Class) -> None:
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        try:
            if stmt.superclass is not None:
                if stmt.name.lexeme == stmt.superclass.name.lexeme:
                    self.error(stmt.superclass.name, "A class can't inherit from itself.")

                self.current_class = ClassType.SUBCLASS
                self.resolve(stmt.superclass)

                with self.scope({"super": Variable(stmt.superclass.name, VariableState.DEFINED)}):
                    self.resolve_methods(stmt)
            else:
                self.resolve_methods(stmt)
        finally:
            self.current_class = enclosing_class

    def resolve_methods(self, stmt: st.Class) -> None:
        with self.scope({"this": Variable(stmt.name, VariableState.DEFINED)}):
            for method in stmt.methods:
                declaration = FunctionType.METHOD
                if method.name.lexeme == "init":
                    declaration = FunctionType.INITIALIZER

                self.resolve_function(method, declaration)

    def resolve_expr(self, expr: ex.Expr) -> None:
        match expr:
            case ex.Assign(name, value):
                self.resolve(value)
                self.resolve_local(expr, name)
            case ex.Binary(left, _, right) | ex.Logical(left, _, right):
                self.resolve(left)
                self.resolve(right)
            case ex.Call(callee, _, arguments):
                self.resolve(callee)
                self.resolve(arguments)
            case ex.Ternary(condition, then_branch, else_branch):
                self.resolve(condition)
                self.resolve(then_branch)
                self.resolve(else_branch)
            case ex.Get(obj):
                self.resolve(obj)
            case ex.Grouping(expression):
                self.resolve(expression)
            case ex.Literal():
                pass
            case ex.Set(obj, _, value):
                self.resolve(value)
                self.resolve(obj)
            case ex.Super(keyword):
                if self.current_class is ClassType.NONE:
                    self.error(keyword, "Can't use 'super' outside of a class.")
                elif self.current_class is not ClassType.SUBCLASS:
                    self.error(keyword, "Can't use 'super' in a class with no superclass.")

                self.resolve_local(expr, keyword)
            case ex.This(keyword):
                if self.current_class is ClassType.NONE:
                    self.error(keyword, "Can't use 'this' outside of a class.")
                    return

                self.resolve_local(expr, keyword)
            case ex.Unary(_, right):
                self.resolve(right)
            case ex.Variable(name):
                if self.scopes:
                    var = self.scopes[-1].get(name.lexeme)
                    if var is not None and var.state is VariableState.DECLARED:
                        self.error(name, "Can't read local variable in its own initializer.")

                self.resolve_local(expr, name)
            case _:
                raise NotImplementedError(f"'{expr.__class__.__name__}' could not be resolved")
