import sys
from typing import Any, TextIO

from treelox.completion import BREAK, CONTINUE, NORMAL, Completion, Signal, returned
from treelox.diagnostics import Diagnostics
from treelox.environment import Environment
from treelox.errors import LoxRuntimeError, NativeError
import treelox.expr as ex
from treelox import function as fn
from treelox import loxclass as cl
from treelox import stmt as st
from treelox.tokens import Token, TokenType as TT, TokenGroup as TG

__all__ = ["Interpreter", "LoxRuntimeError", "NativeError"]


class Interpreter:
    globals: Environment
    environment: Environment
    locals: dict[ex.Expr, int]
    _uninitialized = object()

    def __init__(
        self,
        diagnostics: Diagnostics,
        *,
        stdout: TextIO | None = None,
        stdin: TextIO | None = None,
        strict_variables: bool = False,
    ) -> None:
        self.diagnostics = diagnostics
        self._stdout = stdout
        self._stdin = stdin
        self.strict_variables = strict_variables

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}

        for native in fn.NATIVES:
            self.register_native(native)

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    def register_native(self, function: fn.NativeFunction) -> None:
        self.globals.define(function.name, function)

    def resolve(self, expr: ex.Expr, depth: int) -> None:
        self.locals[expr] = depth

    def interpret(self, statements: list[st.Stmt]) -> None:
        for statement in statements:
            try:
                completion = self.execute(statement)
            except LoxRuntimeError as error:
                self.diagnostics.runtime_error(error)
                continue
            except RecursionError:
                self.diagnostics.fatal("Stack overflow.")
                return

            if not completion.normal:
                raise RuntimeError(
                    f"'{completion.signal.name}' signal escaped to the top level"
                )

    def execute(self, stmt: st.Stmt) -> Completion:
        match stmt:
            case st.Expression(expression):
                self.evaluate(expression)
            case st.Print(expression):
                self.write(self.stringify(self.evaluate(expression)) + "\n")
            case st.Var(name, initializer):
                value = None if not self.strict_variables else self._uninitialized
                if initializer is not None:
                    value = self.evaluate(initializer)

                self.environment.define(name.lexeme, value)
            case st.Block(statements):
                return self.execute_block(statements, Environment(self.environment))
            case st.If(condition, then_branch, else_branch):
                if self.is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                elif else_branch is not None:
                    return self.execute(else_branch)
            case st.While():
                return self.execute_while(stmt)
            case st.Break():
                return BREAK
            case st.Continue():
                return CONTINUE
            case st.Function(name):
                function = fn.LoxFunction(stmt, self.environment)
                self.environment.define(name.lexeme, function)
            case st.Class():
                self.execute_class(stmt)
            case st.Return(_, value):
                return returned(None if value is None else self.evaluate(value))
            case _:
                raise NotImplementedError(f"'{stmt.__class__.__name__}' could not be executed")

        return NORMAL

    def execute_block(self, statements: tuple[st.Stmt, ...], environment: Environment) -> Completion:
        previous = self.environment

        try:
            self.environment = environment

            for statement in statements:
                completion = self.execute(statement)
                if not completion.normal:
                    return completion
        finally:
            self.environment = previous

        return NORMAL

    def execute_while(self, stmt: st.While) -> Completion:
        while self.is_truthy(self.evaluate(stmt.condition)):
            completion = self.execute(stmt.body)

            match completion.signal:
                case Signal.BREAK:
                    break
                case Signal.RETURN:
                    return completion

            if stmt.increment is not None:
                self.evaluate(stmt.increment)

        return NORMAL

    def execute_class(self, stmt: st.Class) -> None:
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, cl.LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        closure = self.environment
        if superclass is not None:
            closure = Environment(self.environment)
            closure.define("super", superclass)

        methods = {
            method.name.lexeme: fn.LoxFunction(
                method, closure, is_initializer=method.name.lexeme == "init"
            )
            for method in stmt.methods
        }

        klass = cl.LoxClass(stmt.name.lexeme, superclass, methods)
        self.environment.assign(stmt.name, klass)

    def evaluate(self, expr: ex.Expr) -> Any:
        match expr:
            case ex.Literal(value):
                return value
            case ex.Grouping(expression):
                return self.evaluate(expression)
            case ex.Unary():
                return self.evaluate_unary(expr)
            case ex.Binary():
                return self.evaluate_binary(expr)
            case ex.Logical(left, operator, right):
                left_value = self.evaluate(left)

                if operator.type == TT.OR:
                    if self.is_truthy(left_value):
                        return left_value
                elif not self.is_truthy(left_value):
                    return left_value

                return self.evaluate(right)
            case ex.Ternary(condition, then_branch, else_branch):
                if self.is_truthy(self.evaluate(condition)):
                    return self.evaluate(then_branch)
                return self.evaluate(else_branch)
            case ex.Variable(name):
                return self.look_up_variable(name, expr)
            case ex.Assign(name, value_expr):
                value = self.evaluate(value_expr)

                distance = self.locals.get(expr)
                if distance is not None:
                    self.environment.assign_at(distance, name, value)
                else:
                    self.globals.assign(name, value)

                return value
            case ex.Call():
                return self.evaluate_call(expr)
            case ex.Get(object_expr, name):
                obj = self.evaluate(object_expr)
                if isinstance(obj, cl.LoxInstance):
                    return obj.get(name)

                raise LoxRuntimeError(name, "Only instances have properties.")
            case ex.Set(object_expr, name, value_expr):
                obj = self.evaluate(object_expr)
                if not isinstance(obj, cl.LoxInstance):
                    raise LoxRuntimeError(name, "Only instances have fields.")

                value = self.evaluate(value_expr)
                obj.set(name, value)
                return value
            case ex.This(keyword):
                return self.look_up_variable(keyword, expr)
            case ex.Super():
                return self.evaluate_super(expr)
            case _:
                raise NotImplementedError(f"'{expr.__class__.__name__}' could not be evaluated")

    def evaluate_unary(self, expr: ex.Unary) -> Any:
        right = self.evaluate(expr.right)

        match expr.operator.type:
            case TT.BANG:
                return not self.is_truthy(right)
            case TT.MINUS:
                self.check_number_operands(expr.operator, right)
                return -right
            case _:
                raise NotImplementedError(f"Unknown unary operator '{expr.operator.lexeme}'")

    def evaluate_binary(self, expr: ex.Binary) -> Any:
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)

        operator = expr.operator
        if operator.type in TG.Factor | {TT.MINUS}:
            self.check_number_operands(operator, left, right)
        elif operator.type in TG.Comparison | {TT.PLUS}:
            self.check_numbers_or_strings(operator, left, right)

        match operator.type:
            case TT.BANG_EQUAL:
                return not self.is_equal(left, right)
            case TT.EQUAL_EQUAL:
                return self.is_equal(left, right)
            case TT.GREATER:
                return left > right
            case TT.GREATER_EQUAL:
                return left >= right
            case TT.LESS:
                return left < right
            case TT.LESS_EQUAL:
                return left <= right
            case TT.MINUS:
                return left - right
            case TT.PLUS:
                return left + right
            case TT.SLASH:
                if right == 0:
                    raise LoxRuntimeError(operator, "Division by zero.")
                return left / right
            case TT.STAR:
                return left * right
            case _:
                raise NotImplementedError(f"Unknown binary operator '{operator.lexeme}'")

    def evaluate_call(self, expr: ex.Call) -> Any:
        callee = self.evaluate(expr.callee)

        arguments = []
        for argument in expr.arguments:
            arguments.append(self.evaluate(argument))

        if not isinstance(callee, fn.LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")

        function = callee

        if len(arguments) != function.arity():
            raise LoxRuntimeError(expr.paren,
            f"Expected {function.arity()} arguments but got {len(arguments)}.")

        try:
            return function.call(self, arguments)
        except NativeError as error:
            if error.token is not None:
                raise
            raise error.at(expr.paren) from None

    def evaluate_super(self, expr: ex.Super) -> Any:
        distance = self.locals[expr]
        superclass: cl.LoxClass = self.environment.get_at(distance, "super")
        # The bound method's frame holding "this" sits just inside the one holding "super"
        instance = self.environment.get_at(distance - 1, "this")

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")

        return method.bind(instance)

    def look_up_variable(self, name: Token, expr: ex.Expr) -> Any:
        distance = self.locals.get(expr)
        if distance is not None:
            value = self.environment.get_at(distance, name.lexeme)
        else:
            value = self.globals.get(name)

        if value is self._uninitialized:
            raise LoxRuntimeError(name, f"Unassigned variable '{name.lexeme}'.")

        return value

    def write(self, text: str) -> None:
        self.stdout.write(text)

    @staticmethod
    def is_truthy(obj: Any) -> bool:
        return obj is not None and obj is not False

    @staticmethod
    def is_equal(left: Any, right: Any) -> bool:
        if left is None or right is None:
            return left is right
        # Keeps true == 1 false, Python would say otherwise
        if type(left) is not type(right):
            return False
        return left == right

    @staticmethod
    def is_number(num: Any) -> bool:
        return isinstance(num, float)

    def check_number_operands(self, operator: Token, *operands: Any) -> None:
        if not all(map(self.is_number, operands)):
            if len(operands) > 1:
                raise LoxRuntimeError(operator, "Operands must be numbers.")
            raise LoxRuntimeError(operator, "Operand must be a number.")

    def check_numbers_or_strings(self, operator: Token, left: Any, right: Any) -> None:
        if self.is_number(left) and self.is_number(right):
            return
        if isinstance(left, str) and isinstance(right, str):
            return
        raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

    def stringify(self, obj: Any) -> str:
        match obj:
            case None:
                return "nil"
            case bool(b):
                return str(b).lower()
            case float(num) if num.is_integer():
                return str(int(num))
            case _:
                return str(obj)
