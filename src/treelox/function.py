import re
import time
from typing import Callable, Protocol, runtime_checkable, Any, Never, TYPE_CHECKING

from treelox.completion import Signal
from treelox.environment import Environment
from treelox.errors import NativeError
import treelox.stmt as st

if TYPE_CHECKING:
    from treelox import interpreter as interp
    from treelox import loxclass as cl

@runtime_checkable
class LoxCallable(Protocol):
    def call(self, interpreter: 'interp.Interpreter', arguments: list) -> Any:
        ...

    def arity(self) -> int:
        ...


class LoxFunction:
    declaration: st.Function
    closure: Environment
    is_initializer: bool

    def __init__(self,
                 declaration: st.Function,
                 closure: Environment,
                 is_initializer: bool = False
                 ) -> None:
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def call(self, interpreter: 'interp.Interpreter', arguments: list) -> Any:
        environment = Environment(self.closure)

        for param, arg in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, arg)

        completion = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion.signal is Signal.RETURN:
            return completion.value
        return None

    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: 'cl.LoxInstance') -> 'LoxFunction':
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def __str__(self) -> str:
        return f"<fn {self.name}>"


class NativeFunction:
    def __init__(self, name: str, arity: int, function: Callable) -> None:
        self.name = name
        self._arity = arity
        self.function = function

    def call(self, interpreter: 'interp.Interpreter', arguments: list) -> Any:
        return self.function(interpreter, arguments)

    def arity(self) -> int:
        return self._arity

    def __str__(self) -> str:
        return f"<native fn {self.name}>"


LoxFunctionCall = Callable[['interp.Interpreter', list], Any]

def native_fn(*, arity: int, name: str | None = None) -> Callable[[LoxFunctionCall], NativeFunction]:
    def native_fn_decorator(fn: LoxFunctionCall) -> NativeFunction:
        nonlocal name
        if name is None:
            name = fn.__name__

        return NativeFunction(name, arity, fn)

    return native_fn_decorator


NUMBER_PATTERN = re.compile(r"-?[0-9]+(\.[0-9]+)?")

@native_fn(arity=0)
def clock(interpreter: 'interp.Interpreter', args: list[Never]) -> float:
    return time.time()

@native_fn(arity=1, name="str")
def lox_str(interpreter: 'interp.Interpreter', args: list[Any]) -> str:
    return interpreter.stringify(args[0])

@native_fn(arity=1)
def number(interpreter: 'interp.Interpreter', args: list[Any]) -> float:
    text = args[0]
    if not isinstance(text, str):
        raise NativeError("number", f"Expected a string but got {interpreter.stringify(text)}.")

    text = text.strip()
    if NUMBER_PATTERN.fullmatch(text) is None:
        raise NativeError("number", f"Can't parse '{text}' as a number.")

    return float(text)

@native_fn(arity=1)
def write(interpreter: 'interp.Interpreter', args: list[Any]) -> None:
    interpreter.write(interpreter.stringify(args[0]))

@native_fn(arity=1)
def println(interpreter: 'interp.Interpreter', args: list[Any]) -> None:
    interpreter.write(interpreter.stringify(args[0]) + "\n")

@native_fn(arity=0, name="input")
def lox_input(interpreter: 'interp.Interpreter', args: list[Never]) -> str | None:
    line = interpreter.stdin.readline()
    if not line:
        return None

    return line.removesuffix("\n").removesuffix("\r")


NATIVES: tuple[NativeFunction, ...] = (clock, lox_str, number, write, println, lox_input)
