import logging
import sys
from enum import Enum
from typing import TextIO

from treelox.ast_printer import AstPrinter
from treelox.diagnostics import Diagnostics
from treelox.interpreter import Interpreter
from treelox.parser import Parser
from treelox.resolver import Resolver
from treelox.scanner import Scanner
from treelox import stmt as st

logger = logging.getLogger(__name__)

# Every Lox call costs several Python frames
DEFAULT_RECURSION_LIMIT = 10_000


class RunResult(Enum):
    OK = "ok"
    COMPILE_ERROR = "compile error"
    RUNTIME_ERROR = "runtime error"


class Lox:
    def __init__(
        self,
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        stdin: TextIO | None = None,
        strict_variables: bool = False,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> None:
        self.stdout = stdout
        self.diagnostics = Diagnostics(stderr)
        self.interpreter = Interpreter(
            self.diagnostics,
            stdout=stdout,
            stdin=stdin,
            strict_variables=strict_variables,
        )
        self.recursion_limit = recursion_limit
        if sys.getrecursionlimit() < recursion_limit:
            sys.setrecursionlimit(recursion_limit)

    def run_prompt(self) -> None:
        try:
            while True:
                line = input("> ")
                self.run(line, interactive=True)
        except EOFError:
            print("Bye.", file=self.stdout if self.stdout is not None else sys.stdout)

    def compile(self, source: str, interactive: bool = False) -> list[st.Stmt] | None:
        """Scan, parse and resolve ``source``.

        Returns ``None`` when any compile-time error was reported.
        """
        tokens = Scanner(source, self.diagnostics).scan_tokens()
        logger.debug("Scanned %d tokens", len(tokens))

        parser = Parser(tokens, self.diagnostics, print_lone_expressions=interactive)
        try:
            statements = parser.parse()
        except RecursionError:
            self.diagnostics.error(parser.peek(), "Program is nested too deeply.")
            return None
        logger.debug("Parsed %d top-level statements", len(statements))

        if self.diagnostics.had_error:
            return None

        try:
            Resolver(self.interpreter, self.diagnostics).resolve(statements)
        except RecursionError:
            self.diagnostics.error(tokens[-1], "Program is nested too deeply.")
            return None
        logger.debug("Resolved %d local references", len(self.interpreter.locals))

        if self.diagnostics.had_error:
            return None

        return statements

    def run(self, source: str, interactive: bool = False) -> RunResult:
        self.diagnostics.reset()

        statements = self.compile(source, interactive)
        if statements is None:
            return RunResult.COMPILE_ERROR

        self.interpreter.interpret(statements)

        if self.diagnostics.had_runtime_error:
            return RunResult.RUNTIME_ERROR
        return RunResult.OK

    def dump_ast(self, source: str) -> RunResult:
        """Print the parenthesized form of each top-level expression."""
        statements = self.compile(source)
        if statements is None:
            return RunResult.COMPILE_ERROR

        printer = AstPrinter()
        out = self.stdout if self.stdout is not None else sys.stdout
        for statement in statements:
            match statement:
                case st.Expression(expression) | st.Print(expression):
                    print(printer.print(expression), file=out)

        return RunResult.OK
