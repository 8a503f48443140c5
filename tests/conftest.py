"""Shared fixtures for the treelox test suite."""

import io
from typing import Callable, NamedTuple

import pytest

from treelox.lox import Lox, RunResult


class Outcome(NamedTuple):
    result: RunResult
    stdout: str
    stderr: str


def run_source(source: str, stdin: str = "", **options) -> Outcome:
    stdout = io.StringIO()
    stderr = io.StringIO()
    lox = Lox(stdout=stdout, stderr=stderr, stdin=io.StringIO(stdin), **options)
    result = lox.run(source)
    return Outcome(result, stdout.getvalue(), stderr.getvalue())


@pytest.fixture
def run() -> Callable[..., Outcome]:
    """Run a program with captured streams, returns (result, stdout, stderr)."""
    return run_source
