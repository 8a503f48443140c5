import io

import pytest

import treelox.expr as ex
from treelox import stmt as st
from treelox.ast_printer import AstPrinter
from treelox.diagnostics import Diagnostics
from treelox.parser import Parser
from treelox.scanner import Scanner
from treelox.tokens import TokenType as TT


def parse(source: str, **options) -> tuple[list[st.Stmt], Diagnostics]:
    diagnostics = Diagnostics(stream=io.StringIO())
    tokens = Scanner(source, diagnostics).scan_tokens()
    return Parser(tokens, diagnostics, **options).parse(), diagnostics


def parse_expr(source: str) -> ex.Expr:
    statements, diagnostics = parse(source)
    assert not diagnostics.had_error, diagnostics.messages
    assert len(statements) == 1
    statement = statements[0]
    assert isinstance(statement, st.Expression)
    return statement.expression


@pytest.mark.parametrize("source, expected", [
    ("1 + 2 * 3;", "(+ 1.0 (* 2.0 3.0))"),
    ("(1 + 2) * 3;", "(* (group (+ 1.0 2.0)) 3.0)"),
    ("1 - 2 - 3;", "(- (- 1.0 2.0) 3.0)"),
    ("-!a;", "(- (! a))"),
    ("a or b and c;", "(or a (and b c))"),
    ("1 < 2 == true;", "(== (< 1.0 2.0) true)"),
    ("a.b(1, 2).c;", "(. (call (. a b) 1.0 2.0) c)"),
    ("a = b = 1;", "(= a (= b 1.0))"),
    ("a.b = nil;", "(= (. a b) nil)"),
    ("a ? b : c ? d : e;", "(?: a b (?: c d e))"),
    ("x = a or b ? 1 : 2;", "(= x (?: (or a b) 1.0 2.0))"),
    ('super.greet() + "!";', '(+ (call (super greet)) "!")'),
])
def test_expression_precedence(source, expected):
    assert AstPrinter().print(parse_expr(source)) == expected


@pytest.mark.parametrize("operator, binary", [
    ("+=", TT.PLUS), ("-=", TT.MINUS), ("*=", TT.STAR), ("/=", TT.SLASH),
])
def test_compound_assignment_desugars(operator, binary):
    expr = parse_expr(f"a {operator} 2;")
    assert isinstance(expr, ex.Assign)
    assert isinstance(expr.value, ex.Binary)
    assert expr.value.operator.type is binary
    assert isinstance(expr.value.left, ex.Variable)
    assert expr.value.left.name.lexeme == "a"


def test_invalid_assignment_target_does_not_stop_parsing():
    statements, diagnostics = parse("1 = 2;\nvar x = 3;\na + b = 4;")
    assert diagnostics.messages == [
        "[line 1] Error at '=': Invalid assignment target.",
        "[line 3] Error at '=': Invalid assignment target.",
    ]
    assert isinstance(statements[1], st.Var)


def test_compound_assignment_needs_a_variable():
    _, diagnostics = parse("a.b += 1;")
    assert diagnostics.messages == ["[line 1] Error at '+=': Invalid assignment target."]


def test_for_desugars_into_while_inside_block():
    statements, diagnostics = parse("for (var i = 0; i < 3; i = i + 1) print i;")
    assert not diagnostics.had_error

    [block] = statements
    assert isinstance(block, st.Block)
    initializer, loop = block.statements
    assert isinstance(initializer, st.Var)
    assert isinstance(loop, st.While)
    assert AstPrinter().print(loop.condition) == "(< i 3.0)"
    assert isinstance(loop.body, st.Print)
    assert AstPrinter().print(loop.increment) == "(= i (+ i 1.0))"


def test_for_without_clauses_loops_forever():
    [loop], diagnostics = parse("for (;;) break;")
    assert not diagnostics.had_error
    assert isinstance(loop, st.While)
    assert loop.condition.value is True
    assert loop.increment is None
    assert isinstance(loop.body, st.Break)


def test_class_declaration():
    [klass], diagnostics = parse("class B < A { init(x) { this.x = x; } greet() {} }")
    assert not diagnostics.had_error
    assert isinstance(klass, st.Class)
    assert klass.name.lexeme == "B"
    assert klass.superclass.name.lexeme == "A"
    assert [m.name.lexeme for m in klass.methods] == ["init", "greet"]
    assert [p.lexeme for p in klass.methods[0].params] == ["x"]


def test_function_declaration():
    [function], _ = parse("fun add(a, b) { return a + b; }")
    assert isinstance(function, st.Function)
    assert [p.lexeme for p in function.params] == ["a", "b"]
    [ret] = function.body
    assert isinstance(ret, st.Return)
    assert AstPrinter().print(ret.value) == "(+ a b)"


def test_if_else_and_control_flow_statements():
    [stmt], diagnostics = parse("while (true) if (a) break; else continue;")
    assert not diagnostics.had_error
    assert isinstance(stmt.body, st.If)
    assert isinstance(stmt.body.then_branch, st.Break)
    assert isinstance(stmt.body.else_branch, st.Continue)


def test_synchronizes_after_errors():
    statements, diagnostics = parse("var = 1;\nprint 2;\nvar y = ;\nprint 3;")
    assert diagnostics.messages == [
        "[line 1] Error at '=': Expect variable name.",
        "[line 3] Error at ';': Expect expression.",
    ]
    assert [type(s) for s in statements] == [st.Print, st.Print]


def test_synchronizes_on_statement_keyword():
    statements, diagnostics = parse("var a = (1 2 3\nfun f() {}")
    assert diagnostics.messages == ["[line 1] Error at '2': Expect ')' after expression."]
    assert [type(s) for s in statements] == [st.Function]


def test_error_at_end_of_input():
    _, diagnostics = parse("print 1")
    assert diagnostics.messages == ["[line 1] Error at end: Expect ';' after value."]


def test_too_many_arguments_is_reported():
    arguments = ", ".join(["1"] * 256)
    statements, diagnostics = parse(f"f({arguments});")
    assert diagnostics.messages == ["[line 1] Error at '1': Can't have more than 255 arguments."]
    assert len(statements) == 1


def test_lone_expression_is_printed_interactively():
    [stmt], diagnostics = parse("1 + 2", print_lone_expressions=True)
    assert not diagnostics.had_error
    assert isinstance(stmt, st.Print)

    [stmt], _ = parse("1 + 2;", print_lone_expressions=True)
    assert isinstance(stmt, st.Expression)
