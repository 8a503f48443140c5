import pytest

from treelox.lox import RunResult


def lines(text: str) -> list[str]:
    return text.splitlines()


def test_scope_shadowing(run):
    outcome = run("var a = 1; { var a = a + 1; print a; } print a;")
    assert outcome.result is RunResult.OK
    assert lines(outcome.stdout) == ["2", "1"]


def test_closure_counter(run):
    source = """
    fun counter() {
      var i = 0;
      fun inc() { i = i + 1; return i; }
      return inc;
    }
    var c = counter();
    print c();
    print c();
    """
    assert lines(run(source).stdout) == ["1", "2"]


def test_closures_share_their_environment(run):
    source = """
    var get;
    var set;
    fun make() {
      var value = "before";
      fun g() { return value; }
      fun s(v) { value = v; }
      get = g;
      set = s;
    }
    make();
    print get();
    set("after");
    print get();
    """
    assert lines(run(source).stdout) == ["before", "after"]


def test_closure_binds_lexical_scope(run):
    source = """
    var a = "global";
    {
      fun show() { print a; }
      show();
      var a = "block";
      show();
    }
    """
    assert lines(run(source).stdout) == ["global", "global"]


@pytest.mark.parametrize("source, expected", [
    ("print 1 + 2 * 3;", "7"),
    ("print 7 / 2;", "3.5"),
    ("print -(3 - 5);", "2"),
    ('print "1" + "x";', "1x"),
    ('print "a" < "b";', "true"),
    ("print 2 >= 2;", "true"),
    ("print !nil;", "true"),
    ("print !0;", "false"),
    ("print nil == nil;", "true"),
    ("print nil == false;", "false"),
    ('print 1 == "1";', "false"),
    ("print true == 1;", "false"),
    ("print 1 != 2;", "true"),
    ("print 0.1 + 0.2 > 0.3;", "true"),
    ("print 1 ? 2 : 3;", "2"),
    ("print nil ? 2 : 3;", "3"),
    ('print nil or "default";', "default"),
    ("print 1 and 2;", "2"),
    ("print false and undefined;", "false"),
    ("print true or undefined;", "true"),
])
def test_expressions(run, source, expected):
    outcome = run(source)
    assert outcome.stderr == ""
    assert outcome.stdout == expected + "\n"


def test_ternary_evaluates_one_branch(run):
    source = """
    var calls = 0;
    fun bump() { calls = calls + 1; return calls; }
    var x = true ? bump() : bump();
    print calls;
    """
    assert lines(run(source).stdout) == ["1"]


def test_compound_assignment(run):
    source = """
    var a = 10;
    a += 5; print a;
    a -= 3; print a;
    a *= 2; print a;
    a /= 8; print a;
    var s = "ab"; s += "c"; print s;
    """
    assert lines(run(source).stdout) == ["15", "12", "24", "3", "abc"]


def test_uninitialized_variable_is_nil(run):
    assert run("var a; print a;").stdout == "nil\n"


def test_strict_variables_rejects_unassigned_reads(run):
    outcome = run("var a; print a;", strict_variables=True)
    assert outcome.result is RunResult.RUNTIME_ERROR
    assert outcome.stderr == "Unassigned variable 'a'.\n[line 1]\n"

    outcome = run("var a; a = 1; print a;", strict_variables=True)
    assert outcome.stdout == "1\n"


def test_while_with_break_and_continue(run):
    source = """
    var i = 0;
    while (true) {
      i = i + 1;
      if (i == 2) continue;
      if (i > 4) break;
      print i;
    }
    print "done";
    """
    assert lines(run(source).stdout) == ["1", "3", "4", "done"]


def test_continue_in_for_runs_the_increment(run):
    source = """
    for (var i = 0; i < 5; i = i + 1) {
      if (i == 1 or i == 3) continue;
      print i;
    }
    """
    assert lines(run(source).stdout) == ["0", "2", "4"]


def test_for_matches_its_while_rewrite(run):
    as_for = """
    var out = "";
    for (var i = 0; i < 4; i = i + 1) out = out + str(i);
    print out;
    """
    as_while = """
    var out = "";
    { var i = 0; while (i < 4) { out = out + str(i); i = i + 1; } }
    print out;
    """
    assert run(as_for).stdout == run(as_while).stdout == "0123\n"


def test_break_only_leaves_innermost_loop(run):
    source = """
    for (var i = 0; i < 2; i = i + 1) {
      for (var j = 0; j < 10; j = j + 1) {
        if (j == 1) break;
        print str(i) + ":" + str(j);
      }
    }
    """
    assert lines(run(source).stdout) == ["0:0", "1:0"]


def test_return_unwinds_through_loops(run):
    source = """
    fun find() {
      for (var i = 0; i < 10; i = i + 1) {
        while (true) {
          if (i == 3) return i;
          break;
        }
      }
      return -1;
    }
    print find();
    """
    assert run(source).stdout == "3\n"


def test_function_without_return_yields_nil(run):
    assert run("fun f() {} print f();").stdout == "nil\n"


def test_recursion(run):
    source = """
    fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }
    print fib(15);
    """
    assert run(source).stdout == "610\n"


def test_display_strings(run):
    source = """
    fun f() {}
    class A {}
    print f;
    print A;
    print A();
    print clock;
    print 2.5;
    print -0.5;
    print 100;
    """
    assert lines(run(source).stdout) == [
        "<fn f>", "A", "A instance", "<native fn clock>", "2.5", "-0.5", "100",
    ]


def test_pure_expression_is_idempotent(run):
    source = """
    var a = 3; var b = "x";
    print (a * 2 + 1 > 5) == (a * 2 + 1 > 5);
    print b + b == b + b;
    """
    assert lines(run(source).stdout) == ["true", "true"]


@pytest.mark.parametrize("source, message", [
    ('1 + "x";', "Operands must be two numbers or two strings."),
    ('"a" < 1;', "Operands must be two numbers or two strings."),
    ('"a" - "b";', "Operands must be numbers."),
    ("-nil;", "Operand must be a number."),
    ("1 / 0;", "Division by zero."),
    ("0 / 0;", "Division by zero."),
    ("print undefined;", "Undefined variable 'undefined'."),
    ("undefined = 1;", "Undefined variable 'undefined'."),
    ('"not a function"();', "Can only call functions and classes."),
    ("fun f(a) {} f();", "Expected 1 arguments but got 0."),
    ("var x = 1; x.y;", "Only instances have properties."),
    ("var x = 1; x.y = 2;", "Only instances have fields."),
])
def test_runtime_errors(run, source, message):
    outcome = run(source)
    assert outcome.result is RunResult.RUNTIME_ERROR
    assert outcome.stderr == f"{message}\n[line 1]\n"


def test_runtime_error_reports_its_line(run):
    outcome = run('print "ok";\n\nprint 1 + nil;')
    assert outcome.stdout == "ok\n"
    assert outcome.stderr == "Operands must be two numbers or two strings.\n[line 3]\n"


def test_runtime_error_aborts_only_its_statement(run):
    source = """
    print "before";
    { print "inside"; print 1 / 0; print "skipped"; }
    print "after";
    """
    outcome = run(source)
    assert outcome.result is RunResult.RUNTIME_ERROR
    assert lines(outcome.stdout) == ["before", "inside", "after"]


def test_runtime_error_restores_the_environment(run):
    source = """
    var a = "global";
    { var a = "local"; print 1 / 0; }
    print a;
    """
    assert run(source).stdout == "global\n"


def test_compile_error_suppresses_execution(run):
    outcome = run('print "one";\nprint ;\nprint "three";')
    assert outcome.result is RunResult.COMPILE_ERROR
    assert outcome.stdout == ""
    assert outcome.stderr == "[line 2] Error at ';': Expect expression.\n"


def test_resolution_error_suppresses_execution(run):
    outcome = run('print "one";\nreturn;')
    assert outcome.result is RunResult.COMPILE_ERROR
    assert outcome.stdout == ""


def test_lexical_error_suppresses_execution(run):
    outcome = run('print "one";\nprint @;')
    assert outcome.result is RunResult.COMPILE_ERROR
    assert outcome.stdout == ""
    assert "[line 2] Error: Unexpected character '@'." in outcome.stderr


def test_unbounded_recursion_is_fatal(run):
    outcome = run('fun f() { f(); } f(); print "unreachable";', recursion_limit=2000)
    assert outcome.result is RunResult.RUNTIME_ERROR
    assert outcome.stdout == ""
    assert outcome.stderr == "Stack overflow.\n"


def test_deeply_nested_source_runs(run):
    grouped = run("print " + "(" * 80 + "1" + ")" * 80 + ";")
    assert grouped.result is RunResult.OK
    assert grouped.stdout == "1\n"

    blocks = run("{" * 150 + 'print "deep";' + "}" * 150)
    assert blocks.result is RunResult.OK
    assert blocks.stdout == "deep\n"


def test_nesting_past_the_recursion_limit_is_a_compile_error(run):
    outcome = run("print " + "(" * 2000 + "1" + ")" * 2000 + ";")
    assert outcome.result is RunResult.COMPILE_ERROR
    assert outcome.stdout == ""
    assert "Error at '(': Program is nested too deeply." in outcome.stderr
