import io
import sys

import pytest

from calcscript.errors import CalcError
from calcscript.interpreter import Interpreter, parse_program, run_program, run_file
from calcscript.types import Void, FunctionValue
from calcscript.builtin_function import BuiltinFunction


def run(source: str) -> Interpreter:
    interp = Interpreter()
    interp.run(parse_program(source))
    return interp


def test_precedence_result_lookup():
    interp = run("a = 1; b = 2; c = a + b * 2;")
    assert interp.global_scope.get('c') == 5


def test_parenthesized_expression():
    assert run("x = (1 + 2) * 3;").global_scope.get('x') == 9
    assert run("x = (1.0 + 2.0) * 3.0;").global_scope.get('x') == 9.0


def test_whitespace_does_not_change_results():
    compact = run("r=(1.5+2.25)*4.0/(0.5-2.0);").global_scope.get('r')
    spaced = run("r = ( 1.5 +\n 2.25 ) *\n\t4.0 / ( 0.5 - 2.0 ) ;").global_scope.get('r')
    assert compact == spaced == -10.0


def test_countdown_loop(capsys):
    run("fn f(){ return 6; } a = f(); while a { a = a - 1; print(a); }")
    assert capsys.readouterr().out == '5\n4\n3\n2\n1\n0\n'


def test_while_zero_iterations(capsys):
    interp = run("n = 0; while n { print(n); } done = 1;")
    assert capsys.readouterr().out == ''
    assert interp.global_scope.get('done') == 1


def test_else_branch_selected(capsys):
    run("if 0 { print(1); } elif 0.0 { print(2); } else { print(3); }")
    assert capsys.readouterr().out == '3\n'


def test_first_true_condition_wins(capsys):
    run("if 0 { print(1); } elif 2 { print(2); } elif 3 { print(3); } else { print(4); }")
    assert capsys.readouterr().out == '2\n'


def test_if_without_true_branch_is_void(capsys):
    assert run_program("if 0 { print(1); } elif 0 { print(2); }") is Void
    assert run_program("if 0 { } elif 0 { } else { }") is Void
    assert capsys.readouterr().out == ''


def test_void_and_functions_truthiness(capsys):
    run("fn nothing() { } fn g() { } if nothing() { print(1); } else { print(0); } if g { print(2); }")
    assert capsys.readouterr().out == '0\n2\n'


def test_if_and_while_bodies_share_the_enclosing_scope():
    interp = run("x = 1; if 1 { x = 2; y = 3; } n = 2; while n { n = n - 1; z = n; }")
    scope = interp.global_scope
    assert scope.values == {'x': 2, 'y': 3, 'n': 0, 'z': 0}


def test_dynamic_scope_function_reads_caller_variable(capsys):
    # show() never mentions x as a parameter; it finds x through the call site
    run("fn show() { print(x); } x = 7; show();")
    assert capsys.readouterr().out == '7\n'


def test_dynamic_scope_sees_variables_defined_after_declaration(capsys):
    run("fn inner() { return y * 2; } fn outer(y) { return inner(); } print(outer(21));")
    assert capsys.readouterr().out == '42\n'


def test_function_assignment_shadows_caller_binding(capsys):
    interp = run("fn setx() { x = 99; print(x); } x = 1; setx(); print(x);")
    assert capsys.readouterr().out == '99\n1\n'
    assert interp.global_scope.get('x') == 1


def test_function_value_carries_no_environment():
    interp = run("fn f(a) { return a; }")
    value = interp.global_scope.get('f')
    assert isinstance(value, FunctionValue)
    assert value.decl.params == ('a',)
    assert not hasattr(value, 'env')


def test_return_inside_loop_leaves_function(capsys):
    run("fn first() { i = 0; while 1 { i = i + 1; if i - 3 { } else { return i; } } } print(first());")
    assert capsys.readouterr().out == '3\n'


def test_function_without_return_yields_void(capsys):
    run("fn f() { x = 1; } print(f());")
    assert capsys.readouterr().out == 'void\n'


def test_top_level_return_stops_program(capsys):
    assert run_program("a = 4; return a * 2; print(1);") == 8
    assert capsys.readouterr().out == ''


def test_print_formats_arguments(capsys):
    run("print(1, 2.5, 3.0, 0 - 4); print();")
    assert capsys.readouterr().out == '1 2.5 3 -4\n\n'


def test_print_to_custom_stream():
    out = io.StringIO()
    run_program("print(1 + 1);", out=out)
    assert out.getvalue() == '2\n'


def test_builtins_live_in_root_scope():
    interp = Interpreter()
    assert isinstance(interp.root_scope.get('+'), BuiltinFunction)
    assert isinstance(interp.global_scope.get('print'), BuiltinFunction)
    assert 'print' not in interp.global_scope
    assert interp.global_scope.parent is interp.root_scope


def test_evaluate_block_creates_scope_only_when_asked():
    interp = Interpreter()
    block = parse_program("t = 5;")
    interp.evaluate_block(block, interp.global_scope, new_scope=True)
    assert 't' not in interp.global_scope
    interp.evaluate_block(block, interp.global_scope, new_scope=False)
    assert interp.global_scope.get('t') == 5


def test_undefined_variable_is_fatal(capsys):
    with pytest.raises(CalcError) as excinfo:
        run_program("print(1); print(zzz);")
    assert excinfo.value.err.name == 'NameError'
    assert 'zzz' in str(excinfo.value)
    # output before the failing statement is already written
    assert capsys.readouterr().out == '1\n'


def test_undefined_function_is_fatal():
    with pytest.raises(CalcError) as excinfo:
        run_program("nope(1);")
    assert excinfo.value.err.name == 'NameError'


def test_calling_a_number_is_fatal():
    with pytest.raises(CalcError) as excinfo:
        run_program("x = 1; x(2);")
    assert excinfo.value.err.name == 'TypeError'
    assert 'not a function' in str(excinfo.value)


def test_argument_count_mismatch_is_fatal():
    with pytest.raises(CalcError) as excinfo:
        run_program("fn f(a) { return a; } f();")
    assert 'expects 1 arguments' in str(excinfo.value)


def test_mixed_numeric_kinds_are_fatal():
    with pytest.raises(CalcError) as excinfo:
        run_program("print(1 + 2.0);")
    assert excinfo.value.err.name == 'TypeError'


def test_integer_overflow_is_fatal():
    with pytest.raises(CalcError) as excinfo:
        run_program("x = 2147483647 + 1;")
    assert excinfo.value.err.name == 'OverflowError'


def test_integer_division_by_zero_is_fatal():
    with pytest.raises(CalcError) as excinfo:
        run_program("x = 1 / 0;")
    assert excinfo.value.err.name == 'ZeroDivisionError'


def test_debug_trace(capsys):
    interp = Interpreter(debug_level=4)
    interp.run(parse_program("fn f(a) { return a; } x = f(1); if x { }"))
    err = capsys.readouterr().err
    assert 'define function f(a)' in err
    assert 'assign x: Int = 1' in err
    assert 'if condition 1 -> True' in err
    assert 'lookup a -> 1' in err


def test_debug_file(tmp_path):
    path = tmp_path / 'trace.txt'
    interp = Interpreter(debug_level=2, debug_file=str(path))
    interp.run(parse_program("x = 1;"))
    assert path.read_text(encoding='utf-8') == 'assign x: Int = 1\n'


def test_deep_recursion_produces_a_value(capsys):
    run("fn sum(n) { if n { return n + sum(n - 1); } return 0; } print(sum(150));")
    assert capsys.readouterr().out == '11325\n'


def test_long_operator_chain():
    source = "a = " + " + ".join(["1"] * 600) + ";"
    assert run(source).global_scope.get('a') == 600


def test_unbounded_recursion_is_fatal():
    limit = sys.getrecursionlimit()
    with pytest.raises(CalcError) as excinfo:
        run_program("fn f(n) { return f(n + 1); } f(0);")
    assert excinfo.value.err.name == 'RecursionError'
    assert sys.getrecursionlimit() == limit


def test_run_file(tmp_path, capsys):
    path = tmp_path / 'prog.calc'
    path.write_text("fn double(x) { return x * 2; }\ny = double(21);\nprint(y);\n", encoding='utf-8')
    interp = run_file(str(path))
    assert capsys.readouterr().out == '42\n'
    assert interp.global_scope.get('y') == 42
