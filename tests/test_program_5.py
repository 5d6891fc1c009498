from calcscript.interpreter import parse_program, Interpreter


def test_program_5_recursive_factorial(capsys, example_source):
    source = example_source('program_5.calc')
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == '1 1\n2 2\n3 6\n4 24\n5 120'
