import pytest

from basic_errors import BasicRuntimeError, ParseError
from basic_interpreter import BasicInterpreter, RunResult, State
from basic_io import BufferConsole


def test_single_print(run, console):
    result = run('10 PRINT "HELLO"')
    assert result == RunResult()
    assert result.ok
    assert console.text == "HELLO\n"


def test_empty_program(run, console, interpreter):
    assert run('').ok
    assert console.text == ''
    assert interpreter.state is State.ENDED


def test_lines_run_in_ascending_order(run, console):
    run('30 PRINT "C"\n10 PRINT "A"\n20 PRINT "B"')
    assert console.text == "A\nB\nC\n"


def test_print_separators(run, console):
    run('10 PRINT "A"; "B", "C";\n20 PRINT 1 + 1')
    assert console.text == "AB C2\n"


def test_goto_skips_lines(run, console):
    run('10 GOTO 30\n20 PRINT "SKIPPED"\n30 PRINT "DONE"')
    assert console.text == "DONE\n"


def test_goto_missing_line(run, console):
    result = run('10 GOTO 99\n20 PRINT "NO"')
    assert not result.ok
    assert isinstance(result.error, BasicRuntimeError)
    assert result.error.message == "Cannot find line 99"
    assert result.lineno == 99
    assert console.text == ''


def test_duplicate_line_fails_before_running(run, console):
    result = run('10 PRINT "A"\n10 PRINT "B"')
    assert isinstance(result.error, ParseError)
    assert result.error.lineno == 10
    assert console.text == ''


def test_parse_error_fails_run(run, console):
    result = run('10 PRINT "A"\n20 PRIN "B"')
    assert isinstance(result.error, ParseError)
    assert console.text == ''


def test_if_then_else(run, console):
    run('10 X = 3\n'
        '20 IF X > 2 THEN PRINT "BIG" ELSE PRINT "SMALL"\n'
        '30 IF X < 2 THEN 50\n'
        '40 PRINT "FELL THROUGH"\n'
        '50 END')
    assert console.text == "BIG\nFELL THROUGH\n"


def test_for_loop_stops_when_bound_reached(run, console):
    run('10 FOR I = 0 TO 3\n20 PRINT I\n30 NEXT I\n40 PRINT "AFTER "; I')
    assert console.text == "0\n1\n2\nAFTER 3\n"


def test_loop_jump_sequence(interpreter, scheduler):
    interpreter.run('10 REM\n20 REM\n30 REM')
    interpreter.lineno = 10
    interpreter.loop_start('I', 0, 1, 3)
    assert interpreter.loops['I'].lineno == 20

    interpreter.jumped = False
    interpreter.loop_jump('I')
    assert (interpreter.get('I'), interpreter.jumped, interpreter.lineno) == (1, True, 20)

    interpreter.jumped = False
    interpreter.loop_jump('I')
    assert (interpreter.get('I'), interpreter.jumped) == (2, True)

    interpreter.jumped = False
    interpreter.lineno = 30
    interpreter.loop_jump('I')
    assert (interpreter.get('I'), interpreter.jumped, interpreter.lineno) == (3, False, 30)


def test_negative_step_counts_down(run, console):
    run('10 FOR I = 3 TO 0 STEP -1\n20 PRINT I\n30 NEXT I')
    assert console.text == "3\n2\n1\n"


def test_zero_step_is_an_error(run):
    result = run('10 FOR I = 1 TO 3 STEP 0\n20 NEXT I')
    assert isinstance(result.error, BasicRuntimeError)
    assert result.lineno == 10


def test_nested_loops(run, console):
    run('10 FOR I = 0 TO 2\n'
        '20 FOR J = 0 TO 2\n'
        '30 PRINT I; J; " ";\n'
        '40 NEXT J\n'
        '50 NEXT I')
    assert console.text == "00 01 10 11 "


def test_loop_on_last_line_ends_program(run, console):
    result = run('10 PRINT "A"\n20 FOR I = 1 TO 5')
    assert result.ok
    assert console.text == "A\n"


def test_next_without_for(run):
    result = run('10 NEXT I')
    assert isinstance(result.error, BasicRuntimeError)
    assert "I" in result.error.message


def test_gosub_returns_to_following_line(run, console):
    run('10 GOSUB 100\n'
        '20 PRINT "BACK"\n'
        '30 END\n'
        '100 PRINT "SUB"\n'
        '110 RETURN')
    assert console.text == "SUB\nBACK\n"


def test_call_then_return_resumes_after_caller(interpreter):
    interpreter.run('10 REM\n20 REM\n100 REM')
    interpreter.lineno = 10
    interpreter.call(100)
    assert interpreter.lineno == 100
    interpreter.return_from_call()
    assert interpreter.lineno == 20


def test_gosub_on_last_line_pushes_next_number(interpreter):
    interpreter.run('10 REM\n20 REM')
    interpreter.lineno = 20
    interpreter.call(10)
    assert interpreter.stack == [21]


def test_return_without_gosub(run, console):
    result = run('10 RETURN\n20 PRINT "NEVER"')
    assert isinstance(result.error, BasicRuntimeError)
    assert result.error.lineno == 10
    assert console.text == ''


def test_array_write_needs_declaration(run, console):
    result = run('10 A[1] = 5\n20 PRINT "NEVER"')
    assert isinstance(result.error, BasicRuntimeError)
    assert "ARRAY" in result.error.message
    assert console.text == ''


def test_declared_array_round_trip(run, console):
    assert run('10 ARRAY A\n20 A[1] = 5\n30 PRINT A[1]').ok
    assert console.text == "5\n"


def test_unset_variable_reads_zero(run, console):
    assert run('10 PRINT X + 1').ok
    assert console.text == "1\n"


def test_end_stops_without_consuming_more_lines(run, console, interpreter):
    assert run('10 PRINT "A"\n20 END\n30 PRINT "B"').ok
    assert console.text == "A\n"
    assert interpreter.state is State.ENDED


def test_evaluation_error_ends_run_verbatim(run, console):
    result = run('10 PRINT "A"\n20 PRINT 1 / 0\n30 PRINT "B"')
    assert isinstance(result.error, ZeroDivisionError)
    assert result.lineno == 20
    assert console.text == "A\n"


def test_each_run_starts_fresh(run, console):
    run('10 X = 5')
    run('10 PRINT X')
    assert console.text == "0\n"


def test_graphics_need_display(run, console):
    result = run('10 PRINT "A"\n20 PLOT 1, 1, 2')
    assert result.error.message == "No display found"
    assert console.text == "A\n"


def test_plot_and_clear(console, display, scheduler):
    interpreter = BasicInterpreter(console=console, display=display, scheduler=scheduler)
    source = ('10 PLOT 1, 2, 3\n'
              '20 PRINT COLOR(1, 2)\n'
              '30 CLC\n'
              '40 PRINT COLOR(1, 2)')
    assert interpreter.run(source).result().ok
    assert console.text == "3\n0\n"


def test_cls_clears_console_and_display(console, display, scheduler):
    interpreter = BasicInterpreter(console=console, display=display, scheduler=scheduler)
    display.plot(0, 0, 1)
    assert interpreter.run('10 PRINT "X"\n20 CLS\n30 PRINT "Y"').result().ok
    assert console.text == "Y\n"
    assert display.pixels == {}


def test_clt_clears_console_only(run, console):
    assert run('10 PRINT "X"\n20 CLT').ok
    assert console.clears == 1
    assert console.text == ''


def test_custom_constants():
    console = BufferConsole()
    interpreter = BasicInterpreter(console=console, constants={'LEVEL': 7})
    assert interpreter.run('10 PRINT LEVEL').result().ok
    assert console.text == "7\n"


def test_run_while_running_is_rejected(interpreter):
    interpreter.run('10 PAUSE 10\n20 END')
    with pytest.raises(BasicRuntimeError):
        interpreter.run('10 END')


def test_debug_tracing(console, scheduler, caplog):
    interpreter = BasicInterpreter(console=console, scheduler=scheduler, debug_level=2)
    with caplog.at_level('DEBUG', logger='basic_interpreter'):
        interpreter.run('10 GOTO 20\n20 END').result()
    assert "Debug 10: goto 20" in caplog.text
    assert "'type': 'GOTO'" in caplog.text
    assert "program ended" in caplog.text


def test_no_tracing_below_level(console, scheduler, caplog):
    interpreter = BasicInterpreter(console=console, scheduler=scheduler, debug_level=0)
    with caplog.at_level('DEBUG', logger='basic_interpreter'):
        interpreter.run('10 GOTO 20\n20 END').result()
    assert caplog.text == ''
