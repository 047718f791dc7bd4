from enum import Enum

from basic_variables import format_value


class StatementKind(Enum):
    PRINT = 'PRINT'
    LET = 'LET'
    REM = 'REM'
    GOTO = 'GOTO'
    GOSUB = 'GOSUB'
    RETURN = 'RETURN'
    END = 'END'
    IF = 'IF'
    FOR = 'FOR'
    NEXT = 'NEXT'
    PAUSE = 'PAUSE'
    INPUT = 'INPUT'
    ARRAY = 'ARRAY'
    PLOT = 'PLOT'
    CLS = 'CLS'
    CLT = 'CLT'
    CLC = 'CLC'


class Statement:
    """One parsed line (or IF branch) bound to its line number.

    ``args`` holds expression source text, variable names and literal line
    numbers; expressions are evaluated through the engine when the
    statement runs.
    """

    __slots__ = ('kind', 'lineno', 'args')

    def __init__(self, kind, lineno, *args):
        self.kind = kind
        self.lineno = lineno
        self.args = args

    def run(self, engine):
        HANDLERS[self.kind](engine, *self.args)

    def to_dict(self):
        def dump(arg):
            if isinstance(arg, Statement):
                return arg.to_dict()
            if isinstance(arg, (list, tuple)):
                return [dump(a) for a in arg]
            return arg
        return {'type': self.kind.value, 'lineno': self.lineno, 'args': dump(self.args)}

    def __eq__(self, other):
        if not isinstance(other, Statement):
            return NotImplemented
        return (self.kind, self.lineno, self.args) == (other.kind, other.lineno, other.args)

    def __repr__(self):
        return f"Statement({self.kind.value}, {self.lineno}, {self.args!r})"


# ----- handlers -----

def run_print(engine, items):
    # items: [(expression, separator or None), ...]
    out = []
    newline = True
    for expr, sep in items:
        out.append(format_value(engine.evaluate(expr)))
        if sep == ',':
            out.append(' ')
        newline = sep is None
    engine.print(''.join(out) + ('\n' if newline else ''))


def run_let(engine, name, index, expr):
    value = engine.evaluate(expr)
    if index is None:
        engine.set(name, value)
    else:
        engine.set_array(name, engine.evaluate(index), value)


def run_rem(engine, text):
    pass


def run_goto(engine, target):
    engine.goto(target)


def run_gosub(engine, target):
    engine.call(target)


def run_return(engine):
    engine.return_from_call()


def run_end(engine):
    engine.halt()


def run_if(engine, cond, then, otherwise):
    if engine.evaluate(cond):
        then.run(engine)
    elif otherwise is not None:
        otherwise.run(engine)


def run_for(engine, name, start, end, step):
    engine.loop_start(name, engine.evaluate(start), engine.evaluate(step), engine.evaluate(end))


def run_next(engine, name):
    engine.loop_jump(name)


def run_pause(engine, expr):
    engine.pause(engine.evaluate(expr))


def coerce_input(name, text):
    if name.endswith('$'):
        return text
    s = text.strip()
    try:
        return int(s)
    except ValueError:
        pass
    try:
        return float(s)
    except ValueError:
        return text


def run_input(engine, prompt, name):
    if prompt is not None:
        engine.print(prompt)
    engine.input(lambda text: engine.set(name, coerce_input(name, text)))


def run_array(engine, name):
    engine.array(name)


def run_plot(engine, x, y, color):
    engine.plot(engine.evaluate(x), engine.evaluate(y), engine.evaluate(color))


def run_cls(engine):
    engine.clear_all()


def run_clt(engine):
    engine.clear_console()


def run_clc(engine):
    engine.clear_graphics()


HANDLERS = {
    StatementKind.PRINT: run_print,
    StatementKind.LET: run_let,
    StatementKind.REM: run_rem,
    StatementKind.GOTO: run_goto,
    StatementKind.GOSUB: run_gosub,
    StatementKind.RETURN: run_return,
    StatementKind.END: run_end,
    StatementKind.IF: run_if,
    StatementKind.FOR: run_for,
    StatementKind.NEXT: run_next,
    StatementKind.PAUSE: run_pause,
    StatementKind.INPUT: run_input,
    StatementKind.ARRAY: run_array,
    StatementKind.PLOT: run_plot,
    StatementKind.CLS: run_cls,
    StatementKind.CLT: run_clt,
    StatementKind.CLC: run_clc,
}

_unhandled = set(StatementKind) - set(HANDLERS)
if _unhandled:
    raise TypeError(f"No handler for statement kinds: {sorted(k.value for k in _unhandled)}")
