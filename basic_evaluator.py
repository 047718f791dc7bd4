from lark import Transformer, v_args
from lark.exceptions import VisitError

from basic_parser import parse_expression, unquote
from basic_variables import format_value


def flag(cond):
    # BASIC truth values
    return -1 if cond else 0


@v_args(inline=True)
class ExpressionEvaluator(Transformer):
    """Folds an expression tree into a value, reading state from the engine."""

    def __init__(self, engine):
        super().__init__()
        self.engine = engine

    def expression(self, value):
        return value

    # 숫자 / 문자열
    def number(self, tok):
        s = str(tok)
        if any(c in s for c in ".Ee"):
            return float(s)
        return int(s)

    def string(self, tok):
        return unquote(tok)

    # 변수 / 배열 / 상수
    def var(self, tok):
        return self.engine.get(str(tok))

    def index(self, tok, sub):
        return self.engine.get_array(str(tok), sub)

    def const(self, tok):
        return self.engine.get_const(str(tok))

    def call(self, name, args=None):
        return self.engine.fun(str(name))(*(args or []))

    def args(self, *items):
        return list(items)

    # 산술
    def add(self, a, b):
        if isinstance(a, str) or isinstance(b, str):
            return format_value(a) + format_value(b)
        return a + b

    def sub(self, a, b): return a - b
    def mul(self, a, b): return a * b
    def div(self, a, b): return a / b
    def mod(self, a, b): return a % b
    def pow(self, a, b): return a ** b

    def neg(self, x): return -x
    def pos(self, x): return +x

    # 비교
    def eq(self, a, b): return flag(a == b)
    def ne(self, a, b): return flag(a != b)
    def lt(self, a, b): return flag(a < b)
    def gt(self, a, b): return flag(a > b)
    def le(self, a, b): return flag(a <= b)
    def ge(self, a, b): return flag(a >= b)

    # 논리
    def or_(self, a, b): return flag(a or b)
    def and_(self, a, b): return flag(a and b)
    def not_(self, x): return flag(not x)


def evaluate(code, engine):
    """Evaluate expression text against ``engine``.

    Errors raised while folding the tree reach the caller unchanged rather
    than wrapped in lark's VisitError.
    """
    tree = parse_expression(code)
    try:
        return ExpressionEvaluator(engine).transform(tree)
    except VisitError as e:
        raise e.orig_exc from None
