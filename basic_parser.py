import ast
import re
from functools import lru_cache

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from basic_errors import ParseError
from basic_statements import Statement, StatementKind


# ----- Grammar -----
# One source line minus its leading line number is parsed from `statement`.
# `expression` is also a start rule so the evaluator can reuse the grammar.
GRAMMAR = r"""
statement: simple_stmt
         | if_stmt

?simple_stmt: print_stmt
            | let_stmt
            | rem_stmt
            | goto_stmt
            | gosub_stmt
            | return_stmt
            | end_stmt
            | for_stmt
            | next_stmt
            | pause_stmt
            | input_stmt
            | array_stmt
            | plot_stmt
            | cls_stmt
            | clt_stmt
            | clc_stmt

// ----- PRINT -----
print_stmt: "PRINT" print_items?
print_items: expression (print_sep expression)* print_sep?
!print_sep: ";" | ","

// ----- assignment -----
let_stmt: "LET"? VAR "=" expression
        | "LET"? VAR "[" expression "]" "=" expression   -> let_index_stmt

rem_stmt: REMARK

// ----- jumps -----
goto_stmt: "GOTO" NUMBER
gosub_stmt: "GOSUB" NUMBER
return_stmt: "RETURN"
end_stmt: "END"

// ----- FOR/NEXT -----
for_stmt: "FOR" VAR "=" expression "TO" expression ("STEP" expression)?
next_stmt: "NEXT" VAR

pause_stmt: "PAUSE" expression
input_stmt: "INPUT" (STRING ";")? VAR
array_stmt: "ARRAY" VAR

// ----- graphics / screen -----
plot_stmt: "PLOT" expression "," expression "," expression
cls_stmt: "CLS"
clt_stmt: "CLT"
clc_stmt: "CLC"

// ----- IF -----
// branches cannot hold another IF, so ELSE always belongs to the only IF
if_stmt: "IF" expression "THEN" branch ("ELSE" branch)?
?branch: NUMBER        -> jump_branch
       | simple_stmt

// ----- EXPR -----
expression: or_expr

?or_expr: or_expr "OR" and_expr     -> or_
        | and_expr
?and_expr: and_expr "AND" not_expr  -> and_
         | not_expr
?not_expr: "NOT" not_expr           -> not_
         | comparison
?comparison: sum "=" sum    -> eq
           | sum "<>" sum   -> ne
           | sum "<" sum    -> lt
           | sum ">" sum    -> gt
           | sum "<=" sum   -> le
           | sum ">=" sum   -> ge
           | sum
?sum: sum "+" product       -> add
    | sum "-" product       -> sub
    | product
?product: product "*" unary     -> mul
        | product "/" unary     -> div
        | product "MOD" unary   -> mod
        | unary
?unary: "-" unary       -> neg
      | "+" unary       -> pos
      | power
?power: atom "^" unary  -> pow
      | atom
?atom: NUMBER                   -> number
     | STRING                   -> string
     | VAR "[" or_expr "]"      -> index
     | VAR                      -> var
     | NAME "(" args? ")"       -> call
     | NAME                     -> const
     | "(" or_expr ")"
args: or_expr ("," or_expr)*

NUMBER: /(\d+(\.\d*)?|\.\d+)([Ee][+\-]?\d+)?/
// variables: one letter, optional digits, optional $ (A, B2, N$)
VAR: /[A-Z][0-9]*\$?(?![A-Z_])/
// constants and functions: two or more letters (PI, LEVEL, ABS)
NAME: /[A-Z][A-Z_][A-Z0-9_]*/
STRING: ESCAPED_STRING
REMARK.2: /REM([ \t][^\n]*)?$/

%import common.ESCAPED_STRING
%import common.WS_INLINE
%ignore WS_INLINE
"""

PARSER = Lark(GRAMMAR, parser="lalr", start=["statement", "expression"], propagate_positions=True)

LINE_RE = re.compile(r'\s*(\d+)\s*(.*)$')


def _lex_window(text, pos, width=120):
    a = max(0, pos - width // 2)
    b = min(len(text), pos + width // 2)
    caret = ' ' * (pos - a) + '^'
    return text[a:b] + "\n" + caret


def _describe(e, text):
    pos = getattr(e, 'pos_in_stream', None)
    if pos is None or pos < 0:
        pos = len(text)
    return f"Cannot parse {text!r} at column {pos + 1}\n{_lex_window(text, pos)}"


def _line_number(tok):
    s = str(tok)
    if not s.isdigit():
        raise ParseError(f"{s} is not a valid line number")
    return int(s)


def unquote(tok):
    """Strip the quotes off a STRING token and resolve its backslash escapes."""
    s = str(tok)
    try:
        return ast.literal_eval(s)
    except (SyntaxError, ValueError):
        raise ParseError(f"Bad escape sequence in string {s}") from None


class LineTransformer(Transformer):
    """
    Tree -> Statement for one line.
    Expressions come out as their source text, sliced by position.
    """

    def __init__(self, text, lineno):
        super().__init__()
        self.text = text
        self.lineno = lineno

    def _stmt(self, kind, *args):
        return Statement(kind, self.lineno, *args)

    @v_args(meta=True)
    def expression(self, meta, children):
        return self.text[meta.start_pos:meta.end_pos]

    def statement(self, children):
        return children[0]

    # --- PRINT ---
    def print_sep(self, children):
        return str(children[0])

    def print_items(self, children):
        # children alternate: expr, sep, expr, sep?
        items = []
        for child in children:
            if child in (';', ','):
                expr, _ = items[-1]
                items[-1] = (expr, child)
            else:
                items.append((child, None))
        return items

    def print_stmt(self, children):
        items = children[0] if children else []
        return self._stmt(StatementKind.PRINT, tuple(items))

    # --- assignment ---
    def let_stmt(self, children):
        name, expr = children
        return self._stmt(StatementKind.LET, str(name), None, expr)

    def let_index_stmt(self, children):
        name, index, expr = children
        return self._stmt(StatementKind.LET, str(name), index, expr)

    def rem_stmt(self, children):
        return self._stmt(StatementKind.REM, str(children[0])[3:].strip())

    # --- jumps ---
    def goto_stmt(self, children):
        return self._stmt(StatementKind.GOTO, _line_number(children[0]))

    def gosub_stmt(self, children):
        return self._stmt(StatementKind.GOSUB, _line_number(children[0]))

    def return_stmt(self, children):
        return self._stmt(StatementKind.RETURN)

    def end_stmt(self, children):
        return self._stmt(StatementKind.END)

    def jump_branch(self, children):
        return self._stmt(StatementKind.GOTO, _line_number(children[0]))

    def if_stmt(self, children):
        cond, then = children[0], children[1]
        otherwise = children[2] if len(children) > 2 else None
        return self._stmt(StatementKind.IF, cond, then, otherwise)

    # --- loops ---
    def for_stmt(self, children):
        name, start, end = children[:3]
        step = children[3] if len(children) > 3 else '1'
        return self._stmt(StatementKind.FOR, str(name), start, end, step)

    def next_stmt(self, children):
        return self._stmt(StatementKind.NEXT, str(children[0]))

    # --- misc ---
    def pause_stmt(self, children):
        return self._stmt(StatementKind.PAUSE, children[0])

    def input_stmt(self, children):
        if len(children) == 2:
            prompt, name = children
            return self._stmt(StatementKind.INPUT, unquote(prompt), str(name))
        return self._stmt(StatementKind.INPUT, None, str(children[0]))

    def array_stmt(self, children):
        return self._stmt(StatementKind.ARRAY, str(children[0]))

    def plot_stmt(self, children):
        x, y, color = children
        return self._stmt(StatementKind.PLOT, x, y, color)

    def cls_stmt(self, children):
        return self._stmt(StatementKind.CLS)

    def clt_stmt(self, children):
        return self._stmt(StatementKind.CLT)

    def clc_stmt(self, children):
        return self._stmt(StatementKind.CLC)


def parse_line(text):
    m = LINE_RE.match(text)
    if not m:
        raise ParseError(f"Line must start with a line number: {text.strip()!r}")
    lineno = int(m.group(1))
    body = m.group(2).rstrip()
    try:
        tree = PARSER.parse(body, start="statement")
    except UnexpectedInput as e:
        raise ParseError(_describe(e, body), lineno) from None
    try:
        return LineTransformer(body, lineno).transform(tree)
    except VisitError as e:
        error = e.orig_exc
        if isinstance(error, ParseError) and error.lineno is None:
            error.lineno = lineno
        raise error from None


@lru_cache(maxsize=512)
def parse_expression(text):
    try:
        return PARSER.parse(text, start="expression")
    except UnexpectedInput as e:
        raise ParseError(_describe(e, text)) from None
