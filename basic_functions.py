import math
import random


def _int(x):
    return int(math.floor(x))


def _sgn(x):
    return (x > 0) - (x < 0)


def _val(s):
    s = str(s).strip()
    try:
        return int(s)
    except ValueError:
        return float(s)


def _str(x):
    if isinstance(x, float) and x.is_integer():
        return str(int(x))
    return str(x)


def _mid(s, start, length=None):
    # 1-based like every other BASIC
    start = int(start) - 1
    if length is None:
        return s[start:]
    return s[start:start + int(length)]


FUNCTIONS = {
    'ABS': abs,
    'SIN': math.sin,
    'COS': math.cos,
    'TAN': math.tan,
    'ATN': math.atan,
    'SQR': math.sqrt,
    'EXP': math.exp,
    'LOG': math.log,
    'INT': _int,
    'ROUND': round,
    'SGN': _sgn,
    'RND': lambda: random.random(),
    'RANDOM': lambda n: random.randrange(int(n)),
    'MIN': min,
    'MAX': max,
    'LEN': lambda s: len(str(s)),
    'STR': _str,
    'VAL': _val,
    'UPPER': lambda s: str(s).upper(),
    'LOWER': lambda s: str(s).lower(),
    'LEFT': lambda s, n: str(s)[:int(n)],
    'RIGHT': lambda s, n: str(s)[-int(n):] if int(n) > 0 else '',
    'MID': _mid,
    'CHR': lambda n: chr(int(n)),
    'ASC': lambda s: ord(str(s)[0]),
}
