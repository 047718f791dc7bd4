import math
import re

from basic_errors import BasicRuntimeError

DEFAULT_CONSTANTS = {
    'PI': math.pi,
    'LEVEL': 1,
}


def subscript(index):
    # A[1] and A[1.0] address the same cell
    if isinstance(index, float) and index.is_integer():
        return int(index)
    return index


def format_value(value):
    if isinstance(value, bool):
        return '-1' if value else '0'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class BasicArray(dict):
    """Sparse array created by ARRAY; any subscript is a valid key."""

    def __str__(self):
        return ', '.join(format_value(v) for v in self.values())


CONSTANT_NAME = re.compile(r'[A-Z][A-Z_][A-Z0-9_]*$')


class Variables:
    """Scalars and arrays of one run, plus the read-only constant table.

    Constant names need at least two letters (``PI``, ``LEVEL``); a
    one-letter name always reads as a variable.
    """

    def __init__(self, constants=None):
        self.values = {}
        self.constants = dict(DEFAULT_CONSTANTS if constants is None else constants)
        bad = sorted(name for name in self.constants if not CONSTANT_NAME.match(name))
        if bad:
            raise ValueError(f"Constant names need at least two upper-case letters: {', '.join(bad)}")

    def get(self, name):
        return self.values.get(name, 0)

    def set(self, name, value):
        self.values[name] = value

    def declare_array(self, name):
        self.values[name] = BasicArray()

    def _array(self, name):
        array = self.values.get(name)
        if not isinstance(array, BasicArray):
            raise BasicRuntimeError(f"{name} is not an array, did you forget to declare it with ARRAY?")
        return array

    def set_indexed(self, name, index, value):
        self._array(name)[subscript(index)] = value

    def get_indexed(self, name, index):
        return self._array(name).get(subscript(index), 0)

    def constant(self, name):
        if name in self.constants:
            return self.constants[name]
        raise BasicRuntimeError(f"Constant {name} is undefined")

    def clear(self):
        self.values.clear()
