from bisect import bisect_right

from basic_errors import ParseError
from basic_parser import parse_line


class Program:
    """Statements of one run, ordered by line number. Read-only once built."""

    def __init__(self, statements):
        self.statements = sorted(statements, key=lambda s: s.lineno)
        self.linenos = [s.lineno for s in self.statements]
        for prev, lineno in zip(self.linenos, self.linenos[1:]):
            if prev == lineno:
                raise ParseError(f"Line with number {lineno} repeated", lineno)
        self.index = {lineno: i for i, lineno in enumerate(self.linenos)}

    @classmethod
    def load(cls, source, parse_line=parse_line):
        # blank lines are skipped; the first bad line aborts the whole load
        lines = source.replace("\r\n", "\n").split("\n")
        statements = [parse_line(raw) for raw in lines if raw.strip()]
        return cls(statements)

    def first(self):
        return self.statements[0] if self.statements else None

    def next(self, lineno):
        i = bisect_right(self.linenos, lineno)
        if i < len(self.statements):
            return self.statements[i]
        return None

    def find(self, lineno):
        i = self.index.get(lineno)
        return None if i is None else self.statements[i]

    def __len__(self):
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)
