class BasicError(Exception):
    kind = 'Error'

    def __init__(self, message, lineno=None):
        super().__init__(message)
        self.message = message
        self.lineno = lineno

    def __str__(self):
        if self.lineno is None:
            return f"{self.kind}: {self.message}"
        return f"{self.kind} on line {self.lineno}: {self.message}"


class ParseError(BasicError):
    kind = 'ParseError'


class BasicRuntimeError(BasicError, RuntimeError):
    kind = 'RuntimeError'
