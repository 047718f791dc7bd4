import sys
from collections import deque


class StreamConsole:
    """Console on stdout/stdin. INPUT blocks the engine until a line arrives."""

    def __init__(self, output=None, input_stream=None):
        self.output = output if output is not None else sys.stdout
        self.input_stream = input_stream if input_stream is not None else sys.stdin

    def write(self, text):
        self.output.write(text)
        self.output.flush()

    def clear(self):
        if self.output.isatty():
            self.output.write("\x1b[2J\x1b[H")
            self.output.flush()

    def input(self, callback):
        line = self.input_stream.readline()
        callback(line.rstrip("\r\n"))


class BufferConsole:
    """In-memory console.

    Queued inputs answer INPUT immediately; otherwise the callback is held
    until ``feed`` delivers a reply.
    """

    def __init__(self, inputs=()):
        self.output = []
        self.inputs = deque(inputs)
        self.pending = None
        self.clears = 0

    def write(self, text):
        self.output.append(text)

    def clear(self):
        self.output.clear()
        self.clears += 1

    def input(self, callback):
        if self.inputs:
            callback(self.inputs.popleft())
        else:
            self.pending = callback

    def feed(self, text):
        callback, self.pending = self.pending, None
        if callback is None:
            self.inputs.append(text)
        else:
            callback(text)

    @property
    def text(self):
        return ''.join(self.output)


class MemoryDisplay:
    """Pixel buffer with a key queue; nothing is rendered."""

    def __init__(self, width=50, height=50):
        self.width = width
        self.height = height
        self.pixels = {}
        self.keys = deque()

    def plot(self, x, y, color):
        self.pixels[(int(x), int(y))] = color

    def color(self, x, y):
        return self.pixels.get((int(x), int(y)), 0)

    def clear(self):
        self.pixels.clear()

    def press(self, char):
        self.keys.append(char)

    def get_char(self):
        return self.keys.popleft() if self.keys else ''
