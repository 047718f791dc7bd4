import pytest

from basic_interpreter import BasicInterpreter
from basic_io import BufferConsole, MemoryDisplay
from basic_scheduler import ManualScheduler


@pytest.fixture
def console():
    return BufferConsole()


@pytest.fixture
def display():
    return MemoryDisplay()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def interpreter(console, scheduler):
    return BasicInterpreter(console=console, scheduler=scheduler)


@pytest.fixture
def run(interpreter):
    """Run a program that needs no timers and return its RunResult."""
    def _run(source):
        future = interpreter.run(source)
        assert future.done()
        return future.result()
    return _run
