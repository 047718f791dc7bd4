import asyncio
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from basic_errors import BasicError, BasicRuntimeError
from basic_evaluator import evaluate
from basic_functions import FUNCTIONS
from basic_io import StreamConsole
from basic_program import Program
from basic_scheduler import ThreadingScheduler
from basic_variables import Variables, format_value

logger = logging.getLogger(__name__)


class State(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    PAUSED = 'paused'
    WAITING = 'waiting'
    ENDED = 'ended'


@dataclass(frozen=True)
class RunResult:
    error: Optional[BaseException] = None
    lineno: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Loop:
    __slots__ = ('variable', 'value', 'increment', 'max', 'lineno')

    def __init__(self, variable, value, increment, max_value, lineno):
        self.variable = variable
        self.value = value
        self.increment = increment
        self.max = max_value
        self.lineno = lineno

    def finished(self):
        if self.increment > 0:
            return self.value >= self.max
        return self.value <= self.max


class BasicInterpreter:
    """Runs a line-numbered program one statement at a time.

    Statements call back into the engine to read and write variables, jump,
    pause or halt. A run ends with a RunResult on the future returned by
    ``run``; PAUSE hands control back to the scheduler in between.
    """

    def __init__(self, console=None, debug_level=0, display=None, constants=None,
                 functions=None, scheduler=None):
        self.console = console if console is not None else StreamConsole()
        self.debug_level = debug_level
        self.display = display
        self.variables = Variables(constants)
        source = FUNCTIONS if functions is None else functions
        self.functions = {name.upper(): f for name, f in source.items()}
        self.scheduler = scheduler if scheduler is not None else ThreadingScheduler()

        self.program = Program([])
        self.lineno = -1
        self.loops = {}
        self.stack = []
        self.jumped = False
        self.delay = None
        self.halted = False
        self.waiting = False
        self.state = State.IDLE
        self._future = None
        self._timer = None
        self._in_loop = False
        self._lock = threading.RLock()

    def debug(self, message, level=1):
        if self.debug_level >= level:
            logger.debug("Debug %s: %s", self.lineno, message)

    # ----- run protocol -----

    def run(self, source):
        if self.state in (State.RUNNING, State.PAUSED, State.WAITING):
            raise BasicRuntimeError("A program is already running")

        self._reset()
        self._future = Future()
        self.state = State.RUNNING

        try:
            self.program = Program.load(source)
        except BasicError as e:
            self.end(e)
            return self._future

        first = self.program.first()
        if first is None:
            self.end()
            return self._future

        self.lineno = first.lineno
        self.execute()
        return self._future

    async def run_async(self, source):
        return await asyncio.wrap_future(self.run(source))

    def _reset(self):
        self.variables.clear()
        self.program = Program([])
        self.lineno = -1
        self.loops = {}
        self.stack = []
        self.jumped = False
        self.delay = None
        self.halted = False
        self.waiting = False
        self._timer = None

    def execute(self):
        with self._lock:
            self.state = State.RUNNING
            self._in_loop = True
            try:
                self._loop()
            finally:
                self._in_loop = False

    def _loop(self):
        while True:
            self.step()

            if self.state is State.ENDED:
                return

            if not self.jumped:
                following = self.program.next(self.lineno)
                if following is None:
                    return self.end()
                self.lineno = following.lineno
            else:
                self.jumped = False

            if self.halted:
                return self.end()

            # PAUSE 0 does not suspend
            delay, self.delay = self.delay, None
            if delay:
                self.state = State.PAUSED
                self._timer = self.scheduler.call_later(delay / 1000, self._wake)
                return

            if self.waiting:
                self.state = State.WAITING
                return

    def _wake(self):
        with self._lock:
            self._timer = None
            if self.state is not State.PAUSED:
                return
            if self.halted:
                self.end()
            else:
                self.execute()

    def step(self):
        node = self.program.find(self.lineno)

        if node is None:
            return self.end(BasicRuntimeError(f"Cannot find line {self.lineno}", self.lineno))

        self.debug('step', 1)
        if self.debug_level >= 2:
            self.debug(node.to_dict(), 2)

        try:
            node.run(self)
        except Exception as e:
            self.end(e)

    def end(self, error=None):
        with self._lock:
            if self.state is State.ENDED:
                return
            self.state = State.ENDED
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

            if error is None:
                self.debug('program ended')
                result = RunResult()
            else:
                lineno = self.lineno if self.lineno >= 0 else None
                if isinstance(error, BasicError) and error.lineno is None:
                    error.lineno = lineno
                self.debug(f'program ended with error: {error}')
                result = RunResult(error, lineno)
            if self._future is not None:
                self._future.set_result(result)

    def stop(self):
        """Ask a running program to halt at the next statement boundary.

        Safe to call from any thread. A paused or waiting run ends at once;
        if another thread is stepping the program, the halt flag is picked
        up when that step finishes.
        """
        if self.state is State.ENDED:
            return
        self.halted = True
        if not self._lock.acquire(blocking=False):
            return
        try:
            if self.state in (State.PAUSED, State.WAITING):
                self.end()
        finally:
            self._lock.release()

    def resume(self):
        with self._lock:
            if self.state is State.ENDED:
                return
            self.waiting = False
            if self.state is State.WAITING and not self._in_loop:
                if self.halted:
                    self.end()
                else:
                    self.execute()

    # ----- expression bridge -----

    def evaluate(self, code):
        try:
            return evaluate(code, self)
        except Exception:
            logger.error("Error evaluating code: %s", code)
            raise

    # ----- variables -----

    def get(self, name):
        return self.variables.get(name)

    def set(self, name, value):
        self.variables.set(name, value)

    def array(self, name):
        self.variables.declare_array(name)

    def set_array(self, name, index, value):
        self.variables.set_indexed(name, index, value)

    def get_array(self, name, index):
        return self.variables.get_indexed(name, index)

    def get_const(self, name):
        return self.variables.constant(name)

    def fun(self, name):
        key = name.upper()
        # these read the display, so they are bound to the engine
        if key == 'COLOR':
            return self.color
        if key == 'GETCHAR':
            return self.get_char
        try:
            return self.functions[key]
        except KeyError:
            raise BasicRuntimeError(f"Function {name} does not exist") from None

    # ----- control flow -----

    def pause(self, millis):
        self.debug(f'pause {millis}')
        self.delay = max(0, millis)

    def halt(self):
        self.halted = True

    def goto(self, lineno):
        self.debug(f'goto {lineno}')
        self.lineno = lineno
        self.jumped = True

    def loop_start(self, variable, value, increment, max_value):
        self.debug(f'marking loop {variable}')

        if increment == 0:
            raise BasicRuntimeError(f"Loop {variable} has a STEP of 0 and would never end")

        self.set(variable, value)
        following = self.program.next(self.lineno)
        if following is None:
            return self.end()

        self.loops[variable] = Loop(variable, value, increment, max_value, following.lineno)

    def loop_jump(self, name):
        self.debug(f'jumping to loop {name}')

        loop = self.loops.get(name)
        if loop is None:
            raise BasicRuntimeError(f"NEXT {name} without a matching FOR")
        loop.value += loop.increment
        self.set(loop.variable, loop.value)

        if loop.finished():
            return

        self.goto(loop.lineno)

    def call(self, lineno):
        following = self.program.next(self.lineno)
        if following is not None:
            self.stack.append(following.lineno)
        else:
            self.stack.append(self.lineno + 1)
        self.goto(lineno)

    def return_from_call(self):
        if not self.stack:
            raise BasicRuntimeError("There are no GOSUB calls to return from")
        self.goto(self.stack.pop())

    # ----- I/O -----

    def assert_display(self):
        if self.display is None:
            raise BasicRuntimeError("No display found")

    def plot(self, x, y, color):
        self.assert_display()
        self.display.plot(x, y, color)

    def color(self, x, y):
        self.assert_display()
        return self.display.color(x, y)

    def clear_all(self):
        self.clear_console()
        self.clear_graphics()

    def print(self, value):
        self.console.write(format_value(value))

    def clear_console(self):
        self.console.clear()

    def clear_graphics(self):
        self.assert_display()
        self.display.clear()

    def get_char(self):
        self.assert_display()
        return self.display.get_char() or ''

    def input(self, callback):
        self.waiting = True

        def receive(text):
            if self.state is State.ENDED:
                return
            try:
                callback(text)
            except Exception as e:
                return self.end(e)
            self.resume()

        self.console.input(receive)
