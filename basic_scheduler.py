"""Timers used to resume a paused program.

Every scheduler exposes ``call_later(seconds, callback)`` and returns a
handle with ``cancel()``.
"""
import asyncio
import threading


class ThreadingScheduler:
    def call_later(self, delay, callback):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    def __init__(self, loop=None):
        self.loop = loop

    def call_later(self, delay, callback):
        loop = self.loop if self.loop is not None else asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class ManualTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Holds timers until ``run_pending`` fires them, for tests and single-stepping."""

    def __init__(self):
        self.pending = []
        self.delays = []

    def call_later(self, delay, callback):
        timer = ManualTimer(delay, callback)
        self.pending.append(timer)
        self.delays.append(delay)
        return timer

    def run_next(self):
        while self.pending:
            timer = self.pending.pop(0)
            if not timer.cancelled:
                timer.callback()
                return True
        return False

    def run_pending(self):
        fired = 0
        while self.run_next():
            fired += 1
        return fired
