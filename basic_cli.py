import argparse
import asyncio
import logging
import sys
from collections import Counter
from pathlib import Path

from basic_errors import ParseError
from basic_interpreter import BasicInterpreter
from basic_io import MemoryDisplay, StreamConsole
from basic_program import Program
from basic_scheduler import AsyncioScheduler


def _display_size(text):
    try:
        width, height = (int(n) for n in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}") from None
    return width, height


def build_parser():
    parser = argparse.ArgumentParser(prog='linebasic', description='Run a line-numbered BASIC program.')
    parser.add_argument('program', help='path to the program source')
    parser.add_argument('--debug', type=int, default=0, metavar='N',
                        help='trace level: 1 steps and jumps, 2 adds statement dumps')
    parser.add_argument('--check', action='store_true', help='parse only and summarise the statements')
    parser.add_argument('--display', type=_display_size, metavar='WxH',
                        help='attach an in-memory display so PLOT and COLOR work')
    return parser


def check(source):
    try:
        program = Program.load(source)
    except ParseError as e:
        print("PARSE FAIL:", e, file=sys.stderr)
        return 1
    print("PARSE OK")
    print("Lines parsed:", len(program))
    cnt = Counter(stmt.kind.value for stmt in program)
    print("Statement counts:")
    for k, v in cnt.most_common():
        print(f"  {k:8s} {v}")
    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    source = Path(args.program).read_text()
    if args.check:
        return check(source)

    display = MemoryDisplay(*args.display) if args.display else None
    interpreter = BasicInterpreter(
        console=StreamConsole(),
        debug_level=args.debug,
        display=display,
        scheduler=AsyncioScheduler(),
    )
    result = asyncio.run(interpreter.run_async(source))
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
