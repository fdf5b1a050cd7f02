import argparse
import logging
import sys

from .commands import GitEngine
from .config import get_settings
from .errors import GitSimError
from .scenario import load_scenario, save_scenario

def read_lines(prompt: str):
    interactive = sys.stdin.isatty()
    while True:
        if interactive:
            print(prompt, end="", flush=True)
        line = sys.stdin.readline()
        if not line:
            return
        line = line.strip()
        if line in ("exit", "quit"):
            return
        if line:
            yield line

def main():
    parser = argparse.ArgumentParser(description="gitsim: an in-memory git simulator")
    parser.add_argument("-s", "--state", metavar="FILE", help="Load a repository state (JSON) before running")
    parser.add_argument("-o", "--save", metavar="FILE", help="Write the final repository state (JSON) to this file")
    parser.add_argument("-c", "--command", action="append", dest="commands", metavar="LINE",
                        help="Command line to execute; may be repeated. Reads stdin when omitted")
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        initial = load_scenario(args.state) if args.state else None
    except (GitSimError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    engine = GitEngine(initial, settings=settings)

    any_failed = False
    for line in args.commands or read_lines("gitsim> "):
        result = engine.execute(line)
        if not result.success:
            any_failed = True
            print(f"error: {result.message}")
        elif result.message:
            print(result.message)

    if args.save:
        save_scenario(engine.get_state(), args.save)
    return 1 if any_failed else 0


if __name__ == "__main__":
    sys.exit(main())
