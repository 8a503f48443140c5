import argparse
import logging
import sys

from treelox.lox import Lox, RunResult

logger = logging.getLogger(__name__)

EXIT_CODES = {
    RunResult.OK: 0,
    RunResult.COMPILE_ERROR: 65,
    RunResult.RUNTIME_ERROR: 70,
}
EXIT_NO_INPUT = 66


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="treelox", description="Run Lox scripts")
    parser.add_argument("script", nargs="?", help="script to run, starts a prompt when omitted")
    parser.add_argument("--strict-variables", action="store_true",
                        help="Reading a variable that was never assigned is a runtime error.")
    parser.add_argument("--ast", action="store_true",
                        help="Print the parsed form of each top-level expression instead of running.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log pipeline details to stderr.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    lox = Lox(strict_variables=args.strict_variables)

    if args.script is None:
        lox.run_prompt()
        return 0

    try:
        with open(args.script, "r") as file:
            source = file.read()
    except OSError as error:
        print(f"Can't read '{args.script}': {error.strerror}", file=sys.stderr)
        return EXIT_NO_INPUT

    logger.debug("Running %s", args.script)
    if args.ast:
        result = lox.dump_ast(source)
    else:
        result = lox.run(source)

    return EXIT_CODES[result]


if __name__ == "__main__":
    sys.exit(main())
