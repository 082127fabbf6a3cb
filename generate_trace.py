# generate_trace.py

import argparse
import logging
import sys

from solver import solve_cryptarithm, configure_logging, PuzzleError, MAX_WORKERS


def parse_preset(text):
    """Parse a LETTER=DIGIT preset."""
    letter, sep, digit = text.partition("=")
    if not sep or not digit.strip().isdigit():
        raise argparse.ArgumentTypeError(f"expected LETTER=DIGIT, got {text!r}")
    return letter.strip(), int(digit)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Solve a cryptarithm: the last word is the sum of the others.",
    )
    parser.add_argument("tokens", nargs="+", help="addend words followed by the result word")
    parser.add_argument("--trace", metavar="PATH", help="write the solver trace to PATH")
    parser.add_argument("--no-leading-zero", action="store_true",
                        help="forbid 0 as the first digit of a multi-letter word")
    parser.add_argument("--case-sensitive", action="store_true",
                        help="treat upper- and lowercase letters as distinct")
    parser.add_argument("--preset", action="append", type=parse_preset, default=[],
                        metavar="L=D", help="fix a letter to a digit (repeatable)")
    parser.add_argument("--workers", type=int, default=1, help=f"number of search threads (1-{MAX_WORKERS})")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if len(args.tokens) < 2:
        parser.error("need at least one addend and a result")
    if not 1 <= args.workers <= MAX_WORKERS:
        parser.error(f"--workers must be between 1 and {MAX_WORKERS}")
    *words, result = args.tokens

    try:
        solution = solve_cryptarithm(
            words,
            result,
            presets=dict(args.preset) or None,
            allow_leading_zero=not args.no_leading_zero,
            case_sensitive=args.case_sensitive,
            workers=args.workers,
            trace_path=args.trace,
        )
    except PuzzleError as e:
        print(f"Invalid puzzle: {e}", file=sys.stderr)
        return 2

    print(f"{' + '.join(words)} = {result}")
    if solution is None:
        print("No solution found.")
        return 1

    print("Solution found: " + "".join(solution))
    for ch, digit in solution.items():
        print(f"{ch} = {digit}")
    if args.trace:
        print(f"Trace saved to {args.trace}")
    return 0


def run():
    """Console-script entry point."""
    configure_logging(logging.WARNING)
    sys.exit(main())


if __name__ == "__main__":
    run()
