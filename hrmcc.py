#!/usr/bin/env python3
"""
hrmcc — Human Resource Machine solution checker

Usage:
    python hrmcc.py <problem.json> <solution.hrm> [--max-steps N] [--listing]
                                                  [--json] [-v | -q]

Compiles the solution, validates it against the problem and runs every IO
case. Prints the score on success.

Exit codes:
    0  solution is correct
    1  compile, validation, run or problem error
    2  internal error

Examples:
    python hrmcc.py examples/mail_room.json examples/mail_room.hrm
    python hrmcc.py examples/countdown.json examples/countdown.hrm --json
    python hrmcc.py examples/countdown.json examples/countdown.hrm --listing
    python hrmcc.py problem.json loop.hrm --max-steps 0 -v     # no step cap, trace
"""

import argparse
import json
import logging
import sys
import os

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from hrm_compiler import __version__, compile_code
from hrm_compiler.errors import CompileError, ValidationError, RunError, ProblemError
from hrm_compiler.problem_definition import load_problem

# Per-IO-case cap; an HRM loop with no exit would otherwise never return.
DEFAULT_MAX_STEPS = 10_000_000

logger = logging.getLogger("hrmcc")


def setup_logging(verbose: bool, quiet: bool):
    """-v -> DEBUG, -q -> ERROR, default WARNING. Logs go to stderr."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s',
                        stream=sys.stderr, force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hrmcc",
        description="Compile, validate and score a Human Resource Machine solution",
    )
    parser.add_argument("problem", help="Problem definition (JSON)")
    parser.add_argument("solution", help="Solution source (.hrm)")
    parser.add_argument("--max-steps", type=int, default=DEFAULT_MAX_STEPS,
                        help=f"Step cap per IO case, 0 disables (default: {DEFAULT_MAX_STEPS})")
    parser.add_argument("--listing", action="store_true",
                        help="Print the compiled program listing and exit")
    parser.add_argument("--json", action="store_true",
                        help="Print the score as JSON")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true",
                           help="Trace every executed instruction to stderr")
    verbosity.add_argument("--quiet", "-q", action="store_true",
                           help="Only log errors")
    parser.add_argument("--version", action="version",
                        version=f"hrmcc {__version__}")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet)

    if args.max_steps < 0:
        print(f"Error: --max-steps must not be negative: {args.max_steps}", file=sys.stderr)
        return 1
    max_steps = args.max_steps or None

    # Read solution
    try:
        with open(args.solution, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.solution}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error reading {args.solution}: {e}", file=sys.stderr)
        return 1

    try:
        problem = load_problem(args.problem)
        program = compile_code(source)
        program.validate(problem)

        if args.listing:
            print(program.listing())
            return 0

        logger.info("Running %s against %s (%d IO cases)",
                    args.solution, args.problem, len(problem.ios))
        score = program.run(problem, max_steps=max_steps)

    except FileNotFoundError:
        print(f"Error: File not found: {args.problem}", file=sys.stderr)
        return 1
    except ProblemError as e:
        print(f"Problem error: {e}", file=sys.stderr)
        return 1
    except CompileError as e:
        print(f"Compile error: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Validation error: {e}", file=sys.stderr)
        return 1
    except RunError as e:
        print(f"Run error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2

    if args.json:
        print(json.dumps({
            "size": score.size,
            "speed_min": score.speed_min,
            "speed_max": score.speed_max,
            "speed_avg": score.speed_avg,
        }))
    else:
        print(f"score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
