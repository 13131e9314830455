"""Command-line front end: nibvm PROGRAM [-m N] [-s] [-e POLICY] [-v]"""

import argparse
import logging
import pathlib
import sys
from typing import List, Optional

from .config import DEFAULT_STEP_SIZE, EofPolicy, RunConfig, parse_step_size
from .engine import run_file
from .errors import InvalidArguments, NibException

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


class ArgumentParser(argparse.ArgumentParser):
    """Parser that raises InvalidArguments instead of exiting with status 2."""

    def error(self, message: str):
        raise InvalidArguments(message)


def build_parser() -> ArgumentParser:
    # Option names must match exactly; -h is an unknown option like any other.
    parser = ArgumentParser(
        prog="nibvm",
        description="Interpreter for nibble-encoded tape programs",
        allow_abbrev=False,
        add_help=False,
    )
    parser.add_argument(
        "program",
        type=pathlib.Path,
        help="Packed program file, two instructions per byte"
    )
    parser.add_argument(
        "-m", "--memory-size",
        default=str(DEFAULT_STEP_SIZE),
        metavar="N",
        help="Memory added to the tape and loop stack each time they fill up (default: %(default)s)"
    )
    parser.add_argument(
        "-s", "--safe",
        action="store_true",
        help="Use the strict policy: fail on out-of-bounds access and unmatched loop ends"
    )
    parser.add_argument(
        "-e", "--eof",
        default=EofPolicy.ALL_ONES.value,
        choices=[policy.value for policy in EofPolicy],
        help="Value stored by READ at end of input (default: %(default)s)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log interpreter activity to stderr"
    )
    return parser


def normalize_arguments(argv: List[str]) -> List[str]:
    """Option names are case-insensitive; lowercase them."""
    return [arg.lower() if arg.startswith("-") else arg for arg in argv]


def parse_config(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        step_size=parse_step_size(args.memory_size),
        strict=args.safe,
        eof=EofPolicy(args.eof),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Run the interpreter; returns the process exit status."""
    if argv is None:
        argv = sys.argv[1:]

    try:
        args = build_parser().parse_args(normalize_arguments(argv))
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format=LOG_FORMAT,
            stream=sys.stderr,
        )
        config = parse_config(args)
        run_file(args.program, config)
    except NibException as err:
        logger.debug("run aborted", exc_info=True)
        print(f"nibvm: {err}", file=sys.stderr)
        return 1
    except MemoryError:
        print("nibvm: Out of memory (try a smaller --memory-size)", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
