# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for elm-bench.

Usage:
    elm-bench -v ./listRemoveOld -v ./listRemoveNew remove 99 "List.range 0 1000"
    elm-bench -g remove-old -g master Remove.remove 42 "List.range 0 1000"

`-v` points at a project directory, `-g` at a git revision of the current
repository. They can be mixed, and their order is kept: the first one is
the baseline. Every positional after the function name is an Elm
expression, passed to the function in order.
"""

import argparse
import sys

from elmbench.candidates.models import CandidateKind, CandidateRequest
from elmbench.cli.commands import handle_benchmark


def _directory_request(value: str) -> CandidateRequest:
    return CandidateRequest(kind=CandidateKind.DIRECTORY, reference=value)


def _git_request(value: str) -> CandidateRequest:
    return CandidateRequest(kind=CandidateKind.GIT, reference=value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elm-bench",
        description="Benchmark several implementations of an Elm function against each other.",
    )
    parser.add_argument(
        "-v",
        "--version",
        dest="candidates",
        action="append",
        type=_directory_request,
        metavar="PATH",
        help="Elm application directory to benchmark (repeatable; first is the baseline).",
    )
    parser.add_argument(
        "-g",
        "--git",
        dest="candidates",
        action="append",
        type=_git_request,
        metavar="REF",
        help="Git revision of the current repository to benchmark (repeatable).",
    )
    parser.add_argument(
        "function",
        nargs="?",
        default=None,
        help="Function to benchmark, e.g. 'remove' (in Main) or 'Remove.remove'.",
    )
    parser.add_argument(
        "arguments",
        nargs="*",
        default=[],
        metavar="ARG",
        help="Elm expressions passed to the function, in order.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Prepare the workspace but don't compile or run anything.",
    )
    parser.add_argument(
        "--eject",
        type=str,
        default=None,
        metavar="DIR",
        help="Write the generated benchmark project to DIR and keep it; nothing is run.",
    )
    parser.add_argument(
        "--json",
        type=str,
        default=None,
        metavar="PATH",
        help="Also write the results as JSON to PATH.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        dest="no_color",
        help="Don't highlight the fastest candidate.",
    )
    return parser


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    Options and positionals may be interleaved, as in
    `elm-bench remove -v ./old 99 -v ./new "List.range 0 1000"`.
    """
    parser = build_parser()
    args = parser.parse_intermixed_args()
    sys.exit(handle_benchmark(args))


if __name__ == "__main__":
    main()
