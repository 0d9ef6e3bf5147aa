"""Argument parsing functionality for SolcPlan."""

import argparse


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="solcplan",
        description=(
            "SolcPlan - plan Solidity compilation jobs from an import graph"
        ),
        add_help=True,
    )

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to the solc configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str,
                        required=True)
    parser.add_argument("-g", "--graph",
                        dest="GRAPH",
                        help="Path to the dependency graph description (YAML, YML, or JSON)",
                        action="store",
                        type=str,
                        required=True)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to write the plan as JSON",
                        action="store",
                        type=str)
    parser.add_argument("-j", "--jobs",
                        dest="MAX_WORKERS",
                        help="Number of connected components planned in parallel (default: 1)",
                        action="store",
                        type=int,
                        default=1)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: $SOLCPLAN_LOG_LEVEL, else INFO)",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not print the plan to the console.",
                        action="store_true")

    return parser.parse_args(argv)
