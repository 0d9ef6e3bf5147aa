"""SolcPlan - Solidity compilation-job planner

    Returns:
        int: Exit code
"""
import json
import logging
import sys

from constants import ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from solidity.config import ConfigError, load_dependency_graph, load_solc_config
from solidity.planner import describe_errors, plan_compilation_jobs


def export_json(plan, path):
    """Exports the compilation plan to a JSON file.

    Args:
        plan (CompilationPlan): Plan to export.
        path (str): File path to export the JSON.
    """
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(plan.to_dict(), file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        solc_config = load_solc_config(args.CONFIG)
        graph = load_dependency_graph(args.GRAPH)
    except ConfigError as e:
        logging.error("%s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    logging.info("Loaded %d files and %d compiler builds.", len(graph), len(solc_config.compilers))

    plan = plan_compilation_jobs(graph, solc_config, max_workers=args.MAX_WORKERS)

    if args.OUTPUT:
        export_json(plan, args.OUTPUT)
    if not args.QUIET:
        print(json.dumps(plan.to_dict(), indent=2))

    if plan.has_errors:
        logging.error("Some files could not be planned:\n\n%s", describe_errors(plan.errors))
        sys.exit(ExitCodes.PLANNING_ERROR.value)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
