"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    PLANNING_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "SOLCPLAN_LOG_LEVEL"
    ANALYSIS = "[PLAN]"

    # Solidity config defaults
    CONFIG_SECTION = "solidity"
    DEFAULT_OPTIMIZER_RUNS = 200
    DEFAULT_SOLC_SETTINGS = {
        "optimizer": {
            "enabled": False,
            "runs": DEFAULT_OPTIMIZER_RUNS,
        },
    }
    SUPPORTED_CONFIG_EXTENSIONS = (".yml", ".yaml", ".json")
