"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONFIG_ERROR = 2
    EXECUTION_ERROR = 3
    INTERRUPTED = 130


class Commands(Enum):
    """Subcommands supported by the program.

    Args:
        Enum (string): Subcommands supported by the program.
    """

    SHIP = "ship"
    JETTISON = "jettison"
    IMPORT = "import"


class BinstallChoice(Enum):
    """Strategy selecting between `cargo install` and `cargo binstall`.

    Args:
        Enum (string): Accepted textual values of the choice.
    """

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"


class RequirementStyle(Enum):
    """Version requirement written for each imported package.

    Args:
        Enum (string): Accepted textual values of the style.
    """

    STAR = "star"
    EXACT = "exact"
    COMPATIBLE = "compatible"
    PATCH = "patch"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SELF_PACKAGE = "cargo-liner"
    CONFIG_FILE_NAME = "liner.toml"
    CRATES_FILE_NAME = ".crates.toml"
    ENV_CARGO = "CARGO"
    ENV_CARGO_HOME = "CARGO_HOME"
    ENV_PREFIX = "CARGO_LINER"
    ENV_LOG_LEVEL = "CARGO_LINER_LOG_LEVEL"
    DEFAULT_CARGO = "cargo"
    BINSTALL_PACKAGE = "cargo-binstall"

    SPARSE_INDEX_URL = "https://index.crates.io/"
    SPARSE_PREFIX = "sparse+"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "cargo-liner-py (https://github.com/PaulDance/cargo-liner)"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    SUPPORTED_CONFIG_EXTENSIONS = (".toml", ".yaml", ".yml", ".json")
    SUPPORTED_FORMATS = ["json", "csv"]

    # Report icons.
    ICON_NONE = "ø"
    ICON_UNKNOWN = "?"
    ICON_TODO = "🛈"
    ICON_NEW = "+"
    ICON_ERR = "✘"
    ICON_OK = "✔"
    ICON_SKIPPED = "-"
    ICON_SIMULATED = "~"
